"""补全网关集成层。

该包下的模块负责：
- 定义网关抽象接口 (base)。
- 维护网关端点与模型标识配置 (registry)。
- 提供具体实现 (如 models_client)。
"""

from typing import Optional

from relay_core.config.settings import settings
from relay_core.providers.base import CompletionGateway
from relay_core.providers.models_client import ModelsApiClient
from relay_core.providers.registry import get_gateway_config


def create_gateway(name: Optional[str] = None) -> CompletionGateway:
    """根据名称创建网关实例，默认使用 models-api。"""

    config = get_gateway_config(name or ModelsApiClient.name)
    return ModelsApiClient(settings, config)
