"""网关与模型配置。

上层只关心网关名，具体的基础 URL、端点与模型标识由这里集中配置，
配置项（settings）中的值优先于这里的默认值。"""

from dataclasses import dataclass
from typing import Mapping, Optional


FALLBACK_REPLY = "I can't respond to that."


@dataclass
class GatewayConfig:
    """某个补全网关的整体配置。"""

    name: str
    endpoint: str
    model_id: str
    base_url: Optional[str] = None


MODELS_API_CONFIG = GatewayConfig(
    name="models-api",
    endpoint="/models",
    model_id="gpt-3.5-turbo",
)


GATEWAY_REGISTRY: Mapping[str, GatewayConfig] = {
    "models-api": MODELS_API_CONFIG,
}


def get_gateway_config(name: str) -> GatewayConfig:
    """根据名称获取 GatewayConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in GATEWAY_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown gateway: {name!r}")
