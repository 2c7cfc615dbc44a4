"""补全网关抽象接口。

编排层不直接依赖具体的 HTTP 实现，而是依赖此协议：

- 每种后端实现一个 CompletionGateway（如 ModelsApiClient）。
- 负责：把有序消息序列转成后端请求，并把响应解析为 CompletionResult。
- 网关本身无状态、不重试；重试策略（如有）由调用方决定。
"""

from typing import Protocol, Sequence
from relay_core.domain.models import ChatMessage, CompletionResult


class CompletionGateway(Protocol):
    """补全网关协议。

    实现者需要提供：
    - name: 网关名称，用于日志/统计。
    - complete(messages): 发送完整历史，返回 CompletionResult；
      失败时抛出 GatewayError 的子类。
    """

    name: str

    async def complete(self, messages: Sequence[ChatMessage]) -> CompletionResult:
        ...
