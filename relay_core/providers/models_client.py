"""Models API 网关适配器。

本模块负责：

1. 接收有序的 ChatMessage 序列。
2. 将其转换为 `POST {base_url}/models` 的 JSON 请求体。
3. 调用 HTTP 接口并把网络/协议异常分类为 GatewayError。
4. 从响应中取出 content 字段；content 为空时返回固定兜底文本。

响应体结构：{"code": int, "message": str, "content": str|null, "images": [str]|null}，
这里只消费 content。
"""

import json
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from relay_core.domain.exceptions import GatewayProtocolError, GatewayTransportError, ValidationError
from relay_core.domain.models import ChatMessage, CompletionResult
from relay_core.providers.registry import FALLBACK_REPLY, MODELS_API_CONFIG, GatewayConfig


class ModelsApiResponse(BaseModel):
    code: int
    message: str
    content: Optional[str] = None
    images: Optional[List[str]] = None


class ModelsApiClient:
    """Models API 网关客户端实现。

    - name: 网关名称（供日志/调试使用）。
    - complete: 对外统一调用入口，返回 CompletionResult。
    """

    name = "models-api"

    def __init__(self, settings, config: GatewayConfig = MODELS_API_CONFIG):
        # Settings 里包含 base_url、model_id、超时等配置
        self._settings = settings
        self._config = config

    @property
    def base_url(self) -> Optional[str]:
        base = getattr(self._settings, "gateway_base_url", None) or self._config.base_url
        return base.rstrip("/") if base else None

    @property
    def model_id(self) -> str:
        return getattr(self._settings, "model_id", None) or self._config.model_id

    async def complete(self, messages: Sequence[ChatMessage]) -> CompletionResult:
        """执行一次补全调用。

        步骤：
        1. 构造请求 payload（消息 + 固定模型标识）。
        2. 发送请求并捕获网络错误。
        3. 解析响应；非 2xx 且响应体无法解析时视为传输错误。
        4. content 缺失时使用兜底文本，这不是错误。
        """

        base = self.base_url
        if not base:
            # 配置缺失走 ValidationError，方便上层统一处理
            raise ValidationError(code="MISSING_BASE_URL", message="GATEWAY_BASE_URL not set")
        payload = self._build_payload(messages)
        try:
            async with httpx.AsyncClient(
                timeout=getattr(self._settings, "http_timeout", None),
                trust_env=False,
            ) as client:
                resp = await client.post(f"{base}{self._config.endpoint}", json=payload)
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            raise GatewayTransportError(code="NETWORK_ERROR", message=str(e) or type(e).__name__)

        try:
            data = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            if resp.status_code >= 300 or resp.status_code < 200:
                raise GatewayTransportError(
                    code="API_ERROR",
                    message=resp.text,
                    http_status=resp.status_code,
                )
            raise GatewayProtocolError(code="BAD_RESPONSE", message=f"Malformed JSON body: {e}")
        return self._parse_response(data, resp.status_code)

    def _build_payload(self, messages: Sequence[ChatMessage]) -> Dict[str, Any]:
        return {
            "messages": [m.to_payload() for m in messages],
            "model_id": self.model_id,
        }

    def _parse_response(self, data: Any, status_code: int) -> CompletionResult:
        try:
            parsed = ModelsApiResponse.model_validate(data)
        except PydanticValidationError as e:
            if status_code >= 300 or status_code < 200:
                raise GatewayTransportError(
                    code="API_ERROR",
                    message=f"Unexpected error body: {data!r}",
                    http_status=status_code,
                )
            raise GatewayProtocolError(code="BAD_RESPONSE", message=str(e))
        text = parsed.content or FALLBACK_REPLY
        return CompletionResult(text=text, raw=data)
