"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在编排层或 Telegram 适配层做统一捕获、分类与用户提示。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "NETWORK_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 user_id、gateway 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class GatewayError(BusinessError):
    """补全网关调用失败的公共基类，编排层只需捕获这一类。"""


class GatewayTransportError(GatewayError):
    """网络层错误：连接失败、超时、非 2xx 且响应体无法解析等。"""


class GatewayProtocolError(GatewayError):
    """网关返回了 2xx，但响应体不是预期的 JSON 结构。"""


class TransportError(BusinessError):
    """消息投递/编辑失败（Telegram 等传输层），必须向调用方抛出。"""


class ValidationError(BusinessError):
    """消息构造或配置校验失败，只影响当前这一轮请求。"""


class ConfigurationError(ValidationError):
    """启动时缺少必需配置（bot token、网关地址），进程级致命。"""
