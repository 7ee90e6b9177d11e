"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError。
Provider 层负责抛出，PromptRelayClient 负责吸收并转换为 PromptResult，
会话层只会因为调用方误用而抛出 ValidationError。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "NETWORK_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 provider、model 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class NetworkError(BusinessError):
    """网络层错误，例如连接失败、DNS 失败、超时等。"""


class ApiError(BusinessError):
    """生成接口返回非 2xx/429 错误时抛出。"""


class RateLimitError(BusinessError):
    """Provider 限流错误。本项目不做自动重试，由调用方决定策略。"""


class ResponseFormatError(BusinessError):
    """响应体无法解析为 JSON。"""


class ValidationError(BusinessError):
    """参数或配置校验失败。"""
