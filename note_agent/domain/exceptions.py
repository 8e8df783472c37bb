"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在 Pipeline / 队列 / 镜像存储等边界做统一捕获与用户提示。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "STORE_WRITE_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 provider、path 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ConfigurationError(BusinessError):
    """Provider 未知或未配置，单次 ask 直接失败，不重试。"""


class TransportError(BusinessError):
    """网络层错误，例如连接失败、DNS、超时、响应体无法解析等。"""


class RateLimitError(BusinessError):
    """Provider 限流（HTTP 429），由 RetryPolicy 负责重试。"""


class PayloadTooLargeError(BusinessError):
    """请求体过大（HTTP 413），重试没有意义。"""


class ServerError(BusinessError):
    """第三方 API 返回其他非 2xx 状态码时使用。"""


class StorageError(BusinessError):
    """历史镜像写入失败，在镜像边界被吞掉并记录日志。"""
