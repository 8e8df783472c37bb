"""请求管线：RetryPolicy 判定 + RequestPipeline 组合 Provider 与重试。"""

from .request_pipeline import RequestPipeline
from .retry import RetryPolicy

__all__ = ["RequestPipeline", "RetryPolicy"]
