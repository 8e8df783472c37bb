"""HTTP 状态码的重试判定。

- 2xx -> Success
- 429 -> RetryAfter(固定退避)
- 413 -> Terminal，请求体过大，重试也不会变小
- 其他 -> Terminal，带上状态码

退避是固定值而非指数退避，尝试次数也是常量，两者都可通过配置调整。
"""

from dataclasses import dataclass

from note_agent.domain.models import Outcome, RetryAfter, Success, Terminal


DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_MS = 2000

PAYLOAD_TOO_LARGE_MESSAGE = "Payload too large. Context truncated."
TOO_MANY_REQUESTS_MESSAGE = "too many requests, try later"


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    backoff_ms: int = DEFAULT_BACKOFF_MS

    def classify(self, status: int) -> Outcome:
        if 200 <= status < 300:
            return Success()
        if status == 429:
            return RetryAfter(self.backoff_ms)
        if status == 413:
            return Terminal(PAYLOAD_TOO_LARGE_MESSAGE)
        return Terminal(f"AI HTTP Error: {status}")

    def exhausted(self) -> Terminal:
        return Terminal(TOO_MANY_REQUESTS_MESSAGE)
