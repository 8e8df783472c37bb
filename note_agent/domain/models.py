"""统一的消息与请求数据模型。

本模块定义了各层之间共享的标准数据结构：

- Message: 一条对话消息（user/assistant），创建后不可变。
- ProviderRequest / ProviderResponse: Provider 适配层与 Pipeline 之间的请求/响应。
- Success / RetryAfter / Terminal: RetryPolicy 对一次响应的判定结果。

所有 Provider 适配器都只依赖这些模型，并负责在各自的 API JSON
和这些模型之间做转换。
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Union


# 对话角色，assistant 的回复（包括错误提示）统一使用 "assistant"
Role = Literal["user", "assistant"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    """一条对话消息。

    - role: 消息角色，user 或 assistant。
    - content: 原始文本（用户输入未经截断，助手回复为原始返回）。
    - timestamp: 创建时间（UTC）。
    """

    role: Role
    content: str
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass
class ProviderRequest:
    """发给底层 Provider 的完整请求。

    Provider 适配层负责填充 url/headers/body，Pipeline 只负责发送。
    """

    url: str
    headers: Dict[str, str]
    body: Dict[str, Any]


@dataclass
class ProviderResponse:
    """Provider 返回的原始结果：HTTP 状态码 + 已解析的 JSON 体。"""

    status_code: int
    body: Any = None


@dataclass(frozen=True)
class Success:
    pass


@dataclass(frozen=True)
class RetryAfter:
    delay_ms: int


@dataclass(frozen=True)
class Terminal:
    message: str


Outcome = Union[Success, RetryAfter, Terminal]
