"""内存对话历史与外部存储协议。

ConversationHistory 只负责有序记录消息以及构造发给 Provider 的 prompt，
持久化由 infrastructure.storage.history_mirror 负责。
"""

from typing import List, Optional, Protocol

from .models import Message


DEFAULT_HISTORY_WINDOW = 20


def tail_truncate(text: str, limit: int) -> str:
    """超出 limit 时只保留末尾 limit 个字符（越新的内容越重要）。"""

    if limit <= 0:
        return ""
    if len(text) > limit:
        return text[-limit:]
    return text


class Storage(Protocol):
    """外部文件存储（笔记库适配器）协议，路径均为逻辑路径。"""

    async def read(self, path: str) -> str:
        ...

    async def write(self, path: str, data: str) -> None:
        ...

    async def append(self, path: str, data: str) -> None:
        ...

    async def mkdir(self, path: str) -> None:
        ...

    async def exists(self, path: str) -> bool:
        ...


class ConversationHistory:
    """单个会话的有序消息日志，只追加不修改。"""

    def __init__(self, max_context_chars: int, window: int = DEFAULT_HISTORY_WINDOW):
        self.max_context_chars = max_context_chars
        self.window = window
        self._messages: List[Message] = []

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    def append(self, message: Message) -> None:
        self._messages.append(message)

    def recent_window(self, n: Optional[int] = None) -> List[Message]:
        size = self.window if n is None else n
        if size <= 0:
            return []
        return self._messages[-size:]

    def build_prompt(self, user_text: str, attached_context: Optional[str] = None) -> str:
        """拼接最近历史、附加笔记上下文与新输入，并按字符预算从尾部截断。

        格式为 ``"<history>\\n<context>\\n<user_text>"``，历史每条渲染为
        ``"role: content"``。附加上下文先单独截断一次，整体再截断一次。
        """

        recent = "\n".join(f"{m.role}: {m.content}" for m in self.recent_window())
        context = tail_truncate(attached_context or "", self.max_context_chars)
        prompt = f"{recent}\n{context}\n{user_text}"
        return tail_truncate(prompt, self.max_context_chars)
