"""聊天面板背后的会话逻辑。

一次提交的流程：
1. 立即渲染用户消息，按需读取当前笔记作为附加上下文。
2. 用 ConversationHistory 构造受字符预算约束的 prompt，并记录原始用户消息。
3. 把“调用 Provider + 渲染回复 + 写入历史 + 写入镜像”作为一个任务放进队列。

渲染（Markdown 等）与笔记读取由外部协作者实现，这里只依赖协议。
"""

from typing import Callable, Optional, Protocol
from uuid import uuid4

from note_agent.config.settings import AgentSettings
from note_agent.domain.conversation import ConversationHistory, tail_truncate
from note_agent.domain.exceptions import BusinessError
from note_agent.domain.models import Message, Role
from note_agent.infrastructure.logging.logger import logger
from note_agent.infrastructure.storage.history_mirror import HistoryMirror
from note_agent.pipeline.request_pipeline import RequestPipeline, error_text
from note_agent.tasks.task_queue import TaskQueue


class Renderer(Protocol):
    """UI 渲染协议：assistant 文本可能包含 Markdown，user 文本原样显示。"""

    def render(self, role: Role, text: str) -> None:
        ...


class ContextSource(Protocol):
    """返回当前活动笔记的全文，没有活动笔记时返回空字符串。"""

    async def read_active_note(self) -> str:
        ...


class ChatSession:
    """单个面板的会话，关闭面板即丢弃（历史只保留在镜像文件中）。"""

    def __init__(
        self,
        settings: Callable[[], AgentSettings],
        queue: TaskQueue,
        pipeline: RequestPipeline,
        renderer: Renderer,
        mirror: Optional[HistoryMirror] = None,
        context_source: Optional[ContextSource] = None,
    ):
        self._settings = settings
        self._queue = queue
        self._pipeline = pipeline
        self._renderer = renderer
        self._mirror = mirror
        self._context_source = context_source
        cfg = settings()
        self.id = f"s-{uuid4().hex}"
        self.history = ConversationHistory(cfg.max_context_chars, window=cfg.history_window)

    async def _note_context(self, limit: int) -> str:
        if self._context_source is None:
            return ""
        try:
            content = await self._context_source.read_active_note()
        except Exception as e:  # noqa: BLE001 - 读不到笔记时按无上下文处理
            logger.warning(f"Failed to read active note: {e}", extra={"extra": {"session_id": self.id}})
            return ""
        return tail_truncate(content or "", limit)

    async def submit(self, text: str, attach_context: bool = False) -> Optional[Message]:
        """提交一条用户输入；空输入直接忽略并返回 None。"""

        user_text = (text or "").strip()
        if not user_text:
            return None
        cfg = self._settings()
        self._renderer.render("user", user_text)

        # 预算以提交时的配置为准
        self.history.max_context_chars = cfg.max_context_chars
        self.history.window = cfg.history_window
        note_context = await self._note_context(cfg.max_context_chars) if attach_context else ""
        prompt = self.history.build_prompt(user_text, note_context)

        user_msg = Message(role="user", content=user_text)
        self.history.append(user_msg)
        self._queue.enqueue(lambda: self._exchange(user_msg, prompt))
        return user_msg

    async def _exchange(self, user_msg: Message, prompt: str) -> None:
        try:
            reply_text = await self._pipeline.ask(self._settings(), prompt)
        except BusinessError as e:
            reply_text = error_text(e.message)
        except Exception as e:  # noqa: BLE001 - 队列任务必须自己消化异常
            logger.exception("Exchange failed", extra={"extra": {"session_id": self.id}})
            reply_text = error_text(str(e) or type(e).__name__)

        reply = Message(role="assistant", content=reply_text)
        self._renderer.render("assistant", reply_text)
        self.history.append(reply)
        if self._mirror is not None:
            await self._mirror.record_exchange(user_msg, reply)

