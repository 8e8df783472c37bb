"""进程级上下文。

插件启动时显式构造一次 AppContext，把配置、任务队列、请求管线、存储与
历史镜像注入到各个组件；进程退出前调用 aclose() 等待队列排空并关闭 HTTP 连接。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

import httpx

from note_agent.agents.chat_session import ChatSession, ContextSource, Renderer
from note_agent.config.settings import AgentSettings
from note_agent.config.store import ConfigStore
from note_agent.domain.conversation import Storage
from note_agent.infrastructure.logging.logger import logger, setup_logger, teardown_logger
from note_agent.infrastructure.storage.history_mirror import HistoryMirror
from note_agent.infrastructure.storage.local_storage import LocalStorage
from note_agent.pipeline.request_pipeline import RequestPipeline
from note_agent.tasks.task_queue import TaskQueue


Sleep = Callable[[float], Awaitable[None]]


@dataclass
class AppContext:
    client: httpx.AsyncClient
    queue: TaskQueue
    pipeline: RequestPipeline
    storage: Storage
    mirror: HistoryMirror
    settings: AgentSettings
    config_store: Optional[ConfigStore] = None
    log_dir: Optional[str] = None
    sessions: List[ChatSession] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        settings: Optional[AgentSettings] = None,
        *,
        config_store: Optional[ConfigStore] = None,
        storage: Optional[Storage] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Sleep] = None,
        enable_file_log: bool = True,
    ) -> "AppContext":
        """构造全部组件；settings 与 config_store 同时给出时以 settings 为准。"""

        if settings is None:
            settings = config_store.settings if config_store else AgentSettings()
        if enable_file_log:
            setup_logger(settings.log_dir, settings.log_redact_content)

        client = httpx.AsyncClient(timeout=settings.http_timeout, trust_env=False, transport=transport)
        ctx: AppContext

        def current_delay() -> int:
            return ctx.settings.task_delay_ms

        storage = storage or LocalStorage(settings.storage_root)
        ctx = cls(
            client=client,
            queue=TaskQueue(current_delay, sleep=sleep),
            pipeline=RequestPipeline(client, sleep=sleep),
            storage=storage,
            mirror=HistoryMirror(storage, settings.history_path, settings.mirror_settle_ms, sleep=sleep),
            settings=settings,
            config_store=config_store,
            log_dir=settings.log_dir if enable_file_log else None,
        )
        logger.info(
            "AI Agent loaded",
            extra={"extra": {"provider": settings.provider, "model": settings.model}},
        )
        return ctx

    def update_settings(self, **changes: Any) -> AgentSettings:
        """修改配置并立即生效；有 ConfigStore 时同时持久化。

        http_timeout 直接改到共享的 httpx.AsyncClient 上；storage_root 只对
        内置的 LocalStorage 生效（外部注入的存储适配器保持不变）；log_dir 与
        log_redact_content 在启用了文件日志时重新挂载 handler。
        """

        previous = self.settings
        if self.config_store is not None:
            updated = self.config_store.update(base=previous, **changes)
        else:
            updated = AgentSettings.model_validate({**previous.model_dump(), **changes})
        self.settings = updated

        if updated.http_timeout != previous.http_timeout:
            self.client.timeout = httpx.Timeout(updated.http_timeout)
        if updated.storage_root != previous.storage_root and isinstance(self.storage, LocalStorage):
            self.storage = LocalStorage(updated.storage_root)
            self.mirror.storage = self.storage
        self.mirror.path = updated.history_path
        self.mirror.settle_ms = updated.mirror_settle_ms
        if self.log_dir is not None and (
            updated.log_dir != previous.log_dir or updated.log_redact_content != previous.log_redact_content
        ):
            teardown_logger(self.log_dir)
            setup_logger(updated.log_dir, updated.log_redact_content)
            self.log_dir = updated.log_dir

        logger.info("Settings updated", extra={"extra": {"fields": sorted(changes)}})
        return updated

    def open_session(self, renderer: Renderer, context_source: Optional[ContextSource] = None) -> ChatSession:
        session = ChatSession(
            settings=lambda: self.settings,
            queue=self.queue,
            pipeline=self.pipeline,
            renderer=renderer,
            mirror=self.mirror,
            context_source=context_source,
        )
        self.sessions.append(session)
        return session

    def close_session(self, session: ChatSession) -> None:
        if session in self.sessions:
            self.sessions.remove(session)

    async def ask(self, prompt: str) -> str:
        return await self.pipeline.ask(self.settings, prompt)

    async def aclose(self) -> None:
        await self.queue.aclose()
        await self.client.aclose()
        self.sessions.clear()
        if self.log_dir is not None:
            teardown_logger(self.log_dir)
