"""对话历史的持久镜像：一个只追加的 Markdown 笔记。

每条消息写成一个以水平线开头的块::

    ---
    **👤 User — 2024-01-01 12:00:00**

    消息正文

镜像写入失败不会影响内存对话和任务队列，只记录日志。
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Awaitable, Callable, List, Optional

from note_agent.domain.conversation import Storage
from note_agent.domain.exceptions import StorageError
from note_agent.domain.models import Message, Role
from note_agent.infrastructure.logging.logger import logger


USER_MARKER = "👤 User"
ASSISTANT_MARKER = "🤖 AI"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_MARKERS = {"user": USER_MARKER, "assistant": ASSISTANT_MARKER}
_ROLES = {v: k for k, v in _MARKERS.items()}
_HEADER_RE = re.compile(r"^\*\*(?P<marker>.+?) — (?P<ts>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\*\*$")


@dataclass
class HistoryEntry:
    role: Role
    timestamp: datetime
    content: str


def format_entry(message: Message) -> str:
    ts = message.timestamp.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)
    return f"---\n**{_MARKERS[message.role]} — {ts}**\n\n{message.content.strip()}\n\n"


def parse_history(text: str) -> List[HistoryEntry]:
    """把镜像文档解析回 (role, timestamp, content) 列表，无法识别的块被跳过。"""

    lines = text.split("\n")
    starts = []
    for i in range(len(lines) - 1):
        if lines[i] != "---":
            continue
        match = _HEADER_RE.match(lines[i + 1].strip())
        if match and match.group("marker") in _ROLES:
            starts.append((i, match))

    entries: List[HistoryEntry] = []
    for n, (i, match) in enumerate(starts):
        end = starts[n + 1][0] if n + 1 < len(starts) else len(lines)
        entries.append(
            HistoryEntry(
                role=_ROLES[match.group("marker")],  # type: ignore[arg-type]
                timestamp=datetime.strptime(match.group("ts"), TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc),
                content="\n".join(lines[i + 2 : end]).strip(),
            )
        )
    return entries


class HistoryMirror:
    def __init__(
        self,
        storage: Storage,
        path: str,
        settle_ms: int = 50,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.storage = storage
        self.path = path
        self.settle_ms = settle_ms
        self._sleep = sleep or asyncio.sleep

    async def _ensure_parents(self) -> None:
        parents = list(PurePosixPath(self.path).parents)[:-1]
        for folder in reversed(parents):
            try:
                await self.storage.mkdir(str(folder))
            except Exception:  # noqa: BLE001 - 目录已存在时适配器会报错，忽略
                continue

    async def append(self, message: Message) -> None:
        """追加一条消息，文件不存在时先创建；失败时抛出 StorageError。"""

        text = format_entry(message)
        try:
            await self._ensure_parents()
            if not await self.storage.exists(self.path):
                await self.storage.write(self.path, text)
                return
            await self.storage.append(self.path, text)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(code="STORE_WRITE_ERROR", message=str(e), path=self.path)

    async def record(self, message: Message) -> bool:
        """append 的吞错版本，返回是否写入成功。"""

        try:
            await self.append(message)
        except StorageError as e:
            logger.error(
                f"History mirror write failed: {e.message}",
                extra={"extra": {"code": e.code, "path": self.path, "role": message.role}},
            )
            return False
        return True

    async def record_exchange(self, user: Message, reply: Message) -> None:
        """先写用户消息，等待片刻后写助手回复，保证两次追加顺序可见。"""

        await self.record(user)
        await self._settle()
        await self.record(reply)
        await self._settle()

    async def _settle(self) -> None:
        if self.settle_ms > 0:
            await self._sleep(self.settle_ms / 1000)

    async def read_entries(self) -> List[HistoryEntry]:
        if not await self.storage.exists(self.path):
            return []
        return parse_history(await self.storage.read(self.path))
