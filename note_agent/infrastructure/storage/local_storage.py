"""本地目录实现的 Storage，逻辑路径相对于笔记库根目录。"""

from __future__ import annotations

import asyncio
from pathlib import Path

from note_agent.domain.exceptions import StorageError


class LocalStorage:
    """把笔记库映射到本地目录，所有路径都必须局限在 root 之内。"""

    def __init__(self, root: str | Path):
        self.root = Path(root).expanduser().resolve()

    def _resolve(self, raw: str) -> Path:
        candidate = (self.root / raw).resolve()
        try:
            candidate.relative_to(self.root)
        except ValueError as exc:
            raise StorageError(code="PATH_OUTSIDE_ROOT", message=f"path outside storage root: {raw}") from exc
        return candidate

    async def read(self, path: str) -> str:
        return await asyncio.to_thread(self._resolve(path).read_text, encoding="utf-8")

    async def write(self, path: str, data: str) -> None:
        await asyncio.to_thread(self._resolve(path).write_text, data, encoding="utf-8")

    async def append(self, path: str, data: str) -> None:
        def _append() -> None:
            with self._resolve(path).open("a", encoding="utf-8") as f:
                f.write(data)

        await asyncio.to_thread(_append)

    async def mkdir(self, path: str) -> None:
        target = self._resolve(path)
        if target.exists():
            raise FileExistsError(f"folder already exists: {path}")
        await asyncio.to_thread(target.mkdir)

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._resolve(path).exists)
