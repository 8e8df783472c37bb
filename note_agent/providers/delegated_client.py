"""第三方 SDK 委托适配器。

不走 HTTP，而是按 ``package.module:callable`` 动态导入一个外部 SDK 入口，
每个进程只导入一次；并发调用共享同一个正在进行的加载任务，不会重复导入。
入口以 ``entry(prompt, model=...)`` 调用，可以是同步函数也可以返回 awaitable，
回复优先取 output，其次取 text。
"""

from __future__ import annotations

import asyncio
import importlib
import inspect
from typing import Any, Callable, Dict, Optional

import httpx

from note_agent.config.settings import AgentSettings
from note_agent.domain.exceptions import ConfigurationError, TransportError
from note_agent.domain.models import ProviderRequest, ProviderResponse
from note_agent.infrastructure.logging.logger import logger
from note_agent.providers.registry import ProviderConfig


class SdkLoader:
    """外部 SDK 入口的幂等加载器。"""

    def __init__(self, entry_point: str):
        module_name, _, attr = entry_point.partition(":")
        if not module_name or not attr:
            raise ConfigurationError(
                code="INVALID_ENTRY_POINT",
                message=f"Delegated entry point must look like 'package.module:callable', got {entry_point!r}",
            )
        self.entry_point = entry_point
        self._module_name = module_name
        self._attr = attr
        self._entry: Optional[Callable[..., Any]] = None
        self._loading: Optional[asyncio.Future] = None
        self.load_count = 0

    @property
    def loaded(self) -> bool:
        return self._entry is not None

    async def load(self) -> Callable[..., Any]:
        if self._entry is not None:
            return self._entry
        if self._loading is None:
            self._loading = asyncio.ensure_future(self._import())
        loading = self._loading
        try:
            # 单个调用方被取消时不影响共享的导入任务
            return await asyncio.shield(loading)
        finally:
            # 失败后允许下次重新加载；成功后 _entry 已缓存
            if self._loading is loading and loading.done():
                self._loading = None

    async def _import(self) -> Callable[..., Any]:
        self.load_count += 1
        logger.info("Loading delegated SDK", extra={"extra": {"entry_point": self.entry_point}})
        module = await asyncio.to_thread(importlib.import_module, self._module_name)
        target: Any = module
        for part in self._attr.split("."):
            target = getattr(target, part)
        if not callable(target):
            raise ConfigurationError(code="INVALID_ENTRY_POINT", message=f"{self.entry_point} is not callable")
        self._entry = target
        return target


_LOADERS: Dict[str, SdkLoader] = {}


def get_loader(entry_point: str) -> SdkLoader:
    """同一个入口在进程内共享同一个 SdkLoader。"""

    loader = _LOADERS.get(entry_point)
    if loader is None:
        loader = SdkLoader(entry_point)
        _LOADERS[entry_point] = loader
    return loader


def _pick(body: Any, key: str) -> Any:
    if isinstance(body, dict):
        return body.get(key)
    return getattr(body, key, None)


class DelegatedClient:
    def __init__(self, config: ProviderConfig):
        self._config = config
        self.name = config.name.value

    def build_request(self, settings: AgentSettings, prompt: str) -> ProviderRequest:
        if not settings.delegate_entry_point:
            raise ConfigurationError(
                code="MISSING_ENTRY_POINT",
                message="Delegated provider requires delegate_entry_point",
            )
        get_loader(settings.delegate_entry_point)
        return ProviderRequest(
            url=f"delegated://{settings.delegate_entry_point}",
            headers={},
            body={"prompt": prompt, "model": settings.model or None},
        )

    async def send(self, client: httpx.AsyncClient, request: ProviderRequest) -> ProviderResponse:
        loader = get_loader(request.url.removeprefix("delegated://"))
        kwargs = {"model": request.body["model"]} if request.body.get("model") else {}
        try:
            entry = await loader.load()
            result = entry(request.body["prompt"], **kwargs)
            if inspect.isawaitable(result):
                result = await result
        except ConfigurationError:
            raise
        except Exception as e:
            raise TransportError(code="DELEGATE_ERROR", message=str(e) or type(e).__name__, provider=self.name)
        return ProviderResponse(status_code=200, body=result)

    def extract_text(self, body: Any) -> str:
        if isinstance(body, str):
            return body
        text = _pick(body, "output") or _pick(body, "text")
        return str(text) if text else ""
