"""对外 API 服务模块。

提供简化的函数接口供上层应用调用；需要自定义组件时直接使用 AppContext。
"""

import asyncio
from typing import List, Optional, Tuple

from note_agent.api.context import AppContext
from note_agent.config.store import ConfigStore
from note_agent.domain.models import Role
from note_agent.infrastructure.logging.logger import logger


_context: Optional[AppContext] = None
_context_loop: Optional[asyncio.AbstractEventLoop] = None


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def get_default_context() -> AppContext:
    """获取默认的 AppContext（每个事件循环一个），配置来自默认位置的 ConfigStore。

    httpx.AsyncClient 与队列的 drain 任务都绑定在创建它们的事件循环上，
    因此在新的循环里（例如第二次 ``asyncio.run``）调用时会重新创建。
    """
    global _context, _context_loop
    loop = _running_loop()
    if _context is not None and _context_loop is not loop:
        logger.info("Event loop changed, recreating default context")
        _context = None
    if _context is None:
        _context = AppContext.create(config_store=ConfigStore())
        _context_loop = loop
    return _context


async def shutdown_default_context() -> None:
    global _context, _context_loop
    if _context is None:
        return
    ctx, loop = _context, _context_loop
    _context, _context_loop = None, None
    if loop is _running_loop():
        await ctx.aclose()
    else:
        # 原循环已结束，其上的连接无法再关闭，直接丢弃
        logger.info("Dropping default context created on another event loop")


class CollectingRenderer:
    """把渲染调用收集到列表里，供非界面调用方读取结果。"""

    def __init__(self) -> None:
        self.items: List[Tuple[Role, str]] = []

    def render(self, role: Role, text: str) -> None:
        self.items.append((role, text))

    def last(self, role: Role) -> Optional[str]:
        for r, text in reversed(self.items):
            if r == role:
                return text
        return None


async def ask_once(user_input: str, context: Optional[AppContext] = None) -> str:
    """通过队列完成一次问答并返回助手回复（失败时为 "Error: ..." 文本）。

    Args:
        user_input: 用户输入内容
        context: 使用的 AppContext，默认取单例

    Returns:
        助手回复文本；输入为空时返回空字符串
    """
    ctx = context or get_default_context()
    renderer = CollectingRenderer()
    session = ctx.open_session(renderer)
    try:
        if await session.submit(user_input) is None:
            return ""
        await ctx.queue.join()
    finally:
        ctx.close_session(session)
    reply = renderer.last("assistant") or ""
    logger.info("ask_once finished", extra={"extra": {"session_id": session.id, "reply_chars": len(reply)}})
    return reply
