"""Minimal console demonstration of the chat session."""

import asyncio
import sys

from note_agent.api.context import AppContext
from note_agent.config.store import ConfigStore


class ConsoleRenderer:
    def render(self, role, text):
        prefix = "User" if role == "user" else "AI"
        print(f"{prefix}: {text}\n")


async def main(questions):
    ctx = AppContext.create(config_store=ConfigStore())
    session = ctx.open_session(ConsoleRenderer())
    try:
        for q in questions:
            await session.submit(q)
        await ctx.queue.join()
    finally:
        await ctx.aclose()


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:] or ["Summarize the idea of a zettelkasten in two sentences."]))
