"""ask：构造请求 -> 发送 -> 判定 -> 重试或返回。

RequestPipeline 是所有网络/Provider 错误的边界：除配置错误外，任何失败
都被转换成 "Error: ..." 字符串返回，让对话界面总有内容可显示。
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Optional

import httpx

from note_agent.config.settings import AgentSettings
from note_agent.domain.exceptions import BusinessError, ConfigurationError
from note_agent.domain.models import RetryAfter, Success, Terminal
from note_agent.infrastructure.logging.logger import logger
from note_agent.pipeline.retry import RetryPolicy
from note_agent.providers import ProviderAdapter, create_provider


ERROR_PREFIX = "Error: "


def error_text(message: str) -> str:
    return f"{ERROR_PREFIX}{message}"


class RequestPipeline:
    def __init__(
        self,
        client: httpx.AsyncClient,
        policy: Optional[RetryPolicy] = None,
        provider_factory: Callable[[object], ProviderAdapter] = create_provider,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self._client = client
        self._policy = policy
        self._provider_factory = provider_factory
        self._sleep = sleep or asyncio.sleep

    def policy_for(self, settings: AgentSettings) -> RetryPolicy:
        if self._policy is not None:
            return self._policy
        return RetryPolicy(max_attempts=settings.retry_max_attempts, backoff_ms=settings.retry_backoff_ms)

    async def ask(self, settings: AgentSettings, prompt: str) -> str:
        """向当前 Provider 发送 prompt，返回回复文本或错误字符串。

        Raises:
            ConfigurationError: provider 未知或未配置，此时不会发出任何请求。
        """

        adapter = self._provider_factory(settings.provider)
        request = adapter.build_request(settings, prompt)
        policy = self.policy_for(settings)
        log_ctx = {"provider": adapter.name, "url": request.url}

        for attempt in range(1, policy.max_attempts + 1):
            start = time.time()
            try:
                response = await adapter.send(self._client, request)
                outcome = policy.classify(response.status_code)
                if isinstance(outcome, Success):
                    text = adapter.extract_text(response.body)
                    logger.info(
                        "Provider replied",
                        extra={"extra": {
                            **log_ctx,
                            "attempt": attempt,
                            "duration_ms": int((time.time() - start) * 1000),
                            "reply_chars": len(text),
                        }},
                    )
                    return text
            except ConfigurationError:
                raise
            except BusinessError as e:
                logger.error(
                    f"AI call error: {e.message}",
                    extra={"extra": {**log_ctx, "code": e.code, "attempt": attempt}},
                )
                return error_text(e.message)
            except Exception as e:  # noqa: BLE001 - 任何传输层异常都转换为错误字符串
                logger.error(
                    f"AI call error: {e}",
                    extra={"extra": {**log_ctx, "error": type(e).__name__, "attempt": attempt}},
                )
                return error_text(str(e) or type(e).__name__)

            if isinstance(outcome, Terminal):
                logger.error(
                    f"Provider returned terminal status: {outcome.message}",
                    extra={"extra": {**log_ctx, "status": response.status_code, "attempt": attempt}},
                )
                return error_text(outcome.message)

            if isinstance(outcome, RetryAfter):
                if attempt >= policy.max_attempts:
                    break
                logger.warning(
                    "429 Too Many Requests, retrying...",
                    extra={"extra": {**log_ctx, "attempt": attempt, "delay_ms": outcome.delay_ms}},
                )
                await self._sleep(outcome.delay_ms / 1000)

        exhausted = policy.exhausted()
        logger.error(
            f"AI call gave up: {exhausted.message}",
            extra={"extra": {**log_ctx, "attempts": policy.max_attempts}},
        )
        return error_text(exhausted.message)
