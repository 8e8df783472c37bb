"""OpenAI 兼容的 chat/completions Provider 适配器。

覆盖大部分托管服务（OpenRouter、Groq、Mistral、Google AI Studio）：
- URL: 配置中的 endpoint，留空时使用 registry 中的默认端点。
- 认证: Authorization: Bearer <api_key>（仅在配置了 key 时发送）。
- 请求体: {model, messages: [{role: "user", content: prompt}]}。
- 回复: choices[0].message.content。
"""

from typing import Any

from note_agent.config.settings import AgentSettings
from note_agent.domain.models import ProviderRequest
from note_agent.providers.base import HttpProviderAdapter, json_headers
from note_agent.providers.registry import ProviderConfig


class ChatCompletionClient(HttpProviderAdapter):
    def __init__(self, config: ProviderConfig):
        self._config = config
        self.name = config.name.value

    def build_request(self, settings: AgentSettings, prompt: str) -> ProviderRequest:
        return ProviderRequest(
            url=settings.endpoint or self._config.default_endpoint,
            headers=json_headers(settings.api_key),
            body={
                "model": settings.model or self._config.default_model,
                "messages": [{"role": "user", "content": prompt}],
            },
        )

    def extract_text(self, body: Any) -> str:
        if not isinstance(body, dict):
            return ""
        choices = body.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            return ""
        msg = choices[0].get("message") or {}
        return msg.get("content") or ""
