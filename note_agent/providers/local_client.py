"""本地补全守护进程（Ollama）适配器。

固定访问本机回环地址，请求体为 {model, prompt}，回复取 completion 字段。
"""

from typing import Any

from note_agent.config.settings import AgentSettings
from note_agent.domain.models import ProviderRequest
from note_agent.providers.base import HttpProviderAdapter, json_headers
from note_agent.providers.registry import OLLAMA_ENDPOINT, ProviderConfig


class LocalCompletionClient(HttpProviderAdapter):
    def __init__(self, config: ProviderConfig):
        self._config = config
        self.name = config.name.value

    def build_request(self, settings: AgentSettings, prompt: str) -> ProviderRequest:
        # endpoint 字段属于托管 Provider，这里忽略
        return ProviderRequest(
            url=OLLAMA_ENDPOINT,
            headers=json_headers(settings.api_key),
            body={"model": settings.model or self._config.default_model, "prompt": prompt},
        )

    def extract_text(self, body: Any) -> str:
        if not isinstance(body, dict):
            return ""
        return body.get("completion") or ""
