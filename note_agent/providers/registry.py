"""Provider 与默认端点/模型配置。

本模块把“配置里的 provider 字符串”解析成封闭的 ProviderName 枚举，
并为每个 Provider 提供内置的默认端点和模型：用户未填写 endpoint/model 时使用。
新增 Provider 只需要在这里登记并在 providers/__init__.py 里挂上对应的适配器。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Mapping

from note_agent.domain.exceptions import ConfigurationError


class ProviderName(str, Enum):
    OPENROUTER = "openrouter"
    OLLAMA = "ollama"
    GROQ = "groq"
    MISTRAL = "mistral"
    GOOGLE = "google"
    DELEGATED = "delegated"


ProviderKind = Literal["chat", "local", "delegated"]


@dataclass(frozen=True)
class ProviderConfig:
    """某个 Provider 的内置配置。"""

    name: ProviderName
    kind: ProviderKind
    label: str
    default_endpoint: str
    default_model: str


OLLAMA_ENDPOINT = "http://localhost:11434/v1/complete"

PROVIDER_REGISTRY: Mapping[ProviderName, ProviderConfig] = {
    ProviderName.OPENROUTER: ProviderConfig(
        name=ProviderName.OPENROUTER,
        kind="chat",
        label="OpenRouter",
        default_endpoint="https://openrouter.ai/api/v1/chat/completions",
        default_model="deepseek/deepseek-r1:free",
    ),
    ProviderName.OLLAMA: ProviderConfig(
        name=ProviderName.OLLAMA,
        kind="local",
        label="Ollama (local)",
        default_endpoint=OLLAMA_ENDPOINT,
        default_model="llama3",
    ),
    ProviderName.GROQ: ProviderConfig(
        name=ProviderName.GROQ,
        kind="chat",
        label="Groq Cloud",
        default_endpoint="https://api.groq.com/openai/v1/chat/completions",
        default_model="llama-3.1-8b-instant",
    ),
    ProviderName.MISTRAL: ProviderConfig(
        name=ProviderName.MISTRAL,
        kind="chat",
        label="Mistral API",
        default_endpoint="https://api.mistral.ai/v1/chat/completions",
        default_model="mistral-small-latest",
    ),
    ProviderName.GOOGLE: ProviderConfig(
        name=ProviderName.GOOGLE,
        kind="chat",
        label="Google AI Studio",
        default_endpoint="https://generativelanguage.googleapis.com/v1beta/openai/chat/completions",
        default_model="gemini-1.5-flash",
    ),
    ProviderName.DELEGATED: ProviderConfig(
        name=ProviderName.DELEGATED,
        kind="delegated",
        label="Delegated SDK",
        default_endpoint="",
        default_model="",
    ),
}


def resolve_provider(name: object) -> ProviderName:
    """把配置中的 provider 值解析为 ProviderName，不区分大小写。"""

    if isinstance(name, ProviderName):
        return name
    key = str(name or "").strip().lower()
    if not key:
        raise ConfigurationError(code="PROVIDER_NOT_SET", message="Unknown provider: provider is not set")
    try:
        return ProviderName(key)
    except ValueError:
        raise ConfigurationError(code="UNKNOWN_PROVIDER", message=f"Unknown provider: {name!r}")


def get_provider_config(name: object) -> ProviderConfig:
    return PROVIDER_REGISTRY[resolve_provider(name)]
