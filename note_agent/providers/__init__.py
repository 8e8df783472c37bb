"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护 Provider 名称与默认端点/模型 (registry)。
- 提供三类具体实现：chat_client（托管服务）、local_client（本地守护进程）、
  delegated_client（第三方 SDK）。
"""

from typing import Callable, Dict

from note_agent.providers.base import ProviderAdapter
from note_agent.providers.chat_client import ChatCompletionClient
from note_agent.providers.delegated_client import DelegatedClient
from note_agent.providers.local_client import LocalCompletionClient
from note_agent.providers.registry import (
    ProviderConfig,
    ProviderKind,
    ProviderName,
    get_provider_config,
)


_ADAPTERS: Dict[ProviderKind, Callable[[ProviderConfig], ProviderAdapter]] = {
    "chat": ChatCompletionClient,
    "local": LocalCompletionClient,
    "delegated": DelegatedClient,
}


def create_provider(name: object) -> ProviderAdapter:
    """根据名称创建 Provider 适配器；未知名称抛出 ConfigurationError。"""

    cfg = get_provider_config(name)
    return _ADAPTERS[cfg.kind](cfg)


__all__ = ["ProviderAdapter", "ProviderName", "create_provider"]
