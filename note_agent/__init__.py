"""note_agent 顶层包。

该包提供笔记软件中 AI 聊天面板的核心实现：
配置加载、Provider 适配、带重试的请求管线、串行任务队列、
对话历史与持久化镜像。
"""

from note_agent.api.context import AppContext
from note_agent.config.settings import AgentSettings

__all__ = ["AgentSettings", "AppContext"]
