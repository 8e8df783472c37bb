"""会话层：把一次用户输入串起历史、队列、Provider 与镜像。"""

from .chat_session import ChatSession, ContextSource, Renderer

__all__ = ["ChatSession", "ContextSource", "Renderer"]
