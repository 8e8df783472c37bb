"""对外入口：AppContext 与便捷服务函数。"""

from .context import AppContext

__all__ = ["AppContext"]
