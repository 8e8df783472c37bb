"""存储实现：本地笔记库适配器与历史镜像。"""

from .history_mirror import HistoryMirror, parse_history
from .local_storage import LocalStorage

__all__ = ["HistoryMirror", "LocalStorage", "parse_history"]
