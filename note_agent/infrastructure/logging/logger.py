import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

LOGGER_NAME = "note_agent"

logger = logging.getLogger(LOGGER_NAME)


class JsonFormatter(logging.Formatter):
    def __init__(self, redact_content: bool = False):
        super().__init__()
        self.redact_content = redact_content

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        if self.redact_content:
            msg = (msg or "")[:64]
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "msg": msg,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logger(log_dir: str | Path = "logs", redact_content: bool = False) -> logging.Logger:
    """给 note_agent logger 挂上 JSON 文件 handler；重复调用不会重复挂载。"""

    log_path = Path(os.path.abspath(Path(log_dir) / "agent.log"))
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == log_path:
            return logger
    logger.setLevel(logging.INFO)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logging.INFO)
    fh.setFormatter(JsonFormatter(redact_content))
    logger.addHandler(fh)
    return logger


def teardown_logger(log_dir: Optional[str | Path] = None) -> None:
    """关闭并移除文件 handler（log_dir 为空时移除全部）。"""

    target = Path(os.path.abspath(Path(log_dir) / "agent.log")) if log_dir else None
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.FileHandler):
            continue
        if target is None or Path(handler.baseFilename) == target:
            logger.removeHandler(handler)
            handler.close()
