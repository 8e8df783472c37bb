"""配置记录的持久化。

对应 UI 设置页：启动时加载一次，每次修改后立即写回 YAML 文件。
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

import yaml
from pydantic import ValidationError

from note_agent.config.settings import AgentSettings, config_file_candidates
from note_agent.domain.exceptions import ConfigurationError, StorageError
from note_agent.infrastructure.logging.logger import logger


class ConfigStore:
    """把 AgentSettings 保存为 YAML 映射（字段名为键）。"""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else config_file_candidates()[0]
        self._settings: Optional[AgentSettings] = None

    @property
    def settings(self) -> AgentSettings:
        if self._settings is None:
            return self.load()
        return self._settings

    def read_raw(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise StorageError(code="CONFIG_READ_ERROR", message=str(e), path=str(self.path))
        if not isinstance(data, dict):
            raise StorageError(code="CONFIG_READ_ERROR", message=f"{self.path} is not a mapping")
        return data

    def load(self) -> AgentSettings:
        """加载配置：已保存的值覆盖环境变量与默认值。"""

        data = self.read_raw()
        try:
            self._settings = AgentSettings(**data)
        except ValidationError as e:
            raise ConfigurationError(code="INVALID_SETTINGS", message=str(e))
        return self._settings

    def save(self, settings: AgentSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.{uuid4().hex}.tmp")
        text = yaml.safe_dump(settings.model_dump(mode="json"), allow_unicode=True, sort_keys=False)
        try:
            tmp_path.write_text(text, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(code="CONFIG_WRITE_ERROR", message=str(e), path=str(self.path))
        self._settings = settings
        logger.info("Settings saved", extra={"extra": {"path": str(self.path), "provider": settings.provider}})

    def update(self, base: Optional[AgentSettings] = None, **changes: Any) -> AgentSettings:
        """修改若干字段并立即持久化，其余字段原样保留。"""

        merged = {**(base or self.settings).model_dump(), **changes}
        try:
            updated = AgentSettings.model_validate(merged)
        except ValidationError as e:
            raise ConfigurationError(code="INVALID_SETTINGS", message=str(e))
        self.save(updated)
        return updated
