"""配置管理模块。

支持从 .env、config.yaml 以及环境变量加载配置（环境变量前缀 NOTE_AGENT_）。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ENDPOINT = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "deepseek/deepseek-r1:free"


def config_file_candidates() -> list[Path]:
    """配置文件候选路径，NOTE_AGENT_CONFIG_FILE 优先。"""

    candidates = []
    explicit = os.getenv("NOTE_AGENT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.append(Path.cwd() / "config.yaml")
    return candidates


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""

    seen: set[Path] = set()
    for path in config_file_candidates():
        if path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class AgentSettings(BaseSettings):
    """插件配置记录。

    同一时间只有一个 provider 生效，与当前 provider 无关的字段被忽略但不会被清空。
    """

    # ---- Provider 相关配置 ----
    provider: str = Field(
        default="openrouter",
        description="当前 Provider：openrouter、ollama、groq、mistral、google、delegated",
    )
    api_key: Optional[str] = Field(default=None, description="Bearer Token，为空时不发送认证头")
    endpoint: str = Field(default=DEFAULT_ENDPOINT, description="chat/completions 端点")
    model: str = Field(default=DEFAULT_MODEL, description="厂商模型 ID")
    delegate_entry_point: Optional[str] = Field(
        default=None,
        description="delegated Provider 的 SDK 入口，格式 package.module:callable",
    )

    # ---- 上下文与队列 ----
    max_context_chars: int = Field(default=5000, ge=1, description="发往后端的 prompt 字符上限")
    task_delay_ms: int = Field(default=3000, ge=0, description="队列中两个任务之间的间隔（毫秒）")
    history_window: int = Field(default=20, ge=1, le=100, description="拼接进 prompt 的历史条数")

    # ---- 重试 ----
    retry_max_attempts: int = Field(default=3, ge=1, description="429 时的最大尝试次数")
    retry_backoff_ms: int = Field(default=2000, ge=0, description="429 后的固定等待（毫秒）")

    # ---- 存储与日志 ----
    http_timeout: float = Field(default=30.0, ge=1.0, description="HTTP 超时时间（秒）")
    storage_root: str = Field(default=".", description="笔记库根目录")
    history_path: str = Field(default="AI/AI Agent History.md", description="历史镜像的逻辑路径")
    mirror_settle_ms: int = Field(default=50, ge=0, description="两次镜像写入之间的等待（毫秒）")
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_prefix="NOTE_AGENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: Any) -> Any:
        # YAML 里的 `provider:` 空值读出来是 None，按未设置处理
        if v is None:
            return ""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("api_key", "delegate_entry_point")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


# 类型别名，让外部代码可以使用 Settings 类型
Settings = AgentSettings
