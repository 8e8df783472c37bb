import pytest
import yaml

from note_agent.config.settings import AgentSettings
from note_agent.config.store import ConfigStore
from note_agent.domain.exceptions import ConfigurationError


def test_defaults_match_plugin_defaults(tmp_path):
    cfg = ConfigStore(tmp_path / "settings.yaml").load()
    assert cfg.provider == "openrouter"
    assert cfg.endpoint == "https://openrouter.ai/api/v1/chat/completions"
    assert cfg.model == "deepseek/deepseek-r1:free"
    assert cfg.max_context_chars == 5000
    assert cfg.task_delay_ms == 3000
    assert cfg.api_key is None


def test_update_persists_every_change(tmp_path):
    path = tmp_path / "conf" / "settings.yaml"
    store = ConfigStore(path)
    store.update(provider="Groq", api_key="gsk-123")
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert data["provider"] == "groq"
    assert data["api_key"] == "gsk-123"

    store.update(provider="ollama")
    reloaded = ConfigStore(path).load()
    assert reloaded.provider == "ollama"
    # 与当前 provider 无关的字段保留
    assert reloaded.api_key == "gsk-123"
    assert not list(path.parent.glob("*.tmp"))


def test_update_rejects_invalid_values(tmp_path):
    store = ConfigStore(tmp_path / "settings.yaml")
    with pytest.raises(ConfigurationError):
        store.update(max_context_chars=0)
    with pytest.raises(ConfigurationError):
        store.update(task_delay_ms=-1)


def test_stale_provider_still_loads(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("provider: removed-one\nmodel: x\n", encoding="utf-8")
    cfg = ConfigStore(path).load()
    assert cfg.provider == "removed-one"
    assert cfg.model == "x"


def test_settings_read_yaml_and_env(tmp_path, monkeypatch):
    config_file = tmp_path / "custom.yaml"
    config_file.write_text("model: from-yaml\ntask_delay_ms: 10\n", encoding="utf-8")
    monkeypatch.setenv("NOTE_AGENT_CONFIG_FILE", str(config_file))
    monkeypatch.setenv("NOTE_AGENT_TASK_DELAY_MS", "20")
    cfg = AgentSettings()
    assert cfg.model == "from-yaml"
    assert cfg.task_delay_ms == 20


def test_null_provider_loads_as_unset(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("provider:\nmodel: x\n", encoding="utf-8")
    cfg = ConfigStore(path).load()
    assert cfg.provider == ""
    assert cfg.model == "x"
