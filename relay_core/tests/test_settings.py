import pytest

from relay_core.api.service import build_orchestrator_config
from relay_core.config.settings import RelaySettings, require_runtime_settings
from relay_core.domain.exceptions import ConfigurationError
from relay_core.prompts import load_system_prompt, render_system_prompt


def test_bot_id_from_token():
    cfg = RelaySettings(bot_token="123456:ABC-def", gateway_base_url="https://gw.example/")
    assert cfg.bot_id == 123456
    assert cfg.gateway_base_url == "https://gw.example"


def test_malformed_token_rejected_at_startup():
    cfg = RelaySettings(bot_token="not-a-token", gateway_base_url="https://gw.example")
    assert cfg.bot_id is None
    with pytest.raises(ConfigurationError) as exc:
        require_runtime_settings(cfg)
    assert exc.value.code == "INVALID_BOT_TOKEN"


def test_require_runtime_settings():
    with pytest.raises(ConfigurationError) as exc:
        require_runtime_settings(RelaySettings(bot_token=None, gateway_base_url=None))
    assert "BOT_TOKEN" in exc.value.message
    assert "GATEWAY_BASE_URL" in exc.value.message

    cfg = RelaySettings(bot_token="1:x", gateway_base_url="https://gw.example")
    assert require_runtime_settings(cfg) is cfg


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("WAKE_WORD", "hey")
    monkeypatch.setenv("MODEL_ID", "custom-model")
    cfg = RelaySettings()
    assert cfg.wake_word == "hey"
    assert cfg.model_id == "custom-model"


def test_default_persona_has_name_placeholder():
    template = load_system_prompt()
    assert "[name]" in template
    assert "Alice" in render_system_prompt(template, "Alice")
    assert "[name]" not in render_system_prompt(template, "Alice")


def test_empty_placeholder_leaves_template_unchanged():
    assert render_system_prompt("abc", "Al", "") == "abc"


def test_orchestrator_config_from_settings():
    cfg = RelaySettings(persona_prompt="Hi [name]", source_url="https://src.example")
    built = build_orchestrator_config(cfg)
    assert built.persona_prompt == "Hi [name]"
    assert built.source_url == "https://src.example"
    assert built.placeholder_text == "💭"
