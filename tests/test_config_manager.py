"""Tests for configuration loading."""
import pytest

from staff_feedback.config.config_manager import ConfigManager, ConfigurationError


def test_defaults(env_config):
    config = ConfigManager()

    assert config.get_supabase_url() == "https://example.supabase.co"
    assert config.get_staff_table() == "dados_professores"
    assert config.get_feedback_table() == "feedback_professores"
    assert config.get_request_timeout() == 30.0
    assert config.get_mirror_backend() == "none"
    assert config.is_auth_required() is False
    assert config.get_anonymous_identity() == ("anonymous", "Anonymous")
    assert config.get_form_session_limit() == 500
    assert config.get_form_session_ttl() == 3600.0


def test_missing_required_variable(env_config, monkeypatch):
    monkeypatch.delenv("SUPABASE_KEY")

    with pytest.raises(ConfigurationError, match="SUPABASE_KEY"):
        ConfigManager()


def test_invalid_timeout(env_config, monkeypatch):
    monkeypatch.setenv("REQUEST_TIMEOUT", "soon")

    with pytest.raises(ConfigurationError, match="REQUEST_TIMEOUT"):
        ConfigManager()


def test_webhook_backend_requires_url(env_config, monkeypatch):
    monkeypatch.setenv("MIRROR_BACKEND", "webhook")

    with pytest.raises(ConfigurationError, match="MIRROR_WEBHOOK_URL"):
        ConfigManager()


def test_unknown_backend(env_config, monkeypatch):
    monkeypatch.setenv("MIRROR_BACKEND", "csv")

    with pytest.raises(ConfigurationError):
        ConfigManager()


def test_require_auth_flag(env_config, monkeypatch):
    monkeypatch.setenv("REQUIRE_AUTH", "True")

    assert ConfigManager().is_auth_required() is True


def test_secrets_are_masked(env_config):
    masked = ConfigManager().get_all_config()

    assert masked["SUPABASE_KEY"] == "test...7890"
    assert "test-key-1234567890" not in masked.values()
