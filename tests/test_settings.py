import os

import pytest

from refsense.config.settings import (
    EnvSettingsProvider,
    Settings,
    config_from_settings,
    validate_settings,
)
from refsense.domain.models import CloudConfig, LocalConfig
from refsense.infrastructure.llm.exceptions import ValidationError


def provider(**env):
    return EnvSettingsProvider(environ=env)


def test_defaults_to_cloud():
    config = config_from_settings(provider(OPENAI_API_KEY="sk-abc"))

    assert isinstance(config, CloudConfig)
    assert config.api_key == "sk-abc"
    assert config.model == "gpt-4-turbo"


def test_local_from_env():
    config = config_from_settings(
        provider(REFSENSE_BACKEND="ollama", OLLAMA_HOST="http://box:11434", REFSENSE_MODEL="mistral:7b")
    )

    assert isinstance(config, LocalConfig)
    assert config.host == "http://box:11434"
    assert config.model == "mistral:7b"
    assert config.timeout == 30.0


def test_local_defaults_follow_settings():
    settings = Settings(local_host="http://127.0.0.1:9999", local_model="phi3", local_timeout_sec=45.0)
    p = EnvSettingsProvider(environ={"REFSENSE_BACKEND": "local"}, settings=settings)
    config = config_from_settings(p, settings)

    assert config == LocalConfig(host="http://127.0.0.1:9999", model="phi3", timeout=45.0)


def test_blank_values_count_as_missing():
    p = provider(REFSENSE_BACKEND="  ", OPENAI_API_KEY="")
    assert p.get_backend_kind() == "cloud"
    assert p.get_credential() is None


def test_unknown_backend_is_a_validation_error():
    with pytest.raises(ValidationError):
        config_from_settings(provider(REFSENSE_BACKEND="gemini"))


def test_validate_settings_cloud():
    result = validate_settings(provider())
    assert not result.valid
    assert any("API key" in e for e in result.errors)
    assert result.warnings

    ok = validate_settings(provider(OPENAI_API_KEY="sk-x", REFSENSE_MODEL="gpt-4o"))
    assert ok.valid
    assert ok.warnings == []


def test_validate_settings_local_uses_default_host():
    p = provider(REFSENSE_BACKEND="local")
    result = validate_settings(p)

    assert p.get_host() == "http://localhost:11434"
    assert result.valid
    assert len(result.warnings) == 1


class StaticProvider:
    def __init__(self, kind="local", credential=None, model="llama3.2:latest", host=None):
        self.kind, self.credential, self.model, self.host = kind, credential, model, host

    def get_backend_kind(self):
        return self.kind

    def get_credential(self):
        return self.credential

    def get_model_name(self):
        return self.model

    def get_host(self):
        return self.host


def test_missing_ollama_host_is_an_error():
    result = validate_settings(StaticProvider(host=None))
    assert not result.valid
    assert result.errors == ["Ollama host is not set."]


def test_blank_ollama_host_is_an_error():
    p = provider(REFSENSE_BACKEND="local", OLLAMA_HOST="  ")
    assert p.get_host() is None
    assert not validate_settings(p).valid


def test_validate_settings_unknown_backend():
    result = validate_settings(provider(REFSENSE_BACKEND="gemini"))
    assert not result.valid


def test_env_provider_loads_dotenv(tmp_path, monkeypatch):
    monkeypatch.delenv("REFSENSE_MODEL", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("REFSENSE_MODEL=from-dotenv\n", encoding="utf-8")

    try:
        p = EnvSettingsProvider(dotenv_path=str(env_file))
        assert p.get_model_name() == "from-dotenv"
    finally:
        os.environ.pop("REFSENSE_MODEL", None)


def test_retry_policy_from_settings():
    policy = Settings(max_attempts=4, base_delay_sec=0.5).retry_policy
    assert policy.max_attempts == 4
    assert [policy.delay_for(i) for i in range(3)] == [0.5, 1.0, 2.0]
