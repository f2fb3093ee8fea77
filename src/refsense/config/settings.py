from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from dotenv import load_dotenv

from ..domain.models import (
    BackendConfig,
    BackendKind,
    CloudConfig,
    LocalConfig,
    RetryPolicy,
)
from ..infrastructure.llm.exceptions import ValidationError


@dataclass(frozen=True)
class Settings:
    max_attempts: int = 3
    base_delay_sec: float = 1.0

    local_timeout_sec: float = 30.0
    probe_timeout_sec: float = 5.0

    cloud_model: str = "gpt-4-turbo"
    local_model: str = "llama3.2:latest"
    local_host: str = "http://localhost:11434"

    api_key_prefix: str = "sk-"
    api_key_min_length: int = 40

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.max_attempts, base_delay=self.base_delay_sec)


class SettingsProvider(Protocol):
    def get_backend_kind(self) -> str: ...

    def get_credential(self) -> Optional[str]: ...

    def get_model_name(self) -> Optional[str]: ...

    def get_host(self) -> Optional[str]: ...


class EnvSettingsProvider:
    """
    Reads backend settings from the environment (and a .env file, if any):
      REFSENSE_BACKEND  cloud | local (also: openai | ollama)
      OPENAI_API_KEY
      REFSENSE_MODEL
      OLLAMA_HOST       settings.local_host when unset; set-but-blank means "no host"
    """

    def __init__(
        self,
        dotenv_path: Optional[str] = None,
        environ=None,
        settings: Settings = Settings(),
    ):
        self.default_host = settings.local_host
        if environ is None:
            load_dotenv(dotenv_path)
            environ = os.environ
        self.environ = environ

    def _get(self, name: str) -> Optional[str]:
        v = self.environ.get(name)
        return v.strip() if v and v.strip() else None

    def get_backend_kind(self) -> str:
        return self._get("REFSENSE_BACKEND") or BackendKind.CLOUD.value

    def get_credential(self) -> Optional[str]:
        return self._get("OPENAI_API_KEY")

    def get_model_name(self) -> Optional[str]:
        return self._get("REFSENSE_MODEL")

    def get_host(self) -> Optional[str]:
        if "OLLAMA_HOST" not in self.environ:
            return self.default_host
        return self._get("OLLAMA_HOST")


def config_from_settings(
    provider: SettingsProvider, settings: Settings = Settings()
) -> BackendConfig:
    try:
        kind = BackendKind.parse(provider.get_backend_kind())
    except ValueError as e:
        raise ValidationError(str(e)) from e
    model = provider.get_model_name()
    if kind is BackendKind.CLOUD:
        return CloudConfig(
            api_key=provider.get_credential(),
            model=model or settings.cloud_model,
        )
    return LocalConfig(
        host=provider.get_host() or settings.local_host,
        model=model or settings.local_model,
        timeout=settings.local_timeout_sec,
    )


@dataclass
class SettingsValidation:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def validate_settings(provider: SettingsProvider) -> SettingsValidation:
    result = SettingsValidation()
    try:
        kind = BackendKind.parse(provider.get_backend_kind())
    except ValueError as e:
        result.errors.append(str(e))
        return result

    if kind is BackendKind.CLOUD:
        if not provider.get_credential():
            result.errors.append("OpenAI API key is not set.")
        if not provider.get_model_name():
            result.warnings.append("OpenAI model is not set; the default will be used.")
    else:
        if not provider.get_host():
            result.errors.append("Ollama host is not set.")
        if not provider.get_model_name():
            result.warnings.append("Ollama model is not set; the default will be used.")
    return result
