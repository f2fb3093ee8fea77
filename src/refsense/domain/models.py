from __future__ import annotations
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

DEFAULT_CONFIDENCE = 0.8


class BackendKind(str, Enum):
    CLOUD = "cloud"
    LOCAL = "local"

    @classmethod
    def parse(cls, value: Union[str, "BackendKind"]) -> "BackendKind":
        if isinstance(value, BackendKind):
            return value
        v = (value or "").strip().lower()
        aliases = {"openai": cls.CLOUD, "ollama": cls.LOCAL}
        if v in aliases:
            return aliases[v]
        try:
            return cls(v)
        except ValueError:
            raise ValueError(f"Unknown backend kind: {value!r}") from None


@dataclass
class MetadataRecord:
    title: str = ""
    authors: List[str] = field(default_factory=list)
    year: Optional[int] = None
    journal: str = ""
    volume: str = ""
    issue: str = ""
    pages: str = ""
    doi: str = ""
    abstract: str = ""
    keywords: List[str] = field(default_factory=list)
    confidence: float = DEFAULT_CONFIDENCE

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0  # seconds

    def delay_for(self, attempt_index: int) -> float:
        return self.base_delay * (2 ** attempt_index)


@dataclass(frozen=True)
class SamplingOptions:
    temperature: float = 0.1
    top_p: float = 0.9
    num_predict: int = 1000


@dataclass(frozen=True)
class CloudConfig:
    api_key: Optional[str]
    model: str = "gpt-4-turbo"
    endpoint: str = "https://api.openai.com/v1/chat/completions"
    models_endpoint: Optional[str] = None  # derived from endpoint when unset
    max_output_tokens: int = 1000
    temperature: float = 0.1
    json_mode: bool = True
    timeout: Optional[float] = None  # transport default

    @property
    def kind(self) -> BackendKind:
        return BackendKind.CLOUD


@dataclass(frozen=True)
class LocalConfig:
    host: str = "http://localhost:11434"
    model: str = "llama3.2:latest"
    options: SamplingOptions = field(default_factory=SamplingOptions)
    timeout: Optional[float] = 30.0

    @property
    def kind(self) -> BackendKind:
        return BackendKind.LOCAL


BackendConfig = Union[CloudConfig, LocalConfig]


@dataclass
class ModelInfo:
    name: str
    size: Optional[int] = None
    modified_at: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_tag(cls, entry: Dict[str, Any]) -> "ModelInfo":
        details = entry.get("details")
        return cls(
            name=str(entry.get("name") or entry.get("model") or ""),
            size=entry.get("size") if isinstance(entry.get("size"), int) else None,
            modified_at=entry.get("modified_at"),
            details=details if isinstance(details, dict) else {},
        )
