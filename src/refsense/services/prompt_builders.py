from __future__ import annotations
from dataclasses import dataclass

from ..domain.models import BackendKind
from .prompts import (
    CLOUD_MAX_CHARS,
    CLOUD_METADATA_PROMPT,
    LOCAL_MAX_CHARS,
    LOCAL_METADATA_PROMPT,
)


@dataclass(frozen=True)
class PromptBuilder:
    template: str
    max_chars: int

    def build(self, text: str) -> str:
        if not isinstance(text, str):
            raise TypeError(f"text must be str, got {type(text).__name__}")
        return self.template.format(text=text[: self.max_chars])


CLOUD_PROMPT_BUILDER = PromptBuilder(CLOUD_METADATA_PROMPT, CLOUD_MAX_CHARS)
LOCAL_PROMPT_BUILDER = PromptBuilder(LOCAL_METADATA_PROMPT, LOCAL_MAX_CHARS)


def prompt_builder_for(kind: BackendKind) -> PromptBuilder:
    if kind is BackendKind.CLOUD:
        return CLOUD_PROMPT_BUILDER
    return LOCAL_PROMPT_BUILDER


def build_metadata_prompt(text: str, kind: BackendKind) -> str:
    return prompt_builder_for(kind).build(text)
