from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

import requests

from ..config.settings import Settings
from ..domain.models import BackendConfig, CloudConfig, MetadataRecord
from ..infrastructure.llm.base import BackendClient
from ..infrastructure.llm.exceptions import ResponseParseError, ValidationError
from ..infrastructure.llm.factory import client_for
from .prompt_builders import build_metadata_prompt
from .response_parser import parse_metadata_response

logger = logging.getLogger(__name__)

ClientFactory = Callable[[BackendConfig], BackendClient]


class MetadataExtractionService:
    """
    Turns raw paper text into a MetadataRecord using the backend named by the
    per-call config. Every call builds its own client; nothing is cached.

    Pass a ``session`` to share one connection pool across calls (the caller
    closes it). Without one, each call's client opens its own session and
    ``extract`` closes it before returning.
    """

    def __init__(
        self,
        settings: Settings = Settings(),
        client_factory: Optional[ClientFactory] = None,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings
        self.session = session
        self.client_factory = client_factory or self._default_client_factory

    def _default_client_factory(self, config: BackendConfig) -> BackendClient:
        return client_for(config, retry=self.settings.retry_policy, session=self.session)

    def validate(self, text: str, config: BackendConfig) -> None:
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Text is empty.")
        if isinstance(config, CloudConfig):
            key = config.api_key
            if not key:
                raise ValidationError("An OpenAI API key is required.")
            if (
                not key.startswith(self.settings.api_key_prefix)
                or len(key) < self.settings.api_key_min_length
            ):
                raise ValidationError("The OpenAI API key format is invalid.")

    async def extract(
        self, text: str, config: BackendConfig, *, timeout: Optional[float] = None
    ) -> MetadataRecord:
        self.validate(text, config)

        prompt = build_metadata_prompt(text, config.kind)
        client = self.client_factory(config)
        logger.info("Extracting metadata with %s backend (%s)", config.kind.value, config.model)

        try:
            raw = await client.send(prompt, timeout=timeout)
        finally:
            client.close()

        try:
            return parse_metadata_response(raw)
        except ResponseParseError as e:
            raise type(e)(f"Could not parse backend output: {e}") from e

    def extract_sync(
        self, text: str, config: BackendConfig, *, timeout: Optional[float] = None
    ) -> MetadataRecord:
        return asyncio.run(self.extract(text, config, timeout=timeout))
