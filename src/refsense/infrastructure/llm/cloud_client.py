from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

import requests

from ...domain.models import CloudConfig, RetryPolicy
from .exceptions import AuthError, BackendError, UpstreamError
from .retry import Sleep, retry_async
from .transport import request_json

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/chat/completions"
PROBE_TIMEOUT_SEC = 5.0


def _looks_like_unsupported_format_error(msg: str) -> bool:
    m = msg.lower()
    needles = [
        "response_format",
        "json_object",
        "response format",
        "not supported with this model",
    ]
    return any(n in m for n in needles)


class CloudClient:
    """
    Client for an OpenAI-style chat completions endpoint.

    - text: POST {endpoint} with a single user message
    - key check: GET the models listing next to the chat endpoint
      (or config.models_endpoint)

    The request asks for ``response_format={"type": "json_object"}`` when
    ``config.json_mode`` is set. Models that reject it get the same request
    again without the format constraint.
    """

    def __init__(
        self,
        config: CloudConfig,
        retry: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.config = config
        self.retry = retry or RetryPolicy()
        self._owns_session = session is None
        self.session = session or requests.Session()
        self._sleep = sleep or asyncio.sleep

    def _headers_json(self, api_key: Optional[str] = None) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key or self.config.api_key}",
        }

    def _payload(self, prompt: str, json_mode: bool) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.config.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.config.max_output_tokens,
            "temperature": self.config.temperature,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload

    def _models_url(self) -> str:
        if self.config.models_endpoint:
            return self.config.models_endpoint
        # https://api.openai.com/v1/chat/completions -> https://api.openai.com/v1/models
        parts = urlsplit(self.config.endpoint)
        path = parts.path.rstrip("/")
        if path.endswith(CHAT_COMPLETIONS_PATH):
            path = path[: -len(CHAT_COMPLETIONS_PATH)]
        return urlunsplit((parts.scheme, parts.netloc, f"{path}/models", "", ""))

    # ---------- Public API ----------

    async def send(self, prompt: str, *, timeout: Optional[float] = None) -> str:
        if not self.config.api_key:
            raise AuthError("Missing OpenAI API key.")

        t = timeout if timeout is not None else self.config.timeout
        try:
            return await self._send_json_mode_aware(prompt, t)
        except asyncio.CancelledError:
            self.close()
            raise

    def close(self) -> None:
        # A session passed in by the caller is the caller's to close.
        if self._owns_session:
            self.session.close()

    async def _send_json_mode_aware(self, prompt: str, t: Optional[float]) -> str:
        try:
            return await self._send_with_retry(prompt, self.config.json_mode, t)
        except UpstreamError as e:
            if not (
                self.config.json_mode
                and e.status == 400
                and _looks_like_unsupported_format_error(e.body)
            ):
                raise
            logger.info(
                "Model %s rejected JSON response format; retrying without it",
                self.config.model,
            )
            return await self._send_with_retry(prompt, False, t)

    async def validate_api_key(
        self, api_key: Optional[str] = None, timeout: float = PROBE_TIMEOUT_SEC
    ) -> bool:
        key = api_key if api_key is not None else self.config.api_key
        if not key or not key.startswith("sk-"):
            return False
        try:
            await asyncio.to_thread(
                request_json,
                self.session,
                "GET",
                self._models_url(),
                headers=self._headers_json(key),
                timeout=timeout,
            )
        except BackendError as e:
            logger.debug("API key check failed: %s", e)
            return False
        return True

    # ---------- Core helpers ----------

    async def _send_with_retry(
        self, prompt: str, json_mode: bool, timeout: Optional[float]
    ) -> str:
        payload = self._payload(prompt, json_mode)
        return await retry_async(
            lambda: self._send_once(payload, timeout),
            self.retry,
            sleep=self._sleep,
            label=f"OpenAI {self.config.model}",
        )

    async def _send_once(self, payload: Dict[str, Any], timeout: Optional[float]) -> str:
        logger.debug("POST %s model=%s", self.config.endpoint, self.config.model)
        data = await asyncio.to_thread(
            request_json,
            self.session,
            "POST",
            self.config.endpoint,
            payload=payload,
            headers=self._headers_json(),
            timeout=timeout,
        )
        return self._extract_content(data)

    def _extract_content(self, resp: Dict[str, Any]) -> str:
        try:
            content = resp["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError(200, UpstreamError.INVALID_SHAPE) from e
        if not isinstance(content, str):
            raise UpstreamError(200, UpstreamError.INVALID_SHAPE)
        return content
