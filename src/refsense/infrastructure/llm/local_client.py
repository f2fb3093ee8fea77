from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from ...domain.models import LocalConfig, ModelInfo, RetryPolicy
from .exceptions import BackendError, UpstreamError
from .retry import Sleep, retry_async
from .transport import request_json

logger = logging.getLogger(__name__)

PROBE_TIMEOUT_SEC = 5.0


class LocalClient:
    """
    Client for a locally hosted Ollama server.
    Expected endpoints:
      - POST {host}/api/generate
      - GET  {host}/api/tags
    """

    def __init__(
        self,
        config: LocalConfig,
        retry: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.config = config
        self.host = config.host.rstrip("/")
        self.retry = retry or RetryPolicy()
        self._owns_session = session is None
        self.session = session or requests.Session()
        self._sleep = sleep or asyncio.sleep

    def _payload(self, prompt: str) -> Dict[str, Any]:
        opts = self.config.options
        return {
            "model": self.config.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": opts.temperature,
                "top_p": opts.top_p,
                "num_predict": opts.num_predict,
            },
        }

    async def send(self, prompt: str, *, timeout: Optional[float] = None) -> str:
        payload = self._payload(prompt)
        t = timeout if timeout is not None else self.config.timeout
        try:
            return await retry_async(
                lambda: self._send_once(payload, t),
                self.retry,
                sleep=self._sleep,
                label=f"Ollama {self.config.model}",
            )
        except asyncio.CancelledError:
            self.close()
            raise

    def close(self) -> None:
        # A session passed in by the caller is the caller's to close.
        if self._owns_session:
            self.session.close()

    async def _send_once(self, payload: Dict[str, Any], timeout: Optional[float]) -> str:
        url = f"{self.host}/api/generate"
        logger.debug("POST %s model=%s", url, self.config.model)
        data = await asyncio.to_thread(
            request_json, self.session, "POST", url, payload=payload, timeout=timeout
        )
        text = data.get("response")
        if not isinstance(text, str):
            raise UpstreamError(200, UpstreamError.INVALID_SHAPE)
        return text

    async def is_reachable(
        self, host: Optional[str] = None, timeout: float = PROBE_TIMEOUT_SEC
    ) -> bool:
        base = (host or self.host).rstrip("/")
        url = f"{base}/api/tags"
        try:
            r = await asyncio.to_thread(self.session.get, url, timeout=timeout)
        except requests.RequestException as e:
            logger.debug("Ollama not reachable at %s: %s", url, e)
            return False
        return r.status_code == 200

    async def list_models(
        self, host: Optional[str] = None, timeout: float = PROBE_TIMEOUT_SEC
    ) -> List[ModelInfo]:
        try:
            data = await self._tags(host, timeout)
        except BackendError as e:
            logger.debug("Could not list Ollama models: %s", e)
            return []
        models = data.get("models") or []
        if not isinstance(models, list):
            return []
        return [ModelInfo.from_tag(m) for m in models if isinstance(m, dict)]

    async def _tags(self, host: Optional[str], timeout: float) -> Dict[str, Any]:
        base = (host or self.host).rstrip("/")
        return await asyncio.to_thread(
            request_json, self.session, "GET", f"{base}/api/tags", timeout=timeout
        )
