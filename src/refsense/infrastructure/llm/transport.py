"""Blocking HTTP helpers shared by the backend clients.

These run inside a worker thread (see ``asyncio.to_thread`` in the clients)
and translate transport failures and HTTP statuses into the backend error
taxonomy.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from .exceptions import (
    AuthError,
    BackendTimeoutError,
    NetworkError,
    UpstreamError,
)

AUTH_STATUS_CODES = (401, 403)


def error_message(r: requests.Response) -> str:
    # OpenAI style: {"error": {"message": "..."}}; Ollama style: {"error": "..."}
    try:
        data = r.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err:
            return err
    return r.text[:500] if r.text else (r.reason or "")


def request_json(
    session: requests.Session,
    method: str,
    url: str,
    *,
    payload: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    try:
        r = session.request(method, url, json=payload, headers=headers, timeout=timeout)
    except requests.Timeout as e:
        raise BackendTimeoutError(f"Timeout calling {url}") from e
    except requests.RequestException as e:
        raise NetworkError(f"Network error calling {url}: {e}") from e

    if r.status_code in AUTH_STATUS_CODES:
        raise AuthError(f"HTTP {r.status_code}: {error_message(r)}")
    if r.status_code >= 400:
        raise UpstreamError(r.status_code, error_message(r))

    try:
        data = r.json()
    except ValueError as e:
        raise UpstreamError(r.status_code, UpstreamError.INVALID_SHAPE) from e
    if not isinstance(data, dict):
        raise UpstreamError(r.status_code, UpstreamError.INVALID_SHAPE)
    return data
