from __future__ import annotations
from typing import Optional


class RefSenseError(Exception):
    pass


class ValidationError(RefSenseError):
    pass


class BackendError(RefSenseError):
    retryable = False


class NetworkError(BackendError):
    retryable = True


class BackendTimeoutError(NetworkError):
    pass


class AuthError(BackendError):
    pass


class UpstreamError(BackendError):
    """Non-2xx status or a response body that does not have the expected shape."""

    INVALID_SHAPE = "invalid response shape"

    def __init__(self, status: Optional[int], body: str = ""):
        self.status = status
        self.body = body
        prefix = f"HTTP {status}" if status is not None else "Upstream error"
        super().__init__(f"{prefix}: {body[:1200]}" if body else prefix)

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        if self.status is None:
            return False
        return self.status == 429 or self.status >= 500


class ResponseParseError(RefSenseError):
    pass


class NoJsonFoundError(ResponseParseError):
    pass


class MalformedJsonError(ResponseParseError):
    pass
