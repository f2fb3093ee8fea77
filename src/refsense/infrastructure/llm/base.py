from __future__ import annotations
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class BackendClient(Protocol):
    """Anything that can turn a prompt into the model's raw text output."""

    async def send(self, prompt: str, *, timeout: Optional[float] = None) -> str:
        ...

    def close(self) -> None:
        """Release transport resources the client opened itself."""
        ...
