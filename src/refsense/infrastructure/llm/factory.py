from __future__ import annotations
from typing import Optional

import requests

from ...domain.models import BackendConfig, CloudConfig, LocalConfig, RetryPolicy
from .base import BackendClient
from .cloud_client import CloudClient
from .local_client import LocalClient
from .retry import Sleep


def client_for(
    config: BackendConfig,
    retry: Optional[RetryPolicy] = None,
    session: Optional[requests.Session] = None,
    sleep: Optional[Sleep] = None,
) -> BackendClient:
    if isinstance(config, CloudConfig):
        return CloudClient(config, retry=retry, session=session, sleep=sleep)
    if isinstance(config, LocalConfig):
        return LocalClient(config, retry=retry, session=session, sleep=sleep)
    raise TypeError(f"Unsupported backend config: {type(config).__name__}")
