from __future__ import annotations
from typing import List, Optional

import requests

from ..config.settings import Settings
from ..domain.models import BackendConfig, CloudConfig, LocalConfig, ModelInfo
from ..infrastructure.llm.cloud_client import CloudClient
from ..infrastructure.llm.local_client import LocalClient


class ConnectionService:
    """Advisory checks for settings screens. Never raises on backend failure."""

    def __init__(self, settings: Settings = Settings(), session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session

    async def test(self, config: BackendConfig) -> bool:
        if isinstance(config, CloudConfig):
            cloud = CloudClient(config, session=self.session)
            try:
                return await cloud.validate_api_key(timeout=self.settings.probe_timeout_sec)
            finally:
                cloud.close()
        local = LocalClient(config, session=self.session)
        try:
            return await local.is_reachable(timeout=self.settings.probe_timeout_sec)
        finally:
            local.close()

    async def list_models(self, config: LocalConfig) -> List[ModelInfo]:
        client = LocalClient(config, session=self.session)
        try:
            return await client.list_models(timeout=self.settings.probe_timeout_sec)
        finally:
            client.close()
