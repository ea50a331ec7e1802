"""HTTP client for a remote panel ``/config`` endpoint."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from ..exceptions import ConfigError

logger = logging.getLogger(__name__)


class ConfigClient:
    """Fetches the device controller URL published by a panel server."""

    def __init__(self, config_url: str, *, timeout: float = 10.0) -> None:
        self.config_url = config_url
        self._client = httpx.AsyncClient(timeout=timeout)

    async def fetch_ws_url(self) -> str:
        try:
            resp = await self._client.get(self.config_url)
            resp.raise_for_status()
            data: Any = resp.json()
        except httpx.HTTPError as exc:
            raise ConfigError(f"Config request to {self.config_url} failed: {exc}") from exc
        except ValueError as exc:
            raise ConfigError(f"Config response from {self.config_url} is not JSON") from exc

        ws_url = data.get("wsUrl") if isinstance(data, dict) else None
        if not isinstance(ws_url, str) or not ws_url:
            logger.error("Config response missing wsUrl: %s", data)
            raise ConfigError("Config response missing wsUrl")
        logger.info("Using WebSocket URL: %s", ws_url)
        return ws_url

    async def aclose(self) -> None:
        await self._client.aclose()
