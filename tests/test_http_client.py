"""ConfigClient request handling and validation of the /config payload."""
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from remote_panel.backend.http_client import ConfigClient
from remote_panel.exceptions import ConfigError


@pytest.fixture
def client():
    """Create a ConfigClient with a mocked httpx.AsyncClient."""
    with patch("remote_panel.backend.http_client.httpx.AsyncClient") as mock_cls:
        mock_http = MagicMock()
        mock_http.get = AsyncMock()
        mock_http.aclose = AsyncMock()
        mock_cls.return_value = mock_http
        config = ConfigClient("http://panel.test/config")
        config._mock_http = mock_http
        yield config


def respond(mock_http, payload=None, *, json_error=None):
    resp = MagicMock()
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    mock_http.get.return_value = resp
    return resp


@pytest.mark.asyncio
class TestFetchWsUrl:
    async def test_returns_ws_url(self, client):
        resp = respond(client._mock_http, {"wsUrl": "ws://device.test"})

        assert await client.fetch_ws_url() == "ws://device.test"
        client._mock_http.get.assert_awaited_once_with("http://panel.test/config")
        resp.raise_for_status.assert_called_once()

    @pytest.mark.parametrize("payload", [{}, {"wsUrl": None}, {"wsUrl": ""}, {"wsUrl": 42}, ["ws://x"]])
    async def test_unusable_payload(self, client, payload):
        respond(client._mock_http, payload)

        with pytest.raises(ConfigError):
            await client.fetch_ws_url()

    async def test_non_json_body(self, client):
        respond(client._mock_http, json_error=ValueError("Expecting value"))

        with pytest.raises(ConfigError, match="not JSON"):
            await client.fetch_ws_url()

    async def test_transport_error(self, client):
        client._mock_http.get.side_effect = httpx.ConnectError("refused")

        with pytest.raises(ConfigError, match="failed"):
            await client.fetch_ws_url()

    async def test_http_status_error(self, client):
        resp = respond(client._mock_http, {"wsUrl": "ws://device.test"})
        resp.raise_for_status.side_effect = httpx.HTTPStatusError(
            "500", request=MagicMock(), response=MagicMock()
        )

        with pytest.raises(ConfigError):
            await client.fetch_ws_url()


@pytest.mark.asyncio
async def test_aclose_closes_http_client(client):
    await client.aclose()
    client._mock_http.aclose.assert_awaited_once()
