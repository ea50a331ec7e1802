"""Startup sequence and UI wiring for the remote panel."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, List, Optional

from .backend.http_client import ConfigClient
from .backend.ws_client import Transport, WebSocketTransport
from .config import Settings, get_settings, require_ws_url
from .countdown import Countdown
from .exceptions import ConfigError
from .session_controller import Clock, SessionController
from .state import ConnectionState, IndicatorState, PanelEvent, PanelView, RecordingState
from .ui import NOT_CONNECTED_NOTICE, BroadcastUi

logger = logging.getLogger(__name__)

ConfigProvider = Callable[[], Awaitable[str]]
TransportFactory = Callable[[str], Transport]

SETUP_ERROR = "Error fetching config"

INTENT_TOGGLE_LED = "toggle_led"
INTENT_TOGGLE_RECORD = "toggle_record"


class SessionManager:
    """Acquires config, builds the transport and controller, then connects.

    Browser tabs subscribe through :meth:`register_ui` and send intents
    through :meth:`handle_intent`; all of them share the one controller.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        config_provider: Optional[ConfigProvider] = None,
        transport_factory: Optional[TransportFactory] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.settings = settings or get_settings()
        self._clock = clock
        self._config_client: Optional[ConfigClient] = None
        if config_provider is None:
            config_provider = self._default_config_provider()
        self._config_provider = config_provider
        self._transport_factory = transport_factory or self._websocket_transport
        self._setup_error: Optional[str] = None
        self._ui = BroadcastUi(self._placeholder_view(), queue_size=self.settings.ui_queue_size)
        self._controller: Optional[SessionController] = None
        self._background_tasks: List[asyncio.Task[Any]] = []

    @property
    def controller(self) -> Optional[SessionController]:
        return self._controller

    @property
    def setup_error(self) -> Optional[str]:
        return self._setup_error

    @property
    def view(self) -> PanelView:
        return self._ui.view

    async def start(self) -> None:
        logger.info("Starting session manager (environment=%s)", self.settings.environment)
        self._background_tasks.append(asyncio.create_task(self.bootstrap(), name="panel-bootstrap"))

    async def bootstrap(self) -> None:
        """Config, transport, controller, connect. A config failure is terminal."""

        try:
            ws_url = await self._config_provider()
        except ConfigError as exc:
            logger.error("Failed to fetch config: %s", exc)
            self._setup_error = SETUP_ERROR
            self._ui.render(self._placeholder_view())
            return
        finally:
            await self._close_config_client()

        transport = self._transport_factory(ws_url)
        self._controller = SessionController(
            transport,
            self._ui,
            record_cap_seconds=self.settings.record_cap_seconds,
            tick_interval=self.settings.tick_interval_seconds,
            reset_recording_on_disconnect=self.settings.reset_recording_on_disconnect,
            clock=self._clock,
        )
        await transport.connect(self._controller)

    async def stop(self) -> None:
        logger.info("Stopping session manager")
        for task in self._background_tasks:
            task.cancel()
        for task in self._background_tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("Background task %s failed", task.get_name())
        self._background_tasks.clear()
        if self._controller is not None:
            await self._controller.close()
            self._controller = None
        await self._close_config_client()

    def register_ui(self) -> asyncio.Queue[PanelEvent]:
        return self._ui.subscribe()

    def unregister_ui(self, queue: asyncio.Queue[PanelEvent]) -> None:
        self._ui.unsubscribe(queue)

    async def handle_intent(self, intent: Optional[str]) -> bool:
        """Route a click from the page; returns True when a command was sent."""

        if intent not in (INTENT_TOGGLE_LED, INTENT_TOGGLE_RECORD):
            logger.warning("Unknown intent from panel: %r", intent)
            return False
        if self._controller is None:
            self._ui.notify(NOT_CONNECTED_NOTICE, blocking=True)
            return False
        if intent == INTENT_TOGGLE_LED:
            return await self._controller.toggle_indicator()
        return await self._controller.toggle_recording()

    def _placeholder_view(self) -> PanelView:
        return PanelView(
            connection=ConnectionState.DISCONNECTED,
            indicator=IndicatorState.UNKNOWN,
            recording=RecordingState.IDLE,
            countdown=Countdown(self.settings.record_cap_seconds).idle_text,
            setup_error=self._setup_error,
        )

    def _default_config_provider(self) -> ConfigProvider:
        if self.settings.config_url:
            self._config_client = ConfigClient(self.settings.config_url)
            return self._config_client.fetch_ws_url

        async def from_settings() -> str:
            ws_url = require_ws_url(self.settings)
            logger.info("Using WebSocket URL: %s", ws_url)
            return ws_url

        return from_settings

    def _websocket_transport(self, url: str) -> Transport:
        return WebSocketTransport(
            url,
            ping_interval=self.settings.ws_ping_interval,
            ping_timeout=self.settings.ws_ping_timeout,
        )

    async def _close_config_client(self) -> None:
        client, self._config_client = self._config_client, None
        if client is not None:
            await client.aclose()


__all__ = ["SessionManager", "SETUP_ERROR", "INTENT_TOGGLE_LED", "INTENT_TOGGLE_RECORD"]
