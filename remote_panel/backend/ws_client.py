"""Device controller WebSocket transport."""
from __future__ import annotations

import asyncio
import enum
import logging
from typing import Optional, Protocol, Union

import websockets
from websockets.asyncio.client import ClientConnection
from websockets.asyncio.client import connect as ws_connect

from ..exceptions import NotConnectedError

logger = logging.getLogger(__name__)

Message = Union[str, bytes]


class TransportHandler(Protocol):
    """Callbacks a transport drives; implemented by the session controller."""

    async def on_open(self) -> None: ...

    async def on_message(self, data: Message) -> None: ...

    async def on_close(self) -> None: ...

    async def on_error(self, exc: BaseException) -> None: ...


class Transport(Protocol):
    @property
    def is_open(self) -> bool: ...

    async def connect(self, handler: TransportHandler) -> None: ...

    async def send(self, text: str) -> None: ...

    async def close(self) -> None: ...


class TransportPhase(str, enum.Enum):
    CLOSED = "closed"
    OPENING = "opening"
    OPEN = "open"


class WebSocketTransport:
    """Single outbound connection to the device controller.

    Each connection runs ``closed -> opening -> open -> closed`` once. There is
    no reconnection: a dropped socket stays closed until a new transport is
    built.
    """

    def __init__(
        self,
        url: str,
        *,
        ping_interval: Optional[float] = 20.0,
        ping_timeout: Optional[float] = 20.0,
        open_timeout: Optional[float] = 10.0,
    ) -> None:
        self.url = url
        self._ping_interval = ping_interval
        self._ping_timeout = ping_timeout
        self._open_timeout = open_timeout
        self._conn: Optional[ClientConnection] = None
        self._listener_task: Optional[asyncio.Task[None]] = None
        self._phase = TransportPhase.CLOSED

    @property
    def phase(self) -> TransportPhase:
        return self._phase

    @property
    def is_open(self) -> bool:
        return self._phase is TransportPhase.OPEN

    async def connect(self, handler: TransportHandler) -> None:
        if self._phase is not TransportPhase.CLOSED:
            raise RuntimeError(f"Transport already {self._phase.value}")
        logger.info("Connecting to device websocket %s", self.url)
        self._phase = TransportPhase.OPENING
        try:
            self._conn = await ws_connect(
                self.url,
                ping_interval=self._ping_interval,
                ping_timeout=self._ping_timeout,
                open_timeout=self._open_timeout,
            )
        except asyncio.CancelledError:
            self._phase = TransportPhase.CLOSED
            raise
        except (OSError, ValueError, asyncio.TimeoutError, websockets.WebSocketException) as exc:
            self._phase = TransportPhase.CLOSED
            logger.error("Device websocket connection failed: %s", exc)
            await handler.on_error(exc)
            return

        self._phase = TransportPhase.OPEN
        logger.info("Connected to device websocket")
        await handler.on_open()
        self._listener_task = asyncio.create_task(self._listen(handler), name="device-ws-listener")

    async def close(self) -> None:
        task, self._listener_task = self._listener_task, None
        if task and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self._close_connection()

    async def send(self, text: str) -> None:
        if not self.is_open or self._conn is None:
            raise NotConnectedError("Device websocket not connected")
        try:
            await self._conn.send(text)
        except websockets.ConnectionClosed as exc:
            raise NotConnectedError(f"Device websocket closed during send: {exc}") from exc

    async def _listen(self, handler: TransportHandler) -> None:
        assert self._conn is not None
        error: Optional[BaseException] = None
        try:
            async for message in self._conn:
                await handler.on_message(message)
        except asyncio.CancelledError:
            raise
        except websockets.ConnectionClosedError as exc:
            logger.warning("Device websocket closed: %s", exc)
            error = exc
        except Exception as exc:
            logger.exception("Device websocket listener crashed")
            error = exc
        else:
            logger.info("Device websocket closed cleanly")
        self._listener_task = None
        await self._close_connection()
        if error is not None:
            await handler.on_error(error)
        else:
            await handler.on_close()

    async def _close_connection(self) -> None:
        self._phase = TransportPhase.CLOSED
        conn, self._conn = self._conn, None
        if conn is not None:
            await conn.close()


__all__ = ["Message", "Transport", "TransportHandler", "TransportPhase", "WebSocketTransport"]
