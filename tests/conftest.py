"""Shared fixtures: a scripted transport, a recording UI sink and a manual clock."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple, Union

import pytest
import pytest_asyncio

from remote_panel.config import Settings
from remote_panel.exceptions import NotConnectedError
from remote_panel.session_controller import SessionController
from remote_panel.state import PanelView


class FakeTransport:
    """In-memory stand-in for the device websocket."""

    def __init__(self, *, connect_error: Optional[BaseException] = None) -> None:
        self.connect_error = connect_error
        self.handler = None
        self.sent: List[Dict[str, Any]] = []
        self.closed = False
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    async def connect(self, handler) -> None:
        self.handler = handler
        if self.connect_error is not None:
            await handler.on_error(self.connect_error)
            return
        self._open = True
        await handler.on_open()

    async def send(self, text: str) -> None:
        if not self._open:
            raise NotConnectedError("fake transport closed")
        self.sent.append(json.loads(text))

    async def close(self) -> None:
        self._open = False
        self.closed = True

    async def deliver(self, frame: Union[str, Dict[str, Any]]) -> None:
        raw = frame if isinstance(frame, str) else json.dumps(frame)
        await self.handler.on_message(raw)

    async def drop(self, error: Optional[BaseException] = None) -> None:
        self._open = False
        if error is not None:
            await self.handler.on_error(error)
        else:
            await self.handler.on_close()

    @property
    def commands(self) -> List[str]:
        return [frame["command"] for frame in self.sent]


class RecordingUi:
    def __init__(self) -> None:
        self.views: List[PanelView] = []
        self.notices: List[Tuple[str, bool]] = []

    def render(self, view: PanelView) -> None:
        self.views.append(view)

    def notify(self, message: str, *, blocking: bool = False) -> None:
        self.notices.append((message, blocking))

    @property
    def last(self) -> PanelView:
        return self.views[-1]


class ManualClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def ui() -> RecordingUi:
    return RecordingUi()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="development",
        dev_websocket_url="ws://device.test/dev",
        prod_websocket_url="wss://device.test/prod",
        # ticks are driven by hand in tests
        tick_interval_seconds=3600.0,
    )


@pytest_asyncio.fixture
async def controller(transport: FakeTransport, ui: RecordingUi, clock: ManualClock):
    ctl = SessionController(transport, ui, tick_interval=3600.0, clock=clock)
    yield ctl
    await ctl.close()


@pytest_asyncio.fixture
async def connected(controller: SessionController, transport: FakeTransport) -> SessionController:
    await transport.connect(controller)
    return controller
