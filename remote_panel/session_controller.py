"""Device session: connection state, status frames, commands and the recording countdown."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from .backend.ws_client import Message, Transport
from .countdown import Countdown
from .exceptions import FrameDecodeError, NotConnectedError
from .protocol import (
    Command,
    InitialStatusFrame,
    UpdateStatusFrame,
    LED_ON,
    RECORDING,
    decode_status_frame,
    encode_command,
)
from .state import ConnectionState, IndicatorState, PanelView, RecordingState
from .ui import NOT_CONNECTED_NOTICE, UiSink

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class SessionController:
    """Owns one device connection and everything the panel derives from it.

    Recording state only changes in response to status frames from the device
    (or the optional reset on disconnect); clicks merely send commands and wait
    for the device to report back.
    """

    def __init__(
        self,
        transport: Transport,
        ui: UiSink,
        *,
        record_cap_seconds: int = 240,
        tick_interval: float = 1.0,
        reset_recording_on_disconnect: bool = True,
        clock: Clock = time.monotonic,
    ) -> None:
        self._transport = transport
        self._ui = ui
        self._countdown = Countdown(record_cap_seconds)
        self._tick_interval = tick_interval
        self._reset_recording_on_disconnect = reset_recording_on_disconnect
        self._clock = clock

        self._connection = ConnectionState.DISCONNECTED
        self._indicator = IndicatorState.UNKNOWN
        self._recording = RecordingState.IDLE
        self._countdown_text = self._countdown.idle_text
        self._tick_task: Optional[asyncio.Task[None]] = None

    @property
    def connection(self) -> ConnectionState:
        return self._connection

    @property
    def indicator(self) -> IndicatorState:
        return self._indicator

    @property
    def recording(self) -> RecordingState:
        return self._recording

    @property
    def countdown_text(self) -> str:
        return self._countdown_text

    @property
    def countdown_active(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    def view(self) -> PanelView:
        return PanelView(
            connection=self._connection,
            indicator=self._indicator,
            recording=self._recording,
            countdown=self._countdown_text,
        )

    # -- transport callbacks -------------------------------------------------

    async def on_open(self) -> None:
        logger.info("Connected to device controller")
        self._connection = ConnectionState.CONNECTED
        self._indicator = IndicatorState.UNKNOWN
        self._publish()

    async def on_close(self) -> None:
        logger.info("Disconnected from device controller")
        self._connection_lost(ConnectionState.DISCONNECTED)

    async def on_error(self, exc: BaseException) -> None:
        logger.error("Device connection error: %s", exc)
        self._connection_lost(ConnectionState.ERRORED)

    async def on_message(self, data: Message) -> None:
        logger.debug("Message from device: %s", data)
        try:
            frame = decode_status_frame(data)
        except FrameDecodeError as exc:
            logger.error("Error parsing message: %s", exc)
            return
        if isinstance(frame, InitialStatusFrame):
            self._apply_initial_status(frame)
        elif isinstance(frame, UpdateStatusFrame):
            self._apply_update_status(frame)

    # -- user intents --------------------------------------------------------

    async def toggle_indicator(self) -> bool:
        if not self._require_connection():
            return False
        return await self._send(Command.TOGGLE_LED)

    async def toggle_recording(self) -> bool:
        if not self._require_connection():
            return False
        if self._recording is RecordingState.RECORDING:
            return await self._send(Command.STOP_RECORD)
        return await self._send(Command.START_RECORD)

    # -- countdown -----------------------------------------------------------

    async def tick(self) -> None:
        """Refresh the countdown; request a stop once the cap is reached."""

        if not self._countdown.running:
            return
        elapsed = self._countdown.elapsed(self._clock())
        self._countdown_text = self._countdown.render(elapsed)
        self._publish()
        if self._countdown.reached_cap(elapsed) and not self._countdown.stop_requested:
            # the device's status update is what ends the recording
            self._countdown.stop_requested = True
            logger.info("Recording reached %ss cap; requesting stop", self._countdown.cap_seconds)
            if self._connection is ConnectionState.CONNECTED:
                await self._send(Command.STOP_RECORD, notify=False)
            else:
                logger.warning("Recording cap reached while disconnected; stop not sent")

    async def close(self) -> None:
        """Tear down the tick task and the transport."""

        task = self._cancel_tick()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self._transport.close()

    # -- internals -----------------------------------------------------------

    def _apply_initial_status(self, frame: InitialStatusFrame) -> None:
        self._indicator = IndicatorState.ON if frame.state.led_on else IndicatorState.OFF
        self._set_recording(frame.state.recording)
        self._publish()

    def _apply_update_status(self, frame: UpdateStatusFrame) -> None:
        if frame.component == "led":
            self._indicator = IndicatorState.ON if frame.value == LED_ON else IndicatorState.OFF
        elif frame.component == "record":
            self._set_recording(frame.value == RECORDING)
        else:
            logger.warning("Unknown component in update_status: %s", frame.component)
            return
        self._publish()
        if frame.msg:
            self._ui.notify(str(frame.msg), blocking=True)

    def _set_recording(self, recording: bool) -> None:
        if recording:
            if self._recording is not RecordingState.RECORDING or not self.countdown_active:
                self._start_countdown()
            self._recording = RecordingState.RECORDING
        else:
            self._recording = RecordingState.IDLE
            self._stop_countdown()

    def _start_countdown(self) -> None:
        self._cancel_tick()
        self._countdown.start(self._clock())
        self._countdown_text = self._countdown.render(0)
        self._tick_task = asyncio.create_task(self._run_ticks(), name="recording-countdown")

    def _stop_countdown(self) -> None:
        self._cancel_tick()
        self._countdown.reset()
        self._countdown_text = self._countdown.idle_text

    def _cancel_tick(self) -> Optional[asyncio.Task[None]]:
        task, self._tick_task = self._tick_task, None
        if task is None or task.done():
            return None
        task.cancel()
        # a tick that ends the recording cannot wait on itself
        if task is asyncio.current_task():
            return None
        return task

    async def _run_ticks(self) -> None:
        while True:
            await asyncio.sleep(self._tick_interval)
            await self.tick()

    def _connection_lost(self, state: ConnectionState) -> None:
        self._connection = state
        self._indicator = IndicatorState.UNKNOWN
        if self._reset_recording_on_disconnect:
            self._recording = RecordingState.IDLE
            self._stop_countdown()
        self._publish()

    def _require_connection(self) -> bool:
        if self._connection is ConnectionState.CONNECTED:
            return True
        logger.info("Rejecting intent while %s", self._connection.value)
        self._ui.notify(NOT_CONNECTED_NOTICE, blocking=True)
        return False

    async def _send(self, command: Command, *, notify: bool = True) -> bool:
        try:
            await self._transport.send(encode_command(command))
        except NotConnectedError as exc:
            logger.warning("Dropping %s: %s", command.value, exc)
            if notify:
                self._ui.notify(NOT_CONNECTED_NOTICE, blocking=True)
            return False
        logger.info("Sent %s", command.value)
        return True

    def _publish(self) -> None:
        self._ui.render(self.view())


__all__ = ["SessionController"]
