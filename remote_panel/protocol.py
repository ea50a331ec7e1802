"""JSON frames exchanged with the device controller."""
from __future__ import annotations

import enum
import json
import logging
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from .exceptions import FrameDecodeError

logger = logging.getLogger(__name__)

INITIAL_STATUS = "initial_status"
UPDATE_STATUS = "update_status"

LED_ON = "on"
RECORDING = "recording"


class Command(str, enum.Enum):
    TOGGLE_LED = "toggle_led"
    START_RECORD = "start_record"
    STOP_RECORD = "stop_record"


class _Frame(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class DeviceStatus(_Frame):
    led: Optional[Any] = None
    record: Optional[Any] = None

    @property
    def led_on(self) -> bool:
        return self.led == LED_ON

    @property
    def recording(self) -> bool:
        return self.record == RECORDING


class InitialStatusFrame(_Frame):
    """Full device state, sent by the controller right after connecting."""

    type: str = INITIAL_STATUS
    state: DeviceStatus


class UpdateStatusFrame(_Frame):
    """Change to a single component, optionally with a message for the user."""

    type: str = UPDATE_STATUS
    component: Optional[Any] = None
    value: Optional[Any] = None
    msg: Optional[Any] = None


StatusFrame = Union[InitialStatusFrame, UpdateStatusFrame]

_FRAME_TYPES = {
    INITIAL_STATUS: InitialStatusFrame,
    UPDATE_STATUS: UpdateStatusFrame,
}


def decode_status_frame(raw: Union[str, bytes]) -> Optional[StatusFrame]:
    """Parse one inbound frame.

    Returns ``None`` for frame types the panel does not understand. Raises
    :class:`FrameDecodeError` when the text is not a JSON object or a known
    frame type is missing fields.
    """

    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise FrameDecodeError(f"Invalid JSON frame: {exc}", raw) from exc
    if not isinstance(payload, dict):
        raise FrameDecodeError(f"Expected a JSON object, got {type(payload).__name__}", raw)

    frame_type = payload.get("type")
    model = _FRAME_TYPES.get(frame_type) if isinstance(frame_type, str) else None
    if model is None:
        logger.debug("Ignoring frame with unrecognised type %r", frame_type)
        return None
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise FrameDecodeError(f"Malformed {frame_type} frame: {exc.error_count()} error(s)", raw) from exc


def encode_command(command: Command) -> str:
    return json.dumps({"command": Command(command).value})


__all__ = [
    "Command",
    "DeviceStatus",
    "InitialStatusFrame",
    "UpdateStatusFrame",
    "StatusFrame",
    "decode_status_frame",
    "encode_command",
]
