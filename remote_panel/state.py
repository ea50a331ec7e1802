"""Shared panel state definitions."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class ConnectionState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    ERRORED = "errored"


class RecordingState(str, enum.Enum):
    IDLE = "idle"
    RECORDING = "recording"


class IndicatorState(str, enum.Enum):
    ON = "on"
    OFF = "off"
    UNKNOWN = "unknown"


_CONNECTION_LABELS = {
    ConnectionState.DISCONNECTED: "Disconnected",
    ConnectionState.CONNECTED: "Connected",
    ConnectionState.ERRORED: "Error",
}


@dataclass(frozen=True)
class PanelView:
    """Snapshot of everything the browser page renders."""

    connection: ConnectionState
    indicator: IndicatorState
    recording: RecordingState
    countdown: str
    setup_error: Optional[str] = None

    @property
    def connection_label(self) -> str:
        if self.setup_error:
            return f"Connection Status: {self.setup_error}"
        return f"Connection Status: {_CONNECTION_LABELS[self.connection]}"

    @property
    def indicator_label(self) -> str:
        return f"LED Status: {self.indicator.value.upper()}"

    @property
    def recording_label(self) -> str:
        if self.recording is RecordingState.RECORDING:
            return "Status: Recording..."
        return "Status: Not Recording"

    @property
    def record_button_label(self) -> str:
        if self.recording is RecordingState.RECORDING:
            return "Stop Recording"
        return "Start Recording"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "connection": self.connection.value,
            "indicator": self.indicator.value,
            "recording": self.recording.value,
            "countdown": self.countdown,
            "setup_error": self.setup_error,
            "labels": {
                "connection": self.connection_label,
                "indicator": self.indicator_label,
                "recording": self.recording_label,
                "record_button": self.record_button_label,
            },
        }


@dataclass
class PanelEvent:
    """Event payload distributed to browser tabs over the UI WebSocket."""

    type: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "data": self.data}


__all__ = ["ConnectionState", "RecordingState", "IndicatorState", "PanelView", "PanelEvent"]
