"""Exception types raised inside the remote panel."""
from __future__ import annotations


class PanelError(Exception):
    """Base class for panel failures."""


class ConfigError(PanelError):
    """The device controller URL could not be obtained or is unusable."""


class FrameDecodeError(PanelError, ValueError):
    """An inbound status frame is not valid JSON or does not match its type."""

    def __init__(self, message: str, raw: object = None) -> None:
        super().__init__(message)
        self.raw = raw


class NotConnectedError(PanelError, RuntimeError):
    """A frame was sent while the device connection is not open."""


__all__ = ["PanelError", "ConfigError", "FrameDecodeError", "NotConnectedError"]
