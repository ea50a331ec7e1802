"""Recording countdown arithmetic and formatting."""
from __future__ import annotations

import math
from typing import Optional


def format_clock(seconds: int) -> str:
    minutes, secs = divmod(max(int(seconds), 0), 60)
    return f"{minutes:02d}:{secs:02d}"


class Countdown:
    """Elapsed-time tracker for one recording, capped at ``cap_seconds``.

    The instance is inert until :meth:`start`; :meth:`reset` returns it to
    that state. ``stop_requested`` latches once the cap has triggered the
    automatic stop so the request is only made once per recording.
    """

    def __init__(self, cap_seconds: int = 240) -> None:
        if cap_seconds <= 0:
            raise ValueError("cap_seconds must be positive")
        self.cap_seconds = cap_seconds
        self._started_at: Optional[float] = None
        self.stop_requested = False

    @property
    def running(self) -> bool:
        return self._started_at is not None

    @property
    def cap_text(self) -> str:
        return format_clock(self.cap_seconds)

    @property
    def idle_text(self) -> str:
        return self.render(0)

    def start(self, now: float) -> None:
        self._started_at = now
        self.stop_requested = False

    def reset(self) -> None:
        self._started_at = None
        self.stop_requested = False

    def elapsed(self, now: float) -> int:
        if self._started_at is None:
            return 0
        return max(math.floor(now - self._started_at), 0)

    def reached_cap(self, elapsed: int) -> bool:
        return elapsed >= self.cap_seconds

    def render(self, elapsed: int) -> str:
        shown = min(elapsed, self.cap_seconds)
        return f"{format_clock(shown)} / {self.cap_text}"


__all__ = ["Countdown", "format_clock"]
