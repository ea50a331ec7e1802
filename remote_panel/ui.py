"""Fan-out of panel events to connected browser tabs."""
from __future__ import annotations

import asyncio
import logging
from asyncio import QueueEmpty
from typing import List, Protocol

from .state import PanelEvent, PanelView

logger = logging.getLogger(__name__)

NOT_CONNECTED_NOTICE = "Not connected to the server"


class UiSink(Protocol):
    """Where the session controller publishes what the page should show."""

    def render(self, view: PanelView) -> None: ...

    def notify(self, message: str, *, blocking: bool = False) -> None: ...


class BroadcastUi:
    """Keeps the latest view and pushes every change to subscriber queues.

    A slow tab never blocks the controller: when its queue is full the oldest
    event is dropped to make room.
    """

    def __init__(self, initial: PanelView, *, queue_size: int = 16) -> None:
        self._view = initial
        self._queue_size = queue_size
        self._subscribers: List[asyncio.Queue[PanelEvent]] = []

    @property
    def view(self) -> PanelView:
        return self._view

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue[PanelEvent]:
        queue: asyncio.Queue[PanelEvent] = asyncio.Queue(maxsize=self._queue_size)
        queue.put_nowait(self._state_event(self._view))
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[PanelEvent]) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    def render(self, view: PanelView) -> None:
        self._view = view
        self._broadcast(self._state_event(view))

    def notify(self, message: str, *, blocking: bool = False) -> None:
        logger.info("Notice for panel: %s", message)
        self._broadcast(PanelEvent(type="notice", data={"message": message, "blocking": blocking}))

    def _broadcast(self, event: PanelEvent) -> None:
        logger.debug("Broadcasting event: %s", event)
        for queue in list(self._subscribers):
            if queue.full():
                try:
                    queue.get_nowait()
                except QueueEmpty:
                    pass
            queue.put_nowait(event)

    @staticmethod
    def _state_event(view: PanelView) -> PanelEvent:
        return PanelEvent(type="state", data=view.to_dict())


__all__ = ["UiSink", "BroadcastUi", "NOT_CONNECTED_NOTICE"]
