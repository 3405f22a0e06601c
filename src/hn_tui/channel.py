from __future__ import annotations

import queue
from typing import List

from .datamodels import ProgressEvent


class ProgressChannel:
    """FIFO conduit from fetch workers to the UI loop.

    ``send`` is safe to call from any thread. ``drain`` is only called by
    the UI loop and never blocks.
    """

    def __init__(self) -> None:
        self._queue: "queue.SimpleQueue[ProgressEvent]" = queue.SimpleQueue()

    def send(self, event: ProgressEvent) -> None:
        self._queue.put(event)

    def drain(self) -> List[ProgressEvent]:
        events: List[ProgressEvent] = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def __len__(self) -> int:
        return self._queue.qsize()
