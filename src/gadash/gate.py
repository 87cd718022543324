from __future__ import annotations

import logging
from collections import deque
from typing import Any, Protocol

LOGGER = logging.getLogger(__name__)


class Renderable(Protocol):
    def render(self) -> Any: ...


class RenderGate:
    """Defers renders until the reporting client is authorized.

    While pending, submitted requests are queued. ``mark_ready`` opens the gate once and
    replays the queue in submission order; afterwards every submit renders immediately.
    Not thread-safe: submit and mark_ready must run on the same thread.
    """

    def __init__(self) -> None:
        self._ready = False
        self._queue: deque[Renderable] = deque()

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def pending(self) -> int:
        return len(self._queue)

    def submit(self, request: Renderable) -> None:
        if self._ready:
            request.render()
            return
        self._queue.append(request)
        LOGGER.debug("Queued render until client is ready (pending=%d)", len(self._queue))

    def mark_ready(self) -> None:
        if self._ready:
            return
        self._ready = True
        LOGGER.info("Client ready; rendering %d queued request(s)", len(self._queue))
        while self._queue:
            request = self._queue.popleft()
            try:
                request.render()
            except Exception:
                LOGGER.exception("Queued render failed")
