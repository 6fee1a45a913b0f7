"""In-memory registry of game sessions, keyed by the id stored in the Flask session cookie."""

from __future__ import annotations

import logging
from collections import OrderedDict
from threading import Lock
from typing import Callable, Optional

from geoguess.services.rounds import RoundController

log = logging.getLogger(__name__)


class SessionRegistry:
    """
    Thread-safe map of session id -> :class:`RoundController`.

    Bounded: once ``max_sessions`` is reached the least recently used session is
    dropped. Nothing is persisted; a restart forgets every session.
    """

    def __init__(self, factory: Callable[[], RoundController], max_sessions: int = 1000):
        self._factory = factory
        self._max_sessions = max(1, int(max_sessions))
        self._controllers: "OrderedDict[str, RoundController]" = OrderedDict()
        self._lock = Lock()

    def get(self, session_id: str) -> Optional[RoundController]:
        with self._lock:
            controller = self._controllers.get(session_id)
            if controller is not None:
                self._controllers.move_to_end(session_id)
            return controller

    def get_or_create(self, session_id: str) -> RoundController:
        with self._lock:
            controller = self._controllers.get(session_id)
            if controller is not None:
                self._controllers.move_to_end(session_id)
                return controller

            controller = self._factory()
            self._controllers[session_id] = controller
            while len(self._controllers) > self._max_sessions:
                evicted, _ = self._controllers.popitem(last=False)
                log.debug("Evicted game session %s", evicted)
            log.debug("Created game session %s (%s active)", session_id, len(self._controllers))
            return controller

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._controllers.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._controllers)
