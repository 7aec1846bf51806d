"""
In-memory registry of planning sessions for the HTTP adapter.

Each session keeps its own effective settings (after per-session overrides).
FastAPI runs sync endpoints on a threadpool, so all access goes through one lock;
planning operations are short and bounded.
"""

from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from flightplanner.config.settings import Settings
from flightplanner.planner.resources import PlannerResources
from flightplanner.planner.session import PlanningSession


class SessionNotFound(LookupError):
    pass


@dataclass
class SessionEntry:
    session: PlanningSession
    settings: Settings


class SessionRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, SessionEntry] = {}

    def create(self, resources: PlannerResources, settings: Settings) -> tuple[str, SessionEntry]:
        session_id = uuid.uuid4().hex
        entry = SessionEntry(
            session=PlanningSession(resources=resources, snap_max_distance_km=settings.planner.snap_max_distance_km),
            settings=settings,
        )
        with self._lock:
            self._entries[session_id] = entry
        return session_id, entry

    @contextmanager
    def use(self, session_id: str) -> Iterator[SessionEntry]:
        """Hold the registry lock while operating on one session."""
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                raise SessionNotFound(session_id)
            yield entry

    def discard(self, session_id: str) -> bool:
        with self._lock:
            return self._entries.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._entries)
