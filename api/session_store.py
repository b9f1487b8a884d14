"""
In-memory tracking store keyed by UUID.

Reference ``Store`` implementation for development and tests. Updates are
applied as field merges under a lock, so concurrent identifications of
the same session converge.
"""

import threading
import uuid
from typing import Any, Dict, List, Optional

from config.settings import TrackingConfig
from core.errors import ConfigurationError
from core.records import EventRecord, RecordId, SessionRecord
from core.store import Store


class InMemoryStore(Store):
    """Process-local store: session_id -> SessionRecord, event_id -> EventRecord."""

    def __init__(self):
        self._sessions: Dict[str, SessionRecord] = {}
        self._events: Dict[str, EventRecord] = {}
        self._lock = threading.Lock()

    def create_session(self, user_id: Optional[RecordId], attributes: Dict[str, Any]) -> SessionRecord:
        session = SessionRecord(id=str(uuid.uuid4()), user_id=user_id, properties=dict(attributes))
        with self._lock:
            self._sessions[session.id] = session
        return session

    def update_session(self, session: SessionRecord, patch: Dict[str, Any]) -> SessionRecord:
        key = str(session.id)
        with self._lock:
            current = self._sessions.get(key, session)
            updated = current.merged(patch)
            self._sessions[key] = updated
        return updated

    def get_session(self, session_id: RecordId) -> Optional[SessionRecord]:
        return self._sessions.get(str(session_id))

    def save_event(self, session_id: Optional[RecordId], name: str, properties: Dict[str, Any]) -> EventRecord:
        event = EventRecord(
            id=str(uuid.uuid4()),
            name=name,
            session_id=session_id,
            properties=dict(properties),
        )
        with self._lock:
            self._events[event.id] = event
        return event

    def get_event(self, event_id: RecordId) -> Optional[EventRecord]:
        return self._events.get(str(event_id))

    def all_sessions(self) -> List[SessionRecord]:
        with self._lock:
            return list(self._sessions.values())

    def all_events(self) -> List[EventRecord]:
        with self._lock:
            return list(self._events.values())


STORE_BACKENDS = {
    "memory": InMemoryStore,
}


def build_store(config: TrackingConfig) -> Store:
    """Instantiate the store named by ``config.store_backend``."""
    backend = STORE_BACKENDS.get(config.store_backend)
    if backend is None:
        raise ConfigurationError(
            f"Unknown store backend '{config.store_backend}'. "
            f"Available: {', '.join(sorted(STORE_BACKENDS))}"
        )
    return backend()
