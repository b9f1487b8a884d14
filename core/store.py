"""
Persistence contract for tracking data.

A store either is the persistent data store itself or forwards to one.
Implementations signal failure by raising ``StoreError``; lookups that
find nothing return ``None``.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, TypeVar

from core.errors import StoreError
from core.records import EventRecord, RecordId, SessionRecord

T = TypeVar("T")


def call_store(operation: str, func: Callable[..., T], *args: Any) -> T:
    """Run a store operation, normalising any failure into ``StoreError``."""
    try:
        return func(*args)
    except StoreError:
        raise
    except Exception as exc:
        raise StoreError(operation, cause=exc) from exc


class Store(ABC):
    """Abstract store for sessions and events."""

    @abstractmethod
    def create_session(self, user_id: Optional[RecordId], attributes: Dict[str, Any]) -> SessionRecord:
        """Save a new session for ``user_id`` (``None`` for anonymous)."""

    @abstractmethod
    def update_session(self, session: SessionRecord, patch: Dict[str, Any]) -> SessionRecord:
        """Merge ``patch`` into an existing session and return the result.

        Only the fields present in ``patch`` change. Stores must not
        overwrite the whole record, otherwise concurrent identifications of
        the same session can lose updates.
        """

    @abstractmethod
    def get_session(self, session_id: RecordId) -> Optional[SessionRecord]:
        """Return the session for ``session_id`` or ``None``."""

    @abstractmethod
    def save_event(
        self,
        session_id: Optional[RecordId],
        name: str,
        properties: Dict[str, Any],
    ) -> EventRecord:
        """Save an event. Whether a ``None`` session id is accepted is up to the store."""

    @abstractmethod
    def get_event(self, event_id: RecordId) -> Optional[EventRecord]:
        """Return the event for ``event_id`` or ``None``."""
