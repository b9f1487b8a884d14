"""Event recording against a resolved session."""

import logging
from typing import Any, Dict, Optional

from core.records import EventRecord, RecordId
from core.store import Store, call_store

logger = logging.getLogger(__name__)


class EventRecorder:
    """Save named events. One attempt per event, failures propagate."""

    def __init__(self, store: Store):
        self.store = store

    def record_event(
        self,
        session_id: Optional[RecordId],
        name: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> EventRecord:
        """
        Save an event for ``session_id``.

        A ``None`` session id is passed through; the store decides whether
        it accepts events without a session.

        Raises:
            StoreError: if the store fails to save the event
        """
        event = call_store("save_event", self.store.save_event, session_id, name, dict(properties or {}))
        logger.debug("Recorded event %r (%s) for session %s", name, event.id, session_id)
        return event
