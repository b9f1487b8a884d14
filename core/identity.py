"""
Session identity resolution.

Decides, for one request, whether to create a new session, reuse the one
named by the session cookie, or attach the signed-in user to a session
that was anonymous until now. Identification is one-way: once a session
has a user id it is never written again by this module.

Concurrent requests carrying the same anonymous token may both identify
the user and both update the session. Stores apply updates as field
merges, so both writers converge on the same ``user_id``.
"""

import logging
from typing import Optional, Tuple

from core.connection import ConnectionSnapshot
from core.module import TrackingModule, resolve_user_id
from core.records import RecordId, SessionRecord
from core.session_data import build_session_data
from core.store import Store, call_store

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Resolve the session for a request, creating or upgrading it as needed."""

    def __init__(self, store: Store, module: Optional[TrackingModule] = None):
        self.store = store
        self.module = module or TrackingModule()

    def resolve_session(
        self,
        token: Optional[str],
        snapshot: ConnectionSnapshot,
    ) -> Tuple[SessionRecord, bool]:
        """
        Return ``(session, is_new)`` for the request.

        Args:
            token: Session token carried by the request cookie, if any
            snapshot: The inbound connection

        Returns:
            The resolved session and whether it was created by this call

        Raises:
            StoreError: if the store fails to read, create or update
        """
        if not token:
            return self.create_session(snapshot), True

        session = call_store("get_session", self.store.get_session, token)
        if session is None:
            logger.info("Session token %s not found in store, starting a new session", token)
            return self.create_session(snapshot), True

        if session.is_identified:
            return session, False

        return self.identify(session, snapshot), False

    def create_session(self, snapshot: ConnectionSnapshot) -> SessionRecord:
        """Save a brand new session for the request."""
        data = build_session_data(snapshot, self.module.session_properties(snapshot))
        user_id = resolve_user_id(self.module, snapshot)
        session = call_store("create_session", self.store.create_session, user_id, data)
        logger.debug("Created session %s (user=%s)", session.id, user_id)
        return session

    def identify(self, session: SessionRecord, snapshot: ConnectionSnapshot) -> SessionRecord:
        """Attach the signed-in user to an anonymous session, if there is one."""
        if session.is_identified:
            return session

        user_id: Optional[RecordId] = resolve_user_id(self.module, snapshot)
        if user_id is None:
            return session

        updated = call_store("update_session", self.store.update_session, session, {"user_id": user_id})
        logger.debug("Identified session %s as user %s", session.id, user_id)
        return updated
