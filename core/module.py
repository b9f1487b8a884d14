"""
Application hooks for the tracker.

An application customises tracking by subclassing ``TrackingModule`` and
overriding any of its hooks, or by wrapping plain functions with
``FunctionModule``.
"""

import logging
from typing import Any, Callable, Dict, Optional

from core.connection import ConnectionSnapshot
from core.records import RecordId

logger = logging.getLogger(__name__)


class TrackingModule:
    """Default hooks: no signed-in user, no extra session properties."""

    def identify_user(self, snapshot: ConnectionSnapshot) -> Optional[RecordId]:
        """Return the id of the signed-in user, or ``None`` if there is none."""
        return None

    def request_properties(self, snapshot: ConnectionSnapshot) -> Dict[str, Any]:
        """Properties saved with every ``request`` event."""
        return {
            "params": snapshot.params,
            "host": snapshot.host,
            "method": snapshot.method,
            "path": snapshot.path,
        }

    def session_properties(self, snapshot: ConnectionSnapshot) -> Dict[str, Any]:
        """Extra properties saved with a new session."""
        return {}


class FunctionModule(TrackingModule):
    """Build a ``TrackingModule`` from plain callables."""

    def __init__(
        self,
        identify_user: Optional[Callable[[ConnectionSnapshot], Optional[RecordId]]] = None,
        request_properties: Optional[Callable[[ConnectionSnapshot], Dict[str, Any]]] = None,
        session_properties: Optional[Callable[[ConnectionSnapshot], Dict[str, Any]]] = None,
    ):
        self._identify_user = identify_user
        self._request_properties = request_properties
        self._session_properties = session_properties

    def identify_user(self, snapshot: ConnectionSnapshot) -> Optional[RecordId]:
        if self._identify_user is None:
            return super().identify_user(snapshot)
        return self._identify_user(snapshot)

    def request_properties(self, snapshot: ConnectionSnapshot) -> Dict[str, Any]:
        if self._request_properties is None:
            return super().request_properties(snapshot)
        return self._request_properties(snapshot)

    def session_properties(self, snapshot: ConnectionSnapshot) -> Dict[str, Any]:
        if self._session_properties is None:
            return super().session_properties(snapshot)
        return self._session_properties(snapshot)


def resolve_user_id(module: TrackingModule, snapshot: ConnectionSnapshot) -> Optional[RecordId]:
    """Ask the module for the current user; a failing hook means anonymous."""
    try:
        return module.identify_user(snapshot)
    except Exception:
        logger.warning("identify_user failed, treating request as anonymous", exc_info=True)
        return None
