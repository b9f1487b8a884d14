"""
Records persisted by a store.

Sessions are long-lived and move one way from anonymous to identified;
events are immutable once saved.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Union


RecordId = Union[str, int]


class SessionState(str, Enum):
    """Identification state of a session."""

    NEW = "new"
    ANONYMOUS = "anonymous"
    IDENTIFIED = "identified"


@dataclass(frozen=True)
class SessionRecord:
    """A browser session as returned by the store."""

    id: RecordId
    user_id: Optional[RecordId] = None
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def state(self) -> SessionState:
        if self.user_id is None:
            return SessionState.ANONYMOUS
        return SessionState.IDENTIFIED

    @property
    def is_identified(self) -> bool:
        return self.user_id is not None

    def merged(self, patch: Dict[str, Any]) -> "SessionRecord":
        """Return a copy with ``patch`` applied field by field.

        ``user_id`` and ``properties`` are first-class fields; any other key
        is merged into ``properties``.
        """
        patch = dict(patch)
        user_id = patch.pop("user_id", self.user_id)
        properties = {**self.properties, **patch.pop("properties", {}), **patch}
        return replace(self, user_id=user_id, properties=properties)


@dataclass(frozen=True)
class EventRecord:
    """A single tracked action tied to a session."""

    id: RecordId
    name: str
    session_id: Optional[RecordId] = None
    properties: Dict[str, Any] = field(default_factory=dict)


def session_token(session_id: RecordId) -> str:
    """Render a session id as the value carried in the session cookie."""
    if isinstance(session_id, bool):
        raise TypeError("Session ids cannot be booleans")
    if isinstance(session_id, int):
        return str(session_id)
    return session_id
