"""
Tracking facade.

``Tracker`` is the single entry point applications and the middleware use
to save tracking data. Data is split into two categories:

* Sessions: a persistent chain of interactions by one browser, optionally
  tied to a user.
* Events: individual interactions, each with a ``name`` and a map of
  ``properties``, tied to the session that produced them. A ``request`` is
  the built-in event saved for every tracked HTTP request.

Tracking is best effort. Store failures are logged and reported through
``TrackingResult`` instead of being raised, so the hosting request is
never aborted by this layer.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from config.settings import TrackingConfig
from core.connection import ConnectionSnapshot
from core.errors import ConfigurationError, StoreError
from core.events import EventRecorder
from core.identity import IdentityResolver
from core.module import TrackingModule, resolve_user_id
from core.records import RecordId, session_token
from core.session_data import build_session_data
from core.store import Store, call_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackingResult:
    """Outcome of a tracking call."""

    ok: bool
    record: Any = None
    error: Optional[StoreError] = None
    created: bool = False

    @classmethod
    def success(cls, record: Any, created: bool = False) -> "TrackingResult":
        return cls(ok=True, record=record, created=created)

    @classmethod
    def failure(cls, error: StoreError) -> "TrackingResult":
        return cls(ok=False, error=error)


class Tracker:
    """Orchestrates session resolution and event recording for a store."""

    def __init__(
        self,
        store: Optional[Store],
        module: Optional[TrackingModule] = None,
        config: Optional[TrackingConfig] = None,
    ):
        if store is None:
            raise ConfigurationError("Tracker requires a store")
        self.store = store
        self.module = module or TrackingModule()
        self.config = config or TrackingConfig()
        self.resolver = IdentityResolver(store, self.module)
        self.recorder = EventRecorder(store)

    @property
    def cookie_name(self) -> str:
        return self.config.session_cookie_name

    def current_session_token(self, snapshot: ConnectionSnapshot) -> Optional[str]:
        """Return the session token carried by the request cookie."""
        return snapshot.cookie(self.cookie_name)

    def current_user_id(self, snapshot: ConnectionSnapshot) -> Optional[RecordId]:
        return resolve_user_id(self.module, snapshot)

    def with_session(self, snapshot: ConnectionSnapshot, session_id: RecordId) -> ConnectionSnapshot:
        """Return ``snapshot`` as if it already carried the cookie for ``session_id``."""
        cookies = {**snapshot.cookies, self.cookie_name: session_token(session_id)}
        return replace(snapshot, cookies=cookies)

    def resolve_session(self, snapshot: ConnectionSnapshot) -> TrackingResult:
        """Find, create or identify the session for the request."""
        token = self.current_session_token(snapshot)
        try:
            session, created = self.resolver.resolve_session(token, snapshot)
        except StoreError as exc:
            logger.error("Failed to resolve session %s: %s", token, exc, exc_info=True)
            return TrackingResult.failure(exc)
        return TrackingResult.success(session, created=created)

    def track_session(self, snapshot: ConnectionSnapshot) -> TrackingResult:
        """Save a new session built from the request.

        Extra properties come from the module's ``session_properties`` hook.
        """
        data = build_session_data(snapshot, self.module.session_properties(snapshot))
        user_id = self.current_user_id(snapshot)
        try:
            session = call_store("create_session", self.store.create_session, user_id, data)
        except StoreError as exc:
            logger.error("Failed to save session: %s", exc, exc_info=True)
            return TrackingResult.failure(exc)
        return TrackingResult.success(session, created=True)

    def track_request(self, snapshot: ConnectionSnapshot) -> TrackingResult:
        """Save a ``request`` event using the module's ``request_properties`` hook."""
        properties = self.module.request_properties(snapshot)
        return self.track(snapshot, "request", properties)

    def track(
        self,
        snapshot: ConnectionSnapshot,
        name: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> TrackingResult:
        """
        Save a generic event for the current session.

        Args:
            snapshot: The inbound connection
            name: The name of the event
            properties: The properties related to the event

        Returns:
            TrackingResult holding the saved ``EventRecord`` on success
        """
        session_id = self.current_session_token(snapshot)
        try:
            event = self.recorder.record_event(session_id, name, properties)
        except StoreError as exc:
            logger.error("Failed to save event %r for session %s: %s", name, session_id, exc, exc_info=True)
            return TrackingResult.failure(exc)
        return TrackingResult.success(event, created=True)

    def get_session(self, session_id: RecordId) -> TrackingResult:
        try:
            return TrackingResult.success(call_store("get_session", self.store.get_session, session_id))
        except StoreError as exc:
            logger.error("Failed to load session %s: %s", session_id, exc, exc_info=True)
            return TrackingResult.failure(exc)

    def get_event(self, event_id: RecordId) -> TrackingResult:
        try:
            return TrackingResult.success(call_store("get_event", self.store.get_event, event_id))
        except StoreError as exc:
            logger.error("Failed to load event %s: %s", event_id, exc, exc_info=True)
            return TrackingResult.failure(exc)
