"""
Tracking middleware.

Resolves the tracking session for every request, stores its id in a
cookie, and saves a ``request`` event for trackable HTTP methods. Bots are
skipped unless ``detect_bots`` is disabled. Tracking never interferes
with the response: failures are logged and the request carries on.
"""

import logging
from typing import Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from api.connection import snapshot_from_request
from core.bots import is_bot
from core.connection import ConnectionSnapshot
from core.errors import ConfigurationError
from core.records import session_token
from core.tracking import Tracker

logger = logging.getLogger(__name__)


def fetch_tracker(request: Request, tracker: Optional[Tracker] = None) -> Tracker:
    """Return the explicit tracker, else the one installed on the app."""
    if tracker is not None:
        return tracker

    app = request.scope.get("app")
    found = getattr(getattr(app, "state", None), "tracker", None)
    if found is None:
        raise ConfigurationError(
            "No tracker configured: pass tracker= to TrackingMiddleware or set app.state.tracker"
        )
    return found


class TrackingMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        tracker: Optional[Tracker] = None,
        detect_bots: Optional[bool] = None,
        track_request_methods: Optional[Iterable[str]] = None,
    ):
        super().__init__(app)
        self.tracker = tracker
        self.detect_bots = detect_bots
        self.track_request_methods = (
            tuple(m.upper() for m in track_request_methods) if track_request_methods is not None else None
        )

    def safe_request(self, tracker: Tracker, snapshot: ConnectionSnapshot) -> bool:
        detect_bots = tracker.config.detect_bots if self.detect_bots is None else self.detect_bots
        if detect_bots and is_bot(snapshot.user_agent):
            logger.debug("Skipping tracking for bot: %s", (snapshot.user_agent or "")[:100])
            return False
        return True

    def trackable_method(self, tracker: Tracker, method: str) -> bool:
        if self.track_request_methods is None:
            return tracker.config.is_trackable_method(method)
        return method.upper() in self.track_request_methods

    async def dispatch(self, request: Request, call_next):
        tracker = fetch_tracker(request, self.tracker)
        snapshot = snapshot_from_request(request)
        cookie_value = None

        if self.safe_request(tracker, snapshot):
            try:
                cookie_value, snapshot = self._track(tracker, request, snapshot)
            except Exception:
                logger.exception("Tracking failed for %s %s", request.method, request.url.path)

        response: Response = await call_next(request)

        if cookie_value is not None:
            config = tracker.config
            response.set_cookie(
                key=tracker.cookie_name,
                value=cookie_value,
                max_age=config.cookie_max_age,
                httponly=config.cookie_httponly,
                samesite=config.cookie_samesite,
                secure=config.cookie_secure,
            )
        return response

    def _track(self, tracker: Tracker, request: Request, snapshot: ConnectionSnapshot):
        cookie_value = None
        result = tracker.resolve_session(snapshot)
        if result.ok:
            session = result.record
            token = session_token(session.id)
            if token != tracker.current_session_token(snapshot):
                cookie_value = token
            snapshot = tracker.with_session(snapshot, session.id)
            request.state.tracking_session = session

        if self.trackable_method(tracker, snapshot.method):
            tracker.track_request(snapshot)

        return cookie_value, snapshot
