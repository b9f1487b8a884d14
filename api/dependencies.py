"""
FastAPI dependency-injection helpers.
"""

from fastapi import Request, HTTPException

from api.connection import snapshot_from_request
from api.middleware import fetch_tracker
from core.connection import ConnectionSnapshot
from core.records import SessionRecord
from core.tracking import Tracker


def get_tracker(request: Request) -> Tracker:
    """Return the application's tracker."""
    return fetch_tracker(request)


def get_snapshot(request: Request) -> ConnectionSnapshot:
    """Snapshot of the request, carrying the session resolved by the middleware."""
    snapshot = snapshot_from_request(request)
    session = getattr(request.state, "tracking_session", None)
    if session is not None:
        snapshot = get_tracker(request).with_session(snapshot, session.id)
    return snapshot


def get_current_session(request: Request) -> SessionRecord:
    """Return the session resolved for this request."""
    session = getattr(request.state, "tracking_session", None)
    if session is None:
        raise HTTPException(status_code=404, detail="No tracking session for this request")
    return session
