"""
Tracking endpoints: custom events, current session, event lookup.
"""

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_current_session, get_snapshot, get_tracker
from api.models.requests import TrackEventRequest
from api.models.responses import EventResponse, SessionResponse, TrackEventResponse
from core.connection import ConnectionSnapshot
from core.records import SessionRecord
from core.tracking import Tracker

router = APIRouter(prefix="/api", tags=["tracking"])


@router.post("/track", response_model=TrackEventResponse)
def track_event(
    body: TrackEventRequest,
    snapshot: ConnectionSnapshot = Depends(get_snapshot),
    tracker: Tracker = Depends(get_tracker),
):
    """Save a custom event for the current session. Best effort."""
    result = tracker.track(snapshot, body.name, body.properties)
    if not result.ok:
        return TrackEventResponse(tracked=False)
    return TrackEventResponse(tracked=True, event=EventResponse.from_record(result.record))


@router.get("/session", response_model=SessionResponse)
def current_session(
    session: SessionRecord = Depends(get_current_session),
    tracker: Tracker = Depends(get_tracker),
):
    """Return the current session as stored."""
    result = tracker.get_session(session.id)
    if not result.ok:
        raise HTTPException(status_code=503, detail="Tracking store unavailable")
    if result.record is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return SessionResponse.from_record(result.record)


@router.get("/events/{event_id}", response_model=EventResponse)
def get_event(event_id: str, tracker: Tracker = Depends(get_tracker)):
    """Return a saved event."""
    result = tracker.get_event(event_id)
    if not result.ok:
        raise HTTPException(status_code=503, detail="Tracking store unavailable")
    if result.record is None:
        raise HTTPException(status_code=404, detail=f"Event '{event_id}' not found")
    return EventResponse.from_record(result.record)
