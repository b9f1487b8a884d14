"""Pydantic response schemas."""

from typing import Any, Dict, Optional, Union
from pydantic import BaseModel

from core.records import EventRecord, SessionRecord


class SessionResponse(BaseModel):
    id: Union[int, str]
    user_id: Optional[Union[int, str]] = None
    state: str
    properties: Dict[str, Any]

    @classmethod
    def from_record(cls, session: SessionRecord) -> "SessionResponse":
        return cls(
            id=session.id,
            user_id=session.user_id,
            state=session.state.value,
            properties=session.properties,
        )


class EventResponse(BaseModel):
    id: Union[int, str]
    name: str
    session_id: Optional[Union[int, str]] = None
    properties: Dict[str, Any]

    @classmethod
    def from_record(cls, event: EventRecord) -> "EventResponse":
        return cls(
            id=event.id,
            name=event.name,
            session_id=event.session_id,
            properties=event.properties,
        )


class TrackEventResponse(BaseModel):
    tracked: bool
    event: Optional[EventResponse] = None
