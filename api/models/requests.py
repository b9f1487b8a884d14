"""Pydantic request schemas."""

from typing import Any, Dict
from pydantic import BaseModel, Field


class TrackEventRequest(BaseModel):
    name: str = Field(..., min_length=1)
    properties: Dict[str, Any] = Field(default_factory=dict)
