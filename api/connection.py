"""
Starlette request -> ConnectionSnapshot adapter.

Also provides ``StateUserModule``, the default hooks used by the app
factory, which identifies users from ``request.state`` or the
authentication middleware's ``request.user``.
"""

from typing import Any, Dict, Optional

from starlette.requests import Request

from core.connection import ConnectionSnapshot
from core.module import TrackingModule
from core.records import RecordId


def snapshot_from_request(request: Request) -> ConnectionSnapshot:
    """Capture everything the tracking core reads from ``request``."""
    state: Dict[str, Any] = {}
    user_id = getattr(request.state, "user_id", None)
    if user_id is not None:
        state["user_id"] = user_id
    if "user" in request.scope:
        state["user"] = request.scope["user"]

    return ConnectionSnapshot(
        method=request.method,
        path=request.url.path,
        host=request.url.hostname,
        headers=tuple(request.headers.items()),
        remote_ip=request.client.host if request.client else None,
        query_params=dict(request.query_params),
        path_params=dict(request.path_params),
        cookies=dict(request.cookies),
        state=state,
    )


class StateUserModule(TrackingModule):
    """Identify users from ``state["user_id"]`` or an authenticated ``user``."""

    def identify_user(self, snapshot: ConnectionSnapshot) -> Optional[RecordId]:
        user_id = snapshot.state.get("user_id")
        if user_id is not None:
            return user_id

        user = snapshot.state.get("user")
        if user is None or not getattr(user, "is_authenticated", True):
            return None
        user_id = getattr(user, "id", None)
        if user_id is None:
            user_id = getattr(user, "identity", None)
        return user_id
