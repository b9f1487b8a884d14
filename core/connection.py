"""
Framework-free, read-only view of an inbound HTTP connection.

Everything the tracking core needs from a request is captured here so the
parser and resolver never touch the web framework directly.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union


RemoteAddress = Union[str, Tuple[int, ...]]


@dataclass(frozen=True)
class ConnectionSnapshot:
    """Immutable snapshot of one request."""

    method: str = "GET"
    path: str = "/"
    host: Optional[str] = None
    headers: Sequence[Tuple[str, str]] = ()
    remote_ip: Optional[RemoteAddress] = None
    query_params: Mapping[str, str] = field(default_factory=dict)
    path_params: Mapping[str, Any] = field(default_factory=dict)
    cookies: Mapping[str, str] = field(default_factory=dict)
    state: Mapping[str, Any] = field(default_factory=dict)

    def get_headers(self, name: str) -> List[str]:
        """Return every value for header ``name`` (case-insensitive)."""
        wanted = name.lower()
        return [value for key, value in self.headers if key.lower() == wanted]

    def header(self, name: str) -> Optional[str]:
        """Return the first value for header ``name`` or ``None``."""
        values = self.get_headers(name)
        return values[0] if values else None

    @property
    def user_agent(self) -> Optional[str]:
        return self.header("user-agent")

    def cookie(self, name: str) -> Optional[str]:
        value = self.cookies.get(name)
        return value or None

    @property
    def params(self) -> Dict[str, Any]:
        """Query and path parameters combined; path parameters win."""
        return {**dict(self.query_params), **dict(self.path_params)}
