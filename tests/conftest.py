"""Test fixtures and configuration for pytest."""

import itertools
from collections import Counter

import pytest

from api.session_store import InMemoryStore
from config.settings import TrackingConfig
from core.connection import ConnectionSnapshot
from core.module import FunctionModule
from core.records import EventRecord, SessionRecord
from core.store import Store
from core.tracking import Tracker


CHROME_MAC_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_14_6) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/79.0.3945.117 Safari/537.36"
)
CHROME_WINDOWS_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/79.0.3945.117 Safari/537.36"
)
SAFARI_IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 13_3 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/13.0.4 Mobile/15E148 Safari/604.1"
)
CHROME_ANDROID_UA = (
    "Mozilla/5.0 (Linux; Android 10; SM-G975F) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/80.0.3987.99 Mobile Safari/537.36"
)
FIREFOX_LINUX_UA = "Mozilla/5.0 (X11; Linux x86_64; rv:72.0) Gecko/20100101 Firefox/72.0"
GOOGLEBOT_UA = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"


class RecordingStore(InMemoryStore):
    """In-memory store that counts calls per operation."""

    def __init__(self):
        super().__init__()
        self.calls = Counter()

    def create_session(self, user_id, attributes):
        self.calls["create_session"] += 1
        return super().create_session(user_id, attributes)

    def update_session(self, session, patch):
        self.calls["update_session"] += 1
        return super().update_session(session, patch)

    def get_session(self, session_id):
        self.calls["get_session"] += 1
        return super().get_session(session_id)

    def save_event(self, session_id, name, properties):
        self.calls["save_event"] += 1
        return super().save_event(session_id, name, properties)

    @property
    def writes(self) -> int:
        return self.calls["create_session"] + self.calls["update_session"]


class IntegerIdStore(InMemoryStore):
    """Store with auto-incrementing integer ids, like a database table."""

    def __init__(self):
        super().__init__()
        self._ids = itertools.count(1)

    def create_session(self, user_id, attributes):
        session = SessionRecord(id=next(self._ids), user_id=user_id, properties=dict(attributes))
        self._sessions[str(session.id)] = session
        return session

    def save_event(self, session_id, name, properties):
        event = EventRecord(id=next(self._ids), name=name, session_id=session_id, properties=dict(properties))
        self._events[str(event.id)] = event
        return event


class FailingStore(Store):
    """Every operation fails, as during a database outage."""

    def create_session(self, user_id, attributes):
        raise RuntimeError("store down")

    def update_session(self, session, patch):
        raise RuntimeError("store down")

    def get_session(self, session_id):
        raise RuntimeError("store down")

    def save_event(self, session_id, name, properties):
        raise RuntimeError("store down")

    def get_event(self, event_id):
        raise RuntimeError("store down")


def header_user_module():
    """Module identifying the user from an ``x-user-id`` header."""
    return FunctionModule(identify_user=lambda snapshot: snapshot.header("x-user-id"))


@pytest.fixture
def make_snapshot():
    """Factory for connection snapshots with sensible defaults."""
    def _make(user_agent=CHROME_MAC_UA, cookies=None, headers=(), **kwargs):
        all_headers = list(headers)
        if user_agent is not None:
            all_headers.append(("user-agent", user_agent))
        return ConnectionSnapshot(headers=tuple(all_headers), cookies=cookies or {}, **kwargs)
    return _make


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def tracking_config():
    return TrackingConfig()


@pytest.fixture
def tracker(store, tracking_config):
    return Tracker(store, module=header_user_module(), config=tracking_config)
