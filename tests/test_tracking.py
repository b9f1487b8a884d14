"""Tests for the tracking facade."""

import pytest

from config.settings import TrackingConfig
from core.errors import ConfigurationError, StoreError
from core.module import FunctionModule, TrackingModule
from core.tracking import Tracker
from conftest import FailingStore


COOKIE = "_lear_session_"


class TestTrack:
    """Tests for Tracker.track."""

    def test_uses_session_from_cookie(self, tracker, store, make_snapshot):
        session = store.create_session(None, {})
        result = tracker.track(make_snapshot(cookies={COOKIE: session.id}), "New Event", {})

        assert result.ok
        assert result.record.session_id == session.id
        assert result.record.name == "New Event"
        assert result.record.properties == {}

    def test_without_cookie_session_is_none(self, tracker, make_snapshot):
        result = tracker.track(make_snapshot(), "anonymous ping")

        assert result.ok
        assert result.record.session_id is None

    def test_custom_cookie_name(self, store, make_snapshot):
        tracker = Tracker(store, config=TrackingConfig(session_cookie_name="sid"))
        result = tracker.track(make_snapshot(cookies={"sid": "abc", COOKIE: "other"}), "x")

        assert result.record.session_id == "abc"

    def test_store_failure_is_reported_not_raised(self, make_snapshot):
        result = Tracker(FailingStore()).track(make_snapshot(), "x")

        assert result.ok is False
        assert isinstance(result.error, StoreError)


class TestTrackRequest:
    """Tests for Tracker.track_request."""

    def test_default_request_properties(self, tracker, store, make_snapshot):
        snapshot = make_snapshot(
            method="GET",
            host="example.com",
            path="/products/5",
            query_params={"page": "2"},
            path_params={"id": "5"},
            cookies={COOKIE: "s1"},
        )
        result = tracker.track_request(snapshot)

        assert result.ok
        assert result.record.name == "request"
        assert result.record.session_id == "s1"
        assert result.record.properties == {
            "params": {"page": "2", "id": "5"},
            "host": "example.com",
            "method": "GET",
            "path": "/products/5",
        }

    def test_overridden_request_properties(self, store, make_snapshot):
        class PathOnly(TrackingModule):
            def request_properties(self, snapshot):
                return {"path": snapshot.path}

        result = Tracker(store, module=PathOnly()).track_request(make_snapshot(path="/a"))

        assert result.record.properties == {"path": "/a"}


class TestTrackSession:
    """Tests for Tracker.track_session."""

    def test_saves_session_with_user(self, tracker, make_snapshot):
        result = tracker.track_session(make_snapshot(headers=[("x-user-id", "1")]))

        assert result.ok
        assert result.created
        assert result.record.id is not None
        assert result.record.user_id == "1"

    def test_session_properties_nested_under_properties(self, store, make_snapshot):
        module = FunctionModule(session_properties=lambda snapshot: {"campaign": "launch"})
        result = Tracker(store, module=module).track_session(make_snapshot())

        assert result.record.properties["properties"] == {"campaign": "launch"}
        assert result.record.properties["browser"] == "Chrome"

    def test_same_shape_as_resolver_sessions(self, tracker, make_snapshot):
        tracked = tracker.track_session(make_snapshot()).record
        resolved = tracker.resolve_session(make_snapshot()).record

        assert set(tracked.properties) == set(resolved.properties)

    def test_store_failure_is_reported(self, make_snapshot):
        result = Tracker(FailingStore()).track_session(make_snapshot())

        assert result.ok is False
        assert result.error.operation == "create_session"


class TestResolveSession:
    """Tests for Tracker.resolve_session."""

    def test_new_then_existing(self, tracker, make_snapshot):
        first = tracker.resolve_session(make_snapshot())
        second = tracker.resolve_session(make_snapshot(cookies={COOKIE: first.record.id}))

        assert first.created is True
        assert second.created is False
        assert second.record.id == first.record.id

    def test_store_failure_is_reported(self, make_snapshot):
        result = Tracker(FailingStore()).resolve_session(make_snapshot(cookies={COOKIE: "abc"}))

        assert result.ok is False
        assert result.record is None

    def test_with_session_sets_cookie_token(self, tracker, make_snapshot):
        snapshot = tracker.with_session(make_snapshot(), 12)

        assert tracker.current_session_token(snapshot) == "12"


class TestConfiguration:
    """Tests for tracker setup."""

    def test_store_is_required(self):
        with pytest.raises(ConfigurationError):
            Tracker(None)

    def test_defaults(self, store, make_snapshot):
        tracker = Tracker(store)

        assert tracker.cookie_name == COOKIE
        assert tracker.current_user_id(make_snapshot()) is None


class TestFunctionModule:
    """Tests for building hooks from callables."""

    def test_missing_callables_fall_back_to_defaults(self, make_snapshot):
        snapshot = make_snapshot(path="/pricing")
        module = FunctionModule()

        assert module.identify_user(snapshot) is None
        assert module.request_properties(snapshot) == TrackingModule().request_properties(snapshot)
        assert module.session_properties(snapshot) == {}
