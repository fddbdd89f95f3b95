"""Tests for the session engine."""

import pytest

from config.settings import SessionConfig
from core.engine import SessionEngine, SessionStatus, session_data
from core.exceptions import (
    SessionAlreadyStartedError,
    SessionNotActiveError,
    SessionsDisabledError,
)


class TestLifecycle:
    """Tests for the none -> active -> none cycle."""

    def test_status_transitions(self, engine):
        assert engine.status() is SessionStatus.NONE

        engine.start()
        assert engine.status() is SessionStatus.ACTIVE

        engine.write_close()
        assert engine.status() is SessionStatus.NONE

    def test_disabled(self, store):
        engine = SessionEngine(SessionConfig(enabled=False), store)

        assert engine.status() is SessionStatus.DISABLED
        with pytest.raises(SessionsDisabledError):
            engine.start()

    def test_start_twice_fails(self, engine):
        engine.start()

        with pytest.raises(SessionAlreadyStartedError):
            engine.start()

    def test_unknown_option_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.start(use_trans_sid=True)

        assert engine.status() is SessionStatus.NONE

    def test_runtime_options_override_config(self, engine):
        session = engine.start(use_cookies=False)

        assert session.options["use_cookies"] is False
        assert session.options["use_only_cookies"] is True

    def test_write_close_persists(self, engine, store):
        engine.start()
        engine.data()["user"] = "ada"
        session_id = engine.session_id()

        assert engine.write_close() is True
        assert store.load(session_id) == {"user": "ada"}

    def test_write_close_without_session(self, engine):
        assert engine.write_close() is False

    def test_abort_discards_changes(self, engine, store):
        engine.start()
        engine.data()["user"] = "ada"
        session_id = engine.session_id()

        assert engine.abort() is True
        assert engine.status() is SessionStatus.NONE
        assert store.load(session_id) is None
        assert engine.abort() is False


class TestSessionId:
    """Tests for resolving the ID a session starts with."""

    def test_empty_id_generates_one(self, engine):
        engine.start("")

        assert engine.session_id() != ""

    def test_no_session_id_when_closed(self, engine):
        assert engine.session_id() == ""

    def test_known_id_reused_with_data(self, engine, store):
        store.save("abc-123", {"cart": [1, 2]})

        engine.start("abc-123")

        assert engine.session_id() == "abc-123"
        assert engine.data() == {"cart": [1, 2]}

    def test_unknown_id_replaced_in_strict_mode(self, engine):
        engine.start("abc-123")

        assert engine.session_id() not in ("", "abc-123")

    def test_unknown_id_accepted_without_strict_mode(self, store):
        engine = SessionEngine(SessionConfig(use_strict_mode=False), store)

        engine.start("abc-123")

        assert engine.session_id() == "abc-123"
        assert engine.data() == {}

    @pytest.mark.parametrize("bad_id", ["has space", "semi;colon", "x" * 129, "../etc"])
    def test_malformed_id_replaced(self, store, bad_id):
        engine = SessionEngine(SessionConfig(use_strict_mode=False), store)

        engine.start(bad_id)

        assert engine.session_id() != bad_id

    def test_regenerate_keeps_data(self, engine, store):
        store.save("abc-123", {"user": "ada"})
        engine.start("abc-123")

        new_id = engine.regenerate_id()
        engine.write_close()

        assert new_id != "abc-123"
        assert store.load(new_id) == {"user": "ada"}
        assert store.load("abc-123") == {"user": "ada"}

    def test_regenerate_deletes_old(self, engine, store):
        store.save("abc-123", {"user": "ada"})
        engine.start("abc-123")

        engine.regenerate_id(delete_old=True)

        assert store.load("abc-123") is None

    def test_regenerate_requires_session(self, engine):
        with pytest.raises(SessionNotActiveError):
            engine.regenerate_id()


class TestNameAndDefaults:
    """Tests for the session name and cookie defaults."""

    def test_name_defaults_to_config(self, engine):
        assert engine.name == "session_id"

    def test_name_setter(self, engine):
        engine.name = "sid"
        session = engine.start()

        assert engine.name == "sid"
        assert session.name == "sid"

    def test_empty_name_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.name = ""

    def test_cookie_params(self, store):
        config = SessionConfig(cookie_lifetime=60, cookie_domain="example.com", cookie_secure=True)
        engine = SessionEngine(config, store)

        assert engine.cookie_params() == {
            "lifetime": 60,
            "path": "/",
            "domain": "example.com",
            "secure": True,
            "httponly": True,
            "samesite": "lax",
        }


class TestAmbientData:
    """Tests for reaching the session through the module helper."""

    def test_session_data_uses_process_engine(self, engine):
        engine.start()
        session_data()["theme"] = "dark"

        assert engine.data() == {"theme": "dark"}

    def test_session_data_without_session(self, engine):
        with pytest.raises(SessionNotActiveError):
            session_data()
