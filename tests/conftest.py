"""Test fixtures and configuration for pytest."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.middleware import StartSessionMiddleware
from config.settings import SessionConfig
from core import engine as engine_module
from core.engine import SessionEngine
from core.store import SessionStore


class RecordingEngine(SessionEngine):
    """Engine that remembers how it was started."""

    def __init__(self, config, store=None):
        super().__init__(config, store)
        self.starts = []

    def start(self, session_id="", **options):
        self.starts.append((session_id, options))
        return super().start(session_id, **options)


@pytest.fixture(autouse=True)
def isolated_session_context():
    """Keep the ambient session from leaking between tests."""
    current = engine_module._current.set(None)
    name = engine_module._name.set(None)
    yield
    engine_module._current.reset(current)
    engine_module._name.reset(name)


@pytest.fixture
def session_config():
    return SessionConfig()


@pytest.fixture
def store():
    return SessionStore(ttl_seconds=3600)


@pytest.fixture
def engine(session_config, store):
    """Fresh engine installed as the process-wide engine."""
    eng = RecordingEngine(session_config, store)
    engine_module.set_engine(eng)
    yield eng
    engine_module.set_engine(None)


def build_app(engine, cookie=None, layers=1):
    """Small app whose routes use the ambient session."""
    app = FastAPI()
    calls = {"count": 0}
    app.state.calls = calls

    for _ in range(layers):
        app.add_middleware(StartSessionMiddleware, cookie=cookie, engine=engine)

    @app.get("/visit")
    async def visit():
        calls["count"] += 1
        data = engine.data()
        data["visits"] = data.get("visits", 0) + 1
        return {"visits": data["visits"], "session_id": engine.session_id()}

    @app.get("/close")
    async def close():
        engine.write_close()
        return {"closed": True}

    @app.get("/rotate")
    async def rotate():
        return {"session_id": engine.regenerate_id(delete_old=True)}

    @app.get("/boom")
    async def boom():
        raise LookupError("handler failed")

    return app


@pytest.fixture
def make_client(engine):
    def _make(cookie=None, layers=1):
        return TestClient(build_app(engine, cookie=cookie, layers=layers))
    return _make
