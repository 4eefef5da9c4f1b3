import asyncio
import os
from collections import Counter
from contextlib import redirect_stderr, redirect_stdout
from io import StringIO
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config

# Ensure tests run against SQLite when DATABASE_URL is not defined
os.environ.setdefault("DATABASE_URL", "sqlite:////tmp/playerzero_test.db")
# flag is loaded once at startup and on every admin update
os.environ.setdefault("FREE_MODE_REFRESHER_ENABLED", "0")

from fastapi.testclient import TestClient
from playerzero import dependencies
from playerzero.main import app
from playerzero.config import Settings
from playerzero.db import init_db
from playerzero.db import SessionLocal
from playerzero.models import Event, FeatureFlag, Profile, StatEntry, SystemSetting


@pytest.fixture(scope="session", autouse=True)
def apply_migrations():
    """Apply Alembic migrations before running tests."""
    cfg_path = Path(__file__).resolve().parent.parent / "alembic.ini"
    config = Config(str(cfg_path))
    stdout_buf, stderr_buf = StringIO(), StringIO()
    try:
        with redirect_stdout(stdout_buf), redirect_stderr(stderr_buf):
            command.upgrade(config, "head")
    except Exception as exc:
        print("Alembic upgrade failed:", exc)
        print("stdout:\n", stdout_buf.getvalue())
        print("stderr:\n", stderr_buf.getvalue())
        raise
    init_db(Settings())


@pytest.fixture(scope="session", autouse=True)
def remove_test_db():
    """Remove temporary SQLite database after tests finish."""
    yield
    db_url = os.environ.get("DATABASE_URL")
    if db_url and db_url.startswith("sqlite:///"):
        db_path = Path(db_url.replace("sqlite:///", ""))
        if db_path.exists():
            db_path.unlink()


@pytest.fixture(scope="module")
def client(apply_migrations):
    """Yields a TestClient with lifespan events."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def clean_db(apply_migrations):
    """Empty profile tables, drop runtime settings and switch free mode off."""
    with SessionLocal() as session:
        session.query(StatEntry).delete()
        session.query(Profile).delete()
        session.query(Event).delete()
        session.query(SystemSetting).delete()
        session.query(FeatureFlag).update({FeatureFlag.value: False})
        session.commit()
    asyncio.run(app.state.free_mode_refresher.refresh())
    yield


@pytest.fixture(autouse=True)
def mock_redis(monkeypatch):
    """In-memory stand-in for the rate limiter's Redis pipeline."""

    class _Pipe:
        def __init__(self, counters):
            self.counters = counters
            self.queued = []

        def incr(self, key):
            self.queued.append(key)
            return self

        def expire(self, key, ttl):
            self.queued.append(None)
            return self

        async def execute(self):
            results = []
            for key in self.queued:
                if key is None:
                    results.append(True)
                    continue
                self.counters[key] += 1
                results.append(self.counters[key])
            self.queued = []
            return results

    class _Redis:
        def __init__(self):
            self.counters = Counter()

        def pipeline(self):
            return _Pipe(self.counters)

    fake = _Redis()
    monkeypatch.setattr(dependencies, "redis_client", fake)
    yield fake
