import asyncio
import re
from contextlib import asynccontextmanager
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import exc as sa_exc

from resume_api.app.core.config import get_settings
from resume_api.app.main import create_app

TEST_SECRET = "test-secret-key"
TEST_ALGORITHM = "HS256"


class FakeResult:
    """Stand-in for a SQLAlchemy result exposing `mappings()`."""

    def __init__(self, rows):
        self._rows = rows

    def mappings(self):
        return iter(self._rows)


class FakeConnection:
    """Connection that answers `select * from <table>` statements from memory."""

    def __init__(self, engine):
        self._engine = engine

    async def execute(self, statement, params):
        engine = self._engine
        sql = statement.text
        engine.statements.append((sql, dict(params)))
        engine.in_flight += 1
        engine.max_in_flight = max(engine.max_in_flight, engine.in_flight)
        try:
            await asyncio.sleep(engine.delay)
            table = re.search(r"from (\w+)", sql).group(1)
            if table in engine.failing_tables:
                raise sa_exc.ProgrammingError(sql, params, Exception("relation does not exist"))
            rows = engine.tables.get(table, [])
            if "ids" in params:
                rows = [row for row in rows if row["resume_id"] in params["ids"]]
            return FakeResult([dict(row) for row in rows])
        finally:
            engine.in_flight -= 1


class FakeEngine:
    """In-memory engine with a bounded connection pool.

    `connect()` behaves like `AsyncEngine.connect()`: it waits up to
    `pool_timeout` seconds for a free slot and raises SQLAlchemy's
    `TimeoutError` when none frees up.
    """

    def __init__(
        self,
        tables=None,
        pool_size=5,
        pool_timeout=1.0,
        delay=0.0,
        failing_tables=(),
        connect_error=None,
    ):
        self.tables = tables or {}
        self.connect_error = connect_error
        self.pool_size = pool_size
        self.pool_timeout = pool_timeout
        self.delay = delay
        self.failing_tables = set(failing_tables)
        self.statements = []
        self.checked_out = 0
        self.max_checked_out = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self.disposed = False
        self._semaphore = asyncio.Semaphore(pool_size)

    @asynccontextmanager
    async def connect(self):
        if self.connect_error is not None:
            raise self.connect_error
        try:
            await asyncio.wait_for(self._semaphore.acquire(), self.pool_timeout)
        except TimeoutError:
            raise sa_exc.TimeoutError("QueuePool limit reached, connection timed out")
        self.checked_out += 1
        self.max_checked_out = max(self.max_checked_out, self.checked_out)
        try:
            yield FakeConnection(self)
        finally:
            self.checked_out -= 1
            self._semaphore.release()

    async def dispose(self):
        self.disposed = True


@pytest.fixture
def sample_tables():
    """Resumes 1, 3 and 7 with children for 1 and 7, plus orphans for resume 2."""
    return {
        "resumes": [
            {"id": 1, "user_id": 9007199254740993, "title": "Backend Engineer"},
            {"id": 3, "user_id": 42, "title": "Data Analyst"},
            {"id": 7, "user_id": 7, "title": "Designer"},
        ],
        "resume_educations": [
            {"id": 10, "resume_id": 1, "school": "MIT"},
            {"id": 11, "resume_id": 2, "school": "Orphan U"},
            {"id": 12, "resume_id": 7, "school": "RISD"},
        ],
        "resume_work_experiences": [
            {"id": 20, "resume_id": 1, "company": "Acme"},
            {"id": 21, "resume_id": 2, "company": "Nowhere"},
        ],
        "resume_computer_skills": [{"id": 30, "resume_id": 7, "name": "Figma"}],
        "resume_skills": [{"id": 40, "resume_id": 1, "name": "Python"}],
        "resume_languages": [
            {"id": 50, "resume_id": 1, "name": "English"},
            {"id": 51, "resume_id": 7, "name": "Korean"},
        ],
        "resume_awards": [{"id": 60, "resume_id": 2, "name": "Ghost Award"}],
    }


@pytest.fixture
def fake_engine_factory():
    """Factory building `FakeEngine` instances."""
    return FakeEngine


@pytest.fixture
def fake_engine(sample_tables):
    """A fake engine populated with the sample tables."""
    return FakeEngine(tables=sample_tables)


@pytest.fixture(autouse=True)
def jwt_environment(monkeypatch):
    """Auto-used fixture providing a valid JWT configuration and fresh settings."""
    monkeypatch.setenv("API_JWT_SECRET", TEST_SECRET)
    monkeypatch.setenv("API_JWT_ALGORITHM", TEST_ALGORITHM)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_token():
    """Factory encoding claims into a token signed like the server expects."""

    def _make_token(claims=None, secret=TEST_SECRET, algorithm=TEST_ALGORITHM):
        return jwt.encode(claims or {"sub": "tester"}, secret, algorithm=algorithm)

    return _make_token


@pytest.fixture
def auth_headers(make_token):
    """Headers carrying a valid `jwt ` credential."""
    return {"Authorization": f"jwt {make_token()}"}


@pytest.fixture
def app(fake_engine) -> FastAPI:
    """Fixture to create a new app whose lifespan installs the fake engine."""
    with patch("resume_api.app.main.create_db_engine", return_value=fake_engine):
        _app = create_app()
        yield _app
    _app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Fixture to create a test client for each test."""
    with TestClient(app) as c:
        yield c
