import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from battery_scm.database import build_engine, create_db_and_tables, get_session
from battery_scm.main import app
from battery_scm.store import ScmStore


@pytest.fixture
def engine():
    eng = build_engine("sqlite://")
    create_db_and_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def store(session):
    return ScmStore(session)


@pytest.fixture
def client(engine):
    def _session_override():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _session_override
    # no context manager: startup (global seed) is not run
    yield TestClient(app)
    app.dependency_overrides.clear()
