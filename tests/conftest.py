import pytest
from fastapi.testclient import TestClient

from todo_api.db import Database
from todo_api.main import create_app
from todo_api.schema import ensure_schema
from todo_api.settings import Settings


def make_settings(database_url: str) -> Settings:
    return Settings(
        database_url=database_url,
        host="127.0.0.1",
        port=0,
        log_level="warning",
        shutdown_timeout=5.0,
        cors_allow_origins=["*"],
    )


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'todos.db'}"


@pytest.fixture
def database(database_url):
    db = Database.connect(database_url)
    ensure_schema(db)
    yield db
    db.close()


@pytest.fixture
def app(database, database_url):
    return create_app(database, make_settings(database_url))


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
