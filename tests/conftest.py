import pytest
from fastapi.testclient import TestClient

from tinylink.config import Settings
from tinylink.database import Store
from tinylink.main import create_app


@pytest.fixture
def settings():
    return Settings(
        environment="dev",
        database_url="sqlite://",
        host="127.0.0.1",
        port=3001,
        base_url="http://sho.rt",
    )


@pytest.fixture
def store(settings):
    """Fresh in-memory SQLite store for every test."""
    store = Store(settings.database_url)
    store.create_all()
    yield store
    store.dispose()


@pytest.fixture
def db(store):
    session = store.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(settings, store):
    app = create_app(settings, store)
    with TestClient(app) as c:
        yield c
