"""Test fixtures: a started store in a temp dir and a FastAPI test app around it."""
import tempfile

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from disk_ttl_cache.api.routes_cache import router as cache_router
from disk_ttl_cache.settings import Settings
from disk_ttl_cache.storage import CacheKey, DiskStore


def create_test_app(*, require_auth: bool = False, cache_path: str | None = None, start: bool = True) -> FastAPI:
    """Creates a FastAPI test app with a store on a temp directory (cleaner disabled)."""
    app = FastAPI(title="Disk TTL cache test", version="0.1.0")
    app.include_router(cache_router)

    settings = Settings(
        require_auth=require_auth,
        api_key="test-secret-key",
        cache_path=cache_path or tempfile.mkdtemp(prefix="disk_ttl_cache_test_"),
        clean_every=0,
        default_ttl=5000,
    )
    store = DiskStore(settings.cache_path, clean_every=settings.clean_every)
    if start:
        store.start()

    app.state.settings = settings
    app.state.store = store
    return app


@pytest.fixture
def store(tmp_path):
    """Started store without a background cleaner."""
    s = DiskStore(tmp_path, clean_every=0)
    s.start()
    yield s
    s.stop()


@pytest.fixture
def key():
    return CacheKey(segment="test", id="x")


@pytest.fixture
def app(tmp_path):
    """App without authentication."""
    app = create_test_app(cache_path=str(tmp_path))
    yield app
    app.state.store.stop()


@pytest.fixture
def app_with_auth(tmp_path):
    """App with authentication enabled."""
    app = create_test_app(require_auth=True, cache_path=str(tmp_path))
    yield app
    app.state.store.stop()


@pytest.fixture
def client(app: FastAPI):
    """HTTP client for the app without authentication."""
    return TestClient(app)


@pytest.fixture
def client_with_auth(app_with_auth: FastAPI):
    """HTTP client for the app with authentication."""
    return TestClient(app_with_auth)


@pytest.fixture
def client_not_started(tmp_path):
    """HTTP client for an app whose store was never started."""
    return TestClient(create_test_app(cache_path=str(tmp_path), start=False))
