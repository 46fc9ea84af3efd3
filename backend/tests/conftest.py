import io
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from photobox.core.config import settings
from photobox.core.minio_client import StorageError
from photobox.dependencies import get_object_store, get_registry
from photobox.main import app
from photobox.services.link_registry import LinkRegistry

T0 = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class FrozenClock:
    def __init__(self, now: datetime = T0):
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class FakeObject(io.BytesIO):
    def release_conn(self):
        pass


class FakeObjectStore:
    """Dict-backed stand-in for :class:`photobox.core.minio_client.ObjectStore`."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.fail_writes = False
        self.fail_reads = False

    def put_file(self, key, path, content_type="application/octet-stream"):
        if self.fail_writes:
            raise StorageError("write refused")
        with open(path, "rb") as fh:
            self.objects[key] = fh.read()
        self.content_types[key] = content_type
        return key

    def get(self, key):
        if self.fail_reads or key not in self.objects:
            raise StorageError(f"no such object {key}")
        return FakeObject(self.objects[key])

    def ensure_bucket(self):
        pass

    def ping(self):
        pass


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def registry(clock):
    return LinkRegistry(clock=clock)


@pytest.fixture
def store():
    return FakeObjectStore()


@pytest.fixture
def client(registry, store, monkeypatch):
    monkeypatch.setattr(settings, "SERVER_URL", "http://booth.example")
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_object_store] = lambda: store
    # no context manager: lifespan (bucket check, sweep task) is not started
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def png_bytes():
    # PNG signature followed by filler, roughly 10KB
    return b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 40
