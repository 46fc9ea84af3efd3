import asyncio
from datetime import timedelta

import pytest

from photobox.core.config import Settings
from photobox.tasks.sweep import sweep_expired_links, sweep_once


def test_sweep_once_removes_expired(registry, clock):
    registry.insert("a", "k1", timedelta(hours=1))
    registry.insert("b", "k2", timedelta(hours=48))
    clock.advance(hours=2)

    assert sweep_once(registry) == 1
    assert "a" not in registry
    assert "b" in registry


def test_sweep_loop_runs_until_cancelled(registry, clock):
    registry.insert("a", "k1", timedelta(hours=1))
    clock.advance(hours=2)

    async def scenario():
        task = asyncio.create_task(sweep_expired_links(registry, interval=0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert len(registry) == 0


def test_sweep_loop_survives_errors(registry):
    calls = []

    def failing_sweep(now=None):
        calls.append(now)
        raise RuntimeError("boom")

    registry.sweep = failing_sweep

    async def scenario():
        task = asyncio.create_task(sweep_expired_links(registry, interval=0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert len(calls) >= 2


def test_missing_required_lists_unset_variables():
    s = Settings()
    s.MINIO_ENDPOINT = "minio:9000"
    s.MINIO_ACCESS_KEY = ""
    s.MINIO_SECRET_KEY = "secret"
    s.MINIO_BUCKET = ""
    assert s.missing_required() == ["MINIO_ACCESS_KEY", "MINIO_BUCKET_NAME"]


def _fresh_config_module():
    """Execute config.py again so class-level defaults re-read the environment."""
    import importlib.util

    from photobox.core import config

    spec = importlib.util.spec_from_file_location("photobox_config_reloaded", config.__file__)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_link_ttl_defaults_to_48_hours(monkeypatch):
    monkeypatch.delenv("LINK_TTL_HOURS", raising=False)
    assert _fresh_config_module().settings.link_ttl == timedelta(hours=48)


def test_link_ttl_read_from_environment(monkeypatch):
    monkeypatch.setenv("LINK_TTL_HOURS", "6")
    assert _fresh_config_module().settings.link_ttl == timedelta(hours=6)


def test_startup_fails_when_required_variable_missing(monkeypatch):
    from fastapi.testclient import TestClient

    from photobox.core.config import settings
    from photobox.main import app

    monkeypatch.setattr(settings, "MINIO_ENDPOINT", "minio:9000")
    monkeypatch.setattr(settings, "MINIO_ACCESS_KEY", "")
    monkeypatch.setattr(settings, "MINIO_SECRET_KEY", "secret")
    monkeypatch.setattr(settings, "MINIO_BUCKET", "photo-box")

    with pytest.raises(RuntimeError, match="MINIO_ACCESS_KEY"):
        with TestClient(app):
            pass
