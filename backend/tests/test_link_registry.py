from datetime import timedelta

import pytest

from conftest import T0
from photobox.services.link_registry import LinkExpired, LinkNotFound

TTL = timedelta(hours=48)


def test_lookup_unknown_id_raises_not_found(registry):
    with pytest.raises(LinkNotFound):
        registry.lookup("never-inserted")


def test_insert_sets_expiry_from_clock(registry):
    entry = registry.insert("abc", "20261019/abc/1-cat.png", TTL)
    assert entry.created_at == T0
    assert entry.expires_at == T0 + TTL
    assert registry.lookup("abc").storage_key == "20261019/abc/1-cat.png"


@pytest.mark.parametrize("file_id,key,ttl", [
    ("", "k", TTL),
    ("id", "", TTL),
    ("id", "k", timedelta(0)),
])
def test_insert_rejects_invalid_input(registry, file_id, key, ttl):
    with pytest.raises(ValueError):
        registry.insert(file_id, key, ttl)
    assert len(registry) == 0


def test_lookup_valid_until_just_before_expiry(registry, clock):
    registry.insert("abc", "key", TTL)
    clock.advance(hours=47, minutes=59, seconds=59)
    assert registry.lookup("abc").storage_key == "key"


def test_lookup_expired_at_exact_expiry_and_deletes(registry, clock):
    registry.insert("abc", "key", TTL)
    clock.advance(hours=48)
    with pytest.raises(LinkExpired):
        registry.lookup("abc")
    assert "abc" not in registry


def test_second_lookup_after_expiry_is_not_found(registry, clock):
    registry.insert("abc", "key", TTL)
    clock.advance(hours=49)
    with pytest.raises(LinkExpired):
        registry.lookup("abc")
    with pytest.raises(LinkNotFound):
        registry.lookup("abc")


def test_expiry_does_not_depend_on_sweep(registry, clock):
    registry.insert("abc", "key", TTL)
    clock.advance(hours=49)
    # sweep with a stale "now" leaves the entry physically present
    assert registry.sweep(T0) == 0
    assert "abc" in registry
    with pytest.raises(LinkExpired):
        registry.lookup("abc")


def test_sweep_removes_only_entries_expired_before_now(registry, clock):
    registry.insert("old", "k1", timedelta(hours=1))
    registry.insert("edge", "k2", timedelta(hours=2))
    registry.insert("fresh", "k3", TTL)

    removed = registry.sweep(T0 + timedelta(hours=2))

    assert removed == 1
    assert "old" not in registry
    # expires_at == now is not strictly before now
    assert "edge" in registry
    assert "fresh" in registry


def test_sweep_twice_returns_zero_second_time(registry, clock):
    registry.insert("a", "k1", timedelta(hours=1))
    registry.insert("b", "k2", timedelta(hours=1))
    clock.advance(hours=3)
    assert registry.sweep() == 2
    assert registry.sweep() == 0
    assert len(registry) == 0


def test_colliding_insert_last_write_wins(registry):
    registry.insert("abc", "first", TTL)
    registry.insert("abc", "second", TTL)
    assert len(registry) == 1
    assert registry.lookup("abc").storage_key == "second"
