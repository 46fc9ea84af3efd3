"""In-memory registry of shareable upload links.

Each entry maps an opaque file id to the storage key of the uploaded object
and the instant the link stops being valid. Entries are never updated; they
are removed either when a lookup finds them expired or by :meth:`sweep`.
Nothing is persisted, so a restart drops every outstanding link.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LinkError(Exception):
    def __init__(self, file_id: str):
        super().__init__(file_id)
        self.file_id = file_id


class LinkNotFound(LinkError):
    """No entry exists for the id (never issued, swept, or already expired)."""


class LinkExpired(LinkError):
    """The entry existed but its expiry has passed. It has been removed."""


@dataclass(frozen=True)
class LinkEntry:
    file_id: str
    storage_key: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class LinkRegistry:
    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._entries: dict[str, LinkEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def insert(self, file_id: str, storage_key: str, ttl: timedelta) -> LinkEntry:
        if not file_id:
            raise ValueError("file_id must not be empty")
        if not storage_key:
            raise ValueError("storage_key must not be empty")
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")

        created = self._clock()
        entry = LinkEntry(
            file_id=file_id,
            storage_key=storage_key,
            created_at=created,
            expires_at=created + ttl,
        )
        with self._lock:
            # ids are random tokens; a collision simply replaces the old entry
            self._entries[file_id] = entry
        return entry

    def lookup(self, file_id: str) -> LinkEntry:
        """Return the live entry for ``file_id``.

        Raises :class:`LinkNotFound` when there is no entry and
        :class:`LinkExpired` when the entry is past its expiry, in which case
        it is deleted before raising. Expiry is checked against the clock on
        every call, independently of the sweep cadence.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(file_id)
            if entry is None:
                raise LinkNotFound(file_id)
            if entry.is_expired(now):
                del self._entries[file_id]
                raise LinkExpired(file_id)
            return entry

    def sweep(self, now: datetime | None = None) -> int:
        """Delete every entry that expired strictly before ``now``."""
        if now is None:
            now = self._clock()
        with self._lock:
            expired = [fid for fid, e in self._entries.items() if e.expires_at < now]
            for fid in expired:
                del self._entries[fid]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, file_id: object) -> bool:
        with self._lock:
            return file_id in self._entries
