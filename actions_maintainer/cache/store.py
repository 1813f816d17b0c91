"""TTL key-value cache for version resolution results."""

import json
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Any, NamedTuple

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=1)


class CacheKind(str, Enum):
    """Payload kinds stored in the resolution cache."""

    REF = "ref"
    TAGS = "tags"
    COMPREHENSIVE = "comprehensive"


class VersionIndex(NamedTuple):
    """Complete version map for a repository plus its inverse alias index."""

    versions: dict[str, str]
    aliases: dict[str, list[str]]


# (owner, repo, discriminator); discriminator is the ref for REF entries and
# empty for the per-repository kinds.
CacheKey = tuple[str, str, str]


@dataclass
class CacheEntry:
    """A single cached payload with its validity window."""

    kind: CacheKind
    key: CacheKey
    value: Any
    cached_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class _SnapshotEntry(BaseModel):
    """On-disk representation of a cache entry."""

    kind: CacheKind
    owner: str
    repo: str
    discriminator: str = ""
    value: Any = Field(..., description="ref id, tag map, or version index")
    cached_at: datetime
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResolutionCache:
    """Thread-safe TTL cache for ref, tag-map and comprehensive entries.

    Expiry is evaluated lazily on read, and on demand via ``clean_expired``.
    Capacity is unbounded; one scan's working set is bounded by the number
    of repositories and tags it touches.
    """

    def __init__(
        self,
        default_ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the cache.

        Args:
            default_ttl: TTL applied when ``set`` is called without one
            clock: Callable returning the current UTC time (for tests)
        """
        self.default_ttl = default_ttl
        self._clock = clock or _utcnow
        self._entries: dict[tuple[CacheKind, str, str, str], CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, kind: CacheKind, key: CacheKey) -> tuple[Any, bool]:
        """Return ``(value, found)``; expired entries are evicted and missed."""
        storage_key = (kind, *key)
        with self._lock:
            entry = self._entries.get(storage_key)
            if entry is None:
                logger.debug("Cache MISS %s %s", kind.value, "/".join(key))
                return None, False

            if entry.is_expired(self._clock()):
                del self._entries[storage_key]
                logger.debug(
                    "Cache EXPIRED %s %s (valid until %s)",
                    kind.value,
                    "/".join(key),
                    entry.expires_at.isoformat(),
                )
                return None, False

        logger.debug("Cache HIT %s %s", kind.value, "/".join(key))
        return entry.value, True

    def set(
        self,
        kind: CacheKind,
        key: CacheKey,
        value: Any,
        ttl: timedelta | None = None,
    ) -> None:
        """Store a value under ``key`` for ``ttl`` (default TTL if omitted)."""
        if kind is CacheKind.COMPREHENSIVE and not isinstance(value, VersionIndex):
            versions, aliases = value
            value = VersionIndex(versions=versions, aliases=aliases)

        now = self._clock()
        entry = CacheEntry(
            kind=kind,
            key=key,
            value=value,
            cached_at=now,
            expires_at=now + (ttl if ttl is not None else self.default_ttl),
        )
        with self._lock:
            self._entries[(kind, *key)] = entry

    def clean_expired(self) -> int:
        """Remove every expired entry and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for storage_key in expired:
                del self._entries[storage_key]

        if expired:
            logger.info("Cleaned %d expired cache entries", len(expired))
        return len(expired)

    def stats(self) -> dict[str, Any]:
        """Return entry counts overall and per kind, split by validity."""
        now = self._clock()
        by_kind: dict[str, dict[str, int]] = {
            kind.value: {"valid": 0, "expired": 0} for kind in CacheKind
        }
        with self._lock:
            for entry in self._entries.values():
                bucket = "expired" if entry.is_expired(now) else "valid"
                by_kind[entry.kind.value][bucket] += 1

        valid = sum(counts["valid"] for counts in by_kind.values())
        expired = sum(counts["expired"] for counts in by_kind.values())
        return {
            "total_entries": valid + expired,
            "valid_entries": valid,
            "expired_entries": expired,
            "by_kind": by_kind,
        }

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def save(self, path: Path) -> int:
        """Persist valid entries to a JSON file.

        Args:
            path: Destination file; parent directories are created

        Returns:
            Number of entries written
        """
        now = self._clock()
        with self._lock:
            entries = [e for e in self._entries.values() if not e.is_expired(now)]

        snapshot = []
        for entry in entries:
            value = entry.value
            if isinstance(value, VersionIndex):
                value = value._asdict()
            owner, repo, discriminator = entry.key
            snapshot.append(
                _SnapshotEntry(
                    kind=entry.kind,
                    owner=owner,
                    repo=repo,
                    discriminator=discriminator,
                    value=value,
                    cached_at=entry.cached_at,
                    expires_at=entry.expires_at,
                ).model_dump(mode="json")
            )

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump({"entries": snapshot}, f, indent=2)

        logger.debug("Saved %d cache entries to %s", len(snapshot), path)
        return len(snapshot)

    def load(self, path: Path) -> int:
        """Load entries from a JSON file written by ``save``.

        Entries that have expired since they were saved are skipped. A missing
        or unreadable file loads nothing.

        Returns:
            Number of entries loaded
        """
        if not path.exists():
            return 0

        try:
            with open(path) as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError(f"expected an object, got {type(data).__name__}")
            snapshots = [
                _SnapshotEntry.model_validate(raw) for raw in data.get("entries", [])
            ]
        except (json.JSONDecodeError, ValidationError, ValueError) as e:
            logger.warning("Ignoring unreadable cache file %s: %s", path, e)
            return 0

        now = self._clock()
        loaded = 0
        for snap in snapshots:
            if now >= snap.expires_at:
                continue

            value = snap.value
            if snap.kind is CacheKind.COMPREHENSIVE:
                value = VersionIndex(
                    versions=value["versions"], aliases=value["aliases"]
                )

            key = (snap.owner, snap.repo, snap.discriminator)
            with self._lock:
                self._entries[(snap.kind, *key)] = CacheEntry(
                    kind=snap.kind,
                    key=key,
                    value=value,
                    cached_at=snap.cached_at,
                    expires_at=snap.expires_at,
                )
            loaded += 1

        logger.debug("Loaded %d cache entries from %s", loaded, path)
        return loaded
