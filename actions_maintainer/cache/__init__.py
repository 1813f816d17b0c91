"""Resolution cache package."""

from .store import DEFAULT_TTL, CacheEntry, CacheKind, ResolutionCache, VersionIndex

__all__ = [
    "DEFAULT_TTL",
    "CacheEntry",
    "CacheKind",
    "ResolutionCache",
    "VersionIndex",
]
