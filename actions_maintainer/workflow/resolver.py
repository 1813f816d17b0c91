"""Resolve action versions to commit SHAs and find equivalent versions.

Different refs can name the same commit (``v4``, ``v4.2.2`` and the commit SHA
itself), so version comparison is done on commit SHAs where possible. Lookups
go through a ResolutionCache; any lookup failure degrades to plain string
comparison instead of failing the scan.
"""

import logging
from collections.abc import Iterable
from datetime import timedelta
from typing import Protocol

from ..cache import CacheKind, ResolutionCache, VersionIndex
from ..exceptions import InvalidRepositoryError, ResolutionError
from .models import ActionReference, ResolvedReference

logger = logging.getLogger(__name__)

BRANCH_REFS = frozenset({"main", "master"})


class ContentResolver(Protocol):
    """The part of the GitHub client the resolver depends on."""

    def resolve_ref(self, owner: str, repo: str, ref: str) -> str:
        """Return the commit SHA ``ref`` points to."""
        ...

    def list_tags(self, owner: str, repo: str) -> dict[str, str]:
        """Return every tag of the repository mapped to its commit SHA."""
        ...


def split_repository(repository: str) -> tuple[str, str]:
    """Split ``owner/name`` into its parts.

    Raises:
        InvalidRepositoryError: If the identifier is not exactly owner/name
    """
    parts = repository.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise InvalidRepositoryError(repository)
    return parts[0], parts[1]


def build_version_index(tags: dict[str, str]) -> VersionIndex:
    """Build the version -> SHA map and its SHA -> versions inverse."""
    aliases: dict[str, list[str]] = {}
    for tag, sha in tags.items():
        aliases.setdefault(sha, []).append(tag)
    return VersionIndex(versions=dict(tags), aliases=aliases)


class VersionResolver:
    """Resolves action references and compares versions by commit."""

    def __init__(
        self,
        client: ContentResolver | None,
        skip_resolution: bool = False,
        cache: ResolutionCache | None = None,
        cache_ttl: timedelta | None = None,
    ):
        """Initialize the resolver.

        Args:
            client: Collaborator mapping refs to SHAs; None disables resolution
            skip_resolution: Compare versions as plain strings only
            cache: Shared cache; a private one is created if omitted
            cache_ttl: TTL for entries written by this resolver
        """
        self.client = client
        self.skip_resolution = skip_resolution or client is None
        self.cache = cache if cache is not None else ResolutionCache()
        self.cache_ttl = cache_ttl

    def resolve_references(
        self, refs: Iterable[ActionReference]
    ) -> list[ResolvedReference]:
        """Resolve each reference to its commit SHA and aliases.

        Never raises: a reference that cannot be resolved is returned with an
        empty ``resolved_id`` and no aliases.
        """
        refs = list(refs)
        if self.skip_resolution:
            return [ResolvedReference.from_reference(ref) for ref in refs]

        outcomes: dict[tuple[str, str], tuple[str, frozenset[str]]] = {}
        resolved: list[ResolvedReference] = []

        for ref in refs:
            key = (ref.repository, ref.version)
            if key not in outcomes:
                try:
                    outcomes[key] = self._resolve(ref.repository, ref.version)
                except Exception as e:
                    logger.warning(
                        "Could not resolve %s@%s, comparing by name: %s",
                        ref.repository,
                        ref.version,
                        e,
                    )
                    outcomes[key] = ("", frozenset())

            resolved_id, aliases = outcomes[key]
            resolved.append(
                ResolvedReference.from_reference(ref, resolved_id, aliases)
            )

        return resolved

    def _resolve(self, repository: str, version: str) -> tuple[str, frozenset[str]]:
        owner, repo = split_repository(repository)
        sha = self.resolve_ref(owner, repo, version)

        index = self._ensure_version_index(owner, repo)
        if index is None:
            return sha, frozenset()

        aliases = frozenset(v for v in index.aliases.get(sha, []) if v != version)
        logger.debug(
            "Resolved %s@%s -> %s (aliases: %s)",
            repository,
            version,
            sha,
            sorted(aliases),
        )
        return sha, aliases

    def resolve_ref(self, owner: str, repo: str, ref: str) -> str:
        """Resolve a ref to a commit SHA, consulting the cache first.

        Raises:
            ResolutionError: If the collaborator cannot resolve the ref
        """
        cached, found = self.cache.get(CacheKind.REF, (owner, repo, ref))
        if found:
            return cached

        if self.client is None:
            raise ResolutionError(f"{owner}/{repo}", ref, "resolution disabled")

        try:
            sha = self.client.resolve_ref(owner, repo, ref)
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(f"{owner}/{repo}", ref, str(e)) from e

        if not sha:
            raise ResolutionError(f"{owner}/{repo}", ref, "empty commit SHA")

        self.cache.set(CacheKind.REF, (owner, repo, ref), sha, self.cache_ttl)
        return sha

    def _get_tags(self, owner: str, repo: str) -> dict[str, str]:
        cached, found = self.cache.get(CacheKind.TAGS, (owner, repo, ""))
        if found:
            return cached

        if self.client is None:
            raise ResolutionError(f"{owner}/{repo}", "tags", "resolution disabled")

        tags = self.client.list_tags(owner, repo)
        self.cache.set(CacheKind.TAGS, (owner, repo, ""), tags, self.cache_ttl)
        return tags

    def _ensure_version_index(self, owner: str, repo: str) -> VersionIndex | None:
        index = self.get_cached_version_info(owner, repo)
        if index is not None:
            return index

        try:
            tags = self._get_tags(owner, repo)
        except Exception as e:
            logger.debug("Could not list tags for %s/%s: %s", owner, repo, e)
            return None

        index = build_version_index(tags)
        self.cache.set(
            CacheKind.COMPREHENSIVE, (owner, repo, ""), index, self.cache_ttl
        )
        return index

    def get_cached_version_info(self, owner: str, repo: str) -> VersionIndex | None:
        """Return the cached version index for a repository, if fresh."""
        cached, found = self.cache.get(CacheKind.COMPREHENSIVE, (owner, repo, ""))
        return cached if found else None

    def are_equivalent(self, repository: str, version_a: str, version_b: str) -> bool:
        """Check whether two versions of an action point at the same commit.

        Falls back to string equality when resolution is skipped or either
        side cannot be resolved.

        Raises:
            InvalidRepositoryError: If ``repository`` is not owner/name
        """
        if self.skip_resolution or version_a == version_b:
            return version_a == version_b

        owner, repo = split_repository(repository)

        index = self.get_cached_version_info(owner, repo)
        if index is not None:
            sha_a = index.versions.get(version_a)
            sha_b = index.versions.get(version_b)
            if sha_a and sha_b:
                return sha_a == sha_b

        try:
            sha_a = self.resolve_ref(owner, repo, version_a)
            sha_b = self.resolve_ref(owner, repo, version_b)
        except ResolutionError as e:
            logger.debug("Falling back to string comparison: %s", e)
            return False

        return sha_a == sha_b

    def is_version_outdated(
        self, repository: str, current_version: str, latest_version: str
    ) -> bool:
        """Check whether ``current_version`` differs from ``latest_version``.

        Branch references are never considered outdated.
        """
        if current_version in BRANCH_REFS:
            return False

        try:
            return not self.are_equivalent(
                repository, current_version, latest_version
            )
        except InvalidRepositoryError:
            return current_version != latest_version
