"""Test configuration and fixtures."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest

from actions_maintainer.rules.defaults import default_rule_set
from actions_maintainer.rules.models import RuleSet
from actions_maintainer.workflow.models import ActionReference

CHECKOUT_V4_SHA = "b4ffde65f46336ab88eb53be808477a3936bae11"
CHECKOUT_V3_SHA = "f43a0e5ff2bd294095638e18286ca9a3d1956744"


class FakeContentResolver:
    """In-memory stand-in for the GitHub client's resolution methods."""

    def __init__(
        self,
        tags: dict[str, dict[str, str]] | None = None,
        branches: dict[str, dict[str, str]] | None = None,
    ):
        self.tags = tags or {}
        self.branches = branches or {}
        self.failing: set[str] = set()
        self.resolve_calls: list[tuple[str, str, str]] = []
        self.tag_calls: list[tuple[str, str]] = []

    def resolve_ref(self, owner: str, repo: str, ref: str) -> str:
        self.resolve_calls.append((owner, repo, ref))
        full_name = f"{owner}/{repo}"
        if full_name in self.failing:
            raise ConnectionError("network unreachable")
        for source in (self.tags, self.branches):
            sha = source.get(full_name, {}).get(ref)
            if sha:
                return sha
        raise LookupError(f"unknown ref {ref}")

    def list_tags(self, owner: str, repo: str) -> dict[str, str]:
        self.tag_calls.append((owner, repo))
        full_name = f"{owner}/{repo}"
        if full_name in self.failing:
            raise ConnectionError("network unreachable")
        return dict(self.tags.get(full_name, {}))


class FakeClock:
    """Controllable clock for cache expiry tests."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def fake_resolver() -> FakeContentResolver:
    """Resolver knowing a few actions/checkout tags and branches."""
    return FakeContentResolver(
        tags={
            "actions/checkout": {
                "v4": CHECKOUT_V4_SHA,
                "v4.1.1": CHECKOUT_V4_SHA,
                "v3": CHECKOUT_V3_SHA,
                "v3.6.0": CHECKOUT_V3_SHA,
            },
            "actions/setup-node": {
                "v4": "60edb5dd545a775178f52524783378180af0d1f8",
                "v3": "1a4442cacd436585916779262731d5b162bc6ec7",
            },
        },
        branches={"actions/checkout": {"main": "a" * 40}},
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rule_set() -> RuleSet:
    return default_rule_set()


def _make_ref(uses: str, **fields: object) -> ActionReference:
    repository, version = uses.split("@", 1)
    values: dict[str, object] = {
        "context": "job:build/step:step-1",
        "file_path": ".github/workflows/ci.yml",
    }
    values.update(fields)
    return ActionReference(repository=repository, version=version, **values)


@pytest.fixture
def make_ref() -> Callable[..., ActionReference]:
    """Factory building an ActionReference from ``owner/repo@version``."""
    return _make_ref


@pytest.fixture
def resolver_factory() -> type[FakeContentResolver]:
    """The fake resolver class, for tests needing their own tag data."""
    return FakeContentResolver
