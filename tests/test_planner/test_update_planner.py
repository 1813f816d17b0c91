"""Tests for batching issues into update plans."""

import logging

import pytest

from actions_maintainer.analysis import (
    Issue,
    IssueType,
    RepositoryScanResult,
    Severity,
)
from actions_maintainer.exceptions import BatchingInvariantError
from actions_maintainer.planner import (
    PlanRepository,
    UpdatePlan,
    UpdatePlanner,
    validate_batching_invariant,
)


def _issue(
    repository: str,
    file_path: str = ".github/workflows/ci.yml",
    suggested_version: str = "v4",
    issue_type: IssueType = IssueType.OUTDATED,
    target_repository: str = "",
) -> Issue:
    return Issue(
        repository=repository,
        current_version="v3",
        suggested_version=suggested_version,
        issue_type=issue_type,
        severity=Severity.LOW,
        description="test",
        file_path=file_path,
        target_repository=target_repository,
    )


def _result(
    full_name: str, *issues: Issue, branch: str = "main"
) -> RepositoryScanResult:
    return RepositoryScanResult(
        name=full_name.split("/")[1],
        full_name=full_name,
        default_branch=branch,
        issues=list(issues),
    )


class TestUpdatePlanner:
    """Test one-plan-per-repository batching."""

    def test_one_plan_per_repository(self) -> None:
        """Test that issues across files of a repository share one plan."""
        results = [
            _result(
                "my-org/api",
                _issue("actions/checkout"),
                _issue("actions/setup-node", file_path=".github/workflows/release.yml"),
                branch="develop",
            ),
            _result("my-org/web", _issue("actions/checkout")),
        ]

        plans = UpdatePlanner().plan_updates(results)

        assert [p.repository.full_name for p in plans] == ["my-org/api", "my-org/web"]
        api = plans[0]
        assert api.repository == PlanRepository(
            owner="my-org", name="api", full_name="my-org/api", default_branch="develop"
        )
        assert len(api.updates) == 2
        assert api.files == [
            ".github/workflows/ci.yml",
            ".github/workflows/release.yml",
        ]

    def test_repositories_without_fixable_issues_are_skipped(self) -> None:
        results = [
            _result("my-org/api", _issue("actions/checkout", suggested_version="")),
            _result("my-org/web"),
        ]
        assert UpdatePlanner().plan_updates(results) == []

    def test_unfixable_issues_are_dropped(self) -> None:
        results = [
            _result(
                "my-org/api",
                _issue("actions/checkout"),
                _issue("actions/cache", suggested_version=""),
            )
        ]
        (plan,) = UpdatePlanner().plan_updates(results)
        assert [u.action_repo for u in plan.updates] == ["actions/checkout"]

    def test_duplicate_results_are_merged(self) -> None:
        """Test that the same repository reported twice still yields one plan."""
        results = [
            _result("my-org/api", _issue("actions/checkout")),
            _result("my-org/api", _issue("actions/setup-node")),
        ]

        plans = UpdatePlanner().plan_updates(results)

        assert len(plans) == 1
        assert len(plans[0].updates) == 2

    def test_update_fields(self) -> None:
        issue = _issue(
            "legacy-org/deprecated-action",
            suggested_version="v2",
            issue_type=IssueType.MIGRATION,
            target_repository="modern-org/recommended-action",
        )
        (plan,) = UpdatePlanner().plan_updates([_result("my-org/api", issue)])
        (update,) = plan.updates

        assert update.action_repo == "legacy-org/deprecated-action"
        assert update.current_version == "v3"
        assert update.target_version == "v2"
        assert update.destination_repo == "modern-org/recommended-action"
        assert update.issue_type is IssueType.MIGRATION
        assert update.issue is issue

    def test_updates_by_type(self) -> None:
        results = [
            _result(
                "my-org/api",
                _issue("actions/checkout"),
                _issue("actions/cache", issue_type=IssueType.SECURITY),
                _issue("actions/setup-node"),
            )
        ]
        (plan,) = UpdatePlanner().plan_updates(results)
        grouped = plan.updates_by_type()

        assert [u.action_repo for u in grouped[IssueType.OUTDATED]] == [
            "actions/checkout",
            "actions/setup-node",
        ]
        assert [u.action_repo for u in grouped[IssueType.SECURITY]] == [
            "actions/cache"
        ]


class TestBatchingInvariant:
    """Test validation of the plan/repository correspondence."""

    def test_valid_plans_pass(self) -> None:
        results = [_result("my-org/api", _issue("actions/checkout"))]
        plans = UpdatePlanner().plan_updates(results)
        validate_batching_invariant(results, plans)

    def test_duplicate_plan(self) -> None:
        results = [_result("my-org/api", _issue("actions/checkout"))]
        plan = UpdatePlanner().plan_updates(results)[0]

        with pytest.raises(BatchingInvariantError, match="appears in 2 plans"):
            validate_batching_invariant(results, [plan, plan])

    def test_missing_plan(self) -> None:
        results = [
            _result("my-org/api", _issue("actions/checkout")),
            _result("my-org/web", _issue("actions/checkout")),
        ]
        plans = UpdatePlanner().plan_updates(results)[:1]

        with pytest.raises(BatchingInvariantError, match="Expected 2 plans"):
            validate_batching_invariant(results, plans)

    def test_update_count_mismatch(self) -> None:
        results = [
            _result("my-org/api", _issue("actions/checkout"), _issue("actions/cache"))
        ]
        plan = UpdatePlanner().plan_updates(results)[0]
        truncated = UpdatePlan(repository=plan.repository, updates=plan.updates[:1])

        with pytest.raises(BatchingInvariantError, match="Expected 2 updates"):
            validate_batching_invariant(results, [truncated])

    def test_violation_is_logged_not_raised(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        def always_fails(results, plans):
            raise BatchingInvariantError("boom")

        monkeypatch.setattr(
            "actions_maintainer.planner.planner.validate_batching_invariant",
            always_fails,
        )
        results = [_result("my-org/api", _issue("actions/checkout"))]

        with caplog.at_level(logging.ERROR):
            plans = UpdatePlanner().plan_updates(results)

        assert len(plans) == 1
        assert "Batching invariant violated: boom" in caplog.text
