"""Batch fixable issues into one update plan per repository."""

import logging

from ..analysis.models import RepositoryScanResult
from ..exceptions import BatchingInvariantError
from .models import ActionUpdate, PlanRepository, UpdatePlan

logger = logging.getLogger(__name__)


def validate_batching_invariant(
    results: list[RepositoryScanResult], plans: list[UpdatePlan]
) -> None:
    """Check that plans map one-to-one onto repositories with fixable issues.

    Raises:
        BatchingInvariantError: If a repository is in more than one plan, the
            plan count differs from the number of repositories with fixable
            issues, or the update count differs from the fixable issue count
    """
    fixable_repos = set()
    fixable_issues = 0
    for result in results:
        count = len(result.fixable_issues)
        if count:
            fixable_repos.add(result.full_name)
            fixable_issues += count

    plan_counts: dict[str, int] = {}
    for plan in plans:
        name = plan.repository.full_name
        plan_counts[name] = plan_counts.get(name, 0) + 1

    for name, count in plan_counts.items():
        if count != 1:
            raise BatchingInvariantError(
                f"Repository {name} appears in {count} plans, expected exactly 1"
            )

    if len(plans) != len(fixable_repos):
        raise BatchingInvariantError(
            f"Expected {len(fixable_repos)} plans for repositories with fixable "
            f"issues, got {len(plans)}"
        )

    total_updates = sum(len(plan.updates) for plan in plans)
    if total_updates != fixable_issues:
        raise BatchingInvariantError(
            f"Expected {fixable_issues} updates (fixable issues), got {total_updates}"
        )


class UpdatePlanner:
    """Builds update plans from scan results."""

    def plan_updates(self, results: list[RepositoryScanResult]) -> list[UpdatePlan]:
        """Create exactly one plan per repository with fixable issues.

        Issues without a suggested version are skipped. Results reporting the
        same repository more than once are merged into a single plan.

        Args:
            results: Per-repository scan results

        Returns:
            Plans in the order repositories were first seen
        """
        plans: dict[str, UpdatePlan] = {}

        for result in results:
            for issue in result.fixable_issues:
                plan = plans.get(result.full_name)
                if plan is None:
                    plan = UpdatePlan(
                        repository=PlanRepository(
                            owner=result.owner,
                            name=result.name,
                            full_name=result.full_name,
                            default_branch=result.default_branch,
                        )
                    )
                    plans[result.full_name] = plan

                plan.updates.append(
                    ActionUpdate(
                        file_path=issue.file_path,
                        action_repo=issue.repository,
                        current_version=issue.current_version,
                        target_version=issue.suggested_version,
                        target_repo=issue.target_repository,
                        issue=issue,
                    )
                )

        planned = list(plans.values())
        try:
            validate_batching_invariant(results, planned)
        except BatchingInvariantError as e:
            logger.error("Batching invariant violated: %s", e)

        logger.debug(
            "Planned %d updates across %d repositories",
            sum(len(p.updates) for p in planned),
            len(planned),
        )
        return planned
