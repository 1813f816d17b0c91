"""Update plan data structures."""

from dataclasses import dataclass, field

from ..analysis.models import Issue, IssueType


@dataclass
class PlanRepository:
    """Repository an update plan targets."""

    owner: str
    name: str
    full_name: str
    default_branch: str = "main"


@dataclass
class ActionUpdate:
    """A single action reference to move to a new version."""

    file_path: str
    action_repo: str
    current_version: str
    target_version: str
    issue: Issue
    target_repo: str = ""

    @property
    def destination_repo(self) -> str:
        return self.target_repo or self.action_repo

    @property
    def issue_type(self) -> IssueType:
        return self.issue.issue_type


@dataclass
class UpdatePlan:
    """All updates for one repository, applied together in one pull request."""

    repository: PlanRepository
    updates: list[ActionUpdate] = field(default_factory=list)

    @property
    def files(self) -> list[str]:
        """Workflow files touched by the plan, in first-seen order."""
        return list(dict.fromkeys(u.file_path for u in self.updates))

    def updates_for(self, file_path: str) -> list[ActionUpdate]:
        return [u for u in self.updates if u.file_path == file_path]

    def updates_by_type(self) -> dict[IssueType, list[ActionUpdate]]:
        grouped: dict[IssueType, list[ActionUpdate]] = {}
        for update in self.updates:
            grouped.setdefault(update.issue_type, []).append(update)
        return grouped
