"""Pydantic models for analysis issues and scan results."""

from collections import Counter
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..workflow.models import ActionReference


class IssueType(str, Enum):
    OUTDATED = "outdated"
    DEPRECATED = "deprecated"
    MIGRATION = "migration"
    SECURITY = "security"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Issue(BaseModel):
    """A problem found with one action reference."""

    model_config = ConfigDict(frozen=True)

    repository: str = Field(..., description="Action repository")
    current_version: str
    suggested_version: str = Field(
        "", description="Version to upgrade to; empty if not fixable automatically"
    )
    issue_type: IssueType
    severity: Severity
    description: str
    context: str = ""
    file_path: str = ""
    target_repository: str = Field(
        "", description="Repository to move to, for migration issues"
    )
    is_reusable: bool = False
    has_transformations: bool = False
    schema_changes: list[str] = Field(
        default_factory=list,
        description="Patch description followed by '<operation>: <reason>' lines",
    )

    @property
    def is_fixable(self) -> bool:
        return bool(self.suggested_version)

    @property
    def destination_repository(self) -> str:
        return self.target_repository or self.repository


class WorkflowFileResult(BaseModel):
    """A workflow file read from a repository."""

    path: str
    action_count: int = 0
    error: str | None = None


class RepositoryScanResult(BaseModel):
    """Analysis results for one repository."""

    name: str
    full_name: str = Field(..., description="owner/name")
    default_branch: str = "main"
    workflow_files: list[WorkflowFileResult] = Field(default_factory=list)
    actions: list[ActionReference] = Field(default_factory=list)
    issues: list[Issue] = Field(default_factory=list)

    @property
    def owner(self) -> str:
        return self.full_name.split("/", 1)[0]

    @property
    def fixable_issues(self) -> list[Issue]:
        return [issue for issue in self.issues if issue.is_fixable]


class ScanSummary(BaseModel):
    total_repositories: int = 0
    total_workflow_files: int = 0
    total_actions: int = 0
    total_issues: int = 0
    issues_by_type: dict[str, int] = Field(default_factory=dict)
    issues_by_severity: dict[str, int] = Field(default_factory=dict)
    action_usage: dict[str, int] = Field(
        default_factory=dict, description="repository -> number of references"
    )


class ScanResult(BaseModel):
    """Complete output of a scan."""

    owner: str
    scanned_at: datetime
    repositories: list[RepositoryScanResult] = Field(default_factory=list)
    summary: ScanSummary = Field(default_factory=ScanSummary)

    @classmethod
    def build(
        cls,
        owner: str,
        repositories: list[RepositoryScanResult],
        scanned_at: datetime,
    ) -> "ScanResult":
        """Create a result and compute its summary."""
        issues = [issue for repo in repositories for issue in repo.issues]
        usage = Counter(
            action.repository for repo in repositories for action in repo.actions
        )
        summary = ScanSummary(
            total_repositories=len(repositories),
            total_workflow_files=sum(len(r.workflow_files) for r in repositories),
            total_actions=sum(len(r.actions) for r in repositories),
            total_issues=len(issues),
            issues_by_type=dict(Counter(i.issue_type.value for i in issues)),
            issues_by_severity=dict(Counter(i.severity.value for i in issues)),
            action_usage=dict(usage.most_common()),
        )
        return cls(
            owner=owner,
            scanned_at=scanned_at,
            repositories=repositories,
            summary=summary,
        )
