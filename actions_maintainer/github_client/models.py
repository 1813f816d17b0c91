"""Pydantic models for GitHub data used by the scanner.

These models map to GitHub's REST API v3 response structures.
API Reference: https://docs.github.com/en/rest/repos
"""

from pydantic import BaseModel, Field


class GitHubRepository(BaseModel):
    """Repository model.

    Maps to GitHub REST API Repository object.
    API Reference: https://docs.github.com/en/rest/repos/repos
    """

    owner: str = Field(..., description="Owner login (user or organization)")
    name: str = Field(..., description="Repository name without owner")
    full_name: str = Field(..., description="owner/name")
    default_branch: str = Field("main", description="Default branch name")
    archived: bool = Field(False, description="Whether the repository is archived")
    fork: bool = Field(False, description="Whether the repository is a fork")


class WorkflowFile(BaseModel):
    """A workflow file under .github/workflows.

    Maps to GitHub REST API Content object.
    API Reference: https://docs.github.com/en/rest/repos/contents
    """

    path: str = Field(..., description="Path within the repository")
    content: str = Field(..., description="Decoded file content")
    sha: str = Field("", description="Blob SHA, needed to update the file")


class CreatedPullRequest(BaseModel):
    """A pull request opened (or previewed) for an update plan."""

    repository: str = Field(..., description="owner/name")
    title: str
    branch: str
    number: int | None = Field(None, description="None for dry-run previews")
    url: str | None = None
    update_count: int = 0
    changes: list[str] = Field(
        default_factory=list, description="Parameter changes applied to workflows"
    )
