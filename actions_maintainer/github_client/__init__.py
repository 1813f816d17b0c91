"""GitHub client package for API interaction."""

from .client import GitHubClient
from .models import CreatedPullRequest, GitHubRepository, WorkflowFile

__all__ = [
    "GitHubClient",
    "GitHubRepository",
    "WorkflowFile",
    "CreatedPullRequest",
]
