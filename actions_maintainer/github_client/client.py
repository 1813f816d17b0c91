"""GitHub API client using PyGitHub."""

import logging
import os
import time
from collections.abc import Callable
from typing import TypeVar

from github import Github
from github.GithubException import (
    GithubException,
    RateLimitExceededException,
    UnknownObjectException,
)
from github.Repository import Repository
from rich.console import Console

from ..exceptions import ResolutionError
from .models import GitHubRepository, WorkflowFile

console = Console()
logger = logging.getLogger(__name__)

WORKFLOWS_DIR = ".github/workflows"
MAX_RATE_LIMIT_RETRIES = 3
RATE_LIMIT_FALLBACK_WAIT = 60.0

T = TypeVar("T")


class GitHubClient:
    """GitHub API client with rate limiting and authentication.

    Also serves as the resolver's ContentResolver: ``resolve_ref`` and
    ``list_tags`` map versions to commit SHAs.
    """

    def __init__(self, token: str | None = None):
        """Initialize GitHub client with authentication.

        Args:
            token: GitHub personal access token. If None, reads from
                GITHUB_TOKEN env var.
        """
        self.token = token or os.getenv("GITHUB_TOKEN")
        if not self.token:
            raise ValueError(
                "GitHub token is required. Set GITHUB_TOKEN environment variable."
            )

        self.github = Github(self.token)

    def _seconds_until_reset(self) -> float:
        """Seconds until the core rate limit resets (at least one)."""
        try:
            reset_time = self.github.get_rate_limit().core.reset.timestamp()
        except Exception as e:
            logger.debug("Rate limit lookup failed: %s", e)
            return RATE_LIMIT_FALLBACK_WAIT
        return max(reset_time - time.time() + 1, 1.0)

    def _check_rate_limit(self) -> None:
        """Check rate limit and sleep if necessary."""
        try:
            rate_limit = self.github.get_rate_limit()
            remaining = rate_limit.core.remaining
            logger.debug("GitHub API rate limit: %s requests remaining", remaining)

            if remaining < 10:
                sleep_time = self._seconds_until_reset()
                console.print(
                    f"Rate limit low, sleeping for {sleep_time:.1f} seconds..."
                )
                time.sleep(sleep_time)

        except Exception as e:
            logger.debug("Rate limit check failed: %s", e)

    def _retry_on_rate_limit(self, operation: Callable[[], T], what: str) -> T:
        """Run ``operation``, waiting for the rate limit to reset between tries.

        Raises:
            RateLimitExceededException: If the limit is still exceeded after
                MAX_RATE_LIMIT_RETRIES attempts
        """
        attempt = 1
        while True:
            try:
                return operation()
            except RateLimitExceededException:
                if attempt >= MAX_RATE_LIMIT_RETRIES:
                    raise
                attempt += 1
                sleep_time = self._seconds_until_reset()
                console.print(
                    f"Rate limit exceeded during {what}, "
                    f"waiting {sleep_time:.1f} seconds..."
                )
                time.sleep(sleep_time)

    def _convert_repository(self, repo: Repository) -> GitHubRepository:
        """Convert PyGitHub repository to our model."""
        return GitHubRepository(
            owner=repo.owner.login,
            name=repo.name,
            full_name=repo.full_name,
            default_branch=repo.default_branch or "main",
            archived=bool(repo.archived),
            fork=bool(repo.fork),
        )

    def get_repository(self, owner: str, repo: str) -> Repository:
        """Get repository object."""
        try:
            return self.github.get_repo(f"{owner}/{repo}")
        except UnknownObjectException:
            raise ValueError(f"Repository {owner}/{repo} not found")

    def get_repository_info(self, owner: str, repo: str) -> GitHubRepository:
        """Get a repository as our model."""
        self._check_rate_limit()
        return self._convert_repository(self.get_repository(owner, repo))

    def resolve_ref(self, owner: str, repo: str, ref: str) -> str:
        """Resolve a tag, branch or commit to its commit SHA.

        Tags are tried first, then branches, then the ref as a commit.

        Raises:
            ResolutionError: If the ref matches none of them
        """
        self._check_rate_limit()
        repository = self.get_repository(owner, repo)
        return self._retry_on_rate_limit(
            lambda: self._resolve_in(repository, f"{owner}/{repo}", ref),
            "ref resolution",
        )

    def _resolve_in(self, repository: Repository, full_name: str, ref: str) -> str:
        try:
            git_ref = repository.get_git_ref(f"tags/{ref}")
            sha = git_ref.object.sha
            if git_ref.object.type == "tag":
                # Annotated tag: follow the tag object to its commit
                sha = repository.get_git_tag(sha).object.sha
            return sha
        except UnknownObjectException:
            pass

        try:
            return repository.get_branch(ref).commit.sha
        except RateLimitExceededException:
            raise
        except GithubException:
            pass

        try:
            return repository.get_commit(ref).sha
        except RateLimitExceededException:
            raise
        except GithubException as e:
            raise ResolutionError(full_name, ref, "not a tag, branch or commit") from e

    def list_tags(self, owner: str, repo: str) -> dict[str, str]:
        """Return every tag of a repository mapped to its commit SHA."""
        self._check_rate_limit()
        repository = self.get_repository(owner, repo)

        return self._retry_on_rate_limit(
            lambda: {tag.name: tag.commit.sha for tag in repository.get_tags()},
            "tag listing",
        )

    def list_repositories(
        self, owner: str, include_archived: bool = False, include_forks: bool = False
    ) -> list[GitHubRepository]:
        """List repositories of an organization, or of a user as fallback.

        Args:
            owner: Organization or user login
            include_archived: Include archived repositories
            include_forks: Include forks

        Returns:
            List of GitHubRepository objects
        """
        self._check_rate_limit()

        try:
            repos = self.github.get_organization(owner).get_repos()
        except UnknownObjectException:
            repos = self.github.get_user(owner).get_repos()

        def collect() -> list[GitHubRepository]:
            result = []
            for repo in repos:
                converted = self._convert_repository(repo)
                if converted.archived and not include_archived:
                    continue
                if converted.fork and not include_forks:
                    continue
                result.append(converted)
            return result

        return self._retry_on_rate_limit(collect, "repository listing")

    def get_workflow_files(
        self, full_name: str, ref: str | None = None
    ) -> list[WorkflowFile]:
        """Fetch every workflow file of a repository.

        A repository without a workflows directory has no workflow files.
        """
        self._check_rate_limit()
        owner, _, name = full_name.partition("/")
        repository = self.get_repository(owner, name)

        try:
            if ref:
                contents = repository.get_contents(WORKFLOWS_DIR, ref=ref)
            else:
                contents = repository.get_contents(WORKFLOWS_DIR)
        except UnknownObjectException:
            return []

        if not isinstance(contents, list):
            contents = [contents]

        files = []
        for item in contents:
            if item.type != "file" or not item.name.endswith((".yml", ".yaml")):
                continue
            files.append(
                WorkflowFile(
                    path=item.path,
                    content=item.decoded_content.decode("utf-8"),
                    sha=item.sha,
                )
            )
        return files

    def create_pull_request(
        self,
        full_name: str,
        base_branch: str,
        branch: str,
        title: str,
        body: str,
        files: dict[str, tuple[str, str]],
        commit_message: str,
    ) -> tuple[int, str]:
        """Create a branch, commit updated files to it and open a pull request.

        Args:
            full_name: Repository as owner/name
            base_branch: Branch the pull request targets
            branch: New branch to create
            title: Pull request title
            body: Pull request body
            files: path -> (new content, current blob SHA)
            commit_message: Message for each file commit

        Returns:
            Tuple of (pull request number, html URL)
        """
        self._check_rate_limit()
        owner, _, name = full_name.partition("/")
        repository = self.get_repository(owner, name)

        try:
            base = repository.get_branch(base_branch)
            repository.create_git_ref(ref=f"refs/heads/{branch}", sha=base.commit.sha)

            for path, (content, sha) in files.items():
                repository.update_file(
                    path, commit_message, content, sha, branch=branch
                )

            pull = repository.create_pull(
                title=title, body=body, head=branch, base=base_branch
            )
            console.print(f"Opened pull request #{pull.number} in {full_name}")
            return pull.number, pull.html_url

        except Exception as e:
            console.print(f"Error creating pull request in {full_name}: {e}")
            raise
