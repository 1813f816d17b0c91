"""Tests for GitHub client."""

import os
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, Mock, patch

import pytest
from github.GithubException import (
    GithubException,
    RateLimitExceededException,
    UnknownObjectException,
)

from actions_maintainer.exceptions import ResolutionError
from actions_maintainer.github_client.client import (
    MAX_RATE_LIMIT_RETRIES,
    GitHubClient,
)


def _not_found() -> UnknownObjectException:
    return UnknownObjectException(404, "Not Found", None)


@pytest.fixture
def mock_github():
    """Patch the PyGithub entry point with a mock that has rate limit left."""
    with patch("actions_maintainer.github_client.client.Github") as mock_class:
        github = Mock()
        github.get_rate_limit.return_value.core.remaining = 5000
        mock_class.return_value = github
        yield github


@pytest.fixture
def mock_repo(mock_github: Mock) -> Mock:
    repo = Mock()
    mock_github.get_repo.return_value = repo
    return repo


def _pygithub_repo(name: str, archived: bool = False, fork: bool = False) -> Mock:
    repo = Mock()
    repo.owner.login = "my-org"
    repo.name = name
    repo.full_name = f"my-org/{name}"
    repo.default_branch = "main"
    repo.archived = archived
    repo.fork = fork
    return repo


class TestGitHubClientInit:
    """Test GitHubClient construction."""

    @patch.dict(os.environ, {"GITHUB_TOKEN": "test_token"})
    def test_init_with_env_token(self) -> None:
        """Test initialization with environment token."""
        with patch("actions_maintainer.github_client.client.Github") as mock_github:
            GitHubClient()
            mock_github.assert_called_once_with("test_token")

    def test_init_with_explicit_token(self) -> None:
        """Test initialization with explicit token."""
        with patch("actions_maintainer.github_client.client.Github") as mock_github:
            GitHubClient(token="explicit_token")
            mock_github.assert_called_once_with("explicit_token")

    @patch.dict(os.environ, {}, clear=True)
    def test_init_without_token(self) -> None:
        """Test initialization without token raises error."""
        with pytest.raises(ValueError, match="GitHub token is required"):
            GitHubClient()


class TestRepositories:
    """Test repository lookups."""

    def test_get_repository_not_found(self, mock_github: Mock) -> None:
        mock_github.get_repo.side_effect = _not_found()
        client = GitHubClient(token="test_token")

        with pytest.raises(ValueError, match="Repository my-org/api not found"):
            client.get_repository("my-org", "api")

    def test_get_repository_info(self, mock_github: Mock) -> None:
        mock_github.get_repo.return_value = _pygithub_repo("api")
        client = GitHubClient(token="test_token")

        info = client.get_repository_info("my-org", "api")

        assert info.full_name == "my-org/api"
        assert info.owner == "my-org"
        assert info.default_branch == "main"
        mock_github.get_repo.assert_called_once_with("my-org/api")

    def test_list_repositories_filters(self, mock_github: Mock) -> None:
        """Test that archived repositories and forks are skipped by default."""
        mock_github.get_organization.return_value.get_repos.return_value = [
            _pygithub_repo("api"),
            _pygithub_repo("old", archived=True),
            _pygithub_repo("fork", fork=True),
        ]
        client = GitHubClient(token="test_token")

        assert [r.name for r in client.list_repositories("my-org")] == ["api"]
        assert [
            r.name
            for r in client.list_repositories(
                "my-org", include_archived=True, include_forks=True
            )
        ] == ["api", "old", "fork"]

    def test_list_repositories_falls_back_to_user(self, mock_github: Mock) -> None:
        mock_github.get_organization.side_effect = _not_found()
        mock_github.get_user.return_value.get_repos.return_value = [
            _pygithub_repo("dotfiles")
        ]
        client = GitHubClient(token="test_token")

        repos = client.list_repositories("someone")

        assert [r.name for r in repos] == ["dotfiles"]
        mock_github.get_user.assert_called_once_with("someone")


class TestResolveRef:
    """Test tag, branch and commit resolution."""

    def test_lightweight_tag(self, mock_github: Mock, mock_repo: Mock) -> None:
        mock_repo.get_git_ref.return_value.object.sha = "commit1"
        mock_repo.get_git_ref.return_value.object.type = "commit"
        client = GitHubClient(token="test_token")

        assert client.resolve_ref("actions", "checkout", "v4") == "commit1"
        mock_repo.get_git_ref.assert_called_once_with("tags/v4")

    def test_annotated_tag(self, mock_github: Mock, mock_repo: Mock) -> None:
        """Test that annotated tags are followed to their commit."""
        mock_repo.get_git_ref.return_value.object.sha = "tagobj"
        mock_repo.get_git_ref.return_value.object.type = "tag"
        mock_repo.get_git_tag.return_value.object.sha = "commit2"
        client = GitHubClient(token="test_token")

        assert client.resolve_ref("actions", "checkout", "v4") == "commit2"
        mock_repo.get_git_tag.assert_called_once_with("tagobj")

    def test_branch(self, mock_github: Mock, mock_repo: Mock) -> None:
        mock_repo.get_git_ref.side_effect = _not_found()
        mock_repo.get_branch.return_value.commit.sha = "branchsha"
        client = GitHubClient(token="test_token")

        assert client.resolve_ref("actions", "checkout", "main") == "branchsha"

    def test_commit(self, mock_github: Mock, mock_repo: Mock) -> None:
        mock_repo.get_git_ref.side_effect = _not_found()
        mock_repo.get_branch.side_effect = GithubException(404, "No branch", None)
        mock_repo.get_commit.return_value.sha = "abc1234full"
        client = GitHubClient(token="test_token")

        assert client.resolve_ref("actions", "checkout", "abc1234") == "abc1234full"

    def test_unresolvable(self, mock_github: Mock, mock_repo: Mock) -> None:
        mock_repo.get_git_ref.side_effect = _not_found()
        mock_repo.get_branch.side_effect = GithubException(404, "No branch", None)
        mock_repo.get_commit.side_effect = GithubException(422, "No commit", None)
        client = GitHubClient(token="test_token")

        with pytest.raises(ResolutionError, match="actions/checkout@nope"):
            client.resolve_ref("actions", "checkout", "nope")

    def test_list_tags(self, mock_github: Mock, mock_repo: Mock) -> None:
        v4, v41 = Mock(), Mock()
        v4.name, v4.commit.sha = "v4", "sha4"
        v41.name, v41.commit.sha = "v4.1.0", "sha4"
        mock_repo.get_tags.return_value = [v4, v41]
        client = GitHubClient(token="test_token")

        assert client.list_tags("actions", "checkout") == {
            "v4": "sha4",
            "v4.1.0": "sha4",
        }


class TestWorkflowFiles:
    """Test reading workflow files."""

    def test_get_workflow_files(self, mock_github: Mock, mock_repo: Mock) -> None:
        ci = Mock(type="file", path=".github/workflows/ci.yml", sha="blob1")
        ci.name = "ci.yml"
        ci.decoded_content = b"name: CI\n"
        readme = Mock(type="file", path=".github/workflows/README.md", sha="blob2")
        readme.name = "README.md"
        nested = Mock(type="dir", path=".github/workflows/templates")
        nested.name = "templates"
        mock_repo.get_contents.return_value = [ci, readme, nested]
        client = GitHubClient(token="test_token")

        files = client.get_workflow_files("my-org/api", ref="develop")

        assert [(f.path, f.content, f.sha) for f in files] == [
            (".github/workflows/ci.yml", "name: CI\n", "blob1")
        ]
        mock_repo.get_contents.assert_called_once_with(
            ".github/workflows", ref="develop"
        )

    def test_no_workflows_directory(self, mock_github: Mock, mock_repo: Mock) -> None:
        mock_repo.get_contents.side_effect = _not_found()
        client = GitHubClient(token="test_token")

        assert client.get_workflow_files("my-org/api") == []


class TestCreatePullRequest:
    """Test the branch/commit/pull request sequence."""

    def test_create_pull_request(self, mock_github: Mock, mock_repo: Mock) -> None:
        mock_repo.get_branch.return_value.commit.sha = "basesha"
        mock_repo.create_pull.return_value.number = 12
        mock_repo.create_pull.return_value.html_url = "https://example/pull/12"
        client = GitHubClient(token="test_token")

        number, url = client.create_pull_request(
            full_name="my-org/api",
            base_branch="main",
            branch="actions-maintainer/update-actions-1234abcd",
            title="Update actions/checkout from v3 to v4",
            body="body",
            files={".github/workflows/ci.yml": ("new content", "blob1")},
            commit_message="Update actions/checkout from v3 to v4",
        )

        assert (number, url) == (12, "https://example/pull/12")
        mock_repo.create_git_ref.assert_called_once_with(
            ref="refs/heads/actions-maintainer/update-actions-1234abcd", sha="basesha"
        )
        mock_repo.update_file.assert_called_once_with(
            ".github/workflows/ci.yml",
            "Update actions/checkout from v3 to v4",
            "new content",
            "blob1",
            branch="actions-maintainer/update-actions-1234abcd",
        )
        mock_repo.create_pull.assert_called_once_with(
            title="Update actions/checkout from v3 to v4",
            body="body",
            head="actions-maintainer/update-actions-1234abcd",
            base="main",
        )

    def test_failure_is_reraised(self, mock_github: Mock, mock_repo: Mock) -> None:
        mock_repo.create_git_ref.side_effect = GithubException(
            422, "Reference already exists", None
        )
        client = GitHubClient(token="test_token")

        with pytest.raises(GithubException):
            client.create_pull_request(
                full_name="my-org/api",
                base_branch="main",
                branch="b",
                title="t",
                body="b",
                files={},
                commit_message="t",
            )
        mock_repo.create_pull.assert_not_called()


def _rate_limited() -> RateLimitExceededException:
    return RateLimitExceededException(403, "API rate limit exceeded", None)


class TestRateLimitRetry:
    """Test bounded waiting when the API rate limit is exceeded."""

    @pytest.fixture(autouse=True)
    def mock_sleep(self, mock_github: Mock):
        mock_github.get_rate_limit.return_value.core.reset = datetime.now(
            timezone.utc
        ) + timedelta(seconds=30)
        with patch("actions_maintainer.github_client.client.time.sleep") as sleep:
            yield sleep

    def test_retries_until_success(
        self, mock_github: Mock, mock_repo: Mock, mock_sleep: Mock
    ) -> None:
        tag = Mock()
        tag.name, tag.commit.sha = "v4", "sha4"
        mock_repo.get_tags.side_effect = [_rate_limited(), [tag]]
        client = GitHubClient(token="test_token")

        assert client.list_tags("actions", "checkout") == {"v4": "sha4"}
        mock_sleep.assert_called_once()
        (waited,), _ = mock_sleep.call_args
        assert 1 <= waited <= 32

    def test_gives_up_after_max_attempts(
        self, mock_github: Mock, mock_repo: Mock, mock_sleep: Mock
    ) -> None:
        mock_repo.get_tags.side_effect = _rate_limited()
        client = GitHubClient(token="test_token")

        with pytest.raises(RateLimitExceededException):
            client.list_tags("actions", "checkout")
        assert mock_repo.get_tags.call_count == MAX_RATE_LIMIT_RETRIES
        assert mock_sleep.call_count == MAX_RATE_LIMIT_RETRIES - 1

    def test_rate_limit_is_not_a_missing_branch(
        self, mock_github: Mock, mock_repo: Mock, mock_sleep: Mock
    ) -> None:
        """Test that a rate limit on the branch lookup is retried, not skipped."""
        mock_repo.get_git_ref.side_effect = _not_found()
        branch = Mock()
        branch.commit.sha = "branchsha"
        mock_repo.get_branch.side_effect = [_rate_limited(), branch]
        client = GitHubClient(token="test_token")

        assert client.resolve_ref("actions", "checkout", "main") == "branchsha"
        mock_repo.get_commit.assert_not_called()

    def test_repository_listing_retries(
        self, mock_github: Mock, mock_sleep: Mock
    ) -> None:
        repos = MagicMock()
        repos.__iter__.side_effect = [
            _rate_limited(),
            iter([_pygithub_repo("api")]),
        ]
        mock_github.get_organization.return_value.get_repos.return_value = repos
        client = GitHubClient(token="test_token")

        assert [r.name for r in client.list_repositories("my-org")] == ["api"]
        mock_sleep.assert_called_once()
