"""Scan repositories for action references and analyze them."""

import logging
import re
from datetime import datetime, timezone

from .analysis.analyzer import Analyzer
from .analysis.models import RepositoryScanResult, ScanResult, WorkflowFileResult
from .exceptions import WorkflowParseError
from .github_client.client import GitHubClient
from .github_client.models import GitHubRepository
from .workflow.models import ActionReference
from .workflow.parser import parse_workflow
from .workflow.resolver import VersionResolver

logger = logging.getLogger(__name__)


class ScanService:
    """Fetches workflows, resolves their references and analyzes them."""

    def __init__(
        self,
        client: GitHubClient,
        analyzer: Analyzer,
        resolver: VersionResolver,
    ):
        self.client = client
        self.analyzer = analyzer
        self.resolver = resolver

    def scan(
        self,
        owner: str,
        repository: str | None = None,
        include_archived: bool = False,
        include_forks: bool = False,
        name_filter: str | re.Pattern[str] | None = None,
    ) -> ScanResult:
        """Scan every repository of an owner, or a single repository.

        ``name_filter`` keeps only repositories whose name matches the regex
        anywhere; an invalid pattern raises ``re.error``.

        Repositories whose workflows cannot be read are logged and skipped,
        so the result may be partial.
        """
        pattern = re.compile(name_filter) if name_filter else None
        if repository:
            repositories = [self.client.get_repository_info(owner, repository)]
        else:
            repositories = self.client.list_repositories(
                owner, include_archived=include_archived, include_forks=include_forks
            )
        if pattern is not None:
            matching = [r for r in repositories if pattern.search(r.name)]
            logger.info(
                "Filter %s matched %d of %d repositories",
                pattern.pattern,
                len(matching),
                len(repositories),
            )
            repositories = matching
        logger.info("Scanning %d repositories for %s", len(repositories), owner)

        results = []
        for repo in repositories:
            try:
                results.append(self.scan_repository(repo))
            except Exception as e:
                logger.warning("Skipping %s: %s", repo.full_name, e)

        return ScanResult.build(
            owner=owner,
            repositories=results,
            scanned_at=datetime.now(timezone.utc),
        )

    def scan_repository(self, repo: GitHubRepository) -> RepositoryScanResult:
        """Scan the workflow files on a repository's default branch."""
        files = self.client.get_workflow_files(repo.full_name, ref=repo.default_branch)

        file_results: list[WorkflowFileResult] = []
        refs: list[ActionReference] = []
        for workflow_file in files:
            try:
                found = parse_workflow(
                    workflow_file.content,
                    workflow_file.path,
                    workflow_only=self.analyzer.workflow_only,
                )
            except WorkflowParseError as e:
                logger.warning(
                    "Skipping %s in %s: %s", workflow_file.path, repo.full_name, e
                )
                file_results.append(
                    WorkflowFileResult(path=workflow_file.path, error=str(e))
                )
                continue

            refs.extend(found)
            file_results.append(
                WorkflowFileResult(path=workflow_file.path, action_count=len(found))
            )

        resolved = self.resolver.resolve_references(refs)
        issues = self.analyzer.analyze(resolved)
        logger.debug(
            "%s: %d workflow files, %d actions, %d issues",
            repo.full_name,
            len(files),
            len(refs),
            len(issues),
        )

        return RepositoryScanResult(
            name=repo.name,
            full_name=repo.full_name,
            default_branch=repo.default_branch,
            workflow_files=file_results,
            actions=refs,
            issues=issues,
        )
