"""Turn update plans into pull requests, one per repository."""

import hashlib
import logging
from pathlib import Path
from string import Template

from rich.console import Console

from ..analysis.models import IssueType
from ..exceptions import WorkflowParseError
from ..github_client.client import GitHubClient
from ..github_client.models import CreatedPullRequest
from ..patcher.workflow import WorkflowPatcher, WorkflowUpdate, update_workflow_content
from .models import ActionUpdate, UpdatePlan

console = Console()
logger = logging.getLogger(__name__)

BRANCH_PREFIX = "actions-maintainer"

_SECTION_TITLES = {
    IssueType.SECURITY: "### 🔒 Security Updates",
    IssueType.DEPRECATED: "### ⚠️ Deprecated Version Updates",
    IssueType.MIGRATION: "### 🚚 Repository Migrations",
    IssueType.OUTDATED: "### 📊 Version Updates",
}


def load_body_template(path: str | Path) -> Template:
    """Load a ``string.Template`` pull request body from a file.

    Available placeholders: ``$repository``, ``$update_count``, ``$updates``,
    ``$security_updates``, ``$deprecated_updates``, ``$migration_updates``,
    ``$outdated_updates``.
    """
    return Template(Path(path).read_text())


def _format_update(update: ActionUpdate) -> str:
    if update.destination_repo != update.action_repo:
        line = (
            f"- **{update.action_repo}@{update.current_version}** → "
            f"**{update.destination_repo}@{update.target_version}**"
        )
    else:
        line = (
            f"- **{update.action_repo}**: {update.current_version} → "
            f"{update.target_version}"
        )
    lines = [line, f"  - **File**: `{update.file_path}`"]
    if update.issue.has_transformations:
        lines.append("  - **Parameter changes**:")
        lines.extend(f"    - {change}" for change in update.issue.schema_changes)
    return "\n".join(lines)


def _format_updates(updates: list[ActionUpdate]) -> str:
    return "\n".join(_format_update(u) for u in updates)


class PullRequestCreator:
    """Creates one pull request per update plan."""

    def __init__(
        self,
        client: GitHubClient | None,
        patcher: WorkflowPatcher | None = None,
        body_template: Template | None = None,
        dry_run: bool = False,
    ):
        """Initialize the creator.

        Args:
            client: GitHub client; may be None only for dry runs
            patcher: Applies parameter patches; references are still
                rewritten without one
            body_template: Custom pull request body
            dry_run: Preview pull requests without creating them
        """
        self.client = client
        self.patcher = patcher
        self.body_template = body_template
        self.dry_run = dry_run

    def generate_title(self, plan: UpdatePlan) -> str:
        if len(plan.updates) == 1:
            update = plan.updates[0]
            if update.destination_repo != update.action_repo:
                return (
                    f"Migrate {update.action_repo} to "
                    f"{update.destination_repo}@{update.target_version}"
                )
            return (
                f"Update {update.action_repo} from {update.current_version} "
                f"to {update.target_version}"
            )
        return f"Update {len(plan.updates)} GitHub Actions to latest versions"

    def generate_body(self, plan: UpdatePlan) -> str:
        grouped = plan.updates_by_type()
        if self.body_template is not None:
            return self.body_template.safe_substitute(
                repository=plan.repository.full_name,
                update_count=len(plan.updates),
                updates=_format_updates(plan.updates),
                security_updates=_format_updates(grouped.get(IssueType.SECURITY, [])),
                deprecated_updates=_format_updates(
                    grouped.get(IssueType.DEPRECATED, [])
                ),
                migration_updates=_format_updates(
                    grouped.get(IssueType.MIGRATION, [])
                ),
                outdated_updates=_format_updates(grouped.get(IssueType.OUTDATED, [])),
            )

        sections = [
            "## GitHub Actions Updates",
            "This PR updates GitHub Actions to their latest recommended versions.",
        ]
        for issue_type, title in _SECTION_TITLES.items():
            updates = grouped.get(issue_type)
            if updates:
                sections.append(f"{title}\n\n{_format_updates(updates)}")

        sections.append(
            "### Testing\n\nPlease ensure all CI checks pass before merging."
        )
        sections.append("---\n*Generated by actions-maintainer*")
        return "\n\n".join(sections)

    def branch_name(self, plan: UpdatePlan) -> str:
        """Branch name unique to the set of updates in the plan."""
        digest = hashlib.sha1(
            "\n".join(
                sorted(
                    f"{u.file_path}:{u.action_repo}@{u.current_version}"
                    f"->{u.destination_repo}@{u.target_version}"
                    for u in plan.updates
                )
            ).encode()
        ).hexdigest()[:8]
        return f"{BRANCH_PREFIX}/update-actions-{digest}"

    def create_update_prs(self, plans: list[UpdatePlan]) -> list[CreatedPullRequest]:
        """Create (or preview) a pull request for every non-empty plan.

        A plan that fails is reported and skipped.
        """
        created = []
        for plan in plans:
            if not plan.updates:
                continue
            try:
                pr = self.create_pr_for_plan(plan)
            except Exception as e:
                logger.error(
                    "Failed to create PR for %s: %s", plan.repository.full_name, e
                )
                console.print(
                    f"❌ [red]Failed to create PR for "
                    f"{plan.repository.full_name}: {e}[/red]"
                )
                continue
            if pr is not None:
                created.append(pr)
        return created

    def create_pr_for_plan(self, plan: UpdatePlan) -> CreatedPullRequest | None:
        """Apply every update in the plan and open a single pull request.

        Returns:
            The created (or previewed) pull request, or None when no workflow
            file changed
        """
        title = self.generate_title(plan)
        branch = self.branch_name(plan)
        full_name = plan.repository.full_name

        if self.client is None:
            if not self.dry_run:
                raise ValueError("A GitHub client is required to create pull requests")
            return CreatedPullRequest(
                repository=full_name,
                title=title,
                branch=branch,
                update_count=len(plan.updates),
            )

        current = {
            f.path: f
            for f in self.client.get_workflow_files(
                full_name, ref=plan.repository.default_branch
            )
        }

        files: dict[str, tuple[str, str]] = {}
        changes: list[str] = []
        for path in plan.files:
            workflow_file = current.get(path)
            if workflow_file is None:
                logger.warning("%s no longer exists in %s", path, full_name)
                continue

            updated, file_changes = self.update_content(
                workflow_file.content, plan.updates_for(path)
            )
            if updated != workflow_file.content:
                files[path] = (updated, workflow_file.sha)
                changes.extend(f"{path}: {change}" for change in file_changes)

        if not files:
            logger.info("No workflow changes for %s", full_name)
            return None

        if self.dry_run:
            return CreatedPullRequest(
                repository=full_name,
                title=title,
                branch=branch,
                update_count=len(plan.updates),
                changes=changes,
            )

        number, url = self.client.create_pull_request(
            full_name=full_name,
            base_branch=plan.repository.default_branch,
            branch=branch,
            title=title,
            body=self.generate_body(plan),
            files=files,
            commit_message=title,
        )
        return CreatedPullRequest(
            repository=full_name,
            title=title,
            branch=branch,
            number=number,
            url=url,
            update_count=len(plan.updates),
            changes=changes,
        )

    def update_content(
        self, content: str, updates: list[ActionUpdate]
    ) -> tuple[str, list[str]]:
        """Rewrite one workflow file for the given updates."""
        workflow_updates = [
            WorkflowUpdate(
                action_repo=u.action_repo,
                from_version=u.current_version,
                to_version=u.target_version,
                target_repo=u.target_repo,
                file_path=u.file_path,
            )
            for u in updates
        ]
        if self.patcher is None:
            return update_workflow_content(content, workflow_updates), []

        try:
            return self.patcher.apply_updates(content, workflow_updates)
        except WorkflowParseError as e:
            logger.warning("Not patching parameters: %s", e)
            return update_workflow_content(content, workflow_updates), []
