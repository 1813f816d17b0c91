"""Console rendering and logging setup shared by the CLI commands."""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..analysis.models import ScanResult, Severity
from ..github_client.models import CreatedPullRequest
from ..patcher.engine import Patch
from ..rules.models import RuleSet

console = Console()

SEVERITY_STYLES = {
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "green",
}


def setup_logging(verbose: bool) -> None:
    """Route library logging through rich; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def print_scan_result(result: ScanResult) -> None:
    summary = result.summary
    summary_table = Table(title=f"Scan Summary: {result.owner}")
    summary_table.add_column("Metric", style="cyan")
    summary_table.add_column("Value", style="green")
    summary_table.add_row("Repositories", str(summary.total_repositories))
    summary_table.add_row("Workflow files", str(summary.total_workflow_files))
    summary_table.add_row("Action references", str(summary.total_actions))
    summary_table.add_row("Issues", str(summary.total_issues))
    for issue_type, count in sorted(summary.issues_by_type.items()):
        summary_table.add_row(f"  {issue_type}", str(count))
    console.print(summary_table)

    if not summary.total_issues:
        return

    issues_table = Table(title="Issues")
    issues_table.add_column("Repository", style="cyan")
    issues_table.add_column("File")
    issues_table.add_column("Action")
    issues_table.add_column("Type")
    issues_table.add_column("Severity")
    issues_table.add_column("Suggested")
    for repo in result.repositories:
        for issue in repo.issues:
            style = SEVERITY_STYLES[issue.severity]
            suggested = issue.suggested_version or "-"
            if issue.target_repository:
                suggested = f"{issue.target_repository}@{suggested}"
            issues_table.add_row(
                repo.full_name,
                issue.file_path,
                f"{issue.repository}@{issue.current_version}",
                issue.issue_type.value,
                f"[{style}]{issue.severity.value}[/{style}]",
                suggested,
            )
    console.print(issues_table)


def print_rules(rules: RuleSet, patched: list[str] | None = None) -> None:
    """Print the rule tables; ``patched`` marks actions with parameter patches."""
    patched_set = set(patched or [])
    version_table = Table(title="Version Rules")
    version_table.add_column("Repository", style="cyan")
    version_table.add_column("Latest", style="green")
    version_table.add_column("Minimum")
    version_table.add_column("Deprecated")
    version_table.add_column("Advisories")
    version_table.add_column("Patches")
    for rule in sorted(rules.version_rules, key=lambda r: r.repository):
        version_table.add_row(
            rule.repository,
            rule.latest_version,
            rule.minimum_version or "-",
            ", ".join(sorted(rule.deprecated_versions)) or "-",
            ", ".join(sorted(rule.security_advisories)) or "-",
            "✓" if rule.repository in patched_set else "-",
        )
    console.print(version_table)

    migration_table = Table(title="Migration Rules")
    migration_table.add_column("Repository", style="cyan")
    migration_table.add_column("Migrate To", style="green")
    migration_table.add_column("From Version")
    for migration in sorted(rules.migration_rules, key=lambda r: r.repository):
        migration_table.add_row(
            migration.repository,
            f"{migration.migrate_to_repository}@{migration.migrate_to_version}",
            migration.from_version or "any",
        )
    console.print(migration_table)

    patch_table = Table(title="Patch Rules")
    patch_table.add_column("Repository", style="cyan")
    patch_table.add_column("Transitions")
    for patch_rule in sorted(rules.patch_rules, key=lambda r: r.repository):
        transitions = []
        for vp in patch_rule.version_patches:
            target = f" ({vp.to_repository})" if vp.is_location_change else ""
            transitions.append(f"{vp.from_version} → {vp.to_version}{target}")
        patch_table.add_row(patch_rule.repository, ", ".join(transitions))
    console.print(patch_table)


def print_patch(patch: Patch) -> None:
    header = f"{patch.from_repository}@{patch.from_version}"
    if patch.is_location_change:
        header = f"{header} → {patch.to_repository}@{patch.to_version}"
    else:
        header = f"{header} → {patch.to_version}"
    console.print(f"\n📋 [blue]Patch for {header}[/blue]")

    if not patch.applied:
        console.print("✅ [green]No parameter changes required[/green]")
    else:
        if patch.description:
            console.print(f"[dim]{patch.description}[/dim]")
        for addition in patch.additions:
            console.print(
                f"  [green]+ {addition.field}: {addition.value!r}[/green] "
                f"({addition.reason})"
            )
        for removal in patch.removals:
            console.print(f"  [red]- {removal.field}[/red] ({removal.reason})")
        for rename in patch.renames:
            console.print(
                f"  [yellow]~ {rename.old_field} → {rename.new_field}[/yellow] "
                f"({rename.reason})"
            )
        for mod in patch.modifications:
            console.print(
                f"  [yellow]~ {mod.field}: {mod.old_value!r} → {mod.new_value!r}"
                f"[/yellow] ({mod.reason})"
            )

    for warning in patch.warnings:
        console.print(f"⚠️  [yellow]{warning}[/yellow]")


def print_pull_requests(prs: list[CreatedPullRequest], dry_run: bool) -> None:
    for pr in prs:
        if dry_run:
            console.print(
                f"📝 [blue]Would open PR in {pr.repository}[/blue]: {pr.title} "
                f"(branch {pr.branch}, {pr.update_count} updates)"
            )
        else:
            console.print(f"✅ [green]Opened {pr.url}[/green]: {pr.title}")
        for change in pr.changes:
            console.print(f"   • {change}")
