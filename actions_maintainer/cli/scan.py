"""CLI command for scanning repositories and opening update pull requests."""

import re
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.markup import escape
from rich.prompt import Confirm

from ..analysis.analyzer import Analyzer
from ..cache import ResolutionCache
from ..config import MaintainerConfig
from ..exceptions import RuleValidationError
from ..github_client.client import GitHubClient
from ..patcher.engine import PatchEngine
from ..patcher.workflow import WorkflowPatcher
from ..planner.planner import UpdatePlanner
from ..planner.pull_requests import PullRequestCreator, load_body_template
from ..rules.loader import load_rule_set
from ..scanner import ScanService
from ..workflow.resolver import VersionResolver
from .options import (
    CACHE_FILE_OPTION,
    CACHE_TTL_OPTION,
    CREATE_PRS_OPTION,
    DRY_RUN_OPTION,
    FORCE_OPTION,
    INCLUDE_ARCHIVED_OPTION,
    FILTER_OPTION,
    INCLUDE_FORKS_OPTION,
    OUTPUT_OPTION,
    OWNER_OPTION,
    PR_TEMPLATE_OPTION,
    REPO_OPTION,
    RULES_FILE_OPTION,
    SKIP_RESOLUTION_OPTION,
    TOKEN_OPTION,
    VERBOSE_OPTION,
    WORKFLOW_ONLY_OPTION,
)
from .output import console, print_pull_requests, print_scan_result, setup_logging


def scan(
    owner: str = OWNER_OPTION,
    repo: str | None = REPO_OPTION,
    token: str | None = TOKEN_OPTION,
    rules_file: Path | None = RULES_FILE_OPTION,
    cache_file: Path | None = CACHE_FILE_OPTION,
    cache_ttl: int | None = CACHE_TTL_OPTION,
    skip_resolution: bool = SKIP_RESOLUTION_OPTION,
    workflow_only: bool = WORKFLOW_ONLY_OPTION,
    include_archived: bool = INCLUDE_ARCHIVED_OPTION,
    include_forks: bool = INCLUDE_FORKS_OPTION,
    name_filter: str | None = FILTER_OPTION,
    output: Path | None = OUTPUT_OPTION,
    create_prs: bool = CREATE_PRS_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
    force: bool = FORCE_OPTION,
    pr_template: Path | None = PR_TEMPLATE_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Scan workflow files for outdated, deprecated or moved actions.

    Examples:
        # Scan every repository of an organization
        actions-maintainer scan --owner myorg

        # Scan only repositories whose name starts with "api-"
        actions-maintainer scan --owner myorg --filter '^api-'

        # Scan one repository and save the result
        actions-maintainer scan --owner myorg --repo myrepo --output scan.json

        # Preview the pull requests that would be opened
        actions-maintainer scan --owner myorg --create-prs --dry-run
    """
    setup_logging(verbose)

    if name_filter:
        try:
            re.compile(name_filter)
        except re.error as e:
            console.print(
                f"❌ [red]Invalid filter pattern '{escape(name_filter)}': "
                f"{escape(str(e))}[/red]"
            )
            raise typer.Exit(1)

    try:
        config = MaintainerConfig.from_env(
            github_token=token,
            rules_file=rules_file,
            cache_file=cache_file,
            cache_ttl_seconds=cache_ttl,
        )
    except ValidationError as e:
        console.print(f"❌ [red]Invalid configuration: {e}[/red]")
        raise typer.Exit(1)

    try:
        rules = load_rule_set(config.rules_file)
    except RuleValidationError as e:
        console.print(f"❌ [red]Error loading rules: {e}[/red]")
        raise typer.Exit(1)

    try:
        console.print("🔑 Initializing GitHub client...")
        client = GitHubClient(token=config.github_token)
    except ValueError as e:
        console.print(f"❌ [red]Error: {e}[/red]")
        raise typer.Exit(1)

    cache = ResolutionCache(default_ttl=config.cache_ttl)
    if config.cache_file:
        loaded = cache.load(config.cache_file)
        console.print(f"💾 Loaded {loaded} cached resolutions")

    resolver = VersionResolver(
        client, skip_resolution=skip_resolution, cache=cache, cache_ttl=config.cache_ttl
    )
    engine = PatchEngine(rules)
    analyzer = Analyzer(rules, resolver, engine, workflow_only=workflow_only)
    service = ScanService(client, analyzer, resolver)

    target = f"{owner}/{repo}" if repo else owner
    console.print(f"🔍 Scanning {target}...")
    try:
        result = service.scan(
            owner,
            repository=repo,
            include_archived=include_archived,
            include_forks=include_forks,
            name_filter=name_filter,
        )
    except Exception as e:
        console.print(f"❌ [red]Scan failed: {e}[/red]")
        raise typer.Exit(1)
    finally:
        if config.cache_file:
            cache.save(config.cache_file)

    print_scan_result(result)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result.model_dump_json(indent=2))
        console.print(f"💾 [green]Saved scan result to {output}[/green]")

    if not create_prs:
        return

    plans = UpdatePlanner().plan_updates(result.repositories)
    if not plans:
        console.print("✅ [green]No fixable issues, nothing to update[/green]")
        return

    console.print(
        f"📁 [green]Planned {sum(len(p.updates) for p in plans)} updates "
        f"across {len(plans)} repositories[/green]"
    )

    if not dry_run and not force:
        if not Confirm.ask(f"\nOpen {len(plans)} pull request(s)?"):
            console.print("❌ [yellow]Operation cancelled by user[/yellow]")
            return

    creator = PullRequestCreator(
        client,
        patcher=WorkflowPatcher(engine),
        body_template=load_body_template(pr_template) if pr_template else None,
        dry_run=dry_run,
    )
    prs = creator.create_update_prs(plans)
    print_pull_requests(prs, dry_run)
