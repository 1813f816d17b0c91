"""CLI commands for inspecting rules and previewing parameter patches."""

import json
from pathlib import Path

import typer
import yaml
from pydantic import ValidationError

from ..config import MaintainerConfig
from ..exceptions import PatchStructureError, RuleValidationError
from ..patcher.engine import PatchEngine
from ..rules.loader import load_rule_set
from ..rules.models import RuleSet
from .options import RULES_FILE_OPTION, VERBOSE_OPTION
from .output import console, print_patch, print_rules, setup_logging


def _load_rules(rules_file: Path | None) -> RuleSet:
    try:
        config = MaintainerConfig.from_env(rules_file=rules_file)
    except ValidationError as e:
        console.print(f"❌ [red]Invalid configuration: {e}[/red]")
        raise typer.Exit(1)

    try:
        return load_rule_set(config.rules_file)
    except RuleValidationError as e:
        console.print(f"❌ [red]Error loading rules: {e}[/red]")
        raise typer.Exit(1)


def rules(
    rules_file: Path | None = RULES_FILE_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print rules as JSON"),
) -> None:
    """Show the active rules (built-in defaults plus any custom rules)."""
    rule_set = _load_rules(rules_file)

    if as_json:
        document = {
            "version_rules": [
                r.model_dump(mode="json") for r in rule_set.version_rules
            ],
            "migration_rules": [
                r.model_dump(mode="json") for r in rule_set.migration_rules
            ],
            "patch_rules": [r.model_dump(mode="json") for r in rule_set.patch_rules],
        }
        typer.echo(json.dumps(document, indent=2))
        return

    print_rules(rule_set, patched=PatchEngine(rule_set).supported_actions())


def preview_patch(
    action: str = typer.Option(
        ..., "--action", "-a", help="Action repository, e.g. actions/setup-node"
    ),
    from_version: str = typer.Option(..., "--from", help="Current version"),
    to_version: str = typer.Option(..., "--to", help="Target version"),
    to_repository: str | None = typer.Option(
        None, "--to-repo", help="Target repository for a location migration"
    ),
    with_block: str | None = typer.Option(
        None, "--with", "-w", help="The step's with: block as YAML or JSON"
    ),
    rules_file: Path | None = RULES_FILE_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Preview the parameter changes for upgrading one action.

    Examples:
        actions-maintainer preview-patch --action actions/setup-node \\
            --from v2 --to v4 --with '{"version": "18"}'

        actions-maintainer preview-patch --action legacy-org/deprecated-action \\
            --from v1 --to v2 --to-repo modern-org/recommended-action
    """
    setup_logging(verbose)
    rule_set = _load_rules(rules_file)

    parameters = None
    if with_block:
        try:
            parameters = yaml.safe_load(with_block)
        except yaml.YAMLError as e:
            console.print(f"❌ [red]Invalid --with block: {e}[/red]")
            raise typer.Exit(1)

    engine = PatchEngine(rule_set)
    if not engine.has_patch(action, from_version, to_version, to_repository):
        target = f"{to_repository or action}@{to_version}"
        console.print(
            f"ℹ️  [yellow]No patch rule for {action}@{from_version} → "
            f"{target}[/yellow]"
        )

    try:
        patch = engine.build_migration_patch(
            action, to_repository or action, from_version, to_version, parameters
        )
    except PatchStructureError as e:
        console.print(f"❌ [red]Invalid --with block: {e}[/red]")
        raise typer.Exit(1)

    print_patch(patch)
    if patch.applied:
        console.print("\n[blue]Updated with: block:[/blue]")
        console.print(
            yaml.safe_dump(
                patch.updated_parameters.to_dict(),
                sort_keys=False,
                default_flow_style=False,
            )
            or "{}",
            markup=False,
        )
