"""Standardized CLI option definitions for consistent shorthand mappings.

This module provides centralized option definitions to ensure consistent
shorthand options across all commands.
"""

import typer

# Target options
OWNER_OPTION = typer.Option(
    ..., "--owner", "-o", help="GitHub organization or user to scan"
)

REPO_OPTION = typer.Option(
    None, "--repo", "-r", help="Scan a single repository instead of all"
)

TOKEN_OPTION = typer.Option(
    None, "--token", "-t", help="GitHub API token (defaults to GITHUB_TOKEN env var)"
)

INCLUDE_ARCHIVED_OPTION = typer.Option(
    False, "--include-archived", help="Include archived repositories"
)

INCLUDE_FORKS_OPTION = typer.Option(False, "--include-forks", help="Include forks")

FILTER_OPTION = typer.Option(
    None,
    "--filter",
    help="Only scan repositories whose name matches this regex "
    "(e.g. 'api-.*')",
)

# Rule and cache options
RULES_FILE_OPTION = typer.Option(
    None,
    "--rules-file",
    help="JSON or YAML file with custom rules "
    "(defaults to ACTIONS_MAINTAINER_RULES_FILE)",
)

CACHE_FILE_OPTION = typer.Option(
    None,
    "--cache-file",
    help="Persist resolved versions between runs "
    "(defaults to ACTIONS_MAINTAINER_CACHE_FILE)",
)

CACHE_TTL_OPTION = typer.Option(
    None,
    "--cache-ttl",
    help="Cache TTL in seconds (defaults to ACTIONS_MAINTAINER_CACHE_TTL or 3600)",
)

SKIP_RESOLUTION_OPTION = typer.Option(
    False,
    "--skip-resolution",
    help="Compare versions by name only, without resolving commit SHAs",
)

WORKFLOW_ONLY_OPTION = typer.Option(
    False, "--workflow-only", help="Only analyze reusable workflow references"
)

# Output options
OUTPUT_OPTION = typer.Option(
    None, "--output", "-O", help="Write the scan result as JSON to this file"
)

VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable debug logging")

# Behavior options - control command behavior
CREATE_PRS_OPTION = typer.Option(
    False, "--create-prs", help="Open one pull request per repository with fixes"
)

DRY_RUN_OPTION = typer.Option(
    False, "--dry-run", "-d", help="Preview changes without applying them"
)

FORCE_OPTION = typer.Option(
    False, "--force", "-f", help="Apply changes without confirmation"
)

PR_TEMPLATE_OPTION = typer.Option(
    None, "--pr-template", help="File with a custom pull request body template"
)
