"""Apply action upgrades to workflow file content."""

import logging
import re
from dataclasses import dataclass
from typing import Any

import yaml

from ..exceptions import PatchStructureError
from ..workflow.parser import load_workflow, parse_action_ref
from .engine import Patch, PatchEngine

logger = logging.getLogger(__name__)


@dataclass
class WorkflowUpdate:
    """One action upgrade to apply to a workflow file."""

    action_repo: str
    from_version: str
    to_version: str
    target_repo: str = ""
    file_path: str = ""

    @property
    def destination_repo(self) -> str:
        return self.target_repo or self.action_repo


def _describe_changes(job_name: str, step_number: int, patch: Patch) -> list[str]:
    prefix = f"Job '{job_name}', Step {step_number}"
    lines = []
    if patch.is_location_change:
        lines.append(
            f"{prefix}: Moved '{patch.from_repository}' to '{patch.to_repository}'"
        )
    for addition in patch.additions:
        lines.append(
            f"{prefix}: Added '{addition.field}' = '{addition.value}' "
            f"({addition.reason})"
        )
    for removal in patch.removals:
        lines.append(f"{prefix}: Removed '{removal.field}' ({removal.reason})")
    for rename in patch.renames:
        lines.append(
            f"{prefix}: Renamed '{rename.old_field}' to '{rename.new_field}' "
            f"({rename.reason})"
        )
    for mod in patch.modifications:
        lines.append(
            f"{prefix}: Modified '{mod.field}' from '{mod.old_value}' to "
            f"'{mod.new_value}' ({mod.reason})"
        )
    return lines


def _restore_on_key(document: dict[Any, Any]) -> dict[Any, Any]:
    # YAML 1.1 loads the bare 'on' trigger key as boolean True
    if True not in document:
        return document
    return {("on" if key is True else key): value for key, value in document.items()}


def update_workflow_content(content: str, updates: list[WorkflowUpdate]) -> str:
    """Rewrite ``owner/repo[/path]@version`` references in raw content.

    Only whole references are replaced, so ``actions/checkout@v3`` does not
    touch ``actions/checkout@v3.5.2``. Migrated actions are rewritten to
    their target repository.
    """
    updated = content
    for update in updates:
        pattern = re.compile(
            rf"(?<![\w./-]){re.escape(update.action_repo)}(/[^@\s'\"]*)?"
            rf"@{re.escape(update.from_version)}(?![\w.-])"
        )
        replacement = update.destination_repo, update.to_version
        updated = pattern.sub(
            lambda m, r=replacement: f"{r[0]}{m.group(1) or ''}@{r[1]}", updated
        )
    return updated


class WorkflowPatcher:
    """Patches the ``with:`` blocks of steps affected by action upgrades."""

    def __init__(self, engine: PatchEngine):
        self.engine = engine

    def patch_workflow_content(
        self, content: str, updates: list[WorkflowUpdate]
    ) -> tuple[str, list[str]]:
        """Apply parameter patches for every step matching an update.

        Args:
            content: Workflow YAML
            updates: Upgrades to apply; a step matches an update when its
                repository and current version are equal to the update's

        Returns:
            Tuple of (new content, human-readable change lines). Content is
            returned unchanged when no patch applied.

        Raises:
            WorkflowParseError: If the content is not valid workflow YAML
        """
        workflow = load_workflow(content)
        jobs = workflow.get("jobs") or {}
        changes: list[str] = []
        patched = False

        for job_name, job in jobs.items():
            if not isinstance(job, dict):
                continue
            for step_idx, step in enumerate(job.get("steps") or []):
                if not isinstance(step, dict) or not isinstance(step.get("uses"), str):
                    continue
                ref = parse_action_ref(step["uses"])
                if ref is None:
                    continue

                update = next(
                    (
                        u
                        for u in updates
                        if u.action_repo == ref.repository
                        and u.from_version == ref.version
                    ),
                    None,
                )
                if update is None:
                    continue

                try:
                    patch = self.engine.build_migration_patch(
                        ref.repository,
                        update.destination_repo,
                        update.from_version,
                        update.to_version,
                        step.get("with"),
                    )
                except PatchStructureError as e:
                    logger.warning(
                        "Skipping step %d of job '%s': %s", step_idx + 1, job_name, e
                    )
                    continue

                for warning in patch.warnings:
                    logger.debug(
                        "Job '%s', Step %d: %s", job_name, step_idx + 1, warning
                    )

                if not patch.applied or patch.change_count == 0:
                    continue

                updated_with = patch.updated_parameters.to_dict()
                if updated_with:
                    step["with"] = updated_with
                else:
                    step.pop("with", None)
                patched = True
                changes.extend(_describe_changes(job_name, step_idx + 1, patch))

        if not patched:
            return content, changes

        new_content = yaml.safe_dump(
            _restore_on_key(workflow), sort_keys=False, default_flow_style=False
        )
        return new_content, changes

    def apply_updates(
        self, content: str, updates: list[WorkflowUpdate]
    ) -> tuple[str, list[str]]:
        """Patch parameters, then rewrite the version references."""
        patched, changes = self.patch_workflow_content(content, updates)
        return update_workflow_content(patched, updates), changes
