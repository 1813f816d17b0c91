"""Declarative patch engine for a step's ``with:`` parameters.

A patch rule lists the field operations needed when an action moves from one
version (and optionally one repository) to another. ``build_patch`` applies
them to a working copy of the parameters and records what changed; the input
is never mutated.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from ..rules.models import FieldOperation, FieldPatch, RuleSet, VersionPatch
from .parameters import ParameterMap

logger = logging.getLogger(__name__)


@dataclass
class FieldAddition:
    """A field added to the parameter block."""

    field: str
    value: Any
    reason: str


@dataclass
class FieldRemoval:
    """A field removed from the parameter block."""

    field: str
    reason: str


@dataclass
class FieldRename:
    """A field renamed within the parameter block."""

    old_field: str
    new_field: str
    reason: str


@dataclass
class FieldModification:
    """A field whose value was replaced."""

    field: str
    old_value: Any
    new_value: Any
    reason: str


@dataclass
class Patch:
    """Result of building a patch for one version/location transition."""

    repository: str
    from_repository: str
    to_repository: str
    from_version: str
    to_version: str
    description: str = ""
    additions: list[FieldAddition] = field(default_factory=list)
    removals: list[FieldRemoval] = field(default_factory=list)
    renames: list[FieldRename] = field(default_factory=list)
    modifications: list[FieldModification] = field(default_factory=list)
    applied: bool = False
    original_parameters: Any = None
    updated_parameters: Any = None
    warnings: list[str] = field(default_factory=list)

    @property
    def is_location_change(self) -> bool:
        return self.from_repository != self.to_repository

    @property
    def change_count(self) -> int:
        return (
            len(self.additions)
            + len(self.removals)
            + len(self.renames)
            + len(self.modifications)
        )


class PatchEngine:
    """Builds parameter patches from the patch rules of a RuleSet."""

    def __init__(self, rules: RuleSet):
        self.rules = rules

    def find_version_patch(
        self,
        from_repository: str,
        to_repository: str,
        from_version: str,
        to_version: str,
    ) -> VersionPatch | None:
        """Find the version patch for a transition.

        Rules keyed by the source repository are consulted first, then rules
        keyed by the target repository.
        """
        rule = self.rules.patch_rule_for(from_repository)
        if rule is None:
            rule = self.rules.patch_rule_for(to_repository)
        if rule is None:
            return None

        for version_patch in rule.version_patches:
            if version_patch.matches(
                from_repository, to_repository, from_version, to_version
            ):
                return version_patch
        return None

    def build_patch(
        self,
        repository: str,
        from_version: str,
        to_version: str,
        parameters: Any = None,
    ) -> Patch:
        """Build a patch for a same-repository version upgrade.

        Raises:
            PatchStructureError: If ``parameters`` is not a valid field map
        """
        return self.build_migration_patch(
            repository, repository, from_version, to_version, parameters
        )

    def build_migration_patch(
        self,
        from_repository: str,
        to_repository: str,
        from_version: str,
        to_version: str,
        parameters: Any = None,
    ) -> Patch:
        """Build a patch for an upgrade that may also change repository.

        Args:
            from_repository: Repository the step currently uses
            to_repository: Repository the step should use afterwards
            from_version: Current version
            to_version: Target version
            parameters: The step's ``with:`` block; None is treated as empty

        Returns:
            Patch describing every change. ``applied`` is False when no rule
            matches or nothing changed within the same repository.

        Raises:
            PatchStructureError: If ``parameters`` is not a valid field map
        """
        patch = Patch(
            repository=from_repository,
            from_repository=from_repository,
            to_repository=to_repository,
            from_version=from_version,
            to_version=to_version,
            original_parameters=parameters,
            updated_parameters=parameters,
        )

        version_patch = self.find_version_patch(
            from_repository, to_repository, from_version, to_version
        )
        if version_patch is None:
            logger.debug(
                "No patch rule for %s@%s -> %s@%s",
                from_repository,
                from_version,
                to_repository,
                to_version,
            )
            return patch

        patch.description = version_patch.description
        working = ParameterMap.from_raw(parameters)

        for field_patch in version_patch.patches:
            self._apply(working, field_patch, patch)

        patch.updated_parameters = working
        patch.applied = patch.change_count > 0 or patch.is_location_change
        return patch

    def _apply(self, working: ParameterMap, fp: FieldPatch, patch: Patch) -> None:
        if fp.operation is FieldOperation.ADD:
            if fp.field in working:
                patch.warnings.append(
                    f"Field {fp.field} already exists, skipping add operation"
                )
                return
            working[fp.field] = fp.value
            patch.additions.append(FieldAddition(fp.field, fp.value, fp.reason))

        elif fp.operation is FieldOperation.REMOVE:
            if fp.field not in working:
                patch.warnings.append(
                    f"Field {fp.field} does not exist, skipping remove operation"
                )
                return
            del working[fp.field]
            patch.removals.append(FieldRemoval(fp.field, fp.reason))

        elif fp.operation is FieldOperation.RENAME:
            if fp.field not in working:
                patch.warnings.append(
                    f"Field {fp.field} does not exist, skipping rename operation"
                )
                return
            if fp.new_field in working:
                patch.warnings.append(
                    f"Target field {fp.new_field} already exists, "
                    "skipping rename operation"
                )
                return
            working.rename(fp.field, fp.new_field)
            patch.renames.append(FieldRename(fp.field, fp.new_field, fp.reason))

        elif fp.operation is FieldOperation.MODIFY:
            if fp.field not in working:
                patch.warnings.append(
                    f"Field {fp.field} does not exist, skipping modify operation"
                )
                return
            old_value = working[fp.field]
            working[fp.field] = fp.value
            patch.modifications.append(
                FieldModification(fp.field, old_value, fp.value, fp.reason)
            )
            logger.debug("Modified %s: %r -> %r", fp.field, old_value, fp.value)

    def has_patch(
        self,
        repository: str,
        from_version: str,
        to_version: str,
        to_repository: str | None = None,
    ) -> bool:
        """Check whether a patch rule exists for the transition."""
        return (
            self.get_patch_info(repository, from_version, to_version, to_repository)
            is not None
        )

    def get_patch_info(
        self,
        repository: str,
        from_version: str,
        to_version: str,
        to_repository: str | None = None,
    ) -> VersionPatch | None:
        """Return the version patch for the transition without applying it."""
        return self.find_version_patch(
            repository, to_repository or repository, from_version, to_version
        )

    def supported_actions(self) -> list[str]:
        """Repositories that have at least one patch rule, sorted."""
        return sorted(
            rule.repository for rule in self.rules.patch_rules if rule.version_patches
        )
