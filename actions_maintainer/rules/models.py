"""Rule models: version rules, migration rules and field patch rules.

These map to the entries of a rules file. A RuleSet holds at most one
VersionRule, one MigrationRule and one PatchRule per action repository; adding
a second rule of the same kind for a repository replaces the first.
"""

from collections.abc import Iterable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FieldOperation(str, Enum):
    """Operations a FieldPatch can perform on a 'with:' block."""

    ADD = "add"
    REMOVE = "remove"
    RENAME = "rename"
    MODIFY = "modify"


class FieldPatch(BaseModel):
    """One declarative change to a single field of a parameter block."""

    model_config = ConfigDict(frozen=True)

    operation: FieldOperation = Field(..., description="add, remove, rename or modify")
    field: str = Field(..., min_length=1, description="Field the operation targets")
    new_field: str = Field("", description="Target field name for rename")
    value: Any = Field(None, description="Literal value for add/modify")
    reason: str = Field("", description="Why the change is needed")

    @model_validator(mode="after")
    def _rename_needs_target(self) -> "FieldPatch":
        if self.operation is FieldOperation.RENAME and not self.new_field:
            raise ValueError(f"rename of '{self.field}' requires new_field")
        return self


class VersionPatch(BaseModel):
    """Ordered field patches for one version (and optionally location) change."""

    model_config = ConfigDict(frozen=True)

    from_version: str = Field(..., min_length=1)
    to_version: str = Field(..., min_length=1)
    from_repository: str = Field(
        "", description="Source repository when the action changes location"
    )
    to_repository: str = Field(
        "", description="Target repository when the action changes location"
    )
    description: str = Field("", description="Summary of the transition")
    patches: list[FieldPatch] = Field(default_factory=list)

    @property
    def is_location_change(self) -> bool:
        return bool(self.from_repository and self.to_repository)

    def matches(
        self,
        from_repository: str,
        to_repository: str,
        from_version: str,
        to_version: str,
    ) -> bool:
        """Check whether this patch applies to the given transition.

        Location patches match only their exact repository pair; plain
        version patches match only same-repository transitions.
        """
        if self.from_version != from_version or self.to_version != to_version:
            return False
        if self.is_location_change:
            return (
                self.from_repository == from_repository
                and self.to_repository == to_repository
            )
        return from_repository == to_repository


class PatchRule(BaseModel):
    """All version patches defined for one action repository."""

    model_config = ConfigDict(frozen=True)

    repository: str = Field(..., min_length=1)
    version_patches: list[VersionPatch] = Field(default_factory=list)


class VersionRule(BaseModel):
    """Version currency rule for an action."""

    model_config = ConfigDict(frozen=True)

    repository: str = Field(..., min_length=1, description="e.g. 'actions/checkout'")
    latest_version: str = Field(..., min_length=1)
    minimum_version: str = Field(
        "", description="Versions below this major are reported as high severity"
    )
    deprecated_versions: frozenset[str] = Field(default_factory=frozenset)
    security_advisories: dict[str, str] = Field(
        default_factory=dict, description="version -> advisory description"
    )
    recommendation: str = Field("", description="Free-text upgrade advice")


class MigrationRule(BaseModel):
    """Rule stating that an action has moved to another repository."""

    model_config = ConfigDict(frozen=True)

    repository: str = Field(..., min_length=1, description="Source repository")
    migrate_to_repository: str = Field(..., min_length=1)
    migrate_to_version: str = Field(..., min_length=1)
    from_version: str | None = Field(
        None, description="Only migrate references at this version"
    )
    description: str = Field("")

    def applies_to(self, version: str) -> bool:
        return self.from_version is None or self.from_version == version


class RuleSet:
    """The rule catalogue a scan runs against.

    Passed explicitly to the Analyzer and PatchEngine so independent scans can
    use independent rules.
    """

    def __init__(
        self,
        version_rules: Iterable[VersionRule] = (),
        migration_rules: Iterable[MigrationRule] = (),
        patch_rules: Iterable[PatchRule] = (),
    ):
        self._version_rules: dict[str, VersionRule] = {}
        self._migration_rules: dict[str, MigrationRule] = {}
        self._patch_rules: dict[str, PatchRule] = {}

        for rule in version_rules:
            self.add_version_rule(rule)
        for rule in migration_rules:
            self.add_migration_rule(rule)
        for rule in patch_rules:
            self.add_patch_rule(rule)

    def add_version_rule(self, rule: VersionRule) -> None:
        self._version_rules[rule.repository] = rule

    def add_migration_rule(self, rule: MigrationRule) -> None:
        self._migration_rules[rule.repository] = rule

    def add_patch_rule(self, rule: PatchRule) -> None:
        self._patch_rules[rule.repository] = rule

    def version_rule_for(self, repository: str) -> VersionRule | None:
        return self._version_rules.get(repository)

    def migration_rule_for(self, repository: str) -> MigrationRule | None:
        return self._migration_rules.get(repository)

    def patch_rule_for(self, repository: str) -> PatchRule | None:
        return self._patch_rules.get(repository)

    @property
    def version_rules(self) -> list[VersionRule]:
        return list(self._version_rules.values())

    @property
    def migration_rules(self) -> list[MigrationRule]:
        return list(self._migration_rules.values())

    @property
    def patch_rules(self) -> list[PatchRule]:
        return list(self._patch_rules.values())

    @property
    def repositories(self) -> set[str]:
        """Every repository any rule mentions as its key."""
        return (
            set(self._version_rules)
            | set(self._migration_rules)
            | set(self._patch_rules)
        )

    def merge(self, other: "RuleSet") -> "RuleSet":
        """Return a new RuleSet where ``other``'s rules override this one's."""
        return RuleSet(
            version_rules=[*self.version_rules, *other.version_rules],
            migration_rules=[*self.migration_rules, *other.migration_rules],
            patch_rules=[*self.patch_rules, *other.patch_rules],
        )

    def __len__(self) -> int:
        return (
            len(self._version_rules)
            + len(self._migration_rules)
            + len(self._patch_rules)
        )
