"""Rule-based analysis of action references."""

import logging
import re
from collections.abc import Iterable

from ..exceptions import (
    InvalidRepositoryError,
    PatchStructureError,
    ResolutionError,
)
from ..patcher.engine import PatchEngine
from ..rules.models import MigrationRule, RuleSet, VersionRule
from ..workflow.models import ActionReference, ResolvedReference
from ..workflow.resolver import BRANCH_REFS, VersionResolver, split_repository
from .models import Issue, IssueType, Severity

logger = logging.getLogger(__name__)

SHA_PATTERN = re.compile(r"^[0-9a-fA-F]{7,41}$")
_MAJOR_PATTERN = re.compile(r"^v?(\d+)(?:\.|$)")


def major_version(version: str) -> int | None:
    """Return the major number of ``v4``/``v4.1.0``/``4`` style versions."""
    match = _MAJOR_PATTERN.match(version)
    return int(match.group(1)) if match else None


def is_commit_sha(version: str) -> bool:
    return bool(SHA_PATTERN.match(version))


class Analyzer:
    """Turns action references into issues using a RuleSet.

    Each reference produces at most one issue. Migration rules are checked
    first, then deprecation, security advisories and finally currency.
    """

    def __init__(
        self,
        rules: RuleSet,
        resolver: VersionResolver | None = None,
        patch_engine: PatchEngine | None = None,
        workflow_only: bool = False,
    ):
        """Initialize the analyzer.

        Args:
            rules: Rule catalogue to evaluate references against
            resolver: Used for equivalence checks and SHA suggestions; plain
                string comparison is used without one
            patch_engine: Used to attach transformation summaries to issues
            workflow_only: Only analyze reusable workflow references
        """
        self.rules = rules
        self.resolver = resolver
        self.patch_engine = patch_engine
        self.workflow_only = workflow_only

    def analyze(self, refs: Iterable[ActionReference]) -> list[Issue]:
        """Analyze references and return the issues found, in input order."""
        issues: list[Issue] = []
        for ref in refs:
            if self.workflow_only and not ref.is_reusable:
                continue
            issue = self.analyze_reference(ref)
            if issue is not None:
                issues.append(issue)
        return issues

    def analyze_reference(self, ref: ActionReference) -> Issue | None:
        """Return the single issue for a reference, or None."""
        migration = self.rules.migration_rule_for(ref.repository)
        if migration is not None and migration.applies_to(ref.version):
            return self._migration_issue(ref, migration)

        rule = self.rules.version_rule_for(ref.repository)
        if rule is None:
            logger.debug("No rules for %s, skipping", ref.repository)
            return None

        if ref.version in rule.deprecated_versions:
            description = f"Action {ref.repository} version {ref.version} is deprecated"
            if rule.recommendation:
                description = f"{description}. {rule.recommendation}"
            return self._version_issue(
                ref, rule, IssueType.DEPRECATED, Severity.HIGH, description
            )

        advisory = rule.security_advisories.get(ref.version)
        if advisory:
            return self._version_issue(
                ref, rule, IssueType.SECURITY, Severity.HIGH, advisory
            )

        if self.is_outdated(ref, rule.latest_version):
            description = (
                f"Action {ref.repository} is using version {ref.version}, "
                f"latest is {rule.latest_version}"
            )
            return self._version_issue(
                ref, rule, IssueType.OUTDATED, self.severity(ref, rule), description
            )

        logger.debug("%s is current", ref.uses)
        return None

    def is_outdated(self, ref: ActionReference, latest_version: str) -> bool:
        if ref.version in BRANCH_REFS or ref.version == latest_version:
            return False
        if isinstance(ref, ResolvedReference) and latest_version in ref.aliases:
            return False
        if self.resolver is None:
            return True
        return self.resolver.is_version_outdated(
            ref.repository, ref.version, latest_version
        )

    def severity(self, ref: ActionReference, rule: VersionRule) -> Severity:
        """High when below the minimum version or two or more majors behind."""
        current = self._major_of(ref)
        if current is None:
            return Severity.LOW

        minimum = major_version(rule.minimum_version)
        if minimum is not None and current < minimum:
            return Severity.HIGH

        latest = major_version(rule.latest_version)
        if latest is not None and latest - current >= 2:
            return Severity.HIGH
        return Severity.LOW

    def _major_of(self, ref: ActionReference) -> int | None:
        major = major_version(ref.version)
        if major is None and isinstance(ref, ResolvedReference):
            # SHA pins take the major of the tags pointing at the same commit
            majors = [m for m in map(major_version, ref.aliases) if m is not None]
            major = max(majors, default=None)
        return major

    def suggest_version(self, ref: ActionReference, latest_tag: str) -> str:
        """Suggest ``latest_tag`` in the same format as the current version.

        A commit-SHA pin gets the SHA of the latest tag when it resolves.
        """
        if not is_commit_sha(ref.version) or self.resolver is None:
            return latest_tag
        if self.resolver.skip_resolution:
            return latest_tag
        try:
            owner, repo = split_repository(ref.repository)
            return self.resolver.resolve_ref(owner, repo, latest_tag)
        except (InvalidRepositoryError, ResolutionError) as e:
            logger.debug("Suggesting tag %s for %s: %s", latest_tag, ref.uses, e)
            return latest_tag

    def _migration_issue(self, ref: ActionReference, rule: MigrationRule) -> Issue:
        description = (
            f"Action {ref.repository} has migrated to {rule.migrate_to_repository}"
        )
        if rule.description:
            description = f"{description}: {rule.description}"

        has_transformations, schema_changes = self._transformations(
            ref, rule.migrate_to_version, rule.migrate_to_repository
        )
        logger.debug(
            "Migration %s -> %s@%s",
            ref.uses,
            rule.migrate_to_repository,
            rule.migrate_to_version,
        )
        return Issue(
            repository=ref.repository,
            current_version=ref.version,
            suggested_version=rule.migrate_to_version,
            issue_type=IssueType.MIGRATION,
            severity=Severity.HIGH,
            description=description,
            context=ref.context,
            file_path=ref.file_path,
            target_repository=rule.migrate_to_repository,
            is_reusable=ref.is_reusable,
            has_transformations=has_transformations,
            schema_changes=schema_changes,
        )

    def _version_issue(
        self,
        ref: ActionReference,
        rule: VersionRule,
        issue_type: IssueType,
        severity: Severity,
        description: str,
    ) -> Issue:
        suggested = self.suggest_version(ref, rule.latest_version)
        has_transformations, schema_changes = self._transformations(
            ref, rule.latest_version
        )
        logger.debug(
            "%s issue for %s (%s), suggesting %s",
            issue_type.value,
            ref.uses,
            severity.value,
            suggested,
        )
        return Issue(
            repository=ref.repository,
            current_version=ref.version,
            suggested_version=suggested,
            issue_type=issue_type,
            severity=severity,
            description=description,
            context=ref.context,
            file_path=ref.file_path,
            is_reusable=ref.is_reusable,
            has_transformations=has_transformations,
            schema_changes=schema_changes,
        )

    def _transformations(
        self, ref: ActionReference, target_version: str, target_repository: str = ""
    ) -> tuple[bool, list[str]]:
        if self.patch_engine is None or not target_version:
            return False, []

        to_repository = target_repository or ref.repository
        info = self.patch_engine.get_patch_info(
            ref.repository, ref.version, target_version, to_repository
        )
        if info is None:
            return False, []

        if ref.with_parameters is not None:
            try:
                self.patch_engine.build_migration_patch(
                    ref.repository,
                    to_repository,
                    ref.version,
                    target_version,
                    ref.with_parameters,
                )
            except PatchStructureError as e:
                logger.warning(
                    "Cannot patch parameters of %s in %s: %s",
                    ref.uses,
                    ref.file_path,
                    e,
                )
                return False, []

        changes = [info.description]
        changes.extend(f"{p.operation.value}: {p.reason}" for p in info.patches)
        return True, changes
