"""Tests for the rule-based analyzer."""

import pytest

from actions_maintainer.analysis import Analyzer, IssueType, Severity
from actions_maintainer.analysis.analyzer import is_commit_sha, major_version
from actions_maintainer.patcher import PatchEngine
from actions_maintainer.rules import MigrationRule, RuleSet, VersionRule
from actions_maintainer.workflow import ResolvedReference, VersionResolver

CHECKOUT_V4_SHA = "b4ffde65f46336ab88eb53be808477a3936bae11"
CHECKOUT_V3_SHA = "f43a0e5ff2bd294095638e18286ca9a3d1956744"


@pytest.fixture
def analyzer(rule_set: RuleSet) -> Analyzer:
    return Analyzer(rule_set, patch_engine=PatchEngine(rule_set))


class TestVersionHelpers:
    @pytest.mark.parametrize(
        "version,expected",
        [("v4", 4), ("v4.1.0", 4), ("12", 12), ("main", None), ("v", None)],
    )
    def test_major_version(self, version: str, expected: int | None) -> None:
        assert major_version(version) == expected

    def test_is_commit_sha(self) -> None:
        assert is_commit_sha(CHECKOUT_V4_SHA) is True
        assert is_commit_sha("b4ffde6") is True
        assert is_commit_sha("v4") is False
        assert is_commit_sha("abc") is False


class TestAnalyzeReference:
    """Test issue classification for single references."""

    def test_outdated_low_severity(self, analyzer: Analyzer, make_ref) -> None:
        """Test that one major behind the latest is low severity."""
        issue = analyzer.analyze_reference(make_ref("actions/checkout@v3"))

        assert issue is not None
        assert issue.issue_type is IssueType.OUTDATED
        assert issue.severity is Severity.LOW
        assert issue.suggested_version == "v4"
        assert issue.description == (
            "Action actions/checkout is using version v3, latest is v4"
        )
        assert issue.context == "job:build/step:step-1"
        assert issue.file_path == ".github/workflows/ci.yml"
        assert issue.is_fixable is True

    def test_below_minimum_is_high(self, analyzer: Analyzer, make_ref) -> None:
        issue = analyzer.analyze_reference(make_ref("actions/checkout@v2"))
        assert issue.issue_type is IssueType.OUTDATED
        assert issue.severity is Severity.HIGH

    def test_two_majors_behind_is_high(self, make_ref) -> None:
        rules = RuleSet(
            version_rules=[VersionRule(repository="a/b", latest_version="v5")]
        )
        issue = Analyzer(rules).analyze_reference(make_ref("a/b@v3"))
        assert issue.severity is Severity.HIGH

    def test_current_version_has_no_issue(self, analyzer: Analyzer, make_ref) -> None:
        assert analyzer.analyze_reference(make_ref("actions/checkout@v4")) is None

    def test_branch_is_never_outdated(self, analyzer: Analyzer, make_ref) -> None:
        assert analyzer.analyze_reference(make_ref("actions/checkout@main")) is None
        assert analyzer.analyze_reference(make_ref("actions/checkout@master")) is None

    def test_unknown_action_is_ignored(self, analyzer: Analyzer, make_ref) -> None:
        assert analyzer.analyze_reference(make_ref("my-org/custom@v1")) is None

    def test_deprecated(self, analyzer: Analyzer, make_ref) -> None:
        issue = analyzer.analyze_reference(make_ref("actions/checkout@v1"))

        assert issue.issue_type is IssueType.DEPRECATED
        assert issue.severity is Severity.HIGH
        assert issue.suggested_version == "v4"
        assert issue.description == (
            "Action actions/checkout version v1 is deprecated. "
            "Use v4 for the latest features and bug fixes"
        )

    def test_security_advisory(self, make_ref) -> None:
        rules = RuleSet(
            version_rules=[
                VersionRule(
                    repository="actions/checkout",
                    latest_version="v4",
                    security_advisories={"v3.1.0": "Token leak in debug logs"},
                )
            ]
        )
        issue = Analyzer(rules).analyze_reference(make_ref("actions/checkout@v3.1.0"))

        assert issue.issue_type is IssueType.SECURITY
        assert issue.severity is Severity.HIGH
        assert issue.description == "Token leak in debug logs"

    def test_migration(self, analyzer: Analyzer, make_ref) -> None:
        issue = analyzer.analyze_reference(
            make_ref(
                "legacy-org/deprecated-action@v1", with_parameters={"old-param": 1}
            )
        )

        assert issue.issue_type is IssueType.MIGRATION
        assert issue.severity is Severity.HIGH
        assert issue.suggested_version == "v2"
        assert issue.target_repository == "modern-org/recommended-action"
        assert issue.destination_repository == "modern-org/recommended-action"
        assert issue.description == (
            "Action legacy-org/deprecated-action has migrated to "
            "modern-org/recommended-action: Legacy action is no longer maintained"
        )
        assert issue.has_transformations is True
        assert issue.schema_changes[1:] == [
            "add: Records where the step was migrated from",
            "rename: Parameter renamed in the new action",
        ]

    def test_migration_wins_over_version_rule(self, make_ref) -> None:
        """Test that a migration rule takes precedence for the same action."""
        rules = RuleSet(
            version_rules=[VersionRule(repository="old/a", latest_version="v9")],
            migration_rules=[
                MigrationRule(
                    repository="old/a",
                    migrate_to_repository="new/a",
                    migrate_to_version="v1",
                )
            ],
        )

        issues = Analyzer(rules).analyze([make_ref("old/a@v2")])

        assert len(issues) == 1
        assert issues[0].issue_type is IssueType.MIGRATION

    def test_migration_from_version_mismatch_falls_through(self, make_ref) -> None:
        rules = RuleSet(
            version_rules=[VersionRule(repository="old/a", latest_version="v9")],
            migration_rules=[
                MigrationRule(
                    repository="old/a",
                    migrate_to_repository="new/a",
                    migrate_to_version="v1",
                    from_version="v1",
                )
            ],
        )

        issue = Analyzer(rules).analyze_reference(make_ref("old/a@v2"))
        assert issue.issue_type is IssueType.OUTDATED


class TestSchemaChanges:
    """Test transformation summaries attached to issues."""

    def test_patch_summary(self, analyzer: Analyzer, make_ref) -> None:
        issue = analyzer.analyze_reference(
            make_ref("actions/setup-node@v2", with_parameters={"version": "18"})
        )

        assert issue.has_transformations is True
        assert issue.schema_changes == [
            "Upgrade from v2 to v4 with improved caching",
            "rename: 'version' was renamed to 'node-version'",
            "add: v4 supports built-in dependency caching",
        ]

    def test_no_patch_engine(self, rule_set: RuleSet, make_ref) -> None:
        issue = Analyzer(rule_set).analyze_reference(make_ref("actions/setup-node@v2"))
        assert issue.has_transformations is False
        assert issue.schema_changes == []

    def test_no_patch_rule(self, analyzer: Analyzer, make_ref) -> None:
        issue = analyzer.analyze_reference(make_ref("actions/cache@v2"))
        assert issue.has_transformations is False

    def test_unpatchable_parameters(self, analyzer: Analyzer, make_ref) -> None:
        """Test that an invalid with: block is reported, not raised."""
        issue = analyzer.analyze_reference(
            make_ref("actions/setup-node@v2", with_parameters={"matrix": {1: "x"}})
        )

        assert issue.issue_type is IssueType.OUTDATED
        assert issue.has_transformations is False
        assert issue.schema_changes == []


class TestResolutionAwareAnalysis:
    """Test analysis with a version resolver."""

    def test_alias_of_latest_is_current(
        self, rule_set: RuleSet, fake_resolver, make_ref
    ) -> None:
        resolver = VersionResolver(fake_resolver)
        refs = resolver.resolve_references([make_ref("actions/checkout@v4.1.1")])

        assert Analyzer(rule_set, resolver=resolver).analyze(refs) == []

    def test_alias_without_resolved_reference(
        self, rule_set: RuleSet, fake_resolver, make_ref
    ) -> None:
        analyzer = Analyzer(rule_set, resolver=VersionResolver(fake_resolver))
        assert analyzer.analyze_reference(make_ref("actions/checkout@v4.1.1")) is None

    def test_unresolved_reference_compares_by_name(
        self, rule_set: RuleSet, fake_resolver, make_ref
    ) -> None:
        resolver = VersionResolver(fake_resolver, skip_resolution=True)
        refs = resolver.resolve_references([make_ref("actions/checkout@v4.1.1")])

        (issue,) = Analyzer(rule_set, resolver=resolver).analyze(refs)
        assert issue.issue_type is IssueType.OUTDATED

    def test_sha_pin_gets_sha_suggestion(
        self, rule_set: RuleSet, fake_resolver, make_ref
    ) -> None:
        """Test that a SHA pin is upgraded to the latest tag's SHA."""
        resolver = VersionResolver(fake_resolver)
        ref = ResolvedReference.from_reference(
            make_ref(f"actions/checkout@{CHECKOUT_V3_SHA}"),
            CHECKOUT_V3_SHA,
            frozenset({"v3", "v3.6.0"}),
        )

        issue = Analyzer(rule_set, resolver=resolver).analyze_reference(ref)

        assert issue.issue_type is IssueType.OUTDATED
        assert issue.severity is Severity.LOW
        assert issue.suggested_version == CHECKOUT_V4_SHA

    def test_sha_pin_without_resolver_suggests_tag(
        self, rule_set: RuleSet, make_ref
    ) -> None:
        issue = Analyzer(rule_set).analyze_reference(
            make_ref(f"actions/checkout@{CHECKOUT_V3_SHA}")
        )
        assert issue.suggested_version == "v4"
        assert issue.severity is Severity.LOW


class TestAnalyze:
    def test_preserves_order(self, analyzer: Analyzer, make_ref) -> None:
        issues = analyzer.analyze(
            [
                make_ref("actions/setup-node@v3"),
                make_ref("actions/checkout@v4"),
                make_ref("actions/checkout@v3"),
            ]
        )
        assert [i.repository for i in issues] == [
            "actions/setup-node",
            "actions/checkout",
        ]

    def test_workflow_only(self, rule_set: RuleSet, make_ref) -> None:
        rules = rule_set.merge(
            RuleSet(
                version_rules=[
                    VersionRule(repository="my-org/shared", latest_version="v2")
                ]
            )
        )
        analyzer = Analyzer(rules, workflow_only=True)

        issues = analyzer.analyze(
            [
                make_ref("actions/checkout@v3"),
                make_ref("my-org/shared@v1", is_reusable=True),
            ]
        )

        assert [i.repository for i in issues] == ["my-org/shared"]
        assert issues[0].is_reusable is True
