"""Built-in rule catalogue for widely used GitHub Actions."""

from .models import (
    FieldOperation,
    FieldPatch,
    MigrationRule,
    PatchRule,
    RuleSet,
    VersionPatch,
    VersionRule,
)

ADD = FieldOperation.ADD
REMOVE = FieldOperation.REMOVE
RENAME = FieldOperation.RENAME


def default_version_rules() -> list[VersionRule]:
    return [
        VersionRule(
            repository="actions/checkout",
            latest_version="v4",
            minimum_version="v3",
            deprecated_versions=frozenset({"v1"}),
            recommendation="Use v4 for the latest features and bug fixes",
        ),
        VersionRule(
            repository="actions/setup-node",
            latest_version="v4",
            minimum_version="v3",
            deprecated_versions=frozenset({"v1"}),
        ),
        VersionRule(
            repository="actions/setup-python",
            latest_version="v5",
            minimum_version="v4",
            deprecated_versions=frozenset({"v1", "v2"}),
        ),
        VersionRule(
            repository="actions/upload-artifact",
            latest_version="v4",
            minimum_version="v3",
            deprecated_versions=frozenset({"v1"}),
        ),
        VersionRule(
            repository="actions/download-artifact",
            latest_version="v4",
            minimum_version="v3",
            deprecated_versions=frozenset({"v1"}),
        ),
        VersionRule(
            repository="actions/cache",
            latest_version="v4",
            minimum_version="v3",
        ),
        VersionRule(
            repository="actions/setup-go",
            latest_version="v5",
            minimum_version="v4",
        ),
        VersionRule(
            repository="actions/setup-java",
            latest_version="v4",
            minimum_version="v3",
        ),
    ]


def default_migration_rules() -> list[MigrationRule]:
    return [
        MigrationRule(
            repository="legacy-org/deprecated-action",
            migrate_to_repository="modern-org/recommended-action",
            migrate_to_version="v2",
            description="Legacy action is no longer maintained",
        ),
        MigrationRule(
            repository="old-org/standard-action",
            migrate_to_repository="new-org/standard-action",
            migrate_to_version="v3",
            description="Action moved to the new-org organization",
        ),
    ]


def default_patch_rules() -> list[PatchRule]:
    return [
        PatchRule(
            repository="actions/checkout",
            version_patches=[
                VersionPatch(
                    from_version="v1",
                    to_version="v4",
                    description="Major upgrade from v1 to v4 with token handling "
                    "and fetch behavior changes",
                    patches=[
                        FieldPatch(
                            operation=REMOVE,
                            field="token",
                            reason="v4 uses GITHUB_TOKEN automatically with "
                            "appropriate permissions",
                        ),
                        FieldPatch(
                            operation=ADD,
                            field="fetch-depth",
                            value=1,
                            reason="v4 defaults to a shallow clone; set explicitly "
                            "if full history is needed",
                        ),
                    ],
                ),
                VersionPatch(
                    from_version="v2",
                    to_version="v4",
                    description="Upgrade from v2 to v4 with improved defaults",
                    patches=[
                        FieldPatch(
                            operation=ADD,
                            field="fetch-tags",
                            value=False,
                            reason="v4 introduces fetch-tags to control tag fetching",
                        ),
                    ],
                ),
                VersionPatch(
                    from_version="v3",
                    to_version="v4",
                    description="Minor upgrade from v3 to v4 with performance "
                    "improvements",
                    patches=[
                        FieldPatch(
                            operation=ADD,
                            field="show-progress",
                            value=True,
                            reason="v4 adds show-progress for large repositories",
                        ),
                    ],
                ),
            ],
        ),
        PatchRule(
            repository="actions/setup-node",
            version_patches=[
                VersionPatch(
                    from_version="v1",
                    to_version="v4",
                    description="Major upgrade from v1 to v4 with parameter name "
                    "changes and built-in caching",
                    patches=[
                        FieldPatch(
                            operation=RENAME,
                            field="version",
                            new_field="node-version",
                            reason="'version' was renamed to 'node-version'",
                        ),
                        FieldPatch(
                            operation=ADD,
                            field="cache",
                            value="npm",
                            reason="v4 supports built-in dependency caching",
                        ),
                    ],
                ),
                VersionPatch(
                    from_version="v2",
                    to_version="v4",
                    description="Upgrade from v2 to v4 with improved caching",
                    patches=[
                        FieldPatch(
                            operation=RENAME,
                            field="version",
                            new_field="node-version",
                            reason="'version' was renamed to 'node-version'",
                        ),
                        FieldPatch(
                            operation=ADD,
                            field="cache",
                            value="npm",
                            reason="v4 supports built-in dependency caching",
                        ),
                    ],
                ),
                VersionPatch(
                    from_version="v3",
                    to_version="v4",
                    description="Minor upgrade from v3 to v4",
                    patches=[
                        FieldPatch(
                            operation=ADD,
                            field="check-latest",
                            value=False,
                            reason="v4 adds check-latest to control version checks",
                        ),
                    ],
                ),
            ],
        ),
        PatchRule(
            repository="actions/setup-python",
            version_patches=[
                VersionPatch(
                    from_version="v1",
                    to_version="v5",
                    description="Major upgrade from v1 to v5 with caching support",
                    patches=[
                        FieldPatch(
                            operation=ADD,
                            field="cache",
                            value="pip",
                            reason="v5 supports dependency caching",
                        ),
                        FieldPatch(
                            operation=ADD,
                            field="check-latest",
                            value=False,
                            reason="v5 adds check-latest for reproducible builds",
                        ),
                    ],
                ),
                VersionPatch(
                    from_version="v2",
                    to_version="v5",
                    description="Upgrade from v2 to v5 with caching",
                    patches=[
                        FieldPatch(
                            operation=ADD,
                            field="cache",
                            value="pip",
                            reason="Built-in dependency caching",
                        ),
                    ],
                ),
                VersionPatch(
                    from_version="v3",
                    to_version="v5",
                    description="Upgrade from v3 to v5 with cache path options",
                    patches=[
                        FieldPatch(
                            operation=ADD,
                            field="cache-dependency-path",
                            value="requirements.txt",
                            reason="v5 accepts a custom dependency file for the "
                            "cache key",
                        ),
                    ],
                ),
                VersionPatch(
                    from_version="v4",
                    to_version="v5",
                    description="Minor upgrade from v4 to v5",
                    patches=[
                        FieldPatch(
                            operation=ADD,
                            field="allow-prereleases",
                            value=False,
                            reason="v5 adds allow-prereleases",
                        ),
                    ],
                ),
            ],
        ),
        PatchRule(
            repository="actions/upload-artifact",
            version_patches=[
                VersionPatch(
                    from_version="v1",
                    to_version="v4",
                    description="Breaking change from v1 to v4 with the new "
                    "artifact API",
                    patches=[
                        FieldPatch(
                            operation=ADD,
                            field="compression-level",
                            value=6,
                            reason="v4 exposes the compression level",
                        ),
                        FieldPatch(
                            operation=ADD,
                            field="overwrite",
                            value=False,
                            reason="v4 requires opting in to overwriting artifacts",
                        ),
                    ],
                ),
                VersionPatch(
                    from_version="v2",
                    to_version="v4",
                    description="Breaking upgrade from v2 to v4",
                    patches=[
                        FieldPatch(
                            operation=ADD,
                            field="compression-level",
                            value=6,
                            reason="v4 exposes the compression level",
                        ),
                        FieldPatch(
                            operation=ADD,
                            field="retention-days",
                            value=90,
                            reason="v4 allows explicit retention",
                        ),
                    ],
                ),
                VersionPatch(
                    from_version="v3",
                    to_version="v4",
                    description="Breaking upgrade from v3 to v4 with the new "
                    "artifact backend",
                    patches=[
                        FieldPatch(
                            operation=REMOVE,
                            field="path-separator",
                            reason="v4 handles paths automatically",
                        ),
                        FieldPatch(
                            operation=ADD,
                            field="include-hidden-files",
                            value=False,
                            reason="v4 excludes hidden files unless asked",
                        ),
                    ],
                ),
            ],
        ),
        PatchRule(
            repository="actions/download-artifact",
            version_patches=[
                VersionPatch(
                    from_version="v1",
                    to_version="v4",
                    description="Major upgrade from v1 to v4 with the new "
                    "download API",
                    patches=[
                        FieldPatch(
                            operation=ADD,
                            field="github-token",
                            value="${{ github.token }}",
                            reason="v4 needs a token for cross-run downloads",
                        ),
                    ],
                ),
                VersionPatch(
                    from_version="v2",
                    to_version="v4",
                    description="Breaking upgrade from v2 to v4",
                    patches=[
                        FieldPatch(
                            operation=ADD,
                            field="merge-multiple",
                            value=False,
                            reason="v4 adds merge-multiple",
                        ),
                    ],
                ),
                VersionPatch(
                    from_version="v3",
                    to_version="v4",
                    description="Breaking upgrade from v3 to v4 with the new "
                    "artifact backend",
                    patches=[
                        FieldPatch(
                            operation=REMOVE,
                            field="workflow",
                            reason="v4 resolves artifacts without a workflow name",
                        ),
                        FieldPatch(
                            operation=ADD,
                            field="run-id",
                            value="${{ github.run_id }}",
                            reason="v4 identifies artifacts by run id",
                        ),
                    ],
                ),
            ],
        ),
        PatchRule(
            repository="actions/cache",
            version_patches=[
                VersionPatch(
                    from_version="v3",
                    to_version="v4",
                    description="Upgrade from v3 to v4",
                    patches=[
                        FieldPatch(
                            operation=ADD,
                            field="lookup-only",
                            value=False,
                            reason="v4 can check for a cache hit without "
                            "downloading",
                        ),
                        FieldPatch(
                            operation=ADD,
                            field="fail-on-cache-miss",
                            value=False,
                            reason="v4 can fail the job on a cache miss",
                        ),
                    ],
                ),
            ],
        ),
        PatchRule(
            repository="actions/setup-go",
            version_patches=[
                VersionPatch(
                    from_version="v4",
                    to_version="v5",
                    description="Upgrade from v4 to v5",
                    patches=[
                        FieldPatch(
                            operation=ADD,
                            field="cache-dependency-path",
                            value="go.sum",
                            reason="v5 accepts a custom dependency file for the "
                            "cache key",
                        ),
                        FieldPatch(
                            operation=ADD,
                            field="check-latest",
                            value=False,
                            reason="v5 adds check-latest",
                        ),
                    ],
                ),
            ],
        ),
        PatchRule(
            repository="actions/setup-java",
            version_patches=[
                VersionPatch(
                    from_version="v3",
                    to_version="v4",
                    description="Upgrade from v3 to v4",
                    patches=[
                        FieldPatch(
                            operation=ADD,
                            field="cache-dependency-path",
                            value="pom.xml",
                            reason="v4 accepts a custom dependency file for the "
                            "cache key",
                        ),
                    ],
                ),
            ],
        ),
        PatchRule(
            repository="legacy-org/deprecated-action",
            version_patches=[
                VersionPatch(
                    from_version="v1",
                    to_version="v2",
                    from_repository="legacy-org/deprecated-action",
                    to_repository="modern-org/recommended-action",
                    description="Migration from the deprecated legacy action to "
                    "modern-org/recommended-action",
                    patches=[
                        FieldPatch(
                            operation=ADD,
                            field="migrate-notice",
                            value="This action has been migrated to "
                            "modern-org/recommended-action",
                            reason="Records where the step was migrated from",
                        ),
                        FieldPatch(
                            operation=RENAME,
                            field="old-param",
                            new_field="new-param",
                            reason="Parameter renamed in the new action",
                        ),
                    ],
                ),
            ],
        ),
        PatchRule(
            repository="old-org/standard-action",
            version_patches=[
                VersionPatch(
                    from_version="v3",
                    to_version="v3",
                    from_repository="old-org/standard-action",
                    to_repository="new-org/standard-action",
                    description="Organization move from old-org to new-org with "
                    "the same inputs",
                ),
            ],
        ),
    ]


def default_rule_set() -> RuleSet:
    """Build a fresh RuleSet holding the built-in catalogue."""
    return RuleSet(
        version_rules=default_version_rules(),
        migration_rules=default_migration_rules(),
        patch_rules=default_patch_rules(),
    )
