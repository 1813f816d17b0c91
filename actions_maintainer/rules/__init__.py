"""Rule catalogue: version, migration and field patch rules."""

from .defaults import default_rule_set
from .loader import load_rule_set, load_rules_file, parse_rules
from .models import (
    FieldOperation,
    FieldPatch,
    MigrationRule,
    PatchRule,
    RuleSet,
    VersionPatch,
    VersionRule,
)

__all__ = [
    "FieldOperation",
    "FieldPatch",
    "MigrationRule",
    "PatchRule",
    "RuleSet",
    "VersionPatch",
    "VersionRule",
    "default_rule_set",
    "load_rule_set",
    "load_rules_file",
    "parse_rules",
]
