"""Load custom rules from a JSON or YAML rules file.

Two document shapes are accepted:

1. Structured document::

    version_rules:
      - repository: actions/checkout
        latest_version: v4
    migration_rules:
      - repository: old-org/action
        migrate_to_repository: new-org/action
        migrate_to_version: v2
    patch_rules:
      - repository: actions/setup-node
        version_patches: [...]

2. Flat list (legacy), one entry per action. An entry with
   ``migrate_to_repository`` and ``migrate_to_version`` also yields a
   migration rule; an entry with ``latest_version`` yields a version rule.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..exceptions import RuleValidationError
from .defaults import default_rule_set
from .models import MigrationRule, PatchRule, RuleSet, VersionRule

logger = logging.getLogger(__name__)

_VERSION_RULE_FIELDS = set(VersionRule.model_fields)


def _read_document(path: Path) -> Any:
    if not path.exists():
        raise RuleValidationError(f"Rules file not found: {path}")

    text = path.read_text()
    try:
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise RuleValidationError(f"Failed to parse rules file {path}: {e}") from e


def _validate(model: type, raw: Any, where: str) -> Any:
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise RuleValidationError(f"Invalid {where}: {e}") from e


def _from_flat_list(entries: list[Any]) -> RuleSet:
    rules = RuleSet()
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise RuleValidationError(f"Rule #{idx + 1} must be a mapping")

        repository = entry.get("repository")
        if entry.get("migrate_to_repository") or entry.get("migrate_to_version"):
            rules.add_migration_rule(
                _validate(
                    MigrationRule,
                    {
                        "repository": repository,
                        "migrate_to_repository": entry.get("migrate_to_repository"),
                        "migrate_to_version": entry.get("migrate_to_version"),
                        "from_version": entry.get("from_version"),
                        "description": entry.get("recommendation", ""),
                    },
                    f"migration rule #{idx + 1}",
                )
            )

        if entry.get("latest_version"):
            fields = {k: v for k, v in entry.items() if k in _VERSION_RULE_FIELDS}
            # Older rule files call the advisories map security_issues
            if "security_issues" in entry and "security_advisories" not in fields:
                fields["security_advisories"] = entry["security_issues"]
            rules.add_version_rule(
                _validate(VersionRule, fields, f"version rule #{idx + 1}")
            )
        elif not entry.get("migrate_to_repository"):
            raise RuleValidationError(
                f"Rule #{idx + 1} ({repository}) needs latest_version or "
                "migrate_to_repository"
            )

    return rules


def _from_document(document: dict[str, Any]) -> RuleSet:
    rules = RuleSet()
    sections = (
        ("version_rules", VersionRule, rules.add_version_rule),
        ("migration_rules", MigrationRule, rules.add_migration_rule),
        ("patch_rules", PatchRule, rules.add_patch_rule),
    )
    for key, model, add in sections:
        entries = document.get(key) or []
        if not isinstance(entries, list):
            raise RuleValidationError(f"'{key}' must be a list")
        for idx, raw in enumerate(entries):
            add(_validate(model, raw, f"{key}[{idx}]"))
    return rules


def parse_rules(document: Any) -> RuleSet:
    """Build a RuleSet from an already-decoded rules document.

    Raises:
        RuleValidationError: If the document or any rule in it is invalid
    """
    if document is None:
        return RuleSet()
    if isinstance(document, list):
        return _from_flat_list(document)
    if isinstance(document, dict):
        return _from_document(document)
    raise RuleValidationError(
        f"Rules document must be a list or mapping, got {type(document).__name__}"
    )


def load_rules_file(path: str | Path) -> RuleSet:
    """Load the rules declared in a JSON or YAML file.

    Raises:
        RuleValidationError: If the file is missing, unparseable or invalid
    """
    path = Path(path)
    rules = parse_rules(_read_document(path))
    logger.info("Loaded %d custom rules from %s", len(rules), path)
    return rules


def load_rule_set(path: str | Path | None = None) -> RuleSet:
    """Return the default rules, overridden per repository by a rules file."""
    rules = default_rule_set()
    if path is None:
        return rules
    return rules.merge(load_rules_file(path))
