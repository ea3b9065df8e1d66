"""Persistence for user-authored rules."""

from __future__ import annotations

import logging
import textwrap
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Literal, Optional

import yaml
from pydantic import ValidationError

from .conditions import DEFAULT_OPERATORS, VALID_OPERATORS
from .errors import RuleNotFoundError, RuleStoreError
from .models import Action, ActionParams, Condition, Rule, RuleScope

LOGGER = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path("~/.filetidy/rules.yaml")
_RULES_HEADER = textwrap.dedent(
    """\
    # filetidy rules
    # Managed by `filetidy rules`; rules are evaluated in ascending priority order.
    """
)


def default_rules(now: Optional[datetime] = None) -> list[Rule]:
    """Return the starter rule set; every rule is disabled until the user opts in."""
    stamp = now or datetime.now(timezone.utc)
    return [
        Rule(
            name="Organize Documents",
            description="Move document files (PDF, DOC, etc.) to Documents folder",
            conditions=[Condition(type="category", operator="equals", value="documents")],
            actions=[Action(type="move", params=ActionParams(target_folder="Documents/Organized"))],
            scope="both",
            enabled=False,
            priority=1,
            created_at=stamp,
            updated_at=stamp,
        ),
        Rule(
            name="Organize Images by Date",
            description="Move images to year/month folders",
            conditions=[Condition(type="category", operator="equals", value="images")],
            actions=[
                Action(
                    type="moveByDate",
                    params=ActionParams(
                        target_folder="Pictures/Organized", date_format="YYYY/MMMM"
                    ),
                )
            ],
            scope="both",
            enabled=False,
            priority=2,
            created_at=stamp,
            updated_at=stamp,
        ),
        Rule(
            name="Archive Old Downloads",
            description="Move files older than 30 days to Archive folder",
            conditions=[Condition(type="age", operator="gt", value=30)],
            actions=[
                Action(
                    type="moveByDate",
                    params=ActionParams(target_folder="Archive", date_format="YYYY"),
                )
            ],
            scope="local",
            enabled=False,
            priority=3,
            created_at=stamp,
            updated_at=stamp,
        ),
    ]


IssueOutcome = Literal["repaired", "kept", "skipped"]


@dataclass(slots=True)
class RuleValidationIssue:
    """Problem found while validating persisted rule data.

    Attributes:
        rule: Rule name, or its position when unnamed.
        message: Description of the problem.
        outcome: ``repaired`` when the data was normalized, ``kept`` when it
            was left as written, ``skipped`` when the entry could not be loaded.
    """

    rule: str
    message: str
    outcome: IssueOutcome = "kept"

    @property
    def repaired(self) -> bool:
        """Return True when the data was normalized."""
        return self.outcome == "repaired"


@dataclass(slots=True)
class RuleValidationReport:
    """Validated rules together with the issues encountered.

    Attributes:
        rules: Rules that loaded, with repairs applied.
        issues: Problems found, in file order.
        unloadable: Raw entries that could not be loaded, exactly as read.
    """

    rules: list[Rule] = field(default_factory=list)
    issues: list[RuleValidationIssue] = field(default_factory=list)
    unloadable: list[Any] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Return True when saving would write repaired data."""
        return any(issue.repaired for issue in self.issues)


def validate_rule_data(raw_rules: Iterable[Any]) -> RuleValidationReport:
    """Validate raw rule mappings, repairing what can be repaired.

    Conditions whose operator is invalid for their type are reset to the type's
    default operator. Conditions with unknown types are kept as written; they
    never match, so their rule stays inert. Entries that fail model validation
    are reported and returned untouched in ``unloadable``.

    Args:
        raw_rules: Rule mappings as read from storage.

    Returns:
        RuleValidationReport: Valid rules and the issues found.
    """
    report = RuleValidationReport()
    for index, entry in enumerate(raw_rules, start=1):
        if not isinstance(entry, Mapping):
            report.issues.append(
                RuleValidationIssue(
                    f"#{index}", "Rule entry must be a mapping.", outcome="skipped"
                )
            )
            report.unloadable.append(entry)
            continue

        data = dict(entry)
        label = str(data.get("name") or f"#{index}")
        issues: list[RuleValidationIssue] = []
        raw_conditions = data.get("conditions")
        conditions: list[Any] = []
        for condition in raw_conditions if isinstance(raw_conditions, list) else []:
            if not isinstance(condition, Mapping):
                conditions.append(condition)
                continue
            condition_type = condition.get("type")
            operator = condition.get("operator")
            if condition_type not in VALID_OPERATORS:
                issues.append(
                    RuleValidationIssue(
                        label,
                        f"Unknown condition type {condition_type!r}; the rule will never match.",
                    )
                )
            elif operator not in VALID_OPERATORS[condition_type]:
                replacement = DEFAULT_OPERATORS[condition_type]
                issues.append(
                    RuleValidationIssue(
                        label,
                        f"Operator {operator!r} is invalid for {condition_type} conditions; "
                        f"reset to {replacement!r}.",
                        outcome="repaired",
                    )
                )
                condition = {**condition, "operator": replacement}
            conditions.append(dict(condition))
        if isinstance(raw_conditions, list):
            data["conditions"] = conditions

        try:
            rule = Rule.model_validate(data)
        except ValidationError as exc:
            report.issues.append(
                RuleValidationIssue(
                    label, f"Invalid rule left unchanged: {exc}", outcome="skipped"
                )
            )
            report.unloadable.append(entry)
            continue
        report.rules.append(rule)
        report.issues.extend(issues)

    return report


class RuleRepository:
    """Load, validate, and persist rules in a YAML file.

    Entries that cannot be loaded are never discarded: they are remembered on
    load and written back verbatim after the valid rules on every save.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = (path or DEFAULT_RULES_PATH).expanduser()
        self._unloadable: list[Any] = []

    @property
    def path(self) -> Path:
        """Return the resolved rules file path."""
        return self._path

    def load(self) -> list[Rule]:
        """Return the stored rules, seeding defaults when no file exists.

        Operator repairs found on load are written back so the file converges
        to a valid state. Unloadable entries are logged and left on disk.

        Raises:
            RuleStoreError: If the file cannot be parsed.
        """
        if not self._path.exists():
            rules = default_rules()
            self.save(rules)
            return rules

        report = self.validate()
        for issue in report.issues:
            LOGGER.warning("Rule %s: %s", issue.rule, issue.message)
        if report.changed:
            LOGGER.info("Saving normalized rules to %s", self._path)
            self.save(report.rules)
        return report.rules

    def validate(self) -> RuleValidationReport:
        """Validate the stored rules without writing any repairs."""
        if not self._path.exists():
            return RuleValidationReport(rules=default_rules())
        report = validate_rule_data(self._read())
        self._unloadable = list(report.unloadable)
        return report

    def save(self, rules: Iterable[Rule]) -> None:
        """Persist ``rules`` to disk, followed by any unloadable entries."""
        entries: list[Any] = [rule.model_dump(mode="json") for rule in rules]
        entries.extend(self._unloadable)
        payload = {"rules": entries}
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            serialized = yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)
            self._path.write_text(_RULES_HEADER + serialized, encoding="utf-8")
        except OSError as exc:
            raise RuleStoreError(f"Failed to write rules file {self._path}: {exc}") from exc

    def get(self, rule_id: str) -> Rule:
        """Return the rule whose id equals or uniquely starts with ``rule_id``."""
        rules = self.load()
        return rules[self._index_of(rules, rule_id)]

    def add(self, rule: Rule) -> Rule:
        """Append ``rule`` to the store."""
        rules = self.load()
        rules.append(rule)
        self.save(rules)
        return rule

    def update(self, rule_id: str, **changes: Any) -> Rule:
        """Apply field changes to a rule and bump its ``updated_at`` timestamp.

        Raises:
            RuleNotFoundError: If no rule matches ``rule_id``.
            RuleStoreError: If the updated rule is invalid.
        """
        rules = self.load()
        index = self._index_of(rules, rule_id)
        data = rules[index].model_dump()
        data.update(changes)
        data["updated_at"] = datetime.now(timezone.utc)
        try:
            updated = Rule.model_validate(data)
        except ValidationError as exc:
            raise RuleStoreError(f"Invalid rule update: {exc}") from exc
        rules[index] = updated
        self.save(rules)
        return updated

    def delete(self, rule_id: str) -> Rule:
        """Remove a rule and return it."""
        rules = self.load()
        removed = rules.pop(self._index_of(rules, rule_id))
        self.save(rules)
        return removed

    def toggle(self, rule_id: str) -> Rule:
        """Flip the ``enabled`` flag of a rule."""
        rule = self.get(rule_id)
        return self.update(rule.id, enabled=not rule.enabled)

    def reorder(self, rule_ids: Iterable[str]) -> list[Rule]:
        """Assign priorities following ``rule_ids``; unlisted rules are dropped."""
        rules = self.load()
        reordered: list[Rule] = []
        for position, rule_id in enumerate(rule_ids):
            rule = rules[self._index_of(rules, rule_id)]
            reordered.append(rule.model_copy(update={"priority": position}))
        self.save(reordered)
        return reordered

    def enabled_rules(self, scope: Optional[RuleScope] = None) -> list[Rule]:
        """Return enabled rules applicable to ``scope`` in priority order."""
        rules = [
            rule
            for rule in self.load()
            if rule.enabled and (scope is None or rule.scope in ("both", scope))
        ]
        return sorted(rules, key=lambda rule: rule.priority)

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _read(self) -> list[Any]:
        try:
            raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise RuleStoreError(f"Failed to parse rules file: {exc}") from exc
        except OSError as exc:
            raise RuleStoreError(f"Failed to read rules file {self._path}: {exc}") from exc

        if raw is None:
            return []
        if isinstance(raw, Mapping):
            raw = raw.get("rules") or []
        if not isinstance(raw, list):
            raise RuleStoreError("Rules file must contain a list of rules.")
        return raw

    @staticmethod
    def _index_of(rules: list[Rule], rule_id: str) -> int:
        for index, rule in enumerate(rules):
            if rule.id == rule_id:
                return index
        candidates = [index for index, rule in enumerate(rules) if rule.id.startswith(rule_id)]
        if rule_id and len(candidates) == 1:
            return candidates[0]
        raise RuleNotFoundError(f"No rule found with id {rule_id!r}.")


__all__ = [
    "DEFAULT_RULES_PATH",
    "RuleRepository",
    "RuleValidationIssue",
    "RuleValidationReport",
    "default_rules",
    "validate_rule_data",
]
