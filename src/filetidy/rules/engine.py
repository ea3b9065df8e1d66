"""Rule engine that turns rules and file records into proposed changes.

The engine evaluates files against a prioritized, scoped rule list and
produces a non-destructive preview. It never touches the filesystem; applying
the resulting :class:`~filetidy.rules.models.ProposedChange` records is the job
of :mod:`filetidy.organization`.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from .actions import apply_all_actions
from .conditions import match_all_conditions
from .models import FileRecord, ProposedChange, Rule, RuleScope

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EvaluationOptions:
    """Options controlling rule evaluation.

    Attributes:
        scope: When set, only rules with this scope (or ``both``) are used.
        base_folder: Folder that relative action targets resolve against.
        stop_at_first_match: Accepted for forward compatibility; evaluation
            always reports the first rule that produces a change.
        now: Reference time for age conditions.
    """

    scope: Optional[RuleScope] = None
    base_folder: Optional[str] = None
    stop_at_first_match: bool = True
    now: Optional[datetime] = None


@dataclass(slots=True)
class RuleEvaluationResult:
    """Outcome of evaluating one file against the rule set."""

    file: FileRecord
    matched: bool
    matched_rule: Optional[Rule] = None
    proposed_change: Optional[ProposedChange] = None


@dataclass(slots=True)
class EvaluationStats:
    """Bookkeeping for a batch evaluation.

    Attributes:
        rules_checked: Number of enabled, in-scope rules considered.
        evaluation_time_ms: Wall-clock duration of the batch in milliseconds.
    """

    rules_checked: int
    evaluation_time_ms: int


@dataclass(slots=True)
class BatchEvaluationResult:
    """Outcome of evaluating many files.

    Attributes:
        total_files: Number of records supplied, directories included.
        matched_files: Number of records with a proposed change.
        changes: Proposed changes in input order.
        unmatched: Non-directory records no rule changed.
        stats: Evaluation statistics.
    """

    total_files: int
    matched_files: int
    changes: list[ProposedChange] = field(default_factory=list)
    unmatched: list[FileRecord] = field(default_factory=list)
    stats: EvaluationStats = field(default_factory=lambda: EvaluationStats(0, 0))


class RuleEngine:
    """Evaluate file records against an ordered set of organization rules."""

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: list[Rule] = self._sort_by_priority(rules)

    def set_rules(self, rules: Iterable[Rule]) -> None:
        """Replace the rule set, keeping it sorted by ascending priority."""
        self._rules = self._sort_by_priority(rules)

    def get_rules(self) -> list[Rule]:
        """Return a copy of the configured rules in evaluation order."""
        return list(self._rules)

    def evaluate_file(
        self,
        file: FileRecord,
        options: Optional[EvaluationOptions] = None,
    ) -> RuleEvaluationResult:
        """Evaluate ``file`` against the enabled rules in priority order.

        The first rule whose conditions match and whose actions move or rename
        the file wins. A matching rule that leaves the file where it is does
        not stop evaluation, so a later rule can still propose a change.

        Args:
            file: Record to evaluate.
            options: Evaluation options; defaults apply when omitted.

        Returns:
            RuleEvaluationResult: Match outcome and the proposed change, if any.
        """
        options = options or EvaluationOptions()
        if file.is_directory:
            return RuleEvaluationResult(file=file, matched=False)

        for rule in self._applicable_rules(options.scope):
            if not match_all_conditions(file, rule.conditions, now=options.now):
                continue
            result = apply_all_actions(file, rule.actions, options.base_folder)
            if result.proposed_path == file.path and result.proposed_name == file.name:
                LOGGER.debug("Rule %r matched %s without changing it.", rule.name, file.path)
                continue

            change = ProposedChange(
                file=file,
                current_path=file.path,
                current_name=file.name,
                proposed_path=result.proposed_path,
                proposed_name=result.proposed_name,
                matched_rule=rule.name,
                matched_rule_id=rule.id,
            )
            return RuleEvaluationResult(
                file=file,
                matched=True,
                matched_rule=rule,
                proposed_change=change,
            )

        return RuleEvaluationResult(file=file, matched=False)

    def evaluate_files(
        self,
        files: Iterable[FileRecord],
        options: Optional[EvaluationOptions] = None,
    ) -> BatchEvaluationResult:
        """Evaluate every record and aggregate the proposed changes.

        Directories are counted in ``total_files`` but reported in neither
        ``changes`` nor ``unmatched``.
        """
        options = options or EvaluationOptions()
        if not options.stop_at_first_match:
            LOGGER.debug("Multi-match evaluation is not supported; reporting first matches only.")
        started = time.perf_counter()
        records = list(files)
        changes: list[ProposedChange] = []
        unmatched: list[FileRecord] = []

        for record in records:
            result = self.evaluate_file(record, options)
            if result.matched and result.proposed_change is not None:
                changes.append(result.proposed_change)
            elif not record.is_directory:
                unmatched.append(record)

        elapsed_ms = round((time.perf_counter() - started) * 1000)
        stats = EvaluationStats(
            rules_checked=len(self._applicable_rules(options.scope)),
            evaluation_time_ms=elapsed_ms,
        )
        LOGGER.info(
            "Evaluated %d files against %d rules: %d changes, %d unmatched.",
            len(records),
            stats.rules_checked,
            len(changes),
            len(unmatched),
        )
        return BatchEvaluationResult(
            total_files=len(records),
            matched_files=len(changes),
            changes=changes,
            unmatched=unmatched,
            stats=stats,
        )

    def preview(
        self,
        files: Iterable[FileRecord],
        options: Optional[EvaluationOptions] = None,
    ) -> BatchEvaluationResult:
        """Alias for :meth:`evaluate_files`."""
        return self.evaluate_files(files, options)

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _applicable_rules(self, scope: Optional[RuleScope]) -> list[Rule]:
        return [
            rule
            for rule in self._rules
            if rule.enabled and (scope is None or rule.scope in ("both", scope))
        ]

    @staticmethod
    def _sort_by_priority(rules: Iterable[Rule]) -> list[Rule]:
        return sorted(rules, key=lambda rule: rule.priority)


__all__ = [
    "BatchEvaluationResult",
    "EvaluationOptions",
    "EvaluationStats",
    "RuleEngine",
    "RuleEvaluationResult",
]
