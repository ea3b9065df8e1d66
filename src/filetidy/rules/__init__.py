"""Rule evaluation and path generation."""

from .actions import ActionResult, apply_action, apply_all_actions, format_date
from .categories import get_file_category
from .conditions import match_all_conditions, match_condition
from .engine import (
    BatchEvaluationResult,
    EvaluationOptions,
    EvaluationStats,
    RuleEngine,
    RuleEvaluationResult,
)
from .errors import RuleNotFoundError, RuleStoreError
from .models import Action, ActionParams, Condition, FileRecord, ProposedChange, Rule
from .store import RuleRepository, default_rules, validate_rule_data

__all__ = [
    "Action",
    "ActionParams",
    "ActionResult",
    "BatchEvaluationResult",
    "Condition",
    "EvaluationOptions",
    "EvaluationStats",
    "FileRecord",
    "ProposedChange",
    "Rule",
    "RuleEngine",
    "RuleEvaluationResult",
    "RuleNotFoundError",
    "RuleRepository",
    "RuleStoreError",
    "apply_action",
    "apply_all_actions",
    "default_rules",
    "format_date",
    "get_file_category",
    "match_all_conditions",
    "match_condition",
    "validate_rule_data",
]
