"""Tests for rule engine evaluation."""

from __future__ import annotations

from datetime import datetime, timezone

from filetidy.rules import (
    Action,
    ActionParams,
    Condition,
    EvaluationOptions,
    FileRecord,
    Rule,
    RuleEngine,
)

MODIFIED = datetime(2024, 1, 10, 8, 0, tzinfo=timezone.utc)


def _record(path: str, **overrides: object) -> FileRecord:
    data: dict[str, object] = {"path": path, "size": 4096, "modified_time": MODIFIED}
    data.update(overrides)
    return FileRecord.model_validate(data)


def _documents_rule(**overrides: object) -> Rule:
    data: dict[str, object] = {
        "name": "Documents",
        "conditions": [Condition(type="category", operator="equals", value="documents")],
        "actions": [Action(type="move", params=ActionParams(target_folder="Documents"))],
    }
    data.update(overrides)
    return Rule.model_validate(data)


def test_documents_rule_moves_only_documents() -> None:
    rule = _documents_rule(id="docs")
    engine = RuleEngine([rule])
    files = [_record("/in/a.pdf"), _record("/in/b.jpg"), _record("/in/c.docx")]

    result = engine.preview(files, EvaluationOptions(base_folder="/home"))

    assert result.total_files == 3
    assert result.matched_files == 2
    assert [change.proposed_path for change in result.changes] == [
        "/home/Documents/a.pdf",
        "/home/Documents/c.docx",
    ]
    assert [record.name for record in result.unmatched] == ["b.jpg"]
    change = result.changes[0]
    assert change.current_path == "/in/a.pdf"
    assert change.current_name == "a.pdf"
    assert change.proposed_name == "a.pdf"
    assert change.matched_rule == "Documents"
    assert change.matched_rule_id == "docs"
    assert change.selected is True
    assert change.status == "pending"
    assert result.stats.rules_checked == 1
    assert result.stats.evaluation_time_ms >= 0


def test_lowest_priority_rule_wins() -> None:
    archive = _documents_rule(
        name="Archive",
        priority=5,
        actions=[Action(type="move", params=ActionParams(target_folder="/archive"))],
    )
    documents = _documents_rule(priority=1)
    engine = RuleEngine([archive, documents])

    result = engine.evaluate_file(_record("/in/a.pdf"), EvaluationOptions(base_folder="/home"))

    assert result.matched
    assert result.matched_rule is not None
    assert result.matched_rule.name == "Documents"
    assert [rule.name for rule in engine.get_rules()] == ["Documents", "Archive"]


def test_disabled_rules_are_ignored() -> None:
    engine = RuleEngine([_documents_rule(enabled=False)])

    result = engine.evaluate_files([_record("/in/a.pdf")])

    assert result.matched_files == 0
    assert result.stats.rules_checked == 0
    assert [record.name for record in result.unmatched] == ["a.pdf"]


def test_scope_filters_rules() -> None:
    local_only = _documents_rule(name="Local", scope="local")
    drive_only = _documents_rule(
        name="Drive",
        scope="drive",
        actions=[Action(type="move", params=ActionParams(target_folder="Drive Docs"))],
    )
    engine = RuleEngine([local_only, drive_only])
    record = _record("/in/a.pdf")

    drive_result = engine.evaluate_file(record, EvaluationOptions(scope="drive"))
    local_result = engine.evaluate_file(record, EvaluationOptions(scope="local"))
    unscoped = engine.evaluate_files([record])

    assert drive_result.matched_rule is not None
    assert drive_result.matched_rule.name == "Drive"
    assert local_result.matched_rule is not None
    assert local_result.matched_rule.name == "Local"
    assert unscoped.stats.rules_checked == 2


def test_directories_are_counted_but_never_reported() -> None:
    everything = Rule(
        name="Everything",
        actions=[Action(type="move", params=ActionParams(target_folder="/all"))],
    )
    engine = RuleEngine([everything])
    folder = _record("/in/folder", is_directory=True)

    result = engine.evaluate_files([folder, _record("/in/a.txt")])

    assert result.total_files == 2
    assert result.matched_files == 1
    assert result.unmatched == []
    assert engine.evaluate_file(folder).matched is False


def test_rule_that_leaves_file_in_place_does_not_block_later_rules() -> None:
    noop = _documents_rule(
        name="Already there",
        priority=0,
        actions=[Action(type="move", params=ActionParams(target_folder="/in"))],
    )
    real = _documents_rule(priority=1)
    engine = RuleEngine([noop, real])

    result = engine.evaluate_file(_record("/in/a.pdf"), EvaluationOptions(base_folder="/home"))

    assert result.matched_rule is not None
    assert result.matched_rule.name == "Documents"


def test_rule_without_actions_never_matches() -> None:
    engine = RuleEngine([_documents_rule(actions=[])])

    result = engine.evaluate_files([_record("/in/a.pdf")])

    assert result.matched_files == 0
    assert len(result.unmatched) == 1


def test_age_conditions_use_reference_time() -> None:
    rule = Rule(
        name="Old",
        conditions=[Condition(type="age", operator="gt", value=30)],
        actions=[
            Action(
                type="moveByDate",
                params=ActionParams(target_folder="Archive", date_format="YYYY"),
            )
        ],
    )
    engine = RuleEngine([rule])
    record = _record("/in/notes.txt")

    early = engine.evaluate_file(record, EvaluationOptions(now=datetime(2024, 1, 20)))
    late = engine.evaluate_file(
        record, EvaluationOptions(base_folder="/home", now=datetime(2024, 3, 1))
    )

    assert early.matched is False
    assert late.proposed_change is not None
    assert late.proposed_change.proposed_path == "/home/Archive/2024/notes.txt"


def test_set_rules_replaces_rule_set() -> None:
    engine = RuleEngine()
    assert engine.get_rules() == []

    engine.set_rules([_documents_rule(priority=3), _documents_rule(name="First", priority=-1)])

    assert [rule.name for rule in engine.get_rules()] == ["First", "Documents"]


def test_empty_rule_set_leaves_everything_unmatched() -> None:
    result = RuleEngine().evaluate_files([_record("/in/a.pdf"), _record("/in/b.jpg")])

    assert result.changes == []
    assert len(result.unmatched) == 2


def test_equal_priorities_keep_insertion_order() -> None:
    first = _documents_rule(id="first", name="First", priority=2)
    second = _documents_rule(
        id="second",
        name="Second",
        priority=2,
        actions=[Action(type="move", params=ActionParams(target_folder="Other"))],
    )
    engine = RuleEngine([first, second])

    result = engine.evaluate_file(_record("/in/a.pdf"), EvaluationOptions(base_folder="/home"))

    assert [rule.id for rule in engine.get_rules()] == ["first", "second"]
    assert result.matched_rule is not None
    assert result.matched_rule.id == "first"


def test_rules_are_sorted_by_ascending_priority() -> None:
    engine = RuleEngine(
        [
            _documents_rule(name="Three", priority=3),
            _documents_rule(name="One", priority=1),
            _documents_rule(name="Two", priority=2),
        ]
    )

    assert [rule.priority for rule in engine.get_rules()] == [1, 2, 3]
    assert [rule.name for rule in engine.get_rules()] == ["One", "Two", "Three"]
