"""Tests for persisted rule storage."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from filetidy.rules import (
    Condition,
    FileRecord,
    Rule,
    RuleEngine,
    RuleNotFoundError,
    RuleRepository,
    RuleStoreError,
    validate_rule_data,
)


def _write_rules(path: Path, rules: list[dict[str, object]]) -> None:
    path.write_text(yaml.safe_dump({"rules": rules}), encoding="utf-8")


def test_load_seeds_disabled_defaults(tmp_path: Path) -> None:
    repository = RuleRepository(tmp_path / "rules.yaml")

    rules = repository.load()

    assert [rule.name for rule in rules] == [
        "Organize Documents",
        "Organize Images by Date",
        "Archive Old Downloads",
    ]
    assert all(not rule.enabled for rule in rules)
    assert repository.path.exists()
    assert repository.path.read_text(encoding="utf-8").startswith("# filetidy rules")
    assert [rule.id for rule in repository.load()] == [rule.id for rule in rules]


def test_camel_case_rule_files_load(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    _write_rules(
        path,
        [
            {
                "id": "r1",
                "name": "Photos",
                "conditions": [{"type": "category", "operator": "equals", "value": "images"}],
                "actions": [
                    {
                        "type": "moveByDate",
                        "params": {"targetFolder": "Pictures", "dateFormat": "YYYY"},
                    }
                ],
                "createdAt": "2024-01-01T00:00:00Z",
            }
        ],
    )

    (rule,) = RuleRepository(path).load()

    assert rule.id == "r1"
    assert rule.actions[0].params.target_folder == "Pictures"
    assert rule.actions[0].params.date_format == "YYYY"
    assert rule.created_at.year == 2024


def test_invalid_operator_is_repaired_and_saved(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    path = tmp_path / "rules.yaml"
    _write_rules(
        path,
        [
            {
                "id": "r1",
                "name": "Big files",
                "conditions": [{"type": "size", "operator": "contains", "value": 10}],
            }
        ],
    )

    with caplog.at_level(logging.WARNING, logger="filetidy.rules.store"):
        (rule,) = RuleRepository(path).load()

    assert [(c.type, c.operator) for c in rule.conditions] == [("size", "gt")]
    assert "reset to 'gt'" in caplog.text
    stored = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert stored["rules"][0]["conditions"][0]["operator"] == "gt"


def test_unknown_condition_type_is_kept_and_never_matches(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    path = tmp_path / "rules.yaml"
    _write_rules(
        path,
        [
            {
                "id": "r1",
                "name": "Red things",
                "conditions": [{"type": "colour", "operator": "equals", "value": "red"}],
                "actions": [{"type": "move", "params": {"targetFolder": "/trash"}}],
            }
        ],
    )
    before = path.read_text(encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="filetidy.rules.store"):
        (rule,) = RuleRepository(path).load()

    assert [(c.type, c.operator, c.value) for c in rule.conditions] == [
        ("colour", "equals", "red")
    ]
    assert "Unknown condition type 'colour'" in caplog.text
    assert path.read_text(encoding="utf-8") == before

    files = [FileRecord(path="/in/a.pdf"), FileRecord(path="/in/b.jpg")]
    result = RuleEngine([rule]).preview(files)
    assert result.changes == []
    assert len(result.unmatched) == 2


def test_invalid_rules_stay_on_disk(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "rules.yaml"
    copy_rule = {
        "id": "r2",
        "name": "Copy rule",
        "actions": [{"type": "copy", "params": {"targetFolder": "/backup"}}],
    }
    fractional = {"id": "r3", "name": "Fractional", "priority": 1.5}
    _write_rules(
        path,
        [
            {
                "id": "r1",
                "name": "Keep",
                "conditions": [{"type": "age", "operator": "in", "value": 3}],
            },
            copy_rule,
            fractional,
        ],
    )
    repository = RuleRepository(path)

    with caplog.at_level(logging.WARNING, logger="filetidy.rules.store"):
        rules = repository.load()

    assert [rule.name for rule in rules] == ["Keep"]
    assert "Invalid rule left unchanged" in caplog.text
    stored = yaml.safe_load(path.read_text(encoding="utf-8"))["rules"]
    assert [entry["name"] for entry in stored] == ["Keep", "Copy rule", "Fractional"]
    assert stored[0]["conditions"][0]["operator"] == "gt"
    assert stored[1] == copy_rule
    assert stored[2] == fractional

    repository.update("r1", name="Kept")
    stored = yaml.safe_load(path.read_text(encoding="utf-8"))["rules"]
    assert [entry["name"] for entry in stored] == ["Kept", "Copy rule", "Fractional"]


def test_validate_rule_data_reports_without_writing() -> None:
    report = validate_rule_data(
        [
            {"name": "ok", "conditions": [{"type": "name", "operator": "contains", "value": "x"}]},
            {"conditions": []},
            "not a rule",
        ]
    )

    assert [rule.name for rule in report.rules] == ["ok"]
    assert not report.changed
    assert [issue.outcome for issue in report.issues] == ["skipped", "skipped"]
    assert report.unloadable == [{"conditions": []}, "not a rule"]


def test_validate_rule_data_clean_input_is_unchanged() -> None:
    report = validate_rule_data([{"name": "ok"}])

    assert not report.changed
    assert report.rules[0].conditions == []


def test_validate_does_not_save_repairs(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    _write_rules(
        path, [{"name": "x", "conditions": [{"type": "age", "operator": "in", "value": 3}]}]
    )
    before = path.read_text(encoding="utf-8")

    report = RuleRepository(path).validate()

    assert report.issues[0].repaired
    assert path.read_text(encoding="utf-8") == before


def test_malformed_yaml_raises_store_error(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text("rules: [unterminated", encoding="utf-8")

    with pytest.raises(RuleStoreError):
        RuleRepository(path).load()


def test_crud_operations(tmp_path: Path) -> None:
    repository = RuleRepository(tmp_path / "rules.yaml")
    repository.save([])

    added = repository.add(
        Rule(
            id="abc123",
            name="Docs",
            conditions=[Condition(type="extension", operator="in", value=[".pdf"])],
        )
    )
    assert repository.get("abc") == added

    updated = repository.update("abc123", name="Documents", priority=4)
    assert updated.name == "Documents"
    assert updated.priority == 4
    assert updated.updated_at >= added.updated_at

    toggled = repository.toggle("abc123")
    assert toggled.enabled is False
    assert repository.enabled_rules() == []

    removed = repository.delete("abc123")
    assert removed.name == "Documents"
    assert repository.load() == []


def test_unknown_or_ambiguous_ids_raise(tmp_path: Path) -> None:
    repository = RuleRepository(tmp_path / "rules.yaml")
    repository.save([Rule(id="aa1", name="one"), Rule(id="aa2", name="two")])

    with pytest.raises(RuleNotFoundError):
        repository.get("zzz")
    with pytest.raises(RuleNotFoundError):
        repository.get("aa")
    assert repository.get("aa2").name == "two"


def test_invalid_update_raises_store_error(tmp_path: Path) -> None:
    repository = RuleRepository(tmp_path / "rules.yaml")
    repository.save([Rule(id="r1", name="one")])

    with pytest.raises(RuleStoreError):
        repository.update("r1", scope="everywhere")


def test_reorder_assigns_priorities_and_drops_unlisted(tmp_path: Path) -> None:
    repository = RuleRepository(tmp_path / "rules.yaml")
    repository.save(
        [Rule(id="a", name="A"), Rule(id="b", name="B"), Rule(id="c", name="C")]
    )

    reordered = repository.reorder(["c", "a"])

    assert [(rule.id, rule.priority) for rule in reordered] == [("c", 0), ("a", 1)]
    assert [rule.id for rule in repository.load()] == ["c", "a"]


def test_enabled_rules_filters_scope_and_sorts(tmp_path: Path) -> None:
    repository = RuleRepository(tmp_path / "rules.yaml")
    repository.save(
        [
            Rule(id="late", name="Late", priority=9),
            Rule(id="drive", name="Drive", scope="drive", priority=0),
            Rule(id="early", name="Early", scope="local", priority=1),
            Rule(id="off", name="Off", enabled=False),
        ]
    )

    assert [rule.id for rule in repository.enabled_rules("local")] == ["early", "late"]
    assert [rule.id for rule in repository.enabled_rules()] == ["drive", "early", "late"]
