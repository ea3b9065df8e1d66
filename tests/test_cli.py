"""CLI integration tests for preview, apply, suggest, and history."""

from __future__ import annotations

import json
import os
from pathlib import Path

from click.testing import CliRunner

from filetidy.cli import cli
from filetidy.organization import HistoryRepository
from filetidy.rules import Action, ActionParams, Condition, Rule, RuleRepository


def _env_with_home(tmp_path: Path) -> dict[str, str]:
    """Return environment variables pointing HOME to a temp directory.

    Args:
        tmp_path: Temporary directory provided by pytest.

    Returns:
        dict[str, str]: Environment mapping with HOME set.
    """
    env = {key: value for key, value in os.environ.items() if not key.startswith("FILETIDY__")}
    env["HOME"] = str(tmp_path / "home")
    return env


def _inbox(tmp_path: Path) -> Path:
    root = tmp_path / "inbox"
    root.mkdir()
    for name in ("a.pdf", "b.jpg", "c.docx"):
        (root / name).write_text(name, encoding="utf-8")
    return root


def _rules_file(tmp_path: Path, *, enabled: bool = True) -> Path:
    path = tmp_path / "rules.yaml"
    RuleRepository(path).save(
        [
            Rule(
                id="docs",
                name="Documents",
                conditions=[Condition(type="category", operator="equals", value="documents")],
                actions=[Action(type="move", params=ActionParams(target_folder="Documents"))],
                enabled=enabled,
            )
        ]
    )
    return path


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "filetidy organizes folders" in result.output
    for command in ("preview", "apply", "suggest", "history", "rules", "config"):
        assert command in result.output


def test_preview_json_lists_proposed_changes(tmp_path: Path) -> None:
    root = _inbox(tmp_path)
    rules_path = _rules_file(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["preview", str(root), "--rules", str(rules_path), "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    resolved = root.resolve()
    assert payload["context"] == {"root": str(resolved), "scope": "local"}
    assert [change["proposed_path"] for change in payload["changes"]] == [
        f"{resolved}/Documents/a.pdf",
        f"{resolved}/Documents/c.docx",
    ]
    assert payload["changes"][0]["matched_rule_id"] == "docs"
    assert payload["changes"][0]["status"] == "pending"
    assert payload["unmatched"] == [f"{resolved}/b.jpg"]
    assert payload["counts"] == {"files": 3, "changes": 2, "unmatched": 1, "rules": 1}
    assert (root / "a.pdf").exists()


def test_preview_honours_base_folder(tmp_path: Path) -> None:
    root = _inbox(tmp_path)
    rules_path = _rules_file(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["preview", str(root), "--rules", str(rules_path), "--base-folder", "/srv", "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["changes"][0]["proposed_path"] == "/srv/Documents/a.pdf"


def test_preview_warns_without_enabled_rules(tmp_path: Path) -> None:
    root = _inbox(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["preview", str(root)], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    assert "No enabled rules" in result.output
    assert "changes=0" in result.output
    assert (tmp_path / "home" / ".filetidy" / "rules.yaml").exists()


def test_preview_rejects_json_with_quiet(tmp_path: Path) -> None:
    root = _inbox(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli, ["preview", str(root), "--json", "--quiet"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code != 0
    assert "--json cannot be combined with --quiet" in result.output


def test_apply_moves_files_and_records_history(tmp_path: Path) -> None:
    root = _inbox(tmp_path)
    rules_path = _rules_file(tmp_path)
    env = _env_with_home(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["apply", str(root), "--rules", str(rules_path), "--yes"], env=env)

    assert result.exit_code == 0, result.output
    assert "succeeded=2" in result.output
    assert (root / "Documents" / "a.pdf").exists()
    assert (root / "Documents" / "c.docx").exists()
    assert (root / "b.jpg").exists()
    assert not (root / "a.pdf").exists()

    entries = HistoryRepository(tmp_path / "home" / ".filetidy").read()
    assert [entry.status for entry in entries] == ["success", "success"]
    assert {entry.rule_id for entry in entries} == {"docs"}

    history = runner.invoke(cli, ["history", "--json"], env=env)
    assert history.exit_code == 0, history.output
    payload = json.loads(history.stdout)
    assert [entry["operation"] for entry in payload["history"]] == ["move", "move"]

    limited = runner.invoke(cli, ["history", "--limit", "1"], env=env)
    assert limited.exit_code == 0, limited.output
    assert "MOVE success" in limited.output
    assert "a.pdf" not in limited.output


def test_apply_can_be_declined(tmp_path: Path) -> None:
    root = _inbox(tmp_path)
    rules_path = _rules_file(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["apply", str(root), "--rules", str(rules_path)],
        env=_env_with_home(tmp_path),
        input="n\n",
    )

    assert result.exit_code == 0, result.output
    assert "Aborted" in result.output
    assert (root / "a.pdf").exists()
    assert not (root / "Documents").exists()


def test_apply_json_requires_yes(tmp_path: Path) -> None:
    root = _inbox(tmp_path)
    rules_path = _rules_file(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["apply", str(root), "--rules", str(rules_path), "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["error"]["code"] == "usage_error"
    assert (root / "a.pdf").exists()


def test_apply_json_reports_counts(tmp_path: Path) -> None:
    root = _inbox(tmp_path)
    rules_path = _rules_file(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["apply", str(root), "--rules", str(rules_path), "--json", "--yes"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["counts"] == {"succeeded": 2, "failed": 0, "skipped": 0}
    assert all(change["status"] == "success" for change in payload["changes"])


def test_apply_with_disabled_rules_has_nothing_to_do(tmp_path: Path) -> None:
    root = _inbox(tmp_path)
    rules_path = _rules_file(tmp_path, enabled=False)
    runner = CliRunner()

    result = runner.invoke(
        cli, ["apply", str(root), "--rules", str(rules_path), "--yes"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0, result.output
    assert "Nothing to apply" in result.output


def test_history_is_empty_initially(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["history"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    assert "No operations recorded yet" in result.output


def test_suggest_json_describes_heuristic_changes(tmp_path: Path) -> None:
    root = tmp_path / "inbox"
    root.mkdir()
    (root / "invoice_march.pdf").write_text("invoice", encoding="utf-8")
    (root / "zzz.pdf").write_text("zzz", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(
        cli, ["suggest", str(root), "--mode", "quick", "--json"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    resolved = root.resolve()
    assert payload["context"]["mode"] == "quick"
    assert payload["counts"] == {"files": 2, "changes": 2}
    paths = [change["proposed_path"] for change in payload["changes"]]
    assert paths == [
        f"{resolved}/Documents/Finance/Invoices/invoice_march.pdf",
        f"{resolved}/Documents/Organized/zzz.pdf",
    ]
    assert {change["matched_rule_id"] for change in payload["changes"]} == {"ai-suggestion"}


def test_suggest_apply_moves_files(tmp_path: Path) -> None:
    root = tmp_path / "inbox"
    root.mkdir()
    (root / "zzz (2).pdf").write_text("zzz", encoding="utf-8")
    env = _env_with_home(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["suggest", str(root), "--renames", "--apply", "--yes", "--style", "flat"],
        env=env,
    )

    assert result.exit_code == 0, result.output
    assert "succeeded=1" in result.output
    assert (root / "zzz.pdf").exists()
    assert not (root / "zzz (2).pdf").exists()
    entries = HistoryRepository(tmp_path / "home" / ".filetidy").read()
    assert entries[0].operation == "rename"
    assert entries[0].rule_id == "ai-suggestion"


def _mixed_inbox(tmp_path: Path) -> Path:
    root = tmp_path / "inbox"
    root.mkdir()
    for index in range(5):
        (root / f"file{index}.pdf").write_text("pdf", encoding="utf-8")
    (root / "mystery.xyz").write_text("?", encoding="utf-8")
    return root


def test_suggest_structure_json_places_files_into_hierarchy(tmp_path: Path) -> None:
    root = _mixed_inbox(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli, ["suggest", str(root), "--structure", "--json"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    resolved = root.resolve()
    assert payload["context"]["mode"] == "structure"
    assert payload["counts"] == {"files": 6, "changes": 6}
    assert payload["analysis"]["categories"] == {"Documents": 5, "Other": 1}
    assert [folder["name"] for folder in payload["structure"]] == ["Documents", "_Unsorted"]
    assert [folder["name"] for folder in payload["structure"][0]["subfolders"]] == [
        "PDFs",
        "Office",
        "Text",
    ]
    by_name = {Path(change["current_path"]).name: change for change in payload["changes"]}
    assert by_name["file0.pdf"]["proposed_path"] == f"{resolved}/Documents/file0.pdf"
    assert by_name["file0.pdf"]["matched_rule_id"] == "structure-Documents"
    assert by_name["mystery.xyz"]["proposed_path"] == f"{resolved}/_Unsorted/mystery.xyz"


def test_suggest_structure_respects_max_depth(tmp_path: Path) -> None:
    root = _mixed_inbox(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["suggest", str(root), "--structure", "--max-depth", "1", "--json"],
        env=_env_with_home(tmp_path),
    )
    text = runner.invoke(cli, ["suggest", str(root), "--structure"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["structure"][0]["subfolders"] == []
    assert text.exit_code == 0, text.output
    assert "_Unsorted" in text.output
    assert "changes=6" in text.output


def test_local_preview_ignores_drive_only_rules(tmp_path: Path) -> None:
    root = _inbox(tmp_path)
    rules_path = tmp_path / "rules.yaml"
    RuleRepository(rules_path).save(
        [
            Rule(
                id="drive-docs",
                name="Drive documents",
                conditions=[Condition(type="category", operator="equals", value="documents")],
                actions=[Action(type="move", params=ActionParams(target_folder="Drive"))],
                scope="drive",
            )
        ]
    )
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["preview", str(root), "--rules", str(rules_path), "--json"], env=env
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["context"]["scope"] == "local"
    assert payload["changes"] == []
    assert payload["counts"]["rules"] == 0

    rejected = runner.invoke(cli, ["preview", str(root), "--scope", "drive"], env=env)
    assert rejected.exit_code != 0
    assert "No such option" in rejected.output
