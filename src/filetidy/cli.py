"""Command line interface for filetidy."""

from __future__ import annotations

import difflib
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from filetidy.config import ConfigError, ConfigManager, FiletidyConfig, resolve_with_precedence
from filetidy.config.resolver import assign_nested
from filetidy.ingestion import FolderScanner, ScanError
from filetidy.organization import (
    ApplyReport,
    ChangeExecutor,
    HistoryError,
    HistoryRepository,
    LocalFileMover,
    OperationLogEntry,
)
from filetidy.rules import (
    BatchEvaluationResult,
    EvaluationOptions,
    FileRecord,
    ProposedChange,
    Rule,
    RuleEngine,
    RuleRepository,
    RuleStoreError,
    validate_rule_data,
)
from filetidy.suggestions import (
    HeuristicSuggester,
    SuggestedFolder,
    SuggestionBatch,
    apply_structure_to_files,
    create_compact_summary,
    generate_heuristic_structure,
    propose_changes,
)

console = Console()

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOCAL_SCOPE = "local"


# ---- #  Output helpers  # ---- #


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """
    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """
    if quiet and mode != "error":
        return

    important_modes = {"summary", "warning", "error"}
    if summary_only and mode not in important_modes:
        return

    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands.

    Args:
        command: Command name to include in the summary.
        root: Target root path relevant to the command.
        metrics: Ordered mapping of metric names to values.

    Returns:
        str: Rich-formatted summary string.
    """
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {escape(str(root))}: {parts}.[/green]"


def _resolve_output_modes(
    ctx: click.Context,
    config: FiletidyConfig,
    *,
    json_output: bool,
    quiet: bool,
    summary_mode: bool,
) -> tuple[bool, bool]:
    """Combine output flags with configured defaults.

    Returns:
        tuple[bool, bool]: Effective ``(quiet, summary_only)`` flags.

    Raises:
        click.ClickException: If the combination of modes is contradictory.
    """
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _configure_logging(level: str) -> None:
    """Route log records to stderr through rich at ``level``.

    Raises:
        ConfigError: If ``level`` is not a logging level name.
    """
    normalized = level.upper()
    if normalized not in LOG_LEVELS:
        raise ConfigError(f"Unknown logging level: {level}")
    logging.basicConfig(
        level=normalized,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(ctx: click.Context) -> tuple[ConfigManager, FiletidyConfig]:
    """Load the effective configuration and configure logging from it."""
    manager = ConfigManager()
    config = manager.load()
    override = (ctx.find_root().obj or {}).get("log_level")
    _configure_logging(override or config.logging.level)
    return manager, config


def _rules_repository(config: FiletidyConfig, rules_file: str | None = None) -> RuleRepository:
    return RuleRepository(Path(rules_file) if rules_file else Path(config.rules.path))


def _change_payload(change: ProposedChange) -> dict[str, Any]:
    payload = change.model_dump(mode="json", exclude={"file"})
    payload["file_id"] = change.file.id
    payload["source"] = change.file.source
    return payload


def _changes_table(title: str, changes: Sequence[ProposedChange], *, show_status: bool) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("File", overflow="fold")
    table.add_column("Proposed path", overflow="fold")
    table.add_column("Rule", overflow="fold")
    if show_status:
        table.add_column("Status")
    for change in changes:
        row = [
            escape(change.current_path),
            escape(change.proposed_path),
            escape(change.matched_rule),
        ]
        if show_status:
            status: str = change.status
            if status == "error" and change.error_message:
                status = f"error: {change.error_message}"
            row.append(escape(status))
        table.add_row(*row)
    return table


def _structure_tree(root: str, folders: Sequence[SuggestedFolder]) -> Tree:
    tree = Tree(f"[bold]{escape(root)}[/bold]")

    def _add(node: Tree, children: Sequence[SuggestedFolder]) -> None:
        for folder in children:
            label = f"{escape(folder.name)} [dim]~{folder.estimated_files} files[/dim]"
            if folder.purpose:
                label = f"{label} [dim]({escape(folder.purpose)})[/dim]"
            _add(node.add(label), folder.subfolders)

    _add(tree, folders)
    return tree


def _format_history_entry(entry: OperationLogEntry) -> str:
    error_suffix = f" ({entry.error})" if entry.error else ""
    return (
        f"[{entry.timestamp.isoformat()}] {entry.operation.upper()} {entry.status} "
        f"{entry.source} -> {entry.destination} via {entry.rule_name}{error_suffix}"
    )


# ---- #  Workflow helpers  # ---- #


def _scan(
    config: FiletidyConfig,
    root: Path,
    recursive: Optional[bool],
) -> list[FileRecord]:
    include_subdirectories = (
        config.scan.include_subdirectories if recursive is None else recursive
    )
    scanner = FolderScanner(
        include_subdirectories=include_subdirectories,
        max_depth=config.scan.max_depth,
        include_hidden=config.scan.include_hidden,
        follow_symlinks=config.scan.follow_symlinks,
    )
    return scanner.scan(root)


def _run_preview(
    config: FiletidyConfig,
    root: Path,
    *,
    base_folder: Optional[str],
    recursive: Optional[bool],
    rules_file: Optional[str],
) -> tuple[list[FileRecord], BatchEvaluationResult]:
    files = _scan(config, root, recursive)
    rules = _rules_repository(config, rules_file).enabled_rules(LOCAL_SCOPE)
    target_base = base_folder or config.organization.base_folder or str(root)
    options = EvaluationOptions(
        scope=LOCAL_SCOPE,
        base_folder=str(Path(target_base).expanduser()),
        stop_at_first_match=config.organization.stop_at_first_match,
    )
    result = RuleEngine(rules).preview(files, options)
    return files, result


def _execute_changes(
    manager: ConfigManager,
    config: FiletidyConfig,
    changes: Iterable[ProposedChange],
) -> ApplyReport:
    mover = LocalFileMover(create_missing_folders=config.organization.create_missing_folders)
    report = ChangeExecutor(mover).apply(changes)
    HistoryRepository(manager.state_dir).append(report.entries)
    return report


def _report_payload(report: ApplyReport) -> dict[str, Any]:
    return {
        "changes": [_change_payload(change) for change in report.changes],
        "counts": {
            "succeeded": report.succeeded,
            "failed": report.failed,
            "skipped": report.skipped,
        },
    }


# ---- #  Commands  # ---- #


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="filetidy")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Override the configured logging level.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """filetidy organizes folders with user-defined rules and heuristics."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option("--base-folder", type=str, help="Folder relative rule targets resolve against.")
@click.option(
    "--recursive/--no-recursive",
    default=None,
    help="Include subdirectories (defaults to the scan configuration).",
)
@click.option(
    "--rules",
    "rules_file",
    type=click.Path(exists=True, dir_okay=False, path_type=str),
    help="Rules file to use instead of the configured one.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing proposed changes.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def preview(
    ctx: click.Context,
    path: str,
    base_folder: str | None,
    recursive: bool | None,
    rules_file: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Show the changes enabled rules would make to files under PATH.

    Args:
        ctx: Click context used for parameter source inspection.
        path: Folder to scan.
        base_folder: Base folder override for relative targets.
        recursive: Subdirectory scanning override.
        rules_file: Alternative rules file.
        json_output: If True, emit JSON instead of tables.
        summary_mode: When True, limit output to summary lines.
        quiet: When True, suppress non-error output.
    """
    try:
        _, config = _load_config(ctx)
        quiet_enabled, summary_only = _resolve_output_modes(
            ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        root = Path(path).expanduser().resolve()
        _, result = _run_preview(
            config,
            root,
            base_folder=base_folder,
            recursive=recursive,
            rules_file=rules_file,
        )
    except (ConfigError, RuleStoreError) as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return
    except ScanError as exc:
        _handle_cli_error(str(exc), code="scan_error", json_output=json_output, original=exc)
        return

    counts = {
        "files": result.total_files,
        "changes": result.matched_files,
        "unmatched": len(result.unmatched),
        "rules": result.stats.rules_checked,
    }
    if json_output:
        console.print_json(
            data={
                "context": {"root": str(root), "scope": LOCAL_SCOPE},
                "changes": [_change_payload(change) for change in result.changes],
                "unmatched": [record.path for record in result.unmatched],
                "counts": counts,
            }
        )
        return

    if result.changes:
        _emit_message(
            _changes_table("Proposed changes", result.changes, show_status=False),
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    elif result.stats.rules_checked == 0:
        _emit_message(
            "[yellow]No enabled rules; enable one with `filetidy rules enable ID`.[/yellow]",
            mode="warning",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    _emit_message(
        _format_summary_line("Preview", root, counts),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option("--base-folder", type=str, help="Folder relative rule targets resolve against.")
@click.option(
    "--recursive/--no-recursive",
    default=None,
    help="Include subdirectories (defaults to the scan configuration).",
)
@click.option(
    "--rules",
    "rules_file",
    type=click.Path(exists=True, dir_okay=False, path_type=str),
    help="Rules file to use instead of the configured one.",
)
@click.option("--yes", "-y", is_flag=True, help="Apply without asking for confirmation.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing applied changes.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def apply(
    ctx: click.Context,
    path: str,
    base_folder: str | None,
    recursive: bool | None,
    rules_file: str | None,
    yes: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Move and rename files under PATH according to enabled rules.

    Args:
        ctx: Click context used for parameter source inspection.
        path: Folder to organize.
        base_folder: Base folder override for relative targets.
        recursive: Subdirectory scanning override.
        rules_file: Alternative rules file.
        yes: Skip the confirmation prompt.
        json_output: If True, emit JSON instead of tables.
        summary_mode: When True, limit output to summary lines.
        quiet: When True, suppress non-error output.
    """
    try:
        manager, config = _load_config(ctx)
        quiet_enabled, summary_only = _resolve_output_modes(
            ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        if json_output and not yes:
            raise click.ClickException("--json requires --yes.")
        root = Path(path).expanduser().resolve()
        _, result = _run_preview(
            config,
            root,
            base_folder=base_folder,
            recursive=recursive,
            rules_file=rules_file,
        )
    except (ConfigError, RuleStoreError) as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return
    except ScanError as exc:
        _handle_cli_error(str(exc), code="scan_error", json_output=json_output, original=exc)
        return
    except click.ClickException as exc:
        _handle_cli_error(exc.message, code="usage_error", json_output=json_output, original=exc)
        return

    if not result.changes:
        if json_output:
            console.print_json(data=_report_payload(ApplyReport()))
            return
        _emit_message(
            "[yellow]Nothing to apply.[/yellow]",
            mode="warning",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
        return

    if not json_output:
        _emit_message(
            _changes_table("Proposed changes", result.changes, show_status=False),
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    if not yes and not click.confirm(f"Apply {len(result.changes)} change(s)?", default=False):
        console.print("[yellow]Aborted; no files were changed.[/yellow]")
        return

    try:
        report = _execute_changes(manager, config, result.changes)
    except HistoryError as exc:
        _handle_cli_error(str(exc), code="history_error", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data=_report_payload(report))
        return

    failures = [change for change in report.changes if change.status == "error"]
    if failures:
        _emit_message(
            _changes_table("Failed changes", failures, show_status=True),
            mode="error",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    _emit_message(
        _format_summary_line(
            "Apply",
            root,
            {"succeeded": report.succeeded, "failed": report.failed, "skipped": report.skipped},
        ),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option("--mode", type=click.Choice(["quick", "smart"]), help="Suggestion depth.")
@click.option(
    "--style",
    type=click.Choice(["by-category", "by-date", "by-type", "flat"]),
    help="Folder layout for category-based suggestions.",
)
@click.option("--base-folder", type=str, help="Folder suggestions are placed under.")
@click.option(
    "--recursive/--no-recursive",
    default=None,
    help="Include subdirectories (defaults to the scan configuration).",
)
@click.option("--renames", "include_renames", is_flag=True, help="Apply suggested name cleanups.")
@click.option(
    "--structure",
    "structure_mode",
    is_flag=True,
    help="Propose a folder hierarchy and place every file into it.",
)
@click.option(
    "--max-depth",
    "structure_depth",
    type=click.IntRange(0, 5),
    default=3,
    show_default=True,
    help="Deepest folder level proposed by --structure.",
)
@click.option("--apply", "apply_changes", is_flag=True, help="Execute the suggestions.")
@click.option("--yes", "-y", is_flag=True, help="Apply without asking for confirmation.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing suggestions.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def suggest(
    ctx: click.Context,
    path: str,
    mode: str | None,
    style: str | None,
    base_folder: str | None,
    recursive: bool | None,
    include_renames: bool,
    structure_mode: bool,
    structure_depth: int,
    apply_changes: bool,
    yes: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Suggest an organization for PATH without user-defined rules.

    Args:
        ctx: Click context used for parameter source inspection.
        path: Folder to analyze.
        mode: ``quick`` or ``smart`` override.
        style: Organization style override.
        base_folder: Folder suggestions are placed under.
        recursive: Subdirectory scanning override.
        include_renames: Whether suggested renames are part of the changes.
        structure_mode: Place files into a proposed folder hierarchy instead.
        structure_depth: Deepest level of the proposed hierarchy.
        apply_changes: Execute the suggestions after showing them.
        yes: Skip the confirmation prompt.
        json_output: If True, emit JSON instead of tables.
        summary_mode: When True, limit output to summary lines.
        quiet: When True, suppress non-error output.
    """
    try:
        manager, config = _load_config(ctx)
        quiet_enabled, summary_only = _resolve_output_modes(
            ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        if json_output and apply_changes and not yes:
            raise click.ClickException("--json --apply requires --yes.")
        root = Path(path).expanduser().resolve()
        files = _scan(config, root, recursive)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return
    except ScanError as exc:
        _handle_cli_error(str(exc), code="scan_error", json_output=json_output, original=exc)
        return
    except click.ClickException as exc:
        _handle_cli_error(exc.message, code="usage_error", json_output=json_output, original=exc)
        return

    suggester = HeuristicSuggester(
        style=style or config.suggestions.organization_style,  # type: ignore[arg-type]
        old_threshold_days=config.suggestions.old_threshold_days,
    )
    target_base = str(
        Path(base_folder or config.organization.base_folder or str(root)).expanduser()
    )
    structure: list[SuggestedFolder] = []
    if structure_mode:
        _, analysis = create_compact_summary(files)
        structure = generate_heuristic_structure(analysis, structure_depth)
        changes = apply_structure_to_files(files, structure, target_base)
        batch = SuggestionBatch(files_processed=analysis.total_files)
    else:
        batch, changes = propose_changes(
            suggester,
            files,
            target_base,
            mode or config.suggestions.mode,  # type: ignore[arg-type]
            include_renames=include_renames,
        )

    if not apply_changes:
        if json_output:
            payload: dict[str, Any] = {
                "context": {
                    "root": str(root),
                    "mode": "structure" if structure_mode else batch.mode,
                },
                "changes": [_change_payload(change) for change in changes],
                "duplicates": [group.model_dump(mode="json") for group in batch.duplicates],
                "renames": [rename.model_dump(mode="json") for rename in batch.renames],
                "counts": {"files": batch.files_processed, "changes": len(changes)},
            }
            if structure_mode:
                payload["analysis"] = analysis.model_dump(mode="json")
                payload["structure"] = [folder.model_dump(mode="json") for folder in structure]
            console.print_json(data=payload)
            return
        if structure:
            _emit_message(
                _structure_tree(target_base, structure),
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        if changes:
            _emit_message(
                _changes_table("Suggested changes", changes, show_status=False),
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        if batch.duplicates:
            _emit_message(
                f"[yellow]{len(batch.duplicates)} duplicate group(s) detected.[/yellow]",
                mode="warning",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        _emit_message(
            _format_summary_line(
                "Suggest",
                root,
                {
                    "files": batch.files_processed,
                    "changes": len(changes),
                    "duplicates": len(batch.duplicates),
                    "renames": len(batch.renames),
                },
            ),
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
        return

    if not changes:
        if json_output:
            console.print_json(data=_report_payload(ApplyReport()))
        else:
            console.print("[yellow]Nothing to apply.[/yellow]")
        return

    if not json_output:
        _emit_message(
            _changes_table("Suggested changes", changes, show_status=False),
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    if not yes and not click.confirm(f"Apply {len(changes)} suggestion(s)?", default=False):
        console.print("[yellow]Aborted; no files were changed.[/yellow]")
        return

    try:
        report = _execute_changes(manager, config, changes)
    except HistoryError as exc:
        _handle_cli_error(str(exc), code="history_error", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data=_report_payload(report))
        return
    _emit_message(
        _format_summary_line(
            "Suggest",
            root,
            {"succeeded": report.succeeded, "failed": report.failed, "skipped": report.skipped},
        ),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.command()
@click.option("--limit", type=int, help="Number of recent entries to show.")
@click.option("--json", "json_output", is_flag=True, help="Emit history entries as JSON.")
@click.pass_context
def history(ctx: click.Context, limit: int | None, json_output: bool) -> None:
    """Show recently applied moves and renames."""
    try:
        manager, config = _load_config(ctx)
        entries = HistoryRepository(manager.state_dir).read(
            limit if limit is not None else config.cli.history_limit
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return
    except HistoryError as exc:
        _handle_cli_error(str(exc), code="history_error", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data={"history": [entry.model_dump(mode="json") for entry in entries]})
        return
    if not entries:
        console.print("[yellow]No operations recorded yet.[/yellow]")
        return
    for entry in entries:
        console.print(escape(_format_history_entry(entry)))


# ---- #  Rules  # ---- #


@cli.group()
def rules() -> None:
    """Inspect and manage stored organization rules."""


def _rules_table(items: Sequence[Rule]) -> Table:
    table = Table(title="Rules")
    table.add_column("Priority", justify="right")
    table.add_column("ID")
    table.add_column("Name", overflow="fold")
    table.add_column("Scope")
    table.add_column("Enabled")
    table.add_column("Conditions", overflow="fold")
    table.add_column("Actions", overflow="fold")
    for rule in items:
        conditions = ", ".join(
            f"{condition.type} {condition.operator} {condition.value}"
            for condition in rule.conditions
        )
        actions = ", ".join(action.type for action in rule.actions)
        table.add_row(
            str(rule.priority),
            rule.id[:8],
            escape(rule.name),
            rule.scope,
            "yes" if rule.enabled else "no",
            escape(conditions),
            escape(actions),
        )
    return table


@rules.command("list")
@click.option("--json", "json_output", is_flag=True, help="Emit rules as JSON.")
@click.pass_context
def rules_list(ctx: click.Context, json_output: bool) -> None:
    """List stored rules in evaluation order."""
    try:
        _, config = _load_config(ctx)
        stored = _rules_repository(config).load()
    except (ConfigError, RuleStoreError) as exc:
        _handle_cli_error(str(exc), code="rules_error", json_output=json_output, original=exc)
        return

    ordered = sorted(stored, key=lambda rule: rule.priority)
    if json_output:
        console.print_json(
            data={"rules": [rule.model_dump(mode="json", by_alias=True) for rule in ordered]}
        )
        return
    console.print(_rules_table(ordered))


@rules.command("show")
@click.argument("rule_id")
@click.pass_context
def rules_show(ctx: click.Context, rule_id: str) -> None:
    """Print the stored definition of RULE_ID."""
    try:
        _, config = _load_config(ctx)
        rule = _rules_repository(config).get(rule_id)
    except (ConfigError, RuleStoreError) as exc:
        raise click.ClickException(str(exc)) from exc

    text = yaml.safe_dump(rule.model_dump(mode="json", by_alias=True), sort_keys=False)
    console.print(Syntax(text, "yaml", word_wrap=True))


def _parse_rule_entries(text: str, source: str) -> list[Any]:
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML in {source}: {exc}") from exc
    if isinstance(raw, dict) and "rules" in raw:
        raw = raw["rules"]
    if isinstance(raw, dict):
        raw = [raw]
    if not isinstance(raw, list) or not raw:
        raise click.ClickException(f"{source} must contain a rule mapping or a list of rules.")
    return raw


def _validated_rules(entries: list[Any]) -> list[Rule]:
    report = validate_rule_data(entries)
    skipped = [issue for issue in report.issues if issue.outcome == "skipped"]
    if skipped:
        details = "; ".join(f"{issue.rule}: {issue.message}" for issue in skipped)
        raise click.ClickException(f"Invalid rule definition. {details}")
    for issue in report.issues:
        console.print(f"[yellow]{escape(issue.rule)}: {escape(issue.message)}[/yellow]")
    return report.rules


@rules.command("add")
@click.argument("rule_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def rules_add(ctx: click.Context, rule_file: Path) -> None:
    """Add the rule (or list of rules) defined in RULE_FILE.

    Rules without an explicit priority are evaluated after the existing ones.
    """
    try:
        _, config = _load_config(ctx)
        repository = _rules_repository(config)
        entries = _parse_rule_entries(rule_file.read_text(encoding="utf-8"), str(rule_file))
        new_rules = _validated_rules(entries)
        existing = repository.load()
        known_ids = {rule.id for rule in existing}
        for rule in new_rules:
            if rule.id in known_ids:
                raise click.ClickException(f"A rule with id {rule.id!r} already exists.")
            known_ids.add(rule.id)
        next_priority = max((rule.priority for rule in existing), default=-1) + 1
        for entry, rule in zip(entries, new_rules):
            if "priority" not in entry:
                rule = rule.model_copy(update={"priority": next_priority})
                next_priority += 1
            repository.add(rule)
            console.print(f"[green]Added rule {escape(rule.name)} ({rule.id[:8]}).[/green]")
    except (ConfigError, RuleStoreError) as exc:
        raise click.ClickException(str(exc)) from exc


@rules.command("edit")
@click.argument("rule_id")
@click.pass_context
def rules_edit(ctx: click.Context, rule_id: str) -> None:
    """Edit RULE_ID as YAML in an interactive editor session."""
    try:
        _, config = _load_config(ctx)
        repository = _rules_repository(config)
        rule = repository.get(rule_id)
    except (ConfigError, RuleStoreError) as exc:
        raise click.ClickException(str(exc)) from exc

    original = yaml.safe_dump(rule.model_dump(mode="json", by_alias=True), sort_keys=False)
    edited = click.edit(original, extension=".yaml")
    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return
    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    entries = _parse_rule_entries(edited, "Edited rule")
    if len(entries) != 1:
        raise click.ClickException("Edited content must define exactly one rule.")
    (candidate,) = _validated_rules(entries)
    changes = candidate.model_dump(exclude={"id", "created_at", "updated_at"})
    try:
        updated = repository.update(rule.id, **changes)
    except RuleStoreError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Updated rule {escape(updated.name)} ({updated.id[:8]}).[/green]")


@rules.command("validate")
@click.option("--fix", is_flag=True, help="Write repaired rules back to the rules file.")
@click.pass_context
def rules_validate(ctx: click.Context, fix: bool) -> None:
    """Check stored rules and report repairs that loading would apply."""
    try:
        _, config = _load_config(ctx)
        repository = _rules_repository(config)
        report = repository.validate()
        if fix and report.changed:
            repository.save(report.rules)
    except (ConfigError, RuleStoreError) as exc:
        raise click.ClickException(str(exc)) from exc

    if not report.issues:
        console.print(f"[green]{len(report.rules)} rule(s) valid.[/green]")
        return

    for issue in report.issues:
        console.print(
            f"[yellow]{escape(issue.rule)}: {escape(issue.message)} ({issue.outcome})[/yellow]"
        )
    if fix and report.changed:
        console.print(f"[green]Saved repaired rules to {escape(str(repository.path))}.[/green]")
    elif report.changed:
        console.print("[yellow]Run with --fix to save the repaired rules.[/yellow]")
    if report.unloadable:
        console.print(
            f"[yellow]{len(report.unloadable)} entry(ies) could not be loaded and are left "
            f"unchanged in {escape(str(repository.path))}.[/yellow]"
        )


def _set_enabled(ctx: click.Context, rule_id: str, enabled: bool) -> None:
    try:
        _, config = _load_config(ctx)
        rule = _rules_repository(config).update(rule_id, enabled=enabled)
    except (ConfigError, RuleStoreError) as exc:
        raise click.ClickException(str(exc)) from exc
    state = "Enabled" if enabled else "Disabled"
    console.print(f"[green]{state} rule {escape(rule.name)} ({rule.id[:8]}).[/green]")


@rules.command("enable")
@click.argument("rule_id")
@click.pass_context
def rules_enable(ctx: click.Context, rule_id: str) -> None:
    """Enable RULE_ID (a full id or a unique prefix)."""
    _set_enabled(ctx, rule_id, True)


@rules.command("disable")
@click.argument("rule_id")
@click.pass_context
def rules_disable(ctx: click.Context, rule_id: str) -> None:
    """Disable RULE_ID (a full id or a unique prefix)."""
    _set_enabled(ctx, rule_id, False)


@rules.command("toggle")
@click.argument("rule_id")
@click.pass_context
def rules_toggle(ctx: click.Context, rule_id: str) -> None:
    """Flip whether RULE_ID participates in evaluation."""
    try:
        _, config = _load_config(ctx)
        rule = _rules_repository(config).toggle(rule_id)
    except (ConfigError, RuleStoreError) as exc:
        raise click.ClickException(str(exc)) from exc
    state = "Enabled" if rule.enabled else "Disabled"
    console.print(f"[green]{state} rule {escape(rule.name)} ({rule.id[:8]}).[/green]")


@rules.command("remove")
@click.argument("rule_id")
@click.option("--yes", "-y", is_flag=True, help="Remove without asking for confirmation.")
@click.pass_context
def rules_remove(ctx: click.Context, rule_id: str, yes: bool) -> None:
    """Delete RULE_ID from the rules file."""
    try:
        _, config = _load_config(ctx)
        repository = _rules_repository(config)
        rule = repository.get(rule_id)
        if not yes and not click.confirm(f"Remove rule {rule.name!r}?", default=False):
            console.print("[yellow]Aborted; rules unchanged.[/yellow]")
            return
        repository.delete(rule.id)
    except (ConfigError, RuleStoreError) as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Removed rule {escape(rule.name)}.[/green]")


@rules.command("reorder")
@click.argument("rule_ids", nargs=-1, required=True)
@click.pass_context
def rules_reorder(ctx: click.Context, rule_ids: tuple[str, ...]) -> None:
    """Evaluate RULE_IDS first, in the given order.

    Rules that are not listed keep their relative order after the listed ones.
    """
    try:
        _, config = _load_config(ctx)
        repository = _rules_repository(config)
        stored = sorted(repository.load(), key=lambda rule: rule.priority)
        listed = [repository.get(rule_id).id for rule_id in rule_ids]
        if len(set(listed)) != len(listed):
            raise click.ClickException("Each rule may only be listed once.")
        remaining = [rule.id for rule in stored if rule.id not in listed]
        reordered = repository.reorder([*listed, *remaining])
    except (ConfigError, RuleStoreError) as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(_rules_table(reordered))


# ---- #  Configuration  # ---- #


@cli.group()
def config() -> None:
    """Manage filetidy configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Args:
        no_env: If True, ignore environment-derived overrides.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        before = manager.read_text().splitlines()
        file_data = manager.load_file_overrides()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'scan.max_depth'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=FiletidyConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = [
        line
        for line in difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        if "# Last updated:" not in line
    ]
    changed = [
        line for line in diff if line.startswith(("+", "-")) and not line.startswith(("+++", "---"))
    ]
    if not changed:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=FiletidyConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
