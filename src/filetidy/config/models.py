"""Configuration models describing filetidy settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class FiletidyBaseModel(BaseModel):
    """Shared configuration for settings models."""

    model_config = ConfigDict(extra="forbid")


class ScanOptions(FiletidyBaseModel):
    """Folder scanning behavior.

    Attributes:
        include_subdirectories: Whether to descend into subfolders.
        max_depth: Deepest subfolder level scanned (0 = top level only).
        include_hidden: Whether dot-files and dot-folders are listed.
        follow_symlinks: Whether symbolic links are followed.
    """

    include_subdirectories: bool = True
    max_depth: int = Field(default=10, ge=0)
    include_hidden: bool = True
    follow_symlinks: bool = False


class OrganizationOptions(FiletidyBaseModel):
    """Settings used when previewing and applying rule changes.

    Attributes:
        base_folder: Folder relative rule targets resolve against; the scanned
            folder is used when unset.
        stop_at_first_match: Passed through to the rule engine.
        create_missing_folders: Whether the executor may create destination folders.
    """

    base_folder: Optional[str] = None
    stop_at_first_match: bool = True
    create_missing_folders: bool = True


class SuggestionOptions(FiletidyBaseModel):
    """Heuristic suggestion settings.

    Attributes:
        mode: ``quick`` for pattern/category moves, ``smart`` to add duplicate,
            rename, and age analysis.
        organization_style: Folder layout used for category fallbacks.
        old_threshold_days: Age after which suggestions are annotated as old.
    """

    mode: Literal["quick", "smart"] = "smart"
    organization_style: Literal["by-category", "by-date", "by-type", "flat"] = "by-category"
    old_threshold_days: int = 90


class RuleStoreSettings(FiletidyBaseModel):
    """Location of the persisted rule set."""

    path: str = "~/.filetidy/rules.yaml"


class LoggingSettings(FiletidyBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(FiletidyBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
        history_limit: Default number of history entries to display.
    """

    quiet_default: bool = False
    summary_default: bool = False
    history_limit: int = 20


class FiletidyConfig(FiletidyBaseModel):
    """Top-level configuration struct for filetidy."""

    scan: ScanOptions = Field(default_factory=ScanOptions)
    organization: OrganizationOptions = Field(default_factory=OrganizationOptions)
    suggestions: SuggestionOptions = Field(default_factory=SuggestionOptions)
    rules: RuleStoreSettings = Field(default_factory=RuleStoreSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "CLIOptions",
    "FiletidyBaseModel",
    "FiletidyConfig",
    "LoggingSettings",
    "OrganizationOptions",
    "RuleStoreSettings",
    "ScanOptions",
    "SuggestionOptions",
]
