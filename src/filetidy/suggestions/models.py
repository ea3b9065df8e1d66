"""Suggestion data models."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

SuggestionMode = Literal["quick", "smart"]
OrganizationStyle = Literal["by-category", "by-date", "by-type", "flat"]
SuggestionSource = Literal["pattern", "heuristic"]


class Suggestion(BaseModel):
    """Proposed destination for a single file.

    Attributes:
        file_id: Identifier of the file the suggestion is for.
        original_path: Path of the file when the suggestion was made.
        proposed_path: Suggested full path including the file name.
        reason: Human-readable explanation.
        confidence: Score between 0 and 1.
        category: Category or top-level folder the file was assigned to.
        selected: Whether the suggestion should be executed.
        source: Which heuristic produced the suggestion.
        is_duplicate: Whether the file duplicates another listed file.
        duplicate_of_id: File kept from the duplicate group.
    """

    file_id: str
    original_path: str
    proposed_path: str
    reason: str
    confidence: float = Field(ge=0.0, le=1.0)
    category: str
    selected: bool = True
    source: SuggestionSource = "heuristic"
    is_duplicate: bool = False
    duplicate_of_id: Optional[str] = None


class RenameSuggestion(BaseModel):
    """Cleaner name proposed for a messy file name."""

    file_id: str
    current_name: str
    suggested_name: str
    reason: str
    pattern: str


class DuplicateGroup(BaseModel):
    """Files sharing a size and a normalized name; the oldest is kept."""

    group_id: str
    file_ids: List[str]
    suggested_keep_id: str
    reason: str


class SuggestionBatch(BaseModel):
    """Everything produced by one suggestion run.

    ``cancelled`` is set when the run was stopped before every batch of files
    was analyzed; the suggestions cover the analyzed files only.
    """

    mode: SuggestionMode = "smart"
    suggestions: List[Suggestion] = Field(default_factory=list)
    duplicates: List[DuplicateGroup] = Field(default_factory=list)
    renames: List[RenameSuggestion] = Field(default_factory=list)
    files_processed: int = 0
    processing_time_ms: float = 0.0
    cancelled: bool = False


class FolderSummary(BaseModel):
    """Compact description of one scanned folder.

    Attributes:
        path: Folder path.
        name: Final path component.
        file_count: Number of files directly inside the folder.
        total_size: Combined size of those files in bytes.
        categories: File count per structure category.
        sample_files: Up to five file names, in scan order.
        subfolders: Names of scanned folders directly below this one.
    """

    path: str
    name: str
    file_count: int = 0
    total_size: int = 0
    categories: Dict[str, int] = Field(default_factory=dict)
    sample_files: List[str] = Field(default_factory=list)
    subfolders: List[str] = Field(default_factory=list)


class FolderAnalysis(BaseModel):
    """Aggregate statistics across every scanned folder."""

    total_files: int = 0
    total_size: int = 0
    categories: Dict[str, int] = Field(default_factory=dict)
    oldest: Optional[datetime] = None
    newest: Optional[datetime] = None
    purposes: List[str] = Field(default_factory=list)
    issues: List[str] = Field(default_factory=list)


class SuggestedFolder(BaseModel):
    """Node of a proposed folder hierarchy.

    Attributes:
        name: Folder name.
        purpose: What belongs in the folder.
        file_patterns: Glob-like hints (``*.pdf``, ``Screenshot*``) used when
            assigning files.
        estimated_files: Expected number of files.
        subfolders: Nested folders.
    """

    name: str
    purpose: str = ""
    file_patterns: List[str] = Field(default_factory=list)
    estimated_files: int = 0
    subfolders: List[SuggestedFolder] = Field(default_factory=list)


__all__ = [
    "DuplicateGroup",
    "FolderAnalysis",
    "FolderSummary",
    "OrganizationStyle",
    "RenameSuggestion",
    "Suggestion",
    "SuggestionBatch",
    "SuggestionMode",
    "SuggestedFolder",
    "SuggestionSource",
]
