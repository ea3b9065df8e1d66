"""Folder structure analysis and structure-based suggestions.

The analysis condenses a scan into per-folder summaries, proposes a folder
hierarchy from the dominant file categories, and then assigns every file to
the best-scoring folder of that hierarchy. Assignments are emitted as
:class:`~filetidy.rules.models.ProposedChange` records so they flow through the
same preview and apply path as rule matches.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional, Sequence

from filetidy.rules.categories import get_file_category
from filetidy.rules.models import FileRecord, ProposedChange
from filetidy.rules.paths import basename, dirname, join
from filetidy.rules.timestamps import as_utc

from .models import FolderAnalysis, FolderSummary, SuggestedFolder

LOGGER = logging.getLogger(__name__)

STRUCTURE_CATEGORIES: Dict[str, tuple[str, ...]] = {
    "Documents": ("pdf", "doc", "docx", "txt", "rtf", "odt", "xls", "xlsx", "ppt", "pptx", "csv"),
    "Images": ("jpg", "jpeg", "png", "gif", "bmp", "svg", "webp", "ico", "tiff", "raw"),
    "Videos": ("mp4", "avi", "mkv", "mov", "wmv", "flv", "webm", "m4v"),
    "Audio": ("mp3", "wav", "flac", "aac", "ogg", "wma", "m4a"),
    "Archives": ("zip", "rar", "7z", "tar", "gz", "bz2"),
    "Code": ("js", "ts", "jsx", "tsx", "py", "java", "cpp", "c", "h", "css", "html", "json", "xml"),
    "Executables": ("exe", "msi", "dmg", "app", "deb", "rpm"),
    "Fonts": ("ttf", "otf", "woff", "woff2", "eot"),
    "Design": ("psd", "ai", "sketch", "fig", "xd", "indd"),
}
OTHER_CATEGORY = "Other"

CATEGORY_THRESHOLD = 5
ARCHIVE_AFTER_MONTHS = 6
MIXED_CONTENT_CATEGORIES = 3
MIN_MATCH_SCORE = 3

_NAME_PURPOSES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("download",), "Downloads"),
    (("document",), "Documents"),
    (("photo", "picture", "image"), "Photos"),
    (("video", "movie"), "Videos"),
    (("music", "audio"), "Music"),
    (("project",), "Projects"),
    (("backup",), "Backups"),
    (("archive",), "Archives"),
    (("work",), "Work"),
    (("personal",), "Personal"),
    (("desktop",), "Desktop"),
)

_CATEGORY_SUBFOLDERS: Dict[str, tuple[SuggestedFolder, ...]] = {
    "Documents": (
        SuggestedFolder(name="PDFs", purpose="PDF documents", file_patterns=["*.pdf"]),
        SuggestedFolder(
            name="Office",
            purpose="Word, Excel, PowerPoint",
            file_patterns=["*.docx", "*.xlsx", "*.pptx"],
        ),
        SuggestedFolder(name="Text", purpose="Plain text files", file_patterns=["*.txt", "*.md"]),
    ),
    "Images": (
        SuggestedFolder(name="Photos", purpose="Camera photos", file_patterns=["*.jpg", "*.jpeg"]),
        SuggestedFolder(
            name="Screenshots",
            purpose="Screen captures",
            file_patterns=["Screenshot*", "Screen Shot*"],
        ),
        SuggestedFolder(
            name="Graphics", purpose="Design files and icons", file_patterns=["*.png", "*.svg"]
        ),
    ),
    "Videos": (
        SuggestedFolder(
            name="Movies", purpose="Long-form videos", file_patterns=["*.mp4", "*.mkv"]
        ),
        SuggestedFolder(name="Clips", purpose="Short clips", file_patterns=["*.webm", "*.gif"]),
    ),
    "Audio": (
        SuggestedFolder(
            name="Music", purpose="Songs and albums", file_patterns=["*.mp3", "*.flac"]
        ),
        SuggestedFolder(
            name="Recordings", purpose="Voice recordings", file_patterns=["*.wav", "*.m4a"]
        ),
    ),
    "Code": (
        SuggestedFolder(
            name="Projects", purpose="Full project folders", file_patterns=["Project folders"]
        ),
        SuggestedFolder(
            name="Scripts", purpose="Standalone scripts", file_patterns=["*.py", "*.js", "*.sh"]
        ),
    ),
}

# Folder name fragments mapped to file-name keywords that suggest the folder.
_FOLDER_KEYWORDS: Dict[str, tuple[str, ...]] = {
    "assignments": ("assignment", "homework", "hw", "task"),
    "lab": ("lab", "practical", "experiment"),
    "programming": ("code", "program", "cpp", "python", "java", "js"),
    "documents": ("doc", "document", "report", "paper"),
    "presentations": ("ppt", "presentation", "slides"),
    "personal": ("personal", "private", "my"),
    "photos": ("photo", "picture", "image", "pic"),
    "videos": ("video", "movie", "clip"),
    "music": ("music", "song", "audio"),
    "mathematics": ("math", "maths", "calculus", "algebra"),
    "finance": ("invoice", "receipt", "bank", "tax", "statement"),
}

# Extensions typical for a folder, keyed by lower-cased folder name.
_FOLDER_EXTENSION_HINTS: Dict[str, tuple[str, ...]] = {
    "documents": ("pdf", "doc", "docx", "txt", "rtf", "odt", "xls", "xlsx", "ppt", "pptx"),
    "images": ("jpg", "jpeg", "png", "gif", "bmp", "svg", "webp", "psd"),
    "photos": ("jpg", "jpeg", "png", "raw", "heic", "heif"),
    "screenshots": ("png",),
    "videos": ("mp4", "avi", "mkv", "mov", "wmv", "flv", "webm"),
    "audio": ("mp3", "wav", "flac", "aac", "ogg", "m4a"),
    "music": ("mp3", "flac", "wav", "aac", "m4a"),
    "code": ("js", "ts", "py", "java", "cpp", "c", "h", "css", "html"),
    "archive": ("zip", "rar", "7z", "tar", "gz"),
    "presentations": ("ppt", "pptx", "key", "odp"),
    "pdfs": ("pdf",),
    "text": ("txt", "md", "rtf"),
    "notes": ("txt", "md", "doc", "docx", "pdf"),
}

_KEYWORD_SEPARATORS = re.compile(r"[&/\\-]")
_WORD_SEPARATORS = re.compile(r"[\s&\-/]+")


def structure_category(extension: str) -> str:
    """Return the structure category for an extension with or without its dot."""
    bare = extension.lower().lstrip(".")
    for category, extensions in STRUCTURE_CATEGORIES.items():
        if bare in extensions:
            return category
    return OTHER_CATEGORY


def detect_folder_purpose(name: str, categories: Dict[str, int]) -> Optional[str]:
    """Guess what a folder is for from its name, then from its dominant content."""
    lowered = name.lower()
    for fragments, purpose in _NAME_PURPOSES:
        if any(fragment in lowered for fragment in fragments):
            return purpose
    if categories:
        dominant, count = max(categories.items(), key=lambda item: item[1])
        if count > 10:
            return dominant
    return None


def create_compact_summary(
    files: Iterable[FileRecord],
) -> tuple[list[FolderSummary], FolderAnalysis]:
    """Summarize ``files`` per parent folder and across the whole scan.

    Args:
        files: Scanned records; directories are ignored.

    Returns:
        tuple[list[FolderSummary], FolderAnalysis]: One summary per folder in
        first-seen order, plus aggregate statistics and detected issues.
    """
    by_folder: Dict[str, list[FileRecord]] = {}
    for file in files:
        if file.is_directory:
            continue
        by_folder.setdefault(file.parent_path, []).append(file)

    analysis = FolderAnalysis()
    purposes: list[str] = []
    summaries: list[FolderSummary] = []
    for folder_path, folder_files in by_folder.items():
        categories: Dict[str, int] = {}
        for file in folder_files:
            category = structure_category(file.extension)
            categories[category] = categories.get(category, 0) + 1
            analysis.categories[category] = analysis.categories.get(category, 0) + 1
            analysis.total_size += file.size
            modified = as_utc(file.modified_time)
            if analysis.oldest is None or modified < analysis.oldest:
                analysis.oldest = modified
            if analysis.newest is None or modified > analysis.newest:
                analysis.newest = modified

        name = basename(folder_path)
        purpose = detect_folder_purpose(name, categories)
        if purpose and purpose not in purposes:
            purposes.append(purpose)
        if len(categories) > MIXED_CONTENT_CATEGORIES:
            analysis.issues.append(
                f'Mixed content in "{name}" ({len(categories)} different file types)'
            )

        summaries.append(
            FolderSummary(
                path=folder_path,
                name=name,
                file_count=len(folder_files),
                total_size=sum(file.size for file in folder_files),
                categories=categories,
                sample_files=[file.name for file in folder_files[:5]],
                subfolders=[
                    basename(other)
                    for other in by_folder
                    if other != folder_path and dirname(other) == folder_path
                ],
            )
        )

    analysis.total_files = sum(summary.file_count for summary in summaries)
    analysis.purposes = purposes
    if analysis.total_files > 100 and len(summaries) < 5:
        analysis.issues.append("Too many files in too few folders - needs better organization")
    return summaries, analysis


def format_size(size: int) -> str:
    """Render a byte count with one decimal, e.g. ``1.5 MB``."""
    if size <= 0:
        return "0 B"
    units = ("B", "KB", "MB", "GB")
    exponent = 0
    while size >= 1024 ** (exponent + 1) and exponent < len(units) - 1:
        exponent += 1
    value = round(size / 1024**exponent, 1)
    return f"{value:g} {units[exponent]}"


def structure_prompt_summary(
    summaries: Sequence[FolderSummary],
    analysis: FolderAnalysis,
    *,
    max_folders: int = 20,
) -> str:
    """Render a concise text overview of a scan for a language model prompt."""
    lines = [
        "FOLDER ANALYSIS SUMMARY",
        f"Total: {analysis.total_files} files, {format_size(analysis.total_size)}",
        "Categories: "
        + ", ".join(f"{name}:{count}" for name, count in analysis.categories.items()),
    ]
    if analysis.oldest and analysis.newest:
        lines.append(f"Date range: {analysis.oldest:%Y-%m-%d} - {analysis.newest:%Y-%m-%d}")
    if analysis.issues:
        lines.append(f"Issues: {'; '.join(analysis.issues)}")
    lines.append("")
    lines.append("FOLDER BREAKDOWN:")
    largest = sorted(summaries, key=lambda summary: summary.file_count, reverse=True)
    for summary in largest[:max_folders]:
        counts = ",".join(f"{name}:{count}" for name, count in summary.categories.items())
        lines.append(f"- {summary.name} ({summary.file_count} files): {counts}")
        if summary.sample_files:
            lines.append(f"  Samples: {', '.join(summary.sample_files[:3])}")
    return "\n".join(lines)


def generate_heuristic_structure(
    analysis: FolderAnalysis,
    max_depth: int = 3,
    *,
    now: Optional[datetime] = None,
) -> list[SuggestedFolder]:
    """Propose a folder hierarchy from category counts and file ages.

    Categories with at least ``CATEGORY_THRESHOLD`` files get a top-level
    folder, largest first. An ``Archive`` folder is added when the oldest file
    is more than six months old, and ``_Unsorted`` collects everything else.
    Subfolders are only proposed when ``max_depth`` is 2 or more.

    Args:
        analysis: Output of :func:`create_compact_summary`.
        max_depth: Maximum folder depth of the proposal.
        now: Reference time for the archive check.

    Returns:
        list[SuggestedFolder]: Proposed top-level folders.
    """
    folders: list[SuggestedFolder] = []
    frequent = sorted(
        (item for item in analysis.categories.items() if item[1] >= CATEGORY_THRESHOLD),
        key=lambda item: item[1],
        reverse=True,
    )
    for category, count in frequent:
        subfolders = _CATEGORY_SUBFOLDERS.get(category, ()) if max_depth >= 2 else ()
        folders.append(
            SuggestedFolder(
                name=category,
                purpose=f"All {category.lower()} files",
                file_patterns=[f"*.{ext}" for ext in STRUCTURE_CATEGORIES.get(category, ())],
                estimated_files=count,
                subfolders=[folder.model_copy(deep=True) for folder in subfolders],
            )
        )

    reference = as_utc(now or datetime.now(timezone.utc))
    if analysis.oldest is not None and max_depth >= 1:
        if as_utc(analysis.oldest) < _months_before(reference, ARCHIVE_AFTER_MONTHS):
            archive = SuggestedFolder(
                name="Archive",
                purpose="Store older files you don't need quick access to",
                file_patterns=["Files older than 6 months"],
                estimated_files=math.floor(analysis.total_files * 0.1),
            )
            if max_depth >= 2:
                archive.subfolders = [
                    SuggestedFolder(
                        name="By Year",
                        purpose="Organize archived files by year",
                        file_patterns=["2023/", "2022/", "etc."],
                    )
                ]
            folders.append(archive)

    unsorted = analysis.total_files - sum(count for _, count in frequent)
    if unsorted > 0:
        folders.append(
            SuggestedFolder(
                name="_Unsorted",
                purpose="Files that need manual review",
                file_patterns=["Miscellaneous files"],
                estimated_files=unsorted,
            )
        )
    return folders


def apply_structure_to_files(
    files: Iterable[FileRecord],
    structure: Sequence[SuggestedFolder],
    destination_root: str,
) -> list[ProposedChange]:
    """Assign every file to its best-scoring folder of ``structure``.

    Files scoring below ``MIN_MATCH_SCORE`` everywhere go to the first
    ``unsorted``/``other`` folder, or to the first folder when there is none.
    Nothing is moved; files already at their destination are left out.

    Args:
        files: Records to place; directories are ignored.
        structure: Proposed hierarchy, e.g. from :func:`generate_heuristic_structure`.
        destination_root: Folder the hierarchy is created under.

    Returns:
        list[ProposedChange]: Pending changes in file order.
    """
    candidates = [file for file in files if not file.is_directory]
    if not candidates:
        LOGGER.warning("No files to place into the suggested structure.")
        return []
    if not structure:
        LOGGER.warning("No folder structure to place files into.")
        return []
    if len(destination_root) < 3:
        LOGGER.warning("Invalid destination root for structure suggestions: %r", destination_root)
        return []

    folders = list(_flatten(structure))
    fallback = next(
        (
            path
            for path, name, _ in folders
            if "unsorted" in name.lower() or "other" in name.lower()
        ),
        folders[0][0],
    )

    changes: list[ProposedChange] = []
    for file in candidates:
        best_path: Optional[str] = None
        best_score = 0.0
        for path, name, patterns in folders:
            score = _score(file, path, name, patterns)
            if score > best_score:
                best_path, best_score = path, score
        if best_path is None or best_score < MIN_MATCH_SCORE:
            best_path = fallback

        proposed_path = join(destination_root, best_path, file.name)
        if proposed_path == file.path:
            continue
        changes.append(
            ProposedChange.for_file(
                file,
                proposed_path,
                matched_rule=f"Structure: {best_path}",
                matched_rule_id=f"structure-{best_path}",
            )
        )
    LOGGER.info(
        "Placed %d of %d files into the suggested structure.", len(changes), len(candidates)
    )
    return changes


# ---------------------------------------------------------------------- #
# Helpers                                                                #
# ---------------------------------------------------------------------- #


def _flatten(
    folders: Sequence[SuggestedFolder], parent: str = ""
) -> Iterable[tuple[str, str, list[str]]]:
    for folder in folders:
        path = join(parent, folder.name) if parent else folder.name
        yield path, folder.name, folder.file_patterns
        yield from _flatten(folder.subfolders, path)


def _score(file: FileRecord, path: str, name: str, patterns: Sequence[str]) -> float:
    extension = file.extension.lstrip(".")
    file_name = file.name.lower()
    stem = file_name[: len(file_name) - len(file.extension)] if file.extension else file_name
    folder_name = name.lower()
    folder_path = path.lower()
    score = 0.0

    for fragment, keywords in _FOLDER_KEYWORDS.items():
        if fragment in folder_name or fragment in folder_path:
            score += 15 * sum(1 for keyword in keywords if keyword in stem)

    keywords = [
        word for word in _KEYWORD_SEPARATORS.sub(" ", folder_name).split() if len(word) >= 2
    ]
    score += 12 * sum(1 for keyword in keywords if keyword in stem)
    words = [word for word in _WORD_SEPARATORS.split(folder_name) if len(word) >= 3]
    score += 10 * sum(1 for word in words if word in stem)

    for pattern in patterns:
        lowered = pattern.lower()
        if lowered.startswith("*.") and extension == lowered[2:]:
            score += 8
        if lowered.endswith("*") and not lowered.startswith("*"):
            if file_name.startswith(lowered[:-1]):
                score += 8
        if lowered.startswith("*") and not lowered.endswith("*"):
            if lowered[1:] in file_name:
                score += 5

    category = get_file_category(file.extension)
    if category == folder_name:
        score += 5
    if category in folder_name or folder_name in category:
        score += 3
    if extension in _FOLDER_EXTENSION_HINTS.get(folder_name, ()):
        score += 4

    score += 0.5 * len(path.split("/"))
    return score


def _months_before(moment: datetime, months: int) -> datetime:
    month_index = moment.year * 12 + moment.month - 1 - months
    year, month = divmod(month_index, 12)
    day = min(moment.day, _days_in_month(year, month + 1))
    return moment.replace(year=year, month=month + 1, day=day)


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        return 31
    following = datetime(year, month + 1, 1)
    return (following - datetime(year, month, 1)).days


__all__ = [
    "CATEGORY_THRESHOLD",
    "STRUCTURE_CATEGORIES",
    "apply_structure_to_files",
    "create_compact_summary",
    "detect_folder_purpose",
    "format_size",
    "generate_heuristic_structure",
    "structure_prompt_summary",
    "structure_category",
]
