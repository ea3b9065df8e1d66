"""Extension to category lookup tables."""

from __future__ import annotations

from typing import Dict, Literal

FileCategory = Literal["documents", "images", "videos", "audio", "archives", "code", "other"]

CATEGORIES: tuple[str, ...] = (
    "documents",
    "images",
    "videos",
    "audio",
    "archives",
    "code",
    "other",
)

_CATEGORY_EXTENSIONS: Dict[str, tuple[str, ...]] = {
    "documents": (
        ".pdf", ".doc", ".docx", ".txt", ".rtf", ".odt", ".xls", ".xlsx", ".ppt",
        ".pptx", ".csv", ".epub", ".mobi", ".azw", ".azw3", ".indd",
    ),
    "images": (
        ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".svg", ".webp", ".ico", ".tiff",
        ".raw", ".psd", ".ai", ".sketch", ".fig", ".xd",
    ),
    "videos": (".mp4", ".avi", ".mkv", ".mov", ".wmv", ".flv", ".webm", ".m4v", ".3gp"),
    "audio": (
        ".mp3", ".wav", ".flac", ".aac", ".ogg", ".wma", ".m4a", ".opus", ".aiff",
        ".mid", ".midi",
    ),
    "archives": (".zip", ".rar", ".7z", ".tar", ".gz", ".bz2", ".xz", ".iso", ".dmg"),
    "code": (
        ".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".c", ".cpp", ".h", ".hpp",
        ".cs", ".go", ".rs", ".php", ".rb", ".swift", ".kt", ".html", ".css", ".scss",
        ".sass", ".less", ".json", ".xml", ".yaml", ".yml", ".md", ".sql", ".sh",
        ".bash", ".ps1", ".bat", ".vue", ".svelte", ".r", ".scala", ".lua", ".pl",
        ".dart", ".elm", ".ex", ".exs", ".ipynb",
    ),
    # Databases, fonts, 3D assets and executables are listed so they resolve
    # explicitly rather than by fallback.
    "other": (
        ".db", ".sqlite", ".mdb", ".accdb", ".ttf", ".otf", ".woff", ".woff2", ".eot",
        ".obj", ".fbx", ".stl", ".blend", ".max", ".exe", ".msi", ".app", ".deb",
        ".rpm", ".apk", ".ipa",
    ),
}

FILE_CATEGORY_MAP: Dict[str, str] = {
    extension: category
    for category, extensions in _CATEGORY_EXTENSIONS.items()
    for extension in extensions
}

CATEGORY_FOLDERS: Dict[str, str] = {
    "documents": "Documents",
    "images": "Images",
    "videos": "Videos",
    "audio": "Audio",
    "archives": "Archives",
    "code": "Code",
    "other": "Other",
}


def get_file_category(extension: str) -> str:
    """Return the category for ``extension`` (``other`` when unmapped)."""
    return FILE_CATEGORY_MAP.get((extension or "").lower(), "other")


def category_folder(category: str) -> str:
    """Return the display folder name used by category moves."""
    return CATEGORY_FOLDERS.get(category, "Other")


__all__ = [
    "CATEGORIES",
    "CATEGORY_FOLDERS",
    "FILE_CATEGORY_MAP",
    "FileCategory",
    "category_folder",
    "get_file_category",
]
