"""Filename pattern tables used by the heuristic suggester."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict

_I = re.IGNORECASE

DEFAULT_CATEGORY_FOLDERS: Dict[str, str] = {
    "documents": "Documents/Organized",
    "images": "Media/Images",
    "videos": "Media/Videos",
    "audio": "Media/Audio",
    "archives": "Archives",
    "code": "Development/Code",
    "other": "Miscellaneous",
}

ORGANIZED_PATH_PATTERNS = tuple(
    re.compile(pattern, _I) for pattern in ("organized", "sorted", "archive", "backup")
)


@dataclass(frozen=True)
class SmartPattern:
    """Filename pattern pointing at a well-known destination folder."""

    pattern: re.Pattern[str]
    folder: str
    reason: str
    priority: int = 0


@dataclass(frozen=True)
class RenamePattern:
    """Cleanup rule for messy file names; ``transform`` receives the stem."""

    pattern: re.Pattern[str]
    transform: Callable[[re.Match[str], str], str]
    reason: str


def _smart(pattern: str, folder: str, reason: str, priority: int = 0) -> SmartPattern:
    return SmartPattern(re.compile(pattern, _I), folder, reason, priority)


_SMART_PATTERN_TABLE = (
    # Screenshots and captures
    _smart(r"screenshot|screen.?shot|capture|snip|grab", "Media/Screenshots", "Detected as screenshot", 10),
    _smart(r"screen.?record|screencast|recording", "Media/Screen Recordings", "Detected as screen recording", 10),
    # Photos and camera
    _smart(r"^IMG_|^DSC_|^DCIM|^P\d{7}|^DSCN", "Media/Photos/Camera", "Detected as camera photo", 8),
    _smart(r"selfie|portrait", "Media/Photos/Selfies", "Detected as selfie/portrait"),
    _smart(r"panorama|pano", "Media/Photos/Panoramas", "Detected as panorama photo"),
    _smart(r"wallpaper|background|desktop", "Media/Wallpapers", "Detected as wallpaper"),
    _smart(r"avatar|profile.?pic|headshot|dp\b", "Media/Profile Pictures", "Detected as profile picture"),
    _smart(r"meme|reaction|funny", "Media/Memes", "Detected as meme/reaction image"),
    # Social media and messaging
    _smart(r"whatsapp|wa.?image|wa.?video", "Media/WhatsApp", "Detected as WhatsApp media", 9),
    _smart(r"instagram|ig.?story|insta", "Media/Instagram", "Detected as Instagram media"),
    _smart(r"telegram", "Media/Telegram", "Detected as Telegram media"),
    _smart(r"twitter|tweet", "Media/Twitter", "Detected as Twitter media"),
    _smart(r"facebook|fb.?", "Media/Facebook", "Detected as Facebook media"),
    _smart(r"snapchat|snap", "Media/Snapchat", "Detected as Snapchat media"),
    _smart(r"tiktok", "Media/TikTok", "Detected as TikTok video"),
    _smart(r"youtube|yt.?download", "Media/YouTube", "Detected as YouTube download"),
    # Finance
    _smart(r"invoice|receipt|bill|payment", "Documents/Finance/Invoices", "Detected as financial document", 8),
    _smart(r"tax|1099|w2|w-2|itr|gst", "Documents/Finance/Tax", "Detected as tax document"),
    _smart(r"bank.?statement|account.?statement", "Documents/Finance/Bank Statements", "Detected as bank statement"),
    _smart(r"salary|payslip|pay.?stub", "Documents/Finance/Payslips", "Detected as payslip"),
    # Career
    _smart(r"resume|cv|curriculum.?vitae", "Documents/Career/Resumes", "Detected as resume/CV", 8),
    _smart(r"cover.?letter", "Documents/Career/Cover Letters", "Detected as cover letter"),
    _smart(r"certificate|certification|diploma", "Documents/Career/Certificates", "Detected as certificate"),
    _smart(r"offer.?letter|appointment", "Documents/Career/Offer Letters", "Detected as offer letter"),
    # Legal and official
    _smart(r"contract|agreement|nda", "Documents/Legal/Contracts", "Detected as contract/agreement"),
    _smart(r"passport|visa|id.?card|license|licence", "Documents/Identity", "Detected as identity document", 9),
    _smart(r"insurance|policy", "Documents/Insurance", "Detected as insurance document"),
    # Work
    _smart(r"report|analysis|summary", "Documents/Reports", "Detected as report"),
    _smart(r"presentation|slides|deck", "Documents/Presentations", "Detected as presentation"),
    _smart(r"meeting.?note|minutes|mom\b", "Documents/Meeting Notes", "Detected as meeting notes"),
    _smart(r"proposal|quotation|quote", "Documents/Proposals", "Detected as proposal/quote"),
    _smart(r"manual|guide|tutorial|howto|how-to", "Documents/Guides", "Detected as guide/manual"),
    # Education
    _smart(r"assignment|homework|hw\d|lab.?\d", "Education/Assignments", "Detected as assignment", 7),
    _smart(r"lecture|lect\d|class.?note|note", "Education/Lecture Notes", "Detected as lecture notes"),
    _smart(r"syllabus|curriculum", "Education/Syllabus", "Detected as syllabus"),
    _smart(r"exam|test|quiz|midterm|final", "Education/Exams", "Detected as exam/test material"),
    _smart(r"textbook|ebook|book", "Education/Books", "Detected as ebook/textbook"),
    _smart(r"project|thesis|dissertation", "Education/Projects", "Detected as project/thesis"),
    _smart(r"research|paper|journal|article", "Education/Research Papers", "Detected as research paper"),
    # Downloads and installers
    _smart(r"setup|installer|install", "Downloads/Installers", "Detected as installer"),
    _smart(r"crack|keygen|patch|activat", "Downloads/Software", "Detected as software file"),
    _smart(r"driver|firmware", "Downloads/Drivers", "Detected as driver/firmware"),
    _smart(r"font|typeface", "Design/Fonts", "Detected as font file"),
    # Backups and exports
    _smart(r"backup|bak|export|dump", "Backups", "Detected as backup file"),
    _smart(r"archive|old|deprecated", "Archive", "Detected as archive/old file"),
    # Design
    _smart(r"logo|icon|brand", "Design/Logos", "Detected as logo/branding"),
    _smart(r"mockup|wireframe|prototype", "Design/Mockups", "Detected as design mockup"),
    _smart(r"banner|poster|flyer|brochure", "Design/Marketing", "Detected as marketing material"),
    _smart(r"template|boilerplate", "Templates", "Detected as template"),
    # Audio
    _smart(r"podcast|episode|ep\d", "Media/Podcasts", "Detected as podcast"),
    _smart(r"audiobook", "Media/Audiobooks", "Detected as audiobook"),
    _smart(r"ringtone|notification", "Media/Ringtones", "Detected as ringtone"),
)

# Highest priority first; equal priorities keep table order.
SMART_PATTERNS = tuple(sorted(_SMART_PATTERN_TABLE, key=lambda item: -item.priority))


def _strip(pattern: str, flags: int = 0) -> Callable[[re.Match[str], str], str]:
    compiled = re.compile(pattern, flags)

    def _transform(_match: re.Match[str], stem: str) -> str:
        return compiled.sub("", stem, count=1)

    return _transform


RENAME_PATTERNS = (
    RenamePattern(
        re.compile(r"^IMG_(\d{4})(\d{2})(\d{2})_(\d{2})(\d{2})(\d{2})", _I),
        lambda m, _stem: f"Photo_{m[1]}-{m[2]}-{m[3]}_{m[4]}{m[5]}",
        "Clean up camera photo naming",
    ),
    RenamePattern(
        re.compile(r"^IMG-(\d{4})(\d{2})(\d{2})-WA", _I),
        lambda m, _stem: f"WhatsApp_{m[1]}-{m[2]}-{m[3]}",
        "Clean up WhatsApp image naming",
    ),
    RenamePattern(
        re.compile(r"^Screenshot[_ ](\d{4})-(\d{2})-(\d{2})", _I),
        lambda m, _stem: f"Screenshot_{m[1]}-{m[2]}-{m[3]}",
        "Standardize screenshot naming",
    ),
    RenamePattern(
        re.compile(r"^Screenshot \((\d+)\)", _I),
        lambda m, _stem: f"Screenshot_{m[1]}",
        "Clean up Windows screenshot naming",
    ),
    RenamePattern(
        re.compile(r"\s*\(\d+\)\s*$"),
        _strip(r"\s*\(\d+\)\s*$"),
        "Remove duplicate number suffix",
    ),
    RenamePattern(
        re.compile(r"\s+copy\s*$", _I),
        _strip(r"\s+copy\s*$", _I),
        'Remove "copy" suffix',
    ),
    RenamePattern(
        re.compile(r"[-_](final|v\d+|new|old|backup)\s*$", _I),
        _strip(r"[-_](final|v\d+|new|old|backup)\s*$", _I),
        "Remove version suffix",
    ),
    RenamePattern(
        re.compile(r"_{2,}"),
        lambda _m, stem: re.sub(r"_{2,}", "_", stem),
        "Clean up multiple underscores",
    ),
    RenamePattern(
        re.compile(r"^[a-f0-9]{8}-[a-f0-9]{4}-", _I),
        _strip(r"^[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}[-_]?", _I),
        "Remove UUID prefix",
    ),
    RenamePattern(
        re.compile(r"[-_]\d{13,}[-_]?"),
        _strip(r"[-_]\d{13,}[-_]?"),
        "Remove timestamp suffix",
    ),
)


__all__ = [
    "DEFAULT_CATEGORY_FOLDERS",
    "ORGANIZED_PATH_PATTERNS",
    "RENAME_PATTERNS",
    "RenamePattern",
    "SMART_PATTERNS",
    "SmartPattern",
]
