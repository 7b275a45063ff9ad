"""Pure helpers for searchee classification.

All functions in this module are pure apart from ``now_ms``.
"""

import posixpath
import re
import time
from collections.abc import Iterable

from .models import Searchee, SearcheeFile

EP_REGEX = re.compile(
    r"^(?P<title>.+?)[_.\s-]+(?:(?P<season>S\d+)?[_.\s]?"
    r"(?P<episode>E\d+(?:[\s-]?E?\d+)?(?![ip]))(?!\d+[ip])"
    r"|(?P<date>(?P<year>\d{4})[_.\s-](?P<month>\d{2})[_.\s-](?P<day>\d{2})))",
    re.IGNORECASE,
)

SEASON_REGEX = re.compile(
    r"^(?P<title>.+?)[\[(_.\s-]+(?P<season>S(?:eason)?\s*\d+)(?=[_.\s](?!E\d+))",
    re.IGNORECASE,
)

VIDEO_EXTENSIONS = frozenset(
    {
        ".3g2",
        ".3gp",
        ".avi",
        ".divx",
        ".flv",
        ".m2ts",
        ".m4v",
        ".mkv",
        ".mov",
        ".mp4",
        ".mpeg",
        ".mpg",
        ".mts",
        ".ogg",
        ".ogm",
        ".ogv",
        ".ts",
        ".vob",
        ".webm",
        ".wmv",
        ".xvid",
    }
)


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def is_single_episode(searchee: Searchee) -> bool:
    """Check whether the searchee is a lone file named like an episode.

    Args:
        searchee: Searchee to inspect.

    Returns:
        True if it has exactly one file and its name matches ``EP_REGEX``.
    """
    return len(searchee.files) == 1 and EP_REGEX.search(searchee.name) is not None


def is_season_pack_episode(searchee: Searchee) -> bool:
    """Check whether the searchee is one episode sitting inside a season pack.

    Episodes and season pack members look the same at the file level, so
    the parent directory name is what tells them apart.

    Args:
        searchee: Searchee to inspect.

    Returns:
        True if it has exactly one file and its parent directory name
        matches ``SEASON_REGEX``.
    """
    if not searchee.path or len(searchee.files) != 1:
        return False
    parent_dir = posixpath.basename(posixpath.dirname(searchee.path.rstrip("/")))
    return SEASON_REGEX.search(parent_dir) is not None


def is_video_file(filename: str) -> bool:
    return posixpath.splitext(filename)[1].lower() in VIDEO_EXTENSIONS


def all_files_are_videos(files: Iterable[SearcheeFile]) -> bool:
    return all(is_video_file(f.name) for f in files)


def format_timestamp(timestamp_ms: int) -> str:
    """Format an epoch milliseconds timestamp for log output."""
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(timestamp_ms / 1000))
