"""
Common utility functions and helpers.
"""
from pathlib import Path
from typing import Optional
import logging
import os
import re
import uuid

logger = logging.getLogger(__name__)


def format_countdown(seconds: int) -> str:
    """
    Format a countdown value for display.

    Args:
        seconds: Remaining seconds

    Returns:
        "MM:SS" (minutes are not wrapped into hours, e.g. 90 min -> "90:00")
    """
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def format_study_time(total_minutes: int) -> str:
    """Format accumulated study minutes as "Xh Ym"."""
    hours, minutes = divmod(max(0, int(total_minutes)), 60)
    return f"{hours}h {minutes}m"


def format_file_size(num_bytes: int) -> str:
    """
    Human-readable file size.

    Args:
        num_bytes: Size in bytes

    Returns:
        e.g. "0 Bytes", "1.5 KB", "2 MB"
    """
    if num_bytes <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB", "TB"]
    i = 0
    value = float(num_bytes)
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    # Drop trailing zeros: 2.00 -> 2, 1.50 -> 1.5
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {units[i]}"


def get_file_extension(filename: str) -> str:
    """Lower-case extension without the dot, or "" when there is none."""
    return Path(filename).suffix.lower().lstrip(".")


def stored_filename(original: Optional[str], extension: Optional[str] = None) -> str:
    """
    Random on-disk name for an upload, keeping the original extension.

    Args:
        original: Client-supplied filename (only the extension is used)
        extension: Explicit extension overriding the original one
    """
    ext = extension if extension is not None else get_file_extension(original or "")
    return f"{uuid.uuid4().hex}.{ext}" if ext else uuid.uuid4().hex


def safe_filename(name: str) -> bool:
    """True when *name* is a bare filename with no path components."""
    return bool(name) and re.fullmatch(r"[\w.\-]+", name) is not None and name not in (".", "..")


def safe_remove(path: Optional[str]) -> None:
    """Delete a file if it exists; log instead of raising."""
    try:
        if path and os.path.exists(path):
            os.remove(path)
    except Exception as exc:
        logger.warning("Could not remove file %r: %s", path, exc)


def truncate_text(text: str, max_length: int = 200, suffix: str = "...") -> str:
    """
    Truncate text to maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
