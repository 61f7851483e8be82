"""
Normalization helpers for registration identity matching.

Identity matching compares trimmed company names exactly. ``normalize_name``
gives the case-insensitive form used when checking directory entries against
registered companies. Schedule times are ``HH:MM`` strings compared as
seconds since midnight.
"""

import re
from datetime import datetime, time
from typing import Optional, Union

CODE_PATTERN = re.compile(r"^\d{4}$")
TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")

SECONDS_PER_DAY = 24 * 60 * 60


def normalize_name(name: Optional[str]) -> str:
    """Trim and lowercase a company name for comparison."""
    return (name or "").strip().lower()


def is_valid_code(code: Optional[str]) -> bool:
    return bool(code) and CODE_PATTERN.match(code) is not None


def parse_hhmm(value: Optional[str]) -> Optional[int]:
    """
    Convert ``HH:MM`` to seconds since midnight.

    Returns None for empty or malformed input.
    """
    if not value:
        return None
    match = TIME_PATTERN.match(value.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 3600 + minutes * 60


def seconds_since_midnight(now: Union[datetime, time, int]) -> int:
    if isinstance(now, int):
        return now % SECONDS_PER_DAY
    return now.hour * 3600 + now.minute * 60 + now.second
