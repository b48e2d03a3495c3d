"""Normalize dates, currency amounts, classifier text and file formats."""

import math
import re
from datetime import date
from typing import Optional

MONTH_PREFIXES: tuple[str, ...] = (
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
)

IMAGE_EXTENSIONS: frozenset[str] = frozenset(
    {"jpg", "jpeg", "png", "gif", "bmp", "webp", "tiff"}
)

_DATE_SPLIT = re.compile(r"[/\-.\s]+")
_AMOUNT_STRIP = re.compile(r"[,$\s]")
_WHITESPACE = re.compile(r"\s+")
_CLASSIFIER_STRIP = re.compile(r"[^\w\s$.%,\-/]")


def month_number(name: str) -> Optional[int]:
    """Map a month name or abbreviation ('Mar', 'march') to 1-12."""
    lowered = name.strip().lower()
    for idx, prefix in enumerate(MONTH_PREFIXES):
        if lowered.startswith(prefix):
            return idx + 1
    return None


def normalize_date(fragment: str, fmt: str) -> str:
    """Normalize a matched date fragment to YYYY-MM-DD.

    Supported formats: 'dmy' (15/03/2024), 'ymd' (2024-03-15) and
    'dmy_text' (15 March 2024). Unparseable fragments, and
    fragments that name no real calendar day (31/02/2024), are returned as-is.
    """
    parts = [p for p in _DATE_SPLIT.split(fragment.strip()) if p]
    if len(parts) < 3:
        return fragment

    if fmt in ("dmy", "dmy_text"):
        day, month, year = parts[0], parts[1], parts[2]
        number = month_number(month) if not month.isdigit() else int(month)
        if number is None or not day.isdigit():
            return fragment
        return _calendar_date(year, number, int(day)) or fragment

    if fmt == "ymd":
        year, month, day = parts[0], parts[1], parts[2]
        if not (month.isdigit() and day.isdigit()):
            return fragment
        return _calendar_date(year, int(month), int(day)) or fragment

    return fragment


def _calendar_date(year: str, month: int, day: int) -> Optional[str]:
    if not year.isdigit():
        return None
    try:
        return date(int(year), month, day).isoformat()
    except ValueError:
        return None


def is_iso_date(value: str) -> bool:
    """True for a real calendar date written as YYYY-MM-DD."""
    try:
        return date.fromisoformat(value).isoformat() == value
    except ValueError:
        return False


def parse_amount(fragment: str) -> Optional[float]:
    """Parse '$25,000.00' / '25000' into a float. None if not a number."""
    cleaned = _AMOUNT_STRIP.sub("", fragment or "")
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def normalize_classifier_text(text: str) -> str:
    """Lower-case, collapse whitespace and drop characters outside [\\w\\s$.%,-/]."""
    collapsed = _WHITESPACE.sub(" ", (text or "").lower())
    return _CLASSIFIER_STRIP.sub("", collapsed).strip()


def detect_format(file_path: Optional[str]) -> str:
    """Classify a path as 'pdf', 'image' or 'text' by its extension."""
    if not file_path:
        return "text"
    ext = file_path.lower().rsplit(".", 1)[-1] if "." in file_path else ""
    if ext == "pdf":
        return "pdf"
    if ext in IMAGE_EXTENSIONS:
        return "image"
    return "text"
