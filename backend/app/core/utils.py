"""
Text and date helpers shared by services and narratives.
"""
import re
from datetime import date, datetime, timezone
from typing import Optional

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(value: Optional[str]) -> str:
    """Trim and collapse runs of whitespace to single spaces."""
    return _WHITESPACE.sub(" ", str(value or "")).strip()


def to_title_case(value: Optional[str]) -> str:
    """'  john   SMITH ' -> 'John Smith'."""
    raw = collapse_whitespace(value)
    return " ".join(w[0].upper() + w[1:].lower() for w in raw.split(" ") if w)


def normalize_name(value: Optional[str]) -> str:
    """Comparison key for names: trimmed, collapsed and lower-cased."""
    return collapse_whitespace(value).lower()


def format_platoon_label(platoon: Optional[str]) -> str:
    """'B' -> 'B Platoon'; labels already naming a platoon are kept."""
    p = str(platoon or "").strip()
    if not p:
        return "-"
    return p if "platoon" in p.lower() else f"{p} Platoon"


def format_display_date(value: Optional[date]) -> str:
    """Render a shift date as '05 Mar 2025'."""
    if value is None:
        return "-"
    return value.strftime("%d %b %Y")


def append_note(existing: Optional[str], addition: str, dedupe: bool = True) -> str:
    """
    Append ``addition`` to free-text notes.

    With ``dedupe`` the text is skipped when a case-insensitive substring
    match is already present. User text is never overwritten.
    """
    current = (existing or "").strip()
    extra = addition.strip()
    if not extra:
        return current
    if not current:
        return extra
    if dedupe and extra.lower() in current.lower():
        return current
    return f"{current}\n\n{extra}"


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the store hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
