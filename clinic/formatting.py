from __future__ import annotations

import re

HONORIFIC = "Dr. "

_HONORIFIC_RE = re.compile(r"^dr(?:\.\s*|\s+)(?=\S)", re.IGNORECASE)
_DATETIME_SEP_RE = re.compile(r"[T ]")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


# =========================
# Doctor names
# =========================
def canonical_doctor_name(raw: str) -> str:
    """
    Display name with the honorific prefix.
    'john smith' -> 'Dr. john smith', 'Dr. Jane Roe' unchanged.
    No other case transformation is applied.
    """
    name = raw.strip()
    if name and not name.lower().startswith("dr"):
        name = HONORIFIC + name
    return name


def strip_honorific(name: str) -> str:
    """
    Editable name for forms: 'Dr. john smith' -> 'john smith'.

    The prefix is only removed when canonicalizing the remainder gives the
    same name back, so that saving an untouched form never changes it
    (e.g. 'dr.Smith' or 'Drake' are returned as they are).
    """
    trimmed = name.strip()
    m = _HONORIFIC_RE.match(trimmed)
    if not m:
        return trimmed

    rest = trimmed[m.end():]
    if canonical_doctor_name(rest) != canonical_doctor_name(trimmed):
        return trimmed
    return rest


# =========================
# Dates / times
# =========================
def normalize_date(raw: str) -> str:
    """'2024-05-01T00:00:00.000Z' -> '2024-05-01'; bare dates unchanged."""
    return _DATETIME_SEP_RE.split(raw.strip(), maxsplit=1)[0]


def normalize_time(raw: str) -> str:
    """'9:00', '09:00' and '09:00:00' -> '09:00'. ValueError if malformed or not on a whole minute."""
    m = _TIME_RE.match(raw.strip())
    if not m:
        raise ValueError(f"Invalid time: {raw!r}")

    hours, minutes = int(m.group(1)), int(m.group(2))
    seconds = int(m.group(3) or 0)
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time: {raw!r}")
    # slots are whole minutes; a seconds part other than :00 is not a slot
    if seconds:
        raise ValueError(f"Invalid time: {raw!r}")
    return f"{hours:02d}:{minutes:02d}"


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value.strip()))
