from __future__ import annotations

import pytest

from clinic.formatting import (
    canonical_doctor_name,
    is_valid_email,
    normalize_date,
    normalize_time,
    strip_honorific,
)

NAMES = ["john smith", "  Jane Roe ", "Dr. Who", "dr house", "DR. Strange", "Drake Ramoray", "Dr.Smith", "Ødegaard"]


def test_prefix_added_without_other_case_changes():
    assert canonical_doctor_name("john smith") == "Dr. john smith"
    assert canonical_doctor_name("  john smith  ") == "Dr. john smith"


def test_existing_prefix_kept_case_insensitively():
    assert canonical_doctor_name("Dr. Jane Roe") == "Dr. Jane Roe"
    assert canonical_doctor_name("dr. jane roe") == "dr. jane roe"
    assert canonical_doctor_name("DR Who") == "DR Who"


@pytest.mark.parametrize("name", NAMES)
def test_canonical_name_is_idempotent(name):
    once = canonical_doctor_name(name)
    assert canonical_doctor_name(once) == once


@pytest.mark.parametrize("name", NAMES)
def test_strip_then_canonicalize_round_trips(name):
    canonical = canonical_doctor_name(name)
    assert canonical_doctor_name(strip_honorific(canonical)) == canonical


def test_strip_honorific_for_edit_forms():
    assert strip_honorific("Dr. john smith") == "john smith"
    assert strip_honorific("  Dr. Jane  ") == "Jane"
    assert strip_honorific("Mario Rossi") == "Mario Rossi"


def test_strip_honorific_keeps_names_that_would_change():
    # removing the prefix would make the saved name differ
    assert strip_honorific("dr. jane") == "dr. jane"
    assert strip_honorific("Drake Ramoray") == "Drake Ramoray"
    assert strip_honorific("Dr. drew") == "Dr. drew"
    assert strip_honorific("Dr Jane") == "Dr Jane"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-05-01", "2024-05-01"),
        ("2024-05-01T00:00:00.000Z", "2024-05-01"),
        ("2024-05-01T09:30:00+02:00", "2024-05-01"),
        ("2024-05-01 09:30:00", "2024-05-01"),
    ],
)
def test_normalize_date(raw, expected):
    assert normalize_date(raw) == expected
    assert normalize_date(normalize_date(raw)) == expected


@pytest.mark.parametrize("raw", ["9:00", "09:00", "09:00:00", " 09:00 "])
def test_normalize_time(raw):
    assert normalize_time(raw) == "09:00"
    assert normalize_time(normalize_time(raw)) == "09:00"


@pytest.mark.parametrize("raw", ["", "9", "25:00", "10:75", "ten o'clock", "09:00:30", "09:00:00.5"])
def test_normalize_time_rejects_garbage(raw):
    with pytest.raises(ValueError):
        normalize_time(raw)


def test_email_format():
    assert is_valid_email("ada@clinic.test")
    assert not is_valid_email("ada@clinic")
    assert not is_valid_email("ada clinic@x.org")
    assert not is_valid_email("@x.org")
