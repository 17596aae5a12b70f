"""
Form state and client-side filters for the Streamlit UI.

Each form is a single value with an optional ``editing_id``: None while
adding a record, the record id while modifying one. Kept free of Streamlit
imports so the logic can be tested on its own.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Iterable

from .formatting import canonical_doctor_name, is_valid_email, normalize_date, strip_honorific
from .models import SPECIALTY_LABELS, Specialty

ALL = "All"
MIN_PASSWORD_LENGTH = 6
SESSION_EXPIRED_MESSAGE = "Session no longer valid. Press Logout and log in again."


# =========================
# Button handlers
# =========================
def run_action(action: Callable[[], object], handled: tuple[type[Exception], ...] = ()) -> str | None:
    """
    Run an API call from a button handler.
    Returns the message to show inline, or None if the call went through.
    A 401 from the client surfaces as PermissionError.
    """
    try:
        action()
    except PermissionError:
        return SESSION_EXPIRED_MESSAGE
    except handled as e:
        return str(e)
    return None


# =========================
# Doctor form
# =========================
@dataclass(frozen=True)
class DoctorForm:
    name: str = ""
    role: str = Specialty.GENERAL.value
    editing_id: int | None = None

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    @property
    def title(self) -> str:
        return "Edit Doctor" if self.is_editing else "Add Doctor"

    @classmethod
    def from_record(cls, doctor: dict) -> "DoctorForm":
        return cls(name=strip_honorific(doctor["name"]), role=doctor["role"], editing_id=doctor["id"])

    def validate(self) -> str | None:
        if not self.name.strip():
            return "Please enter doctor name"
        if self.role not in SPECIALTY_LABELS:
            return "Please select a specialty"
        return None

    def payload(self) -> dict:
        """Request body: POST /doctors when adding, PUT /doctors when editing."""
        body = {"name": canonical_doctor_name(self.name), "role": self.role}
        if self.is_editing:
            body["doctorId"] = self.editing_id
        return body


# =========================
# Appointment form
# =========================
@dataclass(frozen=True)
class AppointmentForm:
    patient_name: str = ""
    date: str = ""
    time: str = ""
    doctor_id: int | None = None
    editing_id: int | None = None

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    @property
    def title(self) -> str:
        return "Edit Appointment" if self.is_editing else "Add Appointment"

    @classmethod
    def from_record(cls, appointment: dict) -> "AppointmentForm":
        return cls(
            patient_name=appointment["patient_name"],
            date=normalize_date(appointment["date"]),
            time=appointment["time"],
            doctor_id=appointment["doctor_id"],
            editing_id=appointment["id"],
        )

    def with_values(self, **changes) -> "AppointmentForm":
        return replace(self, **changes)

    def validate(self) -> str | None:
        if not self.patient_name.strip() or not self.date or not self.time or self.doctor_id is None:
            return "Please fill all fields"
        return None

    def payload(self) -> dict:
        return {
            "patient_name": self.patient_name.strip(),
            "date": normalize_date(self.date),
            "time": self.time,
            "doctor_id": self.doctor_id,
        }


# =========================
# Registration
# =========================
def validate_registration(first_name: str, last_name: str, email: str, password: str, confirm: str) -> str | None:
    if not all(v.strip() for v in (first_name, last_name, email)) or not password:
        return "All fields are required"
    if not is_valid_email(email):
        return "Invalid email"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if password != confirm:
        return "Passwords do not match"
    return None


# =========================
# Filters (in-memory lists from the API)
# =========================
def filter_doctors(doctors: Iterable[dict], search: str = "", role: str = ALL) -> list[dict]:
    term = search.strip().lower()
    out = []
    for d in doctors:
        if term and term not in d["name"].lower() and term not in d["role"].lower():
            continue
        if role != ALL and d["role"] != role:
            continue
        out.append(d)
    return out


def filter_appointments(
    appointments: Iterable[dict],
    search: str = "",
    day: str = "",
    doctor_id: int | str = ALL,
) -> list[dict]:
    """
    - search: substring of patient name, doctor name or specialty
    - day: 'YYYY-MM-DD' prefix of the appointment date
    - doctor_id: a doctor id, or 'All'
    """
    term = search.strip().lower()
    out = []
    for a in appointments:
        if term and not any(
            term in (a.get(k) or "").lower() for k in ("patient_name", "doctor_name", "doctor_role")
        ):
            continue
        if day and not a["date"].startswith(day):
            continue
        if doctor_id != ALL and str(a["doctor_id"]) != str(doctor_id):
            continue
        out.append(a)
    return out
