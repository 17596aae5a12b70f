from __future__ import annotations

import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import auth_models  # noqa: F401  (registers the users table)
from .booking_rules import (
    DOCTOR_IN_USE_MESSAGE,
    SLOT_TAKEN_MESSAGE,
    ensure_doctor_deletable,
    ensure_slot_available,
)
from .db import Base, db_session, engine
from .errors import ClinicValidationError, ConflictError, NotFoundError, StorageError
from .formatting import canonical_doctor_name, normalize_date, normalize_time
from .models import Appointment, Doctor, Specialty

logger = logging.getLogger(__name__)

# doctors.name and appointments.patient_name are String(120)
MAX_NAME_LENGTH = 120


# =========================
# Bootstrap DB
# =========================
def init_db() -> None:
    """Create the tables if they do not exist."""
    Base.metadata.create_all(bind=engine)


# =========================
# Input helpers
# =========================
def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_role(role: str) -> Specialty:
    try:
        return Specialty.from_label(role)
    except ValueError:
        raise ClinicValidationError(f"Unknown specialty: {role}")


def _parse_date(raw: str) -> date:
    try:
        return datetime.strptime(normalize_date(raw), "%Y-%m-%d").date()
    except ValueError:
        raise ClinicValidationError(f"Invalid date: {raw}")


def _parse_time(raw: str) -> str:
    try:
        return normalize_time(raw)
    except ValueError:
        raise ClinicValidationError(f"Invalid time: {raw}")


def _check_length(label: str, value: str) -> None:
    if len(value.strip()) > MAX_NAME_LENGTH:
        raise ClinicValidationError(f"{label} must be at most {MAX_NAME_LENGTH} characters")


def _doctor_dict(d: Doctor) -> dict:
    return {"id": d.id, "name": d.name, "role": d.role.value}


def _appointment_dict(a: Appointment, d: Doctor) -> dict:
    return {
        "id": a.id,
        "patient_name": a.patient_name,
        "date": a.date.isoformat(),
        "time": a.time,
        "doctor_id": a.doctor_id,
        "doctor_name": d.name,
        "doctor_role": d.role.value,
    }


def _flush_booking(s: Session) -> None:
    """
    Flush an appointment write. The slot constraint catches bookings that
    raced past ensure_slot_available.
    """
    try:
        s.flush()
    except IntegrityError as e:
        detail = str(e.orig).lower()
        if "unique" in detail or "duplicate" in detail:
            raise ConflictError(SLOT_TAKEN_MESSAGE) from e
        if "foreign key" in detail:
            raise NotFoundError("Doctor not found") from e
        logger.exception("Unexpected integrity error on appointment write")
        raise StorageError() from e


def _load_doctor(s: Session, doctor_id: int) -> Doctor:
    d = s.get(Doctor, doctor_id)
    if not d:
        raise NotFoundError("Doctor not found")
    return d


# =========================
# Doctors
# =========================
def create_doctor(name: str, role: str) -> dict:
    if _blank(name) or _blank(role):
        raise ClinicValidationError("Doctor name and specialty are required")
    _check_length("Doctor name", canonical_doctor_name(name))
    specialty = _parse_role(role)

    with db_session() as s:
        d = Doctor(name=canonical_doctor_name(name), role=specialty)
        s.add(d)
        s.flush()
        logger.info("Doctor %s created: %s (%s)", d.id, d.name, specialty.value)
        return _doctor_dict(d)


def update_doctor(doctor_id: int, name: str, role: str) -> dict:
    if doctor_id is None or _blank(name) or _blank(role):
        raise ClinicValidationError("Doctor name and specialty are required")
    _check_length("Doctor name", canonical_doctor_name(name))
    specialty = _parse_role(role)

    with db_session() as s:
        d = _load_doctor(s, doctor_id)
        d.name = canonical_doctor_name(name)
        d.role = specialty
        s.flush()
        logger.info("Doctor %s updated: %s (%s)", d.id, d.name, specialty.value)
        return _doctor_dict(d)


def delete_doctor(doctor_id: int) -> None:
    """
    Delete a doctor.
    - NotFoundError if the id does not exist
    - ConflictError while appointments still reference the doctor
    """
    with db_session() as s:
        d = _load_doctor(s, doctor_id)
        ensure_doctor_deletable(s, d.id)

        s.delete(d)
        try:
            s.flush()
        except IntegrityError as e:
            # an appointment was booked between the check and the delete
            raise ConflictError(DOCTOR_IN_USE_MESSAGE) from e
        logger.info("Doctor %s deleted", doctor_id)


def get_doctor(doctor_id: int) -> dict:
    with db_session() as s:
        return _doctor_dict(_load_doctor(s, doctor_id))


def list_doctors() -> list[Doctor]:
    with db_session() as s:
        return list(s.scalars(select(Doctor).order_by(Doctor.id)))


def list_doctors_flat() -> list[dict]:
    with db_session() as s:
        rows = s.execute(select(Doctor.id, Doctor.name, Doctor.role).order_by(Doctor.id)).all()
        return [{"id": r.id, "name": r.name, "role": r.role.value} for r in rows]


# =========================
# Appointments
# =========================
def create_appointment(patient_name: str, date_value: str, time_value: str, doctor_id: int) -> dict:
    """
    Book a slot:
    - all fields required, doctor must exist
    - date normalized to date-only, time to HH:MM
    - ConflictError if the doctor already has an appointment at that date/time
    Returns the enriched appointment.
    """
    if _blank(patient_name) or _blank(date_value) or _blank(time_value) or doctor_id is None:
        raise ClinicValidationError("All fields are required")
    _check_length("Patient name", patient_name)
    day = _parse_date(date_value)
    slot = _parse_time(time_value)

    with db_session() as s:
        d = _load_doctor(s, doctor_id)
        ensure_slot_available(s, d.id, day, slot)

        a = Appointment(patient_name=patient_name.strip(), date=day, time=slot, doctor_id=d.id)
        s.add(a)
        _flush_booking(s)

        logger.info("Appointment %s booked: doctor=%s %s %s", a.id, d.id, day.isoformat(), slot)
        return _appointment_dict(a, d)


def update_appointment(
    appointment_id: int,
    patient_name: str,
    date_value: str,
    time_value: str,
    doctor_id: int,
) -> dict:
    if _blank(patient_name) or _blank(date_value) or _blank(time_value) or doctor_id is None:
        raise ClinicValidationError("All fields are required")
    _check_length("Patient name", patient_name)
    day = _parse_date(date_value)
    slot = _parse_time(time_value)

    with db_session() as s:
        a = s.get(Appointment, appointment_id)
        if not a:
            raise NotFoundError("Appointment not found")

        d = _load_doctor(s, doctor_id)
        ensure_slot_available(s, d.id, day, slot, exclude_appointment_id=a.id)

        a.patient_name = patient_name.strip()
        a.date = day
        a.time = slot
        a.doctor_id = d.id
        _flush_booking(s)

        logger.info("Appointment %s updated: doctor=%s %s %s", a.id, d.id, day.isoformat(), slot)
        return _appointment_dict(a, d)


def delete_appointment(appointment_id: int) -> None:
    with db_session() as s:
        a = s.get(Appointment, appointment_id)
        if not a:
            raise NotFoundError("Appointment not found")
        s.delete(a)
        logger.info("Appointment %s deleted", appointment_id)


def _appointments_query():
    return (
        select(
            Appointment.id,
            Appointment.patient_name,
            Appointment.date,
            Appointment.time,
            Appointment.doctor_id,
            Doctor.id.label("joined_doctor_id"),
            Doctor.name.label("doctor_name"),
            Doctor.role.label("doctor_role"),
        )
        .outerjoin(Doctor, Doctor.id == Appointment.doctor_id)
        .order_by(Appointment.date.asc(), Appointment.time.asc(), Appointment.id.asc())
    )


def list_appointments_flat() -> list[dict]:
    """
    Appointments joined with their doctor's name and specialty.
    Rows pointing at a missing doctor are left out and logged.
    """
    with db_session() as s:
        rows = s.execute(_appointments_query()).all()

    out = []
    orphans = []
    for r in rows:
        if r.joined_doctor_id is None:
            orphans.append(r.id)
            continue
        out.append(
            {
                "id": r.id,
                "patient_name": r.patient_name,
                "date": r.date.isoformat(),
                "time": r.time,
                "doctor_id": r.doctor_id,
                "doctor_name": r.doctor_name,
                "doctor_role": r.doctor_role.value,
            }
        )

    if orphans:
        logger.warning("Skipping %d appointment(s) with a missing doctor: %s", len(orphans), orphans)
    return out


def find_orphan_appointments() -> list[dict]:
    """Appointments whose doctor_id does not match any doctor."""
    with db_session() as s:
        rows = s.execute(_appointments_query().where(Doctor.id.is_(None))).all()
        return [
            {
                "id": r.id,
                "patient_name": r.patient_name,
                "date": r.date.isoformat(),
                "time": r.time,
                "doctor_id": r.doctor_id,
            }
            for r in rows
        ]
