from __future__ import annotations

import enum
import logging
from datetime import date

from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from .errors import ConflictError
from .models import Appointment

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "Time slot already booked for this doctor"
DOCTOR_IN_USE_MESSAGE = "Cannot delete doctor with existing appointments"


class DeleteCheck(enum.Enum):
    OK = "ok"
    BLOCKED = "blocked"


# =========================
# Availability
# =========================
def check_slot_available(
    s: Session,
    doctor_id: int,
    day: date,
    time: str,
    exclude_appointment_id: int | None = None,
) -> bool:
    """
    True if no other appointment holds (doctor_id, day, time).
    The appointment being updated is excluded so it does not clash with itself.
    """
    conditions = [
        Appointment.doctor_id == doctor_id,
        Appointment.date == day,
        Appointment.time == time,
    ]
    if exclude_appointment_id is not None:
        conditions.append(Appointment.id != exclude_appointment_id)

    q = select(Appointment.id).where(and_(*conditions)).limit(1)
    return s.execute(q).first() is None


def ensure_slot_available(
    s: Session,
    doctor_id: int,
    day: date,
    time: str,
    exclude_appointment_id: int | None = None,
) -> None:
    if not check_slot_available(s, doctor_id, day, time, exclude_appointment_id):
        logger.warning("Slot taken: doctor=%s date=%s time=%s", doctor_id, day.isoformat(), time)
        raise ConflictError(SLOT_TAKEN_MESSAGE)


# =========================
# Doctor deletion
# =========================
def assert_doctor_deletable(s: Session, doctor_id: int) -> DeleteCheck:
    """BLOCKED while at least one appointment references the doctor."""
    q = select(Appointment.id).where(Appointment.doctor_id == doctor_id).limit(1)
    if s.execute(q).first() is not None:
        return DeleteCheck.BLOCKED
    return DeleteCheck.OK


def ensure_doctor_deletable(s: Session, doctor_id: int) -> None:
    if assert_doctor_deletable(s, doctor_id) is DeleteCheck.BLOCKED:
        logger.warning("Doctor %s still has appointments, delete refused", doctor_id)
        raise ConflictError(DOCTOR_IN_USE_MESSAGE)
