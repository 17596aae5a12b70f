from __future__ import annotations

from sqlalchemy import select

from .db import db_session
from .formatting import canonical_doctor_name
from .models import Doctor, Specialty


def seed_base() -> None:
    """
    Sample doctors for a fresh install (idempotent).
    Appointments are left empty.
    """
    with db_session() as s:
        doctors = [
            ("Mario Rossi", Specialty.GENERAL),
            ("Laura Bianchi", Specialty.CARDIOLOGIST),
            ("Anna Verdi", Specialty.PEDIATRICIAN),
        ]
        for raw_name, role in doctors:
            name = canonical_doctor_name(raw_name)
            exists = s.execute(
                select(Doctor).where(Doctor.name == name, Doctor.role == role)
            ).scalar_one_or_none()
            if exists is None:
                s.add(Doctor(name=name, role=role))
