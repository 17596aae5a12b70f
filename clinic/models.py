from __future__ import annotations

import enum
import datetime as dt

from sqlalchemy import Date, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


class Specialty(enum.Enum):
    GENERAL = "General"
    DENTIST = "Dentist"
    CARDIOLOGIST = "Cardiologist"
    PEDIATRICIAN = "Pediatrician"
    DERMATOLOGIST = "Dermatologist"
    NEUROLOGIST = "Neurologist"
    ORTHOPEDIC = "Orthopedic"

    @classmethod
    def from_label(cls, label: str) -> "Specialty":
        """'Cardiologist' -> Specialty.CARDIOLOGIST (ValueError if unknown)."""
        return cls(label.strip())


SPECIALTY_LABELS: list[str] = [s.value for s in Specialty]


class Doctor(Base):
    __tablename__ = "doctors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    role: Mapped[Specialty] = mapped_column(Enum(Specialty), nullable=False)

    # no cascade: a doctor with appointments must not be deleted
    appointments: Mapped[list["Appointment"]] = relationship(back_populates="doctor", passive_deletes="all")

    def __repr__(self) -> str:
        return f"Doctor({self.name}, {self.role.value})"


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # One patient per doctor slot
        UniqueConstraint("doctor_id", "date", "time", name="uq_appointment_slot"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_name: Mapped[str] = mapped_column(String(120), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM

    doctor_id: Mapped[int] = mapped_column(ForeignKey("doctors.id", ondelete="RESTRICT"), nullable=False)

    doctor: Mapped["Doctor"] = relationship(back_populates="appointments")

    def __repr__(self) -> str:
        return f"Appointment({self.patient_name}, {self.date} {self.time}, doctor={self.doctor_id})"
