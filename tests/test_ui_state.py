from __future__ import annotations

import pytest

from clinic.ui_state import (
    ALL,
    SESSION_EXPIRED_MESSAGE,
    AppointmentForm,
    DoctorForm,
    filter_appointments,
    filter_doctors,
    run_action,
    validate_registration,
)

DOCTORS = [
    {"id": 1, "name": "Dr. Gregory House", "role": "General"},
    {"id": 2, "name": "Dr. James Wilson", "role": "Neurologist"},
    {"id": 3, "name": "Dr. Lisa Cuddy", "role": "Cardiologist"},
]

APPOINTMENTS = [
    {"id": 10, "patient_name": "Alice", "date": "2024-05-01", "time": "09:00", "doctor_id": 1,
     "doctor_name": "Dr. Gregory House", "doctor_role": "General"},
    {"id": 11, "patient_name": "Bob", "date": "2024-05-02", "time": "10:00", "doctor_id": 2,
     "doctor_name": "Dr. James Wilson", "doctor_role": "Neurologist"},
]


def test_new_doctor_form():
    form = DoctorForm()
    assert not form.is_editing
    assert form.title == "Add Doctor"
    assert form.validate() == "Please enter doctor name"
    assert DoctorForm(name="john").payload() == {"name": "Dr. john", "role": "General"}


def test_editing_doctor_form_strips_and_restores_prefix():
    form = DoctorForm.from_record(DOCTORS[0])
    assert form.is_editing
    assert form.title == "Edit Doctor"
    assert form.name == "Gregory House"
    assert form.validate() is None
    assert form.payload() == {"name": "Dr. Gregory House", "role": "General", "doctorId": 1}


def test_doctor_form_rejects_unknown_role():
    assert DoctorForm(name="x", role="Wizard").validate() == "Please select a specialty"


def test_appointment_form_lifecycle():
    form = AppointmentForm()
    assert form.validate() == "Please fill all fields"

    filled = form.with_values(patient_name="Carol", date="2024-05-03T00:00:00Z", time="11:00", doctor_id=3)
    assert filled.validate() is None
    assert not filled.is_editing
    assert filled.payload() == {"patient_name": "Carol", "date": "2024-05-03", "time": "11:00", "doctor_id": 3}

    editing = AppointmentForm.from_record(APPOINTMENTS[0])
    assert editing.editing_id == 10
    assert editing.title == "Edit Appointment"


def test_registration_checks():
    assert validate_registration("Ada", "L", "ada@clinic.test", "secret1", "secret1") is None
    assert validate_registration("", "L", "ada@clinic.test", "secret1", "secret1") == "All fields are required"
    assert validate_registration("Ada", "L", "ada", "secret1", "secret1") == "Invalid email"
    assert "at least 6" in validate_registration("Ada", "L", "ada@clinic.test", "abc", "abc")
    assert validate_registration("Ada", "L", "ada@clinic.test", "secret1", "secret2") == "Passwords do not match"


def test_filter_doctors():
    assert filter_doctors(DOCTORS) == DOCTORS
    assert [d["id"] for d in filter_doctors(DOCTORS, "wil")] == [2]
    assert [d["id"] for d in filter_doctors(DOCTORS, "CARDIO")] == [3]
    assert [d["id"] for d in filter_doctors(DOCTORS, role="General")] == [1]
    assert filter_doctors(DOCTORS, "house", "Neurologist") == []


def test_filter_appointments():
    assert filter_appointments(APPOINTMENTS) == APPOINTMENTS
    assert [a["id"] for a in filter_appointments(APPOINTMENTS, "neuro")] == [11]
    assert [a["id"] for a in filter_appointments(APPOINTMENTS, "alice")] == [10]
    assert [a["id"] for a in filter_appointments(APPOINTMENTS, day="2024-05-02")] == [11]
    assert [a["id"] for a in filter_appointments(APPOINTMENTS, doctor_id="1")] == [10]
    assert [a["id"] for a in filter_appointments(APPOINTMENTS, doctor_id=1)] == [10]
    assert filter_appointments(APPOINTMENTS, doctor_id=ALL, day="2024-06") == []


class _BackendDown(Exception):
    pass


def _raise(exc):
    def action():
        raise exc
    return action


def test_run_action_success_has_no_message():
    calls = []
    assert run_action(lambda: calls.append(1), (_BackendDown,)) is None
    assert calls == [1]


def test_run_action_expired_session_is_shown_inline():
    assert run_action(_raise(PermissionError("401")), (_BackendDown,)) == SESSION_EXPIRED_MESSAGE
    assert run_action(_raise(PermissionError("401"))) == SESSION_EXPIRED_MESSAGE


def test_run_action_handled_errors_give_their_message():
    assert run_action(_raise(_BackendDown("Connection refused")), (_BackendDown,)) == "Connection refused"


def test_run_action_unexpected_errors_propagate():
    with pytest.raises(KeyError):
        run_action(_raise(KeyError("boom")), (_BackendDown,))
