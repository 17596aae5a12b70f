from __future__ import annotations

import base64
import json
import os
from datetime import date, datetime, time, timezone

import requests
import streamlit as st

from clinic.models import SPECIALTY_LABELS
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

st.set_page_config(page_title="Clinic Admin", layout="wide")

API_BASE = os.getenv("API_BASE", "http://127.0.0.1:8000/api")



# JWT helpers (UI only, signature not verified)

def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def jwt_payload(token: str) -> dict:
    try:
        parts = token.split(".")
        if len(parts) != 3:
            return {}
        payload = json.loads(_b64url_decode(parts[1]).decode("utf-8"))
        return payload if isinstance(payload, dict) else {}
    except (ValueError, UnicodeDecodeError):
        return {}


def jwt_is_expired(token: str) -> bool:
    exp = jwt_payload(token).get("exp")
    try:
        exp_int = int(exp)
    except (TypeError, ValueError):
        return False

    now = int(datetime.now(tz=timezone.utc).timestamp())
    return now >= (exp_int - 5)



# HTTP client (with JWT)

class ApiError(Exception):
    pass


# failures shown inline by button handlers (401 is handled by run_action)
UI_ERRORS = (ApiError, requests.RequestException)


def _headers(token: str | None) -> dict:
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _unwrap(r: requests.Response):
    if r.status_code == 401:
        raise PermissionError("401 Unauthorized (token invalid/expired or backend restarted).")
    if not r.ok:
        try:
            message = r.json().get("message")
        except ValueError:
            message = None
        raise ApiError(message or f"HTTP {r.status_code}")
    return r.json()


def api_get(path: str, token: str | None = None) -> dict | list:
    return _unwrap(requests.get(f"{API_BASE}{path}", headers=_headers(token), timeout=10))


def api_post(path: str, payload: dict, token: str | None = None) -> dict:
    return _unwrap(requests.post(f"{API_BASE}{path}", headers=_headers(token), json=payload, timeout=10))


def api_put(path: str, payload: dict, token: str | None = None) -> dict:
    return _unwrap(requests.put(f"{API_BASE}{path}", headers=_headers(token), json=payload, timeout=10))


def api_delete(path: str, token: str | None = None) -> dict:
    return _unwrap(requests.delete(f"{API_BASE}{path}", headers=_headers(token), timeout=10))


def api_login(email: str, password: str) -> dict:
    r = requests.post(f"{API_BASE}/login", json={"email": email, "password": password}, timeout=10)
    if r.status_code == 401:
        raise ApiError("Invalid credentials")
    return _unwrap(r)


def is_logged_in() -> bool:
    token = st.session_state.get("token")
    return bool(token) and isinstance(token, str) and not jwt_is_expired(token)


def do_logout() -> None:
    for key in ("token", "user", "doctor_form", "appointment_form"):
        st.session_state.pop(key, None)
    st.rerun()



# Sidebar: login / register

with st.sidebar:
    st.header("Access")

    if not is_logged_in():
        mode = st.radio("Mode", ["Login", "Register"], horizontal=True, key="auth_mode")

        if mode == "Login":
            email = st.text_input("Email", key="login_email")
            password = st.text_input("Password", type="password", key="login_pass")

            if st.button("Login", key="login_btn"):
                try:
                    res = api_login(email.strip().lower(), password)
                    st.session_state["token"] = res["access_token"]
                    st.session_state["user"] = res["user"]
                    st.rerun()
                except (ApiError, requests.RequestException) as e:
                    st.error(str(e))
        else:
            c1, c2 = st.columns(2)
            first = c1.text_input("First name", key="reg_first")
            last = c2.text_input("Last name", key="reg_last")
            email = st.text_input("Email", key="reg_email")
            password = st.text_input("Password", type="password", key="reg_pass")
            confirm = st.text_input("Confirm password", type="password", key="reg_confirm")

            if st.button("Register", key="reg_btn"):
                problem = validate_registration(first, last, email, password, confirm)
                if problem:
                    st.error(problem)
                else:
                    try:
                        res = api_post(
                            "/register",
                            {"firstName": first.strip(), "lastName": last.strip(), "email": email.strip(), "password": password},
                        )
                        st.success(f"{res['message']}. You can now log in.")
                    except (ApiError, requests.RequestException) as e:
                        st.error(str(e))
    else:
        user = st.session_state.get("user") or {}
        st.write(f"User: **{user.get('firstName', '')} {user.get('lastName', '')}**")
        if st.button("Logout", key="logout_btn"):
            do_logout()

    st.divider()
    st.caption(f"API: {API_BASE}")



# UI

st.title("Clinic Administration")

if not is_logged_in():
    st.info("Log in from the sidebar to manage doctors and appointments.")
    st.stop()

token = st.session_state["token"]
doctor_form: DoctorForm | None = st.session_state.setdefault("doctor_form", None)
appointment_form: AppointmentForm | None = st.session_state.setdefault("appointment_form", None)

try:
    doctors = api_get("/doctors", token=token)
    appointments = api_get("/appointments", token=token)
except PermissionError:
    st.error(SESSION_EXPIRED_MESSAGE)
    st.stop()
except (ApiError, requests.RequestException) as e:
    st.error(f"API unreachable or error: {e}")
    st.stop()

tab1, tab2 = st.tabs(["Doctors", "Appointments"])



# TAB 1 - Doctors

with tab1:
    st.subheader("Doctors Management")

    c1, c2, c3 = st.columns([3, 2, 1])
    search = c1.text_input("Search", key="doc_search")
    role_filter = c2.selectbox("Specialty", [ALL] + SPECIALTY_LABELS, key="doc_role_filter")
    if c3.button("Add New Doctor", key="doc_add"):
        st.session_state["doctor_form"] = DoctorForm()
        st.rerun()

    shown = filter_doctors(doctors, search, role_filter)
    if not shown:
        st.info("No doctors found")
    for d in shown:
        row = st.columns([1, 4, 3, 1, 1])
        row[0].write(d["id"])
        row[1].write(d["name"])
        row[2].write(d["role"])
        if row[3].button("Edit", key=f"doc_edit_{d['id']}"):
            st.session_state["doctor_form"] = DoctorForm.from_record(d)
            st.rerun()
        if row[4].button("Delete", key=f"doc_del_{d['id']}"):
            problem = run_action(lambda: api_delete(f"/doctors/{d['id']}", token=token), UI_ERRORS)
            if problem:
                st.error(problem)
            else:
                st.rerun()

    if doctor_form is not None:
        st.divider()
        st.write(f"**{doctor_form.title}**")
        name = st.text_input("Doctor name", value=doctor_form.name, key=f"doc_name_{doctor_form.editing_id}")
        role = st.selectbox(
            "Specialty",
            SPECIALTY_LABELS,
            index=SPECIALTY_LABELS.index(doctor_form.role),
            key=f"doc_role_{doctor_form.editing_id}",
        )
        b1, b2 = st.columns(2)
        if b1.button("Cancel", key="doc_cancel"):
            st.session_state["doctor_form"] = None
            st.rerun()
        if b2.button("Save", key="doc_save"):
            form = DoctorForm(name=name, role=role, editing_id=doctor_form.editing_id)
            problem = form.validate()
            if problem:
                st.error(problem)
            else:
                if form.is_editing:
                    problem = run_action(lambda: api_put("/doctors", form.payload(), token=token), UI_ERRORS)
                else:
                    problem = run_action(lambda: api_post("/doctors", form.payload(), token=token), UI_ERRORS)
                if problem:
                    st.error(problem)
                else:
                    st.session_state["doctor_form"] = None
                    st.rerun()



# TAB 2 - Appointments

with tab2:
    st.subheader("Appointments Management")

    doctor_ids = [d["id"] for d in doctors]
    doctor_label = {d["id"]: f"{d['name']} ({d['role']})" for d in doctors}

    c1, c2, c3, c4 = st.columns([3, 2, 2, 1])
    search = c1.text_input("Search", key="app_search")
    day = c2.date_input("Date", value=None, key="app_day")
    doc_filter = c3.selectbox(
        "Doctor",
        [ALL] + doctor_ids,
        format_func=lambda i: i if i == ALL else doctor_label[i],
        key="app_doc_filter",
    )
    if c4.button("Add Appointment", key="app_add"):
        st.session_state["appointment_form"] = AppointmentForm()
        st.rerun()

    shown = filter_appointments(appointments, search, day.isoformat() if day else "", doc_filter)
    if not shown:
        st.info("No appointments found")
    for a in shown:
        row = st.columns([1, 3, 2, 1, 3, 1, 1])
        row[0].write(a["id"])
        row[1].write(a["patient_name"])
        row[2].write(a["date"])
        row[3].write(a["time"])
        row[4].write(f"{a['doctor_name']} ({a['doctor_role']})")
        if row[5].button("Edit", key=f"app_edit_{a['id']}"):
            st.session_state["appointment_form"] = AppointmentForm.from_record(a)
            st.rerun()
        if row[6].button("Delete", key=f"app_del_{a['id']}"):
            problem = run_action(lambda: api_delete(f"/appointments/{a['id']}", token=token), UI_ERRORS)
            if problem:
                st.error(problem)
            else:
                st.rerun()

    if appointment_form is not None:
        st.divider()
        st.write(f"**{appointment_form.title}**")
        suffix = appointment_form.editing_id
        patient = st.text_input("Patient name", value=appointment_form.patient_name, key=f"app_patient_{suffix}")
        picked_day = st.date_input(
            "Day",
            value=date.fromisoformat(appointment_form.date) if appointment_form.date else date.today(),
            key=f"app_date_{suffix}",
        )
        picked_time = st.time_input(
            "Time",
            value=time.fromisoformat(appointment_form.time) if appointment_form.time else time(9, 0),
            key=f"app_time_{suffix}",
        )
        picked_doctor = st.selectbox(
            "Doctor",
            doctor_ids,
            index=doctor_ids.index(appointment_form.doctor_id) if appointment_form.doctor_id in doctor_ids else 0,
            format_func=lambda i: doctor_label[i],
            key=f"app_doctor_{suffix}",
        ) if doctor_ids else None

        b1, b2 = st.columns(2)
        if b1.button("Cancel", key="app_cancel"):
            st.session_state["appointment_form"] = None
            st.rerun()
        if b2.button("Save", key="app_save"):
            form = appointment_form.with_values(
                patient_name=patient,
                date=picked_day.isoformat(),
                time=picked_time.strftime("%H:%M"),
                doctor_id=picked_doctor,
            )
            problem = form.validate()
            if problem:
                st.error(problem)
            else:
                if form.is_editing:
                    problem = run_action(
                        lambda: api_put(f"/appointments/{form.editing_id}", form.payload(), token=token), UI_ERRORS
                    )
                else:
                    problem = run_action(lambda: api_post("/appointments", form.payload(), token=token), UI_ERRORS)
                if problem:
                    st.error(problem)
                else:
                    st.session_state["appointment_form"] = None
                    st.rerun()
