from __future__ import annotations

import logging
import os
from typing import Any

from dotenv import load_dotenv
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from clinic.auth_models import User
from clinic.auth_security import create_access_token, get_user_id
from clinic.auth_service import authenticate, get_user_by_id, public_user, register_user
from clinic.errors import AuthError, ClinicError, StorageError
from clinic.log import configure_logging
from clinic.seed import seed_base
from clinic.services import (
    create_appointment,
    create_doctor,
    delete_appointment,
    delete_doctor,
    init_db,
    list_appointments_flat,
    list_doctors_flat,
    update_appointment,
    update_doctor,
)

load_dotenv()

logger = logging.getLogger(__name__)

API_PREFIX = os.getenv("CLINIC_API_PREFIX", "/api").rstrip("/")
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "CLINIC_CORS_ORIGINS",
        "http://localhost:3000,http://localhost:3001,http://localhost:8501",
    ).split(",")
    if o.strip()
]

# OAuth2 Bearer (Authorization: Bearer <token>); missing header handled in get_current_user
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{API_PREFIX}/login", auto_error=False)

app = FastAPI(title="Clinic Admin API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

router = APIRouter()


# Startup

@app.on_event("startup")
def startup() -> None:
    configure_logging()
    init_db()
    if os.getenv("CLINIC_SEED_DEMO", "0") == "1":
        seed_base()



# Error mapping: every failure leaves as {"message": ...}

@app.exception_handler(ClinicError)
def clinic_error_handler(request: Request, exc: ClinicError) -> JSONResponse:
    if isinstance(exc, StorageError):
        logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc.__cause__ or exc)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(SQLAlchemyError)
def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": StorageError().message})


@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any(e.get("type") == "missing" for e in errors):
        message = "All fields are required"
    else:
        fields = ", ".join(str(e["loc"][-1]) for e in errors if e.get("loc"))
        message = f"Invalid value for: {fields}" if fields else "Invalid request"
    return JSONResponse(status_code=400, content={"message": message})



# Schemas

class RegisterIn(BaseModel):
    firstName: str | None = None
    lastName: str | None = None
    email: str | None = None
    password: str | None = None


class LoginIn(BaseModel):
    email: str | None = None
    password: str | None = None


class DoctorIn(BaseModel):
    name: str | None = None
    role: str | None = None


class DoctorUpdateIn(DoctorIn):
    doctorId: int | None = None


class AppointmentIn(BaseModel):
    # date accepts 'YYYY-MM-DD' or an ISO date-time
    patient_name: str | None = None
    date: str | None = None
    time: str | None = None
    doctor_id: int | None = None



# Auth dependency

def get_current_user(token: str | None = Depends(oauth2_scheme)) -> User:
    if not token:
        raise AuthError("Not authenticated")

    # strip accidental spaces / quotes
    token = token.strip().strip('"').strip("'")

    user_id = get_user_id(token)
    if user_id is None:
        raise AuthError("Invalid token")

    u = get_user_by_id(user_id)
    if not u or not u.is_active:
        raise AuthError("Invalid user")
    return u



# AUTH endpoints

@router.post("/register")
def register(payload: RegisterIn) -> dict[str, Any]:
    register_user(payload.firstName, payload.lastName, payload.email, payload.password)
    return {"message": "User registered"}


@router.post("/login")
def login(payload: LoginIn) -> dict[str, Any]:
    u = authenticate(payload.email, payload.password)
    token = create_access_token(u.id, extra={"email": u.email})
    return {
        "message": "Login success",
        "user": public_user(u),
        "access_token": token,
        "token_type": "bearer",
    }


@router.get("/me")
def me(user: User = Depends(get_current_user)) -> dict[str, Any]:
    return public_user(user)


@router.get("/health")
def health() -> dict[str, Any]:
    return {"ok": True}



# DOCTORS

@router.get("/doctors")
def api_doctors(user: User = Depends(get_current_user)) -> list[dict]:
    return list_doctors_flat()


@router.post("/doctors")
def api_create_doctor(payload: DoctorIn, user: User = Depends(get_current_user)) -> dict[str, Any]:
    return create_doctor(payload.name, payload.role)


@router.put("/doctors")
def api_update_doctor(payload: DoctorUpdateIn, user: User = Depends(get_current_user)) -> dict[str, Any]:
    return update_doctor(payload.doctorId, payload.name, payload.role)


@router.delete("/doctors/{doctor_id}")
def api_delete_doctor(doctor_id: int, user: User = Depends(get_current_user)) -> dict[str, Any]:
    delete_doctor(doctor_id)
    return {"message": "Doctor deleted"}



# APPOINTMENTS

@router.get("/appointments")
def api_appointments(user: User = Depends(get_current_user)) -> list[dict]:
    return list_appointments_flat()


@router.post("/appointments")
def api_create_appointment(payload: AppointmentIn, user: User = Depends(get_current_user)) -> dict[str, Any]:
    return create_appointment(payload.patient_name, payload.date, payload.time, payload.doctor_id)


@router.put("/appointments/{appointment_id}")
def api_update_appointment(
    appointment_id: int,
    payload: AppointmentIn,
    user: User = Depends(get_current_user),
) -> dict[str, Any]:
    appointment = update_appointment(
        appointment_id, payload.patient_name, payload.date, payload.time, payload.doctor_id
    )
    return {"message": "Appointment updated", "appointment": appointment}


@router.delete("/appointments/{appointment_id}")
def api_delete_appointment(appointment_id: int, user: User = Depends(get_current_user)) -> dict[str, Any]:
    delete_appointment(appointment_id)
    return {"message": "Appointment deleted"}


app.include_router(router, prefix=API_PREFIX)
