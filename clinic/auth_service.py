from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from clinic.auth_models import User
from clinic.auth_security import hash_password, verify_password
from clinic.db import db_session
from clinic.errors import AuthError, ClinicValidationError
from clinic.formatting import is_valid_email

logger = logging.getLogger(__name__)


def register_user(first_name: str, last_name: str, email: str, password: str) -> int:
    if not all(v and v.strip() for v in (first_name, last_name, email)) or not password:
        raise ClinicValidationError("All data required")

    email = email.strip().lower()
    if not is_valid_email(email):
        raise ClinicValidationError("Invalid email")

    with db_session() as s:
        exists = s.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if exists:
            raise ClinicValidationError("Email exists")

        u = User(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email,
            password_hash=hash_password(password),
            is_active=True,
        )
        s.add(u)
        try:
            s.flush()
        except IntegrityError as e:
            raise ClinicValidationError("Email exists") from e

        logger.info("User %s registered", u.id)
        return u.id


def authenticate(email: str, password: str) -> User:
    email = (email or "").strip().lower()
    with db_session() as s:
        u = s.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if not u or not u.is_active or not password or not verify_password(password, u.password_hash):
            logger.warning("Failed login for %s", email or "<empty>")
            raise AuthError("Invalid credentials")
        return u


def get_user_by_id(user_id: int) -> User | None:
    with db_session() as s:
        return s.get(User, user_id)


def public_user(u: User) -> dict:
    """User fields safe to send to clients (never the password hash)."""
    return {
        "id": u.id,
        "firstName": u.first_name,
        "lastName": u.last_name,
        "email": u.email,
    }
