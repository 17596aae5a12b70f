from __future__ import annotations

from sqlalchemy import func, select

from clinic.auth_models import User
from clinic.auth_security import create_access_token, get_user_id, hash_password, verify_password
from clinic.db import db_session

REGISTRATION = {"firstName": "Ada", "lastName": "Lovelace", "email": "Ada@Clinic.test", "password": "secret1"}


def _user_count() -> int:
    with db_session() as s:
        return s.execute(select(func.count(User.id))).scalar_one()


def test_password_hashing():
    h = hash_password("secret1")
    assert h != "secret1"
    assert verify_password("secret1", h)
    assert not verify_password("secret2", h)


def test_token_round_trip():
    assert get_user_id(create_access_token(7)) == 7
    assert get_user_id("garbage") is None


def test_register_and_login(client):
    r = client.post("/api/register", json=REGISTRATION)
    assert r.status_code == 200
    assert r.json() == {"message": "User registered"}

    r = client.post("/api/login", json={"email": "ada@clinic.test", "password": "secret1"})
    assert r.status_code == 200
    body = r.json()
    assert body["user"]["email"] == "ada@clinic.test"
    assert body["user"]["firstName"] == "Ada"
    assert body["token_type"] == "bearer"
    assert not any("password" in k for k in body["user"])

    me = client.get("/api/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json() == body["user"]


def test_duplicate_email_rejected(client):
    assert client.post("/api/register", json=REGISTRATION).status_code == 200
    r = client.post("/api/register", json=REGISTRATION | {"email": "ada@clinic.test", "firstName": "Other"})
    assert r.status_code == 400
    assert r.json() == {"message": "Email exists"}
    assert _user_count() == 1


def test_registration_validation(client):
    r = client.post("/api/register", json={"email": "ada@clinic.test", "password": "secret1"})
    assert r.status_code == 400
    assert r.json() == {"message": "All data required"}

    r = client.post("/api/register", json=REGISTRATION | {"email": "not-an-email"})
    assert r.status_code == 400
    assert r.json() == {"message": "Invalid email"}
    assert _user_count() == 0


def test_bad_credentials(client):
    client.post("/api/register", json=REGISTRATION)
    for creds in ({"email": "ada@clinic.test", "password": "wrong"}, {"email": "nobody@clinic.test", "password": "x"}, {}):
        r = client.post("/api/login", json=creds)
        assert r.status_code == 401
        assert r.json() == {"message": "Invalid credentials"}


def test_password_hash_is_stored(client):
    client.post("/api/register", json=REGISTRATION)
    with db_session() as s:
        u = s.execute(select(User)).scalar_one()
    assert u.password_hash != "secret1"
    assert verify_password("secret1", u.password_hash)
