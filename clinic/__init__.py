"""
Clinic administration backend.

Layout:
- db.py            : SQLAlchemy engine and sessions
- models.py        : ORM models (doctors, appointments) and specialties
- auth_models.py   : users for authentication
- errors.py        : domain errors mapped to HTTP status codes
- formatting.py    : canonical doctor names, dates and times
- booking_rules.py : booking rules (double booking, doctor deletion)
- services.py      : doctor and appointment CRUD
- api_main.py      : FastAPI REST API
- ui_state.py      : form state and filters for the Streamlit UI
- cli.py           : operator commands
"""
