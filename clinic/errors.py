from __future__ import annotations


class ClinicError(Exception):
    """Base for domain errors; the API renders them as {"message": ...}."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ClinicValidationError(ClinicError):
    status_code = 400


class ConflictError(ClinicError):
    """Double-booked slot or doctor still referenced by appointments."""

    status_code = 400


class NotFoundError(ClinicError):
    status_code = 404


class AuthError(ClinicError):
    status_code = 401


class StorageError(ClinicError):
    """Persistence layer failure. The client only sees a generic message."""

    status_code = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
