from __future__ import annotations

import sys

from sqlalchemy import delete

from clinic.auth_models import User
from clinic.db import db_session


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print("Usage: python -m clinic.tools.reset_user <email>")
        raise SystemExit(2)

    email = argv[0].strip().lower()
    if not email:
        print("Invalid email.")
        raise SystemExit(2)

    with db_session() as s:
        removed = s.execute(delete(User).where(User.email == email)).rowcount

    print(f"OK: user '{email}' deleted." if removed else f"No user '{email}'.")


if __name__ == "__main__":
    main()
