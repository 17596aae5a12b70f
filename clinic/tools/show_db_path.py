from __future__ import annotations

from clinic.db import engine


def main() -> None:
    print("ENGINE URL:", engine.url.render_as_string(hide_password=True))
    print("DB FILE   :", engine.url.database)


if __name__ == "__main__":
    main()
