from __future__ import annotations

from clinic.services import find_orphan_appointments


def main() -> int:
    """Report appointments pointing at a doctor that no longer exists."""
    orphans = find_orphan_appointments()
    if not orphans:
        print("No orphaned appointments.")
        return 0

    print(f"{len(orphans)} orphaned appointment(s):")
    for a in orphans:
        print(f"  {a['id']} | {a['date']} {a['time']} | {a['patient_name']} | missing doctor {a['doctor_id']}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
