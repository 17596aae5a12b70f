from __future__ import annotations

import argparse
import sys

from clinic.auth_service import register_user
from clinic.errors import ClinicError
from clinic.log import configure_logging
from clinic.seed import seed_base
from clinic.services import (
    create_appointment,
    create_doctor,
    delete_appointment,
    delete_doctor,
    init_db,
    list_appointments_flat,
    list_doctors,
    update_appointment,
)


def cmd_init(args: argparse.Namespace) -> None:
    init_db()
    if args.seed:
        seed_base()
    print("Database initialized." + (" Sample doctors loaded." if args.seed else ""))


def cmd_list(args: argparse.Namespace) -> None:
    if args.entity == "doctors":
        for d in list_doctors():
            print(f"{d.id} | {d.name} | {d.role.value}")
    elif args.entity == "appointments":
        for a in list_appointments_flat():
            print(f"{a['id']} | {a['date']} {a['time']} | {a['patient_name']} | {a['doctor_name']} ({a['doctor_role']})")


def cmd_add_doctor(args: argparse.Namespace) -> None:
    d = create_doctor(args.name, args.role)
    print(f"Doctor created: {d['id']} | {d['name']} | {d['role']}")


def cmd_delete_doctor(args: argparse.Namespace) -> None:
    delete_doctor(args.doctor_id)
    print("Doctor deleted.")


def cmd_book(args: argparse.Namespace) -> None:
    a = create_appointment(args.patient, args.date, args.time, args.doctor_id)
    print(f"Appointment booked: {a['id']} | {a['date']} {a['time']} with {a['doctor_name']}")


def cmd_reschedule(args: argparse.Namespace) -> None:
    a = update_appointment(args.appointment_id, args.patient, args.date, args.time, args.doctor_id)
    print(f"Appointment updated: {a['id']} | {a['date']} {a['time']} with {a['doctor_name']}")


def cmd_cancel(args: argparse.Namespace) -> None:
    delete_appointment(args.appointment_id)
    print("Appointment deleted.")


def cmd_add_user(args: argparse.Namespace) -> None:
    user_id = register_user(args.first_name, args.last_name, args.email, args.password)
    print(f"User created: {user_id}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="clinic", description="Clinic administration CLI")
    sub = p.add_subparsers(required=True)

    p_init = sub.add_parser("init", help="Create the database tables")
    p_init.add_argument("--seed", action="store_true", help="Also load sample doctors")
    p_init.set_defaults(func=cmd_init)

    p_list = sub.add_parser("list", help="List records")
    p_list.add_argument("entity", choices=["doctors", "appointments"])
    p_list.set_defaults(func=cmd_list)

    p_addd = sub.add_parser("add-doctor", help="Create a doctor")
    p_addd.add_argument("--name", required=True)
    p_addd.add_argument("--role", required=True, help="General, Dentist, Cardiologist, ...")
    p_addd.set_defaults(func=cmd_add_doctor)

    p_deld = sub.add_parser("delete-doctor", help="Delete a doctor without appointments")
    p_deld.add_argument("--doctor-id", type=int, required=True)
    p_deld.set_defaults(func=cmd_delete_doctor)

    p_book = sub.add_parser("book", help="Book an appointment")
    p_book.add_argument("--patient", required=True)
    p_book.add_argument("--date", required=True, help="YYYY-MM-DD")
    p_book.add_argument("--time", required=True, help="HH:MM")
    p_book.add_argument("--doctor-id", type=int, required=True)
    p_book.set_defaults(func=cmd_book)

    p_resch = sub.add_parser("reschedule", help="Update an appointment")
    p_resch.add_argument("--appointment-id", type=int, required=True)
    p_resch.add_argument("--patient", required=True)
    p_resch.add_argument("--date", required=True, help="YYYY-MM-DD")
    p_resch.add_argument("--time", required=True, help="HH:MM")
    p_resch.add_argument("--doctor-id", type=int, required=True)
    p_resch.set_defaults(func=cmd_reschedule)

    p_cancel = sub.add_parser("cancel", help="Delete an appointment")
    p_cancel.add_argument("--appointment-id", type=int, required=True)
    p_cancel.set_defaults(func=cmd_cancel)

    p_user = sub.add_parser("add-user", help="Create a staff login")
    p_user.add_argument("--first-name", required=True)
    p_user.add_argument("--last-name", required=True)
    p_user.add_argument("--email", required=True)
    p_user.add_argument("--password", required=True)
    p_user.set_defaults(func=cmd_add_user)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging("WARNING")
    init_db()  # make sure the tables exist
    try:
        args.func(args)
    except ClinicError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
