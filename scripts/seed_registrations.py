"""Seed the registrations collection with demo data.

Usage:
    python scripts/seed_registrations.py               (skip if data exists)
    python scripts/seed_registrations.py --clear       (replace existing)
    python scripts/seed_registrations.py --force       (add even if data exists)
    python scripts/seed_registrations.py --static      (fixed fixtures only)
    python scripts/seed_registrations.py --count=50

Honors GOOGLE_APPLICATION_CREDENTIALS and FIRESTORE_EMULATOR_HOST.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import random
import sys
from collections import Counter
from datetime import datetime, timedelta, timezone
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.idmc_registration.idmc_registration.checkin.qr import attendee_qr_payload
from src.idmc_registration.idmc_registration.core.enums import CheckInMethod, RegistrationStatus
from src.idmc_registration.idmc_registration.core.logging import setup_logging
from src.idmc_registration.idmc_registration.firestore import collections
from src.idmc_registration.idmc_registration.firestore.client import (
    FirestoreConfig,
    commit_in_batches,
    create_client,
)
from src.idmc_registration.idmc_registration.registrations.documents import registration_to_document
from src.idmc_registration.idmc_registration.registrations.model import (
    Attendee,
    AttendeeCheckIn,
    AttendeeQRCode,
    Church,
    Payment,
    Registration,
)
from src.idmc_registration.idmc_registration.registrations.short_code import (
    build_registration_id,
    generate_short_code,
    short_code_suffix,
)

logger = logging.getLogger("seed_registrations")

FIRST_NAMES = [
    "Juan", "Maria", "Jose", "Ana", "Pedro", "Rosa", "Carlos", "Elena",
    "Miguel", "Sofia", "Antonio", "Isabella", "Francisco", "Gabriela",
    "Roberto", "Carmen", "Daniel", "Lucia", "Manuel", "Patricia",
]
LAST_NAMES = [
    "Santos", "Reyes", "Cruz", "Garcia", "Mendoza", "Torres", "Flores",
    "Rivera", "Gonzales", "Ramos", "Bautista", "Villanueva", "De Leon",
    "Aquino", "Castro", "Morales", "Dela Cruz", "Pascual", "Navarro",
]
EMAIL_DOMAINS = ["gmail.com", "yahoo.com", "outlook.com", "icloud.com", "proton.me"]
CHURCHES = [
    "GCF South Metro",
    "GCF Ortigas",
    "Victory Alabang",
    "Christ's Commission Fellowship - Pasig",
    "Jesus Is Lord Church - Makati",
    "Greenhills Christian Fellowship - Cavite",
]
MINISTRY_ROLES = ["Member", "Small Group Leader", "Worship Team", "Usher", "Youth Ministry", "Media Ministry"]
PHONE_PREFIXES = ["0917", "0918", "0919", "0920", "0927", "0939", "0949"]
PAYMENT_METHODS = ["gcash", "gcash", "bank_transfer", "cash"]
STATUSES = [
    RegistrationStatus.CONFIRMED,
    RegistrationStatus.CONFIRMED,
    RegistrationStatus.CONFIRMED,
    RegistrationStatus.PENDING_VERIFICATION,
    RegistrationStatus.PENDING_PAYMENT,
    RegistrationStatus.CANCELLED,
]

# (short code, first, last, category, status, amount per head, guests, checked in)
STATIC_FIXTURES = [
    ("A3K7MN", "Juan", "Santos", "regular", RegistrationStatus.CONFIRMED, 2500, 0, True),
    ("C9HTPQ", "Maria", "Reyes", "regular", RegistrationStatus.CONFIRMED, 2500, 0, False),
    ("D4FJNR", "Pedro", "Cruz", "regular", RegistrationStatus.PENDING_VERIFICATION, 2500, 0, False),
    ("E7GKUV", "Ana", "Garcia", "student_senior", RegistrationStatus.CONFIRMED, 1500, 0, False),
    ("F3CMWY", "Carlos", "Mendoza", "regular", RegistrationStatus.PENDING_PAYMENT, 2500, 0, False),
    ("G6DNXA", "Elena", "Torres", "regular", RegistrationStatus.CANCELLED, 2500, 0, False),
    ("J4FQRD", "Sofia", "Rivera", "regular", RegistrationStatus.CONFIRMED, 2500, 1, False),
    ("M3HUVF", "Antonio", "Ramos", "regular", RegistrationStatus.CONFIRMED, 2500, 2, False),
]


def _email(first: str, last: str, rng: random.Random) -> str:
    local = f"{first}.{last}".lower().replace(" ", "")
    return f"{local}{rng.randint(1, 99)}@{rng.choice(EMAIL_DOMAINS)}"


def _phone(rng: random.Random) -> str:
    return f"{rng.choice(PHONE_PREFIXES)}{rng.randint(0, 9999999):07d}"


def _guest(rng: random.Random, last: str | None = None) -> Attendee:
    first, last = rng.choice(FIRST_NAMES), last or rng.choice(LAST_NAMES)
    return Attendee(first_name=first, last_name=last, email=_email(first, last, rng), category="regular")


def _build(
    code: str,
    primary: Attendee,
    guests: list[Attendee],
    *,
    category: str,
    status: RegistrationStatus,
    per_head: float,
    checked_in: bool,
    church: str,
    method: str,
    created_at: datetime,
) -> Registration:
    registration_id = build_registration_id(code)
    total_attendees = 1 + len(guests)
    confirmed = status == RegistrationStatus.CONFIRMED
    paid = status in (RegistrationStatus.CONFIRMED, RegistrationStatus.PENDING_VERIFICATION)
    total = per_head * total_attendees
    checked_at = created_at + timedelta(days=2) if checked_in else None

    return Registration(
        registration_id=registration_id,
        short_code=code,
        short_code_suffix=short_code_suffix(code),
        primary_attendee=primary,
        status=status,
        additional_attendees=tuple(guests),
        church=Church(name=church, city="Metro Manila"),
        category=category,
        pricing_tier="regular",
        total_amount=total,
        payment=Payment(
            status=status,
            method=method if paid else None,
            proof_url=f"https://storage.example.com/proofs/{code}.jpg" if paid and method != "cash" else None,
            amount_paid=total if confirmed else 0.0,
            uploaded_at=created_at if paid else None,
            verified_by="seed-script" if confirmed else None,
            verified_at=created_at + timedelta(hours=6) if confirmed else None,
        ),
        payment_deadline=created_at + timedelta(days=7),
        attendee_check_ins=tuple(
            AttendeeCheckIn(
                attendee_index=i,
                checked_in=checked_in,
                checked_in_at=checked_at,
                checked_in_by="seed-script" if checked_in else None,
                method=CheckInMethod.MANUAL if checked_in else None,
            )
            for i in range(total_attendees)
        ),
        checked_in=checked_in,
        checked_in_at=checked_at,
        checked_in_by="seed-script" if checked_in else None,
        checked_in_method=CheckInMethod.MANUAL if checked_in else None,
        qr_code_data=registration_id if confirmed else None,
        attendee_qr_codes=tuple(
            AttendeeQRCode(attendee_index=i, qr_data=attendee_qr_payload(registration_id, i))
            for i in range(total_attendees)
        )
        if confirmed
        else (),
        created_at=created_at,
        updated_at=created_at + timedelta(hours=6),
    )


def static_registrations(*, now: datetime) -> list[Registration]:
    rng = random.Random(2026)
    items = []
    for i, (code, first, last, category, status, per_head, guests, checked_in) in enumerate(STATIC_FIXTURES):
        primary = Attendee(
            first_name=first,
            last_name=last,
            email=f"{first}.{last}@gmail.com".lower(),
            cellphone=f"0917123{4567 + i:04d}",
            ministry_role=MINISTRY_ROLES[i % len(MINISTRY_ROLES)],
            category=category,
        )
        companions = [_guest(rng, last) for _ in range(guests)]
        items.append(
            _build(
                code,
                primary,
                companions,
                category=category,
                status=status,
                per_head=per_head,
                checked_in=checked_in,
                church=CHURCHES[i % len(CHURCHES)],
                method="gcash",
                created_at=now - timedelta(days=30 - i),
            )
        )
    return items


def random_registration(rng: random.Random, *, now: datetime) -> Registration:
    first, last = rng.choice(FIRST_NAMES), rng.choice(LAST_NAMES)
    category = rng.choice(["regular", "regular", "regular", "student_senior"])
    status = rng.choice(STATUSES)
    per_head = rng.choice([1500, 1800, 2000] if category == "student_senior" else [2000, 2500, 3000])
    guests = [_guest(rng) for _ in range(rng.randint(1, 3) if rng.random() > 0.85 else 0)]
    primary = Attendee(
        first_name=first,
        last_name=last,
        email=_email(first, last, rng),
        cellphone=_phone(rng),
        ministry_role=rng.choice(MINISTRY_ROLES),
        category=category,
    )
    created_at = now - timedelta(days=rng.randint(0, 30), hours=rng.randint(0, 12))
    return _build(
        generate_short_code(rng),
        primary,
        guests,
        category=category,
        status=status,
        per_head=per_head,
        checked_in=status == RegistrationStatus.CONFIRMED and rng.random() > 0.6,
        church=rng.choice(CHURCHES),
        method=rng.choice(PAYMENT_METHODS),
        created_at=created_at,
    )


def build_seed_registrations(count: int, *, static_only: bool = False, rng: random.Random | None = None, now: datetime | None = None) -> list[Registration]:
    """Static fixtures first, topped up with random registrations to ``count``."""
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    items = static_registrations(now=now)
    if static_only:
        return items

    seen = {r.registration_id for r in items}
    while len(items) < count:
        registration = random_registration(rng, now=now)
        if registration.registration_id in seen:
            continue
        seen.add(registration.registration_id)
        items.append(registration)
    return items


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed IDMC registrations")
    parser.add_argument("--clear", action="store_true", help="delete existing registrations first")
    parser.add_argument("--force", action="store_true", help="seed even if registrations exist")
    parser.add_argument("--static", action="store_true", help="only write the fixed fixtures")
    parser.add_argument("--count", type=int, default=20, help="total registrations to write")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    fs = dict(settings.FIRESTORE_CONFIG)

    try:
        client = create_client(
            FirestoreConfig(
                project_id=str(fs["project_id"]),
                credentials_path=fs.get("credentials_path") or None,
                emulator_host=fs.get("emulator_host") or None,
            )
        )
        ref = client.collection(collections.REGISTRATIONS)
        existing = list(ref.select([]).stream())

        if existing and not args.clear and not args.force:
            print(f"Found {len(existing)} existing registrations. Use --clear to replace or --force to add anyway.")
            print("No changes made")
            return 0

        if args.clear and existing:
            deleted = commit_in_batches(client, (("delete", snap.reference, None) for snap in existing))
            print(f"Cleared {deleted} existing registrations")

        registrations = build_seed_registrations(args.count, static_only=args.static)
        written = commit_in_batches(
            client,
            (("set", ref.document(r.registration_id), registration_to_document(r)) for r in registrations),
        )
    except Exception:
        logger.exception("Seed failed")
        return 1

    print(f"OK: seeded {written} registrations")
    for status, n in sorted(Counter(r.status.value for r in registrations).items()):
        print(f"  - {status}: {n}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
