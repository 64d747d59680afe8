"""Test payload generation.

Decouples what data is sent from the step definitions. Every builder starts
from a fresh valid baseline and changes exactly one thing, so a negative
test isolates a single variable.
"""

from __future__ import annotations

import calendar
import random
import re
import time
from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from typing import Any

from booker.config import EnvironmentConfig
from booker.constants import (
    CHECKIN_JITTER_DAYS,
    CHECKIN_OFFSET_MONTHS,
    ROOM_ID_MAX_EXCLUSIVE,
    ROOM_ID_MIN,
    STAY_LENGTH_DAYS,
)
from booker.models import Booking, BookingDates, RawPayload, TokenCredential

NESTED_DATE_FIELDS = ("checkin", "checkout")
BOOKING_FIELDS = (
    "roomid",
    "firstname",
    "lastname",
    "depositpaid",
    "bookingdates",
    "email",
    "phone",
)


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def checkin_window(today: date | None = None) -> tuple[date, date]:
    """Return the inclusive range generated check-in dates fall into."""
    today = today or date.today()
    first = add_months(today, CHECKIN_OFFSET_MONTHS)
    return first, first + timedelta(days=CHECKIN_JITTER_DAYS - 1)


def valid_booking() -> Booking:
    """Generate a fully valid booking baseline.

    Check-in lands two months out plus a jitter taken from the wall clock in
    milliseconds, the stay lasts four days and the room id is random, which
    keeps concurrent callers from colliding on the same room and dates.
    """
    start, _ = checkin_window()
    jitter = time.time_ns() // 1_000_000 % CHECKIN_JITTER_DAYS
    checkin = start + timedelta(days=jitter)
    checkout = checkin + timedelta(days=STAY_LENGTH_DAYS)

    return Booking(
        roomid=random.randrange(ROOM_ID_MIN, ROOM_ID_MAX_EXCLUSIVE),
        firstname="John",
        lastname="Doe",
        depositpaid=True,
        bookingdates=BookingDates(
            checkin=checkin.isoformat(),
            checkout=checkout.isoformat(),
        ),
        email="john.doe@example.com",
        phone="07911123456",
    )


def booking_with_firstname(firstname: str) -> Booking:
    booking = valid_booking()
    booking.firstname = firstname
    return booking


def booking_with_lastname(lastname: str) -> Booking:
    booking = valid_booking()
    booking.lastname = lastname
    return booking


def booking_with_phone(phone: str) -> Booking:
    booking = valid_booking()
    booking.phone = phone
    return booking


def booking_with_email(email: str) -> Booking:
    booking = valid_booking()
    booking.email = email
    return booking


def booking_with_dates(checkin: str, checkout: str) -> Booking:
    booking = valid_booking()
    booking.bookingdates = BookingDates(checkin=checkin, checkout=checkout)
    return booking


_SINGLE_FIELD_BUILDERS = {
    "firstname": booking_with_firstname,
    "lastname": booking_with_lastname,
    "phone": booking_with_phone,
    "email": booking_with_email,
}


def booking_with_field(field_name: str, value: str) -> Booking:
    """Build a valid booking with one string field overridden.

    Parameters
    ----------
    field_name : str
        One of firstname, lastname, phone, email
    value : str
        Value to put in that field

    Returns
    -------
    Booking
        Booking differing from the baseline in that field only

    Raises
    ------
    ValueError
        If no builder is mapped for the field
    """
    try:
        builder = _SINGLE_FIELD_BUILDERS[field_name]
    except KeyError:
        raise ValueError(f"No factory method mapped for field: '{field_name}'") from None

    return builder(value)


def booking_with_room_id_as_string(value: str) -> RawPayload:
    """Booking whose roomid is a string instead of an integer."""
    payload = RawPayload.from_model(valid_booking())
    payload.data["roomid"] = value
    return payload


def booking_with_room_id_as_empty_string() -> RawPayload:
    return booking_with_room_id_as_string("")


def booking_with_deposit_paid_as_integer(value: int) -> RawPayload:
    """Booking whose depositpaid is an integer instead of a boolean."""
    payload = RawPayload.from_model(valid_booking())
    payload.data["depositpaid"] = value
    return payload


def booking_without_field(field_name: str) -> RawPayload:
    """Remove a key from a valid booking instead of sending null.

    ``checkin`` and ``checkout`` are removed from the nested
    ``bookingdates`` object.

    Parameters
    ----------
    field_name : str
        Top-level booking field or one of the nested date fields

    Returns
    -------
    RawPayload
        Payload where the key is absent from the serialized JSON

    Raises
    ------
    ValueError
        If the field is not part of a booking
    """
    payload = RawPayload.from_model(valid_booking())

    if field_name in NESTED_DATE_FIELDS:
        del payload.data["bookingdates"][field_name]
    elif field_name in BOOKING_FIELDS:
        del payload.data[field_name]
    else:
        raise ValueError(f"Unknown booking field: '{field_name}'")

    return payload


def booking_with_null_field(field_name: str) -> RawPayload:
    """Keep a key in a valid booking but set it to null."""
    payload = RawPayload.from_model(valid_booking())

    if field_name in NESTED_DATE_FIELDS:
        payload.data["bookingdates"][field_name] = None
    elif field_name in BOOKING_FIELDS:
        payload.data[field_name] = None
    else:
        raise ValueError(f"Unknown booking field: '{field_name}'")

    return payload


def token_request_without_password(username: str) -> RawPayload:
    """Auth payload where the password key is absent rather than null."""
    return RawPayload({"username": username})


def admin_credentials(config: EnvironmentConfig) -> TokenCredential:
    return TokenCredential(username=config.admin_username, password=config.admin_password)


def booking_from_table(rows: Iterable[tuple[str, str]] | Mapping[str, str]) -> Booking:
    """Build a booking from key/value pairs as written in a feature table.

    Parameters
    ----------
    rows : Iterable[tuple[str, str]] | Mapping[str, str]
        Pairs of field name and textual value. Must cover roomid, firstname,
        lastname, depositpaid, checkin, checkout, email and phone

    Returns
    -------
    Booking
        Typed booking with roomid parsed as int and depositpaid as bool

    Raises
    ------
    ValueError
        If a field is missing or roomid is not an integer
    """
    data: dict[str, Any] = dict(rows.items() if isinstance(rows, Mapping) else rows)

    missing = [
        name
        for name in ("roomid", "firstname", "lastname", "depositpaid", "email", "phone")
        + NESTED_DATE_FIELDS
        if name not in data
    ]
    if missing:
        raise ValueError(f"Booking table is missing fields: {', '.join(missing)}")

    return Booking(
        roomid=int(data["roomid"]),
        firstname=data["firstname"],
        lastname=data["lastname"],
        depositpaid=str(data["depositpaid"]).strip().lower() == "true",
        bookingdates=BookingDates(
            checkin=resolve_date(data["checkin"]),
            checkout=resolve_date(data["checkout"]),
        ),
        email=data["email"],
        phone=data["phone"],
    )


_RELATIVE_DATE = re.compile(r"^today(?:\s*([+-])\s*(\d+))?$")


def resolve_date(value: str, today: date | None = None) -> str:
    """Resolve ``today+N`` / ``today-N`` to an ISO date, pass others through.

    Lets feature tables state dates relative to the run day so they never
    drift into the past or too far into the future.
    """
    match = _RELATIVE_DATE.match(value.strip())
    if match is None:
        return value

    today = today or date.today()
    sign, days = match.groups()
    offset = int(days) if days else 0
    if sign == "-":
        offset = -offset

    return (today + timedelta(days=offset)).isoformat()
