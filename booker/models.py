"""Request payload models for the booking API.

Happy-path payloads are strict dataclasses. Negative tests need wrong types
and missing keys the dataclasses cannot hold, so those travel as
``RawPayload``. Clients accept either variant through the same call surface.
"""

from __future__ import annotations

import copy
import json
from dataclasses import asdict, dataclass, field
from typing import Any, Union


@dataclass
class BookingDates:
    """Stay dates as ISO ``YYYY-MM-DD`` strings."""

    checkin: str
    checkout: str


@dataclass
class Booking:
    """Well-formed booking request body.

    Attributes
    ----------
    roomid : int
        Room identifier
    firstname : str
        Guest first name
    lastname : str
        Guest last name
    depositpaid : bool
        Whether the deposit has been paid
    bookingdates : BookingDates
        Check-in and check-out dates
    email : str
        Guest email address
    phone : str
        Guest phone number
    """

    roomid: int
    firstname: str
    lastname: str
    depositpaid: bool
    bookingdates: BookingDates
    email: str
    phone: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TokenCredential:
    """Username and password sent to the login endpoint. Never persisted."""

    username: str
    password: str = field(repr=False)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RawPayload:
    """Semi-structured JSON body for negative testing.

    A key missing from ``data`` is physically absent from the serialized
    JSON, which the API treats differently from a key holding null.
    """

    data: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self.data)

    @classmethod
    def from_model(cls, model: Booking | TokenCredential) -> RawPayload:
        """Convert a strict model into a mutable raw payload."""
        return cls(model.to_dict())


Payload = Union[Booking, RawPayload]
CredentialPayload = Union[TokenCredential, RawPayload]


def to_wire(payload: Booking | TokenCredential | RawPayload) -> dict[str, Any]:
    """Return the JSON-compatible structure sent for a payload."""
    if isinstance(payload, (Booking, TokenCredential, RawPayload)):
        return payload.to_dict()

    raise TypeError(f"Unsupported payload type: {type(payload).__name__}")


def serialize(payload: Booking | TokenCredential | RawPayload) -> str:
    """Serialize a payload to its JSON request body text."""
    return json.dumps(to_wire(payload))
