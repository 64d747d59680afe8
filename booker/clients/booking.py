"""Client for the booking endpoints."""

from __future__ import annotations

from urllib.parse import quote

from booker.clients.base import ApiClient
from booker.constants import BOOKING_BY_ID_PATH, BOOKING_PATH, HEALTH_PATH
from booker.exchange import HttpExchange
from booker.models import Payload

BookingId = int | str | None


def booking_path(booking_id: BookingId) -> str:
    """Render ``/booking/{id}`` for any id, including malformed ones.

    The id is URL-quoted as a single path segment; None renders as an empty
    segment.
    """
    segment = "" if booking_id is None else quote(str(booking_id), safe="")
    return BOOKING_BY_ID_PATH.format(id=segment)


class BookingClient(ApiClient):
    """Client for /booking and /booking/{id}.

    Payloads accept ``RawPayload`` next to ``Booking`` because negative
    tests send values the strict model cannot hold, such as a string
    roomid or an integer depositpaid. ``auth_header=None`` sends the call
    unauthenticated, which is how 401 responses are asserted.
    """

    def create_booking(self, payload: Payload) -> HttpExchange:
        return self._request("POST", BOOKING_PATH, payload=payload)

    def get_booking(self, booking_id: BookingId, auth_header: str | None = None) -> HttpExchange:
        return self._request("GET", booking_path(booking_id), cookie=auth_header)

    def update_booking(
        self,
        booking_id: BookingId,
        payload: Payload,
        auth_header: str | None = None,
    ) -> HttpExchange:
        """Fully replace a booking with PUT."""
        return self._request(
            "PUT", booking_path(booking_id), payload=payload, cookie=auth_header
        )

    def partial_update_booking(
        self,
        booking_id: BookingId,
        payload: Payload,
        auth_header: str | None = None,
    ) -> HttpExchange:
        """Partially update a booking with PATCH.

        The live API answers 405 Method Not Allowed here; the call exists
        so scenarios can assert that behaviour.
        """
        return self._request(
            "PATCH", booking_path(booking_id), payload=payload, cookie=auth_header
        )

    def delete_booking(self, booking_id: BookingId, auth_header: str | None = None) -> HttpExchange:
        return self._request("DELETE", booking_path(booking_id), cookie=auth_header)

    def check_health(self) -> HttpExchange:
        return self._request("GET", HEALTH_PATH)
