"""Stateless HTTP clients for the booking API."""

from booker.clients.auth import AuthClient, cookie_header, extract_token
from booker.clients.base import ApiClient
from booker.clients.booking import BookingClient

__all__ = [
    "ApiClient",
    "AuthClient",
    "BookingClient",
    "cookie_header",
    "extract_token",
]
