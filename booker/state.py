"""Scenario-scoped state store.

Each scenario gets its own ``ScenarioState``; nothing in it is visible to
other scenarios. Keys form a closed set and each key fixes the type of its
value, so ``state.get(AUTH_TOKEN)`` is always a ``str``.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from booker.exceptions import StateKeyNotFoundError
from booker.exchange import HttpExchange

T = TypeVar("T")


@dataclass(frozen=True)
class StateKey(Generic[T]):
    """Key of the scenario state with the value types it accepts."""

    name: str
    value_types: tuple[type, ...]

    def __repr__(self) -> str:
        return f"StateKey({self.name})"


BOOKING_ID: StateKey[int | str] = StateKey("BOOKING_ID", (int, str))
AUTH_TOKEN: StateKey[str] = StateKey("AUTH_TOKEN", (str,))
LAST_RESPONSE: StateKey[HttpExchange] = StateKey("LAST_RESPONSE", (HttpExchange,))
LAST_REQUEST_BODY: StateKey[str] = StateKey("LAST_REQUEST_BODY", (str,))

ALL_KEYS: frozenset[StateKey[Any]] = frozenset(
    {BOOKING_ID, AUTH_TOKEN, LAST_RESPONSE, LAST_REQUEST_BODY}
)


class ScenarioState:
    """Thread-safe key/value store for a single scenario.

    Hooks may read the state from another thread than the step that wrote
    it, so every access goes through a lock.

    Attributes
    ----------
    _data : dict[StateKey, Any]
        Stored values
    _lock : threading.Lock
        Protects concurrent access to the values
    """

    def __init__(self) -> None:
        self._data: dict[StateKey[Any], Any] = {}
        self._lock = threading.Lock()

    def set(self, key: StateKey[T], value: T) -> None:
        """Store a value.

        Parameters
        ----------
        key : StateKey[T]
            One of the module-level keys
        value : T
            Value matching the key's declared type

        Raises
        ------
        KeyError
            If the key is not one of the declared keys
        TypeError
            If the value does not match the key's type
        """
        _check_key(key)

        if isinstance(value, bool) or not isinstance(value, key.value_types):
            expected = " | ".join(t.__name__ for t in key.value_types)
            raise TypeError(
                f"{key.name} expects {expected}, got {type(value).__name__}"
            )

        with self._lock:
            self._data[key] = value

    def get(self, key: StateKey[T]) -> T:
        """Return the value stored under a key.

        Raises
        ------
        StateKeyNotFoundError
            If nothing was stored under the key
        """
        _check_key(key)

        with self._lock:
            try:
                return self._data[key]
            except KeyError:
                raise StateKeyNotFoundError(
                    f"{key.name} has not been set in this scenario"
                ) from None

    def find(self, key: StateKey[T], default: T | None = None) -> T | None:
        """Return the value under a key, or default when absent."""
        _check_key(key)

        with self._lock:
            return self._data.get(key, default)

    def contains(self, key: StateKey[Any]) -> bool:
        with self._lock:
            return key in self._data

    def __contains__(self, key: StateKey[Any]) -> bool:
        return self.contains(key)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def snapshot(self) -> dict[str, Any]:
        """Return a name-keyed copy of the current values."""
        with self._lock:
            return {key.name: value for key, value in self._data.items()}


def _check_key(key: StateKey[Any]) -> None:
    if key not in ALL_KEYS:
        raise KeyError(f"Unknown scenario state key: {key!r}")


def record_exchange(
    state: ScenarioState, exchange: HttpExchange, keep_request_body: bool = True
) -> None:
    """Remember an exchange as the scenario's last request and response.

    The request body is only replaced when the call sent one, so a GET
    after a create keeps the create payload available for the failure
    report. Login calls pass ``keep_request_body=False`` so credentials
    never reach the state, and therefore never reach a report attachment.
    """
    state.set(LAST_RESPONSE, exchange)

    if keep_request_body and exchange.request_body is not None:
        state.set(LAST_REQUEST_BODY, exchange.request_body)


def record_created_booking(state: ScenarioState, exchange: HttpExchange) -> int | None:
    """Store the id of a booking created by a 201 response.

    Negative tests do not produce a booking id, and nothing is stored for
    them.

    Returns
    -------
    int | None
        The stored booking id, or None
    """
    if exchange.status_code != 201:
        return None

    booking_id = exchange.get("bookingid")
    if isinstance(booking_id, bool) or not isinstance(booking_id, int):
        return None

    state.set(BOOKING_ID, booking_id)
    return booking_id
