"""Observable result of one HTTP call."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

import requests
from requests.structures import CaseInsensitiveDict

_MISSING = object()


@dataclass(frozen=True)
class HttpExchange:
    """Status, headers and body of a completed HTTP call.

    Always populated, whatever the status code: negative scenarios assert
    on 4xx responses exactly like happy paths assert on 2xx ones.

    Attributes
    ----------
    method : str
        HTTP method sent
    url : str
        Absolute URL called
    status_code : int
        Response status code
    headers : Mapping[str, str]
        Response headers, case-insensitive
    text : str
        Raw response body
    request_body : str | None
        Serialized JSON request body, if one was sent
    elapsed : float
        Round trip duration in seconds
    """

    method: str
    url: str
    status_code: int
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)
    text: str = ""
    request_body: str | None = None
    elapsed: float = 0.0

    @classmethod
    def from_response(
        cls, response: requests.Response, request_body: str | None = None
    ) -> HttpExchange:
        """Capture a ``requests`` response."""
        return cls(
            method=response.request.method if response.request is not None else "",
            url=response.url,
            status_code=response.status_code,
            headers=CaseInsensitiveDict(response.headers),
            text=response.text,
            request_body=request_body,
            elapsed=response.elapsed.total_seconds(),
        )

    @cached_property
    def body(self) -> Any:
        """Parsed JSON body, or None when the body is empty or not JSON."""
        if not self.text:
            return None

        try:
            return json.loads(self.text)
        except ValueError:
            return None

    @property
    def is_json(self) -> bool:
        return self.body is not None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def get(self, path: str, default: Any = None) -> Any:
        """Look up a dotted path in the parsed body.

        ``exchange.get("bookingdates.checkin")`` walks nested objects;
        numeric segments index into lists.

        Parameters
        ----------
        path : str
            Dotted path into the JSON body
        default : Any, optional
            Value returned when any segment is missing

        Returns
        -------
        Any
            Value at the path, or default
        """
        current = self.body

        for segment in path.split("."):
            current = _step_into(current, segment)
            if current is _MISSING:
                return default

        return current

    def has(self, path: str) -> bool:
        """Return True when the path exists in the body, even if null."""
        return self.get(path, _MISSING) is not _MISSING

    def pretty_body(self) -> str:
        """Body re-indented for reports, raw text when not JSON."""
        if self.body is None:
            return self.text

        return json.dumps(self.body, indent=2, sort_keys=True)


def _step_into(current: Any, segment: str) -> Any:
    if isinstance(current, dict):
        return current.get(segment, _MISSING)

    if isinstance(current, list) and segment.isdigit():
        index = int(segment)
        return current[index] if index < len(current) else _MISSING

    return _MISSING
