"""Shared request plumbing for the API clients."""

from __future__ import annotations

import json
import logging
from typing import Any

import requests

from booker.config import EnvironmentConfig
from booker.constants import COOKIE_HEADER, JSON_CONTENT_TYPE, MASKED_SECRET
from booker.exceptions import TransportError
from booker.exchange import HttpExchange
from booker.models import CredentialPayload, Payload, serialize, to_wire

logger = logging.getLogger(__name__)


def loggable_body(payload: Payload | CredentialPayload | None) -> str | None:
    """Render a request body for the log with any password masked."""
    if payload is None:
        return None

    wire = to_wire(payload)
    if "password" in wire:
        wire["password"] = MASKED_SECRET
    return json.dumps(wire)


class ApiClient:
    """Base class for clients translating one intent into one HTTP call.

    Clients keep nothing but the immutable configuration, so they can be
    created per call or shared between scenarios. Every call returns an
    ``HttpExchange`` whatever the status code; only failures below HTTP
    (connection refused, timeout) raise.

    Parameters
    ----------
    config : EnvironmentConfig
        Resolved environment configuration
    """

    def __init__(self, config: EnvironmentConfig) -> None:
        self.config = config

    def url_for(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    def _request(
        self,
        method: str,
        path: str,
        payload: Payload | CredentialPayload | None = None,
        cookie: str | None = None,
    ) -> HttpExchange:
        """Send one request and capture its outcome.

        Parameters
        ----------
        method : str
            HTTP method
        path : str
            Path relative to the base URL
        payload : Payload | CredentialPayload | None
            Request body; None sends no body
        cookie : str | None
            Complete Cookie header value; None sends no Cookie header

        Returns
        -------
        HttpExchange
            Captured response, including non-2xx outcomes

        Raises
        ------
        TransportError
            If no HTTP response was received
        """
        url = self.url_for(path)
        headers: dict[str, str] = {
            "Content-Type": JSON_CONTENT_TYPE,
            "Accept": JSON_CONTENT_TYPE,
        }
        if cookie is not None:
            headers[COOKIE_HEADER] = cookie

        body = serialize(payload) if payload is not None else None
        kwargs: dict[str, Any] = {
            "headers": headers,
            "timeout": self.config.request_timeout,
        }
        if body is not None:
            kwargs["data"] = body.encode("utf-8")

        logger.debug(
            "%s %s%s | body: %s",
            method,
            url,
            " (authenticated)" if cookie is not None else "",
            loggable_body(payload),
        )

        try:
            response = requests.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise TransportError(f"{method} {url} failed: {e}", method, url) from e

        exchange = HttpExchange.from_response(response, request_body=body)
        logger.debug(
            "%s %s -> %s in %.3fs | body: %s",
            method,
            url,
            exchange.status_code,
            exchange.elapsed,
            exchange.text,
        )
        return exchange
