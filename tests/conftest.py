"""Pytest configuration and fixtures for booker tests."""

import json
from collections.abc import Callable
from datetime import timedelta
from typing import Any

import pytest
import requests

from booker.config import EnvironmentConfig
from booker.exchange import HttpExchange

BASE_URL = "https://booker.test/api"


@pytest.fixture
def env_config() -> EnvironmentConfig:
    """Configuration of a fictional environment.

    Returns
    -------
    EnvironmentConfig
        Config pointing at an unreachable host
    """
    return EnvironmentConfig(
        name="unit",
        base_url=BASE_URL,
        admin_username="admin",
        admin_password="password123",
        request_timeout=5.0,
    )


@pytest.fixture
def make_response() -> Callable[..., requests.Response]:
    """Build real ``requests.Response`` objects without a network.

    Returns
    -------
    Callable[..., requests.Response]
        Factory taking status_code, body or text, method and url
    """

    def _make(
        status_code: int = 200,
        body: Any = None,
        text: str | None = None,
        method: str = "GET",
        url: str = f"{BASE_URL}/booking",
    ) -> requests.Response:
        if text is None:
            text = json.dumps(body) if body is not None else ""

        response = requests.Response()
        response.status_code = status_code
        response._content = text.encode("utf-8")
        response.encoding = "utf-8"
        response.url = url
        response.headers["Content-Type"] = "application/json"
        response.request = requests.Request(method, url).prepare()
        response.elapsed = timedelta(milliseconds=42)
        return response

    return _make


@pytest.fixture
def make_exchange() -> Callable[..., HttpExchange]:
    """Build ``HttpExchange`` values directly.

    Returns
    -------
    Callable[..., HttpExchange]
        Factory taking status_code, body, request_body and method
    """

    def _make(
        status_code: int = 200,
        body: Any = None,
        request_body: str | None = None,
        method: str = "GET",
        url: str = f"{BASE_URL}/booking",
    ) -> HttpExchange:
        return HttpExchange(
            method=method,
            url=url,
            status_code=status_code,
            text=json.dumps(body) if body is not None else "",
            request_body=request_body,
        )

    return _make
