"""Unit tests for HttpExchange."""

import json

from booker.exchange import HttpExchange


class TestFromResponse:
    """Test capturing requests responses."""

    def test_captures_fields(self, make_response) -> None:
        response = make_response(201, {"bookingid": 9}, method="POST")

        exchange = HttpExchange.from_response(response, request_body='{"roomid": 1}')

        assert exchange.method == "POST"
        assert exchange.url == "https://booker.test/api/booking"
        assert exchange.status_code == 201
        assert exchange.headers["content-type"] == "application/json"
        assert exchange.request_body == '{"roomid": 1}'
        assert exchange.elapsed == 0.042

    def test_error_status_is_still_captured(self, make_response) -> None:
        exchange = HttpExchange.from_response(make_response(500, text="Internal Server Error"))

        assert exchange.status_code == 500
        assert exchange.text == "Internal Server Error"
        assert not exchange.ok


class TestBody:
    """Test body parsing and lookups."""

    def test_json_body(self, make_exchange) -> None:
        exchange = make_exchange(200, {"token": "abc"})

        assert exchange.body == {"token": "abc"}
        assert exchange.is_json

    def test_empty_body(self) -> None:
        exchange = HttpExchange("GET", "https://booker.test", 204)

        assert exchange.body is None
        assert not exchange.is_json

    def test_non_json_body(self) -> None:
        exchange = HttpExchange("GET", "https://booker.test", 502, text="<html>Bad gateway</html>")

        assert exchange.body is None
        assert exchange.pretty_body() == "<html>Bad gateway</html>"

    def test_get_nested_path(self, make_exchange) -> None:
        exchange = make_exchange(
            200, {"bookingdates": {"checkin": "2030-01-01"}, "errors": ["a", "b"]}
        )

        assert exchange.get("bookingdates.checkin") == "2030-01-01"
        assert exchange.get("errors.1") == "b"
        assert exchange.get("errors.5") is None
        assert exchange.get("bookingdates.missing", "n/a") == "n/a"

    def test_get_on_scalar_body(self) -> None:
        exchange = HttpExchange("GET", "https://booker.test", 200, text="42")

        assert exchange.get("bookingid") is None

    def test_has_distinguishes_null_from_missing(self, make_exchange) -> None:
        exchange = make_exchange(200, {"email": None})

        assert exchange.has("email")
        assert not exchange.has("phone")
        assert exchange.get("email") is None

    def test_pretty_body_is_indented(self, make_exchange) -> None:
        exchange = make_exchange(200, {"b": 1, "a": 2})

        assert exchange.pretty_body() == json.dumps({"a": 2, "b": 1}, indent=2)

    def test_ok_range(self) -> None:
        assert HttpExchange("DELETE", "u", 200).ok
        assert HttpExchange("DELETE", "u", 201).ok
        assert not HttpExchange("DELETE", "u", 301).ok
        assert not HttpExchange("DELETE", "u", 404).ok
