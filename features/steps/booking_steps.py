"""Step definitions for creating, reading, updating and deleting bookings."""

import json
import logging

import parse
from behave import given, register_type, then, when
from behave.runner import Context

from booker import factory
from booker.clients import cookie_header, extract_token
from booker.constants import NON_EXISTENT_BOOKING_ID
from booker.lifecycle import LifecycleCoordinator
from booker.models import Booking, RawPayload
from booker.state import (
    AUTH_TOKEN,
    BOOKING_ID,
    LAST_REQUEST_BODY,
    LAST_RESPONSE,
    record_created_booking,
    record_exchange,
)

logger = logging.getLogger(__name__)


@parse.with_pattern(r'[^"]*')
def parse_quoted_text(text: str) -> str:
    return text


register_type(QuotedText=parse_quoted_text)


def create_and_record(context: Context, payload: Booking | RawPayload) -> None:
    """Send a create request and store its outcome in the scenario state."""
    exchange = context.booking_client.create_booking(payload)
    record_exchange(context.scenario_state, exchange)

    booking_id = record_created_booking(context.scenario_state, exchange)
    if booking_id is not None:
        logger.info(f"Created booking ID {booking_id}")


def as_text(value: object) -> str:
    """Render a JSON value the way it reads in a feature file."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# Create


@given("I have created a booking with the following details:")
@when("I create a booking with the following details:")
def step_create_booking_from_table(context: Context) -> None:
    rows = [(row["field"], row["value"]) for row in context.table]
    create_and_record(context, factory.booking_from_table(rows))


@given("a booking exists in the system")
@when("I create a valid booking")
def step_create_valid_booking(context: Context) -> None:
    create_and_record(context, factory.valid_booking())


@when('I create a booking with firstname "{value:QuotedText}" and all other fields valid')
def step_create_with_firstname(context: Context, value: str) -> None:
    create_and_record(context, factory.booking_with_firstname(value))


@when('I create a booking with lastname "{value:QuotedText}" and all other fields valid')
def step_create_with_lastname(context: Context, value: str) -> None:
    create_and_record(context, factory.booking_with_lastname(value))


@when('I create a booking with phone "{value:QuotedText}" and all other fields valid')
def step_create_with_phone(context: Context, value: str) -> None:
    create_and_record(context, factory.booking_with_phone(value))


@when('I create a booking with email "{value:QuotedText}" and all other fields valid')
def step_create_with_email(context: Context, value: str) -> None:
    create_and_record(context, factory.booking_with_email(value))


@when('I create a booking with checkin "{checkin:QuotedText}" and checkout "{checkout:QuotedText}"')
def step_create_with_dates(context: Context, checkin: str, checkout: str) -> None:
    booking = factory.booking_with_dates(
        factory.resolve_date(checkin), factory.resolve_date(checkout)
    )
    create_and_record(context, booking)


@when("I create a booking with roomid as empty string and all other fields valid")
def step_create_with_empty_roomid(context: Context) -> None:
    create_and_record(context, factory.booking_with_room_id_as_empty_string())


@when(
    'I create a booking with roomid as string value "{value:QuotedText}" and all other fields valid'
)
def step_create_with_string_roomid(context: Context, value: str) -> None:
    create_and_record(context, factory.booking_with_room_id_as_string(value))


@when("I create a booking with depositpaid as integer value {value:d} and all other fields valid")
def step_create_with_integer_depositpaid(context: Context, value: int) -> None:
    create_and_record(context, factory.booking_with_deposit_paid_as_integer(value))


@when('I create a booking with "{field}" set to "{value:QuotedText}" and all other fields valid')
def step_create_with_field(context: Context, field: str, value: str) -> None:
    create_and_record(context, factory.booking_with_field(field, value))


@when('I create a booking without the "{field}" field')
def step_create_without_field(context: Context, field: str) -> None:
    create_and_record(context, factory.booking_without_field(field))


@when('I create a booking with "{field}" set to null')
def step_create_with_null_field(context: Context, field: str) -> None:
    create_and_record(context, factory.booking_with_null_field(field))


# Create assertions


@then("the response should contain a numeric booking ID")
def step_response_has_booking_id(context: Context) -> None:
    exchange = context.scenario_state.get(LAST_RESPONSE)
    booking_id = exchange.get("bookingid")
    assert isinstance(booking_id, int) and not isinstance(booking_id, bool), (
        f"Expected a numeric bookingid, got {booking_id!r}"
    )
    assert booking_id > 0, f"Expected a positive bookingid, got {booking_id}"


@then("the response booking details should match what was submitted")
def step_response_matches_submitted(context: Context) -> None:
    state = context.scenario_state
    exchange = state.get(LAST_RESPONSE)
    submitted = json.loads(state.get(LAST_REQUEST_BODY))

    for field in ("roomid", "firstname", "lastname"):
        actual = exchange.get(field)
        assert actual == submitted[field], (
            f"Expected {field} {submitted[field]!r} to be echoed, got {actual!r}"
        )

    for path in ("depositpaid", "bookingdates.checkin", "bookingdates.checkout"):
        assert exchange.get(path) is not None, f"{path} should be present in create response"

    # email and phone are not echoed by the live API
    logger.info(
        f"Create response email={exchange.get('email')!r} phone={exchange.get('phone')!r}"
    )


@then('the response booking field "{field}" should be "{expected:QuotedText}"')
def step_response_field_should_be(context: Context, field: str, expected: str) -> None:
    exchange = context.scenario_state.get(LAST_RESPONSE)
    actual = as_text(exchange.get(field))
    assert actual == expected, f"Expected field '{field}' to be '{expected}' but got '{actual}'"


@then('the response should contain an "{field}" field that is an array')
def step_response_field_is_array(context: Context, field: str) -> None:
    exchange = context.scenario_state.get(LAST_RESPONSE)
    assert isinstance(exchange.get(field), list), (
        f"Expected field '{field}' to be an array in the response body:\n"
        f"{exchange.pretty_body()}"
    )


@then("the errors array should not be empty")
def step_errors_not_empty(context: Context) -> None:
    errors = context.scenario_state.get(LAST_RESPONSE).get("errors")
    assert errors, "Expected errors array to contain at least one validation message"


@then('the error response should contain "{message}"')
def step_error_response_contains(context: Context, message: str) -> None:
    body = context.scenario_state.get(LAST_RESPONSE).text
    assert message in body, (
        f"Expected error response body to contain '{message}'.\nActual body: {body}"
    )


# Read


@when("I retrieve the booking by its ID")
def step_retrieve_booking(context: Context) -> None:
    state = context.scenario_state
    exchange = context.booking_client.get_booking(state.get(BOOKING_ID), state.find(AUTH_TOKEN))
    record_exchange(state, exchange)


@when("I request the booking by its ID without an auth token")
def step_retrieve_booking_unauthenticated(context: Context) -> None:
    state = context.scenario_state
    record_exchange(state, context.booking_client.get_booking(state.get(BOOKING_ID)))


@when("I request a booking with a non-existent ID")
def step_retrieve_missing_booking(context: Context) -> None:
    state = context.scenario_state
    exchange = context.booking_client.get_booking(NON_EXISTENT_BOOKING_ID, state.find(AUTH_TOKEN))
    record_exchange(state, exchange)


@then("the retrieved booking dates should match the submitted dates")
def step_retrieved_dates_match(context: Context) -> None:
    state = context.scenario_state
    exchange = state.get(LAST_RESPONSE)
    submitted = json.loads(state.get(LAST_REQUEST_BODY))["bookingdates"]

    for field in ("checkin", "checkout"):
        actual = exchange.get(f"bookingdates.{field}")
        assert actual is not None, f"{field} date should be present in GET response"
        assert actual == submitted[field], (
            f"Expected {field} {submitted[field]} but got {actual}"
        )


@then("the response should document the missing PII fields")
def step_response_omits_pii(context: Context) -> None:
    exchange = context.scenario_state.get(LAST_RESPONSE)
    email = exchange.get("email")
    phone = exchange.get("phone")
    logger.info(f"GET response email={email!r} phone={phone!r}")

    assert email is None, f"Expected email to be stripped, got {email!r}"
    assert phone is None, f"Expected phone to be stripped, got {phone!r}"


# Update


@when('I update the booking with firstname "{value:QuotedText}"')
def step_update_booking(context: Context, value: str) -> None:
    state = context.scenario_state
    exchange = context.booking_client.update_booking(
        state.get(BOOKING_ID), factory.booking_with_firstname(value), state.find(AUTH_TOKEN)
    )
    record_exchange(state, exchange)


@when('I update the booking with firstname "{value:QuotedText}" without an auth token')
def step_update_booking_unauthenticated(context: Context, value: str) -> None:
    state = context.scenario_state
    exchange = context.booking_client.update_booking(
        state.get(BOOKING_ID), factory.booking_with_firstname(value)
    )
    record_exchange(state, exchange)


@when('I partially update the booking with firstname "{value:QuotedText}"')
def step_partial_update_booking(context: Context, value: str) -> None:
    state = context.scenario_state
    exchange = context.booking_client.partial_update_booking(
        state.get(BOOKING_ID), RawPayload({"firstname": value}), state.find(AUTH_TOKEN)
    )
    record_exchange(state, exchange)


# Delete


@when("I delete the booking")
def step_delete_booking(context: Context) -> None:
    state = context.scenario_state
    exchange = context.booking_client.delete_booking(state.get(BOOKING_ID), state.find(AUTH_TOKEN))
    record_exchange(state, exchange)


@when("I delete the booking without an auth token")
def step_delete_booking_unauthenticated(context: Context) -> None:
    state = context.scenario_state
    record_exchange(state, context.booking_client.delete_booking(state.get(BOOKING_ID)))


# Teardown verification


@given("a separate scenario created a booking without authenticating")
def step_unauthenticated_scenario_created_booking(context: Context) -> None:
    coordinator = LifecycleCoordinator(
        context.api_config,
        context.artifacts,
        auth_client=context.auth_client,
        booking_client=context.booking_client,
    )
    inner_state = coordinator.start("create without authenticating")

    exchange = context.booking_client.create_booking(factory.valid_booking())
    record_exchange(inner_state, exchange)
    booking_id = record_created_booking(inner_state, exchange)
    assert booking_id is not None, f"Expected 201 from create, got {exchange.status_code}"

    assert AUTH_TOKEN not in inner_state
    coordinator.finish(failed=False)

    context.orphan_booking_id = booking_id


@then("fetching that booking with an admin token should return {status:d}")
def step_fetch_orphan_booking(context: Context, status: int) -> None:
    token = extract_token(
        context.auth_client.create_token(factory.admin_credentials(context.api_config))
    )
    assert token is not None, "Admin token request failed"

    exchange = context.booking_client.get_booking(
        context.orphan_booking_id, cookie_header(token)
    )
    record_exchange(context.scenario_state, exchange)
    assert exchange.status_code == status, (
        f"Expected HTTP {status} for booking {context.orphan_booking_id} after teardown, "
        f"got {exchange.status_code}"
    )
