"""Common step definitions shared across features."""

import logging

from behave import given, then
from behave.runner import Context

from booker.constants import DELETE_SUCCESS_STATUSES
from booker.schema import validate_exchange
from booker.state import LAST_RESPONSE

logger = logging.getLogger(__name__)


def parse_status_codes(text: str) -> tuple[int, ...]:
    """Parse "401, 403" or "401 or 403" into status codes."""
    parts = text.replace(" or ", ",").split(",")
    return tuple(int(part.strip()) for part in parts if part.strip())


@given("the booking API is running")
def step_api_is_running(context: Context) -> None:
    exchange = context.booking_client.check_health()
    assert exchange.status_code == 200, (
        f"API health check failed, is the environment reachable? "
        f"Got status {exchange.status_code}"
    )


@then("the response status code should be {status:d}")
def step_status_code_should_be(context: Context, status: int) -> None:
    exchange = context.scenario_state.get(LAST_RESPONSE)
    assert exchange.status_code == status, (
        f"Expected HTTP {status} but got {exchange.status_code}.\n"
        f"Response body:\n{exchange.pretty_body()}"
    )


@then("the response status code should be one of {statuses}")
def step_status_code_should_be_one_of(context: Context, statuses: str) -> None:
    expected = parse_status_codes(statuses)
    exchange = context.scenario_state.get(LAST_RESPONSE)
    assert exchange.status_code in expected, (
        f"Expected one of {expected} but got {exchange.status_code}.\n"
        f"Response body:\n{exchange.pretty_body()}"
    )


@then("the booking deletion should succeed")
def step_deletion_should_succeed(context: Context) -> None:
    exchange = context.scenario_state.get(LAST_RESPONSE)
    assert exchange.status_code in DELETE_SUCCESS_STATUSES, (
        f"Expected delete to answer one of {DELETE_SUCCESS_STATUSES} "
        f"but got {exchange.status_code}"
    )
    logger.info(f"Delete answered HTTP {exchange.status_code}")


@then('the response body should match the "{schema_name}" contract schema')
def step_body_matches_schema(context: Context, schema_name: str) -> None:
    validate_exchange(context.scenario_state.get(LAST_RESPONSE), schema_name)
