"""Step definitions for the authentication endpoint."""

from behave import given, then, when
from behave.runner import Context

from booker.clients import cookie_header, extract_token
from booker.exchange import HttpExchange
from booker.factory import admin_credentials, token_request_without_password
from booker.models import TokenCredential
from booker.state import AUTH_TOKEN, LAST_RESPONSE, record_exchange


def record_login(context: Context, exchange: HttpExchange) -> None:
    """Keep a login response for assertions without its credential body."""
    record_exchange(context.scenario_state, exchange, keep_request_body=False)


@when('I request a token with username "{username}" and password "{password}"')
def step_request_token(context: Context, username: str, password: str) -> None:
    credentials = TokenCredential(username=username, password=password)
    record_login(context, context.auth_client.create_token(credentials))


@when('I request a token with username "{username}" and no password field')
def step_request_token_without_password(context: Context, username: str) -> None:
    payload = token_request_without_password(username)
    record_login(context, context.auth_client.create_token(payload))


@when("I request a token with the configured admin credentials")
def step_request_admin_token(context: Context) -> None:
    credentials = admin_credentials(context.api_config)
    record_login(context, context.auth_client.create_token(credentials))


@then("the response should contain a non-empty token")
def step_response_contains_token(context: Context) -> None:
    exchange = context.scenario_state.get(LAST_RESPONSE)
    token = exchange.get("token")
    assert isinstance(token, str) and token.strip(), (
        f"Expected a token in the response, got body: {exchange.text!r}"
    )


@given("I have a valid authentication token")
def step_have_valid_token(context: Context) -> None:
    exchange = context.auth_client.create_token(admin_credentials(context.api_config))
    assert exchange.status_code == 200, (
        f"Background auth token generation failed with HTTP {exchange.status_code}"
    )

    token = extract_token(exchange)
    assert token is not None, "Auth token was blank"

    context.scenario_state.set(AUTH_TOKEN, cookie_header(token))
