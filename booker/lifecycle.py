"""Scenario lifecycle coordination.

A scenario moves through a fixed sequence of stages::

    START -> RUN -> DIAGNOSTIC_CAPTURE -> TEARDOWN -> END

Diagnostics must see the state as the scenario left it, so they always run
before teardown deletes anything. Stages entered out of order raise
``LifecycleError``.
"""

from __future__ import annotations

import logging
from enum import Enum

from booker.clients.auth import AuthClient, cookie_header, extract_token
from booker.clients.booking import BookingClient
from booker.config import EnvironmentConfig
from booker.constants import JSON_CONTENT_TYPE, TEXT_CONTENT_TYPE
from booker.exceptions import LifecycleError
from booker.factory import admin_credentials
from booker.reporting.artifacts import AttachmentSink
from booker.reporting.diagnostics import DiagnosticsCollector
from booker.state import AUTH_TOKEN, BOOKING_ID, LAST_REQUEST_BODY, LAST_RESPONSE, ScenarioState

logger = logging.getLogger(__name__)


class Stage(Enum):
    """Lifecycle stages of a scenario."""

    START = "start"
    RUN = "run"
    DIAGNOSTIC_CAPTURE = "diagnostic-capture"
    TEARDOWN = "teardown"
    END = "end"


STAGE_SEQUENCE: tuple[Stage, ...] = (
    Stage.START,
    Stage.RUN,
    Stage.DIAGNOSTIC_CAPTURE,
    Stage.TEARDOWN,
    Stage.END,
)

REQUEST_BODY_ATTACHMENT = "API Request Body"
STATUS_CODE_ATTACHMENT = "API Status Code"
RESPONSE_BODY_ATTACHMENT = "API Response Body"


class LifecycleCoordinator:
    """Drives setup, diagnostic capture and teardown around a scenario.

    One coordinator serves one scenario at a time. It owns the scenario's
    ``ScenarioState`` from ``start`` until ``end`` and shares nothing with
    other coordinators, so scenarios in parallel workers stay isolated.

    Parameters
    ----------
    config : EnvironmentConfig
        Resolved environment configuration
    sink : AttachmentSink
        Receives failure attachments
    auth_client : AuthClient | None
        Client used to fetch an admin token during teardown
    booking_client : BookingClient | None
        Client used to delete bookings during teardown
    diagnostics : DiagnosticsCollector | None
        Collector for stage and teardown events

    Attributes
    ----------
    stage : Stage | None
        Current stage, None before the first scenario
    scenario_name : str | None
        Name of the scenario in progress
    """

    def __init__(
        self,
        config: EnvironmentConfig,
        sink: AttachmentSink,
        auth_client: AuthClient | None = None,
        booking_client: BookingClient | None = None,
        diagnostics: DiagnosticsCollector | None = None,
    ) -> None:
        self.config = config
        self.sink = sink
        self.auth_client = auth_client or AuthClient(config)
        self.booking_client = booking_client or BookingClient(config)
        self.diagnostics = diagnostics or DiagnosticsCollector()
        self.stage: Stage | None = None
        self.scenario_name: str | None = None
        self._state: ScenarioState | None = None

    @property
    def state(self) -> ScenarioState:
        """State of the scenario in progress.

        Raises
        ------
        LifecycleError
            If no scenario is between START and END
        """
        if self._state is None:
            raise LifecycleError("No scenario in progress; state is only available until END")

        return self._state

    def _enter(self, stage: Stage) -> None:
        index = STAGE_SEQUENCE.index(stage)

        if index == 0:
            allowed = (None, Stage.END)
        else:
            allowed = (STAGE_SEQUENCE[index - 1],)

        if self.stage not in allowed:
            current = self.stage.value if self.stage else "none"
            raise LifecycleError(f"Cannot enter stage '{stage.value}' from '{current}'")

        self.stage = stage
        self.diagnostics.record("stage", stage.value, {"scenario": self.scenario_name})

    def start(self, scenario_name: str) -> ScenarioState:
        """Begin a scenario with a fresh state and move to RUN."""
        if self.stage not in (None, Stage.END):
            raise LifecycleError(
                f"Cannot start '{scenario_name}' while '{self.scenario_name}' is in progress"
            )

        self.scenario_name = scenario_name
        self._enter(Stage.START)
        self._state = ScenarioState()
        logger.info("Starting scenario: %s", scenario_name, extra={"scenario": scenario_name})
        self._enter(Stage.RUN)
        return self._state

    def finish(self, failed: bool) -> None:
        """Run the post-run stages in their declared order.

        Teardown and END happen even if diagnostic capture raises.

        Parameters
        ----------
        failed : bool
            Whether the scenario outcome is failed
        """
        try:
            self.capture_diagnostics(failed)
        finally:
            try:
                self.teardown()
            finally:
                self.end()

    def capture_diagnostics(self, failed: bool) -> None:
        """Attach the last request and response when the scenario failed."""
        self._enter(Stage.DIAGNOSTIC_CAPTURE)

        if not failed:
            return

        state = self.state
        request_body = state.find(LAST_REQUEST_BODY)
        if request_body is not None:
            self.sink.attach(REQUEST_BODY_ATTACHMENT, JSON_CONTENT_TYPE, request_body)

        response = state.find(LAST_RESPONSE)
        if response is not None:
            self.sink.attach(STATUS_CODE_ATTACHMENT, TEXT_CONTENT_TYPE, str(response.status_code))
            self.sink.attach(RESPONSE_BODY_ATTACHMENT, JSON_CONTENT_TYPE, response.pretty_body())

        self.diagnostics.record(
            "diagnostics-attached",
            "Attached failure context",
            {
                "request_body": request_body is not None,
                "response": response is not None,
            },
        )

    def teardown(self) -> None:
        """Delete the booking created by the scenario, if any.

        Uses the scenario's own token when it has one, otherwise fetches an
        admin token. Failures are logged and recorded but never raised, so
        they cannot mask the scenario's own result.
        """
        self._enter(Stage.TEARDOWN)

        try:
            self._delete_created_booking()
        except Exception as e:
            logger.warning(
                "Teardown failed for scenario '%s': %s",
                self.scenario_name,
                e,
                exc_info=True,
                extra={"scenario": self.scenario_name},
            )
            self.diagnostics.record("teardown-failed", str(e), {"error": type(e).__name__})

    def _delete_created_booking(self) -> None:
        state = self.state
        booking_id = state.find(BOOKING_ID)

        if booking_id is None:
            return

        auth_header = state.find(AUTH_TOKEN)
        if auth_header is None:
            auth_header = self._request_admin_cookie()

        if auth_header is None:
            logger.warning(
                "Teardown: no token available, booking ID %s left in place",
                booking_id,
                extra={"scenario": self.scenario_name},
            )
            self.diagnostics.record(
                "teardown-skipped", "Admin token request failed", {"booking_id": booking_id}
            )
            return

        exchange = self.booking_client.delete_booking(booking_id, auth_header)

        if exchange.ok:
            message = f"Deleted booking {booking_id}"
            logger.info(
                "Teardown: deleted booking ID %s",
                booking_id,
                extra={"scenario": self.scenario_name},
            )
        else:
            message = f"Delete of booking {booking_id} returned {exchange.status_code}"
            logger.warning(
                "Teardown: delete of booking ID %s returned %s",
                booking_id,
                exchange.status_code,
                extra={"scenario": self.scenario_name},
            )

        self.diagnostics.record(
            "teardown-delete",
            message,
            {"booking_id": booking_id, "status_code": exchange.status_code},
        )

    def _request_admin_cookie(self) -> str | None:
        exchange = self.auth_client.create_token(admin_credentials(self.config))
        token = extract_token(exchange)

        if token is None:
            logger.warning(
                "Teardown: admin token request returned %s",
                exchange.status_code,
                extra={"scenario": self.scenario_name},
            )
            return None

        return cookie_header(token)

    def end(self) -> None:
        """Discard the scenario state."""
        self._enter(Stage.END)

        if self._state is not None:
            self._state.clear()
        self._state = None

        logger.info(
            "Finished scenario: %s", self.scenario_name, extra={"scenario": self.scenario_name}
        )
