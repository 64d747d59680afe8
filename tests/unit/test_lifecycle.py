"""Unit tests for the scenario lifecycle coordinator."""

import threading
from unittest.mock import MagicMock

import pytest

from booker.clients import AuthClient, BookingClient
from booker.config import EnvironmentConfig
from booker.exceptions import LifecycleError, TransportError
from booker.exchange import HttpExchange
from booker.lifecycle import (
    REQUEST_BODY_ATTACHMENT,
    RESPONSE_BODY_ATTACHMENT,
    STATUS_CODE_ATTACHMENT,
    LifecycleCoordinator,
    Stage,
)
from booker.models import TokenCredential
from booker.reporting import DiagnosticsCollector
from booker.state import AUTH_TOKEN, BOOKING_ID, LAST_REQUEST_BODY, LAST_RESPONSE


def exchange(status_code: int, text: str = "", method: str = "GET") -> HttpExchange:
    return HttpExchange(method, "https://booker.test/api", status_code, text=text)


class RecordingSink:
    """Attachment sink appending to a shared call log."""

    def __init__(self, calls: list[tuple]) -> None:
        self.calls = calls

    def attach(self, name: str, content_type: str, content: str) -> None:
        self.calls.append(("attach", name, content_type, content))


@pytest.fixture
def calls() -> list[tuple]:
    return []


@pytest.fixture
def auth_client(calls: list[tuple]) -> MagicMock:
    client = MagicMock(spec=AuthClient)

    def create_token(credentials):
        calls.append(("create_token", credentials))
        return exchange(200, '{"token": "fresh"}', method="POST")

    client.create_token.side_effect = create_token
    return client


@pytest.fixture
def booking_client(calls: list[tuple]) -> MagicMock:
    client = MagicMock(spec=BookingClient)

    def delete_booking(booking_id, auth_header=None):
        calls.append(("delete_booking", booking_id, auth_header))
        return exchange(201, method="DELETE")

    client.delete_booking.side_effect = delete_booking
    return client


@pytest.fixture
def coordinator(
    env_config: EnvironmentConfig,
    calls: list[tuple],
    auth_client: MagicMock,
    booking_client: MagicMock,
) -> LifecycleCoordinator:
    return LifecycleCoordinator(
        env_config,
        RecordingSink(calls),
        auth_client=auth_client,
        booking_client=booking_client,
        diagnostics=DiagnosticsCollector(),
    )


class TestStageOrdering:
    """Test the stage sequence."""

    def test_start_moves_to_run_with_empty_state(
        self, coordinator: LifecycleCoordinator
    ) -> None:
        state = coordinator.start("scenario")

        assert coordinator.stage is Stage.RUN
        assert state.snapshot() == {}
        assert coordinator.state is state

    def test_finish_walks_every_stage(self, coordinator: LifecycleCoordinator) -> None:
        coordinator.start("scenario")
        coordinator.finish(failed=False)

        stages = [e.message for e in coordinator.diagnostics.events_of("stage")]
        assert stages == ["start", "run", "diagnostic-capture", "teardown", "end"]
        assert coordinator.stage is Stage.END

    def test_state_unavailable_after_end(self, coordinator: LifecycleCoordinator) -> None:
        state = coordinator.start("scenario")
        state.set(AUTH_TOKEN, "token=abc")

        coordinator.finish(failed=False)

        assert state.snapshot() == {}
        with pytest.raises(LifecycleError):
            coordinator.state

    def test_teardown_before_diagnostics_rejected(
        self, coordinator: LifecycleCoordinator
    ) -> None:
        coordinator.start("scenario")

        with pytest.raises(LifecycleError, match="Cannot enter stage 'teardown' from 'run'"):
            coordinator.teardown()

    def test_diagnostics_before_start_rejected(self, coordinator: LifecycleCoordinator) -> None:
        with pytest.raises(LifecycleError):
            coordinator.capture_diagnostics(failed=True)

    def test_start_while_running_rejected(self, coordinator: LifecycleCoordinator) -> None:
        coordinator.start("first")

        with pytest.raises(LifecycleError, match="'first' is in progress"):
            coordinator.start("second")

    def test_restart_after_end_gets_fresh_state(
        self, coordinator: LifecycleCoordinator
    ) -> None:
        first = coordinator.start("first")
        first.set(AUTH_TOKEN, "token=abc")
        coordinator.finish(failed=False)

        second = coordinator.start("second")

        assert second is not first
        assert AUTH_TOKEN not in second


class TestDiagnosticCapture:
    """Test failure attachments."""

    def test_passed_scenario_attaches_nothing(
        self, coordinator: LifecycleCoordinator, calls: list[tuple]
    ) -> None:
        state = coordinator.start("scenario")
        state.set(LAST_REQUEST_BODY, '{"roomid": 1}')
        state.set(LAST_RESPONSE, exchange(400, '{"errors": ["bad"]}'))

        coordinator.finish(failed=False)

        assert [c for c in calls if c[0] == "attach"] == []

    def test_failed_scenario_attaches_request_and_response(
        self, coordinator: LifecycleCoordinator, calls: list[tuple]
    ) -> None:
        state = coordinator.start("scenario")
        state.set(LAST_REQUEST_BODY, '{"roomid": 1}')
        state.set(LAST_RESPONSE, exchange(400, '{"errors": ["bad"]}'))

        coordinator.finish(failed=True)

        assert calls == [
            ("attach", REQUEST_BODY_ATTACHMENT, "application/json", '{"roomid": 1}'),
            ("attach", STATUS_CODE_ATTACHMENT, "text/plain", "400"),
            (
                "attach",
                RESPONSE_BODY_ATTACHMENT,
                "application/json",
                '{\n  "errors": [\n    "bad"\n  ]\n}',
            ),
        ]

    def test_failed_scenario_without_exchange(
        self, coordinator: LifecycleCoordinator, calls: list[tuple]
    ) -> None:
        coordinator.start("scenario")
        coordinator.finish(failed=True)

        assert calls == []
        assert coordinator.diagnostics.events_of("diagnostics-attached")[0].details == {
            "request_body": False,
            "response": False,
        }

    def test_attachments_precede_teardown_delete(
        self, coordinator: LifecycleCoordinator, calls: list[tuple]
    ) -> None:
        state = coordinator.start("scenario")
        state.set(BOOKING_ID, 17)
        state.set(AUTH_TOKEN, "token=own")
        state.set(LAST_RESPONSE, exchange(500, "boom"))

        coordinator.finish(failed=True)

        kinds = [c[0] for c in calls]
        assert kinds == ["attach", "attach", "delete_booking"]

    def test_sink_failure_still_tears_down(
        self, coordinator: LifecycleCoordinator, calls: list[tuple]
    ) -> None:
        coordinator.sink = MagicMock()
        coordinator.sink.attach.side_effect = OSError("disk full")
        state = coordinator.start("scenario")
        state.set(BOOKING_ID, 17)
        state.set(AUTH_TOKEN, "token=own")
        state.set(LAST_RESPONSE, exchange(500, "boom"))

        with pytest.raises(OSError, match="disk full"):
            coordinator.finish(failed=True)

        assert ("delete_booking", 17, "token=own") in calls
        assert coordinator.stage is Stage.END


class TestTeardown:
    """Test booking cleanup."""

    def test_nothing_to_delete(
        self,
        coordinator: LifecycleCoordinator,
        auth_client: MagicMock,
        booking_client: MagicMock,
    ) -> None:
        coordinator.start("scenario")
        coordinator.finish(failed=False)

        auth_client.create_token.assert_not_called()
        booking_client.delete_booking.assert_not_called()

    def test_uses_scenario_token(
        self, coordinator: LifecycleCoordinator, calls: list[tuple], auth_client: MagicMock
    ) -> None:
        state = coordinator.start("scenario")
        state.set(BOOKING_ID, 17)
        state.set(AUTH_TOKEN, "token=own")

        coordinator.finish(failed=False)

        auth_client.create_token.assert_not_called()
        assert calls == [("delete_booking", 17, "token=own")]

    def test_self_heals_without_scenario_token(
        self, coordinator: LifecycleCoordinator, calls: list[tuple]
    ) -> None:
        state = coordinator.start("scenario")
        state.set(BOOKING_ID, 17)

        coordinator.finish(failed=False)

        assert calls == [
            ("create_token", TokenCredential("admin", "password123")),
            ("delete_booking", 17, "token=fresh"),
        ]
        event = coordinator.diagnostics.events_of("teardown-delete")[0]
        assert event.details == {"booking_id": 17, "status_code": 201}
        assert event.message == "Deleted booking 17"

    def test_rejected_admin_token_skips_delete(
        self,
        coordinator: LifecycleCoordinator,
        auth_client: MagicMock,
        booking_client: MagicMock,
    ) -> None:
        auth_client.create_token.side_effect = None
        auth_client.create_token.return_value = exchange(401, '{"error": "Invalid credentials"}')
        state = coordinator.start("scenario")
        state.set(BOOKING_ID, 17)

        coordinator.finish(failed=False)

        booking_client.delete_booking.assert_not_called()
        assert len(coordinator.diagnostics.events_of("teardown-skipped")) == 1

    def test_transport_failure_is_swallowed(
        self, coordinator: LifecycleCoordinator, booking_client: MagicMock
    ) -> None:
        booking_client.delete_booking.side_effect = TransportError(
            "DELETE failed", "DELETE", "https://booker.test/api/booking/17"
        )
        state = coordinator.start("scenario")
        state.set(BOOKING_ID, 17)
        state.set(AUTH_TOKEN, "token=own")

        coordinator.finish(failed=False)

        failures = coordinator.diagnostics.events_of("teardown-failed")
        assert failures[0].details == {"error": "TransportError"}
        assert coordinator.stage is Stage.END

    def test_token_request_failure_is_swallowed(
        self, coordinator: LifecycleCoordinator, auth_client: MagicMock
    ) -> None:
        auth_client.create_token.side_effect = TransportError(
            "POST failed", "POST", "https://booker.test/api/auth/login"
        )
        state = coordinator.start("scenario")
        state.set(BOOKING_ID, 17)

        coordinator.finish(failed=True)

        assert len(coordinator.diagnostics.events_of("teardown-failed")) == 1

    def test_failed_delete_status_is_swallowed(
        self, coordinator: LifecycleCoordinator, booking_client: MagicMock
    ) -> None:
        booking_client.delete_booking.side_effect = None
        booking_client.delete_booking.return_value = exchange(500, "boom", method="DELETE")
        state = coordinator.start("scenario")
        state.set(BOOKING_ID, 17)
        state.set(AUTH_TOKEN, "token=own")

        coordinator.finish(failed=False)

        event = coordinator.diagnostics.events_of("teardown-delete")[0]
        assert event.details["status_code"] == 500
        assert event.message == "Delete of booking 17 returned 500"


class TestIsolation:
    """Test that concurrent scenarios never see each other's state."""

    def test_parallel_coordinators(
        self, env_config: EnvironmentConfig, auth_client: MagicMock
    ) -> None:
        seen: dict[int, object] = {}
        deleted: list[tuple[int, str]] = []
        lock = threading.Lock()
        barrier = threading.Barrier(6)

        booking_client = MagicMock(spec=BookingClient)

        def delete_booking(booking_id, auth_header=None):
            with lock:
                deleted.append((booking_id, auth_header))
            return exchange(200, method="DELETE")

        booking_client.delete_booking.side_effect = delete_booking

        def run(worker: int) -> None:
            coordinator = LifecycleCoordinator(
                env_config,
                MagicMock(),
                auth_client=auth_client,
                booking_client=booking_client,
            )
            state = coordinator.start(f"scenario {worker}")
            state.set(BOOKING_ID, worker)
            state.set(AUTH_TOKEN, f"token=worker-{worker}")
            barrier.wait()
            seen[worker] = state.get(BOOKING_ID)
            coordinator.finish(failed=False)

        threads = [threading.Thread(target=run, args=(i,)) for i in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert seen == {i: i for i in range(6)}
        assert sorted(deleted) == [(i, f"token=worker-{i}") for i in range(6)]
