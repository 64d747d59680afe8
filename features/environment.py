"""Behave environment configuration for the booking API suite."""

import logging

from behave.model import Scenario
from behave.runner import Context

from booker.clients import AuthClient, BookingClient
from booker.config import load_environment_config
from booker.lifecycle import LifecycleCoordinator
from booker.logging import ScenarioLogCapture, configure_logging
from booker.reporting import ArtifactAttachmentSink, DiagnosticsCollector

logger = logging.getLogger(__name__)

FAILED_STATUSES = {"failed", "error", "hook_error"}


def scenario_failed(scenario: Scenario) -> bool:
    """Return True when behave marked the scenario as failed or errored."""
    status = scenario.status
    return getattr(status, "name", str(status)) in FAILED_STATUSES


def before_all(context: Context) -> None:
    """Resolve the environment once; a ConfigurationError aborts the run."""
    api_config = load_environment_config()
    configure_logging(api_config.log_level)

    context.api_config = api_config
    context.auth_client = AuthClient(api_config)
    context.booking_client = BookingClient(api_config)

    logger.info(f"Testing environment '{api_config.name}' at {api_config.base_url}")


def before_scenario(context: Context, scenario: Scenario) -> None:
    """Create the scenario's sink, diagnostics and state."""
    artifacts = ArtifactAttachmentSink()
    scenario_dir = artifacts.create_scenario_dir(f"{scenario.feature.name} {scenario.name}")
    diagnostics = DiagnosticsCollector(log_path=scenario_dir / "diagnostics.log")

    log_capture = ScenarioLogCapture()
    logging.getLogger().addHandler(log_capture)

    coordinator = LifecycleCoordinator(
        context.api_config,
        artifacts,
        auth_client=context.auth_client,
        booking_client=context.booking_client,
        diagnostics=diagnostics,
    )

    context.artifacts = artifacts
    context.log_capture = log_capture
    context.lifecycle = coordinator
    context.scenario_state = coordinator.start(scenario.name)


def after_scenario(context: Context, scenario: Scenario) -> None:
    """Capture diagnostics, tear down created data and release the state."""
    lifecycle = getattr(context, "lifecycle", None)
    if lifecycle is None:
        return

    failed = scenario_failed(scenario)

    try:
        lifecycle.finish(failed)
    finally:
        log_capture = context.log_capture
        logging.getLogger().removeHandler(log_capture)

        try:
            if failed:
                context.artifacts.write_file("scenario.log", log_capture.render())
            context.artifacts.cleanup(preserve_on_failure=failed)
        except OSError as e:
            logger.warning(f"Failed to finalize artifacts for '{scenario.name}': {e}")

        context.scenario_state = None
