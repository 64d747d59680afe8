"""Logging setup for harness runs."""

from booker.logging.formatters import ScenarioFormatter, configure_logging
from booker.logging.handlers import ScenarioLogCapture

__all__ = ["ScenarioFormatter", "ScenarioLogCapture", "configure_logging"]
