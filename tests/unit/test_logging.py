"""Unit tests for logging setup."""

import logging
from collections.abc import Generator

import pytest

from booker.logging import ScenarioFormatter, ScenarioLogCapture, configure_logging


@pytest.fixture
def restore_root_logger() -> Generator[None, None, None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level

    yield

    root.handlers[:] = handlers
    root.setLevel(level)


def make_record(message: str, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("booker.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestScenarioFormatter:
    def test_prefixes_scenario(self) -> None:
        formatter = ScenarioFormatter("%(message)s")

        assert formatter.format(make_record("Deleted", scenario="Delete booking")) == (
            "[Delete booking] Deleted"
        )

    def test_without_scenario(self) -> None:
        formatter = ScenarioFormatter("%(message)s")

        assert formatter.format(make_record("Hello")) == "Hello"


class TestConfigureLogging:
    def test_installs_single_handler(self, restore_root_logger: None) -> None:
        handler = configure_logging("DEBUG")
        configure_logging("DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(handler.formatter, ScenarioFormatter)

    def test_quiets_http_libraries(self, restore_root_logger: None) -> None:
        configure_logging(logging.DEBUG)

        assert logging.getLogger("urllib3").level == logging.WARNING


class TestScenarioLogCapture:
    def test_captures_and_renders(self) -> None:
        capture = ScenarioLogCapture()
        logger = logging.getLogger("booker.test.capture")
        logger.addHandler(capture)
        logger.setLevel(logging.DEBUG)

        try:
            logger.info("Teardown: deleted booking ID %s", 7, extra={"scenario": "s1"})
        finally:
            logger.removeHandler(capture)

        assert len(capture.records) == 1
        rendered = capture.render()
        assert rendered.startswith("[s1] ")
        assert rendered.endswith("Teardown: deleted booking ID 7\n")

    def test_render_empty(self) -> None:
        assert ScenarioLogCapture().render() == ""

    def test_clear(self) -> None:
        capture = ScenarioLogCapture()
        capture.emit(make_record("x"))

        capture.clear()

        assert capture.records == []
