"""Logging handlers capturing the records of one scenario."""

import logging
import threading

from booker.logging.formatters import DEFAULT_FORMAT, ScenarioFormatter


class ScenarioLogCapture(logging.Handler):
    """Buffers log records emitted while a scenario runs.

    Attach to the root logger in before_scenario and detach in
    after_scenario; the rendered buffer is written next to the failure
    attachments.

    Attributes
    ----------
    records : list[logging.LogRecord]
        Captured records in emission order
    """

    def __init__(self, level: int = logging.DEBUG) -> None:
        super().__init__(level)
        self.records: list[logging.LogRecord] = []
        self._records_lock = threading.Lock()
        self.setFormatter(ScenarioFormatter(DEFAULT_FORMAT))

    def emit(self, record: logging.LogRecord) -> None:
        with self._records_lock:
            self.records.append(record)

    def render(self) -> str:
        """Return the captured records formatted one per line."""
        with self._records_lock:
            records = list(self.records)

        return "\n".join(self.format(record) for record in records) + ("\n" if records else "")

    def clear(self) -> None:
        with self._records_lock:
            self.records.clear()
