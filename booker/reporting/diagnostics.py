"""Structured event trail of one scenario, streamed as JSON lines."""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiagnosticEvent:
    """One lifecycle or teardown event.

    Attributes
    ----------
    kind : str
        Event kind, e.g. "stage" or "teardown-delete"
    message : str
        Short human-readable summary
    details : dict[str, Any]
        Structured context such as the booking id or status code
    recorded_at : float
        Epoch seconds at which the event was recorded
    """

    kind: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    recorded_at: float = field(default_factory=time.time)

    def to_json(self) -> str:
        return json.dumps(asdict(self), default=str, sort_keys=True)


class DiagnosticsCollector:
    """Collects the events of one scenario.

    With a log path, every event is appended to that file as one JSON line
    the moment it is recorded, so the trail survives a run killed
    mid-scenario.

    Parameters
    ----------
    log_path : Path | None
        File receiving the JSON lines; None keeps events in memory only
    """

    def __init__(self, log_path: Path | None = None) -> None:
        self.log_path = Path(log_path) if log_path is not None else None
        self._events: list[DiagnosticEvent] = []
        self._lock = threading.Lock()

    @property
    def events(self) -> list[DiagnosticEvent]:
        with self._lock:
            return list(self._events)

    def record(
        self, kind: str, message: str, details: dict[str, Any] | None = None
    ) -> DiagnosticEvent:
        """Record an event and stream it to the log file, if any."""
        event = DiagnosticEvent(kind, message, dict(details or {}))

        with self._lock:
            self._events.append(event)
            if self.log_path is not None:
                self._append(event)

        logger.debug("%s: %s %s", kind, message, event.details)
        return event

    def _append(self, event: DiagnosticEvent) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with self.log_path.open("a", encoding="utf-8") as stream:
            stream.write(event.to_json() + "\n")

    def events_of(self, kind: str) -> list[DiagnosticEvent]:
        return [event for event in self.events if event.kind == kind]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
