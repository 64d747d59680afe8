"""Acceptance-test harness for the booking HTTP API."""

__version__ = "0.1.0"
