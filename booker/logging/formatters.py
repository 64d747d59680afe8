"""Logging formatters tagging records with their scenario."""

import logging
import sys

DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
QUIET_LOGGERS = ("urllib3", "charset_normalizer")


class ScenarioFormatter(logging.Formatter):
    """Logging formatter that prepends the scenario name from the extra parameter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with scenario prefix if present.

        Parameters
        ----------
        record : logging.LogRecord
            Log record to format

        Returns
        -------
        str
            Formatted log message with optional scenario prefix
        """
        msg = super().format(record)
        scenario = getattr(record, "scenario", None)

        if scenario:
            return f"[{scenario}] {msg}"

        return msg


def configure_logging(level: str | int = logging.INFO) -> logging.Handler:
    """Install a stderr handler on the root logger.

    Parameters
    ----------
    level : str | int
        Root logging level

    Returns
    -------
    logging.Handler
        The installed handler
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ScenarioFormatter(DEFAULT_FORMAT))

    logging.basicConfig(level=level, handlers=[handler], force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return handler
