"""Harness-specific exceptions."""


class BookerError(Exception):
    """Base class for all harness errors."""

    pass


class ConfigurationError(BookerError):
    """Raised when the environment configuration cannot be resolved.

    Fatal: the run is aborted before any scenario executes.
    """

    pass


class TransportError(BookerError):
    """Raised when an HTTP call fails below the HTTP layer.

    Connection refused, DNS failure and timeouts end up here. Any response
    that reached us, whatever its status code, is returned as data instead.

    Parameters
    ----------
    message : str
        Human-readable error description
    method : str
        HTTP method of the failed call
    url : str
        Target URL of the failed call
    """

    def __init__(self, message: str, method: str, url: str) -> None:
        super().__init__(message)
        self.method = method
        self.url = url


class StateKeyNotFoundError(BookerError, KeyError):
    """Raised when reading a scenario state key that was never set."""

    pass


class LifecycleError(BookerError):
    """Raised when a lifecycle stage is entered out of order."""

    pass


class SchemaValidationError(BookerError, AssertionError):
    """Raised when a response body does not match its contract schema."""

    pass
