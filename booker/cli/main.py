"""CLI entry point for the booking API acceptance suite."""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Callable

import fire

from booker.clients.booking import BookingClient
from booker.config import load_environment_config
from booker.constants import ENV_VAR_CONFIG_DIR, ENV_VAR_DEBUG, ENV_VAR_ENVIRONMENT
from booker.exceptions import ConfigurationError, TransportError
from booker.logging import configure_logging

logger = logging.getLogger(__name__)

EXIT_TRANSPORT_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2


def run_behave(args: list[str]) -> int:
    """Run behave in-process and return its exit code."""
    from behave.__main__ import main as behave_main

    return behave_main(args)


class BookerCLI:
    """Commands for running and inspecting the acceptance suite.

    Parameters
    ----------
    behave_runner : Callable[[list[str]], int] | None
        Function running behave with an argument list (default: in-process
        behave)
    """

    def __init__(self, behave_runner: Callable[[list[str]], int] | None = None) -> None:
        self._behave_runner = behave_runner or run_behave

    def run(
        self,
        env: str | None = None,
        tags: str | None = None,
        format: str = "pretty",
        config_dir: str | None = None,
        paths: str = "features",
    ) -> int:
        """Run the feature files against an environment.

        Parameters
        ----------
        env : str | None
            Environment name; exported as BOOKER_ENV for the hooks
        tags : str | None
            behave tag expression, e.g. "@smoke and not @wip"
        format : str
            behave formatter name
        config_dir : str | None
            Directory holding environment YAML files
        paths : str
            Feature directory or file

        Returns
        -------
        int
            behave exit code

        Raises
        ------
        ConfigurationError
            If the environment configuration cannot be resolved
        """
        config = load_environment_config(env, config_dir)
        os.environ[ENV_VAR_ENVIRONMENT] = config.name
        if config_dir is not None:
            os.environ[ENV_VAR_CONFIG_DIR] = config_dir

        args = [paths, "--format", format]
        if tags:
            args.extend(["--tags", tags])

        logger.info("Running %s against '%s' (%s)", paths, config.name, config.base_url)
        return self._behave_runner(args)

    def config(self, env: str | None = None, config_dir: str | None = None) -> str:
        """Print the resolved configuration with the password masked."""
        config = load_environment_config(env, config_dir)
        return json.dumps(config.masked(), indent=2)

    def health(self, env: str | None = None, config_dir: str | None = None) -> bool:
        """Call the health endpoint and report whether it answered 200."""
        config = load_environment_config(env, config_dir)
        exchange = BookingClient(config).check_health()
        logger.info("Health of '%s': HTTP %s", config.base_url, exchange.status_code)
        return exchange.status_code == 200


def handle_error(error: Exception, exit_code: int, debug_mode: bool) -> None:
    """Report a fatal error and exit.

    Parameters
    ----------
    error : Exception
        The error that was raised
    exit_code : int
        Process exit code
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    Exception
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise error

    print(f"Error: {error}", file=sys.stderr)
    sys.exit(exit_code)


def main() -> None:
    """Entry point for the Fire CLI with graceful error handling."""
    configure_logging(logging.INFO)
    debug_mode = os.environ.get(ENV_VAR_DEBUG) == "1"

    try:
        result = fire.Fire(BookerCLI)
    except ConfigurationError as e:
        handle_error(e, EXIT_CONFIGURATION_ERROR, debug_mode)
    except TransportError as e:
        handle_error(e, EXIT_TRANSPORT_ERROR, debug_mode)
    else:
        if isinstance(result, bool):
            sys.exit(0 if result else 1)
        if isinstance(result, int):
            sys.exit(result)
