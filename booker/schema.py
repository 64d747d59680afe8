"""JSON-schema contract checks for response bodies."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from importlib import resources
from typing import Any

import jsonschema

from booker.exceptions import SchemaValidationError
from booker.exchange import HttpExchange

logger = logging.getLogger(__name__)

SCHEMA_PACKAGE = "booker.schemas"


@lru_cache(maxsize=None)
def load_schema(schema_name: str) -> dict[str, Any]:
    """Load a bundled schema by name, without the ``.json`` suffix.

    Raises
    ------
    FileNotFoundError
        If no schema with that name is bundled
    """
    resource = resources.files(SCHEMA_PACKAGE).joinpath(f"{schema_name}.json")

    if not resource.is_file():
        raise FileNotFoundError(f"No bundled schema named '{schema_name}'")

    return json.loads(resource.read_text(encoding="utf-8"))


def validate_exchange(exchange: HttpExchange, schema_name: str) -> None:
    """Validate a response body against a bundled schema.

    Parameters
    ----------
    exchange : HttpExchange
        Exchange whose body is checked
    schema_name : str
        Name of the bundled schema

    Raises
    ------
    SchemaValidationError
        If the body is not JSON or violates the schema
    """
    if exchange.body is None:
        raise SchemaValidationError(
            f"Response body is not JSON, cannot validate against '{schema_name}': "
            f"{exchange.text!r}"
        )

    schema = load_schema(schema_name)

    try:
        jsonschema.validate(instance=exchange.body, schema=schema)
    except jsonschema.ValidationError as e:
        location = e.json_path
        logger.debug("Schema '%s' violated at %s: %s", schema_name, location, e.message)
        raise SchemaValidationError(
            f"Response does not match '{schema_name}' at {location}: {e.message}"
        ) from e
