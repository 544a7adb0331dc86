"""Helper functions shared by the data sources."""

import json
import math
from collections.abc import Callable
from typing import Any

import structlog

from psm_monitor.fetch.errors import HttpFailedError
from psm_monitor.sources.errors import (
    ErrorRecord,
    ParseError,
    SchemaError,
    SourceError,
    SourceErrorClass,
)
from psm_monitor.sources.models import Reading


logger = structlog.get_logger()


def parse_json(body: bytes, source_id: str) -> Any:
    """Decode a JSON response body.

    Args:
        body: Raw response body.
        source_id: Source identifier for error reporting.

    Returns:
        Decoded JSON document.

    Raises:
        ParseError: If the body is not valid JSON or exceeds the
            decoder limits (integer digits, nesting depth).
    """
    try:
        return json.loads(body)
    except (ValueError, RecursionError) as e:
        msg = f"Invalid JSON: {e}"
        raise ParseError(msg, source_id=source_id) from e


def find_path(document: Any, path: str, source_id: str) -> Any:
    """Look up a dotted path in a decoded JSON document.

    Args:
        document: Decoded JSON document.
        path: Dotted key path, e.g. ``result.ProposeGasPrice``.
        source_id: Source identifier for error reporting.

    Returns:
        The value found at the path.

    Raises:
        SchemaError: If any segment is missing.
    """
    node = document
    for key in path.split("."):
        if not isinstance(node, dict) or key not in node:
            msg = f"Missing field '{path}'"
            raise SchemaError(msg, source_id=source_id, field=path)
        node = node[key]
    return node


def to_float(value: Any, path: str, source_id: str) -> float:
    """Convert a JSON number or numeric string to float.

    Args:
        value: Raw JSON value.
        path: Field path for error reporting.
        source_id: Source identifier for error reporting.

    Returns:
        The numeric value.

    Raises:
        SchemaError: If the value is not a finite number.
    """
    if isinstance(value, bool):
        msg = f"Field '{path}' is a boolean, expected a number"
        raise SchemaError(msg, source_id=source_id, field=path)

    if isinstance(value, int | float | str):
        try:
            number = float(value)
        except OverflowError as e:
            msg = f"Field '{path}' is out of float range"
            raise SchemaError(msg, source_id=source_id, field=path) from e
        except ValueError as e:
            msg = f"Field '{path}' is not numeric: {value!r}"
            raise SchemaError(msg, source_id=source_id, field=path) from e

        if not math.isfinite(number):
            msg = f"Field '{path}' is not a finite number: {value!r}"
            raise SchemaError(msg, source_id=source_id, field=path)
        return number

    msg = f"Field '{path}' has type {type(value).__name__}, expected a number"
    raise SchemaError(msg, source_id=source_id, field=path)


def read_scalar(source_id: str, read: Callable[[], float], **context: Any) -> Reading:
    """Run a source read and fold any failure into a Reading.

    Args:
        source_id: Source identifier.
        read: Callable that fetches and extracts the value.
        **context: Extra fields for the failure log line.

    Returns:
        Reading with the value, or with the zero sentinel and an error.
    """
    try:
        return Reading(value=read())
    except HttpFailedError as e:
        error = SourceError(SourceErrorClass.FETCH, str(e), source_id=source_id)
    except SourceError as e:
        error = e

    logger.warning(
        "source_read_failed",
        component="sources",
        source_id=source_id,
        error_class=error.error_class.value,
        error=error.message,
        **context,
    )
    return Reading(error=ErrorRecord.from_exception(error))
