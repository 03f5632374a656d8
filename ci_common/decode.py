"""
Defensive decode primitives for job-queue payloads.

Field-level defects (missing, null or wrong-typed values) never raise here:
each converter returns None when it cannot produce a value and
decode_field() falls back to the caller's default. Only whole-body failures
raise DecodeError.
"""

import json
import logging
import math
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

# Go serializes an unset time.Time as year 1
_ZERO_TIME_YEAR = 1


class DecodeError(ValueError):
    """Raised when a response body is not JSON or has the wrong top-level shape."""


def parse_body(text: str | bytes | None, allow_empty: bool = False) -> Any:
    """
    Parse a raw response body as JSON.

    Args:
        text: Response body
        allow_empty: Return None for an empty body instead of raising

    Returns:
        The parsed JSON value

    Raises:
        DecodeError: If the body is empty (and not allowed) or not valid JSON
    """
    if text is None or not text.strip():
        if allow_empty:
            return None
        raise DecodeError("Empty response body")
    try:
        return json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"Invalid JSON: {e}") from e


def decode_field(
    data: dict[str, Any],
    keys: str | Iterable[str],
    convert: Callable[[Any], Any],
    default: Any = None,
) -> Any:
    """
    Read one field with fallback.

    Candidate keys are tried in order; the first key whose value converts
    successfully wins. If none does, the default is returned.
    """
    if isinstance(keys, str):
        keys = (keys,)
    for key in keys:
        value = convert(data.get(key))
        if value is not None:
            return value
    return default


def as_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def as_int(value: Any) -> int | None:
    """Accept real integers only; bools and numeric strings are rejected."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def as_float(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    result = float(value)
    return result if math.isfinite(result) else None


def as_mapping(value: Any) -> dict[str, Any] | None:
    return value if isinstance(value, dict) else None


def as_str_list(value: Any) -> tuple[str, ...] | None:
    """Keep non-empty string entries of a list, silently dropping the rest."""
    if not isinstance(value, list):
        return None
    return tuple(item for item in value if isinstance(item, str) and item)


def as_timestamp(value: Any) -> datetime | None:
    """
    Leniently parse an ISO-8601 timestamp.

    Empty strings, unparsable strings and Go's zero time all mean "no value".
    Naive timestamps are assumed to be UTC so that every parsed value compares
    with every other.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Ignoring unparsable timestamp {value!r}")
        return None
    if parsed.year == _ZERO_TIME_YEAR:
        return None
    try:
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)
    except (OverflowError, ValueError):
        logger.debug(f"Ignoring out-of-range timestamp {value!r}")
        return None
