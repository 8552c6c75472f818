"""
Field resolution and numeric parsing helpers for UEX payloads.

UEX reuses different field names for the same attribute depending on the
endpoint (public trade history says ``create_time``, the private one says
``ctime``). Every normalizer declares an ordered tuple of candidate names per
attribute and resolves it with ``first_present``; the tuple order is the
precedence order.

All numeric parsing goes through ``parse_decimal`` so that floats arriving
from JSON are converted via their shortest repr (0.0578 stays 0.0578 rather
than the binary expansion).
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Mapping, Optional, Sequence, TypeVar

T = TypeVar("T")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def first_present(payload: Mapping[str, Any], keys: Sequence[str]) -> Optional[Any]:
    """
    Return the value of the first key that is present and not None.

    Args:
        payload: Raw upstream object.
        keys: Candidate field names in precedence order.

    Returns:
        Optional[Any]: The first non-missing value, or None.

    Example:
        >>> first_present({"ctime": 1}, ("create_time", "ctime"))
        1
    """
    for key in keys:
        value = payload.get(key)
        if value is not None and value != "":
            return value
    return None


def first_parsed(
    payload: Mapping[str, Any],
    keys: Sequence[str],
    parser: Callable[[Any], Optional[T]],
) -> Optional[T]:
    """
    Return the first candidate value that the parser accepts.

    Unlike ``first_present`` a value that is present but unparseable does
    not stop the search; the next candidate is tried.
    """
    for key in keys:
        value = payload.get(key)
        if value is None or value == "":
            continue
        parsed = parser(value)
        if parsed is not None:
            return parsed
    return None


def parse_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """
    Parse an upstream number (str, int, float, Decimal) into a Decimal.

    Args:
        value: Raw value.
        default: Returned when the value is missing or not numeric.

    Returns:
        Optional[Decimal]: Parsed value or default.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value
    try:
        if isinstance(value, float):
            result = Decimal(repr(value))
        else:
            result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    if not result.is_finite():
        return default
    return result


def parse_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    """Parse an integer-valued field; fractional values are truncated."""
    number = parse_decimal(value)
    if number is None:
        return default
    return int(number)


def parse_timestamp_ms(value: Any) -> Optional[int]:
    """
    Parse a timestamp into epoch milliseconds.

    Accepts epoch milliseconds (int or numeric string) and ISO-8601 strings.
    Naive ISO-8601 values are interpreted as UTC. Returns None for values
    that cannot be interpreted.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return int(value)
    text = str(value).strip()
    if not text:
        return None
    if text.lstrip("-").isdigit():
        return int(text)
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return (parsed - _EPOCH) // timedelta(milliseconds=1)


def stringify(value: Any) -> str:
    """
    Deterministic string form of a request parameter value.

    Used both for the signature payload and for the query string so the
    two never disagree.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)
