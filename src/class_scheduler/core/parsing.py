'''
Lenient parsers for the free-text subject fields entered in the admin
dashboard ("60, 90" for durations and '"60": 40, "90": 55' for prices).
Unreadable input is dropped rather than rejected.
'''
import json
import re
from typing import Any

_LEADING_INT = re.compile(r'^[+-]?\d+')


def _leading_int(token: str) -> int | None:
    """Returns the integer a token starts with ("90min" -> 90), or None."""
    match = _LEADING_INT.match(token.strip())
    if not match:
        return None
    return int(match.group(0))


def parse_durations(raw: str) -> list[int]:
    """
    Parses a comma-separated list of minutes.
    Tokens without a leading integer, and non-positive values, are dropped.
    """
    durations = []
    for token in raw.split(','):
        value = _leading_int(token)
        if value is not None and value > 0:
            durations.append(value)
    return durations


def _is_positive_number(value: Any) -> bool:
    # bool is an int subclass; "true" is not a price
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def clean_price_map(prices: dict[Any, Any]) -> dict[str, float | int]:
    """Keeps only entries whose price is a positive number, keyed by string label."""
    return {str(label): price for label, price in prices.items() if _is_positive_number(price)}


def parse_price_map(raw: str) -> dict[str, float | int]:
    """
    Parses the body of a JSON object ('"60": 40, "90": 55').
    A body that is not valid JSON yields an empty mapping.
    """
    try:
        parsed = json.loads(f"{{{raw}}}")
    except json.JSONDecodeError:
        return {}
    if not isinstance(parsed, dict):
        return {}
    return clean_price_map(parsed)
