"""
Value Comparator — compares one actual value against an expected value.

Every comparison first runs both sides through ``coerce_value`` so that
ISO-8601 date-time strings (how dates are stored on customers) compare as
datetimes. Operator/type pairs that make no sense return False; the
comparator never raises.
"""

import re
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional, Sequence

from audience_engine.models.query import ComparisonOperator, DateOperator
from audience_engine.time_window.resolver import (
    as_utc,
    is_bounded_window,
    resolve_time_window,
    utc_now,
)

# A calendar date immediately followed by a time part.
_ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}T")

_STRING_PREDICATES: Dict[str, Callable[[str, str], bool]] = {
    ComparisonOperator.CONTAINS.value: lambda a, e: e in a,
    ComparisonOperator.STARTS_WITH.value: lambda a, e: a.startswith(e),
    ComparisonOperator.ENDS_WITH.value: lambda a, e: a.endswith(e),
}

_NUMERIC_ORDERING: Dict[str, Callable[[float, float], bool]] = {
    ComparisonOperator.GREATER_THAN.value: lambda a, e: a > e,
    ComparisonOperator.LESS_THAN.value: lambda a, e: a < e,
    ComparisonOperator.GREATER_THAN_OR_EQUAL.value: lambda a, e: a >= e,
    ComparisonOperator.LESS_THAN_OR_EQUAL.value: lambda a, e: a <= e,
}


def parse_datetime(text: str) -> Optional[datetime]:
    """Parse an ISO-8601 string into an aware datetime, or None."""
    try:
        parsed = datetime.fromisoformat(text.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    return as_utc(parsed)


def coerce_value(value: Any) -> Any:
    """
    Normalize a value before comparison.

    Strings that start with an ISO-8601 date and time become aware datetimes
    (date-only strings stay strings), bare ``date`` objects become midnight
    UTC, and pairs are coerced element-wise.
    Everything else is returned unchanged.
    """
    if isinstance(value, str):
        if _ISO_DATE_PREFIX.match(value):
            parsed = parse_datetime(value)
            if parsed is not None:
                return parsed
        return value
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return as_utc(datetime(value.year, value.month, value.day))
    if isinstance(value, (list, tuple)):
        return [coerce_value(v) for v in value]
    return value


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def compare(
    actual: Any,
    operator: str,
    expected: Any,
    now: Optional[datetime] = None,
) -> bool:
    """Return whether ``actual <operator> expected`` holds after coercion."""
    actual = coerce_value(actual)
    expected = coerce_value(expected)
    op = operator.value if isinstance(operator, (ComparisonOperator, DateOperator)) else operator

    if op in (DateOperator.BEFORE.value, DateOperator.AFTER.value):
        if isinstance(actual, datetime) and isinstance(expected, datetime):
            return actual < expected if op == DateOperator.BEFORE.value else actual > expected
        return False

    if op == ComparisonOperator.BETWEEN.value:
        return _between(actual, expected)

    if is_bounded_window(op):
        if isinstance(actual, datetime):
            cutoff = resolve_time_window(op, now or utc_now())
            return actual >= cutoff
        return False

    if isinstance(actual, str) and isinstance(expected, str):
        if op == ComparisonOperator.EQUALS.value:
            return actual == expected
        if op == ComparisonOperator.NOT_EQUALS.value:
            return actual != expected
        predicate = _STRING_PREDICATES.get(op)
        if predicate:
            return predicate(actual.lower(), expected.lower())
        return False

    if is_number(actual) and is_number(expected):
        if op == ComparisonOperator.EQUALS.value:
            return actual == expected
        if op == ComparisonOperator.NOT_EQUALS.value:
            return actual != expected
        ordering = _NUMERIC_ORDERING.get(op)
        if ordering:
            return ordering(actual, expected)
        return False

    if isinstance(actual, bool):
        if op == ComparisonOperator.IS_TRUE.value:
            return actual is True
        if op == ComparisonOperator.IS_FALSE.value:
            return actual is False
        # Strict: a boolean never equals a number.
        same = isinstance(expected, bool) and actual == expected
        if op == ComparisonOperator.EQUALS.value:
            return same
        if op == ComparisonOperator.NOT_EQUALS.value:
            return not same

    return False


def _between(actual: Any, bounds: Any) -> bool:
    """Inclusive range check over numbers or datetimes."""
    if not isinstance(bounds, Sequence) or isinstance(bounds, str) or len(bounds) != 2:
        return False
    low, high = bounds
    if isinstance(actual, datetime):
        if isinstance(low, datetime) and isinstance(high, datetime):
            return low <= actual <= high
        return False
    if is_number(actual) and is_number(low) and is_number(high):
        return low <= actual <= high
    return False
