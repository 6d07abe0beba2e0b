"""Date and amount tolerance evaluators."""

import math
from datetime import UTC, date, datetime, time
from decimal import ROUND_HALF_UP, Decimal

# Default amount tolerances
ABSOLUTE_TOLERANCE = Decimal("1.00")
PERCENTAGE_TOLERANCE = Decimal("0.005")

_CENT = Decimal("0.01")
_SECONDS_PER_DAY = 86400


def date_difference_days(d1: date | datetime | None, d2: date | datetime | None) -> int | None:
    """Absolute difference between two dates in whole days.

    Returns None if either date is missing. Partial days round up, so two
    timestamps 25 hours apart are 2 days apart.
    """
    if d1 is None or d2 is None:
        return None

    delta = _as_datetime(d1) - _as_datetime(d2)
    return math.ceil(abs(delta.total_seconds()) / _SECONDS_PER_DAY)


def amount_within_tolerance(
    a: Decimal | None,
    b: Decimal | None,
    absolute_tol: Decimal = ABSOLUTE_TOLERANCE,
    pct_tol: Decimal = PERCENTAGE_TOLERANCE,
) -> bool:
    """Check whether two amounts are close enough.

    Either rule is sufficient: the absolute difference is at most
    ``absolute_tol``, or the difference relative to the mean of the two
    amounts is at most ``pct_tol``. Missing or zero amounts never match.
    """
    if not a or not b:
        return False

    diff = abs(a - b)
    if diff <= absolute_tol:
        return True

    avg = (a + b) / 2
    if avg <= 0:
        return False
    return diff / avg <= pct_tol


def to_minor_units(amount: Decimal) -> int:
    """Convert an amount to integer cents."""
    return int(amount.quantize(_CENT, rounding=ROUND_HALF_UP) * 100)


def amounts_equal(a: Decimal | None, b: Decimal | None) -> bool:
    """Exact amount equality, compared in minor units."""
    if a is None or b is None:
        return False
    return to_minor_units(a) == to_minor_units(b)


def _as_datetime(value: date | datetime) -> datetime:
    # Aware timestamps are shifted to naive UTC; naive ones are taken as UTC
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(UTC).replace(tzinfo=None)
        return value
    return datetime.combine(value, time.min)
