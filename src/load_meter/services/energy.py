"""
Power-to-energy conversion in fixed-point milli-watt-hours.

energy_wh = power_w * duration_s / 3600, stored as round(energy_wh * 1000).
The arithmetic is done in Decimal on the decimal form of the inputs, so a
reading converts to the same integer every time and sums of stored deltas
never pick up binary floating point drift.

CHANGELOG:
- 2026-10-16: Reject infinite and NaN inputs
- 2026-10-09: Initial creation (STORY-004)

TODO:
- None
"""

from decimal import ROUND_HALF_UP, Decimal

SECONDS_PER_HOUR = Decimal(3600)
MWH_PER_WH = Decimal(1000)


def _to_decimal(value: float | int | str | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps the shortest repr of a float (0.1 -> "0.1")
    return Decimal(str(value))


def to_milliwatt_hours(
    power_w: float | int | str | Decimal,
    duration_s: float | int | str | Decimal,
) -> int:
    """Convert a power reading held for a duration into milli-watt-hours.

    Negative power and zero duration are not rejected; they yield negative
    or zero deltas. Halves round away from zero.

    Args:
        power_w: Instantaneous power in watts.
        duration_s: How long the reading lasted, in seconds.

    Returns:
        int: Energy in milli-watt-hours.

    Raises:
        ValueError: If either input is infinite or NaN.
    """
    power, duration = _to_decimal(power_w), _to_decimal(duration_s)
    if not (power.is_finite() and duration.is_finite()):
        raise ValueError(
            f"Non-finite reading: power_w={power_w} duration_s={duration_s}"
        )
    mwh = power * duration * MWH_PER_WH / SECONDS_PER_HOUR
    return int(mwh.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def milliwatt_hours_to_wh(mwh: int) -> Decimal:
    """Return a stored milli-watt-hour counter as watt-hours (3 decimals)."""
    return (Decimal(mwh) / MWH_PER_WH).quantize(Decimal("0.001"))
