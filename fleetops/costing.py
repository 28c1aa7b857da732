"""Per-mile cost rollups for trips and quotes.

All arithmetic runs on ``Decimal`` so totals accumulated from stored
rates never pick up binary floating point drift.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CENTS = Decimal("0.01")
MARGIN_PLACES = Decimal("0.000001")
ZERO = Decimal("0")


@dataclass(frozen=True)
class CostResult:
    """Derived cost figures for a mileage/rate/revenue triple."""

    total_cpm: Decimal
    total_cost: Decimal
    profit: Decimal
    margin_pct: Decimal | None
    rpm: Decimal | None
    cpm: Decimal | None
    ppm: Decimal | None


def to_decimal(value: Any) -> Decimal:
    """Coerce a loosely typed numeric input, treating junk as zero."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, float):
        # repr() keeps 0.1 as Decimal("0.1") instead of its binary expansion
        value = repr(value)
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    return result if result.is_finite() else ZERO


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def calc_cost(
    miles: Any,
    fixed_cpm: Any = None,
    wage_cpm: Any = None,
    add_ons_cpm: Any = None,
    rolling_cpm: Any = None,
    revenue: Any = None,
) -> CostResult:
    """Compute total cost, profit, and margin for a run.

    Args:
        miles: Loaded miles for the run.
        fixed_cpm: Fixed cost per mile.
        wage_cpm: Driver wage per mile.
        add_ons_cpm: Accessorial add-ons per mile.
        rolling_cpm: Fuel, tires and maintenance per mile.
        revenue: Revenue for the run. Absent means zero.

    Returns:
        CostResult with ``margin_pct`` as a fraction of revenue to six
        places, or ``None`` when there is no revenue, so "no revenue" is
        distinguishable from "zero margin".
    """
    distance = to_decimal(miles)
    income = to_decimal(revenue)

    total_cpm = (
        to_decimal(fixed_cpm)
        + to_decimal(wage_cpm)
        + to_decimal(add_ons_cpm)
        + to_decimal(rolling_cpm)
    )
    total_cost = round_money(distance * total_cpm)
    profit = round_money(income - total_cost)
    margin_pct = None
    if income != ZERO:
        margin_pct = (profit / income).quantize(MARGIN_PLACES, rounding=ROUND_HALF_UP)

    if distance != ZERO:
        rpm, cpm, ppm = income / distance, total_cost / distance, profit / distance
    else:
        rpm = cpm = ppm = None

    return CostResult(
        total_cpm=total_cpm,
        total_cost=total_cost,
        profit=profit,
        margin_pct=margin_pct,
        rpm=rpm,
        cpm=cpm,
        ppm=ppm,
    )
