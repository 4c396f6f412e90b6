import math
import logging
from typing import Dict, Optional
from .dates import parse_date
from .models import (
    Algebraic, CaseInfo, DateCalc, EarningsParams, FutureScheduleRow, PastScheduleRow, Projection,
)

logger = logging.getLogger(__name__)


def growth_factor(rate: float, years: float) -> float:
    """Compound growth of 1.0 at rate percent per year."""
    return (1 + rate / 100) ** years


def mid_year_discount(rate: float, index: float, enabled: bool = True) -> float:
    """Discount factor for a cash flow received in the middle of year index (0-based)."""
    if not enabled:
        return 1.0
    return 1 / (1 + rate / 100) ** (index + 0.5)


def parse_actual(value) -> Optional[float]:
    """A manually entered gross actual, or None if blank or not numeric."""
    if value is None:
        return None
    text = str(value).strip().replace(',', '').replace('$', '')
    if not text:
        return None
    try:
        amount = float(text)
    except ValueError:
        logger.debug(f"Ignoring non-numeric actual earnings entry: {value!r}")
        return None
    return amount if math.isfinite(amount) else None


def compute_projection(case_info: CaseInfo, earnings_params: EarningsParams, algebraic: Algebraic,
                       past_actuals: Dict[int, str], date_calc: DateCalc) -> Projection:
    """
    Build the past and future earnings loss schedules.

    Past years run calendar year by calendar year from the year of injury, the
    last one prorated to the partial year before trial. A manual actual for a
    calendar year replaces the residual-capacity estimate for that year and is
    scaled by the realized multiplier. Future years are discounted with the
    mid-year convention.
    """
    injury = parse_date(case_info.date_of_injury)
    if injury is None:
        return Projection()

    past_schedule = []
    total_past_loss = 0.0

    full_past = math.floor(date_calc.past_years)
    partial_past = date_calc.past_years - full_past

    for i in range(full_past + 1):
        fraction = partial_past if i == full_past else 1.0
        if fraction <= 0:
            continue

        year = injury.year + i
        growth = growth_factor(earnings_params.wage_growth, i)
        gross_base = earnings_params.base_earnings * growth * fraction
        net_but_for = gross_base * algebraic.full_multiplier

        manual = parse_actual(past_actuals.get(year, past_actuals.get(str(year))))
        if manual is not None:
            gross_actual = manual
            net_actual = gross_actual * algebraic.realized_multiplier
        else:
            gross_actual = earnings_params.residual_earnings * growth * fraction
            net_actual = gross_actual * algebraic.full_multiplier

        net_loss = net_but_for - net_actual
        total_past_loss += net_loss
        past_schedule.append(PastScheduleRow(
            year=year,
            label=f"Past-{i + 1}",
            gross_base=gross_base,
            gross_actual=gross_actual,
            net_loss=net_loss,
            is_manual=manual is not None,
            fraction=fraction,
        ))

    future_schedule = []
    total_future_nominal = 0.0
    total_future_pv = 0.0

    for i in range(math.ceil(date_calc.derived_yfs)):
        growth = growth_factor(earnings_params.wage_growth, i)
        discount = mid_year_discount(earnings_params.discount_rate, i,
                                     earnings_params.enable_present_value)
        gross_base = earnings_params.base_earnings * growth
        net_but_for = gross_base * algebraic.full_multiplier
        # Residual earnings are still projected, so they take the full multiplier
        net_actual = earnings_params.residual_earnings * growth * algebraic.full_multiplier
        net_loss = net_but_for - net_actual
        pv = net_loss * discount

        total_future_nominal += net_loss
        total_future_pv += pv
        future_schedule.append(FutureScheduleRow(year=i + 1, gross=gross_base, net_loss=net_loss, pv=pv))

    return Projection(
        past_schedule=tuple(past_schedule),
        future_schedule=tuple(future_schedule),
        total_past_loss=total_past_loss,
        total_future_nominal=total_future_nominal,
        total_future_pv=total_future_pv,
    )
