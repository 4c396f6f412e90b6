from typing import Iterable, List, Tuple
from .models import LcpData, LcpItem, LcpItemResult


def escalated_cost(item: LcpItem, plan_year: int) -> float:
    """Cost of an item in a 1-based plan year, escalated from the valuation date."""
    return item.base_cost * (1 + item.cpi / 100) ** (plan_year - 1)


def plan_year_discount(discount_rate: float, plan_year: int, enabled: bool = True) -> float:
    """Mid-year discount factor for a 1-based plan year."""
    if not enabled:
        return 1.0
    return 1 / (1 + discount_rate / 100) ** (plan_year - 0.5)


def item_stream(item: LcpItem, discount_rate: float,
                enable_present_value: bool = True) -> List[Tuple[int, float, float]]:
    """(plan year, escalated cost, present value) for every year the item is active.

    For the frequency policies, period t of an item starting in plan year
    start_year falls in plan year t + start_year, so the escalation exponent is
    t + start_year - 1 and the discount exponent t + start_year - 0.5.
    """
    stream = []
    for plan_year in item.active_years():
        cost = escalated_cost(item, plan_year)
        stream.append((plan_year, cost, cost * plan_year_discount(discount_rate, plan_year, enable_present_value)))
    return stream


def compute_lcp_data(lcp_items: Iterable[LcpItem], discount_rate: float,
                     enable_present_value: bool = True) -> LcpData:
    """Project every life care plan item and total the plan."""
    results = []
    total_nom = 0.0
    total_pv = 0.0

    for item in lcp_items:
        item_nominal = 0.0
        item_pv = 0.0
        for _, cost, present_value in item_stream(item, discount_rate, enable_present_value):
            item_nominal += cost
            item_pv += present_value

        total_nom += item_nominal
        total_pv += item_pv
        results.append(LcpItemResult(item=item, total_nom=item_nominal, total_pv=item_pv))

    return LcpData(items=tuple(results), total_nom=total_nom, total_pv=total_pv)
