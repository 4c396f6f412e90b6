import math
from typing import List, Tuple
from .models import HhServices, HhsData
from .projection import growth_factor, mid_year_discount

WEEKS_PER_YEAR = 52


def household_stream(hh_services: HhServices, derived_yfs: float,
                     enable_present_value: bool = True) -> List[Tuple[float, float]]:
    """(annual value, present value) for each future year, empty when inactive."""
    if not hh_services.active:
        return []

    stream = []
    for i in range(math.ceil(derived_yfs)):
        annual_value = (hh_services.hours_per_week * WEEKS_PER_YEAR * hh_services.hourly_rate *
                        growth_factor(hh_services.growth_rate, i))
        discount = mid_year_discount(hh_services.discount_rate, i, enable_present_value)
        stream.append((annual_value, annual_value * discount))
    return stream


def compute_hhs_data(hh_services: HhServices, derived_yfs: float,
                     enable_present_value: bool = True) -> HhsData:
    """Nominal and present value of replacement household services."""
    total_nom = 0.0
    total_pv = 0.0
    for annual_value, present_value in household_stream(hh_services, derived_yfs, enable_present_value):
        total_nom += annual_value
        total_pv += present_value
    return HhsData(total_nom=total_nom, total_pv=total_pv)
