from dataclasses import replace
from datetime import date
from typing import Iterable, List, Optional, Tuple
from .dates import compute_date_calc
from .factors import compute_algebraic
from .household import compute_hhs_data
from .life_care import compute_lcp_data
from .models import (
    CaseInputs, HhServices, HhsData, LcpData, Projection, ScenarioAssumptions, ScenarioProjection,
)
from .projection import compute_projection


ECONOMIC_SCENARIOS: Tuple[ScenarioAssumptions, ...] = (
    ScenarioAssumptions(id="conservative", label="Conservative", wage_growth=2.5, discount_rate=5.0),
    ScenarioAssumptions(id="standard", label="Standard"),
    ScenarioAssumptions(id="aggressive", label="Aggressive", wage_growth=4.0, discount_rate=3.5),
)

STANDARD_RETIREMENT_AGES = (65, 67, 70)


def retirement_age_scenarios(age_at_injury: float, wle: float) -> Tuple[ScenarioAssumptions, ...]:
    """Retirement-age scenarios: the age implied by WLE plus the standard ages."""
    scenarios = []
    wle_age = age_at_injury + wle
    if age_at_injury > 0 and wle > 0:
        scenarios.append(ScenarioAssumptions(
            id="wle", label=f"WLE (Age {wle_age:.1f})", retirement_age=wle_age))
    for age in STANDARD_RETIREMENT_AGES:
        scenarios.append(ScenarioAssumptions(id=f"age{age}", label=f"Age {age}", retirement_age=age))
    return tuple(scenarios)


def compute_grand_total(projection: Projection, hh_services: HhServices,
                        hhs_data: HhsData, lcp_data: LcpData) -> float:
    """Past loss + future PV + household services PV (when active) + life care PV."""
    household = hhs_data.total_pv if hh_services.active else 0.0
    return projection.total_past_loss + projection.total_future_pv + household + lcp_data.total_pv


def run_scenario(inputs: CaseInputs, assumptions: ScenarioAssumptions, hhs_data: HhsData,
                 lcp_data: LcpData, recompute_ancillary: bool = False,
                 today: Optional[date] = None) -> ScenarioProjection:
    """Re-run the earnings chain for a single scenario on cloned inputs."""
    case_info = assumptions.apply_case_info(inputs.case_info)
    earnings_params = assumptions.apply(inputs.earnings_params)

    date_calc = compute_date_calc(case_info, today)
    algebraic = compute_algebraic(earnings_params, date_calc.derived_yfs, inputs.is_union_mode)
    projection = compute_projection(case_info, earnings_params, algebraic,
                                    dict(inputs.past_actuals), date_calc)

    if recompute_ancillary:
        hhs_data = compute_hhs_data(inputs.hh_services, date_calc.derived_yfs,
                                    earnings_params.enable_present_value)
        lcp_data = compute_lcp_data(inputs.lcp_items, earnings_params.discount_rate,
                                    earnings_params.enable_present_value)

    return ScenarioProjection(
        id=assumptions.id,
        label=assumptions.label,
        assumptions=assumptions,
        date_calc=date_calc,
        algebraic=algebraic,
        projection=projection,
        hhs_data=hhs_data,
        lcp_data=lcp_data,
        grand_total=compute_grand_total(projection, inputs.hh_services, hhs_data, lcp_data),
    )


def run_scenarios(inputs: CaseInputs, scenarios: Iterable[ScenarioAssumptions], hhs_data: HhsData,
                  lcp_data: LcpData, recompute_ancillary: bool = False,
                  today: Optional[date] = None) -> List[ScenarioProjection]:
    """Run every scenario in the table. Household and life care totals are
    shared across scenarios unless recompute_ancillary is set."""
    return [run_scenario(inputs, assumptions, hhs_data, lcp_data, recompute_ancillary, today)
            for assumptions in scenarios]


def filter_included(scenarios: Iterable[ScenarioProjection]) -> List[ScenarioProjection]:
    """Scenarios the user has left included in the report."""
    return [scenario for scenario in scenarios if scenario.included]


def set_included(scenarios: Iterable[ScenarioProjection], scenario_id: str,
                 included: bool) -> List[ScenarioProjection]:
    """Return the scenarios with one scenario's included flag changed."""
    return [replace(scenario, included=included) if scenario.id == scenario_id else scenario
            for scenario in scenarios]
