import pandas as pd
from datetime import date
from typing import Dict, Any, Iterable, Optional
from .dates import compute_age_at_injury, compute_date_calc, parse_date
from .factors import compute_algebraic, compute_work_life_factor
from .household import compute_hhs_data, household_stream
from .life_care import compute_lcp_data, item_stream
from .models import CaseInputs, CaseResults, CPI_CATEGORIES, ScenarioAssumptions
from .projection import compute_projection
from .scenarios import ECONOMIC_SCENARIOS, compute_grand_total, run_scenarios

# Reconciliation tolerance in dollars
TOLERANCE = 1.0


def compute_case(inputs: CaseInputs, scenarios: Iterable[ScenarioAssumptions] = ECONOMIC_SCENARIOS,
                 today: Optional[date] = None, recompute_ancillary: bool = False) -> CaseResults:
    """Run the full calculation chain for a case."""
    earnings_params = inputs.earnings_params
    date_calc = compute_date_calc(inputs.case_info, today)
    algebraic = compute_algebraic(earnings_params, date_calc.derived_yfs, inputs.is_union_mode)
    projection = compute_projection(inputs.case_info, earnings_params, algebraic,
                                    inputs.past_actuals, date_calc)
    hhs_data = compute_hhs_data(inputs.hh_services, date_calc.derived_yfs,
                                earnings_params.enable_present_value)
    lcp_data = compute_lcp_data(inputs.lcp_items, earnings_params.discount_rate,
                                earnings_params.enable_present_value)

    return CaseResults(
        date_calc=date_calc,
        algebraic=algebraic,
        projection=projection,
        hhs_data=hhs_data,
        lcp_data=lcp_data,
        grand_total=compute_grand_total(projection, inputs.hh_services, hhs_data, lcp_data),
        scenarios=run_scenarios(inputs, scenarios, hhs_data, lcp_data, recompute_ancillary, today),
    )


class LossCalculator:
    """Builds schedules and summaries for a case's economic loss projection."""

    def __init__(self, inputs: CaseInputs, scenarios: Iterable[ScenarioAssumptions] = ECONOMIC_SCENARIOS,
                 today: Optional[date] = None, recompute_ancillary: bool = False):
        self.inputs = inputs
        self.today = today
        self.results = compute_case(inputs, tuple(scenarios), today, recompute_ancillary)

    @property
    def base_calendar_year(self) -> int:
        """Calendar year of the first future year (the trial year)."""
        trial = parse_date(self.inputs.case_info.date_of_trial)
        if trial is not None:
            return trial.year
        return (self.today or date.today()).year

    def build_past_schedule(self) -> pd.DataFrame:
        """Year-by-year past loss schedule from injury to trial."""
        rows = []
        for row in self.results.projection.past_schedule:
            rows.append({
                "Year": row.year,
                "Period": row.label,
                "Fraction": row.fraction,
                "Gross But-For": row.gross_base,
                "Gross Actual": row.gross_actual,
                "Manual Actual": row.is_manual,
                "Net Loss": row.net_loss,
            })

        df = pd.DataFrame(rows, columns=["Year", "Period", "Fraction", "Gross But-For",
                                         "Gross Actual", "Manual Actual", "Net Loss"])
        df["Cumulative Loss"] = df["Net Loss"].cumsum()
        return df

    def build_future_schedule(self) -> pd.DataFrame:
        """Year-by-year future loss schedule with present values."""
        base_year = self.base_calendar_year
        rows = []
        for row in self.results.projection.future_schedule:
            rows.append({
                "Year #": row.year,
                "Calendar Year": base_year + row.year - 1,
                "Gross Earnings": row.gross,
                "Net Loss": row.net_loss,
                "Present Value": row.pv,
            })

        df = pd.DataFrame(rows, columns=["Year #", "Calendar Year", "Gross Earnings", "Net Loss",
                                         "Present Value"])
        df["Cumulative PV"] = df["Present Value"].cumsum()
        return df

    def build_household_schedule(self) -> pd.DataFrame:
        """Year-by-year household services replacement value."""
        base_year = self.base_calendar_year
        stream = household_stream(self.inputs.hh_services, self.results.date_calc.derived_yfs,
                                  self.inputs.earnings_params.enable_present_value)
        rows = [{
            "Year #": i + 1,
            "Calendar Year": base_year + i,
            "Annual Value": annual_value,
            "Present Value": present_value,
        } for i, (annual_value, present_value) in enumerate(stream)]

        df = pd.DataFrame(rows, columns=["Year #", "Calendar Year", "Annual Value", "Present Value"])
        df["Cumulative PV"] = df["Present Value"].cumsum()
        return df

    def build_lcp_schedule(self) -> pd.DataFrame:
        """Life care plan costs by plan year, one column per item."""
        base_year = self.base_calendar_year
        discount_rate = self.inputs.earnings_params.discount_rate
        enable_pv = self.inputs.earnings_params.enable_present_value

        by_year: Dict[int, Dict[str, Any]] = {}
        columns = []
        for item in self.inputs.lcp_items:
            col_name = f'{item.name or "Item"} (#{item.id})\n({item.freq_type.value} @ {item.cpi:.2f}%)'
            columns.append(col_name)
            for plan_year, cost, present_value in item_stream(item, discount_rate, enable_pv):
                row = by_year.setdefault(plan_year, {
                    "Year #": plan_year,
                    "Calendar Year": base_year + plan_year - 1,
                    "Total Nominal": 0.0,
                    "Present Value": 0.0,
                })
                row[col_name] = row.get(col_name, 0.0) + cost
                row["Total Nominal"] += cost
                row["Present Value"] += present_value

        rows = [by_year[year] for year in sorted(by_year)]
        df = pd.DataFrame(rows, columns=["Year #", "Calendar Year"] + columns +
                          ["Total Nominal", "Present Value"])
        if columns:
            df[columns] = df[columns].fillna(0.0)
        df["Cumulative PV"] = df["Present Value"].cumsum()
        return df

    def build_scenario_table(self) -> pd.DataFrame:
        """Side-by-side comparison of scenario results."""
        rows = []
        for scenario in self.results.scenarios:
            assumptions = scenario.assumptions
            earnings_params = assumptions.apply(self.inputs.earnings_params)
            case_info = assumptions.apply_case_info(self.inputs.case_info)
            rows.append({
                "Scenario": scenario.label,
                "Retirement Age": case_info.retirement_age,
                "Wage Growth %": earnings_params.wage_growth,
                "Discount Rate %": earnings_params.discount_rate,
                "WLE": earnings_params.wle,
                "YFS": scenario.date_calc.derived_yfs,
                "WLF %": scenario.algebraic.wlf * 100,
                "Past Loss": scenario.projection.total_past_loss,
                "Future PV": scenario.projection.total_future_pv,
                "Earnings Loss": scenario.total_earnings_loss,
                "Grand Total": scenario.grand_total,
                "Included": scenario.included,
            })
        return pd.DataFrame(rows, columns=["Scenario", "Retirement Age", "Wage Growth %",
                                           "Discount Rate %", "WLE", "YFS", "WLF %", "Past Loss",
                                           "Future PV", "Earnings Loss", "Grand Total", "Included"])

    def calculate_summary_statistics(self) -> Dict[str, Any]:
        """Calculate headline figures for the case."""
        results = self.results
        hh_active = self.inputs.hh_services.active
        selected = results.get_scenario(self.inputs.earnings_params.selected_scenario)

        return {
            "age_at_injury": compute_age_at_injury(self.inputs.case_info),
            "age_at_trial": float(results.date_calc.age_trial),
            "past_years": results.date_calc.past_years,
            "years_to_final_separation": results.date_calc.derived_yfs,
            "work_life_factor": compute_work_life_factor(self.inputs.earnings_params,
                                                         results.date_calc.derived_yfs),
            "full_multiplier": results.algebraic.full_multiplier,
            "realized_multiplier": results.algebraic.realized_multiplier,
            "total_past_loss": results.projection.total_past_loss,
            "total_future_nominal": results.projection.total_future_nominal,
            "total_future_pv": results.projection.total_future_pv,
            "household_services_pv": results.hhs_data.total_pv if hh_active else 0.0,
            "life_care_plan_nominal": results.lcp_data.total_nom,
            "life_care_plan_pv": results.lcp_data.total_pv,
            "grand_total": results.grand_total,
            "selected_scenario": selected.label if selected else None,
            "selected_scenario_total": selected.grand_total if selected else None,
            "discount_rate": self.inputs.earnings_params.discount_rate,
        }

    def get_cost_by_category(self) -> Dict[str, Dict[str, Any]]:
        """Get life care plan costs broken down by CPI category."""
        category_costs = {}

        for result in self.results.lcp_data.items:
            item = result.item
            category = category_costs.setdefault(item.category_id, {
                "label": CPI_CATEGORIES.get(item.category_id, {}).get("label", item.category_id),
                "category_nominal_total": 0.0,
                "category_present_value_total": 0.0,
                "items": [],
            })
            category["category_nominal_total"] += result.total_nom
            category["category_present_value_total"] += result.total_pv
            category["items"].append({
                "id": item.id,
                "name": item.name,
                "base_cost": item.base_cost,
                "freq_type": item.freq_type.value,
                "duration": item.duration,
                "start_year": item.start_year,
                "cpi": item.cpi,
                "recurrence_interval": item.recurrence_interval,
                "nominal_total": result.total_nom,
                "present_value_total": result.total_pv,
            })

        return category_costs

    def quality_control_validation(self) -> Dict[str, Any]:
        """
        Reconcile every schedule against the scalar totals it should sum to:
        1. Past schedule net losses vs total past loss
        2. Future schedule nominal and PV vs future totals
        3. Household schedule vs household totals (when active)
        4. Life care plan year schedule vs per-item totals
        5. Grand total vs the sum of its components
        All checks pass within $1.
        """
        results = self.results
        past = self.build_past_schedule()
        future = self.build_future_schedule()
        household = self.build_household_schedule()
        lcp = self.build_lcp_schedule()

        hh_pv = results.hhs_data.total_pv if self.inputs.hh_services.active else 0.0
        item_pv_total = sum(item.total_pv for item in results.lcp_data.items)

        checks = {
            "past_loss": (float(past["Net Loss"].sum()), results.projection.total_past_loss),
            "future_nominal": (float(future["Net Loss"].sum()), results.projection.total_future_nominal),
            "future_pv": (float(future["Present Value"].sum()), results.projection.total_future_pv),
            "household_pv": (float(household["Present Value"].sum()), hh_pv),
            "lcp_nominal": (float(lcp["Total Nominal"].sum()), results.lcp_data.total_nom),
            "lcp_pv": (float(lcp["Present Value"].sum()), item_pv_total),
            "grand_total": (
                float(past["Net Loss"].sum() + future["Present Value"].sum() +
                      household["Present Value"].sum() + lcp["Present Value"].sum()),
                results.grand_total,
            ),
        }

        reconciliation = {}
        for name, (schedule_total, reported_total) in checks.items():
            difference = abs(schedule_total - reported_total)
            reconciliation[name] = {
                "schedule_total": schedule_total,
                "reported_total": reported_total,
                "difference": difference,
                "passes": difference < TOLERANCE,
            }

        return {
            "reconciliation_passes": all(check["passes"] for check in reconciliation.values()),
            "checks": reconciliation,
        }