"""Tests for the LossCalculator schedules, summaries and reconciliation."""

import pytest

from econloss.calculator import LossCalculator, compute_case
from econloss.models import CaseInputs, LcpItem
from econloss.scenarios import ECONOMIC_SCENARIOS


@pytest.fixture
def calculator(sample_inputs, today):
    return LossCalculator(sample_inputs, ECONOMIC_SCENARIOS, today)


def test_grand_total_is_sum_of_components(sample_inputs, today):
    results = compute_case(sample_inputs, (), today)
    expected = (results.projection.total_past_loss + results.projection.total_future_pv +
                results.hhs_data.total_pv + results.lcp_data.total_pv)
    assert results.grand_total == pytest.approx(expected)
    assert results.scenarios == []


def test_inactive_household_excluded_from_grand_total(sample_inputs, today):
    sample_inputs.hh_services.active = False
    results = compute_case(sample_inputs, (), today)
    assert results.hhs_data.total_pv == 0.0
    assert results.grand_total == pytest.approx(
        results.projection.total_past_loss + results.projection.total_future_pv +
        results.lcp_data.total_pv)


def test_past_schedule(calculator):
    df = calculator.build_past_schedule()

    assert list(df["Year"]) == [2020, 2021, 2022, 2023]
    assert list(df["Manual Actual"]) == [False, True, False, False]
    assert df.loc[1, "Gross Actual"] == 35000
    assert df["Cumulative Loss"].iloc[-1] == pytest.approx(calculator.results.projection.total_past_loss)


def test_future_schedule_calendar_years(calculator):
    df = calculator.build_future_schedule()

    assert len(df) == 34
    assert df["Calendar Year"].iloc[0] == 2024
    assert df["Calendar Year"].iloc[-1] == 2057
    assert df["Cumulative PV"].iloc[-1] == pytest.approx(calculator.results.projection.total_future_pv)


def test_household_schedule(calculator):
    df = calculator.build_household_schedule()
    assert df["Annual Value"].iloc[0] == pytest.approx(13000)
    assert df["Present Value"].sum() == pytest.approx(calculator.results.hhs_data.total_pv)


def test_lcp_schedule(calculator):
    df = calculator.build_lcp_schedule()

    assert list(df["Year #"]) == list(range(1, 11))
    assert "Medication (#1)\n(annual @ 1.65%)" in df.columns
    assert "Revision Surgery (#2)\n(onetime @ 4.07%)" in df.columns
    surgery = df["Revision Surgery (#2)\n(onetime @ 4.07%)"]
    assert (surgery > 0).sum() == 1
    assert surgery.iloc[2] == pytest.approx(50000 * 1.0407 ** 2)
    assert df["Total Nominal"].sum() == pytest.approx(calculator.results.lcp_data.total_nom)


def test_scenario_table(calculator):
    df = calculator.build_scenario_table()
    assert list(df["Scenario"]) == ["Conservative", "Standard", "Aggressive"]
    assert list(df["Discount Rate %"]) == [5.0, 4.0, 3.5]
    assert df["Included"].all()


def test_summary_statistics(sample_inputs, today):
    sample_inputs.earnings_params.selected_scenario = "conservative"
    calculator = LossCalculator(sample_inputs, ECONOMIC_SCENARIOS, today)
    summary = calculator.calculate_summary_statistics()

    assert summary["age_at_trial"] == pytest.approx(34.0)
    assert summary["past_years"] == pytest.approx(4.0, abs=0.01)
    assert summary["grand_total"] == pytest.approx(calculator.results.grand_total)
    assert summary["selected_scenario"] == "Conservative"
    assert summary["selected_scenario_total"] == pytest.approx(
        calculator.results.get_scenario("conservative").grand_total)


def test_cost_by_category(calculator):
    categories = calculator.get_cost_by_category()

    assert set(categories) == {"rx", "surgery", "transport"}
    assert categories["rx"]["label"] == "Rx / Medical Commodities"
    assert len(categories["transport"]["items"]) == 1
    total_pv = sum(c["category_present_value_total"] for c in categories.values())
    assert total_pv == pytest.approx(calculator.results.lcp_data.total_pv)


def test_quality_control_passes(calculator):
    qc = calculator.quality_control_validation()
    assert qc["reconciliation_passes"]
    assert set(qc["checks"]) == {"past_loss", "future_nominal", "future_pv", "household_pv",
                                 "lcp_nominal", "lcp_pv", "grand_total"}


def test_empty_case(today):
    calculator = LossCalculator(CaseInputs(), (), today)

    assert calculator.results.grand_total == 0.0
    assert calculator.build_past_schedule().empty
    assert calculator.build_lcp_schedule().empty
    assert calculator.base_calendar_year == 2024
    assert calculator.quality_control_validation()["reconciliation_passes"]


def test_unnamed_item_column(today):
    inputs = CaseInputs(lcp_items=[LcpItem(id=7, base_cost=100, duration=2)])
    df = LossCalculator(inputs, (), today).build_lcp_schedule()
    assert "Item (#7)\n(annual @ 0.00%)" in df.columns


def test_example_case_reconciles(today):
    from main import create_example_case

    calculator = LossCalculator(create_example_case(), ECONOMIC_SCENARIOS, today)
    assert calculator.results.grand_total > 0
    assert calculator.results.projection.past_schedule[1].is_manual
    assert calculator.quality_control_validation()["reconciliation_passes"]
