"""Tests for life care plan item scheduling, escalation and discounting."""

import pytest

from econloss.life_care import compute_lcp_data, escalated_cost, item_stream, plan_year_discount
from econloss.models import FrequencyType, LcpItem


def test_onetime_item():
    item = LcpItem(id=1, base_cost=1000, freq_type=FrequencyType.ONETIME, duration=5, cpi=3.0)
    data = compute_lcp_data([item], 4.25)

    assert item.active_years() == [1]
    assert data.total_nom == pytest.approx(1000)
    assert data.total_pv == pytest.approx(1000 / 1.0425 ** 0.5)


def test_annual_item_escalates_from_first_year():
    item = LcpItem(id=1, base_cost=1000, freq_type=FrequencyType.ANNUAL, duration=3, cpi=2.0)
    costs = [cost for _, cost, _ in item_stream(item, 0.0)]
    assert costs == pytest.approx([1000, 1020, 1040.4])


def test_recurring_item_every_other_year():
    item = LcpItem(id=1, base_cost=1000, freq_type=FrequencyType.RECURRING, duration=4,
                   recurrence_interval=2, cpi=3.0)
    stream = item_stream(item, 4.0)

    assert [plan_year for plan_year, _, _ in stream] == [1, 3]
    assert stream[1][1] == pytest.approx(1000 * 1.03 ** 2)
    assert stream[1][2] == pytest.approx(1000 * 1.03 ** 2 / 1.04 ** 2.5)


def test_start_year_offsets_exponents():
    item = LcpItem(id=1, base_cost=5000, freq_type=FrequencyType.ONETIME, start_year=3, cpi=4.0)
    ((plan_year, cost, pv),) = item_stream(item, 5.0)

    assert plan_year == 3
    assert cost == pytest.approx(5000 * 1.04 ** 2)
    assert pv == pytest.approx(cost / 1.05 ** 2.5)


def test_custom_years_override_frequency():
    item = LcpItem(id=1, base_cost=100, freq_type=FrequencyType.ANNUAL, duration=10,
                   custom_years=[5, 2, 2, 0])
    assert item.active_years() == [2, 5]


def test_frequency_from_string():
    assert LcpItem(id=1, freq_type="Recurring").freq_type is FrequencyType.RECURRING
    with pytest.raises(ValueError):
        LcpItem(id=1, freq_type="weekly")


def test_totals_are_sum_of_items():
    items = [
        LcpItem(id=1, base_cost=1000, freq_type=FrequencyType.ANNUAL, duration=5, cpi=2.0),
        LcpItem(id=2, base_cost=20000, freq_type=FrequencyType.ONETIME, start_year=2, cpi=4.0),
    ]
    data = compute_lcp_data(items, 4.25)

    assert len(data.items) == 2
    assert data.total_nom == pytest.approx(sum(result.total_nom for result in data.items))
    assert data.total_pv == pytest.approx(sum(result.total_pv for result in data.items))
    assert data.items[0].item is items[0]


def test_present_value_disabled():
    item = LcpItem(id=1, base_cost=1000, freq_type=FrequencyType.ANNUAL, duration=5, cpi=2.0)
    data = compute_lcp_data([item], 4.25, enable_present_value=False)
    assert data.total_pv == pytest.approx(data.total_nom)


def test_escalation_and_discount_helpers():
    item = LcpItem(id=1, base_cost=100, cpi=10.0)
    assert escalated_cost(item, 1) == pytest.approx(100)
    assert escalated_cost(item, 3) == pytest.approx(121)
    assert plan_year_discount(4.0, 1) == pytest.approx(1 / 1.04 ** 0.5)
    assert plan_year_discount(4.0, 1, enabled=False) == 1.0


def test_empty_plan():
    data = compute_lcp_data([], 4.25)
    assert data.items == ()
    assert data.total_nom == 0.0
    assert data.total_pv == 0.0
