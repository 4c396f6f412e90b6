"""Shared fixtures for the econloss test suite."""

from datetime import date

import pytest

from econloss.models import CaseInfo, CaseInputs, EarningsParams, FrequencyType, HhServices, LcpItem


@pytest.fixture
def today():
    return date(2024, 1, 1)


@pytest.fixture
def case_info():
    return CaseInfo(
        plaintiff="John Smith",
        dob="1990-01-01",
        date_of_injury="2020-01-01",
        date_of_trial="2024-01-01",
        retirement_age=67,
    )


@pytest.fixture
def earnings_params():
    """Rates chosen so the multipliers come out to round numbers."""
    return EarningsParams(
        base_earnings=100000,
        residual_earnings=40000,
        wle=20,
        wage_growth=3.0,
        discount_rate=4.0,
        fringe_rate=0.0,
        pension=12000,
        health_welfare=8000,
        unemployment_rate=5.0,
        ui_replacement_rate=30.0,
        fed_tax_rate=20.0,
        state_tax_rate=5.0,
    )


@pytest.fixture
def sample_inputs(case_info, earnings_params):
    return CaseInputs(
        case_info=case_info,
        earnings_params=earnings_params,
        hh_services=HhServices(active=True, hours_per_week=10, hourly_rate=25),
        lcp_items=[
            LcpItem(id=1, category_id="rx", name="Medication", base_cost=2400,
                    freq_type=FrequencyType.ANNUAL, duration=10, cpi=1.65),
            LcpItem(id=2, category_id="surgery", name="Revision Surgery", base_cost=50000,
                    freq_type=FrequencyType.ONETIME, start_year=3, cpi=4.07),
            LcpItem(id=3, category_id="transport", name="Wheelchair", base_cost=6000,
                    freq_type=FrequencyType.RECURRING, duration=10, recurrence_interval=5, cpi=4.32),
        ],
        past_actuals={2021: "35,000"},
    )
