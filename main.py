#!/usr/bin/env python3
"""
Economic Loss Calculator - Main Application Entry Point

This module serves as the main entry point for the forensic economic loss tool.
It can be used to run the CLI interface or import the core functionality for use in
other applications.
"""

from econloss.cli import cli
from econloss.models import CaseInfo, CaseInputs, EarningsParams, FrequencyType, HhServices, LcpItem


def create_example_case() -> CaseInputs:
    """Create an example personal injury case for demonstration purposes."""

    # Plaintiff and key dates
    case_info = CaseInfo(
        plaintiff="Jane Doe",
        dob="1985-01-15",
        date_of_injury="2020-03-10",
        date_of_trial="2024-06-15",
        retirement_age=67,
    )

    # Earnings capacity before and after the injury
    earnings_params = EarningsParams(base_earnings=75000, residual_earnings=30000, wle=25)

    hh_services = HhServices(active=True, hours_per_week=12, hourly_rate=25)

    lcp_items = [
        LcpItem(id=1, category_id="evals", name="Annual Physiatry Follow-up", base_cost=450.00,
                freq_type=FrequencyType.ANNUAL, duration=30, cpi=2.88),
        LcpItem(id=2, category_id="rx", name="Anti-Spasticity Drug", base_cost=3600.00,
                freq_type=FrequencyType.ANNUAL, duration=30, cpi=1.65),
        LcpItem(id=3, category_id="surgery", name="Spinal Fusion Surgery", base_cost=75000.00,
                freq_type=FrequencyType.ONETIME, start_year=3, cpi=4.07),
        LcpItem(id=4, category_id="transport", name="Power Wheelchair", base_cost=12000.00,
                freq_type=FrequencyType.RECURRING, duration=30, recurrence_interval=5, cpi=4.32),
    ]

    return CaseInputs(case_info=case_info, earnings_params=earnings_params,
                      hh_services=hh_services, lcp_items=lcp_items,
                      past_actuals={2021: "18,500"})


def main():
    """Main function - runs the CLI interface."""
    cli()


if __name__ == "__main__":
    main()
