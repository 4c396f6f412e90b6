"""Tests for date parsing and the derived ages and durations of a case."""

from datetime import date, datetime

import pytest

from econloss.dates import (
    add_whole_years, compute_age_at_injury, compute_date_calc, parse_date, years_until_age,
)
from econloss.models import CaseInfo, DateCalc


class TestParseDate:

    def test_iso_date(self):
        assert parse_date("2024-06-15") == date(2024, 6, 15)

    def test_slash_date(self):
        assert parse_date("6/15/2024") == date(2024, 6, 15)
        assert parse_date("06/15/2024") == date(2024, 6, 15)

    def test_timestamp(self):
        assert parse_date("2024-06-15T10:30:00Z") == date(2024, 6, 15)

    def test_date_objects_pass_through(self):
        assert parse_date(date(2024, 6, 15)) == date(2024, 6, 15)
        assert parse_date(datetime(2024, 6, 15, 8, 0)) == date(2024, 6, 15)

    @pytest.mark.parametrize("value", [None, "", "   ", "not a date", "13/45/2024", "2024-02-30"])
    def test_invalid_is_none(self, value):
        assert parse_date(value) is None


def test_add_whole_years_leap_day():
    assert add_whole_years(date(2000, 2, 29), 1) == date(2001, 2, 28)
    assert add_whole_years(date(2000, 2, 29), 4) == date(2004, 2, 29)


def test_years_until_age_fractional():
    dob = date(1990, 1, 1)
    whole = years_until_age(dob, 67, date(2057, 1, 1))
    half = years_until_age(dob, 67.5, date(2057, 1, 1))
    assert whole == 0
    assert half == pytest.approx(0.5)


def test_compute_date_calc(case_info, today):
    result = compute_date_calc(case_info, today)

    assert result.past_years == pytest.approx(4.0, abs=0.01)
    assert result.derived_yfs == pytest.approx(33.0, abs=0.01)
    assert result.age_injury == "30.0"
    assert result.age_trial == "34.0"
    assert result.current_age == "34.0"


def test_yfs_runs_from_trial_not_injury(case_info, today):
    later_trial = CaseInfo(**{**case_info.__dict__, "date_of_trial": "2026-01-01"})
    first = compute_date_calc(case_info, today)
    second = compute_date_calc(later_trial, today)
    assert first.derived_yfs - second.derived_yfs == pytest.approx(2.0, abs=0.01)


@pytest.mark.parametrize("missing", ["dob", "date_of_injury", "date_of_trial"])
def test_missing_date_gives_zeros(case_info, today, missing):
    setattr(case_info, missing, "")
    assert compute_date_calc(case_info, today) == DateCalc()


def test_trial_before_injury_clamps_past_years(case_info, today):
    case_info.date_of_trial = "2019-01-01"
    assert compute_date_calc(case_info, today).past_years == 0.0


def test_retired_before_trial_clamps_yfs(case_info, today):
    case_info.retirement_age = 30
    assert compute_date_calc(case_info, today).derived_yfs == 0.0


def test_age_at_injury(case_info):
    assert compute_age_at_injury(case_info) == pytest.approx(30.0, abs=0.01)
    assert compute_age_at_injury(CaseInfo()) == 0.0
