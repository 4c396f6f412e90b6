import re
import logging
from datetime import date, datetime
from typing import Optional, Union
from .models import CaseInfo, DateCalc

logger = logging.getLogger(__name__)

# Average year length across the leap-year cycle
DAYS_PER_YEAR = 365.25

_SLASH_DATE = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})$')


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Parse MM/DD/YYYY, YYYY-MM-DD or an ISO timestamp. Returns None if blank or invalid."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not str(value).strip():
        return None

    text = str(value).strip()
    try:
        match = _SLASH_DATE.match(text)
        if match:
            month, day, year = (int(part) for part in match.groups())
            return date(year, month, day)
        try:
            return date.fromisoformat(text)
        except ValueError:
            return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
    except ValueError:
        logger.debug(f"Unparseable date: {text!r}")
        return None


def years_between(start: date, end: date) -> float:
    """Elapsed years from start to end (negative if end precedes start)."""
    return (end - start).days / DAYS_PER_YEAR


def add_whole_years(start: date, years: int) -> date:
    """Same month and day, years later (Feb 29 falls back to Feb 28)."""
    try:
        return start.replace(year=start.year + years)
    except ValueError:
        return start.replace(year=start.year + years, day=28)


def years_until_age(dob: date, age: float, as_of: date) -> float:
    """Years from as_of until the birthday-based date on which age is reached.

    Whole years are added on the calendar, the fractional remainder as days.
    """
    whole = int(age)
    anniversary = add_whole_years(dob, whole)
    days = (anniversary - as_of).days + (age - whole) * DAYS_PER_YEAR
    return days / DAYS_PER_YEAR


def compute_date_calc(case_info: CaseInfo, today: Optional[date] = None) -> DateCalc:
    """
    Derive ages and durations for a case.

    Past years run from the date of injury to the date of trial. Years to
    final separation (YFS) run from the date of trial to the date the
    plaintiff reaches retirement age. Missing dates give an all-zero result.
    """
    dob = parse_date(case_info.dob)
    injury = parse_date(case_info.date_of_injury)
    trial = parse_date(case_info.date_of_trial)

    if dob is None or injury is None or trial is None:
        return DateCalc()

    today = parse_date(today) or date.today()

    past_years = max(0.0, years_between(injury, trial))

    retirement_age = max(0.0, float(case_info.retirement_age or 0))
    derived_yfs = max(0.0, years_until_age(dob, retirement_age, trial))

    return DateCalc(
        age_injury=f"{max(0.0, years_between(dob, injury)):.1f}",
        age_trial=f"{max(0.0, years_between(dob, trial)):.1f}",
        current_age=f"{max(0.0, years_between(dob, today)):.1f}",
        past_years=past_years,
        derived_yfs=derived_yfs,
    )


def compute_age_at_injury(case_info: CaseInfo) -> float:
    """Age in years on the date of injury, or 0 if either date is missing."""
    dob = parse_date(case_info.dob)
    injury = parse_date(case_info.date_of_injury)
    if dob is None or injury is None:
        return 0.0
    return max(0.0, years_between(dob, injury))
