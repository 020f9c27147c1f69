"""Date validation, period derivation and the interactive prompt."""

from __future__ import annotations

import pytest

from finops_toolset.errors import PeriodError, ToolsetError
from finops_toolset.periods import (
    DatePeriod, build_periods, derive_previous, make_period, prompt_for_periods, validate_date,
)


@pytest.mark.parametrize("value", ["2025-1-01", "20250101", "2025/01/01", "", "2025-01-01x", "abcd-ef-gh"])
def test_validate_date_rejects_bad_format(value):
    with pytest.raises(PeriodError, match="Use YYYY-MM-DD"):
        validate_date(value, "Current start date")


@pytest.mark.parametrize("value", ["2025-02-30", "2025-13-01", "2025-00-10"])
def test_validate_date_rejects_impossible_dates(value):
    with pytest.raises(PeriodError, match="Invalid date"):
        validate_date(value)


def test_validate_date_accepts_leap_day():
    assert validate_date("2024-02-29") == "2024-02-29"


def test_period_error_is_a_value_error():
    assert issubclass(PeriodError, ValueError)
    assert issubclass(PeriodError, ToolsetError)


def test_make_period_requires_end_after_start():
    with pytest.raises(PeriodError, match="Current end date must be after current start date"):
        make_period("2025-11-07", "2025-11-07", "Current")
    with pytest.raises(PeriodError, match="Previous end date"):
        make_period("2025-11-07", "2025-11-01", "Previous")


def test_period_days_and_label():
    period = DatePeriod("2025-11-01", "2025-11-07")
    assert period.days == 6
    assert period.label == "2025-11-01 to 2025-11-07"
    assert period.as_time_period() == {"Start": "2025-11-01", "End": "2025-11-07"}


def test_derive_previous_crosses_year_boundary():
    previous = derive_previous(DatePeriod("2025-01-01", "2025-01-11"))
    assert previous == DatePeriod("2024-12-22", "2025-01-01")


def test_derive_previous_crosses_leap_february():
    previous = derive_previous(DatePeriod("2024-03-01", "2024-03-31"))
    assert previous == DatePeriod("2024-01-31", "2024-03-01")
    assert previous.days == 30


def test_build_periods_four_dates():
    previous, current = build_periods(["2025-10-01", "2025-11-01", "2025-11-01", "2025-11-07"])
    assert previous == DatePeriod("2025-10-01", "2025-11-01")
    assert current == DatePeriod("2025-11-01", "2025-11-07")


def test_build_periods_two_dates_derives_previous():
    previous, current = build_periods(["2025-11-01", "2025-11-07"])
    assert current.days == previous.days == 6
    assert previous == DatePeriod("2025-10-26", "2025-11-01")


def test_build_periods_reports_every_bad_date():
    with pytest.raises(PeriodError) as excinfo:
        build_periods(["2025-10-1", "2025-11-01", "2025-11-01", "nope"])
    message = str(excinfo.value)
    assert "Previous start date" in message
    assert "Current end date" in message


@pytest.mark.parametrize("count", [0, 1, 3, 5])
def test_build_periods_wrong_count(count):
    with pytest.raises(PeriodError, match="Expected 2 or 4 dates"):
        build_periods(["2025-11-01"] * count)


def test_prompt_loops_until_valid():
    answers = iter(["", "2025-11-01", "2025-11-07 2025-11-01", "2025-11-01 2025-11-07"])
    errors = []
    previous, current = prompt_for_periods(read=lambda _prompt: next(answers), on_error=errors.append)
    assert current == DatePeriod("2025-11-01", "2025-11-07")
    assert previous.end == "2025-11-01"
    assert len(errors) == 3


def test_prompt_propagates_eof():
    def _closed(_prompt):
        raise EOFError

    with pytest.raises(EOFError):
        prompt_for_periods(read=_closed)
