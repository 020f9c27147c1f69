"""Date periods for the cost comparison.

Dates are ISO ``YYYY-MM-DD`` strings. Because the format is fixed width, "end
after start" is checked with a plain string comparison; day counts and the
derived previous period use calendar arithmetic.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Sequence, Tuple

from finops_toolset.errors import PeriodError

DATE_FORMAT = "%Y-%m-%d"
_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

# labels used in error messages, in argument order
FOUR_DATE_NAMES = ("Previous start date", "Previous end date", "Current start date", "Current end date")
TWO_DATE_NAMES = ("Current start date", "Current end date")


@dataclass(frozen=True)
class DatePeriod:
    """Half-open [start, end) window as Cost Explorer expects it."""
    start: str
    end: str

    @property
    def days(self) -> int:
        return (parse_date(self.end) - parse_date(self.start)).days

    @property
    def label(self) -> str:
        return f"{self.start} to {self.end}"

    def as_time_period(self) -> dict:
        return {"Start": self.start, "End": self.end}


def parse_date(value: str) -> date:
    return datetime.strptime(value, DATE_FORMAT).date()


def validate_date(value: str, name: str = "Date") -> str:
    """Return ``value`` if it is a well-formed calendar date, else raise PeriodError."""
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise PeriodError(f"{name}: Invalid format '{value}'. Use YYYY-MM-DD")
    try:
        parse_date(value)
    except ValueError as exc:
        raise PeriodError(f"{name}: Invalid date '{value}'") from exc
    return value


def make_period(start: str, end: str, which: str) -> DatePeriod:
    """Build a period whose end must sort strictly after its start."""
    if not end > start:
        raise PeriodError(f"{which} end date must be after {which.lower()} start date")
    return DatePeriod(start=start, end=end)


def shift_date(value: str, days: int) -> str:
    return (parse_date(value) + timedelta(days=days)).strftime(DATE_FORMAT)


def derive_previous(current: DatePeriod) -> DatePeriod:
    """Immediately preceding period of the same length (crosses month/year boundaries)."""
    days = current.days
    if days <= 0:
        raise PeriodError("Current end date must be after current start date")
    return DatePeriod(start=shift_date(current.start, -days), end=current.start)


def build_periods(dates: Sequence[str]) -> Tuple[DatePeriod, DatePeriod]:
    """(previous, current) from 4 dates, or from 2 current dates with previous derived.

    Every date is validated before the ordering checks so all format errors
    surface together.
    """
    if len(dates) == 4:
        names = FOUR_DATE_NAMES
    elif len(dates) == 2:
        names = TWO_DATE_NAMES
    else:
        raise PeriodError(f"Expected 2 or 4 dates, got {len(dates)}")

    problems: List[str] = []
    for value, name in zip(dates, names):
        try:
            validate_date(value, name)
        except PeriodError as exc:
            problems.append(str(exc))
    if problems:
        raise PeriodError("; ".join(problems))

    if len(dates) == 4:
        previous = make_period(dates[0], dates[1], "Previous")
        current = make_period(dates[2], dates[3], "Current")
    else:
        current = make_period(dates[0], dates[1], "Current")
        previous = derive_previous(current)

    if previous.days <= 0:
        raise PeriodError("Previous period end date must be after its start date")
    if current.days <= 0:
        raise PeriodError("Current period end date must be after its start date")
    return previous, current


PROMPT_HELP = """
Enter the date range to analyze AWS costs.

Format options:
  • Provide both periods:
        YYYY-MM-DD YYYY-MM-DD YYYY-MM-DD YYYY-MM-DD
        [Prev Start] [Prev End] [Curr Start] [Curr End]
  • Provide only the current period (previous derived automatically):
        YYYY-MM-DD YYYY-MM-DD
        [Curr Start] [Curr End]

Examples:
  • Compare October vs November MTD:
    2025-10-01 2025-11-01 2025-11-01 2025-11-07

  • Single entry (current week only):
    2025-11-01 2025-11-07
    (Previous week will be calculated automatically)

  • Compare Q3 vs Q4:
    2025-07-01 2025-10-01 2025-10-01 2026-01-01
"""


def prompt_for_periods(
    read: Callable[[str], str] = input,
    on_error: Optional[Callable[[str], None]] = None,
) -> Tuple[DatePeriod, DatePeriod]:
    """Ask until the operator enters 2 or 4 valid dates.

    ``read`` raising EOFError (closed stdin) propagates to the caller.
    """
    while True:
        dates = read("Enter dates: ").split()
        try:
            return build_periods(dates)
        except PeriodError as exc:
            if on_error is not None:
                on_error(str(exc))
