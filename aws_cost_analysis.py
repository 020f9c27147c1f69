"""
AWS Cost Analysis
=================

Compares Cost Explorer spend (UnblendedCost, grouped by service) between a
previous period and a current, usually partial, period. The current period is
projected to a 30 day month and diffed per service; the report ends with
heuristic cost optimization recommendations.

Usage
-----
    python aws_cost_analysis.py
        # interactive, prompts for 2 or 4 dates
    python aws_cost_analysis.py 2025-10-01 2025-11-01 2025-11-01 2025-11-07
        # previous start/end, current start/end
    python aws_cost_analysis.py --range 2025-11-01 2025-11-07
        # current period only, previous derived (same length, immediately before)
    python aws_cost_analysis.py 2025-11-01 2025-11-07 --csv costs.csv
        # also write a per-service CSV (input for cost_dashboard.py)

Invalid dates, missing credentials or a Cost Explorer error abort with exit 1.
"""

#region Imports SECTION

import argparse
import logging
from typing import Callable, Iterable, Optional, Tuple

import boto3 # type: ignore
from botocore.exceptions import ProfileNotFound # type: ignore

from finops_toolset.config import SDK_CONFIG, REGION, PROFILE, CE_REGION, LOG_FILE, LOG_LEVEL
from finops_toolset.console import ReportConsole
from finops_toolset.cost_explorer import fetch_cost_and_usage, verify_credentials
from finops_toolset.cost_report import render_report
from finops_toolset.costs import CostComparison, CostSummary, compare, write_csv
from finops_toolset.errors import CredentialsError, PeriodError, ToolsetError
from finops_toolset.periods import DatePeriod, PROMPT_HELP, build_periods, prompt_for_periods
#endregion

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compare AWS costs between two periods and project month-end spend."
    )
    parser.add_argument(
        "dates", nargs="*", metavar="DATE",
        help="PREV_START PREV_END CUR_START CUR_END, or CUR_START CUR_END (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--range", nargs="*", metavar="DATE", dest="range",
        help="CUR_START CUR_END: current period only; the previous period is derived automatically",
    )
    parser.add_argument("--csv", default=None, help="Also write per-service costs to this CSV path")
    parser.add_argument("--region", default=REGION,
                        help=f"AWS region for the session (default: $AWS_REGION or {REGION})")
    parser.add_argument("--profile", default=PROFILE,
                        help=f"AWS profile (default: $AWS_PROFILE or {PROFILE})")
    return parser.parse_args(list(argv) if argv is not None else None)


def make_session(region: str, profile: str):
    """boto3 session; an unknown profile is a credentials problem."""
    try:
        return boto3.Session(
            region_name=region,
            profile_name=None if profile == "default" else profile,
        )
    except ProfileNotFound as exc:
        raise CredentialsError(f"AWS profile not found: {profile}") from exc


def check_credentials(session, console: ReportConsole) -> None:
    console.info("Verifying AWS credentials...")
    if session.get_credentials() is None:
        raise CredentialsError("AWS credentials not configured or invalid")
    identity = verify_credentials(session.client("sts", config=SDK_CONFIG))
    console.success(f"Authenticated as: {identity.arn}")
    console.success(f"Account ID: {identity.account}")


def _prompt_header(console: ReportConsole) -> None:
    console.blank()
    console.rule("═")
    console.line("AWS COST ANALYSIS - DATE SELECTION".center(80).rstrip())
    console.rule("═")
    for text in PROMPT_HELP.strip("\n").splitlines():
        console.line(text)
    console.rule("─")
    console.blank()


def resolve_periods(
    args: argparse.Namespace,
    console: ReportConsole,
    read: Callable[[str], str] = input,
) -> Tuple[DatePeriod, DatePeriod]:
    """(previous, current) from ``--range``, positional dates or the prompt."""
    if args.range is not None and args.dates:
        raise PeriodError("Use either positional dates or --range, not both")

    if args.range is not None:
        if len(args.range) != 2:
            raise PeriodError("--range requires exactly two dates: <current-start> <current-end>")
        console.info("Using provided current period and deriving previous period automatically...")
        previous, current = build_periods(args.range)
    elif args.dates:
        if len(args.dates) not in (2, 4):
            raise PeriodError(
                "Invalid arguments. Provide four dates or use --range <current-start> <current-end>."
            )
        console.info("Using provided date ranges...")
        previous, current = build_periods(args.dates)
    else:
        _prompt_header(console)
        try:
            previous, current = prompt_for_periods(read=read, on_error=console.error)
        except EOFError as exc:
            raise PeriodError("No dates entered") from exc

    console.blank()
    console.success("Date ranges configured:")
    console.info(f"  Previous Period: {previous.label} ({previous.days} days)")
    console.info(f"  Current Period:  {current.label} ({current.days} days)")
    console.blank()
    return previous, current


def analyze(ce, console: ReportConsole, previous: DatePeriod, current: DatePeriod) -> CostComparison:
    """Fetch both periods, compare and print the report."""
    console.info("Fetching current period cost data...")
    current_data = fetch_cost_and_usage(ce, current, "DAILY")
    console.success("Current period data fetched")

    console.info("Fetching previous period cost data...")
    previous_data = fetch_cost_and_usage(ce, previous, "MONTHLY")
    console.success("Previous period data fetched")

    console.info("Analyzing cost data...")
    comparison = compare(
        CostSummary.from_response(current_data),
        CostSummary.from_response(previous_data),
        current.days,
    )
    render_report(console, comparison, current, previous)
    return comparison


def main(argv: Optional[Iterable[str]] = None,
         console: Optional[ReportConsole] = None,
         read: Callable[[str], str] = input) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        filename=LOG_FILE,
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    console = console or ReportConsole()

    console.blank()
    console.info("Starting AWS Cost Analysis...")
    console.blank()
    try:
        session = make_session(args.region, args.profile)
        check_credentials(session, console)
        previous, current = resolve_periods(args, console, read=read)
        ce = session.client("ce", region_name=CE_REGION, config=SDK_CONFIG)
        comparison = analyze(ce, console, previous, current)
        if args.csv:
            path = write_csv(comparison, args.csv)
            console.success(f"CSV written to: {path}")
    except ToolsetError as exc:
        console.error(str(exc))
        logging.error("[main] %s", exc)
        return 1

    console.blank()
    console.success("Analysis complete!")
    console.blank()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
