"""
AWS Cost & Resource Scanner
===========================

Identifies billable resources in one AWS region/profile so they can be reviewed
or cleaned up. Every console line is mirrored into a timestamped plain-text
report (``aws-cost-report-YYYYmmdd-HHMMSS.txt``).

Resource kinds
--------------
1. **EC2**            running instances
2. **Elastic IPs**    addresses without an association
3. **EBS**            detached volumes (state=available)
4. **Lambda**         all functions
5. **S3**             all buckets (global)
6. **NAT Gateways**   gateways in the available state
7. **Load Balancers** all ELBv2 load balancers
8. **RDS**            all DB instances

Each kind is counted into a running total. A provider error on one kind is
logged and counted as zero so the rest of the scan still runs; nothing is
retried.

Usage
-----
    AWS_REGION=eu-west-1 AWS_PROFILE=prod python aws_resource_scanner.py
    python aws_resource_scanner.py --region eu-west-1 --output-dir reports/
"""

#region Imports SECTION

import argparse
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from time import perf_counter
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Type, TypeVar

import boto3 # type: ignore
from botocore.exceptions import BotoCoreError, ClientError, ProfileNotFound # type: ignore

from finops_toolset.config import (
    SDK_CONFIG,
    REGION, PROFILE, REPORT_DIR, REPORT_PREFIX, LOG_FILE, LOG_LEVEL,
)
from finops_toolset.console import ReportConsole
from aws_checkers import config as checkers_config
from aws_checkers.common import ResourceListing
from aws_checkers.ec2 import check_running_instances
from aws_checkers.eip import check_unused_elastic_ips
from aws_checkers.ebs import check_detached_volumes
from aws_checkers.lambda_svc import check_lambda_functions
from aws_checkers.s3 import check_buckets
from aws_checkers.nat_gateways import check_nat_gateways
from aws_checkers.lb import check_load_balancers
from aws_checkers.rds import check_db_instances
#endregion

_T = TypeVar("_T")
LOGGER = logging.getLogger(__name__)
LOGGER.addHandler(logging.NullHandler())

# (check name, checker, client key in init_clients(), keyword the checker expects)
SCAN_PLAN: List[Tuple[str, Callable[..., ResourceListing], str, str]] = [
    ("check_running_instances", check_running_instances, "ec2", "ec2"),
    ("check_unused_elastic_ips", check_unused_elastic_ips, "ec2", "ec2"),
    ("check_detached_volumes", check_detached_volumes, "ec2", "ec2"),
    ("check_lambda_functions", check_lambda_functions, "lambda", "lambda_client"),
    ("check_buckets", check_buckets, "s3", "s3"),
    ("check_nat_gateways", check_nat_gateways, "ec2", "ec2"),
    ("check_load_balancers", check_load_balancers, "elbv2", "elbv2"),
    ("check_db_instances", check_db_instances, "rds", "rds"),
]

_VERDICT_STYLES = {"critical": "red", "warn": "yellow", "info": "yellow"}


#region ENGINE SECTION

def init_clients(session) -> Dict[str, Any]:
    """Create the boto3 clients used by the scan."""
    return {
        "ec2": session.client("ec2", config=SDK_CONFIG),
        "lambda": session.client("lambda", config=SDK_CONFIG),
        "s3": session.client("s3", config=SDK_CONFIG),
        "elbv2": session.client("elbv2", config=SDK_CONFIG),
        "rds": session.client("rds", config=SDK_CONFIG),
        "sts": session.client("sts", config=SDK_CONFIG),
    }


def safe_aws_call(
    func: Callable[[], _T],
    *,
    default: Optional[_T] = None,
    context: str = "",
    swallow: Tuple[Type[BaseException], ...] = (ClientError, BotoCoreError),
    logger: Optional[logging.Logger] = None,
) -> Optional[_T]:
    """Run ``func()`` and return its value, or ``default`` on exception.

    Args:
        func: Zero-arg callable to execute.
        default: Value returned when an exception is raised.
        context: Short label for logs (e.g., 'sts.get_caller_identity').
        swallow: Exception classes to catch; anything else propagates.
        logger: Optional logger (defaults to this module's ``LOGGER``).
    """
    log = logger or LOGGER
    try:
        return func()
    except swallow as exc:
        log.debug("safe_aws_call(%s) failed: %s", context, exc, exc_info=True)
        return default


def get_account_id(sts_client) -> str:
    """Caller account id, blank when STS is unreachable (header only)."""
    identity = safe_aws_call(
        sts_client.get_caller_identity,
        default={},
        context="sts.get_caller_identity",
    )
    return (identity or {}).get("Account", "")


def run_check(check_name: str,
              region: str,
              fn: Callable[..., ResourceListing],
              **fn_kwargs) -> ResourceListing:
    """
    Time one checker and log its outcome.

    Usage:
        run_check("check_xyz", region, check_xyz, ec2=clients["ec2"])
    """
    t0 = perf_counter()
    listing: Optional[ResourceListing] = None
    try:
        listing = fn(**fn_kwargs)
        return listing
    finally:
        dt = perf_counter() - t0
        count = listing.count if listing is not None else 0
        ok = listing is not None and not listing.error
        logging.info("[SCAN] %-30s  %-12s  %6.2fs  count=%d  ok=%s",
                     check_name, region, dt, count, ok)


@dataclass
class ScanResult:
    """Listings in scan order plus the running total of billable items."""
    region: str
    profile: str
    account_id: str = ""
    listings: List[ResourceListing] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(listing.count for listing in self.listings)

    def counts(self) -> Dict[str, int]:
        return {listing.kind: listing.count for listing in self.listings}

#endregion


#region REPORT SECTION

def print_header(console: ReportConsole, result: ScanResult) -> None:
    console.rule()
    console.line("🔍 AWS Cost & Resource Scanner")
    console.line(f"Region: {result.region} | Profile: {result.profile}")
    if result.account_id:
        console.line(f"Account: {result.account_id}")
    console.line(f"Date: {datetime.now():%Y-%m-%d %H:%M:%S}")
    console.rule()
    console.blank()


def print_listing(console: ReportConsole, listing: ResourceListing) -> None:
    console.blank()
    console.line(listing.title)
    if listing.count > 0:
        console.table(listing.headers, listing.rows)
        console.line(listing.verdict(), style=_VERDICT_STYLES[listing.severity])
    else:
        console.line(listing.verdict(), style="green")


def print_summary(console: ReportConsole, result: ScanResult, report_path: Optional[str]) -> None:
    console.blank()
    console.rule()
    console.line("📊 SUMMARY")
    console.rule()
    console.line(f"Total billable resources found: {result.total}")
    if result.total > 0:
        console.line(
            f"⚠️  WARNING: You have {result.total} resources that may be costing money!",
            style="red",
        )
    else:
        console.line("✅ Great! No costly resources found.", style="green")
    if report_path:
        console.blank()
        console.line(f"💾 Report saved to: {report_path}")
    console.blank()
    console.line("✅ Scan complete. Review the report above.", style="green")

#endregion


def scan(session, console: ReportConsole, *, region: str, profile: str,
         report_path: Optional[str] = None,
         plan: Iterable[Tuple[str, Callable[..., ResourceListing], str, str]] = SCAN_PLAN,
         ) -> ScanResult:
    """Run every checker in ``plan`` against ``session`` and print as we go."""
    clients = init_clients(session)
    result = ScanResult(region=region, profile=profile,
                        account_id=get_account_id(clients["sts"]))

    checkers_config.setup(logger=LOGGER)
    print_header(console, result)

    for check_name, fn, client_key, kwarg in plan:
        listing = run_check(check_name, region, fn, **{kwarg: clients[client_key]})
        result.listings.append(listing)
        print_listing(console, listing)

    print_summary(console, result, report_path)
    logging.info("[SCAN] total=%d counts=%s", result.total, result.counts())
    return result


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scan an AWS region for resources that may be costing money."
    )
    parser.add_argument("--region", default=REGION,
                        help=f"AWS region (default: $AWS_REGION or {REGION})")
    parser.add_argument("--profile", default=PROFILE,
                        help=f"AWS profile (default: $AWS_PROFILE or {PROFILE})")
    parser.add_argument("--output-dir", default=REPORT_DIR,
                        help="Directory for the text report (default: current directory)")
    return parser.parse_args(list(argv) if argv is not None else None)


def make_session(region: str, profile: str):
    """boto3 session; the implicit ``default`` profile falls back to the credential chain."""
    return boto3.Session(
        region_name=region,
        profile_name=None if profile == "default" else profile,
    )


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        filename=LOG_FILE,
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    console = ReportConsole()
    os.makedirs(args.output_dir, exist_ok=True)
    report_path = os.path.join(
        args.output_dir, f"{REPORT_PREFIX}-{datetime.now():%Y%m%d-%H%M%S}.txt"
    )
    try:
        session = make_session(args.region, args.profile)
        with open(report_path, "w", encoding="utf-8") as report:
            console.attach(report)
            scan(session, console, region=args.region, profile=args.profile,
                 report_path=report_path)
    except ProfileNotFound as exc:
        console.error(f"AWS profile not found: {exc}")
        logging.error("[main] %s", exc)
        return 1

    logging.info("Report export complete: %s", report_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
