"""Thin Cost Explorer / STS access for the cost analyzer.

Both calls are fail-fast: any error becomes a ``ToolsetError`` subclass and
aborts the run. Nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from finops_toolset.errors import CostDataError, CredentialsError
from finops_toolset.periods import DatePeriod

LOGGER = logging.getLogger(__name__)

METRIC = "UnblendedCost"
GROUP_BY = [{"Type": "DIMENSION", "Key": "SERVICE"}]


@dataclass(frozen=True)
class CallerIdentity:
    account: str
    arn: str


def verify_credentials(sts) -> CallerIdentity:
    """Resolve who we are; missing or rejected credentials raise CredentialsError."""
    try:
        resp = sts.get_caller_identity()
    except NoCredentialsError as exc:
        raise CredentialsError("AWS credentials not configured or invalid") from exc
    except (ClientError, BotoCoreError) as exc:
        LOGGER.error("[ce] get_caller_identity failed: %s", exc)
        raise CredentialsError(f"AWS credentials not configured or invalid: {exc}") from exc
    return CallerIdentity(account=resp.get("Account", ""), arn=resp.get("Arn", ""))


def fetch_cost_and_usage(ce, period: DatePeriod, granularity: str) -> Dict[str, Any]:
    """``GetCostAndUsage`` grouped by service, with every NextPageToken page merged.

    Returns a response-shaped dict: ``{"ResultsByTime": [...]}``.
    """
    kwargs: Dict[str, Any] = {
        "TimePeriod": period.as_time_period(),
        "Granularity": granularity,
        "Metrics": [METRIC],
        "GroupBy": GROUP_BY,
    }
    results: List[Dict[str, Any]] = []
    pages = 0
    while True:
        try:
            resp = ce.get_cost_and_usage(**kwargs)
        except (ClientError, BotoCoreError) as exc:
            LOGGER.error("[ce] get_cost_and_usage %s %s failed: %s", granularity, period.label, exc)
            raise CostDataError(f"Cost Explorer request failed for {period.label}: {exc}") from exc
        pages += 1
        results.extend(resp.get("ResultsByTime", []) or [])
        token = resp.get("NextPageToken")
        if not token:
            break
        kwargs["NextPageToken"] = token

    LOGGER.info("[ce] %s %s: %d bucket(s) over %d page(s)", granularity, period.label, len(results), pages)
    return {"ResultsByTime": results}
