"""Checker: Elastic Load Balancing v2 (ALB/NLB/GWLB).

Load balancers are billed per hour plus data processed.
"""

from __future__ import annotations

import logging
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from aws_checkers.common import (
    ResourceListing,
    _mark_failed,
    _client_region,
    _extract_params,
    _logger,
    _utc_iso_or_blank,
)


def check_load_balancers(*args, logger: Optional[logging.Logger] = None, **kwargs) -> ResourceListing:
    """List every ELBv2 load balancer with type, state and creation time."""
    (elbv2,) = _extract_params(args, kwargs, required=("elbv2",))
    log = _logger(logger)

    listing = ResourceListing(
        kind="elbv2",
        title="⚖️ Load Balancers:",
        headers=("LoadBalancerName", "Type", "State", "CreatedTime"),
        message="⚠️  Found {count} Load Balancer(s)",
        empty_message="✅ No Load Balancers",
        severity="warn",
        region=_client_region(elbv2),
    )

    try:
        paginator = elbv2.get_paginator("describe_load_balancers")
        for page in paginator.paginate():
            for lb in page.get("LoadBalancers", []) or []:
                listing.rows.append([
                    lb.get("LoadBalancerName", ""),
                    lb.get("Type", ""),
                    (lb.get("State") or {}).get("Code", ""),
                    _utc_iso_or_blank(lb.get("CreatedTime")),
                ])
    except (ClientError, BotoCoreError) as exc:
        _mark_failed(listing, exc, log, "describe_load_balancers")

    log.info("[lb] %d load balancer(s) in %s", listing.count, listing.region)
    return listing
