"""Checkers: Amazon VPC NAT Gateways.

NAT Gateways are expensive (~$0.045/hour + data processing charges), so every
gateway in the ``available`` state is surfaced.
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
    name_tag,
)


def check_nat_gateways(*args, logger: Optional[logging.Logger] = None, **kwargs) -> ResourceListing:
    """List NAT Gateways whose state is ``available``."""
    (ec2,) = _extract_params(args, kwargs, required=("ec2",))
    log = _logger(logger)

    listing = ResourceListing(
        kind="nat",
        title="🚦 NAT Gateways (Very Expensive!):",
        headers=("NatGatewayId", "State", "CreateTime", "Name"),
        message="💸 Found {count} NAT Gateway(s) - ~$0.045/hour each!",
        empty_message="✅ No NAT Gateways",
        severity="critical",
        region=_client_region(ec2),
    )

    try:
        paginator = ec2.get_paginator("describe_nat_gateways")
        for page in paginator.paginate():
            for ngw in page.get("NatGateways", []) or []:
                if ngw.get("State") != "available":
                    continue
                listing.rows.append([
                    ngw.get("NatGatewayId", ""),
                    ngw.get("State", ""),
                    _utc_iso_or_blank(ngw.get("CreateTime")),
                    name_tag(ngw.get("Tags")),
                ])
    except (ClientError, BotoCoreError) as exc:
        _mark_failed(listing, exc, log, "describe_nat_gateways")

    log.info("[nat] %d available NAT gateway(s) in %s", listing.count, listing.region)
    return listing
