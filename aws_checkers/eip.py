"""Checker: Unused Elastic IPs (EIP)."""

from __future__ import annotations
from typing import Optional
import logging
from botocore.exceptions import BotoCoreError, ClientError
from aws_checkers.common import ResourceListing, _mark_failed, _client_region, _extract_params, _logger, name_tag


def check_unused_elastic_ips(*args, logger: Optional[logging.Logger] = None,
                             **kwargs) -> ResourceListing:
    """
    Scan EC2 Elastic IP addresses and list the unassociated ones.

    An Elastic IP is considered unused when it carries no ``AssociationId``;
    AWS bills those by the hour (~$0.005/hour).

    Args:
        ec2: boto3 EC2 client with ``describe_addresses()``.
        logger: Optional logger; uses module logger if omitted.

    Returns:
        ResourceListing with PublicIp, AllocationId, Name rows.
    """
    (ec2,) = _extract_params(args, kwargs, required=("ec2",))
    log = _logger(logger)

    listing = ResourceListing(
        kind="eip",
        title="🌐 Elastic IPs (Unattached - Billed!):",
        headers=("PublicIp", "AllocationId", "Name"),
        message="❌ Found {count} unattached Elastic IP(s) - WASTING MONEY!",
        empty_message="✅ No unattached Elastic IPs",
        severity="critical",
        region=_client_region(ec2),
    )

    try:
        resp = ec2.describe_addresses()
        for addr in resp.get("Addresses", []):
            rid = addr.get("AllocationId", addr.get("PublicIp"))
            unused = not addr.get("AssociationId")
            if unused:
                listing.rows.append([
                    addr.get("PublicIp", ""),
                    addr.get("AllocationId", ""),
                    name_tag(addr.get("Tags")),
                ])
            log.info("[check_unused_elastic_ips] Processed IP: %s (unused=%s)", rid, unused)
    except (ClientError, BotoCoreError) as exc:
        _mark_failed(listing, exc, log, "describe_addresses")

    return listing
