"""Checker: running EC2 instances.

Running instances are billed per hour/second depending on instance type.
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


def check_running_instances(*args, logger: Optional[logging.Logger] = None, **kwargs) -> ResourceListing:
    """
    List EC2 instances in the ``running`` state.

    Args:
        ec2: boto3 EC2 client with ``describe_instances`` paginator.
        logger: Optional logger; uses module logger if omitted.

    Returns:
        ResourceListing with InstanceId, InstanceType, LaunchTime, Name rows.
    """
    (ec2,) = _extract_params(args, kwargs, required=("ec2",))
    log = _logger(logger)

    listing = ResourceListing(
        kind="ec2",
        title="💻 EC2 Instances (Running):",
        headers=("InstanceId", "InstanceType", "LaunchTime", "Name"),
        message="⚠️  Found {count} running EC2 instance(s)",
        empty_message="✅ No running EC2 instances",
        severity="warn",
        region=_client_region(ec2),
    )

    try:
        paginator = ec2.get_paginator("describe_instances")
        for page in paginator.paginate():
            for reservation in page.get("Reservations", []) or []:
                for inst in reservation.get("Instances", []) or []:
                    if (inst.get("State") or {}).get("Name") != "running":
                        continue
                    listing.rows.append([
                        inst.get("InstanceId", ""),
                        inst.get("InstanceType", ""),
                        _utc_iso_or_blank(inst.get("LaunchTime")),
                        name_tag(inst.get("Tags")),
                    ])
    except (ClientError, BotoCoreError) as exc:
        _mark_failed(listing, exc, log, "describe_instances")

    log.info("[check_running_instances] %d running instance(s) in %s", listing.count, listing.region)
    return listing
