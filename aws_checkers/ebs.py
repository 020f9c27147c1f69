"""Checkers: Amazon EBS detached volumes.

A volume in the ``available`` state is attached to nothing but is still billed
for its provisioned storage.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

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


# ------------------------------- inventories ------------------------------- #

def _inventory_volumes(ec2) -> List[Dict[str, Any]]:
    vols: List[Dict[str, Any]] = []
    paginator = ec2.get_paginator("describe_volumes")
    for page in paginator.paginate():
        for v in page.get("Volumes", []) or []:
            vols.append(
                {
                    "VolumeId": v.get("VolumeId"),
                    "State": v.get("State"),
                    "Size": v.get("Size"),
                    "VolumeType": v.get("VolumeType") or "",
                    "CreateTime": v.get("CreateTime"),
                    "Tags": v.get("Tags") or [],
                }
            )
    return vols


# --------------------------------- checker --------------------------------- #

def check_detached_volumes(*args, logger: Optional[logging.Logger] = None, **kwargs) -> ResourceListing:
    """List unattached volumes (state=available)."""
    (ec2,) = _extract_params(args, kwargs, required=("ec2",))
    log = _logger(logger)

    listing = ResourceListing(
        kind="ebs",
        title="💾 EBS Volumes (Detached - Still Billed!):",
        headers=("VolumeId", "Size", "VolumeType", "CreateTime", "Name"),
        message="❌ Found {count} detached EBS volume(s) - WASTING MONEY!",
        empty_message="✅ No detached EBS volumes",
        severity="critical",
        region=_client_region(ec2),
    )

    try:
        volumes = _inventory_volumes(ec2)
    except (ClientError, BotoCoreError) as exc:
        _mark_failed(listing, exc, log, "describe_volumes")
        volumes = []

    for vol in volumes:
        if vol["State"] != "available":
            continue
        listing.rows.append([
            vol["VolumeId"],
            vol["Size"],
            vol["VolumeType"],
            _utc_iso_or_blank(vol["CreateTime"]),
            name_tag(vol["Tags"]),
        ])

    log.info("[ebs] %d detached volume(s) in %s", listing.count, listing.region)
    return listing
