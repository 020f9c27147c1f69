"""Checker: Amazon RDS DB instances.

Instances are billed per hour based on instance class.
"""

from __future__ import annotations

import logging
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from aws_checkers.common import ResourceListing, _mark_failed, _client_region, _extract_params, _logger


def check_db_instances(*args, logger: Optional[logging.Logger] = None, **kwargs) -> ResourceListing:
    """List every DB instance with class, engine and status."""
    (rds,) = _extract_params(args, kwargs, required=("rds",))
    log = _logger(logger)

    listing = ResourceListing(
        kind="rds",
        title="🗄️ RDS Instances:",
        headers=("DBInstanceIdentifier", "DBInstanceClass", "Engine", "DBInstanceStatus"),
        message="⚠️  Found {count} RDS instance(s)",
        empty_message="✅ No RDS instances",
        severity="warn",
        region=_client_region(rds),
    )

    try:
        paginator = rds.get_paginator("describe_db_instances")
        for page in paginator.paginate():
            for db in page.get("DBInstances", []) or []:
                listing.rows.append([
                    db.get("DBInstanceIdentifier", ""),
                    db.get("DBInstanceClass", ""),
                    db.get("Engine", ""),
                    db.get("DBInstanceStatus", ""),
                ])
    except (ClientError, BotoCoreError) as exc:
        _mark_failed(listing, exc, log, "describe_db_instances")

    log.info("[rds] %d DB instance(s) in %s", listing.count, listing.region)
    return listing
