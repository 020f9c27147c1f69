"""Checker: Amazon S3 buckets (global inventory).

Buckets are billed for storage and data transfer; listing is informational.
"""

from __future__ import annotations

import logging
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from aws_checkers.common import ResourceListing, _mark_failed, _extract_params, _logger, _utc_iso_or_blank


def check_buckets(*args, logger: Optional[logging.Logger] = None, **kwargs) -> ResourceListing:
    """List all buckets owned by the account (``list_buckets`` is global)."""
    (s3,) = _extract_params(args, kwargs, required=("s3",))
    log = _logger(logger)

    listing = ResourceListing(
        kind="s3",
        title="🪣 S3 Buckets:",
        headers=("CreationDate", "Name"),
        message="📊 Found {count} S3 bucket(s)",
        empty_message="✅ No S3 buckets",
        severity="info",
        region="GLOBAL",
    )

    try:
        resp = s3.list_buckets()
        for bucket in resp.get("Buckets", []) or []:
            listing.rows.append([
                _utc_iso_or_blank(bucket.get("CreationDate")),
                bucket.get("Name", ""),
            ])
    except (ClientError, BotoCoreError) as exc:
        _mark_failed(listing, exc, log, "list_buckets")

    log.info("[s3] %d bucket(s)", listing.count)
    return listing
