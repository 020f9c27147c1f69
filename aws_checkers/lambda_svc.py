"""Checker: AWS Lambda functions.

Functions are billed per invocation and execution time; the scan lists all of
them as informational inventory.
"""

from __future__ import annotations

import logging
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from aws_checkers.common import ResourceListing, _mark_failed, _client_region, _extract_params, _logger


def check_lambda_functions(*args, logger: Optional[logging.Logger] = None, **kwargs) -> ResourceListing:
    """List every Lambda function with runtime, memory size and last change."""
    (lambda_client,) = _extract_params(args, kwargs, required=("lambda_client",))
    log = _logger(logger)

    listing = ResourceListing(
        kind="lambda",
        title="⚙️ Lambda Functions:",
        headers=("FunctionName", "Runtime", "MemorySize", "LastModified"),
        message="📊 Found {count} Lambda function(s)",
        empty_message="✅ No Lambda functions",
        severity="info",
        region=_client_region(lambda_client),
    )

    try:
        paginator = lambda_client.get_paginator("list_functions")
        for page in paginator.paginate():
            for fn in page.get("Functions", []) or []:
                listing.rows.append([
                    fn.get("FunctionName", ""),
                    fn.get("Runtime", ""),
                    fn.get("MemorySize", ""),
                    fn.get("LastModified", ""),
                ])
    except (ClientError, BotoCoreError) as exc:
        _mark_failed(listing, exc, log, "list_functions")

    log.info("[lambda] %d function(s) in %s", listing.count, listing.region)
    return listing
