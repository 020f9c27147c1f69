"""Exceptions raised by the fail-fast paths of the toolset.

Entry points catch ``ToolsetError`` and turn it into exit code 1.
"""

from __future__ import annotations


class ToolsetError(Exception):
    """Base class for precondition failures that abort a run."""


class PeriodError(ToolsetError, ValueError):
    """A date string or a date period is malformed."""


class CredentialsError(ToolsetError):
    """AWS credentials are missing, invalid or the profile cannot be found."""


class CostDataError(ToolsetError):
    """Cost Explorer rejected a request or returned an unusable payload."""
