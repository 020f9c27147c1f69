"""Common helpers for resource checkers (shared across AWS services).

- _logger: consistent logger selection with config fallback.
- ResourceListing: what every checker returns (rows to tabulate + verdict text).
- _to_utc_iso / _utc_iso_or_blank: safe UTC ISO8601 helpers for table cells.
- Tag helpers: tags_to_dict, pick_tag, name_tag.
- _client_region, _extract_params: runtime helpers for checker signatures.

All functions are small and dependency-free; import what you need:
    from aws_checkers.common import (
        _logger, ResourceListing, _utc_iso_or_blank, name_tag, _extract_params
    )
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from aws_checkers import config

SEVERITIES = ("info", "warn", "critical")


def _logger(fallback: Optional[logging.Logger]) -> logging.Logger:
    """Return the given logger or a sensible default."""
    return fallback or config.LOGGER or logging.getLogger(__name__)


@dataclass
class ResourceListing:
    """Inventory of one resource kind, already filtered to the noteworthy state.

    ``message`` is a format string receiving ``count``; it is printed when rows
    exist, ``empty_message`` otherwise.
    """

    kind: str
    title: str
    headers: Tuple[str, ...]
    message: str
    empty_message: str
    severity: str = "warn"
    region: str = ""
    rows: List[List[Any]] = field(default_factory=list)
    error: str = ""

    def __post_init__(self) -> None:
        if self.severity not in SEVERITIES:
            raise ValueError(f"Unknown severity {self.severity!r}")

    @property
    def count(self) -> int:
        return len(self.rows)

    def verdict(self) -> str:
        return self.message.format(count=self.count) if self.rows else self.empty_message


def _mark_failed(listing: ResourceListing, exc: BaseException, log: logging.Logger, context: str) -> None:
    """Record a failed provider query; the kind then counts as zero."""
    log.warning("[%s] %s failed, counting as zero: %s", listing.kind, context, exc)
    listing.rows.clear()
    listing.error = f"{type(exc).__name__}: {exc}"


def _client_region(client) -> str:
    return getattr(getattr(client, "meta", None), "region_name", "") or ""


def _to_utc_iso(dt_obj: Optional[datetime]) -> Optional[str]:
    """Return datetime as UTC ISO8601 (no microseconds), or None if not a datetime."""
    if not isinstance(dt_obj, datetime):
        return None
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=timezone.utc)
    else:
        dt_obj = dt_obj.astimezone(timezone.utc)
    return dt_obj.replace(microsecond=0).isoformat()


def _utc_iso_or_blank(value: Any) -> str:
    """UTC ISO string for datetimes, the raw string for strings, else blank."""
    if isinstance(value, str):
        return value
    iso = _to_utc_iso(value)
    return "" if iso is None else iso


def tags_to_dict(pairs: Optional[List[Dict[str, str]]]) -> Dict[str, str]:
    """Convert AWS [{'Key','Value'}] into a plain dict; empty on errors."""
    out: Dict[str, str] = {}
    for t in pairs or []:
        k, v = t.get("Key"), t.get("Value")
        if k:
            out[str(k)] = "" if v is None else str(v)
    return out


def pick_tag(tags: Dict[str, str], keys: Iterable[str]) -> Optional[str]:
    """Fetch first matching tag value by trying several case-insensitive keys."""
    low = {k.lower(): v for k, v in tags.items()}
    for k in keys:
        v = low.get(str(k).lower())
        if v:
            return v
    return None


def name_tag(pairs: Optional[List[Dict[str, str]]]) -> str:
    """Value of the ``Name`` tag, blank when untagged."""
    return pick_tag(tags_to_dict(pairs), ["Name"]) or ""


def _extract_params(
    args: Sequence[Any],
    kwargs: Mapping[str, Any],
    *,
    required: Sequence[str],
    optional: Sequence[str] = (),
) -> Tuple[Any, ...]:
    """
    Resolve positional/keyword arguments for checkers in a DRY fashion.

    Example:
        (ec2,) = _extract_params(args, kwargs, required=("ec2",))
    """
    ordered_names: Tuple[str, ...] = tuple(required) + tuple(optional)

    # Too many positional args
    if len(args) > len(ordered_names):
        extras = args[len(ordered_names):]
        raise TypeError(
            f"Expected at most {len(ordered_names)} positional arguments "
            f"({', '.join(ordered_names)}), but got {len(args)}: {extras!r}"
        )

    # Unexpected kwargs
    unexpected = [k for k in kwargs if k not in ordered_names]
    if unexpected:
        raise TypeError(f"Got unexpected keyword argument(s): {', '.join(sorted(unexpected))}")

    values: Dict[str, Any] = {}
    for idx, name in enumerate(ordered_names):
        have_pos = idx < len(args)
        have_kw = name in kwargs

        # Same param provided twice (like Python would error)
        if have_pos and have_kw:
            raise TypeError(f"Got multiple values for argument '{name}'")

        if have_kw:
            values[name] = kwargs[name]
        elif have_pos:
            values[name] = args[idx]
        else:
            values[name] = None

    missing = [name for name in required if values.get(name) is None]
    if missing:
        expected = " and ".join(f"'{name}'" for name in required)
        got = ", ".join(f"{name}={values.get(name)!r}" for name in ordered_names)
        raise TypeError(f"Expected {expected} (got {got})")

    return tuple(values[name] for name in ordered_names)
