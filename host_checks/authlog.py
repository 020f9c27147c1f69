"""Failed SSH login statistics from the journal and ``auth.log`` files.

Both sources are read and concatenated, so entries present in the journal and
in a flat file are counted twice.
"""

from __future__ import annotations

import glob
import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from core.commands import Runner, Which, has, run
from finops_toolset.config import (
    AUTH_LOG_GLOB, AUTH_LOG_SINCE, RECENT_LOG_LINES, TOP_USERNAMES, TOP_ATTACKING_IPS,
)

LOGGER = logging.getLogger(__name__)

FAILED_RE = re.compile(r"failed password", re.IGNORECASE)
IPV4_RE = re.compile(r"(?:[0-9]{1,3}\.){3}[0-9]{1,3}")


@dataclass
class AuthLogStats:
    failed_total: int = 0
    failed_recent: int = 0
    top_usernames: List[Tuple[str, int]] = field(default_factory=list)
    top_ips: List[Tuple[str, int]] = field(default_factory=list)


def read_auth_log(
    runner: Runner = run,
    which: Which = has,
    pattern: str = AUTH_LOG_GLOB,
    since: str = AUTH_LOG_SINCE,
) -> str:
    """Journal output for the ssh unit followed by every plain ``auth.log*`` file."""
    parts: List[str] = []
    if which("journalctl"):
        parts.append(runner(["journalctl", "--no-pager", "-u", "ssh", "--since", since]).stdout)

    for path in sorted(glob.glob(pattern)):
        if path.endswith(".gz"):
            continue
        try:
            with open(path, "rb") as fh:
                parts.append(fh.read().decode("utf-8", errors="replace"))
        except OSError as exc:
            LOGGER.debug("[authlog] cannot read %s: %s", path, exc)

    text = "\n".join(part.rstrip("\n") for part in parts if part)
    return text.replace("\x00", "")


def failed_lines(lines: Iterable[str]) -> List[str]:
    return [line for line in lines if FAILED_RE.search(line)]


def _ranked(counter: Counter, limit: int) -> List[Tuple[str, int]]:
    return sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]


def usernames(lines: Iterable[str]) -> List[str]:
    """Token after each ``for``; ``for invalid user X`` yields ``X``."""
    names: List[str] = []
    for line in lines:
        tokens = line.split()
        for idx, token in enumerate(tokens[:-1]):
            if token != "for":
                continue
            rest = tokens[idx + 1:]
            if len(rest) >= 3 and rest[0] == "invalid" and rest[1] == "user":
                name = rest[2]
            else:
                name = rest[0]
            name = name.replace(":", "")
            if name:
                names.append(name)
    return names


def attacking_ips(lines: Iterable[str]) -> List[str]:
    return [ip for line in lines for ip in IPV4_RE.findall(line)]


def analyze_auth_log(
    text: str,
    recent_lines: int = RECENT_LOG_LINES,
    top_users: int = TOP_USERNAMES,
    top_ips: int = TOP_ATTACKING_IPS,
) -> AuthLogStats:
    lines: Sequence[str] = text.splitlines()
    failed = failed_lines(lines)
    recent = failed_lines(lines[-recent_lines:]) if recent_lines > 0 else []
    stats = AuthLogStats(
        failed_total=len(failed),
        failed_recent=len(recent),
        top_usernames=_ranked(Counter(usernames(failed)), top_users),
        top_ips=_ranked(Counter(attacking_ips(failed)), top_ips),
    )
    LOGGER.info("[authlog] failed=%d recent=%d ips=%d",
                stats.failed_total, stats.failed_recent, len(stats.top_ips))
    return stats


def collect_auth_stats(runner: Runner = run, which: Which = has,
                       pattern: Optional[str] = None) -> AuthLogStats:
    return analyze_auth_log(read_auth_log(runner, which, pattern or AUTH_LOG_GLOB))
