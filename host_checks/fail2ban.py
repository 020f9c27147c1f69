"""Fail2ban jail status, parsed from ``fail2ban-client status`` text."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List

from core.commands import Runner, Which, has, run

LOGGER = logging.getLogger(__name__)

CLIENT = "fail2ban-client"


@dataclass
class Fail2banStatus:
    installed: bool = False
    status_text: str = ""
    jails: List[str] = field(default_factory=list)
    banned_total: int = 0
    banned_now: int = 0
    sshd_banned: List[str] = field(default_factory=list)

    @property
    def active(self) -> bool:
        """The server answered a status query."""
        return bool(re.search("status", self.status_text, re.IGNORECASE))


def _value(text: str, label: str) -> str:
    """Text after ``label:`` on the first line that carries it."""
    for line in text.splitlines():
        if label.lower() in line.lower() and ":" in line:
            return line.split(":", 1)[1].strip()
    return ""


def _to_int(value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return 0


def parse_jail_list(status_text: str) -> List[str]:
    raw = _value(status_text, "Jail list")
    return [jail for jail in re.split(r"[,\s]+", raw) if jail]


def parse_jail_counts(jail_text: str) -> tuple[int, int]:
    """(total banned, currently banned) of one jail."""
    return _to_int(_value(jail_text, "Total banned")), _to_int(_value(jail_text, "Currently banned"))


def parse_banned_ips(jail_text: str) -> List[str]:
    return _value(jail_text, "Banned IP list").split()


def collect_fail2ban(runner: Runner = run, which: Which = has) -> Fail2banStatus:
    """Sum ban counters across every jail; absent tool means all zeros."""
    if not which(CLIENT):
        return Fail2banStatus()

    status = Fail2banStatus(installed=True)
    res = runner([CLIENT, "status"])
    status.status_text = res.stdout
    status.jails = parse_jail_list(res.stdout)

    for jail in status.jails:
        jail_res = runner([CLIENT, "status", jail])
        total, now = parse_jail_counts(jail_res.stdout)
        status.banned_total += total
        status.banned_now += now
        if jail == "sshd":
            status.sshd_banned = parse_banned_ips(jail_res.stdout)

    LOGGER.info("[fail2ban] jails=%s total=%d now=%d",
                status.jails, status.banned_total, status.banned_now)
    return status
