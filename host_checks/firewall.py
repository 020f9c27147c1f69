"""UFW status and iptables INPUT chain counters."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from core.commands import Runner, run

LOGGER = logging.getLogger(__name__)

NA = "N/A"
UFW_INACTIVE = "Status: inactive"
EPHEMERAL_RE = re.compile(r"32768|32769")


@dataclass
class FirewallStatus:
    ufw_status: str = UFW_INACTIVE
    input_policy: str = NA
    drop_packets: Optional[int] = None
    drop_bytes: Optional[int] = None

    @property
    def active(self) -> bool:
        return bool(re.search(r"Status: active", self.ufw_status, re.IGNORECASE))

    @property
    def ephemeral_ports_exposed(self) -> bool:
        return bool(EPHEMERAL_RE.search(self.ufw_status))

    @property
    def blocked(self) -> str:
        if self.drop_packets is None:
            return NA
        return f"{self.drop_packets} packets / {self.drop_bytes or 0} bytes"


def parse_input_policy(text: str) -> str:
    """``-P INPUT DROP`` -> ``DROP``."""
    lines = text.splitlines()
    if not lines:
        return NA
    policy = re.sub(r"^-P INPUT ", "", lines[0])
    policy = re.sub(r" -.*", "", policy).strip()
    return policy or NA


def parse_drop_counters(text: str) -> Tuple[int, int]:
    """Sum pkts/bytes of every DROP rule in ``iptables -L INPUT -v -n -x`` output."""
    pkts = byts = 0
    for line in text.splitlines():
        if "DROP" not in line:
            continue
        fields = line.split()
        if len(fields) < 2 or not (fields[0].isdigit() and fields[1].isdigit()):
            continue
        pkts += int(fields[0])
        byts += int(fields[1])
    return pkts, byts


def collect_firewall(runner: Runner = run) -> FirewallStatus:
    status = FirewallStatus()

    ufw = runner(["ufw", "status"])
    if ufw.ok and ufw.stdout.strip():
        status.ufw_status = ufw.stdout.rstrip("\n")

    policy = runner(["iptables", "-S", "INPUT"])
    if policy.ok:
        status.input_policy = parse_input_policy(policy.stdout)

    listing = runner(["iptables", "-L", "INPUT", "-v", "-n", "-x"])
    if listing.ok:
        status.drop_packets, status.drop_bytes = parse_drop_counters(listing.stdout)

    LOGGER.info("[firewall] ufw_active=%s policy=%s blocked=%s",
                status.active, status.input_policy, status.blocked)
    return status
