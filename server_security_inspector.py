"""
Linux Server Security Inspector
===============================

Audits the local host's SSH, firewall, user and container posture and prints a
scored report with prioritized, copy-pasteable remediation commands.

Collected signals
-----------------
- ``sshd -T`` effective settings, logged-in sessions
- fail2ban jails and ban counters
- failed SSH logins (journal + /var/log/auth.log*), top usernames and IPs
- ufw status, iptables INPUT policy and DROP counters
- shell users, NOPASSWD sudo rules, per-user SSH key stores
- docker containers and naive health
- whois / reverse DNS location of attacking IPs (``--no-geo`` skips it)

Every probe is best effort: a missing tool becomes ``N/A``, zero or an empty
list. Only the root check is fatal.

Usage
-----
    sudo python server_security_inspector.py
    sudo python server_security_inspector.py --no-geo > /var/log/security-audit.log
"""

#region Imports SECTION

import argparse
import logging
import os
from typing import Callable, Iterable, Optional

from finops_toolset.config import LOG_FILE, LOG_LEVEL
from finops_toolset.console import ReportConsole
from host_checks.findings import SecurityFindings, collect_findings
from host_checks.recommendations import build_recommendations
from host_checks.report import render_report
from host_checks.scoring import security_score, threat_level
#endregion

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Audit this server's security posture and print prioritized recommendations."
    )
    parser.add_argument("--no-geo", action="store_true",
                        help="Skip whois/DNS lookups of attacking IPs")
    return parser.parse_args(list(argv) if argv is not None else None)


def audit(console: ReportConsole, findings: SecurityFindings) -> float:
    """Score, classify and print; returns the score."""
    score = security_score(findings)
    threat = threat_level(findings.auth.failed_total)
    recs = build_recommendations(findings, threat)
    render_report(console, findings, score, threat, recs)
    logging.info("[audit] score=%.2f threat=%s recommendations=%d", score, threat, len(recs))
    return score


def main(argv: Optional[Iterable[str]] = None,
         console: Optional[ReportConsole] = None,
         euid: Callable[[], int] = os.geteuid,
         collect: Callable[..., SecurityFindings] = collect_findings) -> int:
    args = parse_args(argv)
    console = console or ReportConsole()
    if euid() != 0:
        console.line("Run as root")
        return 1

    logging.basicConfig(
        filename=LOG_FILE,
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    findings = collect(geo=not args.no_geo)
    audit(console, findings)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
