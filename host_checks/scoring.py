"""Additive security score and failed-login threat level."""

from __future__ import annotations

from typing import List, Tuple

from host_checks.findings import SecurityFindings

MAX_SCORE = 10.0

ROOT_LOGIN_DISABLED = 1.5
PASSWORD_AUTH_DISABLED = 1.5
PUBKEY_AUTH_ENABLED = 1.5
FIREWALL_ACTIVE = 1.0
NON_DEFAULT_PORT = 0.5
CONTAINERS_HEALTHY = 1.0
FAIL2BAN_ACTIVE = 1.0

# (failed logins strictly above, level), highest first
THREAT_LEVELS = ((1000, "CRITICAL"), (500, "HIGH"), (100, "MEDIUM"))


def score_breakdown(findings: SecurityFindings) -> List[Tuple[str, float]]:
    """Satisfied conditions and their weights."""
    ssh = findings.sshd
    checks = [
        ("root login disabled", ROOT_LOGIN_DISABLED, ssh.permit_root_login == "no"),
        ("password auth disabled", PASSWORD_AUTH_DISABLED, ssh.password_authentication == "no"),
        ("pubkey auth enabled", PUBKEY_AUTH_ENABLED, ssh.pubkey_authentication == "yes"),
        ("firewall active", FIREWALL_ACTIVE, findings.firewall.active),
        ("non-default ssh port", NON_DEFAULT_PORT, ssh.port not in ("22", "N/A")),
        ("containers healthy", CONTAINERS_HEALTHY, findings.docker.all_healthy),
        ("fail2ban active", FAIL2BAN_ACTIVE, findings.fail2ban.active),
    ]
    return [(name, weight) for name, weight, ok in checks if ok]


def security_score(findings: SecurityFindings) -> float:
    total = sum(weight for _name, weight in score_breakdown(findings))
    return min(round(total, 2), MAX_SCORE)


def score_label(score: float) -> str:
    if score >= 8:
        return "Very Strong"
    if score >= 6:
        return "Strong"
    return "Needs Attention"


def threat_level(failed_total: int) -> str:
    for threshold, level in THREAT_LEVELS:
        if failed_total > threshold:
            return level
    return "LOW"
