"""Prioritized remediation advice with copy-pasteable commands.

Each rule fires on its own finding; nothing is cross-checked against the score
(a disabled firewall both loses its score point and yields a recommendation).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from finops_toolset.config import AUDIT_SCRIPT_PATH
from host_checks.findings import SecurityFindings

PRIORITIES = ("CRITICAL", "HIGH", "MEDIUM", "LOW")
PRIORITY_HEADINGS = {
    "CRITICAL": "🔴 CRITICAL PRIORITY:",
    "HIGH": "🟠 HIGH PRIORITY:",
    "MEDIUM": "🟡 MEDIUM PRIORITY:",
    "LOW": "🟢 LOW PRIORITY:",
}

DISABLE_PASSWORD_AUTH = (
    "sudo sed -i 's/^#*PasswordAuthentication.*/PasswordAuthentication no/' /etc/ssh/sshd_config"
)
DISABLE_ROOT_LOGIN = "sudo sed -i 's/^#*PermitRootLogin.*/PermitRootLogin no/' /etc/ssh/sshd_config"
TRIVY_SCAN = (
    "docker run --rm -v /var/run/docker.sock:/var/run/docker.sock "
    "aquasec/trivy image --severity HIGH,CRITICAL"
)


@dataclass
class Recommendation:
    priority: str
    title: str
    # literal lines printed under the title
    commands: List[str] = field(default_factory=list)
    number: int = 0


def build_recommendations(findings: SecurityFindings, threat: str) -> List[Recommendation]:
    """Ordered CRITICAL -> LOW, numbered across bands."""
    recs: List[Recommendation] = []
    failed = findings.auth.failed_total
    ssh = findings.sshd
    fw = findings.firewall

    def add(priority: str, title: str, *commands: str) -> None:
        recs.append(Recommendation(priority, title, list(commands)))

    # CRITICAL
    if threat in ("CRITICAL", "HIGH") and findings.auth.top_ips:
        add("CRITICAL", "Block attacking IPs immediately:",
            *(f"sudo ufw deny from {ip}" for ip, _count in findings.auth.top_ips))

    if ssh.password_authentication == "yes" and failed > 100:
        add("CRITICAL", "🔴 CRITICAL: Disable SSH password authentication NOW",
            f"Command: {DISABLE_PASSWORD_AUTH} && sudo systemctl restart sshd")
    elif ssh.password_authentication == "yes" and failed > 20:
        add("CRITICAL", "🟠 HIGH: Disable SSH password authentication",
            f"Command: {DISABLE_PASSWORD_AUTH}")

    if not fw.active:
        add("CRITICAL", "🔴 CRITICAL: Enable firewall immediately", "Command: sudo ufw enable")

    if findings.nopasswd:
        add("CRITICAL", f"🔴 CRITICAL: Remove NOPASSWD sudo ({len(findings.nopasswd)} users affected)",
            "Review: /etc/sudoers and /etc/sudoers.d/")

    # HIGH
    if ssh.permit_root_login == "yes":
        add("HIGH", "Disable SSH root login", f"Command: {DISABLE_ROOT_LOGIN}")

    if ssh.port == "22" and failed > 50:
        add("HIGH", "Change SSH port from default (under attack)",
            "Edit /etc/ssh/sshd_config: Port 2222")

    if failed > 50 and not findings.fail2ban.installed:
        add("HIGH", "Install fail2ban for auto-blocking",
            "Command: sudo apt update && sudo apt install fail2ban -y")

    if fw.ephemeral_ports_exposed:
        add("HIGH", "Close high ephemeral ports (32768-32769)",
            "Command: sudo ufw delete allow 32768 && sudo ufw delete allow 32769")

    # MEDIUM
    if findings.docker.mentions("traefik"):
        add("MEDIUM", "Enable rate limiting in Traefik")

    if findings.docker.reachable:
        add("MEDIUM", "Run Trivy security scan on Docker images", f"Command: {TRIVY_SCAN}")

    if findings.docker.mentions("portainer|coolify"):
        add("MEDIUM", "Enable 2FA in Portainer/Coolify dashboards")

    if findings.cron_present:
        add("MEDIUM", "Review cron jobs for suspicious entries", "Command: ls -la /etc/cron.*/*")

    # LOW
    if not findings.crowdsec_installed:
        add("LOW", "Consider installing CrowdSec IDS",
            "Command: curl -s https://install.crowdsec.net | sudo sh")

    if ssh.port == "22" and failed < 50:
        add("LOW", "Consider changing SSH port for security by obscurity")

    add("LOW", "Schedule regular security audits (weekly)",
        f"Add to cron: 0 2 * * 0 {AUDIT_SCRIPT_PATH} > /var/log/security-audit.log")

    for number, rec in enumerate(recs, start=1):
        rec.number = number
    return recs


def by_priority(recs: List[Recommendation]) -> Dict[str, List[Recommendation]]:
    grouped: Dict[str, List[Recommendation]] = {p: [] for p in PRIORITIES}
    for rec in recs:
        grouped[rec.priority].append(rec)
    return grouped


NEXT_STEPS: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    "CRITICAL": ("⚠️  IMMEDIATE ACTION REQUIRED:", (
        "Block all attacking IPs NOW",
        "Disable password authentication",
        "Review logs for breach indicators",
        "Consider temporary SSH port change",
    )),
    "HIGH": ("⚠️  URGENT - Act within 24 hours:", (
        "Implement critical recommendations",
        "Install fail2ban",
        "Monitor attack patterns",
        "Review user access",
    )),
    "MEDIUM": ("📊 Act within this week:", (
        "Follow high priority recommendations",
        "Strengthen SSH configuration",
        "Enable automated monitoring",
    )),
    "LOW": ("✅ Maintain current security posture:", (
        "Follow recommendations by priority",
        "Schedule regular audits",
        "Keep system updated",
    )),
}


def next_steps(threat: str) -> Tuple[str, Tuple[str, ...]]:
    return NEXT_STEPS.get(threat, NEXT_STEPS["LOW"])


def concerns(findings: SecurityFindings) -> List[str]:
    ssh = findings.sshd
    issues: List[str] = []
    if findings.nopasswd:
        issues.append("Multiple NOPASSWD sudo users detected")
    if findings.firewall.ephemeral_ports_exposed:
        issues.append("High ephemeral ports exposed in UFW")
    if findings.cron_present:
        issues.append("Cron jobs exist - review manually")
    if ssh.password_authentication == "yes":
        issues.append("SSH password authentication enabled")
    if ssh.permit_root_login == "yes":
        issues.append("SSH root login enabled")
    if ssh.port == "22":
        issues.append("Using default SSH port")
    return issues


def conclusion(score: float) -> str:
    if score >= 8:
        return "✅ EXCELLENT: Server security is very strong. Continue monitoring."
    if score >= 6:
        return "✅ GOOD: Server security is acceptable. Follow recommendations for improvement."
    return "⚠️  NEEDS ATTENTION: Server security requires immediate improvement!"
