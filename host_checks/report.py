"""Console rendering of the security audit."""

from __future__ import annotations

from typing import List

from finops_toolset.console import ReportConsole
from host_checks.docker import HEADERS as DOCKER_HEADERS
from host_checks.findings import SecurityFindings
from host_checks.recommendations import (
    PRIORITIES, PRIORITY_HEADINGS, Recommendation, by_priority, concerns, conclusion, next_steps,
)
from host_checks.scoring import score_label

SEP_WIDTH = 68
_PRIORITY_STYLES = {"CRITICAL": "red", "HIGH": "yellow", "MEDIUM": "yellow", "LOW": "green"}
_THREAT_STYLES = {"CRITICAL": "bold red", "HIGH": "red", "MEDIUM": "yellow", "LOW": "green"}


def _sep(console: ReportConsole) -> None:
    console.blank()
    console.rule("─", SEP_WIDTH)
    console.blank()


def _attack_section(console: ReportConsole, f: SecurityFindings) -> None:
    console.line("🚨 CRITICAL ATTACK METRICS", style="bold")
    console.line(f"•  Total Failed Login Attempts: {f.auth.failed_total}")
    console.line(f"•  Currently Failed (last ~2000 lines): {f.auth.failed_recent}")
    console.line(f"•  Total Banned IPs: {f.fail2ban.banned_total}")
    console.line(f"•  Currently Banned: {f.fail2ban.banned_now}")
    if f.fail2ban.installed:
        console.line("•  Fail2ban Protection: Active and effective", style="green")
    else:
        console.line("•  Fail2ban Protection: Not detected", style="yellow")
    console.line("🎯 Currently Banned Threat IPs:")
    console.line(f"  {', '.join(f.fail2ban.sshd_banned) or 'None'}")
    console.blank()
    console.line("Top Attacking IPs (with geolocation):")
    if not f.auth.top_ips:
        console.line("•  No significant attacks detected")
    for ip, count in f.auth.top_ips:
        location = f.locations.get(ip)
        suffix = f" - {location}" if location else ""
        console.line(f"•  {ip} ({count} attempts){suffix}")


def _ssh_section(console: ReportConsole, f: SecurityFindings) -> None:
    ssh = f.sshd
    console.line("✅ SSH SECURITY CONFIGURATION", style="bold")
    console.line(f"Port: {ssh.port}")
    console.line(f"Root Login: {ssh.permit_root_login}")
    console.line(f"Password Auth: {ssh.password_authentication}")
    console.line(f"Public Key Auth: {ssh.pubkey_authentication}")
    console.line(f"MaxAuthTries: {ssh.max_auth_tries}")
    console.line(f"LoginGraceTime: {ssh.login_grace_time}")
    console.blank()
    console.line("Active SSH Sessions:")
    if not f.sessions:
        console.line("• None")
    for session in f.sessions:
        console.line(f"•  {session}")


def _firewall_section(console: ReportConsole, f: SecurityFindings) -> None:
    console.line("🛡️ FIREWALL & NETWORK SECURITY", style="bold")
    console.line("UFW Rules:")
    console.line(f.firewall.ufw_status, style=None if f.firewall.active else "red")
    console.blank()
    console.line("Iptables:")
    console.line(f"• INPUT Policy: {f.firewall.input_policy}")
    console.line(f"• Blocked: {f.firewall.blocked}")


def _user_section(console: ReportConsole, f: SecurityFindings) -> None:
    console.line("👥 USER SECURITY", style="bold")
    for user in f.shell_users:
        console.line(f"•  {user.name} (UID {user.uid})")
    console.blank()
    console.line("Users with NOPASSWD sudo:")
    if not f.nopasswd:
        console.line("• None")
    for line in f.nopasswd:
        console.line(line, style="red")
    console.blank()
    console.line("SSH Key Distribution:")
    for key in f.ssh_keys:
        console.line(f"•  {key.user}: {key.status}")


def _container_section(console: ReportConsole, f: SecurityFindings) -> None:
    console.line("🐳 CONTAINER SECURITY", style="bold")
    if not f.docker.reachable:
        console.line("• Docker not running or not installed")
        return
    console.table(DOCKER_HEADERS, f.docker.rows())
    for container in f.docker.unhealthy:
        console.warning(f"Unhealthy: {container.name} ({container.status})")


def _threat_intel_section(console: ReportConsole, f: SecurityFindings) -> None:
    console.line("🔍 THREAT INTELLIGENCE", style="bold")
    if not f.auth.top_usernames:
        console.line("• No failed login attempts detected")
    for name, count in f.auth.top_usernames:
        console.line(f"• {count:>7} {name}")


def _recommendation_section(console: ReportConsole, recs: List[Recommendation],
                            threat: str, score: float) -> None:
    console.line("🎯 PRIORITIZED SECURITY RECOMMENDATIONS", style="bold")
    console.line(f"Threat Level: {threat} | Security Score: {score:.2f}/10", style=_THREAT_STYLES[threat])
    grouped = by_priority(recs)
    for priority in PRIORITIES:
        console.blank()
        console.line(PRIORITY_HEADINGS[priority], style=_PRIORITY_STYLES[priority])
        for rec in grouped[priority]:
            console.line(f"{rec.number}. {rec.title}")
            for command in rec.commands:
                console.line(f"   {command}")


def render_report(console: ReportConsole, f: SecurityFindings, score: float,
                  threat: str, recs: List[Recommendation]) -> None:
    """Print every report section in order."""
    console.line("COMPREHENSIVE SECURITY DEEP-DIVE REPORT", style="bold")
    console.blank()
    console.line(f"📅 Generated at: {f.generated_at}")
    console.line(f"🌐 Host IP: {f.host_ip}  Public IP: {f.public_ip}")
    _sep(console)

    label = score_label(score)
    console.line("📊 SECURITY SUMMARY", style="bold")
    console.line(f"Overall Security Score: {score:.2f}/10. {label}",
                 style="green" if score >= 6 else "red")
    _sep(console)

    for section in (_attack_section, _ssh_section, _firewall_section,
                    _user_section, _container_section, _threat_intel_section):
        section(console, f)
        _sep(console)

    _recommendation_section(console, recs, threat, score)
    _sep(console)

    heading, steps = next_steps(threat)
    console.line("💡 NEXT STEPS BASED ON THREAT LEVEL:", style="bold")
    console.line(heading)
    for idx, step in enumerate(steps, start=1):
        console.line(f"{idx}. {step}")
    _sep(console)

    console.line("🚧 SECURITY CONCERNS SUMMARY", style="bold")
    console.line("⚠️ Issues Found:")
    for issue in concerns(f):
        console.line(f"• {issue}", style="yellow")
    _sep(console)

    console.line("🎯 CONCLUSION", style="bold")
    console.line(conclusion(score), style="green" if score >= 6 else "red")
