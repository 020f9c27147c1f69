"""Everything the auditor observed about the host, collected in one pass."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

import requests

from core.commands import Runner, Which, has, run
from finops_toolset.config import CRON_GLOB, PASSWD_FILE, SUDOERS_PATHS
from host_checks.authlog import AuthLogStats, collect_auth_stats
from host_checks.docker import DockerStatus, collect_docker
from host_checks.fail2ban import Fail2banStatus, collect_fail2ban
from host_checks.firewall import FirewallStatus, collect_firewall
from host_checks.geoip import IpLocator
from host_checks.sshd import SshdConfig, collect_sshd_config
from host_checks.system import active_sessions, cron_jobs_present, host_ip, public_ip
from host_checks.users import LocalUser, SshKeyStatus, find_nopasswd, read_passwd, shell_users, ssh_key_status

LOGGER = logging.getLogger(__name__)


@dataclass
class SecurityFindings:
    generated_at: str = ""
    host_ip: str = "N/A"
    public_ip: str = "N/A"
    sshd: SshdConfig = field(default_factory=SshdConfig)
    sessions: List[str] = field(default_factory=list)
    fail2ban: Fail2banStatus = field(default_factory=Fail2banStatus)
    auth: AuthLogStats = field(default_factory=AuthLogStats)
    firewall: FirewallStatus = field(default_factory=FirewallStatus)
    shell_users: List[LocalUser] = field(default_factory=list)
    nopasswd: List[str] = field(default_factory=list)
    ssh_keys: List[SshKeyStatus] = field(default_factory=list)
    docker: DockerStatus = field(default_factory=DockerStatus)
    cron_present: bool = False
    crowdsec_installed: bool = False
    # attacking IP -> location; empty when lookups are disabled
    locations: Dict[str, str] = field(default_factory=dict)


def collect_findings(
    runner: Runner = run,
    which: Which = has,
    *,
    geo: bool = True,
    http_get: Callable[..., requests.Response] = requests.get,
    passwd_path: str = PASSWD_FILE,
    sudoers_paths: Optional[List[str]] = None,
    auth_log_glob: Optional[str] = None,
    cron_glob: Optional[str] = None,
    sshd_binary: Optional[str] = None,
) -> SecurityFindings:
    """Run every probe; none of them raises."""
    findings = SecurityFindings(generated_at=datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S %Z"))
    findings.host_ip = host_ip(runner)
    findings.public_ip = public_ip(http_get)
    findings.sshd = collect_sshd_config(runner, sshd_binary)
    findings.sessions = active_sessions(runner)
    findings.fail2ban = collect_fail2ban(runner, which)
    findings.auth = collect_auth_stats(runner, which, auth_log_glob)
    findings.firewall = collect_firewall(runner)

    users = read_passwd(passwd_path)
    findings.shell_users = shell_users(users)
    findings.nopasswd = find_nopasswd(sudoers_paths if sudoers_paths is not None else SUDOERS_PATHS)
    findings.ssh_keys = ssh_key_status(users)

    findings.docker = collect_docker(runner, which)
    findings.cron_present = cron_jobs_present(cron_glob or CRON_GLOB)
    findings.crowdsec_installed = which("crowdsec")

    if geo:
        locator = IpLocator(runner, which)
        findings.locations = {ip: locator.locate(ip) for ip, _count in findings.auth.top_ips}

    LOGGER.info("[findings] collected: failed=%d ufw_active=%s docker=%s",
                findings.auth.failed_total, findings.firewall.active, findings.docker.reachable)
    return findings
