"""Parsers and probes of the host auditor, fed with canned command output."""

from __future__ import annotations

from typing import Dict, Optional, Sequence

import pytest

from core.commands import RC_NOT_FOUND, CommandResult
from host_checks.authlog import analyze_auth_log, read_auth_log, usernames
from host_checks.docker import ContainerStatus, collect_docker, parse_docker_ps
from host_checks.fail2ban import collect_fail2ban, parse_jail_list
from host_checks.firewall import (
    FirewallStatus, collect_firewall, parse_drop_counters, parse_input_policy,
)
from host_checks.geoip import IpLocator, parse_host, parse_nslookup, parse_whois
from host_checks.sshd import SshdConfig, collect_sshd_config, parse_sshd_dump


class FakeRunner:
    """Serves canned stdout keyed by the joined command line; unknown commands fail."""

    def __init__(self, outputs: Dict[str, str], failing: Sequence[str] = ()) -> None:
        self.outputs = outputs
        self.failing = set(failing)
        self.calls: list = []

    def __call__(self, cmd: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        key = " ".join(cmd)
        self.calls.append((key, timeout))
        if key in self.failing:
            return CommandResult(1, self.outputs.get(key, ""))
        if key not in self.outputs:
            return CommandResult(RC_NOT_FOUND)
        return CommandResult(0, self.outputs[key])


def _which(*available: str):
    return lambda name: name in available


# ---------------------------------------------------------------- sshd

SSHD_DUMP = """\
port 2222
port 2223
permitrootlogin no
passwordauthentication no
pubkeyauthentication yes
maxauthtries 3
logingracetime 30
"""


def test_parse_sshd_dump_first_port_wins():
    cfg = parse_sshd_dump(SSHD_DUMP)
    assert cfg.port == "2222"
    assert cfg.permit_root_login == "no"
    assert cfg.pubkey_authentication == "yes"
    assert cfg.login_grace_time == "30"


def test_parse_sshd_dump_missing_keys_stay_na():
    cfg = parse_sshd_dump("PermitRootLogin yes\n")
    assert cfg.permit_root_login == "yes"
    assert cfg.port == "N/A"


def test_collect_sshd_failure_gives_all_na():
    runner = FakeRunner({}, failing=["/usr/sbin/sshd -T"])
    assert collect_sshd_config(runner, binary="/usr/sbin/sshd") == SshdConfig()


def test_collect_sshd_reads_dump():
    runner = FakeRunner({"/usr/sbin/sshd -T": SSHD_DUMP})
    assert collect_sshd_config(runner, binary="/usr/sbin/sshd").max_auth_tries == "3"


# ---------------------------------------------------------------- fail2ban

F2B_STATUS = "Status\n|- Number of jail:\t2\n`- Jail list:\tnginx-http-auth, sshd\n"
F2B_SSHD = """\
Status for the jail: sshd
|- Filter
|  |- Currently failed:\t2
|  `- Total failed:\t40
`- Actions
   |- Currently banned:\t2
   |- Total banned:\t7
   `- Banned IP list:\t203.0.113.5 198.51.100.7
"""
F2B_NGINX = "`- Actions\n   |- Currently banned:\t1\n   |- Total banned:\t3\n"


def test_fail2ban_sums_every_jail():
    runner = FakeRunner({
        "fail2ban-client status": F2B_STATUS,
        "fail2ban-client status sshd": F2B_SSHD,
        "fail2ban-client status nginx-http-auth": F2B_NGINX,
    })
    status = collect_fail2ban(runner, _which("fail2ban-client"))
    assert status.jails == ["nginx-http-auth", "sshd"]
    assert status.banned_total == 10
    assert status.banned_now == 3
    assert status.sshd_banned == ["203.0.113.5", "198.51.100.7"]
    assert status.active


def test_fail2ban_absent_is_all_zero():
    status = collect_fail2ban(FakeRunner({}), _which())
    assert not status.installed
    assert not status.active
    assert (status.banned_total, status.banned_now, status.jails) == (0, 0, [])


def test_parse_jail_list_empty():
    assert parse_jail_list("") == []


# ---------------------------------------------------------------- auth log

AUTH_LINES = [
    "Nov 10 10:00:01 web sshd[1]: Failed password for root from 203.0.113.5 port 50000 ssh2",
    "Nov 10 10:00:02 web sshd[1]: Failed password for invalid user admin from 203.0.113.5 port 50001 ssh2",
    "Nov 10 10:00:03 web sshd[1]: Accepted publickey for deploy from 192.0.2.10 port 50002 ssh2",
    "Nov 10 10:00:04 web sshd[1]: failed password for root from 198.51.100.7 port 50003 ssh2",
    "Nov 10 10:00:05 web sshd[1]: Failed password for invalid user admin from 203.0.113.5 port 50004 ssh2",
]


def test_analyze_auth_log_counts_and_rankings():
    stats = analyze_auth_log("\n".join(AUTH_LINES))
    assert stats.failed_total == 4
    assert stats.failed_recent == 4
    assert stats.top_usernames == [("admin", 2), ("root", 2)]
    assert stats.top_ips == [("203.0.113.5", 3), ("198.51.100.7", 1)]


def test_recent_window_is_last_lines_only():
    stats = analyze_auth_log("\n".join(AUTH_LINES), recent_lines=2)
    assert stats.failed_total == 4
    assert stats.failed_recent == 2


def test_analyze_empty_log():
    stats = analyze_auth_log("")
    assert (stats.failed_total, stats.failed_recent, stats.top_usernames, stats.top_ips) == (0, 0, [], [])


def test_usernames_ignores_trailing_for():
    assert usernames(["connection closed for", "Failed password for bob: from x"]) == ["bob"]


def test_read_auth_log_concatenates_sources(tmp_path):
    (tmp_path / "auth.log").write_bytes(b"line one\x00\nline two\n")
    (tmp_path / "auth.log.1").write_text("rotated\n")
    (tmp_path / "auth.log.2.gz").write_bytes(b"\x1f\x8b compressed")
    runner = FakeRunner({"journalctl --no-pager -u ssh --since 30 days ago": "journal line\n"})

    text = read_auth_log(runner, _which("journalctl"), pattern=str(tmp_path / "auth.log*"))
    assert text.splitlines() == ["journal line", "line one", "line two", "rotated"]


def test_read_auth_log_without_sources(tmp_path):
    assert read_auth_log(FakeRunner({}), _which(), pattern=str(tmp_path / "none*")) == ""


# ---------------------------------------------------------------- firewall

IPTABLES_L = """\
Chain INPUT (policy DROP 12 packets, 720 bytes)
    pkts      bytes target     prot opt in     out     source               destination
     120     7200 DROP       all  --  *      *       203.0.113.0/24       0.0.0.0/0
      30     1800 ACCEPT     tcp  --  *      *       0.0.0.0/0            0.0.0.0/0   tcp dpt:22
       5      300 DROP       tcp  --  *      *       0.0.0.0/0            0.0.0.0/0   tcp dpt:23
"""


def test_drop_counters_skip_chain_header():
    assert parse_drop_counters(IPTABLES_L) == (125, 7500)


def test_input_policy():
    assert parse_input_policy("-P INPUT DROP\n-A INPUT -i lo -j ACCEPT\n") == "DROP"
    assert parse_input_policy("") == "N/A"


def test_collect_firewall_defaults_when_tools_missing():
    status = collect_firewall(FakeRunner({}))
    assert status.ufw_status == "Status: inactive"
    assert not status.active
    assert status.input_policy == "N/A"
    assert status.blocked == "N/A"


def test_collect_firewall_active_with_ephemeral_ports():
    runner = FakeRunner({
        "ufw status": "Status: active\n\nTo Action From\n32768 ALLOW Anywhere\n",
        "iptables -S INPUT": "-P INPUT ACCEPT\n",
        "iptables -L INPUT -v -n -x": IPTABLES_L,
    })
    status = collect_firewall(runner)
    assert status.active
    assert status.ephemeral_ports_exposed
    assert status.input_policy == "ACCEPT"
    assert status.blocked == "125 packets / 7500 bytes"


def test_firewall_inactive_text_is_not_active():
    assert not FirewallStatus(ufw_status="Status: inactive").active


# ---------------------------------------------------------------- docker

def test_parse_docker_ps_and_naive_health():
    text = "web\tnginx:1.27\tUp 2 hours\t0.0.0.0:80->80/tcp\nbatch\tjob:1\tExited (1) 3 minutes ago\t\n"
    containers = parse_docker_ps(text)
    assert containers[0] == ContainerStatus("web", "nginx:1.27", "Up 2 hours", "0.0.0.0:80->80/tcp")
    assert containers[0].healthy
    assert not containers[1].healthy


def test_collect_docker_unreachable():
    runner = FakeRunner({}, failing=["docker ps"])
    status = collect_docker(runner, _which("docker"))
    assert not status.reachable
    assert not status.all_healthy


def test_collect_docker_lists_and_flags():
    fmt = "docker ps --format {{.Names}}\t{{.Image}}\t{{.Status}}\t{{.Ports}}"
    runner = FakeRunner({
        "docker ps": "CONTAINER ID ...\n",
        fmt: "proxy\ttraefik:v3\tUp 1 day\t\ndash\tportainer/portainer-ce\tUp 1 day (healthy)\t\n",
    })
    status = collect_docker(runner, _which("docker"))
    assert status.reachable and status.all_healthy
    assert status.mentions("traefik")
    assert status.mentions("portainer|coolify")
    assert not status.mentions("redis")


# ---------------------------------------------------------------- geolocation

WHOIS_RIPE = """\
% This is the RIPE Database query service.
inetnum:        203.0.113.0 - 203.0.113.255
netname:        EXAMPLE-NET
country:        NL
org-name:       Example Hosting B.V.
"""


def test_parse_whois_prefers_org_over_netname():
    assert parse_whois(WHOIS_RIPE) == "Netherlands (NL) | Example Hosting B.V."
    assert parse_whois("NetName: CHINANET\nCountry: CN\n") == "China (CN) | CHINANET"
    assert parse_whois("country: ZZ\n") == "ZZ (ZZ)"
    assert parse_whois("no country here") == ""


def test_reverse_dns_parsers():
    assert parse_nslookup("5.113.0.203.in-addr.arpa\tname = scanner.example.net.\n") == "scanner.example.net"
    assert parse_host("5.113.0.203.in-addr.arpa domain name pointer scanner.example.net.\n") == "scanner.example.net"


def test_locator_falls_through_and_caches():
    runner = FakeRunner({
        "whois 203.0.113.5": "% nothing useful\n",
        "host 203.0.113.5": "5.113.0.203.in-addr.arpa domain name pointer bot.example.\n",
    })
    locator = IpLocator(runner, _which("whois", "host"), timeout=1.0)
    assert locator.locate("203.0.113.5") == "Hostname: bot.example"
    assert locator.locate("203.0.113.5") == "Hostname: bot.example"
    assert [call for call, _ in runner.calls] == ["whois 203.0.113.5", "host 203.0.113.5"]
    assert all(timeout == 1.0 for _, timeout in runner.calls)


def test_locator_unknown_without_tools():
    assert IpLocator(FakeRunner({}), _which()).locate("192.0.2.1") == "Unknown"


@pytest.mark.parametrize("code,name", [("IR", "Iran"), ("AE", "UAE"), ("XX", "XX")])
def test_country_names(code, name):
    from host_checks.geoip import country_name
    assert country_name(code) == name
