"""Effective SSH daemon settings from ``sshd -T``."""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from typing import Optional

from core.commands import Runner, run

LOGGER = logging.getLogger(__name__)

NA = "N/A"
DEFAULT_SSHD = "/usr/sbin/sshd"

# sshd -T key -> SshdConfig attribute
SSHD_KEYS = {
    "port": "port",
    "permitrootlogin": "permit_root_login",
    "passwordauthentication": "password_authentication",
    "pubkeyauthentication": "pubkey_authentication",
    "maxauthtries": "max_auth_tries",
    "logingracetime": "login_grace_time",
}


@dataclass
class SshdConfig:
    port: str = NA
    permit_root_login: str = NA
    password_authentication: str = NA
    pubkey_authentication: str = NA
    max_auth_tries: str = NA
    login_grace_time: str = NA


def parse_sshd_dump(text: str) -> SshdConfig:
    """First value of each known key; keys missing from the dump stay ``N/A``."""
    cfg = SshdConfig()
    seen = set()
    for raw in text.splitlines():
        parts = raw.split()
        if len(parts) < 2:
            continue
        key = parts[0].lower()
        attr = SSHD_KEYS.get(key)
        if attr is None or attr in seen:
            continue
        setattr(cfg, attr, parts[1])
        seen.add(attr)
    return cfg


def find_sshd() -> Optional[str]:
    path = shutil.which("sshd") or DEFAULT_SSHD
    return path if os.access(path, os.X_OK) else None


def collect_sshd_config(runner: Runner = run, binary: Optional[str] = None) -> SshdConfig:
    """Dump the effective config; every field is ``N/A`` if sshd is absent or fails."""
    binary = binary or find_sshd()
    if not binary:
        LOGGER.info("[sshd] daemon binary not found")
        return SshdConfig()
    res = runner([binary, "-T"])
    if not res.ok:
        LOGGER.info("[sshd] %s -T exited %d", binary, res.returncode)
        return SshdConfig()
    return parse_sshd_dump(res.stdout)
