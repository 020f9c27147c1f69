"""Local accounts: interactive shells, NOPASSWD sudo rules and SSH key stores."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Iterable, List

from finops_toolset.config import PASSWD_FILE, SUDOERS_PATHS

LOGGER = logging.getLogger(__name__)

INTERACTIVE_SHELL_RE = re.compile(r"(bash|zsh|sh)$")

KEYS_PRESENT = "authorized_keys present"
KEYS_MISSING = "authorized_keys missing"
SSH_DIR_MISSING = "~/.ssh missing"


@dataclass(frozen=True)
class LocalUser:
    name: str
    uid: str
    home: str
    shell: str

    @property
    def interactive(self) -> bool:
        return bool(INTERACTIVE_SHELL_RE.search(self.shell))

    @property
    def can_login(self) -> bool:
        return "nologin" not in self.shell and "false" not in self.shell


@dataclass(frozen=True)
class SshKeyStatus:
    user: str
    status: str


def parse_passwd(text: str) -> List[LocalUser]:
    users: List[LocalUser] = []
    for line in text.splitlines():
        if not line.strip() or line.startswith("#"):
            continue
        fields = line.split(":")
        if len(fields) < 7:
            continue
        users.append(LocalUser(name=fields[0], uid=fields[2], home=fields[5], shell=fields[6]))
    return users


def read_passwd(path: str = PASSWD_FILE) -> List[LocalUser]:
    try:
        with open(path, encoding="utf-8", errors="replace") as fh:
            return parse_passwd(fh.read())
    except OSError as exc:
        LOGGER.warning("[users] cannot read %s: %s", path, exc)
        return []


def shell_users(users: Iterable[LocalUser]) -> List[LocalUser]:
    return [user for user in users if user.interactive]


def _sudoers_files(paths: Iterable[str]) -> List[str]:
    files: List[str] = []
    for path in paths:
        if os.path.isdir(path):
            for root, _dirs, names in os.walk(path):
                files.extend(os.path.join(root, name) for name in sorted(names))
        elif os.path.isfile(path):
            files.append(path)
    return files


def find_nopasswd(paths: Iterable[str] = SUDOERS_PATHS) -> List[str]:
    """``<file>:<line>`` for each sudoers line containing NOPASSWD."""
    hits: List[str] = []
    for path in _sudoers_files(paths):
        try:
            with open(path, encoding="utf-8", errors="replace") as fh:
                hits.extend(f"{path}:{line.rstrip()}" for line in fh if "NOPASSWD" in line)
        except OSError as exc:
            LOGGER.debug("[users] cannot read %s: %s", path, exc)
    return hits


def ssh_key_status(users: Iterable[LocalUser]) -> List[SshKeyStatus]:
    """Key store state for every account whose shell allows login."""
    result: List[SshKeyStatus] = []
    for user in users:
        if not user.can_login:
            continue
        ssh_dir = os.path.join(user.home, ".ssh")
        if not os.path.isdir(ssh_dir):
            status = SSH_DIR_MISSING
        elif os.path.isfile(os.path.join(ssh_dir, "authorized_keys")):
            status = KEYS_PRESENT
        else:
            status = KEYS_MISSING
        result.append(SshKeyStatus(user.name, status))
    return result
