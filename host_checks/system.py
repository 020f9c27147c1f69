"""Host identity, logged-in sessions and small presence probes."""

from __future__ import annotations

import glob
import logging
from typing import Callable, List

import requests

from core.commands import Runner, run
from finops_toolset.config import CRON_GLOB, PUBLIC_IP_TIMEOUT, PUBLIC_IP_URL

LOGGER = logging.getLogger(__name__)

NA = "N/A"


def host_ip(runner: Runner = run) -> str:
    """First address reported by ``hostname -I``."""
    res = runner(["hostname", "-I"])
    tokens = res.stdout.split() if res.ok else []
    return tokens[0] if tokens else NA


def public_ip(get: Callable[..., requests.Response] = requests.get,
              url: str = PUBLIC_IP_URL, timeout: float = PUBLIC_IP_TIMEOUT) -> str:
    try:
        resp = get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        LOGGER.info("[system] public IP lookup failed: %s", exc)
        return NA
    return resp.text.strip() or NA


def active_sessions(runner: Runner = run) -> List[str]:
    res = runner(["who"])
    return [line for line in res.lines() if line.strip()] if res.ok else []


def cron_jobs_present(pattern: str = CRON_GLOB) -> bool:
    return bool(glob.glob(pattern))
