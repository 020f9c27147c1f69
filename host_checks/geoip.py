"""Best-effort location of attacking IPs: whois, then reverse DNS, then ``host``."""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional

from core.commands import Runner, Which, has, run
from finops_toolset.config import LOOKUP_TIMEOUT

LOGGER = logging.getLogger(__name__)

UNKNOWN = "Unknown"

COUNTRY_NAMES = {
    "IR": "Iran", "CN": "China", "US": "United States", "RU": "Russia",
    "IN": "India", "BR": "Brazil", "DE": "Germany", "FR": "France",
    "GB": "United Kingdom", "AU": "Australia", "CA": "Canada", "JP": "Japan",
    "KR": "South Korea", "NL": "Netherlands", "SG": "Singapore", "HK": "Hong Kong",
    "VN": "Vietnam", "TH": "Thailand", "ID": "Indonesia", "PL": "Poland",
    "UA": "Ukraine", "TR": "Turkey", "IT": "Italy", "ES": "Spain",
    "MX": "Mexico", "AR": "Argentina", "ZA": "South Africa", "EG": "Egypt",
    "SA": "Saudi Arabia", "AE": "UAE", "IL": "Israel", "SE": "Sweden",
    "NO": "Norway", "FI": "Finland", "DK": "Denmark", "CH": "Switzerland",
    "AT": "Austria", "BE": "Belgium", "CZ": "Czech Republic", "RO": "Romania",
    "BG": "Bulgaria", "GR": "Greece", "PT": "Portugal", "HU": "Hungary",
    "IE": "Ireland", "LV": "Latvia", "LT": "Lithuania", "EE": "Estonia",
    "SK": "Slovakia", "SI": "Slovenia", "HR": "Croatia", "RS": "Serbia",
}


def country_name(code: str) -> str:
    return COUNTRY_NAMES.get(code, code)


def _first_value(text: str, pattern: str) -> str:
    rx = re.compile(pattern, re.IGNORECASE)
    for line in text.splitlines():
        if rx.match(line):
            return line.split(":", 1)[1].strip()
    return ""


def parse_whois(text: str) -> str:
    """``Country (CC) | org`` (netname when no org); empty without a country."""
    country_line = _first_value(text, r"^country:")
    code = country_line.split()[0] if country_line else ""
    if not code:
        return ""
    result = f"{country_name(code)} ({code})"
    org = _first_value(text, r"^(org-name|organization):")
    netname = _first_value(text, r"^netname:")
    if org:
        result += f" | {org}"
    elif netname:
        result += f" | {netname}"
    return result


def _last_token(text: str, marker: str) -> str:
    for line in text.splitlines():
        if marker in line:
            tokens = line.split()
            if tokens:
                return tokens[-1].rstrip(".")
    return ""


def parse_nslookup(text: str) -> str:
    return _last_token(text, "name =")


def parse_host(text: str) -> str:
    return _last_token(text, "domain name pointer")


class IpLocator:
    """Resolve and cache a location string per IP for one run."""

    def __init__(self, runner: Runner = run, which: Which = has,
                 timeout: float = LOOKUP_TIMEOUT) -> None:
        self._runner = runner
        self._which = which
        self._timeout = timeout
        self._cache: Dict[str, str] = {}

    def _lookup(self, tool: str, ip: str) -> Optional[str]:
        if not self._which(tool):
            return None
        return self._runner([tool, ip], timeout=self._timeout).stdout

    def locate(self, ip: str) -> str:
        if ip in self._cache:
            return self._cache[ip]

        result = ""
        whois = self._lookup("whois", ip)
        if whois:
            result = parse_whois(whois)
        if not result:
            out = self._lookup("nslookup", ip)
            hostname = parse_nslookup(out) if out else ""
            if hostname:
                result = f"Hostname: {hostname}"
        if not result:
            out = self._lookup("host", ip)
            hostname = parse_host(out) if out else ""
            if hostname:
                result = f"Hostname: {hostname}"

        result = result or UNKNOWN
        LOGGER.debug("[geoip] %s -> %s", ip, result)
        self._cache[ip] = result
        return result
