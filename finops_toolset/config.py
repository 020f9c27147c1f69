# finops_toolset/config.py
from __future__ import annotations
import os
from typing import Iterable
from botocore.config import Config #type: ignore

# ---- Env helpers
def _env_str(key: str, default: str) -> str:
    v = os.getenv(key)
    return v if v is not None else default

def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except Exception:
        return default

def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except Exception:
        return default

def _env_bool(key: str, default: bool) -> bool:
    v = os.getenv(key)
    return default if v is None else v.strip().lower() in {"1", "true", "yes", "y"}

def _env_list(key: str, default: Iterable[str]) -> list[str]:
    v = os.getenv(key)
    return [s.strip() for s in v.split(",")] if v else list(default)

# ---- SDK config
# max_attempts counts the initial call: 1 means a failing call is never retried.
SDK_CONFIG = Config(
    retries={"max_attempts": 1, "mode": "standard"},
    connect_timeout=5, read_timeout=60,
    user_agent_extra="ops-toolset/1.0",
)

# ------------------------------------------------------------
# CONSTANTS
# You can override any of these via env vars (documented inline).
# ------------------------------------------------------------

# AWS session
REGION = _env_str("AWS_REGION", "eu-north-1")
PROFILE = _env_str("AWS_PROFILE", "default")
CE_REGION = _env_str("OPS_CE_REGION", "us-east-1")  # Cost Explorer lives in us-east-1

# Outputs / logging
REPORT_DIR = _env_str("OPS_REPORT_DIR", ".")
REPORT_PREFIX = _env_str("OPS_REPORT_PREFIX", "aws-cost-report")
LOG_FILE = _env_str("OPS_LOG_FILE", "ops_toolset.log")
LOG_LEVEL = _env_str("OPS_LOG_LEVEL", "INFO")
COLOR = _env_bool("OPS_COLOR", True)

# --- Cost analysis ---
PROJECTION_DAYS = 30                 # month normalisation, independent of the period length
MOVER_THRESHOLD_USD = _env_float("OPS_MOVER_THRESHOLD_USD", 0.10)
TOP_SERVICES = _env_int("OPS_TOP_SERVICES", 15)
MIN_LISTED_COST_USD = 0.01
HIGH_SHARE_RATIO = 0.20              # service > 20% of total
HIGH_SHARE_TOP_N = 5
SPIKE_RATIO = 0.50                   # > 50% increase vs previous
SPIKE_MIN_USD = 1.0
SPIKE_TOP_N = 3
MAX_RECOMMENDATIONS = 10

# Service names that always get a generic review hint
REVIEW_HINTS = {
    "Amazon Elastic Compute Cloud - Compute": "Review EC2 instances for right-sizing opportunities",
    "Amazon Relational Database Service": "Check RDS instances for unused capacity",
    "Amazon Elastic Load Balancing": "Review load balancers - remove unused ones",
}

# --- Security audit ---
AUTH_LOG_SINCE = _env_str("OPS_AUTH_LOG_SINCE", "30 days ago")
AUTH_LOG_GLOB = _env_str("OPS_AUTH_LOG_GLOB", "/var/log/auth.log*")
RECENT_LOG_LINES = _env_int("OPS_RECENT_LOG_LINES", 2000)
TOP_USERNAMES = 10
TOP_ATTACKING_IPS = 5
LOOKUP_TIMEOUT = _env_float("OPS_LOOKUP_TIMEOUT", 1.0)
PUBLIC_IP_URL = _env_str("OPS_PUBLIC_IP_URL", "http://checkip.amazonaws.com")
PUBLIC_IP_TIMEOUT = _env_float("OPS_PUBLIC_IP_TIMEOUT", 2.0)
PASSWD_FILE = _env_str("OPS_PASSWD_FILE", "/etc/passwd")
SUDOERS_PATHS = _env_list("OPS_SUDOERS_PATHS", ["/etc/sudoers", "/etc/sudoers.d"])
CRON_GLOB = "/etc/cron.*/*"
AUDIT_SCRIPT_PATH = _env_str("OPS_AUDIT_SCRIPT_PATH", "/path/to/server_security_inspector.py")
