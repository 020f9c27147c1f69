"""Cost aggregation, projection and heuristics for the cost analyzer.

Cost Explorer responses are flattened into a pandas frame (one row per
time bucket and service) and summed per service. The current period is
normalised to a 30 day month before it is compared with the previous period.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

import pandas as pd

from finops_toolset.config import (
    PROJECTION_DAYS,
    MOVER_THRESHOLD_USD,
    HIGH_SHARE_RATIO, HIGH_SHARE_TOP_N,
    SPIKE_RATIO, SPIKE_MIN_USD, SPIKE_TOP_N,
    MAX_RECOMMENDATIONS,
    REVIEW_HINTS,
)
from finops_toolset.errors import CostDataError

LOGGER = logging.getLogger(__name__)

METRIC = "UnblendedCost"
COST_COLUMNS = ["Start", "Service", "Amount"]
CSV_COLUMNS = [
    "Service",
    "Previous_Cost_USD",
    "Current_Cost_USD",
    "Projected_Cost_USD",
    "Delta_USD",
]


# ------------------------------
# Aggregation
# ------------------------------

def cost_frame(response: Mapping[str, Any]) -> pd.DataFrame:
    """Flatten ``ResultsByTime[].Groups[]`` into Start/Service/Amount rows."""
    rows: List[Tuple[str, str, Any]] = []
    for bucket in response.get("ResultsByTime", []) or []:
        start = (bucket.get("TimePeriod") or {}).get("Start", "")
        for group in bucket.get("Groups", []) or []:
            keys = group.get("Keys") or [""]
            amount = ((group.get("Metrics") or {}).get(METRIC) or {}).get("Amount")
            rows.append((start, keys[0], amount))

    frame = pd.DataFrame(rows, columns=COST_COLUMNS)
    amounts = pd.to_numeric(frame["Amount"], errors="coerce")
    if amounts.isna().any():
        bad = frame.loc[amounts.isna(), "Service"].tolist()
        raise CostDataError(f"Non-numeric {METRIC} amount for: {', '.join(map(str, bad))}")
    frame["Amount"] = amounts.astype(float)
    return frame


def service_totals(frame: pd.DataFrame) -> Dict[str, float]:
    """Sum every bucket per service, keeping first-seen service order."""
    if frame.empty:
        return {}
    grouped = frame.groupby("Service", sort=False)["Amount"].sum()
    return {str(service): float(cost) for service, cost in grouped.items()}


@dataclass
class CostSummary:
    """Per-service totals for one period."""
    services: Dict[str, float] = field(default_factory=dict)

    @property
    def total(self) -> float:
        return float(sum(self.services.values()))

    def sorted_services(self) -> List[Tuple[str, float]]:
        return sorted(self.services.items(), key=lambda item: item[1], reverse=True)

    def share_pct(self, cost: float) -> float:
        return (cost / self.total) * 100 if self.total > 0 else 0.0

    @classmethod
    def from_response(cls, response: Mapping[str, Any]) -> "CostSummary":
        return cls(services=service_totals(cost_frame(response)))


# ------------------------------
# Comparison
# ------------------------------

def project(cost: float, days: int) -> float:
    """Normalise ``cost`` accrued over ``days`` to a 30 day month."""
    return (cost / days) * PROJECTION_DAYS if days > 0 else 0.0


@dataclass(frozen=True)
class ServiceChange:
    service: str
    previous: float
    projected: float
    delta: float

    @property
    def arrow(self) -> str:
        return "↑" if self.delta > 0 else "↓"


def service_movers(
    current: CostSummary,
    previous: CostSummary,
    days: int,
    threshold: float = MOVER_THRESHOLD_USD,
) -> List[ServiceChange]:
    """Services whose projected cost moved more than ``threshold`` USD, largest first."""
    names = list(current.services)
    names += [name for name in previous.services if name not in current.services]

    changes: List[ServiceChange] = []
    for service in names:
        prev_cost = previous.services.get(service, 0.0)
        projected = project(current.services.get(service, 0.0), days)
        delta = projected - prev_cost
        if abs(delta) > threshold:
            changes.append(ServiceChange(service, prev_cost, projected, delta))

    changes.sort(key=lambda change: abs(change.delta), reverse=True)
    return changes


def build_recommendations(current: CostSummary, movers: Sequence[ServiceChange]) -> List[str]:
    """Heuristic hints in a fixed order, capped at ``MAX_RECOMMENDATIONS``."""
    recs: List[str] = []
    total = current.total

    for service, cost in current.sorted_services()[:HIGH_SHARE_TOP_N]:
        if total > 0 and cost > total * HIGH_SHARE_RATIO:
            recs.append(
                f"{service} accounts for {(cost / total) * 100:.1f}% of costs - review for optimization"
            )

    for change in movers[:SPIKE_TOP_N]:
        if change.previous > 0 and change.delta > change.previous * SPIKE_RATIO and change.delta > SPIKE_MIN_USD:
            recs.append(
                f"{change.service} increased by {(change.delta / change.previous) * 100:.0f}% - investigate cause"
            )
        elif change.previous == 0 and change.delta > SPIKE_MIN_USD:
            recs.append(
                f"{change.service} is a new service costing ${change.delta:.2f}/month - verify if needed"
            )

    for service, hint in REVIEW_HINTS.items():
        if service in current.services:
            recs.append(hint)

    return recs[:MAX_RECOMMENDATIONS]


@dataclass
class CostComparison:
    """Current period projected to a month and compared with the previous period."""
    current: CostSummary
    previous: CostSummary
    days: int
    movers: List[ServiceChange] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    @property
    def daily_avg(self) -> float:
        return self.current.total / self.days if self.days > 0 else 0.0

    @property
    def projected(self) -> float:
        return self.daily_avg * PROJECTION_DAYS

    @property
    def change(self) -> float:
        return self.projected - self.previous.total

    @property
    def change_pct(self) -> float:
        prev = self.previous.total
        return (self.change / prev) * 100 if prev > 0 else 0.0


def compare(current: CostSummary, previous: CostSummary, days: int) -> CostComparison:
    movers = service_movers(current, previous, days)
    comparison = CostComparison(
        current=current,
        previous=previous,
        days=days,
        movers=movers,
        recommendations=build_recommendations(current, movers),
    )
    LOGGER.info(
        "[costs] current=%.2f previous=%.2f projected=%.2f movers=%d recs=%d",
        current.total, previous.total, comparison.projected,
        len(movers), len(comparison.recommendations),
    )
    return comparison


# ------------------------------
# CSV export
# ------------------------------

def comparison_frame(comparison: CostComparison) -> pd.DataFrame:
    """One row per service seen in either period, most expensive current first."""
    current = pd.Series(comparison.current.services, dtype=float)
    previous = pd.Series(comparison.previous.services, dtype=float)
    frame = pd.concat(
        {"Previous_Cost_USD": previous, "Current_Cost_USD": current}, axis=1
    ).fillna(0.0)
    frame["Projected_Cost_USD"] = frame["Current_Cost_USD"].map(
        lambda cost: project(cost, comparison.days)
    )
    frame["Delta_USD"] = frame["Projected_Cost_USD"] - frame["Previous_Cost_USD"]
    frame = frame.rename_axis("Service").reset_index()
    frame = frame.sort_values("Current_Cost_USD", ascending=False, kind="stable")
    return frame[CSV_COLUMNS].reset_index(drop=True)


def write_csv(comparison: CostComparison, path: Union[str, Path]) -> Path:
    out = Path(path)
    if out.parent and not out.parent.exists():
        out.parent.mkdir(parents=True, exist_ok=True)
    comparison_frame(comparison).to_csv(out, index=False, float_format="%.2f")
    LOGGER.info("[costs] wrote %s", out)
    return out
