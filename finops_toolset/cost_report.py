"""Console rendering of a ``CostComparison``."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from finops_toolset.config import TOP_SERVICES, MIN_LISTED_COST_USD
from finops_toolset.console import ReportConsole
from finops_toolset.costs import CostComparison, CostSummary
from finops_toolset.periods import DatePeriod

WIDTH = 80


def _section(console: ReportConsole, title: str) -> None:
    console.rule("=", WIDTH)
    console.line(title)
    console.rule("-", WIDTH)


def _top_services(console: ReportConsole, summary: CostSummary) -> None:
    ranked = summary.sorted_services()
    if not ranked:
        console.line("  No significant costs recorded")
        return
    console.line("Top Services:")
    for service, cost in ranked[:TOP_SERVICES]:
        if cost > MIN_LISTED_COST_USD:
            console.line(f"  {service:50s} ${cost:8.2f} ({summary.share_pct(cost):5.1f}%)")


def render_report(
    console: ReportConsole,
    comparison: CostComparison,
    current: DatePeriod,
    previous: DatePeriod,
    generated_at: Optional[datetime] = None,
) -> None:
    """Print the full cost analysis report."""
    generated_at = generated_at or datetime.now(timezone.utc)

    console.rule("=", WIDTH)
    console.line("AWS COST ANALYSIS REPORT")
    console.rule("=", WIDTH)
    console.blank()

    # current period
    console.line(f"📊 {current.label} (Month-to-Date: {comparison.days} days)")
    console.rule("-", WIDTH)
    console.line(f"Current Total:       ${comparison.current.total:>10.2f}")
    console.line(f"Daily Average:       ${comparison.daily_avg:>10.2f}")
    console.line(f"Projected Month:     ${comparison.projected:>10.2f}")
    console.blank()
    _top_services(console, comparison.current)
    console.blank()

    # previous period
    _section(console, f"📊 {previous.label} (Full Month)")
    console.line(f"Total:               ${comparison.previous.total:>10.2f}")
    console.blank()
    _top_services(console, comparison.previous)
    console.blank()

    _section(console, "📈 COMPARISON & INSIGHTS")
    console.line(f"Previous Month:      ${comparison.previous.total:>10.2f}")
    console.line(f"Current Projected:   ${comparison.projected:>10.2f}")
    console.line(
        f"Expected Change:     ${comparison.change:>+10.2f} ({comparison.change_pct:>+6.1f}%)",
        style="red" if comparison.change > 0 else "green",
    )
    console.blank()

    console.line("Service Changes (Top movers):")
    if comparison.movers:
        for mover in comparison.movers[:TOP_SERVICES]:
            console.line(
                f"  {mover.arrow} {mover.service:48s} ${mover.previous:7.2f} → "
                f"${mover.projected:7.2f} ({mover.delta:+7.2f})"
            )
    else:
        console.line("  No significant changes detected")
    console.blank()

    _section(console, "💡 COST OPTIMIZATION RECOMMENDATIONS")
    if comparison.recommendations:
        for rec in comparison.recommendations:
            console.line(f"• {rec}")
    else:
        console.line("• No immediate optimization opportunities detected")
        console.line("• Continue monitoring for cost trends")
    console.blank()

    console.rule("=", WIDTH)
    console.line(f"Report Generated: {generated_at:%Y-%m-%d %H:%M:%S} UTC")
    console.rule("=", WIDTH)
