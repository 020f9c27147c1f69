"""Cost comparison dashboard generator.

Reads the per-service CSV written by ``aws_cost_analysis.py --csv`` and
produces a single-file interactive HTML dashboard with Plotly charts.
Optionally exports each figure to PDF if Kaleido is installed.

Columns expected (best-effort if missing):
- Service, Previous_Cost_USD, Current_Cost_USD, Projected_Cost_USD, Delta_USD
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple
import argparse

import pandas as pd
import plotly.graph_objects as go


# ------------------------------
# Data & config containers
# ------------------------------

@dataclass
class DashboardConfig:
    """Simple configuration for the dashboard build."""

    top_n: int = 15
    title: str = "AWS Cost Comparison"
    output_html: Path = Path("cost_dashboard.html")
    export_pdf: bool = False


# ------------------------------
# Data loading & preparation
# ------------------------------

COST_COLUMNS = (
    "Previous_Cost_USD",
    "Current_Cost_USD",
    "Projected_Cost_USD",
    "Delta_USD",
)


def load_csv(csv_path: Path) -> pd.DataFrame:
    """Load the analyzer CSV; missing cost columns default to zero."""
    try:
        frame = pd.read_csv(csv_path)
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"CSV not found: {csv_path}") from exc
    except pd.errors.EmptyDataError as exc:
        raise ValueError(f"CSV is empty or unreadable: {csv_path}") from exc

    if "Service" not in frame.columns:
        frame["Service"] = "Unknown"
    derive_delta = "Delta_USD" not in frame.columns
    for col in COST_COLUMNS:
        if col not in frame.columns:
            frame[col] = 0.0
        frame[col] = pd.to_numeric(frame[col], errors="coerce").fillna(0.0)

    if derive_delta:
        frame["Delta_USD"] = frame["Projected_Cost_USD"] - frame["Previous_Cost_USD"]
    return frame


# ------------------------------
# Chart helpers
# ------------------------------


def _new_layout(title: str, x_title: str, y_title: str) -> dict:
    """Common layout dict for simple charts."""
    return {
        "title": title,
        "xaxis": {"title": x_title, "tickangle": -30},
        "yaxis": {"title": y_title},
        "margin": {"l": 60, "r": 40, "t": 50, "b": 120},
        "legend": {"orientation": "h"},
    }


def build_previous_vs_projected(df: pd.DataFrame, top_n: int) -> go.Figure:
    """Grouped bars: previous period vs projected month for the top-N services."""
    ranked = df.assign(
        _rank=df[["Previous_Cost_USD", "Projected_Cost_USD"]].max(axis=1)
    ).sort_values("_rank", ascending=False).head(top_n)
    services = ranked["Service"].astype(str).tolist()

    fig = go.Figure(
        data=[
            go.Bar(
                name="Previous",
                x=services,
                y=ranked["Previous_Cost_USD"].tolist(),
                hovertemplate="%{x}<br>Previous: $%{y:.2f}<extra></extra>",
            ),
            go.Bar(
                name="Projected",
                x=services,
                y=ranked["Projected_Cost_USD"].tolist(),
                hovertemplate="%{x}<br>Projected: $%{y:.2f}<extra></extra>",
            ),
        ]
    )
    fig.update_layout(
        barmode="group",
        **_new_layout("Previous vs Projected Cost by Service", "Service", "USD"),
    )
    return fig


def build_top_movers(df: pd.DataFrame, top_n: int) -> go.Figure:
    """Bar chart: services with the largest absolute projected change."""
    subset = (
        df.assign(_abs=df["Delta_USD"].abs())
        .sort_values("_abs", ascending=False)
        .head(top_n)
    )
    deltas = subset["Delta_USD"].tolist()
    fig = go.Figure(
        data=[
            go.Bar(
                x=subset["Service"].astype(str).tolist(),
                y=deltas,
                marker={"color": ["#d62728" if d > 0 else "#2ca02c" for d in deltas]},
                hovertemplate="%{x}<br>Change: $%{y:+.2f}<extra></extra>",
            )
        ]
    )
    fig.update_layout(
        **_new_layout("Top Movers (Projected - Previous)", "Service", "USD")
    )
    return fig


# ------------------------------
# HTML & (optional) PDF export
# ------------------------------


def compose_html(figures: Iterable[go.Figure], title: str) -> str:
    """Compose a single-file HTML with multiple figures stacked."""
    parts = [
        "<html><head><meta charset='utf-8'><title>" + title + "</title></head><body>",
        f"<h1 style='font-family:sans-serif'>{title}</h1>",
    ]
    for fig in figures:
        parts.append(fig.to_html(full_html=False, include_plotlyjs="cdn"))
    parts.append("</body></html>")
    return "\n".join(parts)


def export_pdf(figures: Iterable[go.Figure], base_path: Path) -> List[Path]:
    """Export each figure to a separate PDF named like `<base>_N.pdf`.

    Requires `kaleido` to be installed.
    """
    written: List[Path] = []
    for idx, fig in enumerate(figures, start=1):
        out_path = base_path.with_suffix("")
        out_file = out_path.parent / f"{out_path.name}_{idx}.pdf"
        fig.write_image(str(out_file))
        written.append(out_file)
    return written


# ------------------------------
# Orchestration
# ------------------------------


def build_dashboard(frame: pd.DataFrame, cfg: DashboardConfig) -> Tuple[str, List[go.Figure]]:
    """Build dashboard HTML and return (html_str, figures_list)."""
    figures = [
        build_previous_vs_projected(frame, cfg.top_n),
        build_top_movers(frame, cfg.top_n),
    ]
    html = compose_html(figures, cfg.title)
    return html, figures


def parse_args(argv: Optional[Iterable[str]] = None) -> Tuple[Path, DashboardConfig]:
    """Parse CLI args and return (csv_path, DashboardConfig)."""
    parser = argparse.ArgumentParser(
        description=(
            "Generate a self-contained HTML cost dashboard from the aws_cost_analysis CSV. "
            "Exports optional PDFs if --pdf is passed and kaleido is installed."
        )
    )
    parser.add_argument("csv", type=Path, help="Path to the CSV written by aws_cost_analysis.py --csv")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("cost_dashboard.html"),
        help="Output HTML file path (default: cost_dashboard.html)",
    )
    parser.add_argument("--top", type=int, default=15, help="Number of services per chart (default: 15)")
    parser.add_argument(
        "--title",
        type=str,
        default="AWS Cost Comparison",
        help="Dashboard title (default: AWS Cost Comparison)",
    )
    parser.add_argument(
        "--pdf",
        action="store_true",
        help="Also export figures to individual PDF files (requires kaleido).",
    )

    args = parser.parse_args(list(argv) if argv is not None else None)
    cfg = DashboardConfig(
        top_n=args.top,
        title=args.title,
        output_html=args.output,
        export_pdf=args.pdf,
    )
    return args.csv, cfg


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Entrypoint for CLI usage."""
    csv_path, cfg = parse_args(argv)
    frame = load_csv(csv_path)

    html, figures = build_dashboard(frame, cfg)
    cfg.output_html.write_text(html, encoding="utf-8")

    if cfg.export_pdf:
        try:
            export_pdf(figures, cfg.output_html)
        except (RuntimeError, ValueError) as err:
            # kaleido missing or unusable
            print(str(err))  # noqa: T201

    print(f"Wrote {cfg.output_html}")  # noqa: T201
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
