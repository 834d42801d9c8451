from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from pastoral_analytics.io.writers import fmt_date, period_suffix, save_fig
from pastoral_analytics.models.schema import Context
from pastoral_analytics.visuals.style import PALETTE, SEGMENT_COLORS, add_headroom, annotate_point, custom_theme

logger = logging.getLogger(__name__)

SEGMENT_LABELS = ["Homens", "Mulheres", "Adolescentes", "Crianças", "Online"]


def build_figures(ctx: Context) -> list[Path]:
    fig_dir = ctx.settings.fig_dir
    fig_dir.mkdir(parents=True, exist_ok=True)
    with plt.style.context(custom_theme()):
        written = _build_figures(ctx, fig_dir)
    logger.info("Wrote %d figure(s) to %s", len(written), fig_dir)
    return written


def _build_figures(ctx: Context, fig_dir: Path) -> list[Path]:
    written: list[Path] = []
    df = ctx.results.get("gatherings")
    if df is None or df.empty:
        return written

    selector = ctx.selector
    suffix = period_suffix(selector)

    # 1) Attendance per gathering across the period
    plot_df = df.sort_values("date", kind="stable").reset_index(drop=True)
    x = np.arange(len(plot_df))
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(x, plot_df["total"], marker="o", color=PALETTE["primary"], label="Total")
    ax.fill_between(x, plot_df["total"], color=PALETTE["highlight"], alpha=0.4)
    peak = int(plot_df["total"].idxmax())
    annotate_point(ax, "Pico", (x[peak], plot_df["total"].iloc[peak]))
    ax.set_xticks(x)
    ax.set_xticklabels([fmt_date(d)[:5] for d in plot_df["date"]], rotation=30, ha="right")
    ax.set_title(f"Frequência por Culto - {selector.label}")
    ax.set_xlabel("Data")
    ax.set_ylabel("Pessoas")
    add_headroom(ax)
    path = fig_dir / f"attendance_trend_{suffix}.png"
    save_fig(fig, path)
    written.append(path)

    # 2) Demographic split of the period
    totals = df[["men", "women", "adolescents", "children", "remote"]].sum()
    fig, ax = plt.subplots(figsize=(6, 4))
    positions = np.arange(len(SEGMENT_LABELS))
    bars = ax.bar(positions, totals.values, color=SEGMENT_COLORS)
    for bar, value in zip(bars, totals.values):
        ax.text(bar.get_x() + bar.get_width() / 2, bar.get_height(), f"{int(value)}", ha="center", va="bottom", fontsize=9)
    ax.set_xticks(positions)
    ax.set_xticklabels(SEGMENT_LABELS)
    ax.set_title("Distribuição Demográfica")
    ax.set_ylabel("Pessoas")
    add_headroom(ax)
    path = fig_dir / f"demographics_{suffix}.png"
    save_fig(fig, path)
    written.append(path)

    return written
