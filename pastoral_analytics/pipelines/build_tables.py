from __future__ import annotations

import logging
from typing import Optional

import pandas as pd

from pastoral_analytics.features.metrics import aggregate, sort_most_recent_first
from pastoral_analytics.features.narrative import NarrativeAnalyzer
from pastoral_analytics.features.period import filter_view
from pastoral_analytics.io.writers import (
    activities_frame,
    counseling_frame,
    ensure_dirs,
    gatherings_frame,
    period_suffix,
    save_table,
    summary_frame,
)
from pastoral_analytics.models.schema import Context

logger = logging.getLogger(__name__)


def build_tables(ctx: Context, write: bool = True) -> None:
    settings = ctx.settings
    selector = ctx.selector

    filtered = filter_view(ctx.view, selector)
    ctx.filtered = filtered
    if filtered.unfilterable:
        logger.warning(
            "%d record(s) have malformed dates and were left out of %s",
            len(filtered.unfilterable),
            selector.label,
        )

    activities = sort_most_recent_first(filtered.activities)
    ctx.metrics = aggregate(filtered.gatherings, filtered.counseling, activities, period=selector.label)

    gatherings = gatherings_frame(filtered.gatherings)
    ctx.add_result("gatherings", gatherings)
    ctx.add_result("counseling", counseling_frame(filtered.counseling))
    ctx.add_result("activities", activities_frame(filtered.activities))
    ctx.add_result("summary_metrics", summary_frame(ctx.metrics))
    ctx.add_result(
        "data_quality",
        pd.DataFrame(
            [{"collection": w.collection, "id": w.record_id, "date": w.date, "message": w.message} for w in filtered.unfilterable],
            columns=["collection", "id", "date", "message"],
        ),
    )

    if not write:
        return

    ensure_dirs(settings.table_dir, settings.fig_dir)
    suffix = period_suffix(selector)
    for name, df in ctx.results.items():
        if name == "data_quality" and df.empty:
            continue
        save_table(df, settings.table_dir / f"{name}_{suffix}.csv")
    logger.info("Wrote %d period tables to %s", len(ctx.results), settings.table_dir)


async def build_narrative(ctx: Context, analyzer: Optional[NarrativeAnalyzer] = None) -> None:
    if ctx.metrics is None:
        build_tables(ctx, write=False)
    analyzer = analyzer or NarrativeAnalyzer.from_settings(ctx.settings)
    ctx.reset_narrative()
    ctx.narrative = await analyzer.analyze(ctx.metrics, ctx.selector.label)
    logger.info("Narrative for %s: %s", ctx.selector.label, ctx.narrative.status.value)
