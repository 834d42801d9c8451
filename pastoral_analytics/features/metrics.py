from __future__ import annotations

from dataclasses import asdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence, TypeVar

import pandas as pd

from pastoral_analytics.config.constants import RECENT_ACTIVITY_SAMPLE
from pastoral_analytics.features.period import parse_date_parts
from pastoral_analytics.models.errors import InvalidDateFormat
from pastoral_analytics.models.schema import (
    ActivityRecord,
    CounselingSession,
    Demographics,
    GatheringRecord,
    SummaryMetrics,
)

DEMOGRAPHIC_FIELDS = ["men", "women", "adolescents", "children", "remote"]

T = TypeVar("T")


def round_half_up(value: float, digits: int = 0) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def pct(part: int, whole: int) -> float:
    if not whole:
        return 0.0
    return round_half_up(part / whole * 100, 1)


def demographic_totals(gatherings: Sequence[GatheringRecord]) -> Demographics:
    frame = pd.DataFrame([asdict(g.attendance) for g in gatherings], columns=DEMOGRAPHIC_FIELDS)
    sums = frame.sum()
    return Demographics(**{name: int(sums[name]) for name in DEMOGRAPHIC_FIELDS})


def aggregate(
    gatherings: Sequence[GatheringRecord],
    counseling: Sequence[CounselingSession],
    activities: Sequence[ActivityRecord],
    period: str = "",
) -> SummaryMetrics:
    """Reduce a period's records to the summary shown on the dashboard.

    ``activities`` must already be ordered most recent first; the sample of
    recent categories is taken from the head of the list as given.
    """
    gathering_count = len(gatherings)
    total_attendance = sum(g.total for g in gatherings)
    average = int(round_half_up(total_attendance / gathering_count)) if gathering_count else 0

    demographics = demographic_totals(gatherings)
    # Remote attendance is a parallel channel, not a demographic segment.
    base = demographics.in_person()

    resolved = sum(1 for c in counseling if c.resolved)

    return SummaryMetrics(
        period=period,
        gathering_count=gathering_count,
        total_attendance=total_attendance,
        average_attendance=average,
        demographics=demographics,
        men_pct=pct(demographics.men, base),
        women_pct=pct(demographics.women, base),
        youth_pct=pct(demographics.adolescents, base),
        counseling_total=len(counseling),
        counseling_resolved=resolved,
        counseling_resolved_pct=pct(resolved, len(counseling)),
        activity_count=len(activities),
        recent_activity_categories=tuple(a.category for a in activities[:RECENT_ACTIVITY_SAMPLE]),
    )


def sort_most_recent_first(records: Sequence[T]) -> list[T]:
    dated: list[tuple[tuple[int, int, int], T]] = []
    undated: list[T] = []
    for record in records:
        try:
            dated.append((parse_date_parts(record.date), record))
        except InvalidDateFormat:
            undated.append(record)
    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [record for _, record in dated] + undated
