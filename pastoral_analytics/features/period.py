from __future__ import annotations

import logging
import re
from datetime import date
from typing import Iterable, TypeVar

from pastoral_analytics.models.errors import InvalidDateFormat
from pastoral_analytics.models.schema import (
    AggregateView,
    DataQualityWarning,
    FilteredView,
    Granularity,
    PeriodSelector,
)

logger = logging.getLogger(__name__)

DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[T ].*)?$")

T = TypeVar("T")


def parse_date_parts(value: object) -> tuple[int, int, int]:
    """Split a canonical ``YYYY-MM-DD`` string into calendar fields.

    The fields are read straight from the text so that no timezone
    conversion can move a record into the neighbouring day or month.
    """
    if not isinstance(value, str):
        raise InvalidDateFormat(value)
    m = DATE_RE.match(value.strip())
    if not m:
        raise InvalidDateFormat(value)
    year, month, day = (int(part) for part in m.groups())
    try:
        date(year, month, day)
    except ValueError:
        raise InvalidDateFormat(value) from None
    return year, month, day


def includes(value: str, selector: PeriodSelector) -> bool:
    year, month, _ = parse_date_parts(value)
    if selector.granularity is Granularity.YEAR:
        return year == selector.year
    return year == selector.year and month == selector.month


def _filter_records(
    records: Iterable[T],
    selector: PeriodSelector,
    collection: str,
    warnings: list[DataQualityWarning],
) -> list[T]:
    kept: list[T] = []
    for record in records:
        try:
            if includes(record.date, selector):
                kept.append(record)
        except InvalidDateFormat as exc:
            logger.warning("Skipping %s record %s from period filter: %s", collection, record.id, exc)
            warnings.append(
                DataQualityWarning(
                    collection=collection,
                    record_id=record.id,
                    date=record.date,
                    message=str(exc),
                )
            )
    return kept


def filter_view(view: AggregateView, selector: PeriodSelector) -> FilteredView:
    warnings: list[DataQualityWarning] = []
    gatherings = _filter_records(view.gatherings, selector, "gatherings", warnings)
    counseling = _filter_records(view.counseling, selector, "counseling", warnings)
    activities = _filter_records(view.activities, selector, "activities", warnings)

    # Members are a standing roster, not period events.
    return FilteredView(
        gatherings=gatherings,
        members=list(view.members),
        counseling=counseling,
        activities=activities,
        unfilterable=warnings,
    )
