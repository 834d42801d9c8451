from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd

from pastoral_analytics.config.constants import MONTHS, REPORT_TYPE_LABELS
from pastoral_analytics.config.settings import Settings
from pastoral_analytics.models.errors import RecordIntegrityError


class GatheringCategory(Enum):
    MIDWEEK_SERVICE = "Culto de Quarta"
    SUNDAY_SERVICE = "Culto de Domingo"
    VIGIL = "Vigília"
    PRAYER_JOURNEY = "Jornada de Oração"


class ActivityCategory(Enum):
    PASTORAL_VISIT = "Visita Pastoral"
    HOME_DEDICATION = "Consagração de Casa"
    BUSINESS_DEDICATION = "Consagração de Negócio"
    INTERNAL_ACTIVITY = "Atividade Interna"


class Granularity(Enum):
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class Demographics:
    men: int = 0
    women: int = 0
    adolescents: int = 0
    children: int = 0
    remote: int = 0

    def __post_init__(self) -> None:
        for name in ("men", "women", "adolescents", "children", "remote"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise RecordIntegrityError(f"Demographic count {name!r} must be a non-negative integer, got {value!r}")

    def total(self) -> int:
        return self.men + self.women + self.adolescents + self.children + self.remote

    def in_person(self) -> int:
        return self.men + self.women + self.adolescents + self.children

    def __add__(self, other: "Demographics") -> "Demographics":
        return Demographics(
            men=self.men + other.men,
            women=self.women + other.women,
            adolescents=self.adolescents + other.adolescents,
            children=self.children + other.children,
            remote=self.remote + other.remote,
        )


@dataclass(frozen=True)
class GatheringRecord:
    id: str
    date: str
    category: GatheringCategory
    attendance: Demographics
    total: int
    note: Optional[str] = None

    def __post_init__(self) -> None:
        if self.total != self.attendance.total():
            raise RecordIntegrityError(
                f"Gathering {self.id}: total {self.total} does not match attendance sum {self.attendance.total()}"
            )

    @classmethod
    def create(
        cls,
        id: str,
        date: str,
        category: GatheringCategory,
        attendance: Demographics,
        note: Optional[str] = None,
    ) -> "GatheringRecord":
        return cls(id=id, date=date, category=category, attendance=attendance, total=attendance.total(), note=note)


@dataclass(frozen=True)
class Member:
    id: str
    name: str
    phone: str
    since: str


@dataclass(frozen=True)
class MemberRef:
    """Copy of a member's identity taken when a session is recorded.

    It is never re-synchronised with the roster: renaming a member later
    leaves past sessions showing the name and phone they were booked with.
    """

    id: str
    name: str
    phone: str

    @classmethod
    def snapshot(cls, member: Member) -> "MemberRef":
        return cls(id=member.id, name=member.name, phone=member.phone)


@dataclass(frozen=True)
class CounselingSession:
    id: str
    date: str
    member: MemberRef
    notes: str = ""
    resolved: bool = False

    @classmethod
    def for_member(cls, id: str, date: str, member: Member, notes: str = "", resolved: bool = False) -> "CounselingSession":
        return cls(id=id, date=date, member=MemberRef.snapshot(member), notes=notes, resolved=resolved)

    def with_resolved(self, resolved: bool) -> "CounselingSession":
        return replace(self, resolved=resolved)


@dataclass(frozen=True)
class ActivityRecord:
    id: str
    date: str
    category: ActivityCategory
    description: str
    location: Optional[str] = None


@dataclass(frozen=True)
class AggregateView:
    gatherings: List[GatheringRecord] = field(default_factory=list)
    members: List[Member] = field(default_factory=list)
    counseling: List[CounselingSession] = field(default_factory=list)
    activities: List[ActivityRecord] = field(default_factory=list)


@dataclass(frozen=True)
class DataQualityWarning:
    collection: str
    record_id: str
    date: object
    message: str


@dataclass(frozen=True)
class FilteredView:
    gatherings: List[GatheringRecord]
    members: List[Member]
    counseling: List[CounselingSession]
    activities: List[ActivityRecord]
    unfilterable: List[DataQualityWarning] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.gatherings or self.counseling or self.activities)


@dataclass(frozen=True)
class PeriodSelector:
    granularity: Granularity
    year: int
    month: Optional[int] = None  # 1-based; optional for annual selectors

    def __post_init__(self) -> None:
        if self.month is not None and not 1 <= self.month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {self.month}")
        if self.granularity is Granularity.MONTH and self.month is None:
            raise ValueError("A monthly period needs a month")

    @classmethod
    def monthly(cls, year: int, month: int) -> "PeriodSelector":
        return cls(Granularity.MONTH, year, month)

    @classmethod
    def annual(cls, year: int, month: Optional[int] = None) -> "PeriodSelector":
        return cls(Granularity.YEAR, year, month)

    @property
    def label(self) -> str:
        if self.granularity is Granularity.MONTH:
            return f"{MONTHS[self.month - 1]} de {self.year}"
        return f"Ano de {self.year}"

    @property
    def report_type(self) -> str:
        return REPORT_TYPE_LABELS[self.granularity.value]


@dataclass(frozen=True)
class SummaryMetrics:
    period: str
    gathering_count: int
    total_attendance: int
    average_attendance: int
    demographics: Demographics
    men_pct: float
    women_pct: float
    youth_pct: float
    counseling_total: int
    counseling_resolved: int
    counseling_resolved_pct: float
    activity_count: int
    recent_activity_categories: tuple = ()

    @property
    def is_empty(self) -> bool:
        return self.gathering_count == 0 and self.counseling_total == 0 and self.activity_count == 0

    def as_payload(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "totalServices": self.gathering_count,
            "totalAttendance": self.total_attendance,
            "avgAttendance": self.average_attendance,
            "demographicsRaw": {
                "men": self.demographics.men,
                "women": self.demographics.women,
                "adolescents": self.demographics.adolescents,
                "children": self.demographics.children,
                "online": self.demographics.remote,
            },
            "demographicsPercent": {
                "men": self.men_pct,
                "women": self.women_pct,
                "youth": self.youth_pct,
            },
            "counseling": {
                "total": self.counseling_total,
                "resolved": self.counseling_resolved,
                "resolvedRate": f"{self.counseling_resolved_pct}%",
            },
            "activitiesCount": self.activity_count,
            "recentActivityTypes": ", ".join(c.value for c in self.recent_activity_categories),
        }


class NarrativeStatus(Enum):
    OK = "ok"
    MISSING_CREDENTIAL = "missing_credential"
    INSUFFICIENT_DATA = "insufficient_data"
    SERVICE_FAILURE = "service_failure"


@dataclass(frozen=True)
class NarrativeResult:
    presentation_script: str
    executive_summary: str
    trends_and_anomalies: str
    strategic_recommendations: str
    raw_text: str = ""
    status: NarrativeStatus = NarrativeStatus.OK

    def sections(self) -> Dict[str, str]:
        return {
            "presentation_script": self.presentation_script,
            "executive_summary": self.executive_summary,
            "trends_and_anomalies": self.trends_and_anomalies,
            "strategic_recommendations": self.strategic_recommendations,
        }


class PageKind(Enum):
    COVER = "cover"
    NARRATIVE = "narrative"
    DASHBOARD = "dashboard"
    DETAIL = "detail"


@dataclass
class Block:
    kind: str
    y: float
    data: object


@dataclass
class Page:
    number: int
    kind: PageKind
    title: str
    blocks: List[Block] = field(default_factory=list)

    def blocks_of(self, kind: str) -> List[Block]:
        return [b for b in self.blocks if b.kind == kind]


@dataclass
class ReportDocument:
    period_label: str
    report_type: str
    pages: List[Page] = field(default_factory=list)

    def kinds(self) -> List[PageKind]:
        return [p.kind for p in self.pages]


@dataclass
class Context:
    settings: Settings
    selector: PeriodSelector
    view: AggregateView
    filtered: Optional[FilteredView] = None
    metrics: Optional[SummaryMetrics] = None
    narrative: Optional[NarrativeResult] = None
    results: Dict[str, pd.DataFrame] = field(default_factory=dict)

    def add_result(self, name: str, df: pd.DataFrame) -> None:
        self.results[name] = df

    def get(self, name: str) -> pd.DataFrame:
        return self.results[name]

    @property
    def warnings(self) -> List[DataQualityWarning]:
        return list(self.filtered.unfilterable) if self.filtered else []

    def change_period(self, selector: PeriodSelector) -> None:
        self.selector = selector
        self.filtered = None
        self.metrics = None
        self.results.clear()
        self.reset_narrative()

    def reset_narrative(self) -> None:
        self.narrative = None
