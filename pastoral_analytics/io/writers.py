from __future__ import annotations

from pathlib import Path
import pandas as pd
import matplotlib.pyplot as plt

from pastoral_analytics.features.period import parse_date_parts
from pastoral_analytics.models.errors import InvalidDateFormat
from pastoral_analytics.models.schema import (
    ActivityRecord,
    CounselingSession,
    GatheringRecord,
    PeriodSelector,
    SummaryMetrics,
)


def ensure_dirs(table_dir: Path, fig_dir: Path) -> None:
    table_dir.mkdir(parents=True, exist_ok=True)
    fig_dir.mkdir(parents=True, exist_ok=True)


def save_table(df: pd.DataFrame, path: Path) -> None:
    df.to_csv(path, index=False)


def save_fig(fig: plt.Figure, path: Path) -> None:
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)


def fmt_date(value: str) -> str:
    """Render a record date as dd/mm/yyyy; unparseable text is shown as is."""
    try:
        year, month, day = parse_date_parts(value)
    except InvalidDateFormat:
        return str(value)
    return f"{day:02d}/{month:02d}/{year}"


def fmt_pct(value: float | int | None) -> str:
    if value is None or pd.isna(value):
        return "n/a"
    return f"{value:.1f}%".replace(".", ",")


def fmt_int(value: float | int | None) -> str:
    if value is None or pd.isna(value):
        return "n/a"
    return f"{int(value):,}".replace(",", ".")


def gatherings_frame(gatherings: list[GatheringRecord]) -> pd.DataFrame:
    rows = [
        {
            "date": g.date,
            "type": g.category.value,
            "men": g.attendance.men,
            "women": g.attendance.women,
            "adolescents": g.attendance.adolescents,
            "children": g.attendance.children,
            "remote": g.attendance.remote,
            "total": g.total,
            "notes": g.note or "",
        }
        for g in gatherings
    ]
    return pd.DataFrame(rows, columns=["date", "type", "men", "women", "adolescents", "children", "remote", "total", "notes"])


def counseling_frame(sessions: list[CounselingSession]) -> pd.DataFrame:
    rows = [
        {
            "date": c.date,
            "memberName": c.member.name,
            "memberPhone": c.member.phone,
            "resolved": c.resolved,
        }
        for c in sessions
    ]
    return pd.DataFrame(rows, columns=["date", "memberName", "memberPhone", "resolved"])


def activities_frame(activities: list[ActivityRecord]) -> pd.DataFrame:
    rows = [
        {
            "date": a.date,
            "type": a.category.value,
            "description": a.description,
            "location": a.location or "",
        }
        for a in activities
    ]
    return pd.DataFrame(rows, columns=["date", "type", "description", "location"])


def summary_frame(metrics: SummaryMetrics) -> pd.DataFrame:
    rows = [
        ("Total Cultos", fmt_int(metrics.gathering_count)),
        ("Frequência Total", fmt_int(metrics.total_attendance)),
        ("Média/Culto", fmt_int(metrics.average_attendance)),
        ("Homens", fmt_int(metrics.demographics.men)),
        ("Mulheres", fmt_int(metrics.demographics.women)),
        ("Adolescentes", fmt_int(metrics.demographics.adolescents)),
        ("Crianças", fmt_int(metrics.demographics.children)),
        ("Online", fmt_int(metrics.demographics.remote)),
        ("% Homens", fmt_pct(metrics.men_pct)),
        ("% Mulheres", fmt_pct(metrics.women_pct)),
        ("% Jovens", fmt_pct(metrics.youth_pct)),
        ("Atendimentos", fmt_int(metrics.counseling_total)),
        ("Atendimentos Resolvidos", fmt_int(metrics.counseling_resolved)),
        ("% Resolvidos", fmt_pct(metrics.counseling_resolved_pct)),
        ("Atividades", fmt_int(metrics.activity_count)),
    ]
    return pd.DataFrame(rows, columns=["metric", "value"])


def period_suffix(selector: PeriodSelector) -> str:
    suffix = f"{selector.report_type.lower()}_{selector.year}"
    if selector.month:
        suffix += f"_{selector.month:02d}"
    return suffix
