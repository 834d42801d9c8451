from __future__ import annotations

import textwrap
from dataclasses import dataclass, field
from typing import Optional, Sequence

from pastoral_analytics.config.constants import (
    ACTIVITY_COLUMNS,
    CONTENT_BOTTOM,
    CONTENT_TOP,
    DASHBOARD_WRAP_CHARS,
    GATHERING_COLUMNS,
    MARGIN_X,
    METRIC_BOX_GAP,
    METRIC_BOX_HEIGHT,
    METRIC_BOX_WIDTH,
    METRICS_Y,
    PAGE_BREAK_THRESHOLD,
    PAGE_HEIGHT,
    SCRIPT_LINE_HEIGHT,
    SCRIPT_TOP,
    SCRIPT_WRAP_CHARS,
    SECTION_AFTER_TABLE,
    SECTION_LINE_HEIGHT,
    SECTION_SPACING,
    SECTION_TEXT_OFFSET,
    TABLE_HEADER_HEIGHT,
    TABLE_ROW_HEIGHT,
    TABLE_TITLE_GAP,
)
from pastoral_analytics.io.writers import fmt_date
from pastoral_analytics.models.schema import (
    ActivityRecord,
    Block,
    Context,
    GatheringRecord,
    NarrativeResult,
    Page,
    PageKind,
    PeriodSelector,
    ReportDocument,
    SummaryMetrics,
)


@dataclass(frozen=True)
class MetricBox:
    x: float
    label: str
    value: str
    sub: str


@dataclass(frozen=True)
class TextSection:
    title: str
    lines: list = field(default_factory=list)

    @property
    def height(self) -> float:
        return len(self.lines) * SECTION_LINE_HEIGHT + SECTION_SPACING


@dataclass(frozen=True)
class TableChunk:
    name: str
    columns: list
    rows: list

    @property
    def height(self) -> float:
        return TABLE_HEADER_HEIGHT + len(self.rows) * TABLE_ROW_HEIGHT


def wrap_text(text: str, width: int) -> list[str]:
    lines: list[str] = []
    for paragraph in text.strip().splitlines():
        if not paragraph.strip():
            lines.append("")
            continue
        lines.extend(textwrap.wrap(paragraph.strip(), width=width) or [""])
    return lines


def _new_page(doc: ReportDocument, kind: PageKind, title: str) -> Page:
    page = Page(number=len(doc.pages) + 1, kind=kind, title=title)
    doc.pages.append(page)
    return page


def _cover_page(doc: ReportDocument, selector: PeriodSelector) -> None:
    page = _new_page(doc, PageKind.COVER, "Relatório de Gestão")
    heading = ["RELATÓRIO", selector.report_type.upper(), "DE GESTÃO"]
    for idx, line in enumerate(heading):
        page.blocks.append(Block("cover_title", 100.0 + idx * 15.0, line))
    page.blocks.append(Block("cover_period", 150.0, f"PERÍODO: {selector.label.upper()}"))
    page.blocks.append(Block("cover_subtitle", 170.0, "Análise de Crescimento, Frequência e Atividades"))
    page.blocks.append(Block("cover_tagline", PAGE_HEIGHT - 20.0, "Documento gerado automaticamente pelo Sistema CADFC"))


def _narrative_page(doc: ReportDocument, narrative: NarrativeResult) -> None:
    title = "Roteiro de Apresentação Oral"
    page = _new_page(doc, PageKind.NARRATIVE, title)
    page.blocks.append(Block("note", CONTENT_TOP, "ESTA PÁGINA CONTÉM O DISCURSO SUGERIDO PARA A LIDERANÇA."))

    lines = wrap_text(narrative.presentation_script, SCRIPT_WRAP_CHARS)
    per_page = int((CONTENT_BOTTOM - SCRIPT_TOP) // SCRIPT_LINE_HEIGHT)
    page.blocks.append(Block("script", SCRIPT_TOP, lines[:per_page]))
    lines = lines[per_page:]
    while lines:
        page = _new_page(doc, PageKind.NARRATIVE, title)
        page.blocks.append(Block("script", CONTENT_TOP, lines[:per_page]))
        lines = lines[per_page:]


def _dashboard_page(doc: ReportDocument, metrics: SummaryMetrics, narrative: Optional[NarrativeResult]) -> None:
    page = _new_page(doc, PageKind.DASHBOARD, "Dashboard Executivo")
    boxes = [
        ("Total Cultos", str(metrics.gathering_count), "Eventos"),
        ("Frequência Total", str(metrics.total_attendance), "Pessoas"),
        ("Média/Culto", str(metrics.average_attendance), "Pessoas"),
        ("Atendimentos", str(metrics.counseling_total), f"{metrics.counseling_resolved} Resolvidos"),
    ]
    for idx, (label, value, sub) in enumerate(boxes):
        x = MARGIN_X + idx * (METRIC_BOX_WIDTH + METRIC_BOX_GAP)
        page.blocks.append(Block("metric", METRICS_Y, MetricBox(x=x, label=label, value=value, sub=sub)))

    if narrative is None:
        return

    y = METRICS_Y + METRIC_BOX_HEIGHT + 15.0
    sections = [
        ("Resumo Estratégico", narrative.executive_summary),
        ("Tendências e Anomalias", narrative.trends_and_anomalies),
        ("Recomendações da Consultoria", narrative.strategic_recommendations),
    ]
    for title, text in sections:
        if not text or not text.strip():
            continue
        lines = wrap_text(text, DASHBOARD_WRAP_CHARS)
        while lines:
            fits = int((CONTENT_BOTTOM - y - SECTION_TEXT_OFFSET) // SECTION_LINE_HEIGHT)
            if fits < 1:
                page = _new_page(doc, PageKind.DASHBOARD, page.title)
                y = CONTENT_TOP
                continue
            section = TextSection(title=title, lines=lines[:fits])
            lines = lines[fits:]
            page.blocks.append(Block("section", y, section))
            y += section.height


def _place_table(doc: ReportDocument, page: Page, y: float, name: str, columns: list, rows: list) -> tuple[Page, float]:
    """Lay rows out from ``y``; rows past the content bottom move to new pages
    that start with a repeated header row. Returns the last page and the y
    where the table ends on it."""
    remaining = list(rows)
    while True:
        capacity = int((CONTENT_BOTTOM - y - TABLE_HEADER_HEIGHT) // TABLE_ROW_HEIGHT)
        if capacity < 1 and remaining:
            page = _new_page(doc, PageKind.DETAIL, page.title)
            y = CONTENT_TOP
            continue
        chunk = TableChunk(name=name, columns=columns, rows=remaining[:capacity])
        remaining = remaining[capacity:]
        page.blocks.append(Block("table", y, chunk))
        y += chunk.height
        if not remaining:
            return page, y
        page = _new_page(doc, PageKind.DETAIL, page.title)
        y = CONTENT_TOP


def gathering_rows(gatherings: Sequence[GatheringRecord]) -> list[list[str]]:
    return [
        [
            fmt_date(g.date),
            g.category.value,
            str(g.attendance.men),
            str(g.attendance.women),
            str(g.attendance.adolescents),
            str(g.attendance.children),
            str(g.attendance.remote),
            str(g.total),
        ]
        for g in gatherings
    ]


def activity_rows(activities: Sequence[ActivityRecord]) -> list[list[str]]:
    return [[fmt_date(a.date), a.category.value, a.description, a.location or "-"] for a in activities]


def _detail_pages(doc: ReportDocument, gatherings: Sequence[GatheringRecord], activities: Sequence[ActivityRecord]) -> None:
    page = _new_page(doc, PageKind.DETAIL, "Detalhamento Operacional")
    page.blocks.append(Block("table_title", CONTENT_TOP, "Histórico de Cultos e Jornadas"))
    page, end_y = _place_table(
        doc, page, CONTENT_TOP + TABLE_TITLE_GAP, "gatherings", GATHERING_COLUMNS, gathering_rows(gatherings)
    )

    header_y = end_y + SECTION_AFTER_TABLE
    if header_y > PAGE_HEIGHT - PAGE_BREAK_THRESHOLD:
        page = _new_page(doc, PageKind.DETAIL, "Atividades Externas")
        header_y = CONTENT_TOP
    page.blocks.append(Block("table_title", header_y, "Registro de Atividades Externas"))
    _place_table(doc, page, header_y + TABLE_TITLE_GAP, "activities", ACTIVITY_COLUMNS, activity_rows(activities))


def assemble_document(
    selector: PeriodSelector,
    metrics: SummaryMetrics,
    narrative: Optional[NarrativeResult],
    gatherings: Sequence[GatheringRecord],
    activities: Sequence[ActivityRecord],
) -> ReportDocument:
    """Lay out the period report: cover, optional script, dashboard, details.

    Pure function of its arguments; it never touches the record store.
    """
    doc = ReportDocument(period_label=selector.label, report_type=selector.report_type)
    _cover_page(doc, selector)
    if narrative is not None and narrative.presentation_script.strip():
        _narrative_page(doc, narrative)
    _dashboard_page(doc, metrics, narrative)
    _detail_pages(doc, gatherings, activities)
    return doc


def build_report(ctx: Context) -> ReportDocument:
    if ctx.filtered is None or ctx.metrics is None:
        raise ValueError("build_tables must run before build_report")
    return assemble_document(
        ctx.selector,
        ctx.metrics,
        ctx.narrative,
        ctx.filtered.gatherings,
        ctx.filtered.activities,
    )
