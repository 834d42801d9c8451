"""Tests for the report document assembler."""

from conftest import make_activity, make_gathering
from pastoral_analytics.config.constants import (
    CONTENT_BOTTOM,
    CONTENT_TOP,
    DASHBOARD_WRAP_CHARS,
    METRIC_BOX_HEIGHT,
    METRICS_Y,
    PAGE_BREAK_THRESHOLD,
    PAGE_HEIGHT,
    SECTION_LINE_HEIGHT,
    SECTION_TEXT_OFFSET,
)
from pastoral_analytics.features.metrics import aggregate
from pastoral_analytics.models.schema import NarrativeResult, PageKind, PeriodSelector
from pastoral_analytics.pipelines.build_report import assemble_document, wrap_text

MARCH = PeriodSelector.monthly(2024, 3)


def _narrative(script="Boa noite a todos.", summary="Resumo", trends="Tendências", recs="Recomendações"):
    return NarrativeResult(
        presentation_script=script,
        executive_summary=summary,
        trends_and_anomalies=trends,
        strategic_recommendations=recs,
    )


def _document(gatherings=(), activities=(), narrative=None):
    metrics = aggregate(list(gatherings), [], list(activities), period=MARCH.label)
    return assemble_document(MARCH, metrics, narrative, list(gatherings), list(activities))


def _titles(page):
    return [(b.y, b.data) for b in page.blocks_of("table_title")]


def test_single_gathering_without_narrative_has_three_pages():
    gathering = make_gathering(men=10, women=20, adolescents=5, children=10, remote=5)
    assert gathering.total == 50
    doc = _document(gatherings=[gathering])

    assert doc.kinds() == [PageKind.COVER, PageKind.DASHBOARD, PageKind.DETAIL]
    assert [p.number for p in doc.pages] == [1, 2, 3]
    assert doc.period_label == "Março de 2024"


def test_narrative_page_present_only_with_script():
    with_script = _document(gatherings=[make_gathering()], narrative=_narrative())
    empty_script = _document(gatherings=[make_gathering()], narrative=_narrative(script="   "))

    assert with_script.kinds() == [PageKind.COVER, PageKind.NARRATIVE, PageKind.DASHBOARD, PageKind.DETAIL]
    assert PageKind.NARRATIVE not in empty_script.kinds()


def test_cover_renders_label_and_report_type():
    cover = _document().pages[0]
    texts = [b.data for b in cover.blocks]

    assert "MENSAL" in texts
    assert "PERÍODO: MARÇO DE 2024" in texts


def test_dashboard_metric_boxes():
    doc = _document(gatherings=[make_gathering(id="g1"), make_gathering(id="g2", remote=6)])
    dashboard = doc.pages[1]
    boxes = [b.data for b in dashboard.blocks_of("metric")]

    assert [box.label for box in boxes] == ["Total Cultos", "Frequência Total", "Média/Culto", "Atendimentos"]
    assert [box.value for box in boxes] == ["2", "101", "51", "0"]
    assert boxes[3].sub == "0 Resolvidos"
    assert [box.x for box in boxes] == [10.0, 60.0, 110.0, 160.0]
    assert dashboard.blocks_of("section") == []


def test_dashboard_sections_stack_by_wrapped_height():
    long_summary = "palavra " * 60
    doc = _document(narrative=_narrative(summary=long_summary, trends="", recs="Curto"))
    sections = doc.pages[2].blocks_of("section")

    assert [s.data.title for s in sections] == ["Resumo Estratégico", "Recomendações da Consultoria"]
    first_y = METRICS_Y + METRIC_BOX_HEIGHT + 15
    assert sections[0].y == first_y
    lines = wrap_text(long_summary, DASHBOARD_WRAP_CHARS)
    assert len(lines) > 1
    assert sections[1].y == first_y + len(lines) * 5 + 12


def test_short_gatherings_table_keeps_activities_on_same_page():
    gatherings = [make_gathering(id=f"g{i}", date=f"2024-03-{i + 1:02d}") for i in range(5)]
    doc = _document(gatherings=gatherings, activities=[make_activity()])

    details = [p for p in doc.pages if p.kind is PageKind.DETAIL]
    assert len(details) == 1
    titles = _titles(details[0])
    assert [t for _, t in titles] == ["Histórico de Cultos e Jornadas", "Registro de Atividades Externas"]
    assert titles[1][0] <= PAGE_HEIGHT - PAGE_BREAK_THRESHOLD


def test_long_gatherings_table_pushes_activities_to_next_page():
    gatherings = [make_gathering(id=f"g{i}", date="2024-03-10") for i in range(30)]
    doc = _document(gatherings=gatherings, activities=[make_activity()])

    details = [p for p in doc.pages if p.kind is PageKind.DETAIL]
    assert len(details) == 2
    first, second = details
    assert len(first.blocks_of("table")) == 1
    assert len(first.blocks_of("table")[0].data.rows) == 30
    assert [t for _, t in _titles(first)] == ["Histórico de Cultos e Jornadas"]

    assert second.title == "Atividades Externas"
    assert _titles(second) == [(CONTENT_TOP, "Registro de Atividades Externas")]
    table = second.blocks_of("table")[0]
    assert table.data.columns == ["Data", "Tipo", "Descrição", "Local"]
    assert second.number == first.number + 1


def test_break_threshold_boundary():
    # 23 rows end the table at y=219, header at 234: stays. 24 rows: header at 241: breaks.
    stays = _document(gatherings=[make_gathering(id=f"g{i}") for i in range(23)])
    breaks = _document(gatherings=[make_gathering(id=f"g{i}") for i in range(24)])

    assert len([p for p in stays.pages if p.kind is PageKind.DETAIL]) == 1
    assert len([p for p in breaks.pages if p.kind is PageKind.DETAIL]) == 2


def test_overflowing_table_continues_with_repeated_header():
    gatherings = [make_gathering(id=f"g{i}") for i in range(40)]
    doc = _document(gatherings=gatherings, activities=[make_activity()])

    details = [p for p in doc.pages if p.kind is PageKind.DETAIL]
    chunks = [b for p in details for b in p.blocks_of("table") if b.data.name == "gatherings"]
    assert len(chunks) == 2
    assert sum(len(c.data.rows) for c in chunks) == 40
    assert all(c.data.columns[0] == "Data" for c in chunks)
    assert chunks[1].y == CONTENT_TOP
    for page in details:
        for block in page.blocks_of("table"):
            assert block.y >= CONTENT_TOP
            assert block.y + block.data.height <= CONTENT_BOTTOM


def test_long_dashboard_text_continues_below_page_header():
    summary = "\n".join(f"Linha {i}" for i in range(60))
    doc = _document(narrative=_narrative(summary=summary, trends="", recs="Curto"))

    dashboards = [p for p in doc.pages if p.kind is PageKind.DASHBOARD]
    assert len(dashboards) == 2
    assert dashboards[1].blocks_of("metric") == []
    assert doc.kinds()[-1] is PageKind.DETAIL

    blocks = [b for p in dashboards for b in p.blocks_of("section")]
    summary_lines = [line for b in blocks if b.data.title == "Resumo Estratégico" for line in b.data.lines]
    assert summary_lines == summary.splitlines()
    assert dashboards[1].blocks_of("section")[0].y == CONTENT_TOP
    for block in blocks:
        assert block.y >= CONTENT_TOP
        assert block.y + SECTION_TEXT_OFFSET + len(block.data.lines) * SECTION_LINE_HEIGHT <= CONTENT_BOTTOM


def test_detail_rows_render_dates_and_missing_location():
    doc = _document(
        gatherings=[make_gathering(date="2024-03-01")],
        activities=[make_activity(date="2024-03-31", location=None)],
    )
    tables = {b.data.name: b.data for b in doc.pages[-1].blocks_of("table")}

    assert tables["gatherings"].rows[0][:2] == ["01/03/2024", "Culto de Domingo"]
    assert tables["gatherings"].rows[0][-1] == "50"
    assert tables["activities"].rows[0] == ["31/03/2024", "Visita Pastoral", "Visita à família Lima", "-"]


def test_long_script_spills_onto_extra_narrative_page():
    script = "\n".join(f"Linha {i}" for i in range(60))
    doc = _document(narrative=_narrative(script=script))

    narrative_pages = [p for p in doc.pages if p.kind is PageKind.NARRATIVE]
    assert len(narrative_pages) == 2
    lines = [line for p in narrative_pages for b in p.blocks_of("script") for line in b.data]
    assert lines == script.splitlines()
