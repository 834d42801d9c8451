from __future__ import annotations

import logging
import textwrap
from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen.canvas import Canvas
from reportlab.platypus import Table, TableStyle

from pastoral_analytics.config.constants import (
    FOOTER_TEXT,
    HEADER_TEXT,
    MARGIN_X,
    METRIC_BOX_HEIGHT,
    METRIC_BOX_WIDTH,
    PAGE_WIDTH,
    SCRIPT_LINE_HEIGHT,
    SECTION_LINE_HEIGHT,
    SECTION_TEXT_OFFSET,
    TABLE_HEADER_HEIGHT,
    TABLE_ROW_HEIGHT,
)
from pastoral_analytics.models.schema import Block, Page, PageKind, PeriodSelector, ReportDocument
from pastoral_analytics.pipelines.build_report import MetricBox, TableChunk, TextSection
from pastoral_analytics.visuals.style import PDF_COLORS

logger = logging.getLogger(__name__)

_, PAGE_H = A4

COLUMN_WIDTHS = {
    "gatherings": [25, 40, 21, 21, 21, 21, 20, 21],
    "activities": [25, 40, 85, 40],
}
# Approximate glyph width of 8pt Helvetica, used to shorten cell text.
CELL_CHAR_MM = 1.6


def export_filename(selector: PeriodSelector) -> str:
    month = selector.month or 1
    return f"Relatorio_{selector.report_type}_{month}_{selector.year}.pdf"


def _y(top_mm: float) -> float:
    return PAGE_H - top_mm * mm


def _draw_cover(c: Canvas, page: Page) -> None:
    width = PAGE_WIDTH * mm
    c.setFillColor(PDF_COLORS["cover_bg"])
    c.rect(0, 0, width, PAGE_H, stroke=0, fill=1)
    c.setFillColor(PDF_COLORS["primary"])
    c.circle(width, PAGE_H, 100 * mm, stroke=0, fill=1)
    c.setFillColor(PDF_COLORS["accent"])
    c.circle(0, 0, 80 * mm, stroke=0, fill=1)

    for block in page.blocks:
        if block.kind == "cover_title":
            c.setFillColor(colors.white)
            c.setFont("Helvetica-Bold", 36)
            c.drawString(20 * mm, _y(block.y), str(block.data))
        elif block.kind == "cover_period":
            c.setFillColor(colors.white)
            c.setFont("Helvetica", 14)
            c.drawString(20 * mm, _y(block.y), str(block.data))
            c.setStrokeColor(colors.white)
            c.setLineWidth(1)
            c.line(20 * mm, _y(block.y + 10), 100 * mm, _y(block.y + 10))
        elif block.kind == "cover_subtitle":
            c.setFillColor(colors.white)
            c.setFont("Helvetica", 10)
            c.drawString(20 * mm, _y(block.y), str(block.data))
        elif block.kind == "cover_tagline":
            c.setFillColor(PDF_COLORS["cover_tagline"])
            c.setFont("Helvetica", 10)
            c.drawString(20 * mm, _y(block.y), str(block.data))


def _draw_header(c: Canvas, page: Page, period_label: str) -> None:
    width = PAGE_WIDTH * mm
    c.setFillColor(PDF_COLORS["primary"])
    c.rect(0, _y(15), width, 15 * mm, stroke=0, fill=1)
    c.setFont("Helvetica", 10)
    c.setFillColor(colors.white)
    c.drawString(MARGIN_X * mm, _y(10), HEADER_TEXT)
    c.drawRightString(width - MARGIN_X * mm, _y(10), period_label)

    c.setFillColor(PDF_COLORS["heading"])
    c.setFont("Helvetica", 18)
    c.drawString(MARGIN_X * mm, _y(30), page.title)
    c.setStrokeColor(PDF_COLORS["primary"])
    c.setLineWidth(0.5)
    c.line(MARGIN_X * mm, _y(35), width - MARGIN_X * mm, _y(35))


def _draw_footer(c: Canvas, page: Page) -> None:
    c.setFont("Helvetica", 8)
    c.setFillColor(PDF_COLORS["muted"])
    c.drawString(MARGIN_X * mm, 10 * mm, FOOTER_TEXT.format(page=page.number))


def _draw_metric(c: Canvas, block: Block) -> None:
    box: MetricBox = block.data  # type: ignore[assignment]
    x = box.x * mm
    c.setFillColor(PDF_COLORS["box_bg"])
    c.setStrokeColor(PDF_COLORS["box_border"])
    c.roundRect(x, _y(block.y + METRIC_BOX_HEIGHT), METRIC_BOX_WIDTH * mm, METRIC_BOX_HEIGHT * mm, 3 * mm, stroke=1, fill=1)

    c.setFont("Helvetica", 8)
    c.setFillColor(PDF_COLORS["muted"])
    c.drawString(x + 5 * mm, _y(block.y + 8), box.label.upper())
    c.setFont("Helvetica-Bold", 14)
    c.setFillColor(PDF_COLORS["value"])
    c.drawString(x + 5 * mm, _y(block.y + 18), box.value)
    c.setFont("Helvetica-Bold", 7)
    c.setFillColor(PDF_COLORS["accent"])
    c.drawRightString(x + (METRIC_BOX_WIDTH - 5) * mm, _y(block.y + 18), box.sub)


def _draw_section(c: Canvas, block: Block) -> None:
    section: TextSection = block.data  # type: ignore[assignment]
    c.setFont("Helvetica-Bold", 11)
    c.setFillColor(PDF_COLORS["primary"])
    c.drawString(MARGIN_X * mm, _y(block.y), section.title)
    c.setFont("Helvetica", 10)
    c.setFillColor(PDF_COLORS["body"])
    for idx, line in enumerate(section.lines):
        c.drawString(MARGIN_X * mm, _y(block.y + SECTION_TEXT_OFFSET + idx * SECTION_LINE_HEIGHT), line)


def _draw_script(c: Canvas, block: Block) -> None:
    c.setFont("Times-Italic", 12)
    c.setFillColor(PDF_COLORS["heading"])
    for idx, line in enumerate(block.data):  # type: ignore[arg-type]
        c.drawString(20 * mm, _y(block.y + idx * SCRIPT_LINE_HEIGHT), line)


def _fit(text: str, width_mm: float) -> str:
    max_chars = max(int(width_mm / CELL_CHAR_MM), 4)
    return textwrap.shorten(text, width=max_chars, placeholder="…") if len(text) > max_chars else text


def _draw_table(c: Canvas, block: Block) -> None:
    chunk: TableChunk = block.data  # type: ignore[assignment]
    widths = COLUMN_WIDTHS[chunk.name]
    data = [list(chunk.columns)] + [[_fit(cell, w) for cell, w in zip(row, widths)] for row in chunk.rows]
    heights = [TABLE_HEADER_HEIGHT * mm] + [TABLE_ROW_HEIGHT * mm] * len(chunk.rows)

    header_bg = PDF_COLORS["table_head"] if chunk.name == "gatherings" else PDF_COLORS["accent"]
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), header_bg),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 9),
        ("FONTSIZE", (0, 1), (-1, -1), 8),
        ("TEXTCOLOR", (0, 1), (-1, -1), PDF_COLORS["body"]),
        ("GRID", (0, 0), (-1, -1), 0.5, PDF_COLORS["box_border"]),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
    if chunk.name == "gatherings":
        for rr in range(1, len(data)):
            if rr % 2 == 0:
                style.append(("BACKGROUND", (0, rr), (-1, rr), PDF_COLORS["zebra"]))

    table = Table(data, colWidths=[w * mm for w in widths], rowHeights=heights, hAlign="LEFT")
    table.setStyle(TableStyle(style))
    table.wrapOn(c, PAGE_WIDTH * mm, PAGE_H)
    table.drawOn(c, MARGIN_X * mm, _y(block.y) - sum(heights))


def _draw_text(c: Canvas, block: Block, size: int, color: colors.Color, x_mm: float = 14) -> None:
    c.setFont("Helvetica", size)
    c.setFillColor(color)
    c.drawString(x_mm * mm, _y(block.y), str(block.data))


def _draw_page(c: Canvas, page: Page, doc: ReportDocument) -> None:
    if page.kind is PageKind.COVER:
        _draw_cover(c, page)
        return

    _draw_header(c, page, doc.period_label)
    for block in page.blocks:
        if block.kind == "metric":
            _draw_metric(c, block)
        elif block.kind == "section":
            _draw_section(c, block)
        elif block.kind == "script":
            _draw_script(c, block)
        elif block.kind == "note":
            _draw_text(c, block, 11, PDF_COLORS["muted"], x_mm=MARGIN_X)
        elif block.kind == "table_title":
            _draw_text(c, block, 11, PDF_COLORS["heading"])
        elif block.kind == "table":
            _draw_table(c, block)
        else:
            raise ValueError(f"Unknown block kind {block.kind!r} on page {page.number}")
    _draw_footer(c, page)


def export_pdf(document: ReportDocument, pdf_path: Path) -> Path:
    pdf_path = Path(pdf_path)
    pdf_path.parent.mkdir(parents=True, exist_ok=True)

    c = Canvas(str(pdf_path), pagesize=A4)
    c.setTitle(f"Relatório {document.report_type} - {document.period_label}")
    c.setAuthor("CADFC")
    for page in document.pages:
        _draw_page(c, page, document)
        c.showPage()
    c.save()

    logger.info("Exported %d page(s) to %s", len(document.pages), pdf_path)
    return pdf_path
