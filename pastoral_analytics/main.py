from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from pastoral_analytics.config.settings import get_settings
from pastoral_analytics.features.narrative import NarrativeAnalyzer
from pastoral_analytics.io.store import JsonRecordStore
from pastoral_analytics.models.schema import Context, PeriodSelector
from pastoral_analytics.models.session import Session
from pastoral_analytics.pipelines.build_figures import build_figures
from pastoral_analytics.pipelines.build_report import build_report
from pastoral_analytics.pipelines.build_tables import build_narrative, build_tables
from pastoral_analytics.pipelines.export_pdf import export_filename, export_pdf

logger = logging.getLogger("pastoral_analytics")


def configure_logging(verbose: bool = False) -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    today = date.today()
    parser = argparse.ArgumentParser(description="Gera o relatório de gestão (PDF) de um período.")
    parser.add_argument("--granularity", choices=["month", "year"], default="month")
    parser.add_argument("--month", type=int, default=today.month, help="Mês 1-12")
    parser.add_argument("--year", type=int, default=today.year)
    parser.add_argument("--owner", default=None, help="Escopo do proprietário dos registros")
    parser.add_argument("--no-narrative", action="store_true", help="Não solicitar a análise de IA")
    parser.add_argument("--no-figures", action="store_true")
    parser.add_argument("--output", type=Path, default=None, help="Diretório de saída do PDF")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def selector_from_args(args: argparse.Namespace) -> PeriodSelector:
    if args.granularity == "year":
        return PeriodSelector.annual(args.year, args.month)
    return PeriodSelector.monthly(args.year, args.month)


async def main(argv: Optional[Sequence[str]] = None) -> Path:
    args = parse_args(argv)
    configure_logging(args.verbose)
    settings = get_settings()

    session = Session.sign_in(JsonRecordStore(settings.data_dir), args.owner or settings.owner_id)
    try:
        ctx = Context(settings=settings, selector=selector_from_args(args), view=session.view)

        build_tables(ctx)
        if not args.no_narrative:
            await build_narrative(ctx, NarrativeAnalyzer.from_settings(settings))
        if not args.no_figures:
            build_figures(ctx)
        document = build_report(ctx)
        output_dir = args.output or settings.output_dir
        pdf_path = export_pdf(document, output_dir / export_filename(ctx.selector))
    finally:
        session.sign_out()

    logger.info("Report pipeline completed: %s", pdf_path)
    return pdf_path


if __name__ == "__main__":
    asyncio.run(main())
