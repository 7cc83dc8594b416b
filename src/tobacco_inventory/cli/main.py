import asyncio
import datetime
import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from fastapi import HTTPException

from ..core import config
from ..core import logging_config  # noqa: F401
from ..features.dispatch import service as dispatch_service
from ..features.dispatch.client import fetch_dispatch_records
from ..features.dispatch.document import dispatch_filename, render_dispatch_pdf
from ..features.reports import service as report_service
from ..features.reports.renderers import csv_filename, render_html, render_pdf, render_records_csv
from ..features.reports.schemas import (
    BuyerReportQuery,
    DateRangeReportQuery,
    FarmerStatementQuery,
    PeriodReportQuery,
    PeriodType,
    ReportFormat,
    ScheduleQuery,
    StationSummaryQuery,
)
from ..features.sales import service as sales_service
from ..features.sales.client import fetch_sale_records
from ..features.sales.schemas import RecordFilters, SortConfig, SortField

logger = logging.getLogger(__name__)

app = typer.Typer(name="tobacco-inventory", help="Sale records, reports and dispatch documents from the command line.")

DATE_FORMATS = ["%Y-%m-%d"]


class ReportKind(str, Enum):
    sales_by_date = "sales-by-date"
    sales_by_period = "sales-by-period"
    sales_by_station = "sales-by-station"
    sales_by_buyer = "sales-by-buyer"
    farmer_statement = "farmer-statement"
    filtered_inventory = "filtered-inventory"
    comprehensive_schedule = "comprehensive-schedule"


def _day(value: Optional[datetime.datetime]) -> Optional[datetime.date]:
    return value.date() if value else None


def _sort(sort_by: Optional[SortField], descending: bool) -> SortConfig:
    return SortConfig(key=sort_by, direction="desc" if descending else "asc")


def _run(coro) -> None:
    """Runs an async command body, turning service errors into a red message and exit code 1."""
    try:
        asyncio.run(coro)
    except HTTPException as e:
        typer.secho(f"Error: {e.detail}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


def _write(output_dir: Path, filename: str, content) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / filename
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


@app.command("records")
def list_records_command(
    farmer_id: Optional[str] = typer.Option(None, help="Farmer ID contains"),
    buyer_id: Optional[str] = typer.Option(None, help="Buyer ID contains"),
    registra: Optional[str] = typer.Option(None, help="Registrar contains"),
    station_id: Optional[str] = typer.Option(None, help="Exact station ID"),
    tobacco_type: Optional[str] = typer.Option(None, help="Exact tobacco type"),
    search: Optional[str] = typer.Option(None, help="Free text search over every field"),
    date_from: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS),
    date_to: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS),
    sort_by: Optional[SortField] = typer.Option(None, help="Column to sort on"),
    descending: bool = typer.Option(False, "--desc", help="Sort descending"),
    page: int = typer.Option(1, min=1),
    size: int = typer.Option(config.DEFAULT_PAGE_SIZE, min=1, max=config.MAX_PAGE_SIZE),
):
    """Prints one page of the filtered sale records."""
    filters = RecordFilters(
        farmer_id=farmer_id, buyer_id=buyer_id, registra=registra, station_id=station_id,
        tobacco_type=tobacco_type, search=search, date_from=_day(date_from), date_to=_day(date_to),
    )
    _run(_list_records(filters, _sort(sort_by, descending), page, size))


async def _list_records(filters: RecordFilters, sort: SortConfig, page: int, size: int):
    records = await fetch_sale_records()
    result = sales_service.query_records(records, filters, sort, page, size)
    for record in result.items:
        typer.echo(
            f"{record.barcode_id:<14} {record.farmer_id:<12} {record.station_id:<8} "
            f"{record.buyer_id:<8} {record.weight:>8} {record.price:>8}  {record.report_date}"
        )
    typer.echo(f"Page {result.page} of {result.total_pages} ({result.total} records)")


@app.command("stats")
def stats_command(
    station_id: Optional[str] = typer.Option(None),
    tobacco_type: Optional[str] = typer.Option(None),
    date_from: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS),
    date_to: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS),
):
    """Prints the headline inventory figures."""
    filters = RecordFilters(
        station_id=station_id, tobacco_type=tobacco_type,
        date_from=_day(date_from), date_to=_day(date_to),
    )
    _run(_stats(filters))


async def _stats(filters: RecordFilters):
    records = await fetch_sale_records()
    stats = sales_service.compute_stats(records, sales_service.filter_records(records, filters))
    typer.echo(f"Total records:      {stats.total_records}")
    typer.echo(f"Filtered records:   {stats.filtered_records}")
    typer.echo(f"Unique farmers:     {stats.unique_farmers}")
    typer.echo(f"Records with price: {stats.records_with_price}")
    typer.echo(f"Total weight (kg):  {stats.total_weight:.2f}")
    typer.echo(f"Total value ($):    {stats.total_value:.2f}")
    typer.echo(f"Average price ($):  {stats.average_price:.2f}")


@app.command("export-csv")
def export_csv_command(
    station_id: Optional[str] = typer.Option(None),
    buyer_id: Optional[str] = typer.Option(None),
    farmer_id: Optional[str] = typer.Option(None),
    registra: Optional[str] = typer.Option(None, help="Registrar contains"),
    tobacco_type: Optional[str] = typer.Option(None),
    search: Optional[str] = typer.Option(None, help="Free text search over every field"),
    date_from: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS),
    date_to: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS),
    sort_by: Optional[SortField] = typer.Option(None, help="Column to sort on"),
    descending: bool = typer.Option(False, "--desc", help="Sort descending"),
    output_dir: Path = typer.Option(Path(config.REPORTS_OUTPUT_DIR), help="Directory to write into"),
):
    """Writes the filtered sale records to a CSV file."""
    filters = RecordFilters(
        station_id=station_id, buyer_id=buyer_id, farmer_id=farmer_id, registra=registra,
        tobacco_type=tobacco_type, search=search, date_from=_day(date_from), date_to=_day(date_to),
    )
    _run(_export_csv(filters, _sort(sort_by, descending), output_dir))


async def _export_csv(filters: RecordFilters, sort: SortConfig, output_dir: Path):
    records = await fetch_sale_records()
    selected = sales_service.sort_records(sales_service.filter_records(records, filters), sort)
    path = _write(output_dir, csv_filename(), render_records_csv(selected))
    typer.secho(f"Exported {len(selected)} records to {path}", fg=typer.colors.GREEN)


@app.command("report")
def report_command(
    kind: ReportKind = typer.Argument(..., help="Which report to build"),
    date_from: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS),
    date_to: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS),
    station_id: Optional[str] = typer.Option(None),
    tobacco_type: Optional[str] = typer.Option(None),
    farmer_id: Optional[str] = typer.Option(None),
    buyer_id: Optional[str] = typer.Option(None),
    registra: Optional[str] = typer.Option(None, help="Registrar contains (filtered-inventory)"),
    search: Optional[str] = typer.Option(None, help="Free text search (filtered-inventory)"),
    sort_by: Optional[SortField] = typer.Option(None, help="Column to sort on (filtered-inventory)"),
    descending: bool = typer.Option(False, "--desc", help="Sort descending"),
    period: PeriodType = typer.Option(PeriodType.daily, help="Grouping for sales-by-period"),
    format: ReportFormat = typer.Option(ReportFormat.pdf, "--format", "-f"),
    output_dir: Path = typer.Option(Path(config.REPORTS_OUTPUT_DIR), help="Directory to write into"),
):
    """Builds a sales report and writes it as PDF, HTML or JSON."""
    params = dict(
        date_from=_day(date_from), date_to=_day(date_to), station_id=station_id,
        tobacco_type=tobacco_type, farmer_id=farmer_id, buyer_id=buyer_id, period=period,
        registra=registra, search=search, sort=_sort(sort_by, descending),
    )
    _run(_report(kind, params, format, output_dir))


def build_report(kind: ReportKind, records, params: dict):
    date_range = {"date_from": params["date_from"], "date_to": params["date_to"]}
    if kind == ReportKind.sales_by_date:
        query = DateRangeReportQuery(**date_range, station_id=params["station_id"], tobacco_type=params["tobacco_type"])
        return report_service.build_sales_by_date_report(records, query)
    if kind == ReportKind.sales_by_period:
        query = PeriodReportQuery(
            **date_range, station_id=params["station_id"], tobacco_type=params["tobacco_type"],
            report_type=params["period"],
        )
        return report_service.build_sales_by_period_report(records, query)
    if kind == ReportKind.sales_by_station:
        query = StationSummaryQuery(**date_range, tobacco_type=params["tobacco_type"])
        return report_service.build_sales_by_station_report(records, query)
    if kind == ReportKind.sales_by_buyer:
        query = BuyerReportQuery(**date_range, station_id=params["station_id"], tobacco_type=params["tobacco_type"])
        return report_service.build_sales_by_buyer_report(records, query)
    if kind == ReportKind.farmer_statement:
        query = FarmerStatementQuery(
            **date_range, farmer_id=params["farmer_id"], buyer_id=params["buyer_id"],
            station_id=params["station_id"], tobacco_type=params["tobacco_type"],
        )
        return report_service.build_farmer_statement(records, query)
    if kind == ReportKind.filtered_inventory:
        filters = RecordFilters(
            **date_range, farmer_id=params["farmer_id"], buyer_id=params["buyer_id"],
            station_id=params["station_id"], tobacco_type=params["tobacco_type"],
            registra=params.get("registra"), search=params.get("search"),
        )
        return report_service.build_filtered_inventory_report(records, filters, params.get("sort"))
    query = ScheduleQuery(**date_range, station_id=params["station_id"])
    return report_service.build_comprehensive_schedule(records, query)


async def _report(kind: ReportKind, params: dict, fmt: ReportFormat, output_dir: Path):
    records = await fetch_sale_records()
    report = build_report(kind, records, params)
    if fmt == ReportFormat.json:
        path = _write(output_dir, f"{report.filename_stem}.json", report.model_dump_json(indent=2, by_alias=True))
    else:
        document = report_service.to_document(report)
        if fmt == ReportFormat.pdf:
            path = _write(output_dir, f"{document.filename_stem}.pdf", render_pdf(document))
        else:
            path = _write(output_dir, f"{document.filename_stem}.html", render_html(document))
    typer.secho(f"Report written to {path}", fg=typer.colors.GREEN)


@app.command("dispatch-document")
def dispatch_document_command(
    book_number: str = typer.Argument(..., help="Dispatch book number"),
    output_dir: Path = typer.Option(Path(config.REPORTS_OUTPUT_DIR), help="Directory to write into"),
):
    """Generates the PDF dispatch document of a dispatch book."""
    _run(_dispatch_document(book_number, output_dir))


async def _dispatch_document(book_number: str, output_dir: Path):
    records = await fetch_dispatch_records()
    document = dispatch_service.build_dispatch_document(records, book_number)
    path = _write(output_dir, dispatch_filename(document), render_dispatch_pdf(document))
    typer.secho(
        f"Dispatch document with {document.barcode_count} barcodes written to {path}",
        fg=typer.colors.GREEN,
    )


@app.command("serve")
def serve_command(
    host: str = typer.Option("127.0.0.1"),
    port: int = typer.Option(8000),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Runs the HTTP API with uvicorn."""
    uvicorn.run("tobacco_inventory.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
