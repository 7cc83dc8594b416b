import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from ...common.responses import attachment
from ..sales.client import get_sale_records
from ..sales.router import get_sort_config
from ..sales.schemas import RecordFilters, SaleRecord, SortConfig
from . import service as report_service
from .renderers import render_html, render_pdf
from .schemas import (
    BuyerReportQuery,
    DateRangeReportQuery,
    FarmerStatementQuery,
    FilteredInventoryReport,
    PeriodReportQuery,
    ReportFormat,
    ScheduleQuery,
    ScheduleReport,
    ScheduleRow,
    StationSummaryQuery,
    SummaryReport,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Reports"],
    responses={
        400: {"description": "Required report filters missing"},
        404: {"description": "No records for the selected criteria"},
    },
)

FormatQuery = Query(ReportFormat.json, description="json, pdf or html")


def respond(report: report_service.AnyReport, fmt: ReportFormat):
    """Returns the report model itself, or its printable form as a download."""
    if fmt == ReportFormat.json:
        return report
    document = report_service.to_document(report)
    if fmt == ReportFormat.pdf:
        return attachment(render_pdf(document), f"{document.filename_stem}.pdf", "application/pdf")
    return attachment(
        render_html(document), f"{document.filename_stem}.html", "text/html; charset=utf-8"
    )


@router.get("/reports/sales-by-date", response_model=SummaryReport)
async def get_sales_by_date_report(
    query: DateRangeReportQuery = Depends(),
    format: ReportFormat = FormatQuery,
    records: List[SaleRecord] = Depends(get_sale_records),
):
    return respond(report_service.build_sales_by_date_report(records, query), format)


@router.get("/reports/sales-by-period", response_model=SummaryReport)
async def get_sales_by_period_report(
    query: PeriodReportQuery = Depends(),
    format: ReportFormat = FormatQuery,
    records: List[SaleRecord] = Depends(get_sale_records),
):
    return respond(report_service.build_sales_by_period_report(records, query), format)


@router.get("/reports/sales-by-station", response_model=SummaryReport)
async def get_sales_by_station_report(
    query: StationSummaryQuery = Depends(),
    format: ReportFormat = FormatQuery,
    records: List[SaleRecord] = Depends(get_sale_records),
):
    return respond(report_service.build_sales_by_station_report(records, query), format)


@router.get("/reports/sales-by-buyer", response_model=SummaryReport)
async def get_sales_by_buyer_report(
    query: BuyerReportQuery = Depends(),
    format: ReportFormat = FormatQuery,
    records: List[SaleRecord] = Depends(get_sale_records),
):
    return respond(report_service.build_sales_by_buyer_report(records, query), format)


@router.get("/reports/farmer-statement", response_model=SummaryReport)
async def get_farmer_statement(
    query: FarmerStatementQuery = Depends(),
    format: ReportFormat = FormatQuery,
    records: List[SaleRecord] = Depends(get_sale_records),
):
    return respond(report_service.build_farmer_statement(records, query), format)


@router.get("/reports/filtered-inventory", response_model=FilteredInventoryReport)
async def get_filtered_inventory_report(
    filters: RecordFilters = Depends(),
    sort: SortConfig = Depends(get_sort_config),
    format: ReportFormat = FormatQuery,
    records: List[SaleRecord] = Depends(get_sale_records),
):
    return respond(report_service.build_filtered_inventory_report(records, filters, sort), format)


@router.get("/reports/comprehensive-schedule", response_model=ScheduleReport)
async def get_comprehensive_schedule_report(
    query: ScheduleQuery = Depends(),
    format: ReportFormat = FormatQuery,
    records: List[SaleRecord] = Depends(get_sale_records),
):
    return respond(report_service.build_comprehensive_schedule(records, query), format)


@router.get("/sales/comprehensive", response_model=List[ScheduleRow])
async def get_comprehensive_sales(
    query: ScheduleQuery = Depends(),
    records: List[SaleRecord] = Depends(get_sale_records),
):
    """Schedule rows for the on-screen table; an empty range means all records."""
    report = report_service.build_comprehensive_schedule(records, query, require_dates=False)
    return report.rows
