"""
Reports Service Module

This module builds the sales reports of the dashboard from an in-memory list
of sale records: summaries by date, period, station, buyer and farmer, the
filtered inventory listing and the comprehensive sales schedule. Each
builder validates its filters, aggregates, and returns a JSON-ready model;
``to_document`` turns any of them into a ``PrintableReport`` for the PDF and
HTML renderers.
"""

import datetime
import logging
from typing import List, Optional, Sequence, Union

from fastapi import HTTPException, status

from ...common.parsing import (
    format_amount,
    format_display_date,
    format_grouped,
    format_timestamp,
    in_date_range,
)
from ..sales.schemas import RecordFilters, SaleRecord, SortConfig
from ..sales.service import filter_records, sort_records
from .aggregation import (
    aggregate_schedule,
    buyer_key,
    compute_totals,
    day_key,
    farmer_key,
    period_key,
    schedule_totals,
    select_priced_records,
    station_key,
    summarise,
)
from .schemas import (
    AverageMethod,
    BuyerReportQuery,
    DateRangeReportQuery,
    FarmerStatementQuery,
    FilteredInventoryReport,
    PeriodReportQuery,
    PeriodType,
    PrintableReport,
    ScheduleQuery,
    ScheduleReport,
    StationSummaryQuery,
    SummaryReport,
)

logger = logging.getLogger(__name__)

NO_RECORDS = "No records found for the selected criteria."
MISSING_DATES = "Please select both start and end dates."
PRICED_ONLY_NOTE = "Note: Only records with valid prices (> $0) are included in this summary"
WEIGHTED_AVERAGE_NOTE = "Average Price = Total Value ÷ Total Weight"
EM_DASH = "—"

AnyReport = Union[SummaryReport, FilteredInventoryReport, ScheduleReport]


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _not_found(detail: str = NO_RECORDS) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def _period_text(date_from: datetime.date, date_to: datetime.date) -> str:
    return f"{format_display_date(date_from)} to {format_display_date(date_to)}"


def _today() -> str:
    return datetime.date.today().isoformat()


def _summary_report(
    selected: List[SaleRecord],
    *,
    key_fn,
    average: AverageMethod,
    sort_key,
    reverse: bool = False,
    **fields,
) -> SummaryReport:
    rows = sorted(summarise(selected, key_fn, average), key=sort_key, reverse=reverse)
    logger.info(f"Built '{fields['title']}' from {len(selected)} records in {len(rows)} groups")
    return SummaryReport(
        average_method=average,
        rows=rows,
        totals=compute_totals(rows, average),
        generated_at=datetime.datetime.now(),
        **fields,
    )


def build_sales_by_date_report(
    records: Sequence[SaleRecord], query: DateRangeReportQuery
) -> SummaryReport:
    """
    Sales summary grouped by sale day.

    Args:
        records: All fetched sale records.
        query: Required date range, optional station and tobacco type.

    Returns:
        SummaryReport with one row per day in chronological order; the
        average column is the mean bale price.
    """
    if not query.date_from or not query.date_to:
        raise _bad_request(MISSING_DATES)
    selected = select_priced_records(
        records, query.date_from, query.date_to,
        station_id=query.station_id, tobacco_type=query.tobacco_type,
    )
    if not selected:
        raise _not_found()
    return _summary_report(
        selected,
        key_fn=day_key,
        average=AverageMethod.mean,
        sort_key=lambda row: row.key,
        title="Sales Summary by Date Range",
        filename_stem=f"Sales_Summary_By_Date_{_today()}",
        info={
            "Period": _period_text(query.date_from, query.date_to),
            "Station": query.station_id or "ALL STATIONS",
            "Tobacco Type": query.tobacco_type or "ALL TYPES",
            "Generated": format_timestamp(datetime.datetime.now()),
        },
        note=PRICED_ONLY_NOTE,
        group_header="Date",
        average_header="Avg. Price ($)",
    )


def build_sales_by_period_report(
    records: Sequence[SaleRecord], query: PeriodReportQuery
) -> SummaryReport:
    """Sales summary grouped per day, month (``Jan 2025``) or year."""
    if not query.date_from or not query.date_to or not query.report_type:
        raise _bad_request("Please select date range and report type.")
    selected = select_priced_records(
        records, query.date_from, query.date_to,
        station_id=query.station_id, tobacco_type=query.tobacco_type,
    )
    if not selected:
        raise _not_found()

    period = query.report_type
    grouping = period.value.capitalize()
    group_header = {PeriodType.daily: "Date", PeriodType.monthly: "Month", PeriodType.yearly: "Year"}[period]
    return _summary_report(
        selected,
        key_fn=period_key(period),
        average=AverageMethod.mean,
        sort_key=lambda row: row.key,
        title=f"Sales Summary - {grouping} Report",
        filename_stem=f"Sales_Summary_{period.value}_{_today()}",
        info={
            "Period": _period_text(query.date_from, query.date_to),
            "Grouping": grouping,
            "Station": query.station_id or "ALL STATIONS",
            "Tobacco Type": query.tobacco_type or "ALL TYPES",
            "Generated": format_timestamp(datetime.datetime.now()),
        },
        note=PRICED_ONLY_NOTE,
        group_header=group_header,
        average_header="Avg. Price ($)",
    )


def build_sales_by_station_report(
    records: Sequence[SaleRecord], query: StationSummaryQuery
) -> SummaryReport:
    """Sales summary per station, sorted by station ID, with weighted average prices."""
    if not query.date_from or not query.date_to:
        raise _bad_request(MISSING_DATES)
    selected = select_priced_records(
        records, query.date_from, query.date_to, tobacco_type=query.tobacco_type
    )
    if not selected:
        raise _not_found()
    return _summary_report(
        selected,
        key_fn=station_key,
        average=AverageMethod.weighted,
        sort_key=lambda row: row.key,
        title="Sales Summary by Station",
        filename_stem=f"Sales_Summary_By_Station_{_today()}",
        info={
            "Period": _period_text(query.date_from, query.date_to),
            "Tobacco Type": query.tobacco_type or "ALL TYPES",
            "Generated": format_timestamp(datetime.datetime.now()),
        },
        note=f"Note: Only records with valid prices (> $0) are included. {WEIGHTED_AVERAGE_NOTE}",
        group_header="Station ID",
        average_header="Avg. Price ($/kg)",
    )


def build_sales_by_buyer_report(
    records: Sequence[SaleRecord], query: BuyerReportQuery
) -> SummaryReport:
    """
    Buyer breakdown for a single station.

    Buyers are sorted by total value, highest first, and the average price
    is total value over total weight.
    """
    if not query.station_id or not query.date_from or not query.date_to:
        raise _bad_request("Please select station ID and date range.")
    selected = select_priced_records(
        records, query.date_from, query.date_to,
        station_id=query.station_id, tobacco_type=query.tobacco_type,
    )
    if not selected:
        raise _not_found("No records found for the selected station and date range.")

    tobacco_types = list(dict.fromkeys(record.tobacco_type for record in selected))
    return _summary_report(
        selected,
        key_fn=buyer_key,
        average=AverageMethod.weighted,
        sort_key=lambda row: row.total_value,
        reverse=True,
        title="Sales Summary by Buyer",
        filename_stem=f"Station_{query.station_id}_Buyer_Report_{_today()}",
        layout="buyer",
        info={
            "Station ID": query.station_id,
            "Tobacco Type": ", ".join(t for t in tobacco_types if t) or "ALL TYPES",
            "Date (From - To)": f"{format_display_date(query.date_from)} - {format_display_date(query.date_to)}",
            "Generated": format_timestamp(datetime.datetime.now()),
        },
        note=f"Note: {WEIGHTED_AVERAGE_NOTE}",
        group_header="Buyer",
        average_header="Avg. Price ($/kg)",
    )


def build_farmer_statement(
    records: Sequence[SaleRecord], query: FarmerStatementQuery
) -> SummaryReport:
    """
    Farmers detailed statement.

    Built for a single day by default: when ``date_to`` is missing it takes
    the value of ``date_from``.
    """
    if not query.date_from:
        raise _bad_request("Please select a date.")
    date_to = query.date_to or query.date_from
    selected = select_priced_records(
        records, query.date_from, date_to,
        station_id=query.station_id, tobacco_type=query.tobacco_type,
        farmer_id=query.farmer_id, buyer_id=query.buyer_id,
    )
    if not selected:
        raise _not_found()
    return _summary_report(
        selected,
        key_fn=farmer_key,
        average=AverageMethod.mean,
        sort_key=lambda row: row.key,
        title="Farmers Detailed Statement",
        filename_stem=f"Farmers_Detailed_Statement_{_today()}",
        info={
            "Period": _period_text(query.date_from, date_to),
            "Farmer ID": query.farmer_id or "ALL FARMERS",
            "Buyer ID": query.buyer_id or "ALL BUYERS",
            "Station": query.station_id or "ALL STATIONS",
            "Tobacco Type": query.tobacco_type or "ALL TYPES",
            "Generated": format_timestamp(datetime.datetime.now()),
        },
        note="Note: Only records with valid prices (> $0) are included in this detailed statement",
        group_header="Farmer ID",
        average_header="Avg. Price ($)",
    )


def build_filtered_inventory_report(
    records: Sequence[SaleRecord], filters: RecordFilters, sort: Optional[SortConfig] = None
) -> FilteredInventoryReport:
    """Row-per-bale listing of the records currently shown in the table."""
    selected = filter_records(records, filters)
    if sort is not None:
        selected = sort_records(selected, sort)
    if not selected:
        raise _not_found("No data available to export.")

    info = {}
    if filters.date_from and filters.date_to:
        info["Period"] = _period_text(filters.date_from, filters.date_to)
    elif filters.date_from:
        info["Date From"] = format_display_date(filters.date_from)
    elif filters.date_to:
        info["Date To"] = format_display_date(filters.date_to)
    info["Farmer ID"] = filters.farmer_id or "ALL FARMERS"
    info["Buyer ID"] = filters.buyer_id or "ALL BUYERS"
    if filters.registra:
        info["Registrar"] = filters.registra
    info["Station ID"] = filters.station_id or "ALL STATIONS"
    info["Tobacco Type"] = filters.tobacco_type or "ALL TYPES"
    if filters.search:
        info["Search Filter"] = filters.search
    info["Total Records"] = str(len(selected))
    info["Generated"] = format_timestamp(datetime.datetime.now())

    stem = "Filtered_Inventory_Report"
    if filters.station_id:
        stem += f"_Station_{filters.station_id}"
    if filters.buyer_id:
        stem += f"_Buyer_{filters.buyer_id}"
    if filters.farmer_id:
        stem += f"_Farmer_{filters.farmer_id}"
    if filters.date_from:
        stem += f"_From_{filters.date_from.isoformat()}"
    stem += f"_{_today()}"

    total_usd = sum(
        record.usd_value for record in selected
        if record.unit_price > 0 and record.weight_kg > 0
    )
    return FilteredInventoryReport(
        filename_stem=stem,
        info=info,
        records=selected,
        unique_barcodes=len({record.barcode_id for record in selected if record.barcode_id}),
        total_weight=sum(record.weight_kg for record in selected),
        total_usd_value=total_usd,
        generated_at=datetime.datetime.now(),
    )


def build_comprehensive_schedule(
    records: Sequence[SaleRecord], query: ScheduleQuery, require_dates: bool = True
) -> ScheduleReport:
    """
    Per farmer, per station, per day sales schedule with deductions.

    The on-screen schedule may be unbounded; exports (``require_dates``)
    need both ends of the date range.
    """
    if require_dates and (not query.date_from or not query.date_to):
        raise _bad_request(MISSING_DATES)

    selected = [
        record for record in records
        if (not query.station_id or record.station_id == query.station_id)
        and in_date_range(record.date, query.date_from, query.date_to)
    ]
    rows = aggregate_schedule(selected)
    if require_dates and not rows:
        raise _not_found()

    info = {}
    if query.date_from and query.date_to:
        info["Period"] = _period_text(query.date_from, query.date_to)
    info["Station"] = query.station_id or "ALL STATIONS"
    info["Generated"] = format_timestamp(datetime.datetime.now())
    return ScheduleReport(
        filename_stem=f"Sales_Comprehensive_Schedule_{_today()}",
        info=info,
        rows=rows,
        totals=schedule_totals(rows),
        generated_at=datetime.datetime.now(),
    )


# --- Printable documents ---
def _default_alignments(count: int):
    return ["L", "C"] + ["R"] * (count - 2)


def summary_document(report: SummaryReport) -> PrintableReport:
    totals = report.totals
    if report.layout == "buyer":
        rows = [
            [row.label, EM_DASH, str(row.bales), format_grouped(row.total_weight),
             format_amount(row.average_price), format_grouped(row.total_value)]
            for row in report.rows
        ]
        total_row = [
            "TOTAL", EM_DASH, str(totals.bales), format_grouped(totals.total_weight),
            format_amount(totals.average_price or 0.0), format_grouped(totals.total_value),
        ]
        headers = [report.group_header, "Company", "No. of Bales", "Weight (kg)",
                   report.average_header, "Total Amount ($)"]
        widths = [25, 25, 25, 30, 30, 35]
    else:
        rows = [
            [row.label, str(row.bales), format_amount(row.total_weight),
             format_amount(row.average_price), format_amount(row.total_value)]
            for row in report.rows
        ]
        total_average = EM_DASH if totals.average_price is None else format_amount(totals.average_price)
        total_row = [
            "GRAND TOTAL", str(totals.bales), format_amount(totals.total_weight),
            total_average, format_amount(totals.total_value),
        ]
        headers = [report.group_header, "No. of Bales", "Weight (kg)",
                   report.average_header, "Total Value ($)"]
        widths = [40, 30, 30, 30, 40]

    return PrintableReport(
        title=report.title,
        filename_stem=report.filename_stem,
        info=report.info,
        note=report.note,
        headers=headers,
        rows=rows,
        totals=total_row,
        column_widths=widths,
        alignments=_default_alignments(len(headers)),
    )


def filtered_inventory_document(report: FilteredInventoryReport) -> PrintableReport:
    rows = []
    for record in report.records:
        price = record.unit_price
        weight = record.weight_kg
        usd_value = format_amount(price * weight) if price > 0 and weight > 0 else "0.00"
        rows.append([
            record.barcode_id or "-",
            record.farmer_id or "-",
            record.station_id or "-",
            record.buyer_id or "-",
            format_amount(weight),
            format_amount(price),
            usd_value,
        ])
    return PrintableReport(
        title=report.title,
        filename_stem=report.filename_stem,
        info=report.info,
        note="Note: This report shows all filtered inventory records with detailed breakdown",
        headers=["Barcode ID", "Farmer ID", "Station ID", "Buyer ID",
                 "Weight (kg)", "Price ($)", "Total Value ($)"],
        rows=rows,
        totals=[
            "GRAND TOTAL", f"{report.unique_barcodes} Barcodes", EM_DASH, EM_DASH,
            format_amount(report.total_weight), EM_DASH, format_amount(report.total_usd_value),
        ],
        column_widths=[30, 25, 25, 25, 25, 25, 25],
        alignments=["L", "L", "L", "L", "R", "R", "R"],
    )


def schedule_document(report: ScheduleReport) -> PrintableReport:
    rows = [
        [row.sale_date, row.farmer_id, row.farmer_name, row.station, str(row.number_of_bales),
         format_amount(row.total_weight), format_amount(row.total_sales),
         format_amount(row.total_commission), format_amount(row.total_loans),
         format_amount(row.net_pay)]
        for row in report.rows
    ]
    totals = report.totals
    return PrintableReport(
        title=report.title,
        filename_stem=report.filename_stem,
        info=report.info,
        note="Note: This schedule is based on aggregated sales data.",
        headers=["Sale Date", "Farmer ID", "Farmer Name", "Station", "Bales",
                 "Total Weight (kg)", "Total Sales ($)", "Commission ($)", "Loans ($)", "Net Pay ($)"],
        rows=rows,
        totals=[
            "GRAND TOTAL", "", "", "", str(totals.number_of_bales),
            format_amount(totals.total_weight), format_amount(totals.total_sales),
            format_amount(totals.total_commission), format_amount(totals.total_loans),
            format_amount(totals.net_pay),
        ],
        column_widths=[25, 20, 35, 25, 15, 25, 25, 25, 20, 25],
        alignments=["L", "L", "L", "L", "C", "R", "R", "R", "R", "R"],
        landscape=True,
    )


def to_document(report: AnyReport) -> PrintableReport:
    if isinstance(report, SummaryReport):
        return summary_document(report)
    if isinstance(report, FilteredInventoryReport):
        return filtered_inventory_document(report)
    return schedule_document(report)
