"""Sales Report Schemas

This module defines the Pydantic models used by the reporting endpoints:

1. Query models for each report (date range, station, buyer, period,
   farmer statement and comprehensive schedule filters)
2. Aggregated results returned as JSON (group summaries, totals,
   schedule rows, filtered inventory)
3. ``PrintableReport``, the layout-neutral document handed to the PDF and
   HTML renderers

Dates are plain calendar days; every range is inclusive on both ends."""
from enum import Enum
from typing import Dict, List, Literal, Optional
import datetime

from pydantic import BaseModel, Field

from ..sales.schemas import SaleRecord


class ReportFormat(str, Enum):
    json = "json"
    pdf = "pdf"
    html = "html"


class PeriodType(str, Enum):
    daily = "daily"
    monthly = "monthly"
    yearly = "yearly"


class AverageMethod(str, Enum):
    mean = "mean"          # mean of the bale prices
    weighted = "weighted"  # total value / total weight


# --- Query models ---
class DateRangeReportQuery(BaseModel):
    date_from: Optional[datetime.date] = Field(None, description="Start date for the report period (YYYY-MM-DD)")
    date_to: Optional[datetime.date] = Field(None, description="End date for the report period (YYYY-MM-DD)")
    station_id: Optional[str] = Field(None, description="Restrict to one station")
    tobacco_type: Optional[str] = Field(None, description="Restrict to one tobacco type")


class PeriodReportQuery(DateRangeReportQuery):
    report_type: Optional[PeriodType] = Field(PeriodType.daily, description="Grouping period")


class StationSummaryQuery(BaseModel):
    date_from: Optional[datetime.date] = None
    date_to: Optional[datetime.date] = None
    tobacco_type: Optional[str] = None


class BuyerReportQuery(BaseModel):
    station_id: Optional[str] = Field(None, description="Station whose buyers are summarised")
    date_from: Optional[datetime.date] = None
    date_to: Optional[datetime.date] = None
    tobacco_type: Optional[str] = None


class FarmerStatementQuery(BaseModel):
    date_from: Optional[datetime.date] = Field(None, description="Statement day, or first day of the range")
    date_to: Optional[datetime.date] = Field(None, description="Last day of the range, defaults to date_from")
    farmer_id: Optional[str] = None
    buyer_id: Optional[str] = None
    station_id: Optional[str] = None
    tobacco_type: Optional[str] = None


class ScheduleQuery(BaseModel):
    date_from: Optional[datetime.date] = None
    date_to: Optional[datetime.date] = None
    station_id: Optional[str] = None


# --- Aggregated results ---
class GroupSummary(BaseModel):
    key: str
    label: str
    bales: int = Field(..., description="Distinct barcodes in the group")
    total_weight: float
    total_value: float
    average_price: float
    buyers: List[str] = []
    tobacco_types: List[str] = []


class ReportTotals(BaseModel):
    bales: int
    total_weight: float
    total_value: float
    average_price: Optional[float] = Field(None, description="Only set for weighted averages")


class SummaryReport(BaseModel):
    title: str
    filename_stem: str
    layout: Literal["standard", "buyer"] = "standard"
    info: Dict[str, str]
    note: str
    group_header: str
    average_header: str
    average_method: AverageMethod
    rows: List[GroupSummary]
    totals: ReportTotals
    generated_at: datetime.datetime


class ScheduleRow(BaseModel):
    sale_date: str = Field(..., description="MM/DD/YYYY")
    farmer_id: str
    farmer_name: str
    station: str
    number_of_bales: int
    total_weight: float
    total_sales: float
    total_commission: float
    total_loans: float
    net_pay: float


class ScheduleTotals(BaseModel):
    number_of_bales: int = 0
    total_weight: float = 0.0
    total_sales: float = 0.0
    total_commission: float = 0.0
    total_loans: float = 0.0
    net_pay: float = 0.0


class ScheduleReport(BaseModel):
    title: str = "Sales Comprehensive Schedule"
    filename_stem: str
    info: Dict[str, str]
    rows: List[ScheduleRow]
    totals: ScheduleTotals
    generated_at: datetime.datetime


class FilteredInventoryReport(BaseModel):
    title: str = "Filtered Inventory Report"
    filename_stem: str
    info: Dict[str, str]
    records: List[SaleRecord]
    unique_barcodes: int
    total_weight: float
    total_usd_value: float
    generated_at: datetime.datetime


# --- Printable document ---
Alignment = Literal["L", "C", "R"]


class PrintableReport(BaseModel):
    """Everything a renderer needs, already formatted as text."""

    title: str
    filename_stem: str
    info: Dict[str, str]
    note: Optional[str] = None
    headers: List[str]
    rows: List[List[str]]
    totals: Optional[List[str]] = None
    column_widths: List[float]
    alignments: List[Alignment]
    landscape: bool = False
