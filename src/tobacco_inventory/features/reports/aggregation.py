"""Group-by and accumulate helpers shared by every sales report."""

import datetime
import logging
from collections import OrderedDict
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ...common.parsing import in_date_range, parse_date
from ...core import config
from ..sales.schemas import SaleRecord
from .schemas import AverageMethod, GroupSummary, PeriodType, ReportTotals, ScheduleRow, ScheduleTotals

logger = logging.getLogger(__name__)

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

# (group key, display label) for a record
GroupKeyFn = Callable[[SaleRecord], Tuple[str, str]]


class _GroupAccumulator:
    def __init__(self, key: str, label: str):
        self.key = key
        self.label = label
        self.barcodes = set()
        self.total_weight = 0.0
        self.total_value = 0.0
        self.price_sum = 0.0
        self.price_count = 0
        self.buyers: Dict[str, None] = {}
        self.tobacco_types: Dict[str, None] = {}

    def add(self, record: SaleRecord) -> None:
        if record.barcode_id:
            self.barcodes.add(record.barcode_id)
        weight = record.weight_kg
        price = record.unit_price
        self.total_weight += weight
        self.total_value += price * weight
        self.price_sum += price
        self.price_count += 1
        # dicts keep first-seen order
        self.buyers[record.buyer_id] = None
        self.tobacco_types[record.tobacco_type] = None

    def summary(self, average: AverageMethod) -> GroupSummary:
        if average == AverageMethod.weighted:
            average_price = self.total_value / self.total_weight if self.total_weight > 0 else 0.0
        else:
            average_price = self.price_sum / self.price_count if self.price_count > 0 else 0.0
        return GroupSummary(
            key=self.key,
            label=self.label,
            bales=len(self.barcodes),
            total_weight=self.total_weight,
            total_value=self.total_value,
            average_price=round(average_price, 2),
            buyers=list(self.buyers),
            tobacco_types=list(self.tobacco_types),
        )


def select_priced_records(
    records: Iterable[SaleRecord],
    date_from: Optional[datetime.date],
    date_to: Optional[datetime.date],
    station_id: Optional[str] = None,
    tobacco_type: Optional[str] = None,
    farmer_id: Optional[str] = None,
    buyer_id: Optional[str] = None,
) -> List[SaleRecord]:
    """
    Records that summary reports are built from.

    A record qualifies when its price is above zero, its report date falls in
    the inclusive day range and it equals every optional criterion given.
    """
    selected = []
    for record in records:
        if not record.has_valid_price:
            continue
        if station_id and record.station_id != station_id:
            continue
        if tobacco_type and record.tobacco_type != tobacco_type:
            continue
        if farmer_id and record.farmer_id != farmer_id:
            continue
        if buyer_id and record.buyer_id != buyer_id:
            continue
        if not in_date_range(record.report_date, date_from, date_to):
            continue
        selected.append(record)
    return selected


def summarise(
    records: Iterable[SaleRecord],
    key_fn: GroupKeyFn,
    average: AverageMethod = AverageMethod.mean,
) -> List[GroupSummary]:
    """
    Groups records by ``key_fn`` and accumulates each group.

    Bales are distinct barcodes within a group. The first record seen in a
    group provides its display label. Groups come back in first-seen order;
    callers sort them for presentation.
    """
    groups: "OrderedDict[str, _GroupAccumulator]" = OrderedDict()
    for record in records:
        key, label = key_fn(record)
        if key not in groups:
            groups[key] = _GroupAccumulator(key, label)
        groups[key].add(record)
    return [group.summary(average) for group in groups.values()]


def compute_totals(rows: Sequence[GroupSummary], average: AverageMethod) -> ReportTotals:
    total_weight = sum(row.total_weight for row in rows)
    total_value = sum(row.total_value for row in rows)
    average_price = None
    if average == AverageMethod.weighted:
        average_price = round(total_value / total_weight, 2) if total_weight > 0 else 0.0
    return ReportTotals(
        bales=sum(row.bales for row in rows),
        total_weight=total_weight,
        total_value=total_value,
        average_price=average_price,
    )


# --- Group keys ---
def day_key(record: SaleRecord) -> Tuple[str, str]:
    day = parse_date(record.report_date)
    key = day.isoformat() if day else record.report_date
    return key, record.report_date


def period_key(period: PeriodType) -> GroupKeyFn:
    if period == PeriodType.daily:
        return day_key

    def _key(record: SaleRecord) -> Tuple[str, str]:
        day = parse_date(record.report_date)
        if day is None:
            return record.report_date, record.report_date
        if period == PeriodType.monthly:
            return f"{day.year}-{day.month:02d}", f"{MONTH_NAMES[day.month - 1]} {day.year}"
        return str(day.year), str(day.year)

    return _key


def station_key(record: SaleRecord) -> Tuple[str, str]:
    return record.station_id, record.station_id


def buyer_key(record: SaleRecord) -> Tuple[str, str]:
    return record.buyer_id, record.buyer_id


def farmer_key(record: SaleRecord) -> Tuple[str, str]:
    return record.farmer_id, record.farmer_id


# --- Comprehensive schedule ---
def aggregate_schedule(records: Iterable[SaleRecord]) -> List[ScheduleRow]:
    """
    One row per (sale day, farmer, station), ordered by sale day.

    Bales are counted per record here, not per distinct barcode. Commission
    and loans are fixed fractions of total sales taken from the settings.
    """
    groups: "OrderedDict[Tuple[datetime.date, str, str], dict]" = OrderedDict()
    for record in records:
        day = parse_date(record.date)
        if day is None:
            logger.warning(f"Skipping record {record.id or record.barcode_id} without a readable sale date")
            continue
        key = (day, record.farmer_id, record.station_id)
        group = groups.setdefault(
            key,
            {"farmer_name": record.registra, "bales": 0, "weight": 0.0, "sales": 0.0},
        )
        group["bales"] += 1
        group["weight"] += record.weight_kg
        group["sales"] += record.weight_kg * record.unit_price

    rows = []
    for (day, farmer_id, station_id), group in sorted(groups.items(), key=lambda item: item[0][0]):
        total_sales = round(group["sales"], 2)
        commission = round(config.COMMISSION_RATE * total_sales, 2)
        loans = round(config.LOAN_RATE * total_sales, 2)
        rows.append(
            ScheduleRow(
                sale_date=day.strftime("%m/%d/%Y"),
                farmer_id=farmer_id,
                farmer_name=group["farmer_name"],
                station=station_id,
                number_of_bales=group["bales"],
                total_weight=round(group["weight"], 2),
                total_sales=total_sales,
                total_commission=commission,
                total_loans=loans,
                net_pay=round(total_sales - commission - loans, 2),
            )
        )
    return rows


def schedule_totals(rows: Iterable[ScheduleRow]) -> ScheduleTotals:
    totals = ScheduleTotals()
    for row in rows:
        totals.number_of_bales += row.number_of_bales
        totals.total_weight += row.total_weight
        totals.total_sales += row.total_sales
        totals.total_commission += row.total_commission
        totals.total_loans += row.total_loans
        totals.net_pay += row.net_pay
    for field in ("total_weight", "total_sales", "total_commission", "total_loans", "net_pay"):
        setattr(totals, field, round(getattr(totals, field), 2))
    return totals
