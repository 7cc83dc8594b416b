"""
Sales records service.

Holds the in-memory record pipeline behind the dashboard table: filter,
sort, paginate, plus the distinct values and headline statistics shown next
to it. Everything here works on a list of already fetched records; the
fetch itself lives in ``client.py``.
"""

import datetime
import logging
import math
from typing import Iterable, List, Optional, Sequence

from ...common.parsing import in_date_range, parse_date, parse_number
from .schemas import (
    FilterOptions,
    InventoryStats,
    PaginatedRecordsResponse,
    RecordFilters,
    SaleRecord,
    SortConfig,
    SortField,
)

logger = logging.getLogger(__name__)

NUMERIC_SORT_FIELDS = {SortField.weight, SortField.price}
DATE_SORT_FIELDS = {SortField.date, SortField.date_formated}


def _contains(value: str, needle: Optional[str]) -> bool:
    return not needle or needle.lower() in value.lower()


def _equals(value: str, expected: Optional[str]) -> bool:
    return not expected or value == expected


def _matches_search(record: SaleRecord, search: Optional[str]) -> bool:
    if not search:
        return True
    needle = search.lower()
    return any(value and needle in str(value).lower() for value in record.model_dump().values())


def matches_filters(record: SaleRecord, filters: RecordFilters) -> bool:
    """True when the record satisfies every criterion set on ``filters``."""
    return (
        _contains(record.farmer_id, filters.farmer_id)
        and _contains(record.buyer_id, filters.buyer_id)
        and _contains(record.registra, filters.registra)
        and _equals(record.tobacco_type, filters.tobacco_type)
        and _equals(record.station_id, filters.station_id)
        and _matches_search(record, filters.search)
        and in_date_range(record.date, filters.date_from, filters.date_to)
    )


def filter_records(records: Iterable[SaleRecord], filters: RecordFilters) -> List[SaleRecord]:
    filtered = [record for record in records if matches_filters(record, filters)]
    logger.debug(f"Filter {filters.model_dump(exclude_none=True)} kept {len(filtered)} records")
    return filtered


def _sort_value(record: SaleRecord, key: SortField):
    raw = getattr(record, key.value)
    if key in NUMERIC_SORT_FIELDS:
        return parse_number(raw)
    if key in DATE_SORT_FIELDS:
        day = parse_date(raw)
        # Unreadable dates sort after every real date
        return (day is None, day or datetime.date.min, raw)
    return raw


def sort_records(records: Sequence[SaleRecord], sort: SortConfig) -> List[SaleRecord]:
    """
    Sorts records on a single key.

    The sort is stable in both directions, so rows with equal keys keep their
    incoming order. Without a key the records are returned unchanged.
    """
    if sort.key is None:
        return list(records)
    return sorted(
        records,
        key=lambda record: _sort_value(record, sort.key),
        reverse=sort.direction == "desc",
    )


def paginate_records(records: Sequence[SaleRecord], page: int, size: int) -> PaginatedRecordsResponse:
    """Slices out a 1-based page. Pages past the end come back empty."""
    if page < 1 or size < 1:
        raise ValueError("page and size must be positive")
    offset = (page - 1) * size
    total = len(records)
    return PaginatedRecordsResponse(
        items=list(records[offset:offset + size]),
        total=total,
        page=page,
        size=size,
        total_pages=math.ceil(total / size),
    )


def query_records(
    records: Sequence[SaleRecord],
    filters: RecordFilters,
    sort: SortConfig,
    page: int,
    size: int,
) -> PaginatedRecordsResponse:
    """Runs the full table pipeline: filter, then sort, then paginate."""
    return paginate_records(sort_records(filter_records(records, filters), sort), page, size)


def unique_values(records: Iterable[SaleRecord], field: str) -> List[str]:
    """Distinct non-empty values of ``field``, sorted."""
    return sorted({getattr(record, field) for record in records if getattr(record, field)})


def get_filter_options(records: Sequence[SaleRecord]) -> FilterOptions:
    return FilterOptions(
        farmer_ids=unique_values(records, "farmer_id"),
        buyer_ids=unique_values(records, "buyer_id"),
        tobacco_types=unique_values(records, "tobacco_type"),
        station_ids=unique_values(records, "station_id"),
        registras=unique_values(records, "registra"),
    )


def compute_stats(records: Sequence[SaleRecord], filtered: Sequence[SaleRecord]) -> InventoryStats:
    """
    Headline figures for the dashboard.

    ``records_with_price`` counts the whole data set, the remaining figures
    describe the filtered set. Weight and value only include priced bales.
    """
    priced = [record for record in filtered if record.has_valid_price]
    total_weight = sum(record.weight_kg for record in priced)
    total_value = sum(record.usd_value for record in priced)
    return InventoryStats(
        total_records=len(records),
        filtered_records=len(filtered),
        unique_farmers=len({record.farmer_id for record in filtered}),
        records_with_price=sum(1 for record in records if record.has_valid_price),
        total_weight=round(total_weight, 2),
        total_value=round(total_value, 2),
        average_price=round(total_value / total_weight, 2) if total_weight > 0 else 0.0,
    )
