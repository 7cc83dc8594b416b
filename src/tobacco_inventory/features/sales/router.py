import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...common.responses import attachment
from ...core import config
from ..reports.renderers import csv_filename, render_records_csv
from . import service as sales_service
from .client import get_sale_records
from .schemas import (
    FilterOptions,
    InventoryStats,
    PaginatedRecordsResponse,
    RecordFilters,
    SaleRecord,
    SortConfig,
    SortDirection,
    SortField,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/records",
    tags=["Sale Records"],
    responses={502: {"description": "Upstream API unavailable"}},
)


def get_sort_config(
    sort_by: Optional[SortField] = Query(None, description="Column to sort on"),
    sort_dir: SortDirection = Query("asc", description="asc or desc"),
    toggle: Optional[SortField] = Query(
        None, description="Column header clicked: flips the direction of the current key, or sorts a new key ascending"
    ),
) -> SortConfig:
    sort = SortConfig(key=sort_by, direction=sort_dir)
    if toggle is not None:
        sort = sort.toggled(toggle)
    return sort


@router.get("", response_model=PaginatedRecordsResponse)
async def list_records(
    filters: RecordFilters = Depends(),
    sort: SortConfig = Depends(get_sort_config),
    page: int = Query(1, ge=1),
    size: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    records: List[SaleRecord] = Depends(get_sale_records),
):
    """Filtered, sorted page of the sale records table."""
    return sales_service.query_records(records, filters, sort, page, size)


@router.get("/stats", response_model=InventoryStats)
async def get_records_stats(
    filters: RecordFilters = Depends(),
    records: List[SaleRecord] = Depends(get_sale_records),
):
    filtered = sales_service.filter_records(records, filters)
    return sales_service.compute_stats(records, filtered)


@router.get("/filter-options", response_model=FilterOptions)
async def get_filter_options(records: List[SaleRecord] = Depends(get_sale_records)):
    return sales_service.get_filter_options(records)


@router.get("/export.csv")
async def export_records_csv(
    filters: RecordFilters = Depends(),
    sort: SortConfig = Depends(get_sort_config),
    records: List[SaleRecord] = Depends(get_sale_records),
):
    """Every filtered record (not just one page) as a downloadable CSV."""
    selected = sales_service.sort_records(sales_service.filter_records(records, filters), sort)
    logger.info(f"Exporting {len(selected)} records to CSV")
    return attachment(render_records_csv(selected), csv_filename(), "text/csv; charset=utf-8")
