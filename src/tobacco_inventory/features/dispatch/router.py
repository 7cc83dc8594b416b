import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from ...common.responses import attachment
from ...core import config
from . import service as dispatch_service
from .client import get_dispatch_records
from .document import dispatch_filename, render_dispatch_pdf
from .schemas import DispatchRecord, DispatchSearchQuery, PaginatedDispatchResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/dispatch",
    tags=["Dispatch"],
    responses={404: {"description": "Dispatch book not found"}},
)


@router.get("", response_model=PaginatedDispatchResponse)
async def list_dispatch_records(
    query: DispatchSearchQuery = Depends(),
    page: int = Query(1, ge=1),
    size: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    records: List[DispatchRecord] = Depends(get_dispatch_records),
):
    matching = dispatch_service.search_dispatch_records(records, query.search)
    return dispatch_service.paginate_dispatch_records(matching, page, size)


@router.get("/books", response_model=List[str])
async def list_dispatch_books(records: List[DispatchRecord] = Depends(get_dispatch_records)):
    """Known book numbers, in the order they first appear."""
    return dispatch_service.unique_book_numbers(records)


@router.get("/{book_number}/document")
async def get_dispatch_document(
    book_number: str,
    records: List[DispatchRecord] = Depends(get_dispatch_records),
):
    document = dispatch_service.build_dispatch_document(records, book_number)
    return attachment(render_dispatch_pdf(document), dispatch_filename(document), "application/pdf")
