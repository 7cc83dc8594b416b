"""
Dispatch Service Module

Search, pagination and document assembly for dispatch books. A book may be
stored as several dispatch records; the document merges them.
"""

import logging
import math
from typing import Iterable, List, Sequence

from fastapi import HTTPException, status

from .schemas import DispatchDocument, DispatchRecord, PaginatedDispatchResponse

logger = logging.getLogger(__name__)

SEARCHABLE_FIELDS = ("dispatchbook_number", "driver_name", "destination", "car_registration", "barcode_id")


def search_dispatch_records(records: Iterable[DispatchRecord], search: str) -> List[DispatchRecord]:
    """Case-insensitive substring match over the searchable fields. Blank search keeps everything."""
    needle = search.strip().lower()
    if not needle:
        return list(records)
    return [
        record for record in records
        if any(needle in getattr(record, field).lower() for field in SEARCHABLE_FIELDS)
    ]


def paginate_dispatch_records(
    records: Sequence[DispatchRecord], page: int, size: int
) -> PaginatedDispatchResponse:
    if page < 1 or size < 1:
        raise ValueError("page and size must be positive")
    offset = (page - 1) * size
    return PaginatedDispatchResponse(
        items=list(records[offset:offset + size]),
        total=len(records),
        page=page,
        size=size,
        total_pages=math.ceil(len(records) / size),
    )


def unique_book_numbers(records: Iterable[DispatchRecord]) -> List[str]:
    return list(dict.fromkeys(r.dispatchbook_number for r in records if r.dispatchbook_number))


def build_dispatch_document(records: Iterable[DispatchRecord], book_number: str) -> DispatchDocument:
    """
    Merges every record of a dispatch book into one document.

    The book number is matched exactly, ignoring case and surrounding
    whitespace. Header fields come from the first matching record; the
    barcodes of all matching records are kept in order.

    Raises:
        HTTPException: 400 for a blank book number, 404 when no record matches.
    """
    wanted = book_number.strip().lower()
    if not wanted:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please enter a dispatch book number.",
        )
    matching = [r for r in records if r.dispatchbook_number.strip().lower() == wanted]
    if not matching:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No dispatch records found for book number: {book_number.strip()}",
        )

    first = matching[0]
    barcodes = [barcode for record in matching for barcode in record.barcodes]
    logger.info(f"Dispatch book {first.dispatchbook_number}: {len(matching)} records, {len(barcodes)} barcodes")
    return DispatchDocument(
        dispatchbook_number=first.dispatchbook_number,
        driver_name=first.driver_name,
        driver_licence=first.driver_licence,
        destination=first.destination,
        car_registration=first.car_registration,
        date=first.date,
        registra=first.registra,
        barcodes=barcodes,
    )
