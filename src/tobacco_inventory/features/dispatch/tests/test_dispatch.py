import datetime

import httpx
import pytest
from fastapi import HTTPException, status
from fastapi.testclient import TestClient

from ..client import fetch_dispatch_records
from ..document import dispatch_filename, format_dispatch_date, render_dispatch_pdf
from ..service import (
    build_dispatch_document,
    paginate_dispatch_records,
    search_dispatch_records,
    unique_book_numbers,
)

TODAY = datetime.date.today().isoformat()


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# --- Upstream payload shapes ---
@pytest.mark.asyncio
@pytest.mark.parametrize("wrap", [lambda items: items, lambda items: {"data": items},
                                  lambda items: {"message": items}, lambda items: {"records": items}])
async def test_fetch_dispatch_records_accepts_known_shapes(dispatch_record_payload, wrap):
    def handler(request):
        return httpx.Response(200, json=wrap(dispatch_record_payload))

    async with _mock_client(handler) as client:
        records = await fetch_dispatch_records(client)

    assert [r.dispatchbook_number for r in records] == ["DB-100", "DB-100", "DB-200"]
    assert records[0].barcodes == ["B001", "B002"]


@pytest.mark.asyncio
async def test_fetch_dispatch_records_empty_object():
    def handler(request):
        return httpx.Response(200, json={"status": "ok"})

    async with _mock_client(handler) as client:
        assert await fetch_dispatch_records(client) == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, expected_ids",
    [
        ({"data": {"unexpected": True}}, []),
        ({"message": "no dispatches today"}, []),
        ({"data": "x", "records": [{"_id": "r1", "dispatchbookNumber": "DB-9"}]}, ["r1"]),
    ],
)
async def test_fetch_dispatch_records_skips_non_list_wrappers(payload, expected_ids):
    def handler(request):
        return httpx.Response(200, json=payload)

    async with _mock_client(handler) as client:
        records = await fetch_dispatch_records(client)
    assert [record.id for record in records] == expected_ids


@pytest.mark.asyncio
async def test_fetch_dispatch_records_upstream_failure():
    def handler(request):
        return httpx.Response(503)

    async with _mock_client(handler) as client:
        with pytest.raises(HTTPException) as exc_info:
            await fetch_dispatch_records(client)

    assert exc_info.value.status_code == 502
    assert exc_info.value.detail == "Failed to load dispatch data: HTTP error! status: 503"


# --- Search and pagination ---
def test_search_matches_destination_case_insensitively(dispatch_records):
    assert [r.id for r in search_dispatch_records(dispatch_records, "harare")] == ["d1", "d2"]


@pytest.mark.parametrize("term, expected", [("xyz", ["d3"]), ("b005", ["d2"]), ("db-2", ["d3"]), ("tembo", ["d1"])])
def test_search_fields(dispatch_records, term, expected):
    assert [r.id for r in search_dispatch_records(dispatch_records, term)] == expected


def test_blank_search_keeps_all(dispatch_records):
    assert len(search_dispatch_records(dispatch_records, "  ")) == 3


def test_paginate_dispatch_records(dispatch_records):
    page = paginate_dispatch_records(dispatch_records, page=2, size=2)
    assert [r.id for r in page.items] == ["d3"]
    assert page.total_pages == 2


def test_unique_book_numbers(dispatch_records):
    assert unique_book_numbers(dispatch_records) == ["DB-100", "DB-200"]


# --- Document ---
def test_build_dispatch_document_merges_book(dispatch_records):
    document = build_dispatch_document(dispatch_records, " db-100 ")
    assert document.dispatchbook_number == "DB-100"
    assert document.driver_name == "James Tembo"
    assert document.driver_licence == "DL-77"
    assert document.barcodes == ["B001", "B002", "B005"]
    assert document.barcode_count == 3


def test_build_dispatch_document_is_exact_match(dispatch_records):
    with pytest.raises(HTTPException) as exc_info:
        build_dispatch_document(dispatch_records, "DB-1")
    assert exc_info.value.status_code == 404


def test_build_dispatch_document_blank_book(dispatch_records):
    with pytest.raises(HTTPException) as exc_info:
        build_dispatch_document(dispatch_records, "")
    assert exc_info.value.status_code == 400


def test_format_dispatch_date():
    assert format_dispatch_date("2025-01-16T07:00:00.000Z") == "16-01-25"
    assert format_dispatch_date("pending") == "pending"


def test_dispatch_filename(dispatch_records):
    document = build_dispatch_document(dispatch_records, "DB-100")
    assert dispatch_filename(document, datetime.date(2025, 1, 16)) == "Dispatch_DB-100_James_Tembo_2025-01-16.pdf"


def test_render_dispatch_pdf_with_many_barcodes(dispatch_records):
    document = build_dispatch_document(dispatch_records, "DB-100")
    document.barcodes = [f"BC{i:05d}" for i in range(150)]
    assert render_dispatch_pdf(document).startswith(b"%PDF")


# --- API ---
def test_list_dispatch_api(client: TestClient):
    response = client.get("/api/v1/dispatch", params={"search": "harare", "size": 1})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total"] == 2
    assert data["total_pages"] == 2
    assert data["items"][0]["dispatchbookNumber"] == "DB-100"


def test_dispatch_books_api(client: TestClient):
    response = client.get("/api/v1/dispatch/books")
    assert response.json() == ["DB-100", "DB-200"]


def test_dispatch_document_api(client: TestClient):
    response = client.get("/api/v1/dispatch/db-200/document")
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == f'attachment; filename="Dispatch_DB-200_Grace_Mwale_{TODAY}.pdf"'
    assert response.content.startswith(b"%PDF")


def test_dispatch_document_api_unknown_book(client: TestClient):
    response = client.get("/api/v1/dispatch/NOPE/document")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "No dispatch records found for book number: NOPE"
