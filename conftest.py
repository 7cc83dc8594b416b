"""
Root conftest for the pytest test suite.

This file contains the main fixtures that are used across the entire test suite.

The service never stores data: every endpoint pulls its records from the
upstream tobacco management API through a FastAPI dependency. Tests swap
those dependencies for fixed in-memory payloads, so no network is touched.

Key Fixtures:
- `sale_record_payload` / `dispatch_record_payload`: raw upstream JSON items.
- `sample_records` / `dispatch_records`: the same items parsed into models.
- `app_for_testing`: the FastAPI application with record sources overridden.
- `client`: a TestClient for `app_for_testing`.
"""

import copy
from typing import Any, Generator, List

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tobacco_inventory.features.dispatch.client import get_dispatch_records
from tobacco_inventory.features.dispatch.schemas import DispatchRecord
from tobacco_inventory.features.sales.client import get_sale_records
from tobacco_inventory.features.sales.schemas import SaleRecord
from tobacco_inventory.main import app as actual_app

SALE_RECORDS = [
    {
        "_id": "a1", "barcodeId": "B001", "weight": "100", "farmerId": "F001", "stationId": "S1",
        "buyerId": "BY1", "registra": "John Moyo", "lotNumber": "L1", "grade": "A1", "price": "2.5",
        "tobaccoType": "Virginia", "date": "2025-01-15T08:30:00.000Z", "dispatchId": "D1",
        "dateFormated": "1/15/2025",
    },
    {
        "_id": "a2", "barcodeId": "B002", "weight": "200", "farmerId": "F002", "stationId": "S1",
        "buyerId": "BY2", "registra": "Mary Banda", "lotNumber": "L1", "grade": "A2", "price": "3.0",
        "tobaccoType": "Virginia", "date": "2025-01-15T09:00:00.000Z", "dispatchId": "",
        "dateFormated": "1/15/2025",
    },
    {
        "_id": "a3", "barcodeId": "B003", "weight": "150", "farmerId": "F001", "stationId": "S2",
        "buyerId": "BY1", "registra": "John Moyo", "lotNumber": "L2", "grade": "B1", "price": "2.0",
        "tobaccoType": "Burley", "date": "2025-02-03T10:00:00.000Z", "dispatchId": "D2",
        "dateFormated": "2/3/2025",
    },
    {
        # not priced yet
        "_id": "a4", "barcodeId": "B004", "weight": "120", "farmerId": "F003", "stationId": "S2",
        "buyerId": "BY3", "registra": "Peter Phiri", "lotNumber": "L3", "grade": "", "price": "",
        "tobaccoType": "Virginia", "date": "2025-02-10T11:00:00.000Z", "dispatchId": None,
        "dateFormated": "2/10/2025",
    },
    {
        "_id": "a5", "barcodeId": "B005", "weight": "80", "farmerId": "F002", "stationId": "S1",
        "buyerId": "BY1", "registra": "Mary Banda", "lotNumber": "L4", "grade": "C1", "price": "4.0",
        "tobaccoType": "Virginia", "date": "2025-03-01T12:00:00.000Z", "dispatchId": "",
        "dateFormated": "3/1/2025",
    },
]

DISPATCH_RECORDS = [
    {
        "_id": "d1", "barcodeId": "B001, B002", "driverName": "James Tembo",
        "destination": "Harare Floors", "dispatchbookNumber": "DB-100",
        "carRegistration": "ABC 1234", "driverLicence": "DL-77", "registra": "Station Clerk",
        "date": "2025-01-16T07:00:00.000Z",
    },
    {
        "_id": "d2", "barcodeId": "B005", "driverName": "Other Driver",
        "destination": "Harare Floors", "dispatchbookNumber": "DB-100",
        "carRegistration": "ABC 1234", "driverLicence": "DL-78", "registra": "Station Clerk",
        "date": "2025-03-02T07:00:00.000Z",
    },
    {
        "_id": "d3", "barcodeId": "B003", "driverName": "Grace Mwale",
        "destination": "Lilongwe Depot", "dispatchbookNumber": "DB-200",
        "carRegistration": "XYZ 987", "driverLicence": "DL-12", "registra": "Clerk Two",
        "date": "2025-02-04",
    },
]


@pytest.fixture
def sale_record_payload() -> List[dict]:
    """Sale records exactly as the upstream API serves them."""
    return copy.deepcopy(SALE_RECORDS)


@pytest.fixture
def dispatch_record_payload() -> List[dict]:
    return copy.deepcopy(DISPATCH_RECORDS)


@pytest.fixture
def sample_records(sale_record_payload) -> List[SaleRecord]:
    return [SaleRecord.model_validate(item) for item in sale_record_payload]


@pytest.fixture
def dispatch_records(dispatch_record_payload) -> List[DispatchRecord]:
    return [DispatchRecord.model_validate(item) for item in dispatch_record_payload]


@pytest.fixture(scope="function")
def app_for_testing(
    sample_records: List[SaleRecord], dispatch_records: List[DispatchRecord]
) -> Generator[FastAPI, Any, None]:
    """
    Provides the FastAPI application with both upstream record sources
    replaced by the sample data. Overrides are removed after the test.
    """
    actual_app.dependency_overrides[get_sale_records] = lambda: sample_records
    actual_app.dependency_overrides[get_dispatch_records] = lambda: dispatch_records

    yield actual_app

    actual_app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app_for_testing: FastAPI) -> Generator[TestClient, Any, None]:
    with TestClient(app_for_testing) as tc:
        yield tc
