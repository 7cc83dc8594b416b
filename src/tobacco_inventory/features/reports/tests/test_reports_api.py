import datetime

from fastapi import FastAPI, status
from fastapi.testclient import TestClient

from ...sales.client import get_sale_records
from ...sales.schemas import SaleRecord

TODAY = datetime.date.today().isoformat()
Q1 = {"date_from": "2025-01-01", "date_to": "2025-03-31"}


def test_sales_by_date_json(client: TestClient):
    response = client.get("/api/v1/reports/sales-by-date", params=Q1)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["title"] == "Sales Summary by Date Range"
    assert len(data["rows"]) == 3
    assert data["totals"]["bales"] == 4


def test_sales_by_date_pdf_download(client: TestClient):
    response = client.get("/api/v1/reports/sales-by-date", params={**Q1, "format": "pdf"})
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == f'attachment; filename="Sales_Summary_By_Date_{TODAY}.pdf"'
    assert response.content.startswith(b"%PDF")


def test_sales_by_station_html_download(client: TestClient):
    response = client.get("/api/v1/reports/sales-by-station", params={**Q1, "format": "html"})
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("text/html")
    assert f'filename="Sales_Summary_By_Station_{TODAY}.html"' in response.headers["content-disposition"]
    assert "window.print()" in response.text


def test_sales_by_period(client: TestClient):
    response = client.get("/api/v1/reports/sales-by-period", params={**Q1, "report_type": "monthly"})
    assert response.status_code == status.HTTP_200_OK
    assert [row["label"] for row in response.json()["rows"]] == ["Jan 2025", "Feb 2025", "Mar 2025"]


def test_sales_by_buyer_missing_station(client: TestClient):
    response = client.get("/api/v1/reports/sales-by-buyer", params=Q1)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Please select station ID and date range."


def test_sales_by_buyer_pdf(client: TestClient):
    response = client.get("/api/v1/reports/sales-by-buyer", params={**Q1, "station_id": "S1", "format": "pdf"})
    assert response.status_code == status.HTTP_200_OK
    assert f'filename="Station_S1_Buyer_Report_{TODAY}.pdf"' in response.headers["content-disposition"]


def test_buyer_report_download_for_non_latin_station(app_for_testing: FastAPI, client: TestClient):
    app_for_testing.dependency_overrides[get_sale_records] = lambda: [
        SaleRecord(barcode_id="P1", station_id="Łódź", buyer_id="BY1", weight="10", price="2", date="2025-01-10"),
    ]
    params = {"station_id": "Łódź", "date_from": "2025-01-01", "date_to": "2025-01-31"}

    response = client.get("/api/v1/reports/sales-by-buyer", params={**params, "format": "pdf"})
    assert response.status_code == status.HTTP_200_OK
    disposition = response.headers["content-disposition"]
    assert f'filename="Station___d__Buyer_Report_{TODAY}.pdf"' in disposition
    assert f"filename*=UTF-8''Station_%C5%81%C3%B3d%C5%BA_Buyer_Report_{TODAY}.pdf" in disposition
    assert response.content.startswith(b"%PDF")

    response = client.get("/api/v1/reports/sales-by-buyer", params={**params, "format": "html"})
    assert response.status_code == status.HTTP_200_OK
    assert "Łódź" in response.text


def test_report_missing_dates(client: TestClient):
    response = client.get("/api/v1/reports/sales-by-date")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Please select both start and end dates."


def test_report_without_matching_records(client: TestClient):
    response = client.get("/api/v1/reports/sales-by-date", params={"date_from": "2020-01-01", "date_to": "2020-01-31"})
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "No records found for the selected criteria."


def test_report_rejects_unknown_format(client: TestClient):
    response = client.get("/api/v1/reports/sales-by-date", params={**Q1, "format": "docx"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_farmer_statement(client: TestClient):
    response = client.get("/api/v1/reports/farmer-statement", params={"date_from": "2025-01-15"})
    assert response.status_code == status.HTTP_200_OK
    assert [row["key"] for row in response.json()["rows"]] == ["F001", "F002"]


def test_filtered_inventory_pdf(client: TestClient):
    response = client.get(
        "/api/v1/reports/filtered-inventory",
        params={"station_id": "S1", "buyer_id": "BY1", "format": "pdf"},
    )
    assert response.status_code == status.HTTP_200_OK
    expected = f"Filtered_Inventory_Report_Station_S1_Buyer_BY1_{TODAY}.pdf"
    assert f'filename="{expected}"' in response.headers["content-disposition"]


def test_filtered_inventory_json_keeps_record_aliases(client: TestClient):
    response = client.get("/api/v1/reports/filtered-inventory", params={"farmer_id": "F003"})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["records"][0]["barcodeId"] == "B004"
    assert data["unique_barcodes"] == 1


def test_comprehensive_schedule_pdf(client: TestClient):
    response = client.get("/api/v1/reports/comprehensive-schedule", params={**Q1, "format": "pdf"})
    assert response.status_code == status.HTTP_200_OK
    assert f'filename="Sales_Comprehensive_Schedule_{TODAY}.pdf"' in response.headers["content-disposition"]


def test_comprehensive_sales_rows(client: TestClient):
    response = client.get("/api/v1/sales/comprehensive", params={"station_id": "S2"})
    assert response.status_code == status.HTTP_200_OK
    rows = response.json()
    assert [row["farmer_id"] for row in rows] == ["F001", "F003"]
    assert rows[0]["total_loans"] == 69.0
