from typing import List

from pydantic import BaseModel, Field

from ...common.models import UpstreamRecord


class DispatchRecord(UpstreamRecord):
    """A dispatch entry. ``barcode_id`` may hold several comma separated barcodes."""

    id: str = Field("", alias="_id")
    barcode_id: str = Field("", alias="barcodeId")
    driver_name: str = Field("", alias="driverName")
    destination: str = ""
    dispatchbook_number: str = Field("", alias="dispatchbookNumber")
    car_registration: str = Field("", alias="carRegistration")
    driver_licence: str = Field("", alias="driverLicence")
    registra: str = ""
    date: str = ""

    @property
    def barcodes(self) -> List[str]:
        return [barcode.strip() for barcode in self.barcode_id.split(",") if barcode.strip()]


class DispatchSearchQuery(BaseModel):
    search: str = Field("", description="Matches book number, driver, destination, truck or barcode")


class PaginatedDispatchResponse(BaseModel):
    items: List[DispatchRecord]
    total: int
    page: int
    size: int
    total_pages: int


class DispatchDocument(BaseModel):
    """One dispatch book merged into a single printable document."""

    dispatchbook_number: str
    driver_name: str
    driver_licence: str
    destination: str
    car_registration: str
    date: str
    registra: str
    barcodes: List[str]

    @property
    def barcode_count(self) -> int:
        return len(self.barcodes)
