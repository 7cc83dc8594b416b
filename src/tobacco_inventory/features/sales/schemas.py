from enum import Enum
from typing import List, Literal, Optional
import datetime

from pydantic import BaseModel, Field

from ...common.models import UpstreamRecord
from ...common.parsing import parse_number


# --- Sale record as served by the upstream API ---
class SaleRecord(UpstreamRecord):
    """One tobacco bale sold at a station. Every upstream value is a string."""

    id: str = Field("", alias="_id", description="Upstream document ID")
    barcode_id: str = Field("", alias="barcodeId", description="Bale barcode")
    weight: str = Field("", description="Bale weight in kg")
    farmer_id: str = Field("", alias="farmerId")
    station_id: str = Field("", alias="stationId")
    buyer_id: str = Field("", alias="buyerId")
    registra: str = Field("", description="Registrar / farmer name")
    lot_number: str = Field("", alias="lotNumber")
    grade: str = Field("")
    price: str = Field("", description="Price per kg in USD")
    tobacco_type: str = Field("", alias="tobaccoType")
    date: str = Field("", description="Sale timestamp (ISO)")
    dispatch_id: str = Field("", alias="dispatchId")
    date_formated: str = Field("", alias="dateFormated", description="Display date of the sale")

    @property
    def weight_kg(self) -> float:
        return parse_number(self.weight)

    @property
    def unit_price(self) -> float:
        return parse_number(self.price)

    @property
    def usd_value(self) -> float:
        return self.unit_price * self.weight_kg

    @property
    def has_valid_price(self) -> bool:
        return self.unit_price > 0

    @property
    def has_missing_data(self) -> bool:
        return not self.price or not self.grade

    @property
    def report_date(self) -> str:
        """The date reports group and filter on: the display date, else the timestamp."""
        return self.date_formated or self.date


class SortField(str, Enum):
    barcode_id = "barcode_id"
    weight = "weight"
    farmer_id = "farmer_id"
    station_id = "station_id"
    buyer_id = "buyer_id"
    registra = "registra"
    lot_number = "lot_number"
    grade = "grade"
    price = "price"
    tobacco_type = "tobacco_type"
    date = "date"
    dispatch_id = "dispatch_id"
    date_formated = "date_formated"


SortDirection = Literal["asc", "desc"]


class SortConfig(BaseModel):
    key: Optional[SortField] = None
    direction: SortDirection = "asc"

    def toggled(self, key: SortField) -> "SortConfig":
        """Selecting the active key again flips the direction, a new key starts ascending."""
        if self.key == key and self.direction == "asc":
            return SortConfig(key=key, direction="desc")
        return SortConfig(key=key, direction="asc")


# --- Query parameters ---
class RecordFilters(BaseModel):
    farmer_id: Optional[str] = Field(None, description="Farmer ID contains (case-insensitive)")
    buyer_id: Optional[str] = Field(None, description="Buyer ID contains (case-insensitive)")
    registra: Optional[str] = Field(None, description="Registrar contains (case-insensitive)")
    tobacco_type: Optional[str] = Field(None, description="Exact tobacco type")
    station_id: Optional[str] = Field(None, description="Exact station ID")
    search: Optional[str] = Field(None, description="Free text matched against every field")
    date_from: Optional[datetime.date] = Field(None, description="First sale day (YYYY-MM-DD)")
    date_to: Optional[datetime.date] = Field(None, description="Last sale day (YYYY-MM-DD)")


# --- Responses ---
class PaginatedRecordsResponse(BaseModel):
    items: List[SaleRecord]
    total: int
    page: int
    size: int
    total_pages: int


class InventoryStats(BaseModel):
    total_records: int
    filtered_records: int
    unique_farmers: int
    records_with_price: int
    total_weight: float
    total_value: float
    average_price: float = Field(..., description="Total value divided by total weight of priced bales")


class FilterOptions(BaseModel):
    farmer_ids: List[str]
    buyer_ids: List[str]
    tobacco_types: List[str]
    station_ids: List[str]
    registras: List[str]
