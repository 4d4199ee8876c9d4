# tyredesk/schemas/price_list.py
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PriceListRow(BaseModel):
    """One validated row of a supplier price list (transient, not stored as such)."""

    model_config = ConfigDict(frozen=True)

    size: str = Field(..., description="Canonical tyre size, e.g. 205/55R16")
    brand: str
    model: str
    cost: float = Field(..., gt=0)


# -----------------------------------------------------------------------------
# Extraction service contract
# -----------------------------------------------------------------------------
class ExtractionData(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    # rows stay untyped here; the ingestion validator decides what is usable
    rows: List[Any] = Field(default_factory=list)
    invalid_rows: Optional[List[Any]] = Field(None, alias="invalidRows")
    total: Optional[int] = None


class ExtractionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    message: str = ""
    data: Optional[ExtractionData] = None


# -----------------------------------------------------------------------------
# Ingestion output
# -----------------------------------------------------------------------------
class InvalidRowOut(BaseModel):
    index: int
    row: Any
    reasons: List[str]


class FailedRowOut(BaseModel):
    index: int
    row: PriceListRow
    reason: str


class IngestionSummaryOut(BaseModel):
    supplier_id: str
    file_name: str
    message: str
    total_extracted: int
    imported: int
    created_sizes: int
    created_brands: int
    created_models: int
    invalid_rows: List[InvalidRowOut] = []
    failed_rows: List[FailedRowOut] = []
