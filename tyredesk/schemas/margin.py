from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tyredesk.pricing.margin_resolver import MarginType


class MarginConfigCreate(BaseModel):
    # scope: leave a field out for "all" on that dimension
    tyre_size_id: Optional[str] = None
    brand_id: Optional[str] = None
    tyre_model_id: Optional[str] = None

    margin_type: MarginType = MarginType.PERCENTAGE
    margin_value: float = Field(..., gt=0, allow_inf_nan=False)


class MarginConfigUpdate(BaseModel):
    margin_type: Optional[MarginType] = None
    margin_value: Optional[float] = Field(None, gt=0, allow_inf_nan=False)


class MarginConfigOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tyre_size_id: Optional[str] = None
    brand_id: Optional[str] = None
    tyre_model_id: Optional[str] = None
    margin_type: MarginType
    margin_value: float
    priority: int
    created_at: datetime
    updated_at: datetime


class ResolveMarginRequest(BaseModel):
    tyre_size_id: str
    brand_id: str
    tyre_model_id: Optional[str] = None
    cost: Optional[float] = Field(None, ge=0, allow_inf_nan=False)


class ResolveMarginResponse(BaseModel):
    margin_type: MarginType
    margin_value: float
    config_id: Optional[str] = None
    scope: str
    sell_price: Optional[float] = None
