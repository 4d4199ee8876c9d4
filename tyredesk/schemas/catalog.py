from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TyreSizeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    size: str
    width: int
    aspect_ratio: int
    diameter: int


class TyreBrandOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class TyreModelOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    brand_id: str
    name: str


class TyrePriceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    supplier_id: str
    tyre_size_id: str
    tyre_model_id: str
    brand_id: str
    cost: float
    updated_at: datetime
