from pydantic import BaseModel

from tyredesk.pricing.margin_resolver import MarginType


class TyreSearchResult(BaseModel):
    """One supplier offer for a size, with the sell price from the winning margin rule."""

    id: str
    size: str
    brand: str
    model: str
    supplier: str
    supplier_id: str
    cost: float
    sell_price: float
    margin_type: MarginType
    margin_value: float
    margin_scope: str
