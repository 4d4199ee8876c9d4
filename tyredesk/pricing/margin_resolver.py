from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from tyredesk.core.errors import ValidationFailure


class MarginType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def as_margin_type(value: Any) -> MarginType:
    try:
        return MarginType(value)
    except ValueError as e:
        raise ValidationFailure(
            f"unknown margin type '{value}' (expected percentage or fixed)",
            {"margin_type": value},
        ) from e


# Scopes (tier names, most specific first)
SCOPE_MODEL = "model"
SCOPE_SIZE_BRAND = "size_brand"
SCOPE_BRAND = "brand"
SCOPE_SIZE = "size"
SCOPE_GLOBAL = "global"
SCOPE_DEFAULT = "default"

DEFAULT_MARGIN_TYPE = MarginType.PERCENTAGE
DEFAULT_MARGIN_VALUE = 30.0

# Display priority per scope. Never used for resolution.
_PRIORITY = {
    SCOPE_MODEL: 40,
    SCOPE_SIZE_BRAND: 30,
    SCOPE_BRAND: 20,
    SCOPE_SIZE: 10,
    SCOPE_GLOBAL: 0,
}


@dataclass(frozen=True)
class AppliedMargin:
    """
    Winning margin for one (size, brand, model) target.
    - config_id: None when the synthesized default was used
    - scope: which tier matched
    """

    margin_type: MarginType
    margin_value: float
    config_id: Optional[str]
    scope: str

    def sell_price(self, cost: float) -> float:
        return calculate_sell_price(cost, self.margin_type, self.margin_value)


DEFAULT_MARGIN = AppliedMargin(
    margin_type=DEFAULT_MARGIN_TYPE,
    margin_value=DEFAULT_MARGIN_VALUE,
    config_id=None,
    scope=SCOPE_DEFAULT,
)


def scope_of(size_id: Optional[str], brand_id: Optional[str], model_id: Optional[str]) -> str:
    if model_id:
        return SCOPE_MODEL
    if size_id and brand_id:
        return SCOPE_SIZE_BRAND
    if brand_id:
        return SCOPE_BRAND
    if size_id:
        return SCOPE_SIZE
    return SCOPE_GLOBAL


def derive_priority(
    size_id: Optional[str], brand_id: Optional[str], model_id: Optional[str] = None
) -> int:
    return _PRIORITY[scope_of(size_id, brand_id, model_id)]


def _applied(config: Any, scope: str) -> AppliedMargin:
    return AppliedMargin(
        margin_type=as_margin_type(config.margin_type),
        margin_value=float(config.margin_value),
        config_id=getattr(config, "id", None),
        scope=scope,
    )


def resolve_margin(
    configs: Iterable[Any],
    size_id: Optional[str],
    brand_id: Optional[str],
    model_id: Optional[str] = None,
) -> AppliedMargin:
    """
    Ordered first-match search, most specific first:

    1. tyre_model_id == model_id (only when model_id is given)
    2. tyre_size_id == size_id and brand_id == brand_id
    3. brand only
    4. size only
    5. global (no size, no brand)

    Rules scoped to a model only take part in tier 1. Inside a tier the
    input order wins. `priority` is not consulted.
    Falls back to DEFAULT_MARGIN (percentage 30).
    """
    configs = list(configs)

    if model_id:
        for c in configs:
            if c.tyre_model_id == model_id:
                return _applied(c, SCOPE_MODEL)

    unscoped_model = [c for c in configs if not c.tyre_model_id]

    for c in unscoped_model:
        if c.tyre_size_id and c.brand_id and c.tyre_size_id == size_id and c.brand_id == brand_id:
            return _applied(c, SCOPE_SIZE_BRAND)

    for c in unscoped_model:
        if c.brand_id and c.brand_id == brand_id and not c.tyre_size_id:
            return _applied(c, SCOPE_BRAND)

    for c in unscoped_model:
        if c.tyre_size_id and c.tyre_size_id == size_id and not c.brand_id:
            return _applied(c, SCOPE_SIZE)

    for c in unscoped_model:
        if not c.tyre_size_id and not c.brand_id:
            return _applied(c, SCOPE_GLOBAL)

    return DEFAULT_MARGIN


def calculate_sell_price(cost: float, margin_type: MarginType | str, margin_value: float) -> float:
    """
    percentage: cost * (1 + value / 100)
    fixed:      cost + value
    No rounding here, formatting is up to the caller.
    """
    mt = as_margin_type(margin_type)
    if mt is MarginType.PERCENTAGE:
        return cost * (1 + margin_value / 100)
    return cost + margin_value
