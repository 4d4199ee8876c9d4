from .margin_resolver import (
    DEFAULT_MARGIN,
    AppliedMargin,
    MarginType,
    calculate_sell_price,
    derive_priority,
    resolve_margin,
)
from .size_parser import TyreSizeParts, is_tyre_size, normalize_size_query, parse_tyre_size

__all__ = [
    "AppliedMargin",
    "DEFAULT_MARGIN",
    "MarginType",
    "TyreSizeParts",
    "calculate_sell_price",
    "derive_priority",
    "is_tyre_size",
    "normalize_size_query",
    "parse_tyre_size",
    "resolve_margin",
]
