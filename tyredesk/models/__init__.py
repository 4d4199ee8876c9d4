# ORM models for TyreDesk (importing this package registers all tables on Base)

from .catalog import TyreBrand, TyreModel, TyreSize
from .margin import MarginConfig
from .price import TyrePrice
from .supplier import Supplier

__all__ = [
    "TyreSize",
    "TyreBrand",
    "TyreModel",
    "Supplier",
    "TyrePrice",
    "MarginConfig",
]
