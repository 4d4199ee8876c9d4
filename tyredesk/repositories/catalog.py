from __future__ import annotations

from typing import Callable, Optional, Tuple, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tyredesk.models.catalog import TyreBrand, TyreModel, TyreSize
from tyredesk.models.common import new_id
from tyredesk.pricing.size_parser import TyreSizeParts

T = TypeVar("T")


def list_sizes(db: Session) -> list[TyreSize]:
    return list(db.scalars(select(TyreSize).order_by(TyreSize.size)))


def list_brands(db: Session) -> list[TyreBrand]:
    return list(db.scalars(select(TyreBrand).order_by(TyreBrand.name)))


def list_models(db: Session, brand_id: Optional[str] = None) -> list[TyreModel]:
    stmt = select(TyreModel).order_by(TyreModel.name)
    if brand_id:
        stmt = stmt.where(TyreModel.brand_id == brand_id)
    return list(db.scalars(stmt))


def find_size(db: Session, size: str) -> Optional[TyreSize]:
    return db.scalar(select(TyreSize).where(TyreSize.size == size))


def find_brand(db: Session, name: str) -> Optional[TyreBrand]:
    key = name.strip().lower()
    return db.scalar(select(TyreBrand).where(func.lower(TyreBrand.name) == key))


def find_model(db: Session, brand_id: str, name: str) -> Optional[TyreModel]:
    key = name.strip().lower()
    return db.scalar(
        select(TyreModel).where(
            TyreModel.brand_id == brand_id,
            func.lower(TyreModel.name) == key,
        )
    )


def _insert_or_fetch(
    db: Session, obj: T, lookup: Callable[[], Optional[T]]
) -> Tuple[T, bool]:
    """
    Insert inside a SAVEPOINT. When a concurrent writer already created the
    same entity the unique index fires; read back the winner instead.
    Returns (entity, created).
    """
    try:
        with db.begin_nested():
            db.add(obj)
    except IntegrityError:
        existing = lookup()
        if existing is None:
            raise
        return existing, False
    return obj, True


def get_or_create_size(db: Session, parts: TyreSizeParts) -> Tuple[TyreSize, bool]:
    obj = TyreSize(
        id=new_id(),
        size=parts.size,
        width=parts.width,
        aspect_ratio=parts.aspect_ratio,
        diameter=parts.diameter,
    )
    return _insert_or_fetch(db, obj, lambda: find_size(db, parts.size))


def get_or_create_brand(db: Session, name: str) -> Tuple[TyreBrand, bool]:
    clean = name.strip()
    obj = TyreBrand(id=new_id(), name=clean)
    return _insert_or_fetch(db, obj, lambda: find_brand(db, clean))


def get_or_create_model(db: Session, brand_id: str, name: str) -> Tuple[TyreModel, bool]:
    clean = name.strip()
    obj = TyreModel(id=new_id(), brand_id=brand_id, name=clean)
    return _insert_or_fetch(db, obj, lambda: find_model(db, brand_id, clean))
