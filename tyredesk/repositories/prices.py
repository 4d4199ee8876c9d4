from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from tyredesk.models.common import new_id
from tyredesk.models.price import TyrePrice

_CONFLICT_COLUMNS = ["supplier_id", "tyre_size_id", "tyre_model_id"]


def upsert_price(
    db: Session,
    *,
    supplier_id: str,
    tyre_size_id: str,
    tyre_model_id: str,
    brand_id: str,
    cost: float,
    now: datetime,
) -> None:
    """
    Insert or overwrite the price for (supplier, size, model).
    Uses the database's own ON CONFLICT so two concurrent ingestions of the
    same key cannot both insert.
    """
    values = {
        "id": new_id(),
        "supplier_id": supplier_id,
        "tyre_size_id": tyre_size_id,
        "tyre_model_id": tyre_model_id,
        "brand_id": brand_id,
        "cost": cost,
        "updated_at": now,
    }
    dialect = db.get_bind().dialect.name

    if dialect in ("postgresql", "sqlite"):
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
        stmt = insert(TyrePrice).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=_CONFLICT_COLUMNS,
            set_={
                "cost": stmt.excluded.cost,
                "brand_id": stmt.excluded.brand_id,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        db.execute(stmt)
        return

    # other backends: read-then-write, no atomicity guarantee
    existing = db.scalar(
        select(TyrePrice).where(
            TyrePrice.supplier_id == supplier_id,
            TyrePrice.tyre_size_id == tyre_size_id,
            TyrePrice.tyre_model_id == tyre_model_id,
        )
    )
    if existing is None:
        db.add(TyrePrice(**values))
    else:
        existing.cost = cost
        existing.brand_id = brand_id
        existing.updated_at = now
    db.flush()


def list_supplier_prices(db: Session, supplier_id: str) -> list[TyrePrice]:
    return list(
        db.scalars(
            select(TyrePrice)
            .where(TyrePrice.supplier_id == supplier_id)
            .order_by(TyrePrice.updated_at.desc(), TyrePrice.id)
        )
    )
