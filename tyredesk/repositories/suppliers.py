from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from tyredesk.models.supplier import Supplier
from tyredesk.schemas.supplier import SupplierCreate, SupplierUpdate


def list_suppliers(db: Session, user_id: str) -> list[Supplier]:
    return list(
        db.scalars(
            select(Supplier)
            .where(Supplier.user_id == user_id)
            .order_by(Supplier.created_at.desc(), Supplier.name)
        )
    )


def get_supplier(db: Session, user_id: str, supplier_id: str) -> Optional[Supplier]:
    return db.scalar(
        select(Supplier).where(Supplier.id == supplier_id, Supplier.user_id == user_id)
    )


def create_supplier(db: Session, user_id: str, data: SupplierCreate) -> Supplier:
    supplier = Supplier(user_id=user_id, **data.model_dump())
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return supplier


def update_supplier(db: Session, supplier: Supplier, data: SupplierUpdate) -> Supplier:
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(supplier, key, value)
    db.commit()
    db.refresh(supplier)
    return supplier


def delete_supplier(db: Session, supplier: Supplier) -> None:
    db.delete(supplier)
    db.commit()
