# tyredesk/models/price.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tyredesk.db import Base
from tyredesk.models.common import new_id, utcnow


class TyrePrice(Base):
    __tablename__ = "tyre_prices"
    __table_args__ = (
        # natural key, target of the ingestion upsert
        UniqueConstraint(
            "supplier_id",
            "tyre_size_id",
            "tyre_model_id",
            name="uq_tyre_prices_supplier_size_model",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    supplier_id: Mapped[str] = mapped_column(
        ForeignKey("suppliers.id", ondelete="CASCADE"), index=True, nullable=False
    )
    tyre_size_id: Mapped[str] = mapped_column(
        ForeignKey("tyre_sizes.id"), index=True, nullable=False
    )
    tyre_model_id: Mapped[str] = mapped_column(
        ForeignKey("tyre_models.id"), index=True, nullable=False
    )
    # denormalized copy of tyre_models.brand_id
    brand_id: Mapped[str] = mapped_column(
        ForeignKey("tyre_brands.id"), index=True, nullable=False
    )

    cost: Mapped[float] = mapped_column(Float, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    supplier: Mapped["Supplier"] = relationship(  # noqa: F821
        "Supplier", back_populates="prices"
    )

    def __repr__(self) -> str:
        return (
            f"<TyrePrice supplier={self.supplier_id} size={self.tyre_size_id} "
            f"model={self.tyre_model_id} cost={self.cost}>"
        )
