# tyredesk/models/catalog.py
# Shared catalog: no user_id, every tenant looks up the same rows.
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tyredesk.db import Base
from tyredesk.models.common import new_id


class TyreSize(Base):
    __tablename__ = "tyre_sizes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # canonical "W/ARRD", e.g. 205/55R16
    size: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    width: Mapped[int] = mapped_column(Integer, nullable=False)
    aspect_ratio: Mapped[int] = mapped_column(Integer, nullable=False)
    diameter: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<TyreSize id={self.id} size={self.size!r}>"


class TyreBrand(Base):
    __tablename__ = "tyre_brands"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(120), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    models: Mapped[list["TyreModel"]] = relationship("TyreModel", back_populates="brand")

    def __repr__(self) -> str:
        return f"<TyreBrand id={self.id} name={self.name!r}>"


class TyreModel(Base):
    __tablename__ = "tyre_models"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    brand_id: Mapped[str] = mapped_column(
        ForeignKey("tyre_brands.id"), index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    brand: Mapped["TyreBrand"] = relationship("TyreBrand", back_populates="models")

    def __repr__(self) -> str:
        return f"<TyreModel id={self.id} brand_id={self.brand_id} name={self.name!r}>"


# Case-insensitive uniqueness is the backstop when two ingestions race
Index("uq_tyre_brands_name_lower", func.lower(TyreBrand.name), unique=True)
Index(
    "uq_tyre_models_brand_name_lower",
    TyreModel.brand_id,
    func.lower(TyreModel.name),
    unique=True,
)
