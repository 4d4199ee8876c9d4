# tyredesk/models/margin.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from tyredesk.db import Base
from tyredesk.models.common import new_id, utcnow


class MarginConfig(Base):
    """
    Pricing rule scoped by zero or more of size / brand / model.
    A NULL scope column matches everything on that dimension.
    """

    __tablename__ = "margin_configs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(100), index=True, nullable=False)

    tyre_size_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("tyre_sizes.id"), nullable=True
    )
    brand_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("tyre_brands.id"), nullable=True
    )
    tyre_model_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("tyre_models.id"), nullable=True
    )

    margin_type: Mapped[str] = mapped_column(String(16), nullable=False)  # percentage | fixed
    margin_value: Mapped[float] = mapped_column(Float, nullable=False)

    # display only, derived from the scope (see pricing.margin_resolver.derive_priority)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<MarginConfig id={self.id} size={self.tyre_size_id} brand={self.brand_id} "
            f"model={self.tyre_model_id} {self.margin_type}={self.margin_value}>"
        )


# One rule per scope and user. NULL never equals NULL in a unique index,
# so the unscoped dimensions are folded to '' first.
Index(
    "uq_margin_configs_user_scope",
    MarginConfig.user_id,
    func.coalesce(MarginConfig.tyre_size_id, ""),
    func.coalesce(MarginConfig.brand_id, ""),
    func.coalesce(MarginConfig.tyre_model_id, ""),
    unique=True,
)
