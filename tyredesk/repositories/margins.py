from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tyredesk.models.margin import MarginConfig
from tyredesk.models.common import utcnow
from tyredesk.pricing.margin_resolver import derive_priority
from tyredesk.schemas.margin import MarginConfigCreate, MarginConfigUpdate


def list_margin_configs(db: Session, user_id: str) -> list[MarginConfig]:
    # Stable insertion order; the resolver keeps list order inside a tier.
    return list(
        db.scalars(
            select(MarginConfig)
            .where(MarginConfig.user_id == user_id)
            .order_by(MarginConfig.created_at, MarginConfig.id)
        )
    )


def get_margin_config(db: Session, user_id: str, config_id: str) -> Optional[MarginConfig]:
    return db.scalar(
        select(MarginConfig).where(
            MarginConfig.id == config_id, MarginConfig.user_id == user_id
        )
    )


def find_by_scope(
    db: Session,
    user_id: str,
    tyre_size_id: Optional[str],
    brand_id: Optional[str],
    tyre_model_id: Optional[str],
) -> Optional[MarginConfig]:
    stmt = select(MarginConfig).where(MarginConfig.user_id == user_id)
    for col, val in (
        (MarginConfig.tyre_size_id, tyre_size_id),
        (MarginConfig.brand_id, brand_id),
        (MarginConfig.tyre_model_id, tyre_model_id),
    ):
        stmt = stmt.where(col.is_(None) if val is None else col == val)
    return db.scalar(stmt)


def _overwrite(db: Session, config: MarginConfig, data: MarginConfigCreate) -> MarginConfig:
    config.margin_type = data.margin_type.value
    config.margin_value = data.margin_value
    config.updated_at = utcnow()
    db.commit()
    db.refresh(config)
    return config


def save_margin_config(db: Session, user_id: str, data: MarginConfigCreate) -> tuple[MarginConfig, bool]:
    """
    Create a rule, or overwrite the one with exactly the same scope.
    Returns (config, created).
    """
    existing = find_by_scope(db, user_id, data.tyre_size_id, data.brand_id, data.tyre_model_id)
    if existing is not None:
        return _overwrite(db, existing, data), False

    config = MarginConfig(
        user_id=user_id,
        tyre_size_id=data.tyre_size_id,
        brand_id=data.brand_id,
        tyre_model_id=data.tyre_model_id,
        margin_type=data.margin_type.value,
        margin_value=data.margin_value,
        priority=derive_priority(data.tyre_size_id, data.brand_id, data.tyre_model_id),
    )
    db.add(config)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent request stored the same scope first
        db.rollback()
        existing = find_by_scope(db, user_id, data.tyre_size_id, data.brand_id, data.tyre_model_id)
        if existing is None:
            raise
        return _overwrite(db, existing, data), False
    db.refresh(config)
    return config, True


def update_margin_config(db: Session, config: MarginConfig, data: MarginConfigUpdate) -> MarginConfig:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "margin_type" in changes:
        config.margin_type = changes["margin_type"].value
    if "margin_value" in changes:
        config.margin_value = changes["margin_value"]
    config.updated_at = utcnow()
    db.commit()
    db.refresh(config)
    return config


def delete_margin_config(db: Session, config: MarginConfig) -> None:
    db.delete(config)
    db.commit()
