from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from tyredesk.auth.deps import CurrentUser, get_current_user
from tyredesk.core.logging_config import logger
from tyredesk.db import get_db
from tyredesk.models import TyreBrand, TyreModel, TyreSize
from tyredesk.repositories import margins as margin_repo
from tyredesk.schemas.margin import MarginConfigCreate, MarginConfigOut, MarginConfigUpdate

router = APIRouter(prefix="/margins", tags=["margins"])


def _check_scope(db: Session, payload: MarginConfigCreate) -> None:
    """Scope ids must point at existing catalog rows."""
    if payload.tyre_size_id and db.get(TyreSize, payload.tyre_size_id) is None:
        raise HTTPException(status_code=422, detail="Unknown tyre size")
    if payload.brand_id and db.get(TyreBrand, payload.brand_id) is None:
        raise HTTPException(status_code=422, detail="Unknown brand")
    if payload.tyre_model_id:
        model = db.get(TyreModel, payload.tyre_model_id)
        if model is None:
            raise HTTPException(status_code=422, detail="Unknown tyre model")
        if payload.brand_id and model.brand_id != payload.brand_id:
            raise HTTPException(status_code=422, detail="Tyre model does not belong to this brand")


@router.get("", response_model=List[MarginConfigOut])
def list_margins(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return margin_repo.list_margin_configs(db, user.id)


@router.post("", response_model=MarginConfigOut)
def save_margin(
    payload: MarginConfigCreate,
    response: Response,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """
    Create a margin rule. A rule with exactly the same scope is replaced
    (200) instead of duplicated (201).
    """
    _check_scope(db, payload)
    config, created = margin_repo.save_margin_config(db, user.id, payload)
    response.status_code = 201 if created else 200
    logger.info(
        "margin_config_saved",
        user_id=user.id,
        config_id=config.id,
        created=created,
        priority=config.priority,
    )
    return config


@router.patch("/{config_id}", response_model=MarginConfigOut)
def update_margin(
    config_id: str,
    payload: MarginConfigUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    config = margin_repo.get_margin_config(db, user.id, config_id)
    if config is None:
        raise HTTPException(status_code=404, detail="Margin configuration not found")
    return margin_repo.update_margin_config(db, config, payload)


@router.delete("/{config_id}", status_code=204)
def delete_margin(
    config_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    config = margin_repo.get_margin_config(db, user.id, config_id)
    if config is None:
        raise HTTPException(status_code=404, detail="Margin configuration not found")
    margin_repo.delete_margin_config(db, config)
    logger.info("margin_config_deleted", user_id=user.id, config_id=config_id)
