from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tyredesk.auth.deps import CurrentUser, get_current_user
from tyredesk.db import get_db
from tyredesk.pricing.margin_resolver import calculate_sell_price, resolve_margin
from tyredesk.repositories.margins import list_margin_configs
from tyredesk.schemas.margin import ResolveMarginRequest, ResolveMarginResponse
from tyredesk.schemas.search import TyreSearchResult
from tyredesk.services.search import search_tyres

router = APIRouter(tags=["search"])


@router.get("/tyres/search", response_model=List[TyreSearchResult])
def search(
    size: str = Query(..., min_length=1, description="Tyre size, e.g. 205/55R16"),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return search_tyres(db, user.id, size)


@router.post("/pricing/resolve", response_model=ResolveMarginResponse)
def resolve(
    payload: ResolveMarginRequest,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """Which of the caller's rules applies to this tyre, and what it sells for."""
    configs = list_margin_configs(db, user.id)
    applied = resolve_margin(configs, payload.tyre_size_id, payload.brand_id, payload.tyre_model_id)
    sell_price = None
    if payload.cost is not None:
        sell_price = calculate_sell_price(payload.cost, applied.margin_type, applied.margin_value)
    return ResolveMarginResponse(
        margin_type=applied.margin_type,
        margin_value=applied.margin_value,
        config_id=applied.config_id,
        scope=applied.scope,
        sell_price=sell_price,
    )
