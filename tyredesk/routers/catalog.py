from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tyredesk.auth.deps import CurrentUser, get_current_user
from tyredesk.db import get_db
from tyredesk.repositories import catalog as catalog_repo
from tyredesk.schemas.catalog import TyreBrandOut, TyreModelOut, TyreSizeOut

# The catalog is shared by all users; reading it still needs a login.
router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/sizes", response_model=List[TyreSizeOut])
def list_sizes(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return catalog_repo.list_sizes(db)


@router.get("/brands", response_model=List[TyreBrandOut])
def list_brands(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return catalog_repo.list_brands(db)


@router.get("/models", response_model=List[TyreModelOut])
def list_models(
    brand_id: Optional[str] = None,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return catalog_repo.list_models(db, brand_id)
