# tyredesk/routers/suppliers.py
from pathlib import PurePath
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from sqlalchemy.orm import Session

from tyredesk.auth.deps import CurrentUser, get_current_user
from tyredesk.core.errors import ExtractionError, NoValidDataError
from tyredesk.core.logging_config import logger
from tyredesk.core.rate_limit import limiter
from tyredesk.core.settings import settings
from tyredesk.db import get_db
from tyredesk.ingestion.extraction_client import ExtractionClient, get_extraction_client
from tyredesk.ingestion.pipeline import ingest_price_list
from tyredesk.models import Supplier
from tyredesk.observability.metrics import upload_size_hist
from tyredesk.repositories import suppliers as supplier_repo
from tyredesk.repositories.prices import list_supplier_prices
from tyredesk.schemas.catalog import TyrePriceOut
from tyredesk.schemas.price_list import IngestionSummaryOut, InvalidRowOut
from tyredesk.schemas.supplier import SupplierCreate, SupplierOut, SupplierUpdate

router = APIRouter(prefix="/suppliers", tags=["suppliers"])


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _get_owned_supplier(db: Session, user: CurrentUser, supplier_id: str) -> Supplier:
    supplier = supplier_repo.get_supplier(db, user.id, supplier_id)
    if supplier is None:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return supplier


def _check_extension(file_name: str) -> None:
    ext = PurePath(file_name).suffix.lower()
    if ext not in settings.ALLOWED_PRICE_LIST_EXTENSIONS:
        allowed = ", ".join(settings.ALLOWED_PRICE_LIST_EXTENSIONS)
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type '{ext or file_name}'. Allowed: {allowed}",
        )


def _read_limited(file: UploadFile) -> bytes:
    max_bytes = settings.MAX_UPLOAD_MB * 1024 * 1024
    data = file.file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File is larger than {settings.MAX_UPLOAD_MB} MB",
        )
    if not data:
        raise HTTPException(status_code=400, detail="File is empty")
    return data


# -----------------------------------------------------------------------------
# CRUD
# -----------------------------------------------------------------------------
@router.get("", response_model=List[SupplierOut])
def list_suppliers(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return supplier_repo.list_suppliers(db, user.id)


@router.post("", response_model=SupplierOut, status_code=201)
def create_supplier(
    payload: SupplierCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    supplier = supplier_repo.create_supplier(db, user.id, payload)
    logger.info("supplier_created", supplier_id=supplier.id, user_id=user.id)
    return supplier


@router.get("/{supplier_id}", response_model=SupplierOut)
def get_supplier(
    supplier_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return _get_owned_supplier(db, user, supplier_id)


@router.patch("/{supplier_id}", response_model=SupplierOut)
def update_supplier(
    supplier_id: str,
    payload: SupplierUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    supplier = _get_owned_supplier(db, user, supplier_id)
    if "name" in payload.model_fields_set and payload.name is None:
        raise HTTPException(status_code=422, detail="Supplier name cannot be empty")
    return supplier_repo.update_supplier(db, supplier, payload)


@router.delete("/{supplier_id}", status_code=204)
def delete_supplier(
    supplier_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    supplier = _get_owned_supplier(db, user, supplier_id)
    supplier_repo.delete_supplier(db, supplier)
    logger.info("supplier_deleted", supplier_id=supplier_id, user_id=user.id)


# -----------------------------------------------------------------------------
# Price lists
# -----------------------------------------------------------------------------
@router.post("/{supplier_id}/price-lists", response_model=IngestionSummaryOut)
@limiter.limit(settings.RATE_LIMIT_UPLOADS)
def upload_price_list(
    request: Request,
    supplier_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
    client: ExtractionClient = Depends(get_extraction_client),
):
    """
    Upload a supplier price list (PDF / XLSX / XLS / CSV).
    The document is extracted, validated and merged into the supplier's prices.
    """
    supplier = _get_owned_supplier(db, user, supplier_id)

    file_name = PurePath(file.filename or "").name
    if not file_name:
        raise HTTPException(status_code=400, detail="File name is required")
    _check_extension(file_name)
    data = _read_limited(file)
    upload_size_hist.observe(len(data))

    try:
        summary = ingest_price_list(
            db,
            supplier=supplier,
            file_bytes=data,
            file_name=file_name,
            content_type=file.content_type,
            client=client,
        )
    except ExtractionError as e:
        raise HTTPException(status_code=502, detail=e.message)
    except NoValidDataError as e:
        raise HTTPException(
            status_code=422,
            detail={
                "message": e.message,
                "invalid_rows": [
                    InvalidRowOut(index=r.index, row=r.row, reasons=r.reasons).model_dump()
                    for r in e.invalid_rows
                ],
            },
        )

    return summary.to_out()


@router.get("/{supplier_id}/prices", response_model=List[TyrePriceOut])
def list_prices(
    supplier_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    supplier = _get_owned_supplier(db, user, supplier_id)
    return list_supplier_prices(db, supplier.id)
