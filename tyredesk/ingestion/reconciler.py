from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tyredesk.core.errors import PersistenceError, TyreDeskError
from tyredesk.core.logging_config import logger
from tyredesk.models.common import utcnow
from tyredesk.pricing.size_parser import parse_tyre_size
from tyredesk.repositories import catalog as catalog_repo
from tyredesk.repositories.prices import upsert_price
from tyredesk.schemas.price_list import PriceListRow


def _key(name: str) -> str:
    return name.strip().lower()


@dataclass
class CatalogIndex:
    """
    Lookup tables for the shared catalog during one ingestion run.

    Loaded once from the database (all users) and extended with every
    entity created by a successfully reconciled row, so later rows in the
    same batch reuse it instead of creating a duplicate.
    """

    sizes: Dict[str, str] = field(default_factory=dict)  # canonical size -> id
    brands: Dict[str, str] = field(default_factory=dict)  # lower(name) -> id
    models: Dict[Tuple[str, str], str] = field(default_factory=dict)  # (brand_id, lower(name)) -> id

    @classmethod
    def load(cls, db: Session) -> "CatalogIndex":
        idx = cls()
        for s in catalog_repo.list_sizes(db):
            idx.sizes[s.size] = s.id
        for b in catalog_repo.list_brands(db):
            idx.brands.setdefault(_key(b.name), b.id)
        for m in catalog_repo.list_models(db):
            idx.models.setdefault((m.brand_id, _key(m.name)), m.id)
        return idx

    def size_id(self, size: str) -> Optional[str]:
        return self.sizes.get(size)

    def brand_id(self, name: str) -> Optional[str]:
        return self.brands.get(_key(name))

    def model_id(self, brand_id: str, name: str) -> Optional[str]:
        return self.models.get((brand_id, _key(name)))

    def merge(self, staged: "CatalogIndex") -> None:
        self.sizes.update(staged.sizes)
        self.brands.update(staged.brands)
        self.models.update(staged.models)


@dataclass(frozen=True)
class FailedRow:
    index: int
    row: PriceListRow
    reason: str


@dataclass
class ReconcileResult:
    upserted: int = 0
    created_sizes: int = 0
    created_brands: int = 0
    created_models: int = 0
    failed_rows: List[FailedRow] = field(default_factory=list)


@dataclass(frozen=True)
class _ResolvedIds:
    size_id: str
    brand_id: str
    model_id: str


def _resolve_catalog(
    db: Session,
    row: PriceListRow,
    index: CatalogIndex,
    staged: CatalogIndex,
    result: ReconcileResult,
) -> _ResolvedIds:
    # 1) size: exact canonical match
    size_id = index.size_id(row.size)
    if size_id is None:
        size, created = catalog_repo.get_or_create_size(db, parse_tyre_size(row.size))
        size_id = size.id
        staged.sizes[row.size] = size_id
        if created:
            result.created_sizes += 1

    # 2) brand: case-insensitive
    brand_id = index.brand_id(row.brand)
    if brand_id is None:
        brand, created = catalog_repo.get_or_create_brand(db, row.brand)
        brand_id = brand.id
        staged.brands[_key(row.brand)] = brand_id
        if created:
            result.created_brands += 1

    # 3) model: case-insensitive within the brand
    model_id = index.model_id(brand_id, row.model)
    if model_id is None:
        model, created = catalog_repo.get_or_create_model(db, brand_id, row.model)
        model_id = model.id
        staged.models[(brand_id, _key(row.model))] = model_id
        if created:
            result.created_models += 1

    return _ResolvedIds(size_id=size_id, brand_id=brand_id, model_id=model_id)


def reconcile_price_list(
    db: Session,
    rows: List[PriceListRow],
    supplier_id: str,
    *,
    now: Optional[datetime] = None,
    index: Optional[CatalogIndex] = None,
) -> ReconcileResult:
    """
    Map validated rows onto catalog ids and upsert one price per
    (supplier, size, model).

    Best effort: every row runs in its own SAVEPOINT. A failing row is
    rolled back, logged and reported in `failed_rows`; the rest of the
    batch continues. The caller owns the outer transaction (commit).
    """
    now = now or utcnow()
    index = index if index is not None else CatalogIndex.load(db)
    result = ReconcileResult()
    log = logger.bind(supplier_id=supplier_id)

    for i, row in enumerate(rows):
        staged = CatalogIndex()
        counts_before = (result.created_sizes, result.created_brands, result.created_models)
        try:
            with db.begin_nested():
                try:
                    ids = _resolve_catalog(db, row, index, staged, result)
                    upsert_price(
                        db,
                        supplier_id=supplier_id,
                        tyre_size_id=ids.size_id,
                        tyre_model_id=ids.model_id,
                        brand_id=ids.brand_id,
                        cost=row.cost,
                        now=now,
                    )
                except TyreDeskError:
                    raise
                # drivers raise plain Python errors when binding a value fails
                except (SQLAlchemyError, OverflowError, TypeError, ValueError) as e:
                    raise PersistenceError(
                        f"Could not save price for {row.brand} {row.model} {row.size}",
                        {"row_index": i, "error": repr(e)},
                    ) from e
        except (TyreDeskError, SQLAlchemyError) as e:
            # the savepoint is gone, so are the entities this row created
            result.created_sizes, result.created_brands, result.created_models = counts_before
            reason = e.message if isinstance(e, TyreDeskError) else f"database error: {e.__class__.__name__}"
            result.failed_rows.append(FailedRow(index=i, row=row, reason=reason))
            log.error(
                "price_row_failed",
                row_index=i,
                size=row.size,
                brand=row.brand,
                model=row.model,
                error=repr(e),
            )
            continue

        index.merge(staged)
        result.upserted += 1

    log.info(
        "price_list_reconciled",
        rows=len(rows),
        upserted=result.upserted,
        failed=len(result.failed_rows),
        created_sizes=result.created_sizes,
        created_brands=result.created_brands,
        created_models=result.created_models,
    )
    return result
