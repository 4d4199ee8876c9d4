from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from tyredesk.core.logging_config import logger
from tyredesk.models import Supplier, TyreBrand, TyreModel, TyrePrice, TyreSize
from tyredesk.observability.metrics import search_counter
from tyredesk.pricing.margin_resolver import calculate_sell_price, resolve_margin
from tyredesk.pricing.size_parser import normalize_size_query
from tyredesk.repositories.margins import list_margin_configs
from tyredesk.schemas.search import TyreSearchResult


def search_tyres(db: Session, user_id: str, size: str) -> list[TyreSearchResult]:
    """
    Every price the user's suppliers offer for one size, with the sell
    price of the winning margin rule. Cheapest first.

    A query that is not a tyre size is looked up as-is and simply
    matches nothing.
    """
    query = normalize_size_query(size)
    log = logger.bind(user_id=user_id, size=query)

    if not query:
        search_counter.labels(result="empty").inc()
        return []

    stmt = (
        select(TyrePrice, TyreSize, TyreBrand, TyreModel, Supplier)
        .join(TyreSize, TyrePrice.tyre_size_id == TyreSize.id)
        .join(TyreModel, TyrePrice.tyre_model_id == TyreModel.id)
        .join(TyreBrand, TyrePrice.brand_id == TyreBrand.id)
        .join(Supplier, TyrePrice.supplier_id == Supplier.id)
        .where(TyreSize.size == query, Supplier.user_id == user_id)
    )
    rows = db.execute(stmt).all()

    # one read of the rule set per search
    configs = list_margin_configs(db, user_id)

    results: list[TyreSearchResult] = []
    for price, tyre_size, brand, model, supplier in rows:
        applied = resolve_margin(configs, tyre_size.id, brand.id, model.id)
        results.append(
            TyreSearchResult(
                id=price.id,
                size=tyre_size.size,
                brand=brand.name,
                model=model.name,
                supplier=supplier.name,
                supplier_id=supplier.id,
                cost=price.cost,
                sell_price=calculate_sell_price(price.cost, applied.margin_type, applied.margin_value),
                margin_type=applied.margin_type,
                margin_value=applied.margin_value,
                margin_scope=applied.scope,
            )
        )

    results.sort(key=lambda r: (r.sell_price, r.supplier.lower(), r.brand.lower(), r.model.lower()))

    search_counter.labels(result="hit" if results else "empty").inc()
    log.info("tyre_search", results=len(results), rules=len(configs))
    return results
