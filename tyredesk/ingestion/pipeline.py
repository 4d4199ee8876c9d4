from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from tyredesk.core.errors import ExtractionError, NoValidDataError
from tyredesk.core.logging_config import logger
from tyredesk.ingestion.extraction_client import ExtractionClient
from tyredesk.ingestion.reconciler import FailedRow, reconcile_price_list
from tyredesk.ingestion.validator import InvalidRow, validate_extracted_rows
from tyredesk.models import Supplier
from tyredesk.models.common import utcnow
from tyredesk.observability.metrics import (
    catalog_created_counter,
    extraction_latency_hist,
    ingestion_rows_counter,
    ingestion_runs_counter,
)
from tyredesk.schemas.price_list import (
    FailedRowOut,
    IngestionSummaryOut,
    InvalidRowOut,
)


@dataclass
class IngestionSummary:
    supplier_id: str
    file_name: str
    total_extracted: int
    imported: int
    created_sizes: int = 0
    created_brands: int = 0
    created_models: int = 0
    invalid_rows: List[InvalidRow] = field(default_factory=list)
    failed_rows: List[FailedRow] = field(default_factory=list)

    @property
    def message(self) -> str:
        msg = f"Successfully processed {self.imported} tyre prices"
        skipped = len(self.invalid_rows) + len(self.failed_rows)
        if skipped:
            msg += f" ({skipped} of {self.total_extracted} rows skipped)"
        return msg

    def to_out(self) -> IngestionSummaryOut:
        return IngestionSummaryOut(
            supplier_id=self.supplier_id,
            file_name=self.file_name,
            message=self.message,
            total_extracted=self.total_extracted,
            imported=self.imported,
            created_sizes=self.created_sizes,
            created_brands=self.created_brands,
            created_models=self.created_models,
            invalid_rows=[
                InvalidRowOut(index=r.index, row=r.row, reasons=r.reasons)
                for r in self.invalid_rows
            ],
            failed_rows=[
                FailedRowOut(index=r.index, row=r.row, reason=r.reason)
                for r in self.failed_rows
            ],
        )


def ingest_price_list(
    db: Session,
    *,
    supplier: Supplier,
    file_bytes: bytes,
    file_name: str,
    content_type: Optional[str],
    client: ExtractionClient,
    now: Optional[datetime] = None,
) -> IngestionSummary:
    """
    Full ingestion run for one uploaded document:
    extract -> validate -> reconcile -> commit.

    ExtractionError / NoValidDataError abort the run before anything is
    written. Row-level problems end up in the summary.
    """
    log = logger.bind(supplier_id=supplier.id, file_name=file_name)
    log.info("price_list_ingestion_started", bytes=len(file_bytes))

    # --- 1) extraction (external, single attempt) ---
    started = time.perf_counter()
    try:
        extracted = client.extract(
            file_bytes=file_bytes,
            supplier_id=supplier.id,
            file_name=file_name,
            content_type=content_type,
        )
    except ExtractionError:
        ingestion_runs_counter.labels(result="extraction_error").inc()
        raise
    finally:
        extraction_latency_hist.observe(time.perf_counter() - started)

    # --- 2) validation ---
    try:
        report = validate_extracted_rows(extracted.rows, supplier.id)
    except ExtractionError:
        ingestion_runs_counter.labels(result="extraction_error").inc()
        raise
    except NoValidDataError as e:
        ingestion_runs_counter.labels(result="no_valid_data").inc()
        ingestion_rows_counter.labels(outcome="invalid").inc(len(e.invalid_rows))
        raise

    # --- 3) reconciliation + upsert ---
    result = reconcile_price_list(db, report.valid_rows, supplier.id, now=now or utcnow())
    db.commit()

    summary = IngestionSummary(
        supplier_id=supplier.id,
        file_name=file_name,
        total_extracted=report.total,
        imported=result.upserted,
        created_sizes=result.created_sizes,
        created_brands=result.created_brands,
        created_models=result.created_models,
        invalid_rows=list(report.invalid_rows),
        failed_rows=list(result.failed_rows),
    )

    ingestion_runs_counter.labels(result="success").inc()
    ingestion_rows_counter.labels(outcome="imported").inc(result.upserted)
    ingestion_rows_counter.labels(outcome="invalid").inc(len(report.invalid_rows))
    ingestion_rows_counter.labels(outcome="failed").inc(len(result.failed_rows))
    catalog_created_counter.labels(entity="size").inc(result.created_sizes)
    catalog_created_counter.labels(entity="brand").inc(result.created_brands)
    catalog_created_counter.labels(entity="model").inc(result.created_models)

    log.info(
        "price_list_ingestion_finished",
        total=summary.total_extracted,
        imported=summary.imported,
        invalid=len(summary.invalid_rows),
        failed=len(summary.failed_rows),
    )
    return summary
