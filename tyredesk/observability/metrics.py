# tyredesk/observability/metrics.py
from fastapi import APIRouter
from starlette.responses import Response

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

router = APIRouter(tags=["observability"])

ingestion_runs_counter = Counter(
    "tyredesk_price_list_ingestions_total",
    "Price list ingestion runs",
    ["result"],  # success|extraction_error|no_valid_data
)

ingestion_rows_counter = Counter(
    "tyredesk_price_list_rows_total",
    "Price list rows by outcome",
    ["outcome"],  # imported|invalid|failed
)

catalog_created_counter = Counter(
    "tyredesk_catalog_entities_created_total",
    "Catalog entities created during ingestion",
    ["entity"],  # size|brand|model
)

upload_size_hist = Histogram(
    "tyredesk_price_list_upload_bytes",
    "Size of uploaded price list files",
    buckets=(1e4, 1e5, 3e5, 1e6, 3e6, 1e7, 3e7),
)

extraction_latency_hist = Histogram(
    "tyredesk_extraction_latency_seconds",
    "Round trip to the extraction service",
    buckets=(0.5, 1, 2.5, 5, 10, 30, 60, 120),
)

search_counter = Counter(
    "tyredesk_tyre_searches_total",
    "Tyre searches",
    ["result"],  # hit|empty
)


@router.get("/metrics", include_in_schema=True)
def metrics() -> Response:
    # Prometheus expects text/plain; version=0.0.4
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
