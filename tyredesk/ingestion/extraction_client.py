"""
Client for the price list extraction service.

The service reads a PDF / spreadsheet with a language model and answers
with `{success, message, data: {rows, invalidRows?, total}}`. We treat the
answer as untrusted: the envelope must match ExtractionResponse exactly,
and the rows themselves still go through the ingestion validator.

Single attempt, no retry. Any transport or contract problem is an
ExtractionError for the whole upload.
"""

from __future__ import annotations

import base64
import mimetypes
from dataclasses import dataclass
from typing import Any, List, Optional

import requests
from pydantic import ValidationError

from tyredesk.core.errors import ExtractionError
from tyredesk.core.logging_config import logger
from tyredesk.core.settings import settings
from tyredesk.schemas.price_list import ExtractionResponse


@dataclass(frozen=True)
class ExtractionResult:
    rows: List[Any]
    message: str
    total: Optional[int] = None
    service_invalid_rows: Optional[List[Any]] = None


def to_data_url(file_bytes: bytes, content_type: str) -> str:
    payload = base64.b64encode(file_bytes).decode("ascii")
    return f"data:{content_type};base64,{payload}"


def guess_content_type(file_name: str) -> str:
    ctype, _ = mimetypes.guess_type(file_name)
    return ctype or "application/octet-stream"


class ExtractionClient:
    def __init__(self, url: str, api_key: Optional[str] = None, timeout: float = 120.0):
        self.url = url
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json"}
        if api_key:
            self.headers["Authorization"] = f"Bearer {api_key}"

    def extract(
        self,
        file_bytes: bytes,
        supplier_id: str,
        file_name: str,
        content_type: Optional[str] = None,
    ) -> ExtractionResult:
        log = logger.bind(supplier_id=supplier_id, file_name=file_name)
        body = {
            "file": to_data_url(file_bytes, content_type or guess_content_type(file_name)),
            "supplierId": supplier_id,
            "fileName": file_name,
        }

        log.info("extraction_request", bytes=len(file_bytes))
        try:
            response = requests.post(
                self.url, json=body, headers=self.headers, timeout=self.timeout
            )
        except requests.Timeout as e:
            log.error("extraction_timeout", timeout=self.timeout)
            raise ExtractionError(
                "The extraction service did not answer in time.", {"timeout": self.timeout}
            ) from e
        except requests.RequestException as e:
            log.error("extraction_unreachable", error=repr(e))
            raise ExtractionError("The extraction service is unreachable.") from e

        try:
            payload = response.json()
        except ValueError as e:
            log.error("extraction_not_json", status_code=response.status_code)
            raise ExtractionError(
                f"The extraction service returned an unreadable answer (HTTP {response.status_code}).",
                {"status_code": response.status_code},
            ) from e

        return self.parse_response(payload, status_code=response.status_code, supplier_id=supplier_id)

    @staticmethod
    def parse_response(payload: Any, *, status_code: int = 200, supplier_id: str = "") -> ExtractionResult:
        """Validate the envelope. Everything that deviates is an ExtractionError."""
        log = logger.bind(supplier_id=supplier_id)
        try:
            parsed = ExtractionResponse.model_validate(payload)
        except ValidationError as e:
            log.error("extraction_bad_envelope", status_code=status_code, errors=e.errors())
            raise ExtractionError(
                "The extraction service answered in an unexpected format.",
                {"status_code": status_code},
            ) from e

        if not parsed.success:
            log.warning("extraction_failed", status_code=status_code, message=parsed.message)
            raise ExtractionError(
                parsed.message or "The extraction service could not process the file.",
                {"status_code": status_code},
            )

        if parsed.data is None or not parsed.data.rows:
            log.warning("extraction_empty", status_code=status_code)
            raise ExtractionError(
                "No tyre prices were found in the document.", {"status_code": status_code}
            )

        log.info("extraction_ok", rows=len(parsed.data.rows), total=parsed.data.total)
        return ExtractionResult(
            rows=list(parsed.data.rows),
            message=parsed.message,
            total=parsed.data.total,
            service_invalid_rows=parsed.data.invalid_rows,
        )


def get_extraction_client() -> ExtractionClient:
    """FastAPI dependency; overridden in tests."""
    return ExtractionClient(
        url=settings.EXTRACTION_SERVICE_URL,
        api_key=settings.EXTRACTION_SERVICE_KEY,
        timeout=settings.EXTRACTION_TIMEOUT_SEC,
    )
