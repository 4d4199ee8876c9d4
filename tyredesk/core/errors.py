from __future__ import annotations

from typing import Any, Dict, List, Optional


class TyreDeskError(Exception):
    """
    Base class for domain errors.
    `code` is machine-readable, `message` is meant for the user, `meta`
    carries the context needed to render an actionable message.
    """

    code: str = "TYREDESK_ERROR"

    def __init__(self, message: str, meta: Optional[Dict[str, Any]] = None):
        self.message = str(message)
        self.meta = meta or {}
        super().__init__(f"{self.code}: {self.message}")


# -----------------------
# Row level (recoverable)
# -----------------------


class ParseFailure(TyreDeskError, ValueError):
    code = "PARSE_FAILURE"


class SizeParseError(ParseFailure):
    """Raised when a string is not a canonical tyre size (W/ARRD)."""

    def __init__(self, raw: Any):
        self.raw = raw
        super().__init__(
            f"'{raw}' is not a tyre size (expected format 205/55R16)",
            {"raw": raw},
        )


class ValidationFailure(TyreDeskError, ValueError):
    code = "VALIDATION_FAILURE"


class PersistenceError(TyreDeskError):
    """A single catalog or price write failed; the batch continues."""

    code = "PERSISTENCE_FAILURE"


# -----------------------
# Batch level (fatal for the ingestion call)
# -----------------------


class ExtractionError(TyreDeskError):
    """
    The extraction service was unreachable, answered with something we
    cannot trust, or returned no rows at all.
    """

    code = "EXTRACTION_FAILURE"


class NoValidDataError(TyreDeskError):
    """
    The document was read but every extracted row failed validation.
    """

    code = "NO_VALID_DATA"

    def __init__(self, message: str, invalid_rows: List[Any]):
        self.invalid_rows = list(invalid_rows)
        super().__init__(message, {"invalid_count": len(self.invalid_rows)})
