from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List

from tyredesk.core.errors import ExtractionError, NoValidDataError, SizeParseError
from tyredesk.core.logging_config import logger
from tyredesk.pricing.size_parser import parse_tyre_size
from tyredesk.schemas.price_list import PriceListRow

# size components are stored as 32-bit integers
MAX_SIZE_COMPONENT = 2**31 - 1


@dataclass(frozen=True)
class InvalidRow:
    index: int  # position in the extraction output (0-based)
    row: Any
    reasons: List[str]


@dataclass
class ValidationReport:
    valid_rows: List[PriceListRow] = field(default_factory=list)
    invalid_rows: List[InvalidRow] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.valid_rows) + len(self.invalid_rows)


def _required_text(row: dict, key: str, reasons: List[str]) -> str:
    v = row.get(key)
    if v is None:
        reasons.append(f"{key} is missing")
        return ""
    if not isinstance(v, str):
        reasons.append(f"{key} must be text, got {type(v).__name__}")
        return ""
    s = v.strip()
    if s == "":
        reasons.append(f"{key} is empty")
    return s


def _check_size(row: dict, reasons: List[str]) -> str:
    v = row.get("size")
    if v is None or (isinstance(v, str) and v.strip() == ""):
        reasons.append("size is missing")
        return ""
    try:
        parts = parse_tyre_size(v)
    except SizeParseError:
        reasons.append(f"size '{v}' is not in the format 205/55R16")
        return ""
    if max(parts.width, parts.aspect_ratio, parts.diameter) > MAX_SIZE_COMPONENT:
        reasons.append(f"size '{v}' is out of range")
        return ""
    return parts.size


def _check_cost(row: dict, reasons: List[str]) -> float:
    v = row.get("cost")
    if v is None:
        reasons.append("cost is missing")
        return 0.0
    # bool is an int subclass; "120" from a model is not a number either
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        reasons.append(f"cost must be a number, got {type(v).__name__}")
        return 0.0
    try:
        cost = float(v)
    except OverflowError:
        reasons.append("cost is out of range")
        return 0.0
    if not math.isfinite(cost):
        reasons.append(f"cost must be a finite number, got {v}")
    elif cost <= 0:
        reasons.append(f"cost must be greater than 0, got {v}")
    return cost


def validate_row(row: Any) -> tuple[PriceListRow | None, List[str]]:
    """Check one extracted row. Returns (row, []) or (None, reasons)."""
    if not isinstance(row, dict):
        return None, [f"row must be an object, got {type(row).__name__}"]

    reasons: List[str] = []
    size = _check_size(row, reasons)
    brand = _required_text(row, "brand", reasons)
    model = _required_text(row, "model", reasons)
    cost = _check_cost(row, reasons)

    if reasons:
        return None, reasons
    return PriceListRow(size=size, brand=brand, model=model, cost=cost), []


def validate_extracted_rows(rows: List[Any], supplier_id: str) -> ValidationReport:
    """
    Partition extraction output into valid/invalid rows.

    - no rows at all -> ExtractionError
    - rows, but none valid -> NoValidDataError (carries the invalid rows)
    Every invalid row is kept with at least one reason.
    """
    log = logger.bind(supplier_id=supplier_id)

    if not rows:
        log.warning("price_list_no_rows")
        raise ExtractionError("The extraction service returned no rows.")

    report = ValidationReport()
    for idx, raw in enumerate(rows):
        parsed, reasons = validate_row(raw)
        if parsed is None:
            report.invalid_rows.append(InvalidRow(index=idx, row=raw, reasons=reasons))
            log.info("price_list_row_invalid", row_index=idx, reasons=reasons)
            continue
        report.valid_rows.append(parsed)

    log.info(
        "price_list_validated",
        total=report.total,
        valid=len(report.valid_rows),
        invalid=len(report.invalid_rows),
    )

    if not report.valid_rows:
        raise NoValidDataError(
            f"The price list was read but none of its {report.total} rows were usable.",
            report.invalid_rows,
        )

    return report
