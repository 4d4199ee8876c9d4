from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from tyredesk.core.errors import SizeParseError

# Strict: 205/55R16, R may be lower case. No spaces, no ZR, no dashes.
SIZE_PATTERN = re.compile(r"(\d+)/(\d+)[Rr](\d+)", re.ASCII)


@dataclass(frozen=True)
class TyreSizeParts:
    width: int
    aspect_ratio: int
    diameter: int

    @property
    def size(self) -> str:
        """Canonical string form, e.g. '205/55R16'."""
        return f"{self.width}/{self.aspect_ratio}R{self.diameter}"


def parse_tyre_size(raw: Any) -> TyreSizeParts:
    """
    Parse a canonical tyre size token.
    Raises SizeParseError for anything that is not exactly W/ARRD.
    """
    if not isinstance(raw, str):
        raise SizeParseError(raw)

    m = SIZE_PATTERN.fullmatch(raw)
    if not m:
        raise SizeParseError(raw)

    try:
        return TyreSizeParts(
            width=int(m.group(1), 10),
            aspect_ratio=int(m.group(2), 10),
            diameter=int(m.group(3), 10),
        )
    except ValueError as e:
        # int() refuses digit strings over sys.get_int_max_str_digits()
        raise SizeParseError(raw) from e


def is_tyre_size(raw: Any) -> bool:
    try:
        parse_tyre_size(raw)
    except SizeParseError:
        return False
    return True


def normalize_size_query(raw: str) -> str:
    """
    Search side: canonical form when the query is a tyre size, otherwise
    the trimmed input as an opaque lookup value.
    """
    q = (raw or "").strip()
    try:
        return parse_tyre_size(q).size
    except SizeParseError:
        return q
