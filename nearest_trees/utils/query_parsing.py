"""
Parsing utilities for nearest-tree query parameters.

Query parameters arrive as raw strings so that missing and malformed
coordinates can be reported with the service's own error body instead of
the framework's validation payload.
"""
import math
import re
from typing import Optional
from pydantic import BaseModel

from nearest_trees.domain.models import QueryPoint


MISSING_COORDINATES = "Latitude and longitude are required"
INVALID_COORDINATES = "Invalid latitude or longitude"

# Plain decimal notation only; rejects "1_000", "inf", "nan" and hex floats
DECIMAL_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
INTEGER_PATTERN = re.compile(r"[+-]?\d+", re.ASCII)

# Largest value PostgreSQL accepts for LIMIT (bigint)
MAX_LIMIT = 2 ** 63 - 1


class InvalidQueryError(ValueError):
    """Raised when a query cannot be answered because of client input."""
    pass


class TreeQuery(BaseModel):
    """A validated nearest-tree query."""
    point: QueryPoint
    limit: int


def _parse_decimal(raw: str) -> Optional[float]:
    text = raw.strip()
    if not DECIMAL_PATTERN.fullmatch(text):
        return None
    value = float(text)
    return value if math.isfinite(value) else None


def parse_coordinate(raw: Optional[str]) -> float:
    """
    Parse a decimal-degree coordinate.

    Args:
        raw: Raw query parameter value

    Returns:
        Coordinate as a finite float

    Raises:
        InvalidQueryError: If the value is missing or not a finite number
    """
    if raw is None or not raw.strip():
        raise InvalidQueryError(MISSING_COORDINATES)
    value = _parse_decimal(raw)
    if value is None:
        raise InvalidQueryError(INVALID_COORDINATES)
    return value


def parse_limit(raw: Optional[str], default: int = 1) -> int:
    """
    Parse a result-count limit, falling back to ``default`` instead of failing.

    Decimal values are truncated toward zero. Anything that does not yield a
    positive integer within the database's LIMIT range uses the default.
    """
    if raw is None or not raw.strip():
        return default
    text = raw.strip()
    if INTEGER_PATTERN.fullmatch(text):
        if len(text.lstrip("+-0")) > len(str(MAX_LIMIT)):
            return default
        value = int(text)
    else:
        number = _parse_decimal(text)
        if number is None:
            return default
        value = int(number)
    return value if 0 < value <= MAX_LIMIT else default


def parse_tree_query(
    lat: Optional[str],
    lng: Optional[str],
    limit: Optional[str],
    default_limit: int = 1,
) -> TreeQuery:
    """
    Build a validated query from raw parameters.

    Presence of both coordinates is checked before either is parsed, so a
    request missing ``lng`` reports the missing value even if ``lat`` is
    malformed.

    Raises:
        InvalidQueryError: If a coordinate is missing or invalid
    """
    if lat is None or lng is None or not lat.strip() or not lng.strip():
        raise InvalidQueryError(MISSING_COORDINATES)

    point = QueryPoint(lat=parse_coordinate(lat), lng=parse_coordinate(lng))
    return TreeQuery(point=point, limit=parse_limit(limit, default=default_limit))
