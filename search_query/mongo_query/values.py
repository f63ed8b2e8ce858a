"""Recognized shapes of search values and the classifier that maps raw input onto them."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, TypeAlias

from bson import Decimal128, ObjectId

logger = logging.getLogger(__name__)

RANGE_KEYS = ("from", "to")

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


@dataclass(frozen=True, slots=True)
class Text:
    value: str


@dataclass(frozen=True, slots=True)
class Number:
    value: int | float | Decimal | Decimal128


@dataclass(frozen=True, slots=True)
class Timestamp:
    value: datetime


@dataclass(frozen=True, slots=True)
class Identifier:
    value: ObjectId | uuid.UUID


@dataclass(frozen=True, slots=True)
class Array:
    items: list[Any]


@dataclass(frozen=True, slots=True)
class Range:
    """Inclusive bounds; either side may be open."""

    lower: datetime | None = None
    upper: datetime | None = None


@dataclass(frozen=True, slots=True)
class Document:
    value: Mapping[str, Any]


SearchValue: TypeAlias = Text | Number | Timestamp | Identifier | Array | Range | Document


def is_range_shaped(value: Mapping[Any, Any]) -> bool:
    return any(key in value for key in RANGE_KEYS)


def is_terminal(value: Any) -> bool:
    """Return True when flattening must record ``value`` instead of descending into it."""

    if not isinstance(value, Mapping):
        return True
    return is_range_shaped(value)


def classify_value(value: Any) -> SearchValue | None:
    """Map a flattened value onto one of the recognized shapes.

    Precedence follows the order of the checks below. Empty strings, booleans
    and unknown objects classify as ``None`` and produce no condition.
    """

    if isinstance(value, str):
        stripped = value.strip()
        return Text(stripped) if stripped else None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal, Decimal128)):
        return Number(value)
    if isinstance(value, (datetime, date)):
        return Timestamp(_as_datetime(value))
    if isinstance(value, (ObjectId, uuid.UUID)):
        return Identifier(value)
    if isinstance(value, (list, tuple)):
        return Array(list(value))
    if isinstance(value, Mapping):
        if is_range_shaped(value):
            given = [value.get(key) for key in RANGE_KEYS if not is_blank_bound(value.get(key))]
            if given:
                lower = parse_bound(value.get("from"))
                upper = parse_bound(value.get("to"))
                if lower is None and upper is None:
                    logger.debug(
                        "Dropping range without a parseable bound",
                        extra={"bounds": repr(given)},
                    )
                    return None
                return Range(lower=lower, upper=upper)
        return Document(value)
    return None


def is_blank_bound(raw: Any) -> bool:
    """True for bounds that count as not given: None, empty string, False and zero."""

    if raw is None or isinstance(raw, bool):
        return not raw
    if isinstance(raw, (str, int, float)):
        return raw == "" or raw == 0
    return False


def parse_bound(raw: Any) -> datetime | None:
    """Parse a range bound into an aware datetime, or None when absent or unparseable."""

    if is_blank_bound(raw) or isinstance(raw, bool):
        return None
    if isinstance(raw, (datetime, date)):
        return _as_datetime(raw)
    if isinstance(raw, (int, float)):
        try:
            return _EPOCH + timedelta(milliseconds=raw)
        except (OverflowError, ValueError):
            logger.debug("Dropping out-of-range epoch bound", extra={"bound": raw})
            return None
    if isinstance(raw, str):
        try:
            parsed = datetime.fromisoformat(raw.strip())
        except ValueError:
            logger.debug("Dropping unparseable range bound", extra={"bound": raw})
            return None
        return _as_datetime(parsed)
    logger.debug("Dropping range bound of unsupported type", extra={"bound": repr(raw)})
    return None


def _as_datetime(value: datetime | date) -> datetime:
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=UTC)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


__all__ = [
    "Array",
    "Document",
    "Identifier",
    "Number",
    "RANGE_KEYS",
    "Range",
    "SearchValue",
    "Text",
    "Timestamp",
    "classify_value",
    "is_range_shaped",
    "is_terminal",
    "parse_bound",
]
