"""Per-field MongoDB conditions derived from flattened search values."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Mapping
from typing import Any

from search_query.mongo_query.values import (
    Array,
    Document,
    Identifier,
    Number,
    Range,
    SearchValue,
    Text,
    Timestamp,
    classify_value,
)

DEFAULT_REGEX_OPTIONS = "i"

_REGEX_SPECIAL = re.compile(r"[.*+?^${}()|\[\]\\]")
# Under the extended flag unescaped whitespace and "#" stop being literal.
_VERBOSE_SPECIAL = re.compile(r"[\s#]")


def normalize_text(text: str) -> str:
    """Strip diacritics: NFD decomposition followed by removal of combining marks."""

    decomposed = unicodedata.normalize("NFD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def escape_regex(text: str, *, verbose: bool = False) -> str:
    escaped = _REGEX_SPECIAL.sub(r"\\\g<0>", text)
    if verbose:
        escaped = _VERBOSE_SPECIAL.sub(r"\\\g<0>", escaped)
    return escaped


def build_match_condition(
    key: str,
    value: Any,
    *,
    strip_accents: bool = True,
    regex_options: str = DEFAULT_REGEX_OPTIONS,
) -> dict[str, Any] | None:
    """Build ``{key: <operator expression>}`` for one flattened value, or None."""

    shape = classify_value(value)
    if shape is None:
        return None
    expression = _expression_for(shape, strip_accents=strip_accents, regex_options=regex_options)
    if expression is None:
        return None
    return {key: expression}


def _expression_for(shape: SearchValue, *, strip_accents: bool, regex_options: str) -> Any:
    match shape:
        case Text(value=text):
            literal = normalize_text(text) if strip_accents else text
            return {
                "$regex": escape_regex(literal, verbose="x" in regex_options),
                "$options": regex_options,
            }
        case Number(value=number):
            return number
        case Timestamp(value=moment):
            return moment
        case Identifier(value=identifier):
            return identifier
        # only mapping heads count as sub-documents; dates and ids at the head give $in
        case Array(items=[first, *_]) if isinstance(first, Mapping):
            return {"$elemMatch": first}
        case Array(items=items):
            return {"$in": items}
        case Range(lower=lower, upper=upper):
            bounds: dict[str, Any] = {}
            if lower is not None:
                bounds["$gte"] = lower
            if upper is not None:
                bounds["$lte"] = upper
            return bounds
        case Document(value=pattern):
            return {"$elemMatch": dict(pattern)}
    return None


__all__ = [
    "DEFAULT_REGEX_OPTIONS",
    "build_match_condition",
    "escape_regex",
    "normalize_text",
]
