"""Assemble flattened search conditions into a MongoDB filter fragment."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from search_query.mongo_query.conditions import DEFAULT_REGEX_OPTIONS, build_match_condition
from search_query.mongo_query.flatten import flatten_search

logger = logging.getLogger(__name__)


def build_match_conditions(
    search: Mapping[Any, Any] | None,
    *,
    strip_accents: bool = True,
    regex_options: str = DEFAULT_REGEX_OPTIONS,
) -> list[dict[str, Any]]:
    """Return one condition per flattened key, in traversal order."""

    conditions: list[dict[str, Any]] = []
    for key, value in flatten_search(search).items():
        condition = build_match_condition(
            key,
            value,
            strip_accents=strip_accents,
            regex_options=regex_options,
        )
        if condition is None:
            logger.debug("No condition for search key", extra={"key": key})
            continue
        conditions.append(condition)
    return conditions


def build_filter(
    search: Mapping[Any, Any] | None,
    *,
    strip_accents: bool = True,
    regex_options: str = DEFAULT_REGEX_OPTIONS,
) -> dict[str, Any] | None:
    """Return ``{"$and": [...]}`` for ``find()``-style queries, or None when nothing matched."""

    conditions = build_match_conditions(
        search,
        strip_accents=strip_accents,
        regex_options=regex_options,
    )
    if not conditions:
        return None
    return {"$and": conditions}


def build_search_query(
    search: Mapping[Any, Any] | None = None,
    *,
    strip_accents: bool = True,
    regex_options: str = DEFAULT_REGEX_OPTIONS,
) -> dict[str, Any] | None:
    """Return a ``$match`` aggregation stage for ``search``.

    ``None`` means no key produced a condition; callers decide whether that is
    a match-everything or a no-op stage.
    """

    fragment = build_filter(search, strip_accents=strip_accents, regex_options=regex_options)
    if fragment is None:
        return None
    return {"$match": fragment}


__all__ = [
    "build_filter",
    "build_match_conditions",
    "build_search_query",
]
