"""Translate nested search objects into MongoDB filter fragments."""

from __future__ import annotations

from search_query.mongo_query.builder import (
    build_filter,
    build_match_conditions,
    build_search_query,
)
from search_query.mongo_query.conditions import (
    build_match_condition,
    escape_regex,
    normalize_text,
)
from search_query.mongo_query.flatten import flatten_search
from search_query.mongo_query.values import SearchValue, classify_value

__all__ = [
    "SearchValue",
    "build_filter",
    "build_match_condition",
    "build_match_conditions",
    "build_search_query",
    "classify_value",
    "escape_regex",
    "flatten_search",
    "normalize_text",
]
