"""Collapse nested search mappings into dot-addressed keys."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from search_query.mongo_query.values import is_terminal

logger = logging.getLogger(__name__)


def flatten_search(search: Mapping[Any, Any] | None) -> dict[str, Any]:
    """Return ``search`` flattened depth-first into ``{"a.b.c": value}`` pairs.

    Lists, dates, identifiers and range-shaped mappings (those holding a
    ``from`` or ``to`` key) are recorded as-is; any other mapping is descended
    into. ``None`` values and callables are skipped. Each mapping instance is
    visited at most once, so self-referential input stops at the repeat and
    keeps whatever was collected before it.
    """

    flattened: dict[str, Any] = {}
    if search is None:
        return flattened
    _flatten_into(flattened, search, parent="", seen=set())
    return flattened


def _flatten_into(
    target: dict[str, Any],
    mapping: Mapping[Any, Any],
    *,
    parent: str,
    seen: set[int],
) -> None:
    if id(mapping) in seen:
        logger.debug("Stopped flattening at repeated mapping", extra={"path": parent or "<root>"})
        return
    seen.add(id(mapping))

    for key, value in mapping.items():
        if value is None or callable(value):
            continue
        path = f"{parent}.{key}" if parent else str(key)
        if is_terminal(value):
            target[path] = value
        else:
            _flatten_into(target, value, parent=path, seen=seen)


__all__ = ["flatten_search"]
