from __future__ import annotations

import re
from datetime import UTC, datetime

import pytest
from bson import ObjectId
from search_query.mongo_query import build_match_condition, escape_regex, normalize_text


def test_string_becomes_accent_free_case_insensitive_regex() -> None:
    assert build_match_condition("name", "  José ") == {
        "name": {"$regex": "Jose", "$options": "i"}
    }


def test_accents_can_be_kept_and_options_changed() -> None:
    condition = build_match_condition("name", "José", strip_accents=False, regex_options="im")

    assert condition == {"name": {"$regex": "José", "$options": "im"}}


def test_normalize_text_strips_combining_marks() -> None:
    assert normalize_text("Ångström, Crème brûlée, niño") == "Angstrom, Creme brulee, nino"


def test_escape_regex_escapes_metacharacters() -> None:
    assert escape_regex("a.b*(c)") == r"a\.b\*\(c\)"
    assert escape_regex("plain text-ok") == "plain text-ok"


@pytest.mark.parametrize(
    "raw",
    [
        "C++ [beta]",
        "$5.00 (approx)?",
        "a|b^c{2}",
        "back\\slash",
        "  Crème Brûlée  ",
        "São Paulo.*",
    ],
)
def test_regex_matches_original_literally(raw: str) -> None:
    condition = build_match_condition("field", raw)
    assert condition is not None
    pattern = condition["field"]["$regex"]
    literal = normalize_text(raw.strip())

    assert re.search(pattern, f"prefix {literal.upper()} suffix", re.IGNORECASE)
    assert re.fullmatch(pattern, literal)


@pytest.mark.parametrize("value", ["", "   ", True, None, b"raw", object()])
def test_values_without_a_condition(value: object) -> None:
    assert build_match_condition("field", value) is None


def test_scalars_use_equality() -> None:
    created = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
    owner = ObjectId("65a1f0c2e4b0a1b2c3d4e5f6")

    assert build_match_condition("age", 30) == {"age": 30}
    assert build_match_condition("score", 0.5) == {"score": 0.5}
    assert build_match_condition("created", created) == {"created": created}
    assert build_match_condition("owner", owner) == {"owner": owner}


def test_array_of_scalars_uses_membership() -> None:
    assert build_match_condition("tags", ["a", "b"]) == {"tags": {"$in": ["a", "b"]}}
    assert build_match_condition("tags", []) == {"tags": {"$in": []}}


def test_array_led_by_mapping_uses_first_element_only() -> None:
    items = [{"sku": "A1", "qty": 2}, {"sku": "B2"}, "stray"]

    assert build_match_condition("items", items) == {
        "items": {"$elemMatch": {"sku": "A1", "qty": 2}}
    }


def test_mixed_array_led_by_scalar_uses_membership() -> None:
    assert build_match_condition("items", ["x", {"sku": "A1"}]) == {
        "items": {"$in": ["x", {"sku": "A1"}]}
    }


def test_range_produces_inclusive_bounds() -> None:
    assert build_match_condition("createdAt", {"from": "2024-01-01", "to": "2024-12-31"}) == {
        "createdAt": {
            "$gte": datetime(2024, 1, 1, tzinfo=UTC),
            "$lte": datetime(2024, 12, 31, tzinfo=UTC),
        }
    }


def test_open_ended_ranges() -> None:
    assert build_match_condition("createdAt", {"from": "2024-01-01"}) == {
        "createdAt": {"$gte": datetime(2024, 1, 1, tzinfo=UTC)}
    }
    assert build_match_condition("createdAt", {"from": None, "to": "2024-12-31"}) == {
        "createdAt": {"$lte": datetime(2024, 12, 31, tzinfo=UTC)}
    }


def test_plain_mapping_uses_element_match() -> None:
    assert build_match_condition("variants", {"color": "red"}) == {
        "variants": {"$elemMatch": {"color": "red"}}
    }
    assert build_match_condition("window", {"from": None, "to": None}) == {
        "window": {"$elemMatch": {"from": None, "to": None}}
    }


def test_extended_flag_keeps_whitespace_and_hash_literal() -> None:
    condition = build_match_condition("city", "New York #5", regex_options="ix")
    assert condition is not None
    pattern = condition["city"]["$regex"]

    assert pattern == r"New\ York\ \#5"
    assert re.search(pattern, "in new york #5 today", re.VERBOSE | re.IGNORECASE)


def test_whitespace_is_left_alone_without_extended_flag() -> None:
    assert escape_regex("New York #5") == "New York #5"
    assert escape_regex("a b.c", verbose=True) == r"a\ b\.c"


def test_unparseable_range_yields_no_condition() -> None:
    assert build_match_condition("createdAt", {"from": "soon"}) is None
