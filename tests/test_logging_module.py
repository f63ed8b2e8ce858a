from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

import pytest
from bson import ObjectId
from search_query.logging import configure_logging


def test_json_logs_carry_extra_fields(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(level="debug", fmt="json", destination="stdout")
    logging.getLogger("search_query.test").debug(
        "condition skipped",
        extra={
            "key": "profile.city",
            "owner": ObjectId("65a1f0c2e4b0a1b2c3d4e5f6"),
            "at": datetime(2024, 1, 1, tzinfo=UTC),
        },
    )

    payload = json.loads(capsys.readouterr().out.strip())
    assert payload["message"] == "condition skipped"
    assert payload["level"] == "DEBUG"
    assert payload["logger"] == "search_query.test"
    assert payload["key"] == "profile.city"
    assert payload["owner"] == "65a1f0c2e4b0a1b2c3d4e5f6"
    assert payload["at"] == "2024-01-01T00:00:00+00:00"
    assert "timestamp" in payload


def test_auto_destination_splits_by_level(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(level="INFO", fmt="text", destination="auto")
    logger = logging.getLogger("search_query.split")
    logger.debug("hidden-line")
    logger.info("info-line")
    logger.warning("warn-line")

    captured = capsys.readouterr()
    assert "info-line" in captured.out
    assert "warn-line" not in captured.out
    assert "warn-line" in captured.err
    assert "hidden-line" not in captured.out + captured.err


def test_reconfiguring_replaces_handlers() -> None:
    configure_logging(destination="auto")
    root = configure_logging(destination="stderr")

    assert len(root.handlers) == 1


def test_unknown_level_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown log level"):
        configure_logging(level="chatty")
