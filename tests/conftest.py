from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import search_query.config as search_config

SETTING_KEYS = (
    "SEARCH_QUERY_STRIP_ACCENTS",
    "SEARCH_QUERY_REGEX_OPTIONS",
    "SEARCH_QUERY_MATCH_STAGE",
)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the developer's own .env and config.toml out of every test."""

    for key in SETTING_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv(search_config.ENV_FILE_ENV_VAR, str(tmp_path / "absent.env"))
    monkeypatch.setenv(search_config.CONFIG_FILE_ENV_VAR, str(tmp_path / "absent.toml"))
    monkeypatch.setattr(search_config, "_CONFIG_CACHE", None)


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    before = set(root.handlers)
    level = root.level
    try:
        yield
    finally:
        for handler in list(root.handlers):
            if handler not in before:
                root.removeHandler(handler)
        root.setLevel(level)
        logging.captureWarnings(False)
