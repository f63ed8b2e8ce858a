from __future__ import annotations

import os
import sys
import tomllib
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
DEFAULT_CONFIG_FILE = Path.home() / ".config" / "search_query" / "config.toml"
ENV_FILE_ENV_VAR = "SEARCH_QUERY_ENV_FILE"
CONFIG_FILE_ENV_VAR = "SEARCH_QUERY_CONFIG_FILE"

_PATH_TO_ENV_KEY: dict[tuple[str, str], str] = {
    ("query", "strip_accents"): "SEARCH_QUERY_STRIP_ACCENTS",
    ("query", "regex_options"): "SEARCH_QUERY_REGEX_OPTIONS",
    ("query", "match_stage"): "SEARCH_QUERY_MATCH_STAGE",
}
_ENV_KEY_TO_PATH = {env_name: path for path, env_name in _PATH_TO_ENV_KEY.items()}

_SECTION_FIELDS: dict[str, set[str]] = {}
for section, field in _PATH_TO_ENV_KEY:
    _SECTION_FIELDS.setdefault(section, set()).add(field)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_REGEX_FLAGS = set("imsx")


class ConfigError(RuntimeError):
    """Raised when the configuration cannot be loaded."""


@dataclass(frozen=True)
class QueryConfig:
    strip_accents: bool = True
    regex_options: str = "i"
    match_stage: bool = True


@dataclass(frozen=True)
class AppConfig:
    query: QueryConfig


_CONFIG_CACHE: AppConfig | None = None


def get_config() -> AppConfig:
    """Return a cached configuration using the default sources."""
    global _CONFIG_CACHE
    if _CONFIG_CACHE is None:
        _CONFIG_CACHE = load_config()
    return _CONFIG_CACHE


def load_config(
    *,
    env_file: Path | str | None = None,
    config_file: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load a configuration from `.env`, the personal config file, and environment variables."""
    env_path = _resolve_file(env_file, ENV_FILE_ENV_VAR, DEFAULT_ENV_FILE)
    config_path = _resolve_file(config_file, CONFIG_FILE_ENV_VAR, DEFAULT_CONFIG_FILE)

    merged: dict[str, Any] = {}
    _deep_merge(merged, _env_mapping_to_nested(_parse_env_file(env_path)))
    _deep_merge(merged, _filter_known_sections(_read_config_file(config_path)))
    runtime_values = environ if environ is not None else os.environ
    _deep_merge(merged, _env_mapping_to_nested(runtime_values))
    return _build_app_config(merged)


def doctor(*, env_file: Path | str | None = None, config_file: Path | str | None = None) -> bool:
    """Validate configuration sources and print the effective query settings."""
    try:
        config = load_config(env_file=env_file, config_file=config_file)
    except ConfigError as exc:
        print("Configuration invalid:", file=sys.stderr)
        print(f"  {exc}", file=sys.stderr)
        return False

    print("Configuration looks good.", file=sys.stdout)
    print(f"  Strip accents: {config.query.strip_accents}", file=sys.stdout)
    print(f"  Regex options: {config.query.regex_options!r}", file=sys.stdout)
    print(f"  Wrap as $match stage: {config.query.match_stage}", file=sys.stdout)
    return True


def _build_app_config(data: Mapping[str, Any]) -> AppConfig:
    section = data.get("query")
    raw = section if isinstance(section, Mapping) else {}
    defaults = QueryConfig()

    errors: list[str] = []
    strip_accents = _coerce_bool(raw.get("strip_accents"), defaults.strip_accents, "strip_accents", errors)
    match_stage = _coerce_bool(raw.get("match_stage"), defaults.match_stage, "match_stage", errors)
    regex_options = _coerce_regex_options(raw.get("regex_options"), defaults.regex_options, errors)

    if errors:
        errors.sort()
        raise ConfigError("Invalid values for " + ", ".join(errors))

    return AppConfig(
        query=QueryConfig(
            strip_accents=strip_accents,
            regex_options=regex_options,
            match_stage=match_stage,
        )
    )


def _coerce_bool(value: Any, default: bool, field: str, errors: list[str]) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized == "":
        return default
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    errors.append(f"{_PATH_TO_ENV_KEY[('query', field)]} (expected a boolean, got {value!r})")
    return default


def _coerce_regex_options(value: Any, default: str, errors: list[str]) -> str:
    if value is None:
        return default
    options = str(value).strip()
    unknown = set(options) - _REGEX_FLAGS
    if unknown:
        flags = "".join(sorted(unknown))
        errors.append(f"SEARCH_QUERY_REGEX_OPTIONS (unsupported flags {flags!r})")
        return default
    return "".join(dict.fromkeys(options))


def _resolve_file(explicit: Path | str | None, env_var: str, default: Path) -> Path:
    if explicit is not None:
        return Path(explicit)
    override = os.environ.get(env_var)
    if override:
        return Path(override)
    return default


def _parse_env_file(path: Path) -> dict[str, str]:
    try:
        contents = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as exc:
        raise ConfigError(f"Failed to read env file {path}: {exc}") from exc

    values: dict[str, str] = {}
    for raw_line in contents.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        if "=" not in line:
            continue
        key, raw_value = line.split("=", 1)
        values[key.strip()] = _strip_quotes(raw_value.strip())
    return values


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and ((value[0] == value[-1]) and value.startswith(("'", '"'))):
        return value[1:-1]
    return value


def _read_config_file(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError:
        return {}
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Config file {path} is not valid TOML: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc


def _filter_known_sections(raw: Mapping[str, Any]) -> dict[str, Any]:
    filtered: dict[str, Any] = {}
    for section, allowed_fields in _SECTION_FIELDS.items():
        raw_section = raw.get(section)
        if isinstance(raw_section, Mapping):
            filtered_section = {
                field: raw_section[field] for field in allowed_fields if field in raw_section
            }
            if filtered_section:
                filtered[section] = filtered_section
    return filtered


def _env_mapping_to_nested(mapping: Mapping[str, Any]) -> dict[str, Any]:
    nested: dict[str, Any] = {}
    for key, value in mapping.items():
        path = _ENV_KEY_TO_PATH.get(key)
        if not path:
            continue
        _assign_path(nested, path, value)
    return nested


def _assign_path(target: MutableMapping[str, Any], path: tuple[str, ...], value: Any) -> None:
    current: MutableMapping[str, Any] = target
    for component in path[:-1]:
        next_value = current.get(component)
        if not isinstance(next_value, MutableMapping):
            next_value = {}
            current[component] = next_value
        current = next_value
    current[path[-1]] = value


def _deep_merge(target: MutableMapping[str, Any], data: Mapping[str, Any]) -> None:
    for key, value in data.items():
        if isinstance(value, Mapping):
            child = target.get(key)
            if not isinstance(child, MutableMapping):
                child = {}
                target[key] = child
            _deep_merge(child, value)
        elif value is not None:
            target[key] = value


__all__ = [
    "AppConfig",
    "ConfigError",
    "QueryConfig",
    "doctor",
    "get_config",
    "load_config",
]
