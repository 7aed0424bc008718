"""
TOML-based config file loading for the `change-detection` command.

Searches for `.change-detection.toml`, `change-detection.toml`, or
`pyproject.toml [tool.change-detection]` walking up from the current directory.
Config values are merged with CLI flags using three-way precedence: explicit CLI
flags > config file > built-in defaults.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

from change_detection.errors import ConfigurationError

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]

TOOL_NAME = "change-detection"


@dataclass
class ChangeDetectionConfig:
    """
    Parsed config from a TOML file. Fields are `None` when not set in the config,
    so the merge can tell "not configured" from "explicitly set to the default".
    """

    paths: list[str] | None = None
    include: list[str] | None = None
    exclude: list[str] | None = None
    prefix: str | None = None
    watch_directories: bool | None = None


# Config file search order (first match wins within each directory level)
_CONFIG_FILENAMES = [f".{TOOL_NAME}.toml", f"{TOOL_NAME}.toml", "pyproject.toml"]

_VALID_FIELDS = {f.name for f in fields(ChangeDetectionConfig)}

_LIST_FIELDS = {"paths", "include", "exclude"}


def find_config_file(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a config file. Returns the first found,
    or `None`. Search order per directory: `.change-detection.toml` >
    `change-detection.toml` > `pyproject.toml` (only with `[tool.change-detection]`).
    """
    current = start_dir.resolve()
    while True:
        for filename in _CONFIG_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                if filename == "pyproject.toml":
                    if _pyproject_has_tool_section(candidate):
                        return candidate
                else:
                    return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def _pyproject_has_tool_section(path: Path) -> bool:
    try:
        data = tomllib.loads(path.read_text())
        return TOOL_NAME in data.get("tool", {})
    except (tomllib.TOMLDecodeError, OSError):
        return False


def load_config(config_path: Path) -> ChangeDetectionConfig:
    """
    Load a `ChangeDetectionConfig` from a standalone config file or from
    `pyproject.toml` (the `[tool.change-detection]` table). Kebab-case keys are
    mapped to snake_case; unknown keys produce a warning on stderr and are ignored.
    """
    try:
        data = tomllib.loads(config_path.read_text())
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {config_path}: {e}") from e

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get(TOOL_NAME, {})

    return _parse_config_data(data, config_path)


def _parse_config_data(data: dict[str, Any], source: Path | None = None) -> ChangeDetectionConfig:
    """Parse a flat or sectioned TOML dict into `ChangeDetectionConfig`."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            for sub_key, sub_value in cast(dict[str, Any], value).items():
                flat[sub_key] = sub_value
        else:
            flat[key] = value

    where = f" in {source}" if source else ""
    mapped: dict[str, Any] = {}
    for key, value in flat.items():
        snake_key = key.replace("-", "_")
        if snake_key in _VALID_FIELDS:
            mapped[snake_key] = value
        else:
            print(f"Warning: unrecognized config key {key!r}{where}", file=sys.stderr)

    for key, value in mapped.items():
        if key in _LIST_FIELDS:
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigurationError(f"`{key}`{where} must be a list of strings")
        elif key == "prefix" and not isinstance(value, str):
            raise ConfigurationError(f"`prefix`{where} must be a string")
        elif key == "watch_directories" and not isinstance(value, bool):
            raise ConfigurationError(f"`watch-directories`{where} must be true or false")

    return ChangeDetectionConfig(**mapped)


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: ChangeDetectionConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Merge CLI options with config file settings.

    Precedence: explicit CLI flags > config file > built-in defaults.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(ChangeDetectionConfig):
        cfg_value = getattr(config, cfg_field.name)
        if cfg_value is None:
            continue  # Not set in config

        if cfg_field.name in explicit_flags:
            continue

        if hasattr(cli_opts, cfg_field.name):
            setattr(cli_opts, cfg_field.name, cfg_value)

    return cli_opts
