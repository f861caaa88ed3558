from __future__ import annotations

import logging
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

from pydantic import ValidationError

from plistkit.schema import PlistkitConfig

DEFAULT_CONFIG_NAME = "plistkit.toml"

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]

logger = logging.getLogger(__name__)


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        logger.warning("ignoring malformed config %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def codec_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get("codec", {})
    return section if isinstance(section, dict) else {}


def logging_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get("logging", {})
    return section if isinstance(section, dict) else {}


def merge_payload(payload: TomlTable, defaults: TomlTable) -> TomlTable:
    merged = dict(defaults)
    for key, value in payload.items():
        if value is None:
            continue
        merged[key] = value
    return merged


def resolve_config(
    root: Path | None = None,
    config_path: Path | None = None,
    overrides: TomlTable | None = None,
) -> PlistkitConfig:
    """Build the effective configuration.

    Explicit ``overrides`` (``None`` values ignored) win over the file's
    ``[codec]`` section; a file that fails validation falls back to defaults.
    """
    codec = merge_payload(overrides or {}, codec_defaults(root, config_path))
    try:
        return PlistkitConfig.model_validate(
            {"codec": codec, "logging": logging_defaults(root, config_path)}
        )
    except ValidationError as exc:
        logger.warning("ignoring invalid plistkit configuration: %s", exc)
        return PlistkitConfig()
