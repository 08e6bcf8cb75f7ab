from __future__ import annotations

import json
from functools import cache
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft7Validator

from ..models.config_models import AppConfig, GeneratorSettings

"""Run configuration (config/shipdoc.yml).

The YAML is checked against the JSON schema bundled next to this module
before any value is read, so ``load_config`` only has to fill generator
defaults. Every schema violation is reported, not only the first one.
"""

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "ConfigError",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/shipdoc.yml")


class ConfigError(Exception):
    """Config file missing, unparsable, or not matching the schema."""


@cache
def _validator() -> Draft7Validator:
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    return Draft7Validator(schema)


def _describe(error: Any) -> str:
    where = ".".join(str(p) for p in error.absolute_path)
    return f"{where}: {error.message}" if where else error.message


def check_config(data: Any) -> None:
    """Raise ConfigError listing every schema violation of ``data``."""
    problems = sorted(_validator().iter_errors(data), key=lambda e: list(map(str, e.absolute_path)))
    if problems:
        raise ConfigError("config validation failed: " + "; ".join(_describe(e) for e in problems))


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    if not path.is_file():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    # 空ファイルは {} として検証し、必須キー不足で落とす
    data = {} if data is None else data
    check_config(data)

    return AppConfig(
        source_directory=data["source_directory"],
        output_directory=data["output_directory"],
        mapping_file=data.get("mapping_file"),
        generator=GeneratorSettings(**data.get("generator", {})),
    )
