from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CSV_PATH = Path("tnt/dump_release_tntvillage_2019-08-30.csv")
DEFAULT_README_PATH = Path("tnt/README.txt")
DEFAULT_DB_PATH = Path("tnt.sqlite")

ENV_PREFIX = "TNT_"


@dataclass(frozen=True)
class BuildConfig:
    csv_path: Path = DEFAULT_CSV_PATH
    readme_path: Path = DEFAULT_README_PATH
    db_path: Path = DEFAULT_DB_PATH
    progress_every: int = 100
    newline_every: int = 5000


_PATH_FIELDS = {"csv_path", "readme_path", "db_path"}
_INT_FIELDS = {"progress_every", "newline_every"}


def _coerce(key: str, value: Any, source: str) -> Any:
    if key in _PATH_FIELDS:
        if value is None or str(value).strip() == "":
            raise ConfigError(f"{source}: '{key}' must be a non-empty path")
        return Path(str(value))
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{source}: '{key}' must be an integer, got {value!r}") from None
    if number < 0:
        raise ConfigError(f"{source}: '{key}' must not be negative")
    return number


def _apply(config: BuildConfig, values: Mapping[str, Any], source: str) -> BuildConfig:
    known = {f.name for f in fields(BuildConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"{source}: unknown keys {unknown}")
    updates = {key: _coerce(key, value, source) for key, value in values.items() if value is not None}
    return replace(config, **updates)


def load_yaml_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    content = path.read_text(encoding="utf-8")
    if not content.strip():
        return {}

    try:
        parsed = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML config at {path}") from exc

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")
    return {str(k): v for k, v in parsed.items()}


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    environ = os.environ if environ is None else environ
    overrides: Dict[str, str] = {}
    for f in fields(BuildConfig):
        value = environ.get(ENV_PREFIX + f.name.upper())
        if value:
            overrides[f.name] = value
    return overrides


def load_build_config(
    config_path: Optional[Path] = None,
    cli_overrides: Optional[Mapping[str, Any]] = None,
    use_dotenv: bool = True,
) -> BuildConfig:
    """
    Resolve build settings.

    Precedence, lowest first: built-in defaults, YAML file, ``TNT_*``
    environment variables (a ``.env`` file is loaded first; variables already
    set win), explicit CLI values. ``None`` values in ``cli_overrides`` mean
    "not given".
    """

    config = BuildConfig()
    if config_path is not None:
        config = _apply(config, load_yaml_config(config_path), str(config_path))
        logger.debug("Loaded build config file", extra={"config_path": str(config_path)})

    if use_dotenv:
        load_dotenv(override=False)
    config = _apply(config, env_overrides(), "environment")

    if cli_overrides:
        config = _apply(config, cli_overrides, "command line")
    return config
