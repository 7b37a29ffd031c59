from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any, Optional

VIEWS = ("summary", "authors", "files", "detail", "languages", "dirs")
FORMATS = ("text", "csv", "json")


class ConfigError(ValueError):
    pass


def load_config(config_path: Optional[Path]) -> dict:
    if config_path is None or not config_path.exists():
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"failed to read config {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config {config_path} must be a JSON object")
    return data


def _str_list(config: dict, key: str) -> list[str]:
    value = config.get(key) or []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ConfigError(f"config key {key!r} must be a list of strings")
    return [str(v).strip() for v in value if str(v).strip()]


def _bool(config: dict, key: str, default: bool) -> bool:
    value = config.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"config key {key!r} must be true or false")
    return value


def _choice(value: Any, key: str, choices: tuple[str, ...]) -> str:
    s = str(value).strip().lower()
    if s not in choices:
        raise ConfigError(f"{key} must be one of {', '.join(choices)}, got {value!r}")
    return s


@dataclasses.dataclass
class OwnershipSettings:
    revision: str = "HEAD"
    jobs: int = 0
    exclude: str = ""
    exclude_path_prefixes: list[str] = dataclasses.field(default_factory=list)
    exclude_path_globs: list[str] = dataclasses.field(default_factory=list)
    detect_moves: bool = True
    ignore_whitespace: bool = True
    by_email: bool = False
    view: str = "summary"
    format: str = "text"


def settings_from_config(config: dict) -> OwnershipSettings:
    jobs = config.get("jobs", 0)
    if isinstance(jobs, bool) or not isinstance(jobs, int):
        raise ConfigError(f"config key 'jobs' must be an integer, got {jobs!r}")
    return OwnershipSettings(
        revision=str(config.get("revision") or "HEAD").strip() or "HEAD",
        jobs=jobs,
        exclude=str(config.get("exclude") or ""),
        exclude_path_prefixes=_str_list(config, "exclude_path_prefixes"),
        exclude_path_globs=_str_list(config, "exclude_path_globs"),
        detect_moves=_bool(config, "detect_moves", True),
        ignore_whitespace=_bool(config, "ignore_whitespace", True),
        by_email=_bool(config, "by_email", False),
        view=_choice(config.get("view", "summary"), "view", VIEWS),
        format=_choice(config.get("format", "text"), "format", FORMATS),
    )
