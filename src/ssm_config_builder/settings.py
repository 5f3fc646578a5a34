"""
Runtime settings for the config builder process.

Settings hierarchy (highest to lowest priority):
1. Environment variables
2. Optional YAML settings file
3. BuilderSettings class defaults

Environment variables:
    AWS_REGION           AWS region for the SSM client (default: us-west-2)
    SSM_WITH_DECRYPTION  Decrypt SecureString parameters ("true"/"false")
    SSM_PAGE_SIZE        get_parameters_by_path MaxResults, 1-10 (default: 10)
    CONFIG_PREFIXES      Comma-separated prefixes, e.g. "/app/base,/app/prod"
    CONFIG_OUTPUT        "json", "json-compact" or "yaml" (default: json)
    CONFIG_STRIP_PREFIX  Make keys relative to their prefix (default: true)
    CONFIG_SORT_TYPES    Reorder schema "types" by dependency (default: false)
    LOG_LEVEL            Logging level name (default: INFO)
"""

import logging
import os
from dataclasses import dataclass, field, fields
from typing import Any, Optional

import yaml

from ssm_config_builder.builder import BuildOptions
from ssm_config_builder.parameter_store import SsmParameterStore

OUTPUT_MODES = ("json", "json-compact", "yaml")

_ENV_VARS = {
    "region": "AWS_REGION",
    "with_decryption": "SSM_WITH_DECRYPTION",
    "page_size": "SSM_PAGE_SIZE",
    "prefixes": "CONFIG_PREFIXES",
    "output": "CONFIG_OUTPUT",
    "strip_prefix": "CONFIG_STRIP_PREFIX",
    "sort_types": "CONFIG_SORT_TYPES",
    "log_level": "LOG_LEVEL",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class BuilderSettings:
    region: str = "us-west-2"
    with_decryption: bool = False
    page_size: int = 10
    prefixes: list[str] = field(default_factory=list)
    output: str = "json"
    strip_prefix: bool = True
    sort_types: bool = False
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.output not in OUTPUT_MODES:
            raise ValueError(
                f"output must be one of {', '.join(OUTPUT_MODES)}, got {self.output!r}"
            )
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"unknown log_level {self.log_level!r}")
        if not 1 <= self.page_size <= SsmParameterStore.MAX_PAGE_SIZE:
            raise ValueError(
                f"page_size must be between 1 and {SsmParameterStore.MAX_PAGE_SIZE}, "
                f"got {self.page_size}"
            )

    def to_build_options(self) -> BuildOptions:
        """Translate settings into explicit BuildOptions for ConfigBuilder."""
        return BuildOptions(
            prefixes=list(self.prefixes),
            strip_prefix=self.strip_prefix,
            json_output=self.output == "json",
            yaml_rules=self.output == "yaml",
            sort_by_dependencies=self.sort_types,
        )


def _parse_bool(name: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"{name}: expected a boolean, got {raw!r}")


def _parse_prefixes(raw: Any) -> list[str]:
    if isinstance(raw, str):
        return [p.strip() for p in raw.split(",") if p.strip()]
    return [str(p) for p in raw]


def _coerce(name: str, raw: Any) -> Any:
    if name in ("with_decryption", "strip_prefix", "sort_types"):
        return _parse_bool(name, raw)
    if name == "page_size":
        try:
            return int(raw)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"page_size: expected an integer, got {raw!r}") from exc
    if name == "prefixes":
        return _parse_prefixes(raw)
    return str(raw)


def load_settings(config_path: Optional[str] = None) -> BuilderSettings:
    """
    Load settings from an optional YAML file, then apply environment overrides.

    Args:
        config_path: Path to a YAML file with BuilderSettings field names as keys

    Returns:
        BuilderSettings

    Raises:
        ValueError: On unknown keys or values that cannot be coerced
    """
    values: dict[str, Any] = {}

    if config_path is not None:
        with open(config_path) as f:
            file_values = yaml.safe_load(f) or {}
        if not isinstance(file_values, dict):
            raise ValueError(f"{config_path}: expected a mapping at top level")
        known = {f.name for f in fields(BuilderSettings)}
        unknown = set(file_values) - known
        if unknown:
            raise ValueError(f"{config_path}: unknown settings {sorted(unknown)}")
        for name, raw in file_values.items():
            values[name] = _coerce(name, raw)

    for name, env_var in _ENV_VARS.items():
        raw = os.getenv(env_var)
        if raw is not None and raw != "":
            values[name] = _coerce(name, raw)

    return BuilderSettings(**values)
