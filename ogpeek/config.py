"""Configuration management for ogpeek.

Loads settings from ~/.ogpeek/config.toml with environment variable overrides.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from dataclasses import fields as dataclass_fields
from pathlib import Path

import structlog

from ogpeek import __version__

logger = structlog.get_logger()

# Default paths
DEFAULT_CONFIG_DIR = Path.home() / ".ogpeek"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"

# Env var pointing at an alternative config file
CONFIG_PATH_ENV = "OGPEEK_CONFIG"


@dataclass(frozen=True)
class FetchConfig:
    """HTTP fetch settings."""

    timeout: float = 15.0  # seconds
    user_agent: str = f"ogpeek/{__version__} (+https://pypi.org/project/ogpeek/)"
    max_response_bytes: int = 10 * 1024 * 1024


@dataclass(frozen=True)
class RenderConfig:
    """Inline image rendering via the kitty ``icat`` kitten."""

    helper: str = "kitty"
    timeout: float = 15.0  # seconds
    align: str = "left"
    scale_up: bool = True


@dataclass(frozen=True)
class OutputConfig:
    """Output formatting."""

    format: str = "text"
    color: bool = True


@dataclass(frozen=True)
class LoggingConfig:
    """structlog level filtering."""

    level: str = "warning"


@dataclass(frozen=True)
class Config:
    """Root configuration container."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _env_override(section: str, key: str) -> str | None:
    """Check for OGPEEK_{SECTION}_{KEY} environment variable."""
    env_key = f"OGPEEK_{section.upper()}_{key.upper()}"
    return os.environ.get(env_key)


def _coerce(value: str, target_type: type) -> object:
    """Coerce a string value to the target type."""
    if target_type is bool:
        return value.lower() in ("true", "1", "yes")
    if target_type is int:
        return int(value)
    if target_type is float:
        return float(value)
    return value


def _matches_type(value: object, target_type: type) -> bool:
    """Check a TOML value against the field's type (ints are valid floats)."""
    if isinstance(value, bool):
        return target_type is bool
    if target_type is float:
        return isinstance(value, (int, float))
    return isinstance(value, target_type)


# Configuration value constraints, keyed by "section.key"
_VALUE_CONSTRAINTS: dict[str, tuple[float, float]] = {
    "fetch.timeout": (1.0, 120.0),
    "fetch.max_response_bytes": (1024, 100 * 1024 * 1024),
    "render.timeout": (1.0, 120.0),
}

# Allowed values for string enums
_ALLOWED_VALUES: dict[str, frozenset[str]] = {
    "render.align": frozenset({"left", "center", "right"}),
    "output.format": frozenset({"text", "json"}),
    "logging.level": frozenset({"debug", "info", "warning", "error", "critical"}),
}


def _validate_value(key: str, value: object) -> object:
    """Validate a config value against known constraints."""
    if (
        key in _VALUE_CONSTRAINTS
        and isinstance(value, (int, float))
        and not isinstance(value, bool)
    ):
        lo, hi = _VALUE_CONSTRAINTS[key]
        if not (lo <= value <= hi):
            logger.warning(
                "config_value_out_of_range",
                key=key,
                value=value,
                min=lo,
                max=hi,
            )
            # Clamp to valid range
            return type(value)(max(lo, min(hi, value)))
    if key in _ALLOWED_VALUES and isinstance(value, str):
        if value.lower() not in _ALLOWED_VALUES[key]:
            logger.warning(
                "config_invalid_value",
                key=key,
                value=value,
                allowed=sorted(_ALLOWED_VALUES[key]),
            )
            return None  # Will use default
        return value.lower()
    return value


def _build_section[T](
    cls: type[T], toml_section: dict[str, object], section_name: str
) -> T:
    """Build a dataclass instance from TOML data + env overrides."""
    kwargs: dict[str, object] = {}
    for f in dataclass_fields(cls):  # type: ignore[arg-type]
        raw = toml_section.get(f.name)
        env_val = _env_override(section_name, f.name)
        if env_val is not None:
            try:
                raw = _coerce(env_val, type(f.default))
            except ValueError:
                logger.warning(
                    "config_env_unparseable",
                    key=f"{section_name}.{f.name}",
                    value=env_val,
                )
                continue
        if raw is not None and not _matches_type(raw, type(f.default)):
            logger.warning(
                "config_invalid_type",
                key=f"{section_name}.{f.name}",
                value=raw,
                expected=type(f.default).__name__,
            )
            continue
        if raw is not None:
            validated = _validate_value(f"{section_name}.{f.name}", raw)
            if validated is not None:
                kwargs[f.name] = validated
    return cls(**kwargs)


def resolve_config_path(config_path: Path | None = None) -> Path:
    """Pick the config file: explicit path > $OGPEEK_CONFIG > default."""
    if config_path is not None:
        return config_path
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from TOML file with environment variable overrides.

    Priority: env vars > config.toml > defaults.

    Args:
        config_path: Path to config file. Defaults to ``$OGPEEK_CONFIG``
            or ~/.ogpeek/config.toml.

    Returns:
        Populated Config instance.
    """
    path = resolve_config_path(config_path)
    raw: dict[str, object] = {}

    if path.exists():
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        logger.debug("config_loaded", path=str(path))
    else:
        logger.debug("config_default", path=str(path), reason="file not found")

    return Config(
        fetch=_build_section(FetchConfig, _table(raw, "fetch"), "fetch"),
        render=_build_section(RenderConfig, _table(raw, "render"), "render"),
        output=_build_section(OutputConfig, _table(raw, "output"), "output"),
        logging=_build_section(LoggingConfig, _table(raw, "logging"), "logging"),
    )


def _table(raw: dict[str, object], section: str) -> dict[str, object]:
    """Return a TOML section, treating a non-table value as empty."""
    value = raw.get(section, {})
    if not isinstance(value, dict):
        logger.warning("config_invalid_section", section=section, value=value)
        return {}
    return value
