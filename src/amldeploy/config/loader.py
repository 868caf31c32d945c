"""Configuration loader for amldeploy.

Reads a flat key=value configuration file (shell-style: comments, quoting,
``export`` prefixes and ``${VAR}`` references are understood) and builds the
immutable DeploymentSettings record passed to every component.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import ValidationError as PydanticValidationError

from amldeploy.config.defaults import (
    CUSTOM_ENV_PREFIX,
    ENGINE_KEYS,
    PROBE_KEYS,
    REQUEST_KEYS,
    TOP_LEVEL_KEYS,
)
from amldeploy.config.validator import (
    find_missing_keys,
    flatten_pydantic_errors,
    normalize_values,
)
from amldeploy.lib.errors import ConfigError, ConfigNotFound, MissingRequiredConfig
from amldeploy.models.settings import DeploymentSettings

logger = logging.getLogger(__name__)

# Settings field path -> config key, used to phrase validation errors
_FIELD_TO_KEY: dict[tuple[str, ...], str] = {
    **{(field,): key for key, field in TOP_LEVEL_KEYS.items()},
    **{("request", field): key for key, field in REQUEST_KEYS.items()},
    **{("probes", field): key for key, field in PROBE_KEYS.items()},
    **{("engine", field): key for key, field in ENGINE_KEYS.items()},
}


def load_config_file(path: str | Path) -> dict[str, str]:
    """Read every key=value pair from a configuration file.

    No schema validation happens here; keys declared without a value are
    returned as empty strings.

    Args:
        path: Path to the configuration file

    Returns:
        Mapping of configuration keys to raw string values

    Raises:
        ConfigNotFound: If the file does not exist
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigNotFound(str(path))

    logger.debug(f"Loading configuration from {config_path}")
    raw = dotenv_values(config_path, interpolate=True)
    return {key: (value if value is not None else "") for key, value in raw.items()}


def _pick(values: Mapping[str, str], mapping: dict[str, str]) -> dict[str, Any]:
    return {field: values[key] for key, field in mapping.items() if key in values}


def settings_from_values(values: Mapping[str, str | None]) -> DeploymentSettings:
    """Build DeploymentSettings from configuration values.

    Args:
        values: Key/value mapping as returned by load_config_file

    Returns:
        Frozen DeploymentSettings record

    Raises:
        MissingRequiredConfig: If any required key is unset, listing all of them
        ConfigError: If a value has the wrong type or is out of range
    """
    missing = find_missing_keys(values)
    if missing:
        raise MissingRequiredConfig(missing)

    normalized = normalize_values(values)

    data: dict[str, Any] = _pick(normalized, TOP_LEVEL_KEYS)
    engine = _pick(normalized, ENGINE_KEYS)
    engine["custom_variables"] = {
        key: value
        for key, value in sorted(normalized.items())
        if key.startswith(CUSTOM_ENV_PREFIX)
    }
    data["request"] = _pick(normalized, REQUEST_KEYS)
    data["probes"] = _pick(normalized, PROBE_KEYS)
    data["engine"] = engine
    data.setdefault(
        "model_name", engine.get("served_model_name") or normalized["AZ_MODEL_ID"]
    )

    try:
        return DeploymentSettings.model_validate(data)
    except PydanticValidationError as exc:
        messages = flatten_pydantic_errors(exc)
        first_loc = tuple(str(part) for part in exc.errors()[0].get("loc", ()))
        field = _FIELD_TO_KEY.get(first_loc, ".".join(first_loc) or "config")
        raise ConfigError(field, "; ".join(messages)) from exc


def load_settings(path: str | Path) -> DeploymentSettings:
    """Load a configuration file and build the settings record.

    Args:
        path: Path to the configuration file

    Returns:
        Frozen DeploymentSettings record

    Raises:
        ConfigNotFound: If the file does not exist
        MissingRequiredConfig: If required keys are unset
        ConfigError: If values fail validation
    """
    return settings_from_values(load_config_file(path))
