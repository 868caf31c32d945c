"""Configuration loading and validation for amldeploy.

Main components:
- load_config_file: Read key=value pairs from a configuration file
- load_settings: Build the immutable DeploymentSettings record
- validate_config_values: Report required and optional keys
"""

from amldeploy.config.loader import (
    load_config_file,
    load_settings,
    settings_from_values,
)
from amldeploy.config.validator import (
    ValidationReport,
    find_missing_keys,
    validate_config_values,
)

__all__ = [
    "ValidationReport",
    "find_missing_keys",
    "load_config_file",
    "load_settings",
    "settings_from_values",
    "validate_config_values",
]
