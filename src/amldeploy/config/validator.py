"""Validation utilities for amldeploy configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from pydantic import ValidationError as PydanticValidationError

from amldeploy.config.defaults import (
    CUSTOM_ENV_PREFIX,
    DEFAULT_CUSTOM_KEYS,
    KEY_ALIASES,
    REPORT_SECTIONS,
    REQUIRED_KEYS,
)


@dataclass(frozen=True)
class KeyStatus:
    """Presence of a single configuration key.

    Attributes:
        key: Configuration key name
        value: Configured value, or None when unset or empty
        required: Whether the key is required
    """

    key: str
    value: str | None
    required: bool

    @property
    def is_set(self) -> bool:
        """True when the key has a non-empty value."""
        return self.value is not None

    @property
    def is_missing(self) -> bool:
        """True for a required key without a value."""
        return self.required and not self.is_set


@dataclass
class ValidationReport:
    """Result of validating configuration values.

    Attributes:
        sections: Report sections as (title, icon, statuses)
        missing: Required keys without a value, in declaration order
    """

    sections: list[tuple[str, str, list[KeyStatus]]] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when every required key is set."""
        return not self.missing

    @property
    def missing_count(self) -> int:
        """Number of required keys without a value."""
        return len(self.missing)


def normalize_values(values: Mapping[str, str | None]) -> dict[str, str]:
    """Drop empty values and fold key aliases into their canonical names.

    A canonical key always wins over its alias when both are set.

    Args:
        values: Raw key/value mapping from the configuration file

    Returns:
        Mapping containing only non-empty, stripped values
    """
    normalized: dict[str, str] = {}
    for key, raw in values.items():
        if raw is None:
            continue
        value = raw.strip()
        if not value:
            continue
        normalized[key] = value

    for alias, canonical in KEY_ALIASES.items():
        if alias in normalized and canonical not in normalized:
            normalized[canonical] = normalized[alias]
    return normalized


def find_missing_keys(values: Mapping[str, str | None]) -> list[str]:
    """Return every required key that is unset or empty."""
    normalized = normalize_values(values)
    return [key for key in REQUIRED_KEYS if key not in normalized]


def validate_config_values(values: Mapping[str, str | None]) -> ValidationReport:
    """Build a validation report for configuration values.

    Required keys without a value are listed as missing. Optional keys are
    reported as present-with-value or absent, never as errors.

    Args:
        values: Raw key/value mapping from the configuration file

    Returns:
        ValidationReport covering every known key plus custom variables
    """
    normalized = normalize_values(values)
    required = set(REQUIRED_KEYS)
    report = ValidationReport()

    for title, icon, keys in REPORT_SECTIONS:
        statuses = [
            KeyStatus(key=key, value=normalized.get(key), required=key in required)
            for key in keys
        ]
        report.sections.append((title, icon, statuses))

    custom_keys = sorted(
        set(DEFAULT_CUSTOM_KEYS)
        | {key for key in normalized if key.startswith(CUSTOM_ENV_PREFIX)}
    )
    report.sections.append(
        (
            "Custom Variables",
            "🔗",
            [
                KeyStatus(key=key, value=normalized.get(key), required=False)
                for key in custom_keys
            ],
        )
    )

    report.missing = [key for key in REQUIRED_KEYS if key not in normalized]
    return report


def flatten_pydantic_errors(exc: PydanticValidationError) -> list[str]:
    """Flatten Pydantic ValidationError into human-readable messages.

    Args:
        exc: Pydantic ValidationError exception

    Returns:
        List of human-readable error messages, one per field error
    """
    errors: list[str] = []

    for error in exc.errors():
        loc = error.get("loc", ())
        field_path = ".".join(str(item) for item in loc) if loc else "unknown"

        msg = error.get("msg", "Unknown error")
        input_val = error.get("input")
        if isinstance(input_val, (str, int, float)):
            formatted = f"Field '{field_path}': {msg} (received: {input_val!r})"
        else:
            formatted = f"Field '{field_path}': {msg}"

        errors.append(formatted)

    return errors if errors else ["Validation failed with unknown error"]
