"""Enumerations and value types for the deployment workflow."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from amldeploy.lib.logging_config import get_logger

logger = get_logger(__name__)


class ProvisioningState(str, Enum):
    """Provisioning state reported by Azure ML for a resource."""

    CREATING = "Creating"
    UPDATING = "Updating"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    CANCELED = "Canceled"
    UNKNOWN = "Unknown"

    @classmethod
    def decode(cls, raw: str | None) -> ProvisioningState:
        """Decode a provider status string.

        ``Cancelled`` is accepted as a spelling of ``Canceled``. Unrecognized
        or empty values map to UNKNOWN instead of passing through.

        Args:
            raw: Status text as returned by the provider (may be None)

        Returns:
            The matching ProvisioningState
        """
        value = (raw or "").strip()
        if not value:
            return cls.UNKNOWN
        normalized = value.lower()
        if normalized == "cancelled":
            return cls.CANCELED
        for state in cls:
            if state.value.lower() == normalized:
                return state
        logger.warning(
            f"Unrecognized provisioning state '{value}', treating as Unknown"
        )
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        """True for states that end a poll loop."""
        return self in (
            ProvisioningState.SUCCEEDED,
            ProvisioningState.FAILED,
            ProvisioningState.CANCELED,
        )

    @property
    def is_failure(self) -> bool:
        """True for terminal failure states."""
        return self in (ProvisioningState.FAILED, ProvisioningState.CANCELED)


class RunMode(str, Enum):
    """Top-level orchestrator modes."""

    ENVIRONMENT = "env"
    ENDPOINT = "endpoint"
    CLEANUP = "cleanup"
    FULL = "full"
    TEST = "test"


class CleanupMode(str, Enum):
    """Cleanup scopes."""

    DEPLOYMENT = "deployment"
    ENDPOINT = "endpoint"
    ENVIRONMENT = "environment"
    ALL = "all"


class StepOutcome(str, Enum):
    """What a controller step did."""

    CREATED = "created"
    UPDATED = "updated"
    EXISTS = "exists"
    SKIPPED = "skipped"
    DELETED = "deleted"
    MISSING = "missing"
    DECLINED = "declined"
    FAILED = "failed"


@dataclass(frozen=True)
class PollPolicy:
    """Interval and ceiling for an asynchronous-completion poll loop.

    Attributes:
        interval_seconds: Sleep between consecutive polls
        max_attempts: Number of polls before giving up
    """

    interval_seconds: float = 60
    max_attempts: int = 120

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.interval_seconds < 0:
            raise ValueError("interval_seconds must not be negative")

    @property
    def ceiling_seconds(self) -> float:
        """Upper bound of time spent sleeping between polls."""
        return self.interval_seconds * self.max_attempts
