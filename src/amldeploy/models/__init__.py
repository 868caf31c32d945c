"""Data models for amldeploy settings and workflow state."""

from amldeploy.models.deployment import (
    CleanupMode,
    PollPolicy,
    ProvisioningState,
    RunMode,
    StepOutcome,
)
from amldeploy.models.settings import (
    PUBLIC_ENVIRONMENT_PREFIX,
    DeploymentSettings,
    EngineSettings,
    ProbeSettings,
    RequestSettings,
)

__all__ = [
    "PUBLIC_ENVIRONMENT_PREFIX",
    "CleanupMode",
    "DeploymentSettings",
    "EngineSettings",
    "PollPolicy",
    "ProbeSettings",
    "ProvisioningState",
    "RequestSettings",
    "RunMode",
    "StepOutcome",
]
