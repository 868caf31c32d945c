"""Base interface for Azure ML resource clients."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from amldeploy.models.deployment import ProvisioningState


class ResourceClient(ABC):
    """Abstract client for the provider's resource-management surface.

    Existence probes return booleans and never raise for a missing resource.
    Mutating calls raise StepFailed when the provider rejects them.
    """

    @abstractmethod
    def is_installed(self) -> bool:
        """Return True when the management CLI can be located."""

    @abstractmethod
    def is_authenticated(self) -> bool:
        """Return True when an account-identity probe succeeds."""

    @abstractmethod
    def set_context(
        self, *, subscription_id: str, workspace: str, resource_group: str
    ) -> None:
        """Select the subscription and default workspace/resource group.

        Raises:
            StepFailed: If the context cannot be set.
        """

    @abstractmethod
    def environment_exists(self, name: str, version: str) -> bool:
        """Return True when the environment exists at name+version."""

    @abstractmethod
    def create_environment(self, manifest: Path) -> None:
        """Create an environment from a manifest, blocking until the call returns.

        Raises:
            StepFailed: If the provider rejects the request or the build fails.
        """

    @abstractmethod
    def delete_environment(self, name: str, version: str) -> None:
        """Delete (archive) an environment version.

        Raises:
            StepFailed: If deletion fails.
        """

    @abstractmethod
    def endpoint_exists(self, name: str) -> bool:
        """Return True when the online endpoint exists."""

    @abstractmethod
    def create_endpoint(self, manifest: Path) -> None:
        """Create an online endpoint from a manifest.

        Raises:
            StepFailed: If creation fails.
        """

    @abstractmethod
    def delete_endpoint(self, name: str) -> None:
        """Delete an online endpoint and every deployment under it.

        Raises:
            StepFailed: If deletion fails.
        """

    @abstractmethod
    def get_scoring_uri(self, endpoint: str) -> str | None:
        """Return the endpoint's scoring URI, or None when unavailable."""

    @abstractmethod
    def get_traffic(self, endpoint: str) -> dict[str, int]:
        """Return the endpoint's traffic allocation.

        Raises:
            StepFailed: If the endpoint cannot be read.
        """

    @abstractmethod
    def set_traffic(self, endpoint: str, allocation: dict[str, int]) -> None:
        """Overwrite traffic percentages for the named deployments.

        Raises:
            StepFailed: If the update fails.
        """

    @abstractmethod
    def deployment_exists(self, name: str, endpoint: str) -> bool:
        """Return True when the deployment exists under the endpoint."""

    @abstractmethod
    def begin_create_deployment(
        self, manifest: Path, *, all_traffic: bool = True
    ) -> None:
        """Start a deployment creation without waiting for completion.

        Raises:
            StepFailed: If the provider does not accept the request.
        """

    @abstractmethod
    def begin_update_deployment(self, manifest: Path) -> None:
        """Start a deployment update without waiting for completion.

        Raises:
            StepFailed: If the provider does not accept the request.
        """

    @abstractmethod
    def get_deployment_state(self, name: str, endpoint: str) -> ProvisioningState:
        """Read the deployment's provisioning state.

        Returns UNKNOWN when the state cannot be read.
        """

    @abstractmethod
    def delete_deployment(self, name: str, endpoint: str) -> None:
        """Delete a deployment under an endpoint.

        Raises:
            StepFailed: If deletion fails.
        """

    @abstractmethod
    def get_logs(self, name: str, endpoint: str, lines: int | None = None) -> str:
        """Return container logs for a deployment.

        Raises:
            StepFailed: If the logs cannot be retrieved.
        """
