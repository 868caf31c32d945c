"""Read-only status overview of the configured resources."""

from __future__ import annotations

from dataclasses import dataclass, field

from amldeploy.deploy.providers.base import ResourceClient
from amldeploy.models.deployment import ProvisioningState
from amldeploy.models.settings import DeploymentSettings


@dataclass
class ResourceStatus:
    """Snapshot of the environment, endpoint and deployment.

    Attributes:
        environment_exists: None for public registry environments
        endpoint_exists: Whether the endpoint exists
        deployment_exists: Whether the deployment exists on the endpoint
        deployment_state: Provisioning state, UNKNOWN when not deployed
        scoring_uri: Endpoint scoring URI, if available
        traffic: Endpoint traffic allocation
    """

    environment_exists: bool | None
    endpoint_exists: bool
    deployment_exists: bool = False
    deployment_state: ProvisioningState = ProvisioningState.UNKNOWN
    scoring_uri: str | None = None
    traffic: dict[str, int] = field(default_factory=dict)

    @property
    def is_serving(self) -> bool:
        """True when the deployment is provisioned and receives traffic."""
        return (
            self.deployment_state is ProvisioningState.SUCCEEDED
            and any(self.traffic.values())
        )


def collect_status(
    client: ResourceClient, settings: DeploymentSettings
) -> ResourceStatus:
    """Query the provider for the state of every configured resource.

    Nothing is mutated. Child lookups are skipped when their parent endpoint
    does not exist.
    """
    environment_exists: bool | None = None
    if not settings.uses_public_environment:
        environment_exists = client.environment_exists(
            settings.environment_name, settings.environment_version
        )

    endpoint = settings.endpoint_name
    status = ResourceStatus(
        environment_exists=environment_exists,
        endpoint_exists=client.endpoint_exists(endpoint),
    )
    if not status.endpoint_exists:
        return status

    status.scoring_uri = client.get_scoring_uri(endpoint)
    status.traffic = client.get_traffic(endpoint)
    status.deployment_exists = client.deployment_exists(
        settings.deployment_name, endpoint
    )
    if status.deployment_exists:
        status.deployment_state = client.get_deployment_state(
            settings.deployment_name, endpoint
        )
    return status
