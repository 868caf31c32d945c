"""Resource lifecycle controller.

Drives creation and update of the environment, endpoint and deployment:
existence checks before every create, operator confirmation before
overwriting, fire-and-poll for deployments, and the 100% traffic cutover
after every successful deployment create or update.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path

import click

from amldeploy.deploy.build_context import prepare_build_context
from amldeploy.deploy.manifests import write_manifests
from amldeploy.deploy.operations import AsyncOperation
from amldeploy.deploy.prerequisites import (
    check_environment_available,
    check_prerequisites,
    set_context,
)
from amldeploy.deploy.providers.azure_cli import (
    credentials_command,
    deployment_logs_command,
    deployment_show_command,
)
from amldeploy.deploy.providers.base import ResourceClient
from amldeploy.lib import console
from amldeploy.lib.errors import (
    ConfigError,
    OperatorCancelled,
    ResourceAlreadyExists,
    StepFailed,
)
from amldeploy.lib.logging_config import get_logger
from amldeploy.lib.prompts import AlwaysConfirm, Confirmer
from amldeploy.models.deployment import PollPolicy, ProvisioningState, StepOutcome
from amldeploy.models.settings import DeploymentSettings

logger = get_logger(__name__)

FULL_TRAFFIC = 100


def _report_poll(attempt: int, max_attempts: int, state: ProvisioningState) -> None:
    console.step(
        console.ICON_CHECK,
        f"Checking deployment status (attempt {attempt}/{max_attempts})...",
    )
    console.detail(f"Current status: {state.value}")
    if state in (ProvisioningState.CREATING, ProvisioningState.UPDATING):
        console.detail("Deployment is still in progress...")
    elif state is ProvisioningState.UNKNOWN:
        console.detail("Status not available yet, continuing to wait...")


def require_absent(kind: str, name: str, present: bool) -> None:
    """Raise ResourceAlreadyExists when an existence check found the resource."""
    if present:
        raise ResourceAlreadyExists(kind, name)


class LifecycleController:
    """Create or update the resources described by one settings record.

    Args:
        client: Provider resource client
        settings: Deployment settings
        confirm: Confirmation capability for operator prompts
        force: Skip the update-existing-deployment confirmation
        poll_policy: Interval and ceiling for deployment polling
        sleep: Sleep function used between polls (defaults to time.sleep)
    """

    def __init__(
        self,
        client: ResourceClient,
        settings: DeploymentSettings,
        *,
        confirm: Confirmer,
        force: bool = False,
        poll_policy: PollPolicy | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.client = client
        self.settings = settings
        self.confirm = confirm
        self.force = force
        self.poll_policy = poll_policy or PollPolicy()
        self._sleep = sleep or time.sleep

    # Environment

    def create_environment(self) -> StepOutcome:
        """Build the custom environment unless it already exists.

        Environments are immutable once built, so an existing name+version is
        reported and left alone. Public registry references need no build and
        make no provider calls at all.

        Returns:
            SKIPPED for public references, EXISTS or CREATED otherwise

        Raises:
            StepFailed: If the build fails (not retried)
        """
        settings = self.settings
        if settings.uses_public_environment:
            console.info(
                f"Using public registry environment: {settings.environment_label}"
            )
            console.success(
                "Skipping environment creation - public registry environment "
                "will be used directly"
            )
            return StepOutcome.SKIPPED

        check_prerequisites(self.client)
        set_context(self.client, settings)

        console.step(console.ICON_WRITE, "Preparing build context and manifests...")
        build_path = prepare_build_context(settings)
        manifests = write_manifests(settings)
        console.success(f"Environment manifest created at {manifests.environment}")

        console.step(console.ICON_CHECK, "Checking if environment already exists...")
        try:
            require_absent(
                "environment",
                settings.environment_label,
                self.client.environment_exists(
                    settings.environment_name, settings.environment_version
                ),
            )
        except ResourceAlreadyExists as existing:
            console.warning(existing.message)
            console.info("Skipping environment creation")
            return StepOutcome.EXISTS

        console.step(console.ICON_BUILD, "Creating Azure ML environment...")
        console.detail(f"Name: {settings.environment_name}")
        console.detail(f"Version: {settings.environment_version}")
        console.detail(f"Build Path: {build_path}")
        console.detail("This may take 10-20 minutes for container build...")
        self.client.create_environment(manifests.environment)
        console.success("Environment created successfully!")
        return StepOutcome.CREATED

    # Endpoint and deployment

    def create_endpoint_and_deployment(self) -> StepOutcome:
        """Run the full second step: endpoint, deployment, traffic cutover.

        Returns:
            Outcome of the deployment step

        Raises:
            EnvironmentMissing: If the target environment does not exist
            OperatorCancelled: If the operator stops at the existing-endpoint prompt
            AsyncOperationFailed: If the provider reports a terminal failure
            AsyncOperationTimedOut: If polling exhausts its attempts
        """
        check_prerequisites(self.client)
        set_context(self.client, self.settings)
        check_environment_available(self.client, self.settings)

        console.step(console.ICON_WRITE, "Creating manifest files...")
        manifests = write_manifests(self.settings)
        console.success(f"Endpoint manifest created at {manifests.endpoint}")
        console.success(f"Deployment manifest created at {manifests.deployment}")

        self.ensure_endpoint(manifests.endpoint)
        outcome = self.ensure_deployment(manifests.deployment)
        self.show_endpoint_info()
        return outcome

    def ensure_endpoint(self, manifest: Path) -> StepOutcome:
        """Create the endpoint, or confirm continuing with an existing one.

        The force flag does not apply here: an existing endpoint always asks.

        Raises:
            OperatorCancelled: If the operator declines to continue
            StepFailed: If creation fails
        """
        endpoint = self.settings.endpoint_name
        console.step(console.ICON_CHECK, "Checking if endpoint exists...")
        try:
            require_absent("endpoint", endpoint, self.client.endpoint_exists(endpoint))
        except ResourceAlreadyExists as existing:
            console.warning(existing.message)
            if not self.confirm("Do you want to continue with deployment?", False):
                raise OperatorCancelled("Stopping execution") from None
            return StepOutcome.EXISTS

        console.step(console.ICON_BUILD, "Creating endpoint...")
        self.client.create_endpoint(manifest)
        console.success("Endpoint created successfully!")
        return StepOutcome.CREATED

    def ensure_deployment(self, manifest: Path) -> StepOutcome:
        """Create or update the deployment, wait for it, then cut traffic over.

        Creation never asks for confirmation. Updating an existing deployment
        asks unless force is set; declining leaves it untouched.

        Returns:
            CREATED, UPDATED, or SKIPPED when an update was declined
        """
        settings = self.settings
        name, endpoint = settings.deployment_name, settings.endpoint_name

        console.step(console.ICON_CHECK, "Checking if deployment exists...")
        try:
            require_absent(
                "deployment", name, self.client.deployment_exists(name, endpoint)
            )
        except ResourceAlreadyExists as existing:
            console.warning(existing.message)
            if self.force:
                console.step(
                    console.ICON_UPDATE,
                    "Force mode enabled - will update existing deployment",
                )
            elif not self.confirm("Do you want to update it?", False):
                console.info("Skipping deployment creation/update")
                console.step(
                    console.ICON_TIP,
                    f"Note: Deployment {name} already exists and was not modified",
                )
                return StepOutcome.SKIPPED

            console.step(console.ICON_UPDATE, "Updating existing deployment...")
            operation = self._deployment_operation(
                "deployment update",
                lambda: self.client.begin_update_deployment(manifest),
            )
            outcome = StepOutcome.UPDATED
        else:
            console.step(console.ICON_BUILD, "Creating new deployment...")
            operation = self._deployment_operation(
                "deployment create",
                lambda: self.client.begin_create_deployment(
                    manifest, all_traffic=True
                ),
            )
            outcome = StepOutcome.CREATED

        self._run_operation(operation)
        self.set_full_traffic()
        return outcome

    def _deployment_operation(
        self, label: str, starter: Callable[[], None]
    ) -> AsyncOperation:
        name, endpoint = self.settings.deployment_name, self.settings.endpoint_name
        return AsyncOperation(
            label,
            starter=starter,
            probe=lambda: self.client.get_deployment_state(name, endpoint),
            failure_hint=deployment_logs_command(name, endpoint),
            timeout_hint=deployment_show_command(name, endpoint),
            reporter=_report_poll,
            sleep=self._sleep,
        )

    def _run_operation(self, operation: AsyncOperation) -> None:
        console.detail(f"Starting {operation.name} (asynchronous)...")
        operation.start()
        console.success(f"{operation.name.capitalize()} started successfully!")

        policy = self.poll_policy
        console.step(
            console.ICON_WAIT,
            f"Waiting for deployment {self.settings.deployment_name} to be ready...",
        )
        console.detail(
            "This may take 10-30 minutes depending on the model size and instance type"
        )
        logger.debug(
            f"Polling every {policy.interval_seconds}s, "
            f"at most {policy.max_attempts} attempts "
            f"({policy.ceiling_seconds / 60:.0f} minutes)"
        )
        operation.wait(policy)
        console.success(f"Deployment {self.settings.deployment_name} is ready!")

    def set_full_traffic(self) -> None:
        """Route all endpoint traffic to the configured deployment.

        Issued after every successful create or update, whether or not the
        allocation was already correct.
        """
        name = self.settings.deployment_name
        console.step(
            console.ICON_TRAFFIC, f"Setting 100% traffic to deployment {name}..."
        )
        self.client.set_traffic(self.settings.endpoint_name, {name: FULL_TRAFFIC})
        console.success("Traffic allocation set successfully!")
        console.detail(f"{name}: 100%")

    def show_endpoint_info(self) -> None:
        """Print the endpoint's scoring URI and how to fetch its key."""
        endpoint = self.settings.endpoint_name
        scoring_uri = self.client.get_scoring_uri(endpoint) or "Not available"

        console.heading("Endpoint Information:", "📋")
        click.echo(f"Endpoint Name: {endpoint}")
        click.echo(f"Deployment Name: {self.settings.deployment_name}")
        click.echo(f"Scoring URI: {scoring_uri}")
        click.echo()
        click.echo("To get the endpoint key, run:")
        click.echo(credentials_command(endpoint))


class TrafficManager:
    """Manual traffic-allocation updates for an endpoint.

    With force set every confirmation is answered yes.
    """

    def __init__(
        self,
        client: ResourceClient,
        settings: DeploymentSettings,
        *,
        confirm: Confirmer,
        force: bool = False,
    ) -> None:
        self.client = client
        self.settings = settings
        self.confirm: Confirmer = AlwaysConfirm() if force else confirm
        self.force = force

    def show_current(self) -> dict[str, int]:
        """Print and return the endpoint's current traffic allocation."""
        endpoint = self.settings.endpoint_name
        traffic = self.client.get_traffic(endpoint)
        console.heading(f"Current traffic allocation for endpoint {endpoint}:", "📊")
        if not traffic:
            click.echo("(no traffic allocated)")
        for name, percentage in sorted(traffic.items()):
            click.echo(f"{name:<30} {percentage}%")
        click.echo()
        return traffic

    def update(self, deployment: str, percentage: int) -> StepOutcome:
        """Set a deployment's share of endpoint traffic.

        Args:
            deployment: Deployment name
            percentage: Traffic percentage between 0 and 100

        Returns:
            UPDATED, or DECLINED when the operator said no

        Raises:
            ConfigError: If the percentage is out of range
            StepFailed: If the endpoint or deployment does not exist
        """
        if not 0 <= percentage <= 100:
            raise ConfigError(
                field="traffic_percentage",
                message=(
                    f"Invalid traffic percentage: {percentage}. "
                    "Must be between 0 and 100."
                ),
            )

        endpoint = self.settings.endpoint_name
        check_prerequisites(self.client)
        set_context(self.client, self.settings)

        if not self.client.endpoint_exists(endpoint):
            raise StepFailed(
                operation="traffic", message=f"Endpoint {endpoint} not found."
            )
        if not self.client.deployment_exists(deployment, endpoint):
            raise StepFailed(
                operation="traffic",
                message=f"Deployment {deployment} not found in endpoint {endpoint}.",
            )

        console.heading("Traffic Update Summary:", "📋")
        click.echo(f"Endpoint: {endpoint}")
        click.echo(f"Deployment: {deployment}")
        click.echo(f"Traffic Percentage: {percentage}%")
        self.show_current()

        if not self.confirm("Do you want to update traffic allocation?", False):
            console.info("Traffic allocation not changed")
            return StepOutcome.DECLINED

        console.step(
            console.ICON_TRAFFIC,
            f"Setting {percentage}% traffic to deployment {deployment}...",
        )
        if percentage != FULL_TRAFFIC:
            console.warning(
                f"Setting traffic to {percentage}% may require manual adjustment "
                "of other deployments"
            )
            console.detail("Make sure the total traffic allocation adds up to 100%")

        self.client.set_traffic(endpoint, {deployment: percentage})
        console.success("Traffic allocation updated successfully!")
        self.show_current()
        return StepOutcome.UPDATED
