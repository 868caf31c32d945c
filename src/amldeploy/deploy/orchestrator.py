"""Top-level orchestration of the deployment workflow.

The orchestrator sequences the environment step, the endpoint+deployment
step and cleanup according to a RunMode, and prints the operator-facing
summaries around them.
"""

from __future__ import annotations

from collections.abc import Callable

import click

from amldeploy.deploy.cleanup import CleanupController
from amldeploy.deploy.lifecycle import LifecycleController
from amldeploy.deploy.providers.azure_cli import (
    credentials_command,
    deployment_logs_command,
    endpoint_show_command,
)
from amldeploy.deploy.providers.base import ResourceClient
from amldeploy.lib import console
from amldeploy.lib.errors import DeploymentError, OperatorCancelled
from amldeploy.lib.logging_config import get_logger
from amldeploy.lib.prompts import Confirmer
from amldeploy.models.deployment import CleanupMode, PollPolicy, RunMode, StepOutcome
from amldeploy.models.settings import DeploymentSettings

logger = get_logger(__name__)

_OUTCOME_VERBS = {
    StepOutcome.CREATED: "created",
    StepOutcome.UPDATED: "updated",
    StepOutcome.EXISTS: "already present",
    StepOutcome.SKIPPED: "skipped",
}


class Orchestrator:
    """Run the workflow for one settings record in a given mode."""

    def __init__(
        self,
        client: ResourceClient,
        settings: DeploymentSettings,
        *,
        confirm: Confirmer,
        force: bool = False,
        config_path: str = "config.conf",
        poll_policy: PollPolicy | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.client = client
        self.settings = settings
        self.confirm = confirm
        self.force = force
        self.config_path = config_path
        self.lifecycle = LifecycleController(
            client,
            settings,
            confirm=confirm,
            force=force,
            poll_policy=poll_policy,
            sleep=sleep,
        )

    def show_config_summary(self) -> None:
        """Print the resources this run will touch."""
        settings = self.settings
        console.heading("Deployment Configuration Summary:", "📋")
        click.echo(f"Subscription ID: {settings.subscription_id}")
        click.echo(f"Resource Group: {settings.resource_group}")
        click.echo(f"ML Workspace: {settings.workspace}")
        click.echo(f"Environment: {settings.environment_label}")
        click.echo(f"Endpoint: {settings.endpoint_name}")
        click.echo(f"Deployment: {settings.deployment_name}")
        click.echo(f"Instance Type: {settings.instance_type}")
        click.echo(f"Instance Count: {settings.instance_count}")
        click.echo(f"Model: {settings.model_name}")
        click.echo()

    def confirm_environment_ready(self) -> None:
        """Ask the operator to attest that a custom environment has finished building.

        Public registry environments need no attestation. The force flag does
        not skip this gate.

        Raises:
            OperatorCancelled: If the operator says the environment is not ready
        """
        settings = self.settings
        if settings.uses_public_environment:
            console.info(
                "Using public registry environment - proceeding with endpoint creation"
            )
            return

        console.heading("IMPORTANT: Environment Status Confirmation Required", "⚠️ ")
        click.echo("Before creating the endpoint, please ensure that your environment:")
        console.detail(f"Environment: {settings.environment_label}")
        click.echo()
        console.success("Has completed building successfully (Status: 'Succeeded')")
        console.success("Is visible in your Azure ML workspace")
        click.echo()
        console.step(
            console.ICON_TIP,
            "You can check the environment status in the Azure ML Studio:",
        )
        console.detail("- Go to your workspace -> Environments")
        console.detail(
            f"- Look for '{settings.environment_name}' "
            f"version '{settings.environment_version}'"
        )
        console.detail("- Verify the status shows 'Succeeded'")
        click.echo()
        console.step("⏰", "Environment building can take up to 25 minutes to complete.")
        click.echo()

        if not self.confirm(
            "Is your environment ready and showing 'Succeeded' status?", False
        ):
            raise OperatorCancelled(
                "Deployment cancelled. Please wait for the environment to complete "
                "building.",
                hint="Run this command again once the environment status is "
                "'Succeeded'.",
            )
        console.success("Proceeding with endpoint creation...")

    def confirm_full_deployment(self) -> None:
        """Warn about cost and ask before a full deployment (skipped when forced).

        Raises:
            OperatorCancelled: If the operator declines
        """
        if self.force:
            return
        console.warning("This will create:")
        console.detail("- Azure ML Environment (may take 5-10 minutes)")
        console.detail("- Azure ML Endpoint")
        console.detail("- Azure ML Deployment (may take 10-15 minutes)")
        click.echo()
        console.step(
            "💰",
            "Note: This will incur Azure costs based on your instance type and usage.",
        )
        click.echo()
        if not self.confirm("Do you want to continue with the full deployment?", False):
            raise OperatorCancelled("Deployment cancelled")

    def run_environment_step(self) -> StepOutcome:
        """Step 1: create the environment."""
        console.heading("Step 1: Creating Azure ML Environment", console.ICON_TARGET)
        return self.lifecycle.create_environment()

    def run_endpoint_step(self) -> StepOutcome:
        """Step 2: readiness gate, endpoint, deployment and traffic cutover."""
        console.heading("Step 2: Creating Endpoint and Deployment", console.ICON_TARGET)
        self.confirm_environment_ready()
        return self.lifecycle.create_endpoint_and_deployment()

    def run_cleanup_step(
        self, mode: CleanupMode = CleanupMode.ALL
    ) -> dict[str, StepOutcome]:
        """Remove resources for a cleanup mode."""
        console.heading("Cleanup: Removing Resources", console.ICON_TARGET)
        controller = CleanupController(
            self.client, self.settings, confirm=self.confirm, force=self.force
        )
        return controller.run(mode)

    def show_management_commands(self) -> None:
        """Print follow-up commands for the deployed endpoint."""
        settings = self.settings
        endpoint = settings.endpoint_name
        console.heading("Management Commands:", console.ICON_CONTEXT)
        click.echo(f"View endpoint: {endpoint_show_command(endpoint)}")
        click.echo(f"Get credentials: {credentials_command(endpoint)}")
        click.echo(
            "View logs: "
            f"{deployment_logs_command(settings.deployment_name, endpoint)}"
        )
        click.echo(f"Status: amldeploy status {self.config_path}")
        click.echo(f"Cleanup: amldeploy run --cleanup {self.config_path}")

    def _show_full_summary(
        self, environment: StepOutcome, deployment: StepOutcome
    ) -> None:
        settings = self.settings
        console.heading("Summary:", "📋")
        console.success(
            f"Environment {_OUTCOME_VERBS.get(environment, environment.value)}: "
            f"{settings.environment_label}"
        )
        console.success(f"Endpoint ready: {settings.endpoint_name}")
        console.success(
            f"Deployment {_OUTCOME_VERBS.get(deployment, deployment.value)}: "
            f"{settings.deployment_name}"
        )
        self.show_management_commands()

    def run(self, mode: RunMode = RunMode.FULL) -> dict[str, StepOutcome]:
        """Run the workflow for a mode.

        Args:
            mode: Which part of the workflow to run

        Returns:
            Mapping of step name to outcome

        Raises:
            OperatorCancelled: If the operator declines a gating confirmation
            DeploymentError: For the test mode, which has no action
        """
        logger.debug(f"Running mode {mode.value} with config {self.config_path}")
        self.show_config_summary()

        if mode is RunMode.ENVIRONMENT:
            outcome = self.run_environment_step()
            console.step(console.ICON_DONE, "Environment creation complete!")
            console.detail(
                "Next step: Run 'amldeploy run --endpoint-only "
                f"{self.config_path}' to create endpoint and deployment"
            )
            return {"environment": outcome}

        if mode is RunMode.ENDPOINT:
            outcome = self.run_endpoint_step()
            console.step(
                console.ICON_DONE, "Endpoint and deployment creation complete!"
            )
            return {"deployment": outcome}

        if mode is RunMode.CLEANUP:
            outcomes = self.run_cleanup_step(CleanupMode.ALL)
            console.step(console.ICON_DONE, "Cleanup complete!")
            return outcomes

        if mode is RunMode.FULL:
            self.confirm_full_deployment()
            console.step(console.ICON_START, "Starting full deployment...")
            environment = self.run_environment_step()
            deployment = self.run_endpoint_step()
            console.step(console.ICON_DONE, "Full Deployment Complete!")
            self._show_full_summary(environment, deployment)
            return {"environment": environment, "deployment": deployment}

        raise DeploymentError(
            operation=mode.value,
            message=f"Mode '{mode.value}' has no action in this release",
            hint=f"Use 'amldeploy status {self.config_path}' to inspect the endpoint.",
        )
