"""Prerequisite checks run before touching any resource.

All checks only read state and are safe to call repeatedly.
"""

from __future__ import annotations

from amldeploy.deploy.providers.base import ResourceClient
from amldeploy.lib import console
from amldeploy.lib.errors import CliNotInstalled, EnvironmentMissing, NotAuthenticated
from amldeploy.models.settings import DeploymentSettings


def check_cli_installed(client: ResourceClient) -> None:
    """Raise CliNotInstalled when the management CLI cannot be located."""
    if not client.is_installed():
        raise CliNotInstalled()


def check_authenticated(client: ResourceClient) -> None:
    """Raise NotAuthenticated when the account-identity probe fails."""
    if not client.is_authenticated():
        raise NotAuthenticated()


def check_prerequisites(client: ResourceClient) -> None:
    """Verify the CLI is installed and the operator is logged in."""
    console.step(console.ICON_CHECK, "Checking prerequisites...")
    check_cli_installed(client)
    check_authenticated(client)
    console.success("Prerequisites check passed")


def set_context(client: ResourceClient, settings: DeploymentSettings) -> None:
    """Select the subscription and default workspace for later calls.

    Raises:
        StepFailed: If the context cannot be set
    """
    console.step(console.ICON_CONTEXT, "Setting Azure context...")
    client.set_context(
        subscription_id=settings.subscription_id,
        workspace=settings.workspace,
        resource_group=settings.resource_group,
    )
    console.success(
        f"Azure context set (Subscription: {settings.subscription_id}, "
        f"Workspace: {settings.workspace})"
    )


def check_environment_available(
    client: ResourceClient, settings: DeploymentSettings
) -> None:
    """Verify the deployment's environment can be referenced.

    Public registry references skip the lookup entirely.

    Raises:
        EnvironmentMissing: If a workspace environment does not exist
    """
    if settings.uses_public_environment:
        console.info(f"Using public registry environment: {settings.environment_label}")
        return

    if not client.environment_exists(
        settings.environment_name, settings.environment_version
    ):
        raise EnvironmentMissing(settings.environment_label)
    console.info(f"Using existing environment: {settings.environment_label}")
