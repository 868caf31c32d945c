"""CLI commands for deploying to Azure ML online endpoints.

Implements 'amldeploy run' and the per-step commands: environment,
endpoint, traffic, status and logs.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Any, TypeVar

import click

from amldeploy.config.defaults import DEFAULT_CONFIG_FILE
from amldeploy.config.loader import load_settings
from amldeploy.deploy.lifecycle import LifecycleController, TrafficManager
from amldeploy.deploy.orchestrator import Orchestrator
from amldeploy.deploy.prerequisites import check_prerequisites, set_context
from amldeploy.deploy.providers import ResourceClient, create_client
from amldeploy.deploy.status import collect_status
from amldeploy.lib import console
from amldeploy.lib.errors import (
    AmlDeployError,
    ConfigError,
    DeploymentError,
    OperatorCancelled,
)
from amldeploy.lib.logging_config import get_logger, setup_logging
from amldeploy.lib.prompts import InteractiveConfirmer
from amldeploy.models.deployment import CleanupMode, RunMode
from amldeploy.models.settings import DeploymentSettings

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

MODE_META_KEY = "amldeploy.mode"


@contextmanager
def handle_command_errors() -> Generator[None, None, None]:
    """Context manager for consistent error handling in amldeploy commands.

    Exit codes:
        0: Operator cancelled at a confirmation prompt
        1: Configuration, prerequisite or execution error
    """
    try:
        yield
    except OperatorCancelled as e:
        logger.debug(f"Cancelled by operator: {e.message}")
        console.info(e.message)
        if e.hint:
            console.detail(e.hint)
        sys.exit(0)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        click.secho("Error: Configuration error", fg="red", err=True)
        click.echo(f"  {e}", err=True)
        if e.hint:
            click.echo(f"  Hint: {e.hint}", err=True)
        sys.exit(1)
    except DeploymentError as e:
        logger.error(f"Deployment error: {e}")
        click.secho(f"Error: {e.operation} failed", fg="red", err=True)
        click.echo(f"  {e.message}", err=True)
        if e.hint:
            click.echo(f"  Hint: {e.hint}", err=True)
        sys.exit(1)
    except AmlDeployError as e:
        logger.error(f"{type(e).__name__}: {e}")
        click.secho(f"Error: {e.message}", fg="red", err=True)
        if e.hint:
            click.echo(f"  Hint: {e.hint}", err=True)
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)


def config_argument(func: F) -> F:
    """Optional CONFIG_FILE argument defaulting to config.conf."""
    return click.argument(
        "config_file",
        type=click.Path(dir_okay=False),
        default=DEFAULT_CONFIG_FILE,
        required=False,
    )(func)


def verbosity_options(func: F) -> F:
    """Add --verbose/-v and --quiet/-q."""
    func = click.option(
        "--quiet",
        "-q",
        is_flag=True,
        help="Only log errors",
    )(func)
    return click.option(
        "--verbose",
        "-v",
        is_flag=True,
        help="Enable verbose debug logging",
    )(func)


def mode_flag(
    *param_decls: str, mode: RunMode | CleanupMode, help_text: str
) -> Callable[[F], F]:
    """Flag that selects a run or cleanup mode.

    Click processes options in command-line order, so when several mode
    flags are given the last one wins. The chosen mode is stored in
    ``ctx.meta[MODE_META_KEY]``.
    """

    def remember(ctx: click.Context, param: click.Parameter, value: bool) -> bool:
        if value:
            ctx.meta[MODE_META_KEY] = mode
        return value

    return click.option(
        *param_decls,
        is_flag=True,
        expose_value=False,
        callback=remember,
        help=help_text,
    )


def load_command_context(
    config_file: str,
) -> tuple[DeploymentSettings, ResourceClient]:
    """Load settings from CONFIG_FILE and create the resource client."""
    console.step("📖", f"Loading configuration from {config_file}")
    settings = load_settings(config_file)
    return settings, create_client()


@click.command()
@config_argument
@mode_flag(
    "--env-only", mode=RunMode.ENVIRONMENT, help_text="Create only the environment"
)
@mode_flag(
    "--endpoint-only",
    mode=RunMode.ENDPOINT,
    help_text="Create only endpoint and deployment (requires existing environment)",
)
@mode_flag("--cleanup", mode=RunMode.CLEANUP, help_text="Clean up all resources")
@mode_flag(
    "--test-only",
    mode=RunMode.TEST,
    help_text="Test the deployed endpoint (not available)",
)
@click.option("--force", is_flag=True, help="Skip confirmation prompts")
@verbosity_options
@click.pass_context
def run(
    ctx: click.Context,
    config_file: str,
    force: bool,
    verbose: bool,
    quiet: bool,
) -> None:
    """Run the deployment workflow.

    CONFIG_FILE is the path to the key=value configuration file
    (default: config.conf). Without a mode flag, a full deployment runs:
    environment, then endpoint and deployment.

    Example:

        amldeploy run --env-only

        amldeploy run --endpoint-only custom.conf

        amldeploy run --cleanup --force
    """
    if not quiet:
        setup_logging(verbose=verbose, quiet=quiet)

    mode = ctx.meta.get(MODE_META_KEY, RunMode.FULL)

    with handle_command_errors():
        console.heading("Azure ML vLLM Deployment Orchestrator", console.ICON_START)
        settings, client = load_command_context(config_file)
        orchestrator = Orchestrator(
            client,
            settings,
            confirm=InteractiveConfirmer(),
            force=force,
            config_path=config_file,
        )
        orchestrator.run(mode)


@click.command()
@config_argument
@verbosity_options
def environment(config_file: str, verbose: bool, quiet: bool) -> None:
    """Create the Azure ML environment (step 1)."""
    if not quiet:
        setup_logging(verbose=verbose, quiet=quiet)

    with handle_command_errors():
        settings, client = load_command_context(config_file)
        controller = LifecycleController(
            client, settings, confirm=InteractiveConfirmer()
        )
        controller.create_environment()
        console.step(console.ICON_DONE, "Environment creation completed!")


@click.command()
@config_argument
@click.option(
    "--force", is_flag=True, help="Update an existing deployment without asking"
)
@verbosity_options
def endpoint(config_file: str, force: bool, verbose: bool, quiet: bool) -> None:
    """Create the endpoint and deployment, then route all traffic (step 2).

    Unlike 'amldeploy run', this command does not ask whether the
    environment has finished building; a missing environment still fails.
    """
    if not quiet:
        setup_logging(verbose=verbose, quiet=quiet)

    with handle_command_errors():
        settings, client = load_command_context(config_file)
        controller = LifecycleController(
            client, settings, confirm=InteractiveConfirmer(), force=force
        )
        controller.create_endpoint_and_deployment()
        console.step(console.ICON_DONE, "Deployment process completed!")


@click.command()
@config_argument
@click.argument("deployment", required=False)
@click.argument("percentage", default="100", required=False)
@click.option("--force", is_flag=True, help="Skip the confirmation prompt")
@verbosity_options
def traffic(
    config_file: str,
    deployment: str | None,
    percentage: str,
    force: bool,
    verbose: bool,
    quiet: bool,
) -> None:
    """Set the traffic percentage for a deployment.

    DEPLOYMENT defaults to the configured deployment name and PERCENTAGE
    to 100.

    Example:

        amldeploy traffic config.conf blue 50
    """
    if not quiet:
        setup_logging(verbose=verbose, quiet=quiet)

    with handle_command_errors():
        try:
            value = int(percentage)
        except ValueError as exc:
            raise ConfigError(
                field="traffic_percentage",
                message=(
                    f"Invalid traffic percentage: {percentage}. "
                    "Must be between 0 and 100."
                ),
            ) from exc

        settings, client = load_command_context(config_file)
        manager = TrafficManager(
            client, settings, confirm=InteractiveConfirmer(), force=force
        )
        manager.update(deployment or settings.deployment_name, value)


@click.command()
@config_argument
@verbosity_options
def status(config_file: str, verbose: bool, quiet: bool) -> None:
    """Show the state of the configured environment, endpoint and deployment."""
    if not quiet:
        setup_logging(verbose=verbose, quiet=quiet)

    with handle_command_errors():
        settings, client = load_command_context(config_file)
        check_prerequisites(client)
        set_context(client, settings)
        result = collect_status(client, settings)

        console.heading("Deployment Status", "📊")
        if result.environment_exists is None:
            env_text = "public registry"
        else:
            env_text = "found" if result.environment_exists else "not found"
        click.echo(f"  Environment: {settings.environment_label} ({env_text})")
        click.echo(
            f"  Endpoint:    {settings.endpoint_name} "
            f"({'found' if result.endpoint_exists else 'not found'})"
        )
        if result.deployment_exists:
            click.echo(
                f"  Deployment:  {settings.deployment_name} "
                f"({result.deployment_state.value})"
            )
        else:
            click.echo(f"  Deployment:  {settings.deployment_name} (not found)")
        if result.endpoint_exists:
            click.echo(f"  Scoring URI: {result.scoring_uri or 'Not available'}")
            allocation = ", ".join(
                f"{name}={share}%" for name, share in sorted(result.traffic.items())
            )
            click.echo(f"  Traffic:     {allocation or '(none)'}")
        click.echo(f"  Serving:     {'yes' if result.is_serving else 'no'}")
        click.echo()


@click.command()
@config_argument
@click.option(
    "--lines",
    type=click.IntRange(min=1),
    default=None,
    help="Number of log lines to retrieve",
)
@verbosity_options
def logs(config_file: str, lines: int | None, verbose: bool, quiet: bool) -> None:
    """Print the deployment's container logs."""
    if not quiet:
        setup_logging(verbose=verbose, quiet=quiet)

    with handle_command_errors():
        settings, client = load_command_context(config_file)
        check_prerequisites(client)
        set_context(client, settings)
        output = client.get_logs(
            settings.deployment_name, settings.endpoint_name, lines=lines
        )
        click.echo(output.rstrip("\n"))
