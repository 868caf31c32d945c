"""CLI command for removing Azure ML resources."""

from __future__ import annotations

import click

from amldeploy.cli.commands.deploy import (
    MODE_META_KEY,
    config_argument,
    handle_command_errors,
    load_command_context,
    mode_flag,
    verbosity_options,
)
from amldeploy.deploy.cleanup import CleanupController
from amldeploy.lib import console
from amldeploy.lib.logging_config import setup_logging
from amldeploy.lib.prompts import InteractiveConfirmer
from amldeploy.models.deployment import CleanupMode


@click.command()
@config_argument
@mode_flag(
    "--deployment-only",
    mode=CleanupMode.DEPLOYMENT,
    help_text="Delete only the deployment",
)
@mode_flag(
    "--endpoint-only",
    mode=CleanupMode.ENDPOINT,
    help_text="Delete only the endpoint (and all its deployments)",
)
@mode_flag(
    "--environment-only",
    mode=CleanupMode.ENVIRONMENT,
    help_text="Delete only the environment",
)
@mode_flag(
    "--all",
    mode=CleanupMode.ALL,
    help_text="Delete deployment, endpoint, environment and scratch files (default)",
)
@click.option("--force", is_flag=True, help="Skip confirmation prompts")
@verbosity_options
@click.pass_context
def cleanup(
    ctx: click.Context, config_file: str, force: bool, verbose: bool, quiet: bool
) -> None:
    """Delete deployment, endpoint and environment in dependency order.

    Without a mode flag every resource is removed. When several mode flags
    are given, the last one wins.

    Example:

        amldeploy cleanup config.conf --deployment-only

        amldeploy cleanup --all --force
    """
    if not quiet:
        setup_logging(verbose=verbose, quiet=quiet)

    mode = ctx.meta.get(MODE_META_KEY, CleanupMode.ALL)

    with handle_command_errors():
        settings, client = load_command_context(config_file)
        controller = CleanupController(
            client, settings, confirm=InteractiveConfirmer(), force=force
        )
        controller.run(mode)
        console.step(console.ICON_DONE, "Cleanup process finished!")
