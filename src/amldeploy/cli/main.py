"""Entry point for the amldeploy command-line tool."""

import click

from amldeploy import __version__
from amldeploy.cli.commands.cleanup import cleanup
from amldeploy.cli.commands.deploy import (
    endpoint,
    environment,
    logs,
    run,
    status,
    traffic,
)
from amldeploy.cli.commands.validate import validate


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="amldeploy")
@click.pass_context
def main(ctx: click.Context) -> None:
    """Deploy vLLM models to Azure ML managed online endpoints.

    Step-by-step usage:

        amldeploy run --env-only config.conf

        amldeploy run --endpoint-only config.conf

    Or run both steps at once:

        amldeploy run config.conf
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


main.add_command(run)
main.add_command(environment)
main.add_command(endpoint)
main.add_command(cleanup)
main.add_command(traffic)
main.add_command(status)
main.add_command(logs)
main.add_command(validate)


if __name__ == "__main__":
    main()
