"""CLI command for validating a configuration file."""

from __future__ import annotations

import sys

import click

from amldeploy.cli.commands.deploy import (
    config_argument,
    handle_command_errors,
    verbosity_options,
)
from amldeploy.config.loader import load_config_file
from amldeploy.config.validator import ValidationReport, validate_config_values
from amldeploy.lib import console
from amldeploy.lib.logging_config import setup_logging


def _print_report(report: ValidationReport) -> None:
    for title, icon, statuses in report.sections:
        console.heading(title, icon)
        for status in statuses:
            if status.is_set:
                console.success(f"{status.key}: {status.value}")
            elif status.required:
                console.failure(f"{status.key}: NOT SET (required)")
            else:
                console.detail(f"{status.key}: not set (optional)")

    click.echo()
    if report.ok:
        console.success("All required configuration values are set")
    else:
        console.failure(
            f"{report.missing_count} required configuration value(s) missing"
        )


@click.command()
@config_argument
@verbosity_options
def validate(config_file: str, verbose: bool, quiet: bool) -> None:
    """Report required and optional configuration keys.

    Exits with code 1 when any required key is unset or empty.
    """
    if not quiet:
        setup_logging(verbose=verbose, quiet=quiet)

    with handle_command_errors():
        console.step(console.ICON_CHECK, f"Validating configuration: {config_file}")
        report = validate_config_values(load_config_file(config_file))
        _print_report(report)
        if not report.ok:
            sys.exit(1)
