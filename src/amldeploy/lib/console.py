"""Operator-facing status lines.

Every step prints a short line prefixed with an icon that tells the operator
at a glance whether it succeeded, failed, or is informational.
"""

import click

ICON_SUCCESS = "✅"
ICON_FAILURE = "❌"
ICON_INFO = "ℹ️ "
ICON_WARNING = "⚠️ "
ICON_CHECK = "🔍"
ICON_BUILD = "🏗️ "
ICON_DELETE = "🗑️ "
ICON_WAIT = "⏳"
ICON_TRAFFIC = "🚦"
ICON_WRITE = "📝"
ICON_DONE = "🎉"
ICON_START = "🚀"
ICON_CONTEXT = "🔧"
ICON_UPDATE = "🔄"
ICON_CLEAN = "🧹"
ICON_TARGET = "🎯"
ICON_TIP = "💡"


def success(message: str) -> None:
    """Print a success line."""
    click.secho(f"{ICON_SUCCESS} {message}", fg="green")


def failure(message: str) -> None:
    """Print a failure line to stderr."""
    click.secho(f"{ICON_FAILURE} {message}", fg="red", err=True)


def info(message: str) -> None:
    """Print an informational line."""
    click.echo(f"{ICON_INFO} {message}")


def warning(message: str) -> None:
    """Print a warning line."""
    click.secho(f"{ICON_WARNING} {message}", fg="yellow")


def step(icon: str, message: str) -> None:
    """Print a progress line with an explicit icon."""
    click.echo(f"{icon} {message}")


def detail(message: str) -> None:
    """Print an indented continuation line."""
    click.echo(f"   {message}")


def heading(title: str, icon: str = "") -> None:
    """Print a section title underlined with '='."""
    text = f"{icon} {title}" if icon else title
    click.echo()
    click.secho(text, bold=True)
    click.echo("=" * max(len(text), 20))
