"""Resource clients for Azure ML."""

from __future__ import annotations

from amldeploy.deploy.providers.base import ResourceClient


def create_client(binary: str | None = None) -> ResourceClient:
    """Create the resource client used by the CLI commands."""
    from amldeploy.deploy.providers.azure_cli import AZ_BINARY, AzureMLCliClient

    return AzureMLCliClient(binary or AZ_BINARY)


__all__ = ["ResourceClient", "create_client"]
