"""Azure ML resource client backed by the ``az`` CLI."""

from __future__ import annotations

import json
import shlex
import shutil
import subprocess  # nosec B404
from pathlib import Path

from amldeploy.deploy.providers.base import ResourceClient
from amldeploy.lib.errors import CliNotInstalled, StepFailed
from amldeploy.lib.logging_config import get_logger
from amldeploy.models.deployment import ProvisioningState

logger = get_logger(__name__)

AZ_BINARY = "az"


def deployment_show_command(name: str, endpoint: str) -> str:
    """Command the operator can run to check a deployment's status."""
    return f"az ml online-deployment show --name {name} --endpoint-name {endpoint}"


def deployment_logs_command(name: str, endpoint: str) -> str:
    """Command the operator can run to read a deployment's logs."""
    return f"az ml online-deployment get-logs --name {name} --endpoint-name {endpoint}"


def endpoint_show_command(endpoint: str) -> str:
    """Command the operator can run to inspect an endpoint."""
    return f"az ml online-endpoint show --name {endpoint}"


def credentials_command(endpoint: str) -> str:
    """Command the operator can run to read the endpoint key."""
    return f"az ml online-endpoint get-credentials --name {endpoint}"


def _tail(text: str, lines: int = 20) -> str:
    stripped = text.strip()
    if not stripped:
        return ""
    return "\n".join(stripped.splitlines()[-lines:])


class AzureMLCliClient(ResourceClient):
    """Drive Azure ML resources through ``az ml`` commands.

    Every call runs synchronously; ``--no-wait`` variants return as soon as
    the provider accepts the request.
    """

    def __init__(self, binary: str = AZ_BINARY) -> None:
        """Initialize the client.

        Args:
            binary: Name or path of the Azure CLI executable
        """
        self._binary = binary

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        command = [self._binary, *args]
        logger.debug(f"Running: {shlex.join(command)}")
        try:
            result = subprocess.run(  # noqa: S603  # nosec B603
                command,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise CliNotInstalled(self._binary) from exc
        logger.debug(f"Exit code {result.returncode} for: {args[0]} {args[1:3]}")
        return result

    def _run_checked(
        self, operation: str, *args: str, hint: str | None = None
    ) -> subprocess.CompletedProcess[str]:
        result = self._run(*args)
        if result.returncode != 0:
            detail = _tail(result.stderr) or _tail(result.stdout)
            command = " ".join((self._binary, *args[:3]))
            message = f"'{command}' exited with code {result.returncode}"
            if detail:
                message = f"{message}: {detail}"
            raise StepFailed(operation=operation, message=message, hint=hint)
        return result

    def is_installed(self) -> bool:
        return shutil.which(self._binary) is not None

    def is_authenticated(self) -> bool:
        return self._run("account", "show").returncode == 0

    def set_context(
        self, *, subscription_id: str, workspace: str, resource_group: str
    ) -> None:
        self._run_checked(
            "context", "account", "set", "--subscription", subscription_id
        )
        self._run_checked(
            "context",
            "configure",
            "--defaults",
            f"workspace={workspace}",
            f"group={resource_group}",
        )

    def environment_exists(self, name: str, version: str) -> bool:
        result = self._run(
            "ml", "environment", "show", "--name", name, "--version", version
        )
        return result.returncode == 0

    def create_environment(self, manifest: Path) -> None:
        self._run_checked(
            "environment create",
            "ml",
            "environment",
            "create",
            "-f",
            str(manifest),
            hint="Fix the reported problem, then re-run the environment step.",
        )

    def delete_environment(self, name: str, version: str) -> None:
        self._run_checked(
            "environment delete",
            "ml",
            "environment",
            "delete",
            "--name",
            name,
            "--version",
            version,
            "--yes",
        )

    def endpoint_exists(self, name: str) -> bool:
        result = self._run("ml", "online-endpoint", "show", "--name", name)
        return result.returncode == 0

    def create_endpoint(self, manifest: Path) -> None:
        self._run_checked(
            "endpoint create",
            "ml",
            "online-endpoint",
            "create",
            "-f",
            str(manifest),
        )

    def delete_endpoint(self, name: str) -> None:
        self._run_checked(
            "endpoint delete",
            "ml",
            "online-endpoint",
            "delete",
            "--name",
            name,
            "--yes",
        )

    def get_scoring_uri(self, endpoint: str) -> str | None:
        result = self._run(
            "ml",
            "online-endpoint",
            "show",
            "--name",
            endpoint,
            "--query",
            "scoring_uri",
            "-o",
            "tsv",
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def get_traffic(self, endpoint: str) -> dict[str, int]:
        result = self._run_checked(
            "traffic show",
            "ml",
            "online-endpoint",
            "show",
            "--name",
            endpoint,
            "--query",
            "traffic",
            "-o",
            "json",
        )
        try:
            payload = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as exc:
            raise StepFailed(
                operation="traffic show",
                message=f"Unexpected traffic output: {result.stdout.strip()!r}",
            ) from exc
        if not isinstance(payload, dict):
            return {}
        return {str(name): int(value) for name, value in payload.items()}

    def set_traffic(self, endpoint: str, allocation: dict[str, int]) -> None:
        pairs = [f"{name}={percentage}" for name, percentage in allocation.items()]
        self._run_checked(
            "traffic update",
            "ml",
            "online-endpoint",
            "update",
            "--name",
            endpoint,
            "--traffic",
            *pairs,
        )

    def deployment_exists(self, name: str, endpoint: str) -> bool:
        result = self._run(
            "ml",
            "online-deployment",
            "show",
            "--name",
            name,
            "--endpoint-name",
            endpoint,
        )
        return result.returncode == 0

    def begin_create_deployment(
        self, manifest: Path, *, all_traffic: bool = True
    ) -> None:
        args = ["ml", "online-deployment", "create", "-f", str(manifest)]
        if all_traffic:
            args.append("--all-traffic")
        args.append("--no-wait")
        self._run_checked("deployment create", *args)

    def begin_update_deployment(self, manifest: Path) -> None:
        self._run_checked(
            "deployment update",
            "ml",
            "online-deployment",
            "update",
            "-f",
            str(manifest),
            "--no-wait",
        )

    def get_deployment_state(self, name: str, endpoint: str) -> ProvisioningState:
        result = self._run(
            "ml",
            "online-deployment",
            "show",
            "--name",
            name,
            "--endpoint-name",
            endpoint,
            "--query",
            "provisioning_state",
            "-o",
            "tsv",
        )
        if result.returncode != 0:
            logger.debug(f"Status probe failed for {name}: {_tail(result.stderr, 3)}")
            return ProvisioningState.UNKNOWN
        return ProvisioningState.decode(result.stdout)

    def delete_deployment(self, name: str, endpoint: str) -> None:
        self._run_checked(
            "deployment delete",
            "ml",
            "online-deployment",
            "delete",
            "--name",
            name,
            "--endpoint-name",
            endpoint,
            "--yes",
        )

    def get_logs(self, name: str, endpoint: str, lines: int | None = None) -> str:
        args = [
            "ml",
            "online-deployment",
            "get-logs",
            "--name",
            name,
            "--endpoint-name",
            endpoint,
        ]
        if lines is not None:
            args.extend(["--lines", str(lines)])
        return self._run_checked("logs", *args).stdout
