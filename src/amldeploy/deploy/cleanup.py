"""Resource cleanup.

Resources are removed in dependency order: deployment, endpoint,
environment, then the scratch directory contents.
"""

from __future__ import annotations

from collections.abc import Callable

from amldeploy.deploy.build_context import clear_scratch_dir
from amldeploy.deploy.prerequisites import check_prerequisites, set_context
from amldeploy.deploy.providers.base import ResourceClient
from amldeploy.lib import console
from amldeploy.lib.errors import AmlDeployError
from amldeploy.lib.logging_config import get_logger
from amldeploy.lib.prompts import AlwaysConfirm, Confirmer
from amldeploy.models.deployment import CleanupMode, StepOutcome
from amldeploy.models.settings import DeploymentSettings

logger = get_logger(__name__)


class CleanupController:
    """Delete the resources described by one settings record.

    Each step checks existence first and asks for confirmation; with force
    set every confirmation is answered yes.
    In ``all`` mode a failed deletion is logged and the remaining steps still
    run; single-resource modes let the failure propagate.
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

    def _approved(self, prompt: str) -> bool:
        return self.confirm(prompt, False)

    def delete_deployment(self) -> StepOutcome:
        """Delete the deployment if it exists."""
        name, endpoint = self.settings.deployment_name, self.settings.endpoint_name
        console.step(console.ICON_CHECK, f"Checking deployment: {name}")
        if not self.client.deployment_exists(name, endpoint):
            console.info(f"Deployment {name} not found")
            return StepOutcome.MISSING

        if not self._approved(
            f"Delete deployment {name} from endpoint {endpoint}?"
        ):
            console.info(f"Skipping deployment {name}")
            return StepOutcome.SKIPPED

        console.step(console.ICON_DELETE, f"Deleting deployment {name}...")
        self.client.delete_deployment(name, endpoint)
        console.success(f"Deployment {name} deleted")
        return StepOutcome.DELETED

    def delete_endpoint(self) -> StepOutcome:
        """Delete the endpoint if it exists."""
        endpoint = self.settings.endpoint_name
        console.step(console.ICON_CHECK, f"Checking endpoint: {endpoint}")
        if not self.client.endpoint_exists(endpoint):
            console.info(f"Endpoint {endpoint} not found")
            return StepOutcome.MISSING

        if not self._approved(f"Delete endpoint {endpoint}?"):
            console.info(f"Skipping endpoint {endpoint}")
            return StepOutcome.SKIPPED

        console.step(console.ICON_DELETE, f"Deleting endpoint {endpoint}...")
        self.client.delete_endpoint(endpoint)
        console.success(f"Endpoint {endpoint} deleted")
        return StepOutcome.DELETED

    def delete_environment(self) -> StepOutcome:
        """Delete the workspace environment if it exists.

        Public registry environments are not owned by the workspace and are
        never deleted.
        """
        settings = self.settings
        label = settings.environment_label
        if settings.uses_public_environment:
            console.info(f"Environment {label} is a public registry environment")
            return StepOutcome.SKIPPED

        console.step(console.ICON_CHECK, f"Checking environment: {label}")
        if not self.client.environment_exists(
            settings.environment_name, settings.environment_version
        ):
            console.info(f"Environment {label} not found")
            return StepOutcome.MISSING

        if not self._approved(f"Delete environment {label}?"):
            console.info(f"Skipping environment {label}")
            return StepOutcome.SKIPPED

        console.step(console.ICON_DELETE, f"Deleting environment {label}...")
        self.client.delete_environment(
            settings.environment_name, settings.environment_version
        )
        console.success(f"Environment {label} deleted")
        return StepOutcome.DELETED

    def clear_scratch(self) -> StepOutcome:
        """Remove the contents of the scratch directory."""
        scratch = self.settings.scratch_dir
        if not scratch.is_dir() or not any(scratch.iterdir()):
            console.info(f"Nothing to clean in {scratch}")
            return StepOutcome.MISSING

        if not self._approved(f"Delete contents of {scratch}?"):
            console.info(f"Skipping {scratch}")
            return StepOutcome.SKIPPED

        console.step(console.ICON_CLEAN, f"Cleaning up {scratch}...")
        removed = clear_scratch_dir(scratch)
        logger.debug(f"Removed {removed} entries from {scratch}")
        console.success(f"{scratch} cleaned")
        return StepOutcome.DELETED

    def _steps(self, mode: CleanupMode) -> list[tuple[str, Callable[[], StepOutcome]]]:
        if mode is CleanupMode.DEPLOYMENT:
            return [("deployment", self.delete_deployment)]
        if mode is CleanupMode.ENDPOINT:
            return [("endpoint", self.delete_endpoint)]
        if mode is CleanupMode.ENVIRONMENT:
            return [("environment", self.delete_environment)]
        return [
            ("deployment", self.delete_deployment),
            ("endpoint", self.delete_endpoint),
            ("environment", self.delete_environment),
            ("scratch", self.clear_scratch),
        ]

    def run(self, mode: CleanupMode = CleanupMode.ALL) -> dict[str, StepOutcome]:
        """Run the cleanup steps for a mode.

        Args:
            mode: Which resources to remove

        Returns:
            Mapping of step name to its outcome

        Raises:
            StepFailed: If a deletion fails in a single-resource mode
        """
        check_prerequisites(self.client)
        set_context(self.client, self.settings)

        console.heading(f"Cleanup mode: {mode.value}", console.ICON_CLEAN)
        outcomes: dict[str, StepOutcome] = {}
        for name, action in self._steps(mode):
            if mode is not CleanupMode.ALL:
                outcomes[name] = action()
                continue
            try:
                outcomes[name] = action()
            except (AmlDeployError, OSError) as exc:
                logger.warning(f"Cleanup of {name} failed: {exc}")
                console.failure(f"Failed to clean up {name}: {exc}")
                outcomes[name] = StepOutcome.FAILED

        console.success("Cleanup completed!")
        return outcomes
