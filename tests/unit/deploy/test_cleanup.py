"""Tests for the cleanup controller."""

import logging
from pathlib import Path

import pytest
from fakes import FakeResourceClient

from amldeploy.deploy.cleanup import CleanupController
from amldeploy.lib.errors import StepFailed
from amldeploy.lib.prompts import AlwaysConfirm, ScriptedConfirmer
from amldeploy.models.deployment import CleanupMode, StepOutcome
from amldeploy.models.settings import DeploymentSettings

ENVIRONMENT = ("vllm-env", "2")
ENDPOINT = "llm-endpoint"
DEPLOYMENT = ("blue", "llm-endpoint")


@pytest.fixture
def populated_client() -> FakeResourceClient:
    """Client where every resource exists."""
    return FakeResourceClient(
        environments={ENVIRONMENT},
        endpoints={ENDPOINT},
        deployments={DEPLOYMENT},
    )


@pytest.fixture
def scratch_with_files(settings: DeploymentSettings) -> Path:
    """Populate the scratch directory with rendered artifacts."""
    scratch = settings.scratch_dir
    (scratch / "AML_env").mkdir(parents=True)
    (scratch / "deployment.yml").write_text("name: blue\n")
    return scratch


@pytest.mark.unit
class TestCleanupConfirmation:
    """Tests for how CleanupController asks before deleting."""

    def test_force_answers_every_prompt_yes(
        self, populated_client: FakeResourceClient, settings: DeploymentSettings
    ) -> None:
        """Test that force swaps in an always-yes confirmer."""
        scripted = ScriptedConfirmer()
        controller = CleanupController(
            populated_client, settings, confirm=scripted, force=True
        )

        outcome = controller.delete_endpoint()

        assert isinstance(controller.confirm, AlwaysConfirm)
        assert scripted.prompts == []
        assert outcome is StepOutcome.DELETED

    def test_without_force_the_operator_is_asked(
        self, populated_client: FakeResourceClient, settings: DeploymentSettings
    ) -> None:
        """Test that the injected confirmer receives the deletion prompt."""
        scripted = ScriptedConfirmer([False])
        controller = CleanupController(populated_client, settings, confirm=scripted)

        outcome = controller.delete_endpoint()

        assert scripted.prompts == ["Delete endpoint llm-endpoint?"]
        assert outcome is StepOutcome.SKIPPED
        assert populated_client.mutations == []


@pytest.mark.unit
class TestCleanupAll:
    """Tests for CleanupController.run() in all mode."""

    def test_deletes_in_dependency_order(
        self,
        populated_client: FakeResourceClient,
        settings: DeploymentSettings,
        scratch_with_files: Path,
    ) -> None:
        """Test deployment, endpoint, environment, then scratch clearing."""
        controller = CleanupController(
            populated_client, settings, confirm=ScriptedConfirmer(), force=True
        )

        outcomes = controller.run(CleanupMode.ALL)

        assert [call[0] for call in populated_client.mutations] == [
            "delete_deployment",
            "delete_endpoint",
            "delete_environment",
        ]
        assert outcomes == {
            "deployment": StepOutcome.DELETED,
            "endpoint": StepOutcome.DELETED,
            "environment": StepOutcome.DELETED,
            "scratch": StepOutcome.DELETED,
        }
        assert list(scratch_with_files.iterdir()) == []

    def test_missing_resources_are_informational(
        self, fake_client: FakeResourceClient, settings: DeploymentSettings
    ) -> None:
        """Test that nothing to delete is not an error."""
        controller = CleanupController(
            fake_client, settings, confirm=ScriptedConfirmer()
        )

        outcomes = controller.run(CleanupMode.ALL)

        assert set(outcomes.values()) == {StepOutcome.MISSING}
        assert fake_client.mutations == []

    def test_failures_are_logged_and_remaining_steps_run(
        self,
        settings: DeploymentSettings,
        scratch_with_files: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that all mode attempts every step despite failures."""
        client = FakeResourceClient(
            environments={ENVIRONMENT},
            endpoints={ENDPOINT},
            deployments={DEPLOYMENT},
            fail_on={"delete_deployment", "delete_endpoint"},
        )
        controller = CleanupController(
            client, settings, confirm=ScriptedConfirmer(), force=True
        )

        with caplog.at_level(logging.WARNING, logger="amldeploy"):
            outcomes = controller.run(CleanupMode.ALL)

        assert outcomes["deployment"] is StepOutcome.FAILED
        assert outcomes["endpoint"] is StepOutcome.FAILED
        assert outcomes["environment"] is StepOutcome.DELETED
        assert outcomes["scratch"] is StepOutcome.DELETED
        assert "Cleanup of deployment failed" in caplog.text
        assert "Cleanup of endpoint failed" in caplog.text

    def test_declined_steps_are_skipped(
        self,
        populated_client: FakeResourceClient,
        settings: DeploymentSettings,
        scratch_with_files: Path,
    ) -> None:
        """Test that each step asks and a no leaves the resource."""
        confirm = ScriptedConfirmer([False, True, False, False])
        controller = CleanupController(populated_client, settings, confirm=confirm)

        outcomes = controller.run(CleanupMode.ALL)

        assert len(confirm.prompts) == 4
        assert confirm.prompts[0] == (
            "Delete deployment blue from endpoint llm-endpoint?"
        )
        assert outcomes["deployment"] is StepOutcome.SKIPPED
        assert outcomes["endpoint"] is StepOutcome.DELETED
        assert outcomes["environment"] is StepOutcome.SKIPPED
        assert outcomes["scratch"] is StepOutcome.SKIPPED
        assert [call[0] for call in populated_client.mutations] == ["delete_endpoint"]
        assert any(scratch_with_files.iterdir())

    def test_public_environment_is_never_deleted(
        self, public_settings: DeploymentSettings
    ) -> None:
        """Test that registry environments are left alone."""
        client = FakeResourceClient()
        controller = CleanupController(
            client, public_settings, confirm=ScriptedConfirmer(), force=True
        )

        outcomes = controller.run(CleanupMode.ALL)

        assert outcomes["environment"] is StepOutcome.SKIPPED
        assert client.calls_named("environment_exists") == []


@pytest.mark.unit
class TestCleanupSingleMode:
    """Tests for single-resource cleanup modes."""

    @pytest.mark.parametrize(
        ("mode", "expected_call"),
        [
            (CleanupMode.DEPLOYMENT, "delete_deployment"),
            (CleanupMode.ENDPOINT, "delete_endpoint"),
            (CleanupMode.ENVIRONMENT, "delete_environment"),
        ],
    )
    def test_deletes_only_the_selected_resource(
        self,
        populated_client: FakeResourceClient,
        settings: DeploymentSettings,
        mode: CleanupMode,
        expected_call: str,
    ) -> None:
        """Test that a single mode touches one resource."""
        controller = CleanupController(
            populated_client, settings, confirm=ScriptedConfirmer([True])
        )

        outcomes = controller.run(mode)

        assert list(outcomes.values()) == [StepOutcome.DELETED]
        assert [call[0] for call in populated_client.mutations] == [expected_call]

    def test_failure_propagates(self, settings: DeploymentSettings) -> None:
        """Test that single modes raise StepFailed."""
        client = FakeResourceClient(
            deployments={DEPLOYMENT}, fail_on={"delete_deployment"}
        )
        controller = CleanupController(
            client, settings, confirm=ScriptedConfirmer(), force=True
        )

        with pytest.raises(StepFailed):
            controller.run(CleanupMode.DEPLOYMENT)
