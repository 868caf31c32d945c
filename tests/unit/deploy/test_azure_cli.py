"""Unit tests for the az CLI resource client."""

from __future__ import annotations

import subprocess
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from amldeploy.deploy.providers import create_client
from amldeploy.deploy.providers.azure_cli import AzureMLCliClient
from amldeploy.lib.errors import CliNotInstalled, StepFailed
from amldeploy.models.deployment import ProvisioningState


def _completed(
    returncode: int = 0, stdout: str = "", stderr: str = ""
) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(
        args=["az"], returncode=returncode, stdout=stdout, stderr=stderr
    )


@pytest.fixture
def run_mock() -> Iterator[MagicMock]:
    """Patch subprocess.run in the client module."""
    with patch("amldeploy.deploy.providers.azure_cli.subprocess.run") as mock:
        mock.return_value = _completed()
        yield mock


def _argv(run_mock: MagicMock, index: int = -1) -> list[str]:
    return list(run_mock.call_args_list[index].args[0])


@pytest.mark.unit
class TestProcessHandling:
    """Tests for subprocess invocation and error mapping."""

    def test_runs_with_captured_text_output(self, run_mock: MagicMock) -> None:
        """Test the subprocess.run keyword arguments."""
        AzureMLCliClient().is_authenticated()

        kwargs = run_mock.call_args.kwargs
        assert kwargs["capture_output"] is True
        assert kwargs["text"] is True
        assert kwargs["check"] is False
        assert _argv(run_mock) == ["az", "account", "show"]

    def test_missing_binary_raises_cli_not_installed(
        self, run_mock: MagicMock
    ) -> None:
        """Test FileNotFoundError mapping."""
        run_mock.side_effect = FileNotFoundError("az")

        with pytest.raises(CliNotInstalled):
            AzureMLCliClient().endpoint_exists("ep")

    def test_non_zero_exit_raises_step_failed_with_stderr(
        self, run_mock: MagicMock
    ) -> None:
        """Test that checked calls surface the stderr tail."""
        run_mock.return_value = _completed(1, stderr="ERROR: quota exceeded\n")

        with pytest.raises(StepFailed) as exc_info:
            AzureMLCliClient().create_endpoint(Path("/tmp/endpoint.yml"))

        assert exc_info.value.operation == "endpoint create"
        assert "quota exceeded" in exc_info.value.message
        assert "exited with code 1" in exc_info.value.message

    def test_is_installed_uses_path_lookup(self) -> None:
        """Test the PATH lookup for the binary."""
        with patch(
            "amldeploy.deploy.providers.azure_cli.shutil.which", return_value=None
        ):
            assert AzureMLCliClient().is_installed() is False

    def test_create_client_returns_cli_client(self) -> None:
        """Test the client factory."""
        assert isinstance(create_client(), AzureMLCliClient)


@pytest.mark.unit
class TestContextAndExistence:
    """Tests for context selection and existence probes."""

    def test_set_context(self, run_mock: MagicMock) -> None:
        """Test subscription selection followed by workspace defaults."""
        AzureMLCliClient().set_context(
            subscription_id="sub", workspace="ws", resource_group="rg"
        )

        assert _argv(run_mock, 0) == ["az", "account", "set", "--subscription", "sub"]
        assert _argv(run_mock, 1) == [
            "az",
            "configure",
            "--defaults",
            "workspace=ws",
            "group=rg",
        ]

    @pytest.mark.parametrize(("returncode", "expected"), [(0, True), (1, False)])
    def test_environment_exists(
        self, run_mock: MagicMock, returncode: int, expected: bool
    ) -> None:
        """Test that existence follows the show exit code."""
        run_mock.return_value = _completed(returncode)

        assert AzureMLCliClient().environment_exists("env", "3") is expected
        assert _argv(run_mock) == [
            "az",
            "ml",
            "environment",
            "show",
            "--name",
            "env",
            "--version",
            "3",
        ]


@pytest.mark.unit
class TestDeploymentCommands:
    """Tests for deployment create/update/status commands."""

    def test_begin_create_uses_all_traffic_and_no_wait(
        self, run_mock: MagicMock
    ) -> None:
        """Test the asynchronous create invocation."""
        AzureMLCliClient().begin_create_deployment(Path("deployment.yml"))

        assert _argv(run_mock) == [
            "az",
            "ml",
            "online-deployment",
            "create",
            "-f",
            "deployment.yml",
            "--all-traffic",
            "--no-wait",
        ]

    def test_begin_update_uses_no_wait(self, run_mock: MagicMock) -> None:
        """Test the asynchronous update invocation."""
        AzureMLCliClient().begin_update_deployment(Path("deployment.yml"))

        assert _argv(run_mock)[-1] == "--no-wait"
        assert _argv(run_mock)[3] == "update"

    @pytest.mark.parametrize(
        ("stdout", "expected"),
        [
            ("Succeeded\n", ProvisioningState.SUCCEEDED),
            ("Cancelled\n", ProvisioningState.CANCELED),
            ("", ProvisioningState.UNKNOWN),
        ],
    )
    def test_get_deployment_state(
        self, run_mock: MagicMock, stdout: str, expected: ProvisioningState
    ) -> None:
        """Test provisioning state decoding from tsv output."""
        run_mock.return_value = _completed(stdout=stdout)

        assert AzureMLCliClient().get_deployment_state("blue", "ep") is expected
        argv = _argv(run_mock)
        assert argv[argv.index("--query") + 1] == "provisioning_state"

    def test_get_deployment_state_on_error_is_unknown(
        self, run_mock: MagicMock
    ) -> None:
        """Test that a failed status probe keeps polling."""
        run_mock.return_value = _completed(1, stderr="transient")

        assert (
            AzureMLCliClient().get_deployment_state("blue", "ep")
            is ProvisioningState.UNKNOWN
        )

    def test_get_logs_with_lines(self, run_mock: MagicMock) -> None:
        """Test log retrieval with a line limit."""
        run_mock.return_value = _completed(stdout="log output\n")

        output = AzureMLCliClient().get_logs("blue", "ep", lines=50)

        assert output == "log output\n"
        assert _argv(run_mock)[-2:] == ["--lines", "50"]


@pytest.mark.unit
class TestEndpointCommands:
    """Tests for scoring URI and traffic commands."""

    def test_get_scoring_uri(self, run_mock: MagicMock) -> None:
        """Test reading the scoring URI."""
        run_mock.return_value = _completed(stdout="https://ep/score\n")

        assert AzureMLCliClient().get_scoring_uri("ep") == "https://ep/score"

    def test_get_scoring_uri_unavailable(self, run_mock: MagicMock) -> None:
        """Test that a failed lookup returns None."""
        run_mock.return_value = _completed(1)

        assert AzureMLCliClient().get_scoring_uri("ep") is None

    def test_get_traffic_parses_json(self, run_mock: MagicMock) -> None:
        """Test traffic map parsing."""
        run_mock.return_value = _completed(stdout='{"blue": 90, "green": 10}')

        assert AzureMLCliClient().get_traffic("ep") == {"blue": 90, "green": 10}

    def test_set_traffic(self, run_mock: MagicMock) -> None:
        """Test the traffic update arguments."""
        AzureMLCliClient().set_traffic("ep", {"blue": 100})

        assert _argv(run_mock) == [
            "az",
            "ml",
            "online-endpoint",
            "update",
            "--name",
            "ep",
            "--traffic",
            "blue=100",
        ]

    def test_delete_endpoint_skips_prompt(self, run_mock: MagicMock) -> None:
        """Test that deletes pass --yes."""
        AzureMLCliClient().delete_endpoint("ep")

        assert _argv(run_mock)[-1] == "--yes"
