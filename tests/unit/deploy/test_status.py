"""Tests for the read-only status overview."""

import pytest
from fakes import FakeResourceClient

from amldeploy.deploy.status import collect_status
from amldeploy.models.deployment import ProvisioningState
from amldeploy.models.settings import DeploymentSettings


@pytest.mark.unit
class TestCollectStatus:
    """Tests for collect_status()."""

    def test_nothing_deployed(
        self, fake_client: FakeResourceClient, settings: DeploymentSettings
    ) -> None:
        """Test the snapshot when no resource exists."""
        status = collect_status(fake_client, settings)

        assert status.environment_exists is False
        assert status.endpoint_exists is False
        assert status.deployment_exists is False
        assert status.deployment_state is ProvisioningState.UNKNOWN
        assert fake_client.calls_named("get_traffic") == []

    def test_serving_deployment(self, settings: DeploymentSettings) -> None:
        """Test the snapshot of a healthy deployment."""
        client = FakeResourceClient(
            environments={("vllm-env", "2")},
            endpoints={"llm-endpoint"},
            deployments={("blue", "llm-endpoint")},
            traffic={"blue": 100},
        )

        status = collect_status(client, settings)

        assert status.environment_exists is True
        assert status.deployment_state is ProvisioningState.SUCCEEDED
        assert status.traffic == {"blue": 100}
        assert status.is_serving
        assert client.mutations == []

    def test_public_environment_is_not_looked_up(
        self, fake_client: FakeResourceClient, public_settings: DeploymentSettings
    ) -> None:
        """Test that public references report None."""
        status = collect_status(fake_client, public_settings)

        assert status.environment_exists is None
        assert fake_client.calls_named("environment_exists") == []
