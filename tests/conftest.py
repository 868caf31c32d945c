"""Pytest configuration and shared fixtures for amldeploy tests."""

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
from fakes import FakeResourceClient

from amldeploy.config.loader import settings_from_values
from amldeploy.models.settings import DeploymentSettings

PUBLIC_ENVIRONMENT = (
    "azureml://registries/azureml/environments/vllm-inference/versions/3"
)


@pytest.fixture(autouse=True)
def reset_package_logger() -> Generator[None]:
    """Undo setup_logging() so caplog sees records after CLI tests.

    Cleanup:
        Removes handlers and restores propagation on the amldeploy logger
    """
    yield
    logger = logging.getLogger("amldeploy")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def build_dir(tmp_path: Path) -> Path:
    """Create an environment build directory holding a Dockerfile."""
    path = tmp_path / "AML_env_src"
    path.mkdir()
    (path / "Dockerfile").write_text("FROM vllm/vllm-openai:latest\n")
    (path / "requirements.txt").write_text("vllm\n")
    return path


@pytest.fixture
def config_values(tmp_path: Path, build_dir: Path) -> dict[str, str]:
    """Complete configuration values with every required key set."""
    return {
        "AZ_SUBSCRIPTION_ID": "00000000-0000-0000-0000-000000000000",
        "AZ_RESOURCE_GROUP": "rg-llm",
        "AZ_ML_WORKSPACE": "ws-llm",
        "AZ_ENVIRONMENT_NAME": "vllm-env",
        "AZ_ENVIRONMENT_VERSION": "2",
        "AZ_ENDPOINT_NAME": "llm-endpoint",
        "AZ_DEPLOYMENT_NAME": "blue",
        "AZ_MODEL_ID": "azureml://registries/azureml-meta/models/Llama-3-8B/versions/1",
        "AZ_MODEL_NAME": "llama-3-8b",
        "AZ_INSTANCE_TYPE": "Standard_NC24ads_A100_v4",
        "AZ_INSTANCE_COUNT": "1",
        "TMP_DIR": str(tmp_path / "scratch"),
        "AML_ENV_DIR": str(build_dir),
    }


@pytest.fixture
def settings(config_values: dict[str, str]) -> DeploymentSettings:
    """Settings for a custom (workspace-built) environment."""
    return settings_from_values(config_values)


@pytest.fixture
def public_settings(config_values: dict[str, str]) -> DeploymentSettings:
    """Settings referencing a public registry environment."""
    return settings_from_values(
        {**config_values, "AZ_ENVIRONMENT_NAME": PUBLIC_ENVIRONMENT}
    )


@pytest.fixture
def config_file(tmp_path: Path, config_values: dict[str, str]) -> Path:
    """Write the configuration values to a key=value file."""
    path = tmp_path / "config.conf"
    lines = ["# Azure ML deployment configuration"]
    lines.extend(f'{key}="{value}"' for key, value in config_values.items())
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def fake_client() -> FakeResourceClient:
    """Resource client with no existing resources and an instant success poll."""
    return FakeResourceClient()
