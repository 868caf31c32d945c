"""Build context preparation for custom environments."""

from __future__ import annotations

import shutil
from pathlib import Path

from amldeploy.deploy.manifests import BUILD_CONTEXT_DIRNAME
from amldeploy.lib.errors import ConfigError
from amldeploy.lib.logging_config import get_logger
from amldeploy.models.settings import DeploymentSettings

logger = get_logger(__name__)


def validate_build_dir(build_dir: Path) -> None:
    """Check that the build directory exists and holds a Dockerfile.

    Raises:
        ConfigError: If the directory or its Dockerfile is missing
    """
    if not build_dir.is_dir():
        raise ConfigError(
            field="AML_ENV_DIR",
            message=f"AML environment directory '{build_dir}' not found.",
        )
    if not (build_dir / "Dockerfile").is_file():
        raise ConfigError(
            field="AML_ENV_DIR",
            message=f"Dockerfile not found in '{build_dir}'",
        )


def prepare_build_context(settings: DeploymentSettings) -> Path:
    """Copy the environment build directory into the scratch directory.

    Any previous copy is removed first so stale files never reach the build.

    Args:
        settings: Deployment settings

    Returns:
        Path to the copied build context

    Raises:
        ConfigError: If the build directory or Dockerfile is missing
    """
    validate_build_dir(settings.build_dir)

    settings.scratch_dir.mkdir(parents=True, exist_ok=True)
    target = settings.scratch_dir / BUILD_CONTEXT_DIRNAME
    if target.exists():
        logger.debug(f"Removing existing build context at {target}")
        shutil.rmtree(target)

    shutil.copytree(settings.build_dir, target)
    logger.debug(f"Copied {settings.build_dir} to {target}")
    return target


def clear_scratch_dir(scratch_dir: Path) -> int:
    """Remove everything inside the scratch directory, keeping the directory.

    Returns:
        Number of top-level entries removed
    """
    removed = 0
    for entry in scratch_dir.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()
        removed += 1
    return removed
