"""amldeploy deployment engine.

This package provides manifest rendering, build context preparation, the
resource lifecycle and cleanup controllers, and the top-level orchestrator.
"""

from amldeploy.deploy.cleanup import CleanupController
from amldeploy.deploy.lifecycle import LifecycleController, TrafficManager
from amldeploy.deploy.manifests import ManifestSet, write_manifests
from amldeploy.deploy.operations import AsyncOperation
from amldeploy.deploy.orchestrator import Orchestrator

__all__ = [
    "AsyncOperation",
    "CleanupController",
    "LifecycleController",
    "ManifestSet",
    "Orchestrator",
    "TrafficManager",
    "write_manifests",
]
