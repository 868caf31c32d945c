"""amldeploy - Deploy vLLM inference workloads to Azure ML online endpoints.

amldeploy drives the Azure CLI to create, update and tear down the three
resources behind a managed online endpoint: a custom (or public registry)
environment, the endpoint itself, and a deployment serving the model.

Main features:
- Key=value configuration files with a validation report
- Idempotent environment and endpoint creation
- Deployment create/update with status polling and traffic cutover
- Reverse-order cleanup with per-step confirmation
"""

from amldeploy.lib.errors import AmlDeployError, ConfigError, DeploymentError

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AmlDeployError",
    "ConfigError",
    "DeploymentError",
]
