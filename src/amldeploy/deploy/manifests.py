"""Manifest rendering for Azure ML resources.

This module renders the environment, endpoint and deployment YAML documents
consumed by ``az ml ... create -f``. Rendering is pure: identical settings
always produce identical text.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import yaml
from jinja2 import Environment, StrictUndefined

from amldeploy.lib.errors import ManifestError
from amldeploy.lib.logging_config import get_logger
from amldeploy.models.settings import DeploymentSettings

logger = get_logger(__name__)

ENVIRONMENT_MANIFEST = "environment.yml"
ENDPOINT_MANIFEST = "endpoint.yml"
DEPLOYMENT_MANIFEST = "deployment.yml"

# Directory name of the copied build context, relative to the manifests
BUILD_CONTEXT_DIRNAME = "AML_env"

ENVIRONMENT_TEMPLATE = """\
$schema: https://azuremlschemas.azureedge.net/latest/environment.schema.json
name: {{ name }}
version: {{ version | q }}
description: {{ description | q }}
build:
  path: ./{{ build_dirname }}/
"""

ENDPOINT_TEMPLATE = """\
$schema: https://azuremlsdk2.blob.core.windows.net/latest/managedOnlineEndpoint.schema.json
name: {{ endpoint_name }}
description: {{ ("vLLM endpoint for " ~ model_name) | q }}
auth_mode: key
tags:
  model: {{ model_name | q }}
  framework: vllm
  created_by: automated_script
"""

DEPLOYMENT_TEMPLATE = """\
$schema: https://azuremlschemas.azureedge.net/latest/managedOnlineDeployment.schema.json
name: {{ deployment_name }}
description: {{ ("vLLM deployment for " ~ model_name) | q }}
endpoint_name: {{ endpoint_name }}
model: {{ model_id | q }}
environment: {{ environment | q }}
instance_type: {{ instance_type }}
instance_count: {{ instance_count }}
request_settings:
  request_timeout_ms: {{ request.request_timeout_ms }}
  max_concurrent_requests_per_instance: {{ request.max_concurrent_requests_per_instance }}
  max_queue_wait_ms: {{ request.max_queue_wait_ms }}
environment_variables:
{% for key, value in environment_variables.items() %}
  {{ key }}: {{ value | q }}
{% endfor %}
{% for probe in ("liveness_probe", "readiness_probe") %}
{{ probe }}:
  initial_delay: {{ probes.initial_delay }}
  timeout: {{ probes.timeout }}
  period: {{ probes.period }}
  failure_threshold: {{ probes.failure_threshold }}
{% endfor %}
tags:
  model: {{ model_name | q }}
  instance_type: {{ instance_type }}
  created_by: automated_script
"""


def _quote(value: object) -> str:
    # JSON strings are valid YAML double-quoted scalars
    return json.dumps(str(value), ensure_ascii=False)


_jinja = Environment(  # nosec B701 - renders YAML, not HTML
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=StrictUndefined,
    autoescape=False,
)
_jinja.filters["q"] = _quote


@dataclass(frozen=True)
class ManifestSet:
    """Paths of the rendered manifests in the scratch directory."""

    environment: Path
    endpoint: Path
    deployment: Path


def deployment_environment_variables(settings: DeploymentSettings) -> dict[str, str]:
    """Return the environment variables injected into the inference container.

    The core engine variables are always present; optional tuning keys and
    passthrough variables are added only when configured.
    """
    engine = settings.engine
    variables: dict[str, str] = {
        "GPU_MEMORY_UTILIZATION": str(engine.gpu_memory_utilization),
        "VLLM_TENSOR_PARALLEL_SIZE": str(engine.tensor_parallel_size),
        "VLLM_ATTENTION_BACKEND": engine.attention_backend,
        "VLLM_SWAP_SPACE": str(engine.swap_space),
        "VLLM_FLASH_ATTN_VERSION": "3",
        "VLLM_USE_V1": "1",
        "VLLM_SERVED_MODEL_NAME": engine.served_model_name or settings.model_name,
        "TASK_TYPE": "chat-completion",
    }

    optional = {
        "VLLM_TOKENIZER_MODE": engine.tokenizer_mode,
        "VLLM_TRUST_REMOTE_CODE": engine.trust_remote_code,
        "VLLM_LOG_LEVEL": engine.log_level,
        "VLLM_WORKER_USE_RAY": engine.worker_use_ray,
        "VLLM_ENGINE_USE_RAY": engine.engine_use_ray,
        "MODEL_REVISION": engine.model_revision,
        "MODEL_CACHE_DIR": engine.model_cache_dir,
    }
    variables.update({key: value for key, value in optional.items() if value})

    for key in sorted(engine.custom_variables):
        variables[key] = engine.custom_variables[key]
    return variables


def render_environment_manifest(settings: DeploymentSettings) -> str:
    """Render the environment manifest pointing at the copied build context."""
    return _jinja.from_string(ENVIRONMENT_TEMPLATE).render(
        name=settings.environment_name,
        version=settings.environment_version,
        description=settings.environment_description,
        build_dirname=BUILD_CONTEXT_DIRNAME,
    )


def render_endpoint_manifest(settings: DeploymentSettings) -> str:
    """Render the managed online endpoint manifest (key auth)."""
    return _jinja.from_string(ENDPOINT_TEMPLATE).render(
        endpoint_name=settings.endpoint_name,
        model_name=settings.model_name,
    )


def render_deployment_manifest(settings: DeploymentSettings) -> str:
    """Render the managed online deployment manifest.

    Liveness and readiness probes share the same four timing values.
    """
    return _jinja.from_string(DEPLOYMENT_TEMPLATE).render(
        deployment_name=settings.deployment_name,
        endpoint_name=settings.endpoint_name,
        model_id=settings.model_id,
        model_name=settings.model_name,
        environment=settings.environment_reference,
        instance_type=settings.instance_type,
        instance_count=settings.instance_count,
        request=settings.request,
        probes=settings.probes,
        environment_variables=deployment_environment_variables(settings),
    )


def _write(path: Path, kind: str, content: str) -> Path:
    try:
        yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ManifestError(kind, str(exc)) from exc
    path.write_text(content, encoding="utf-8")
    logger.debug(f"Wrote {kind} manifest to {path}")
    return path


def write_manifests(settings: DeploymentSettings) -> ManifestSet:
    """Render all three manifests into the scratch directory.

    Existing manifest files are overwritten.

    Args:
        settings: Deployment settings

    Returns:
        ManifestSet with the written paths

    Raises:
        ManifestError: If a rendered document is not valid YAML
    """
    scratch = settings.scratch_dir
    scratch.mkdir(parents=True, exist_ok=True)
    return ManifestSet(
        environment=_write(
            scratch / ENVIRONMENT_MANIFEST,
            "environment",
            render_environment_manifest(settings),
        ),
        endpoint=_write(
            scratch / ENDPOINT_MANIFEST,
            "endpoint",
            render_endpoint_manifest(settings),
        ),
        deployment=_write(
            scratch / DEPLOYMENT_MANIFEST,
            "deployment",
            render_deployment_manifest(settings),
        ),
    )
