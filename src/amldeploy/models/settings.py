"""Pydantic models for deployment settings.

The settings record is built once from the configuration file and passed
explicitly to every component. It is frozen: nothing mutates configuration
after load.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

PUBLIC_ENVIRONMENT_PREFIX = "azureml://"


class RequestSettings(BaseModel):
    """Request-handling limits applied to each deployment instance.

    Attributes:
        request_timeout_ms: Scoring request timeout in milliseconds
        max_concurrent_requests_per_instance: Concurrent requests per instance
        max_queue_wait_ms: Maximum time a request may wait in queue
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    request_timeout_ms: int = Field(
        default=90000, ge=1, description="Scoring request timeout (ms)"
    )
    max_concurrent_requests_per_instance: int = Field(
        default=10, ge=1, description="Maximum concurrent requests per instance"
    )
    max_queue_wait_ms: int = Field(
        default=500, ge=0, description="Maximum queue wait (ms)"
    )


class ProbeSettings(BaseModel):
    """Probe timing shared by the liveness and readiness probes.

    Attributes:
        initial_delay: Seconds before the first probe
        timeout: Seconds before a probe attempt times out
        period: Seconds between probes
        failure_threshold: Consecutive failures before the instance is unhealthy
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    initial_delay: int = Field(default=600, ge=0, description="Initial delay (s)")
    timeout: int = Field(default=10, ge=1, description="Probe timeout (s)")
    period: int = Field(default=10, ge=1, description="Probe period (s)")
    failure_threshold: int = Field(
        default=30, ge=1, description="Consecutive failures tolerated"
    )


class EngineSettings(BaseModel):
    """Inference-engine tuning passed to the container as environment variables."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    gpu_memory_utilization: float = Field(
        default=0.9, gt=0.0, le=1.0, description="Fraction of GPU memory to use"
    )
    tensor_parallel_size: int = Field(
        default=1, ge=1, description="Tensor-parallel degree"
    )
    attention_backend: str = Field(
        default="FLASH_ATTN", description="Attention backend"
    )
    swap_space: int = Field(default=4, ge=0, description="CPU swap space (GiB)")
    served_model_name: str | None = Field(
        default=None, description="Model name exposed by the server"
    )
    tokenizer_mode: str | None = Field(default=None, description="Tokenizer mode")
    trust_remote_code: str | None = Field(
        default=None, description="Trust remote code flag"
    )
    log_level: str | None = Field(default=None, description="Engine log level")
    worker_use_ray: str | None = Field(default=None, description="Use Ray workers")
    engine_use_ray: str | None = Field(default=None, description="Use Ray engine")
    model_revision: str | None = Field(default=None, description="Model revision")
    model_cache_dir: str | None = Field(default=None, description="Model cache dir")
    custom_variables: dict[str, str] = Field(
        default_factory=dict, description="Passthrough environment variables"
    )


class DeploymentSettings(BaseModel):
    """Immutable configuration record for one environment/endpoint/deployment.

    Attributes:
        subscription_id: Azure subscription ID
        resource_group: Resource group containing the workspace
        workspace: Azure ML workspace name
        environment_name: Environment name, or a public ``azureml://`` reference
        environment_version: Environment version
        environment_description: Environment description
        endpoint_name: Online endpoint name
        deployment_name: Online deployment name
        model_id: Model reference embedded in the deployment
        model_name: Human-readable model name used in descriptions and tags
        instance_type: VM SKU for the deployment
        instance_count: Number of instances
        scratch_dir: Directory receiving the rendered manifests
        build_dir: Directory holding the Dockerfile build context
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    subscription_id: str = Field(..., min_length=1)
    resource_group: str = Field(..., min_length=1)
    workspace: str = Field(..., min_length=1)
    environment_name: str = Field(..., min_length=1)
    environment_version: str = Field(default="1", min_length=1)
    environment_description: str = Field(
        default="vLLM inference environment for Azure ML online endpoints"
    )
    endpoint_name: str = Field(..., min_length=1)
    deployment_name: str = Field(..., min_length=1)
    model_id: str = Field(..., min_length=1)
    model_name: str = Field(..., min_length=1)
    instance_type: str = Field(..., min_length=1)
    instance_count: int = Field(..., ge=1)
    scratch_dir: Path
    build_dir: Path
    request: RequestSettings = Field(default_factory=RequestSettings)
    probes: ProbeSettings = Field(default_factory=ProbeSettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)

    @field_validator("endpoint_name")
    @classmethod
    def validate_endpoint_name(cls, v: str) -> str:
        """Validate endpoint name length (Azure limit is 3-32 characters)."""
        if not 3 <= len(v) <= 32:
            raise ValueError(
                f"Invalid endpoint name: {v}. Must be 3-32 characters long."
            )
        return v

    @property
    def uses_public_environment(self) -> bool:
        """True when the environment is a pre-built public registry reference."""
        return self.environment_name.startswith(PUBLIC_ENVIRONMENT_PREFIX)

    @property
    def environment_label(self) -> str:
        """Environment identity as shown to the operator.

        name:version for workspace environments; public registry references
        already carry their version and are shown unchanged.
        """
        if self.uses_public_environment:
            return self.environment_name
        return f"{self.environment_name}:{self.environment_version}"

    @property
    def environment_reference(self) -> str:
        """Environment reference as written into the deployment manifest."""
        if self.uses_public_environment:
            return self.environment_name
        return f"azureml:{self.environment_name}:{self.environment_version}"
