"""Configuration key names and report layout for amldeploy."""

DEFAULT_CONFIG_FILE = "config.conf"

# Keys the validator requires; order matches the report
REQUIRED_KEYS: tuple[str, ...] = (
    "AZ_SUBSCRIPTION_ID",
    "AZ_RESOURCE_GROUP",
    "AZ_ML_WORKSPACE",
    "AZ_ENVIRONMENT_NAME",
    "AZ_ENDPOINT_NAME",
    "AZ_DEPLOYMENT_NAME",
    "AZ_MODEL_ID",
    "AZ_INSTANCE_TYPE",
    "AZ_INSTANCE_COUNT",
    "TMP_DIR",
    "AML_ENV_DIR",
)

# Accepted alternative spellings, alias -> canonical key
KEY_ALIASES: dict[str, str] = {
    "MODEL_ID": "AZ_MODEL_ID",
}

CUSTOM_ENV_PREFIX = "CUSTOM_ENV_VAR_"

# Settings fields, keyed by config key
TOP_LEVEL_KEYS: dict[str, str] = {
    "AZ_SUBSCRIPTION_ID": "subscription_id",
    "AZ_RESOURCE_GROUP": "resource_group",
    "AZ_ML_WORKSPACE": "workspace",
    "AZ_ENVIRONMENT_NAME": "environment_name",
    "AZ_ENVIRONMENT_VERSION": "environment_version",
    "AZ_ENVIRONMENT_DESCRIPTION": "environment_description",
    "AZ_ENDPOINT_NAME": "endpoint_name",
    "AZ_DEPLOYMENT_NAME": "deployment_name",
    "AZ_MODEL_ID": "model_id",
    "AZ_MODEL_NAME": "model_name",
    "AZ_INSTANCE_TYPE": "instance_type",
    "AZ_INSTANCE_COUNT": "instance_count",
    "TMP_DIR": "scratch_dir",
    "AML_ENV_DIR": "build_dir",
}

REQUEST_KEYS: dict[str, str] = {
    "REQUEST_TIMEOUT_MS": "request_timeout_ms",
    "MAX_CONCURRENT_REQUESTS": "max_concurrent_requests_per_instance",
    "MAX_QUEUE_WAIT_MS": "max_queue_wait_ms",
}

PROBE_KEYS: dict[str, str] = {
    "INITIAL_DELAY": "initial_delay",
    "PROBE_TIMEOUT": "timeout",
    "PROBE_PERIOD": "period",
    "FAILURE_THRESHOLD": "failure_threshold",
}

ENGINE_KEYS: dict[str, str] = {
    "GPU_MEMORY_UTILIZATION": "gpu_memory_utilization",
    "VLLM_TENSOR_PARALLEL_SIZE": "tensor_parallel_size",
    "VLLM_ATTENTION_BACKEND": "attention_backend",
    "VLLM_SWAP_SPACE": "swap_space",
    "VLLM_SERVED_MODEL_NAME": "served_model_name",
    "VLLM_TOKENIZER_MODE": "tokenizer_mode",
    "VLLM_TRUST_REMOTE_CODE": "trust_remote_code",
    "VLLM_LOG_LEVEL": "log_level",
    "VLLM_WORKER_USE_RAY": "worker_use_ray",
    "VLLM_ENGINE_USE_RAY": "engine_use_ray",
    "MODEL_REVISION": "model_revision",
    "MODEL_CACHE_DIR": "model_cache_dir",
}

# Sections of the validation report: (title, icon, keys)
REPORT_SECTIONS: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    (
        "Azure Configuration",
        "📋",
        (
            "AZ_SUBSCRIPTION_ID",
            "AZ_RESOURCE_GROUP",
            "AZ_ML_WORKSPACE",
            "AZ_ENVIRONMENT_NAME",
            "AZ_ENVIRONMENT_VERSION",
            "AZ_ENDPOINT_NAME",
            "AZ_DEPLOYMENT_NAME",
        ),
    ),
    (
        "Model Configuration",
        "🤖",
        (
            "AZ_MODEL_ID",
            "AZ_MODEL_NAME",
            "MODEL_REVISION",
            "MODEL_CACHE_DIR",
            "VLLM_SERVED_MODEL_NAME",
        ),
    ),
    (
        "Engine Settings",
        "⚙️",
        (
            "GPU_MEMORY_UTILIZATION",
            "VLLM_TENSOR_PARALLEL_SIZE",
            "VLLM_ATTENTION_BACKEND",
            "VLLM_SWAP_SPACE",
        ),
    ),
    (
        "Advanced Settings",
        "🔧",
        (
            "VLLM_TOKENIZER_MODE",
            "VLLM_TRUST_REMOTE_CODE",
            "VLLM_LOG_LEVEL",
            "VLLM_WORKER_USE_RAY",
            "VLLM_ENGINE_USE_RAY",
        ),
    ),
    (
        "Compute Resources",
        "💻",
        (
            "AZ_INSTANCE_TYPE",
            "AZ_INSTANCE_COUNT",
            "REQUEST_TIMEOUT_MS",
            "MAX_CONCURRENT_REQUESTS",
            "MAX_QUEUE_WAIT_MS",
        ),
    ),
    (
        "Health Probes",
        "🩺",
        ("INITIAL_DELAY", "PROBE_TIMEOUT", "PROBE_PERIOD", "FAILURE_THRESHOLD"),
    ),
    ("File Paths", "📁", ("TMP_DIR", "AML_ENV_DIR")),
)

# Shown in the Custom Variables section even when unset
DEFAULT_CUSTOM_KEYS: tuple[str, ...] = ("CUSTOM_ENV_VAR_1", "CUSTOM_ENV_VAR_2")
