"""Custom exception hierarchy for amldeploy configuration and operations."""


class AmlDeployError(Exception):
    """Base exception for all amldeploy errors.

    All amldeploy-specific exceptions inherit from this class, enabling
    centralized exception handling in the CLI layer.

    Attributes:
        message: Human-readable error message
        hint: Optional follow-up command or action for the operator
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        """Initialize AmlDeployError with a message and optional hint.

        Args:
            message: Descriptive error message
            hint: Follow-up command or action the operator should take
        """
        self.message = message
        self.hint = hint
        super().__init__(message)


class ConfigError(AmlDeployError):
    """Exception raised for configuration errors.

    Attributes:
        field: The configuration key that caused the error
        message: Human-readable error message describing the issue
    """

    def __init__(self, field: str, message: str, hint: str | None = None) -> None:
        """Initialize ConfigError with field and message.

        Args:
            field: Configuration key where the error occurred
            message: Descriptive error message
            hint: Optional follow-up action
        """
        self.field = field
        super().__init__(message, hint=hint)

    def __str__(self) -> str:
        return f"Configuration error in '{self.field}': {self.message}"


class ConfigNotFound(ConfigError):
    """Exception raised when the configuration file does not exist."""

    def __init__(self, path: str) -> None:
        """Create an error for a missing configuration file.

        Args:
            path: Path that was looked up
        """
        self.path = path
        super().__init__(
            field="config_file",
            message=f"Config file '{path}' not found.",
            hint="Create a config file or pass the path to an existing one.",
        )


class MissingRequiredConfig(ConfigError):
    """Exception raised when required configuration keys are unset.

    Attributes:
        missing: Every required key that is unset or empty
    """

    def __init__(self, missing: list[str]) -> None:
        """Create an error listing all missing required keys."""
        self.missing = list(missing)
        super().__init__(
            field=", ".join(self.missing),
            message=(
                f"{len(self.missing)} required configuration key(s) missing: "
                f"{', '.join(self.missing)}"
            ),
            hint="Run 'amldeploy validate <config_file>' for a full report.",
        )


class CliNotInstalled(AmlDeployError):
    """Exception raised when the Azure CLI binary cannot be located."""

    def __init__(self, binary: str = "az") -> None:
        """Create an error for a missing CLI binary."""
        self.binary = binary
        super().__init__(
            f"Azure CLI ('{binary}') is not installed. Please install it first.",
            hint="https://learn.microsoft.com/cli/azure/install-azure-cli",
        )


class NotAuthenticated(AmlDeployError):
    """Exception raised when the account-identity probe fails."""

    def __init__(self) -> None:
        """Create an error for an unauthenticated CLI session."""
        super().__init__(
            "Not logged into Azure.",
            hint="az login --tenant <directory-id, aka:tenant-id>",
        )


class EnvironmentMissing(AmlDeployError):
    """Exception raised when a deployment targets an environment that does not exist.

    Attributes:
        reference: The environment reference (name:version) that was not found
    """

    def __init__(self, reference: str) -> None:
        """Create an error for a missing environment."""
        self.reference = reference
        super().__init__(
            f"Environment {reference} not found.",
            hint="Run 'amldeploy environment <config_file>' first.",
        )


class ResourceAlreadyExists(AmlDeployError):
    """Informational signal that a resource is already present.

    Never fatal: callers branch into confirm-or-skip logic when they see it.
    """

    def __init__(self, kind: str, name: str) -> None:
        """Create a signal for an existing resource."""
        self.kind = kind
        self.name = name
        super().__init__(f"{kind.capitalize()} {name} already exists")


class OperatorCancelled(AmlDeployError):
    """Raised when the operator declines a confirmation.

    Treated as a clean cancellation (exit code 0), not as an error.
    """


class DeploymentError(AmlDeployError):
    """Exception raised when a provider operation fails.

    Attributes:
        operation: The operation that failed (e.g., create, delete, traffic)
        message: Human-readable error message
    """

    def __init__(self, operation: str, message: str, hint: str | None = None) -> None:
        """Initialize DeploymentError with operation context."""
        self.operation = operation
        super().__init__(message, hint=hint)

    def __str__(self) -> str:
        return f"Deployment error during '{self.operation}': {self.message}"


class StepFailed(DeploymentError):
    """Generic failure propagated from a non-zero exit of an external call."""


class ManifestError(DeploymentError):
    """Exception raised when a rendered manifest is not valid YAML."""

    def __init__(self, manifest: str, message: str) -> None:
        """Create an error for an invalid manifest."""
        self.manifest = manifest
        super().__init__(
            operation="render",
            message=f"Rendered {manifest} manifest is invalid: {message}",
            hint="Check the configuration values for unquoted YAML characters.",
        )


class AsyncOperationFailed(DeploymentError):
    """Raised when the provider reports a terminal failure state.

    Attributes:
        state: The terminal provisioning state reported (Failed or Canceled)
    """

    def __init__(
        self, operation: str, state: str, message: str, hint: str | None = None
    ) -> None:
        """Create an error for a provider-reported terminal failure."""
        self.state = state
        super().__init__(operation=operation, message=message, hint=hint)


class AsyncOperationTimedOut(DeploymentError):
    """Raised when the poll ceiling is reached without a terminal state.

    Attributes:
        attempts: Number of status polls made
        last_state: The last provisioning state observed
    """

    def __init__(
        self,
        operation: str,
        attempts: int,
        last_state: str,
        message: str,
        hint: str | None = None,
    ) -> None:
        """Create an error for a poll loop that exhausted its attempts."""
        self.attempts = attempts
        self.last_state = last_state
        super().__init__(operation=operation, message=message, hint=hint)
