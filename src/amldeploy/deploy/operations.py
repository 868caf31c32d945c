"""Fire-and-poll handling for long-running provider operations.

Deployment create/update calls are issued with ``--no-wait``; an
AsyncOperation then polls the provisioning state until it reaches a terminal
state or the caller's PollPolicy ceiling is hit.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from amldeploy.lib.errors import AsyncOperationFailed, AsyncOperationTimedOut
from amldeploy.lib.logging_config import get_logger
from amldeploy.models.deployment import PollPolicy, ProvisioningState

logger = get_logger(__name__)

PollReporter = Callable[[int, int, ProvisioningState], None]


class AsyncOperation:
    """Handle for one asynchronous provider operation.

    Attributes:
        name: Operation label used in messages (e.g., "deployment create")
        attempts: Number of polls made by the last wait()
        last_state: Most recent state observed
    """

    def __init__(
        self,
        name: str,
        *,
        starter: Callable[[], None],
        probe: Callable[[], ProvisioningState],
        failure_hint: str | None = None,
        timeout_hint: str | None = None,
        reporter: PollReporter | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the operation handle.

        Args:
            name: Operation label used in messages
            starter: Issues the non-blocking provider call
            probe: Reads the current provisioning state
            failure_hint: Follow-up command attached to provider failures
            timeout_hint: Follow-up command attached to timeouts
            reporter: Called after every poll with (attempt, max_attempts, state)
            sleep: Sleep function between polls
        """
        self.name = name
        self._starter = starter
        self._probe = probe
        self._failure_hint = failure_hint
        self._timeout_hint = timeout_hint
        self._reporter = reporter
        self._sleep = sleep
        self.attempts = 0
        self.last_state = ProvisioningState.UNKNOWN

    def start(self) -> None:
        """Issue the non-blocking provider call.

        Raises:
            StepFailed: If the provider does not accept the request
        """
        logger.debug(f"Starting {self.name}")
        self._starter()

    def poll(self) -> ProvisioningState:
        """Read the current provisioning state once."""
        self.last_state = self._probe()
        return self.last_state

    def wait(self, policy: PollPolicy) -> ProvisioningState:
        """Poll until a terminal state or the attempt ceiling.

        There is no sleep after a terminal state or after the final attempt.

        Args:
            policy: Interval and attempt ceiling

        Returns:
            ProvisioningState.SUCCEEDED

        Raises:
            AsyncOperationFailed: If the provider reports Failed or Canceled
            AsyncOperationTimedOut: If max_attempts polls pass without a terminal state
        """
        self.attempts = 0
        for attempt in range(1, policy.max_attempts + 1):
            state = self.poll()
            self.attempts = attempt
            if self._reporter is not None:
                self._reporter(attempt, policy.max_attempts, state)

            if state.is_terminal:
                if state.is_failure:
                    raise AsyncOperationFailed(
                        operation=self.name,
                        state=state.value,
                        message=f"{self.name} ended in state {state.value}",
                        hint=self._failure_hint,
                    )
                return state
            if attempt < policy.max_attempts:
                self._sleep(policy.interval_seconds)

        raise AsyncOperationTimedOut(
            operation=self.name,
            attempts=self.attempts,
            last_state=self.last_state.value,
            message=(
                f"Timed out waiting for {self.name} after {self.attempts} status "
                f"checks (last state: {self.last_state.value})"
            ),
            hint=self._timeout_hint,
        )
