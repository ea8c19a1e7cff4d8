"""
Retry policy for provider calls.

Wraps tenacity with the engine's retry budget: a retry cap, exponential
backoff, a total deadline per task and a predicate that never retries
terminal (credential/configuration) errors.

Dependencies: tenacity
System role: Single retry policy shared by generation tasks
"""

import logging
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
)

from study_engine.configs.generation import GenerationSettings
from study_engine.core.exceptions import (
    ConfigurationError,
    ResponseParseError,
    StudyEngineException,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

TERMINAL_MARKERS = ("API key", "not configured")


def is_terminal_error(error: BaseException) -> bool:
    """Credential and configuration failures abort without retry.

    Engine exceptions are judged on their message only; details may carry
    model output. Malformed responses are always retryable.
    """
    if isinstance(error, ConfigurationError):
        return True
    if isinstance(error, ResponseParseError):
        return False
    message = error.message if isinstance(error, StudyEngineException) else str(error)
    return any(marker in message for marker in TERMINAL_MARKERS)


class RetryPolicy:
    """Retry cap, backoff schedule and retryable-error predicate."""

    def __init__(
        self,
        max_retries: int = 2,
        base_delay: float = 1.0,
        max_delay: float = 8.0,
        deadline: float | None = 300.0,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        """
        Initialize retry policy.

        Args:
            max_retries: Retries after the first attempt
            base_delay: First backoff delay in seconds, doubled per retry
            max_delay: Upper bound for a single delay
            deadline: Seconds after which no further attempt starts (None: unbounded)
            sleep: Async sleep function (defaults to asyncio.sleep)
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.deadline = deadline
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: GenerationSettings) -> "RetryPolicy":
        return cls(
            max_retries=settings.max_retries,
            base_delay=settings.backoff_base_seconds,
            max_delay=settings.backoff_max_seconds,
            deadline=settings.task_deadline_seconds,
        )

    @staticmethod
    def is_retryable(error: BaseException) -> bool:
        return not is_terminal_error(error)

    def backoff_delays(self) -> list[float]:
        """Delays before each retry, in order."""
        return [min(self.max_delay, self.base_delay * 2**i) for i in range(self.max_retries)]

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            f"{__name__}:retry - Attempt {retry_state.attempt_number}/{self.max_retries + 1} "
            f"failed ({error}), retrying in {delay:.1f}s"
        )

    def retrying(self) -> AsyncRetrying:
        """Build a fresh tenacity controller for one task."""
        stop = stop_after_attempt(self.max_retries + 1)
        if self.deadline is not None:
            stop = stop | stop_after_delay(self.deadline)
        kwargs: dict[str, Any] = {
            "stop": stop,
            "wait": wait_exponential(multiplier=self.base_delay, min=self.base_delay, max=self.max_delay),
            "retry": retry_if_exception(self.is_retryable),
            "before_sleep": self._log_retry,
            "reraise": True,
        }
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return AsyncRetrying(**kwargs)

    async def call(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """
        Await ``fn`` under the policy.

        Args:
            fn: Coroutine function to call
            *args: Positional arguments for fn
            **kwargs: Keyword arguments for fn

        Returns:
            The first successful result

        Raises:
            Exception: The last error once retries are exhausted or on a terminal error
        """
        return await self.retrying()(fn, *args, **kwargs)
