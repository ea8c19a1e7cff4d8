"""
Test suite for RetryPolicy.

System role: Verification of retry, backoff and terminal error handling
"""

from unittest.mock import AsyncMock

import pytest

from study_engine.configs.generation import GenerationSettings
from study_engine.core.exceptions import (
    ConfigurationError,
    ProviderError,
    RateLimitError,
    ResponseParseError,
)
from study_engine.core.generation import RetryPolicy, is_terminal_error


@pytest.fixture
def sleeps() -> list[float]:
    """Collected backoff delays."""
    return []


@pytest.fixture
def policy(sleeps: list[float]) -> RetryPolicy:
    """Provide policy with recorded, non-blocking sleeps."""

    async def fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    return RetryPolicy(max_retries=2, base_delay=1.0, max_delay=8.0, sleep=fake_sleep)


class TestIsTerminalError:
    """Test suite for is_terminal_error."""

    def test_configuration_errors_are_terminal(self) -> None:
        """Test configuration and credential errors abort retries."""
        assert is_terminal_error(ConfigurationError("missing"))
        assert is_terminal_error(ProviderError("Invalid API key provided"))
        assert is_terminal_error(RuntimeError("provider not configured"))

    def test_transient_errors_are_retryable(self) -> None:
        """Test rate limits and generic failures are retried."""
        assert not is_terminal_error(RateLimitError("429"))
        assert not is_terminal_error(ValueError("bad json"))

    def test_details_do_not_make_an_error_terminal(self) -> None:
        """Test only the message is matched, never model output kept in details."""
        # Arrange
        preview = '[{"question": "Where should an API key be stored?"}]'
        error = ProviderError("Upstream returned 500", details={"preview": preview})

        # Act & Assert
        assert "API key" in str(error)
        assert not is_terminal_error(error)

    def test_parse_errors_are_always_retryable(self) -> None:
        """Test malformed responses are retried whatever their text mentions."""
        assert not is_terminal_error(ResponseParseError("API key not configured in reply"))


class TestRetryPolicy:
    """Test suite for RetryPolicy.call."""

    async def test_succeeds_after_transient_failures(self, policy: RetryPolicy, sleeps: list[float]) -> None:
        """Test two failures then success uses exponential backoff."""
        # Arrange
        fn = AsyncMock(side_effect=[RateLimitError("slow down"), ProviderError("503"), "ok"])

        # Act
        result = await policy.call(fn, "prompt")

        # Assert
        assert result == "ok"
        assert fn.await_count == 3
        assert sleeps == [1.0, 2.0]
        fn.assert_awaited_with("prompt")

    async def test_reraises_last_error_when_exhausted(self, policy: RetryPolicy) -> None:
        """Test the final error propagates after max_retries + 1 attempts."""
        # Arrange
        fn = AsyncMock(side_effect=[ProviderError("one"), ProviderError("two"), ProviderError("three")])

        # Act & Assert
        with pytest.raises(ProviderError, match="three"):
            await policy.call(fn)
        assert fn.await_count == 3

    async def test_terminal_error_is_not_retried(self, policy: RetryPolicy, sleeps: list[float]) -> None:
        """Test configuration errors propagate after a single attempt."""
        # Arrange
        fn = AsyncMock(side_effect=ConfigurationError("Gemini API key not configured"))

        # Act & Assert
        with pytest.raises(ConfigurationError):
            await policy.call(fn)
        assert fn.await_count == 1
        assert sleeps == []

    async def test_zero_retries_means_single_attempt(self) -> None:
        """Test max_retries=0 calls once."""
        # Arrange
        policy = RetryPolicy(max_retries=0)
        fn = AsyncMock(side_effect=ProviderError("fail"))

        # Act & Assert
        with pytest.raises(ProviderError):
            await policy.call(fn)
        assert fn.await_count == 1

    def test_backoff_schedule_is_capped(self) -> None:
        """Test delays double and stop at max_delay."""
        assert RetryPolicy(max_retries=5, base_delay=1.0, max_delay=8.0).backoff_delays() == [1, 2, 4, 8, 8]

    def test_from_settings(self) -> None:
        """Test policy values come from generation settings."""
        # Arrange
        settings = GenerationSettings(max_retries=4, backoff_base_seconds=0.5, task_deadline_seconds=30)

        # Act
        policy = RetryPolicy.from_settings(settings)

        # Assert
        assert (policy.max_retries, policy.base_delay, policy.deadline) == (4, 0.5, 30)
