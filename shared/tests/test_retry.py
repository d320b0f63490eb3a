"""
Unit tests for the shared retry loop.
"""

import pytest
from unittest.mock import AsyncMock

from shared.retry import RetryConfig, retry_async, _calculate_delay


class TransientError(Exception):
    pass


class PermanentError(Exception):
    pass


def is_transient(exc):
    return isinstance(exc, TransientError)


class TestRetryAsync:
    """Test cases for retry_async."""

    @pytest.fixture
    def sleep(self):
        return AsyncMock()

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, sleep):
        """No sleeping when the first attempt succeeds."""
        operation = AsyncMock(return_value="ok")

        result = await retry_async(operation, RetryConfig(), is_transient, sleep=sleep)

        assert result == "ok"
        operation.assert_awaited_once()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_exhausts_three_retries_with_doubling_delays(self, sleep):
        """Three retries at 1s, 2s, 4s, then the last error propagates."""
        operation = AsyncMock(side_effect=TransientError("boom"))

        with pytest.raises(TransientError):
            await retry_async(operation, RetryConfig(max_retries=3, base_delay=1.0), is_transient, sleep=sleep)

        assert operation.await_count == 4
        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self, sleep):
        """A later success is returned after retrying."""
        operation = AsyncMock(side_effect=[TransientError("1"), TransientError("2"), "done"])

        result = await retry_async(operation, RetryConfig(), is_transient, sleep=sleep)

        assert result == "done"
        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_non_retryable_propagates_immediately(self, sleep):
        """Errors the predicate rejects are never retried."""
        operation = AsyncMock(side_effect=PermanentError("nope"))

        with pytest.raises(PermanentError):
            await retry_async(operation, RetryConfig(), is_transient, sleep=sleep)

        operation.assert_awaited_once()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_zero_retry_budget(self, sleep):
        """With no retry budget the first failure surfaces."""
        operation = AsyncMock(side_effect=TransientError("boom"))

        with pytest.raises(TransientError):
            await retry_async(operation, RetryConfig(max_retries=0), is_transient, sleep=sleep)

        operation.assert_awaited_once()
        sleep.assert_not_awaited()


class TestCalculateDelay:
    """Test cases for backoff delay calculation."""

    def test_exponential(self):
        config = RetryConfig(base_delay=1.0)
        assert [_calculate_delay(n, config) for n in range(3)] == [1.0, 2.0, 4.0]

    def test_max_delay_cap(self):
        config = RetryConfig(base_delay=1.0, max_delay=3.0)
        assert _calculate_delay(5, config) == 3.0

    def test_exponential_base(self):
        config = RetryConfig(base_delay=0.5, exponential_base=3.0)
        assert _calculate_delay(2, config) == 4.5
