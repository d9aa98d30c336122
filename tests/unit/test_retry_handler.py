"""Unit tests for the retry handler."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from stackr_ai.exceptions import ProviderError, QuotaExceededError, RateLimitError
from stackr_ai.orchestrator import RetryHandler, is_quota_error, is_retryable_error


class TestErrorClassification:
    """Status and code based classification."""

    @pytest.mark.parametrize("status_code", [429, 500, 502, 503, 599])
    def test_retryable_statuses(self, status_code):
        assert is_retryable_error(ProviderError("boom", status_code=status_code))

    @pytest.mark.parametrize("status_code", [None, 400, 401, 404, 422, 600])
    def test_non_retryable_statuses(self, status_code):
        assert not is_retryable_error(ProviderError("boom", status_code=status_code))

    def test_plain_exception_is_not_retryable(self):
        assert not is_retryable_error(ValueError("bad payload"))
        assert not is_quota_error(ValueError("bad payload"))

    def test_quota_by_status_or_code(self):
        assert is_quota_error(RateLimitError("slow down"))
        assert is_quota_error(ProviderError("out of credit", error_code="insufficient_quota"))
        assert is_quota_error(QuotaExceededError())
        assert not is_quota_error(ProviderError("down", status_code=503))

    def test_reads_status_from_foreign_errors(self):
        class SDKError(Exception):
            status = 502

        http_error = Exception("http")
        http_error.response = MagicMock(status_code=429)

        assert is_retryable_error(SDKError())
        assert is_retryable_error(http_error)
        assert is_quota_error(http_error)

    def test_reads_code_attribute(self):
        class SDKError(Exception):
            code = "insufficient_quota"

        assert is_quota_error(SDKError())
        assert not is_retryable_error(SDKError())


class TestRetryHandler:
    """Backoff and attempt accounting."""

    @pytest.mark.asyncio
    async def test_success_returns_immediately(self, sleeper):
        func = AsyncMock(return_value={"advice": "ok"})
        handler = RetryHandler(sleep=sleeper)

        result = await handler.execute(func, max_retries=3, initial_delay=1.0)

        assert result == {"advice": "ok"}
        func.assert_awaited_once()
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_exponential_backoff_until_exhausted(self, sleeper):
        error = ProviderError("Service unavailable", status_code=503)
        func = AsyncMock(side_effect=error)
        handler = RetryHandler(sleep=sleeper)

        with pytest.raises(ProviderError) as exc_info:
            await handler.execute(func, max_retries=3, initial_delay=0.5)

        assert exc_info.value is error
        assert func.await_count == 3
        assert sleeper.delays == pytest.approx([0.5, 1.0])

    @pytest.mark.asyncio
    async def test_delay_doubles_each_retry(self, sleeper):
        func = AsyncMock(side_effect=RateLimitError("slow down"))
        handler = RetryHandler(sleep=sleeper)

        with pytest.raises(RateLimitError):
            await handler.execute(func, max_retries=5, initial_delay=0.001)

        assert func.await_count == 5
        assert sleeper.delays == pytest.approx([0.001, 0.002, 0.004, 0.008])

    @pytest.mark.asyncio
    async def test_non_retryable_error_is_not_retried(self, sleeper):
        error = ProviderError("Bad request", status_code=400)
        func = AsyncMock(side_effect=error)
        handler = RetryHandler(sleep=sleeper)

        with pytest.raises(ProviderError) as exc_info:
            await handler.execute(func, max_retries=3)

        assert exc_info.value is error
        func.assert_awaited_once()
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_quota_code_without_status_is_not_retried(self, sleeper):
        func = AsyncMock(side_effect=ProviderError("no credit", error_code="insufficient_quota"))
        handler = RetryHandler(sleep=sleeper)

        with pytest.raises(ProviderError):
            await handler.execute(func, max_retries=3)

        func.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(self, sleeper):
        func = AsyncMock(side_effect=[ProviderError("busy", status_code=502), {"advice": "ok"}])
        handler = RetryHandler(sleep=sleeper)

        result = await handler.execute(func, max_retries=3, initial_delay=2.0)

        assert result == {"advice": "ok"}
        assert func.await_count == 2
        assert sleeper.delays == [2.0]

    @pytest.mark.asyncio
    async def test_constructor_defaults_apply(self, sleeper):
        func = AsyncMock(side_effect=ProviderError("busy", status_code=500))
        handler = RetryHandler(max_retries=2, initial_delay=0.25, sleep=sleeper)

        with pytest.raises(ProviderError):
            await handler.execute(func)

        assert func.await_count == 2
        assert sleeper.delays == [0.25]

    @pytest.mark.asyncio
    async def test_single_attempt_never_sleeps(self, sleeper):
        func = AsyncMock(side_effect=ProviderError("busy", status_code=500))
        handler = RetryHandler(sleep=sleeper)

        with pytest.raises(ProviderError):
            await handler.execute(func, max_retries=1)

        func.assert_awaited_once()
        assert sleeper.delays == []
