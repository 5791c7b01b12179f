"""Tests for retry utilities."""

import pytest

from studyguide_core.utils.retry import RateLimitError, describe_exception, with_retry


def flaky(exc: Exception, failures: int):
    """Build an async callable that fails ``failures`` times, then succeeds."""
    calls = {"count": 0}

    async def call() -> str:
        calls["count"] += 1
        if calls["count"] <= failures:
            raise exc
        return "stream"

    return call, calls


class TestWithRetry:
    """Tests for with_retry."""

    @pytest.mark.asyncio
    async def test_success_on_first_try(self) -> None:
        """Successful calls are not retried."""
        call, calls = flaky(ConnectionError("unused"), failures=0)

        result = await with_retry(call, operation_name="open_stream")

        assert result == "stream"
        assert calls["count"] == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc",
        [
            ConnectionError("Network failed"),
            TimeoutError("Timed out"),
            RateLimitError(retry_after=1.0),
        ],
    )
    async def test_transient_errors_are_retried(self, exc: Exception) -> None:
        """Connection, timeout and rate-limit failures trigger a retry."""
        call, calls = flaky(exc, failures=1)

        result = await with_retry(call, max_attempts=3, min_wait=0, max_wait=0)

        assert result == "stream"
        assert calls["count"] == 2

    @pytest.mark.asyncio
    async def test_attempts_exhausted(self) -> None:
        """The last transient error is re-raised."""
        call, calls = flaky(ConnectionError("Always fails"), failures=10)

        with pytest.raises(ConnectionError):
            await with_retry(call, max_attempts=3, min_wait=0, max_wait=0)

        assert calls["count"] == 3

    @pytest.mark.asyncio
    async def test_non_retryable_error_not_retried(self) -> None:
        """Errors outside the transient set fail immediately."""
        call, calls = flaky(ValueError("Invalid request"), failures=10)

        with pytest.raises(ValueError):
            await with_retry(call, max_attempts=3, min_wait=0, max_wait=0)

        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_arguments_are_forwarded(self) -> None:
        """Positional and keyword arguments reach the wrapped call."""

        async def join(a: str, b: str = "") -> str:
            return a + b

        assert await with_retry(join, "x", b="y") == "xy"


class TestDescribeException:
    """Tests for describe_exception."""

    def test_plain_message(self) -> None:
        """The message is used as-is."""
        assert describe_exception(ValueError("bad input")) == "bad input"

    def test_empty_message_uses_type(self) -> None:
        """Exceptions without a message are named by type."""
        assert describe_exception(TimeoutError()) == "TimeoutError"

    def test_cause_is_included(self) -> None:
        """Chained causes are appended."""
        try:
            try:
                raise OSError("socket closed")
            except OSError as inner:
                raise ConnectionError("stream failed") from inner
        except ConnectionError as e:
            described = describe_exception(e)

        assert described == "stream failed (caused by: socket closed)"

    def test_status_code_prefix(self) -> None:
        """HTTP status codes are shown first."""
        exc = RuntimeError("Too many requests")
        exc.status_code = 429  # type: ignore[attr-defined]

        assert describe_exception(exc) == "HTTP 429: Too many requests"
