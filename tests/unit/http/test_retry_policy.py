"""Tests for RetryPolicy and the HTTP error translation helpers."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from solfolio.exceptions import (
    ExternalServiceError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
)
from solfolio.infra.http.errors import check_response, upstream_errors
from solfolio.infra.http.retry import RetryPolicy

FAST = RetryPolicy(max_attempts=3, multiplier=0, min_wait=0, max_wait=0)


class TestRetryPolicy:
    async def test_retries_rate_limit_then_succeeds(self):
        fn = AsyncMock(side_effect=[RateLimitError("429"), RateLimitError("429"), "ok"])
        assert await FAST.call(fn, "arg") == "ok"
        assert fn.await_count == 3
        fn.assert_awaited_with("arg")

    async def test_gives_up_after_max_attempts(self):
        fn = AsyncMock(side_effect=RateLimitError("429"))
        with pytest.raises(RateLimitError):
            await FAST.call(fn)
        assert fn.await_count == 3

    async def test_other_errors_are_not_retried(self):
        fn = AsyncMock(side_effect=ExternalServiceError("boom"))
        with pytest.raises(ExternalServiceError):
            await FAST.call(fn)
        assert fn.await_count == 1

    async def test_single_attempt_policy(self):
        fn = AsyncMock(side_effect=RateLimitError("429"))
        with pytest.raises(RateLimitError):
            await RetryPolicy(max_attempts=1, min_wait=0, max_wait=0).call(fn)
        assert fn.await_count == 1


def _response(status: int) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    return resp


class TestCheckResponse:
    def test_ok(self):
        check_response(_response(200), "svc")

    def test_429_is_rate_limit(self):
        with pytest.raises(RateLimitError):
            check_response(_response(429), "svc")

    def test_server_error(self):
        with pytest.raises(ExternalServiceError) as exc_info:
            check_response(_response(503), "svc")
        assert not isinstance(exc_info.value, RateLimitError)


class TestUpstreamErrors:
    async def test_timeout(self):
        with pytest.raises(RequestTimeoutError):
            async with upstream_errors("svc"):
                raise httpx.ReadTimeout("slow")

    async def test_transport_error(self):
        with pytest.raises(NetworkError) as exc_info:
            async with upstream_errors("svc"):
                raise httpx.ConnectError("refused")
        assert not isinstance(exc_info.value, RequestTimeoutError)

    async def test_invalid_url(self):
        with pytest.raises(NetworkError):
            async with upstream_errors("svc"):
                raise httpx.InvalidURL("Invalid non-printable ASCII character in URL")
