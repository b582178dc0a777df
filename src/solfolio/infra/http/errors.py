"""Translate httpx failures and HTTP status codes into the solfolio taxonomy."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

from solfolio.exceptions import ExternalServiceError, NetworkError, RateLimitError, RequestTimeoutError


def check_response(response: httpx.Response, service: str) -> None:
    """Raise for throttling or any non-2xx answer."""
    if response.status_code == 429:
        raise RateLimitError(f"{service} rate limited (429)")
    if response.status_code < 200 or response.status_code >= 300:
        raise ExternalServiceError(f"{service} returned HTTP {response.status_code}")


@asynccontextmanager
async def upstream_errors(service: str) -> AsyncIterator[None]:
    try:
        yield
    except httpx.TimeoutException as exc:
        raise RequestTimeoutError(f"{service} timed out: {exc}") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise NetworkError(f"{service} unreachable: {exc}") from exc
