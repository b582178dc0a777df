"""Content-addressed URI resolution with ordered gateway fallback.

IPFS content is tried against each configured mirror in turn until one answers;
Arweave goes through its single gateway; plain HTTP(S) URLs are fetched as-is.
"""

import json
import logging

from solfolio.exceptions import DecodeError, FetchError, SolfolioError, UnsupportedURIError
from solfolio.infra.http.errors import check_response, upstream_errors
from solfolio.infra.http.rate_limited_client import RateLimitedClient

logger = logging.getLogger(__name__)

IPFS_SCHEME = "ipfs://"
ARWEAVE_SCHEME = "ar://"


class GatewayFallbackResolver:
    def __init__(
        self,
        http_client: RateLimitedClient,
        ipfs_gateways: list[str],
        arweave_gateway: str = "https://arweave.net/",
        timeout: float = 5.0,
    ) -> None:
        self._http = http_client
        self._ipfs_gateways = [g if g.endswith("/") else g + "/" for g in ipfs_gateways]
        self._arweave_gateway = arweave_gateway if arweave_gateway.endswith("/") else arweave_gateway + "/"
        self._timeout = timeout

    def candidate_urls(self, uri: str) -> list[str]:
        """Ordered HTTP URLs to try for ``uri``. Raises UnsupportedURIError."""
        uri = uri.strip()
        lowered = uri.lower()

        if lowered.startswith(IPFS_SCHEME):
            path = uri[len(IPFS_SCHEME):]
            if path.lower().startswith("ipfs/"):
                path = path[len("ipfs/"):]
            if not path:
                raise UnsupportedURIError(f"empty IPFS path in {uri!r}")
            return [gateway + path for gateway in self._ipfs_gateways]

        if lowered.startswith(ARWEAVE_SCHEME):
            path = uri[len(ARWEAVE_SCHEME):]
            if not path:
                raise UnsupportedURIError(f"empty Arweave path in {uri!r}")
            return [self._arweave_gateway + path]

        if lowered.startswith("http://") or lowered.startswith("https://"):
            return [uri]

        raise UnsupportedURIError(f"unsupported URI scheme: {uri!r}")

    def to_http_url(self, uri: str) -> str | None:
        """First mirror URL for display purposes, None if unsupported."""
        try:
            return self.candidate_urls(uri)[0]
        except UnsupportedURIError:
            return None

    async def fetch(self, uri: str) -> bytes:
        """Fetch content, advancing through mirrors on failure.

        Stops at the first mirror that answers with a 2xx; raises FetchError
        once every candidate has failed.
        """
        urls = self.candidate_urls(uri)
        last_error: Exception | None = None

        for url in urls:
            try:
                async with upstream_errors(f"gateway {url}"):
                    response = await self._http.get(url, timeout=self._timeout)
                check_response(response, f"gateway {url}")
                return response.content
            except SolfolioError as exc:
                logger.info("Gateway fetch failed for %s: %s", url, exc)
                last_error = exc

        raise FetchError(f"all {len(urls)} gateway(s) failed for {uri}: {last_error}")

    async def fetch_json(self, uri: str) -> dict:
        content = await self.fetch(uri)
        try:
            data = json.loads(content)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DecodeError(f"invalid JSON at {uri}: {exc}") from exc
        if not isinstance(data, dict):
            raise DecodeError(f"expected a JSON object at {uri}")
        return data
