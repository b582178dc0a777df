"""Tests for GatewayFallbackResolver — mirror ordering and fallback."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from solfolio.exceptions import DecodeError, FetchError, UnsupportedURIError
from solfolio.infra.gateway.resolver import GatewayFallbackResolver

GATEWAYS = [
    "https://nftstorage.link/ipfs/",
    "https://gateway.pinata.cloud/ipfs/",
    "https://ipfs.io/ipfs/",
    "https://cloudflare-ipfs.com/ipfs/",
]
CID = "bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi/1.json"


def _mock_response(status: int = 200, content: bytes = b"{}"):
    resp = MagicMock()
    resp.status_code = status
    resp.content = content
    return resp


@pytest.fixture()
def mock_http():
    return AsyncMock()


@pytest.fixture()
def resolver(mock_http):
    return GatewayFallbackResolver(mock_http, GATEWAYS, timeout=5.0)


class TestCandidateUrls:
    def test_ipfs_maps_to_every_mirror_in_order(self, resolver):
        urls = resolver.candidate_urls(f"ipfs://{CID}")
        assert urls == [g + CID for g in GATEWAYS]

    def test_ipfs_with_redundant_prefix(self, resolver):
        assert resolver.candidate_urls(f"ipfs://ipfs/{CID}")[0] == GATEWAYS[0] + CID

    def test_arweave(self, resolver):
        assert resolver.candidate_urls("ar://abc123") == ["https://arweave.net/abc123"]

    def test_http_used_as_is(self, resolver):
        url = "https://example.com/ipfs/meta.json"
        assert resolver.candidate_urls(url) == [url]

    @pytest.mark.parametrize("uri", ["ftp://x/y", "data:application/json,{}", "", "ipfs://"])
    def test_unsupported(self, resolver, uri):
        with pytest.raises(UnsupportedURIError):
            resolver.candidate_urls(uri)

    def test_to_http_url(self, resolver):
        assert resolver.to_http_url(f"ipfs://{CID}") == GATEWAYS[0] + CID
        assert resolver.to_http_url("ftp://nope") is None


class TestFetch:
    async def test_first_mirror_succeeds(self, resolver, mock_http):
        mock_http.get.return_value = _mock_response(content=b"data")

        assert await resolver.fetch(f"ipfs://{CID}") == b"data"
        assert mock_http.get.await_count == 1

    @pytest.mark.parametrize("failures", [1, 2, 3])
    async def test_falls_back_in_order_and_stops(self, resolver, mock_http, failures):
        side_effects = [_mock_response(status=504) for _ in range(failures)]
        side_effects.append(_mock_response(content=b"found"))
        side_effects.extend(_mock_response(content=b"never") for _ in range(len(GATEWAYS) - failures - 1))
        mock_http.get.side_effect = side_effects

        assert await resolver.fetch(f"ipfs://{CID}") == b"found"
        assert mock_http.get.await_count == failures + 1
        called = [c.args[0] for c in mock_http.get.await_args_list]
        assert called == [g + CID for g in GATEWAYS[: failures + 1]]

    async def test_transport_errors_fall_back(self, resolver, mock_http):
        mock_http.get.side_effect = [httpx.ConnectTimeout("slow"), httpx.ConnectError("down"), _mock_response()]
        assert await resolver.fetch(f"ipfs://{CID}") == b"{}"

    async def test_invalid_url_falls_back(self, resolver, mock_http):
        mock_http.get.side_effect = [httpx.InvalidURL("bad host"), _mock_response(content=b"ok")]
        assert await resolver.fetch(f"ipfs://{CID}") == b"ok"
        assert mock_http.get.await_count == 2

    async def test_invalid_url_everywhere_is_fetch_error(self, resolver, mock_http):
        mock_http.get.side_effect = httpx.InvalidURL("bad host")
        with pytest.raises(FetchError):
            await resolver.fetch("https://example.com/x.json")

    async def test_all_mirrors_fail(self, resolver, mock_http):
        mock_http.get.return_value = _mock_response(status=500)

        with pytest.raises(FetchError):
            await resolver.fetch(f"ipfs://{CID}")
        assert mock_http.get.await_count == len(GATEWAYS)

    async def test_unsupported_scheme_makes_no_request(self, resolver, mock_http):
        with pytest.raises(UnsupportedURIError):
            await resolver.fetch("ftp://example.com/x.json")
        mock_http.get.assert_not_awaited()

    async def test_timeout_passed_per_call(self, resolver, mock_http):
        mock_http.get.return_value = _mock_response()
        await resolver.fetch("https://example.com/x.json")
        assert mock_http.get.await_args.kwargs["timeout"] == 5.0


class TestFetchJson:
    async def test_object(self, resolver, mock_http):
        mock_http.get.return_value = _mock_response(content=b'{"name": "Bear"}')
        assert await resolver.fetch_json("https://example.com/x.json") == {"name": "Bear"}

    async def test_invalid_json(self, resolver, mock_http):
        mock_http.get.return_value = _mock_response(content=b"<html>")
        with pytest.raises(DecodeError):
            await resolver.fetch_json("https://example.com/x.json")

    async def test_non_object(self, resolver, mock_http):
        mock_http.get.return_value = _mock_response(content=b"[1, 2]")
        with pytest.raises(DecodeError):
            await resolver.fetch_json("https://example.com/x.json")
