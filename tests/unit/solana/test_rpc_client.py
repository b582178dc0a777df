"""Tests for SolanaRPCClient — JSON-RPC calls and rate-limit retry."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from solfolio.exceptions import ExternalServiceError, RateLimitError
from solfolio.infra.blockchain.solana.rpc_client import SolanaRPCClient
from solfolio.infra.http.retry import RetryPolicy

RPC_URL = "https://api.mainnet-beta.solana.com"


@pytest.fixture()
def mock_http():
    return AsyncMock()


@pytest.fixture()
def rpc(mock_http):
    policy = RetryPolicy(max_attempts=3, multiplier=0, min_wait=0, max_wait=0)
    return SolanaRPCClient(rpc_url=RPC_URL, http_client=mock_http, retry_policy=policy)


def _mock_response(data: dict, status: int = 200):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = data
    return resp


def _result(result) -> MagicMock:
    return _mock_response({"jsonrpc": "2.0", "id": 1, "result": result})


class TestGetBalance:
    async def test_reads_context_value(self, rpc, mock_http):
        mock_http.post.return_value = _result({"context": {"slot": 1}, "value": 2_500_000_000})

        assert await rpc.get_balance("Addr") == 2_500_000_000
        payload = mock_http.post.call_args.kwargs["json"]
        assert payload["method"] == "getBalance"
        assert payload["params"][0] == "Addr"

    async def test_rpc_error_propagates(self, rpc, mock_http):
        mock_http.post.return_value = _mock_response({"error": {"code": -32602, "message": "Invalid param"}})

        with pytest.raises(ExternalServiceError):
            await rpc.get_balance("bad")
        assert mock_http.post.await_count == 1


class TestRateLimitRetry:
    async def test_http_429_retried_then_succeeds(self, rpc, mock_http):
        mock_http.post.side_effect = [
            _mock_response({}, status=429),
            _result({"value": 7}),
        ]
        assert await rpc.get_balance("Addr") == 7
        assert mock_http.post.await_count == 2

    async def test_json_rpc_429_message_retried(self, rpc, mock_http):
        mock_http.post.side_effect = [
            _mock_response({"error": {"code": -32005, "message": "429 Too Many Requests"}}),
            _result({"value": 1}),
        ]
        assert await rpc.get_balance("Addr") == 1

    async def test_three_attempts_then_raise(self, rpc, mock_http):
        mock_http.post.return_value = _mock_response({}, status=429)

        with pytest.raises(RateLimitError):
            await rpc.get_balance("Addr")
        assert mock_http.post.await_count == 3


class TestTokenAccounts:
    async def test_returns_value_list(self, rpc, mock_http):
        entries = [{"pubkey": "acct1", "account": {}}]
        mock_http.post.return_value = _result({"context": {}, "value": entries})

        result = await rpc.get_token_accounts_by_owner("Owner", "TokenProgram")
        assert result == entries
        params = mock_http.post.call_args.kwargs["json"]["params"]
        assert params[1] == {"programId": "TokenProgram"}
        assert params[2]["encoding"] == "jsonParsed"

    async def test_null_result(self, rpc, mock_http):
        mock_http.post.return_value = _result(None)
        assert await rpc.get_token_accounts_by_owner("Owner", "P") == []


class TestGetMultipleAccounts:
    async def test_chunks_by_100_and_keeps_order(self, rpc, mock_http):
        addresses = [f"addr{i}" for i in range(150)]

        def answer(url, json):
            chunk = json["params"][0]
            return _result({"value": [{"data": [a, "base64"]} for a in chunk]})

        mock_http.post.side_effect = answer
        result = await rpc.get_multiple_accounts(addresses)

        assert mock_http.post.await_count == 2
        assert [r["data"][0] for r in result] == addresses

    async def test_missing_value_padded_with_none(self, rpc, mock_http):
        mock_http.post.return_value = _result({"value": None})
        assert await rpc.get_multiple_accounts(["a", "b"]) == [None, None]


class TestBlockhashAndRent:
    async def test_latest_blockhash(self, rpc, mock_http):
        mock_http.post.return_value = _result(
            {"context": {}, "value": {"blockhash": "EkSnNWid2cvwEVnVx9aBqawnmiCNiDgp3gUdkDPTKN1N", "lastValidBlockHeight": 3090}}
        )
        assert await rpc.get_latest_blockhash() == ("EkSnNWid2cvwEVnVx9aBqawnmiCNiDgp3gUdkDPTKN1N", 3090)

    async def test_missing_blockhash(self, rpc, mock_http):
        mock_http.post.return_value = _result(None)
        with pytest.raises(ExternalServiceError):
            await rpc.get_latest_blockhash()

    async def test_rent(self, rpc, mock_http):
        mock_http.post.return_value = _result(2039280)
        assert await rpc.get_minimum_balance_for_rent_exemption(165) == 2039280
