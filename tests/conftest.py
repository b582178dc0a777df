import base64
import struct

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey


def _borsh_string(value: str) -> bytes:
    raw = value.encode("utf-8")
    return struct.pack("<I", len(raw)) + raw


def encode_metadata(
    mint: str,
    name: str = "Okay Bear #42",
    symbol: str = "OKB",
    uri: str = "https://arweave.net/abc",
    collection: str | None = None,
    verified: bool = True,
    creators: int = 1,
) -> bytes:
    """MetadataV1 account bytes laid out as the token-metadata program stores them."""
    data = bytes([4]) + bytes(Pubkey.new_unique()) + bytes(Pubkey.from_string(mint))
    data += _borsh_string(name.ljust(32, "\x00"))
    data += _borsh_string(symbol.ljust(10, "\x00"))
    data += _borsh_string(uri.ljust(200, "\x00"))
    data += struct.pack("<H", 500)
    if creators:
        data += bytes([1]) + struct.pack("<I", creators) + (bytes(32) + bytes([1, 100])) * creators
    else:
        data += bytes([0])
    data += bytes([1, 1])  # primary_sale_happened, is_mutable
    data += bytes([1, 255])  # edition_nonce
    data += bytes([1, 0])  # token_standard
    if collection is None:
        data += bytes([0])
    else:
        data += bytes([1, 1 if verified else 0]) + bytes(Pubkey.from_string(collection))
    return data


def account_info(data: bytes) -> dict:
    return {"data": [base64.b64encode(data).decode(), "base64"], "lamports": 5616720, "owner": "meta", "executable": False}


@pytest.fixture()
def wallet() -> str:
    return str(Keypair().pubkey())


@pytest.fixture()
def other_wallet() -> str:
    return str(Keypair().pubkey())


@pytest.fixture()
def metadata_bytes():
    return encode_metadata


@pytest.fixture()
def metadata_account():
    return lambda mint, **kwargs: account_info(encode_metadata(mint, **kwargs))


def token_account_entry(pubkey: str, mint: str, amount: int, decimals: int, owner: str = "Owner") -> dict:
    """One jsonParsed getTokenAccountsByOwner entry."""
    return {
        "pubkey": pubkey,
        "account": {
            "lamports": 2039280,
            "data": {
                "program": "spl-token",
                "parsed": {
                    "type": "account",
                    "info": {
                        "mint": mint,
                        "owner": owner,
                        "tokenAmount": {"amount": str(amount), "decimals": decimals, "uiAmount": amount / 10**decimals},
                    },
                },
                "space": 165,
            },
        },
    }


@pytest.fixture()
def token_entry():
    return token_account_entry
