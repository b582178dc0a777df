"""Tests for Metaplex metadata PDA derivation and decoding."""

import pytest
from solders.pubkey import Pubkey

from solfolio.exceptions import DecodeError
from solfolio.infra.blockchain.solana.metadata import clean_text, decode_metadata, derive_metadata_pda
from solfolio.infra.blockchain.solana.programs import METADATA_PROGRAM_ID


class TestDeriveMetadataPda:
    def test_matches_find_program_address(self):
        mint = Pubkey.new_unique()
        expected, _ = Pubkey.find_program_address(
            [b"metadata", bytes(METADATA_PROGRAM_ID), bytes(mint)], METADATA_PROGRAM_ID
        )
        assert derive_metadata_pda(str(mint)) == expected

    def test_pda_is_off_curve(self):
        assert not derive_metadata_pda(str(Pubkey.new_unique())).is_on_curve()

    def test_bad_mint(self):
        with pytest.raises(ValueError):
            derive_metadata_pda("not-a-key")


class TestDecodeMetadata:
    def test_fields(self, metadata_bytes):
        mint = str(Pubkey.new_unique())
        meta = decode_metadata(metadata_bytes(mint, name="Okay Bear #42", symbol="OKB", uri="ipfs://cid/1.json"))

        assert meta.mint == mint
        assert meta.name == "Okay Bear #42"
        assert meta.symbol == "OKB"
        assert meta.uri == "ipfs://cid/1.json"
        assert meta.seller_fee_basis_points == 500
        assert meta.is_mutable
        assert meta.collection is None

    def test_collection(self, metadata_bytes):
        collection = str(Pubkey.new_unique())
        meta = decode_metadata(metadata_bytes(str(Pubkey.new_unique()), collection=collection, verified=False))

        assert meta.collection is not None
        assert meta.collection.key == collection
        assert not meta.collection.verified

    def test_without_creators(self, metadata_bytes):
        meta = decode_metadata(metadata_bytes(str(Pubkey.new_unique()), creators=0, name="Solo"))
        assert meta.name == "Solo"

    def test_legacy_account_without_trailing_fields(self, metadata_bytes):
        data = metadata_bytes(str(Pubkey.new_unique()), creators=0)
        # drop edition_nonce, token_standard and collection options
        legacy = data[:-5]
        meta = decode_metadata(legacy)
        assert meta.collection is None

    def test_wrong_key(self, metadata_bytes):
        data = bytearray(metadata_bytes(str(Pubkey.new_unique())))
        data[0] = 6
        with pytest.raises(DecodeError):
            decode_metadata(bytes(data))

    def test_truncated(self, metadata_bytes):
        with pytest.raises(DecodeError):
            decode_metadata(metadata_bytes(str(Pubkey.new_unique()))[:80])

    def test_clean_text(self):
        assert clean_text("Bear\x00\x00\x00 ") == "Bear"
