"""Metaplex token-metadata account: PDA derivation and Borsh decoding."""

import struct
from dataclasses import dataclass

from solders.pubkey import Pubkey

from solfolio.exceptions import DecodeError
from solfolio.infra.blockchain.solana.programs import METADATA_PROGRAM_ID

METADATA_KEY_V1 = 4
CREATOR_SIZE = 34  # address + verified + share


@dataclass(frozen=True)
class OnChainCollection:
    key: str
    verified: bool


@dataclass(frozen=True)
class OnChainMetadata:
    mint: str
    update_authority: str
    name: str
    symbol: str
    uri: str
    seller_fee_basis_points: int
    is_mutable: bool
    collection: OnChainCollection | None = None


def derive_metadata_pda(mint: str) -> Pubkey:
    """Metadata PDA: seeds [b"metadata", program_id, mint]."""
    mint_pubkey = Pubkey.from_string(mint)
    pda, _bump = Pubkey.find_program_address(
        [b"metadata", bytes(METADATA_PROGRAM_ID), bytes(mint_pubkey)],
        METADATA_PROGRAM_ID,
    )
    return pda


def clean_text(value: str) -> str:
    """Strip the NUL padding Metaplex stores fixed-width strings with."""
    return value.replace("\x00", "").strip()


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def take(self, size: int) -> bytes:
        if size < 0 or self.remaining < size:
            raise DecodeError(f"metadata truncated at offset {self._offset} (need {size} bytes)")
        chunk = self._data[self._offset:self._offset + size]
        self._offset += size
        return chunk

    def u8(self) -> int:
        return self.take(1)[0]

    def u16(self) -> int:
        return struct.unpack("<H", self.take(2))[0]

    def u32(self) -> int:
        return struct.unpack("<I", self.take(4))[0]

    def pubkey(self) -> str:
        return str(Pubkey.from_bytes(self.take(32)))

    def string(self) -> str:
        length = self.u32()
        try:
            return self.take(length).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"metadata string is not utf-8: {exc}") from exc


def decode_metadata(data: bytes) -> OnChainMetadata:
    """Decode a MetadataV1 account. Raises DecodeError on malformed data.

    Trailing optional fields (edition nonce, token standard, collection) are
    read only while bytes remain; older accounts stop before them.
    """
    reader = _Reader(data)
    key = reader.u8()
    if key != METADATA_KEY_V1:
        raise DecodeError(f"not a metadata account (key={key})")

    update_authority = reader.pubkey()
    mint = reader.pubkey()
    name = clean_text(reader.string())
    symbol = clean_text(reader.string())
    uri = clean_text(reader.string())
    seller_fee = reader.u16()

    if reader.u8() == 1:
        count = reader.u32()
        reader.take(count * CREATOR_SIZE)

    reader.u8()  # primary_sale_happened
    is_mutable = reader.u8() == 1

    collection = None
    try:
        if reader.u8() == 1:  # edition_nonce
            reader.u8()
        if reader.u8() == 1:  # token_standard
            reader.u8()
        if reader.u8() == 1:
            verified = reader.u8() == 1
            collection = OnChainCollection(key=reader.pubkey(), verified=verified)
    except DecodeError:
        collection = None

    return OnChainMetadata(
        mint=mint,
        update_authority=update_authority,
        name=name,
        symbol=symbol,
        uri=uri,
        seller_fee_basis_points=seller_fee,
        is_mutable=is_mutable,
        collection=collection,
    )
