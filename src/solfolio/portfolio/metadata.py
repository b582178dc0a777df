"""MetadataResolver — on-chain Metaplex metadata plus best-effort off-chain JSON.

Per-NFT failures never abort a batch: an NFT whose metadata account is missing
or malformed is still emitted as a minimal record, and an NFT whose off-chain
document cannot be fetched keeps its on-chain fields only.
"""

import asyncio
import base64
import binascii
import logging

from solfolio.domain.models.portfolio import (
    UNKNOWN_COLLECTION,
    CollectionInfo,
    NFTAsset,
    NFTAttribute,
    TokenAccountRecord,
)
from solfolio.exceptions import DecodeError
from solfolio.infra.blockchain.solana.metadata import OnChainMetadata, decode_metadata, derive_metadata_pda
from solfolio.infra.blockchain.solana.rpc_client import SolanaRPCClient
from solfolio.infra.gateway.resolver import GatewayFallbackResolver
from solfolio.portfolio.rent import NFTRent, RentCalculator

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "Unknown NFT"
PLACEHOLDER_SYMBOL = "NFT"
COLLECTION_SEPARATORS = ("#", ":")


def infer_collection_name(display_name: str) -> str | None:
    """'Okay Bear #123' -> 'Okay Bear'; 'Foo: Bar' -> 'Foo'."""
    for separator in COLLECTION_SEPARATORS:
        if separator in display_name:
            prefix = display_name.split(separator, 1)[0].strip()
            if prefix:
                return prefix
    return None


def pick_collection_name(onchain: str | None, offchain: str | None, display_name: str) -> str:
    if onchain:
        return onchain
    if offchain:
        return offchain
    if display_name and display_name != PLACEHOLDER_NAME:
        inferred = infer_collection_name(display_name)
        if inferred:
            return inferred
    return UNKNOWN_COLLECTION


def parse_attributes(raw: object) -> list[NFTAttribute] | None:
    if not isinstance(raw, list):
        return None
    attributes = []
    for item in raw:
        if not isinstance(item, dict) or "trait_type" not in item or "value" not in item:
            continue
        value = item["value"]
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            value = str(value)
        attributes.append(NFTAttribute(trait_type=str(item["trait_type"]), value=value))
    return attributes


def _account_bytes(info: dict) -> bytes:
    data = info.get("data")
    encoded = data[0] if isinstance(data, list) else data
    if not isinstance(encoded, str):
        raise DecodeError("account data is not base64 text")
    try:
        return base64.b64decode(encoded)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"invalid base64 account data: {exc}") from exc


class MetadataResolver:
    def __init__(
        self,
        rpc: SolanaRPCClient,
        gateway: GatewayFallbackResolver,
        rent_calculator: RentCalculator,
        batch_size: int = 100,
        fetch_concurrency: int = 8,
    ) -> None:
        self._rpc = rpc
        self._gateway = gateway
        self._rent = rent_calculator
        self._batch_size = max(1, batch_size)
        self._fetch_concurrency = max(1, fetch_concurrency)

    async def resolve(self, candidates: list[TokenAccountRecord]) -> list[NFTAsset]:
        assets: list[NFTAsset] = []
        for start in range(0, len(candidates), self._batch_size):
            batch = candidates[start:start + self._batch_size]
            assets.extend(await self._resolve_batch(batch))

        semaphore = asyncio.Semaphore(self._fetch_concurrency)
        return list(await asyncio.gather(*(self._enrich(asset, semaphore) for asset in assets)))

    def minimal_asset(self, record: TokenAccountRecord, rent: NFTRent) -> NFTAsset:
        return NFTAsset(
            mint=record.mint,
            token_account=record.token_account,
            owner=record.owner,
            program_id=record.program_id,
            name=PLACEHOLDER_NAME,
            symbol=PLACEHOLDER_SYMBOL,
            rent_exempt=rent.rent_exempt,
            accounts_rent=rent.accounts_rent,
            burn_value=rent.burn_value,
        )

    async def _resolve_batch(self, batch: list[TokenAccountRecord]) -> list[NFTAsset]:
        pdas: list[str | None] = []
        for record in batch:
            try:
                pdas.append(str(derive_metadata_pda(record.mint)))
            except ValueError:
                logger.warning("Cannot derive metadata address for mint %s", record.mint)
                pdas.append(None)

        infos = await self._read_accounts([p for p in pdas if p])
        metadata = [self._decode(record, infos.get(pda) if pda else None) for record, pda in zip(batch, pdas)]
        collection_names = await self._verified_collection_names(metadata)

        assets = []
        for record, meta in zip(batch, metadata):
            rent = await self._rent.nft_rent(record.space)
            if meta is None:
                assets.append(self.minimal_asset(record, rent))
                continue

            collection = None
            if meta.collection is not None:
                verified_name = collection_names.get(meta.collection.key) if meta.collection.verified else None
                collection = CollectionInfo(
                    name=verified_name or UNKNOWN_COLLECTION,
                    verified=meta.collection.verified,
                    address=meta.collection.key,
                )

            asset = self.minimal_asset(record, rent).model_copy(
                update={
                    "name": meta.name or PLACEHOLDER_NAME,
                    "symbol": meta.symbol or PLACEHOLDER_SYMBOL,
                    "uri": meta.uri,
                    "collection": collection,
                }
            )
            assets.append(asset)
        return assets

    async def _read_accounts(self, addresses: list[str]) -> dict[str, dict | None]:
        if not addresses:
            return {}
        try:
            infos = await self._rpc.get_multiple_accounts(addresses)
        except Exception:
            logger.exception("Metadata batch read failed for %d accounts", len(addresses))
            return {}
        return dict(zip(addresses, infos))

    def _decode(self, record: TokenAccountRecord, info: dict | None) -> OnChainMetadata | None:
        if info is None:
            return None
        try:
            return decode_metadata(_account_bytes(info))
        except DecodeError as exc:
            logger.warning("Malformed metadata for mint %s: %s", record.mint, exc)
            return None

    async def _verified_collection_names(self, metadata: list[OnChainMetadata | None]) -> dict[str, str]:
        """Names of verified collections, read from each collection mint's own metadata."""
        keys = list(dict.fromkeys(
            m.collection.key for m in metadata if m is not None and m.collection is not None and m.collection.verified
        ))
        if not keys:
            return {}

        pda_by_key: dict[str, str] = {}
        for key in keys:
            try:
                pda_by_key[key] = str(derive_metadata_pda(key))
            except ValueError:
                continue

        infos = await self._read_accounts(list(pda_by_key.values()))
        names: dict[str, str] = {}
        for key, pda in pda_by_key.items():
            info = infos.get(pda)
            if info is None:
                continue
            try:
                name = decode_metadata(_account_bytes(info)).name
            except DecodeError as exc:
                logger.warning("Malformed collection metadata for %s: %s", key, exc)
                continue
            if name:
                names[key] = name
        return names

    async def _enrich(self, asset: NFTAsset, semaphore: asyncio.Semaphore) -> NFTAsset:
        offchain: dict = {}
        if asset.uri:
            async with semaphore:
                try:
                    offchain = await self._gateway.fetch_json(asset.uri)
                except Exception as exc:
                    logger.info("Off-chain metadata unavailable for %s (%s): %s", asset.name, asset.mint, exc)

        updates: dict = {}
        image = offchain.get("image")
        if isinstance(image, str) and image:
            updates["image"] = self._gateway.to_http_url(image) or image
        description = offchain.get("description")
        if isinstance(description, str):
            updates["description"] = description
        attributes = parse_attributes(offchain.get("attributes"))
        if attributes is not None:
            updates["attributes"] = attributes

        hint = offchain.get("collection")
        hint_name = hint.get("name") if isinstance(hint, dict) and isinstance(hint.get("name"), str) else None
        hint_family = hint.get("family") if isinstance(hint, dict) and isinstance(hint.get("family"), str) else ""

        current = asset.collection
        onchain_name = None
        if current is not None and current.verified and current.name != UNKNOWN_COLLECTION:
            onchain_name = current.name

        updates["collection"] = CollectionInfo(
            name=pick_collection_name(onchain_name, hint_name, asset.name),
            family=hint_family or "",
            verified=current.verified if current else False,
            address=current.address if current else None,
        )
        return asset.model_copy(update=updates)
