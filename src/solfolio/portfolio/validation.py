"""Wallet address validation."""

from dataclasses import dataclass

from solders.pubkey import Pubkey

MIN_ADDRESS_LENGTH = 32
MAX_ADDRESS_LENGTH = 44


@dataclass(frozen=True)
class AddressValidation:
    ok: bool
    reason: str | None = None


def is_valid_solana_address(address: str) -> bool:
    """True if ``address`` decodes to an on-curve public key."""
    try:
        pubkey = Pubkey.from_string(address)
    except ValueError:
        return False
    return pubkey.is_on_curve()


def validate_wallet_address(address: str) -> AddressValidation:
    if not address or not address.strip():
        return AddressValidation(ok=False, reason="Address cannot be empty")

    trimmed = address.strip()
    if len(trimmed) < MIN_ADDRESS_LENGTH or len(trimmed) > MAX_ADDRESS_LENGTH:
        return AddressValidation(ok=False, reason="Invalid address length")

    if not is_valid_solana_address(trimmed):
        return AddressValidation(ok=False, reason="Invalid Solana address format")

    return AddressValidation(ok=True)


def sanitize_wallet_list(addresses: list[str]) -> list[str]:
    """Trimmed, valid, de-duplicated addresses in first-seen order."""
    seen: dict[str, None] = {}
    for address in addresses:
        trimmed = address.strip()
        if trimmed and validate_wallet_address(trimmed).ok:
            seen.setdefault(trimmed, None)
    return list(seen)
