"""Well-known Solana program IDs, mints and account sizes."""

from solders.pubkey import Pubkey

TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
TOKEN_2022_PROGRAM_ID = Pubkey.from_string("TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb")
METADATA_PROGRAM_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")

TOKEN_PROGRAMS = (TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID)

# Wrapped SOL, used to price the native currency through token price APIs
NATIVE_MINT = "So11111111111111111111111111111111111111112"

LAMPORTS_PER_SOL = 1_000_000_000

# Account sizes in bytes
TOKEN_ACCOUNT_SIZE = 165
METADATA_ACCOUNT_SIZE = 679
EDITION_ACCOUNT_SIZE = 241

# Rent parameters used when the cluster cannot be asked
ACCOUNT_STORAGE_OVERHEAD = 128
LAMPORTS_PER_BYTE_YEAR = 3480
EXEMPTION_THRESHOLD_YEARS = 2


def lamports_to_sol(lamports: int) -> float:
    return lamports / LAMPORTS_PER_SOL
