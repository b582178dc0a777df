"""SPL Token burn + close instructions and unsigned transaction assembly."""

import base64

from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from solfolio.infra.blockchain.solana.programs import TOKEN_PROGRAM_ID

# SPL Token instruction discriminators
CLOSE_ACCOUNT = 9
BURN_CHECKED = 15


def build_burn_checked_ix(
    account: Pubkey,
    mint: Pubkey,
    owner: Pubkey,
    amount: int = 1,
    decimals: int = 0,
    program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    data = bytes([BURN_CHECKED]) + amount.to_bytes(8, "little") + bytes([decimals])
    metas = [
        AccountMeta(pubkey=account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=True),
        AccountMeta(pubkey=owner, is_signer=True, is_writable=False),
    ]
    return Instruction(program_id=program_id, data=data, accounts=metas)


def build_close_account_ix(
    account: Pubkey,
    destination: Pubkey,
    owner: Pubkey,
    program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    metas = [
        AccountMeta(pubkey=account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=destination, is_signer=False, is_writable=True),
        AccountMeta(pubkey=owner, is_signer=True, is_writable=False),
    ]
    return Instruction(program_id=program_id, data=bytes([CLOSE_ACCOUNT]), accounts=metas)


def build_burn_instructions(
    mint: str,
    token_account: str,
    payer: Pubkey,
    program_id: str | None = None,
) -> list[Instruction]:
    """Burn exactly one unit, then close the account with rent going to the payer.

    Raises ValueError if any address is malformed.
    """
    mint_pubkey = Pubkey.from_string(mint)
    account_pubkey = Pubkey.from_string(token_account)
    program = Pubkey.from_string(program_id) if program_id else TOKEN_PROGRAM_ID
    return [
        build_burn_checked_ix(account_pubkey, mint_pubkey, payer, amount=1, decimals=0, program_id=program),
        build_close_account_ix(account_pubkey, payer, payer, program_id=program),
    ]


def serialize_unsigned(instructions: list[Instruction], payer: Pubkey, blockhash: str) -> str:
    """Legacy transaction with no signatures filled in, base64-encoded for the wallet."""
    message = Message.new_with_blockhash(instructions, payer, Hash.from_string(blockhash))
    tx = Transaction.new_unsigned(message)
    return base64.b64encode(bytes(tx)).decode("ascii")
