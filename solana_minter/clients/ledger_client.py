"""Ledger RPC client for Solana Minter.

This module wraps the solana-py async RPC client and the SPL Token
instruction builders behind the operations the issuance workflow needs.
Every library failure is translated into ChainRpcError.
"""

# Standard library imports
import functools
from typing import Any, Callable, List, Optional, Sequence, TypeVar

# Third-party library imports
import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.core import (
    RPCException,
    TransactionExpiredBlockheightExceededError,
    UnconfirmedTxError,
)
from solana.rpc.types import TxOpts
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction
from spl.token.async_client import AsyncToken
from spl.token.instructions import (
    MintToParams,
    TransferParams,
    create_associated_token_account,
    get_associated_token_address,
    mint_to,
    transfer,
)

# Internal imports
from solana_minter.config import SolanaConfig, get_solana_config
from solana_minter.constants import TOKEN_PROGRAM_ID
from solana_minter.logging_config import get_logger, log_with_context
from solana_minter.models.token import TokenDescriptor
from solana_minter.utils.errors import ChainRpcError

# Get logger
logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

LEDGER_ERRORS = (
    RPCException,
    SolanaRpcException,
    UnconfirmedTxError,
    TransactionExpiredBlockheightExceededError,
    httpx.HTTPError,
)


def rpc_call(func: F) -> F:
    """Decorator translating solana-py failures into ChainRpcError.

    Args:
        func: The coroutine method to decorate

    Returns:
        Decorated coroutine method
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except ChainRpcError:
            raise
        except LEDGER_ERRORS as e:
            logger.debug(f"Ledger call {func.__name__} failed: {e!r}")
            raise ChainRpcError(
                f"Ledger call {func.__name__} failed: {e}",
                method=func.__name__,
                rpc_error=e
            ) from e
    return wrapper  # type: ignore[return-value]


def _unique_signers(signers: Sequence[Keypair]) -> List[Keypair]:
    seen = set()
    unique = []
    for signer in signers:
        if signer.pubkey() not in seen:
            seen.add(signer.pubkey())
            unique.append(signer)
    return unique


class LedgerClient:
    """Client for the Solana ledger used by the issuance workflow."""

    def __init__(self, config: Optional[SolanaConfig] = None, client: Optional[AsyncClient] = None):
        """Initialize the ledger client.

        Args:
            config: Solana configuration. Defaults to environment-based config.
            client: Pre-built AsyncClient. Defaults to one built from config.
        """
        self.config = config or get_solana_config()
        self._client = client or AsyncClient(
            self.config.rpc_url,
            commitment=self.config.commitment,
            timeout=self.config.timeout
        )

    @property
    def tx_opts(self) -> TxOpts:
        """Transaction options that wait for confirmation."""
        return TxOpts(skip_confirmation=False, preflight_commitment=self.config.commitment)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the client and release resources."""
        await self._client.close()

    @rpc_call
    async def get_balance(self, pubkey: Pubkey) -> int:
        """Get an account's balance in lamports."""
        resp = await self._client.get_balance(pubkey)
        return resp.value

    @rpc_call
    async def request_airdrop(self, pubkey: Pubkey, lamports: int) -> Signature:
        """Request an airdrop and wait until it is confirmed.

        Args:
            pubkey: Recipient of the airdrop
            lamports: Amount in lamports

        Returns:
            The airdrop transaction signature
        """
        resp = await self._client.request_airdrop(pubkey, lamports)
        signature = resp.value
        await self._client.confirm_transaction(signature, self.config.commitment)
        return signature

    @rpc_call
    async def account_exists(self, address: Pubkey) -> bool:
        """Check whether an account exists on the ledger."""
        resp = await self._client.get_account_info(address)
        return resp.value is not None

    @rpc_call
    async def get_account_data(self, address: Pubkey) -> Optional[bytes]:
        """Get raw account data, or None if the account does not exist."""
        resp = await self._client.get_account_info(address)
        if resp.value is None:
            return None
        return bytes(resp.value.data)

    @rpc_call
    async def create_mint(
        self,
        payer: Keypair,
        mint_authority: Pubkey,
        decimals: int,
        freeze_authority: Optional[Pubkey] = None
    ) -> Pubkey:
        """Create and initialize a new SPL Token mint.

        Args:
            payer: Fee payer for the new account
            mint_authority: Authority allowed to mint supply
            decimals: Number of fractional digits of the token
            freeze_authority: Optional authority allowed to freeze accounts

        Returns:
            The address of the new mint
        """
        token = await AsyncToken.create_mint(
            self._client,
            payer,
            mint_authority,
            decimals,
            TOKEN_PROGRAM_ID,
            freeze_authority=freeze_authority,
            skip_confirmation=False
        )
        return token.pubkey

    @rpc_call
    async def get_mint_info(self, mint: Pubkey) -> TokenDescriptor:
        """Read a mint's decimals, supply and authorities from the ledger.

        Raises:
            ChainRpcError: If the account does not exist or is not a mint
        """
        resp = await self._client.get_account_info_json_parsed(mint)
        if resp.value is None:
            raise ChainRpcError(f"Mint account {mint} not found", method="get_mint_info")

        parsed = getattr(resp.value.data, "parsed", None)
        if not isinstance(parsed, dict) or parsed.get("type") != "mint":
            raise ChainRpcError(f"Account {mint} is not an SPL Token mint", method="get_mint_info")

        info = parsed["info"]
        mint_authority = info.get("mintAuthority")
        freeze_authority = info.get("freezeAuthority")
        return TokenDescriptor(
            mint=mint,
            decimals=int(info["decimals"]),
            mint_authority=Pubkey.from_string(mint_authority) if mint_authority else None,
            freeze_authority=Pubkey.from_string(freeze_authority) if freeze_authority else None,
            supply=int(info.get("supply", 0))
        )

    @rpc_call
    async def get_token_balance(self, token_account: Pubkey) -> int:
        """Get a token account's balance in base units."""
        resp = await self._client.get_token_account_balance(token_account)
        return int(resp.value.amount)

    async def get_or_create_associated_account(
        self,
        payer: Keypair,
        mint: Pubkey,
        owner: Pubkey
    ) -> Pubkey:
        """Get the associated token account of owner for mint, creating it if absent.

        Calling this repeatedly with the same mint and owner returns the same
        address and submits at most one creation transaction.

        Returns:
            The associated token account address
        """
        address = get_associated_token_address(owner, mint)
        if await self.account_exists(address):
            logger.debug(f"Associated token account {address} already exists")
            return address

        instruction = create_associated_token_account(payer.pubkey(), owner, mint)
        signature = await self.send_and_confirm_transaction([instruction], [payer])
        log_with_context(
            logger, "debug", "Created associated token account",
            address=str(address), signature=str(signature)
        )
        return address

    async def mint_to(
        self,
        payer: Keypair,
        mint: Pubkey,
        destination: Pubkey,
        authority: Keypair,
        amount: int
    ) -> Signature:
        """Mint base units of mint into destination."""
        instruction = mint_to(
            MintToParams(
                program_id=TOKEN_PROGRAM_ID,
                mint=mint,
                dest=destination,
                mint_authority=authority.pubkey(),
                amount=amount
            )
        )
        return await self.send_and_confirm_transaction([instruction], [payer, authority])

    async def transfer(
        self,
        payer: Keypair,
        source: Pubkey,
        destination: Pubkey,
        owner: Keypair,
        amount: int
    ) -> Signature:
        """Transfer base units between two token accounts."""
        instruction = transfer(
            TransferParams(
                program_id=TOKEN_PROGRAM_ID,
                source=source,
                dest=destination,
                owner=owner.pubkey(),
                amount=amount
            )
        )
        return await self.send_and_confirm_transaction([instruction], [payer, owner])

    @rpc_call
    async def send_and_confirm_transaction(
        self,
        instructions: Sequence[Instruction],
        signers: Sequence[Keypair]
    ) -> Signature:
        """Sign, send and confirm a transaction.

        The first signer pays the fees.

        Args:
            instructions: Instructions to include, in order
            signers: Keypairs that must sign; duplicates are dropped

        Returns:
            The confirmed transaction signature
        """
        keypairs = _unique_signers(signers)
        blockhash_resp = await self._client.get_latest_blockhash()
        blockhash = blockhash_resp.value.blockhash

        message = Message.new_with_blockhash(list(instructions), keypairs[0].pubkey(), blockhash)
        txn = Transaction(keypairs, message, blockhash)

        resp = await self._client.send_transaction(txn, opts=self.tx_opts)
        return resp.value
