"""
Token service for Solana Minter.

This module creates mints and token accounts, mints supply and transfers
balances. Human-readable amounts are scaled by the mint's decimals, read
fresh from the ledger for every operation.
"""

from typing import Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from solana_minter.models.token import TokenDescriptor
from solana_minter.services.base_service import BaseService
from solana_minter.utils.errors import AuthorityMismatchError, InsufficientBalanceError
from solana_minter.utils.validation import (
    Amount,
    from_base_units,
    to_base_units,
    validate_decimals,
)


class TokenService(BaseService):
    """Service for SPL Token operations."""

    async def create_mint(
        self,
        payer: Keypair,
        mint_authority: Pubkey,
        freeze_authority: Optional[Pubkey],
        decimals: int
    ) -> TokenDescriptor:
        """Create a new mint.

        Args:
            payer: Fee payer
            mint_authority: Authority allowed to mint supply
            freeze_authority: Authority allowed to freeze token accounts
            decimals: Number of fractional digits, 0 to 255

        Returns:
            Descriptor of the new mint

        Raises:
            ValidationError: If decimals does not fit the mint's u8 field
            ChainRpcError: If the ledger rejects the mint creation
        """
        validate_decimals(decimals)

        mint = await self.ledger.create_mint(
            payer, mint_authority, decimals, freeze_authority=freeze_authority
        )
        self.log_address("Token Mint", mint)
        return TokenDescriptor(
            mint=mint,
            decimals=decimals,
            mint_authority=mint_authority,
            freeze_authority=freeze_authority
        )

    async def create_token_account(
        self,
        payer: Keypair,
        mint: Pubkey,
        owner: Pubkey
    ) -> Pubkey:
        """Get or create the associated token account of owner for mint.

        Returns:
            The token account address
        """
        token_account = await self.ledger.get_or_create_associated_account(payer, mint, owner)
        self.log_address("Token Account", token_account)
        return token_account

    async def mint_tokens(
        self,
        payer: Keypair,
        mint: Pubkey,
        destination: Pubkey,
        authority: Keypair,
        amount: Amount
    ) -> Signature:
        """Mint a human-readable amount of tokens into destination.

        Raises:
            InvalidAmountError: If amount is not positive or too precise
            AuthorityMismatchError: If authority is not the mint authority
            ChainRpcError: If the ledger rejects the transaction
        """
        mint_info = await self.ledger.get_mint_info(mint)
        base_units = to_base_units(amount, mint_info.decimals)

        if mint_info.mint_authority != authority.pubkey():
            raise AuthorityMismatchError(
                str(mint),
                str(mint_info.mint_authority) if mint_info.mint_authority else None,
                str(authority.pubkey())
            )

        self.log_with_context(
            "debug", "Minting tokens",
            mint=str(mint), amount=str(amount), base_units=base_units
        )
        signature = await self.ledger.mint_to(payer, mint, destination, authority, base_units)
        self.log_transaction("Mint Token Transaction", signature)
        return signature

    async def transfer_tokens(
        self,
        payer: Keypair,
        source: Pubkey,
        destination: Pubkey,
        owner: Keypair,
        amount: Amount,
        mint: Pubkey
    ) -> Signature:
        """Transfer a human-readable amount of tokens between token accounts.

        Raises:
            InvalidAmountError: If amount is not positive or too precise
            InsufficientBalanceError: If source holds less than the scaled amount
            ChainRpcError: If the ledger rejects the transaction
        """
        mint_info = await self.ledger.get_mint_info(mint)
        base_units = to_base_units(amount, mint_info.decimals)

        balance = await self.ledger.get_token_balance(source)
        if balance < base_units:
            raise InsufficientBalanceError(str(source), balance, base_units)

        self.log_with_context(
            "debug", "Transferring tokens",
            source=str(source), destination=str(destination), base_units=base_units,
            remaining=str(from_base_units(balance - base_units, mint_info.decimals))
        )
        signature = await self.ledger.transfer(payer, source, destination, owner, base_units)
        self.log_transaction("Transfer Transaction", signature)
        return signature
