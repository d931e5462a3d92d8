"""Unit tests for TokenService.

The in-memory ledger applies mint and transfer operations so the tests can
assert on the resulting balances.
"""

import logging

import pytest
import pytest_asyncio
from solders.keypair import Keypair

from solana_minter.utils.errors import (
    AuthorityMismatchError,
    InsufficientBalanceError,
    InvalidAmountError,
    ValidationError,
)


@pytest_asyncio.fixture
async def funded_mint(token_service, payer):
    """Create a 2-decimal mint and a token account for the payer."""
    descriptor = await token_service.create_mint(payer, payer.pubkey(), payer.pubkey(), 2)
    account = await token_service.create_token_account(payer, descriptor.mint, payer.pubkey())
    return descriptor.mint, account


@pytest.mark.asyncio
async def test_create_mint(token_service, fake_ledger, payer, caplog):
    # Execute
    with caplog.at_level(logging.INFO):
        descriptor = await token_service.create_mint(payer, payer.pubkey(), payer.pubkey(), 2)

    # Verify
    assert descriptor.decimals == 2
    assert descriptor.mint_authority == payer.pubkey()
    assert descriptor.freeze_authority == payer.pubkey()
    assert descriptor.mint in fake_ledger.mints
    assert f"Token Mint: https://explorer.solana.com/address/{descriptor.mint}?cluster=devnet" in caplog.text


@pytest.mark.asyncio
@pytest.mark.parametrize("decimals", [-1, 256])
async def test_create_mint_rejects_out_of_range_decimals(token_service, fake_ledger, payer, decimals):
    with pytest.raises(ValidationError):
        await token_service.create_mint(payer, payer.pubkey(), None, decimals)
    assert fake_ledger.mutations == []


@pytest.mark.asyncio
async def test_create_token_account_is_idempotent(token_service, fake_ledger, payer):
    descriptor = await token_service.create_mint(payer, payer.pubkey(), None, 0)

    first = await token_service.create_token_account(payer, descriptor.mint, payer.pubkey())
    second = await token_service.create_token_account(payer, descriptor.mint, payer.pubkey())

    assert first == second
    created = [m for m in fake_ledger.mutations if m[0] == "create_token_account"]
    assert len(created) == 1


@pytest.mark.asyncio
async def test_mint_tokens_scales_by_decimals(token_service, fake_ledger, payer, funded_mint, caplog):
    # Setup
    mint, account = funded_mint

    # Execute
    with caplog.at_level(logging.INFO):
        signature = await token_service.mint_tokens(payer, mint, account, payer, 100)

    # Verify
    assert fake_ledger.balances[account] == 10000
    assert fake_ledger.mints[mint].supply == 10000
    assert f"Mint Token Transaction: https://explorer.solana.com/tx/{signature}?cluster=devnet" in caplog.text


@pytest.mark.asyncio
async def test_mint_tokens_reads_decimals_every_time(token_service, fake_ledger, payer, funded_mint):
    mint, account = funded_mint

    await token_service.mint_tokens(payer, mint, account, payer, 1)
    await token_service.mint_tokens(payer, mint, account, payer, 1)

    assert fake_ledger.mint_info_calls == 2


@pytest.mark.asyncio
async def test_mint_tokens_authority_mismatch(token_service, fake_ledger, payer, funded_mint):
    # Setup
    mint, account = funded_mint
    mutations_before = list(fake_ledger.mutations)
    stranger = Keypair()

    # Execute / Verify
    with pytest.raises(AuthorityMismatchError):
        await token_service.mint_tokens(payer, mint, account, stranger, 100)
    assert fake_ledger.mutations == mutations_before
    assert fake_ledger.balances[account] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -5, "0.001"])
async def test_mint_tokens_invalid_amount(token_service, fake_ledger, payer, funded_mint, amount):
    mint, account = funded_mint
    mutations_before = list(fake_ledger.mutations)

    with pytest.raises(InvalidAmountError):
        await token_service.mint_tokens(payer, mint, account, payer, amount)
    assert fake_ledger.mutations == mutations_before


@pytest.mark.asyncio
async def test_transfer_tokens(token_service, fake_ledger, payer, funded_mint, caplog):
    # Setup
    mint, source = funded_mint
    await token_service.mint_tokens(payer, mint, source, payer, 100)
    recipient = Keypair().pubkey()
    destination = await token_service.create_token_account(payer, mint, recipient)

    # Execute
    with caplog.at_level(logging.INFO):
        signature = await token_service.transfer_tokens(payer, source, destination, payer, 50, mint)

    # Verify
    assert fake_ledger.balances[source] == 5000
    assert fake_ledger.balances[destination] == 5000
    assert f"Transfer Transaction: https://explorer.solana.com/tx/{signature}?cluster=devnet" in caplog.text


@pytest.mark.asyncio
async def test_transfer_tokens_insufficient_balance(token_service, fake_ledger, payer, funded_mint):
    # Setup
    mint, source = funded_mint
    await token_service.mint_tokens(payer, mint, source, payer, 10)
    destination = await token_service.create_token_account(payer, mint, Keypair().pubkey())
    mutations_before = list(fake_ledger.mutations)

    # Execute / Verify
    with pytest.raises(InsufficientBalanceError) as excinfo:
        await token_service.transfer_tokens(payer, source, destination, payer, 50, mint)
    assert excinfo.value.balance == 1000
    assert excinfo.value.required == 5000
    assert fake_ledger.mutations == mutations_before
    assert fake_ledger.balances[source] == 1000
    assert fake_ledger.balances[destination] == 0


@pytest.mark.asyncio
async def test_mint_tokens_above_u64_limit(token_service, fake_ledger, payer):
    # Setup
    descriptor = await token_service.create_mint(payer, payer.pubkey(), payer.pubkey(), 9)
    account = await token_service.create_token_account(payer, descriptor.mint, payer.pubkey())
    mutations_before = list(fake_ledger.mutations)

    # Execute / Verify
    with pytest.raises(InvalidAmountError):
        await token_service.mint_tokens(payer, descriptor.mint, account, payer, "1000000000000")
    assert fake_ledger.mutations == mutations_before
    assert fake_ledger.balances[account] == 0
