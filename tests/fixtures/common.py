"""Common test fixtures for Solana Minter tests.

This module provides fixtures that can be reused across different test modules,
including an in-memory ledger that applies SPL Token and Token Metadata
operations so workflow tests can assert on resulting balances and accounts.
"""

from typing import Dict, List, Optional, Tuple
from unittest.mock import AsyncMock

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from spl.token.instructions import get_associated_token_address

from solana_minter.clients.storage_client import StorageClient
from solana_minter.config import MinterConfig
from solana_minter.constants import (
    CREATE_METADATA_ACCOUNT_V2,
    METADATA_PROGRAM_ID,
    UPDATE_METADATA_ACCOUNT_V2,
)
from solana_minter.models.token import TokenDescriptor
from solana_minter.programs.token_metadata import (
    CreateMetadataAccountArgsV2Layout,
    MetadataAccountLayout,
    UpdateMetadataAccountArgsV2Layout,
)
from solana_minter.services.metadata_service import MetadataService
from solana_minter.services.token_service import TokenService

IMAGE_URI = "https://arweave.net/image-id"
METADATA_URI = "https://arweave.net/metadata-id"

# Account key tag of a MetadataV1 account
METADATA_V1_KEY = 4


class FakeLedger:
    """In-memory stand-in for LedgerClient.

    Every state change is appended to ``mutations`` so tests can assert
    that a failing step left the ledger untouched.
    """

    def __init__(self):
        self.mints: Dict[Pubkey, TokenDescriptor] = {}
        self.balances: Dict[Pubkey, int] = {}
        self.accounts: Dict[Pubkey, bytes] = {}
        self.mutations: List[Tuple[str, str]] = []
        self.mint_info_calls = 0

    def _signature(self, label: str, target: Pubkey) -> Signature:
        self.mutations.append((label, str(target)))
        return Signature.new_unique()

    async def create_mint(self, payer: Keypair, mint_authority: Pubkey, decimals: int,
                          freeze_authority: Optional[Pubkey] = None) -> Pubkey:
        mint = Keypair().pubkey()
        self.mints[mint] = TokenDescriptor(
            mint=mint,
            decimals=decimals,
            mint_authority=mint_authority,
            freeze_authority=freeze_authority
        )
        self._signature("create_mint", mint)
        return mint

    async def get_mint_info(self, mint: Pubkey) -> TokenDescriptor:
        self.mint_info_calls += 1
        return self.mints[mint]

    async def get_token_balance(self, token_account: Pubkey) -> int:
        return self.balances[token_account]

    async def account_exists(self, address: Pubkey) -> bool:
        return address in self.accounts or address in self.balances or address in self.mints

    async def get_account_data(self, address: Pubkey) -> Optional[bytes]:
        return self.accounts.get(address)

    async def get_or_create_associated_account(self, payer: Keypair, mint: Pubkey,
                                               owner: Pubkey) -> Pubkey:
        address = get_associated_token_address(owner, mint)
        if address not in self.balances:
            self.balances[address] = 0
            self._signature("create_token_account", address)
        return address

    async def mint_to(self, payer: Keypair, mint: Pubkey, destination: Pubkey,
                      authority: Keypair, amount: int) -> Signature:
        self.balances[destination] += amount
        descriptor = self.mints[mint]
        self.mints[mint] = descriptor.model_copy(update={"supply": descriptor.supply + amount})
        return self._signature("mint_to", destination)

    async def transfer(self, payer: Keypair, source: Pubkey, destination: Pubkey,
                       owner: Keypair, amount: int) -> Signature:
        self.balances[source] -= amount
        self.balances[destination] += amount
        return self._signature("transfer", destination)

    async def send_and_confirm_transaction(self, instructions, signers) -> Signature:
        signature = None
        for instruction in instructions:
            assert instruction.program_id == METADATA_PROGRAM_ID
            if instruction.data[0] == CREATE_METADATA_ACCOUNT_V2:
                signature = self._apply_create(instruction)
            elif instruction.data[0] == UPDATE_METADATA_ACCOUNT_V2:
                signature = self._apply_update(instruction)
            else:
                raise AssertionError(f"Unexpected instruction {instruction.data[0]}")
        return signature

    def _apply_create(self, instruction) -> Signature:
        args = CreateMetadataAccountArgsV2Layout.parse(instruction.data)
        metadata = instruction.accounts[0].pubkey
        mint = instruction.accounts[1].pubkey
        update_authority = instruction.accounts[4].pubkey
        self.accounts[metadata] = MetadataAccountLayout.build({
            "key": METADATA_V1_KEY,
            "update_authority": list(bytes(update_authority)),
            "mint": list(bytes(mint)),
            "name": args.data.name,
            "symbol": args.data.symbol,
            "uri": args.data.uri,
            "seller_fee_basis_points": args.data.seller_fee_basis_points,
            "creators": args.data.creators,
            "primary_sale_happened": False,
            "is_mutable": args.is_mutable,
        })
        return self._signature("create_metadata", metadata)

    def _apply_update(self, instruction) -> Signature:
        args = UpdateMetadataAccountArgsV2Layout.parse(instruction.data)
        metadata = instruction.accounts[0].pubkey
        current = MetadataAccountLayout.parse(self.accounts[metadata])
        data = args.data
        self.accounts[metadata] = MetadataAccountLayout.build({
            "key": METADATA_V1_KEY,
            "update_authority": (
                args.update_authority if args.update_authority is not None
                else current.update_authority
            ),
            "mint": current.mint,
            "name": data.name if data else current.name,
            "symbol": data.symbol if data else current.symbol,
            "uri": data.uri if data else current.uri,
            "seller_fee_basis_points": (
                data.seller_fee_basis_points if data else current.seller_fee_basis_points
            ),
            "creators": data.creators if data else current.creators,
            "primary_sale_happened": (
                args.primary_sale_happened if args.primary_sale_happened is not None
                else current.primary_sale_happened
            ),
            "is_mutable": args.is_mutable if args.is_mutable is not None else current.is_mutable,
        })
        return self._signature("update_metadata", metadata)


@pytest.fixture
def payer():
    """Create a payer keypair."""
    return Keypair()


@pytest.fixture
def minter_config():
    """Workflow configuration pointing explorer links at devnet."""
    return MinterConfig(cluster="devnet")


@pytest.fixture
def fake_ledger():
    """Create an in-memory ledger."""
    return FakeLedger()


@pytest.fixture
def mock_storage_client():
    """Create a mock storage client."""
    storage = AsyncMock(spec=StorageClient)
    storage.upload.return_value = IMAGE_URI
    storage.upload_metadata_json.return_value = METADATA_URI
    return storage


@pytest.fixture
def token_service(fake_ledger, minter_config):
    """Create a TokenService on the in-memory ledger."""
    return TokenService(fake_ledger, minter_config)


@pytest.fixture
def metadata_service(fake_ledger, mock_storage_client, minter_config):
    """Create a MetadataService on the in-memory ledger."""
    return MetadataService(fake_ledger, mock_storage_client, minter_config)


@pytest.fixture
def image_file(tmp_path):
    """Write a small PNG-named file to upload."""
    path = tmp_path / "poop.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\nfake-image")
    return path
