"""
Metadata service for Solana Minter.

This module uploads a token's image and metadata document to storage and
submits the Metaplex instruction that creates or updates the on-chain
metadata account of a mint.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import pydantic
from construct import ConstructError
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from solana_minter.clients.ledger_client import LedgerClient
from solana_minter.clients.storage_client import StorageClient
from solana_minter.config import MinterConfig
from solana_minter.models.token import (
    Collection,
    Creator,
    MetadataAccount,
    MetadataRecord,
    OffChainMetadata,
    Uses,
)
from solana_minter.programs.token_metadata import (
    create_metadata_account_v2,
    decode_metadata_account,
    find_metadata_pda,
    update_metadata_account_v2,
)
from solana_minter.services.base_service import BaseService
from solana_minter.utils.errors import (
    AlreadyInitializedError,
    AuthorityMismatchError,
    ChainRpcError,
    MetadataNotFoundError,
    ValidationError,
)


@dataclass(frozen=True)
class MetadataResult:
    """Outcome of a create or update metadata step."""
    metadata_address: Pubkey
    image_uri: str
    uri: str
    signature: Signature


@dataclass(frozen=True)
class TokenImage:
    """Image content read from disk."""
    data: bytes
    filename: str


def read_image(file_path: str, file_name: Optional[str] = None) -> TokenImage:
    """Read the token image from disk.

    Raises:
        FileNotFoundError: If no file exists at file_path
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"Image file not found: {file_path}")
    return TokenImage(data=path.read_bytes(), filename=file_name or path.name)


def build_record(
    name: str,
    symbol: str,
    uri: str,
    seller_fee_basis_points: int = 0,
    creators: Optional[List[Creator]] = None,
    collection: Optional[Collection] = None,
    uses: Optional[Uses] = None
) -> MetadataRecord:
    """Build a validated MetadataRecord.

    Raises:
        ValidationError: If a field exceeds the Token Metadata limits
    """
    try:
        return MetadataRecord(
            name=name,
            symbol=symbol,
            uri=uri,
            seller_fee_basis_points=seller_fee_basis_points,
            creators=creators,
            collection=collection,
            uses=uses
        )
    except pydantic.ValidationError as e:
        raise ValidationError(
            f"Invalid token metadata: {e.errors()[0]['msg']}",
            details={"errors": [err["msg"] for err in e.errors()]}
        )


class MetadataService(BaseService):
    """Service for Metaplex token metadata."""

    def __init__(
        self,
        ledger: LedgerClient,
        storage: StorageClient,
        config: Optional[MinterConfig] = None
    ):
        """
        Initialize the metadata service.

        Args:
            ledger: Ledger client
            storage: Storage client used for the image and metadata document
            config: Workflow configuration
        """
        super().__init__(ledger, config)
        self.storage = storage

    async def get_metadata(self, mint: Pubkey) -> Optional[MetadataAccount]:
        """Read and decode the metadata account of a mint.

        Returns:
            The decoded account, or None if the mint has no metadata
        """
        metadata_address = find_metadata_pda(mint)
        data = await self.ledger.get_account_data(metadata_address)
        if data is None:
            return None
        try:
            return decode_metadata_account(metadata_address, data)
        except ConstructError as e:
            raise ChainRpcError(
                f"Could not decode metadata account {metadata_address}: {e}",
                method="get_metadata"
            )

    async def _upload(self, image: TokenImage, name: str, symbol: str,
                      description: Optional[str]) -> Tuple[str, str]:
        image_uri = await self.storage.upload(image.data, image.filename)
        self.logger.info(f"image uri: {image_uri}")

        document = OffChainMetadata(
            name=name,
            symbol=symbol,
            description=description,
            image=image_uri
        )
        uri = await self.storage.upload_metadata_json(document.to_document())
        self.logger.info(f"metadata uri: {uri}")
        return image_uri, uri

    async def create_metadata(
        self,
        mint: Pubkey,
        user: Keypair,
        name: str,
        symbol: str,
        description: Optional[str],
        file_path: str,
        file_name: Optional[str] = None,
        seller_fee_basis_points: int = 0,
        creators: Optional[List[Creator]] = None,
        collection: Optional[Collection] = None,
        uses: Optional[Uses] = None,
        is_mutable: bool = True
    ) -> MetadataResult:
        """Upload the image and metadata document, then create the metadata account.

        The user signs as mint authority, payer and update authority.

        Raises:
            FileNotFoundError: If the image does not exist; nothing is uploaded
            AlreadyInitializedError: If the mint already has metadata; nothing is uploaded
            StorageUploadError: If an upload fails
            ChainRpcError: If the ledger rejects the transaction
        """
        image = read_image(file_path, file_name)
        # Validate name and symbol before any upload
        build_record(name, symbol, "", seller_fee_basis_points, creators, collection, uses)

        metadata_address = find_metadata_pda(mint)
        if await self.ledger.account_exists(metadata_address):
            raise AlreadyInitializedError(str(mint), str(metadata_address))

        image_uri, uri = await self._upload(image, name, symbol, description)
        record = build_record(name, symbol, uri, seller_fee_basis_points, creators, collection, uses)

        instruction = create_metadata_account_v2(
            metadata=metadata_address,
            mint=mint,
            mint_authority=user.pubkey(),
            payer=user.pubkey(),
            update_authority=user.pubkey(),
            record=record,
            is_mutable=is_mutable
        )
        signature = await self.ledger.send_and_confirm_transaction([instruction], [user])
        self.log_transaction("Create Metadata Account", signature)

        return MetadataResult(
            metadata_address=metadata_address,
            image_uri=image_uri,
            uri=uri,
            signature=signature
        )

    async def update_metadata(
        self,
        mint: Pubkey,
        user: Keypair,
        name: str,
        symbol: str,
        description: Optional[str],
        file_path: str,
        file_name: Optional[str] = None,
        seller_fee_basis_points: int = 0,
        creators: Optional[List[Creator]] = None,
        collection: Optional[Collection] = None,
        uses: Optional[Uses] = None
    ) -> MetadataResult:
        """Upload a new image and metadata document, then update the metadata account.

        The update marks the primary sale as happened, keeps the metadata
        mutable and keeps the user as update authority.

        Raises:
            MetadataNotFoundError: If the mint has no metadata; nothing is uploaded
            AuthorityMismatchError: If the user is not the update authority
            FileNotFoundError: If the image does not exist
            StorageUploadError: If an upload fails
            ChainRpcError: If the ledger rejects the transaction
        """
        existing = await self.get_metadata(mint)
        if existing is None:
            raise MetadataNotFoundError(str(mint), str(find_metadata_pda(mint)))

        if existing.update_authority != user.pubkey():
            raise AuthorityMismatchError(
                str(mint), str(existing.update_authority), str(user.pubkey()),
                role="metadata update authority"
            )

        image = read_image(file_path, file_name)
        build_record(name, symbol, "", seller_fee_basis_points, creators, collection, uses)

        image_uri, uri = await self._upload(image, name, symbol, description)
        record = build_record(name, symbol, uri, seller_fee_basis_points, creators, collection, uses)

        instruction = update_metadata_account_v2(
            metadata=existing.address,
            update_authority=user.pubkey(),
            record=record,
            new_update_authority=user.pubkey(),
            primary_sale_happened=True,
            is_mutable=True
        )
        signature = await self.ledger.send_and_confirm_transaction([instruction], [user])
        self.log_transaction("Update Metadata Account", signature)

        return MetadataResult(
            metadata_address=existing.address,
            image_uri=image_uri,
            uri=uri,
            signature=signature
        )
