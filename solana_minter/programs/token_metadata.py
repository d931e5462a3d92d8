"""Metaplex Token Metadata program: layouts, PDA derivation and instruction builders.

Only the instructions the issuance workflow submits are covered:
``CreateMetadataAccountV2`` and ``UpdateMetadataAccountV2``.
"""

from typing import Any, Dict, Optional

from borsh_construct import Bool, CStruct, Option, String, U8, U16, U64, Vec
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from solana_minter.constants import (
    CREATE_METADATA_ACCOUNT_V2,
    METADATA_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    SYSVAR_RENT_ID,
    UPDATE_METADATA_ACCOUNT_V2,
)
from solana_minter.models.token import MetadataAccount, MetadataRecord

METADATA_SEED = b"metadata"

PubkeyLayout = U8[32]

CreatorLayout = CStruct(
    "address" / PubkeyLayout,
    "verified" / Bool,
    "share" / U8,
)

CollectionLayout = CStruct(
    "verified" / Bool,
    "key" / PubkeyLayout,
)

# UseMethod is a fieldless enum, serialized as its u8 variant index
UsesLayout = CStruct(
    "use_method" / U8,
    "remaining" / U64,
    "total" / U64,
)

DataV2Layout = CStruct(
    "name" / String,
    "symbol" / String,
    "uri" / String,
    "seller_fee_basis_points" / U16,
    "creators" / Option(Vec(CreatorLayout)),
    "collection" / Option(CollectionLayout),
    "uses" / Option(UsesLayout),
)

CreateMetadataAccountArgsV2Layout = CStruct(
    "instruction" / U8,
    "data" / DataV2Layout,
    "is_mutable" / Bool,
)

UpdateMetadataAccountArgsV2Layout = CStruct(
    "instruction" / U8,
    "data" / Option(DataV2Layout),
    "update_authority" / Option(PubkeyLayout),
    "primary_sale_happened" / Option(Bool),
    "is_mutable" / Option(Bool),
)

# Leading fields of the on-chain Metadata account; trailing fields are ignored
MetadataAccountLayout = CStruct(
    "key" / U8,
    "update_authority" / PubkeyLayout,
    "mint" / PubkeyLayout,
    "name" / String,
    "symbol" / String,
    "uri" / String,
    "seller_fee_basis_points" / U16,
    "creators" / Option(Vec(CreatorLayout)),
    "primary_sale_happened" / Bool,
    "is_mutable" / Bool,
)


def find_metadata_pda(mint: Pubkey, program_id: Pubkey = METADATA_PROGRAM_ID) -> Pubkey:
    """Derive the metadata account address for a mint."""
    return Pubkey.find_program_address(
        [METADATA_SEED, bytes(program_id), bytes(mint)], program_id
    )[0]


def _pubkey_bytes(pubkey: Pubkey) -> list:
    return list(bytes(pubkey))


def encode_data_v2(record: MetadataRecord) -> Dict[str, Any]:
    """Convert a MetadataRecord into the container expected by DataV2Layout."""
    creators = None
    if record.creators is not None:
        creators = [
            {
                "address": _pubkey_bytes(creator.address),
                "verified": creator.verified,
                "share": creator.share,
            }
            for creator in record.creators
        ]

    collection = None
    if record.collection is not None:
        collection = {
            "verified": record.collection.verified,
            "key": _pubkey_bytes(record.collection.key),
        }

    uses = None
    if record.uses is not None:
        uses = {
            "use_method": int(record.uses.use_method),
            "remaining": record.uses.remaining,
            "total": record.uses.total,
        }

    return {
        "name": record.name,
        "symbol": record.symbol,
        "uri": record.uri,
        "seller_fee_basis_points": record.seller_fee_basis_points,
        "creators": creators,
        "collection": collection,
        "uses": uses,
    }


def create_metadata_account_v2(
    metadata: Pubkey,
    mint: Pubkey,
    mint_authority: Pubkey,
    payer: Pubkey,
    update_authority: Pubkey,
    record: MetadataRecord,
    is_mutable: bool = True,
    program_id: Pubkey = METADATA_PROGRAM_ID,
) -> Instruction:
    """Build a ``CreateMetadataAccountV2`` instruction.

    Args:
        metadata: Metadata PDA of the mint
        mint: Mint the metadata describes
        mint_authority: Current mint authority (signer)
        payer: Fee payer for the new account (signer)
        update_authority: Authority allowed to update the metadata later
        record: The on-chain metadata fields
        is_mutable: Whether the metadata may be updated later
        program_id: Token Metadata program ID

    Returns:
        The instruction, ready to be added to a transaction
    """
    data = CreateMetadataAccountArgsV2Layout.build(
        {
            "instruction": CREATE_METADATA_ACCOUNT_V2,
            "data": encode_data_v2(record),
            "is_mutable": is_mutable,
        }
    )
    accounts = [
        AccountMeta(metadata, is_signer=False, is_writable=True),
        AccountMeta(mint, is_signer=False, is_writable=False),
        AccountMeta(mint_authority, is_signer=True, is_writable=False),
        AccountMeta(payer, is_signer=True, is_writable=True),
        AccountMeta(update_authority, is_signer=False, is_writable=False),
        AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(SYSVAR_RENT_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id, data, accounts)


def update_metadata_account_v2(
    metadata: Pubkey,
    update_authority: Pubkey,
    record: Optional[MetadataRecord] = None,
    new_update_authority: Optional[Pubkey] = None,
    primary_sale_happened: Optional[bool] = None,
    is_mutable: Optional[bool] = None,
    program_id: Pubkey = METADATA_PROGRAM_ID,
) -> Instruction:
    """Build an ``UpdateMetadataAccountV2`` instruction.

    Every argument left as None keeps the on-chain value unchanged.
    """
    data = UpdateMetadataAccountArgsV2Layout.build(
        {
            "instruction": UPDATE_METADATA_ACCOUNT_V2,
            "data": encode_data_v2(record) if record is not None else None,
            "update_authority": (
                _pubkey_bytes(new_update_authority) if new_update_authority is not None else None
            ),
            "primary_sale_happened": primary_sale_happened,
            "is_mutable": is_mutable,
        }
    )
    accounts = [
        AccountMeta(metadata, is_signer=False, is_writable=True),
        AccountMeta(update_authority, is_signer=True, is_writable=False),
    ]
    return Instruction(program_id, data, accounts)


def decode_metadata_account(address: Pubkey, data: bytes) -> MetadataAccount:
    """Decode the leading fields of an on-chain metadata account.

    Name, symbol and uri are stored null-padded to their maximum length.
    """
    parsed = MetadataAccountLayout.parse(data)
    return MetadataAccount(
        address=address,
        update_authority=Pubkey.from_bytes(bytes(parsed.update_authority)),
        mint=Pubkey.from_bytes(bytes(parsed.mint)),
        name=parsed.name.rstrip("\x00"),
        symbol=parsed.symbol.rstrip("\x00"),
        uri=parsed.uri.rstrip("\x00"),
        seller_fee_basis_points=parsed.seller_fee_basis_points,
        primary_sale_happened=parsed.primary_sale_happened,
        is_mutable=parsed.is_mutable,
    )
