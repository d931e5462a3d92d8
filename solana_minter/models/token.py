"""
Token data models for Solana Minter.

This module defines Pydantic models for the mint descriptor and for the
Metaplex metadata record attached to a mint.
"""

from enum import IntEnum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from solders.pubkey import Pubkey

from solana_minter.constants import (
    MAX_CREATOR_LIMIT,
    MAX_NAME_LENGTH,
    MAX_SELLER_FEE_BASIS_POINTS,
    MAX_SYMBOL_LENGTH,
    MAX_URI_LENGTH,
)


class TokenDescriptor(BaseModel):
    """
    Model for a mint and the properties read back from the ledger.

    ``decimals`` is fixed when the mint is created; it is always read from
    the ledger rather than assumed.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    mint: Pubkey
    decimals: int = Field(ge=0)
    mint_authority: Optional[Pubkey] = None
    freeze_authority: Optional[Pubkey] = None
    supply: int = 0


class Creator(BaseModel):
    """A verified or unverified creator share on a metadata record."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    address: Pubkey
    verified: bool = False
    share: int = Field(ge=0, le=100)


class Collection(BaseModel):
    """Collection membership of a metadata record."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: Pubkey
    verified: bool = False


class UseMethod(IntEnum):
    """How a token's uses are consumed."""
    BURN = 0
    MULTIPLE = 1
    SINGLE = 2


class Uses(BaseModel):
    use_method: UseMethod
    remaining: int = Field(ge=0)
    total: int = Field(ge=0)


def _byte_length(value: str) -> int:
    return len(value.encode("utf-8"))


class MetadataRecord(BaseModel):
    """
    Model for the on-chain portion of token metadata (Metaplex ``DataV2``).

    A record is built fresh for every create or update; it is never
    mutated after submission.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    symbol: str
    uri: str
    seller_fee_basis_points: int = Field(default=0, ge=0, le=MAX_SELLER_FEE_BASIS_POINTS)
    creators: Optional[List[Creator]] = None
    collection: Optional[Collection] = None
    uses: Optional[Uses] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        if _byte_length(value) > MAX_NAME_LENGTH:
            raise ValueError(f"name must be at most {MAX_NAME_LENGTH} bytes")
        return value

    @field_validator("symbol")
    @classmethod
    def check_symbol(cls, value: str) -> str:
        if _byte_length(value) > MAX_SYMBOL_LENGTH:
            raise ValueError(f"symbol must be at most {MAX_SYMBOL_LENGTH} bytes")
        return value

    @field_validator("uri")
    @classmethod
    def check_uri(cls, value: str) -> str:
        if _byte_length(value) > MAX_URI_LENGTH:
            raise ValueError(f"uri must be at most {MAX_URI_LENGTH} bytes")
        return value

    @model_validator(mode="after")
    def check_creators(self) -> "MetadataRecord":
        if self.creators is not None:
            if len(self.creators) > MAX_CREATOR_LIMIT:
                raise ValueError(f"at most {MAX_CREATOR_LIMIT} creators are allowed")
            if self.creators and sum(c.share for c in self.creators) != 100:
                raise ValueError("creator shares must add up to 100")
        return self


class OffChainMetadata(BaseModel):
    """
    Model for the JSON document uploaded to storage.

    Its URI becomes ``MetadataRecord.uri``.
    """
    name: str
    symbol: Optional[str] = None
    description: Optional[str] = None
    image: str

    def to_document(self) -> Dict[str, Any]:
        """Get the JSON-serializable document, omitting unset fields."""
        return self.model_dump(exclude_none=True)


class MetadataAccount(BaseModel):
    """Fields decoded from an existing on-chain metadata account."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    address: Pubkey
    update_authority: Pubkey
    mint: Pubkey
    name: str
    symbol: str
    uri: str
    seller_fee_basis_points: int
    primary_sale_happened: bool
    is_mutable: bool
