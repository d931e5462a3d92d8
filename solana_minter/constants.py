"""Constants used throughout the Solana Minter application.

This module defines program IDs and protocol limits in one place.
"""

from solders.pubkey import Pubkey

# Solana program IDs
SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
SYSVAR_RENT_ID = Pubkey.from_string("SysvarRent111111111111111111111111111111111")
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
METADATA_PROGRAM_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")

# Metaplex Token Metadata limits
MAX_NAME_LENGTH = 32
MAX_SYMBOL_LENGTH = 10
MAX_URI_LENGTH = 200
MAX_CREATOR_LIMIT = 5
MAX_SELLER_FEE_BASIS_POINTS = 10_000

# Metaplex Token Metadata instruction discriminators
UPDATE_METADATA_ACCOUNT_V2 = 15
CREATE_METADATA_ACCOUNT_V2 = 16

LAMPORTS_PER_SOL = 1_000_000_000

# SPL Token stores decimals as a u8 and amounts as a u64
MAX_DECIMALS = 255
MAX_TOKEN_AMOUNT = 2 ** 64 - 1

# Content type for uploaded metadata documents
METADATA_CONTENT_TYPE = "application/json"
