"""Solana Minter Package.

This package drives the Solana RPC, SPL Token and Metaplex Token Metadata
programs through a token-issuance workflow: create a mint, create token
accounts, mint supply, attach or update metadata, and transfer balances.
"""

__version__ = "0.1.0"
__author__ = "Solana Minter Contributors"
__email__ = "dev@solana-minter.local"
