"""Workflow services built on top of the ledger and storage clients."""

from solana_minter.services.token_service import TokenService
from solana_minter.services.metadata_service import MetadataService

__all__ = ["TokenService", "MetadataService"]
