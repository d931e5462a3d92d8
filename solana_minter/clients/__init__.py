"""Clients for the external collaborators used by the workflow.

This package provides the ledger RPC client and the metadata storage client.
"""

from solana_minter.clients.ledger_client import LedgerClient
from solana_minter.clients.storage_client import StorageClient

__all__ = ["LedgerClient", "StorageClient"]
