"""
Base service class for Solana Minter services.

This module provides a base class for the workflow services, with the
shared ledger client, explorer links and contextual logging.
"""

import logging
from typing import Any, Optional, Union

from solders.pubkey import Pubkey
from solders.signature import Signature

from solana_minter.clients.ledger_client import LedgerClient
from solana_minter.config import MinterConfig, get_minter_config
from solana_minter.logging_config import log_with_context
from solana_minter.utils.explorer import address_url, transaction_url


class BaseService:
    """
    Base service class with common functionality.

    This class provides:
    - Access to the ledger client
    - Explorer links for addresses and transactions
    - Logging with context
    """

    def __init__(
        self,
        ledger: LedgerClient,
        config: Optional[MinterConfig] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the base service.

        Args:
            ledger: Ledger client shared by all steps of a run
            config: Workflow configuration (cluster label, explorer URL)
            logger: Optional logger instance
        """
        self.ledger = ledger
        self.config = config or get_minter_config()
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    def log_with_context(self, level: str, message: str, **context: Any) -> None:
        """Log a message with additional context."""
        log_with_context(self.logger, level, message, **context)

    def log_address(self, label: str, address: Union[str, Pubkey]) -> str:
        """Log an explorer link for an account and return it."""
        url = address_url(address, self.config.cluster, self.config.explorer_url)
        self.logger.info(f"{label}: {url}")
        return url

    def log_transaction(self, label: str, signature: Union[str, Signature]) -> str:
        """Log an explorer link for a transaction and return it."""
        url = transaction_url(signature, self.config.cluster, self.config.explorer_url)
        self.logger.info(f"{label}: {url}")
        return url
