"""Payer keypair loading and funding.

The payer is read from the ``PRIVATE_KEY`` environment variable (a JSON
byte array or a base58 string) or from a Solana CLI keypair file. When
neither is configured a new keypair is generated and written to the
``.env`` file so later runs reuse it.
"""

import json
import os
from decimal import Decimal
from pathlib import Path
from typing import Optional

import base58
from dotenv import set_key
from solders.keypair import Keypair

from solana_minter.clients.ledger_client import LedgerClient
from solana_minter.config import MinterConfig, get_minter_config
from solana_minter.constants import LAMPORTS_PER_SOL
from solana_minter.logging_config import get_logger
from solana_minter.utils.errors import ConfigurationError
from solana_minter.utils.explorer import transaction_url

logger = get_logger(__name__)

PRIVATE_KEY_ENV = "PRIVATE_KEY"


def keypair_from_secret(secret: str) -> Keypair:
    """Parse a secret key given as a JSON byte array or a base58 string.

    Raises:
        ConfigurationError: If the secret cannot be parsed
    """
    secret = secret.strip()
    try:
        if secret.startswith("["):
            raw = bytes(json.loads(secret))
        else:
            raw = base58.b58decode(secret)
        return Keypair.from_bytes(raw)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(
            f"Invalid secret key: {e}",
            details={"setting": PRIVATE_KEY_ENV}
        )


def load_keypair_file(path: str) -> Keypair:
    """Load a keypair from a Solana CLI JSON keypair file."""
    keypair_path = Path(path).expanduser()
    if not keypair_path.is_file():
        raise ConfigurationError(
            f"Keypair file not found: {keypair_path}",
            details={"setting": "KEYPAIR_PATH"}
        )
    return keypair_from_secret(keypair_path.read_text())


def load_or_create_keypair(config: Optional[MinterConfig] = None) -> Keypair:
    """Load the payer keypair, creating and persisting one if none is configured.

    Args:
        config: Workflow configuration. Defaults to environment-based config.

    Returns:
        The payer keypair
    """
    config = config or get_minter_config()

    secret = os.environ.get(PRIVATE_KEY_ENV)
    if secret:
        return keypair_from_secret(secret)

    if config.keypair_path:
        return load_keypair_file(config.keypair_path)

    keypair = Keypair()
    serialized = json.dumps(list(bytes(keypair)))
    Path(config.env_file).touch(exist_ok=True)
    set_key(config.env_file, PRIVATE_KEY_ENV, serialized)
    os.environ[PRIVATE_KEY_ENV] = serialized
    logger.info(f"Generated new keypair {keypair.pubkey()} and saved it to {config.env_file}")
    return keypair


async def airdrop_if_required(
    ledger: LedgerClient,
    keypair: Keypair,
    config: Optional[MinterConfig] = None
) -> Optional[str]:
    """Top up the payer on clusters that hand out airdrops.

    Returns:
        The airdrop signature, or None if no airdrop was needed or possible
    """
    config = config or get_minter_config()
    if not config.airdrop_enabled:
        return None

    threshold = int(config.airdrop_threshold_sol * LAMPORTS_PER_SOL)
    balance = await ledger.get_balance(keypair.pubkey())
    logger.info(f"Current balance is {Decimal(balance) / LAMPORTS_PER_SOL} SOL")
    if balance >= threshold:
        return None

    logger.info("Airdropping 1 SOL...")
    signature = await ledger.request_airdrop(keypair.pubkey(), LAMPORTS_PER_SOL)
    new_balance = await ledger.get_balance(keypair.pubkey())
    logger.info(f"New balance is {Decimal(new_balance) / LAMPORTS_PER_SOL} SOL")
    logger.info(f"Airdrop Transaction: {transaction_url(signature, config.cluster, config.explorer_url)}")
    return str(signature)


async def initialize_keypair(ledger: LedgerClient, config: Optional[MinterConfig] = None) -> Keypair:
    """Load or create the payer keypair and make sure it is funded."""
    keypair = load_or_create_keypair(config)
    await airdrop_if_required(ledger, keypair, config)
    return keypair
