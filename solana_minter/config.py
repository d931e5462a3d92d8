"""Configuration module for Solana Minter."""

# Standard library imports
import os
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any, Callable, Optional

# Third-party library imports
from dotenv import load_dotenv

# Internal imports
from solana_minter.utils.errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()

VALID_COMMITMENTS = ("processed", "confirmed", "finalized")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
AIRDROP_CLUSTERS = ("devnet", "testnet", "localnet")


def get_env_var(key: str, default: Any = None, required: bool = False,
                validator: Optional[Callable[[str], Any]] = None) -> Any:
    """Get and validate environment variable.

    Args:
        key: Environment variable name
        default: Default value if not present
        required: If True, raises ConfigurationError when not found
        validator: Optional validation function

    Returns:
        The environment variable value or default

    Raises:
        ConfigurationError: If required and not found, or fails validation
    """
    value = os.environ.get(key)

    if value is None or value == "":
        if required:
            raise ConfigurationError(
                f"Required environment variable '{key}' not found",
                details={"setting": key}
            )
        return default

    if validator:
        try:
            return validator(value)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for environment variable '{key}': {str(e)}",
                details={"setting": key, "value": value}
            )

    return value


def float_validator(value: str) -> float:
    """Validate and convert string to a positive float."""
    try:
        result = float(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid number")
    if result <= 0:
        raise ValueError(f"'{value}' must be positive")
    return result


def decimal_validator(value: str) -> Decimal:
    """Validate and convert string to Decimal.

    Args:
        value: String value to convert

    Returns:
        Decimal value

    Raises:
        ValueError: If not a valid decimal number
    """
    try:
        return Decimal(value)
    except InvalidOperation:
        raise ValueError(f"'{value}' is not a valid decimal number")


def url_validator(value: str) -> str:
    """Validate URL format.

    Args:
        value: URL to validate

    Returns:
        The validated URL without a trailing slash

    Raises:
        ValueError: If not a valid URL format
    """
    url_pattern = re.compile(
        r'^(https?):\/\/'  # http:// or https://
        r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+(?:[A-Z]{2,6}\.?|[A-Z0-9-]{2,}\.?)|'  # domain
        r'localhost|'  # localhost
        r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'  # or IPv4
        r'(?::\d+)?'  # optional port
        r'(?:/?|[/?]\S+)$', re.IGNORECASE)

    if not url_pattern.match(value):
        raise ValueError(f"'{value}' is not a valid URL")
    return value.rstrip("/")


def commitment_validator(value: str) -> str:
    """Validate Solana commitment level.

    Args:
        value: Commitment level to validate

    Returns:
        The validated commitment level

    Raises:
        ValueError: If not a valid commitment level
    """
    if value.lower() not in VALID_COMMITMENTS:
        raise ValueError(f"Commitment must be one of: {', '.join(VALID_COMMITMENTS)}")
    return value.lower()


def log_level_validator(value: str) -> str:
    """Validate log level.

    Args:
        value: Log level to validate

    Returns:
        The validated log level

    Raises:
        ValueError: If not a valid log level
    """
    upper_value = value.upper()
    if upper_value not in VALID_LOG_LEVELS:
        raise ValueError(f"Log level must be one of: {', '.join(VALID_LOG_LEVELS)}")
    return upper_value


@dataclass
class SolanaConfig:
    """Configuration for the Solana RPC connection."""

    rpc_url: str = "https://api.devnet.solana.com"
    commitment: str = "confirmed"
    timeout: float = 30.0  # seconds

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.commitment not in VALID_COMMITMENTS:
            raise ConfigurationError(
                f"Invalid commitment level: {self.commitment}",
                details={"setting": "commitment", "valid_values": list(VALID_COMMITMENTS)}
            )
        if self.timeout <= 0:
            raise ConfigurationError(
                "RPC timeout must be positive",
                details={"setting": "timeout", "value": self.timeout}
            )


@lru_cache()
def get_solana_config() -> SolanaConfig:
    """Get Solana configuration from environment variables.

    Returns:
        SolanaConfig instance

    Raises:
        ConfigurationError: If environment variables fail validation
    """
    return SolanaConfig(
        rpc_url=get_env_var("SOLANA_RPC_URL", "https://api.devnet.solana.com",
                            validator=url_validator),
        commitment=get_env_var("SOLANA_COMMITMENT", "confirmed",
                               validator=commitment_validator),
        timeout=get_env_var("SOLANA_TIMEOUT", 30.0, validator=float_validator)
    )


@dataclass
class StorageConfig:
    """Configuration for the metadata storage provider.

    The endpoint must accept a multipart ``POST /upload`` and has no
    default; metadata steps refuse to start without it.
    """

    endpoint: Optional[str] = None
    gateway_url: str = "https://arweave.net"
    api_key: Optional[str] = None
    timeout: float = 60.0  # seconds, applies to connect and upload

    @property
    def has_auth(self) -> bool:
        """Check if an API key is configured."""
        return bool(self.api_key)

    def require_endpoint(self) -> str:
        """Get the upload endpoint.

        Raises:
            ConfigurationError: If STORAGE_ENDPOINT is not configured
        """
        if not self.endpoint:
            raise ConfigurationError(
                "STORAGE_ENDPOINT must be set to run metadata steps",
                details={"setting": "STORAGE_ENDPOINT"}
            )
        return self.endpoint


@lru_cache()
def get_storage_config() -> StorageConfig:
    """Get storage configuration from environment variables."""
    return StorageConfig(
        endpoint=get_env_var("STORAGE_ENDPOINT", validator=url_validator),
        gateway_url=get_env_var("STORAGE_GATEWAY_URL", "https://arweave.net",
                                validator=url_validator),
        api_key=get_env_var("STORAGE_API_KEY"),
        timeout=get_env_var("STORAGE_TIMEOUT", 60.0, validator=float_validator)
    )


@dataclass
class MinterConfig:
    """Configuration for the issuance workflow itself."""

    cluster: str = "devnet"
    explorer_url: str = "https://explorer.solana.com"
    keypair_path: Optional[str] = None
    env_file: str = ".env"
    airdrop_threshold_sol: Decimal = Decimal("1")
    log_level: str = "INFO"

    @property
    def airdrop_enabled(self) -> bool:
        """Whether the cluster hands out airdrops for funding the payer."""
        return self.cluster in AIRDROP_CLUSTERS


@lru_cache()
def get_minter_config() -> MinterConfig:
    """Get workflow configuration from environment variables.

    Returns:
        MinterConfig instance
    """
    return MinterConfig(
        cluster=get_env_var("SOLANA_CLUSTER", "devnet"),
        explorer_url=get_env_var("EXPLORER_URL", "https://explorer.solana.com",
                                 validator=url_validator),
        keypair_path=get_env_var("KEYPAIR_PATH"),
        env_file=get_env_var("ENV_FILE", ".env"),
        airdrop_threshold_sol=get_env_var("AIRDROP_THRESHOLD_SOL", Decimal("1"),
                                          validator=decimal_validator),
        log_level=get_env_var("LOG_LEVEL", "INFO", validator=log_level_validator)
    )


@dataclass
class AppConfig:
    """Comprehensive application configuration."""

    solana: SolanaConfig
    storage: StorageConfig
    minter: MinterConfig


def get_app_config() -> AppConfig:
    """Get the comprehensive application configuration."""
    return AppConfig(
        solana=get_solana_config(),
        storage=get_storage_config(),
        minter=get_minter_config()
    )
