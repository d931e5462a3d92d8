"""
Error handling utilities for Solana Minter.

This module defines the exception hierarchy raised by the workflow steps
and the clients they delegate to.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Error codes for the Solana Minter workflow."""

    # General errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Ledger errors
    RPC_ERROR = "RPC_ERROR"
    AUTHORITY_MISMATCH = "AUTHORITY_MISMATCH"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"

    # Metadata errors
    ALREADY_INITIALIZED = "ALREADY_INITIALIZED"
    METADATA_NOT_FOUND = "METADATA_NOT_FOUND"

    # Storage errors
    STORAGE_UPLOAD_ERROR = "STORAGE_UPLOAD_ERROR"

    # Workflow errors
    STEP_ORDER_ERROR = "STEP_ORDER_ERROR"


class SolanaMinterError(Exception):
    """Base exception for all Solana Minter errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize a new Solana Minter error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
        """
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the error to a dictionary.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details
        }


class ValidationError(SolanaMinterError):
    """Exception for invalid caller input."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            details=details
        )


class InvalidAmountError(ValidationError):
    """Exception raised when a token amount is zero, negative or too precise."""

    def __init__(self, amount: Any, reason: str = "amount must be greater than zero"):
        super().__init__(
            f"Invalid token amount {amount}: {reason}",
            details={"amount": str(amount)}
        )
        self.amount = amount


class InvalidPublicKeyError(ValidationError):
    """Exception raised when an invalid public key is provided."""

    def __init__(self, pubkey: str):
        super().__init__(
            f"Invalid public key: {pubkey}",
            details={"pubkey": pubkey}
        )
        self.pubkey = pubkey


class ConfigurationError(SolanaMinterError):
    """Exception for invalid or missing configuration."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.CONFIGURATION_ERROR,
            details=details
        )


class ChainRpcError(SolanaMinterError):
    """Exception for network or validation failures reported by the ledger."""

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        rpc_error: Optional[Any] = None
    ):
        details: Dict[str, Any] = {}
        if method:
            details["method"] = method
        if rpc_error is not None:
            details["rpc_error"] = str(rpc_error)

        super().__init__(
            message=message,
            code=ErrorCode.RPC_ERROR,
            details=details
        )


class AuthorityMismatchError(SolanaMinterError):
    """Exception raised when a signer is not the required authority."""

    def __init__(self, mint: str, expected: Optional[str], actual: str,
                 role: str = "mint authority"):
        super().__init__(
            f"Signer {actual} is not the {role} of {mint} (authority: {expected})",
            code=ErrorCode.AUTHORITY_MISMATCH,
            details={"mint": mint, "expected": expected, "actual": actual, "role": role}
        )


class InsufficientBalanceError(SolanaMinterError):
    """Exception raised when a token account cannot cover a transfer."""

    def __init__(self, account: str, balance: int, required: int):
        super().__init__(
            f"Token account {account} holds {balance} base units, {required} required",
            code=ErrorCode.INSUFFICIENT_BALANCE,
            details={"account": account, "balance": balance, "required": required}
        )
        self.balance = balance
        self.required = required


class AlreadyInitializedError(SolanaMinterError):
    """Exception raised when creating metadata for a mint that already has it."""

    def __init__(self, mint: str, metadata_address: str):
        super().__init__(
            f"Metadata account {metadata_address} already exists for mint {mint}",
            code=ErrorCode.ALREADY_INITIALIZED,
            details={"mint": mint, "metadata_address": metadata_address}
        )


class MetadataNotFoundError(SolanaMinterError):
    """Exception raised when updating metadata that was never created."""

    def __init__(self, mint: str, metadata_address: str):
        super().__init__(
            f"No metadata account {metadata_address} exists for mint {mint}",
            code=ErrorCode.METADATA_NOT_FOUND,
            details={"mint": mint, "metadata_address": metadata_address}
        )


class StorageUploadError(SolanaMinterError):
    """Exception for failed uploads to the storage provider."""

    def __init__(
        self,
        message: str,
        filename: Optional[str] = None,
        status_code: Optional[int] = None
    ):
        details: Dict[str, Any] = {}
        if filename:
            details["filename"] = filename
        if status_code is not None:
            details["status_code"] = status_code

        super().__init__(
            message=message,
            code=ErrorCode.STORAGE_UPLOAD_ERROR,
            details=details
        )


class StepOrderError(SolanaMinterError):
    """Exception raised when a workflow step runs before its prerequisites."""

    def __init__(self, step: str, missing: str):
        super().__init__(
            f"Step '{step}' requires {missing}; select the step that provides it or pass it explicitly",
            code=ErrorCode.STEP_ORDER_ERROR,
            details={"step": step, "missing": missing}
        )
        self.step = step
        self.missing = missing
