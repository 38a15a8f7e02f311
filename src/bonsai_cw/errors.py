"""
Error taxonomy for the bonsai client helpers.

Every failure surfaces to the caller as a distinct exception type; none of
them are retried internally.  ``exit_code`` lets a shell wrapper map a
failure to a process status without inspecting the message.
"""

from __future__ import annotations

from typing import Optional


class BonsaiError(RuntimeError):
    exit_code: int = 1


class StorageError(BonsaiError):
    """Key file is unreadable, structurally corrupt, or could not be written."""

    exit_code = 2


class AuthenticationError(BonsaiError):
    """Key file decrypted with the wrong password."""

    exit_code = 3


class DownloadError(BonsaiError):
    exit_code = 4

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransactionError(BonsaiError):
    """The ledger rejected a signed transaction.

    ``raw_log`` holds the ledger's own error text (insufficient funds,
    contract revert reason, ...) unchanged.
    """

    exit_code = 5

    def __init__(
        self,
        message: str,
        raw_log: str = "",
        code: Optional[int] = None,
        tx_hash: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.raw_log = raw_log
        self.code = code
        self.tx_hash = tx_hash


class UploadError(TransactionError):
    exit_code = 6


class InstantiateError(TransactionError):
    exit_code = 7


class QueryError(BonsaiError):
    exit_code = 8

    def __init__(self, message: str, contract_address: str = "", raw_error: str = "") -> None:
        super().__init__(message)
        self.contract_address = contract_address
        self.raw_error = raw_error


class FaucetError(BonsaiError):
    """Faucet credit failed.  Callers treat this as non-fatal."""

    exit_code = 9

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MessageError(ValueError):
    """A domain message could not be constructed or parsed."""


class ConfigError(ValueError):
    """A network profile or override is invalid."""


__all__ = [
    "AuthenticationError",
    "BonsaiError",
    "ConfigError",
    "DownloadError",
    "FaucetError",
    "InstantiateError",
    "MessageError",
    "QueryError",
    "StorageError",
    "TransactionError",
    "UploadError",
]
