"""
Ledger - fee model, LCD transport, transaction signing and the session
that ties a signing identity to a network.

Uses httpx for HTTP and rfc8785 for canonical sign documents.
"""

from .faucet import FaucetClient
from .fees import FeeModel, FeeTable, GasPrice, GasPriceSchedule, StdFee, build_fee_model, build_fee_table
from .lcd import LcdClient, LedgerClient
from .session import (
    AccountInfo,
    ExecuteRequest,
    InstantiateRequest,
    InstantiateResult,
    LedgerSession,
    TxResult,
    UploadMeta,
    UploadResult,
)

__all__ = [
    "AccountInfo",
    "ExecuteRequest",
    "FaucetClient",
    "FeeModel",
    "FeeTable",
    "GasPrice",
    "GasPriceSchedule",
    "InstantiateRequest",
    "InstantiateResult",
    "LcdClient",
    "LedgerClient",
    "LedgerSession",
    "StdFee",
    "TxResult",
    "UploadMeta",
    "UploadResult",
    "build_fee_model",
    "build_fee_table",
]
