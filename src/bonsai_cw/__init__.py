__all__ = [
    # Configuration
    "GasLimits",
    "NetworkOptions",
    "get_options",
    "load_options",
    # Errors
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
    # Models
    "AllGardenersResponse",
    "Bonsai",
    "BonsaiList",
    "Coin",
    "Gardener",
    # Wallet
    "KeyStore",
    "SigningIdentity",
    # Ledger
    "ExecuteRequest",
    "FaucetClient",
    "FeeTable",
    "GasPriceSchedule",
    "InstantiateRequest",
    "LcdClient",
    "LedgerSession",
    "TxResult",
    "UploadMeta",
    "build_fee_model",
    "build_fee_table",
    # Contract
    "ContractFactory",
    "ContractInstance",
    "InitMsg",
    # Bootstrap
    "Network",
    "use_options",
    # Logging
    "configure_logging",
]

from .config import GasLimits, NetworkOptions, get_options, load_options
from .errors import (
    AuthenticationError,
    BonsaiError,
    ConfigError,
    DownloadError,
    FaucetError,
    InstantiateError,
    MessageError,
    QueryError,
    StorageError,
    TransactionError,
    UploadError,
)
from .models import AllGardenersResponse, Bonsai, BonsaiList, Coin, Gardener
from .wallet import KeyStore, SigningIdentity
from .ledger import (
    ExecuteRequest,
    FaucetClient,
    FeeTable,
    GasPriceSchedule,
    InstantiateRequest,
    LcdClient,
    LedgerSession,
    TxResult,
    UploadMeta,
    build_fee_model,
    build_fee_table,
)
from .contract import ContractFactory, ContractInstance, InitMsg
from .network import Network, use_options
from .logging import configure_logging
