"""Contract - bonsai domain messages, factory and instance handle."""

from .factory import DEFAULT_BUILDER, ContractFactory, download_wasm
from .instance import ContractInstance
from .messages import (
    BankSend,
    BecomeGardener,
    BuyBonsai,
    CosmosMsg,
    CutBonsai,
    GetBonsais,
    GetGardener,
    GetGardeners,
    HandleMsg,
    InitMsg,
    QueryMsg,
    SellBonsai,
    StakingDelegate,
    StakingRedelegate,
    StakingUndelegate,
    StakingWithdraw,
    cosmos_msg_from_wire,
    handle_from_wire,
    query_from_wire,
)

__all__ = [
    "DEFAULT_BUILDER",
    "BankSend",
    "BecomeGardener",
    "BuyBonsai",
    "ContractFactory",
    "ContractInstance",
    "CosmosMsg",
    "CutBonsai",
    "GetBonsais",
    "GetGardener",
    "GetGardeners",
    "HandleMsg",
    "InitMsg",
    "QueryMsg",
    "SellBonsai",
    "StakingDelegate",
    "StakingRedelegate",
    "StakingUndelegate",
    "StakingWithdraw",
    "cosmos_msg_from_wire",
    "download_wasm",
    "handle_from_wire",
    "query_from_wire",
]
