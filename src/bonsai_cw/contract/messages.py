"""
Domain messages.

Every message is a frozen dataclass with a fixed ``tag``; ``to_wire`` renders
the single-key JSON object the contract (or ledger) expects.  The set of
variants is closed: parsing an unknown tag, or building a variant with
missing fields, raises ``MessageError`` before anything reaches the network.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional

from ..errors import MessageError
from ..models import Coin


def _require(value: Any, name: str) -> str:
    if isinstance(value, bool) or value is None:
        raise MessageError(f"{name} is required")
    text = str(value)
    if not text:
        raise MessageError(f"{name} must not be empty")
    return text


def _single_key(payload: Any) -> tuple[str, dict[str, Any]]:
    if not isinstance(payload, dict) or len(payload) != 1:
        raise MessageError(f"Message must be an object with exactly one key, got {payload!r}")
    ((tag, body),) = payload.items()
    if not isinstance(body, dict):
        raise MessageError(f"Body of {tag!r} must be an object")
    return tag, body


# ============ Contract queries ============


@dataclass(frozen=True)
class QueryMsg:
    tag: ClassVar[str] = ""

    def body(self) -> dict[str, Any]:
        return {}

    def to_wire(self) -> dict[str, Any]:
        return {self.tag: self.body()}


@dataclass(frozen=True)
class GetBonsais(QueryMsg):
    tag: ClassVar[str] = "get_bonsais"


@dataclass(frozen=True)
class GetGardener(QueryMsg):
    tag: ClassVar[str] = "get_gardener"
    sender: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "sender", _require(self.sender, "sender"))

    def body(self) -> dict[str, Any]:
        return {"sender": self.sender}


@dataclass(frozen=True)
class GetGardeners(QueryMsg):
    tag: ClassVar[str] = "get_gardeners"


# ============ Contract actions ============


@dataclass(frozen=True)
class HandleMsg:
    tag: ClassVar[str] = ""

    def body(self) -> dict[str, Any]:
        return {}

    def to_wire(self) -> dict[str, Any]:
        return {self.tag: self.body()}


@dataclass(frozen=True)
class BecomeGardener(HandleMsg):
    tag: ClassVar[str] = "become_gardener"
    name: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", _require(self.name, "name"))

    def body(self) -> dict[str, Any]:
        return {"name": self.name}


@dataclass(frozen=True)
class BuyBonsai(HandleMsg):
    tag: ClassVar[str] = "buy_bonsai"
    b_id: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "b_id", _require(self.b_id, "b_id"))

    def body(self) -> dict[str, Any]:
        return {"b_id": self.b_id}


@dataclass(frozen=True)
class SellBonsai(HandleMsg):
    tag: ClassVar[str] = "sell_bonsai"
    recipient: str
    b_id: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "recipient", _require(self.recipient, "recipient"))
        object.__setattr__(self, "b_id", _require(self.b_id, "b_id"))

    def body(self) -> dict[str, Any]:
        return {"b_id": self.b_id, "recipient": self.recipient}


@dataclass(frozen=True)
class CutBonsai(HandleMsg):
    tag: ClassVar[str] = "cut_bonsai"
    b_id: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "b_id", _require(self.b_id, "b_id"))

    def body(self) -> dict[str, Any]:
        return {"b_id": self.b_id}


@dataclass(frozen=True)
class InitMsg:
    price: Coin
    number: int

    def __post_init__(self) -> None:
        if not isinstance(self.price, Coin):
            raise MessageError("price must be a Coin")
        if isinstance(self.number, bool) or not isinstance(self.number, int) or self.number < 0:
            raise MessageError(f"number must be a non-negative integer, got {self.number!r}")

    def to_wire(self) -> dict[str, Any]:
        return {"price": self.price.to_dict(), "number": self.number}


# ============ Ledger-level messages (CosmosMsg) ============


@dataclass(frozen=True)
class CosmosMsg:
    module: ClassVar[str] = ""
    tag: ClassVar[str] = ""

    def body(self) -> dict[str, Any]:
        return {}

    def to_wire(self) -> dict[str, Any]:
        return {self.module: {self.tag: self.body()}}


@dataclass(frozen=True)
class BankSend(CosmosMsg):
    module: ClassVar[str] = "bank"
    tag: ClassVar[str] = "send"
    from_address: str
    to_address: str
    amount: tuple[Coin, ...] = ()

    def __post_init__(self) -> None:
        _require(self.from_address, "from_address")
        _require(self.to_address, "to_address")
        object.__setattr__(self, "amount", tuple(self.amount))

    def body(self) -> dict[str, Any]:
        return {
            "from_address": self.from_address,
            "to_address": self.to_address,
            "amount": [coin.to_dict() for coin in self.amount],
        }


@dataclass(frozen=True)
class StakingDelegate(CosmosMsg):
    module: ClassVar[str] = "staking"
    tag: ClassVar[str] = "delegate"
    validator: str
    amount: Coin

    def __post_init__(self) -> None:
        _require(self.validator, "validator")

    def body(self) -> dict[str, Any]:
        return {"validator": self.validator, "amount": self.amount.to_dict()}


@dataclass(frozen=True)
class StakingUndelegate(StakingDelegate):
    tag: ClassVar[str] = "undelegate"


@dataclass(frozen=True)
class StakingRedelegate(CosmosMsg):
    module: ClassVar[str] = "staking"
    tag: ClassVar[str] = "redelegate"
    src_validator: str
    dst_validator: str
    amount: Coin

    def __post_init__(self) -> None:
        _require(self.src_validator, "src_validator")
        _require(self.dst_validator, "dst_validator")

    def body(self) -> dict[str, Any]:
        return {
            "src_validator": self.src_validator,
            "dst_validator": self.dst_validator,
            "amount": self.amount.to_dict(),
        }


@dataclass(frozen=True)
class StakingWithdraw(CosmosMsg):
    module: ClassVar[str] = "staking"
    tag: ClassVar[str] = "withdraw"
    validator: str
    recipient: Optional[str] = field(default=None)

    def __post_init__(self) -> None:
        _require(self.validator, "validator")

    def body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"validator": self.validator}
        if self.recipient:
            body["recipient"] = self.recipient
        return body


# ============ Parsing ============

_QUERIES: dict[str, type[QueryMsg]] = {cls.tag: cls for cls in (GetBonsais, GetGardener, GetGardeners)}
_HANDLES: dict[str, type[HandleMsg]] = {
    cls.tag: cls for cls in (BecomeGardener, BuyBonsai, SellBonsai, CutBonsai)
}
_COSMOS: dict[tuple[str, str], type[CosmosMsg]] = {
    (cls.module, cls.tag): cls
    for cls in (BankSend, StakingDelegate, StakingUndelegate, StakingRedelegate, StakingWithdraw)
}


def _build(cls: type, body: dict[str, Any]):
    try:
        return cls(**body)
    except TypeError as exc:
        raise MessageError(f"Invalid fields for {cls.__name__}: {exc}") from exc


def query_from_wire(payload: Any) -> QueryMsg:
    tag, body = _single_key(payload)
    if tag not in _QUERIES:
        raise MessageError(f"Unknown query variant: {tag!r}")
    return _build(_QUERIES[tag], body)


def handle_from_wire(payload: Any) -> HandleMsg:
    tag, body = _single_key(payload)
    if tag not in _HANDLES:
        raise MessageError(f"Unknown action variant: {tag!r}")
    return _build(_HANDLES[tag], body)


def cosmos_msg_from_wire(payload: Any) -> CosmosMsg:
    module, inner = _single_key(payload)
    tag, body = _single_key(inner)
    cls = _COSMOS.get((module, tag))
    if cls is None:
        raise MessageError(f"Unknown ledger message variant: {module}.{tag}")
    body = dict(body)
    try:
        if "amount" in body:
            if cls is BankSend:
                body["amount"] = tuple(Coin.from_dict(c) for c in body["amount"])
            else:
                body["amount"] = Coin.from_dict(body["amount"])
    except (KeyError, TypeError, ValueError) as exc:
        raise MessageError(f"Invalid amount for {module}.{tag}: {exc}") from exc
    return _build(cls, body)
