"""
Value types shared across the ledger and contract layers.

``Coin`` is the ledger's amount type; the remaining classes decode the bonsai
contract's query responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from .errors import QueryError


@dataclass(frozen=True)
class Coin:
    denom: str
    amount: str

    def __post_init__(self) -> None:
        if not self.denom:
            raise ValueError("Coin denom must not be empty")
        if not str(self.amount).isdigit():
            raise ValueError(f"Coin amount must be a non-negative integer string, got {self.amount!r}")

    @classmethod
    def of(cls, amount: int | str, denom: str) -> "Coin":
        return cls(denom=denom, amount=str(amount))

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Coin":
        return cls(denom=payload["denom"], amount=str(payload["amount"]))

    def to_dict(self) -> dict[str, str]:
        return {"denom": self.denom, "amount": self.amount}


def coins_to_list(coins: Sequence[Coin]) -> list[dict[str, str]]:
    return [coin.to_dict() for coin in coins]


@dataclass(frozen=True)
class Bonsai:
    id: int
    birth_date: int
    price: Coin

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Bonsai":
        return cls(
            id=int(payload["id"]),
            birth_date=int(payload["birth_date"]),
            price=Coin.from_dict(payload["price"]),
        )


@dataclass(frozen=True)
class BonsaiList:
    bonsais: tuple[Bonsai, ...] = ()

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "BonsaiList":
        return cls(bonsais=tuple(Bonsai.from_dict(b) for b in payload.get("bonsais", [])))

    def find(self, bonsai_id: int) -> Bonsai | None:
        for bonsai in self.bonsais:
            if bonsai.id == bonsai_id:
                return bonsai
        return None


@dataclass(frozen=True)
class Gardener:
    name: str
    address: str
    bonsais: tuple[Bonsai, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Gardener":
        return cls(
            name=payload["name"],
            address=payload["address"],
            bonsais=tuple(Bonsai.from_dict(b) for b in payload.get("bonsais", [])),
        )


@dataclass(frozen=True)
class AllGardenersResponse:
    gardeners: tuple[Gardener, ...] = ()

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "AllGardenersResponse":
        return cls(gardeners=tuple(Gardener.from_dict(g) for g in payload.get("gardeners", [])))


def decode_response(kind: type, payload: Any, contract_address: str = ""):
    """Decode a query response into ``kind``, mapping shape mismatches to QueryError."""
    if not isinstance(payload, dict):
        raise QueryError(
            f"Unexpected {kind.__name__} response: {payload!r}",
            contract_address=contract_address,
        )
    try:
        return kind.from_dict(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise QueryError(
            f"Malformed {kind.__name__} response: {exc}",
            contract_address=contract_address,
        ) from exc


__all__ = [
    "AllGardenersResponse",
    "Bonsai",
    "BonsaiList",
    "Coin",
    "Gardener",
    "coins_to_list",
    "decode_response",
]
