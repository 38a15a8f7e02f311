"""
Fee model.

Two conventions exist across the supported ledgers and both sit behind the
same ``fee_for(category)`` interface:

- ``FeeTable``: fees precomputed per category as floor(gas_limit * gas_price).
- ``GasPriceSchedule``: a shared gas price plus per-category gas limits; the
  fee is resolved when a transaction is submitted, rounding up.

Which one a session uses is a property of the network profile.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Mapping, Union

from ..config import FEE_CATEGORIES, GasLimits, NetworkOptions
from ..errors import ConfigError
from ..models import Coin, coins_to_list

_GAS_PRICE_RE = re.compile(r"(\d+(?:\.\d+)?)([a-zA-Z][a-zA-Z0-9/:._-]{2,127})")


@dataclass(frozen=True)
class StdFee:
    amount: tuple[Coin, ...]
    gas: int

    def to_dict(self) -> dict:
        return {"amount": coins_to_list(self.amount), "gas": str(self.gas)}


def _to_decimal(price: float | str | Decimal) -> Decimal:
    try:
        value = Decimal(str(price))
    except InvalidOperation:
        raise ConfigError(f"Invalid gas price: {price!r}") from None
    if not value.is_finite() or value < 0:
        raise ConfigError(f"Gas price must be a non-negative number, got {price!r}")
    return value


def std_fee(gas: int, denom: str, price: float | str | Decimal) -> StdFee:
    amount = math.floor(Decimal(gas) * _to_decimal(price))
    return StdFee(amount=(Coin.of(amount, denom),), gas=gas)


@dataclass(frozen=True)
class FeeTable:
    fees: Mapping[str, StdFee]

    def __post_init__(self) -> None:
        missing = [c for c in FEE_CATEGORIES if c not in self.fees]
        if missing:
            raise ConfigError(f"Fee table is missing categories: {', '.join(missing)}")
        object.__setattr__(self, "fees", MappingProxyType(dict(self.fees)))

    def fee_for(self, category: str) -> StdFee:
        try:
            return self.fees[category]
        except KeyError:
            raise ConfigError(f"Unknown fee category: {category}") from None


@dataclass(frozen=True)
class GasPrice:
    amount: Decimal
    denom: str

    @classmethod
    def from_string(cls, value: str) -> "GasPrice":
        """Parse ``"0.025ucosm"`` style strings."""
        match = _GAS_PRICE_RE.fullmatch(value.strip())
        if match is None:
            raise ConfigError(f"Invalid gas price string: {value!r}")
        return cls(amount=_to_decimal(match.group(1)), denom=match.group(2))

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


@dataclass(frozen=True)
class GasPriceSchedule:
    gas_price: GasPrice
    gas_limits: GasLimits = field(default_factory=GasLimits)

    def fee_for(self, category: str) -> StdFee:
        gas = self.gas_limits.for_category(category)
        amount = math.ceil(Decimal(gas) * self.gas_price.amount)
        return StdFee(amount=(Coin.of(amount, self.gas_price.denom),), gas=gas)


FeeModel = Union[FeeTable, GasPriceSchedule]


def build_fee_table(
    fee_token: str,
    gas_price: float | str | Decimal,
    gas_limits: GasLimits | None = None,
) -> FeeTable:
    """Precompute the fee for every category."""
    limits = gas_limits or GasLimits()
    return FeeTable(
        fees={category: std_fee(limits.for_category(category), fee_token, gas_price) for category in FEE_CATEGORIES}
    )


def build_fee_model(options: NetworkOptions) -> FeeModel:
    """Select the fee convention the profile declares."""
    if options.fee_model == "gas_price":
        return GasPriceSchedule(
            gas_price=GasPrice(amount=_to_decimal(options.gas_price), denom=options.fee_token),
            gas_limits=options.gas_limits,
        )
    return build_fee_table(options.fee_token, options.gas_price, options.gas_limits)
