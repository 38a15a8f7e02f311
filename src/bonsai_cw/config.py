"""
Network profiles.

A ``NetworkOptions`` value is built once at startup and handed to the
KeyStore, LedgerSession and ContractFactory.  Profiles are produced by
functions so every caller gets its own immutable instance; nothing here is
process-wide mutable state.

Overrides are read from the environment (optionally seeded from a ``.env``
file) by ``load_options``:

  BONSAI_NETWORK     profile name (coralnet, heldernet, musselnet)
  BONSAI_HTTP_URL    LCD endpoint
  BONSAI_GAS_PRICE   gas price in fee-token units
  BONSAI_KEY_FILE    default key file path
  BONSAI_FAUCET_URL  faucet endpoint ("" disables the faucet)
  BONSAI_TIMEOUT     transport timeout in seconds
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from dotenv import load_dotenv

from .errors import ConfigError

# Transaction categories that carry a fee.  Wire names, used as FeeTable keys.
FEE_CATEGORIES: tuple[str, ...] = ("upload", "init", "migrate", "exec", "send", "changeAdmin")

FEE_MODELS = ("table", "gas_price")
FAUCET_FIELDS = ("ticker", "denom")

DEFAULT_NETWORK = "coralnet"
COSMOS_HD_PATH = "m/44'/118'/0'/0/0"


@dataclass(frozen=True)
class GasLimits:
    """Per-category gas limits: the network's observed worst case for each operation."""

    upload: int = 1_500_000
    init: int = 600_000
    migrate: int = 600_000
    exec: int = 200_000
    send: int = 80_000
    change_admin: int = 80_000

    def __post_init__(self) -> None:
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or value <= 0:
                raise ConfigError(f"Gas limit for {f.name} must be a positive integer, got {value!r}")

    def for_category(self, category: str) -> int:
        if category == "changeAdmin":
            return self.change_admin
        if category not in FEE_CATEGORIES:
            raise ConfigError(f"Unknown fee category: {category}")
        return getattr(self, category)

    def to_dict(self) -> dict[str, int]:
        return {category: self.for_category(category) for category in FEE_CATEGORIES}


@dataclass(frozen=True)
class NetworkOptions:
    name: str
    http_url: str
    network_id: str
    fee_token: str
    gas_price: float
    bech32_prefix: str
    default_key_file: Path
    hd_path: str = COSMOS_HD_PATH
    fee_model: str = "table"
    gas_limits: GasLimits = field(default_factory=GasLimits)
    faucet_token: str = ""
    faucet_url: Optional[str] = None
    faucet_field: str = "ticker"
    timeout: float = 30.0

    def __post_init__(self) -> None:
        if not self.http_url:
            raise ConfigError(f"{self.name}: http_url is required")
        if not self.bech32_prefix:
            raise ConfigError(f"{self.name}: bech32_prefix is required")
        if self.gas_price < 0:
            raise ConfigError(f"{self.name}: gas_price must not be negative")
        if self.fee_model not in FEE_MODELS:
            raise ConfigError(f"{self.name}: fee_model must be one of {FEE_MODELS}, got {self.fee_model!r}")
        if self.faucet_field not in FAUCET_FIELDS:
            raise ConfigError(f"{self.name}: faucet_field must be one of {FAUCET_FIELDS}")
        if self.timeout <= 0:
            raise ConfigError(f"{self.name}: timeout must be positive")

    def replace(self, **changes) -> "NetworkOptions":
        """Return a copy with ``changes`` applied (validated again)."""
        return dataclasses.replace(self, **changes)


# ============ Built-in profiles ============


def coralnet_options() -> NetworkOptions:
    return NetworkOptions(
        name="coralnet",
        http_url="https://lcd.coralnet.cosmwasm.com",
        network_id="cosmwasm-coral",
        fee_token="ushell",
        gas_price=0.025,
        bech32_prefix="coral",
        fee_model="table",
        faucet_token="SHELL",
        faucet_url="https://faucet.coralnet.cosmwasm.com/credit",
        faucet_field="ticker",
        default_key_file=Path.home() / ".coral.key",
    )


def heldernet_options() -> NetworkOptions:
    return NetworkOptions(
        name="heldernet",
        http_url="https://lcd.heldernet.cosmwasm.com",
        network_id="hackatom-wasm",
        fee_token="ucosm",
        gas_price=0.025,
        bech32_prefix="cosmos",
        fee_model="gas_price",
        faucet_token="COSM",
        faucet_url="https://faucet.heldernet.cosmwasm.com/credit",
        faucet_field="ticker",
        default_key_file=Path.home() / ".heldernet.key",
    )


def musselnet_options() -> NetworkOptions:
    return NetworkOptions(
        name="musselnet",
        http_url="https://lcd.musselnet.cosmwasm.com",
        network_id="musselnet-4",
        fee_token="umayo",
        gas_price=0.025,
        bech32_prefix="wasm",
        fee_model="gas_price",
        gas_limits=GasLimits(upload=1_500_000, init=500_000, migrate=500_000, exec=200_000, send=80_000, change_admin=80_000),
        faucet_token="umayo",
        faucet_url="https://faucet.musselnet.cosmwasm.com/credit",
        faucet_field="denom",
        default_key_file=Path.home() / ".musselnet.key",
    )


_PROFILES: dict[str, Callable[[], NetworkOptions]] = {
    "coralnet": coralnet_options,
    "heldernet": heldernet_options,
    "musselnet": musselnet_options,
}


def available_networks() -> list[str]:
    return sorted(_PROFILES)


def get_options(name: str = DEFAULT_NETWORK) -> NetworkOptions:
    """Return a fresh ``NetworkOptions`` for a built-in profile."""
    try:
        factory = _PROFILES[name]
    except KeyError:
        raise ConfigError(
            f"Unknown network {name!r}. Available: {', '.join(available_networks())}"
        ) from None
    return factory()


def load_options(name: Optional[str] = None, env_file: Optional[Path] = None) -> NetworkOptions:
    """
    Build options from a profile plus environment overrides.

    Args:
        name: Profile name.  Falls back to ``BONSAI_NETWORK`` then ``coralnet``.
        env_file: Optional ``.env`` file loaded before reading the environment.
            Values already set in the environment win.

    Returns:
        Validated NetworkOptions

    Raises:
        ConfigError: Unknown profile or unparsable override
    """
    if env_file is not None and env_file.exists():
        load_dotenv(env_file, override=False)

    options = get_options(name or os.environ.get("BONSAI_NETWORK") or DEFAULT_NETWORK)
    changes: dict = {}

    if url := os.environ.get("BONSAI_HTTP_URL"):
        changes["http_url"] = url.rstrip("/")
    if raw := os.environ.get("BONSAI_GAS_PRICE"):
        changes["gas_price"] = _parse_float("BONSAI_GAS_PRICE", raw)
    if key_file := os.environ.get("BONSAI_KEY_FILE"):
        changes["default_key_file"] = Path(key_file).expanduser()
    if "BONSAI_FAUCET_URL" in os.environ:
        changes["faucet_url"] = os.environ["BONSAI_FAUCET_URL"] or None
    if raw := os.environ.get("BONSAI_TIMEOUT"):
        changes["timeout"] = _parse_float("BONSAI_TIMEOUT", raw)

    return options.replace(**changes) if changes else options


def _parse_float(key: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None
