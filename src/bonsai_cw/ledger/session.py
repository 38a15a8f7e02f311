"""
LedgerSession - a signing identity bound to one network.

Queries are unsigned and read-only.  Every transaction is signed by the
bound identity, broadcast in block mode, and either resolves to a
``TxResult`` or raises a ``TransactionError`` subclass carrying the ledger's
raw log.  Calls are issued one at a time: the session does not queue or
coordinate sequence numbers between concurrent callers.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from ..config import NetworkOptions
from ..errors import ConfigError, InstantiateError, QueryError, TransactionError, UploadError
from ..logging import get_logger
from ..models import Coin
from ..utils import sha256_hex
from ..wallet.identity import address_prefix
from . import tx as txb
from .fees import FeeModel, build_fee_model
from .lcd import LcdClient, LedgerClient

log = get_logger(__name__)


# ============ Results and requests ============


@dataclass(frozen=True)
class TxResult:
    transaction_hash: str
    height: int = 0
    raw_log: str = ""
    logs: tuple[dict[str, Any], ...] = ()
    gas_wanted: Optional[int] = None
    gas_used: Optional[int] = None

    def find_attribute(self, key: str, event_type: str = "message") -> Optional[str]:
        """Return the first attribute ``key`` of ``event_type`` across all message logs."""
        for entry in self.logs:
            for event in entry.get("events", []):
                if event.get("type") != event_type:
                    continue
                for attribute in event.get("attributes", []):
                    if attribute.get("key") == key:
                        return attribute.get("value")
        return None


@dataclass(frozen=True)
class UploadMeta:
    """Provenance recorded on chain alongside uploaded code."""

    source: str = ""
    builder: str = ""


@dataclass(frozen=True)
class UploadResult:
    code_id: int
    checksum: str
    tx: TxResult


@dataclass(frozen=True)
class InstantiateRequest:
    code_id: int
    init_msg: Any
    label: str
    memo: Optional[str] = None
    admin: Optional[str] = None
    funds: tuple[Coin, ...] = ()


@dataclass(frozen=True)
class InstantiateResult:
    contract_address: str
    tx: TxResult


@dataclass(frozen=True)
class ExecuteRequest:
    contract_address: str
    msg: Any
    funds: tuple[Coin, ...] = ()
    memo: str = ""


@dataclass(frozen=True)
class AccountInfo:
    address: str
    balance: tuple[Coin, ...] = field(default_factory=tuple)
    account_number: int = 0
    sequence: int = 0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AccountInfo":
        return cls(
            address=payload["address"],
            balance=tuple(Coin.from_dict(c) for c in payload.get("coins") or []),
            account_number=int(payload.get("account_number") or 0),
            sequence=int(payload.get("sequence") or 0),
        )


def to_wire(msg: Any) -> dict[str, Any]:
    """Render a domain message (anything with ``to_wire``) or pass a plain dict through."""
    if hasattr(msg, "to_wire"):
        return msg.to_wire()
    if isinstance(msg, Mapping):
        return dict(msg)
    raise TypeError(f"Cannot serialise message of type {type(msg).__name__}")


def _parse_logs(response: Mapping[str, Any]) -> tuple[dict[str, Any], ...]:
    logs = response.get("logs")
    if logs is None:
        # Some LCD versions only return the JSON-encoded raw_log
        try:
            logs = json.loads(response.get("raw_log") or "[]")
        except ValueError:
            logs = []
    if not isinstance(logs, list):
        return ()
    return tuple(entry for entry in logs if isinstance(entry, dict))


def _optional_int(value: Any) -> Optional[int]:
    return int(value) if value not in (None, "") else None


# ============ Session ============


class LedgerSession:
    """
    Query and transaction primitives for one signing identity on one network.

    Use ``LedgerSession.connect`` rather than the constructor.
    """

    def __init__(
        self,
        identity,
        options: NetworkOptions,
        client: LedgerClient,
        fees: FeeModel,
    ) -> None:
        self.identity = identity
        self.options = options
        self.client = client
        self.fees = fees
        self.sender_address: str = identity.get_accounts()[0].address
        if address_prefix(self.sender_address) != options.bech32_prefix:
            raise ConfigError(
                f"Identity address {self.sender_address} does not use the "
                f"{options.name} prefix {options.bech32_prefix!r}"
            )

    @classmethod
    def connect(
        cls,
        identity,
        options: NetworkOptions,
        client: Optional[LedgerClient] = None,
    ) -> "LedgerSession":
        """
        Bind ``identity`` to the network described by ``options``.

        Args:
            identity: SigningIdentity (first account becomes the sender)
            options: Network profile; also selects the fee model
            client: LedgerClient override, defaults to an LcdClient on ``options.http_url``

        Raises:
            ConfigError: The identity's address prefix does not match the profile
        """
        fees = build_fee_model(options)
        owned = client is None
        client = client or LcdClient(options.http_url, timeout=options.timeout)
        try:
            session = cls(identity, options, client, fees)
        except ConfigError:
            if owned:
                client.close()
            raise
        log.info("session_connected", network=options.name, sender=session.sender_address)
        return session

    def close(self) -> None:
        close = getattr(self.client, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "LedgerSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ---- reads ----

    def get_account(self, address: Optional[str] = None) -> Optional[AccountInfo]:
        """Return account state, or None if the ledger has never seen ``address``."""
        data = self.client.get_account(address or self.sender_address)
        if data is None:
            return None
        try:
            return AccountInfo.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise QueryError(f"Malformed account response: {exc}") from exc

    def get_balance(self, denom: Optional[str] = None, address: Optional[str] = None) -> int:
        account = self.get_account(address)
        denom = denom or self.options.fee_token
        if account is None:
            return 0
        return sum(int(c.amount) for c in account.balance if c.denom == denom)

    def query(self, contract_address: str, query_msg: Any) -> Any:
        """Smart query; returns the decoded JSON response."""
        if not contract_address:
            raise QueryError("Contract address is required")
        return self.client.query_smart(contract_address, to_wire(query_msg))

    # ---- transactions ----

    def execute(self, request: ExecuteRequest) -> TxResult:
        msg = txb.msg_execute(
            self.sender_address,
            request.contract_address,
            to_wire(request.msg),
            request.funds,
        )
        return self._sign_and_broadcast([msg], "exec", request.memo)

    def upload(self, wasm: bytes, meta: UploadMeta = UploadMeta(), memo: str = "") -> UploadResult:
        if not wasm:
            raise UploadError("Refusing to upload empty wasm byte code")
        msg = txb.msg_store_code(self.sender_address, wasm, meta.source, meta.builder)
        result = self._sign_and_broadcast([msg], "upload", memo, error_cls=UploadError)
        code_id = result.find_attribute("code_id")
        if code_id is None:
            raise UploadError(
                "Upload succeeded but no code_id was reported",
                raw_log=result.raw_log,
                tx_hash=result.transaction_hash,
            )
        return UploadResult(code_id=int(code_id), checksum=sha256_hex(wasm), tx=result)

    def instantiate(self, request: InstantiateRequest) -> InstantiateResult:
        msg = txb.msg_instantiate(
            self.sender_address,
            request.code_id,
            request.label,
            to_wire(request.init_msg),
            request.funds,
            request.admin,
        )
        memo = request.memo if request.memo is not None else ""
        result = self._sign_and_broadcast([msg], "init", memo, error_cls=InstantiateError)
        address = result.find_attribute("contract_address")
        if not address:
            raise InstantiateError(
                "Instantiation succeeded but no contract_address was reported",
                raw_log=result.raw_log,
                tx_hash=result.transaction_hash,
            )
        return InstantiateResult(contract_address=address, tx=result)

    def migrate(self, contract_address: str, code_id: int, migrate_msg: Any, memo: str = "") -> TxResult:
        msg = txb.msg_migrate(self.sender_address, contract_address, code_id, to_wire(migrate_msg))
        return self._sign_and_broadcast([msg], "migrate", memo)

    def update_admin(self, contract_address: str, new_admin: str, memo: str = "") -> TxResult:
        msg = txb.msg_update_admin(self.sender_address, contract_address, new_admin)
        return self._sign_and_broadcast([msg], "changeAdmin", memo)

    def clear_admin(self, contract_address: str, memo: str = "") -> TxResult:
        msg = txb.msg_clear_admin(self.sender_address, contract_address)
        return self._sign_and_broadcast([msg], "changeAdmin", memo)

    def send_tokens(self, recipient: str, amount: Sequence[Coin], memo: str = "") -> TxResult:
        msg = txb.msg_send(self.sender_address, recipient, amount)
        return self._sign_and_broadcast([msg], "send", memo)

    def _sign_and_broadcast(
        self,
        msgs: list[dict[str, Any]],
        category: str,
        memo: str,
        error_cls: type[TransactionError] = TransactionError,
    ) -> TxResult:
        try:
            account = self.get_account()
        except QueryError as exc:
            raise error_cls(
                f"Cannot read sender account before {category}: {exc}",
                raw_log=exc.raw_error or str(exc),
            ) from exc
        if account is None:
            raise error_cls(
                f"Account {self.sender_address} does not exist on {self.options.network_id}; fund it first",
                raw_log="account not found",
            )

        fee = self.fees.fee_for(category)
        signed = txb.sign_tx(
            self.identity,
            msgs,
            fee,
            chain_id=self.options.network_id,
            memo=memo,
            account_number=account.account_number,
            sequence=account.sequence,
        )

        try:
            response = self.client.broadcast(signed)
        except TransactionError as exc:
            if isinstance(exc, error_cls):
                raise
            raise error_cls(str(exc), raw_log=exc.raw_log, code=exc.code, tx_hash=exc.tx_hash) from exc

        tx_hash = response.get("txhash") or ""
        code = _optional_int(response.get("code"))
        raw_log = str(response.get("raw_log") or response.get("error") or "")
        if code or "error" in response or not tx_hash:
            log.warning("tx_rejected", category=category, tx_hash=tx_hash, code=code, raw_log=raw_log)
            raise error_cls(
                f"{category} transaction rejected: {raw_log}",
                raw_log=raw_log,
                code=code,
                tx_hash=tx_hash or None,
            )

        result = TxResult(
            transaction_hash=tx_hash,
            height=_optional_int(response.get("height")) or 0,
            raw_log=raw_log,
            logs=_parse_logs(response),
            gas_wanted=_optional_int(response.get("gas_wanted")),
            gas_used=_optional_int(response.get("gas_used")),
        )
        log.info("tx_broadcast", category=category, tx_hash=tx_hash, height=result.height)
        return result
