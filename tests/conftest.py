"""
Shared fixtures: an in-memory CosmWasm LCD running the bonsai contract,
served to the real httpx clients through ``httpx.MockTransport``.
"""

from __future__ import annotations

import base64
import gzip
import hashlib
import json
from pathlib import Path
from typing import Any, Optional

import httpx
import pytest
from eth_keys import keys

from bonsai_cw.config import coralnet_options
from bonsai_cw.ledger.lcd import LcdClient
from bonsai_cw.ledger.session import LedgerSession
from bonsai_cw.ledger.tx import serialize_sign_doc
from bonsai_cw.wallet.crypto import Argon2Params
from bonsai_cw.wallet.identity import SigningIdentity, address_prefix, pubkey_to_address

LCD_URL = "https://lcd.test"
FAUCET_URL = "https://faucet.test/credit"
WASM_URL = "https://artifacts.test/bonsai.wasm"
WASM_BYTES = b"\x00asm\x01\x00\x00\x00" + b"bonsai" * 64


class ContractRevert(Exception):
    pass


def _event(**attributes: str) -> list[dict[str, Any]]:
    return [
        {
            "msg_index": 0,
            "log": "",
            "events": [
                {
                    "type": "message",
                    "attributes": [{"key": k, "value": v} for k, v in attributes.items()],
                }
            ],
        }
    ]


class FakeLedger:
    """Minimal legacy LCD: accounts, smart queries and block-mode broadcast."""

    def __init__(self, chain_id: str = "cosmwasm-coral", prefix: str = "coral") -> None:
        self.chain_id = chain_id
        self.prefix = prefix
        self.height = 100
        self.accounts: dict[str, dict[str, Any]] = {}
        self.codes: dict[int, bytes] = {}
        self.code_meta: dict[int, dict[str, str]] = {}
        self.contracts: dict[str, dict[str, Any]] = {}
        self.next_code_id = 42
        self.broadcasts: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []
        self.broadcast_http_error: Optional[tuple[int, str]] = None

    # ---- setup helpers ----

    def fund(self, address: str, amount: int, denom: str = "ushell") -> None:
        account = self.accounts.setdefault(
            address,
            {"coins": {}, "account_number": len(self.accounts) + 1, "sequence": 0},
        )
        account["coins"][denom] = account["coins"].get(denom, 0) + amount

    def balance(self, address: str, denom: str = "ushell") -> int:
        return self.accounts.get(address, {"coins": {}})["coins"].get(denom, 0)

    # ---- transport ----

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "GET" and path.startswith("/auth/accounts/"):
            return self._account(path.rsplit("/", 1)[1])
        if request.method == "GET" and path.startswith("/wasm/contract/"):
            _, _, _, address, _, encoded = path.split("/")
            return self._query(address, encoded)
        if request.method == "POST" and path == "/txs":
            if self.broadcast_http_error is not None:
                status, text = self.broadcast_http_error
                return httpx.Response(status, json={"error": text})
            return self._broadcast(json.loads(request.content)["tx"])
        return httpx.Response(404, json={"error": f"no route {path}"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def _account(self, address: str) -> httpx.Response:
        account = self.accounts.get(address)
        if account is None:
            value = {"address": "", "coins": [], "public_key": None, "account_number": "0", "sequence": "0"}
        else:
            value = {
                "address": address,
                "coins": [{"denom": d, "amount": str(a)} for d, a in sorted(account["coins"].items())],
                "public_key": None,
                "account_number": str(account["account_number"]),
                "sequence": str(account["sequence"]),
            }
        return httpx.Response(200, json={"height": str(self.height), "result": {"type": "cosmos-sdk/Account", "value": value}})

    def _query(self, address: str, encoded: str) -> httpx.Response:
        contract = self.contracts.get(address)
        if contract is None:
            return httpx.Response(500, json={"error": f"contract {address}: not found"})
        query = json.loads(bytes.fromhex(encoded))
        ((tag, body),) = query.items()
        if tag == "get_bonsais":
            data: Any = {"bonsais": contract["bonsais"]}
        elif tag == "get_gardeners":
            data = {"gardeners": list(contract["gardeners"].values())}
        elif tag == "get_gardener":
            sender = body.get("sender")
            if address_prefix(sender or "") != self.prefix:
                return httpx.Response(500, json={"error": f"Generic error: invalid address {sender}"})
            data = contract["gardeners"].get(sender)
        else:
            return httpx.Response(
                500,
                json={"error": f"Error parsing into type bonsai::msg::QueryMsg: unknown variant `{tag}`"},
            )
        smart = base64.b64encode(json.dumps(data).encode()).decode()
        return httpx.Response(200, json={"height": str(self.height), "result": {"smart": smart}})

    def _broadcast(self, tx: dict[str, Any]) -> httpx.Response:
        self.broadcasts.append(tx)
        tx_hash = hashlib.sha256(json.dumps(tx, sort_keys=True).encode()).hexdigest().upper()
        sender = self._sender(tx["msg"][0])
        account = self.accounts.get(sender)

        def reject(code: int, raw_log: str) -> httpx.Response:
            return httpx.Response(200, json={"height": "0", "txhash": tx_hash, "code": code, "raw_log": raw_log})

        if account is None:
            return reject(9, f"account {sender} not found")
        if not self._signature_ok(tx, sender, account):
            return reject(4, "signature verification failed; verify correct account sequence and chain-id")

        fee_coin = tx["fee"]["amount"][0] if tx["fee"]["amount"] else {"denom": "ushell", "amount": "0"}
        fee = int(fee_coin["amount"])
        if account["coins"].get(fee_coin["denom"], 0) < fee:
            return reject(5, f"insufficient funds: insufficient account funds; < {fee}{fee_coin['denom']}")
        account["coins"][fee_coin["denom"]] -= fee
        account["sequence"] += 1
        self.height += 1

        try:
            logs = self._apply(tx["msg"][0], sender)
        except ContractRevert as exc:
            return reject(18, f"execute wasm contract failed: {exc}")

        return httpx.Response(
            200,
            json={
                "height": str(self.height),
                "txhash": tx_hash,
                "raw_log": json.dumps(logs),
                "logs": logs,
                "gas_wanted": tx["fee"]["gas"],
                "gas_used": "12345",
            },
        )

    @staticmethod
    def _sender(msg: dict[str, Any]) -> str:
        value = msg["value"]
        return value.get("sender") or value.get("from_address")

    def _signature_ok(self, tx: dict[str, Any], sender: str, account: dict[str, Any]) -> bool:
        (signature,) = tx["signatures"]
        pubkey_bytes = base64.b64decode(signature["pub_key"]["value"])
        if pubkey_to_address(pubkey_bytes, self.prefix) != sender:
            return False
        sign_doc = {
            "account_number": str(account["account_number"]),
            "chain_id": self.chain_id,
            "fee": tx["fee"],
            "memo": tx["memo"],
            "msgs": tx["msg"],
            "sequence": str(account["sequence"]),
        }
        digest = hashlib.sha256(serialize_sign_doc(sign_doc)).digest()
        raw = base64.b64decode(signature["signature"])
        sig = keys.Signature(vrs=(0, int.from_bytes(raw[:32], "big"), int.from_bytes(raw[32:], "big")))
        return keys.PublicKey.from_compressed_bytes(pubkey_bytes).verify_msg_hash(digest, sig)

    # ---- state machine ----

    def _apply(self, msg: dict[str, Any], sender: str) -> list[dict[str, Any]]:
        kind, value = msg["type"], msg["value"]
        if kind == "wasm/MsgStoreCode":
            code_id = self.next_code_id
            self.next_code_id += 1
            self.codes[code_id] = gzip.decompress(base64.b64decode(value["wasm_byte_code"]))
            self.code_meta[code_id] = {"source": value["source"], "builder": value["builder"]}
            return _event(action="store-code", code_id=str(code_id))
        if kind == "wasm/MsgInstantiateContract":
            code_id = int(value["code_id"])
            if code_id not in self.codes:
                raise ContractRevert(f"code id {code_id}: not found")
            address = f"{self.prefix}1contract{len(self.contracts):04d}"
            init = value["init_msg"]
            self.contracts[address] = {
                "code_id": code_id,
                "label": value["label"],
                "admin": value.get("admin"),
                "bonsais": [
                    {"id": i, "birth_date": self.height, "price": init["price"]} for i in range(init["number"])
                ],
                "gardeners": {},
            }
            return _event(action="instantiate", contract_address=address)
        if kind == "wasm/MsgExecuteContract":
            return self._execute(value["contract"], value["msg"], sender)
        if kind == "cosmos-sdk/MsgSend":
            for coin in value["amount"]:
                if self.balance(sender, coin["denom"]) < int(coin["amount"]):
                    raise ContractRevert("insufficient funds")
                self.accounts[sender]["coins"][coin["denom"]] -= int(coin["amount"])
                self.fund(value["to_address"], int(coin["amount"]), coin["denom"])
            return _event(action="send")
        if kind in ("wasm/MsgMigrateContract", "wasm/MsgUpdateAdmin", "wasm/MsgClearAdmin"):
            contract = self.contracts[value["contract"]]
            if contract["admin"] != sender:
                raise ContractRevert("unauthorized: can not modify contract")
            if kind == "wasm/MsgMigrateContract":
                contract["code_id"] = int(value["code_id"])
            elif kind == "wasm/MsgUpdateAdmin":
                contract["admin"] = value["new_admin"]
            else:
                contract["admin"] = None
            return _event(action=kind.split("/")[1])
        raise ContractRevert(f"unknown message type {kind}")

    def _execute(self, address: str, msg: dict[str, Any], sender: str) -> list[dict[str, Any]]:
        contract = self.contracts.get(address)
        if contract is None:
            raise ContractRevert(f"contract {address}: not found")
        ((tag, body),) = msg.items()
        gardeners = contract["gardeners"]

        if tag == "become_gardener":
            if sender in gardeners:
                raise ContractRevert("Generic error: A gardener with the sender address already exist")
            gardeners[sender] = {"name": body["name"], "address": sender, "bonsais": []}
            return _event(action="become_gardener", gardener_addr=sender)

        bonsai_id = int(body["b_id"]) if str(body["b_id"]).isdigit() else None

        if tag == "buy_bonsai":
            bonsai = next((b for b in contract["bonsais"] if b["id"] == bonsai_id), None)
            if bonsai is None:
                raise ContractRevert("Bonsai not found not found")
            price = bonsai["price"]
            if self.balance(sender, price["denom"]) < int(price["amount"]):
                raise ContractRevert("Generic error: Insufficient funds to buy the bonsai")
            if sender not in gardeners:
                raise ContractRevert("bonsai::state::Gardener not found")
            contract["bonsais"].remove(bonsai)
            gardeners[sender]["bonsais"].append(bonsai)
            self.accounts[sender]["coins"][price["denom"]] -= int(price["amount"])
            return _event(action="buy_bonsai", buyer=sender, amount=price["amount"])

        if tag in ("sell_bonsai", "cut_bonsai"):
            owned = gardeners.get(sender, {"bonsais": []})["bonsais"]
            bonsai = next((b for b in owned if b["id"] == bonsai_id), None)
            if bonsai is None:
                raise ContractRevert(f"Generic error: No bonsai with {body['b_id']} id found")
            owned.remove(bonsai)
            if tag == "sell_bonsai":
                recipient = body["recipient"]
                if recipient not in gardeners:
                    raise ContractRevert("bonsai::state::Gardener not found")
                gardeners[recipient]["bonsais"].append(bonsai)
            return _event(action=tag)

        raise ContractRevert(f"Error parsing into type bonsai::msg::HandleMsg: unknown variant `{tag}`")


# ============ Fixtures ============


@pytest.fixture()
def fast_kdf() -> Argon2Params:
    """Cheap Argon2id parameters so key file tests stay fast."""
    return Argon2Params(mem_kib=8192, iterations=1, parallelism=1)


@pytest.fixture()
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture()
def options(tmp_path: Path):
    return coralnet_options().replace(
        http_url=LCD_URL,
        faucet_url=FAUCET_URL,
        default_key_file=tmp_path / "default.key",
    )


@pytest.fixture()
def identity() -> SigningIdentity:
    return SigningIdentity.generate(prefix="coral")


@pytest.fixture()
def client(ledger: FakeLedger) -> LcdClient:
    lcd = LcdClient(LCD_URL, transport=ledger.transport())
    yield lcd
    lcd.close()


@pytest.fixture()
def session(ledger: FakeLedger, identity: SigningIdentity, options, client: LcdClient) -> LedgerSession:
    ledger.fund(identity.address, 10_000_000)
    return LedgerSession.connect(identity, options, client=client)
