"""
Transaction builder - amino JSON messages, sign documents and StdTx.

The sign document is canonical JSON (RFC 8785: sorted keys, no whitespace)
with ``&``, ``<`` and ``>`` escaped the way amino JSON does, so the bytes
match what the ledger reconstructs when it verifies the signature.
"""

from __future__ import annotations

import gzip
from typing import Any, Optional, Sequence

import rfc8785

from ..models import Coin, coins_to_list
from ..utils import base64_encode
from .fees import StdFee


# ============ Messages ============


def msg_send(from_address: str, to_address: str, amount: Sequence[Coin]) -> dict[str, Any]:
    return {
        "type": "cosmos-sdk/MsgSend",
        "value": {
            "from_address": from_address,
            "to_address": to_address,
            "amount": coins_to_list(amount),
        },
    }


def msg_store_code(sender: str, wasm: bytes, source: str = "", builder: str = "") -> dict[str, Any]:
    """Upload message.  The byte code is gzip-compressed before encoding."""
    return {
        "type": "wasm/MsgStoreCode",
        "value": {
            "sender": sender,
            "wasm_byte_code": base64_encode(gzip.compress(wasm)),
            "source": source,
            "builder": builder,
        },
    }


def msg_instantiate(
    sender: str,
    code_id: int,
    label: str,
    init_msg: dict[str, Any],
    init_funds: Sequence[Coin] = (),
    admin: Optional[str] = None,
) -> dict[str, Any]:
    value: dict[str, Any] = {
        "sender": sender,
        "code_id": str(code_id),
        "label": label,
        "init_msg": init_msg,
        "init_funds": coins_to_list(init_funds),
    }
    if admin:
        value["admin"] = admin
    return {"type": "wasm/MsgInstantiateContract", "value": value}


def msg_execute(
    sender: str,
    contract: str,
    msg: dict[str, Any],
    sent_funds: Sequence[Coin] = (),
) -> dict[str, Any]:
    return {
        "type": "wasm/MsgExecuteContract",
        "value": {
            "sender": sender,
            "contract": contract,
            "msg": msg,
            "sent_funds": coins_to_list(sent_funds),
        },
    }


def msg_migrate(sender: str, contract: str, code_id: int, migrate_msg: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "wasm/MsgMigrateContract",
        "value": {
            "sender": sender,
            "contract": contract,
            "code_id": str(code_id),
            "msg": migrate_msg,
        },
    }


def msg_update_admin(sender: str, contract: str, new_admin: str) -> dict[str, Any]:
    return {
        "type": "wasm/MsgUpdateAdmin",
        "value": {"sender": sender, "new_admin": new_admin, "contract": contract},
    }


def msg_clear_admin(sender: str, contract: str) -> dict[str, Any]:
    return {
        "type": "wasm/MsgClearAdmin",
        "value": {"sender": sender, "contract": contract},
    }


# ============ Signing ============


def make_sign_doc(
    msgs: Sequence[dict[str, Any]],
    fee: StdFee,
    chain_id: str,
    memo: str,
    account_number: int,
    sequence: int,
) -> dict[str, Any]:
    return {
        "account_number": str(account_number),
        "chain_id": chain_id,
        "fee": fee.to_dict(),
        "memo": memo,
        "msgs": list(msgs),
        "sequence": str(sequence),
    }


def serialize_sign_doc(sign_doc: dict[str, Any]) -> bytes:
    canonical = rfc8785.dumps(sign_doc)
    return (
        canonical.replace(b"&", b"\\u0026")
        .replace(b"<", b"\\u003c")
        .replace(b">", b"\\u003e")
    )


def sign_tx(
    identity,
    msgs: Sequence[dict[str, Any]],
    fee: StdFee,
    chain_id: str,
    memo: str,
    account_number: int,
    sequence: int,
) -> dict[str, Any]:
    """
    Build and sign a StdTx.

    Args:
        identity: SigningIdentity whose address is the sender of every message
        msgs: Amino messages
        fee: Fee resolved for the transaction's category
        chain_id: Network identifier the signature is bound to
        memo: Free-form memo
        account_number: Sender account number from the ledger
        sequence: Sender sequence number from the ledger

    Returns:
        StdTx dict ready for broadcast
    """
    sign_doc = make_sign_doc(msgs, fee, chain_id, memo, account_number, sequence)
    signature = identity.amino_signature(serialize_sign_doc(sign_doc))
    return {
        "msg": list(msgs),
        "fee": fee.to_dict(),
        "signatures": [signature],
        "memo": memo,
    }
