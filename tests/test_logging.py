"""Structured log events emitted by the helpers."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from structlog.testing import capture_logs

from bonsai_cw.errors import AuthenticationError, TransactionError
from bonsai_cw.ledger.session import LedgerSession
from bonsai_cw.models import Coin
from bonsai_cw.network import Network
from bonsai_cw.wallet.keystore import KeyStore


def _events(logs: list[dict]) -> list[str]:
    return [entry["event"] for entry in logs]


class TestEvents:
    def test_keystore_events_never_carry_secrets(self, fast_kdf, tmp_path: Path) -> None:
        keystore = KeyStore(prefix="coral", hd_path="m/44'/118'/0'/0/0", kdf_params=fast_kdf)
        path = tmp_path / "k"
        with capture_logs() as logs:
            identity = keystore.load_or_create(path, "secret-pw")
            with pytest.raises(AuthenticationError):
                keystore.load_or_create(path, "wrong-pw")

        assert _events(logs) == ["keystore_created", "keystore_auth_failed"]
        rendered = repr(logs)
        assert identity.mnemonic not in rendered
        assert "secret-pw" not in rendered

    def test_broadcast_and_rejection(self, session: LedgerSession, ledger) -> None:
        with capture_logs() as logs:
            session.send_tokens("coral1friend", [Coin.of(1, "ushell")])
            ledger.accounts[session.sender_address]["coins"]["ushell"] = 0
            with pytest.raises(TransactionError):
                session.send_tokens("coral1friend", [Coin.of(1, "ushell")])

        broadcast = next(e for e in logs if e["event"] == "tx_broadcast")
        assert broadcast["category"] == "send"
        rejected = next(e for e in logs if e["event"] == "tx_rejected")
        assert rejected["log_level"] == "warning"
        assert "insufficient funds" in rejected["raw_log"]

    def test_faucet_failure_is_a_warning(self, options, fast_kdf, client) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="dry"))
        network = Network(options, kdf_params=fast_kdf, client=client, faucet_transport=transport)
        with capture_logs() as logs:
            network.setup("pw")

        failed = next(e for e in logs if e["event"] == "faucet_credit_failed")
        assert failed["status"] == 500
