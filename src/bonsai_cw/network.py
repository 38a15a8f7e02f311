"""
Network - one-call bootstrap for a network profile.

``setup`` loads (or creates) the key file, connects a LedgerSession and, on
networks with a faucet, asks for test tokens when the account does not yet
exist on chain.  Faucet failures are logged and never block the session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import httpx

from .config import NetworkOptions
from .errors import FaucetError, QueryError
from .ledger.faucet import FaucetClient
from .ledger.lcd import LedgerClient
from .ledger.session import LedgerSession
from .logging import get_logger
from .wallet.crypto import Argon2Params
from .wallet.keystore import KeyStore

log = get_logger(__name__)


@dataclass
class Network:
    options: NetworkOptions
    kdf_params: Argon2Params = field(default_factory=Argon2Params)
    client: Optional[LedgerClient] = None
    faucet_transport: Optional[httpx.BaseTransport] = None

    @property
    def keystore(self) -> KeyStore:
        return KeyStore.for_options(self.options, self.kdf_params)

    def _key_file(self, filename: Optional[Path]) -> Path:
        return Path(filename) if filename else self.options.default_key_file

    def setup(self, password: str, filename: Optional[Path] = None) -> LedgerSession:
        """
        Load or create the identity and connect it.

        Args:
            password: Key file password
            filename: Key file path, defaults to the profile's ``default_key_file``

        Returns:
            Connected LedgerSession
        """
        identity = self.keystore.load_or_create(self._key_file(filename), password)
        session = LedgerSession.connect(identity, self.options, client=self.client)
        try:
            needs_funds = bool(self.options.faucet_url) and session.get_account() is None
        except QueryError:
            if self.client is None:
                session.close()
            raise

        if needs_funds:
            log.info("faucet_requested", token=self.options.faucet_token, address=session.sender_address)
            faucet = FaucetClient(
                field=self.options.faucet_field,
                timeout=self.options.timeout,
                transport=self.faucet_transport,
            )
            try:
                faucet.credit(self.options.faucet_url, session.sender_address, self.options.faucet_token)
            except FaucetError as exc:
                log.warning("faucet_credit_failed", error=str(exc), status=exc.status_code)

        return session

    def recover_mnemonic(self, password: str, filename: Optional[Path] = None) -> str:
        return self.keystore.recover_mnemonic(self._key_file(filename), password)


def use_options(options: NetworkOptions, **kwargs) -> Network:
    return Network(options=options, **kwargs)
