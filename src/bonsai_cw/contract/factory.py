"""
Contract factory - upload bonsai code, instantiate it, bind existing
instances.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import httpx

from ..errors import DownloadError, MessageError
from ..ledger.session import InstantiateRequest, LedgerSession, UploadMeta
from ..logging import get_logger
from ..models import Coin
from .instance import ContractInstance

log = get_logger(__name__)

DEFAULT_BUILDER = "cosmwasm/rust-optimizer:0.10.3"


def download_wasm(
    url: str,
    timeout: float = 30.0,
    transport: Optional[httpx.BaseTransport] = None,
) -> bytes:
    """
    Fetch a wasm binary.

    Raises:
        DownloadError: Non-200 status or transport failure
    """
    if not url:
        raise DownloadError("No wasm source URL configured")
    try:
        with httpx.Client(timeout=timeout, transport=transport, follow_redirects=True) as client:
            response = client.get(url)
    except httpx.HTTPError as exc:
        raise DownloadError(f"Download error: {exc}") from exc

    if response.status_code != 200:
        raise DownloadError(f"Download error: {response.status_code}", status_code=response.status_code)
    return response.content


class ContractFactory:
    """
    Deploys and binds bonsai contracts through a LedgerSession.

    Args:
        session: Connected session used for every transaction
        wasm_url: Where ``upload`` fetches the binary from by default
        source: Provenance URL recorded with uploaded code
        builder: Builder image recorded with uploaded code
        transport: Optional httpx transport for downloads (tests)
    """

    def __init__(
        self,
        session: LedgerSession,
        wasm_url: str = "",
        source: str = "",
        builder: str = DEFAULT_BUILDER,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.session = session
        self.wasm_url = wasm_url
        self.source = source
        self.builder = builder
        self.transport = transport

    def upload(self, wasm_source: Optional[str] = None) -> int:
        """Download the binary and store it on chain.  Returns the code id."""
        url = wasm_source or self.wasm_url
        wasm = download_wasm(url, timeout=self.session.options.timeout, transport=self.transport)
        meta = UploadMeta(source=self.source or url, builder=self.builder)
        result = self.session.upload(wasm, meta)
        log.info(
            "code_uploaded",
            code_id=result.code_id,
            checksum=result.checksum,
            tx_hash=result.tx.transaction_hash,
        )
        return result.code_id

    def instantiate(
        self,
        code_id: int,
        init_msg: Any,
        label: str,
        admin: Optional[str] = None,
        funds: Sequence[Coin] = (),
    ) -> ContractInstance:
        """
        Create a new contract from ``code_id``.

        Args:
            code_id: Id returned by a previous upload
            init_msg: InitMsg (or its wire dict)
            label: Public name of the contract; the memo becomes ``Init <label>``
            admin: Address allowed to migrate the contract, usually the sender
            funds: Coins sent along with instantiation
        """
        if not label:
            raise MessageError("A label is required to instantiate a contract")
        request = InstantiateRequest(
            code_id=code_id,
            init_msg=init_msg,
            label=label,
            memo=f"Init {label}",
            admin=admin,
            funds=tuple(funds),
        )
        result = self.session.instantiate(request)
        log.info("contract_instantiated", code_id=code_id, address=result.contract_address)
        return self.use(result.contract_address)

    def use(self, contract_address: str) -> ContractInstance:
        """Bind an existing contract address.  No network call."""
        return ContractInstance(session=self.session, contract_address=contract_address)
