"""
LCD (REST) client for CosmWasm ledgers.

Thin httpx wrapper over the three endpoints the session needs: account
lookup, smart-contract query, and block-mode broadcast of signed amino
transactions.  ``LedgerClient`` is the narrow interface the session depends
on, so another transport can be swapped in.
"""

from __future__ import annotations

import base64
import json
from typing import Any, Optional, Protocol

import httpx

from ..errors import QueryError, TransactionError
from ..logging import get_logger

log = get_logger(__name__)


class LedgerClient(Protocol):
    def get_account(self, address: str) -> Optional[dict[str, Any]]:
        ...

    def query_smart(self, contract_address: str, query: dict[str, Any]) -> Any:
        ...

    def broadcast(self, tx: dict[str, Any]) -> dict[str, Any]:
        ...


def _error_text(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict) and "error" in data:
        return str(data["error"])
    return response.text


def _unwrap_result(data: Any) -> Any:
    # Legacy LCD responses wrap the payload as {"height": ..., "result": ...}
    if isinstance(data, dict) and "result" in data and "height" in data:
        return data["result"]
    return data


class LcdClient:
    """
    httpx-backed LedgerClient.

    Args:
        base_url: LCD endpoint, e.g. ``https://lcd.coralnet.cosmwasm.com``
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def __enter__(self) -> "LcdClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_account(self, address: str) -> Optional[dict[str, Any]]:
        """
        Look up an account.

        Returns:
            The account ``value`` dict (address, coins, account_number,
            sequence, public_key), or None when the ledger has never seen it.

        Raises:
            QueryError: Transport failure or unexpected response
        """
        try:
            response = self._client.get(f"/auth/accounts/{address}")
        except httpx.HTTPError as exc:
            raise QueryError(f"Account lookup failed: {exc}") from exc

        if response.status_code == 404:
            return None
        if response.is_error:
            raise QueryError(
                f"Account lookup failed ({response.status_code}): {_error_text(response)}",
                raw_error=_error_text(response),
            )

        try:
            result = _unwrap_result(response.json())
        except ValueError as exc:
            raise QueryError(
                f"Account lookup returned a non-JSON body: {exc}",
                raw_error=response.text,
            ) from exc
        value = result.get("value", result) if isinstance(result, dict) else None
        if not isinstance(value, dict) or not value.get("address"):
            return None
        return value

    def query_smart(self, contract_address: str, query: dict[str, Any]) -> Any:
        """
        Run a read-only smart query against a contract.

        Raises:
            QueryError: Unknown contract, query rejected by the contract, or
                transport failure.  The ledger's error text is preserved.
        """
        encoded = json.dumps(query, separators=(",", ":")).encode("utf-8").hex()
        try:
            response = self._client.get(
                f"/wasm/contract/{contract_address}/smart/{encoded}",
                params={"encoding": "hex"},
            )
        except httpx.HTTPError as exc:
            raise QueryError(
                f"Query to {contract_address} failed: {exc}",
                contract_address=contract_address,
            ) from exc

        if response.is_error:
            raw = _error_text(response)
            raise QueryError(
                f"Query to {contract_address} failed: {raw}",
                contract_address=contract_address,
                raw_error=raw,
            )

        try:
            result = _unwrap_result(response.json())
            smart = result["smart"]
            return json.loads(base64.b64decode(smart))
        except (KeyError, TypeError, ValueError) as exc:
            raise QueryError(
                f"Unreadable query response from {contract_address}: {exc}",
                contract_address=contract_address,
                raw_error=response.text,
            ) from exc

    def broadcast(self, tx: dict[str, Any]) -> dict[str, Any]:
        """
        Broadcast a signed StdTx in block mode.

        Returns:
            Raw broadcast response (txhash, height, code, raw_log, logs)

        Raises:
            TransactionError: HTTP-level rejection or transport failure
        """
        try:
            response = self._client.post("/txs", json={"tx": tx, "mode": "block"})
        except httpx.HTTPError as exc:
            raise TransactionError(f"Broadcast failed: {exc}", raw_log=str(exc)) from exc

        if response.is_error:
            raw = _error_text(response)
            log.warning("tx_http_rejected", status=response.status_code, raw_log=raw)
            raise TransactionError(f"Broadcast rejected ({response.status_code}): {raw}", raw_log=raw)

        try:
            data = response.json()
        except ValueError as exc:
            raise TransactionError(
                f"Broadcast returned a non-JSON body: {exc}",
                raw_log=response.text,
            ) from exc
        if not isinstance(data, dict):
            raise TransactionError(f"Unexpected broadcast response: {data!r}", raw_log=response.text)
        return data
