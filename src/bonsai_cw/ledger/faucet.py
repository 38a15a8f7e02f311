"""Faucet client - best-effort test-token credit for new addresses."""

from __future__ import annotations

from typing import Optional

import httpx

from ..errors import FaucetError
from ..logging import get_logger

log = get_logger(__name__)


class FaucetClient:
    """
    Posts credit requests to a faucet.

    Args:
        field: Body key naming the token, ``"ticker"`` or ``"denom"`` depending on the faucet
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests)
    """

    def __init__(
        self,
        field: str = "ticker",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.field = field
        self.timeout = timeout
        self.transport = transport

    def credit(self, faucet_url: str, address: str, token: str) -> None:
        """
        Ask the faucet to fund ``address`` with ``token``.

        Not retried.  Raises FaucetError on a non-2xx status or transport
        failure; callers decide whether that matters.
        """
        body = {self.field: token, "address": address}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(faucet_url, json=body)
        except httpx.HTTPError as exc:
            raise FaucetError(f"Faucet request failed: {exc}") from exc

        if not response.is_success:
            raise FaucetError(
                f"Faucet returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        log.info("faucet_credited", address=address, token=token)
