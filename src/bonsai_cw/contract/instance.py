"""Typed handle to one deployed bonsai contract."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..ledger.session import ExecuteRequest, LedgerSession
from ..models import AllGardenersResponse, BonsaiList, Coin, Gardener, decode_response
from .messages import (
    BecomeGardener,
    BuyBonsai,
    CutBonsai,
    GetBonsais,
    GetGardener,
    GetGardeners,
    HandleMsg,
    SellBonsai,
)


@dataclass(frozen=True)
class ContractInstance:
    """
    Binds a contract address to a session.

    Holds no state of its own: every query goes to the ledger, every action
    is a single signed transaction with no retry.
    """

    session: LedgerSession
    contract_address: str

    # ---- queries ----

    def get_bonsais(self) -> BonsaiList:
        data = self.session.query(self.contract_address, GetBonsais())
        return decode_response(BonsaiList, data, self.contract_address)

    def get_gardener(self, address: Optional[str] = None) -> Optional[Gardener]:
        """
        Look up a gardener; defaults to the session's own address.

        Returns None when the address has not become a gardener (the
        contract answers ``null``).
        """
        msg = GetGardener(sender=address or self.session.sender_address)
        data = self.session.query(self.contract_address, msg)
        if data is None:
            return None
        return decode_response(Gardener, data, self.contract_address)

    def get_gardeners(self) -> AllGardenersResponse:
        data = self.session.query(self.contract_address, GetGardeners())
        return decode_response(AllGardenersResponse, data, self.contract_address)

    # ---- actions (return the transaction hash) ----

    def become_gardener(self, name: str) -> str:
        return self._execute(BecomeGardener(name=name))

    def buy_bonsai(self, b_id: str, funds: Sequence[Coin] = ()) -> str:
        return self._execute(BuyBonsai(b_id=b_id), funds)

    def sell_bonsai(self, recipient: str, b_id: str) -> str:
        return self._execute(SellBonsai(recipient=recipient, b_id=b_id))

    def cut_bonsai(self, b_id: str) -> str:
        return self._execute(CutBonsai(b_id=b_id))

    def _execute(self, msg: HandleMsg, funds: Sequence[Coin] = ()) -> str:
        request = ExecuteRequest(contract_address=self.contract_address, msg=msg, funds=tuple(funds))
        return self.session.execute(request).transaction_hash
