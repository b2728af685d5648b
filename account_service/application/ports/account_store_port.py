from __future__ import annotations

from typing import Callable, Protocol, TypeVar

from account_service.application.ports.accounts_port import AccountsPort
from account_service.application.ports.ledger_port import LedgerPort


TStoreResult = TypeVar("TStoreResult")


class AccountStorePort(AccountsPort, LedgerPort, Protocol):
    """Accounts and ledger rows behind one unit of work."""

    def execute_in_transaction(self, fn: Callable[[AccountStorePort], TStoreResult]) -> TStoreResult:
        ...
