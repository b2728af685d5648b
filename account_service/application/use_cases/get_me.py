from __future__ import annotations

from decimal import Decimal

from account_service.application.dto.auth import MeOutput
from account_service.application.ports.ledger_port import LedgerPort
from account_service.domain.entities.user import User


class GetMeUseCase:
    def __init__(self, *, ledger_port: LedgerPort):
        self._ledger_port = ledger_port

    def execute(self, *, user: User) -> MeOutput:
        billing = self._ledger_port.get_billing(user_id=user.id)
        return MeOutput(
            user_id=user.id,
            name=user.name,
            email=user.email,
            photo=user.photo,
            role=user.role,
            telegram_name=user.telegram_name,
            verified=user.verified,
            balance=billing.amount if billing is not None else Decimal("0"),
        )
