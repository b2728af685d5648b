from __future__ import annotations

from typing import Protocol

from account_service.application.dto.billing import PaymentInitRequest, PaymentInitResult


class PaymentGatewayPort(Protocol):
    def init_payment(self, request: PaymentInitRequest) -> PaymentInitResult:
        ...

    def verify_notification(self, *, payload: dict) -> bool:
        ...
