from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from account_service.api.deps import (
    get_create_invoice_use_case,
    get_current_user,
    get_notification_verifier,
    get_process_payment_notification_use_case,
)
from account_service.api.errors import status_code_for, to_http_exception
from account_service.api.schemas.payments import CreateInvoiceRequest, CreateInvoiceResponse
from account_service.application.dto.billing import CreateInvoiceInput, PaymentNotificationInput
from account_service.application.use_cases.create_invoice import CreateInvoiceUseCase
from account_service.application.use_cases.process_payment_notification import (
    ProcessPaymentNotificationUseCase,
)
from account_service.domain.entities.user import User
from account_service.domain.exceptions import DomainError


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments")


@router.post("/invoice", response_model=CreateInvoiceResponse)
def create_invoice(
    req: CreateInvoiceRequest,
    current_user: User = Depends(get_current_user),
    use_case: CreateInvoiceUseCase = Depends(get_create_invoice_use_case),
):
    try:
        output = use_case.execute(CreateInvoiceInput(user_id=current_user.id, amount=req.amount))
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    return CreateInvoiceResponse(
        data={
            "payment_id": output.payment_id,
            "order_id": output.order_id,
            "amount": output.amount,
            "status": output.status,
            "payment_url": output.payment_url,
        }
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message})


@router.post("/notification")
async def payment_notification(
    request: Request,
    use_case: ProcessPaymentNotificationUseCase = Depends(get_process_payment_notification_use_case),
    verifier=Depends(get_notification_verifier),
):
    try:
        payload = json.loads(await request.body())
    except (ValueError, UnicodeDecodeError) as exc:
        return _error(400, f"Failed to parse request body: {exc}")
    if not isinstance(payload, dict):
        return _error(400, "Request body must be a JSON object.")

    if verifier is not None and not verifier(payload=payload):
        logger.warning("payments: notification_rejected reason=bad_token")
        return _error(401, "Notification token is invalid.")

    try:
        output = await run_in_threadpool(use_case.execute, PaymentNotificationInput(payload=payload))
    except DomainError as exc:
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.error("payments: settlement_failed type=%s error=%s", type(exc).__name__, exc)
            return _error(status_code, "Failed to settle payment.")
        return _error(status_code, str(exc))

    data = {"payment_id": output.payment_id, "outcome": output.outcome}
    if output.credited_amount is not None:
        data["credited_amount"] = str(output.credited_amount)
    return JSONResponse(status_code=200, content={"status": "success", "data": data})
