from __future__ import annotations

from pydantic import BaseModel, Field


class CreateInvoiceRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Amount in minor currency units.")


class InvoiceResponseData(BaseModel):
    payment_id: str
    order_id: str
    amount: int
    status: str
    payment_url: str | None


class CreateInvoiceResponse(BaseModel):
    status: str = "success"
    data: InvoiceResponseData
