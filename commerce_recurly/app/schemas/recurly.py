"""API schemas for the Recurly gateway endpoints."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..gateway import CheckoutPayload, InvoiceCollection, Order


class CheckoutRequest(BaseModel):
    order: Order
    return_url: str = Field(alias="returnUrl")
    cancel_url: str = Field(alias="cancelUrl")

    model_config = ConfigDict(populate_by_name=True)


class CheckoutResponse(BaseModel):
    checkout: CheckoutPayload

    model_config = ConfigDict(populate_by_name=True)


class PaymentReturnRequest(BaseModel):
    """Order snapshot plus the form values posted back by Recurly.js."""

    order: Order
    payment_process: Dict[str, Any] = Field(default_factory=dict, alias="paymentProcess")

    model_config = ConfigDict(populate_by_name=True)

    def form_values(self) -> Dict[str, Any]:
        return {"payment_process": self.payment_process}


class PurchaseResponse(BaseModel):
    order_id: str = Field(alias="orderId")
    invoice_number: Optional[str] = Field(default=None, alias="invoiceNumber")
    invoice_state: Optional[str] = Field(default=None, alias="invoiceState")
    total: Optional[Decimal] = None
    currency: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_invoices(cls, order_id: str, invoices: InvoiceCollection) -> "PurchaseResponse":
        invoice = invoices.charge_invoice
        if invoice is None:
            return cls(order_id=order_id)
        return cls(
            order_id=order_id,
            invoice_number=invoice.number,
            invoice_state=invoice.state,
            total=invoice.total,
            currency=invoice.currency,
        )
