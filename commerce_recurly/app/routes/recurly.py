"""API routes exposing the Recurly offsite payment flow."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response, status

from ..gateway import PaymentGatewayException, RecurlyNotification, extract_recurly_token
from ..schemas.recurly import (
    CheckoutRequest,
    CheckoutResponse,
    PaymentReturnRequest,
    PurchaseResponse,
)
from ..services.recurly import get_notification_handler, get_recurly_gateway

router = APIRouter(prefix="/api/recurly", tags=["recurly"])


@router.post("/checkout", response_model=CheckoutResponse)
def build_checkout(payload: CheckoutRequest) -> CheckoutResponse:
    gateway = get_recurly_gateway()
    checkout = gateway.build_checkout(
        payload.order,
        return_url=payload.return_url,
        cancel_url=payload.cancel_url,
    )
    return CheckoutResponse(checkout=checkout)


@router.post("/return", response_model=PurchaseResponse)
def complete_payment(payload: PaymentReturnRequest) -> PurchaseResponse:
    gateway = get_recurly_gateway()
    token = extract_recurly_token(payload.form_values())
    try:
        invoices = gateway.on_return(payload.order, token)
    except PaymentGatewayException as exc:
        raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=str(exc)) from exc
    return PurchaseResponse.from_invoices(payload.order.order_id, invoices)


@router.post("/webhook", status_code=status.HTTP_204_NO_CONTENT)
async def receive_webhook(payload: RecurlyNotification) -> Response:
    get_notification_handler().handle(payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
