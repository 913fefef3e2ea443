"""Data exchanged with the Recurly.js offsite checkout."""
from __future__ import annotations

from typing import Any, Mapping, Optional

from .exceptions import PaymentGatewayException
from .models import CheckoutAddress, CheckoutPayload, Order

TOKEN_FIELD = "field_recurly_token"


def checkout_address(order: Order) -> CheckoutAddress:
    address = order.billing_address
    return CheckoutAddress(
        first_name=address.given_name,
        last_name=address.family_name,
        address1=address.address_line1,
        address2=address.address_line2,
        city=address.locality,
        state=address.administrative_area,
        postal_code=address.postal_code,
        country=address.country_code,
    )


def build_checkout_payload(order: Order, *, public_key: str, return_url: str, cancel_url: str) -> CheckoutPayload:
    return CheckoutPayload(
        public_key=public_key,
        address=checkout_address(order),
        return_url=return_url,
        cancel_url=cancel_url,
    )


def extract_recurly_token(form: Mapping[str, Any]) -> Optional[str]:
    """Return the Recurly.js token posted back with the offsite form, if any.

    The token lives under ``payment_process[offsite_payment][field_recurly_token]``.
    """

    payment_process = form.get("payment_process")
    if not isinstance(payment_process, Mapping):
        return None
    offsite = payment_process.get("offsite_payment")
    if not isinstance(offsite, Mapping):
        return None
    token = offsite.get(TOKEN_FIELD)
    if not isinstance(token, str) or not token.strip():
        return None
    return token.strip()


def require_recurly_token(form: Mapping[str, Any]) -> str:
    token = extract_recurly_token(form)
    if token is None:
        raise PaymentGatewayException("Missing Recurly billing token")
    return token


__all__ = [
    "TOKEN_FIELD",
    "build_checkout_payload",
    "checkout_address",
    "extract_recurly_token",
    "require_recurly_token",
]
