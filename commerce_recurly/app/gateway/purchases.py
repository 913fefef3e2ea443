"""Purchase submission for a resolved billing account."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Callable, List, Optional, Sequence

from .exceptions import (
    BillingApiError,
    BillingValidationError,
    PurchaseSubmissionError,
    PurchaseValidationError,
)
from .interfaces import BillingClient
from .models import (
    BillingInfo,
    InvoiceCollection,
    LineItem,
    Order,
    OrderItem,
    PurchaseAccount,
    PurchaseRequest,
    account_reference,
)

logger = logging.getLogger(__name__)


def whole_quantity(quantity: Decimal) -> int:
    """Floor an order item quantity to the whole number the billing API accepts."""
    if quantity < 0:
        raise ValueError("quantity must be >= 0")
    return int(Decimal(quantity).to_integral_value(rounding=ROUND_FLOOR))


def line_item_from_order_item(item: OrderItem) -> LineItem:
    return LineItem(
        currency=item.unit_price.currency_code,
        # Currency units, not minor units.
        unit_amount=item.unit_price.number,
        quantity=whole_quantity(item.quantity),
    )


def build_line_items(order: Order) -> List[LineItem]:
    return [line_item_from_order_item(item) for item in order.items]


def require_line_items(line_items: Sequence[LineItem]) -> None:
    if not line_items:
        raise PurchaseSubmissionError("Cannot submit a purchase without line items")


def build_purchase_request(account_code: str, line_items: Sequence[LineItem], token_id: str) -> PurchaseRequest:
    """Build the purchase payload.

    The purchase currency is taken from the first line item; orders are assumed
    to be priced in a single currency.
    """
    require_line_items(line_items)
    return PurchaseRequest(
        currency=line_items[0].currency,
        account=PurchaseAccount(code=account_code, billing_info=BillingInfo(token_id=token_id)),
        line_items=list(line_items),
    )


@dataclass
class PurchaseSubmitter:
    """Attaches billing details to an account and charges its line items."""

    def attach_billing_info(self, client: BillingClient, account_code: str, token_id: str) -> None:
        try:
            client.update_billing_info(account_reference(account_code), {"token_id": token_id})
        except BillingApiError as exc:
            raise PurchaseSubmissionError(f"Billing info could not be updated: {exc.message}") from exc
        logger.debug("Updated billing info for account %s", account_code)

    def create_purchase(
        self,
        client: BillingClient,
        account_code: str,
        line_items: Sequence[LineItem],
        token_id: str,
    ) -> InvoiceCollection:
        request = build_purchase_request(account_code, line_items, token_id)
        try:
            result = client.create_purchase(request.to_payload())
        except BillingValidationError as exc:
            raise PurchaseValidationError(exc.message, exc.params) from exc
        except BillingApiError as exc:
            raise PurchaseSubmissionError(f"Purchase not created: {exc.message}") from exc

        invoice = result.charge_invoice
        logger.info(
            "Purchase created for account %s invoice=%s total=%s %s",
            account_code,
            invoice.number if invoice else None,
            invoice.total if invoice else None,
            request.currency,
        )
        return result

    def submit(
        self,
        client: BillingClient,
        account_code: str,
        line_items: Sequence[LineItem],
        token_id: str,
        *,
        on_billing_info_attached: Optional[Callable[[], None]] = None,
    ) -> InvoiceCollection:
        """Attach the billing token, then charge the line items."""
        require_line_items(line_items)
        self.attach_billing_info(client, account_code, token_id)
        if on_billing_info_attached is not None:
            on_billing_info_attached()
        return self.create_purchase(client, account_code, line_items, token_id)


__all__ = [
    "PurchaseSubmitter",
    "build_line_items",
    "build_purchase_request",
    "line_item_from_order_item",
    "require_line_items",
    "whole_quantity",
]
