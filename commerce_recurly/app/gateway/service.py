"""Gateway service coordinating the return from the offsite payment form."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .accounts import AccountResolver
from .checkout import build_checkout_payload
from .config import GatewayConfiguration
from .exceptions import PaymentGatewayException
from .interfaces import BillingClientFactory, Messenger, TemplateRenderer
from .models import CheckoutPayload, InvoiceCollection, Order
from .patterns import select_pattern_for_order
from .purchases import PurchaseSubmitter, build_line_items, require_line_items

logger = logging.getLogger(__name__)


class ReturnState(str, Enum):
    """Progress of a single return-from-redirect run."""

    START = "start"
    PATTERN_SELECTED = "pattern_selected"
    ACCOUNT_RESOLVED = "account_resolved"
    BILLING_INFO_ATTACHED = "billing_info_attached"
    PURCHASE_SUBMITTED = "purchase_submitted"
    FAILED = "failed"


@dataclass
class ReturnAttempt:
    """Trace of one ``on_return`` run, kept for logging and inspection."""

    order_id: str
    states: List[ReturnState] = field(default_factory=lambda: [ReturnState.START])
    account_code: Optional[str] = None
    error: Optional[str] = None

    @property
    def state(self) -> ReturnState:
        return self.states[-1]

    def advance(self, state: ReturnState) -> None:
        logger.debug("Order %s: %s -> %s", self.order_id, self.state.value, state.value)
        self.states.append(state)


@dataclass
class RecurlyGateway:
    """Offsite Recurly payment gateway.

    Collaborators are passed in explicitly: the billing client factory, the
    token renderer, and the messenger used for shopper-facing errors.
    """

    configuration: GatewayConfiguration
    client_factory: BillingClientFactory
    renderer: TemplateRenderer
    messenger: Messenger
    submitter: PurchaseSubmitter = field(default_factory=PurchaseSubmitter)

    @property
    def account_resolver(self) -> AccountResolver:
        return AccountResolver(
            patterns=self.configuration.account_id_patterns,
            custom_fields=self.configuration.custom_fields,
            renderer=self.renderer,
        )

    def build_checkout(self, order: Order, *, return_url: str, cancel_url: str) -> CheckoutPayload:
        return build_checkout_payload(
            order,
            public_key=self.configuration.public_key,
            return_url=return_url,
            cancel_url=cancel_url,
        )

    def on_return(
        self,
        order: Order,
        recurly_token: Optional[str],
        *,
        attempt: Optional[ReturnAttempt] = None,
    ) -> InvoiceCollection:
        """Create or reuse the order's billing account and submit its purchase.

        Runs once with no retry. Any failure is shown to the shopper and raised
        as :class:`PaymentGatewayException` carrying the run's
        :class:`ReturnAttempt`; an account created before the failure is left
        in place and reused by code on the next attempt. Callers that want the
        trace of a successful run pass their own ``attempt``.
        """

        if attempt is None:
            attempt = ReturnAttempt(order_id=order.order_id)
        try:
            return self._process_return(order, recurly_token, attempt)
        except Exception as exc:
            message = str(exc)
            attempt.error = message
            attempt.advance(ReturnState.FAILED)
            logger.warning(
                "Payment failed for order %s account=%s after %s: %s",
                order.order_id,
                attempt.account_code,
                attempt.states[-2].value,
                message,
            )
            self.messenger.add_error(f"Purchase could not be completed: {message}")
            raise PaymentGatewayException(message, attempt=attempt) from exc

    def _process_return(self, order: Order, recurly_token: Optional[str], attempt: ReturnAttempt) -> InvoiceCollection:
        if not recurly_token or not recurly_token.strip():
            raise PaymentGatewayException("Missing Recurly billing token")
        token_id = recurly_token.strip()

        pattern_key = select_pattern_for_order(order, self.configuration.plan_variation_types)
        resolver = self.account_resolver
        account_code = resolver.render_account_code(order, pattern_key)
        attempt.account_code = account_code
        attempt.advance(ReturnState.PATTERN_SELECTED)
        logger.info("Order %s uses account pattern %s -> %s", order.order_id, pattern_key.value, account_code)

        line_items = build_line_items(order)
        require_line_items(line_items)

        client = self.client_factory.create(self.configuration.private_key)
        resolver.get_or_create_account(client, account_code, order)
        attempt.advance(ReturnState.ACCOUNT_RESOLVED)

        result = self.submitter.submit(
            client,
            account_code,
            line_items,
            token_id,
            on_billing_info_attached=lambda: attempt.advance(ReturnState.BILLING_INFO_ATTACHED),
        )
        attempt.advance(ReturnState.PURCHASE_SUBMITTED)
        logger.info("Order %s paid: %s", order.order_id, " -> ".join(state.value for state in attempt.states))
        return result


__all__ = ["RecurlyGateway", "ReturnAttempt", "ReturnState"]
