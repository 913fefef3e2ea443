"""Resolution of an order to a remote billing account."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .config import AccountIdPatterns, CustomFieldMapping
from .exceptions import (
    AccountCreationError,
    AccountLookupError,
    BillingApiError,
    BillingValidationError,
    TemplateRenderError,
)
from .interfaces import BillingClient, TemplateRenderer
from .models import (
    AccountCreateRequest,
    CustomFieldDefinition,
    CustomFieldValue,
    Order,
    PatternKey,
    RemoteAccount,
    account_reference,
    order_context,
)

logger = logging.getLogger(__name__)

ACCOUNT_RELATED_TYPE = "account"


@dataclass
class AccountResolver:
    """Turns an order into an account code and a remote account."""

    patterns: AccountIdPatterns
    custom_fields: CustomFieldMapping
    renderer: TemplateRenderer

    def render_account_code(self, order: Order, pattern_key: PatternKey) -> str:
        pattern = self.patterns.pattern_for(pattern_key)
        if not pattern:
            raise TemplateRenderError(f"No account ID pattern is configured for '{pattern_key.value}'")

        account_code = self.renderer.render(pattern, order_context(order)).strip()
        if not account_code:
            raise TemplateRenderError(
                f"Account ID pattern '{pattern_key.value}' rendered an empty account code for order {order.order_id}"
            )
        return account_code

    def resolve(
        self,
        client: BillingClient,
        order: Order,
        pattern_key: PatternKey,
    ) -> Tuple[str, RemoteAccount]:
        account_code = self.render_account_code(order, pattern_key)
        return account_code, self.get_or_create_account(client, account_code, order)

    def get_or_create_account(self, client: BillingClient, account_code: str, order: Order) -> RemoteAccount:
        account = self.get_account(client, account_code)
        if account is not None:
            logger.debug("Found existing billing account %s", account_code)
            return account
        return self.create_account(client, account_code, order)

    def get_account(self, client: BillingClient, account_code: str) -> Optional[RemoteAccount]:
        try:
            return client.get_account(account_reference(account_code))
        except BillingApiError as exc:
            raise AccountLookupError(f"Billing account lookup failed for {account_code}: {exc.message}") from exc

    def create_account(self, client: BillingClient, account_code: str, order: Order) -> RemoteAccount:
        request = self.build_create_request(client, account_code, order)
        try:
            account = client.create_account(request.to_payload())
        except BillingValidationError as exc:
            if exc.has_param("code"):
                return self._recover_taken_code(client, account_code, exc)
            raise AccountCreationError(f"Billing account not created. Reason: {exc.message}") from exc
        except BillingApiError as exc:
            raise AccountCreationError(f"Billing account not created. Reason: {exc.message}") from exc

        logger.info("Created billing account %s for order %s", account_code, order.order_id)
        return account

    def build_create_request(self, client: BillingClient, account_code: str, order: Order) -> AccountCreateRequest:
        address = order.billing_address
        custom_fields = None
        if self.custom_fields.account_fields:
            custom_fields = self.build_custom_fields(client, order)
        return AccountCreateRequest(
            code=account_code,
            email=order.customer.email,
            first_name=address.given_name,
            last_name=address.family_name,
            custom_fields=custom_fields,
        )

    def build_custom_fields(self, client: BillingClient, order: Order) -> List[CustomFieldValue]:
        """Render configured account fields that are also defined remotely."""
        try:
            definitions = client.list_custom_field_definitions({"related_type": ACCOUNT_RELATED_TYPE})
        except BillingApiError as exc:
            raise AccountCreationError(f"Unable to list custom field definitions: {exc.message}") from exc

        defined: Dict[str, CustomFieldDefinition] = {definition.name: definition for definition in definitions}
        values: List[CustomFieldValue] = []
        for name, pattern in self.custom_fields.account_fields.items():
            if name not in defined:
                logger.debug("Skipping custom field %s: not defined for accounts", name)
                continue
            values.append(CustomFieldValue(name=name, value=self.renderer.render(pattern, order_context(order))))
        return values

    def _recover_taken_code(
        self,
        client: BillingClient,
        account_code: str,
        error: BillingValidationError,
    ) -> RemoteAccount:
        # Another request created the account between our lookup and create.
        logger.warning("Billing account %s already exists, fetching it again", account_code)
        account = self.get_account(client, account_code)
        if account is None:
            raise AccountCreationError(f"Billing account not created. Reason: {error.message}") from error
        return account


__all__ = ["ACCOUNT_RELATED_TYPE", "AccountResolver"]
