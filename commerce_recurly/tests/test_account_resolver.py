"""Unit tests for resolving orders to remote billing accounts."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import pytest

from commerce_recurly.app.gateway import (
    AccountCreationError,
    AccountIdPatterns,
    AccountLookupError,
    AccountResolver,
    Address,
    BillingApiError,
    BillingClient,
    BillingProfile,
    BillingValidationError,
    CustomFieldDefinition,
    CustomFieldMapping,
    Customer,
    FieldError,
    InvoiceCollection,
    Order,
    OrderItem,
    PatternKey,
    Price,
    PurchasedEntity,
    RemoteAccount,
    TemplateRenderError,
)
from commerce_recurly.app.tokens import TokenRenderer


class FakeBillingClient(BillingClient):
    def __init__(
        self,
        *,
        accounts: Optional[List[Optional[RemoteAccount]]] = None,
        definitions: Sequence[CustomFieldDefinition] = (),
        create_error: Optional[Exception] = None,
        lookup_error: Optional[Exception] = None,
    ) -> None:
        self.accounts = list(accounts or [None])
        self.definitions = list(definitions)
        self.create_error = create_error
        self.lookup_error = lookup_error
        self.calls: List[tuple] = []

    def get_account(self, account_id: str) -> Optional[RemoteAccount]:
        self.calls.append(("get_account", account_id))
        if self.lookup_error is not None:
            raise self.lookup_error
        if len(self.accounts) > 1:
            return self.accounts.pop(0)
        return self.accounts[0]

    def create_account(self, payload: Dict[str, Any]) -> RemoteAccount:
        self.calls.append(("create_account", payload))
        if self.create_error is not None:
            raise self.create_error
        return RemoteAccount(id="acct-1", code=payload["code"], email=payload.get("email"))

    def update_billing_info(self, account_id: str, payload: Dict[str, Any]) -> None:  # pragma: no cover
        raise AssertionError("not used")

    def list_custom_field_definitions(self, params: Dict[str, Any]) -> Sequence[CustomFieldDefinition]:
        self.calls.append(("list_custom_field_definitions", params))
        return self.definitions

    def create_purchase(self, payload: Dict[str, Any]) -> InvoiceCollection:  # pragma: no cover
        raise AssertionError("not used")

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]


def _order(*, email: Optional[str] = "ada@example.com", given_name: Optional[str] = "Ada", family_name: Optional[str] = "Lovelace") -> Order:
    return Order(
        order_id="100",
        customer=Customer(id="7", email=email),
        billing_profile=BillingProfile(address=Address(given_name=given_name, family_name=family_name)),
        items=[
            OrderItem(
                purchased_entity=PurchasedEntity(entity_id="1", bundle="default"),
                unit_price=Price(number=Decimal("10.00"), currency_code="USD"),
            )
        ],
    )


def _resolver(
    patterns: Optional[AccountIdPatterns] = None,
    account_fields: Optional[Dict[str, str]] = None,
) -> AccountResolver:
    return AccountResolver(
        patterns=patterns or AccountIdPatterns(default="user-[user:id]"),
        custom_fields=CustomFieldMapping(account_fields=account_fields or {}),
        renderer=TokenRenderer(),
    )


def test_existing_account_is_reused_without_create():
    existing = RemoteAccount(id="acct-9", code="user-7")
    client = FakeBillingClient(accounts=[existing])

    code, account = _resolver().resolve(client, _order(), PatternKey.DEFAULT)

    assert code == "user-7"
    assert account is existing
    assert client.calls == [("get_account", "code-user-7")]


def test_missing_account_is_created_with_order_details():
    client = FakeBillingClient()

    code, account = _resolver().resolve(client, _order(), PatternKey.NONPLAN)

    assert code == "user-7"
    assert account.code == "user-7"
    assert client.call_names() == ["get_account", "create_account"]
    assert client.calls[1][1] == {
        "code": "user-7",
        "email": "ada@example.com",
        "first_name": "Ada",
        "last_name": "Lovelace",
    }


def test_create_payload_omits_empty_values():
    client = FakeBillingClient()

    _resolver().get_or_create_account(client, "user-7", _order(email="", given_name="  ", family_name=None))

    assert client.calls[1][1] == {"code": "user-7"}


def test_pattern_tier_falls_back_to_default():
    patterns = AccountIdPatterns(default="user-[user:id]", nonplan="shop-[user:id]")
    resolver = _resolver(patterns)

    assert resolver.render_account_code(_order(), PatternKey.PLAN) == "user-7"
    assert resolver.render_account_code(_order(), PatternKey.PLAN_PLUS_NONPLAN) == "user-7"
    assert resolver.render_account_code(_order(), PatternKey.NONPLAN) == "shop-7"


def test_empty_account_code_is_rejected():
    resolver = _resolver(AccountIdPatterns(default="[user:email]"))

    with pytest.raises(TemplateRenderError):
        resolver.render_account_code(_order(email=None), PatternKey.DEFAULT)


def test_custom_fields_limited_to_remote_definitions():
    client = FakeBillingClient(
        definitions=[
            CustomFieldDefinition(name="crm_id", related_type="account"),
            CustomFieldDefinition(name="loyalty_tier", related_type="account"),
        ]
    )
    resolver = _resolver(account_fields={"crm_id": "crm-[user:id]", "not_defined": "[user:email]"})

    resolver.get_or_create_account(client, "user-7", _order())

    assert ("list_custom_field_definitions", {"related_type": "account"}) in client.calls
    payload = client.calls[-1][1]
    assert payload["custom_fields"] == [{"name": "crm_id", "value": "crm-7"}]


def test_custom_fields_not_listed_when_none_configured():
    client = FakeBillingClient()

    _resolver().get_or_create_account(client, "user-7", _order())

    assert "list_custom_field_definitions" not in client.call_names()
    assert "custom_fields" not in client.calls[-1][1]


def test_taken_code_is_fetched_again():
    existing = RemoteAccount(id="acct-2", code="user-7")
    client = FakeBillingClient(
        accounts=[None, existing],
        create_error=BillingValidationError(
            "Code has already been taken",
            [FieldError(param="code", message="has already been taken")],
        ),
    )

    account = _resolver().get_or_create_account(client, "user-7", _order())

    assert account is existing
    assert client.call_names() == ["get_account", "create_account", "get_account"]


def test_validation_error_reports_reason():
    client = FakeBillingClient(
        create_error=BillingValidationError(
            "Email is invalid",
            [FieldError(param="email", message="is invalid")],
        ),
    )

    with pytest.raises(AccountCreationError) as exc_info:
        _resolver().get_or_create_account(client, "user-7", _order())

    assert str(exc_info.value) == "Billing account not created. Reason: Email is invalid"
    assert client.call_names() == ["get_account", "create_account"]


def test_lookup_failure_is_not_treated_as_missing():
    client = FakeBillingClient(lookup_error=BillingApiError("Service unavailable", status_code=503))

    with pytest.raises(AccountLookupError):
        _resolver().get_or_create_account(client, "user-7", _order())

    assert client.call_names() == ["get_account"]
