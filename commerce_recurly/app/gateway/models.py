"""Domain models for the Recurly gateway workflow."""
from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ACCOUNT_REFERENCE_PREFIX = "code-"


def account_reference(account_code: str) -> str:
    """Return the identifier the billing API expects when addressing an account by code."""
    return f"{ACCOUNT_REFERENCE_PREFIX}{account_code}"


class PatternKey(str, Enum):
    """Account ID pattern tiers, selected from the contents of an order."""

    DEFAULT = "default"
    PLAN = "plan"
    NONPLAN = "nonplan"
    PLAN_PLUS_NONPLAN = "plan_plus_nonplan"


class Price(BaseModel):
    """Amount in currency units together with its ISO currency code."""

    number: Decimal
    currency_code: str = Field(min_length=3, max_length=3)

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("currency_code")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.upper()


class PurchasedEntity(BaseModel):
    """Product variation referenced by an order item."""

    entity_id: str
    bundle: str = Field(description="Variation type used for plan classification")
    sku: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class OrderItem(BaseModel):
    order_item_id: Optional[str] = None
    title: Optional[str] = None
    purchased_entity: PurchasedEntity
    unit_price: Price
    quantity: Decimal = Field(default=Decimal("1"), ge=0)

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Address(BaseModel):
    """Postal address in the host's address field naming."""

    given_name: Optional[str] = None
    family_name: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    locality: Optional[str] = None
    administrative_area: Optional[str] = None
    postal_code: Optional[str] = None
    country_code: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class BillingProfile(BaseModel):
    address: Address = Field(default_factory=Address)

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Customer(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Order(BaseModel):
    """Read-only snapshot of a placed order supplied by the host."""

    order_id: str
    order_number: Optional[str] = None
    customer: Customer
    billing_profile: Optional[BillingProfile] = None
    items: List[OrderItem] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def billing_address(self) -> Address:
        if self.billing_profile is None:
            return Address()
        return self.billing_profile.address


ORDER_CONTEXT_KEY = "commerce_order"
USER_CONTEXT_KEY = "user"


def order_context(order: Order) -> Dict[str, object]:
    """Token context exposed to templates rendered for an order."""
    return {ORDER_CONTEXT_KEY: order, USER_CONTEXT_KEY: order.customer}


class RemoteAccount(BaseModel):
    """Account as returned by the billing API."""

    id: Optional[str] = None
    code: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class CustomFieldDefinition(BaseModel):
    id: Optional[str] = None
    name: str
    related_type: str

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class CustomFieldValue(BaseModel):
    name: str
    value: str

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class AccountCreateRequest(BaseModel):
    """Account creation payload; empty values are never sent."""

    code: str = Field(min_length=1)
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    custom_fields: Optional[List[CustomFieldValue]] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("email", "first_name", "last_name")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class LineItem(BaseModel):
    currency: str = Field(min_length=3, max_length=3)
    unit_amount: Decimal
    quantity: int = Field(ge=0)
    type: Literal["charge"] = "charge"

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class BillingInfo(BaseModel):
    token_id: str = Field(min_length=1)

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class PurchaseAccount(BaseModel):
    code: str
    billing_info: BillingInfo

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class PurchaseRequest(BaseModel):
    """Purchase payload submitted once per gateway return."""

    currency: str = Field(min_length=3, max_length=3)
    account: PurchaseAccount
    line_items: List[LineItem]

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump()


class Invoice(BaseModel):
    id: Optional[str] = None
    number: Optional[str] = None
    state: Optional[str] = None
    currency: Optional[str] = None
    total: Optional[Decimal] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class InvoiceCollection(BaseModel):
    """Result of a successful purchase."""

    charge_invoice: Optional[Invoice] = None
    credit_invoices: List[Invoice] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class RecurlyNotification(BaseModel):
    """Webhook notification forwarded from Recurly."""

    notification_type: str = Field(alias="type")
    account_code: Optional[str] = Field(default=None, alias="accountCode")
    invoice_number: Optional[str] = Field(default=None, alias="invoiceNumber")
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    payload: Dict[str, object] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class CheckoutAddress(BaseModel):
    """Billing address in the field naming Recurly.js expects."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class CheckoutPayload(BaseModel):
    """Data handed to the Recurly.js checkout before the offsite redirect."""

    public_key: str
    address: CheckoutAddress
    return_url: str
    cancel_url: str

    model_config = ConfigDict(populate_by_name=True, frozen=True)


__all__ = [
    "ACCOUNT_REFERENCE_PREFIX",
    "AccountCreateRequest",
    "Address",
    "BillingInfo",
    "BillingProfile",
    "CheckoutAddress",
    "CheckoutPayload",
    "CustomFieldDefinition",
    "CustomFieldValue",
    "Customer",
    "Invoice",
    "InvoiceCollection",
    "LineItem",
    "ORDER_CONTEXT_KEY",
    "Order",
    "OrderItem",
    "PatternKey",
    "Price",
    "PurchaseAccount",
    "PurchaseRequest",
    "PurchasedEntity",
    "RecurlyNotification",
    "RemoteAccount",
    "USER_CONTEXT_KEY",
    "account_reference",
    "order_context",
]
