"""Recurly payment gateway: account resolution and purchase submission."""

from .accounts import AccountResolver
from .checkout import build_checkout_payload, extract_recurly_token, require_recurly_token
from .config import (
    AccountIdPatterns,
    CustomFieldMapping,
    DEFAULT_PLAN_VARIATION,
    GatewayConfiguration,
)
from .exceptions import (
    AccountCreationError,
    AccountLookupError,
    BillingApiError,
    BillingValidationError,
    FieldError,
    PaymentGatewayException,
    PurchaseSubmissionError,
    PurchaseValidationError,
    RecurlyGatewayError,
    SettingsValidationError,
    TemplateRenderError,
)
from .interfaces import BillingClient, BillingClientFactory, Messenger, TemplateRenderer
from .models import (
    Address,
    BillingProfile,
    CheckoutAddress,
    CheckoutPayload,
    CustomFieldDefinition,
    Customer,
    Invoice,
    InvoiceCollection,
    LineItem,
    Order,
    OrderItem,
    PatternKey,
    Price,
    PurchasedEntity,
    RecurlyNotification,
    RemoteAccount,
)
from .notifications import RecurlyNotificationHandler
from .patterns import classify_items, select_pattern, select_pattern_for_order
from .purchases import PurchaseSubmitter, build_line_items
from .service import RecurlyGateway, ReturnAttempt, ReturnState

__all__ = [
    "AccountCreationError",
    "AccountIdPatterns",
    "AccountLookupError",
    "AccountResolver",
    "Address",
    "BillingApiError",
    "BillingClient",
    "BillingClientFactory",
    "BillingProfile",
    "BillingValidationError",
    "CheckoutAddress",
    "CheckoutPayload",
    "CustomFieldDefinition",
    "CustomFieldMapping",
    "Customer",
    "DEFAULT_PLAN_VARIATION",
    "FieldError",
    "GatewayConfiguration",
    "Invoice",
    "InvoiceCollection",
    "LineItem",
    "Messenger",
    "Order",
    "OrderItem",
    "PatternKey",
    "PaymentGatewayException",
    "Price",
    "PurchaseSubmissionError",
    "PurchaseSubmitter",
    "PurchaseValidationError",
    "PurchasedEntity",
    "RecurlyGateway",
    "RecurlyGatewayError",
    "RecurlyNotification",
    "RecurlyNotificationHandler",
    "RemoteAccount",
    "ReturnAttempt",
    "ReturnState",
    "SettingsValidationError",
    "TemplateRenderError",
    "TemplateRenderer",
    "build_checkout_payload",
    "build_line_items",
    "classify_items",
    "extract_recurly_token",
    "require_recurly_token",
    "select_pattern",
    "select_pattern_for_order",
]
