"""Collaborators the gateway workflow depends on."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol, Sequence

from .models import CustomFieldDefinition, InvoiceCollection, RemoteAccount


class BillingClient(Protocol):
    """Subset of the billing API used by the gateway.

    ``get_account`` returns ``None`` when no account matches; every other
    failure is raised as :class:`~.exceptions.BillingApiError`.
    """

    def get_account(self, account_id: str) -> Optional[RemoteAccount]:
        ...

    def create_account(self, payload: Dict[str, Any]) -> RemoteAccount:
        ...

    def update_billing_info(self, account_id: str, payload: Dict[str, Any]) -> None:
        ...

    def list_custom_field_definitions(self, params: Dict[str, Any]) -> Sequence[CustomFieldDefinition]:
        ...

    def create_purchase(self, payload: Dict[str, Any]) -> InvoiceCollection:
        ...


class BillingClientFactory(Protocol):
    """Builds a billing client bound to one API key."""

    def create(self, private_key: str) -> BillingClient:
        ...


class TemplateRenderer(Protocol):
    """Renders token templates against a context of named objects."""

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        ...


class Messenger(Protocol):
    """Surfaces messages to the shopper that triggered the request."""

    def add_error(self, message: str) -> None:
        ...


__all__ = ["BillingClient", "BillingClientFactory", "Messenger", "TemplateRenderer"]
