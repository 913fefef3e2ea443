"""Billing client backed by the official Recurly SDK."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import recurly
from recurly import errors as recurly_errors

from ..gateway.exceptions import BillingApiError, BillingValidationError, FieldError
from ..gateway.interfaces import BillingClient, BillingClientFactory
from ..gateway.models import CustomFieldDefinition, Invoice, InvoiceCollection, RemoteAccount

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    """Convert Decimal amounts to numbers the SDK can serialize."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


def _error_message(exc: Exception) -> str:
    error = getattr(exc, "error", None)
    message = getattr(error, "message", None)
    return str(message or exc)


def _field_errors(exc: Exception) -> List[FieldError]:
    error = getattr(exc, "error", None)
    params = getattr(error, "params", None) or []
    field_errors: List[FieldError] = []
    for param in params:
        if isinstance(param, dict):
            field_errors.append(FieldError.from_mapping(param))
        else:
            field_errors.append(FieldError(param=str(getattr(param, "param", "")), message=str(getattr(param, "message", ""))))
    return field_errors


# SDK error class name to HTTP status, e.g. "NotFoundError" -> 404.
_STATUS_BY_ERROR = {name: status for status, name in recurly_errors.ERROR_MAP.items()}


def _status_code(exc: Exception) -> Optional[int]:
    """HTTP status of an SDK error, taken from the nearest mapped error class."""
    for cls in type(exc).__mro__:
        status = _STATUS_BY_ERROR.get(cls.__name__)
        if status is not None:
            return status
    return None


def _translate(exc: Exception) -> BillingApiError:
    if isinstance(exc, recurly_errors.ValidationError):
        return BillingValidationError(_error_message(exc), _field_errors(exc), status_code=_status_code(exc))
    return BillingApiError(_error_message(exc), status_code=_status_code(exc))


def _account(resource: Any) -> RemoteAccount:
    return RemoteAccount(
        id=getattr(resource, "id", None),
        code=resource.code,
        email=getattr(resource, "email", None),
        first_name=getattr(resource, "first_name", None),
        last_name=getattr(resource, "last_name", None),
    )


def _invoice(resource: Any) -> Optional[Invoice]:
    if resource is None:
        return None
    total = getattr(resource, "total", None)
    return Invoice(
        id=getattr(resource, "id", None),
        number=getattr(resource, "number", None),
        state=getattr(resource, "state", None),
        currency=getattr(resource, "currency", None),
        total=Decimal(str(total)) if total is not None else None,
    )


class RecurlyBillingClient(BillingClient):
    """Adapter translating SDK resources and errors into gateway types."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def get_account(self, account_id: str) -> Optional[RemoteAccount]:
        try:
            resource = self._client.get_account(account_id)
        except recurly_errors.NotFoundError:
            return None
        except recurly.RecurlyError as exc:
            raise _translate(exc) from exc
        return _account(resource)

    def create_account(self, payload: Dict[str, Any]) -> RemoteAccount:
        try:
            resource = self._client.create_account(_jsonable(payload))
        except recurly.RecurlyError as exc:
            raise _translate(exc) from exc
        return _account(resource)

    def update_billing_info(self, account_id: str, payload: Dict[str, Any]) -> None:
        try:
            self._client.update_billing_info(account_id, _jsonable(payload))
        except recurly.RecurlyError as exc:
            raise _translate(exc) from exc

    def list_custom_field_definitions(self, params: Dict[str, Any]) -> Sequence[CustomFieldDefinition]:
        try:
            pager = self._client.list_custom_field_definitions(params=params)
            resources = list(pager.items())
        except recurly.RecurlyError as exc:
            raise _translate(exc) from exc
        return [
            CustomFieldDefinition(
                id=getattr(resource, "id", None),
                name=resource.name,
                related_type=getattr(resource, "related_type", None) or params.get("related_type", ""),
            )
            for resource in resources
        ]

    def create_purchase(self, payload: Dict[str, Any]) -> InvoiceCollection:
        try:
            resource = self._client.create_purchase(_jsonable(payload))
        except recurly.RecurlyError as exc:
            raise _translate(exc) from exc
        credit_invoices = [_invoice(item) for item in getattr(resource, "credit_invoices", None) or []]
        return InvoiceCollection(
            charge_invoice=_invoice(getattr(resource, "charge_invoice", None)),
            credit_invoices=[invoice for invoice in credit_invoices if invoice is not None],
        )


class RecurlyClientFactory(BillingClientFactory):
    """Creates SDK clients bounded by a request timeout."""

    def __init__(self, *, timeout: float = 30.0) -> None:
        self.timeout = timeout

    def create(self, private_key: str) -> BillingClient:
        logger.debug("Creating Recurly client timeout=%s", self.timeout)
        return RecurlyBillingClient(recurly.Client(private_key, timeout=self.timeout))


__all__ = ["RecurlyBillingClient", "RecurlyClientFactory"]
