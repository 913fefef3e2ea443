"""Exceptions raised by the Recurly gateway workflow."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional


@dataclass(frozen=True)
class FieldError:
    """A single field level rejection reported by the billing API."""

    param: str
    message: str

    @classmethod
    def from_mapping(cls, value: Mapping[str, object]) -> "FieldError":
        return cls(param=str(value.get("param", "")), message=str(value.get("message", "")))


class RecurlyGatewayError(Exception):
    """Base class for every failure raised inside the gateway workflow."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TemplateRenderError(RecurlyGatewayError):
    """A token template could not be rendered into a usable value."""


class AccountLookupError(RecurlyGatewayError):
    """The remote account lookup failed for a reason other than *not found*."""


class AccountCreationError(RecurlyGatewayError):
    """The billing API rejected the account creation request."""


class PurchaseSubmissionError(RecurlyGatewayError):
    """The purchase could not be submitted."""


class PurchaseValidationError(PurchaseSubmissionError):
    """The billing API rejected one or more purchase fields."""

    def __init__(self, message: str, field_errors: Optional[List[FieldError]] = None) -> None:
        super().__init__(message)
        self.field_errors: List[FieldError] = list(field_errors or [])

    @property
    def errors_by_param(self) -> Dict[str, str]:
        return {error.param: error.message for error in self.field_errors}


class PaymentGatewayException(Exception):
    """Externally visible failure consumed by the order management host.

    ``attempt`` carries the trace of the return run that failed, when known.
    """

    def __init__(self, message: str, *, attempt: Optional[object] = None) -> None:
        super().__init__(message)
        self.attempt = attempt


class BillingApiError(Exception):
    """Failure reported by a billing client implementation."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BillingValidationError(BillingApiError):
    """The billing API refused a request because of invalid parameters."""

    def __init__(
        self,
        message: str,
        params: Optional[List[FieldError]] = None,
        *,
        status_code: Optional[int] = 422,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.params: List[FieldError] = list(params or [])

    def has_param(self, name: str) -> bool:
        return any(error.param == name for error in self.params)


@dataclass
class SettingsValidationError(Exception):
    """Gateway settings failed validation; errors are keyed by setting name."""

    field_errors: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.summary)

    @property
    def summary(self) -> str:
        return "; ".join(f"{name}: {message}" for name, message in self.field_errors.items())


__all__ = [
    "AccountCreationError",
    "AccountLookupError",
    "BillingApiError",
    "BillingValidationError",
    "FieldError",
    "PaymentGatewayException",
    "PurchaseSubmissionError",
    "PurchaseValidationError",
    "RecurlyGatewayError",
    "SettingsValidationError",
    "TemplateRenderError",
]
