"""Billing API client implementations."""

from .recurly_client import RecurlyBillingClient, RecurlyClientFactory

__all__ = ["RecurlyBillingClient", "RecurlyClientFactory"]
