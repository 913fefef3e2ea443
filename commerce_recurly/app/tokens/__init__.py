"""Token templates rendered against order data."""

from ..gateway.interfaces import TemplateRenderer
from ..gateway.models import ORDER_CONTEXT_KEY, USER_CONTEXT_KEY, order_context
from .renderer import TokenRenderer

__all__ = [
    "ORDER_CONTEXT_KEY",
    "TemplateRenderer",
    "TokenRenderer",
    "USER_CONTEXT_KEY",
    "order_context",
]
