"""Token replacement for account ID patterns and custom field templates."""
from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Tuple

from pydantic import BaseModel

from ..gateway.exceptions import TemplateRenderError
from ..gateway.interfaces import TemplateRenderer
from ..gateway.models import Order, order_context

_TOKEN_PATTERN = re.compile(r"\[([A-Za-z_][\w-]*)((?::[\w-]+)+)\]")

# Computed attributes addressable like fields.
_MODEL_PROPERTIES: Dict[type, Tuple[str, ...]] = {Order: ("billing_address",)}


def _model_properties(value: BaseModel) -> Tuple[str, ...]:
    properties: Tuple[str, ...] = ()
    for model, names in _MODEL_PROPERTIES.items():
        if isinstance(value, model):
            properties += names
    return properties


def _lookup(value: Any, segment: str, token: str) -> Any:
    if isinstance(value, BaseModel):
        if segment in type(value).model_fields or segment in _model_properties(value):
            return getattr(value, segment)
    elif isinstance(value, Mapping):
        if segment in value:
            return value[segment]
    raise TemplateRenderError(f"Unknown token {token}")


class TokenRenderer(TemplateRenderer):
    """Replaces ``[type:path]`` tokens with values taken from the context.

    ``type`` names a context entry and every following segment is a model
    field or mapping key, e.g. ``[commerce_order:customer:email]``. Missing
    values render as an empty string while unknown tokens raise
    :class:`TemplateRenderError`.
    """

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        def _replace(match: re.Match[str]) -> str:
            token = match.group(0)
            root = match.group(1)
            if root not in context:
                raise TemplateRenderError(f"Unknown token {token}")
            value = context[root]
            for segment in match.group(2).split(":")[1:]:
                if value is None:
                    break
                value = _lookup(value, segment, token)
            if isinstance(value, (BaseModel, Mapping, list)):
                raise TemplateRenderError(f"Token {token} does not resolve to a single value")
            return "" if value is None else str(value)

        return _TOKEN_PATTERN.sub(_replace, template)

    def render_for_order(self, template: str, order: Order) -> str:
        return self.render(template, order_context(order))


__all__ = ["TokenRenderer"]
