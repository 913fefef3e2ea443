"""Typed gateway configuration."""
from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import PatternKey

DEFAULT_PLAN_VARIATION = "recurly_plan_variation"
DEFAULT_NONPLAN_VARIATION = "recurly_nonplan_variation"
BUILTIN_VARIATIONS = (DEFAULT_NONPLAN_VARIATION, DEFAULT_PLAN_VARIATION)

DEFAULT_ACCOUNT_ID_PATTERN = "user-[user:id]"

# Pattern tiers consulted, in order, when a tier is left empty.
PATTERN_FALLBACKS: Dict[PatternKey, tuple] = {
    PatternKey.DEFAULT: (PatternKey.DEFAULT,),
    PatternKey.PLAN: (PatternKey.PLAN, PatternKey.DEFAULT),
    PatternKey.NONPLAN: (PatternKey.NONPLAN, PatternKey.DEFAULT),
    PatternKey.PLAN_PLUS_NONPLAN: (PatternKey.PLAN_PLUS_NONPLAN, PatternKey.PLAN, PatternKey.DEFAULT),
}


def _strip_or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class AccountIdPatterns(BaseModel):
    """Token templates used to build account codes, one per pattern tier."""

    default: str = Field(min_length=1)
    plan: Optional[str] = None
    nonplan: Optional[str] = None
    plan_plus_nonplan: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("default", mode="before")
    @classmethod
    def _strip_default(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("plan", "nonplan", "plan_plus_nonplan")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return _strip_or_none(value)

    def raw(self, key: PatternKey) -> Optional[str]:
        return getattr(self, key.value)

    def pattern_for(self, key: PatternKey) -> Optional[str]:
        """Return the template for ``key`` after applying the fallback chain."""
        for candidate in PATTERN_FALLBACKS[key]:
            pattern = _strip_or_none(self.raw(candidate))
            if pattern:
                return pattern
        return None

    def resolved(self) -> "AccountIdPatterns":
        """Copy with every tier filled in from its fallbacks."""
        return self.model_copy(update={key.value: self.pattern_for(key) for key in PatternKey})


class CustomFieldMapping(BaseModel):
    """Remote custom field name to token template, per remote entity kind."""

    account_fields: Dict[str, str] = Field(default_factory=dict)
    subscription_fields: Dict[str, str] = Field(default_factory=dict)
    item_fields: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class GatewayConfiguration(BaseModel):
    """Settings for one Recurly payment gateway instance."""

    subdomain: str = Field(min_length=1)
    private_key: str = Field(min_length=1)
    public_key: str = Field(min_length=1)
    account_id_patterns: AccountIdPatterns = Field(
        default_factory=lambda: AccountIdPatterns(default=DEFAULT_ACCOUNT_ID_PATTERN)
    )
    plan_product_variations: List[str] = Field(default_factory=lambda: [DEFAULT_PLAN_VARIATION])
    custom_fields: CustomFieldMapping = Field(default_factory=CustomFieldMapping)
    use_recurly_module_creds: bool = False
    mode: Literal["test", "live"] = "test"
    request_timeout: float = Field(default=30.0, gt=0)

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("subdomain", "private_key", "public_key", mode="before")
    @classmethod
    def _strip_credentials(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("plan_product_variations")
    @classmethod
    def _ensure_default_plan_variation(cls, value: List[str]) -> List[str]:
        variations = [DEFAULT_PLAN_VARIATION]
        for variation in value:
            if variation and variation not in variations:
                variations.append(variation)
        return variations

    @property
    def plan_variation_types(self) -> frozenset:
        return frozenset(self.plan_product_variations)

    def account_id_pattern(self, key: PatternKey) -> Optional[str]:
        return self.account_id_patterns.pattern_for(key)


__all__ = [
    "AccountIdPatterns",
    "BUILTIN_VARIATIONS",
    "CustomFieldMapping",
    "DEFAULT_ACCOUNT_ID_PATTERN",
    "DEFAULT_NONPLAN_VARIATION",
    "DEFAULT_PLAN_VARIATION",
    "GatewayConfiguration",
    "PATTERN_FALLBACKS",
]
