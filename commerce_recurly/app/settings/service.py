"""Building gateway configuration from submitted settings."""
from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..gateway.config import (
    BUILTIN_VARIATIONS,
    DEFAULT_PLAN_VARIATION,
    AccountIdPatterns,
    CustomFieldMapping,
    GatewayConfiguration,
)
from ..gateway.exceptions import SettingsValidationError

CUSTOM_FIELD_SECTIONS = ("account", "subscription", "item")


class SharedCredentials(BaseModel):
    """API credentials managed outside the gateway, reused when opted in."""

    subdomain: Optional[str] = None
    private_key: Optional[str] = None
    public_key: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class GatewaySettingsSubmission(BaseModel):
    """Values submitted from the gateway settings screen."""

    subdomain: str = ""
    private_key: str = ""
    public_key: str = ""
    use_recurly_module_creds: bool = False
    mode: str = "test"
    default_pattern: str = ""
    plan_plus_nonplan_pattern: str = ""
    plan_pattern: str = ""
    nonplan_pattern: str = ""
    plan_variation_types: Dict[str, bool] = Field(default_factory=dict)
    request_timeout: float = 30.0

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class CustomFieldRow(BaseModel):
    field_id: str = ""
    field_pattern: str = ""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


def _credentials(
    submission: GatewaySettingsSubmission,
    shared: Optional[SharedCredentials],
) -> Dict[str, str]:
    if not submission.use_recurly_module_creds:
        return {
            "subdomain": submission.subdomain,
            "private_key": submission.private_key,
            "public_key": submission.public_key,
        }

    shared = shared or SharedCredentials()
    errors: Dict[str, str] = {}
    values: Dict[str, str] = {}
    for name in ("private_key", "public_key", "subdomain"):
        value = (getattr(shared, name) or "").strip()
        if not value:
            errors[name] = f"Shared Recurly configuration is missing a {name.replace('_', ' ')}."
        values[name] = value
    if errors:
        errors["use_recurly_module_creds"] = (
            "Unable to use the shared Recurly API details. Fix the above errors and try again."
        )
        raise SettingsValidationError(errors)
    return values


def resolve_account_id_patterns(submission: GatewaySettingsSubmission) -> AccountIdPatterns:
    """Fill every pattern tier, falling back to the broader tier when left empty."""

    default = submission.default_pattern.strip()
    if not default:
        raise SettingsValidationError({"default_pattern": "A default account ID pattern is required."})
    plan = submission.plan_pattern.strip() or default
    return AccountIdPatterns(
        default=default,
        plan=plan,
        nonplan=submission.nonplan_pattern.strip() or default,
        plan_plus_nonplan=submission.plan_plus_nonplan_pattern.strip() or plan,
    )


def selected_plan_variations(checked: Mapping[str, bool]) -> List[str]:
    variations = [DEFAULT_PLAN_VARIATION]
    for variation_type, is_checked in checked.items():
        if is_checked and variation_type not in variations:
            variations.append(variation_type)
    return variations


def plan_variation_options(available: Mapping[str, str]) -> Dict[str, str]:
    """Variation types an administrator may mark as plans, keyed by machine name."""
    return {name: label for name, label in available.items() if name not in BUILTIN_VARIATIONS}


def build_gateway_configuration(
    submission: GatewaySettingsSubmission,
    shared_credentials: Optional[SharedCredentials] = None,
    *,
    custom_fields: Optional[CustomFieldMapping] = None,
) -> GatewayConfiguration:
    credentials = _credentials(submission, shared_credentials)
    patterns = resolve_account_id_patterns(submission)
    try:
        return GatewayConfiguration(
            **credentials,
            account_id_patterns=patterns,
            plan_product_variations=selected_plan_variations(submission.plan_variation_types),
            custom_fields=custom_fields or CustomFieldMapping(),
            use_recurly_module_creds=submission.use_recurly_module_creds,
            mode=submission.mode,
            request_timeout=submission.request_timeout,
        )
    except ValidationError as exc:
        raise SettingsValidationError(validation_errors(exc)) from exc


def build_custom_field_mapping(sections: Mapping[str, Sequence[CustomFieldRow]]) -> CustomFieldMapping:
    """Collapse submitted custom field rows into the stored mapping.

    Rows missing either the field id or the pattern are dropped.
    """

    data: Dict[str, Dict[str, str]] = {}
    for section in CUSTOM_FIELD_SECTIONS:
        fields: Dict[str, str] = {}
        for row in sections.get(section, ()):
            field_id = row.field_id.strip()
            pattern = row.field_pattern.strip()
            if not field_id or not pattern:
                continue
            fields[field_id] = pattern
        data[f"{section}_fields"] = fields
    return CustomFieldMapping(**data)


def validation_errors(exc: ValidationError) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "__root__"
        errors.setdefault(location, error.get("msg", "Invalid value"))
    return errors


__all__ = [
    "CUSTOM_FIELD_SECTIONS",
    "CustomFieldRow",
    "GatewaySettingsSubmission",
    "SharedCredentials",
    "build_custom_field_mapping",
    "build_gateway_configuration",
    "plan_variation_options",
    "resolve_account_id_patterns",
    "selected_plan_variations",
    "validation_errors",
]
