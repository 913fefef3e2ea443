"""Gateway settings: submission handling and configuration loading."""

from .config import load_gateway_config
from .service import (
    CUSTOM_FIELD_SECTIONS,
    CustomFieldRow,
    GatewaySettingsSubmission,
    SharedCredentials,
    build_custom_field_mapping,
    build_gateway_configuration,
    plan_variation_options,
    resolve_account_id_patterns,
)

__all__ = [
    "CUSTOM_FIELD_SECTIONS",
    "CustomFieldRow",
    "GatewaySettingsSubmission",
    "SharedCredentials",
    "build_custom_field_mapping",
    "build_gateway_configuration",
    "load_gateway_config",
    "plan_variation_options",
    "resolve_account_id_patterns",
]
