"""Loading gateway configuration from the environment."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from ..gateway.config import GatewayConfiguration
from ..gateway.exceptions import SettingsValidationError
from .service import validation_errors

_ENV_OVERRIDES = {
    "RECURLY_SUBDOMAIN": "subdomain",
    "RECURLY_PRIVATE_KEY": "private_key",
    "RECURLY_PUBLIC_KEY": "public_key",
    "RECURLY_MODE": "mode",
}


def _to_float(value: Optional[str], *, name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise SettingsValidationError({name: f"Expected a number, got {value!r}"}) from exc


def _split_list(value: str) -> list:
    return [part.strip() for part in value.split(",") if part.strip()]


def _read_settings_file(path: str) -> Dict[str, Any]:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise SettingsValidationError({"RECURLY_SETTINGS_FILE": f"Cannot read {path}: {exc}"}) from exc
    except json.JSONDecodeError as exc:
        raise SettingsValidationError({"RECURLY_SETTINGS_FILE": f"Invalid JSON in {path}: {exc}"}) from exc
    if not isinstance(data, dict):
        raise SettingsValidationError({"RECURLY_SETTINGS_FILE": "Settings must be a JSON object"})
    return data


def load_gateway_config(env: Optional[Mapping[str, str]] = None) -> GatewayConfiguration:
    """Load :class:`GatewayConfiguration` from a settings file and environment variables.

    ``RECURLY_SETTINGS_FILE`` points at a JSON document with the stored
    settings; individual environment variables override its values.
    """

    env_mapping = os.environ if env is None else env

    settings_path = env_mapping.get("RECURLY_SETTINGS_FILE")
    data: Dict[str, Any] = _read_settings_file(settings_path) if settings_path else {}

    for variable, key in _ENV_OVERRIDES.items():
        value = env_mapping.get(variable)
        if value:
            data[key] = value

    default_pattern = env_mapping.get("RECURLY_ACCOUNT_ID_PATTERN")
    if default_pattern:
        patterns = dict(data.get("account_id_patterns") or {})
        patterns["default"] = default_pattern
        data["account_id_patterns"] = patterns

    plan_variations = env_mapping.get("RECURLY_PLAN_VARIATIONS")
    if plan_variations:
        data["plan_product_variations"] = _split_list(plan_variations)

    timeout = _to_float(env_mapping.get("RECURLY_REQUEST_TIMEOUT"), name="RECURLY_REQUEST_TIMEOUT")
    if timeout is not None:
        data["request_timeout"] = timeout

    try:
        return GatewayConfiguration.model_validate(data)
    except ValidationError as exc:
        raise SettingsValidationError(validation_errors(exc)) from exc


__all__ = ["load_gateway_config"]
