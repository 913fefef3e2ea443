from __future__ import annotations

import json

import pytest

from commerce_recurly.app.gateway import (
    AccountIdPatterns,
    GatewayConfiguration,
    PatternKey,
    SettingsValidationError,
)
from commerce_recurly.app.settings import (
    CustomFieldRow,
    GatewaySettingsSubmission,
    SharedCredentials,
    build_custom_field_mapping,
    build_gateway_configuration,
    load_gateway_config,
    plan_variation_options,
    resolve_account_id_patterns,
)


def _submission(**overrides) -> GatewaySettingsSubmission:
    values = {
        "subdomain": "shop",
        "private_key": "private-123",
        "public_key": "ewr1-public",
        "default_pattern": "user-[user:id]",
    }
    values.update(overrides)
    return GatewaySettingsSubmission(**values)


def test_empty_patterns_fall_back_at_save():
    patterns = resolve_account_id_patterns(_submission())

    assert patterns.plan == "user-[user:id]"
    assert patterns.nonplan == "user-[user:id]"
    assert patterns.plan_plus_nonplan == "user-[user:id]"


def test_plan_plus_nonplan_falls_back_to_plan():
    patterns = resolve_account_id_patterns(_submission(plan_pattern="member-[user:id]"))

    assert patterns.plan_plus_nonplan == "member-[user:id]"
    assert patterns.nonplan == "user-[user:id]"


def test_default_pattern_is_required():
    with pytest.raises(SettingsValidationError) as exc_info:
        build_gateway_configuration(_submission(default_pattern="   "))

    assert set(exc_info.value.field_errors) == {"default_pattern"}


def test_patterns_resolve_through_fallback_chain():
    patterns = AccountIdPatterns(default="user-[user:id]", plan="  ", nonplan="guest-[user:id]")

    assert patterns.plan is None
    assert patterns.pattern_for(PatternKey.PLAN) == "user-[user:id]"
    assert patterns.pattern_for(PatternKey.PLAN_PLUS_NONPLAN) == "user-[user:id]"
    assert patterns.pattern_for(PatternKey.NONPLAN) == "guest-[user:id]"
    assert patterns.resolved().plan_plus_nonplan == "user-[user:id]"


def test_shared_credentials_are_used_when_enabled():
    shared = SharedCredentials(subdomain="central", private_key="shared-private", public_key="shared-public")

    configuration = build_gateway_configuration(
        _submission(subdomain="", private_key="", public_key="", use_recurly_module_creds=True),
        shared,
    )

    assert configuration.subdomain == "central"
    assert configuration.private_key == "shared-private"
    assert configuration.use_recurly_module_creds is True


def test_incomplete_shared_credentials_are_reported():
    shared = SharedCredentials(subdomain="central", public_key="shared-public")

    with pytest.raises(SettingsValidationError) as exc_info:
        build_gateway_configuration(_submission(use_recurly_module_creds=True), shared)

    errors = exc_info.value.field_errors
    assert set(errors) == {"private_key", "use_recurly_module_creds"}
    assert "Fix the above errors" in errors["use_recurly_module_creds"]


def test_missing_credentials_are_reported_per_field():
    with pytest.raises(SettingsValidationError) as exc_info:
        build_gateway_configuration(_submission(private_key="", mode="staging"))

    assert "private_key" in exc_info.value.field_errors
    assert "mode" in exc_info.value.field_errors


def test_default_plan_variation_is_always_selected():
    configuration = build_gateway_configuration(
        _submission(plan_variation_types={"membership": True, "t_shirt": False})
    )

    assert configuration.plan_product_variations == ["recurly_plan_variation", "membership"]
    assert configuration.plan_variation_types == frozenset({"recurly_plan_variation", "membership"})


def test_configuration_prepends_default_plan_variation():
    configuration = GatewayConfiguration(
        subdomain="shop",
        private_key="k",
        public_key="p",
        plan_product_variations=["membership", "recurly_plan_variation", "membership"],
    )

    assert configuration.plan_product_variations == ["recurly_plan_variation", "membership"]
    assert configuration.account_id_pattern(PatternKey.PLAN) == "user-[user:id]"


def test_plan_variation_options_hide_builtin_types():
    options = plan_variation_options(
        {
            "default": "Default",
            "recurly_plan_variation": "Recurly plan",
            "recurly_nonplan_variation": "Recurly nonplan",
            "membership": "Membership",
        }
    )

    assert options == {"default": "Default", "membership": "Membership"}


def test_custom_field_rows_without_id_or_pattern_are_dropped():
    mapping = build_custom_field_mapping(
        {
            "account": [
                CustomFieldRow(field_id="crm_id", field_pattern="crm-[user:id]"),
                CustomFieldRow(field_id="", field_pattern="[user:email]"),
                CustomFieldRow(field_id="loyalty", field_pattern=" "),
            ],
            "item": [CustomFieldRow(field_id="sku", field_pattern="[commerce_order:order_id]")],
        }
    )

    assert mapping.account_fields == {"crm_id": "crm-[user:id]"}
    assert mapping.subscription_fields == {}
    assert mapping.item_fields == {"sku": "[commerce_order:order_id]"}


def test_load_gateway_config_reads_file_and_env_overrides(tmp_path):
    settings_file = tmp_path / "recurly.json"
    settings_file.write_text(
        json.dumps(
            {
                "subdomain": "shop",
                "private_key": "file-private",
                "public_key": "file-public",
                "account_id_patterns": {"default": "user-[user:id]", "plan": "member-[user:id]"},
                "custom_fields": {"account_fields": {"crm_id": "crm-[user:id]"}},
            }
        ),
        encoding="utf-8",
    )

    configuration = load_gateway_config(
        {
            "RECURLY_SETTINGS_FILE": str(settings_file),
            "RECURLY_PRIVATE_KEY": "env-private",
            "RECURLY_PLAN_VARIATIONS": "membership, gift_plan",
            "RECURLY_REQUEST_TIMEOUT": "12.5",
            "RECURLY_MODE": "live",
        }
    )

    assert configuration.private_key == "env-private"
    assert configuration.public_key == "file-public"
    assert configuration.account_id_pattern(PatternKey.PLAN_PLUS_NONPLAN) == "member-[user:id]"
    assert configuration.plan_product_variations == ["recurly_plan_variation", "membership", "gift_plan"]
    assert configuration.custom_fields.account_fields == {"crm_id": "crm-[user:id]"}
    assert configuration.request_timeout == 12.5
    assert configuration.mode == "live"


def test_load_gateway_config_from_env_only():
    configuration = load_gateway_config(
        {
            "RECURLY_SUBDOMAIN": "shop",
            "RECURLY_PRIVATE_KEY": "private-123",
            "RECURLY_PUBLIC_KEY": "ewr1-public",
            "RECURLY_ACCOUNT_ID_PATTERN": "customer-[user:id]",
        }
    )

    assert configuration.account_id_pattern(PatternKey.NONPLAN) == "customer-[user:id]"
    assert configuration.request_timeout == 30.0


def test_load_gateway_config_reports_missing_credentials():
    with pytest.raises(SettingsValidationError) as exc_info:
        load_gateway_config({"RECURLY_SUBDOMAIN": "shop"})

    assert {"private_key", "public_key"} <= set(exc_info.value.field_errors)


def test_load_gateway_config_rejects_bad_values(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")

    with pytest.raises(SettingsValidationError) as file_error:
        load_gateway_config({"RECURLY_SETTINGS_FILE": str(broken)})
    with pytest.raises(SettingsValidationError) as timeout_error:
        load_gateway_config({"RECURLY_REQUEST_TIMEOUT": "soon"})

    assert "RECURLY_SETTINGS_FILE" in file_error.value.field_errors
    assert "RECURLY_REQUEST_TIMEOUT" in timeout_error.value.field_errors
