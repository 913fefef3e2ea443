from __future__ import annotations

from decimal import Decimal

import pytest

from commerce_recurly.app.gateway import (
    Address,
    BillingProfile,
    Customer,
    Order,
    OrderItem,
    Price,
    PurchasedEntity,
    TemplateRenderError,
)
from commerce_recurly.app.tokens import TokenRenderer, order_context


def _order(**customer) -> Order:
    return Order(
        order_id="100",
        order_number="A-100",
        customer=Customer(id="7", **customer),
        billing_profile=BillingProfile(address=Address(given_name="Ada", family_name="Lovelace", country_code="GB")),
        items=[
            OrderItem(
                purchased_entity=PurchasedEntity(entity_id="1", bundle="default"),
                unit_price=Price(number=Decimal("1.00"), currency_code="usd"),
            )
        ],
    )


def test_render_replaces_user_and_order_tokens():
    renderer = TokenRenderer()

    result = renderer.render_for_order("user-[user:id]-[commerce_order:order_number]", _order())

    assert result == "user-7-A-100"


def test_render_reads_billing_address():
    renderer = TokenRenderer()
    context = order_context(_order())

    assert renderer.render("[commerce_order:billing_address:given_name]", context) == "Ada"
    assert renderer.render("[commerce_order:billing_profile:address:country_code]", context) == "GB"


def test_render_reads_billing_address_of_order_subclass():
    class StoreOrder(Order):
        store_id: str = "eu-1"

    order = StoreOrder(**_order().model_dump())
    renderer = TokenRenderer()

    result = renderer.render_for_order("[commerce_order:store_id]-[commerce_order:billing_address:family_name]", order)

    assert result == "eu-1-Lovelace"


def test_render_is_repeatable():
    renderer = TokenRenderer()
    order = _order(email="ada@example.com")

    first = renderer.render_for_order("user-[user:id]-[user:email]", order)
    second = renderer.render_for_order("user-[user:id]-[user:email]", order)

    assert first == second == "user-7-ada@example.com"


def test_render_missing_value_is_empty():
    renderer = TokenRenderer()

    assert renderer.render_for_order("mail:[user:email]", _order()) == "mail:"


def test_render_without_tokens_returns_template():
    assert TokenRenderer().render("static-code", {}) == "static-code"


def test_render_reads_mapping_context():
    renderer = TokenRenderer()

    assert renderer.render("[site:name]", {"site": {"name": "Shop"}}) == "Shop"


@pytest.mark.parametrize(
    "template",
    [
        "[node:id]",
        "[user:nickname]",
        "[commerce_order:customer]",
        "[commerce_order:items]",
    ],
)
def test_render_rejects_unusable_tokens(template):
    with pytest.raises(TemplateRenderError):
        TokenRenderer().render_for_order(template, _order(email="ada@example.com"))
