"""Selection of the account ID pattern that applies to an order."""
from __future__ import annotations

from typing import Collection, Iterable, List

from .models import Order, OrderItem, PatternKey


def select_pattern(plan_flags: Iterable[bool]) -> PatternKey:
    """Pick the pattern tier for a sequence of plan / nonplan flags.

    The result only depends on whether the flags contain a plan item and a
    nonplan item; scanning stops at the first mix of both.
    """

    pattern = PatternKey.DEFAULT
    for is_plan in plan_flags:
        if is_plan:
            if pattern == PatternKey.DEFAULT:
                pattern = PatternKey.PLAN
            elif pattern == PatternKey.NONPLAN:
                return PatternKey.PLAN_PLUS_NONPLAN
            continue

        if pattern == PatternKey.DEFAULT:
            pattern = PatternKey.NONPLAN
        elif pattern == PatternKey.PLAN:
            return PatternKey.PLAN_PLUS_NONPLAN
    return pattern


def is_plan_item(item: OrderItem, plan_variation_types: Collection[str]) -> bool:
    return item.purchased_entity.bundle in plan_variation_types


def classify_items(items: Iterable[OrderItem], plan_variation_types: Collection[str]) -> List[bool]:
    return [is_plan_item(item, plan_variation_types) for item in items]


def select_pattern_for_order(order: Order, plan_variation_types: Collection[str]) -> PatternKey:
    return select_pattern(classify_items(order.items, plan_variation_types))


__all__ = ["classify_items", "is_plan_item", "select_pattern", "select_pattern_for_order"]
