from types import SimpleNamespace

import pytest

from tyredesk.pricing.margin_resolver import (
    DEFAULT_MARGIN,
    MarginType,
    calculate_sell_price,
    derive_priority,
    resolve_margin,
)


def rule(id, value, size=None, brand=None, model=None, type="percentage", priority=0):
    return SimpleNamespace(
        id=id,
        tyre_size_id=size,
        brand_id=brand,
        tyre_model_id=model,
        margin_type=type,
        margin_value=value,
        priority=priority,
    )


@pytest.fixture
def rules():
    return [
        rule("r-model", 10, model="M1"),
        rule("r-size-brand", 20, size="S1", brand="B1"),
        rule("r-brand", 25, brand="B1"),
        rule("r-size", 35, size="S1"),
        rule("r-global", 30),
    ]


# -------------------------
# precedence
# -------------------------
def test_model_rule_wins(rules):
    m = resolve_margin(rules, "S1", "B1", "M1")
    assert (m.config_id, m.margin_value, m.scope) == ("r-model", 10, "model")


def test_size_and_brand_without_model(rules):
    m = resolve_margin(rules, "S1", "B1")
    assert (m.config_id, m.margin_value, m.scope) == ("r-size-brand", 20, "size_brand")


def test_brand_only(rules):
    m = resolve_margin(rules, "S2", "B1")
    assert (m.config_id, m.margin_value, m.scope) == ("r-brand", 25, "brand")


def test_size_only(rules):
    m = resolve_margin(rules, "S1", "B2")
    assert (m.config_id, m.margin_value, m.scope) == ("r-size", 35, "size")


def test_global(rules):
    m = resolve_margin(rules, "S9", "B9")
    assert (m.config_id, m.margin_value, m.scope) == ("r-global", 30, "global")


def test_no_rules_falls_back_to_30_percent():
    m = resolve_margin([], "S1", "B1", "M1")
    assert m == DEFAULT_MARGIN
    assert m.margin_type is MarginType.PERCENTAGE
    assert m.margin_value == 30
    assert m.config_id is None
    assert m.scope == "default"


def test_other_model_does_not_match(rules):
    m = resolve_margin(rules, "S1", "B1", "M2")
    assert m.config_id == "r-size-brand"


def test_model_rule_never_used_outside_tier_one():
    # a rule scoped to a model with a brand set must not act as a brand rule
    configs = [rule("r-model-brand", 50, brand="B1", model="M1"), rule("r-global", 5)]
    assert resolve_margin(configs, "S1", "B1", "M2").config_id == "r-global"
    assert resolve_margin(configs, "S1", "B1").config_id == "r-global"


def test_priority_is_ignored():
    configs = [
        rule("r-global", 30, priority=1000),
        rule("r-brand", 25, brand="B1", priority=-5),
    ]
    assert resolve_margin(configs, "S1", "B1").config_id == "r-brand"


def test_list_order_wins_inside_a_tier():
    configs = [rule("first", 11, brand="B1"), rule("second", 12, brand="B1")]
    assert resolve_margin(configs, "S1", "B1").config_id == "first"


def test_size_brand_rule_needs_both_dimensions():
    configs = [rule("r-size-brand", 20, size="S1", brand="B1")]
    assert resolve_margin(configs, "S1", "B2") == DEFAULT_MARGIN
    assert resolve_margin(configs, "S2", "B1") == DEFAULT_MARGIN


def test_fixed_type_is_carried_over():
    m = resolve_margin([rule("r", 15, type="fixed")], "S1", "B1")
    assert m.margin_type is MarginType.FIXED
    assert m.sell_price(100) == 115


# -------------------------
# sell price
# -------------------------
@pytest.mark.parametrize("cost, value", [(100.0, 25.0), (79.99, 30.0), (1.0, 0.5), (250.0, 100.0)])
def test_percentage_formula(cost, value):
    assert calculate_sell_price(cost, "percentage", value) == cost * (1 + value / 100)


@pytest.mark.parametrize("cost, value", [(100.0, 25.0), (79.99, 7.5), (1.0, 0.01)])
def test_fixed_formula(cost, value):
    assert calculate_sell_price(cost, MarginType.FIXED, value) == cost + value


@pytest.mark.parametrize("margin_type", ["percentage", "fixed"])
def test_zero_margin_is_identity(margin_type):
    assert calculate_sell_price(87.45, margin_type, 0) == 87.45


def test_no_rounding():
    assert calculate_sell_price(10.0, "percentage", 33.333) == 10.0 * (1 + 33.333 / 100)


def test_unknown_margin_type():
    # ValidationFailure is a ValueError
    with pytest.raises(ValueError):
        calculate_sell_price(100, "markup", 10)


# -------------------------
# display priority
# -------------------------
def test_derive_priority():
    assert derive_priority("S1", "B1", "M1") == 40
    assert derive_priority("S1", "B1") == 30
    assert derive_priority(None, "B1") == 20
    assert derive_priority("S1", None) == 10
    assert derive_priority(None, None) == 0
