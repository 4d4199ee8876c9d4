import pytest

from tyredesk.ingestion.reconciler import reconcile_price_list
from tyredesk.models import MarginConfig, Supplier
from tyredesk.repositories import catalog as catalog_repo
from tyredesk.schemas.price_list import PriceListRow
from tyredesk.services.search import search_tyres


def row(size, brand, model, cost):
    return PriceListRow(size=size, brand=brand, model=model, cost=cost)


@pytest.fixture
def stocked(db):
    """Two suppliers of user-a, one supplier of user-b, all selling 205/55R16."""
    a1 = Supplier(user_id="user-a", name="Alpha Banden")
    a2 = Supplier(user_id="user-a", name="Beta Tyres")
    b1 = Supplier(user_id="user-b", name="Other Corp")
    db.add_all([a1, a2, b1])
    db.commit()

    reconcile_price_list(
        db,
        [
            row("205/55R16", "Michelin", "Primacy 4", 100),
            row("205/55R16", "Continental", "EcoContact 6", 90),
            row("225/45R17", "Michelin", "Pilot Sport 5", 140),
        ],
        a1.id,
    )
    reconcile_price_list(db, [row("205/55R16", "Michelin", "Primacy 4", 95)], a2.id)
    reconcile_price_list(db, [row("205/55R16", "Michelin", "Primacy 4", 10)], b1.id)
    db.commit()
    return {"a1": a1, "a2": a2, "b1": b1}


def add_rule(db, user_id, value, margin_type="percentage", **scope):
    db.add(MarginConfig(user_id=user_id, margin_type=margin_type, margin_value=value, **scope))
    db.commit()


def test_only_own_suppliers(db, stocked):
    results = search_tyres(db, "user-a", "205/55R16")
    assert len(results) == 3
    assert {r.supplier for r in results} == {"Alpha Banden", "Beta Tyres"}


def test_default_margin_when_no_rules(db, stocked):
    results = search_tyres(db, "user-a", "205/55R16")
    for r in results:
        assert r.margin_scope == "default"
        assert r.sell_price == r.cost * (1 + 30 / 100)


def test_sorted_by_sell_price(db, stocked):
    results = search_tyres(db, "user-a", "205/55R16")
    assert [r.cost for r in results] == [90, 95, 100]


def test_winning_rule_per_row(db, stocked):
    michelin = catalog_repo.find_brand(db, "michelin")
    add_rule(db, "user-a", 10)  # global
    add_rule(db, "user-a", 5, margin_type="fixed", brand_id=michelin.id)
    # user-b's rules never leak into user-a's results
    add_rule(db, "user-b", 99)

    results = {(r.supplier, r.brand): r for r in search_tyres(db, "user-a", "205/55R16")}

    conti = results[("Alpha Banden", "Continental")]
    assert conti.margin_scope == "global"
    assert conti.sell_price == 90 * (1 + 10 / 100)

    primacy = results[("Beta Tyres", "Michelin")]
    assert primacy.margin_scope == "brand"
    assert primacy.margin_type.value == "fixed"
    assert primacy.sell_price == 100


def test_query_is_normalized(db, stocked):
    assert len(search_tyres(db, "user-a", " 205/55r16 ")) == 3


def test_unknown_or_free_form_query(db, stocked):
    assert search_tyres(db, "user-a", "195/65R15") == []
    assert search_tyres(db, "user-a", "michelin") == []
    assert search_tyres(db, "user-a", "   ") == []
