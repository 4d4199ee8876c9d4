import jwt
import pytest

from tyredesk.core.settings import settings


@pytest.fixture
def stocked(client, auth_headers, extraction):
    extraction.rows = [
        {"size": "205/55R16", "brand": "Michelin", "model": "Primacy 4", "cost": 100},
        {"size": "205/55R16", "brand": "Continental", "model": "EcoContact 6", "cost": 90},
        {"size": "225/45R17", "brand": "Pirelli", "model": "P Zero", "cost": 150},
    ]
    s = client.post("/suppliers", headers=auth_headers, json={"name": "Alpha Banden"}).json()
    r = client.post(
        f"/suppliers/{s['id']}/price-lists",
        headers=auth_headers,
        files={"file": ("prijzen.csv", b"size;brand;model;cost", "text/csv")},
    )
    assert r.status_code == 200, r.text
    return s


def test_search_returns_sell_prices(client, auth_headers, stocked):
    brands = {b["name"]: b["id"] for b in client.get("/catalog/brands", headers=auth_headers).json()}
    client.post("/margins", headers=auth_headers, json={"brand_id": brands["Michelin"], "margin_value": 20})

    r = client.get("/tyres/search", headers=auth_headers, params={"size": "205/55r16"})
    assert r.status_code == 200
    results = r.json()
    assert [x["brand"] for x in results] == ["Continental", "Michelin"]

    conti, michelin = results
    assert conti["supplier"] == "Alpha Banden"
    assert conti["margin_scope"] == "default"
    assert conti["sell_price"] == pytest.approx(117)
    assert michelin["margin_scope"] == "brand"
    assert michelin["sell_price"] == pytest.approx(120)


def test_search_other_user_sees_nothing(client, other_auth_headers, stocked):
    r = client.get("/tyres/search", headers=other_auth_headers, params={"size": "205/55R16"})
    assert r.json() == []


def test_search_requires_size(client, auth_headers):
    assert client.get("/tyres/search", headers=auth_headers).status_code == 422


# -------------------------
# Auth / plumbing
# -------------------------
def test_health_is_public(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_metrics_are_exposed(client, stocked):
    r = client.get("/metrics")
    assert r.status_code == 200
    assert "tyredesk_price_list_ingestions_total" in r.text


def test_expired_token(client, headers_for):
    r = client.get("/suppliers", headers=headers_for("user-a", exp=1))
    assert r.status_code == 401


def test_wrong_audience(client, headers_for):
    r = client.get("/suppliers", headers=headers_for("user-a", aud="someone-else"))
    assert r.status_code == 401


def test_wrong_secret(client):
    token = jwt.encode({"sub": "user-a", "aud": settings.JWT_AUDIENCE, "exp": 4102444800}, "some-other-secret-0123456789abcdefgh", algorithm="HS256")
    r = client.get("/suppliers", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_token_from_cookie(client, headers_for):
    token = headers_for("user-a")["Authorization"].removeprefix("Bearer ")

    client.cookies.set("access_token", token)
    assert client.get("/suppliers").status_code == 200


def test_request_id_header(client):
    r = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert r.headers["X-Request-ID"] == "req-123"
