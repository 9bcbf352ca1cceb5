"""
Tests for the HTTP API.
"""
import pytest
from fastapi.testclient import TestClient

from ads_manager.main import app, get_store

@pytest.fixture
def client(option_store):
    app.dependency_overrides[get_store] = lambda: option_store
    yield TestClient(app)
    app.dependency_overrides.clear()

def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}

def test_bidders(client):
    response = client.get("/bidders")

    assert response.status_code == 200
    assert response.json()["medianet"]["active_key"] == "medianet_cid"

def test_update_bidder(client):
    response = client.post("/bidders/medianet", json={"medianet_cid": "8CU1"})
    assert response.status_code == 200
    assert response.json()["data"] == {"medianet_cid": "8CU1"}

    assert client.post("/bidders/medianet", json={"bogus": "1"}).status_code == 400
    assert client.get("/bidders/unknown").status_code == 404

def test_settings(client):
    response = client.post("/settings/lazy_load", json={"fetch_margin_percent": "80"})

    assert response.status_code == 200
    by_key = {setting["key"]: setting["value"] for setting in response.json()}
    assert by_key["fetch_margin_percent"] == 80

def test_invalid_setting(client):
    response = client.post("/settings/lazy_load", json={"bogus": True})

    assert response.status_code == 400
    assert response.json()["detail"]["category"] == "validation"

def test_product_lifecycle(client):
    response = client.post("/products", json={
        "placements": ["sidebar"],
        "price": "9.999",
        "payable_event": "cpc",
        "required_sizes": ["300x250", "bad"]
    })
    assert response.status_code == 200
    product = response.json()
    assert product["price"] == 10.0
    assert product["required_sizes"] == ["300x250"]

    response = client.put(f"/products/{product['id']}", json={
        "placements": ["sidebar"],
        "price": 4,
        "required_sizes": []
    })
    assert response.status_code == 200
    assert response.json()["payable_event"] == "cpd"

    assert [p["id"] for p in client.get("/products").json()] == [product["id"]]
    assert client.delete(f"/products/{product['id']}").status_code == 200
    assert client.get(f"/products/{product['id']}").status_code == 404
    assert client.delete(f"/products/{product['id']}").status_code == 404

def test_product_missing_fields(client):
    response = client.post("/products", json={"placements": ["sidebar"]})
    assert response.status_code == 400
