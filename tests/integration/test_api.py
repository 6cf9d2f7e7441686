"""
Integration tests for the FuelEU Ledger API.

Fixtures (db, client, seeded) provided by tests/conftest.py.
"""
import pytest


# ============================================================================
# System Endpoint Tests
# ============================================================================

def test_root_endpoint(client):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "FuelEU Ledger API"
    assert data["status"] == "operational"


def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] in ("healthy", "degraded", "unhealthy")
    assert data["components"]["database"]["status"] == "healthy"
    assert "timestamp" in data


def test_liveness(client):
    response = client.get("/api/health/live")
    assert response.status_code == 200
    assert response.json()["status"] == "alive"


def test_readiness(client):
    response = client.get("/api/health/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


def test_request_id_round_trip(client):
    response = client.get("/", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


def test_security_headers(client):
    response = client.get("/")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


# ============================================================================
# Routes
# ============================================================================

def test_list_routes(client, seeded):
    response = client.get("/api/routes")
    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 5
    assert [r["route_id"] for r in data["routes"]][0] == "ROUTE-001"
    assert data["routes"][0]["is_baseline"] is True


def test_list_routes_filtered(client, seeded):
    response = client.get("/api/routes", params={"vessel_type": "Container Ship"})
    assert {r["route_id"] for r in response.json()["routes"]} == {"ROUTE-001", "ROUTE-004"}

    response = client.get("/api/routes", params={"fuel_type": "LNG", "year": 2024})
    assert [r["route_id"] for r in response.json()["routes"]] == ["ROUTE-004"]


def test_create_route(client, db):
    payload = {
        "route_id": "ROUTE-NEW",
        "vessel_type": "Tanker",
        "fuel_type": "MGO",
        "year": 2025,
        "ghg_intensity": 88.0,
        "fuel_consumption": 100,
    }
    response = client.post("/api/routes", json=payload)
    assert response.status_code == 201
    assert response.json()["route_id"] == "ROUTE-NEW"
    assert response.json()["is_baseline"] is False

    duplicate = client.post("/api/routes", json=payload)
    assert duplicate.status_code == 409


# ============================================================================
# Compliance
# ============================================================================

def test_compliance_cb_single_ship(client, seeded):
    response = client.get("/api/compliance/cb", params={"ship_id": "ROUTE-002", "year": 2024})
    assert response.status_code == 200
    data = response.json()
    assert data["ship_id"] == "ROUTE-002"
    assert data["cb"] == pytest.approx(44_278_360.0)
    assert data["target"] == 89.3368


def test_compliance_cb_fleet(client, seeded):
    response = client.get("/api/compliance/cb", params={"year": 2024})
    assert response.status_code == 200
    assert len(response.json()["ships"]) == 5


def test_compliance_cb_unknown_ship(client, seeded):
    response = client.get("/api/compliance/cb", params={"ship_id": "NOPE", "year": 2024})
    assert response.status_code == 404


def test_compliance_cb_requires_year(client):
    response = client.get("/api/compliance/cb", params={"ship_id": "ROUTE-002"})
    assert response.status_code == 422


def test_adjusted_cb(client, seeded):
    response = client.get("/api/compliance/adjusted-cb", params={"ship_id": "ROUTE-004", "year": 2024})
    assert response.status_code == 200
    data = response.json()
    assert data["applied_banking"] == 0.0
    assert data["adjusted_cb"] == pytest.approx(data["original_cb"])

    fleet = client.get("/api/compliance/adjusted-cb", params={"year": 2024})
    assert len(fleet.json()["ships"]) == 5


# ============================================================================
# Banking
# ============================================================================

def test_bank_then_balance(client, seeded):
    response = client.post(
        "/api/banking/bank", json={"ship_id": "ROUTE-002", "year": 2024, "amount": 1_000_000}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["cb_after"] == pytest.approx(data["cb_before"] - 1_000_000)

    balance = client.get("/api/banking/balance", params={"ship_id": "ROUTE-002"})
    assert balance.json() == {"ship_id": "ROUTE-002", "available_balance": 1_000_000.0}

    records = client.get("/api/banking/records", params={"ship_id": "ROUTE-002"})
    assert len(records.json()["records"]) == 1
    assert records.json()["records"][0]["applied"] is False


def test_bank_from_deficit_rejected(client, seeded):
    response = client.post(
        "/api/banking/bank", json={"ship_id": "ROUTE-001", "year": 2024, "amount": 10}
    )
    assert response.status_code == 400
    assert "negative or zero" in response.json()["detail"]


def test_bank_above_surplus_rejected(client, seeded):
    response = client.post(
        "/api/banking/bank", json={"ship_id": "ROUTE-002", "year": 2024, "amount": 1e12}
    )
    assert response.status_code == 400


def test_bank_non_positive_is_422(client, seeded):
    response = client.post(
        "/api/banking/bank", json={"ship_id": "ROUTE-002", "year": 2024, "amount": 0}
    )
    assert response.status_code == 422


def test_bank_unknown_record(client, seeded):
    response = client.post(
        "/api/banking/bank", json={"ship_id": "ROUTE-002", "year": 2023, "amount": 5}
    )
    assert response.status_code == 404


def test_apply_without_balance(client, seeded):
    response = client.post(
        "/api/banking/apply", json={"ship_id": "ROUTE-001", "year": 2024, "amount": 10}
    )
    assert response.status_code == 400
    assert "Insufficient banked balance" in response.json()["detail"]


def test_apply_banked_flow(client, seeded, add_compliance):
    add_compliance("ROUTE-004", 2025, -50_000.0)
    client.post("/api/banking/bank", json={"ship_id": "ROUTE-004", "year": 2024, "amount": 30_000})

    response = client.post(
        "/api/banking/apply", json={"ship_id": "ROUTE-004", "year": 2025, "amount": 20_000}
    )
    assert response.status_code == 200
    assert response.json()["cb_after"] == pytest.approx(-30_000.0)

    balance = client.get("/api/banking/balance", params={"ship_id": "ROUTE-004"})
    assert balance.json()["available_balance"] == pytest.approx(10_000.0)

    adjusted = client.get(
        "/api/compliance/adjusted-cb", params={"ship_id": "ROUTE-004", "year": 2025}
    )
    assert adjusted.json()["applied_banking"] == pytest.approx(20_000.0)


# ============================================================================
# Pools
# ============================================================================

def test_validate_pool(client, seeded):
    response = client.post(
        "/api/pools/validate", json={"year": 2024, "vessels": ["ROUTE-002", "ROUTE-004", "ROUTE-005"]}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["is_valid"] is True
    share = data["total_cb"] / 3
    assert all(m["cb_after"] == pytest.approx(share) for m in data["members"])


def test_validate_pool_negative_total(client, seeded):
    response = client.post(
        "/api/pools/validate", json={"year": 2024, "vessels": ["ROUTE-001", "ROUTE-002"]}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["is_valid"] is False
    assert data["errors"]
    assert all(m["cb_after"] is None for m in data["members"])


def test_create_pool(client, seeded):
    response = client.post(
        "/api/pools", json={"year": 2024, "vessels": ["ROUTE-002", "ROUTE-004", "ROUTE-005"]}
    )
    assert response.status_code == 201
    pool = response.json()
    assert len(pool["members"]) == 3

    fetched = client.get(f"/api/pools/{pool['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["total_cb"] == pytest.approx(pool["total_cb"])

    listed = client.get("/api/pools", params={"year": 2024})
    assert [p["id"] for p in listed.json()["pools"]] == [pool["id"]]

    cb = client.get("/api/compliance/cb", params={"ship_id": "ROUTE-005", "year": 2024})
    assert cb.json()["cb"] == pytest.approx(pool["total_cb"] / 3)


def test_create_invalid_pool(client, seeded):
    response = client.post("/api/pools", json={"year": 2024, "vessels": ["ROUTE-002"]})
    assert response.status_code == 400
    body = response.json()
    assert "Pool validation failed" in body["detail"]
    assert body["reasons"]

    listed = client.get("/api/pools", params={"year": 2024})
    assert listed.json()["pools"] == []


def test_unknown_pool(client):
    response = client.get("/api/pools/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404
