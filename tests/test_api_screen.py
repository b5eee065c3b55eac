# tests/test_api_screen.py
from fixtures.properties import midrise_office_payload


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["assumptions_version"]


def test_assumptions_endpoint(client):
    r = client.get("/assumptions")
    assert r.status_code == 200
    data = r.json()
    assert data["roc_strong"] == 6.5
    assert "Office Mid Rise" in data["efficiency"]


def test_screen_success(client):
    r = client.post("/screen", json=midrise_office_payload())
    assert r.status_code == 200, r.text
    data = r.json()

    expected_sections = {
        "eligibility",
        "opportunity",
        "financing_notes",
        "physical",
        "unit_yield",
        "costs",
        "proforma",
        "scenarios",
        "deal_score",
        "risk",
    }
    assert expected_sections <= set(data)
    assert data["address"] == "6200 Sunset Blvd"
    assert data["eligibility"]["status"] == "eligible"
    assert data["unit_yield"]["total_units"] == 142
    assert 0 <= data["deal_score"]["score"] <= 100
    assert data["deal_score"]["band"] in {"A", "B", "C"}
    assert len(data["deal_score"]["components"]) == 6
    assert all(c["reason"] for c in data["deal_score"]["components"])
    assert len(data["physical"]["categories"]) == 5
    assert data["scenarios"]["risk_level"] in {"high", "moderate", "resilient"}
    assert data["scenarios"]["summary"].startswith("Stress test")


def test_screen_sparse_payload_still_scores(client):
    r = client.post("/screen", json={"address": "Unknown lot"})
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["proforma"]["return_on_cost"] == 0
    assert data["physical"]["reliability"]["level"] == "Low"


def test_screen_sectioned_payload(client):
    payload = {
        "address": "77 Industrial Way",
        "profile": {"useType": "Warehouse", "yearBuilt": 1955, "buildingSF": 60000, "stories": 2},
        "underwriting": {"studioRent": 1900, "oneBRRent": 2400, "twoBRRent": 3100},
    }
    r = client.post("/screen", json=payload)
    assert r.status_code == 200, r.text
    assert r.json()["unit_yield"]["building_class"] == "Warehouse/Industrial"


def test_screen_unrepresentable_value_is_400(client):
    r = client.post("/screen", json={"address": "x", "neighborhood": {"nested": True}})
    assert r.status_code == 400
    assert "neighborhood" in r.json()["detail"]
