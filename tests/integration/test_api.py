"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient

from loanbook.api.dependencies import get_settings
from loanbook.api.main import create_app
from loanbook.config import Settings

pytestmark = pytest.mark.integration


@pytest.fixture
def allocation_body():
    """Two banks, a cheap NY-banned facility and a pricier open one"""
    return {
        "banks": [{"id": 1, "name": "Chase"}, {"id": 2, "name": "Bank of America"}],
        "facilities": [
            {"id": 10, "bank_id": 2, "interest_rate": 0.10, "amount": 10000},
            {"id": 20, "bank_id": 1, "interest_rate": 0.05, "amount": 10000},
        ],
        "covenants": [{"bank_id": 1, "banned_state": "NY"}],
        "loans": [
            {"id": 1, "amount": 10000, "interest_rate": 0.2, "default_likelihood": 0.0, "state": "CA"},
            {"id": 2, "amount": 5000, "interest_rate": 0.2, "default_likelihood": 0.0, "state": "NY"},
            {"id": 3, "amount": 6000, "interest_rate": 0.2, "default_likelihood": 0.0, "state": "TX"},
        ],
    }


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "loanbook_loans_total" in response.text


def test_allocation_endpoint(client: TestClient, allocation_body):
    """Test POST /v1/allocations end to end"""
    response = client.post("/v1/allocations", json=allocation_body)

    assert response.status_code == 200
    data = response.json()
    # Loan 1 takes the cheap facility, loan 2 is banned there, loan 3 finds no room left
    assert data["assignments"] == [
        {"loan_id": 1, "facility_id": 20},
        {"loan_id": 2, "facility_id": 10},
    ]
    # 0.2 * 10000 - 0.05 * 10000 = 1500; 0.2 * 5000 - 0.10 * 5000 = 500
    assert data["yields"] == [
        {"facility_id": 10, "expected_yield": 500},
        {"facility_id": 20, "expected_yield": 1500},
    ]
    assert data["unassigned"] == [{"loan_id": 3, "reason": "insufficient_capacity"}]
    assert data["remaining_capacity"] == {"10": 5000, "20": 0}
    assert response.headers["X-Request-ID"] == data["run_id"]


def test_allocation_respects_load_order_setting(allocation_body):
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: Settings(candidate_order="load_order")
    client = TestClient(app)

    response = client.post("/v1/allocations", json=allocation_body)

    assert response.status_code == 200
    assert response.json()["assignments"][0] == {"loan_id": 1, "facility_id": 10}


def test_allocation_is_stateless_between_requests(client: TestClient, allocation_body):
    first = client.post("/v1/allocations", json=allocation_body).json()
    second = client.post("/v1/allocations", json=allocation_body).json()

    assert first["assignments"] == second["assignments"]
    assert first["yields"] == second["yields"]


def test_allocation_unknown_bank(client: TestClient, allocation_body):
    allocation_body["facilities"][0]["bank_id"] = 99

    response = client.post("/v1/allocations", json=allocation_body)

    assert response.status_code == 422
    assert "unknown bank 99" in response.json()["detail"]


def test_allocation_duplicate_loan(client: TestClient, allocation_body):
    allocation_body["loans"][1]["id"] = 1

    response = client.post("/v1/allocations", json=allocation_body)

    assert response.status_code == 422
    assert "Loan 1" in response.json()["detail"]


def test_allocation_rate_out_of_range(client: TestClient, allocation_body):
    allocation_body["loans"][0]["default_likelihood"] = 1.5

    response = client.post("/v1/allocations", json=allocation_body)

    assert response.status_code == 422


def test_allocation_request_id_passthrough(client: TestClient, allocation_body):
    response = client.post("/v1/allocations", json=allocation_body, headers={"X-Request-ID": "batch-42"})

    assert response.headers["X-Request-ID"] == "batch-42"
    assert response.json()["run_id"] == "batch-42"
