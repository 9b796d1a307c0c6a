"""Integration tests for API endpoints"""

import uuid
import pytest
from decimal import Decimal
from unittest.mock import create_autospec
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from fundo_loans.api.dependencies import get_loan_repository
from fundo_loans.domain.exceptions import ConcurrencyConflictError
from fundo_loans.domain.repository import LoanRepository
from fundo_loans.infrastructure.database.repositories import SqlAlchemyLoanRepository
from fundo_loans.infrastructure.database.seed import seed_demo_loans


@pytest.fixture
def created_loan(client: TestClient) -> dict:
    """Loan of 10000.00 created through the API"""
    response = client.post("/api/loans", json={"amount": 10000.00, "applicantName": "John Doe"})
    assert response.status_code == 201
    return response.json()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient, created_loan: dict):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "fundo_loans_created_total" in response.text
    assert "http_request_duration_seconds" in response.text


def test_metrics_label_full_route_template(client: TestClient, created_loan: dict):
    """Test latency histogram is labelled with the prefixed route template, not loan ids"""
    client.post(f"/api/loans/{created_loan['id']}/payment", json={"amount": 100})

    text = client.get("/metrics").text

    assert 'endpoint="/api/loans",method="POST",status="201"' in text
    assert 'endpoint="/api/loans/{loan_id}/payment",method="POST",status="200"' in text
    assert created_loan["id"] not in text


def test_request_id_header(client: TestClient):
    response = client.get("/api/loans")
    assert response.headers["X-Request-ID"]

    response = client.get("/api/loans", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"


def test_list_loans_empty(client: TestClient):
    response = client.get("/api/loans")
    assert response.status_code == 200
    assert response.json() == []


def test_list_loans_seeded_newest_first(client: TestClient, db: Session):
    seed_demo_loans(db)

    response = client.get("/api/loans")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 5
    assert [loan["applicantName"] for loan in data] == [
        "Michael Brown",
        "John Doe",
        "Robert Johnson",
        "Jane Smith",
        "Emily Williams",
    ]
    for loan in data:
        assert set(loan) == {"id", "amount", "currentBalance", "applicantName", "status"}
        assert 0 <= loan["currentBalance"] <= loan["amount"]


def test_create_loan(client: TestClient, created_loan: dict):
    """Test POST /api/loans returns active loan with full balance"""
    assert created_loan["amount"] == 10000.00
    assert created_loan["currentBalance"] == 10000.00
    assert created_loan["applicantName"] == "John Doe"
    assert created_loan["status"] == "active"
    uuid.UUID(created_loan["id"])


def test_create_loan_location_header(client: TestClient):
    response = client.post("/api/loans", json={"amount": 2500.50, "applicantName": "Jane Smith"})

    assert response.status_code == 201
    loan_id = response.json()["id"]
    location = response.headers["Location"]
    assert location.endswith(f"/api/loans/{loan_id}")

    fetched = client.get(location)
    assert fetched.status_code == 200
    assert fetched.json()["amount"] == 2500.50


def test_create_loan_trims_name(client: TestClient):
    response = client.post("/api/loans", json={"amount": 100, "applicantName": "  Ann Lee  "})
    assert response.status_code == 201
    assert response.json()["applicantName"] == "Ann Lee"


@pytest.mark.parametrize(
    "payload",
    [
        {"amount": 0, "applicantName": "John Doe"},
        {"amount": -5, "applicantName": "John Doe"},
        {"amount": 1000000.01, "applicantName": "John Doe"},
        {"amount": 10.001, "applicantName": "John Doe"},
        {"amount": 100, "applicantName": "J"},
        {"amount": 100, "applicantName": "x" * 101},
        {"amount": 100, "applicantName": "   "},
        {"amount": 100},
        {"applicantName": "John Doe"},
        {"Amount": 100, "ApplicantName": "John Doe"},
        {"amount": "100", "applicantName": "John Doe"},
        {"amount": True, "applicantName": "John Doe"},
    ],
)
def test_create_loan_invalid(client: TestClient, payload: dict):
    """Test validation failures map to 400 with a message"""
    response = client.post("/api/loans", json=payload)

    assert response.status_code == 400
    assert response.json()["message"]


def test_create_loan_upper_bound_accepted(client: TestClient):
    response = client.post("/api/loans", json={"amount": 1000000, "applicantName": "Big Spender"})
    assert response.status_code == 201


def test_get_loan(client: TestClient, created_loan: dict):
    response = client.get(f"/api/loans/{created_loan['id']}")

    assert response.status_code == 200
    assert response.json() == created_loan


def test_get_loan_not_found(client: TestClient):
    """Test GET on an unknown id returns 404 envelope"""
    response = client.get(f"/api/loans/{uuid.uuid4()}")

    assert response.status_code == 404
    assert "not found" in response.json()["message"].lower()


def test_get_loan_malformed_id(client: TestClient):
    response = client.get("/api/loans/invalid-guid")
    assert response.status_code == 404


def test_payment_partial(client: TestClient, created_loan: dict):
    response = client.post(f"/api/loans/{created_loan['id']}/payment", json={"amount": 3000.00})

    assert response.status_code == 200
    data = response.json()
    assert data["currentBalance"] == 7000.00
    assert data["status"] == "active"


def test_payment_sequence_pays_off(client: TestClient, created_loan: dict):
    """Test 3000 + 2000 + 5000 against 10000 ends paid"""
    url = f"/api/loans/{created_loan['id']}/payment"
    for amount in (3000.00, 2000.00, 5000.00):
        response = client.post(url, json={"amount": amount})
        assert response.status_code == 200

    data = client.get(f"/api/loans/{created_loan['id']}").json()
    assert data["currentBalance"] == 0
    assert data["status"] == "paid"

    # Paid loans reject any further payment
    response = client.post(url, json={"amount": 0.01})
    assert response.status_code == 400


def test_payment_exceeding_balance(client: TestClient, created_loan: dict):
    """Test overpayment returns 400 and leaves balance unchanged"""
    url = f"/api/loans/{created_loan['id']}/payment"
    client.post(url, json={"amount": 7000.00})

    response = client.post(url, json={"amount": 5000.00})

    assert response.status_code == 400
    assert "exceed" in response.json()["message"]
    assert client.get(f"/api/loans/{created_loan['id']}").json()["currentBalance"] == 3000.00


@pytest.mark.parametrize("payload", [{"amount": 0}, {"amount": -100}, {}, {"Amount": 100}, {"amount": "100"}])
def test_payment_invalid_amount(client: TestClient, created_loan: dict, payload: dict):
    response = client.post(f"/api/loans/{created_loan['id']}/payment", json=payload)

    assert response.status_code == 400
    assert response.json()["message"]


def test_payment_loan_not_found(client: TestClient):
    response = client.post(f"/api/loans/{uuid.uuid4()}/payment", json={"amount": 100})

    assert response.status_code == 404
    assert "not found" in response.json()["message"].lower()


def test_cors_preflight(client: TestClient):
    response = client.options(
        "/api/loans",
        headers={"Origin": "http://localhost:4200", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:4200"


def test_payment_huge_amount_rejected_with_short_message(client: TestClient, created_loan: dict):
    """Test payments above the maximum loan amount fail validation without echoing the number"""
    response = client.post(f"/api/loans/{created_loan['id']}/payment", json={"amount": 1e308})

    assert response.status_code == 400
    assert len(response.json()["message"]) < 200
    assert client.get(f"/api/loans/{created_loan['id']}").json()["currentBalance"] == 10000.00


def test_payment_invariant_violation_returns_500(client: TestClient, db: Session, make_loan):
    """Test a stored loan with balance above principal surfaces as an opaque server error"""
    loan = make_loan("100.00", "150.00", name="Broken Loan")
    SqlAlchemyLoanRepository(db).insert(loan)
    db.commit()

    response = client.post(f"/api/loans/{loan.id}/payment", json={"amount": 10})

    assert response.status_code == 500
    assert response.json() == {"message": "An unexpected error occurred."}


def test_payment_concurrent_update_returns_409(client: TestClient, make_loan):
    """Test a version conflict on update maps to 409 with a message"""
    loan = make_loan("1000.00")
    repository = create_autospec(LoanRepository, instance=True)
    repository.get_by_id.return_value = loan
    repository.update.side_effect = ConcurrencyConflictError(loan.id)
    client.app.dependency_overrides[get_loan_repository] = lambda: repository

    response = client.post(f"/api/loans/{loan.id}/payment", json={"amount": 100})

    assert response.status_code == 409
    assert str(loan.id) in response.json()["message"]
    repository.update.assert_called_once()
    assert loan.current_balance == Decimal("900.00")
