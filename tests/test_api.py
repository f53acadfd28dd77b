from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from account_service.api import routes
from account_service.domain.audit import AuditRecord
from account_service.domain.service import AccountService
from account_service.memory_repository import InMemoryAccountRepository

JOHN = {
    "first_name": "John",
    "last_name": "Doe",
    "birth_date": "1990-01-15",
    "email": "JOHN.DOE@EXAMPLE.COM",
}


@pytest.fixture
def api_client():
    """Provide a FastAPI test client backed by an isolated in-memory store."""
    audit_log: list[AuditRecord] = []
    service = AccountService(InMemoryAccountRepository(), audit_sink=audit_log.append)

    app = FastAPI()
    app.include_router(routes.router)
    app.state.account_service = service

    with TestClient(app) as client:
        yield client, audit_log


def test_create_account_returns_created_record(api_client):
    client, audit_log = api_client

    response = client.post("/v1/accounts", json=JOHN)

    assert response.status_code == 201
    body = response.json()
    assert body["account_id"] > 0
    assert body["email"] == "john.doe@example.com"
    assert body["created_at"] is not None
    assert body["is_active"] is True
    assert len(audit_log) == 1


def test_create_account_reports_all_validation_errors(api_client):
    client, audit_log = api_client

    response = client.post(
        "/v1/accounts",
        json={"first_name": "", "last_name": "Doe", "email": "a@b.com", "birth_date": "1990-01-01", "pet_count": 101},
    )

    assert response.status_code == 422
    assert response.json()["detail"]["errors"] == [
        "FirstName is required.",
        "Pet count seems unrealistic (maximum 100).",
    ]
    assert audit_log == []


def test_create_duplicate_email_conflicts(api_client):
    client, _ = api_client
    assert client.post("/v1/accounts", json=JOHN).status_code == 201

    response = client.post("/v1/accounts", json={**JOHN, "email": "john.doe@example.com"})

    assert response.status_code == 409


def test_get_account_round_trip(api_client):
    client, _ = api_client
    created = client.post("/v1/accounts", json={**JOHN, "city": "  Springfield "}).json()

    response = client.get(f"/v1/accounts/{created['account_id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["city"] == "Springfield"
    assert body["birth_date"] == "1990-01-15"


def test_get_account_errors(api_client):
    client, _ = api_client

    assert client.get("/v1/accounts/999").status_code == 404
    assert client.get("/v1/accounts/0").status_code == 400


def test_get_account_by_email(api_client):
    client, _ = api_client
    created = client.post("/v1/accounts", json=JOHN).json()

    found = client.get("/v1/accounts/by-email", params={"email": " John.Doe@example.com "})
    assert found.status_code == 200
    assert found.json()["account_id"] == created["account_id"]

    assert client.get("/v1/accounts/by-email", params={"email": "x@example.com"}).status_code == 404
    assert client.get("/v1/accounts/by-email", params={"email": ""}).status_code == 400


def test_list_accounts_with_active_filter(api_client):
    client, _ = api_client
    client.post("/v1/accounts", json={**JOHN, "email": "on@example.com"})
    client.post("/v1/accounts", json={**JOHN, "email": "off@example.com", "is_active": False})

    everyone = client.get("/v1/accounts").json()
    active = client.get("/v1/accounts", params={"active": "true"}).json()

    assert {a["email"] for a in everyone} == {"on@example.com", "off@example.com"}
    assert [a["email"] for a in active] == ["on@example.com"]


def test_update_account(api_client):
    client, _ = api_client
    created = client.post("/v1/accounts", json=JOHN).json()

    response = client.put(
        f"/v1/accounts/{created['account_id']}",
        json={**JOHN, "pet_count": 5, "email": "new.address@example.com"},
    )

    assert response.status_code == 200
    assert response.json()["pet_count"] == 5
    assert response.json()["email"] == "new.address@example.com"


def test_update_missing_account_is_not_found(api_client):
    client, _ = api_client

    response = client.put("/v1/accounts/999", json=JOHN)

    assert response.status_code == 404


def test_update_email_collision_conflicts(api_client):
    client, _ = api_client
    client.post("/v1/accounts", json={**JOHN, "email": "first@example.com"})
    second = client.post("/v1/accounts", json={**JOHN, "email": "second@example.com"}).json()

    response = client.put(f"/v1/accounts/{second['account_id']}", json={**JOHN, "email": "first@example.com"})

    assert response.status_code == 409


def test_delete_account(api_client):
    client, _ = api_client
    created = client.post("/v1/accounts", json=JOHN).json()

    assert client.delete(f"/v1/accounts/{created['account_id']}").json() == {"deleted": True}
    assert client.delete("/v1/accounts/999").json() == {"deleted": False}
    assert client.delete("/v1/accounts/0").status_code == 400
