"""Integration tests for cash-out endpoints"""

import uuid
from decimal import Decimal
import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def card_id(make_card) -> str:
    return str(make_card("JS Bank", total_limit="20000.00").id)


def test_suggestion(client: TestClient, card_id: str):
    client.post("/v1/budgets/2024/3/expenses", json={"label": "Rent", "amount": "25000.00"})

    data = client.get("/v1/budgets/2024/3/cash-out").json()

    assert Decimal(data["need"]) == Decimal("25000")
    assert data["withdrawals"] == [{"card_id": card_id, "amount": "20000.00"}]
    assert Decimal(data["uncovered"]) == Decimal("5000")
    assert data["cards"][0]["nickname"] == "JS Bank"
    assert data["cards"][0]["due_date"] == "2024-03-30"


def test_apply_twice_accumulates(client: TestClient, card_id: str):
    plan = {"withdrawals": [{"card_id": card_id, "amount": "5000.00"}]}

    client.post("/v1/budgets/2024/3/cash-out", json=plan)
    response = client.post("/v1/budgets/2024/3/cash-out", json=plan)

    assert response.status_code == 200
    assert Decimal(response.json()["budget"]["balance_used"]) == Decimal("10000")
    incomes = client.get("/v1/budgets/2024/3").json()["incomes"]
    assert len(incomes) == 1
    assert incomes[0]["source"] == "Cash-out – JS Bank"
    assert incomes[0]["is_cash_out"] is True
    assert Decimal(incomes[0]["amount"]) == Decimal("10000")


def test_validate_over_limit(client: TestClient, card_id: str):
    plan = {"withdrawals": [{"card_id": card_id, "amount": "20000.01"}]}

    validated = client.post("/v1/budgets/2024/3/cash-out/validate", json=plan)
    applied = client.post("/v1/budgets/2024/3/cash-out", json=plan)

    assert validated.status_code == 422
    assert "exceeds available limit" in validated.json()["detail"]
    assert applied.status_code == 422
    assert client.get("/v1/budgets/2024/3").json()["incomes"] == []


def test_validate_within_limit(client: TestClient, card_id: str):
    plan = {"withdrawals": [{"card_id": card_id, "amount": "20000.00"}]}
    assert client.post("/v1/budgets/2024/3/cash-out/validate", json=plan).status_code == 200


def test_unknown_card_in_plan(client: TestClient, card_id: str):
    plan = {"withdrawals": [{"card_id": str(uuid.uuid4()), "amount": "1.00"}]}
    assert client.post("/v1/budgets/2024/3/cash-out", json=plan).status_code == 404


def test_cash_out_rows_cannot_be_edited(client: TestClient, card_id: str):
    client.post("/v1/budgets/2024/3/cash-out", json={"withdrawals": [{"card_id": card_id, "amount": "100.00"}]})
    income_id = client.get("/v1/budgets/2024/3").json()["incomes"][0]["id"]

    response = client.patch(f"/v1/incomes/{income_id}", json={"source": "Gift", "amount": "100.00"})

    assert response.status_code == 400


def test_cash_out_rows_cannot_be_toggled_or_deleted(client: TestClient, card_id: str):
    client.post("/v1/budgets/2024/3/cash-out", json={"withdrawals": [{"card_id": card_id, "amount": "100.00"}]})
    income_id = client.get("/v1/budgets/2024/3").json()["incomes"][0]["id"]

    toggled = client.patch(f"/v1/incomes/{income_id}/status", json={"status": "pending"})
    deleted = client.delete(f"/v1/incomes/{income_id}")

    assert toggled.status_code == 400
    assert "reset the plan" in toggled.json()["detail"]
    assert deleted.status_code == 400
    incomes = client.get("/v1/budgets/2024/3").json()["incomes"]
    assert [(i["status"], Decimal(i["amount"])) for i in incomes] == [("done", Decimal("100"))]


def test_reset(client: TestClient, card_id: str):
    client.post("/v1/budgets/2024/3/cash-out", json={"withdrawals": [{"card_id": card_id, "amount": "5000.00"}]})

    response = client.delete("/v1/budgets/2024/3/cash-out")

    assert response.status_code == 200
    assert Decimal(response.json()["budget"]["balance_used"]) == Decimal("0")
    assert client.get("/v1/budgets/2024/3").json()["incomes"] == []
    limits = client.get("/v1/budgets/2024/3/cash-out").json()["cards"]
    assert Decimal(limits[0]["available_limit"]) == Decimal("20000")


def test_reset_missing_month(client: TestClient):
    assert client.delete("/v1/budgets/2031/1/cash-out").status_code == 404
