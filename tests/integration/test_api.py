"""Integration tests for API endpoints"""

import csv
import io
import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from fairshare_gateway.domain.models import User
from fairshare_gateway.infrastructure.database.repositories import ExpenseRepository, GroupRepository

ALICE = {"X-User-ID": "alice"}
BOB = {"X-User-ID": "bob"}


@pytest.fixture
def seeded_expenses(db: Session, users: dict[str, User]) -> None:
    """A few recent expenses for alice: two direct, one in a group she shares with carol"""
    recent = datetime.now() - timedelta(hours=1)
    group = GroupRepository(db).create("Ski Trip", ["alice", "carol"])
    expenses = ExpenseRepository(db)
    expenses.create(users["alice"], "Dinner, with wine", Decimal("80.00"), recent, "food", "bob", Decimal("40.00"))
    expenses.create(users["bob"], "Taxi", Decimal("30.00"), recent, "transport", "alice", Decimal("15.00"))
    expenses.create(users["carol"], "Chalet", Decimal("300.00"), recent, "lodging", group_id=group.id)
    expenses.create(users["bob"], "Not alice's", Decimal("999.00"), recent, "food", "carol", Decimal("10.00"))
    db.commit()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "fairshare_report_total" in response.text


def test_report_requires_authentication(client: TestClient):
    response = client.get("/v1/reports")
    assert response.status_code == 401


def test_report_rejects_unknown_period(client: TestClient):
    response = client.get("/v1/reports?period=fortnight", headers=ALICE)
    assert response.status_code == 422


def test_report_all_time(client: TestClient, seeded_expenses):
    """Test GET /v1/reports aggregates alice's share across direct and group expenses"""
    response = client.get("/v1/reports?period=all_time", headers=ALICE)

    assert response.status_code == 200
    assert response.headers["X-Request-ID"]
    data = response.json()
    summary = data["summary"]
    # 80 - 40 owed by bob, 15 owed to bob, half of the 300 chalet split with carol
    assert Decimal(summary["total_spent"]) == Decimal("205.00")
    assert summary["transaction_count"] == 3
    assert summary["has_comparison"] is False
    assert data["granularity"] == "monthly"
    assert set(data["by_category"]) == {"food", "transport", "lodging"}
    assert sum(Decimal(c["total"]) for c in data["by_category"].values()) == Decimal("205.00")
    assert [g["name"] for g in data["by_group"].values()] == ["Ski Trip"]
    assert [Decimal(g["total"]) for g in data["by_group"].values()] == [Decimal("150.00")]
    assert sum(Decimal(p["total"]) for p in data["trend"]) == Decimal("205.00")
    assert data["top_expenses"][0]["description"] == "Chalet"
    assert Decimal(data["top_expenses"][0]["amount"]) == Decimal("150.00")
    assert len(data["top_expenses"]) == 3


def test_report_granularity_override(client: TestClient, seeded_expenses):
    response = client.get("/v1/reports?period=this_year&granularity=weekly", headers=ALICE)

    assert response.status_code == 200
    data = response.json()
    assert data["granularity"] == "weekly"
    assert all(datetime.fromisoformat(p["bucket_start"]).weekday() == 0 for p in data["trend"])


def test_report_for_user_without_expenses(client: TestClient, users):
    response = client.get("/v1/reports?period=last_month", headers={"X-User-ID": "carol"})

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["summary"]["total_spent"]) == 0
    assert data["summary"]["percent_change"] is None
    assert data["top_expenses"] == []
    assert len(data["trend"]) >= 28


@patch("fairshare_gateway.infrastructure.database.repositories.ExpenseRepository.list_for_user")
def test_report_fetch_failure_returns_503(mock_fetch, client: TestClient):
    from fairshare_gateway.domain.exceptions import FetchFailureError

    mock_fetch.side_effect = FetchFailureError("store down")
    response = client.get("/v1/reports", headers=ALICE)

    assert response.status_code == 503


def test_export_csv(client: TestClient, seeded_expenses):
    response = client.get("/v1/reports/export.csv?period=all_time", headers=ALICE)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == ["Date", "Description", "Category", "Amount", "Payer", "Group"]
    descriptions = {row[1]: row for row in rows[1:]}
    assert set(descriptions) == {"Dinner, with wine", "Taxi", "Chalet"}
    assert descriptions["Chalet"][5] == "Ski Trip"
    assert descriptions["Taxi"][4] == "bob.smith"
    assert descriptions["Dinner, with wine"][3] == "80.00"


@patch("fairshare_gateway.infrastructure.clients.mail.MailClient.send", new_callable=AsyncMock)
def test_friend_request_flow_sends_two_emails(mock_send: AsyncMock, client: TestClient, users):
    """Request then accept: one email to the recipient, one back to the requester"""
    response = client.post("/v1/friends/requests", json={"friend_user_id": "bob"}, headers=ALICE)

    assert response.status_code == 201
    assert response.json()["status"] == "pending"
    assert mock_send.await_count == 1
    request_email = mock_send.await_args_list[0].args[0]
    assert request_email.to == "bob.smith@example.com"
    assert request_email.subject.startswith("Alice wants to be your friend")

    response = client.post("/v1/friends/alice/accept", headers=BOB)

    assert response.status_code == 200
    assert response.json()["status"] == "accepted"
    assert mock_send.await_count == 2
    accepted_email = mock_send.await_args_list[1].args[0]
    assert accepted_email.to == "alice@example.com"
    assert accepted_email.subject.startswith("bob.smith accepted")

    # Second accept is rejected and sends nothing further
    response = client.post("/v1/friends/alice/accept", headers=BOB)
    assert response.status_code == 409
    assert mock_send.await_count == 2


@patch("fairshare_gateway.infrastructure.clients.mail.MailClient.send", new_callable=AsyncMock)
def test_requester_cannot_accept_own_request(mock_send: AsyncMock, client: TestClient, users):
    client.post("/v1/friends/requests", json={"friend_user_id": "bob"}, headers=ALICE)

    response = client.post("/v1/friends/bob/accept", headers=ALICE)

    assert response.status_code == 409
    assert mock_send.await_count == 1


def test_duplicate_friend_request_conflicts(client: TestClient, users):
    client.post("/v1/friends/requests", json={"friend_user_id": "bob"}, headers=ALICE)
    response = client.post("/v1/friends/requests", json={"friend_user_id": "bob"}, headers=ALICE)

    assert response.status_code == 409


def test_friend_request_to_unknown_user(client: TestClient, users):
    response = client.post("/v1/friends/requests", json={"friend_user_id": "nobody"}, headers=ALICE)
    assert response.status_code == 404


def test_accept_without_request_is_404(client: TestClient, users):
    response = client.post("/v1/friends/carol/accept", headers=BOB)
    assert response.status_code == 404


@patch("fairshare_gateway.infrastructure.clients.mail.MailClient.send", new_callable=AsyncMock)
def test_direct_expense_notifies_participant(mock_send: AsyncMock, client: TestClient, users):
    response = client.post(
        "/v1/direct-expenses",
        json={
            "participant_id": "bob",
            "description": "Museum tickets",
            "category": "entertainment",
            "amount": "25.00",
            "participant_owed_amount": "12.50",
            "currency_code": "EUR",
        },
        headers=ALICE,
    )

    assert response.status_code == 201
    assert response.json()["payer_id"] == "alice"
    mock_send.assert_awaited_once()
    email = mock_send.await_args.args[0]
    assert email.to == "bob.smith@example.com"
    assert "€12.50" in email.text


@patch("fairshare_gateway.infrastructure.clients.mail.MailClient.send", new_callable=AsyncMock)
def test_direct_expense_survives_mail_failure(mock_send: AsyncMock, client: TestClient, users):
    from fairshare_gateway.domain.exceptions import TransportFailureError

    mock_send.side_effect = TransportFailureError("Mail API error: 503")
    response = client.post(
        "/v1/direct-expenses",
        json={"participant_id": "bob", "description": "Snacks", "amount": "4.00", "participant_owed_amount": "2.00"},
        headers=ALICE,
    )

    assert response.status_code == 201
    report = client.get("/v1/reports?period=all_time", headers=BOB).json()
    assert Decimal(report["summary"]["total_spent"]) == Decimal("2.00")


def test_direct_expense_validation(client: TestClient, users):
    response = client.post(
        "/v1/direct-expenses",
        json={"participant_id": "bob", "description": "Bad", "amount": "4.00", "participant_owed_amount": "9.00"},
        headers=ALICE,
    )
    assert response.status_code == 422


def test_direct_expense_date_offset_is_converted(client: TestClient, users):
    sent_at = datetime.fromisoformat("2024-03-31T23:30:00-05:00")
    response = client.post(
        "/v1/direct-expenses",
        json={
            "participant_id": "bob",
            "description": "Late dinner",
            "amount": "20.00",
            "participant_owed_amount": "10.00",
            "date": "2024-03-31T23:30:00-05:00",
        },
        headers=ALICE,
    )

    assert response.status_code == 201
    assert datetime.fromisoformat(response.json()["date"]) == datetime.fromtimestamp(sent_at.timestamp())
