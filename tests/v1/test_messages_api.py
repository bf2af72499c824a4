# mypy: ignore-errors
"""Tests for sealed message endpoints."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import status


@pytest.fixture()
def http_paired(client, headers) -> int:
    """Pair u1 and u2 through the API and return the partnership id."""
    created = client.post(
        "/api/v1/partners/requests",
        json={"partner_id": "u2"},
        headers=headers("u1"),
    ).json()
    client.post(
        f"/api/v1/partners/requests/{created['id']}/accept",
        json={"relationship_date": "2024-01-01"},
        headers=headers("u2"),
    )
    return created["id"]


def _today():
    return datetime.now(UTC).date()


def _seal(client, headers, sender: str, content: str, days_ahead: int = 0):
    return client.post(
        "/api/v1/messages/",
        json={
            "content": content,
            "unlock_date": (_today() + timedelta(days=days_ahead)).isoformat(),
        },
        headers=headers(sender),
    )


def test_create_message_without_partner(client, headers) -> None:
    response = _seal(client, headers, "u1", "hello", 1)
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["code"] == "NoPartner"


def test_create_message_with_empty_content(client, headers, http_paired) -> None:
    response = _seal(client, headers, "u1", "   ", 1)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["code"] == "EmptyContent"


def test_create_message_in_the_past(client, headers, http_paired) -> None:
    response = _seal(client, headers, "u1", "too late", -1)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["code"] == "PastUnlockDate"


def test_locked_message_visibility(client, headers, http_paired) -> None:
    """The sender reads their note; the receiver only sees that something is sealed."""
    response = _seal(client, headers, "u1", "tomorrow's note", 1)
    assert response.status_code == status.HTTP_201_CREATED
    created = response.json()
    assert created["content"] == "tomorrow's note"
    assert created["is_sender"] is True
    assert created["receiver"] == "u2"
    assert created["state"] == "locked"

    inbox = client.get("/api/v1/messages/", headers=headers("u2")).json()
    assert len(inbox) == 1
    assert inbox[0]["content"] is None
    assert inbox[0]["locked"] is True

    assert client.get("/api/v1/messages/today", headers=headers("u2")).json() is None

    opened = client.put(f"/api/v1/messages/{created['id']}/opened", headers=headers("u2"))
    assert opened.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert opened.json()["code"] == "StillSealed"


def test_open_todays_message(client, headers, http_paired) -> None:
    created = _seal(client, headers, "u1", "today's note").json()

    today = client.get("/api/v1/messages/today", headers=headers("u2")).json()
    assert today["id"] == created["id"]
    assert today["opened"] is False
    assert today["content"] == "today's note"

    first = client.put(f"/api/v1/messages/{created['id']}/opened", headers=headers("u2"))
    second = client.put(f"/api/v1/messages/{created['id']}/opened", headers=headers("u2"))
    assert first.status_code == status.HTTP_200_OK
    assert second.status_code == status.HTTP_200_OK
    assert second.json()["opened"] is True
    assert second.json()["state"] == "opened"

    assert client.get("/api/v1/messages/today", headers=headers("u2")).json() is None


def test_sender_cannot_open_message(client, headers, http_paired) -> None:
    created = _seal(client, headers, "u1", "mine").json()
    response = client.put(f"/api/v1/messages/{created['id']}/opened", headers=headers("u1"))
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_open_missing_message(client, headers) -> None:
    response = client.put("/api/v1/messages/9999/opened", headers=headers("u2"))
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_get_message_hidden_from_outsider(client, headers, http_paired) -> None:
    created = _seal(client, headers, "u1", "secret").json()
    assert client.get(f"/api/v1/messages/{created['id']}", headers=headers("u2")).status_code == 200
    response = client.get(f"/api/v1/messages/{created['id']}", headers=headers("u3"))
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_message_dates(client, headers, http_paired) -> None:
    _seal(client, headers, "u1", "a", 3)
    _seal(client, headers, "u1", "b", 1)
    _seal(client, headers, "u2", "c", 2)

    response = client.get("/api/v1/messages/dates", headers=headers("u1"))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["dates"] == [
        (_today() + timedelta(days=1)).isoformat(),
        (_today() + timedelta(days=3)).isoformat(),
    ]


def test_message_dates_without_partner(client, headers) -> None:
    response = client.get("/api/v1/messages/dates", headers=headers("u1"))
    assert response.status_code == status.HTTP_409_CONFLICT


def test_streak_and_totals_after_exchange(client, headers, http_paired) -> None:
    _seal(client, headers, "u1", "hi", 1)
    _seal(client, headers, "u2", "hi back", 1)

    stats = client.get("/api/v1/partners/stats", headers=headers("u2")).json()
    assert stats["total_messages"] == 2
    assert stats["current_streak"] == 1


def test_unknown_timezone_header(client, headers) -> None:
    response = client.get("/api/v1/messages/today", headers=headers("u1", "Not/AZone"))
    assert response.status_code == status.HTTP_400_BAD_REQUEST
