from __future__ import annotations

from typing import Any

from fastapi.testclient import TestClient

HEADERS = {"X-User-Id": "user-1"}


def _snapshots(client: TestClient) -> list[dict[str, Any]]:
    response = client.get("/v1/locations/loc-1/shareholders")
    assert response.status_code == 200
    return response.json()["shareholders"]


def _closing_payload(
    client: TestClient, *, retained: str = "200.00", net_profit: str = "1000.00"
) -> dict[str, Any]:
    return {
        "year": 2024,
        "month": 6,
        "retained_amount": retained,
        "net_profit": net_profit,
        "shareholders": _snapshots(client),
    }


def test_list_shareholders_returns_balances(
    client: TestClient, shareholders: tuple[str, str]
) -> None:
    body = _snapshots(client)

    assert [item["id"] for item in body] == list(shareholders)
    assert body[0] == {
        "id": "socio-a",
        "name": "Ana",
        "percentage": "60.00",
        "participates_in_loss": True,
        "accumulated_balance": "0.00",
    }


def test_close_month_returns_201_with_settlements(
    client: TestClient, shareholders: tuple[str, str]
) -> None:
    response = client.post(
        "/v1/locations/loc-1/closings",
        json=_closing_payload(client),
        headers=HEADERS,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["period"] == {"year": 2024, "month": 6}
    assert body["distributed_amount"] == "800.00"
    assert body["closed_by"] == "user-1"
    assert [item["period_share"] for item in body["settlements"]] == [
        "480.00",
        "320.00",
    ]

    fetched = client.get("/v1/locations/loc-1/closings/2024/6")
    assert fetched.status_code == 200
    assert fetched.json()["closing_record_id"] == body["closing_record_id"]

    balances = {item["id"]: item["accumulated_balance"] for item in _snapshots(client)}
    assert balances == {"socio-a": "480.00", "socio-b": "320.00"}


def test_close_month_twice_returns_409(
    client: TestClient, shareholders: tuple[str, str]
) -> None:
    first = client.post(
        "/v1/locations/loc-1/closings",
        json=_closing_payload(client),
        headers=HEADERS,
    )
    assert first.status_code == 201

    second = client.post(
        "/v1/locations/loc-1/closings",
        json=_closing_payload(client),
        headers=HEADERS,
    )

    assert second.status_code == 409
    body = second.json()
    assert body["code"] == "PERIOD_ALREADY_CLOSED"
    assert body["details"] == {"location_id": "loc-1", "month": 6, "year": 2024}


def test_retained_above_profit_returns_422(
    client: TestClient, shareholders: tuple[str, str]
) -> None:
    response = client.post(
        "/v1/locations/loc-1/closings",
        json=_closing_payload(client, retained="1200.00"),
        headers=HEADERS,
    )

    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_DISTRIBUTION"
    assert client.get("/v1/locations/loc-1/closings/2024/6").status_code == 404


def test_close_month_without_user_header_returns_400(
    client: TestClient, shareholders: tuple[str, str]
) -> None:
    response = client.post(
        "/v1/locations/loc-1/closings",
        json=_closing_payload(client),
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_preview_shields_loss_without_persisting(
    client: TestClient, shareholders: tuple[str, str]
) -> None:
    response = client.post(
        "/v1/locations/loc-1/closings/preview",
        json={
            "year": 2024,
            "month": 6,
            "retained_amount": "0.00",
            "net_profit": "-500.00",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["is_closed"] is False
    assert [item["period_share"] for item in body["settlements"]] == [
        "-300.00",
        "0.00",
    ]
    balances = {item["id"]: item["accumulated_balance"] for item in _snapshots(client)}
    assert balances == {"socio-a": "0.00", "socio-b": "0.00"}
