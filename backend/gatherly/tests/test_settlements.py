"""
Tests for bill split and settlement endpoints.
"""
from decimal import Decimal
from gatherly.core.config import settings
from gatherly.models.settlement import SettlementResult


def transfers_of(payload):
    return [(t["from"], t["to"], Decimal(t["amount"])) for t in payload]


def assert_rows_settle(data):
    """Paying the listed transfers brings every row back to zero."""
    balances = {r["person"]: Decimal(r["balance"]) for r in data["rows"]}
    for t in data["transfers"]:
        balances[t["from"]] += Decimal(t["amount"])
        balances[t["to"]] -= Decimal(t["amount"])
    assert all(abs(v) <= settings.SETTLEMENT_EPSILON for v in balances.values()), balances


def test_compute_settlement(client):
    response = client.post(
        "/api/settlement/compute",
        json=[
            {"identity": "A", "paid": "0", "owed": "30"},
            {"identity": "B", "paid": "50", "owed": "10"},
            {"identity": "C", "paid": "10", "owed": "20"},
        ]
    )
    assert response.status_code == 200
    assert transfers_of(response.json()) == [
        ("A", "B", Decimal(30)),
        ("C", "B", Decimal(10)),
    ]


def test_compute_settlement_empty(client):
    response = client.post("/api/settlement/compute", json=[])
    assert response.status_code == 200
    assert response.json() == []


def test_compute_settlement_rejects_negative_amounts(client):
    response = client.post(
        "/api/settlement/compute",
        json=[{"identity": "A", "paid": "-5", "owed": "0"}]
    )
    assert response.status_code == 422


def test_compute_settlement_rejects_duplicates(client):
    response = client.post(
        "/api/settlement/compute",
        json=[
            {"identity": "A", "paid": "10", "owed": "5"},
            {"identity": "A", "paid": "0", "owed": "5"},
        ]
    )
    assert response.status_code == 400


def test_bill_split(client, dinner):
    """Host bought the main course; guests owe a third each."""
    response = client.get(f"/api/events/{dinner['id']}/bill-split")
    assert response.status_code == 200
    data = response.json()

    assert data["currency"] == "USD"
    assert Decimal(data["total_cost"]) == Decimal("30")
    rows = {r["person"]: r for r in data["rows"]}
    assert Decimal(rows["Host"]["balance"]) == Decimal("20")
    assert Decimal(rows["Alice"]["balance"]) == Decimal("-10")
    assert rows["Bob"]["email_or_phone"] == "+15555550100"
    assert transfers_of(data["transfers"]) == [
        ("Alice", "Host", Decimal(10)),
        ("Bob", "Host", Decimal(10)),
    ]
    assert Decimal(data["unattributed_cost"]) == 0
    assert_rows_settle(data)


def test_bill_split_counts_guest_claims(client, dinner):
    alice = next(i["token"] for i in dinner["invitees"] if i["name"] == "Alice")
    dessert_id = dinner["needs"][1]["id"]
    client.put(f"/api/events/invitee/{alice}/needs/{dessert_id}/claim")
    client.put(f"/api/events/{dinner['id']}/needs/{dessert_id}/cost", json={"cost": "15"})

    data = client.get(f"/api/events/{dinner['id']}/bill-split").json()

    rows = {r["person"]: r for r in data["rows"]}
    assert Decimal(rows["Host"]["balance"]) == Decimal("15")
    assert Decimal(rows["Alice"]["balance"]) == Decimal("0")
    assert Decimal(rows["Bob"]["balance"]) == Decimal("-15")
    assert transfers_of(data["transfers"]) == [("Bob", "Host", Decimal(15))]
    assert_rows_settle(data)


def test_bill_split_skips_declined_guests(client, dinner):
    bob = next(i["token"] for i in dinner["invitees"] if i["name"] == "Bob")
    client.put(f"/api/events/invitee/{bob}/accept", json={"has_accepted": False})

    data = client.get(f"/api/events/{dinner['id']}/bill-split").json()

    assert [r["person"] for r in data["rows"]] == ["Host", "Alice"]
    assert transfers_of(data["transfers"]) == [("Alice", "Host", Decimal(15))]


def test_bill_split_uneven_total(client, dinner):
    client.put(
        f"/api/events/{dinner['id']}",
        json={"needs": [{"item": "Pizza", "cost": "100.00", "claimed_by": "Host"}]}
    )

    data = client.get(f"/api/events/{dinner['id']}/bill-split").json()

    owes = [Decimal(r["owes"]) for r in data["rows"]]
    assert owes == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
    assert sum(Decimal(t["amount"]) for t in data["transfers"]) == Decimal("66.66")
    assert_rows_settle(data)


def test_trigger_and_get_settlement(client, db, dinner):
    assert client.get(f"/api/settlement/{dinner['id']}/result").status_code == 404

    response = client.post(f"/api/settlement/{dinner['id']}/trigger")
    assert response.status_code == 200
    assert response.json()["settlement_id"]

    # Re-running replaces the stored result
    response = client.post(f"/api/settlement/{dinner['id']}/trigger")
    assert response.status_code == 200
    assert db.query(SettlementResult).count() == 1

    response = client.get(f"/api/settlement/{dinner['id']}/result")
    assert response.status_code == 200
    result = response.json()
    assert result["calculation_data"]["transfers"] == [
        {"from": "Alice", "to": "Host", "amount": "10.00"},
        {"from": "Bob", "to": "Host", "amount": "10.00"},
    ]
    assert "Alice -> Host: 10.00 USD" in result["summary"]


def test_trigger_settlement_unknown_event(client):
    response = client.post("/api/settlement/999/trigger")
    assert response.status_code == 404


def test_payment_request(client, dinner):
    response = client.post(
        f"/api/events/{dinner['id']}/payment-request",
        json={"recipient": "Alice", "amount": "10"}
    )
    assert response.status_code == 202
    data = response.json()
    assert data["recipient_contact"] == "alice@example.com"
    assert data["requested_by"] == "Host"
    assert Decimal(data["amount"]) == Decimal("10")


def test_payment_request_without_contact(client, dinner):
    response = client.post(
        f"/api/events/{dinner['id']}/payment-request",
        json={"recipient": "Stranger", "amount": "10"}
    )
    assert response.status_code == 400


def test_bill_split_transfers_settle_every_row(client, dinner):
    alice = next(i["token"] for i in dinner["invitees"] if i["name"] == "Alice")
    dessert_id = dinner["needs"][1]["id"]
    client.put(f"/api/events/invitee/{alice}/needs/{dessert_id}/claim")
    client.put(f"/api/events/{dinner['id']}/needs/{dessert_id}/cost", json={"cost": "41.17"})

    data = client.get(f"/api/events/{dinner['id']}/bill-split").json()

    assert sum(Decimal(r["balance"]) for r in data["rows"]) == 0
    assert_rows_settle(data)


def test_bill_split_leaves_out_unpaid_needs(client, dinner):
    """A need with a cost but no claimer is reported, not shared."""
    dessert_id = dinner["needs"][1]["id"]
    client.put(f"/api/events/{dinner['id']}/needs/{dessert_id}/cost", json={"cost": "15"})

    data = client.get(f"/api/events/{dinner['id']}/bill-split").json()

    assert Decimal(data["total_cost"]) == Decimal("30")
    assert Decimal(data["unattributed_cost"]) == Decimal("15")
    rows = {r["person"]: r for r in data["rows"]}
    assert Decimal(rows["Bob"]["balance"]) == Decimal("-10")
    assert transfers_of(data["transfers"]) == [
        ("Alice", "Host", Decimal(10)),
        ("Bob", "Host", Decimal(10)),
    ]
    assert_rows_settle(data)


def test_settlement_records_unpaid_needs(client, dinner):
    dessert_id = dinner["needs"][1]["id"]
    client.put(f"/api/events/{dinner['id']}/needs/{dessert_id}/cost", json={"cost": "15"})
    client.post(f"/api/settlement/{dinner['id']}/trigger")

    result = client.get(f"/api/settlement/{dinner['id']}/result").json()

    assert result["calculation_data"]["unattributed_cost"] == "15.00"
    assert "Unpaid needs: 15.00 USD" in result["summary"]
