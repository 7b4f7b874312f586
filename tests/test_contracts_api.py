from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from conftest import unwrap
from lease_service.app.crud.contracts import contracts_crud
from lease_service.app.models.contracts.contracts import Contract
from lease_service.app.schemas.contracts.contracts_schemas import ContractUpdate


def contract_payload(**overrides):
    payload = {
        "device_name": "Galaxy S24 256GB",
        "contract_date": "2024-01-01",
        "duration_days": 4,
        "total_amount": 4000,
        "daily_deduction": 1000,
        "lessee_name": "Kim Minji",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def created(client):
    return unwrap(client.post("/api/contracts/", json=contract_payload()))


class TestCreateContract:

    def test_create_materializes_schedule(self, client):
        response = client.post("/api/contracts/", json=contract_payload())
        assert response.status_code == 200

        body = response.json()
        assert body["status"] == "Success"
        data = body["data"]
        assert data["contract_number"] == 1
        assert data["execution_date"] == "2024-01-01"
        assert data["expiry_date"] == "2024-01-05"
        assert [d["status"] for d in data["daily_deductions"]] == ["unpaid", "pending", "pending", "pending"]
        assert data["unpaid_balance"] == 4000

    def test_numbers_are_sequential(self, client):
        numbers = [
            unwrap(client.post("/api/contracts/", json=contract_payload()))["contract_number"]
            for _ in range(3)
        ]
        assert numbers == [1, 2, 3]

    def test_units_scale_amounts(self, client):
        data = unwrap(client.post("/api/contracts/", json=contract_payload(units_required=2)))
        assert data["total_amount"] == 8000
        assert data["daily_deduction"] == 2000
        assert data["unpaid_balance"] == 8000

    def test_amounts_from_price_tier(self, client):
        partner = unwrap(client.post("/api/partners/", json={
            "name": "Seoul Mobile",
            "price_list": [{"model": "iPhone 15", "storage": "128GB", "duration_days": 4,
                            "total_amount": 2000, "daily_deduction": 500}],
        }))
        data = unwrap(client.post("/api/contracts/", json=contract_payload(
            device_name=None, total_amount=None, daily_deduction=None,
            partner_id=partner["id"], model="iPhone 15", storage="128GB")))

        assert data["device_name"] == "iPhone 15 128GB"
        assert data["total_amount"] == 2000
        assert data["daily_deduction"] == 500
        assert data["partner_name"] == "Seoul Mobile"

    def test_missing_price_tier(self, client):
        partner = unwrap(client.post("/api/partners/", json={"name": "Empty"}))
        response = client.post("/api/contracts/", json=contract_payload(
            total_amount=None, daily_deduction=None,
            partner_id=partner["id"], model="iPhone 15", storage="128GB"))

        assert response.status_code == 400
        assert response.json()["status"] == "Failed"

    def test_missing_amounts_without_partner(self, client):
        response = client.post("/api/contracts/", json=contract_payload(total_amount=None))
        assert response.status_code == 400

    def test_unknown_partner(self, client):
        response = client.post("/api/contracts/", json=contract_payload(
            partner_id="7d1f4c55-8a0e-4a41-9d3e-2a1f0c9b1e11"))
        assert response.status_code == 404

    def test_invalid_body(self, client):
        response = client.post("/api/contracts/", json=contract_payload(duration_days=0))
        assert response.status_code == 422
        assert response.json()["status"] == "Failed"


class TestReadContracts:

    def test_get_one(self, client, created):
        data = unwrap(client.get(f"/api/contracts/{created['id']}"))
        assert data["id"] == created["id"]
        assert len(data["daily_deductions"]) == 4

    def test_get_missing(self, client):
        response = client.get("/api/contracts/7d1f4c55-8a0e-4a41-9d3e-2a1f0c9b1e11")
        assert response.status_code == 404
        assert response.json()["message"] == "Contract not found"

    def test_get_invalid_id(self, client):
        assert client.get("/api/contracts/not-a-uuid").status_code == 400

    def test_list_and_search(self, client):
        client.post("/api/contracts/", json=contract_payload(lessee_name="Park Jisoo"))
        client.post("/api/contracts/", json=contract_payload(lessee_name="Lee Hana"))

        everything = unwrap(client.get("/api/contracts/all"))
        assert everything["total"] == 2

        found = unwrap(client.get("/api/contracts/all", params={"search": "hana"}))
        assert found["total"] == 1
        assert found["contracts"][0]["lessee_name"] == "Lee Hana"

        paged = unwrap(client.get("/api/contracts/all", params={"skip": 1, "limit": 1}))
        assert paged["total"] == 2
        assert len(paged["contracts"]) == 1

    def test_list_status_filter(self, client, make_contract):
        make_contract(status="settled")
        make_contract()

        data = unwrap(client.get("/api/contracts/all", params={"status": "settled"}))
        assert data["total"] == 1
        assert data["contracts"][0]["status"] == "settled"

    def test_status_filter_follows_derived_status(self, client, make_contract):
        lapsed = make_contract(expiry_date=date(2024, 1, 2))
        current = make_contract()

        active = unwrap(client.get("/api/contracts/all", params={"status": "active"}))
        assert [c["id"] for c in active["contracts"]] == [str(current.id)]

        expired = unwrap(client.get("/api/contracts/all", params={"status": "expired"}))
        assert expired["total"] == 1
        assert expired["contracts"][0]["id"] == str(lapsed.id)
        assert expired["contracts"][0]["status"] == "expired"

    def test_settlement_filter_follows_derived_status(self, client, make_contract):
        make_contract(
            shipping_status="delivered", is_lessee_contract_signed=True,
            settlement_document_url="https://files.example.com/s.pdf")
        make_contract()

        ready = unwrap(client.get("/api/contracts/all", params={"settlement_status": "ready"}))
        assert ready["total"] == 1
        assert ready["contracts"][0]["settlement_status"] == "ready"

        overview = unwrap(client.get("/api/contracts/overview", params={"settlement_status": "not_ready"}))
        assert overview["total_receivables"] == 4000


    def test_overview(self, client, created):
        client.post(f"/api/contracts/{created['id']}/payments", json={"amount": 1500})

        data = unwrap(client.get("/api/contracts/overview"))
        assert data["total_receivables"] == 4000
        assert data["total_paid"] == 1500
        assert data["total_unpaid_balance"] == 2500
        assert data["active_contracts"] == 1
        assert data["settlement_requested_total"] == 0

    def test_deduction_board_sorted_by_balance(self, client):
        small = unwrap(client.post("/api/contracts/", json=contract_payload()))
        big = unwrap(client.post("/api/contracts/", json=contract_payload(units_required=3)))

        board = unwrap(client.get("/api/contracts/deduction-board"))
        assert [c["id"] for c in board] == [big["id"], small["id"]]

    def test_malformed_stored_row_is_not_hidden(self, client, make_contract):
        make_contract(daily_deductions=[
            {"id": "x", "date": "2024-01-02", "amount": 100, "paid_amount": 500, "status": "paid"}])

        response = client.get("/api/contracts/all")
        assert response.status_code == 500
        assert response.json()["status"] == "Failed"


class TestUpdateContract:

    def test_update_recomputes_expiry(self, client, created):
        data = unwrap(client.put("/api/contracts/", json={"id": created["id"], "duration_days": 6}))

        assert data["expiry_date"] == "2024-01-07"
        assert len(data["daily_deductions"]) == 6

    def test_number_is_immutable(self, client, created):
        data = unwrap(client.put("/api/contracts/", json={"id": created["id"], "contract_number": 99}))
        assert data["contract_number"] == created["contract_number"]

    def test_clearing_required_column_keeps_value(self, client, created):
        data = unwrap(client.put("/api/contracts/", json={"id": created["id"], "device_name": ""}))
        assert data["device_name"] == created["device_name"]

    def test_shrinking_window_drops_records(self, client, created):
        client.post(f"/api/contracts/{created['id']}/payments", json={"amount": 4000})
        data = unwrap(client.put("/api/contracts/", json={"id": created["id"], "duration_days": 2}))

        assert [d["date"] for d in data["daily_deductions"]] == ["2024-01-02", "2024-01-03"]
        assert all(d["status"] == "paid" for d in data["daily_deductions"])


    @pytest.mark.parametrize("changes", [
        {"units_required": 0},
        {"duration_days": -1},
        {"daily_deduction": -5},
    ])
    def test_out_of_range_update_is_rejected(self, client, created, changes):
        response = client.put("/api/contracts/", json={"id": created["id"], **changes})
        assert response.status_code == 422

        assert client.get(f"/api/contracts/{created['id']}").status_code == 200
        listed = client.get("/api/contracts/all")
        assert listed.status_code == 200
        assert listed.json()["data"]["contracts"][0]["units_required"] == 1

    def test_unparseable_update_is_rolled_back(self, db, make_contract, today):
        contract = make_contract()
        payload = ContractUpdate.model_construct(id=contract.id, units_required=0)

        with pytest.raises(ValidationError):
            contracts_crud.update(db, payload, today)

        db.expire_all()
        assert db.get(Contract, contract.id).units_required == 1


class TestDuplicateAndDelete:

    def test_duplicate(self, client, created):
        client.post(f"/api/contracts/{created['id']}/payments", json={"amount": 1000})
        copy = unwrap(client.post(f"/api/contracts/{created['id']}/duplicate"))

        assert copy["id"] != created["id"]
        assert copy["contract_number"] == 2
        assert copy["device_name"] == created["device_name"]
        assert copy["settlement_status"] == "not_ready"
        assert copy["total_paid"] == 0

    def test_delete(self, client, created):
        response = client.delete(f"/api/contracts/{created['id']}")
        assert response.status_code == 200
        assert client.get(f"/api/contracts/{created['id']}").status_code == 404

    def test_delete_missing(self, client):
        assert client.delete("/api/contracts/7d1f4c55-8a0e-4a41-9d3e-2a1f0c9b1e11").status_code == 404


class TestPayments:

    def test_payment_is_allocated_oldest_first(self, client, created, db):
        data = unwrap(client.post(f"/api/contracts/{created['id']}/payments", json={"amount": 2500}))

        assert [d["status"] for d in data["daily_deductions"]] == ["paid", "paid", "partial", "pending"]
        assert data["daily_deductions"][2]["paid_amount"] == 500
        assert data["unpaid_balance"] == 1500
        assert data["applied_amount"] == 2500
        assert data["unallocated_amount"] == 0

        row = db.query(Contract).one()
        db.refresh(row)
        assert len(row.daily_deductions) == 4
        assert row.daily_deductions[0]["paid_amount"] == 1000

    def test_payments_accumulate(self, client, created):
        client.post(f"/api/contracts/{created['id']}/payments", json={"amount": 500})
        data = unwrap(client.post(f"/api/contracts/{created['id']}/payments", json={"amount": 700}))

        assert data["daily_deductions"][0]["status"] == "paid"
        assert data["daily_deductions"][1]["paid_amount"] == 200
        assert data["unpaid_balance"] == 2800

    def test_overpayment_reports_remainder(self, client, created):
        data = unwrap(client.post(f"/api/contracts/{created['id']}/payments", json={"amount": 5000}))

        assert data["unpaid_balance"] == 0
        assert data["applied_amount"] == 4000
        assert data["unallocated_amount"] == 1000

    @pytest.mark.parametrize("amount", [0, -100])
    def test_non_positive_amount(self, client, created, db, amount):
        response = client.post(f"/api/contracts/{created['id']}/payments", json={"amount": amount})
        assert response.status_code == 400

        row = db.query(Contract).one()
        db.refresh(row)
        assert row.daily_deductions == []

    def test_non_numeric_amount(self, client, created):
        response = client.post(f"/api/contracts/{created['id']}/payments", json={"amount": "lots"})
        assert response.status_code == 422

    def test_unknown_contract(self, client):
        response = client.post(
            "/api/contracts/7d1f4c55-8a0e-4a41-9d3e-2a1f0c9b1e11/payments", json={"amount": 100})
        assert response.status_code == 404


    def test_malformed_stored_row_is_a_server_error(self, client, make_contract):
        contract = make_contract(daily_deductions=[
            {"id": "x", "date": "2024-01-02", "amount": 100, "paid_amount": 500, "status": "paid"}])

        response = client.post(f"/api/contracts/{contract.id}/payments", json={"amount": 100})
        assert response.status_code == 500
        assert response.json()["status"] == "Failed"


class TestSingleDeductionActions:

    def test_settle_one(self, client, created):
        deduction_id = created["daily_deductions"][2]["id"]
        data = unwrap(client.post(f"/api/contracts/{created['id']}/deductions/{deduction_id}/settle"))

        assert data["deduction_id"] == deduction_id
        assert data["daily_deductions"][2]["status"] == "paid"
        assert data["unpaid_balance"] == 3000

    def test_cancel_one(self, client, created):
        client.post(f"/api/contracts/{created['id']}/payments", json={"amount": 2000})
        first = created["daily_deductions"][0]["id"]
        data = unwrap(client.post(f"/api/contracts/{created['id']}/deductions/{first}/cancel"))

        assert data["daily_deductions"][0]["status"] == "unpaid"
        assert data["daily_deductions"][0]["paid_amount"] == 0
        assert data["daily_deductions"][1]["status"] == "paid"
        assert data["unpaid_balance"] == 3000

    def test_unknown_deduction(self, client, created):
        response = client.post(f"/api/contracts/{created['id']}/deductions/nope/settle")
        assert response.status_code == 404


class TestStatusSweep:

    def test_refresh_statuses(self, client, make_contract, db):
        make_contract(expiry_date=date(2024, 1, 2))
        make_contract(
            shipping_status="delivered", is_lessee_contract_signed=True,
            settlement_document_url="https://files.example.com/s.pdf")
        make_contract()

        data = unwrap(client.post("/api/contracts/refresh-statuses"))
        assert data == {"checked": 3, "changed": 2}

        db.expire_all()
        statuses = sorted((c.status, c.settlement_status) for c in db.query(Contract).all())
        assert statuses == [("active", "not_ready"), ("active", "ready"), ("expired", "not_ready")]

        again = unwrap(client.post("/api/contracts/refresh-statuses"))
        assert again["changed"] == 0


def test_stored_amounts_stay_per_unit(client, db):
    unwrap(client.post("/api/contracts/", json=contract_payload(units_required=2)))
    row = db.query(Contract).one()
    assert row.total_amount == Decimal("4000")
