from fastapi.testclient import TestClient

from workledger.main import app

client = TestClient(app)


def _auth_headers(role: str = "USER") -> dict:
    resp = client.post("/auth/token", json={"user_id": "test", "role": role})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def test_seed_record_bill_and_delete_restores_both_ledgers():
    admin = _auth_headers("ADMIN")
    user = _auth_headers()

    op = client.post(
        "/operations",
        json={"opsName": "Binding", "type": "1/x", "ratePerUnit": 2.5},
        headers=admin,
    )
    assert op.status_code == 201, op.text
    op_id = op.json()["id"]

    contractor = client.post("/contractors", json={"name": "Ravi"}, headers=user)
    assert contractor.status_code == 201, contractor.text
    contractor_id = contractor.json()["contractorId"]

    seeded = client.post(
        "/jobs/ops",
        json={"jobNumber": "J1", "qty": 100, "operations": [{"operationId": op_id, "qtyPerBook": 4, "ratePerBook": 2.5}]},
        headers=user,
    )
    assert seeded.status_code == 201, seeded.text
    entry = seeded.json()["ledger"]["ops"][0]
    assert entry["totalOpsQty"] == 25
    assert entry["pendingOpsQty"] == 25

    recorded = client.post(
        "/work/record",
        json={
            "contractorId": contractor_id,
            "jobNumber": "J1",
            "operations": [{"opId": op_id, "opsName": "Binding", "valuePerBook": 2.5, "qtyToAdd": 10}],
        },
        headers=user,
    )
    assert recorded.status_code == 200, recorded.text
    assert recorded.json()["lines"][0]["pendingOpsQty"] == 15
    assert recorded.json()["lines"][0]["opsDoneQty"] == 10

    summary = client.get("/jobs/J1/summary", headers=user).json()
    assert summary["operations"][0]["totalCompleted"] == 10
    assert summary["operations"][0]["quantitiesByContractor"] == {contractor_id: 10}

    bill = client.post(
        "/bills",
        json={
            "contractorName": "Ravi",
            "jobs": [
                {
                    "jobNumber": "J1",
                    "ops": [{"opsName": "Binding", "qtyBook": 4, "rate": 2.5, "qtyCompleted": 10, "totalValue": 25}],
                }
            ],
        },
        headers=user,
    )
    assert bill.status_code == 201, bill.text
    assert bill.json()["billNumber"] == "00000001"

    deleted = client.delete("/bills/00000001", headers=admin)
    assert deleted.status_code == 200, deleted.text
    assert deleted.json()["unmatched"] == 0

    ledger = client.get("/jobs/ops/J1", headers=user).json()
    assert ledger["ops"][0]["pendingOpsQty"] == 25

    summary = client.get("/jobs/J1/summary", headers=user).json()
    assert summary["contractors"] == []
    assert summary["operations"][0]["totalCompleted"] == 0
    assert summary["operations"][0]["pending"] == 25

    assert client.get("/bills", headers=user).json() == []
    assert client.get("/bills/00000001", headers=user).json()["isDeleted"] is True
