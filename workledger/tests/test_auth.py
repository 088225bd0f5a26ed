from fastapi.testclient import TestClient

from workledger.main import app

client = TestClient(app)


def test_token_carries_role():
    resp = client.post("/auth/token", json={"user_id": "u1", "role": "admin"})
    assert resp.status_code == 200
    assert resp.json()["role"] == "ADMIN"
    assert resp.json()["token_type"] == "bearer"


def test_token_endpoint_is_hidden_outside_dev(monkeypatch):
    monkeypatch.setenv("ENV", "production")
    assert client.post("/auth/token", json={"user_id": "u1"}).status_code == 404


def test_bill_delete_requires_admin():
    token = client.post("/auth/token", json={"user_id": "u1"}).json()["access_token"]
    resp = client.delete("/bills/00000001", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403


def test_health():
    assert client.get("/health").json()["status"] == "ok"
