from fastapi.testclient import TestClient

from workledger.main import app

client = TestClient(app)


def _auth_headers(role: str = "USER") -> dict:
    resp = client.post("/auth/token", json={"user_id": "test", "role": role})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def test_saving_same_job_numbers_in_any_order_reuses_series():
    headers = _auth_headers()

    first = client.post("/series", json={"jobNumbers": ["J3", " J1", "J2"]}, headers=headers)
    assert first.status_code == 201, first.text
    assert first.json()["series"]["jobNumbers"] == ["J1", "J2", "J3"]

    again = client.post("/series", json={"jobNumbers": ["J2", "J3", "J1"]}, headers=headers)
    assert again.status_code == 200
    assert again.json()["created"] is False
    assert again.json()["series"]["id"] == first.json()["series"]["id"]

    subset = client.post("/series", json={"jobNumbers": ["J1", "J2"]}, headers=headers)
    assert subset.status_code == 201

    assert len(client.get("/series", headers=headers).json()) == 2


def test_search_finds_series_containing_job():
    headers = _auth_headers()
    saved = client.post("/series", json={"jobNumbers": ["J1", "J9"]}, headers=headers).json()

    hit = client.get("/series/search/J9", headers=headers).json()
    assert hit == {"found": True, "seriesId": saved["series"]["id"], "jobNumbers": ["J1", "J9"]}

    miss = client.get("/series/search/J5", headers=headers).json()
    assert miss["found"] is False

    assert client.get(f"/series/{saved['series']['id']}", headers=headers).status_code == 200
    assert client.get("/series/99999", headers=headers).status_code == 404


def test_empty_series_is_rejected():
    headers = _auth_headers()
    assert client.post("/series", json={"jobNumbers": []}, headers=headers).status_code == 400
    assert client.post("/series", json={"jobNumbers": ["  ", 7]}, headers=headers).status_code == 400
