import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from garage.main import app
from garage.routes import deps

AUTH = {"Authorization": "Bearer tok-1"}


@pytest.fixture
def api(sb):
    sb.auth.add_user("ann@example.org", "pw1234", token="tok-1")

    def _client(token: str = Depends(deps.get_token)):
        return sb

    app.dependency_overrides[deps.get_user_client] = _client
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_healthz(api):
    assert api.get("/healthz").json() == {"ok": True}


def test_requires_bearer_token(api):
    res = api.get("/attendance/reports")
    assert res.status_code == 401
    assert api.get("/locations/").status_code == 401


def test_report_lifecycle(api):
    loc = api.post("/locations/", json={"name": "Hall A"}, headers=AUTH)
    assert loc.status_code == 201
    loc_id = loc.json()["id"]

    created = api.post("/attendance/reports", headers=AUTH, json={
        "date": "2025-08-10", "location_id": loc_id,
        "sv1": 10, "sv2": 5, "yxp": 0, "kids": 3, "local": 2, "hc1": 0, "hc2": 0,
    })
    assert created.status_code == 201
    assert created.json()["total_attendance"] == 20
    report_id = created.json()["id"]

    patched = api.patch(f"/attendance/reports/{report_id}", json={"hc1": 5, "tier": "green"}, headers=AUTH)
    assert patched.json()["total_attendance"] == 25

    page = api.get("/attendance/reports", params={"page": 1, "page_size": 5}, headers=AUTH).json()
    assert page["count"] == 1
    assert page["reports"][0]["location"]["name"] == "Hall A"

    metrics = api.get("/attendance/metrics", headers=AUTH).json()
    assert metrics["overall"] == 25

    assert api.delete(f"/locations/{loc_id}", headers=AUTH).json() == {"status": "deleted", "id": loc_id}
    rows = api.get("/attendance/reports/all", headers=AUTH).json()
    assert rows[0]["location_id"] is None
    assert rows[0]["location"] is None


def test_location_created_by_comes_from_token(api, sb):
    res = api.post("/locations/", json={"name": "Gym", "capacity": 80}, headers=AUTH)
    user = sb.auth.users["ann@example.org"]["user"]
    assert res.json()["created_by"] == user.id


def test_invalid_token_cannot_create_location(api):
    res = api.post("/locations/", json={"name": "Gym"}, headers={"Authorization": "Bearer forged"})
    assert res.status_code == 401


def test_locations_listing_and_usage(api, sb):
    a = api.post("/locations/", json={"name": "Annex"}, headers=AUTH).json()
    api.post("/locations/", json={"name": "Barn", "is_active": False}, headers=AUTH)
    api.post("/attendance/reports", json={"date": "2025-08-10", "location_id": a["id"], "kids": 9}, headers=AUTH)

    listed = api.get("/locations/", headers=AUTH).json()
    assert [(l["name"], l["usage_count"]) for l in listed] == [("Annex", 1), ("Barn", 0)]
    assert [l["name"] for l in api.get("/locations/active", headers=AUTH).json()] == ["Annex"]
    assert api.get("/locations/search", params={"q": "a"}, headers=AUTH).status_code == 422
    assert [l["name"] for l in api.get("/locations/search", params={"q": "an"}, headers=AUTH).json()] == ["Annex"]

    usage = api.get(f"/locations/{a['id']}/usage", headers=AUTH).json()
    assert usage["total_reports"] == 1
    assert usage["average_attendance"] == 9


def test_validation_and_filter_errors(api):
    assert api.post("/attendance/reports", json={"date": "2025-08-10", "sv1": -2}, headers=AUTH).status_code == 422
    assert api.get("/attendance/reports", params={"tier_filter": "pink"}, headers=AUTH).status_code == 422
    assert api.get("/attendance/reports", params={"date_filter": "someday"}, headers=AUTH).status_code == 422


def test_store_error_becomes_400(api, sb):
    sb.fail_next(APIError({"message": "permission denied for table locations", "code": "42501"}))
    res = api.get("/locations/active", headers=AUTH)
    assert res.status_code == 400
    assert res.json() == {"detail": "permission denied for table locations"}


def test_unknown_report_is_404(api):
    res = api.patch("/attendance/reports/nope", json={"sv1": 1}, headers=AUTH)
    assert res.status_code == 404
