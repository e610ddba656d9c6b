"""API tests for clubrollup."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from clubrollup.main import app
from tests.conftest import create_amenity, create_enrollments, record_usage, seed_calendar

MARCH_QUERY = {"start_year": 2026, "start_month": 3, "end_year": 2026, "end_month": 3}
MARCH_BODY = {"start_year": 2026, "start_month": 3, "end_year": 2026, "end_month": 3}


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def club(db_session):
    seed_calendar(db_session, 2026, 3)
    pool = create_amenity(db_session, "Pool", in_dues=False, member_cost_per_use="4.00")
    spa = create_amenity(db_session, "Spa")
    members = create_enrollments(db_session, 10)
    record_usage(db_session, pool, members, 15, 2026, 3)
    record_usage(db_session, spa, members[:5], 5, 2026, 3)
    return {"pool": pool, "spa": spa}


class TestRootEndpoints:
    def test_root(self, client: TestClient):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": "ok"}


class TestRecomputeAPI:
    def test_recompute(self, client: TestClient, club):
        response = client.post("/v1/summaries/recompute", json=MARCH_BODY)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["periods_committed"] == 12
        assert data["periods_skipped"] == 0
        assert data["rows_rejected"] == 0
        assert data["window_start"] == "2026-03-01"
        assert data["window_end"] == "2026-03-31"
        assert data["run_id"] is not None

    def test_recompute_reversed_window(self, client: TestClient):
        body = {**MARCH_BODY, "start_month": 4}
        response = client.post("/v1/summaries/recompute", json=body)
        assert response.status_code == 422

    def test_recompute_invalid_month(self, client: TestClient):
        response = client.post("/v1/summaries/recompute", json={**MARCH_BODY, "end_month": 13})
        assert response.status_code == 422

    def test_recompute_for_amenities(self, client: TestClient, club):
        body = {**MARCH_BODY, "amenity_ids": [str(club["spa"].id)]}
        data = client.post("/v1/summaries/recompute", json=body).json()
        assert [c["entity_id"] for c in data["committed"]] == [str(club["spa"].id)]


class TestSummariesAPI:
    def test_list_summaries(self, client: TestClient, club):
        client.post("/v1/summaries/recompute", json=MARCH_BODY)
        response = client.get("/v1/summaries/", params=MARCH_QUERY)
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 2
        assert {row["total_usage_count"] for row in data} == {15, 5}

    def test_list_summaries_filtered(self, client: TestClient, club):
        client.post("/v1/summaries/recompute", json=MARCH_BODY)
        params = {**MARCH_QUERY, "amenity_id": str(club["pool"].id)}
        data = client.get("/v1/summaries/", params=params).json()
        assert [row["amenity_id"] for row in data] == [str(club["pool"].id)]

    def test_list_summaries_reversed_window(self, client: TestClient):
        params = {**MARCH_QUERY, "start_year": 2027}
        response = client.get("/v1/summaries/", params=params)
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "INVALID_RECOMPUTE_WINDOW"

    def test_get_summary(self, client: TestClient, club):
        client.post("/v1/summaries/recompute", json=MARCH_BODY)
        response = client.get(f"/v1/summaries/{club['pool'].id}/2026/3")
        assert response.status_code == 200
        data = response.json()
        assert data["total_usage_count"] == 15
        assert data["unique_member_count"] == 10
        assert data["usage_status"] == "In Use"
        assert data["watchlist_flag"] is False

    def test_get_summary_not_found(self, client: TestClient, club):
        response = client.get(f"/v1/summaries/{club['pool'].id}/2026/3")
        assert response.status_code == 404
        assert response.json()["detail"] == "Monthly summary not found"

    def test_record_actuals(self, client: TestClient, club):
        response = client.put(
            f"/v1/summaries/{club['spa'].id}/2026/3/actuals",
            json={"operating_cost": "50.00"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["operating_cost_source"] == "actual"
        assert data["member_spend_source"] == "estimated"
        assert data["watchlist_flag"] is False

    def test_record_actuals_unknown_amenity(self, client: TestClient):
        response = client.put(
            f"/v1/summaries/{uuid4()}/2026/3/actuals",
            json={"operating_cost": "50.00"},
        )
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "REFERENCE_NOT_FOUND"

    def test_record_actuals_negative_value(self, client: TestClient, club):
        response = client.put(
            f"/v1/summaries/{club['spa'].id}/2026/3/actuals",
            json={"operating_cost": "-1"},
        )
        assert response.status_code == 422


class TestRunsAPI:
    def test_list_and_get_runs(self, client: TestClient, club):
        run_id = client.post("/v1/summaries/recompute", json=MARCH_BODY).json()["run_id"]

        runs = client.get("/v1/summaries/runs").json()
        assert [run["id"] for run in runs] == [run_id]

        response = client.get(f"/v1/summaries/runs/{run_id}")
        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert response.json()["periods_committed"] == 12

    def test_get_run_not_found(self, client: TestClient):
        response = client.get(f"/v1/summaries/runs/{uuid4()}")
        assert response.status_code == 404


class TestReportsAPI:
    @pytest.fixture(autouse=True)
    def recomputed(self, client: TestClient, club):
        client.post("/v1/summaries/recompute", json=MARCH_BODY)

    def test_performance(self, client: TestClient):
        response = client.get("/v1/reports/performance", params=MARCH_QUERY)
        assert response.status_code == 200
        assert {row["amenity_name"] for row in response.json()} == {"Pool", "Spa"}

    def test_watchlist(self, client: TestClient):
        data = client.get("/v1/reports/watchlist", params=MARCH_QUERY).json()
        assert [row["amenity_name"] for row in data] == ["Spa"]

    def test_watchlist_custom_thresholds(self, client: TestClient):
        params = {**MARCH_QUERY, "usage_ceiling": 20, "cost_floor": "200"}
        data = client.get("/v1/reports/watchlist", params=params).json()
        assert {row["amenity_name"] for row in data} == {"Pool", "Spa"}

    def test_daily_usage(self, client: TestClient):
        data = client.get("/v1/reports/daily_usage", params=MARCH_QUERY).json()
        assert sum(row["usage_count"] for row in data) == 20

    def test_peak_times(self, client: TestClient):
        data = client.get("/v1/reports/peak_times", params=MARCH_QUERY).json()
        assert sum(row["usage_count"] for row in data) == 20
        assert all(0 <= row["usage_hour"] <= 23 for row in data)

    def test_profitability(self, client: TestClient):
        data = client.get("/v1/reports/profitability", params=MARCH_QUERY).json()
        assert {row["amenity_name"]: row["total_usage_count"] for row in data} == {
            "Pool": 15,
            "Spa": 5,
        }

    def test_revenue(self, client: TestClient):
        response = client.get("/v1/reports/revenue", params=MARCH_QUERY)
        assert response.status_code == 200
        assert response.json() == []

    def test_engagement(self, client: TestClient):
        params = {**MARCH_QUERY, "customer_id": "cust-000"}
        data = client.get("/v1/reports/engagement", params=params).json()
        assert len(data) == 1
        assert data[0]["usage_count"] == 3
        assert data[0]["month_name"] == "March"
        assert data[0]["employee_flag"] is False

    def test_missing_window(self, client: TestClient):
        response = client.get("/v1/reports/performance")
        assert response.status_code == 422
