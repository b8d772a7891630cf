"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from training_load.api.deps import get_analytics_service
from training_load.main import app
from tests.conftest import ATHLETE, make_session


@pytest.fixture
def client(service):
    """Test client wired to the temporary database service."""
    app.dependency_overrides[get_analytics_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestZonesAPI:
    def test_compute_zones(self, client):
        response = client.post("/api/v1/zones", json={"ftp": 250, "lthr": 165})

        assert response.status_code == 200
        data = response.json()
        assert len(data["power"]) == 7
        assert data["power"][3] == {
            "zone": 4,
            "name": "Threshold",
            "min": 225.0,
            "max": 262.5,
            "description": data["power"][3]["description"],
        }
        assert data["power"][-1]["max"] is None
        assert data["pace"] is None
        assert data["swim"] is None
        assert data["hrReserve"] is None

    def test_heart_rate_reserve_zones(self, client):
        response = client.post("/api/v1/zones", json={"maxHr": 190, "restingHr": 50})

        zones = response.json()["hrReserve"]
        assert len(zones) == 5
        assert zones[0]["min"] == 120
        assert zones[-1]["max"] == 190

    def test_css(self, client):
        response = client.post("/api/v1/css", json={"t400Seconds": 400, "t200Seconds": 200})

        assert response.status_code == 200
        assert response.json() == {
            "css": 1.0,
            "pacePer100m": 100.0,
            "paceFormatted": "1:40",
            "estimatedT750": 765,
            "estimatedT1500": 1545,
        }

    def test_css_slower_400_required(self, client):
        response = client.post("/api/v1/css", json={"t400Seconds": 150, "t200Seconds": 165})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_THRESHOLD"

    def test_css_missing_time(self, client):
        response = client.post("/api/v1/css", json={"t400Seconds": 400})

        assert response.status_code == 422
        assert response.json()["error"]["details"]["errors"][0]["field"] == "body.t200Seconds"

    def test_camel_case_thresholds(self, client):
        response = client.post("/api/v1/zones", json={"thresholdPace": 4.0})
        assert len(response.json()["pace"]) == 6

    def test_negative_threshold(self, client):
        response = client.post("/api/v1/zones", json={"ftp": -10})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_THRESHOLD"

    def test_athlete_zones(self, client):
        response = client.get(f"/api/v1/athletes/{ATHLETE}/zones")

        assert response.status_code == 200
        assert len(response.json()["swim"]) == 5

    def test_unknown_athlete_zones(self, client):
        response = client.get("/api/v1/athletes/nobody/zones")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "ATHLETE_NOT_FOUND"


class TestTssAPI:
    def test_power_tss(self, client):
        response = client.post(
            "/api/v1/tss",
            json={
                "session": {
                    "date": "2024-06-01",
                    "sport": "BIKE",
                    "durationSeconds": 3600,
                    "normalizedPower": 250,
                    "avgHeartRate": 150,
                },
                "thresholds": {"ftp": 250, "lthr": 165},
            },
        )

        assert response.status_code == 200
        assert response.json() == {
            "tss": 100.0,
            "intensityFactor": 1.0,
            "normalizedEffort": 250.0,
            "method": "power",
        }

    def test_no_thresholds_uses_duration(self, client):
        response = client.post(
            "/api/v1/tss",
            json={"session": {"date": "2024-06-01", "sport": "RUN", "durationSeconds": 3600}},
        )
        assert response.json()["method"] == "duration"
        assert response.json()["tss"] == 36.0

    def test_negative_duration(self, client):
        response = client.post(
            "/api/v1/tss",
            json={"session": {"date": "2024-06-01", "sport": "RUN", "durationSeconds": -1}},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_SESSION"

    def test_unknown_sport(self, client):
        response = client.post(
            "/api/v1/tss",
            json={"session": {"date": "2024-06-01", "sport": "ROWING", "durationSeconds": 600}},
        )
        assert response.json()["error"]["code"] == "INVALID_SESSION"


class TestPMCAPI:
    def test_pmc(self, client, service):
        service.record_session(make_session(2, normalized_power=250))
        response = client.get(f"/api/v1/athletes/{ATHLETE}/pmc", params={"days": 30, "projection_days": 5})

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"history", "projections", "current", "form", "recommendation"}
        assert len(data["history"]) == 3
        assert data["history"][0] == {
            "date": "2024-06-28",
            "tss": 100.0,
            "ctl": 2,
            "atl": 14,
            "tsb": 0,
            "rampRate": None,
        }
        assert data["current"]["date"] == "2024-06-30"
        assert len(data["projections"]) == 5
        assert data["form"] in {"fresh", "positive", "neutral", "fatigued", "very_fatigued"}

    def test_default_projection_from_settings(self, client, service):
        service.record_session(make_session(1))
        response = client.get(f"/api/v1/athletes/{ATHLETE}/pmc")
        assert len(response.json()["projections"]) == 7

    def test_unknown_athlete(self, client):
        response = client.get("/api/v1/athletes/nobody/pmc")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "ATHLETE_NOT_FOUND"

    def test_days_must_be_positive(self, client):
        response = client.get(f"/api/v1/athletes/{ATHLETE}/pmc", params={"days": 0})

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == "Request validation failed"
        assert [e["field"] for e in error["details"]["errors"]] == ["query.days"]

    def test_malformed_query_uses_error_envelope(self, client):
        response = client.get(f"/api/v1/athletes/{ATHLETE}/pmc", params={"projection_days": "soon"})

        assert response.status_code == 422
        assert response.json()["error"]["details"]["errors"][0]["field"] == "query.projection_days"

    def test_taper(self, client, service):
        service.record_session(make_session(1, normalized_power=250))
        response = client.get(f"/api/v1/athletes/{ATHLETE}/taper", params={"race_date": "2024-07-14"})

        assert response.status_code == 200
        data = response.json()
        assert len(data["days"]) == 14
        assert data["raceDate"] == "2024-07-14"
        assert data["targetTsb"] == 15.0
        assert "raceDayTsb" in data

    def test_taper_too_close(self, client, service):
        service.record_session(make_session(1, normalized_power=250))
        response = client.get(f"/api/v1/athletes/{ATHLETE}/taper", params={"race_date": "2024-07-02"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_week_summary(self, client, service):
        service.record_session(make_session(1, normalized_power=250, distance=30000))
        response = client.get(f"/api/v1/athletes/{ATHLETE}/week-summary")

        assert response.status_code == 200
        data = response.json()
        assert data["weekStart"] == "2024-06-24"
        assert data["activityCount"] == 1
        assert data["totalDistance"] == 30000
        assert data["bySport"]["BIKE"] == {"durationSeconds": 3600, "tss": 100.0}
        assert set(data["bySport"]) == {"SWIM", "BIKE", "RUN", "STRENGTH"}


class TestScoresAPI:
    def test_tri_score(self, client, service):
        service.record_session(make_session(1, normalized_power=250))
        response = client.get(f"/api/v1/athletes/{ATHLETE}/tri-score")

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {
            "overall",
            "overallTrend",
            "swim",
            "bike",
            "run",
            "strength",
            "balance",
            "fitness",
        }
        assert data["bike"]["activityCount"] == 1
        assert data["bike"]["weeklyTss"] == 100.0
        assert set(data["balance"]) == {
            "balanced",
            "balanceScore",
            "weakest",
            "strongest",
            "recommendations",
        }
        assert data["fitness"]["fitnessLevel"] == "Beginner"

    def test_tri_score_history(self, client, service):
        service.record_session(make_session(1, normalized_power=250))
        response = client.get(f"/api/v1/athletes/{ATHLETE}/tri-score/history", params={"weeks": 3})

        assert response.status_code == 200
        weeks = response.json()
        assert [w["week"] for w in weeks] == ["2024-06-10", "2024-06-17", "2024-06-24"]
        assert set(weeks[0]) == {"week", "overall", "swim", "bike", "run", "strength"}
        assert weeks[-1]["bike"] > 0

    def test_efficiency(self, client, service):
        service.record_session(make_session(8, normalized_power=180, avg_heart_rate=140))
        service.record_session(make_session(1, normalized_power=200, avg_heart_rate=140))
        response = client.get(f"/api/v1/athletes/{ATHLETE}/efficiency", params={"sport": "BIKE", "days": 30})

        assert response.status_code == 200
        data = response.json()
        assert len(data["points"]) == 2
        assert data["bestEF"]["ef"] == 1.429
        assert data["trendDirection"] == "improving"
        assert "averageEF" in data

    def test_efficiency_swim_rejected(self, client):
        response = client.get(f"/api/v1/athletes/{ATHLETE}/efficiency", params={"sport": "SWIM"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_root(self, client):
        assert client.get("/").json()["name"] == "Training Load API"
