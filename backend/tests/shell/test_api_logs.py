"""Integration tests for the per-day log endpoints: activity, nutrients, weight."""

from datetime import timedelta

import pytest

from fitlogr.core.dates import utc_today


def _activity(**overrides):
    body = {
        "username": "alice",
        "logDate": "2024-03-10",
        "steps": 8000,
        "workout": "Cardio Workouts",
        "workoutDuration": 30,
        "sleep": 7.5,
    }
    body.update(overrides)
    return body


def _nutrients(**overrides):
    body = {
        "username": "alice",
        "logDate": "2024-03-10",
        "calories": 2000,
        "protein": 100,
        "fats": 70,
        "carbohydrates": 250,
        "water": 2,
    }
    body.update(overrides)
    return body


def _days_ago(days: int) -> str:
    return (utc_today() - timedelta(days=days)).isoformat()


class TestLogActivity:
    """Tests for /log-activity."""

    def test_create_then_update(self, client, fake_firestore):
        first = client.post("/log-activity", json=_activity())
        second = client.post("/log-activity", json=_activity(steps=12000))

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["log"]["steps"] == 12000
        assert len(fake_firestore.paths("users/alice/daily_logs")) == 1

    def test_time_of_day_does_not_split_logs(self, client, fake_firestore):
        """Two timestamps on the same UTC day resolve to one log."""
        client.post("/log-activity", json=_activity(logDate="2024-03-10T08:00:00Z"))
        response = client.post("/log-activity", json=_activity(logDate="2024-03-10T22:30:00.000Z"))

        assert response.status_code == 200
        assert fake_firestore.paths("users/alice/daily_logs") == ["users/alice/daily_logs/2024-03-10"]

    def test_missing_date_defaults_to_today(self, client):
        body = _activity()
        del body["logDate"]

        response = client.post("/log-activity", json=body)

        assert response.json()["log"]["logDate"] == utc_today().isoformat()

    def test_zero_values_accepted(self, client):
        response = client.post("/log-activity", json=_activity(steps=0, workoutDuration=0, sleep=0))
        assert response.status_code == 201

    @pytest.mark.parametrize("overrides", [
        {"steps": -1},
        {"sleep": 25},
        {"workout": "Juggling"},
        {"username": None},
    ])
    def test_invalid_values_rejected(self, client, fake_firestore, overrides):
        response = client.post("/log-activity", json=_activity(**overrides))

        assert response.status_code == 400
        assert fake_firestore.docs == {}

    def test_invalid_date(self, client):
        response = client.post("/log-activity", json=_activity(logDate="10/03/2024"))
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid date format."


class TestDailyLogRead:
    """Tests for reading and deleting daily logs."""

    def test_get_daily_log(self, client):
        client.post("/log-activity", json=_activity())

        response = client.get("/get-daily-log", params={"username": "alice", "date": "2024-03-10"})

        assert response.status_code == 200
        log = response.json()["log"]
        assert log["steps"] == 8000
        assert log["sleepHours"] == 7.5

    def test_no_log(self, client):
        response = client.get("/get-daily-log", params={"username": "alice", "date": "2024-03-10"})

        assert response.status_code == 200
        assert response.json() == {"success": False, "message": "No log for this date."}

    def test_delete(self, client, fake_firestore):
        client.post("/log-activity", json=_activity())

        response = client.request(
            "DELETE", "/delete-daily-log", json={"username": "alice", "date": "2024-03-10"}
        )

        assert response.status_code == 200
        assert fake_firestore.paths("users/alice/daily_logs") == []

    def test_delete_missing(self, client):
        response = client.request(
            "DELETE", "/delete-daily-log", json={"username": "alice", "date": "2024-03-10"}
        )
        assert response.status_code == 404


class TestStepProgress:
    """Tests for /get-step-progress."""

    def test_progress(self, client):
        client.post("/log-activity", json=_activity(logDate="2024-03-12", steps=9000))
        client.post("/log-activity", json=_activity(logDate="2024-03-10", steps=5000))

        response = client.get("/get-step-progress", params={"username": "alice"})

        assert response.json() == {
            "success": True, "initialSteps": 5000, "latestSteps": 9000, "progress": 4000,
        }

    def test_no_data(self, client):
        response = client.get("/get-step-progress", params={"username": "alice"})
        assert response.status_code == 404


class TestNutrientLogs:
    """Tests for nutrient log endpoints."""

    def test_create_then_update(self, client, fake_firestore):
        assert client.post("/log-nutrients", json=_nutrients()).status_code == 201
        response = client.post("/log-nutrients", json=_nutrients(calories=1800))

        assert response.status_code == 200
        assert response.json()["log"]["calories"] == 1800
        assert len(fake_firestore.paths("users/alice/nutrient_logs")) == 1

    def test_missing_field(self, client):
        body = _nutrients()
        del body["water"]
        assert client.post("/log-nutrients", json=body).status_code == 400

    def test_get_nutrient_log(self, client):
        client.post("/log-nutrients", json=_nutrients())
        response = client.get("/get-nutrient-log", params={"username": "alice", "date": "2024-03-10"})
        assert response.json()["log"]["carbohydrates"] == 250

    def test_weekly_calories_window(self, client):
        client.post("/log-nutrients", json=_nutrients(logDate=_days_ago(2), calories=1900))
        client.post("/log-nutrients", json=_nutrients(logDate=_days_ago(20), calories=2500))

        weekly = client.get("/get-weekly-calories", params={"username": "alice"}).json()
        monthly = client.get("/get-monthly-calories", params={"username": "alice"}).json()

        assert weekly["logs"] == [{"date": _days_ago(2), "calories": 1900}]
        assert [log["calories"] for log in monthly["logs"]] == [2500, 1900]

    def test_weekly_nutrients_average(self, client):
        client.post("/log-nutrients", json=_nutrients(logDate=_days_ago(1), protein=100))
        client.post("/log-nutrients", json=_nutrients(logDate=_days_ago(2), protein=150))

        response = client.get("/get-weekly-nutrients", params={"username": "alice"})

        averages = response.json()["averages"]
        assert averages["protein"] == 125
        assert averages["daysLogged"] == 2

    def test_nutrients_no_data(self, client):
        response = client.get("/get-monthly-nutrients", params={"username": "alice"})
        assert response.status_code == 404


class TestNutrientGoals:
    """Tests for nutrient goal endpoints."""

    def test_set_then_partial_update(self, client):
        first = client.post("/set-nutrient-goals", json={
            "username": "alice", "caloriesGoal": 2000, "proteinGoal": 120,
        })
        second = client.post("/set-nutrient-goals", json={"username": "alice", "proteinGoal": 140})

        assert first.status_code == 201
        assert second.status_code == 200
        goals = second.json()["goals"]
        assert goals["caloriesGoal"] == 2000
        assert goals["proteinGoal"] == 140

    def test_no_goal_given(self, client):
        response = client.post("/set-nutrient-goals", json={"username": "alice"})
        assert response.status_code == 400
        assert response.json()["error"] == "At least one goal field must be provided."

    def test_negative_goal(self, client):
        response = client.post("/set-nutrient-goals", json={"username": "alice", "waterGoal": -1})
        assert response.status_code == 400

    def test_get_goals(self, client):
        assert client.get("/get-nutrient-goals", params={"username": "alice"}).status_code == 404
        client.post("/set-nutrient-goals", json={"username": "alice", "caloriesGoal": 2100})

        response = client.get("/get-calorie-goal", params={"username": "alice"})

        assert response.json() == {"success": True, "calorieGoal": 2100}

    def test_calories_intake(self, client):
        client.post("/set-nutrient-goals", json={"username": "alice", "caloriesGoal": 2200})
        client.post("/log-nutrients", json=_nutrients(logDate="2024-03-10", calories=2500))
        client.post("/log-nutrients", json=_nutrients(logDate="2024-03-11", calories=2100))

        data = client.get("/get-calories-intake", params={"username": "alice"}).json()

        assert data["calorieGoal"] == 2200
        assert data["initialCalories"] == 2500
        assert data["latestCalories"] == 2100
        assert data["progress"] == -400

    def test_calories_intake_without_goals(self, client):
        client.post("/log-nutrients", json=_nutrients())
        response = client.get("/get-calories-intake", params={"username": "alice"})
        assert response.status_code == 404


class TestWeight:
    """Tests for weight endpoints."""

    def test_create_then_update_same_value(self, client):
        """Re-logging the same weight updates rather than failing."""
        body = {"username": "alice", "logDate": "2024-03-10", "weight": 65}
        assert client.post("/log-weight", json=body).status_code == 201
        assert client.post("/log-weight", json=body).status_code == 200

    @pytest.mark.parametrize("weight", [29, 301, None])
    def test_out_of_range(self, client, weight):
        response = client.post("/log-weight", json={"username": "alice", "weight": weight})
        assert response.status_code == 400

    def test_latest_weight(self, client):
        client.post("/log-weight", json={"username": "alice", "logDate": "2024-03-01", "weight": 66})
        client.post("/log-weight", json={"username": "alice", "logDate": "2024-03-09", "weight": 64})

        response = client.get("/get-latest-weight", params={"username": "alice"})

        assert response.json()["log"]["weight"] == 64

    def test_latest_weight_none(self, client):
        assert client.get("/get-latest-weight", params={"username": "alice"}).status_code == 404

    def test_get_weight_log_requires_date(self, client):
        assert client.get("/get-weight-log", params={"username": "alice"}).status_code == 400

    def test_get_weight_log(self, client):
        client.post("/log-weight", json={"username": "alice", "logDate": "2024-03-10", "weight": 65})
        response = client.get("/get-weight-log", params={"username": "alice", "date": "2024-03-10"})
        assert response.json()["log"]["weight"] == 65

    def test_weekly_weight(self, client):
        client.post("/log-weight", json={"username": "alice", "logDate": _days_ago(1), "weight": 65})
        client.post("/log-weight", json={"username": "alice", "logDate": _days_ago(10), "weight": 66})

        weekly = client.get("/get-weekly-weight", params={"username": "alice"}).json()
        monthly = client.get("/get-monthly-weight", params={"username": "alice"}).json()

        assert [log["weight"] for log in weekly["logs"]] == [65]
        assert [log["weight"] for log in monthly["logs"]] == [66, 65]
