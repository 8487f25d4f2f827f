"""Unit tests for data models - validation and defaults."""

import pytest
from datetime import date
from pydantic import ValidationError

from fitlogr.core.models import (
    DailyLog,
    NutrientGoals,
    ProfileUpdate,
    Registration,
    User,
    WeightLog,
    Workout,
    WorkoutStatus,
    is_document_id,
)


class TestRegistration:
    """Tests for Registration model."""

    def _form(self, **overrides):
        form = {
            "username": "bob",
            "password": "secret",
            "dob": "1990-01-01",
            "height": 180,
            "weight": 80,
            "gender": "Male",
            "goal": "Weight Loss",
        }
        form.update(overrides)
        return form

    def test_valid_form(self):
        registration = Registration.model_validate(self._form())
        assert registration.dob == date(1990, 1, 1)

    def test_missing_field_rejected(self):
        form = self._form()
        del form["goal"]
        with pytest.raises(ValidationError):
            Registration.model_validate(form)

    def test_slash_in_username_rejected(self):
        """Usernames are document IDs and cannot contain a slash."""
        with pytest.raises(ValidationError):
            Registration.model_validate(self._form(username="a/b"))

    def test_overlong_password_rejected(self):
        with pytest.raises(ValidationError):
            Registration.model_validate(self._form(password="x" * 73))


class TestUser:
    """Tests for User model."""

    def test_profile_hides_password_hash(self):
        user = User(
            username="bob",
            password_hash="$2b$04$hash",
            dob=date(1990, 1, 1),
            height=180,
            weight=80,
            gender="Male",
            goal="Weight Loss",
        )
        profile = user.profile().to_response()
        assert "passwordHash" not in profile
        assert "password_hash" not in profile
        assert profile["username"] == "bob"
        assert profile["dob"] == "1990-01-01"


class TestProfileUpdate:
    """Tests for ProfileUpdate model."""

    def test_changes_skip_missing_fields(self):
        update = ProfileUpdate(weight=70, new_password="new-secret")
        assert update.changes() == {"weight": 70.0}

    def test_negative_height_rejected(self):
        with pytest.raises(ValidationError):
            ProfileUpdate(height=-1)


class TestDailyLog:
    """Tests for DailyLog model."""

    def _log(self, **overrides):
        fields = {
            "username": "bob",
            "log_date": date(2024, 3, 10),
            "steps": 8000,
            "workout": "Cardio Workouts",
            "workout_duration": 30,
            "sleep_hours": 7.5,
        }
        fields.update(overrides)
        return DailyLog(**fields)

    def test_valid_log(self):
        log = self._log()
        assert log.workout == "Cardio Workouts"

    def test_zero_steps_allowed(self):
        assert self._log(steps=0).steps == 0

    def test_unknown_workout_rejected(self):
        with pytest.raises(ValidationError):
            self._log(workout="Juggling")

    def test_sleep_over_24_hours_rejected(self):
        with pytest.raises(ValidationError):
            self._log(sleep_hours=25)

    def test_negative_steps_rejected(self):
        with pytest.raises(ValidationError):
            self._log(steps=-1)

    def test_wire_format_is_camel_case(self):
        response = self._log().to_response()
        assert response["logDate"] == "2024-03-10"
        assert response["workoutDuration"] == 30
        assert response["sleepHours"] == 7.5

    def test_document_round_trip(self):
        """Stored documents parse back into the same record."""
        log = self._log()
        assert DailyLog.model_validate(log.to_document()) == log


class TestWeightLog:
    """Tests for WeightLog bounds."""

    @pytest.mark.parametrize("weight", [29.9, 300.1])
    def test_out_of_range_rejected(self, weight):
        with pytest.raises(ValidationError):
            WeightLog(username="bob", log_date=date(2024, 3, 10), weight=weight)

    @pytest.mark.parametrize("weight", [30, 300])
    def test_bounds_inclusive(self, weight):
        log = WeightLog(username="bob", log_date=date(2024, 3, 10), weight=weight)
        assert log.weight == weight


class TestNutrientGoals:
    """Tests for NutrientGoals model."""

    def test_provided_goals_only(self):
        goals = NutrientGoals(username="bob", calories_goal=2000, water_goal=0)
        assert goals.provided_goals() == {"calories_goal": 2000, "water_goal": 0}


class TestWorkout:
    """Tests for Workout and WorkoutStatus models."""

    def test_invalid_intensity_rejected(self):
        with pytest.raises(ValidationError):
            Workout(username="bob", name="Legs", exercises="Squats", duration=45, intensity="Extreme")

    def test_document_excludes_id(self):
        workout = Workout(
            id="abc", username="bob", name="Legs", exercises="Squats", duration=45, intensity="High"
        )
        assert "id" not in workout.to_document()

    def test_status_document_id_is_workout_and_day(self):
        status = WorkoutStatus(
            username="bob", workout_id="w1", status="Yes", log_date=date(2024, 3, 10)
        )
        assert status.document_id == "w1_2024-03-10"

    @pytest.mark.parametrize("workout_id", ["a/b", "a/b/c", ".", "__x__", ""])
    def test_status_workout_id_must_be_document_id(self, workout_id):
        with pytest.raises(ValidationError):
            WorkoutStatus(username="bob", workout_id=workout_id, status="Yes", log_date=date(2024, 3, 10))

    def test_invalid_status_rejected(self):
        with pytest.raises(ValidationError):
            WorkoutStatus(username="bob", workout_id="w1", status="Maybe", log_date=date(2024, 3, 10))


class TestIsDocumentId:
    """Tests for is_document_id."""

    @pytest.mark.parametrize("value", ["alice", "w1", "a.b", "_x_"])
    def test_plain_ids(self, value):
        assert is_document_id(value) is True

    @pytest.mark.parametrize("value", ["", "a/b", ".", "..", "__x__", "x" * 129, None, 42])
    def test_rejected(self, value):
        assert is_document_id(value) is False
