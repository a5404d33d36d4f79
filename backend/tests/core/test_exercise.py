"""Unit tests for exercise calculations - pure functions, no mocks needed."""

import pytest
from datetime import date

from src.core.exercise import (
    EXERCISE_TYPES,
    calculate_calories_burnt,
    calculate_total_exercise_calories,
    estimate_distance_from_duration,
    estimate_duration_from_distance,
    exercise_has_distance,
    format_exercise_summary,
    get_exercise_data,
    get_exercise_met,
    get_exercise_name,
)
from src.core.models import ExerciseEntry, ExerciseType


class TestCalculateCaloriesBurnt:
    """Tests for calculate_calories_burnt function."""

    def test_walking_by_time(self):
        """MET 3.8 x 70 kg x 0.5 h = 133."""
        assert calculate_calories_burnt(ExerciseType.WALKING, 30, 70) == 133

    def test_walking_by_distance(self):
        """1.0 x 70 kg x 2.4 km = 168."""
        assert calculate_calories_burnt(ExerciseType.WALKING, 30, 70, 2.4) == 168

    def test_default_weight(self):
        """Weight defaults to 70 kg."""
        assert calculate_calories_burnt("walking", 30) == 133

    def test_running_by_distance(self):
        """5 km at 80 kg is 400."""
        assert calculate_calories_burnt("running", 30, 80, 5) == 400

    def test_hiking_coefficient(self):
        """Hiking burns 0.7 kcal per kg per km."""
        assert calculate_calories_burnt("hiking", 120, 70, 10) == 490

    def test_distance_ignored_for_cycling(self):
        """Cycling is always estimated by time."""
        assert calculate_calories_burnt("cycling", 60, 70, 20) == 525

    def test_zero_distance_falls_back_to_time(self):
        """A zero distance uses the MET formula."""
        assert calculate_calories_burnt("walking", 30, 70, 0) == 133

    def test_huge_duration(self):
        """Very long durations still produce an estimate."""
        assert calculate_calories_burnt("walking", 1e28) > 10**28

    def test_unknown_type(self):
        """Unknown exercise types are rejected."""
        with pytest.raises(ValueError):
            calculate_calories_burnt("curling", 30)


class TestEstimates:
    """Tests for distance/duration estimates."""

    @pytest.mark.parametrize(
        "exercise_type,minutes,km",
        [("walking", 30, 2.4), ("running", 45, 6.0), ("hiking", 60, 3.5)],
    )
    def test_distance_from_duration(self, exercise_type, minutes, km):
        """Distance is speed x time, one decimal."""
        assert estimate_distance_from_duration(exercise_type, minutes) == km

    @pytest.mark.parametrize("exercise_type", ["cycling", "badminton", "swimming"])
    def test_no_distance_types(self, exercise_type):
        """Types without distance estimate 0 both ways."""
        assert estimate_distance_from_duration(exercise_type, 60) == 0
        assert estimate_duration_from_distance(exercise_type, 5) == 0

    def test_duration_from_distance(self):
        """Duration is distance / speed, whole minutes."""
        assert estimate_duration_from_distance("walking", 2.4) == 30
        assert estimate_duration_from_distance("running", 10) == 75


class TestExerciseData:
    """Tests for exercise reference lookups."""

    def test_all_types_have_data(self):
        """Every exercise type has reference data."""
        assert set(EXERCISE_TYPES) == set(ExerciseType)
        for exercise_type in ExerciseType:
            assert get_exercise_data(exercise_type).met > 0

    def test_lookups(self):
        """Name, MET and distance flag are exposed."""
        assert get_exercise_name("table_tennis") == "Table Tennis"
        assert get_exercise_met("running") == 9.8
        assert exercise_has_distance("walking") is True
        assert exercise_has_distance("swimming") is False


class TestFormatting:
    """Tests for summary helpers."""

    def test_summary_with_distance(self):
        """Distance is included when present."""
        assert format_exercise_summary(30, 168, 2.4) == "30 min • 2.4 km • 168 kcal"

    def test_summary_without_distance(self):
        """Distance is omitted when absent."""
        assert format_exercise_summary(45, 248) == "45 min • 248 kcal"

    def test_total_calories(self):
        """Totals sum calories burnt."""
        entries = [
            ExerciseEntry(date=date(2024, 12, 28), exercise_type="walking", duration=30, calories_burnt=133),
            ExerciseEntry(date=date(2024, 12, 28), exercise_type="swimming", duration=30, calories_burnt=210),
        ]
        assert calculate_total_exercise_calories(entries) == 343
        assert calculate_total_exercise_calories([]) == 0
