"""Unit tests for data models - validation and defaults."""

import pytest
from datetime import date
from pydantic import ValidationError

from src.core.models import (
    AppSettings,
    DailyLog,
    ExerciseEntry,
    FoodCategory,
    FoodItem,
    FoodLogEntry,
    FoodUnit,
    HistoryPeriod,
    UserData,
    WeightEntry,
)


def make_food(**overrides) -> FoodItem:
    data = {
        "id": "chapati",
        "name": "Chapati",
        "category": FoodCategory.BREADS,
        "calories_per_unit": 120,
        "unit": FoodUnit.PIECE,
    }
    data.update(overrides)
    return FoodItem(**data)


class TestFoodItem:
    """Tests for FoodItem model."""

    def test_valid_item(self):
        """Valid item is created with defaults."""
        food = make_food()
        assert food.name == "Chapati"
        assert food.unit_weight is None
        assert food.is_custom is False

    def test_generated_id(self):
        """Id is generated when not given."""
        food = FoodItem(name="Poha", category="snacks", calories_per_unit=180, unit="plate")
        assert food.id

    def test_zero_calories_rejected(self):
        """Calories per unit must be positive."""
        with pytest.raises(ValidationError):
            make_food(calories_per_unit=0)

    def test_unknown_unit_rejected(self):
        """Units come from a fixed set."""
        with pytest.raises(ValidationError):
            make_food(unit="bucket")

    def test_serving_variant_unit(self):
        """Multi-piece serving units are accepted by value."""
        food = make_food(unit="serving (10 pcs)")
        assert food.unit == FoodUnit.SERVING_10_PCS

    def test_frozen(self):
        """Food items cannot be changed in place."""
        food = make_food()
        with pytest.raises(ValidationError):
            food.calories_per_unit = 200


class TestFoodLogEntry:
    """Tests for FoodLogEntry model."""

    def test_embeds_food_by_value(self):
        """Serialized entry carries the full food item."""
        entry = FoodLogEntry(food_item=make_food(), quantity=2)
        data = entry.model_dump(mode="json")
        assert data["food_item"]["name"] == "Chapati"
        assert data["food_item"]["calories_per_unit"] == 120

    def test_zero_quantity_rejected(self):
        """Quantity must be positive."""
        with pytest.raises(ValidationError):
            FoodLogEntry(food_item=make_food(), quantity=0)


class TestDailyLog:
    """Tests for DailyLog model."""

    def test_empty_log_total(self):
        """Empty log totals zero."""
        log = DailyLog(date=date(2024, 12, 28))
        assert log.total_calories == 0

    def test_total_is_sum_of_entries(self):
        """Total is quantity x calories per unit over entries."""
        log = DailyLog(
            date=date(2024, 12, 28),
            entries=[
                FoodLogEntry(food_item=make_food(), quantity=2),
                FoodLogEntry(food_item=make_food(id="dal", calories_per_unit=100), quantity=1.5),
            ],
        )
        assert log.total_calories == 390

    def test_stored_total_ignored(self):
        """A stale stored total is replaced by the live sum."""
        log = DailyLog.model_validate(
            {"date": "2024-12-28", "entries": [], "total_calories": 999}
        )
        assert log.total_calories == 0

    def test_total_in_dump(self):
        """Total is included when serialized."""
        log = DailyLog(date=date(2024, 12, 28), entries=[FoodLogEntry(food_item=make_food(), quantity=1)])
        assert log.model_dump()["total_calories"] == 120


class TestExerciseEntry:
    """Tests for ExerciseEntry model."""

    def test_valid_entry(self):
        """Valid entry gets an id and defaults."""
        entry = ExerciseEntry(
            date=date(2024, 12, 28), exercise_type="walking", duration=30, calories_burnt=133
        )
        assert entry.id.startswith("exercise_")
        assert entry.distance is None
        assert entry.is_calories_overridden is False

    def test_negative_calories_rejected(self):
        """Calories burnt cannot be negative."""
        with pytest.raises(ValidationError):
            ExerciseEntry(date=date(2024, 12, 28), exercise_type="walking", duration=30, calories_burnt=-1)

    def test_unknown_type_rejected(self):
        """Exercise type comes from a fixed set."""
        with pytest.raises(ValidationError):
            ExerciseEntry(date=date(2024, 12, 28), exercise_type="curling", duration=30, calories_burnt=0)


class TestWeightEntry:
    """Tests for WeightEntry model."""

    def test_zero_weight_rejected(self):
        """Weight must be positive."""
        with pytest.raises(ValidationError):
            WeightEntry(date=date(2024, 12, 28), weight=0)

    def test_absurd_weight_rejected(self):
        """Weights above 500 kg are rejected."""
        with pytest.raises(ValidationError):
            WeightEntry(date=date(2024, 12, 28), weight=501)


class TestUserData:
    """Tests for UserData model."""

    def test_empty_profile_valid(self):
        """All profile fields are optional."""
        profile = UserData()
        assert profile.height is None
        assert profile.activity_level is None

    def test_date_of_birth_parsed(self):
        """Date of birth is parsed from ISO format."""
        profile = UserData(date_of_birth="1990-05-17")
        assert profile.date_of_birth == date(1990, 5, 17)


class TestAppSettings:
    """Tests for AppSettings model."""

    def test_defaults(self):
        """Defaults match first-run settings."""
        settings = AppSettings()
        assert settings.notification_enabled is True
        assert settings.notification_time.hour == 22
        assert settings.notification_time.minute == 0
        assert settings.daily_calorie_goal == 2000
        assert settings.exercise_calorie_goal == 300
        assert settings.weight_goal is None

    @pytest.mark.parametrize(
        "field,value",
        [
            ("daily_calorie_goal", 499),
            ("daily_calorie_goal", 10001),
            ("exercise_calorie_goal", -1),
            ("exercise_calorie_goal", 5001),
            ("weight_goal", 29),
            ("weight_goal", 301),
        ],
    )
    def test_out_of_range_rejected(self, field, value):
        """Goals outside their ranges are rejected."""
        with pytest.raises(ValidationError):
            AppSettings(**{field: value})

    def test_range_edges_accepted(self):
        """Range edges are valid."""
        settings = AppSettings(daily_calorie_goal=500, exercise_calorie_goal=5000, weight_goal=300)
        assert settings.daily_calorie_goal == 500

    def test_invalid_notification_hour(self):
        """Reminder hour must be 0-23."""
        with pytest.raises(ValidationError):
            AppSettings(notification_time={"hour": 24, "minute": 0})


class TestHistoryPeriod:
    """Tests for HistoryPeriod."""

    @pytest.mark.parametrize(
        "period,days", [("week", 7), ("15days", 15), ("month", 30), ("3months", 90)]
    )
    def test_days(self, period, days):
        """Each period maps to a fixed number of days."""
        assert HistoryPeriod(period).days == days
