"""Unit tests for body metrics - pure functions, no mocks needed."""

import pytest
from datetime import date

from src.core.metrics import (
    calculate_age,
    calculate_bmi,
    calculate_bmr,
    calculate_tdee,
    categorize_bmi,
    get_activity_multiplier,
    get_bmi_category_info,
    get_weight_change,
)
from src.core.models import ActivityLevel, BMICategory, Gender, UserData


def make_profile(**overrides) -> UserData:
    data = {
        "height": 170,
        "current_weight": 70,
        "gender": "male",
        "date_of_birth": date(2000, 1, 1),
        "activity_level": "moderately_active",
    }
    data.update(overrides)
    return UserData(**data)


class TestCalculateBMI:
    """Tests for calculate_bmi function."""

    def test_boundary_uses_unrounded_value(self):
        """53.47 kg at 170 cm is BMI 18.5 and normal."""
        result = calculate_bmi(170, 53.47)
        assert result.bmi == 18.5
        assert result.category == BMICategory.NORMAL

    def test_just_below_boundary(self):
        """BMI that displays as 18.5 but is below it is underweight."""
        result = calculate_bmi(170, 53.45)
        assert result.bmi == 18.5
        assert result.category == BMICategory.UNDERWEIGHT

    @pytest.mark.parametrize(
        "weight,category",
        [
            (73.9, BMICategory.UNDERWEIGHT),
            (74, BMICategory.NORMAL),
            (100, BMICategory.OVERWEIGHT),
            (120, BMICategory.OBESE),
        ],
    )
    def test_categories_at_200cm(self, weight, category):
        """Category boundaries are inclusive at the lower edge."""
        assert calculate_bmi(200, weight).category == category

    def test_healthy_weight_range(self):
        """Healthy range is BMI 18.5-24.9 at the given height."""
        result = calculate_bmi(170, 65)
        assert result.healthy_weight_range.min == 53.5
        assert result.healthy_weight_range.max == 72.0

    @pytest.mark.parametrize(
        "height,weight", [(0, 70), (170, 0), (-170, 70), (170, -5), (None, 70), (170, None)]
    )
    def test_invalid_input_returns_none(self, height, weight):
        """Missing or non-positive input gives no result."""
        assert calculate_bmi(height, weight) is None

    def test_monotonic_in_weight(self):
        """BMI increases with weight at a fixed height."""
        values = [calculate_bmi(170, w).bmi for w in range(40, 120)]
        assert values == sorted(values)
        assert len(set(values)) == len(values)

    @pytest.mark.parametrize("height", [150, 165, 170, 185, 200])
    def test_healthy_max_is_normal_or_overweight(self, height):
        """The top of the healthy range sits near the normal/overweight edge."""
        top = calculate_bmi(height, 70).healthy_weight_range.max
        assert calculate_bmi(height, top).category in (BMICategory.NORMAL, BMICategory.OVERWEIGHT)

    def test_extreme_input(self):
        """Huge BMI values are computed rather than raising."""
        result = calculate_bmi(1e-13, 100)
        assert result.bmi > 1e27
        assert result.category == BMICategory.OBESE

    def test_pure(self):
        """Same input gives the same result."""
        assert calculate_bmi(180, 80) == calculate_bmi(180, 80)


class TestCategorizeBMI:
    """Tests for categorize_bmi and category display info."""

    @pytest.mark.parametrize(
        "bmi,category",
        [
            (18.49, BMICategory.UNDERWEIGHT),
            (18.5, BMICategory.NORMAL),
            (24.99, BMICategory.NORMAL),
            (25, BMICategory.OVERWEIGHT),
            (30, BMICategory.OBESE),
        ],
    )
    def test_bands(self, bmi, category):
        """Bands follow the WHO cutoffs."""
        assert categorize_bmi(bmi) == category

    def test_category_info(self):
        """Each category has a label and color."""
        info = get_bmi_category_info(BMICategory.NORMAL)
        assert info.label == "Normal"
        assert info.color == "#10B981"
        assert get_bmi_category_info("obese").color == "#EF4444"


class TestCalculateAge:
    """Tests for calculate_age function."""

    def test_day_before_birthday(self):
        """Age does not increase until the birthday."""
        assert calculate_age(date(2000, 6, 15), today=date(2025, 6, 14)) == 24

    def test_on_birthday(self):
        """Age increases on the birthday."""
        assert calculate_age(date(2000, 6, 15), today=date(2025, 6, 15)) == 25

    def test_string_input(self):
        """ISO strings are accepted."""
        assert calculate_age("2000-01-01", today=date(2025, 6, 1)) == 25

    @pytest.mark.parametrize("dob", [None, "", "not-a-date"])
    def test_missing_or_invalid(self, dob):
        """Missing or unparseable birth dates give None."""
        assert calculate_age(dob, today=date(2025, 6, 1)) is None


class TestCalculateBMR:
    """Tests for calculate_bmr function."""

    def test_male(self):
        """Male formula adds 5."""
        assert calculate_bmr(70, 170, 25, Gender.MALE) == 1642.5

    def test_female(self):
        """Female formula subtracts 161."""
        assert calculate_bmr(70, 170, 25, Gender.FEMALE) == 1476.5


class TestCalculateTDEE:
    """Tests for calculate_tdee function."""

    def test_moderately_active_male(self):
        """BMR 1642.5 x 1.55 rounds to 2546."""
        assert calculate_tdee(make_profile(), today=date(2025, 6, 1)) == 2546

    def test_sedentary_female(self):
        """BMR 1476.5 x 1.2 rounds to 1772."""
        profile = make_profile(gender="female", activity_level="sedentary")
        assert calculate_tdee(profile, today=date(2025, 6, 1)) == 1772

    def test_extra_active(self):
        """BMR 1642.5 x 1.9 rounds half up to 3121."""
        profile = make_profile(activity_level="extra_active")
        assert calculate_tdee(profile, today=date(2025, 6, 1)) == 3121

    def test_uses_current_weight(self):
        """Initial weight does not affect TDEE."""
        profile = make_profile(initial_weight=90)
        assert calculate_tdee(profile, today=date(2025, 6, 1)) == 2546

    @pytest.mark.parametrize(
        "field", ["height", "current_weight", "gender", "date_of_birth", "activity_level"]
    )
    def test_missing_field_returns_zero(self, field):
        """Any missing required field gives 0."""
        profile = make_profile(**{field: None})
        assert calculate_tdee(profile, today=date(2025, 6, 1)) == 0


class TestActivityMultiplier:
    """Tests for get_activity_multiplier function."""

    def test_known_level(self):
        """Known levels map to their factor."""
        assert get_activity_multiplier(ActivityLevel.VERY_ACTIVE) == 1.725

    @pytest.mark.parametrize("level", [None, "couch"])
    def test_unknown_defaults_to_sedentary(self, level):
        """Missing or unknown levels use 1.2."""
        assert get_activity_multiplier(level) == 1.2


class TestWeightChange:
    """Tests for get_weight_change function."""

    def test_loss(self):
        """80 -> 75 kg is -5 kg and -6.3%."""
        result = get_weight_change(UserData(initial_weight=80, current_weight=75))
        assert result.change == -5.0
        assert result.percentage == -6.3

    def test_gain(self):
        """60 -> 63 kg is +3 kg and +5%."""
        result = get_weight_change(UserData(initial_weight=60, current_weight=63))
        assert result.change == 3.0
        assert result.percentage == 5.0

    def test_missing_initial(self):
        """No initial weight gives None."""
        assert get_weight_change(UserData(current_weight=75)) is None
