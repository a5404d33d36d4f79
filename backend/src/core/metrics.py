"""Body Metrics - Pure functions for BMI, BMR and TDEE.

All functions are pure: same input always produces same output, no side effects.
Missing or degenerate input yields None or 0 instead of an exception.
"""

from datetime import date

from .models import (
    ActivityLevel,
    BMICategory,
    BMICategoryInfo,
    BMIResult,
    Gender,
    HealthyWeightRange,
    UserData,
    WeightChange,
)
from .rounding import round_half_up, round_to_int


HEALTHY_BMI_MIN = 18.5
HEALTHY_BMI_MAX = 24.9

# Mifflin-St Jeor activity factors
ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
    ActivityLevel.EXTRA_ACTIVE: 1.9,
}
DEFAULT_ACTIVITY_MULTIPLIER = 1.2

BMI_CATEGORY_INFO = {
    BMICategory.UNDERWEIGHT: BMICategoryInfo(
        label="Underweight", color="#3B82F6", description="Below normal weight range"
    ),
    BMICategory.NORMAL: BMICategoryInfo(
        label="Normal", color="#10B981", description="Healthy weight range"
    ),
    BMICategory.OVERWEIGHT: BMICategoryInfo(
        label="Overweight", color="#F59E0B", description="Above normal weight range"
    ),
    BMICategory.OBESE: BMICategoryInfo(
        label="Obese", color="#EF4444", description="Significantly above normal range"
    ),
}


def categorize_bmi(bmi: float) -> BMICategory:
    """Band a BMI value. Lower bounds are inclusive."""
    if bmi < 18.5:
        return BMICategory.UNDERWEIGHT
    if bmi < 25:
        return BMICategory.NORMAL
    if bmi < 30:
        return BMICategory.OVERWEIGHT
    return BMICategory.OBESE


def calculate_bmi(height_cm: float | None, weight_kg: float | None) -> BMIResult | None:
    """Calculate BMI, its category and the healthy weight range for a height.

    Args:
        height_cm: Height in centimeters
        weight_kg: Weight in kilograms

    Returns:
        BMIResult, or None unless both inputs are positive
    """
    if not height_cm or not weight_kg or height_cm <= 0 or weight_kg <= 0:
        return None

    height_m = height_cm / 100
    height_sq = height_m * height_m
    bmi = weight_kg / height_sq

    # Category uses the unrounded value
    return BMIResult(
        bmi=round_half_up(bmi, 1),
        category=categorize_bmi(bmi),
        healthy_weight_range=HealthyWeightRange(
            min=round_half_up(HEALTHY_BMI_MIN * height_sq, 1),
            max=round_half_up(HEALTHY_BMI_MAX * height_sq, 1),
        ),
    )


def get_bmi_category_info(category: BMICategory) -> BMICategoryInfo:
    """Display label, color and description for a BMI category."""
    return BMI_CATEGORY_INFO[BMICategory(category)]


def calculate_age(date_of_birth: date | str | None, today: date | None = None) -> int | None:
    """Calculate age in whole years.

    Args:
        date_of_birth: Birth date (date or YYYY-MM-DD string)
        today: Reference day (defaults to today)

    Returns:
        Age in years, or None if the birth date is missing or unparseable
    """
    if not date_of_birth:
        return None
    if isinstance(date_of_birth, str):
        try:
            date_of_birth = date.fromisoformat(date_of_birth)
        except ValueError:
            return None

    if today is None:
        today = date.today()

    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def calculate_bmr(weight_kg: float, height_cm: float, age: int, gender: Gender) -> float:
    """Basal metabolic rate using the Mifflin-St Jeor equation."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    if Gender(gender) == Gender.MALE:
        return base + 5
    return base - 161


def get_activity_multiplier(activity_level: ActivityLevel | str | None) -> float:
    """Activity factor for TDEE; unknown or missing levels count as sedentary."""
    try:
        return ACTIVITY_MULTIPLIERS[ActivityLevel(activity_level)]
    except ValueError:
        return DEFAULT_ACTIVITY_MULTIPLIER


def calculate_tdee(profile: UserData, today: date | None = None) -> int:
    """Total daily energy expenditure for a profile.

    Requires height, current weight, gender, date of birth and activity
    level. Returns 0 when any of them is missing.

    Args:
        profile: The user's profile
        today: Reference day for the age (defaults to today)

    Returns:
        TDEE in kcal/day rounded to an integer, or 0 if it cannot be computed
    """
    if (
        not profile.height
        or not profile.current_weight
        or not profile.gender
        or not profile.date_of_birth
        or not profile.activity_level
    ):
        return 0

    age = calculate_age(profile.date_of_birth, today)
    if age is None:
        return 0

    bmr = calculate_bmr(profile.current_weight, profile.height, age, profile.gender)
    return round_to_int(bmr * get_activity_multiplier(profile.activity_level))


def get_weight_change(user_data: UserData) -> WeightChange | None:
    """Change from the initial to the current weight.

    Returns:
        WeightChange with kg and percent (negative = loss), or None unless
        both weights are known
    """
    if not user_data.initial_weight or not user_data.current_weight:
        return None

    change = round_half_up(user_data.current_weight - user_data.initial_weight, 1)
    percentage = round_half_up(change / user_data.initial_weight * 100, 1)
    return WeightChange(change=change, percentage=percentage)
