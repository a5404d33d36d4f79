"""History & Tracking - store-backed operations built on the core calculations.

Every function takes the store explicitly so callers and tests choose the
backend. Reads degrade to empty results; writes raise StorageError.
"""

import logging
from datetime import date

from ..core.calories import calculate_net_calories
from ..core.exercise import (
    DEFAULT_BODY_WEIGHT,
    calculate_total_exercise_calories,
    estimate_duration_from_distance,
)
from ..core.exercise_form import ExerciseForm
from ..core.metrics import calculate_tdee
from ..core.models import (
    ActivityLevel,
    DayCalories,
    ExerciseEntry,
    ExerciseType,
    FoodItem,
    Gender,
    HistoryPeriod,
    HistoryStats,
    NetCalories,
    UserData,
    WeeklyDeficit,
    WeightEntry,
)
from ..core.reports import (
    DAYS_PER_WEEK,
    DEFAULT_RECENT_FOODS_LIMIT,
    build_period_summary,
    calculate_history_stats,
    calculate_weekly_deficit,
    filter_weight_history,
    rank_recent_foods,
)
from .storage import CalorieStore


logger = logging.getLogger(__name__)


# ==================== Food History ====================


async def get_weekly_summary(
    store: CalorieStore, reference_date: date | None = None
) -> list[DayCalories]:
    """Calories for the 7 days ending at reference_date (defaults to today)."""
    return await get_period_summary(store, DAYS_PER_WEEK, reference_date)


async def get_period_summary(
    store: CalorieStore, days: int, reference_date: date | None = None
) -> list[DayCalories]:
    """Calories for each of the `days` days ending at reference_date."""
    logs = await store.get_all_daily_logs()
    return build_period_summary(logs, days, reference_date or date.today())


async def get_recent_foods(
    store: CalorieStore, limit: int = DEFAULT_RECENT_FOODS_LIMIT
) -> list[FoodItem]:
    """Most recently logged foods, newest first, for quick re-adding."""
    logs = await store.get_all_daily_logs()
    return rank_recent_foods(logs.values(), limit)


async def get_history_stats(store: CalorieStore) -> HistoryStats:
    """Average intake, days logged and days under the calorie goal."""
    logs = await store.get_all_daily_logs()
    settings = await store.get_settings()
    return calculate_history_stats(logs.values(), settings.daily_calorie_goal)


async def get_day_net_calories(store: CalorieStore, day: date) -> NetCalories:
    """Consumed, burnt and net calories for a day against the current goals."""
    log = await store.get_daily_log(day)
    exercises = await store.get_exercise_entries(day)
    settings = await store.get_settings()

    return calculate_net_calories(
        consumed=log.total_calories if log else 0,
        burnt=calculate_total_exercise_calories(exercises),
        goal=settings.daily_calorie_goal,
        exercise_goal=settings.exercise_calorie_goal,
    )


async def get_weekly_deficit(
    store: CalorieStore, reference_date: date | None = None
) -> WeeklyDeficit | None:
    """Calorie balance of the last 7 days against the profile's TDEE.

    Returns:
        WeeklyDeficit, or None when TDEE is unknown or nothing was logged
    """
    reference_date = reference_date or date.today()
    profile = await store.get_user_data()
    tdee = calculate_tdee(profile, reference_date)
    if tdee <= 0:
        return None

    summary = await get_weekly_summary(store, reference_date)
    return calculate_weekly_deficit(tdee, [d.calories for d in summary])


# ==================== Exercise ====================


async def get_day_exercise_calories(store: CalorieStore, day: date) -> int:
    return calculate_total_exercise_calories(await store.get_exercise_entries(day))


async def fill_exercise_form(
    store: CalorieStore,
    exercise_type: ExerciseType | str,
    duration: float | None = None,
    distance: float | None = None,
    calories_override: int | None = None,
    weight: float | None = None,
    entry_id: str | None = None,
) -> ExerciseForm:
    """Fill an exercise form in the order a user would: type, duration, distance.

    A given distance counts as user-entered; otherwise it is estimated from
    the duration. Without a duration, one is estimated from the distance.
    The weight defaults to the profile's current weight, or 70 kg.

    Raises:
        ValueError: If the exercise type is not recognized
    """
    if weight is None:
        profile = await store.get_user_data()
        weight = profile.current_weight or DEFAULT_BODY_WEIGHT

    form = ExerciseForm(weight=weight, entry_id=entry_id)
    form.set_exercise_type(exercise_type)
    if duration is None and distance:
        duration = estimate_duration_from_distance(form.exercise_type, distance) or None
    form.set_duration(duration)
    if distance is not None:
        form.set_distance(distance)
    form.set_calories_override(calories_override)
    return form


async def log_exercise(
    store: CalorieStore,
    exercise_type: ExerciseType | str,
    duration: int,
    distance: float | None = None,
    calories_override: int | None = None,
    on_date: date | None = None,
    entry_id: str | None = None,
) -> ExerciseEntry:
    """Save an exercise session, estimating calories unless overridden.

    Goes through the exercise form, so distance-capable types get a distance
    estimated from the duration when none is given. Passing entry_id
    replaces that entry.

    Raises:
        ValueError: If the exercise type is unknown or the duration is not positive
        pydantic.ValidationError: If distance or calories are invalid
    """
    form = await fill_exercise_form(
        store,
        exercise_type,
        duration,
        distance=distance,
        calories_override=calories_override,
        entry_id=entry_id,
    )
    entry = form.to_entry(on_date or date.today())
    await store.save_exercise_entry(entry)
    return entry


# ==================== Weight & Profile ====================


async def get_weight_history(
    store: CalorieStore, period: HistoryPeriod | str, reference_date: date | None = None
) -> list[WeightEntry]:
    """Weight entries inside the trailing period, oldest first."""
    entries = await store.get_all_weight_entries()
    return filter_weight_history(entries, HistoryPeriod(period).days, reference_date)


async def record_weight(
    store: CalorieStore, weight: float, on_date: date | None = None
) -> UserData:
    """Save the day's weight and update the profile.

    The first weight ever recorded also becomes the initial weight. A weight
    dated before the current one is kept in the history but does not replace
    the current weight.

    Returns:
        The updated profile
    """
    on_date = on_date or date.today()
    await store.save_weight_entry(WeightEntry(date=on_date, weight=weight))

    user_data = await store.get_user_data()
    updates: dict = {}
    if user_data.current_weight_date is None or on_date >= user_data.current_weight_date:
        updates["current_weight"] = weight
        updates["current_weight_date"] = on_date
    if not user_data.initial_weight:
        updates["initial_weight"] = weight
        updates["initial_weight_date"] = on_date

    user_data = user_data.model_copy(update=updates)
    await store.save_user_data(user_data)
    return user_data


async def reset_initial_weight(store: CalorieStore, on_date: date | None = None) -> UserData:
    """Start weight tracking over from the current weight."""
    user_data = await store.get_user_data()
    if user_data.current_weight:
        user_data = user_data.model_copy(
            update={
                "initial_weight": user_data.current_weight,
                "initial_weight_date": on_date or date.today(),
            }
        )
    await store.save_user_data(user_data)
    return user_data


async def update_profile(
    store: CalorieStore,
    height: float | None = None,
    gender: Gender | str | None = None,
    date_of_birth: date | None = None,
    activity_level: ActivityLevel | str | None = None,
) -> UserData:
    """Update the given profile fields; the others are left unchanged.

    Raises:
        pydantic.ValidationError: If a value is invalid
    """
    user_data = await store.get_user_data()
    updates = {
        "height": height,
        "gender": gender,
        "date_of_birth": date_of_birth,
        "activity_level": activity_level,
    }
    merged = {**user_data.model_dump(), **{k: v for k, v in updates.items() if v is not None}}
    user_data = UserData.model_validate(merged)
    await store.save_user_data(user_data)
    return user_data
