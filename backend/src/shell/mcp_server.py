"""MCP Server - Tool definitions for the calorie tracker.

Exposes logging, history and body-metric calculations as MCP tools.
Tools report failures as {"error": ...} instead of raising.
"""

import logging
from datetime import date

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from ..core.calories import EntryNotFoundError
from ..core.exercise import format_exercise_summary
from ..core.metrics import calculate_bmi, calculate_tdee, get_bmi_category_info, get_weight_change
from ..core.models import (
    AppSettings,
    DailyLog,
    FoodCategory,
    FoodItem,
    FoodLogEntry,
    FoodUnit,
    HistoryPeriod,
)
from ..core.reports import calculate_goal_progress, calculate_weight_stats, classify_day, percent_of_goal
from ..core.rounding import round_half_up, round_to_int
from . import history
from .config import AppConfig
from .food_search import FoodSearchClient, convert_to_food_item
from .storage import CalorieStore, StorageError, create_backend


logger = logging.getLogger(__name__)

mcp = FastMCP(
    "calorietrack",
    instructions="""CalorieTrack - Personal calorie and fitness tracker.

Use these tools to log food and exercise, record body weight, and report on
calorie intake, BMI and daily energy needs.

When logging a food that was logged before, use get_recent_foods first and
reuse the returned food item. After logging, show the updated day.""",
    stateless_http=True,
)

# Lazy-initialized clients
_store: CalorieStore | None = None
_search_client: FoodSearchClient | None = None


def get_store() -> CalorieStore:
    """Get or create the store from the environment configuration."""
    global _store
    if _store is None:
        _store = CalorieStore(create_backend(AppConfig.from_env()))
    return _store


def set_store(store: CalorieStore | None) -> None:
    """Replace the store used by the tools (None resets to the configured one)."""
    global _store
    _store = store


def get_search_client() -> FoodSearchClient:
    global _search_client
    if _search_client is None:
        _search_client = FoodSearchClient(AppConfig.from_env().calorie_ninjas_api_key)
    return _search_client


def set_search_client(client: FoodSearchClient | None) -> None:
    global _search_client
    _search_client = client


def _parse_date(date_str: str | None) -> date:
    """Parse YYYY-MM-DD, defaulting to today. Raises ValueError on bad input."""
    if not date_str:
        return date.today()
    return date.fromisoformat(date_str)


def _validation_error(e: ValidationError) -> dict:
    return {"error": "Invalid input.", "details": [err["msg"] for err in e.errors()]}


async def _day_response(log: DailyLog | None, day: date) -> dict:
    store = get_store()
    exercises = await store.get_exercise_entries(day)
    net = await history.get_day_net_calories(store, day)

    return {
        "date": day.isoformat(),
        "entries": [
            {
                "id": e.id,
                "food": e.food_item.name,
                "quantity": e.quantity,
                "unit": e.food_item.unit.value,
                "calories": round_half_up(e.quantity * e.food_item.calories_per_unit, 1),
            }
            for e in (log.entries if log else [])
        ],
        "exercises": [
            {
                "id": e.id,
                "type": e.exercise_type.value,
                "summary": format_exercise_summary(e.duration, e.calories_burnt, e.distance),
            }
            for e in exercises
        ],
        "summary": net.model_dump(mode="json"),
    }


# ==================== Food Logging Tools ====================


@mcp.tool()
async def log_food(
    name: str,
    calories_per_unit: float,
    quantity: float,
    unit: str = "serving",
    category: str = "custom",
    food_id: str | None = None,
    date_str: str | None = None,
) -> dict:
    """Log a food on a day (today by default).

    Args:
        name: Name of the food (e.g., "Chapati", "Poha")
        calories_per_unit: Calories in one unit of the food
        quantity: Number of units eaten
        unit: Unit name (piece, cup, bowl, plate, grams, serving, ...)
        category: Food category (breads, rice, dal, ..., custom)
        food_id: Id of a known food, so repeat logs group together
        date_str: Date in YYYY-MM-DD format

    Returns:
        The created entry id and the updated day
    """
    try:
        day = _parse_date(date_str)
        food_kwargs = {"id": food_id} if food_id else {}
        food = FoodItem(
            name=name,
            calories_per_unit=calories_per_unit,
            unit=FoodUnit(unit),
            category=FoodCategory(category),
            **food_kwargs,
        )
        entry = FoodLogEntry(food_item=food, quantity=quantity)
    except ValidationError as e:
        return _validation_error(e)
    except ValueError as e:
        return {"error": str(e)}

    try:
        log = await get_store().add_food_entry(day, entry)
    except StorageError:
        return {"error": "Failed to log food. Please try again."}

    return {"entry_id": entry.id, "day": await _day_response(log, day)}


@mcp.tool()
async def update_food_quantity(entry_id: str, quantity: float, date_str: str | None = None) -> dict:
    """Change the quantity of a logged food.

    Args:
        entry_id: The ID of the entry to update
        quantity: New number of units
        date_str: Date of the entry in YYYY-MM-DD format (today by default)

    Returns:
        The updated day
    """
    try:
        day = _parse_date(date_str)
        log = await get_store().update_food_entry(day, entry_id, quantity)
    except ValidationError as e:
        return _validation_error(e)
    except EntryNotFoundError:
        return {"error": "Entry not found."}
    except StorageError:
        return {"error": "Failed to update entry. Please try again."}
    except ValueError as e:
        return {"error": str(e)}

    return await _day_response(log, day)


@mcp.tool()
async def delete_food(entry_id: str, date_str: str | None = None) -> dict:
    """Delete a logged food.

    Args:
        entry_id: The ID of the entry to delete
        date_str: Date of the entry in YYYY-MM-DD format (today by default)

    Returns:
        Confirmation and the updated day
    """
    try:
        day = _parse_date(date_str)
        log = await get_store().remove_food_entry(day, entry_id)
    except EntryNotFoundError:
        return {"error": "Entry not found."}
    except StorageError:
        return {"error": "Failed to delete entry. Please try again."}
    except ValueError as e:
        return {"error": str(e)}

    return {"success": True, "day": await _day_response(log, day)}


@mcp.tool()
async def get_day(date_str: str | None = None) -> dict:
    """Get a day's food and exercise log with net calories.

    Args:
        date_str: Date in YYYY-MM-DD format (today by default)

    Returns:
        Entries, exercises and the net calorie summary
    """
    try:
        day = _parse_date(date_str)
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    log = await get_store().get_daily_log(day)
    return await _day_response(log, day)


# ==================== History Tools ====================


@mcp.tool()
async def get_weekly_summary() -> dict:
    """Calories for each of the last 7 days, with goal status per day.

    Returns:
        Daily calories, the weekly calorie balance against TDEE when the
        profile is complete, and overall history stats
    """
    store = get_store()
    settings = await store.get_settings()
    goal = settings.daily_calorie_goal

    summary = await history.get_weekly_summary(store)
    deficit = await history.get_weekly_deficit(store)
    stats = await history.get_history_stats(store)

    return {
        "goal": goal,
        "days": [
            {
                "date": d.date.isoformat(),
                "calories": round_to_int(d.calories),
                "status": classify_day(d.calories, goal).value,
                "percent_of_goal": percent_of_goal(d.calories, goal),
            }
            for d in summary
        ],
        "weekly_deficit": deficit.model_dump() if deficit else None,
        "stats": stats.model_dump(),
    }


@mcp.tool()
async def get_history(period: str = "week") -> dict:
    """Calories per day for a trailing period.

    Args:
        period: One of week, 15days, month, 3months

    Returns:
        One item per day, oldest first
    """
    try:
        days = HistoryPeriod(period).days
    except ValueError:
        return {"error": "Unknown period. Use week, 15days, month or 3months."}

    summary = await history.get_period_summary(get_store(), days)
    return {"period": period, "days": [d.model_dump(mode="json") for d in summary]}


@mcp.tool()
async def get_recent_foods(limit: int = 10) -> list[dict]:
    """Foods logged most recently, newest first.

    Args:
        limit: Maximum number of foods

    Returns:
        Food items that can be passed back to log_food
    """
    foods = await history.get_recent_foods(get_store(), limit)
    return [f.model_dump(mode="json") for f in foods]


# ==================== Custom Food Tools ====================


@mcp.tool()
async def add_custom_food(
    name: str,
    calories_per_unit: float,
    unit: str = "serving",
    unit_weight: float | None = None,
) -> dict:
    """Save a user-defined food for later logging.

    Args:
        name: Name of the food
        calories_per_unit: Calories in one unit
        unit: Unit name
        unit_weight: Grams in one unit

    Returns:
        The saved food
    """
    try:
        food = FoodItem(
            name=name,
            category=FoodCategory.CUSTOM,
            calories_per_unit=calories_per_unit,
            unit=FoodUnit(unit),
            unit_weight=unit_weight,
            is_custom=True,
        )
        await get_store().save_custom_food(food)
    except ValidationError as e:
        return _validation_error(e)
    except StorageError:
        return {"error": "Failed to save food. Please try again."}
    except ValueError as e:
        return {"error": str(e)}

    return food.model_dump(mode="json")


@mcp.tool()
async def list_custom_foods() -> list[dict]:
    """List the user's custom foods."""
    return [f.model_dump(mode="json") for f in await get_store().get_custom_foods()]


@mcp.tool()
async def delete_custom_food(food_id: str) -> dict:
    """Delete a custom food. Past log entries keep their copy of it."""
    try:
        await get_store().delete_custom_food(food_id)
    except StorageError:
        return {"error": "Failed to delete food. Please try again."}
    return {"success": True}


@mcp.tool()
async def search_food_online(query: str, save: bool = False) -> list[dict]:
    """Look up calories for a food online (Open Food Facts, CalorieNinjas).

    Args:
        query: Food name
        save: Save the first result as a custom food

    Returns:
        Candidate foods with calories per serving; empty when nothing is found
    """
    results = await get_search_client().search_with_alternatives(query)
    if save and results:
        try:
            await get_store().save_custom_food(convert_to_food_item(results[0]))
        except StorageError:
            logger.warning("Could not save online result for %s", query)
    return [r.model_dump(mode="json") for r in results]


# ==================== Exercise Tools ====================


@mcp.tool()
async def estimate_exercise(
    exercise_type: str,
    duration_minutes: float | None = None,
    distance_km: float | None = None,
    weight_kg: float | None = None,
) -> dict:
    """Estimate calories, distance or duration for an exercise without saving.

    Args:
        exercise_type: running, walking, cycling, hiking, badminton, table_tennis or swimming
        duration_minutes: Duration (estimated from distance if omitted)
        distance_km: Distance (estimated from duration if omitted)
        weight_kg: Body weight (profile weight or 70 kg if omitted)

    Returns:
        Duration, distance and estimated calories
    """
    try:
        form = await history.fill_exercise_form(
            get_store(), exercise_type, duration_minutes, distance=distance_km, weight=weight_kg
        )
    except ValueError:
        return {"error": f"Unknown exercise type: {exercise_type}"}

    if form.duration_minutes is None:
        return {"error": "Provide a positive duration, or a distance for distance-based exercises."}

    return {
        "exercise_type": form.exercise_type.value,
        "duration_minutes": form.duration_minutes,
        "distance_km": form.effective_distance,
        "calories": form.estimated_calories,
    }


@mcp.tool()
async def log_exercise(
    exercise_type: str,
    duration_minutes: int,
    distance_km: float | None = None,
    calories: int | None = None,
    entry_id: str | None = None,
    date_str: str | None = None,
) -> dict:
    """Log an exercise session. Calories are estimated unless given.

    Args:
        exercise_type: running, walking, cycling, hiking, badminton, table_tennis or swimming
        duration_minutes: Duration in minutes
        distance_km: Distance for running, walking or hiking
        calories: Calories burnt, to override the estimate
        entry_id: Id of an existing entry to replace
        date_str: Date in YYYY-MM-DD format (today by default)

    Returns:
        The saved entry
    """
    try:
        entry = await history.log_exercise(
            get_store(),
            exercise_type,
            duration_minutes,
            distance=distance_km,
            calories_override=calories,
            on_date=_parse_date(date_str),
            entry_id=entry_id,
        )
    except ValidationError as e:
        return _validation_error(e)
    except StorageError:
        return {"error": "Failed to log exercise. Please try again."}
    except ValueError as e:
        return {"error": str(e)}

    return entry.model_dump(mode="json")


@mcp.tool()
async def delete_exercise(entry_id: str, date_str: str | None = None) -> dict:
    """Delete an exercise entry."""
    try:
        await get_store().delete_exercise_entry(_parse_date(date_str), entry_id)
    except StorageError:
        return {"error": "Failed to delete exercise. Please try again."}
    except ValueError as e:
        return {"error": str(e)}
    return {"success": True}


# ==================== Weight & Profile Tools ====================


@mcp.tool()
async def log_weight(weight_kg: float, date_str: str | None = None) -> dict:
    """Record body weight for a day; a second value the same day replaces the first.

    Returns:
        Current and initial weight with the change since the initial weight
    """
    try:
        user_data = await history.record_weight(get_store(), weight_kg, _parse_date(date_str))
    except ValidationError as e:
        return _validation_error(e)
    except StorageError:
        return {"error": "Failed to save weight. Please try again."}
    except ValueError as e:
        return {"error": str(e)}

    change = get_weight_change(user_data)
    return {
        "current_weight": user_data.current_weight,
        "initial_weight": user_data.initial_weight,
        "change": change.model_dump() if change else None,
    }


@mcp.tool()
async def get_weight_history(period: str = "week") -> dict:
    """Weight entries for a trailing period with stats and goal progress.

    Args:
        period: One of week, 15days, month, 3months
    """
    store = get_store()
    try:
        entries = await history.get_weight_history(store, period)
    except ValueError:
        return {"error": "Unknown period. Use week, 15days, month or 3months."}

    settings = await store.get_settings()
    stats = calculate_weight_stats(entries)
    progress = calculate_goal_progress(entries, settings.weight_goal)

    return {
        "entries": [{"date": e.date.isoformat(), "weight": e.weight} for e in entries],
        "stats": stats.model_dump() if stats else None,
        "goal_progress": progress.model_dump() if progress else None,
    }


@mcp.tool()
async def delete_weight(date_str: str) -> dict:
    """Delete the weight recorded for a day.

    Args:
        date_str: Date of the weight in YYYY-MM-DD format
    """
    try:
        await get_store().delete_weight_entry(_parse_date(date_str))
    except StorageError:
        return {"error": "Failed to delete weight. Please try again."}
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    return {"success": True}


@mcp.tool()
async def reset_initial_weight(date_str: str | None = None) -> dict:
    """Start weight tracking over, using the current weight as the new initial weight.

    Args:
        date_str: Date of the new starting point in YYYY-MM-DD format (today by default)

    Returns:
        The updated profile
    """
    try:
        user_data = await history.reset_initial_weight(get_store(), _parse_date(date_str))
    except StorageError:
        return {"error": "Failed to save profile. Please try again."}
    except ValueError:
        return {"error": "Invalid date format. Use YYYY-MM-DD."}

    return user_data.model_dump(mode="json")


@mcp.tool()
async def update_profile(
    height_cm: float | None = None,
    gender: str | None = None,
    date_of_birth: str | None = None,
    activity_level: str | None = None,
) -> dict:
    """Update profile fields used for BMI and daily energy needs.

    Args:
        height_cm: Height in centimeters
        gender: male or female
        date_of_birth: YYYY-MM-DD
        activity_level: sedentary, lightly_active, moderately_active, very_active or extra_active
    """
    try:
        dob = date.fromisoformat(date_of_birth) if date_of_birth else None
        user_data = await history.update_profile(
            get_store(), height=height_cm, gender=gender, date_of_birth=dob, activity_level=activity_level
        )
    except ValidationError as e:
        return _validation_error(e)
    except StorageError:
        return {"error": "Failed to save profile. Please try again."}
    except ValueError as e:
        return {"error": str(e)}

    return user_data.model_dump(mode="json")


@mcp.tool()
async def get_profile() -> dict:
    """Get the user's profile."""
    return (await get_store().get_user_data()).model_dump(mode="json")


@mcp.tool()
async def get_bmi(height_cm: float | None = None, weight_kg: float | None = None) -> dict:
    """Calculate BMI, its category and the healthy weight range.

    Args:
        height_cm: Height (profile height if omitted)
        weight_kg: Weight (profile current weight if omitted)
    """
    profile = await get_store().get_user_data()
    result = calculate_bmi(height_cm or profile.height, weight_kg or profile.current_weight)
    if result is None:
        return {"error": "Height and weight are required."}

    info = get_bmi_category_info(result.category)
    return {**result.model_dump(mode="json"), "category_info": info.model_dump()}


@mcp.tool()
async def get_tdee() -> dict:
    """Estimate daily energy needs (TDEE) from the profile.

    Returns:
        TDEE in kcal/day, or an explanation if the profile is incomplete
    """
    tdee = calculate_tdee(await get_store().get_user_data())
    if tdee == 0:
        return {
            "tdee": 0,
            "error": "Height, weight, gender, date of birth and activity level are all required.",
        }
    return {"tdee": tdee}


@mcp.tool()
async def get_weekly_deficit() -> dict:
    """Calorie balance of the last 7 days against TDEE.

    Negative deficit means eating below maintenance (expected weight loss).
    """
    deficit = await history.get_weekly_deficit(get_store())
    if deficit is None:
        return {"error": "Needs a complete profile and at least one logged day this week."}
    return deficit.model_dump()


# ==================== Settings Tools ====================


@mcp.tool()
async def get_settings() -> dict:
    """Retrieve goals and reminder settings."""
    return (await get_store().get_settings()).model_dump(mode="json")


@mcp.tool()
async def update_settings(
    daily_calorie_goal: int | None = None,
    exercise_calorie_goal: int | None = None,
    weight_goal: float | None = None,
    clear_weight_goal: bool = False,
    notification_enabled: bool | None = None,
    notification_hour: int | None = None,
    notification_minute: int | None = None,
) -> dict:
    """Update goals and reminder settings. Only provided fields change.

    Args:
        daily_calorie_goal: 500-10000 kcal
        exercise_calorie_goal: 0-5000 kcal
        weight_goal: Target weight, 30-300 kg
        clear_weight_goal: Remove the weight goal
        notification_enabled: Daily reminder on/off
        notification_hour: Reminder hour (0-23)
        notification_minute: Reminder minute (0-59)
    """
    store = get_store()
    current = (await store.get_settings()).model_dump()

    updates = {
        "daily_calorie_goal": daily_calorie_goal,
        "exercise_calorie_goal": exercise_calorie_goal,
        "weight_goal": weight_goal,
        "notification_enabled": notification_enabled,
    }
    current.update({k: v for k, v in updates.items() if v is not None})
    if clear_weight_goal:
        current["weight_goal"] = None
    if notification_hour is not None:
        current["notification_time"]["hour"] = notification_hour
    if notification_minute is not None:
        current["notification_time"]["minute"] = notification_minute

    try:
        settings = AppSettings.model_validate(current)
        await store.save_settings(settings)
    except ValidationError as e:
        return _validation_error(e)
    except StorageError:
        return {"error": "Failed to save settings. Please try again."}

    return settings.model_dump(mode="json")
