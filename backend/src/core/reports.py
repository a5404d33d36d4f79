"""Report Generation - Pure functions for history, trends and weekly balance.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date, timedelta
from typing import Iterable, Mapping

from .models import (
    DailyLog,
    DayCalories,
    DayStatus,
    FoodItem,
    GoalProgress,
    HistoryStats,
    WeeklyDeficit,
    WeightEntry,
    WeightStats,
)
from .rounding import round_half_up, round_to_int


DAYS_PER_WEEK = 7

# Energy in one kg of body weight
KCAL_PER_KG = 7700

DEFAULT_RECENT_FOODS_LIMIT = 10


def iter_period_dates(days: int, end_date: date) -> list[date]:
    """The `days` calendar days ending at end_date (inclusive), ascending."""
    return [end_date - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def build_period_summary(
    logs: Mapping[date, DailyLog],
    days: int = DAYS_PER_WEEK,
    end_date: date | None = None,
) -> list[DayCalories]:
    """Calories per day for a trailing period.

    Always returns exactly `days` items in ascending date order, with 0 for
    days that have no log.

    Args:
        logs: Daily logs keyed by date
        days: Length of the period
        end_date: Last day of the period (defaults to today)

    Returns:
        One DayCalories per day of the period
    """
    if end_date is None:
        end_date = date.today()

    summary = []
    for day in iter_period_dates(days, end_date):
        log = logs.get(day)
        summary.append(DayCalories(date=day, calories=log.total_calories if log else 0))
    return summary


def classify_day(calories: float, goal: int) -> DayStatus:
    """Classify a day's intake against the calorie goal."""
    if calories > goal:
        return DayStatus.OVER
    if calories > 0:
        return DayStatus.UNDER
    return DayStatus.NONE


def percent_of_goal(calories: float, goal: int) -> int:
    return round_to_int(calories / goal * 100) if goal else 0


def calculate_history_stats(logs: Iterable[DailyLog], goal: int) -> HistoryStats:
    """Average intake, days logged and days under goal over all given logs."""
    totals = [log.total_calories for log in logs]
    days_logged = len(totals)

    return HistoryStats(
        avg_daily_calories=round_to_int(sum(totals) / max(days_logged, 1)),
        days_logged=days_logged,
        days_under_goal=sum(1 for t in totals if t <= goal),
    )


def rank_recent_foods(
    logs: Iterable[DailyLog], limit: int = DEFAULT_RECENT_FOODS_LIMIT
) -> list[FoodItem]:
    """Most recently used foods across all logs.

    Entries are collapsed by food id; each food keeps its latest use and a
    use count. Ordering is by latest use, newest first, not by frequency.

    Args:
        logs: Daily logs to scan
        limit: Maximum number of foods to return

    Returns:
        Up to `limit` foods, newest first
    """
    usage: dict[str, dict] = {}

    for log in logs:
        for entry in log.entries:
            food_id = entry.food_item.id
            if food_id in usage:
                usage[food_id]["count"] += 1
                usage[food_id]["last_used"] = max(usage[food_id]["last_used"], entry.timestamp)
            else:
                usage[food_id] = {
                    "food": entry.food_item,
                    "count": 1,
                    "last_used": entry.timestamp,
                }

    ranked = sorted(usage.values(), key=lambda u: u["last_used"], reverse=True)
    return [u["food"] for u in ranked[:limit]]


def calculate_weekly_deficit(tdee: int, daily_calories: list[float]) -> WeeklyDeficit | None:
    """Calorie balance of a week against TDEE.

    Skipped (None) when TDEE is unknown or nothing was logged, since a zero
    week would read as a huge deficit.

    Args:
        tdee: Total daily energy expenditure, 0 if unknown
        daily_calories: Calories for each day of the week

    Returns:
        WeeklyDeficit, or None if it would be meaningless
    """
    days_logged = sum(1 for c in daily_calories if c > 0)
    if tdee <= 0 or days_logged == 0:
        return None

    weekly_calories = sum(daily_calories)
    weekly_needed = tdee * DAYS_PER_WEEK
    weekly_deficit = weekly_calories - weekly_needed

    return WeeklyDeficit(
        tdee=tdee,
        weekly_calories=weekly_calories,
        weekly_needed=weekly_needed,
        weekly_deficit=weekly_deficit,
        estimated_weight_change_kg=weekly_deficit / KCAL_PER_KG,
        days_logged=days_logged,
    )


def filter_weight_history(
    entries: Mapping[date, WeightEntry], days: int, end_date: date | None = None
) -> list[WeightEntry]:
    """Weight entries within a trailing period, ascending by date."""
    if end_date is None:
        end_date = date.today()
    return [entries[d] for d in iter_period_dates(days, end_date) if d in entries]


def calculate_weight_stats(entries: list[WeightEntry]) -> WeightStats | None:
    """Min, max, average and first-to-last change for a weight series.

    Returns:
        WeightStats, or None for an empty series
    """
    if not entries:
        return None

    weights = [e.weight for e in entries]
    return WeightStats(
        min_weight=min(weights),
        max_weight=max(weights),
        avg_weight=round_half_up(sum(weights) / len(weights), 1),
        change=round_half_up(weights[-1] - weights[0], 1) if len(weights) >= 2 else 0,
        start_weight=weights[0],
        current_weight=weights[-1],
    )


def calculate_goal_progress(entries: list[WeightEntry], weight_goal: float | None) -> GoalProgress | None:
    """Progress from the first weight of a series towards the weight goal.

    Returns:
        GoalProgress, or None without a goal or any weights
    """
    if not weight_goal or not entries:
        return None

    start = entries[0].weight
    current = entries[-1].weight

    is_losing = weight_goal < start
    total = abs(start - weight_goal)
    achieved = start - current if is_losing else current - start
    remaining = current - weight_goal if is_losing else weight_goal - current
    percent = min(100.0, max(0.0, achieved / total * 100)) if total > 0 else 0.0

    return GoalProgress(
        is_losing_weight=is_losing,
        total_to_change=round_half_up(total, 1),
        achieved=round_half_up(achieved, 1),
        remaining=round_half_up(remaining, 1),
        progress_percent=round_half_up(percent, 1),
        is_goal_reached=remaining <= 0,
    )
