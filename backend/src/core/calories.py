"""Calorie Calculations - Pure functions for daily totals and net calories.

All functions are pure: same input always produces same output, no side effects.
Log transforms return a new DailyLog rather than mutating the one given.
"""

from typing import Iterable

from .models import DailyLog, FoodLogEntry, MeterStatus, NetCalories
from .rounding import round_to_int


# Net calories up to this share of the goal show as "under"
UNDER_GOAL_RATIO = 0.8


class EntryNotFoundError(LookupError):
    """Raised when a food entry id is not present in a day's log."""

    def __init__(self, entry_id: str):
        super().__init__(f"Entry not found: {entry_id}")
        self.entry_id = entry_id


def calculate_total_calories(entries: Iterable[FoodLogEntry]) -> float:
    """Sum quantity x calories per unit over a list of food entries.

    Args:
        entries: Food entries for a day

    Returns:
        Total calories (unrounded)
    """
    return sum(e.quantity * e.food_item.calories_per_unit for e in entries)


def add_entry(log: DailyLog, entry: FoodLogEntry) -> DailyLog:
    """Return a copy of the log with the entry appended."""
    return DailyLog(date=log.date, entries=[*log.entries, entry])


def update_entry_quantity(log: DailyLog, entry_id: str, quantity: float) -> DailyLog:
    """Return a copy of the log with one entry's quantity changed.

    Raises:
        EntryNotFoundError: If no entry has the given id
        pydantic.ValidationError: If the quantity is not positive
    """
    entries = []
    found = False
    for entry in log.entries:
        if entry.id == entry_id:
            entry = FoodLogEntry(**{**entry.model_dump(), "quantity": quantity})
            found = True
        entries.append(entry)

    if not found:
        raise EntryNotFoundError(entry_id)
    return DailyLog(date=log.date, entries=entries)


def remove_entry(log: DailyLog, entry_id: str) -> DailyLog:
    """Return a copy of the log without the given entry.

    Raises:
        EntryNotFoundError: If no entry has the given id
    """
    entries = [e for e in log.entries if e.id != entry_id]
    if len(entries) == len(log.entries):
        raise EntryNotFoundError(entry_id)
    return DailyLog(date=log.date, entries=entries)


def get_meter_status(net: int, goal: int) -> MeterStatus:
    if net <= goal * UNDER_GOAL_RATIO:
        return MeterStatus.UNDER
    if net <= goal:
        return MeterStatus.ON_TRACK
    return MeterStatus.OVER


def calculate_net_calories(
    consumed: float,
    burnt: float,
    goal: int,
    exercise_goal: int,
) -> NetCalories:
    """Calculate net calories and goal status for a day.

    Consumed and burnt calories are rounded before subtracting, so the
    numbers add up the way they are displayed.

    Args:
        consumed: Calories eaten
        burnt: Calories burnt through exercise
        goal: Daily calorie goal
        exercise_goal: Daily exercise calorie goal

    Returns:
        NetCalories with net, remaining and goal flags
    """
    rounded_consumed = round_to_int(consumed)
    rounded_burnt = round_to_int(burnt)
    net = rounded_consumed - rounded_burnt

    return NetCalories(
        consumed=rounded_consumed,
        burnt=rounded_burnt,
        net=net,
        goal=goal,
        remaining=goal - net,
        is_over_goal=net > goal,
        meter_status=get_meter_status(net, goal),
        is_food_over_target=rounded_consumed > goal,
        exercise_goal=exercise_goal,
        is_exercise_goal_reached=rounded_burnt >= exercise_goal,
    )
