"""Exercise Calculations - Pure functions for calorie burn estimates.

Time-based estimates use MET values from the Compendium of Physical
Activities: calories = MET x weight (kg) x time (hours). Distance-capable
activities use a calories-per-km-per-kg coefficient when a distance is known.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from .models import ExerciseEntry, ExerciseType
from .rounding import round_half_up, round_to_int


DEFAULT_BODY_WEIGHT = 70


@dataclass(frozen=True)
class ExerciseData:
    """Reference values for one exercise type."""

    name: str
    met: float
    has_distance: bool
    avg_speed_kmh: Optional[float] = None
    calories_per_km: Optional[float] = None


EXERCISE_DATA: dict[ExerciseType, ExerciseData] = {
    # jogging ~8 km/h, ~1 kcal per kg per km
    ExerciseType.RUNNING: ExerciseData(
        name="Running", met=9.8, has_distance=True, avg_speed_kmh=8, calories_per_km=1.0
    ),
    # medium pace, 2.4 km in 30 min
    ExerciseType.WALKING: ExerciseData(
        name="Walking", met=3.8, has_distance=True, avg_speed_kmh=4.8, calories_per_km=1.0
    ),
    ExerciseType.CYCLING: ExerciseData(
        name="Cycling", met=7.5, has_distance=False, avg_speed_kmh=15
    ),
    # ~17 min/km with elevation
    ExerciseType.HIKING: ExerciseData(
        name="Hiking", met=6.0, has_distance=True, avg_speed_kmh=3.5, calories_per_km=0.7
    ),
    ExerciseType.BADMINTON: ExerciseData(name="Badminton", met=5.5, has_distance=False),
    ExerciseType.TABLE_TENNIS: ExerciseData(name="Table Tennis", met=4.0, has_distance=False),
    ExerciseType.SWIMMING: ExerciseData(name="Swimming", met=6.0, has_distance=False),
}

EXERCISE_TYPES: list[ExerciseType] = list(EXERCISE_DATA)


def get_exercise_data(exercise_type: ExerciseType | str) -> ExerciseData:
    """Look up reference data for an exercise type.

    Raises:
        ValueError: If the exercise type is not recognized
    """
    return EXERCISE_DATA[ExerciseType(exercise_type)]


def calculate_calories_burnt(
    exercise_type: ExerciseType | str,
    duration_mins: float,
    weight: float = DEFAULT_BODY_WEIGHT,
    distance_km: float | None = None,
) -> int:
    """Estimate calories burnt during an exercise session.

    Uses the distance formula when the type tracks distance, a positive
    distance is given and a per-km coefficient exists; otherwise falls back
    to the MET formula.

    Args:
        exercise_type: The type of exercise
        duration_mins: Duration in minutes
        weight: Body weight in kg
        distance_km: Optional distance in km

    Returns:
        Estimated calories burnt, rounded to an integer
    """
    data = get_exercise_data(exercise_type)

    if data.has_distance and distance_km and distance_km > 0 and data.calories_per_km:
        return round_to_int(data.calories_per_km * weight * distance_km)

    hours = duration_mins / 60
    return round_to_int(data.met * weight * hours)


def estimate_distance_from_duration(exercise_type: ExerciseType | str, duration_mins: float) -> float:
    """Estimate distance from duration at the type's average speed.

    Returns:
        Distance in km to one decimal, or 0 if the type has no distance
    """
    data = get_exercise_data(exercise_type)
    if not data.has_distance or not data.avg_speed_kmh:
        return 0

    return round_half_up(data.avg_speed_kmh * (duration_mins / 60), 1)


def estimate_duration_from_distance(exercise_type: ExerciseType | str, distance_km: float) -> int:
    """Estimate duration from distance at the type's average speed.

    Returns:
        Duration in whole minutes, or 0 if the type has no distance
    """
    data = get_exercise_data(exercise_type)
    if not data.has_distance or not data.avg_speed_kmh:
        return 0

    return round_to_int(distance_km / data.avg_speed_kmh * 60)


def get_exercise_name(exercise_type: ExerciseType | str) -> str:
    return get_exercise_data(exercise_type).name


def exercise_has_distance(exercise_type: ExerciseType | str) -> bool:
    return get_exercise_data(exercise_type).has_distance


def get_exercise_met(exercise_type: ExerciseType | str) -> float:
    return get_exercise_data(exercise_type).met


def format_exercise_summary(
    duration_mins: int, calories_burnt: int, distance_km: float | None = None
) -> str:
    """Format a session for display, e.g. "30 min • 4.0 km • 280 kcal"."""
    parts = [f"{duration_mins} min"]
    if distance_km:
        parts.append(f"{distance_km} km")
    parts.append(f"{calories_burnt} kcal")
    return " • ".join(parts)


def calculate_total_exercise_calories(entries: Iterable[ExerciseEntry]) -> int:
    """Sum calories burnt over a day's exercise entries."""
    return sum(e.calories_burnt for e in entries)
