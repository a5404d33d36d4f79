"""Exercise Form State - the estimate/override rules behind exercise entry.

Distance is auto-filled from duration until the user types a distance of
their own; switching exercise type throws the distance away because average
speeds differ per activity.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from .exercise import (
    DEFAULT_BODY_WEIGHT,
    calculate_calories_burnt,
    estimate_distance_from_duration,
    exercise_has_distance,
)
from .models import ExerciseEntry, ExerciseType, now_millis
from .rounding import round_to_int


class DistanceSource(str, Enum):
    """Where the current distance value came from."""

    UNSET = "unset"
    AUTO = "auto"
    USER = "user"


class TimeUnit(str, Enum):
    MINUTES = "minutes"
    HOURS = "hours"


@dataclass
class ExerciseForm:
    """Editable state of one exercise entry."""

    exercise_type: ExerciseType = ExerciseType.WALKING
    duration: Optional[float] = None
    time_unit: TimeUnit = TimeUnit.MINUTES
    distance: Optional[float] = None
    distance_source: DistanceSource = DistanceSource.UNSET
    calories_override: Optional[int] = None
    weight: float = DEFAULT_BODY_WEIGHT
    entry_id: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: ExerciseEntry, weight: float = DEFAULT_BODY_WEIGHT) -> "ExerciseForm":
        """Open an existing entry for editing. A stored distance counts as user-entered."""
        return cls(
            exercise_type=entry.exercise_type,
            duration=entry.duration,
            distance=entry.distance or None,
            distance_source=DistanceSource.USER if entry.distance else DistanceSource.UNSET,
            calories_override=entry.calories_burnt if entry.is_calories_overridden else None,
            weight=weight,
            entry_id=entry.id,
        )

    @property
    def duration_minutes(self) -> float | None:
        if self.duration is None or self.duration <= 0:
            return None
        if self.time_unit == TimeUnit.HOURS:
            return self.duration * 60
        return self.duration

    def set_exercise_type(self, exercise_type: ExerciseType | str) -> None:
        self.exercise_type = ExerciseType(exercise_type)
        self.distance = None
        self.distance_source = DistanceSource.UNSET
        self._auto_fill_distance()

    def set_duration(self, duration: float | None, time_unit: TimeUnit | None = None) -> None:
        self.duration = duration
        if time_unit is not None:
            self.time_unit = TimeUnit(time_unit)
        self._auto_fill_distance()

    def set_distance(self, distance: float | None) -> None:
        """Record a distance typed by the user; it is no longer auto-filled."""
        self.distance = distance
        self.distance_source = DistanceSource.USER

    def set_calories_override(self, calories: int | None) -> None:
        self.calories_override = calories

    def _auto_fill_distance(self) -> None:
        if self.distance_source == DistanceSource.USER:
            return
        if not exercise_has_distance(self.exercise_type):
            return
        minutes = self.duration_minutes
        if minutes is None:
            return
        estimated = estimate_distance_from_duration(self.exercise_type, minutes)
        if estimated > 0:
            self.distance = estimated
            self.distance_source = DistanceSource.AUTO

    @property
    def estimated_calories(self) -> int:
        """Calories from the current duration and distance; 0 without a duration."""
        minutes = self.duration_minutes
        if minutes is None:
            return 0
        return calculate_calories_burnt(self.exercise_type, minutes, self.weight, self.distance)

    @property
    def effective_distance(self) -> float | None:
        """Distance that is kept with the entry; None for types without distance."""
        if exercise_has_distance(self.exercise_type) and self.distance:
            return self.distance
        return None

    @property
    def is_calories_overridden(self) -> bool:
        return self.calories_override is not None

    def to_entry(self, entry_date: date) -> ExerciseEntry:
        """Build the entry to save.

        Raises:
            ValueError: If no positive duration has been entered
        """
        minutes = self.duration_minutes
        if minutes is None:
            raise ValueError("Duration must be greater than zero")

        calories = self.calories_override if self.is_calories_overridden else self.estimated_calories

        kwargs = {}
        if self.entry_id is not None:
            kwargs["id"] = self.entry_id

        return ExerciseEntry(
            date=entry_date,
            exercise_type=self.exercise_type,
            duration=max(round_to_int(minutes), 1),
            distance=self.effective_distance,
            calories_burnt=calories,
            is_calories_overridden=self.is_calories_overridden,
            timestamp=now_millis(),
            **kwargs,
        )
