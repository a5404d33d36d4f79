"""Core Data Models - Pydantic models for type safety.

Stored records (food items, log entries, weights, exercises, profile,
settings) and derived values (BMI, summaries, reports). Apart from
validation and the live calorie total on DailyLog, models carry no
behavior.
"""

import time
import uuid
from datetime import date as DateType
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


def now_millis() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


# ==================== Food ====================


class FoodCategory(str, Enum):
    BREADS = "breads"
    RICE = "rice"
    DAL = "dal"
    VEGETABLES = "vegetables"
    SNACKS = "snacks"
    SWEETS = "sweets"
    BEVERAGES = "beverages"
    DAIRY = "dairy"
    FRUITS = "fruits"
    CHUTNEYS = "chutneys"
    PICKLES = "pickles"
    CUSTOM = "custom"


class FoodUnit(str, Enum):
    PIECE = "piece"
    CUP = "cup"
    BOWL = "bowl"
    PLATE = "plate"
    GLASS = "glass"
    TABLESPOON = "tablespoon"
    TEASPOON = "teaspoon"
    GRAMS = "grams"
    ML = "ml"
    SERVING = "serving"
    SLICE = "slice"
    PACKET = "packet"
    SCOOP = "scoop"
    SERVING_10_PCS = "serving (10 pcs)"
    SERVING_10_HALVES = "serving (10 halves)"
    SERVING_3_PCS = "serving (3 pcs)"
    SERVING_5_PCS = "serving (5 pcs)"


class FoodItem(BaseModel):
    """A food from the catalog or a user-defined custom food.

    Frozen: a custom food is changed by deleting and recreating it.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(min_length=1, description="Display name of the food")
    category: FoodCategory
    calories_per_unit: float = Field(gt=0, description="Calories in one unit")
    unit: FoodUnit
    unit_weight: Optional[float] = Field(default=None, gt=0, description="Grams in one unit")
    is_custom: bool = Field(default=False)
    search_keywords: tuple[str, ...] = Field(default=(), description="Alternative names for search")


class FoodLogEntry(BaseModel):
    """A food logged on a day.

    The food item is embedded by value so that later changes to custom
    foods never rewrite history.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    food_item: FoodItem
    quantity: float = Field(gt=0, description="Number of units eaten")
    timestamp: int = Field(default_factory=now_millis, description="Epoch milliseconds")


class DailyLog(BaseModel):
    """A day's food log. The calorie total is always derived from the entries."""

    date: DateType = Field(description="Local calendar day (YYYY-MM-DD)")
    entries: list[FoodLogEntry] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_calories(self) -> float:
        """Sum of quantity x calories per unit over all entries."""
        return sum(e.quantity * e.food_item.calories_per_unit for e in self.entries)


# ==================== Exercise ====================


class ExerciseType(str, Enum):
    RUNNING = "running"
    WALKING = "walking"
    CYCLING = "cycling"
    HIKING = "hiking"
    BADMINTON = "badminton"
    TABLE_TENNIS = "table_tennis"
    SWIMMING = "swimming"


class ExerciseEntry(BaseModel):
    """A single exercise session logged on a day."""

    id: str = Field(default_factory=lambda: f"exercise_{uuid.uuid4().hex}")
    date: DateType
    exercise_type: ExerciseType
    duration: int = Field(gt=0, description="Duration in minutes")
    distance: Optional[float] = Field(default=None, ge=0, description="Distance in km")
    calories_burnt: int = Field(ge=0)
    is_calories_overridden: bool = Field(
        default=False, description="True when calories_burnt was entered by the user"
    )
    timestamp: int = Field(default_factory=now_millis)


# ==================== Weight & Profile ====================


class WeightEntry(BaseModel):
    """Body weight for a day. One per day; a later save replaces it."""

    date: DateType
    weight: float = Field(gt=0, le=500, description="Weight in kg")
    timestamp: int = Field(default_factory=now_millis)


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class ActivityLevel(str, Enum):
    SEDENTARY = "sedentary"
    LIGHTLY_ACTIVE = "lightly_active"
    MODERATELY_ACTIVE = "moderately_active"
    VERY_ACTIVE = "very_active"
    EXTRA_ACTIVE = "extra_active"


class UserData(BaseModel):
    """User profile. Every field is optional; partial profiles are valid."""

    height: Optional[float] = Field(default=None, gt=0, description="Height in cm")
    initial_weight: Optional[float] = Field(default=None, gt=0)
    initial_weight_date: Optional[DateType] = None
    current_weight: Optional[float] = Field(default=None, gt=0)
    current_weight_date: Optional[DateType] = None
    gender: Optional[Gender] = None
    date_of_birth: Optional[DateType] = None
    activity_level: Optional[ActivityLevel] = None


# ==================== Settings ====================


class NotificationTime(BaseModel):
    hour: int = Field(default=22, ge=0, le=23)
    minute: int = Field(default=0, ge=0, le=59)


class AppSettings(BaseModel):
    """Global app settings and goals."""

    notification_enabled: bool = True
    notification_time: NotificationTime = Field(default_factory=NotificationTime)
    daily_calorie_goal: int = Field(default=2000, ge=500, le=10000)
    exercise_calorie_goal: int = Field(default=300, ge=0, le=5000)
    weight_goal: Optional[float] = Field(default=None, ge=30, le=300, description="Target weight in kg")


# ==================== Derived Values ====================


class BMICategory(str, Enum):
    UNDERWEIGHT = "underweight"
    NORMAL = "normal"
    OVERWEIGHT = "overweight"
    OBESE = "obese"


class HealthyWeightRange(BaseModel):
    min: float
    max: float


class BMIResult(BaseModel):
    bmi: float = Field(description="Rounded to one decimal")
    category: BMICategory
    healthy_weight_range: HealthyWeightRange


class BMICategoryInfo(BaseModel):
    label: str
    color: str
    description: str


class WeightChange(BaseModel):
    change: float = Field(description="kg, negative means weight lost")
    percentage: float


class MeterStatus(str, Enum):
    UNDER = "under"
    ON_TRACK = "on_track"
    OVER = "over"


class NetCalories(BaseModel):
    """A day's consumed, burnt and net calories relative to the goals."""

    consumed: int
    burnt: int
    net: int
    goal: int
    remaining: int = Field(description="Negative if over goal")
    is_over_goal: bool
    meter_status: MeterStatus
    is_food_over_target: bool
    exercise_goal: int
    is_exercise_goal_reached: bool


class DayStatus(str, Enum):
    NONE = "none"
    UNDER = "under"
    OVER = "over"


class DayCalories(BaseModel):
    """Calories for one day of a period summary."""

    date: DateType
    calories: float = 0


class HistoryPeriod(str, Enum):
    WEEK = "week"
    FIFTEEN_DAYS = "15days"
    MONTH = "month"
    THREE_MONTHS = "3months"

    @property
    def days(self) -> int:
        return {"week": 7, "15days": 15, "month": 30, "3months": 90}[self.value]


class HistoryStats(BaseModel):
    avg_daily_calories: int
    days_logged: int
    days_under_goal: int


class WeeklyDeficit(BaseModel):
    """Calorie balance of a week against TDEE. Negative deficit means weight loss."""

    tdee: int
    weekly_calories: float
    weekly_needed: int
    weekly_deficit: float
    estimated_weight_change_kg: float
    days_logged: int


class WeightStats(BaseModel):
    min_weight: float
    max_weight: float
    avg_weight: float
    change: float = Field(description="Last minus first weight in the period")
    start_weight: float
    current_weight: float


class GoalProgress(BaseModel):
    is_losing_weight: bool
    total_to_change: float
    achieved: float
    remaining: float
    progress_percent: float = Field(ge=0, le=100)
    is_goal_reached: bool


class SearchSource(str, Enum):
    OPEN_FOOD_FACTS = "openfoodfacts"
    CALORIE_NINJAS = "calorieninjas"
    MANUAL = "manual"


class OnlineSearchResult(BaseModel):
    """A candidate food returned by an online nutrition lookup."""

    name: str
    calories: int
    serving_size: float = 100
    serving_unit: str = "grams"
    source: SearchSource
    image_url: Optional[str] = None
    brand: Optional[str] = None
