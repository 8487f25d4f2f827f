"""Core Data Models - Pydantic models for type safety.

Every record is validated on construction: enum and range constraints are
enforced here rather than checked by handlers. Python attributes are
snake_case; the JSON wire format uses camelCase aliases.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, ClassVar, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


MAX_WORKOUTS_PER_USER = 10


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_document_id(value: str) -> bool:
    """True if value can be used as a single Firestore document ID."""
    if not isinstance(value, str) or not value or len(value) > 128:
        return False
    if "/" in value or value in (".", ".."):
        return False
    return not (value.startswith("__") and value.endswith("__"))


def _check_document_id(value: str) -> str:
    if not is_document_id(value):
        raise ValueError("Value contains characters that are not allowed")
    return value


def _check_password(value: str) -> str:
    # bcrypt only looks at the first 72 bytes
    if len(value.encode("utf-8")) > 72:
        raise ValueError("Password must be at most 72 bytes")
    return value


Username = Annotated[str, Field(min_length=1, max_length=128), AfterValidator(_check_document_id)]
DocumentId = Annotated[str, Field(min_length=1, max_length=128), AfterValidator(_check_document_id)]
Password = Annotated[str, Field(min_length=1), AfterValidator(_check_password)]


class WireModel(BaseModel):
    """Base for records exchanged as camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_document(self) -> dict:
        """Plain JSON-compatible dict for storage (snake_case keys)."""
        return self.model_dump(mode="json")

    def to_response(self, **kwargs) -> dict:
        """camelCase dict for HTTP responses."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)


class WorkoutCategory(str, Enum):
    """Kind of workout recorded in a daily activity log."""

    NONE = "None"
    BACK = "Back Workouts"
    CHEST = "Chest Workouts"
    LEG = "Leg Workouts"
    ARM = "Arm Workouts"
    CORE = "Core Workouts"
    CARDIO = "Cardio Workouts"
    FULL_BODY = "Full-Body Workouts"
    FLEXIBILITY = "Flexibility and Mobility Workouts"


class Intensity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class CompletionStatus(str, Enum):
    YES = "Yes"
    NO = "No"


# ==================== Users ====================


class Registration(WireModel):
    """Sign-up form. The password is hashed before anything is stored."""

    username: Username
    password: Password
    dob: date
    height: float = Field(gt=0)
    weight: float = Field(gt=0)
    gender: str = Field(min_length=1)
    goal: str = Field(min_length=1)


class User(WireModel):
    """User record stored in Firestore. Never returned as-is."""

    username: Username
    password_hash: str = Field(description="bcrypt hash - never store plaintext")
    dob: date
    height: float = Field(gt=0, description="Height in centimetres")
    weight: float = Field(gt=0, description="Weight in kilograms")
    gender: str = Field(min_length=1)
    goal: str = Field(min_length=1)
    created_at: datetime = Field(default_factory=utc_now)

    def profile(self) -> "UserProfile":
        return UserProfile.model_validate(self.model_dump(exclude={"password_hash", "created_at"}))


class UserProfile(WireModel):
    """Public view of a user."""

    username: str
    dob: date
    height: float
    weight: float
    gender: str
    goal: str


class ProfileUpdate(WireModel):
    """Partial profile change. Fields left as None are kept."""

    dob: Optional[date] = None
    height: Optional[float] = Field(default=None, gt=0)
    weight: Optional[float] = Field(default=None, gt=0)
    gender: Optional[str] = Field(default=None, min_length=1)
    goal: Optional[str] = Field(default=None, min_length=1)
    new_password: Optional[Password] = None

    def changes(self) -> dict:
        """Stored fields to overwrite, excluding the password."""
        return self.model_dump(mode="json", exclude_none=True, exclude={"new_password"})


# ==================== Per-day logs ====================


class DailyLog(WireModel):
    """Steps, workout and sleep for one user on one day."""

    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = (
        "steps", "workout", "workout_duration", "sleep_hours",
    )

    username: Username
    log_date: date
    steps: int = Field(ge=0)
    workout: WorkoutCategory
    workout_duration: float = Field(ge=0, description="Minutes")
    sleep_hours: float = Field(ge=0, le=24)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class NutrientLog(WireModel):
    """Nutrient intake for one user on one day."""

    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = (
        "calories", "protein", "fats", "carbohydrates", "water",
    )

    username: Username
    log_date: date
    calories: float = Field(ge=0)
    protein: float = Field(ge=0, description="Grams")
    fats: float = Field(ge=0, description="Grams")
    carbohydrates: float = Field(ge=0, description="Grams")
    water: float = Field(ge=0, description="Litres")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class WeightLog(WireModel):
    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = ("weight",)

    username: Username
    log_date: date
    weight: float = Field(ge=30, le=300, description="Kilograms")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class NutrientGoals(WireModel):
    """Daily nutrient targets, one document per user."""

    GOAL_FIELDS: ClassVar[tuple[str, ...]] = (
        "calories_goal", "protein_goal", "fats_goal",
        "carbohydrates_goal", "water_goal", "weight_goal",
    )

    username: Username
    calories_goal: Optional[float] = Field(default=None, ge=0)
    protein_goal: Optional[float] = Field(default=None, ge=0)
    fats_goal: Optional[float] = Field(default=None, ge=0)
    carbohydrates_goal: Optional[float] = Field(default=None, ge=0)
    water_goal: Optional[float] = Field(default=None, ge=0)
    weight_goal: Optional[float] = Field(default=None, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def provided_goals(self) -> dict:
        """Goal fields that were explicitly given a value."""
        return {
            name: getattr(self, name)
            for name in self.GOAL_FIELDS
            if getattr(self, name) is not None
        }


# ==================== Workouts ====================


class Workout(WireModel):
    """A named workout plan owned by a user."""

    id: Optional[str] = None
    username: Username
    name: str = Field(min_length=1)
    exercises: str = Field(min_length=1, description="Free-text list of exercises")
    duration: float = Field(ge=0, description="Minutes")
    intensity: Intensity
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", exclude={"id"})


class WorkoutChanges(WireModel):
    """Replacement values for an existing workout."""

    name: str = Field(min_length=1)
    exercises: str = Field(min_length=1)
    duration: float = Field(ge=0)
    intensity: Intensity


class WorkoutStatus(WireModel):
    """Whether a workout was completed on a given day."""

    username: Username
    workout_id: DocumentId
    status: CompletionStatus
    log_date: date
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def document_id(self) -> str:
        return f"{self.workout_id}_{self.log_date.isoformat()}"


# ==================== Reports ====================


class StepProgress(WireModel):
    initial_steps: int
    latest_steps: int
    progress: int


class CalorieProgress(WireModel):
    calorie_goal: Optional[float]
    initial_calories: float
    latest_calories: float
    progress: float


class MacroAverages(WireModel):
    """Mean daily macros over a window of nutrient logs."""

    protein: float
    carbs: float
    fat: float
    days_logged: int


class WorkoutFrequency(WireModel):
    average_workouts_per_week: float
    total_completed_workouts: int
    weekly_data: dict[str, int] = Field(default_factory=dict, description="Week start (Sunday) -> completions")


class CompletionCounts(WireModel):
    """Completed-workout counts per workout name, ready for charting."""

    labels: list[str]
    data: list[int]
