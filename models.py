from __future__ import annotations

import datetime
import uuid
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def new_id() -> str:
    """Return a process-wide unique identifier for client-side records."""
    return uuid.uuid4().hex


def parse_date(value: Any) -> datetime.date:
    """Parse ``YYYY-MM-DD`` strings (or ISO timestamps) into a date."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        return datetime.date.fromisoformat(value[:10])
    raise ValueError(f"invalid date: {value!r}")


def format_date(value: datetime.date) -> str:
    return value.isoformat()


def day_label(value: datetime.date) -> str:
    return value.strftime("%A")


class WorkoutType(str, Enum):
    STRENGTH = "Strength"
    MOBILITY = "Mobility"
    RUNNING = "Running"
    CARDIO = "Cardio"
    OTHER = "Other"

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class ExerciseCategory(str, Enum):
    STRENGTH = "strength"
    MOBILITY = "mobility"
    RUNNING = "running"

    @property
    def workout_type(self) -> WorkoutType:
        return WorkoutType(self.value)


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class _Dated(_Record):
    @field_validator("date", mode="before", check_fields=False)
    @classmethod
    def _coerce_date(cls, value):
        if value is None:
            return value
        return parse_date(value)


class _Typed(_Record):
    @field_validator("type", mode="before", check_fields=False)
    @classmethod
    def _coerce_type(cls, value):
        if value is None or isinstance(value, WorkoutType):
            return value
        return WorkoutType(value)


class WorkoutInput(_Dated, _Typed):
    """Payload for a workout that has not been assigned an id yet."""

    date: datetime.date
    title: str
    type: WorkoutType
    day: str = ""
    completed: bool = False
    note: Optional[str] = None
    exercises: list[dict[str, Any]] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _fill_day(cls, data):
        if isinstance(data, dict) and not data.get("day") and data.get("date"):
            data = dict(data)
            data["day"] = day_label(parse_date(data["date"]))
        return data


class WorkoutEntry(WorkoutInput):
    id: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    is_suggested: bool = False

    def to_input(self) -> WorkoutInput:
        return WorkoutInput(
            **self.model_dump(
                exclude={"id", "created_at", "updated_at", "is_suggested"}
            )
        )


class SuggestedWorkout(WorkoutEntry):
    """Placeholder workout shown for a date without an actual entry."""

    is_suggested: bool = True


class WorkoutUpdate(_Dated, _Typed):
    date: Optional[datetime.date] = None
    title: Optional[str] = None
    type: Optional[WorkoutType] = None
    day: Optional[str] = None
    completed: Optional[bool] = None
    note: Optional[str] = None
    exercises: Optional[list[dict[str, Any]]] = None

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller explicitly set."""
        return self.model_dump(exclude_unset=True)


def with_day_label(changes: dict[str, Any]) -> dict[str, Any]:
    """Add the weekday label for a changed date unless the caller set one.

    Backends store ``day`` as a plain column, so a date change sent without it
    would keep the old label.
    """
    if changes.get("date") is None or changes.get("day"):
        return changes
    return {**changes, "day": day_label(parse_date(changes["date"]))}


def merge_entry(entry: WorkoutEntry, changes: dict[str, Any]) -> WorkoutEntry:
    """Return ``entry`` with ``changes`` applied, re-deriving the day label."""
    data = entry.model_dump()
    data.update(changes)
    if "date" in changes and "day" not in changes:
        data["day"] = ""
    return type(entry).model_validate(data)


class PresetInput(_Typed):
    name: str
    type: WorkoutType
    description: Optional[str] = None
    category: Optional[str] = None
    exercises: list[dict[str, Any]] = Field(default_factory=list)


class WorkoutPreset(PresetInput):
    id: str


class PresetUpdate(_Typed):
    name: Optional[str] = None
    type: Optional[WorkoutType] = None
    description: Optional[str] = None
    category: Optional[str] = None
    exercises: Optional[list[dict[str, Any]]] = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ExerciseRecord(_Dated):
    id: str = Field(default_factory=new_id)
    date: Optional[datetime.date] = None
    day: Optional[str] = None
    notes: Optional[str] = None


class StrengthExercise(ExerciseRecord):
    exercise: str
    sets: str
    reps: str
    weight: Optional[str] = None


class MobilityExercise(ExerciseRecord):
    exercise: str
    reps: str
    duration: Optional[str] = None


class RunningSession(ExerciseRecord):
    type: str
    distance: Optional[str] = None
    duration: Optional[str] = None
    pace: Optional[str] = None


LOG_MODELS: dict[ExerciseCategory, type[ExerciseRecord]] = {
    ExerciseCategory.STRENGTH: StrengthExercise,
    ExerciseCategory.MOBILITY: MobilityExercise,
    ExerciseCategory.RUNNING: RunningSession,
}


def parse_log(category: ExerciseCategory, data: dict[str, Any]) -> ExerciseRecord:
    """Validate a raw exercise-log row for ``category``."""
    return LOG_MODELS[category].model_validate(data)


class CategoryInput(_Record):
    name: str


class Category(CategoryInput):
    """Exercise library grouping such as "Upper Body"."""

    id: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ExerciseInput(_Record):
    name: str
    description: Optional[str] = None
    category_id: Optional[str] = None
    default_sets: Optional[int] = None
    default_reps: Optional[int] = None
    default_weight: Optional[float] = None


class Exercise(ExerciseInput):
    """Library exercise with suggested defaults for new sets."""

    id: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ExerciseUpdate(_Record):
    name: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[str] = None
    default_sets: Optional[int] = None
    default_reps: Optional[int] = None
    default_weight: Optional[float] = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)
