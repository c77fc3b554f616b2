"""Remote data gateway.

``RestGateway`` talks to a PostgREST-style backend (``/rest/v1/<table>``);
``LocalGateway`` keeps the same contract on top of the SQLite repositories and
is used when no remote backend is configured. Both raise :class:`GatewayError`
for every failure so callers only have one exception type to handle.
"""

from __future__ import annotations

import datetime
import logging
import sqlite3
from enum import Enum
from typing import Any, Iterable, Optional

import requests
from pydantic import ValidationError

from db import (
    CategoryRepository,
    ExerciseLogRepository,
    ExerciseRepository,
    PresetRepository,
    WorkoutRepository,
)
from models import (
    Category,
    CategoryInput,
    Exercise,
    ExerciseCategory,
    ExerciseInput,
    ExerciseRecord,
    PresetInput,
    SuggestedWorkout,
    WorkoutEntry,
    WorkoutInput,
    WorkoutPreset,
    format_date,
    parse_log,
)
from sample_data import generate_suggested_workouts

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Raised when the backend cannot complete a request."""


def _serialize(changes: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in changes.items():
        if isinstance(value, datetime.date):
            value = format_date(value)
        elif isinstance(value, Enum):
            value = value.value
        out[key] = value
    return out


def _parse_many(model, rows: Iterable[dict]) -> list:
    try:
        return [model.model_validate(row) for row in rows]
    except ValidationError as e:
        raise GatewayError(f"malformed {model.__name__} payload: {e}") from e


def _parse_one(model, row: Any):
    if isinstance(row, list):
        if not row:
            raise GatewayError(f"empty {model.__name__} response")
        row = row[0]
    return _parse_many(model, [row])[0]


class Gateway:
    """Persistence contract used by :class:`workout_service.WorkoutService`."""

    def fetch_workouts(self) -> list[WorkoutEntry]:
        raise NotImplementedError

    def create_workout(self, workout: WorkoutInput) -> WorkoutEntry:
        raise NotImplementedError

    def update_workout(self, workout_id: str, changes: dict[str, Any]) -> WorkoutEntry:
        raise NotImplementedError

    def delete_workout(self, workout_id: str) -> bool:
        raise NotImplementedError

    def fetch_workout_presets(self) -> list[WorkoutPreset]:
        raise NotImplementedError

    def create_preset(self, preset: PresetInput) -> WorkoutPreset:
        raise NotImplementedError

    def update_preset(self, preset_id: str, changes: dict[str, Any]) -> WorkoutPreset:
        raise NotImplementedError

    def delete_preset(self, preset_id: str) -> bool:
        raise NotImplementedError

    def fetch_suggested_workouts(self) -> list[SuggestedWorkout]:
        raise NotImplementedError

    def fetch_exercise_logs(self, category: ExerciseCategory) -> list[ExerciseRecord]:
        raise NotImplementedError

    def fetch_exercises(self) -> list[Exercise]:
        raise NotImplementedError

    def create_exercise(self, exercise: ExerciseInput) -> Exercise:
        raise NotImplementedError

    def update_exercise(self, exercise_id: str, changes: dict[str, Any]) -> Exercise:
        raise NotImplementedError

    def delete_exercise(self, exercise_id: str) -> bool:
        raise NotImplementedError

    def fetch_categories(self) -> list[Category]:
        raise NotImplementedError

    def create_category(self, category: CategoryInput) -> Category:
        raise NotImplementedError


class RestGateway(Gateway):
    """Gateway for a hosted PostgREST backend."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        user_id: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            }
        )

    def _url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _request(self, method: str, table: str, **kwargs) -> Any:
        try:
            resp = self.session.request(
                method, self._url(table), timeout=self.timeout, **kwargs
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            raise GatewayError(f"{method} {table} failed: {e}") from e
        logger.debug("%s %s -> %s", method, table, resp.status_code)
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise GatewayError(f"{method} {table} returned invalid JSON") from e

    def _owner_filter(self) -> dict[str, str]:
        return {"user_id": f"eq.{self.user_id}"} if self.user_id else {}

    def _with_owner(self, payload: dict[str, Any]) -> dict[str, Any]:
        if self.user_id:
            payload = {**payload, "user_id": self.user_id}
        return payload

    def fetch_workouts(self) -> list[WorkoutEntry]:
        rows = self._request(
            "GET", "workouts", params={"select": "*", **self._owner_filter()}
        )
        return _parse_many(WorkoutEntry, rows or [])

    def create_workout(self, workout: WorkoutInput) -> WorkoutEntry:
        payload = self._with_owner(workout.model_dump(mode="json"))
        return _parse_one(WorkoutEntry, self._request("POST", "workouts", json=payload))

    def update_workout(self, workout_id: str, changes: dict[str, Any]) -> WorkoutEntry:
        rows = self._request(
            "PATCH",
            "workouts",
            params={"id": f"eq.{workout_id}", **self._owner_filter()},
            json=_serialize(changes),
        )
        return _parse_one(WorkoutEntry, rows)

    def delete_workout(self, workout_id: str) -> bool:
        self._request(
            "DELETE",
            "workouts",
            params={"id": f"eq.{workout_id}", **self._owner_filter()},
        )
        return True

    def fetch_workout_presets(self) -> list[WorkoutPreset]:
        rows = self._request("GET", "workout_presets", params={"select": "*"})
        return _parse_many(WorkoutPreset, rows or [])

    def create_preset(self, preset: PresetInput) -> WorkoutPreset:
        rows = self._request(
            "POST", "workout_presets", json=preset.model_dump(mode="json")
        )
        return _parse_one(WorkoutPreset, rows)

    def update_preset(self, preset_id: str, changes: dict[str, Any]) -> WorkoutPreset:
        rows = self._request(
            "PATCH",
            "workout_presets",
            params={"id": f"eq.{preset_id}"},
            json=_serialize(changes),
        )
        return _parse_one(WorkoutPreset, rows)

    def delete_preset(self, preset_id: str) -> bool:
        self._request("DELETE", "workout_presets", params={"id": f"eq.{preset_id}"})
        return True

    def fetch_suggested_workouts(self) -> list[SuggestedWorkout]:
        rows = self._request(
            "GET", "suggested_workouts", params={"select": "*", **self._owner_filter()}
        )
        return _parse_many(SuggestedWorkout, rows or [])

    def fetch_exercise_logs(self, category: ExerciseCategory) -> list[ExerciseRecord]:
        category = ExerciseCategory(category)
        rows = self._request(
            "GET",
            "workout_logs",
            params={"select": "*", "type": f"eq.{category.workout_type.value}"},
        )
        try:
            return [parse_log(category, row) for row in rows or []]
        except ValidationError as e:
            raise GatewayError(f"malformed {category.value} log payload: {e}") from e

    def fetch_exercises(self) -> list[Exercise]:
        rows = self._request("GET", "exercises", params={"select": "*"})
        return _parse_many(Exercise, rows or [])

    def create_exercise(self, exercise: ExerciseInput) -> Exercise:
        rows = self._request("POST", "exercises", json=exercise.model_dump(mode="json"))
        return _parse_one(Exercise, rows)

    def update_exercise(self, exercise_id: str, changes: dict[str, Any]) -> Exercise:
        rows = self._request(
            "PATCH",
            "exercises",
            params={"id": f"eq.{exercise_id}"},
            json=_serialize(changes),
        )
        return _parse_one(Exercise, rows)

    def delete_exercise(self, exercise_id: str) -> bool:
        self._request("DELETE", "exercises", params={"id": f"eq.{exercise_id}"})
        return True

    def fetch_categories(self) -> list[Category]:
        rows = self._request("GET", "categories", params={"select": "*"})
        return _parse_many(Category, rows or [])

    def create_category(self, category: CategoryInput) -> Category:
        rows = self._request("POST", "categories", json=category.model_dump(mode="json"))
        return _parse_one(Category, rows)


class LocalGateway(Gateway):
    """Gateway backed by the local SQLite database."""

    def __init__(
        self,
        db_path: str = "workout.db",
        user_id: Optional[str] = None,
        suggestion_days: int = 14,
    ) -> None:
        try:
            self.workouts = WorkoutRepository(db_path, user_id)
            self.presets = PresetRepository(db_path)
            self.logs = ExerciseLogRepository(db_path)
            self.exercises = ExerciseRepository(db_path)
            self.categories = CategoryRepository(db_path)
        except sqlite3.Error as e:
            raise GatewayError(f"cannot open {db_path}: {e}") from e
        self.suggestion_days = suggestion_days

    def _run(self, action: str, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (sqlite3.Error, ValueError) as e:
            raise GatewayError(f"{action} failed: {e}") from e

    def fetch_workouts(self) -> list[WorkoutEntry]:
        rows = self._run("fetch workouts", self.workouts.fetch_all_workouts)
        return _parse_many(WorkoutEntry, rows)

    def create_workout(self, workout: WorkoutInput) -> WorkoutEntry:
        data = workout.model_dump(mode="json")
        row = self._run(
            "create workout",
            self.workouts.create,
            data["date"],
            data["title"],
            data["type"],
            day=data["day"],
            completed=data["completed"],
            note=data["note"],
            exercises=data["exercises"],
        )
        return _parse_one(WorkoutEntry, row)

    def update_workout(self, workout_id: str, changes: dict[str, Any]) -> WorkoutEntry:
        row = self._run(
            "update workout", self.workouts.update, workout_id, **_serialize(changes)
        )
        return _parse_one(WorkoutEntry, row)

    def delete_workout(self, workout_id: str) -> bool:
        return self._run("delete workout", self.workouts.delete, workout_id)

    def fetch_workout_presets(self) -> list[WorkoutPreset]:
        rows = self._run("fetch presets", self.presets.fetch_all_presets)
        return _parse_many(WorkoutPreset, rows)

    def create_preset(self, preset: PresetInput) -> WorkoutPreset:
        data = preset.model_dump(mode="json")
        row = self._run(
            "create preset",
            self.presets.create,
            data["name"],
            data["type"],
            description=data["description"],
            category=data["category"],
            exercises=data["exercises"],
        )
        return _parse_one(WorkoutPreset, row)

    def update_preset(self, preset_id: str, changes: dict[str, Any]) -> WorkoutPreset:
        row = self._run(
            "update preset", self.presets.update, preset_id, **_serialize(changes)
        )
        return _parse_one(WorkoutPreset, row)

    def delete_preset(self, preset_id: str) -> bool:
        return self._run("delete preset", self.presets.delete, preset_id)

    def fetch_suggested_workouts(self) -> list[SuggestedWorkout]:
        return generate_suggested_workouts(days=self.suggestion_days)

    def fetch_exercise_logs(self, category: ExerciseCategory) -> list[ExerciseRecord]:
        category = ExerciseCategory(category)
        rows = self._run(
            "fetch exercise logs", self.logs.fetch_for_category, category.value
        )
        try:
            return [parse_log(category, row) for row in rows]
        except ValidationError as e:
            raise GatewayError(f"malformed {category.value} log row: {e}") from e

    def fetch_exercises(self) -> list[Exercise]:
        rows = self._run("fetch exercises", self.exercises.fetch_all_exercises)
        return _parse_many(Exercise, rows)

    def create_exercise(self, exercise: ExerciseInput) -> Exercise:
        row = self._run("create exercise", self.exercises.create, **exercise.model_dump())
        return _parse_one(Exercise, row)

    def update_exercise(self, exercise_id: str, changes: dict[str, Any]) -> Exercise:
        row = self._run(
            "update exercise", self.exercises.update, exercise_id, **_serialize(changes)
        )
        return _parse_one(Exercise, row)

    def delete_exercise(self, exercise_id: str) -> bool:
        return self._run("delete exercise", self.exercises.delete, exercise_id)

    def fetch_categories(self) -> list[Category]:
        rows = self._run("fetch categories", self.categories.fetch_all_categories)
        return _parse_many(Category, rows)

    def create_category(self, category: CategoryInput) -> Category:
        row = self._run("create category", self.categories.create, category.name)
        return _parse_one(Category, row)


def build_gateway(settings) -> Gateway:
    """Pick the remote gateway when credentials are configured."""
    if settings.api_url and settings.api_key:
        return RestGateway(settings.api_url, settings.api_key, settings.user_id)
    logger.warning(
        "No backend credentials configured; using local database %s", settings.db_path
    )
    return LocalGateway(settings.db_path, settings.user_id, settings.suggestion_days)
