from __future__ import annotations

import asyncio
import datetime
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

import store as reducers
from gateway import Gateway, GatewayError
from models import (
    Category,
    CategoryInput,
    Exercise,
    ExerciseCategory,
    ExerciseInput,
    ExerciseRecord,
    ExerciseUpdate,
    PresetInput,
    PresetUpdate,
    SuggestedWorkout,
    WorkoutEntry,
    WorkoutInput,
    WorkoutPreset,
    WorkoutUpdate,
    new_id,
    parse_date,
    parse_log,
    with_day_label,
)
from notifications import NotificationCenter, Severity
from sample_data import (
    SAMPLE_CATEGORIES,
    SAMPLE_EXERCISES,
    SAMPLE_PRESETS,
    default_logs,
    generate_initial_workouts,
    generate_suggested_workouts,
    start_of_week,
    workout_suggestion,
)
from store import WorkoutState, WorkoutStore

logger = logging.getLogger(__name__)

DateLike = Union[datetime.date, str]


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a mutation.

    ``synced`` is False when the change only exists in the local store (the
    gateway failed and the offline fallback kicked in) or when nothing was
    changed at all (``entity`` is then None).
    """

    entity: Any = None
    synced: bool = False


class WorkoutService:
    """Keeps the local workout store in step with the gateway."""

    def __init__(
        self,
        gateway: Gateway,
        workout_store: Optional[WorkoutStore] = None,
        notifications: Optional[NotificationCenter] = None,
        *,
        offline_fallback: bool = True,
        suggestion_days: int = 14,
        week_starts_on: int = 0,
    ) -> None:
        self.gateway = gateway
        self.store = workout_store or WorkoutStore()
        self.notifications = notifications or NotificationCenter()
        self.offline_fallback = offline_fallback
        self.suggestion_days = suggestion_days
        self.week_starts_on = week_starts_on

    @property
    def state(self) -> WorkoutState:
        return self.store.state

    # ------------------------------------------------------------------
    # loading

    async def load(self) -> WorkoutState:
        """Populate the store from the gateway, falling back per portion."""
        workouts, presets, suggestions = await asyncio.gather(
            asyncio.to_thread(self.gateway.fetch_workouts),
            asyncio.to_thread(self.gateway.fetch_workout_presets),
            asyncio.to_thread(self.gateway.fetch_suggested_workouts),
            return_exceptions=True,
        )

        if self._fetch_failed("workouts", workouts):
            workouts = generate_initial_workouts()
            self.notifications.notify(
                "Offline Mode",
                "Using sample data - database connection unavailable",
                Severity.WARNING,
            )
        self.store.dispatch(reducers.set_workouts, workouts)

        if self._fetch_failed("presets", presets):
            presets = list(SAMPLE_PRESETS)
            self.notifications.notify(
                "Using sample templates",
                "Database connection unavailable. Using sample data.",
                Severity.WARNING,
            )
        elif not presets:
            logger.info("No presets found, using samples")
            presets = list(SAMPLE_PRESETS)
        self.store.dispatch(reducers.set_presets, presets)

        if self._fetch_failed("suggestions", suggestions):
            suggestions = generate_suggested_workouts(days=self.suggestion_days)
        self.store.dispatch(reducers.set_suggestions, suggestions)

        await self.load_exercise_logs()
        await self.load_exercise_library()
        return self.state

    async def load_exercise_logs(self) -> None:
        categories = list(ExerciseCategory)
        results = await asyncio.gather(
            *(
                asyncio.to_thread(self.gateway.fetch_exercise_logs, category)
                for category in categories
            ),
            return_exceptions=True,
        )
        for category, records in zip(categories, results):
            if self._fetch_failed(f"{category.value} logs", records) or not records:
                records = default_logs(category)
            self.store.dispatch(reducers.set_logs, category, records)

    async def load_exercise_library(self) -> None:
        """Load exercises and categories; a gap in either uses both samples."""
        exercises, categories = await asyncio.gather(
            asyncio.to_thread(self.gateway.fetch_exercises),
            asyncio.to_thread(self.gateway.fetch_categories),
            return_exceptions=True,
        )
        failed = self._fetch_failed("exercises", exercises)
        failed = self._fetch_failed("categories", categories) or failed
        if failed or not exercises or not categories:
            logger.info("Using sample exercise library")
            exercises, categories = SAMPLE_EXERCISES, SAMPLE_CATEGORIES
        self.store.dispatch(reducers.set_library, exercises, categories)

    def refresh(self) -> WorkoutState:
        return asyncio.run(self.load())

    @staticmethod
    def _fetch_failed(what: str, result: Any) -> bool:
        if isinstance(result, GatewayError):
            logger.warning("Error fetching %s: %s", what, result)
            return True
        if isinstance(result, BaseException):
            raise result
        return False

    # ------------------------------------------------------------------
    # gateway helpers

    @staticmethod
    def _attempt(action: str, func, *args):
        try:
            return func(*args), None
        except GatewayError as e:
            logger.warning("%s failed: %s", action, e)
            return None, e

    def _degraded(self, title: str, error: GatewayError) -> None:
        self.notifications.notify(
            title,
            f"Saved locally only, the backend is unavailable ({error})",
            Severity.WARNING,
        )

    def _failed(self, title: str, error: GatewayError) -> SyncResult:
        self.notifications.notify(title, str(error), Severity.ERROR)
        return SyncResult()

    @staticmethod
    def _workout_input(workout) -> WorkoutInput:
        if isinstance(workout, WorkoutEntry):
            return workout.to_input()
        if isinstance(workout, WorkoutInput):
            return workout
        return WorkoutInput.model_validate(workout)

    @staticmethod
    def _changes(model, changes) -> dict[str, Any]:
        if changes is None:
            return {}
        if not isinstance(changes, model):
            changes = model.model_validate(changes)
        return changes.changes()

    def _create(self, workout: WorkoutInput, title: str, error_title: str) -> SyncResult:
        created, error = self._attempt(
            "create workout", self.gateway.create_workout, workout
        )
        if error is None:
            self.store.dispatch(reducers.add_workout, created)
            self.notifications.notify(
                title, f"{created.title} on {created.date.isoformat()}", Severity.SUCCESS
            )
            return SyncResult(created, True)
        if not self.offline_fallback:
            return self._failed(error_title, error)
        entry = WorkoutEntry(id=new_id(), **workout.model_dump())
        self.store.dispatch(reducers.add_workout, entry)
        self._degraded(title, error)
        return SyncResult(entry, False)

    def _update(
        self, workout_id: str, changes: dict[str, Any], title: str, error_title: str
    ) -> SyncResult:
        changes = with_day_label(changes)
        updated, error = self._attempt(
            "update workout", self.gateway.update_workout, workout_id, changes
        )
        if error is None:
            self.store.dispatch(reducers.replace_workout, updated)
            self.notifications.notify(title, updated.title, Severity.SUCCESS)
            return SyncResult(updated, True)
        if not self.offline_fallback:
            return self._failed(error_title, error)
        self.store.dispatch(reducers.merge_workout, workout_id, changes)
        self._degraded(title, error)
        return SyncResult(reducers.find_workout(self.state, workout_id), False)

    def _sync_create(self, what: str, call, payload, model, add) -> SyncResult:
        """Create a record that carries a ``name``; falls back like ``_create``."""
        created, error = self._attempt(f"create {what}", call, payload)
        title = f"{what.capitalize()} created"
        if error is None:
            self.store.dispatch(add, created)
            self.notifications.notify(title, created.name, Severity.SUCCESS)
            return SyncResult(created, True)
        if not self.offline_fallback:
            return self._failed(f"Error creating {what}", error)
        local = model(id=new_id(), **payload.model_dump())
        self.store.dispatch(add, local)
        self._degraded(title, error)
        return SyncResult(local, False)

    def _sync_update(
        self, what: str, call, current, changes: dict[str, Any], replace
    ) -> SyncResult:
        if not changes:
            return SyncResult(current, True)
        updated, error = self._attempt(f"update {what}", call, current.id, changes)
        title = f"{what.capitalize()} updated"
        if error is None:
            self.store.dispatch(replace, updated)
            self.notifications.notify(title, updated.name, Severity.SUCCESS)
            return SyncResult(updated, True)
        if not self.offline_fallback:
            return self._failed(f"Error updating {what}", error)
        local = type(current).model_validate({**current.model_dump(), **changes})
        self.store.dispatch(replace, local)
        self._degraded(title, error)
        return SyncResult(local, False)

    def _sync_delete(
        self, what: str, call, entity_id: str, existing, remove, description=None
    ) -> SyncResult:
        _deleted, error = self._attempt(f"delete {what}", call, entity_id)
        if error is not None and not self.offline_fallback:
            return self._failed(f"Error deleting {what}", error)
        self.store.dispatch(remove, entity_id)
        title = f"{what.capitalize()} deleted"
        if existing is None:
            # no toast for ids the store never had
            logger.info("Delete for unknown %s %s", what, entity_id)
        elif error is not None:
            self._degraded(title, error)
        elif description:
            self.notifications.notify(title, description, Severity.SUCCESS)
        return SyncResult(existing, error is None)

    # ------------------------------------------------------------------
    # workouts

    def add_workout(self, workout) -> SyncResult:
        return self._create(
            self._workout_input(workout), "Workout added", "Error creating workout"
        )

    def update_workout(self, workout_id: str, changes) -> SyncResult:
        changes = self._changes(WorkoutUpdate, changes)
        current = reducers.find_workout(self.state, workout_id)
        if current is None:
            logger.warning("Ignoring update for unknown workout %s", workout_id)
            return SyncResult()
        if not changes:
            return SyncResult(current, True)
        return self._update(
            workout_id, changes, "Workout updated", "Error updating workout"
        )

    def toggle_completed(self, workout_id: str) -> SyncResult:
        current = reducers.find_workout(self.state, workout_id)
        if current is None:
            logger.warning("Ignoring toggle for unknown workout %s", workout_id)
            return SyncResult()
        return self.update_workout(workout_id, {"completed": not current.completed})

    def delete_workout(self, workout_id: str) -> SyncResult:
        return self._sync_delete(
            "workout",
            self.gateway.delete_workout,
            workout_id,
            reducers.find_workout(self.state, workout_id),
            reducers.remove_workout,
            "Workout deleted successfully",
        )

    def apply_preset_to_date(self, preset_id: str, date: DateLike) -> Optional[SyncResult]:
        """Upsert a workout for ``date`` built from a preset.

        An actual workout already on that date is overwritten with the
        preset's fields; otherwise a new workout is created. Unknown presets
        are ignored and return None.
        """
        preset = reducers.find_preset(self.state, preset_id)
        if preset is None:
            logger.warning("Ignoring unknown preset %s", preset_id)
            return None
        day = parse_date(date)
        fields = {
            "title": preset.name,
            "type": preset.type,
            "completed": False,
            "note": preset.description,
            "exercises": list(preset.exercises),
        }
        existing = reducers.actual_workout_for_date(self.state, day)
        if existing is not None:
            return self._update(
                existing.id,
                WorkoutUpdate(**fields).changes(),
                "Preset applied",
                "Error applying preset",
            )
        return self._create(
            WorkoutInput(date=day, **fields), "Preset applied", "Error applying preset"
        )

    def convert_suggested_to_actual(
        self, suggestion_id: str, updates=None
    ) -> Optional[SyncResult]:
        """Persist a suggested workout, moving it out of the suggestions."""
        suggestion = reducers.find_suggestion(self.state, suggestion_id)
        if suggestion is None:
            logger.warning("Ignoring unknown suggestion %s", suggestion_id)
            return None
        changes = self._changes(WorkoutUpdate, updates)
        data = suggestion.to_input().model_dump()
        data.update(changes)
        if "date" in changes and "day" not in changes:
            data["day"] = ""
        workout = WorkoutInput.model_validate(data)

        created, error = self._attempt(
            "create workout", self.gateway.create_workout, workout
        )
        if error is None:
            self.store.dispatch(reducers.move_suggestion, suggestion_id, created)
            self.notifications.notify(
                "Workout added", f"{created.title} saved to your calendar", Severity.SUCCESS
            )
            return SyncResult(created, True)
        if not self.offline_fallback:
            return self._failed("Error saving suggested workout", error)
        entry = WorkoutEntry(id=new_id(), **workout.model_dump())
        self.store.dispatch(reducers.move_suggestion, suggestion_id, entry)
        self._degraded("Workout added", error)
        return SyncResult(entry, False)

    # ------------------------------------------------------------------
    # presets

    def create_preset(self, preset) -> SyncResult:
        if not isinstance(preset, PresetInput):
            preset = PresetInput.model_validate(preset)
        elif isinstance(preset, WorkoutPreset):
            preset = PresetInput(**preset.model_dump(exclude={"id"}))
        return self._sync_create(
            "template",
            self.gateway.create_preset,
            preset,
            WorkoutPreset,
            reducers.add_preset,
        )

    def update_preset(self, preset_id: str, changes) -> SyncResult:
        changes = self._changes(PresetUpdate, changes)
        current = reducers.find_preset(self.state, preset_id)
        if current is None:
            logger.warning("Ignoring update for unknown preset %s", preset_id)
            return SyncResult()
        return self._sync_update(
            "template", self.gateway.update_preset, current, changes, reducers.replace_preset
        )

    def delete_preset(self, preset_id: str) -> SyncResult:
        return self._sync_delete(
            "template",
            self.gateway.delete_preset,
            preset_id,
            reducers.find_preset(self.state, preset_id),
            reducers.remove_preset,
        )

    def get_preset(self, preset_id: str) -> Optional[WorkoutPreset]:
        return reducers.find_preset(self.state, preset_id)

    # ------------------------------------------------------------------
    # exercise library

    def add_exercise(self, exercise) -> SyncResult:
        if isinstance(exercise, Exercise):
            exercise = ExerciseInput(
                **exercise.model_dump(exclude={"id", "created_at", "updated_at"})
            )
        elif not isinstance(exercise, ExerciseInput):
            exercise = ExerciseInput.model_validate(exercise)
        return self._sync_create(
            "exercise",
            self.gateway.create_exercise,
            exercise,
            Exercise,
            reducers.add_exercise,
        )

    def update_exercise(self, exercise_id: str, changes) -> SyncResult:
        changes = self._changes(ExerciseUpdate, changes)
        current = reducers.find_exercise(self.state, exercise_id)
        if current is None:
            logger.warning("Ignoring update for unknown exercise %s", exercise_id)
            return SyncResult()
        return self._sync_update(
            "exercise",
            self.gateway.update_exercise,
            current,
            changes,
            reducers.replace_exercise,
        )

    def delete_exercise(self, exercise_id: str) -> SyncResult:
        return self._sync_delete(
            "exercise",
            self.gateway.delete_exercise,
            exercise_id,
            reducers.find_exercise(self.state, exercise_id),
            reducers.remove_exercise,
        )

    def create_category(self, category) -> SyncResult:
        if isinstance(category, str):
            category = CategoryInput(name=category)
        elif isinstance(category, Category):
            category = CategoryInput(name=category.name)
        elif not isinstance(category, CategoryInput):
            category = CategoryInput.model_validate(category)
        return self._sync_create(
            "category",
            self.gateway.create_category,
            category,
            Category,
            reducers.add_category,
        )

    def get_exercise(self, exercise_id: str) -> Optional[Exercise]:
        return reducers.find_exercise(self.state, exercise_id)

    def exercises_by_category(self, category_id: str) -> list[Exercise]:
        return reducers.exercises_by_category(self.state, category_id)

    # ------------------------------------------------------------------
    # exercise logs

    def add_exercise_log(self, category: ExerciseCategory, record) -> ExerciseRecord:
        category = ExerciseCategory(category)
        if not isinstance(record, ExerciseRecord):
            record = parse_log(category, record)
        self.store.dispatch(reducers.add_log, category, record)
        return record

    def update_exercise_log(
        self, category: ExerciseCategory, log_id: str, changes: dict[str, Any]
    ) -> Optional[ExerciseRecord]:
        category = ExerciseCategory(category)
        if reducers.find_log(self.state, category, log_id) is None:
            logger.warning("Ignoring update for unknown %s log %s", category.value, log_id)
            return None
        self.store.dispatch(reducers.update_log, category, log_id, changes)
        return reducers.find_log(self.state, category, log_id)

    def delete_exercise_log(self, category: ExerciseCategory, log_id: str) -> bool:
        category = ExerciseCategory(category)
        existed = reducers.find_log(self.state, category, log_id) is not None
        self.store.dispatch(reducers.remove_log, category, log_id)
        return existed

    # ------------------------------------------------------------------
    # queries

    def select_date(self, date: DateLike) -> datetime.date:
        day = parse_date(date)
        self.store.dispatch(reducers.select_date, day)
        return day

    def get_workout_for_date(self, date: DateLike) -> Optional[WorkoutEntry]:
        return reducers.workout_for_date(self.state, parse_date(date))

    def workouts_between(self, start: DateLike, end: DateLike) -> list[WorkoutEntry]:
        return reducers.workouts_between(self.state, parse_date(start), parse_date(end))

    def workouts_for_week(self, date: DateLike) -> list[WorkoutEntry]:
        start = start_of_week(parse_date(date), self.week_starts_on)
        return self.workouts_between(start, start + datetime.timedelta(days=6))

    def get_workout_suggestion(self, day_of_week: str) -> str:
        return workout_suggestion(day_of_week)

    def get_workout(self, workout_id: str) -> Optional[WorkoutEntry]:
        return reducers.find_workout(self.state, workout_id)

    def suggestion_for(self, suggestion_id: str) -> Optional[SuggestedWorkout]:
        return reducers.find_suggestion(self.state, suggestion_id)
