"""Local workout store.

State lives in an immutable :class:`WorkoutState` snapshot. Every mutation is a
pure function ``(state, ...) -> state`` so it can be tested without a UI or a
gateway; :class:`WorkoutStore` only holds the current snapshot and tells
subscribers when it changes.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

from models import (
    Category,
    Exercise,
    ExerciseCategory,
    ExerciseRecord,
    MobilityExercise,
    RunningSession,
    StrengthExercise,
    SuggestedWorkout,
    WorkoutEntry,
    WorkoutPreset,
    merge_entry,
)


_LOG_FIELDS = {
    ExerciseCategory.STRENGTH: "strength_exercises",
    ExerciseCategory.MOBILITY: "mobility_exercises",
    ExerciseCategory.RUNNING: "running_sessions",
}


@dataclass(frozen=True)
class WorkoutState:
    workouts: tuple[WorkoutEntry, ...] = ()
    presets: tuple[WorkoutPreset, ...] = ()
    suggestions: tuple[SuggestedWorkout, ...] = ()
    strength_exercises: tuple[StrengthExercise, ...] = ()
    mobility_exercises: tuple[MobilityExercise, ...] = ()
    running_sessions: tuple[RunningSession, ...] = ()
    exercises: tuple[Exercise, ...] = ()
    categories: tuple[Category, ...] = ()
    selected_date: datetime.date = field(default_factory=datetime.date.today)

    def logs(self, category: ExerciseCategory) -> tuple[ExerciseRecord, ...]:
        return getattr(self, _LOG_FIELDS[ExerciseCategory(category)])


# selection queries


def find_workout(state: WorkoutState, workout_id: str) -> Optional[WorkoutEntry]:
    return next((w for w in state.workouts if w.id == workout_id), None)


def find_preset(state: WorkoutState, preset_id: str) -> Optional[WorkoutPreset]:
    return next((p for p in state.presets if p.id == preset_id), None)


def find_suggestion(
    state: WorkoutState, suggestion_id: str
) -> Optional[SuggestedWorkout]:
    return next((s for s in state.suggestions if s.id == suggestion_id), None)


def actual_workout_for_date(
    state: WorkoutState, day: datetime.date
) -> Optional[WorkoutEntry]:
    return next((w for w in state.workouts if w.date == day), None)


def workout_for_date(state: WorkoutState, day: datetime.date) -> Optional[WorkoutEntry]:
    """Actual workout for ``day`` if any, otherwise the suggestion for it."""
    actual = actual_workout_for_date(state, day)
    if actual is not None:
        return actual
    return next((s for s in state.suggestions if s.date == day), None)


def workouts_between(
    state: WorkoutState, start: datetime.date, end: datetime.date
) -> list[WorkoutEntry]:
    """Calendar view for ``start``..``end`` inclusive, one entry per day at most."""
    result: list[WorkoutEntry] = []
    day = start
    while day <= end:
        entry = workout_for_date(state, day)
        if entry is not None:
            result.append(entry)
        day += datetime.timedelta(days=1)
    return result


def find_exercise(state: WorkoutState, exercise_id: str) -> Optional[Exercise]:
    return next((e for e in state.exercises if e.id == exercise_id), None)


def exercises_by_category(state: WorkoutState, category_id: str) -> list[Exercise]:
    return [e for e in state.exercises if e.category_id == category_id]


def find_log(
    state: WorkoutState, category: ExerciseCategory, log_id: str
) -> Optional[ExerciseRecord]:
    return next((r for r in state.logs(category) if r.id == log_id), None)


# reducers


def set_workouts(state: WorkoutState, workouts) -> WorkoutState:
    return replace(state, workouts=tuple(workouts))


def set_presets(state: WorkoutState, presets) -> WorkoutState:
    return replace(state, presets=tuple(presets))


def set_suggestions(state: WorkoutState, suggestions) -> WorkoutState:
    return replace(state, suggestions=tuple(suggestions))


def select_date(state: WorkoutState, day: datetime.date) -> WorkoutState:
    return replace(state, selected_date=day)


def add_workout(state: WorkoutState, entry: WorkoutEntry) -> WorkoutState:
    return replace(state, workouts=state.workouts + (entry,))


def replace_workout(state: WorkoutState, entry: WorkoutEntry) -> WorkoutState:
    return replace(
        state,
        workouts=tuple(entry if w.id == entry.id else w for w in state.workouts),
    )


def merge_workout(
    state: WorkoutState, workout_id: str, changes: dict[str, Any]
) -> WorkoutState:
    return replace(
        state,
        workouts=tuple(
            merge_entry(w, changes) if w.id == workout_id else w
            for w in state.workouts
        ),
    )


def remove_workout(state: WorkoutState, workout_id: str) -> WorkoutState:
    return replace(
        state, workouts=tuple(w for w in state.workouts if w.id != workout_id)
    )


def move_suggestion(
    state: WorkoutState, suggestion_id: str, entry: WorkoutEntry
) -> WorkoutState:
    """Drop a suggestion and append its persisted counterpart in one step."""
    return replace(
        state,
        suggestions=tuple(s for s in state.suggestions if s.id != suggestion_id),
        workouts=tuple(w for w in state.workouts if w.id != entry.id) + (entry,),
    )


def add_preset(state: WorkoutState, preset: WorkoutPreset) -> WorkoutState:
    return replace(state, presets=state.presets + (preset,))


def replace_preset(state: WorkoutState, preset: WorkoutPreset) -> WorkoutState:
    return replace(
        state,
        presets=tuple(preset if p.id == preset.id else p for p in state.presets),
    )


def remove_preset(state: WorkoutState, preset_id: str) -> WorkoutState:
    return replace(state, presets=tuple(p for p in state.presets if p.id != preset_id))


def set_logs(state: WorkoutState, category: ExerciseCategory, records) -> WorkoutState:
    return replace(state, **{_LOG_FIELDS[ExerciseCategory(category)]: tuple(records)})


def add_log(
    state: WorkoutState, category: ExerciseCategory, record: ExerciseRecord
) -> WorkoutState:
    return set_logs(state, category, state.logs(category) + (record,))


def update_log(
    state: WorkoutState,
    category: ExerciseCategory,
    log_id: str,
    changes: dict[str, Any],
) -> WorkoutState:
    changes = {k: v for k, v in changes.items() if k != "id"}
    records = []
    for record in state.logs(category):
        if record.id == log_id:
            record = type(record).model_validate({**record.model_dump(), **changes})
        records.append(record)
    return set_logs(state, category, records)


def remove_log(
    state: WorkoutState, category: ExerciseCategory, log_id: str
) -> WorkoutState:
    return set_logs(
        state, category, [r for r in state.logs(category) if r.id != log_id]
    )


def set_library(state: WorkoutState, exercises, categories) -> WorkoutState:
    return replace(state, exercises=tuple(exercises), categories=tuple(categories))


def add_exercise(state: WorkoutState, exercise: Exercise) -> WorkoutState:
    return replace(state, exercises=state.exercises + (exercise,))


def replace_exercise(state: WorkoutState, exercise: Exercise) -> WorkoutState:
    return replace(
        state,
        exercises=tuple(
            exercise if e.id == exercise.id else e for e in state.exercises
        ),
    )


def remove_exercise(state: WorkoutState, exercise_id: str) -> WorkoutState:
    return replace(
        state, exercises=tuple(e for e in state.exercises if e.id != exercise_id)
    )


def add_category(state: WorkoutState, category: Category) -> WorkoutState:
    return replace(state, categories=state.categories + (category,))


class WorkoutStore:
    """Holds the current snapshot; the only mutable piece of the store."""

    def __init__(self, state: Optional[WorkoutState] = None) -> None:
        self.state = state or WorkoutState()
        self._listeners: list[Callable[[WorkoutState], None]] = []

    def subscribe(self, listener: Callable[[WorkoutState], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, reducer: Callable[..., WorkoutState], *args) -> WorkoutState:
        new_state = reducer(self.state, *args)
        if new_state is not self.state:
            self.state = new_state
            for listener in list(self._listeners):
                listener(new_state)
        return self.state
