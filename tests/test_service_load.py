import asyncio
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from fake_gateway import FakeGateway
from models import Category, Exercise, ExerciseCategory, StrengthExercise, SuggestedWorkout, WorkoutEntry, WorkoutPreset
from notifications import NotificationCenter, Severity
from sample_data import (
    DEFAULT_MOBILITY_EXERCISES,
    SAMPLE_CATEGORIES,
    SAMPLE_EXERCISES,
    SAMPLE_PRESETS,
)
from workout_service import WorkoutService

LIVE_WORKOUT = WorkoutEntry(id="w1", date="2024-06-03", title="Live", type="Strength")
LIVE_PRESET = WorkoutPreset(id="p1", name="Live preset", type="Running")
LIVE_SUGGESTION = SuggestedWorkout(id="s1", date="2024-06-04", title="Hint", type="Cardio")


def make_gateway(**kw):
    return FakeGateway(
        workouts=[LIVE_WORKOUT],
        presets=[LIVE_PRESET],
        suggestions=[LIVE_SUGGESTION],
        logs={ExerciseCategory.STRENGTH: [StrengthExercise(id="l1", exercise="Squat", sets="5", reps="5")]},
        **kw,
    )


def test_load_uses_live_data():
    notifications = NotificationCenter()
    service = WorkoutService(make_gateway(), notifications=notifications)
    state = asyncio.run(service.load())
    assert state.workouts == (LIVE_WORKOUT,)
    assert state.presets == (LIVE_PRESET,)
    assert state.suggestions == (LIVE_SUGGESTION,)
    assert [r.id for r in state.strength_exercises] == ["l1"]
    assert state.mobility_exercises == tuple(DEFAULT_MOBILITY_EXERCISES)
    assert notifications.history == []


def test_partial_failure_only_replaces_failing_portion():
    notifications = NotificationCenter()
    service = WorkoutService(
        make_gateway(failing={"fetch_workouts"}), notifications=notifications
    )
    state = asyncio.run(service.load())
    assert LIVE_WORKOUT not in state.workouts
    assert len(state.workouts) == 28
    assert state.presets == (LIVE_PRESET,)
    assert state.suggestions == (LIVE_SUGGESTION,)
    assert [n.title for n in notifications.history] == ["Offline Mode"]
    assert notifications.history[0].severity == Severity.WARNING


def test_everything_failing_falls_back_to_samples():
    gateway = make_gateway(
        failing={
            "fetch_workouts",
            "fetch_workout_presets",
            "fetch_suggested_workouts",
            "fetch_exercise_logs",
        }
    )
    service = WorkoutService(gateway, suggestion_days=7)
    state = service.refresh()
    assert state.presets == tuple(SAMPLE_PRESETS)
    assert len(state.suggestions) == 7
    assert len(state.strength_exercises) == 14


def test_empty_preset_library_uses_samples():
    gateway = make_gateway()
    gateway.presets = {}
    service = WorkoutService(gateway)
    state = asyncio.run(service.load())
    assert state.presets == tuple(SAMPLE_PRESETS)


def test_unexpected_errors_propagate():
    class Broken(FakeGateway):
        def fetch_workout_presets(self):
            raise RuntimeError("bug")

    service = WorkoutService(Broken())
    try:
        asyncio.run(service.load())
    except RuntimeError as e:
        assert str(e) == "bug"
    else:
        raise AssertionError("RuntimeError not raised")


LIVE_EXERCISE = Exercise(id="e1", name="Goblet Squat", category_id="c1", default_sets=3)
LIVE_CATEGORY = Category(id="c1", name="Legs")


def test_live_exercise_library():
    gateway = make_gateway(exercises=[LIVE_EXERCISE], categories=[LIVE_CATEGORY])
    state = WorkoutService(gateway).refresh()
    assert state.exercises == (LIVE_EXERCISE,)
    assert state.categories == (LIVE_CATEGORY,)


def test_library_uses_samples_when_either_half_is_missing():
    # the library is replaced as a whole
    gateway = make_gateway(exercises=[LIVE_EXERCISE])
    state = WorkoutService(gateway).refresh()
    assert state.exercises == tuple(SAMPLE_EXERCISES)
    assert state.categories == tuple(SAMPLE_CATEGORIES)

    gateway = make_gateway(
        exercises=[LIVE_EXERCISE], categories=[LIVE_CATEGORY], failing={"fetch_categories"}
    )
    notifications = NotificationCenter()
    state = WorkoutService(gateway, notifications=notifications).refresh()
    assert state.exercises == tuple(SAMPLE_EXERCISES)
    assert notifications.history == []
