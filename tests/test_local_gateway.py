import os
import sqlite3
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import ExerciseLogRepository, WorkoutRepository
from gateway import GatewayError, LocalGateway
from models import (
    CategoryInput,
    ExerciseCategory,
    ExerciseInput,
    PresetInput,
    WorkoutInput,
    WorkoutType,
)


def test_workout_round_trip(tmp_path):
    gw = LocalGateway(str(tmp_path / "cal.db"))
    created = gw.create_workout(
        WorkoutInput(
            date="2024-06-03",
            title="Push Day",
            type="Strength",
            exercises=[{"exercise": "Bench Press", "sets": "4", "reps": "8"}],
        )
    )
    assert created.id
    assert created.created_at is not None
    assert created.day == "Monday"

    updated = gw.update_workout(created.id, {"completed": True, "type": WorkoutType.MOBILITY})
    assert updated.completed is True
    assert updated.type == WorkoutType.MOBILITY
    assert updated.exercises[0]["exercise"] == "Bench Press"

    fetched = gw.fetch_workouts()
    assert [w.id for w in fetched] == [created.id]

    assert gw.delete_workout(created.id) is True
    assert gw.delete_workout(created.id) is False
    assert gw.fetch_workouts() == []


def test_update_missing_workout_raises_gateway_error(tmp_path):
    gw = LocalGateway(str(tmp_path / "cal.db"))
    with pytest.raises(GatewayError):
        gw.update_workout("missing", {"title": "x"})


def test_workouts_scoped_to_user(tmp_path):
    db_path = str(tmp_path / "cal.db")
    alice = LocalGateway(db_path, user_id="alice")
    bob = LocalGateway(db_path, user_id="bob")
    alice.create_workout(WorkoutInput(date="2024-06-03", title="A", type="Running"))
    bob.create_workout(WorkoutInput(date="2024-06-03", title="B", type="Running"))
    assert [w.title for w in alice.fetch_workouts()] == ["A"]


def test_presets_keep_order(tmp_path):
    gw = LocalGateway(str(tmp_path / "cal.db"))
    first = gw.create_preset(PresetInput(name="Upper", type="strength"))
    second = gw.create_preset(PresetInput(name="Hips", type="Mobility", description="90/90"))
    assert [p.name for p in gw.fetch_workout_presets()] == ["Upper", "Hips"]
    renamed = gw.update_preset(first.id, {"name": "Upper Body"})
    assert renamed.name == "Upper Body"
    assert gw.delete_preset(second.id) is True
    assert [p.id for p in gw.fetch_workout_presets()] == [first.id]


def test_exercise_logs(tmp_path):
    db_path = str(tmp_path / "cal.db")
    gw = LocalGateway(db_path)
    logs = ExerciseLogRepository(db_path)
    logs.add("running", {"type": "Long Run", "distance": "10"})
    logs.add("strength", {"exercise": "Squat", "sets": "5", "reps": "5"})
    runs = gw.fetch_exercise_logs(ExerciseCategory.RUNNING)
    assert len(runs) == 1
    assert runs[0].distance == "10"
    assert gw.fetch_exercise_logs("mobility") == []


def test_suggestions_are_generated(tmp_path):
    gw = LocalGateway(str(tmp_path / "cal.db"), suggestion_days=7)
    suggestions = gw.fetch_suggested_workouts()
    assert len(suggestions) == 7
    assert all(s.is_suggested for s in suggestions)
    assert len({s.day for s in suggestions}) == 7


def test_schema_upgrade_keeps_rows(tmp_path):
    db_path = str(tmp_path / "old.db")
    conn = sqlite3.connect(db_path)
    conn.execute(
        "CREATE TABLE workouts (id TEXT PRIMARY KEY, date TEXT NOT NULL, title TEXT NOT NULL, type TEXT NOT NULL);"
    )
    conn.execute("INSERT INTO workouts VALUES ('w1', '2024-06-03', 'Old', 'Strength');")
    conn.commit()
    conn.close()

    repo = WorkoutRepository(db_path)
    rows = repo.fetch_all_workouts()
    assert rows[0]["id"] == "w1"
    assert rows[0]["completed"] is False
    assert rows[0]["exercises"] == []


def test_exercise_library(tmp_path):
    gw = LocalGateway(str(tmp_path / "cal.db"))
    lower = gw.create_category(CategoryInput(name="Lower Body"))
    gw.create_category(CategoryInput(name="Core"))
    assert [c.name for c in gw.fetch_categories()] == ["Core", "Lower Body"]

    squat = gw.create_exercise(
        ExerciseInput(name="Squat", category_id=lower.id, default_sets=3, default_weight=185)
    )
    assert squat.default_reps is None
    assert squat.default_weight == 185.0

    updated = gw.update_exercise(squat.id, {"default_reps": 8})
    assert updated.default_reps == 8
    assert updated.default_sets == 3

    assert [e.id for e in gw.fetch_exercises()] == [squat.id]
    assert gw.delete_exercise(squat.id) is True
    assert gw.fetch_exercises() == []
    with pytest.raises(GatewayError):
        gw.update_exercise(squat.id, {"name": "Back Squat"})


def test_duplicate_category_raises_gateway_error(tmp_path):
    gw = LocalGateway(str(tmp_path / "cal.db"))
    gw.create_category(CategoryInput(name="Core"))
    with pytest.raises(GatewayError):
        gw.create_category(CategoryInput(name="Core"))
