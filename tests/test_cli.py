import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from cli import format_entry, main, seed_local_db
from config import load_settings
from gateway import LocalGateway
from models import ExerciseCategory, SuggestedWorkout, WorkoutEntry


def test_seed_local_db_is_idempotent(tmp_path, capsys):
    db_path = str(tmp_path / "seed.db")
    seed_local_db(db_path)
    seed_local_db(db_path)
    out = capsys.readouterr().out
    assert "Seed data inserted" in out
    assert "already contains workouts" in out

    gw = LocalGateway(db_path)
    assert len(gw.fetch_workouts()) == 28
    assert [p.name for p in gw.fetch_workout_presets()][0] == "Upper Body Strength"
    assert len(gw.fetch_exercise_logs(ExerciseCategory.RUNNING)) == 2
    assert len(gw.fetch_exercises()) == 6
    assert len(gw.fetch_categories()) == 4


def test_format_entry():
    done = WorkoutEntry(
        id="w1", date="2024-06-03", title="Push Day", type="Strength", completed=True
    )
    line = format_entry(done)
    assert line.startswith("2024-06-03 Monday")
    assert "[x]" in line
    assert line.endswith("Push Day")

    hint = SuggestedWorkout(id="s1", date="2024-06-04", title="Cardio", type="cardio")
    assert format_entry(hint).endswith("(suggested)")


def test_configure_writes_settings(tmp_path, capsys):
    path = str(tmp_path / "settings.yaml")
    main(["--config", path, "configure", "--db-path", "cal.db", "--user-id", "u1"])
    assert "local database" in capsys.readouterr().out
    settings = load_settings(path)
    assert settings.db_path == "cal.db"
    assert settings.user_id == "u1"


def test_configure_rejects_invalid_values(tmp_path):
    path = str(tmp_path / "settings.yaml")
    with pytest.raises(ValueError):
        main(["--config", path, "configure", "--log-level", "chatty"])
    assert not os.path.exists(path)


def test_exercises_grouped_by_category(tmp_path, capsys):
    path = str(tmp_path / "settings.yaml")
    db_path = str(tmp_path / "cal.db")
    main(["--config", path, "configure", "--db-path", db_path])
    seed_local_db(db_path)
    capsys.readouterr()

    main(["--config", path, "exercises"])
    lines = capsys.readouterr().out.splitlines()
    lower = lines.index("Lower Body")
    assert lines[lower + 1].endswith("Deadlift (3x5)")
    assert lines[lower + 2].endswith("Squat (3x8)")
    assert lines[lines.index("Cardio") + 1].endswith("Running")
