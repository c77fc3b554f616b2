import asyncio
import datetime
import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from gateway import LocalGateway
from models import WorkoutType
from notifications import NotificationCenter
from sample_data import SAMPLE_EXERCISES
from workout_service import WorkoutService


@pytest.fixture
def gateway(tmp_path):
    return LocalGateway(str(tmp_path / "cal.db"), suggestion_days=7)


@pytest.fixture
def service(gateway):
    service = WorkoutService(gateway, notifications=NotificationCenter())
    asyncio.run(service.load())
    return service


def test_moving_a_workout_relabels_the_stored_row(service, gateway):
    created = service.add_workout(
        {"date": "2024-06-03", "title": "Push Day", "type": "Strength"}
    ).entity
    assert created.day == "Monday"

    result = service.update_workout(created.id, {"date": "2024-06-05"})
    assert result.synced
    assert result.entity.day == "Wednesday"

    stored = gateway.fetch_workouts()[0]
    assert stored.date == datetime.date(2024, 6, 5)
    assert stored.day == "Wednesday"
    assert service.get_workout_for_date("2024-06-05").day == "Wednesday"


def test_apply_preset_overwrites_stored_workout(service, gateway):
    existing = service.add_workout(
        {"date": "2024-06-04", "title": "Run", "type": "Running", "completed": True}
    ).entity

    result = service.apply_preset_to_date("sample-upper-body", "2024-06-04")
    assert result.synced
    assert result.entity.id == existing.id

    rows = gateway.fetch_workouts()
    assert len(rows) == 1
    assert rows[0].title == "Upper Body Strength"
    assert rows[0].type == WorkoutType.STRENGTH
    assert rows[0].completed is False
    assert rows[0].exercises[1]["exercise"] == "Pull Up"

    created = service.apply_preset_to_date("sample-5k", "2024-06-08")
    assert created.entity.day == "Saturday"
    assert len(gateway.fetch_workouts()) == 2


def test_convert_suggestion_persists_and_moves(service, gateway):
    suggestion = service.state.suggestions[0]
    result = service.convert_suggested_to_actual(suggestion.id, {"note": "did it"})
    assert result.synced

    rows = gateway.fetch_workouts()
    assert [(r.date, r.title, r.note) for r in rows] == [
        (suggestion.date, suggestion.title, "did it")
    ]
    assert rows[0].is_suggested is False
    assert service.suggestion_for(suggestion.id) is None
    assert service.get_workout_for_date(suggestion.date).id == rows[0].id


def test_library_falls_back_then_persists(service, gateway):
    assert service.state.exercises == tuple(SAMPLE_EXERCISES)

    category = service.create_category("Mobility").entity
    added = service.add_exercise(
        {"name": "Hip Airplane", "category_id": category.id, "default_reps": 6}
    )
    assert added.synced
    service.update_exercise(added.entity.id, {"description": "Slow and controlled"})

    stored = gateway.fetch_exercises()
    assert [(e.name, e.description) for e in stored] == [
        ("Hip Airplane", "Slow and controlled")
    ]
    assert [c.name for c in gateway.fetch_categories()] == ["Mobility"]

    asyncio.run(service.load())
    assert [e.name for e in service.exercises_by_category(category.id)] == ["Hip Airplane"]

    assert service.delete_exercise(added.entity.id).synced
    assert gateway.fetch_exercises() == []
