import datetime
import os
import sys
import unittest

from pydantic import ValidationError

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from models import (
    RunningSession,
    WorkoutEntry,
    WorkoutInput,
    WorkoutType,
    WorkoutUpdate,
    merge_entry,
    new_id,
    with_day_label,
)


class ModelsTest(unittest.TestCase):
    def test_type_parsing_is_case_insensitive(self) -> None:
        workout = WorkoutInput(date="2024-06-03", title="Intervals", type="cardio")
        self.assertEqual(workout.type, WorkoutType.CARDIO)
        with self.assertRaises(ValidationError):
            WorkoutInput(date="2024-06-03", title="Yoga", type="yoga")

    def test_day_label_derived_from_date(self) -> None:
        workout = WorkoutInput(date="2024-06-03", title="Squats", type="Strength")
        self.assertEqual(workout.day, "Monday")
        explicit = WorkoutInput(date="2024-06-03", day="Leg day", title="Squats", type="Strength")
        self.assertEqual(explicit.day, "Leg day")

    def test_timestamps_are_truncated_to_dates(self) -> None:
        entry = WorkoutEntry.model_validate(
            {
                "id": "1",
                "date": "2024-06-03T00:00:00+00:00",
                "title": "Run",
                "type": "Running",
            }
        )
        self.assertEqual(entry.date, datetime.date(2024, 6, 3))
        self.assertEqual(entry.model_dump(mode="json")["date"], "2024-06-03")

    def test_invalid_date_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            WorkoutInput(date="June third", title="Run", type="Running")

    def test_update_reports_only_set_fields(self) -> None:
        update = WorkoutUpdate(note=None, completed=True)
        self.assertEqual(update.changes(), {"note": None, "completed": True})

    def test_merge_entry_recomputes_day(self) -> None:
        entry = WorkoutEntry(id="1", date="2024-06-03", title="Run", type="Running")
        moved = merge_entry(entry, {"date": datetime.date(2024, 6, 8)})
        self.assertEqual(moved.day, "Saturday")
        self.assertEqual(entry.day, "Monday")

    def test_with_day_label(self) -> None:
        self.assertEqual(
            with_day_label({"date": datetime.date(2024, 6, 8)})["day"], "Saturday"
        )
        self.assertEqual(with_day_label({"date": "2024-06-08", "day": "Race"})["day"], "Race")
        self.assertEqual(with_day_label({"note": "x"}), {"note": "x"})

    def test_log_records_get_stable_ids(self) -> None:
        a = RunningSession(type="Zone 2 Run", duration="30")
        b = RunningSession(type="Zone 2 Run", duration="30")
        self.assertNotEqual(a.id, b.id)
        self.assertNotEqual(new_id(), new_id())


if __name__ == "__main__":
    unittest.main()
