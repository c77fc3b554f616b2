import datetime
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
import store
from models import (
    Category,
    Exercise,
    ExerciseCategory,
    MobilityExercise,
    SuggestedWorkout,
    WorkoutEntry,
)
from store import WorkoutState, WorkoutStore


def entry(id, date, **kw):
    return WorkoutEntry(id=id, date=date, title=kw.pop("title", "Session"), type="Strength", **kw)


class ReducerTest(unittest.TestCase):
    def setUp(self) -> None:
        self.state = WorkoutState(
            workouts=(entry("w1", "2024-06-03"), entry("w2", "2024-06-04")),
            suggestions=(
                SuggestedWorkout(id="s1", date="2024-06-03", title="Mobility", type="Mobility"),
                SuggestedWorkout(id="s2", date="2024-06-05", title="Run", type="Running"),
            ),
        )

    def test_reducers_do_not_mutate_input(self) -> None:
        new_state = store.remove_workout(self.state, "w1")
        self.assertEqual(len(self.state.workouts), 2)
        self.assertEqual([w.id for w in new_state.workouts], ["w2"])

    def test_merge_workout_only_touches_target(self) -> None:
        new_state = store.merge_workout(self.state, "w2", {"completed": True})
        self.assertFalse(new_state.workouts[0].completed)
        self.assertTrue(new_state.workouts[1].completed)

    def test_remove_unknown_keeps_size(self) -> None:
        new_state = store.remove_workout(self.state, "nope")
        self.assertEqual(new_state.workouts, self.state.workouts)

    def test_workout_for_date_precedence(self) -> None:
        found = store.workout_for_date(self.state, datetime.date(2024, 6, 3))
        self.assertEqual(found.id, "w1")
        found = store.workout_for_date(self.state, datetime.date(2024, 6, 5))
        self.assertEqual(found.id, "s2")
        self.assertTrue(found.is_suggested)

    def test_workouts_between(self) -> None:
        found = store.workouts_between(
            self.state, datetime.date(2024, 6, 2), datetime.date(2024, 6, 6)
        )
        self.assertEqual([w.id for w in found], ["w1", "w2", "s2"])

    def test_move_suggestion_is_atomic(self) -> None:
        converted = entry("srv-9", "2024-06-05", title="Run")
        new_state = store.move_suggestion(self.state, "s2", converted)
        self.assertEqual([s.id for s in new_state.suggestions], ["s1"])
        self.assertEqual(new_state.workouts[-1].id, "srv-9")

    def test_logs_addressed_by_id(self) -> None:
        a = MobilityExercise(exercise="Dead Bug", reps="3x10")
        b = MobilityExercise(exercise="Glute Bridges", reps="3x15")
        state = store.add_log(self.state, ExerciseCategory.MOBILITY, a)
        state = store.add_log(state, ExerciseCategory.MOBILITY, b)
        state = store.remove_log(state, ExerciseCategory.MOBILITY, a.id)
        state = store.update_log(state, "mobility", b.id, {"reps": "4x12", "id": "hijack"})
        logs = state.logs(ExerciseCategory.MOBILITY)
        self.assertEqual(len(logs), 1)
        self.assertEqual(logs[0].id, b.id)
        self.assertEqual(logs[0].reps, "4x12")
        self.assertEqual(state.strength_exercises, ())


    def test_exercise_library_reducers(self) -> None:
        squat = Exercise(id="squat", name="Squat", category_id="2")
        plank = Exercise(id="plank", name="Plank", category_id="3")
        state = store.set_library(self.state, [squat, plank], [Category(id="2", name="Lower Body")])
        self.assertEqual(self.state.exercises, ())
        self.assertEqual(store.exercises_by_category(state, "2"), [squat])

        state = store.replace_exercise(state, squat.model_copy(update={"default_sets": 5}))
        self.assertEqual(store.find_exercise(state, "squat").default_sets, 5)
        state = store.remove_exercise(state, "plank")
        self.assertEqual([e.id for e in state.exercises], ["squat"])
        state = store.add_category(state, Category(id="3", name="Core"))
        self.assertEqual(len(state.categories), 2)
        self.assertEqual(state.workouts, self.state.workouts)


class WorkoutStoreTest(unittest.TestCase):
    def test_dispatch_notifies_subscribers(self) -> None:
        holder = WorkoutStore()
        seen = []
        unsubscribe = holder.subscribe(seen.append)
        holder.dispatch(store.add_workout, entry("w1", "2024-06-03"))
        unsubscribe()
        holder.dispatch(store.remove_workout, "w1")
        self.assertEqual(len(seen), 1)
        self.assertEqual(seen[0].workouts[0].id, "w1")
        self.assertEqual(holder.state.workouts, ())


if __name__ == "__main__":
    unittest.main()
