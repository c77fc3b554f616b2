"""Static data used when the gateway cannot be reached."""

import datetime
from typing import List, Optional

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
    WorkoutType,
    day_label,
    format_date,
)

WEEKLY_PLAN = [
    ("Bouldering + Mobility & Core", WorkoutType.MOBILITY),
    ("Full Body Strength (Push Focus)", WorkoutType.STRENGTH),
    ("Zone 2 Run + Mobility & Core", WorkoutType.RUNNING),
    ("Soccer", WorkoutType.RUNNING),
    ("Full Body Strength (Pull Focus)", WorkoutType.STRENGTH),
    ("Bouldering OR Long Run", None),
    ("Active Recovery + Mobility", WorkoutType.MOBILITY),
]

SUGGESTIONS = {
    "Monday": ("5x5 Squat, Bench Press, Barbell Row", WorkoutType.STRENGTH),
    "Tuesday": ("30 min Zone 2 Cardio, Mobility Work", WorkoutType.CARDIO),
    "Wednesday": ("Rest and Recovery", WorkoutType.OTHER),
    "Thursday": ("5x5 Squat, Overhead Press, Deadlift", WorkoutType.STRENGTH),
    "Friday": ("30 min HIIT Session, Core Work", WorkoutType.CARDIO),
    "Saturday": ("Long Outdoor Run or Hike", WorkoutType.RUNNING),
    "Sunday": ("Full Body Mobility and Stretching", WorkoutType.MOBILITY),
}

REST_DAY = "Rest Day"


def start_of_week(day: datetime.date, week_starts_on: int = 0) -> datetime.date:
    """Return the first day of ``day``'s week (0 = Monday)."""
    return day - datetime.timedelta(days=(day.weekday() - week_starts_on) % 7)


def _saturday_type(week: int) -> WorkoutType:
    return WorkoutType.MOBILITY if week % 2 == 0 else WorkoutType.RUNNING


def generate_initial_workouts(
    today: Optional[datetime.date] = None, weeks: int = 4
) -> List[WorkoutEntry]:
    """Build ``weeks`` weeks of the default plan starting this Monday."""
    today = today or datetime.date.today()
    start = start_of_week(today)
    workouts: List[WorkoutEntry] = []
    for week in range(weeks):
        for offset, (title, w_type) in enumerate(WEEKLY_PLAN):
            date = start + datetime.timedelta(days=week * 7 + offset)
            workouts.append(
                WorkoutEntry(
                    id=f"workout-{format_date(date)}",
                    date=date,
                    title=title,
                    type=w_type or _saturday_type(week),
                    completed=date < today,
                )
            )
    return workouts


def workout_suggestion(day_of_week: str) -> str:
    entry = SUGGESTIONS.get(day_of_week)
    return entry[0] if entry else REST_DAY


def generate_suggested_workouts(
    start: Optional[datetime.date] = None, days: int = 14
) -> List[SuggestedWorkout]:
    start = start or datetime.date.today()
    suggestions: List[SuggestedWorkout] = []
    for offset in range(days):
        date = start + datetime.timedelta(days=offset)
        label = day_label(date)
        note, w_type = SUGGESTIONS[label]
        suggestions.append(
            SuggestedWorkout(
                id=f"suggested-{format_date(date)}",
                date=date,
                title=f"{label} {w_type.value}",
                type=w_type,
                note=note,
            )
        )
    return suggestions


SAMPLE_PRESETS = [
    WorkoutPreset(
        id="sample-upper-body",
        name="Upper Body Strength",
        type=WorkoutType.STRENGTH,
        category="Strength",
        description="Build upper body strength with compound movements",
        exercises=[
            {"exercise": "Bench Press", "sets": "4", "reps": "10", "weight": "135"},
            {"exercise": "Pull Up", "sets": "3", "reps": "8"},
        ],
    ),
    WorkoutPreset(
        id="sample-5k",
        name="5K Run",
        type=WorkoutType.RUNNING,
        category="Cardio",
        description="Basic 5K running workout with warmup and cooldown",
        exercises=[{"type": "Easy Run", "distance": "5", "duration": "30"}],
    ),
    WorkoutPreset(
        id="sample-mobility",
        name="Full Body Mobility",
        type=WorkoutType.MOBILITY,
        category="Mobility",
        description="Improve flexibility and mobility across all joints",
        exercises=[{"exercise": "Hip Opener Stretch", "reps": "1", "duration": "10"}],
    ),
    WorkoutPreset(
        id="sample-recovery-yoga",
        name="Recovery Yoga",
        type=WorkoutType.OTHER,
        category="Other",
        description="Gentle yoga flow for recovery days",
    ),
]


def _strength(exercise: str, sets: str, reps: str, notes: str) -> StrengthExercise:
    return StrengthExercise(exercise=exercise, sets=sets, reps=reps, notes=notes)


DEFAULT_STRENGTH_EXERCISES = [
    # push focus
    _strength("Squat (Front/Back)", "4", "6-8", "Focus on form"),
    _strength("Dumbbell Bench Press", "3", "8-10", "Full range of motion"),
    _strength("Bulgarian Split Squat", "3", "10 each leg", "Keep core engaged"),
    _strength("Overhead DB Press", "3", "10", "Controlled movement"),
    _strength("Hanging Leg Raises", "3", "10", "Engage core"),
    _strength("Side Planks", "3", "30 sec per side", "Keep hips elevated"),
    _strength("Pallof Press", "3", "10 each side", "Slow, controlled"),
    # pull focus
    _strength("Trap Bar Deadlift", "4", "6", "Maintain neutral spine"),
    _strength("Pull-Ups / Lat Pulldown", "4", "8-10", "Full range, controlled"),
    _strength("Barbell Row", "3", "10", "Keep back flat"),
    _strength("Hip Thrust / KB Swing", "3", "12", "Focus on glutes"),
    _strength("Dead Bugs", "3", "10", "Core stabilization"),
    _strength("Cossack Squats", "3", "8 each side", "Improve mobility"),
    _strength("Couch Stretch", "2", "30 sec per side", "Hip flexor release"),
]

DEFAULT_MOBILITY_EXERCISES = [
    MobilityExercise(exercise="World's Greatest Stretch", reps="2 reps each side", notes="Dynamic hip opener"),
    MobilityExercise(exercise="Hip 90/90 Rotations", reps="10 reps", notes="Rotate hips fully"),
    MobilityExercise(exercise="Couch Stretch", duration="0.5 per side", reps="2 sets", notes="Hold for 30 sec each side"),
    MobilityExercise(exercise="Cat-Cow & Downward Dog", duration="1", reps="Continuous", notes="Flow smoothly"),
    MobilityExercise(exercise="Dead Bug", reps="3x10", notes="Engage core"),
    MobilityExercise(exercise="Side Planks", reps="3x30 sec each side", notes="Stabilize core"),
    MobilityExercise(exercise="Glute Bridges", reps="3x15", notes="Squeeze glutes at top"),
]

DEFAULT_RUNNING_SESSIONS = [
    RunningSession(type="Zone 2 Run", duration="30-40", notes="Keep HR 60-70% of max; conversational pace"),
    RunningSession(type="Long Run", distance="5 (start)", notes="Increase distance by 1 km weekly"),
]

DEFAULT_LOGS = {
    ExerciseCategory.STRENGTH: DEFAULT_STRENGTH_EXERCISES,
    ExerciseCategory.MOBILITY: DEFAULT_MOBILITY_EXERCISES,
    ExerciseCategory.RUNNING: DEFAULT_RUNNING_SESSIONS,
}


def default_logs(category: ExerciseCategory) -> List[ExerciseRecord]:
    return list(DEFAULT_LOGS[ExerciseCategory(category)])


SAMPLE_CATEGORIES = [
    Category(id="1", name="Upper Body"),
    Category(id="2", name="Lower Body"),
    Category(id="3", name="Core"),
    Category(id="4", name="Cardio"),
]

SAMPLE_EXERCISES = [
    Exercise(
        id="bench-press",
        name="Bench Press",
        description="Barbell chest press lying on a bench",
        category_id="1",
        default_sets=3,
        default_reps=10,
        default_weight=135,
    ),
    Exercise(
        id="squat",
        name="Squat",
        description="Barbell squat",
        category_id="2",
        default_sets=3,
        default_reps=8,
        default_weight=185,
    ),
    Exercise(
        id="deadlift",
        name="Deadlift",
        description="Barbell deadlift",
        category_id="2",
        default_sets=3,
        default_reps=5,
        default_weight=225,
    ),
    Exercise(
        id="pullup",
        name="Pull Up",
        description="Bodyweight pull up",
        category_id="1",
        default_sets=3,
        default_reps=8,
        default_weight=0,
    ),
    Exercise(
        id="plank",
        name="Plank",
        description="Core stability exercise",
        category_id="3",
        default_sets=3,
        default_reps=1,
        default_weight=0,
    ),
    # no set defaults for cardio
    Exercise(
        id="running",
        name="Running",
        description="Outdoor or treadmill running",
        category_id="4",
    ),
]
