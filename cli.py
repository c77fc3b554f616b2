import argparse
import datetime
import logging

from config import YamlConfig, load_settings
from db import (
    CategoryRepository,
    ExerciseLogRepository,
    ExerciseRepository,
    PresetRepository,
    WorkoutRepository,
)
from gateway import build_gateway
from models import ExerciseCategory, ExerciseInput, WorkoutType
from notifications import NotificationCenter
from sample_data import (
    SAMPLE_CATEGORIES,
    SAMPLE_EXERCISES,
    SAMPLE_PRESETS,
    DEFAULT_LOGS,
    generate_initial_workouts,
)
from workout_service import WorkoutService


def build_service(yaml_path: str) -> WorkoutService:
    settings = load_settings(yaml_path)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    notifications = NotificationCenter()
    notifications.subscribe(
        lambda n: print(f"[{n.severity.value}] {n.title}: {n.description}")
    )
    service = WorkoutService(
        build_gateway(settings),
        notifications=notifications,
        offline_fallback=settings.offline_fallback,
        suggestion_days=settings.suggestion_days,
        week_starts_on=settings.week_starts_on,
    )
    service.refresh()
    return service


def format_entry(entry) -> str:
    marker = "x" if entry.completed else " "
    suffix = " (suggested)" if entry.is_suggested else ""
    return f"{entry.date.isoformat()} {entry.day:<9} [{marker}] {entry.type.value:<8} {entry.title}{suffix}"


def show_calendar(service: WorkoutService, date: str) -> None:
    for entry in service.workouts_for_week(date):
        print(format_entry(entry))


def list_presets(service: WorkoutService) -> None:
    for preset in service.state.presets:
        print(f"{preset.id}\t{preset.type.value}\t{preset.name}")


def list_exercises(service: WorkoutService) -> None:
    for category in service.state.categories:
        print(category.name)
        for exercise in service.exercises_by_category(category.id):
            defaults = ""
            if exercise.default_sets and exercise.default_reps:
                defaults = f" ({exercise.default_sets}x{exercise.default_reps})"
            print(f"  {exercise.id}\t{exercise.name}{defaults}")


def seed_local_db(db_path: str) -> None:
    """Populate the local database with the default plan if it is empty."""
    workouts = WorkoutRepository(db_path)
    if workouts.fetch_all_workouts():
        print("Database already contains workouts")
        return
    for entry in generate_initial_workouts():
        data = entry.model_dump(mode="json")
        workouts.create(
            data["date"],
            data["title"],
            data["type"],
            day=data["day"],
            completed=data["completed"],
        )
    presets = PresetRepository(db_path)
    for preset in SAMPLE_PRESETS:
        data = preset.model_dump(mode="json")
        presets.create(
            data["name"],
            data["type"],
            description=data["description"],
            category=data["category"],
            exercises=data["exercises"],
        )
    logs = ExerciseLogRepository(db_path)
    for category, records in DEFAULT_LOGS.items():
        for record in records:
            logs.add(category.value, record.model_dump(mode="json"))
    categories = CategoryRepository(db_path)
    category_ids = {c.id: categories.create(c.name)["id"] for c in SAMPLE_CATEGORIES}
    exercises = ExerciseRepository(db_path)
    for exercise in SAMPLE_EXERCISES:
        data = exercise.model_dump(include=set(ExerciseInput.model_fields))
        data["category_id"] = category_ids.get(data["category_id"])
        exercises.create(**data)
    print("Seed data inserted")


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Workout calendar commands")
    parser.add_argument("--config", default="settings.yaml")
    sub = parser.add_subparsers(dest="cmd", required=True)

    cal = sub.add_parser("calendar")
    cal.add_argument("--date", default=datetime.date.today().isoformat())

    add = sub.add_parser("add")
    add.add_argument("title")
    add.add_argument("--date", default=datetime.date.today().isoformat())
    add.add_argument(
        "--type", choices=[t.value for t in WorkoutType], default=WorkoutType.STRENGTH.value
    )
    add.add_argument("--note")

    apply = sub.add_parser("apply-preset")
    apply.add_argument("preset_id")
    apply.add_argument("--date", default=datetime.date.today().isoformat())

    conv = sub.add_parser("convert")
    conv.add_argument("suggestion_id")
    conv.add_argument("--note")

    sub.add_parser("presets")
    sub.add_parser("exercises")

    logs = sub.add_parser("logs")
    logs.add_argument("category", choices=[c.value for c in ExerciseCategory])

    configure = sub.add_parser("configure")
    configure.add_argument("--api-url")
    configure.add_argument("--api-key")
    configure.add_argument("--user-id")
    configure.add_argument("--db-path")
    configure.add_argument("--log-level")

    seed = sub.add_parser("seed")
    seed.add_argument("--db", default=None)

    serve = sub.add_parser("serve")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    if args.cmd == "configure":
        settings = YamlConfig(args.config).update(
            api_url=args.api_url,
            api_key=args.api_key,
            user_id=args.user_id,
            db_path=args.db_path,
            log_level=args.log_level,
        )
        print(f"Saved {args.config} (backend: {settings.api_url or 'local database'})")
        return
    if args.cmd == "seed":
        seed_local_db(args.db or load_settings(args.config).db_path)
        return
    if args.cmd == "serve":
        import uvicorn
        from rest_api import CalendarAPI

        uvicorn.run(CalendarAPI(args.config).app, host=args.host, port=args.port)
        return

    service = build_service(args.config)
    if args.cmd == "calendar":
        show_calendar(service, args.date)
    elif args.cmd == "add":
        service.add_workout(
            {"date": args.date, "title": args.title, "type": args.type, "note": args.note}
        )
    elif args.cmd == "apply-preset":
        if service.apply_preset_to_date(args.preset_id, args.date) is None:
            print(f"Unknown preset {args.preset_id}")
    elif args.cmd == "convert":
        updates = {"note": args.note} if args.note else None
        if service.convert_suggested_to_actual(args.suggestion_id, updates) is None:
            print(f"Unknown suggestion {args.suggestion_id}")
    elif args.cmd == "presets":
        list_presets(service)
    elif args.cmd == "exercises":
        list_exercises(service)
    elif args.cmd == "logs":
        for record in service.state.logs(args.category):
            print(record.model_dump_json(exclude_none=True))


if __name__ == "__main__":
    main()
