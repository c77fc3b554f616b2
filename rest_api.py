import datetime
import threading
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import APIRouter, Body, FastAPI, HTTPException

from config import APP_VERSION, load_settings
from gateway import Gateway, build_gateway
from models import (
    CategoryInput,
    ExerciseCategory,
    ExerciseInput,
    ExerciseUpdate,
    PresetInput,
    PresetUpdate,
    WorkoutInput,
    WorkoutUpdate,
)
from notifications import NotificationCenter
from workout_service import SyncResult, WorkoutService


def _dump(entity: Any) -> Any:
    if entity is None:
        return None
    return entity.model_dump(mode="json")


def _saved(result: SyncResult) -> SyncResult:
    """Reject results of mutations that were dropped because the backend failed."""
    if result.entity is None and not result.synced:
        raise HTTPException(status_code=503, detail="backend unavailable, change not saved")
    return result


def _result(result: SyncResult, key: str) -> dict:
    result = _saved(result)
    return {key: _dump(result.entity), "synced": result.synced}


def _deleted(result: SyncResult) -> dict:
    return {"status": "deleted", "synced": _saved(result).synced}


class CalendarAPI:
    """Provides REST endpoints for the workout calendar."""

    def __init__(
        self,
        yaml_path: str = "settings.yaml",
        *,
        gateway: Optional[Gateway] = None,
        load_on_startup: bool = True,
    ) -> None:
        self.settings = load_settings(yaml_path)
        self.notifications = NotificationCenter()
        self.service = WorkoutService(
            gateway or build_gateway(self.settings),
            notifications=self.notifications,
            offline_fallback=self.settings.offline_fallback,
            suggestion_days=self.settings.suggestion_days,
            week_starts_on=self.settings.week_starts_on,
        )
        # mutations run in the threadpool; the store expects one writer
        self.lock = threading.Lock()

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            if load_on_startup:
                await self.service.load()
            yield

        self.app = FastAPI(
            title="Workout Calendar API",
            description="REST API for the workout calendar and template library",
            version=APP_VERSION,
            lifespan=lifespan,
        )
        self._setup_routes()

    def _setup_routes(self) -> None:
        workouts_router = APIRouter(prefix="/workouts", tags=["Workouts"])
        presets_router = APIRouter(prefix="/presets", tags=["Presets"])
        suggestions_router = APIRouter(prefix="/suggestions", tags=["Suggestions"])
        logs_router = APIRouter(prefix="/logs", tags=["Exercise Logs"])
        exercises_router = APIRouter(prefix="/exercises", tags=["Exercise Library"])

        @workouts_router.get("")
        def list_workouts(start_date: str = None, end_date: str = None):
            if start_date and end_date:
                try:
                    entries = self.service.workouts_between(start_date, end_date)
                except ValueError:
                    raise HTTPException(status_code=400, detail="invalid date")
            else:
                entries = self.service.state.workouts
            return [_dump(w) for w in entries]

        @workouts_router.post("")
        def create_workout(workout: WorkoutInput):
            with self.lock:
                result = self.service.add_workout(workout)
            return _result(result, "workout")

        @workouts_router.patch("/{workout_id}")
        def update_workout(workout_id: str, changes: WorkoutUpdate):
            with self.lock:
                if self.service.get_workout(workout_id) is None:
                    raise HTTPException(status_code=404, detail="workout not found")
                result = self.service.update_workout(workout_id, changes)
            return _result(result, "workout")

        @workouts_router.post("/{workout_id}/toggle")
        def toggle_workout(workout_id: str):
            with self.lock:
                if self.service.get_workout(workout_id) is None:
                    raise HTTPException(status_code=404, detail="workout not found")
                result = self.service.toggle_completed(workout_id)
            return _result(result, "workout")

        @workouts_router.delete("/{workout_id}")
        def delete_workout(workout_id: str):
            with self.lock:
                result = self.service.delete_workout(workout_id)
            return _deleted(result)

        @self.app.get("/calendar/week/{date}")
        def week_view(date: str):
            try:
                entries = self.service.workouts_for_week(date)
            except ValueError:
                raise HTTPException(status_code=400, detail="invalid date")
            return [_dump(w) for w in entries]

        @self.app.get("/calendar/{date}")
        def workout_for_date(date: str):
            try:
                entry = self.service.get_workout_for_date(date)
            except ValueError:
                raise HTTPException(status_code=400, detail="invalid date")
            return {"workout": _dump(entry)}

        @self.app.put("/calendar/selected")
        def select_date(date: str):
            try:
                day = self.service.select_date(date)
            except ValueError:
                raise HTTPException(status_code=400, detail="invalid date")
            return {"selected_date": day.isoformat()}

        @presets_router.get("")
        def list_presets(type: str = None):
            presets = self.service.state.presets
            if type:
                presets = [p for p in presets if p.type.value.lower() == type.lower()]
            return [_dump(p) for p in presets]

        @presets_router.post("")
        def create_preset(preset: PresetInput):
            with self.lock:
                result = self.service.create_preset(preset)
            return _result(result, "preset")

        @presets_router.put("/{preset_id}")
        def update_preset(preset_id: str, changes: PresetUpdate):
            with self.lock:
                if self.service.get_preset(preset_id) is None:
                    raise HTTPException(status_code=404, detail="preset not found")
                result = self.service.update_preset(preset_id, changes)
            return _result(result, "preset")

        @presets_router.delete("/{preset_id}")
        def delete_preset(preset_id: str):
            with self.lock:
                result = self.service.delete_preset(preset_id)
            return _deleted(result)

        @presets_router.post("/{preset_id}/apply")
        def apply_preset(preset_id: str, date: str = None):
            day = date or self.service.state.selected_date.isoformat()
            try:
                with self.lock:
                    result = self.service.apply_preset_to_date(preset_id, day)
            except ValueError:
                raise HTTPException(status_code=400, detail="invalid date")
            if result is None:
                raise HTTPException(status_code=404, detail="preset not found")
            return _result(result, "workout")

        @suggestions_router.get("")
        def list_suggestions():
            return [_dump(s) for s in self.service.state.suggestions]

        @suggestions_router.get("/day/{day_of_week}")
        def suggestion_for_day(day_of_week: str):
            return {"suggestion": self.service.get_workout_suggestion(day_of_week)}

        @suggestions_router.get("/{suggestion_id}")
        def get_suggestion(suggestion_id: str):
            suggestion = self.service.suggestion_for(suggestion_id)
            if suggestion is None:
                raise HTTPException(status_code=404, detail="suggestion not found")
            return _dump(suggestion)

        @suggestions_router.post("/{suggestion_id}/convert")
        def convert_suggestion(
            suggestion_id: str, updates: Optional[WorkoutUpdate] = Body(default=None)
        ):
            with self.lock:
                result = self.service.convert_suggested_to_actual(suggestion_id, updates)
            if result is None:
                raise HTTPException(status_code=404, detail="suggestion not found")
            return _result(result, "workout")

        @logs_router.get("/{category}")
        def list_logs(category: ExerciseCategory):
            return [_dump(r) for r in self.service.state.logs(category)]

        @logs_router.post("/{category}")
        def add_log(category: ExerciseCategory, record: dict = Body(...)):
            try:
                with self.lock:
                    created = self.service.add_exercise_log(category, record)
            except ValueError as e:
                raise HTTPException(status_code=422, detail=str(e))
            return _dump(created)

        @logs_router.patch("/{category}/{log_id}")
        def update_log(
            category: ExerciseCategory, log_id: str, changes: dict = Body(...)
        ):
            try:
                with self.lock:
                    updated = self.service.update_exercise_log(category, log_id, changes)
            except ValueError as e:
                raise HTTPException(status_code=422, detail=str(e))
            if updated is None:
                raise HTTPException(status_code=404, detail="log entry not found")
            return _dump(updated)

        @logs_router.delete("/{category}/{log_id}")
        def delete_log(category: ExerciseCategory, log_id: str):
            with self.lock:
                removed = self.service.delete_exercise_log(category, log_id)
            return {"status": "deleted" if removed else "missing"}

        @exercises_router.get("")
        def list_exercises(category_id: str = None):
            if category_id:
                exercises = self.service.exercises_by_category(category_id)
            else:
                exercises = self.service.state.exercises
            return [_dump(e) for e in exercises]

        @exercises_router.get("/{exercise_id}")
        def get_exercise(exercise_id: str):
            exercise = self.service.get_exercise(exercise_id)
            if exercise is None:
                raise HTTPException(status_code=404, detail="exercise not found")
            return _dump(exercise)

        @exercises_router.post("")
        def add_exercise(exercise: ExerciseInput):
            with self.lock:
                result = self.service.add_exercise(exercise)
            return _result(result, "exercise")

        @exercises_router.patch("/{exercise_id}")
        def update_exercise(exercise_id: str, changes: ExerciseUpdate):
            with self.lock:
                if self.service.get_exercise(exercise_id) is None:
                    raise HTTPException(status_code=404, detail="exercise not found")
                result = self.service.update_exercise(exercise_id, changes)
            return _result(result, "exercise")

        @exercises_router.delete("/{exercise_id}")
        def delete_exercise(exercise_id: str):
            with self.lock:
                result = self.service.delete_exercise(exercise_id)
            return _deleted(result)

        @self.app.get("/categories", tags=["Exercise Library"])
        def list_categories():
            return [_dump(c) for c in self.service.state.categories]

        @self.app.post("/categories", tags=["Exercise Library"])
        def create_category(category: CategoryInput):
            with self.lock:
                result = self.service.create_category(category)
            return _result(result, "category")

        @self.app.get("/notifications")
        def list_notifications(limit: int = 20):
            return [n.to_dict() for n in self.notifications.history[-limit:]]

        @self.app.post("/sync")
        def sync():
            # reloading replaces every portion of the store
            with self.lock:
                state = self.service.refresh()
            return {
                "workouts": len(state.workouts),
                "presets": len(state.presets),
                "suggestions": len(state.suggestions),
                "exercises": len(state.exercises),
                "synced_at": datetime.datetime.now().isoformat(timespec="seconds"),
            }

        self.app.include_router(workouts_router)
        self.app.include_router(presets_router)
        self.app.include_router(suggestions_router)
        self.app.include_router(logs_router)
        self.app.include_router(exercises_router)


api = CalendarAPI()
app = api.app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app)
