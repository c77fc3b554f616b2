import sqlite3
import json
import datetime
import uuid
from contextlib import contextmanager
from typing import List, Optional, Tuple


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "workouts": (
            """CREATE TABLE workouts (
                    id TEXT PRIMARY KEY,
                    user_id TEXT,
                    date TEXT NOT NULL,
                    day TEXT,
                    title TEXT NOT NULL,
                    type TEXT NOT NULL DEFAULT 'Strength',
                    completed INTEGER NOT NULL DEFAULT 0,
                    note TEXT,
                    exercises TEXT NOT NULL DEFAULT '[]',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );""",
            [
                "id",
                "user_id",
                "date",
                "day",
                "title",
                "type",
                "completed",
                "note",
                "exercises",
                "created_at",
                "updated_at",
            ],
        ),
        "workout_presets": (
            """CREATE TABLE workout_presets (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL DEFAULT 'Strength',
                    description TEXT,
                    category TEXT,
                    exercises TEXT NOT NULL DEFAULT '[]',
                    position INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );""",
            [
                "id",
                "name",
                "type",
                "description",
                "category",
                "exercises",
                "position",
                "created_at",
                "updated_at",
            ],
        ),
        "workout_logs": (
            """CREATE TABLE workout_logs (
                    id TEXT PRIMARY KEY,
                    category TEXT NOT NULL,
                    date TEXT,
                    day TEXT,
                    data TEXT NOT NULL DEFAULT '{}',
                    position INTEGER NOT NULL DEFAULT 0
                );""",
            ["id", "category", "date", "day", "data", "position"],
        ),
        "categories": (
            """CREATE TABLE categories (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL UNIQUE,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );""",
            ["id", "name", "created_at", "updated_at"],
        ),
        "exercises": (
            """CREATE TABLE exercises (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    description TEXT,
                    category_id TEXT,
                    default_sets INTEGER,
                    default_reps INTEGER,
                    default_weight REAL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );""",
            [
                "id",
                "name",
                "description",
                "category_id",
                "default_sets",
                "default_reps",
                "default_weight",
                "created_at",
                "updated_at",
            ],
        ),
    }

    def __init__(self, db_path: str = "workout.db") -> None:
        self._db_path = db_path
        self._ensure_schema()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)

        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            missing = [c for c in columns if c not in existing_cols]
            if missing:
                def default_val(col: str) -> str:
                    if col in ("created_at", "updated_at"):
                        return "datetime('now')"
                    if col in ("completed", "position"):
                        return "0"
                    if col == "exercises":
                        return "'[]'"
                    if col == "data":
                        return "'{}'"
                    return "NULL"

                defaults = ", ".join(default_val(c) for c in missing)
                conn.execute(
                    f"INSERT INTO {table} ({cols}, {', '.join(missing)}) SELECT {cols}, {defaults} FROM {table}_old;"
                )
            else:
                conn.execute(
                    f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
                )
        conn.execute(f"DROP TABLE {table}_old;")


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.rowcount

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    @staticmethod
    def _now() -> str:
        return datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="seconds")

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())


class WorkoutRepository(BaseRepository):
    """Repository for calendar workouts."""

    _COLUMNS = "id, date, day, title, type, completed, note, exercises, created_at, updated_at"
    _UPDATABLE = ("date", "day", "title", "type", "completed", "note", "exercises")

    def __init__(self, db_path: str = "workout.db", user_id: Optional[str] = None) -> None:
        super().__init__(db_path)
        self.user_id = user_id

    @staticmethod
    def _row_to_dict(row: Tuple) -> dict:
        return {
            "id": row[0],
            "date": row[1],
            "day": row[2],
            "title": row[3],
            "type": row[4],
            "completed": bool(row[5]),
            "note": row[6],
            "exercises": json.loads(row[7] or "[]"),
            "created_at": row[8],
            "updated_at": row[9],
        }

    def create(
        self,
        date: str,
        title: str,
        workout_type: str,
        day: Optional[str] = None,
        completed: bool = False,
        note: Optional[str] = None,
        exercises: Optional[list] = None,
    ) -> dict:
        workout_id = self._new_id()
        now = self._now()
        self.execute(
            "INSERT INTO workouts (id, user_id, date, day, title, type, completed, note, exercises, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);",
            (
                workout_id,
                self.user_id,
                date,
                day,
                title,
                workout_type,
                int(completed),
                note,
                json.dumps(exercises or []),
                now,
                now,
            ),
        )
        return self.fetch_detail(workout_id)

    def fetch_all_workouts(self) -> list[dict]:
        if self.user_id is None:
            rows = super().fetch_all(
                f"SELECT {self._COLUMNS} FROM workouts ORDER BY date, created_at;"
            )
        else:
            rows = super().fetch_all(
                f"SELECT {self._COLUMNS} FROM workouts WHERE user_id = ? ORDER BY date, created_at;",
                (self.user_id,),
            )
        return [self._row_to_dict(r) for r in rows]

    def fetch_detail(self, workout_id: str) -> dict:
        rows = super().fetch_all(
            f"SELECT {self._COLUMNS} FROM workouts WHERE id = ?;", (workout_id,)
        )
        if not rows:
            raise ValueError("workout not found")
        return self._row_to_dict(rows[0])

    def update(self, workout_id: str, **fields) -> dict:
        self.fetch_detail(workout_id)
        assignments = []
        params: list = []
        for key in self._UPDATABLE:
            if key not in fields:
                continue
            value = fields[key]
            if key == "completed":
                value = int(bool(value))
            elif key == "exercises":
                value = json.dumps(value or [])
            assignments.append(f"{key} = ?")
            params.append(value)
        assignments.append("updated_at = ?")
        params.append(self._now())
        params.append(workout_id)
        self.execute(
            f"UPDATE workouts SET {', '.join(assignments)} WHERE id = ?;",
            tuple(params),
        )
        return self.fetch_detail(workout_id)

    def delete(self, workout_id: str) -> bool:
        return self.execute("DELETE FROM workouts WHERE id = ?;", (workout_id,)) > 0


class PresetRepository(BaseRepository):
    """Repository for workout presets."""

    _COLUMNS = "id, name, type, description, category, exercises"
    _UPDATABLE = ("name", "type", "description", "category", "exercises")

    @staticmethod
    def _row_to_dict(row: Tuple) -> dict:
        return {
            "id": row[0],
            "name": row[1],
            "type": row[2],
            "description": row[3],
            "category": row[4],
            "exercises": json.loads(row[5] or "[]"),
        }

    def create(
        self,
        name: str,
        preset_type: str,
        description: Optional[str] = None,
        category: Optional[str] = None,
        exercises: Optional[list] = None,
    ) -> dict:
        rows = super().fetch_all(
            "SELECT COALESCE(MAX(position), 0) + 1 FROM workout_presets;"
        )
        position = int(rows[0][0]) if rows else 1
        preset_id = self._new_id()
        now = self._now()
        self.execute(
            "INSERT INTO workout_presets (id, name, type, description, category, exercises, position, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);",
            (
                preset_id,
                name,
                preset_type,
                description,
                category,
                json.dumps(exercises or []),
                position,
                now,
                now,
            ),
        )
        return self.fetch_detail(preset_id)

    def fetch_all_presets(self) -> list[dict]:
        rows = super().fetch_all(
            f"SELECT {self._COLUMNS} FROM workout_presets ORDER BY position;"
        )
        return [self._row_to_dict(r) for r in rows]

    def fetch_detail(self, preset_id: str) -> dict:
        rows = super().fetch_all(
            f"SELECT {self._COLUMNS} FROM workout_presets WHERE id = ?;",
            (preset_id,),
        )
        if not rows:
            raise ValueError("preset not found")
        return self._row_to_dict(rows[0])

    def update(self, preset_id: str, **fields) -> dict:
        self.fetch_detail(preset_id)
        assignments = []
        params: list = []
        for key in self._UPDATABLE:
            if key not in fields:
                continue
            value = fields[key]
            if key == "exercises":
                value = json.dumps(value or [])
            assignments.append(f"{key} = ?")
            params.append(value)
        assignments.append("updated_at = ?")
        params.append(self._now())
        params.append(preset_id)
        self.execute(
            f"UPDATE workout_presets SET {', '.join(assignments)} WHERE id = ?;",
            tuple(params),
        )
        return self.fetch_detail(preset_id)

    def delete(self, preset_id: str) -> bool:
        return (
            self.execute("DELETE FROM workout_presets WHERE id = ?;", (preset_id,)) > 0
        )


class ExerciseLogRepository(BaseRepository):
    """Repository for per-category exercise log rows."""

    def add(self, category: str, data: dict) -> dict:
        rows = super().fetch_all(
            "SELECT COALESCE(MAX(position), 0) + 1 FROM workout_logs WHERE category = ?;",
            (category,),
        )
        position = int(rows[0][0]) if rows else 1
        log_id = data.get("id") or self._new_id()
        payload = {k: v for k, v in data.items() if k not in ("id", "date", "day")}
        self.execute(
            "INSERT INTO workout_logs (id, category, date, day, data, position) VALUES (?, ?, ?, ?, ?, ?);",
            (
                log_id,
                category,
                data.get("date"),
                data.get("day"),
                json.dumps(payload),
                position,
            ),
        )
        return {"id": log_id, **data}

    def fetch_for_category(self, category: str) -> list[dict]:
        rows = super().fetch_all(
            "SELECT id, date, day, data FROM workout_logs WHERE category = ? ORDER BY position;",
            (category,),
        )
        result: list[dict] = []
        for log_id, date, day, data in rows:
            record = json.loads(data or "{}")
            record.update({"id": log_id, "date": date, "day": day})
            result.append(record)
        return result


class CategoryRepository(BaseRepository):
    """Repository for exercise library categories."""

    _COLUMNS = "id, name, created_at, updated_at"

    @staticmethod
    def _row_to_dict(row: Tuple) -> dict:
        return {
            "id": row[0],
            "name": row[1],
            "created_at": row[2],
            "updated_at": row[3],
        }

    def create(self, name: str) -> dict:
        category_id = self._new_id()
        now = self._now()
        self.execute(
            "INSERT INTO categories (id, name, created_at, updated_at) VALUES (?, ?, ?, ?);",
            (category_id, name, now, now),
        )
        rows = super().fetch_all(
            f"SELECT {self._COLUMNS} FROM categories WHERE id = ?;", (category_id,)
        )
        return self._row_to_dict(rows[0])

    def fetch_all_categories(self) -> list[dict]:
        rows = super().fetch_all(f"SELECT {self._COLUMNS} FROM categories ORDER BY name;")
        return [self._row_to_dict(r) for r in rows]


class ExerciseRepository(BaseRepository):
    """Repository for exercise library entries."""

    _COLUMNS = (
        "id, name, description, category_id, default_sets, default_reps, "
        "default_weight, created_at, updated_at"
    )
    _UPDATABLE = (
        "name",
        "description",
        "category_id",
        "default_sets",
        "default_reps",
        "default_weight",
    )

    @staticmethod
    def _row_to_dict(row: Tuple) -> dict:
        return dict(
            zip(
                (
                    "id",
                    "name",
                    "description",
                    "category_id",
                    "default_sets",
                    "default_reps",
                    "default_weight",
                    "created_at",
                    "updated_at",
                ),
                row,
            )
        )

    def create(
        self,
        name: str,
        description: Optional[str] = None,
        category_id: Optional[str] = None,
        default_sets: Optional[int] = None,
        default_reps: Optional[int] = None,
        default_weight: Optional[float] = None,
    ) -> dict:
        exercise_id = self._new_id()
        now = self._now()
        self.execute(
            "INSERT INTO exercises (id, name, description, category_id, default_sets, default_reps, default_weight, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);",
            (
                exercise_id,
                name,
                description,
                category_id,
                default_sets,
                default_reps,
                default_weight,
                now,
                now,
            ),
        )
        return self.fetch_detail(exercise_id)

    def fetch_all_exercises(self, category_id: Optional[str] = None) -> list[dict]:
        if category_id is None:
            rows = super().fetch_all(
                f"SELECT {self._COLUMNS} FROM exercises ORDER BY name;"
            )
        else:
            rows = super().fetch_all(
                f"SELECT {self._COLUMNS} FROM exercises WHERE category_id = ? ORDER BY name;",
                (category_id,),
            )
        return [self._row_to_dict(r) for r in rows]

    def fetch_detail(self, exercise_id: str) -> dict:
        rows = super().fetch_all(
            f"SELECT {self._COLUMNS} FROM exercises WHERE id = ?;", (exercise_id,)
        )
        if not rows:
            raise ValueError("exercise not found")
        return self._row_to_dict(rows[0])

    def update(self, exercise_id: str, **fields) -> dict:
        self.fetch_detail(exercise_id)
        assignments = [f"{key} = ?" for key in self._UPDATABLE if key in fields]
        params = [fields[key] for key in self._UPDATABLE if key in fields]
        assignments.append("updated_at = ?")
        params.append(self._now())
        params.append(exercise_id)
        self.execute(
            f"UPDATE exercises SET {', '.join(assignments)} WHERE id = ?;",
            tuple(params),
        )
        return self.fetch_detail(exercise_id)

    def delete(self, exercise_id: str) -> bool:
        return self.execute("DELETE FROM exercises WHERE id = ?;", (exercise_id,)) > 0
