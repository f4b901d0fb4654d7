from __future__ import annotations

import os

import pandas as pd

from ..db import get_conn, SCHEMA_PATH, SEEDS_DIR
from ..logs import ENTITY_SEED, LogContext, ensure_log_schema
from ..repository import schema_repo
from .config_svc import ensure_default_config


def ensure_schema(schema_path: str | None = None):
    with open(schema_path or SCHEMA_PATH, "r", encoding="utf-8") as f:
        ddl = f.read()
    with get_conn() as conn:
        schema_repo.apply_schema(conn, ddl)
        conn.commit()
    ensure_log_schema()
    ensure_default_config()


SEED_FILES = ("cohorts", "exercises", "instructors", "students", "student_exercises")


def _read(seeds_dir: str, name: str) -> pd.DataFrame:
    # keep_default_na: an empty specialty stays "" instead of NaN
    return pd.read_csv(os.path.join(seeds_dir, f"{name}.csv"), dtype=str, keep_default_na=False)


def read_seeds(seeds_dir: str | None = None) -> dict[str, pd.DataFrame]:
    """Read every seed CSV up front; a missing file fails before the DB is touched."""
    seeds_dir = seeds_dir or SEEDS_DIR
    return {name: _read(seeds_dir, name) for name in SEED_FILES}


def _s(r, key: str) -> str:
    return str(r.get(key, "")).strip()


def seed_load(seeds_dir: str | None, log: LogContext, frames: dict[str, pd.DataFrame] | None = None) -> dict:
    """Load fixture rows from CSV; parents first, then rows resolved by name/handle.
       cohorts.csv: name
       exercises.csv: name, language
       instructors.csv: first_name, last_name, slack_handle, specialty, cohort_name
       students.csv: first_name, last_name, slack_handle, cohort_name
       student_exercises.csv: exercise_name, student_handle, instructor_handle
    Rows already present are skipped; rows whose references do not resolve are counted as skipped.
    """
    seeds_dir = seeds_dir or SEEDS_DIR
    if frames is None:
        frames = read_seeds(seeds_dir)
    created = {t: 0 for t in ("cohort", "exercise", "instructor", "student", "student_exercise")}
    skipped = 0

    with get_conn() as conn:
        for _, r in frames["cohorts"].iterrows():
            created["cohort"] += schema_repo.insert_cohort(conn, _s(r, "name"))
        for _, r in frames["exercises"].iterrows():
            created["exercise"] += schema_repo.insert_exercise(conn, _s(r, "name"), _s(r, "language"))
        for _, r in frames["instructors"].iterrows():
            ok = schema_repo.insert_instructor(
                conn, _s(r, "first_name"), _s(r, "last_name"), _s(r, "slack_handle"),
                _s(r, "specialty") or None, _s(r, "cohort_name"),
            )
            created["instructor"] += ok
            skipped += not ok
        for _, r in frames["students"].iterrows():
            ok = schema_repo.insert_student(
                conn, _s(r, "first_name"), _s(r, "last_name"), _s(r, "slack_handle"), _s(r, "cohort_name"),
            )
            created["student"] += ok
            skipped += not ok
        for _, r in frames["student_exercises"].iterrows():
            ok = schema_repo.insert_student_exercise(
                conn, _s(r, "exercise_name"), _s(r, "student_handle"), _s(r, "instructor_handle"),
            )
            created["student_exercise"] += ok
            skipped += not ok
        conn.commit()
        counts = schema_repo.table_counts(conn)

    res = {"created": created, "skipped": skipped, "counts": counts}
    log.set_entity(ENTITY_SEED, os.path.abspath(seeds_dir))
    log.set_after(res)
    return res


def init_db(log: LogContext, seeds_dir: str | None = None, reset: bool = False) -> dict:
    """Create every table, optionally wipe the roster tables, then seed.
    Seed files are read before the wipe, so a bad seeds_dir leaves existing rows alone."""
    ensure_schema()
    frames = read_seeds(seeds_dir)
    if reset:
        with get_conn() as conn:
            before = schema_repo.table_counts(conn)
            schema_repo.clear_all(conn)
            conn.commit()
        log.set_before(before)
    return seed_load(seeds_dir, log, frames=frames)
