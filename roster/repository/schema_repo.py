from __future__ import annotations

from sqlite3 import Connection
from typing import Optional

TABLES = ["StudentExercise", "Student", "Instructor", "Exercise", "Cohort"]


def apply_schema(conn: Connection, ddl: str):
    conn.executescript(ddl)


def table_counts(conn: Connection) -> dict[str, int]:
    out: dict[str, int] = {}
    for t in TABLES:
        out[t] = conn.execute(f"SELECT COUNT(1) AS cnt FROM {t}").fetchone()["cnt"]
    return out


def clear_all(conn: Connection):
    # children first, foreign keys are on
    for t in TABLES:
        conn.execute(f"DELETE FROM {t}")


def insert_cohort(conn: Connection, name: str) -> bool:
    cur = conn.execute("INSERT OR IGNORE INTO Cohort(Name) VALUES(?)", (name,))
    return cur.rowcount > 0


def insert_exercise(conn: Connection, name: str, language: str) -> bool:
    cur = conn.execute("INSERT OR IGNORE INTO Exercise(Name, Language) VALUES(?,?)", (name, language))
    return cur.rowcount > 0


def insert_instructor(conn: Connection, first_name: str, last_name: str, slack_handle: str,
                      specialty: Optional[str], cohort_name: str) -> bool:
    """Cohort is resolved by name with a sub-select; no row is written if it does not exist."""
    cur = conn.execute(
        """
        INSERT OR IGNORE INTO Instructor(FirstName, LastName, SlackHandle, Specialty, CohortId)
        SELECT ?, ?, ?, ?, c.Id FROM Cohort c WHERE c.Name = ?
        """,
        (first_name, last_name, slack_handle, specialty, cohort_name),
    )
    return cur.rowcount > 0


def insert_student(conn: Connection, first_name: str, last_name: str, slack_handle: str, cohort_name: str) -> bool:
    cur = conn.execute(
        """
        INSERT OR IGNORE INTO Student(FirstName, LastName, SlackHandle, CohortId)
        SELECT ?, ?, ?, c.Id FROM Cohort c WHERE c.Name = ?
        """,
        (first_name, last_name, slack_handle, cohort_name),
    )
    return cur.rowcount > 0


def insert_student_exercise(conn: Connection, exercise_name: str, student_handle: str, instructor_handle: str) -> bool:
    """Assign an exercise; all three sides are looked up by name/handle."""
    cur = conn.execute(
        """
        INSERT OR IGNORE INTO StudentExercise(ExerciseId, StudentId, InstructorId)
        SELECT e.Id, s.Id, i.Id
        FROM Student s, Exercise e, Instructor i
        WHERE e.Name = ?
          AND s.SlackHandle = ?
          AND i.SlackHandle = ?
        """,
        (exercise_name, student_handle, instructor_handle),
    )
    return cur.rowcount > 0
