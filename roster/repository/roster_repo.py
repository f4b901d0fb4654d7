"""
Join queries behind every report.

Columns are aliased ``<prefix>_<field>`` so row extractors can pick them by
name; ``instructor_cohort_rows`` keeps the plain positional column order
instead (instructor columns, then cohort columns).
"""
from __future__ import annotations

from sqlite3 import Connection

COHORT_COLS = "c.Id AS cohort_id, c.Name AS cohort_name"
INSTRUCTOR_COLS = (
    "i.Id AS instructor_id, i.FirstName AS instructor_first_name, i.LastName AS instructor_last_name, "
    "i.SlackHandle AS instructor_slack_handle, i.Specialty AS instructor_specialty"
)
STUDENT_COLS = (
    "s.Id AS student_id, s.FirstName AS student_first_name, s.LastName AS student_last_name, "
    "s.SlackHandle AS student_slack_handle"
)
EXERCISE_COLS = "e.Id AS exercise_id, e.Name AS exercise_name, e.Language AS exercise_language"


def list_cohorts(conn: Connection):
    return conn.execute(f"SELECT {COHORT_COLS} FROM Cohort c ORDER BY c.Id")


def list_instructors(conn: Connection):
    return conn.execute(f"SELECT {INSTRUCTOR_COLS} FROM Instructor i ORDER BY i.Id")


def list_students(conn: Connection):
    return conn.execute(f"SELECT {STUDENT_COLS} FROM Student s ORDER BY s.Id")


def list_exercises(conn: Connection):
    return conn.execute(f"SELECT {EXERCISE_COLS} FROM Exercise e ORDER BY e.Id")


def instructor_cohort_rows(conn: Connection):
    return conn.execute(
        """
        SELECT i.CohortId,
               i.FirstName,
               i.LastName,
               i.SlackHandle,
               i.Specialty,
               i.Id,
               c.Id,
               c.Name
        FROM Instructor i
        JOIN Cohort c ON c.Id = i.CohortId
        ORDER BY i.Id
        """
    )


def cohort_instructor_rows(conn: Connection):
    return conn.execute(
        f"""
        SELECT {COHORT_COLS}, {INSTRUCTOR_COLS}
        FROM Cohort c
        JOIN Instructor i ON c.Id = i.CohortId
        ORDER BY c.Id, i.Id
        """
    )


def student_exercise_rows(conn: Connection):
    return conn.execute(
        f"""
        SELECT {STUDENT_COLS}, {EXERCISE_COLS}
        FROM Student s
        JOIN StudentExercise se ON s.Id = se.StudentId
        JOIN Exercise e ON se.ExerciseId = e.Id
        ORDER BY s.Id, e.Id
        """
    )


def student_exercise_cohort_rows(conn: Connection):
    return conn.execute(
        f"""
        SELECT {STUDENT_COLS}, {EXERCISE_COLS}, {COHORT_COLS}
        FROM Student s
        JOIN StudentExercise se ON s.Id = se.StudentId
        JOIN Exercise e ON se.ExerciseId = e.Id
        JOIN Cohort c ON s.CohortId = c.Id
        ORDER BY s.Id, e.Id
        """
    )


def cohort_roster_rows(conn: Connection):
    """
    Cohort x Instructor x Student in one pass. Fans out to one row per
    (instructor, student) pair; outer joins keep cohorts with nobody assigned.
    """
    return conn.execute(
        f"""
        SELECT {COHORT_COLS}, {INSTRUCTOR_COLS}, {STUDENT_COLS}
        FROM Cohort c
        LEFT JOIN Instructor i ON i.CohortId = c.Id
        LEFT JOIN Student s ON s.CohortId = c.Id
        ORDER BY c.Id, i.Id, s.Id
        """
    )


def exercise_assignment_rows(conn: Connection):
    return conn.execute(
        f"""
        SELECT {EXERCISE_COLS},
               se.Id AS assignment_id,
               {STUDENT_COLS},
               {INSTRUCTOR_COLS},
               {COHORT_COLS}
        FROM Exercise e
        JOIN StudentExercise se ON se.ExerciseId = e.Id
        JOIN Student s ON s.Id = se.StudentId
        JOIN Cohort c ON c.Id = s.CohortId
        JOIN Instructor i ON i.Id = se.InstructorId
        ORDER BY e.Id, se.Id
        """
    )
