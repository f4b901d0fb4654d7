from __future__ import annotations

from enum import Enum
from typing import Any


class EntityKind(str, Enum):
    COHORT = "Cohort"
    INSTRUCTOR = "Instructor"
    STUDENT = "Student"
    EXERCISE = "Exercise"
    STUDENT_EXERCISE = "StudentExercise"

    def __str__(self) -> str:
        return self.value


def kind_name(k: Any) -> str:
    """Plain string name for an EntityKind or any other kind label."""
    return k.value if isinstance(k, Enum) else str(k)
