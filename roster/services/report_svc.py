"""
Report definitions: each report pairs one join query with the extractors that
split its rows and the attachment rules that fold them into a graph.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from ..db import get_conn
from ..domain.extract import EntityExtractor, RowShape
from ..domain.graph import AttachmentRule, GraphMaterializer, MaterializedGraph
from ..domain.kinds import EntityKind
from ..logs import LogContext
from ..repository import roster_repo
from . import config_svc, render_svc

logger = logging.getLogger(__name__)

COHORT = EntityExtractor.from_prefix(EntityKind.COHORT, "cohort", ["name"])
INSTRUCTOR = EntityExtractor.from_prefix(
    EntityKind.INSTRUCTOR, "instructor", ["first_name", "last_name", "slack_handle", "specialty"]
)
STUDENT = EntityExtractor.from_prefix(EntityKind.STUDENT, "student", ["first_name", "last_name", "slack_handle"])
EXERCISE = EntityExtractor.from_prefix(EntityKind.EXERCISE, "exercise", ["name", "language"])
ASSIGNMENT = EntityExtractor(EntityKind.STUDENT_EXERCISE, "assignment_id")

# instructor_cohort_rows: i.CohortId, i.FirstName, i.LastName, i.SlackHandle, i.Specialty, i.Id | c.Id, c.Name
INSTRUCTOR_BY_POSITION = EntityExtractor.from_range(
    EntityKind.INSTRUCTOR, 0, ["cohort_id", "first_name", "last_name", "slack_handle", "specialty", "id"]
)
COHORT_BY_POSITION = EntityExtractor.from_range(EntityKind.COHORT, 6, ["id", "name"])


@dataclass
class ReportDef:
    name: str
    title: str
    query: Callable
    shape: RowShape
    primary: EntityKind
    attachments: Sequence[AttachmentRule] = field(default_factory=list)

    def materializer(self, strict: bool) -> GraphMaterializer:
        return GraphMaterializer(self.primary, self.attachments, strict=strict)


_DEFS = [
    ReportDef("instructors", "Instructors", roster_repo.list_instructors,
              RowShape([INSTRUCTOR]), EntityKind.INSTRUCTOR),
    ReportDef("exercises", "Exercises", roster_repo.list_exercises,
              RowShape([EXERCISE]), EntityKind.EXERCISE),
    ReportDef("students", "Students", roster_repo.list_students,
              RowShape([STUDENT]), EntityKind.STUDENT),
    ReportDef("cohorts", "Cohorts", roster_repo.list_cohorts,
              RowShape([COHORT]), EntityKind.COHORT),
    ReportDef(
        "instructor_cohort", "Instructors with their cohort",
        roster_repo.instructor_cohort_rows,
        RowShape([INSTRUCTOR_BY_POSITION, COHORT_BY_POSITION]),
        EntityKind.INSTRUCTOR,
        [AttachmentRule(EntityKind.COHORT, under="cohort")],
    ),
    ReportDef(
        "cohort_instructors", "Instructors per cohort",
        roster_repo.cohort_instructor_rows,
        RowShape([COHORT, INSTRUCTOR]),
        EntityKind.COHORT,
        [AttachmentRule(EntityKind.INSTRUCTOR, under="instructors")],
    ),
    ReportDef(
        "student_exercises", "Exercises per student",
        roster_repo.student_exercise_rows,
        RowShape([STUDENT, EXERCISE]),
        EntityKind.STUDENT,
        [AttachmentRule(EntityKind.EXERCISE, under="exercises")],
    ),
    ReportDef(
        "student_exercises_cohort", "Exercises per student, with cohort",
        roster_repo.student_exercise_cohort_rows,
        RowShape([STUDENT, EXERCISE, COHORT]),
        EntityKind.STUDENT,
        [
            AttachmentRule(EntityKind.EXERCISE, under="exercises"),
            AttachmentRule(EntityKind.COHORT, under="cohort"),
        ],
    ),
    ReportDef(
        "cohort_roster", "Instructors and students per cohort",
        roster_repo.cohort_roster_rows,
        RowShape([COHORT, INSTRUCTOR, STUDENT]),
        EntityKind.COHORT,
        [
            AttachmentRule(EntityKind.INSTRUCTOR, under="instructors", required=False),
            AttachmentRule(EntityKind.STUDENT, under="students", required=False),
        ],
    ),
    ReportDef(
        "exercise_assignments", "Students working on each exercise",
        roster_repo.exercise_assignment_rows,
        RowShape([EXERCISE, ASSIGNMENT, STUDENT, INSTRUCTOR, COHORT]),
        EntityKind.EXERCISE,
        [
            AttachmentRule(EntityKind.STUDENT_EXERCISE, under="assignments"),
            AttachmentRule(EntityKind.STUDENT, under="students"),
            AttachmentRule(EntityKind.STUDENT, under="student", parent_kind=EntityKind.STUDENT_EXERCISE),
            AttachmentRule(EntityKind.INSTRUCTOR, under="instructor", parent_kind=EntityKind.STUDENT_EXERCISE),
            AttachmentRule(EntityKind.COHORT, under="cohort", parent_kind=EntityKind.STUDENT),
        ],
    ),
]

REPORTS: Dict[str, ReportDef] = {d.name: d for d in _DEFS}


def list_reports() -> List[dict]:
    return [{"name": d.name, "title": d.title, "primary": d.primary.value} for d in _DEFS]


def get_report_def(name: str) -> ReportDef:
    d = REPORTS.get(name)
    if d is None:
        raise ValueError("report_not_found")
    return d


def build_report(name: str, strict: Optional[bool] = None) -> MaterializedGraph:
    """Run the report query and fold its rows; strict=None reads the strict_mode setting."""
    d = get_report_def(name)
    if strict is None:
        strict = config_svc.get_config()["strict_mode"]
    with get_conn() as conn:
        # the cursor is consumed row by row while the connection is open
        rows = d.shape.split_all(d.query(conn))
        graph = d.materializer(strict).materialize(rows)
    logger.debug("report %s: %d rows -> %d nodes", name, graph.row_count, len(graph))
    return graph


def run_report(name: str, strict: Optional[bool], log: LogContext) -> dict:
    cfg = config_svc.get_config()
    graph = build_report(name, strict if strict is not None else cfg["strict_mode"])
    out = {
        "name": name,
        "title": REPORTS[name].title,
        "lines": render_svc.render(name, graph, separator=cfg["list_separator"]),
        "rows": render_svc.flatten(name, graph),
        "graph": render_svc.graph_to_dict(graph),
        "conflicts": [c.as_dict() for c in graph.conflicts],
    }
    log.set_graph(name, graph)
    return out
