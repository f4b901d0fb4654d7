"""
Presentation: read-only walks over a MaterializedGraph.

render()  -> console lines, one report at a time
flatten() -> one flat dict per leaf, for CSV export and the API
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List

from ..domain.graph import MaterializedGraph, Node
from ..domain.kinds import EntityKind

PREFIX = {
    EntityKind.COHORT.value: "cohort",
    EntityKind.INSTRUCTOR.value: "instructor",
    EntityKind.STUDENT.value: "student",
    EntityKind.EXERCISE.value: "exercise",
    EntityKind.STUDENT_EXERCISE.value: "assignment",
}


def full_name(node: Node | None) -> str:
    if node is None:
        return ""
    return f"{node.get('first_name', '')} {node.get('last_name', '')}".strip()


def _name(node: Node | None) -> str:
    return node.get("name", "") if node is not None else ""


def _cols(node: Node | None, prefix: str | None = None) -> Dict[str, Any]:
    if node is None:
        return {}
    p = prefix or PREFIX.get(node.kind, node.kind.lower())
    out: Dict[str, Any] = {f"{p}_id": node.id}
    for k, v in node.fields.items():
        out[f"{p}_{k}"] = v
    return out


# ---------- console lines ----------

def _lines_people(graph: MaterializedGraph, sep: str) -> List[str]:
    return [full_name(n) for n in graph.roots()]


def _lines_named(graph: MaterializedGraph, sep: str) -> List[str]:
    return [_name(n) for n in graph.roots()]


def _lines_instructor_cohort(graph: MaterializedGraph, sep: str) -> List[str]:
    return [
        f"{full_name(i)} ({i.get('slack_handle')}) is coaching {_name(i.first('cohort'))}"
        for i in graph.roots()
    ]


def _lines_cohort_instructors(graph: MaterializedGraph, sep: str) -> List[str]:
    return [f"{c['name']} has {len(c.collection('instructors'))} instructors." for c in graph.roots()]


def _lines_student_exercises(graph: MaterializedGraph, sep: str) -> List[str]:
    out = []
    for s in graph.roots():
        names = sep.join(_name(e) for e in s.collection("exercises"))
        out.append(f"{full_name(s)} is working on {names}.")
    return out


def _lines_student_exercises_cohort(graph: MaterializedGraph, sep: str) -> List[str]:
    out = []
    for s in graph.roots():
        names = sep.join(_name(e) for e in s.collection("exercises"))
        out.append(f"{full_name(s)} in {_name(s.first('cohort'))} is working on {names}.")
    return out


def _lines_cohort_roster(graph: MaterializedGraph, sep: str) -> List[str]:
    # cohort name, then every instructor, then every student, space separated
    out = []
    for c in graph.roots():
        people = [full_name(p) for p in c.collection("instructors") + c.collection("students")]
        out.append(" ".join([c["name"]] + people))
    return out


def _lines_exercise_assignments(graph: MaterializedGraph, sep: str) -> List[str]:
    out = []
    for e in graph.roots():
        for a in e.collection("assignments"):
            student = a.first("student")
            cohort = student.first("cohort") if student is not None else None
            out.append(
                f"{_name(cohort)} {full_name(student)} {e['name']} {full_name(a.first('instructor'))}"
            )
    return out


RENDERERS: Dict[str, Callable[[MaterializedGraph, str], List[str]]] = {
    "instructors": _lines_people,
    "students": _lines_people,
    "exercises": _lines_named,
    "cohorts": _lines_named,
    "instructor_cohort": _lines_instructor_cohort,
    "cohort_instructors": _lines_cohort_instructors,
    "student_exercises": _lines_student_exercises,
    "student_exercises_cohort": _lines_student_exercises_cohort,
    "cohort_roster": _lines_cohort_roster,
    "exercise_assignments": _lines_exercise_assignments,
}


def render(name: str, graph: MaterializedGraph, separator: str = ",") -> List[str]:
    fn = RENDERERS.get(name)
    if fn is None:
        raise ValueError("report_not_found")
    return fn(graph, separator)


# ---------- flat rows ----------

def _with_children(graph: MaterializedGraph, coll: str, extra: Callable[[Node], Dict[str, Any]] | None = None):
    rows = []
    for p in graph.roots():
        base = _cols(p)
        if extra:
            base.update(extra(p))
        children = p.collection(coll)
        if not children:
            rows.append(base)
        for child in children:
            rows.append({**base, **_cols(child)})
    return rows


def flatten(name: str, graph: MaterializedGraph) -> List[Dict[str, Any]]:
    if name in ("instructors", "students", "exercises", "cohorts"):
        return [_cols(n) for n in graph.roots()]
    if name == "instructor_cohort":
        return [{**_cols(i), **_cols(i.first("cohort"))} for i in graph.roots()]
    if name == "cohort_instructors":
        return _with_children(graph, "instructors")
    if name == "student_exercises":
        return _with_children(graph, "exercises")
    if name == "student_exercises_cohort":
        return _with_children(graph, "exercises", lambda s: _cols(s.first("cohort")))
    if name == "cohort_roster":
        rows = []
        for c in graph.roots():
            for role in ("instructors", "students"):
                for person in c.collection(role):
                    rows.append({
                        **_cols(c),
                        "role": role[:-1],
                        "person_id": person.id,
                        "first_name": person.get("first_name"),
                        "last_name": person.get("last_name"),
                        "slack_handle": person.get("slack_handle"),
                    })
        return rows
    if name == "exercise_assignments":
        rows = []
        for e in graph.roots():
            for a in e.collection("assignments"):
                student = a.first("student")
                rows.append({
                    **_cols(e),
                    "assignment_id": a.id,
                    **_cols(student),
                    **_cols(a.first("instructor")),
                    **_cols(student.first("cohort") if student is not None else None),
                })
        return rows
    raise ValueError("report_not_found")


# ---------- JSON view ----------

def node_ref(node: Node) -> Dict[str, Any]:
    return {"kind": node.kind, "id": node.id, "fields": dict(node.fields)}


def node_to_dict(node: Node) -> Dict[str, Any]:
    out = node_ref(node)
    out["children"] = {name: [node_to_dict(c) for c in items] for name, items in node.children.items()}
    return out


def graph_to_dict(graph: MaterializedGraph) -> Dict[str, Any]:
    return {
        "primary_kind": graph.primary_kind,
        "row_count": graph.row_count,
        "node_count": len(graph),
        "roots": [node_to_dict(n) for n in graph.roots()],
    }
