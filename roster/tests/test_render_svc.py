import pytest

from roster.domain.extract import EntityRecord
from roster.domain.graph import AttachmentRule, materialize
from roster.services import render_svc


def _roster():
    rows = [
        (EntityRecord("Cohort", 1, {"name": "Day Cohort 13"}),
         EntityRecord("Instructor", 2, {"first_name": "Joe", "last_name": "Shepherd"}),
         EntityRecord("Student", 3, {"first_name": "Jacob", "last_name": "Henderson"})),
        (EntityRecord("Cohort", 9, {"name": "Day Cohort 99"}),
         EntityRecord("Instructor", None, {}),
         EntityRecord("Student", None, {})),
    ]
    rules = [
        AttachmentRule("Instructor", under="instructors", required=False),
        AttachmentRule("Student", under="students", required=False),
    ]
    return materialize(rows, "Cohort", rules)


def test_empty_cohort_renders_name_only():
    assert render_svc.render("cohort_roster", _roster()) == [
        "Day Cohort 13 Joe Shepherd Jacob Henderson",
        "Day Cohort 99",
    ]


def test_flatten_roster_one_row_per_person():
    rows = render_svc.flatten("cohort_roster", _roster())
    assert [(r["cohort_id"], r["role"], r["person_id"]) for r in rows] == [(1, "instructor", 2), (1, "student", 3)]


def test_flatten_keeps_parent_without_children():
    rows = [
        (EntityRecord("Cohort", 1, {"name": "A"}), EntityRecord("Instructor", 5, {"first_name": "X"})),
    ]
    g = materialize(rows, "Cohort", [AttachmentRule("Instructor")])
    assert render_svc.flatten("cohort_instructors", g) == [{"cohort_id": 1, "cohort_name": "A"}]
    assert render_svc.render("cohort_instructors", g) == ["A has 0 instructors."]


def test_graph_to_dict_nests_children():
    d = render_svc.graph_to_dict(_roster())
    assert d["primary_kind"] == "Cohort"
    assert d["node_count"] == 4
    first = d["roots"][0]
    assert first["fields"] == {"name": "Day Cohort 13"}
    assert first["children"]["students"][0] == {
        "kind": "Student", "id": 3, "fields": {"first_name": "Jacob", "last_name": "Henderson"}, "children": {},
    }
    assert d["roots"][1]["children"] == {}


def test_unknown_report_name():
    with pytest.raises(ValueError):
        render_svc.render("nope", _roster())
    with pytest.raises(ValueError):
        render_svc.flatten("nope", _roster())
