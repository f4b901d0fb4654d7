import sqlite3

import pytest

from roster.domain.errors import MalformedRow
from roster.domain.extract import EntityExtractor, RowShape
from roster.domain.kinds import EntityKind


def test_named_extractor_reads_aliased_columns():
    ex = EntityExtractor.from_prefix(EntityKind.COHORT, "cohort", ["name"])
    r = ex.extract({"cohort_id": 3, "cohort_name": "Day Cohort 21"})
    assert r.kind == "Cohort"
    assert r.id == 3
    assert dict(r.fields) == {"name": "Day Cohort 21"}
    assert not r.is_null
    assert r.identity == ("Cohort", 3)


def test_range_extractor_splits_positional_row():
    shape = RowShape([
        EntityExtractor.from_range("Instructor", 0, ["cohort_id", "first_name", "id"]),
        EntityExtractor.from_range("Cohort", 3, ["id", "name"]),
    ])
    instructor, cohort = shape.split((1, "Steve", 10, 1, "Evening Cohort 1"))
    assert instructor.id == 10
    assert dict(instructor.fields) == {"cohort_id": 1, "first_name": "Steve"}
    assert cohort.id == 1 and cohort.fields["name"] == "Evening Cohort 1"
    assert shape.kinds == ["Instructor", "Cohort"]


def test_range_requires_id_column():
    with pytest.raises(ValueError):
        EntityExtractor.from_range("Cohort", 0, ["name"])


def test_null_id_gives_null_record():
    ex = EntityExtractor.from_prefix("Student", "student", ["first_name"])
    r = ex.extract({"student_id": None, "student_first_name": None})
    assert r.is_null
    assert r.fields == {}


def test_short_row_raises_malformed_row():
    shape = RowShape([
        EntityExtractor.from_range("Cohort", 0, ["id", "name"]),
        EntityExtractor.from_range("Instructor", 2, ["id", "first_name"]),
    ])
    rows = [(1, "A", 10, "X"), (1, "A", 11)]
    it = shape.split_all(rows)
    assert next(it)[1].id == 10
    with pytest.raises(MalformedRow) as ei:
        next(it)
    assert ei.value.kind == "Instructor"
    assert ei.value.column == 3
    assert ei.value.row_index == 1


def test_missing_named_column_on_sqlite_row():
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    try:
        row = conn.execute("SELECT 1 AS cohort_id").fetchone()
        ex = EntityExtractor.from_prefix("Cohort", "cohort", ["name"])
        with pytest.raises(MalformedRow):
            ex.extract(row)
    finally:
        conn.close()


def test_id_is_coerced_to_int():
    ex = EntityExtractor("Exercise", "exercise_id", {"name": "exercise_name"})
    assert ex.extract({"exercise_id": "5", "exercise_name": "Cow"}).id == 5
    assert ex.width == 2
