import pytest

from roster.domain.extract import EntityRecord
from roster.domain.graph import AttachmentRule, materialize
from roster.logs import ENTITY_CONFIG, ENTITY_REPORT, LogContext, search_logs


def test_entity_type_must_be_known():
    log = LogContext("TEST")
    with pytest.raises(ValueError, match="unknown_entity_type"):
        log.set_entity("POSITION", "1")
    assert log.entity_type is None
    log.set_entity(ENTITY_CONFIG, "strict_mode")
    assert (log.entity_type, log.entity_id) == ("CONFIG", "strict_mode")


def test_set_graph_records_fold_size():
    rows = [
        (EntityRecord("Cohort", 1, {"name": "A"}), EntityRecord("Instructor", 10, {})),
        (EntityRecord("Cohort", 1, {"name": "B"}), EntityRecord("Instructor", 11, {})),
    ]
    g = materialize(rows, "Cohort", [AttachmentRule("Instructor", under="instructors")])
    log = LogContext("TEST")
    log.set_graph("cohort_instructors", g)
    assert (log.entity_type, log.entity_id) == (ENTITY_REPORT, "cohort_instructors")
    assert log.after == {"rows": 2, "nodes": 3, "roots": 1, "conflicts": 1}


def test_search_logs_filters_by_entity_type(tmp_db_path):
    log = LogContext("TEST_LOG_FILTER")
    log.set_entity(ENTITY_CONFIG, "list_separator")
    log.write("OK")
    total, items = search_logs(None, "TEST_LOG_FILTER", None, None, 1, 10, entity_type=ENTITY_CONFIG)
    assert total >= 1
    assert items[0]["entity_id"] == "list_separator"
    total, _ = search_logs(None, "TEST_LOG_FILTER", None, None, 1, 10, entity_type=ENTITY_REPORT)
    assert total == 0
