from roster.db import get_conn


def test_health_and_version(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"

    v = client.get("/version")
    assert v.status_code == 200
    assert v.json().get("app") == "classroom-roster-api"


def test_report_list_and_run(client):
    r = client.get("/api/reports")
    assert r.status_code == 200
    names = [i["name"] for i in r.json()["items"]]
    assert "exercise_assignments" in names and "cohort_roster" in names

    res = client.get("/api/reports/student_exercises_cohort")
    assert res.status_code == 200
    body = res.json()
    assert body["title"] == "Exercises per student, with cohort"
    assert body["lines"][1] == "Phill Patton in Evening Cohort 1 is working on Cow."
    # 4 students, 5 exercises, 3 cohorts; each appears once however many rows mention it
    assert body["graph"]["node_count"] == 12
    assert body["graph"]["row_count"] == 7
    assert len(body["rows"]) == 7
    assert body["rows"][0]["cohort_name"] == "Evening Cohort 1"
    assert body["conflicts"] == []

    # the run is audited
    with get_conn() as conn:
        log = conn.execute(
            "SELECT entity_type, entity_id, result FROM operation_log WHERE action='REPORT_RUN' ORDER BY id DESC LIMIT 1"
        ).fetchone()
    assert dict(log) == {"entity_type": "REPORT", "entity_id": "student_exercises_cohort", "result": "OK"}


def test_report_strict_query_param(client):
    res = client.get("/api/reports/exercise_assignments", params={"strict": "true"})
    assert res.status_code == 200
    assert res.json()["lines"][-1] == "Day Cohort 21 Brett Shearin Kennel Emily Lemmon"


def test_unknown_report_is_404(client):
    res = client.get("/api/reports/nope")
    assert res.status_code == 404
    assert res.json()["detail"] == "report_not_found"


def test_settings_roundtrip(client):
    r = client.get("/api/settings/get")
    assert r.json() == {"strict_mode": False, "list_separator": ","}

    u = client.post("/api/settings/update", json={"updates": {"list_separator": " + "}})
    assert u.status_code == 200
    assert u.json()["updated"] == ["list_separator"]

    res = client.get("/api/reports/student_exercises")
    assert res.json()["lines"][3] == "Brett Shearin is working on Turkey + Kennel."

    bad = client.post("/api/settings/update", json={"updates": {"colour": "red"}})
    assert bad.status_code == 400
    assert "unknown_setting" in bad.json()["detail"]


def test_logs_search(client):
    client.get("/api/reports/cohorts")
    r = client.get("/api/logs/search", params={"action": "REPORT_RUN", "size": 5})
    assert r.status_code == 200
    body = r.json()
    assert body["total"] >= 1
    assert body["items"][0]["action"] == "REPORT_RUN"


def test_admin_init_is_idempotent(client):
    r = client.post("/api/admin/init", json={})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "ok"
    assert body["counts"]["Student"] == 4
    assert body["created"]["student"] == 0


def test_admin_init_bad_seeds_dir(client, tmp_path):
    r = client.post("/api/admin/init", json={"seeds_dir": str(tmp_path / "missing")})
    assert r.status_code == 400


def test_admin_init_reset_with_bad_seeds_dir_keeps_rows(client, tmp_path):
    r = client.post("/api/admin/init", json={"reset": True, "seeds_dir": str(tmp_path / "missing")})
    assert r.status_code == 400
    with get_conn() as conn:
        students = conn.execute("SELECT COUNT(1) AS n FROM Student").fetchone()["n"]
        assignments = conn.execute("SELECT COUNT(1) AS n FROM StudentExercise").fetchone()["n"]
    assert (students, assignments) == (4, 7)


def test_logs_search_by_entity_type(client):
    client.get("/api/reports/cohorts")
    r = client.get("/api/logs/search", params={"entity_type": "REPORT"})
    assert r.status_code == 200
    items = r.json()["items"]
    assert items and all(i["entity_type"] == "REPORT" for i in items)

    bad = client.get("/api/logs/search", params={"entity_type": "PORTFOLIO"})
    assert bad.status_code == 400
    assert bad.json()["detail"] == "unknown_entity_type: PORTFOLIO"
