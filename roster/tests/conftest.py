import os
import sys
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "classroom_test.db"
    # Point roster to this temp DB
    os.environ["ROSTER_DB_PATH"] = str(path)
    from roster.logs import LogContext
    from roster.services.schema_svc import init_db
    init_db(LogContext("TEST_SEED"))
    return str(path)


@pytest.fixture()
def client(tmp_db_path):
    from roster.api import app
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


@pytest.fixture(autouse=True)
def _reset_config(request):
    # pure domain tests never touch the DB
    if "tmp_db_path" not in request.fixturenames:
        yield
        return
    tmp_db_path = request.getfixturevalue("tmp_db_path")
    # Safety: ensure we only ever touch the temp DB, never a real one
    assert os.environ.get("ROSTER_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    from roster.db import get_conn
    from roster.services.config_svc import ensure_default_config
    with get_conn() as conn:
        conn.execute("DELETE FROM config")
        conn.commit()
    ensure_default_config()
    yield
