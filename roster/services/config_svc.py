# roster/services/config_svc.py
from ..db import get_conn
from ..logs import ENTITY_CONFIG, LogContext

DEFAULTS = {
    # "1" raises InconsistentRecord when one identity shows up with different field values;
    # "0" keeps the first value seen and reports the conflict instead
    "strict_mode": "0",
    # separator used when a report lists several exercises on one line
    "list_separator": ",",
}

_TRUE = ("1", "true", "yes", "on")


def _to_bool(v) -> bool:
    return str(v).strip().lower() in _TRUE


def ensure_default_config():
    """Insert missing settings without overwriting existing values."""
    with get_conn() as conn:
        for k, v in DEFAULTS.items():
            conn.execute(
                "INSERT INTO config(key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO NOTHING",
                (k, v),
            )
        conn.commit()

def get_config() -> dict:
    with get_conn() as conn:
        rows = conn.execute("SELECT key, value FROM config").fetchall()
    cfg = {r["key"]: r["value"] for r in rows}

    return {
        "strict_mode": _to_bool(cfg.get("strict_mode", DEFAULTS["strict_mode"])),
        "list_separator": cfg.get("list_separator") or DEFAULTS["list_separator"],
    }

def update_config(upd: dict, log: LogContext) -> list[str]:
    unknown = [k for k in upd if k not in DEFAULTS]
    if unknown:
        raise ValueError(f"unknown_setting: {', '.join(sorted(unknown))}")
    updated = []
    with get_conn() as conn:
        before = {r["key"]: r["value"] for r in conn.execute("SELECT key,value FROM config")}
        for k, v in upd.items():
            if isinstance(v, bool):
                v = "1" if v else "0"
            conn.execute(
                "INSERT INTO config(key,value) VALUES(?,?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (k, str(v))
            )
            updated.append(k)
        conn.commit()
        after = {r["key"]: r["value"] for r in conn.execute("SELECT key,value FROM config")}
    log.set_entity(ENTITY_CONFIG, ",".join(updated))
    log.set_before(before); log.set_after(after)
    return updated
