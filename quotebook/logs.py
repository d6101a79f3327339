"""Operation log: one row per user command (save, delete, fetch, settings), mirrored to `logging`."""
import datetime as dt
import json
import logging
import time
import uuid
from typing import Optional

from .db import get_conn

logger = logging.getLogger("quotebook.oplog")

DDL = """
CREATE TABLE IF NOT EXISTS operation_log (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  ts TEXT NOT NULL,
  action TEXT NOT NULL,
  entity_id TEXT,
  request_id TEXT,
  payload_json TEXT,
  after_json TEXT,
  result TEXT NOT NULL,
  err_msg TEXT,
  latency_ms INTEGER
);
CREATE INDEX IF NOT EXISTS idx_oplog_action ON operation_log(action);
CREATE INDEX IF NOT EXISTS idx_oplog_entity ON operation_log(entity_id);
"""


def ensure_log_schema():
    with get_conn() as conn:
        conn.executescript(DDL)


def _dump(obj) -> Optional[str]:
    return None if obj is None else json.dumps(obj, ensure_ascii=False)


class LogContext:
    """Collects what one command did and writes it once the outcome is known."""

    def __init__(self, action: str):
        self.action = action
        self.request_id = uuid.uuid4().hex
        self.start = time.perf_counter()
        self.entity_id: Optional[str] = None
        self.payload = None
        self.after = None

    def set_entity(self, quote_id: str):
        self.entity_id = quote_id

    def set_payload(self, obj):
        self.payload = obj

    def set_after(self, obj):
        self.after = obj

    def write(self, result: str = "OK", err: Optional[str] = None):
        latency_ms = int((time.perf_counter() - self.start) * 1000)
        if result == "OK":
            logger.info("%s entity=%s %dms", self.action, self.entity_id, latency_ms)
        else:
            logger.warning("%s %s: %s", self.action, result, err)
        with get_conn() as conn:
            conn.execute(
                "INSERT INTO operation_log"
                "(ts, action, entity_id, request_id, payload_json, after_json, result, err_msg, latency_ms) "
                "VALUES(?,?,?,?,?,?,?,?,?)",
                (
                    dt.datetime.now(dt.timezone.utc).isoformat(),
                    self.action,
                    self.entity_id,
                    self.request_id,
                    _dump(self.payload),
                    _dump(self.after),
                    result,
                    err,
                    latency_ms,
                ),
            )


_FILTERS = (
    ("q", "(payload_json LIKE :q OR after_json LIKE :q)"),
    ("action", "action = :action"),
    ("entity_id", "entity_id = :entity_id"),
    ("ts_from", "ts >= :ts_from"),
    ("ts_to", "ts <= :ts_to"),
)


def search_logs(
    q: str | None = None,
    action: str | None = None,
    ts_from: str | None = None,
    ts_to: str | None = None,
    page: int = 1,
    size: int = 20,
    entity_id: str | None = None,
):
    given = {"q": f"%{q}%" if q else None, "action": action, "entity_id": entity_id, "ts_from": ts_from, "ts_to": ts_to}
    params = {k: v for k, v in given.items() if v}
    clauses = [clause for key, clause in _FILTERS if key in params]
    wh = " WHERE " + " AND ".join(clauses) if clauses else ""
    page, size = max(page, 1), max(size, 1)
    with get_conn() as conn:
        total = conn.execute(f"SELECT COUNT(1) AS cnt FROM operation_log{wh}", params).fetchone()["cnt"]
        rows = conn.execute(
            f"SELECT * FROM operation_log{wh} ORDER BY id DESC LIMIT :limit OFFSET :offset",
            {**params, "limit": size, "offset": (page - 1) * size},
        ).fetchall()
    return total, [dict(r) for r in rows]
