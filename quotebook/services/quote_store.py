from __future__ import annotations

import logging
import sqlite3
import threading

from ..db import get_conn
from ..domain.quote import QuoteRecord
from ..errors import StorageFault, StorageUnavailable
from ..repository import quote_repo

logger = logging.getLogger(__name__)


class QuoteStore:
    """Durable storage of saved quotes in the `line` table.

    Each call opens its own connection and runs as one transaction. A lock
    keeps transactions from interleaving, so a concurrent scan never sees a
    half-applied insert or delete.
    """

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path
        self._lock = threading.Lock()

    def initialize(self) -> None:
        try:
            with self._lock, get_conn(self.db_path) as conn:
                quote_repo.ensure_schema(conn)
        except (sqlite3.Error, OSError) as e:
            logger.error("quote table unavailable: %s", e)
            raise StorageUnavailable(f"quote_table_unavailable: {e}") from e

    def insert(self, quote_text: str, author_name: str) -> int:
        with self._lock:
            try:
                with get_conn(self.db_path) as conn:
                    conn.execute("BEGIN IMMEDIATE")
                    try:
                        new_id = quote_repo.insert(conn, quote_text, author_name)
                        conn.execute("COMMIT")
                    except BaseException:
                        if conn.in_transaction:
                            conn.execute("ROLLBACK")
                        raise
            except sqlite3.Error as e:
                logger.warning("insert failed: %s", e)
                raise StorageFault(f"insert_failed: {e}") from e
        logger.debug("inserted quote id=%s", new_id)
        return new_id

    def delete(self, quote_id: int) -> None:
        with self._lock:
            try:
                with get_conn(self.db_path) as conn:
                    conn.execute("BEGIN IMMEDIATE")
                    try:
                        removed = quote_repo.delete(conn, int(quote_id))
                        conn.execute("COMMIT")
                    except BaseException:
                        if conn.in_transaction:
                            conn.execute("ROLLBACK")
                        raise
            except sqlite3.Error as e:
                logger.warning("delete failed: %s", e)
                raise StorageFault(f"delete_failed: {e}") from e
        if not removed:
            logger.debug("delete of missing quote id=%s ignored", quote_id)

    def scan_all(self) -> list[QuoteRecord]:
        with self._lock:
            try:
                with get_conn(self.db_path) as conn:
                    rows = quote_repo.list_all(conn)
            except sqlite3.Error as e:
                logger.warning("scan failed: %s", e)
                raise StorageFault(f"scan_failed: {e}") from e
        return [QuoteRecord.from_row(r) for r in rows]
