from __future__ import annotations


from sqlite3 import Connection


def ensure_schema(conn: Connection):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS line (
            id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL UNIQUE,
            quote TEXT,
            author TEXT
        )
        """
    )


def insert(conn: Connection, quote: str, author: str) -> int:
    cur = conn.execute(
        "INSERT INTO line(quote, author) VALUES(?, ?)",
        (quote, author),
    )
    return cur.lastrowid


def delete(conn: Connection, quote_id: int) -> int:
    cur = conn.execute("DELETE FROM line WHERE id=?", (quote_id,))
    return cur.rowcount


def list_all(conn: Connection):
    return conn.execute("SELECT id, quote, author FROM line ORDER BY id").fetchall()
