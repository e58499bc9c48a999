# file: db_utils.py
import sqlite3
import json
import os
from typing import List, Optional


def get_db_connection() -> sqlite3.Connection:
    """
    Возвращает НОВОЕ соединение с SQLite журнала событий.
    DATABASE_FILE is read on every call so tests can point it at a scratch file.
    """
    db_file = os.getenv("DATABASE_FILE", "trades.sqlite")

    # timeout=30 sets busy_timeout; check_same_thread=False for FastAPI worker threads
    conn = sqlite3.connect(db_file, timeout=30, check_same_thread=False)
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.row_factory = sqlite3.Row
    return conn


def fetch_events(event_type: Optional[str] = None, limit: int = 20) -> List[dict]:
    """Читает последние события из trade_log, новые первыми. payload_json раскрывается в dict."""
    conn = get_db_connection()
    try:
        if event_type:
            rows = conn.execute(
                "SELECT * FROM trade_log WHERE event_type = ? ORDER BY id DESC LIMIT ?",
                (event_type, limit)
            ).fetchall()
        else:
            rows = conn.execute("SELECT * FROM trade_log ORDER BY id DESC LIMIT ?", (limit,)).fetchall()
    finally:
        conn.close()

    events = []
    for row in rows:
        try:
            payload = json.loads(row['payload_json']) if row['payload_json'] else {}
        except json.JSONDecodeError:
            payload = {"raw": row['payload_json']}
        events.append({
            "id": row['id'],
            "timestamp_utc": row['timestamp_utc'],
            "event_type": row['event_type'],
            "payload": payload,
        })
    return events
