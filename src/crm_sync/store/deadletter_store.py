"""SQLite-backed dead-letter store for payloads that failed processing."""

import json
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


class DeadLetter:
    """A failed payload with the error that stopped it."""

    def __init__(
        self,
        id: str,
        created_at: datetime,
        error: str,
        payload: Any,
        headers: Optional[dict[str, Any]],
    ):
        self.id = id
        self.created_at = created_at
        self.error = error
        self.payload = payload
        self.headers = headers

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.created_at.isoformat(),
            "error": self.error,
            "payload": self.payload,
            "headers": self.headers,
        }


class DeadLetterStore:
    """
    SQLite store for dead letters plus an append-only events table
    (success/failure outcomes for later analysis).
    """

    def __init__(self, db_path: str | Path = "crm_sync.db"):
        self._db_path = Path(db_path)
        self._ensure_schema()

    def _connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        schema_path = Path(__file__).parent / "schema.sql"
        with self._connection() as conn:
            conn.executescript(schema_path.read_text())

    def _row_to_letter(self, row: sqlite3.Row) -> DeadLetter:
        return DeadLetter(
            id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            error=row["error"],
            payload=json.loads(row["payload"]),
            headers=json.loads(row["headers"]) if row["headers"] else None,
        )

    def write(self, payload: Any, error: str, headers: Optional[dict[str, Any]] = None) -> DeadLetter:
        """Persist a failed payload. Returns the stored DeadLetter with its generated id."""
        now = datetime.now(timezone.utc)
        letter_id = f"deadletter-{now.strftime('%Y%m%dT%H%M%S')}-{uuid.uuid4().hex[:12]}"
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO deadletters (id, created_at, error, payload, headers) VALUES (?, ?, ?, ?, ?)",
                (
                    letter_id,
                    now.isoformat(),
                    error,
                    json.dumps(payload, default=str),
                    json.dumps(headers, default=str) if headers is not None else None,
                ),
            )
            conn.commit()
        return DeadLetter(id=letter_id, created_at=now, error=error, payload=payload, headers=headers)

    def list(self, limit: Optional[int] = None) -> list[DeadLetter]:
        """Dead letters, newest first."""
        query = "SELECT * FROM deadletters ORDER BY created_at DESC"
        params: tuple = ()
        if limit is not None:
            query += " LIMIT ?"
            params = (limit,)
        with self._connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_letter(r) for r in rows]

    def get(self, letter_id: str) -> Optional[DeadLetter]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM deadletters WHERE id = ?", (letter_id,)).fetchone()
        return self._row_to_letter(row) if row else None

    def count(self) -> int:
        with self._connection() as conn:
            row = conn.execute("SELECT COUNT(*) AS n FROM deadletters").fetchone()
        return int(row["n"])

    def write_event(self, event_type: str, data: dict[str, Any]) -> int:
        """Append an outcome event (e.g. 'success', 'failure'). Returns its row id."""
        now = datetime.now(timezone.utc).isoformat()
        with self._connection() as conn:
            cursor = conn.execute(
                "INSERT INTO events (event_type, created_at, data) VALUES (?, ?, ?)",
                (event_type, now, json.dumps(data, default=str)),
            )
            conn.commit()
            return cursor.lastrowid or 0

    def count_events(self, event_type: Optional[str] = None) -> int:
        with self._connection() as conn:
            if event_type is None:
                row = conn.execute("SELECT COUNT(*) AS n FROM events").fetchone()
            else:
                row = conn.execute(
                    "SELECT COUNT(*) AS n FROM events WHERE event_type = ?", (event_type,)
                ).fetchone()
        return int(row["n"])
