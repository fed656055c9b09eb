from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
import os
from pathlib import Path
import sqlite3

from .config import default_db_path


@dataclass(frozen=True)
class DailyCount:
    day: date
    count: int


def _today() -> date:
    return datetime.now().astimezone().date()


class SessionHistory:
    """Completed work phases per local calendar day."""

    def __init__(self, db_path: Path | None = None, journal_mode: str | None = None) -> None:
        self.db_path = Path(db_path or default_db_path())
        raw_mode = (journal_mode or os.getenv("PHASETIMER_JOURNAL_MODE") or "MEMORY").strip()
        self.journal_mode = raw_mode.upper() if raw_mode else "MEMORY"
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        self._apply_journal_mode(conn)
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    def _apply_journal_mode(self, conn: sqlite3.Connection) -> None:
        try:
            conn.execute(f"PRAGMA journal_mode={self.journal_mode}")
        except sqlite3.OperationalError:
            conn.execute("PRAGMA journal_mode=MEMORY")

    def init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS daily_sessions (
                    day TEXT PRIMARY KEY,
                    count INTEGER NOT NULL DEFAULT 0 CHECK (count >= 0)
                )
                """
            )
            conn.commit()

    def record_work_session(self, day: date | None = None) -> int:
        target = (day or _today()).isoformat()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO daily_sessions (day, count)
                VALUES (?, 1)
                ON CONFLICT(day) DO UPDATE SET count = count + 1
                """,
                (target,),
            )
            row = conn.execute(
                "SELECT count FROM daily_sessions WHERE day = ?",
                (target,),
            ).fetchone()
            conn.commit()
        return int(row["count"])

    def count_for(self, day: date | None = None) -> int:
        target = (day or _today()).isoformat()
        with self._connect() as conn:
            row = conn.execute(
                "SELECT count FROM daily_sessions WHERE day = ?",
                (target,),
            ).fetchone()
        return int(row["count"]) if row else 0

    def recent_days(self, days: int = 7, today: date | None = None) -> list[DailyCount]:
        span = max(1, min(366, int(days)))
        end = today or _today()
        start = end - timedelta(days=span - 1)

        with self._connect() as conn:
            rows = conn.execute(
                "SELECT day, count FROM daily_sessions WHERE day >= ? AND day <= ?",
                (start.isoformat(), end.isoformat()),
            ).fetchall()

        counts = {row["day"]: int(row["count"]) for row in rows}
        items: list[DailyCount] = []
        for offset in range(span):
            day = start + timedelta(days=offset)
            items.append(DailyCount(day=day, count=counts.get(day.isoformat(), 0)))
        return items

    def total(self) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT COALESCE(SUM(count), 0) AS total FROM daily_sessions").fetchone()
        return int(row["total"])
