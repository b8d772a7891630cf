"""SQLite store for athlete thresholds and sessions."""

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..analysis.tri_score import SportAggregate
from ..config import get_settings
from ..exceptions import (
    AthleteNotFoundError,
    DatabaseError,
    InvalidSessionError,
    SessionNotFoundError,
)
from ..models.athlete import AthleteThresholds, Session, Sport
from .schema import SCHEMA

logger = logging.getLogger(__name__)

THRESHOLD_COLUMNS = ("ftp", "lthr", "threshold_pace", "css", "max_hr", "resting_hr")
SESSION_COLUMNS = (
    "id",
    "athlete_id",
    "date",
    "sport",
    "name",
    "duration_seconds",
    "avg_heart_rate",
    "avg_power",
    "normalized_power",
    "avg_speed",
    "distance",
    "tss",
    "tss_method",
)


def get_default_db_path() -> Path:
    """Get the default database path from settings."""
    return Path(get_settings().db_path)


class TrainingDatabase:
    """SQLite database manager for athletes and their sessions."""

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize the training database.

        Args:
            db_path: Path to SQLite database file. If not provided,
                     uses TRAINING_LOAD_DB_PATH or the default location.
        """
        if db_path:
            self.db_path = Path(db_path)
        else:
            self.db_path = get_default_db_path()

        self._init_db()

    def _init_db(self):
        """Initialize database tables."""
        with self._get_connection() as conn:
            conn.executescript(SCHEMA)

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Database error on {self.db_path}: {e}")
            raise DatabaseError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # === Athlete Methods ===

    def save_thresholds(
        self,
        athlete_id: str,
        thresholds: AthleteThresholds,
        name: Optional[str] = None,
    ) -> AthleteThresholds:
        """Create or replace an athlete's thresholds."""
        values = [getattr(thresholds, col) for col in THRESHOLD_COLUMNS]
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO athletes
                (athlete_id, name, ftp, lthr, threshold_pace, css, max_hr, resting_hr, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(athlete_id) DO UPDATE SET
                    name = COALESCE(excluded.name, athletes.name),
                    ftp = excluded.ftp,
                    lthr = excluded.lthr,
                    threshold_pace = excluded.threshold_pace,
                    css = excluded.css,
                    max_hr = excluded.max_hr,
                    resting_hr = excluded.resting_hr,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (athlete_id, name, *values),
            )
        return thresholds

    def get_thresholds(self, athlete_id: str) -> AthleteThresholds:
        """Get an athlete's current thresholds."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM athletes WHERE athlete_id = ?",
                (athlete_id,),
            ).fetchone()

        if row is None:
            raise AthleteNotFoundError(athlete_id)
        return AthleteThresholds.from_dict(dict(row))

    def athlete_exists(self, athlete_id: str) -> bool:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT 1 FROM athletes WHERE athlete_id = ?",
                (athlete_id,),
            ).fetchone()
        return row is not None

    def list_athletes(self) -> List[Dict[str, Optional[str]]]:
        """List athlete IDs and names."""
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT athlete_id, name FROM athletes ORDER BY athlete_id"
            ).fetchall()
        return [dict(row) for row in rows]

    # === Session Methods ===

    def save_session(self, session: Session) -> Session:
        """
        Insert or replace a session.

        A session without an ID is given a new one.

        Returns:
            The stored session
        """
        if session.athlete_id is None:
            raise InvalidSessionError("Session has no athlete_id", field="athlete_id")
        if session.id is None:
            session.id = uuid.uuid4().hex

        row = session.to_dict()
        placeholders = ", ".join("?" for _ in SESSION_COLUMNS)
        with self._get_connection() as conn:
            conn.execute(
                f"""
                INSERT OR REPLACE INTO sessions
                ({", ".join(SESSION_COLUMNS)}, updated_at)
                VALUES ({placeholders}, CURRENT_TIMESTAMP)
                """,
                tuple(row[col] for col in SESSION_COLUMNS),
            )
        return session

    def get_session(self, session_id: str) -> Session:
        """Get one session by ID."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM sessions WHERE id = ?",
                (session_id,),
            ).fetchone()

        if row is None:
            raise SessionNotFoundError(session_id)
        return Session.from_dict(dict(row))

    def list_sessions(
        self,
        athlete_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        sport: Optional[Sport] = None,
    ) -> List[Session]:
        """Get an athlete's sessions, oldest first, optionally filtered."""
        query = "SELECT * FROM sessions WHERE athlete_id = ?"
        params: list = [athlete_id]
        if start_date is not None:
            query += " AND date >= ?"
            params.append(start_date.isoformat())
        if end_date is not None:
            query += " AND date <= ?"
            params.append(end_date.isoformat())
        if sport is not None:
            query += " AND sport = ?"
            params.append(Sport.from_string(sport).value)
        query += " ORDER BY date, id"

        with self._get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [Session.from_dict(dict(row)) for row in rows]

    def update_session_tss(self, session_id: str, tss: float, method: str) -> None:
        """Attach a computed TSS to a stored session."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                UPDATE sessions SET tss = ?, tss_method = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (tss, method, session_id),
            )
            if cursor.rowcount == 0:
                raise SessionNotFoundError(session_id)

    def delete_session(self, session_id: str) -> bool:
        """Delete a session. Returns True if a row was removed."""
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
            return cursor.rowcount > 0

    def get_first_session_date(self, athlete_id: str) -> Optional[date]:
        """Date of the athlete's earliest session, if any."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT MIN(date) AS first_date FROM sessions WHERE athlete_id = ?",
                (athlete_id,),
            ).fetchone()
        if row is None or row["first_date"] is None:
            return None
        return date.fromisoformat(row["first_date"])

    def get_daily_tss(
        self, athlete_id: str, start_date: date, end_date: date
    ) -> List[Tuple[date, float]]:
        """Get total TSS per day that has sessions, in date order."""
        with self._get_connection() as conn:
            rows = conn.execute(
                """
                SELECT date, SUM(COALESCE(tss, 0)) AS total_tss
                FROM sessions
                WHERE athlete_id = ? AND date >= ? AND date <= ?
                GROUP BY date
                ORDER BY date
                """,
                (athlete_id, start_date.isoformat(), end_date.isoformat()),
            ).fetchall()
        return [(date.fromisoformat(row["date"]), row["total_tss"]) for row in rows]

    def get_sport_aggregates(
        self, athlete_id: str, start_date: date, end_date: date
    ) -> Dict[Sport, SportAggregate]:
        """Get hours, TSS and session count per sport over a window."""
        with self._get_connection() as conn:
            rows = conn.execute(
                """
                SELECT sport,
                       SUM(duration_seconds) / 3600.0 AS hours,
                       SUM(COALESCE(tss, 0)) AS total_tss,
                       COUNT(*) AS activity_count
                FROM sessions
                WHERE athlete_id = ? AND date >= ? AND date <= ?
                GROUP BY sport
                """,
                (athlete_id, start_date.isoformat(), end_date.isoformat()),
            ).fetchall()

        return {
            Sport(row["sport"]): SportAggregate(
                hours=row["hours"],
                tss=row["total_tss"],
                activity_count=row["activity_count"],
            )
            for row in rows
        }

    def get_stats(self) -> dict:
        """Get database statistics."""
        with self._get_connection() as conn:
            athletes = conn.execute("SELECT COUNT(*) FROM athletes").fetchone()[0]
            sessions = conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0]
            span = conn.execute("SELECT MIN(date), MAX(date) FROM sessions").fetchone()

        return {
            "athletes": athletes,
            "sessions": sessions,
            "date_range": {"first": span[0], "last": span[1]},
        }
