"""
SQLite storage module for the focus core.
Durable store for sessions, goals, reflections and settings.
"""

import sqlite3
import os
import time
from pathlib import Path
from typing import List, Optional
from contextlib import contextmanager
from datetime import date, datetime

from loguru import logger

from .errors import StorageError
from .models import (
    AppSettings, Goal, GoalPeriod, Reflection, Session, SessionMode
)


def get_app_data_dir() -> Path:
    """
    Get the appropriate application data directory based on OS.
    Creates the directory if it doesn't exist.
    """
    if os.name == 'nt':  # Windows
        base = Path(os.environ.get('APPDATA', Path.home()))
    elif os.name == 'posix':
        # macOS uses ~/Library/Application Support, Linux uses ~/.local/share
        if os.uname().sysname == 'Darwin':
            base = Path.home() / 'Library' / 'Application Support'
        else:
            base = Path(os.environ.get('XDG_DATA_HOME', Path.home() / '.local' / 'share'))
    else:
        base = Path.home()

    app_dir = base / 'FocusCore'
    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


class Storage:
    """
    Database storage manager.
    Every call opens its own connection, so a Storage instance may be
    shared with worker threads.
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize storage with database path.

        Args:
            db_path: Optional custom path for database file.
                    If None, uses default app data directory.
        """
        if db_path is None:
            db_path = str(get_app_data_dir() / 'focus_core.db')

        self.db_path = db_path
        self._init_database()

    @contextmanager
    def _get_connection(self):
        """Context manager for database connections."""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open database {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_database(self):
        """Initialize database schema if tables don't exist."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS sessions (
                    id TEXT PRIMARY KEY,
                    task_label TEXT NOT NULL,
                    mode TEXT NOT NULL,
                    start_ts INTEGER NOT NULL,
                    end_ts INTEGER NOT NULL,
                    duration_sec INTEGER NOT NULL,
                    created_at INTEGER NOT NULL
                )
            ''')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS goals (
                    id TEXT PRIMARY KEY,
                    period TEXT NOT NULL,
                    target_sessions INTEGER NOT NULL CHECK (target_sessions > 0),
                    start_date TEXT NOT NULL,
                    end_date TEXT NOT NULL,
                    created_at INTEGER NOT NULL
                )
            ''')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS reflections (
                    id TEXT PRIMARY KEY,
                    reflection_text TEXT NOT NULL,
                    feedback TEXT NOT NULL,
                    session_date TEXT NOT NULL,
                    created_at INTEGER NOT NULL
                )
            ''')

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            ''')

            cursor.execute('''
                CREATE INDEX IF NOT EXISTS idx_sessions_end
                ON sessions(end_ts)
            ''')
            cursor.execute('''
                CREATE INDEX IF NOT EXISTS idx_reflections_date
                ON reflections(session_date)
            ''')

    # ==================== Sessions ====================

    def create_session(self, session: Session) -> str:
        """
        Insert a completed session.

        Returns:
            ID of the stored session.
        """
        with self._get_connection() as conn:
            conn.execute('''
                INSERT INTO sessions
                (id, task_label, mode, start_ts, end_ts, duration_sec, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            ''', (
                session.id,
                session.task_label,
                session.mode.value,
                session.start_ts,
                session.end_ts,
                session.duration_seconds,
                int(time.time())
            ))
        return session.id

    def get_sessions(
        self,
        mode: Optional[SessionMode] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        newest_first: bool = True,
        limit: int = 100
    ) -> List[Session]:
        """
        Get sessions with optional filters, ordered by completion time.

        Args:
            mode: Only return sessions of this mode.
            start_date: Only sessions completed at or after this time.
            end_date: Only sessions completed at or before this time.
            newest_first: Sort order of end_ts.
            limit: Maximum number of results.
        """
        query = 'SELECT * FROM sessions WHERE 1=1'
        params = []

        if mode is not None:
            query += ' AND mode = ?'
            params.append(mode.value)

        if start_date is not None:
            query += ' AND end_ts >= ?'
            params.append(int(start_date.timestamp()))

        if end_date is not None:
            query += ' AND end_ts <= ?'
            params.append(int(end_date.timestamp()))

        query += ' ORDER BY end_ts DESC' if newest_first else ' ORDER BY end_ts ASC'
        query += ' LIMIT ?'
        params.append(limit)

        with self._get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
            return [self._row_to_session(row) for row in rows]

    def _row_to_session(self, row: sqlite3.Row) -> Session:
        """Convert a database row to a Session object."""
        return Session(
            id=row['id'],
            task_label=row['task_label'],
            mode=SessionMode(row['mode']),
            start_ts=row['start_ts'],
            end_ts=row['end_ts']
        )

    # ==================== Goals ====================

    def create_goal(self, goal: Goal) -> str:
        with self._get_connection() as conn:
            conn.execute('''
                INSERT INTO goals (id, period, target_sessions, start_date, end_date, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
            ''', (
                goal.id,
                goal.period.value,
                goal.target_sessions,
                goal.start_date.isoformat(),
                goal.end_date.isoformat(),
                goal.created_at
            ))
        return goal.id

    def get_goals(self, active_on: Optional[date] = None) -> List[Goal]:
        """
        Get goals, newest first.

        Args:
            active_on: If given, skip goals whose window ended before this date.
        """
        query = 'SELECT * FROM goals'
        params = []
        if active_on is not None:
            query += ' WHERE end_date >= ?'
            params.append(active_on.isoformat())
        query += ' ORDER BY created_at DESC'

        with self._get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
            return [self._row_to_goal(row) for row in rows]

    def delete_goal(self, goal_id: str) -> bool:
        """
        Delete a goal by ID.

        Returns:
            True if a goal was deleted.
        """
        with self._get_connection() as conn:
            cursor = conn.execute('DELETE FROM goals WHERE id = ?', (goal_id,))
            return cursor.rowcount > 0

    def _row_to_goal(self, row: sqlite3.Row) -> Goal:
        return Goal(
            id=row['id'],
            period=GoalPeriod(row['period']),
            target_sessions=row['target_sessions'],
            start_date=date.fromisoformat(row['start_date']),
            end_date=date.fromisoformat(row['end_date']),
            created_at=row['created_at']
        )

    # ==================== Reflections ====================

    def save_reflection(self, reflection: Reflection) -> str:
        with self._get_connection() as conn:
            conn.execute('''
                INSERT INTO reflections (id, reflection_text, feedback, session_date, created_at)
                VALUES (?, ?, ?, ?, ?)
            ''', (
                reflection.id,
                reflection.reflection_text,
                reflection.feedback,
                reflection.session_date.isoformat(),
                reflection.created_at
            ))
        return reflection.id

    def get_reflection(self, session_date: date) -> Optional[Reflection]:
        """Get the latest reflection saved for a date."""
        with self._get_connection() as conn:
            row = conn.execute('''
                SELECT * FROM reflections WHERE session_date = ?
                ORDER BY created_at DESC LIMIT 1
            ''', (session_date.isoformat(),)).fetchone()
            if row:
                return self._row_to_reflection(row)
            return None

    def get_reflections_between(self, start: date, end: date) -> List[Reflection]:
        """Get reflections with start <= session_date <= end, newest date first."""
        with self._get_connection() as conn:
            rows = conn.execute('''
                SELECT * FROM reflections
                WHERE session_date >= ? AND session_date <= ?
                ORDER BY session_date DESC, created_at DESC
            ''', (start.isoformat(), end.isoformat())).fetchall()
            return [self._row_to_reflection(row) for row in rows]

    def _row_to_reflection(self, row: sqlite3.Row) -> Reflection:
        return Reflection(
            id=row['id'],
            reflection_text=row['reflection_text'],
            feedback=row['feedback'],
            session_date=date.fromisoformat(row['session_date']),
            created_at=row['created_at']
        )

    # ==================== Settings ====================

    def get_settings(self) -> AppSettings:
        """Get application settings."""
        settings = AppSettings()
        with self._get_connection() as conn:
            for row in conn.execute('SELECT key, value FROM settings').fetchall():
                key, value = row['key'], row['value']
                if not hasattr(settings, key):
                    logger.debug("Ignoring unknown setting {}", key)
                    continue
                # Convert string to appropriate type
                if isinstance(getattr(settings, key), bool):
                    setattr(settings, key, value.lower() == 'true')
                else:
                    setattr(settings, key, value)
        return settings

    def save_settings(self, settings: AppSettings):
        """Save application settings."""
        with self._get_connection() as conn:
            for key in ['notification_enabled', 'task_label']:
                value = str(getattr(settings, key))
                conn.execute('''
                    INSERT OR REPLACE INTO settings (key, value)
                    VALUES (?, ?)
                ''', (key, value))
