"""File-backed review session store.

Layout under the project state directory::

    project.json
    sessions/<id>/meta.json
    sessions/latest -> <id>
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path

from reviewplan.config import default_state_dir
from reviewplan.models import Session, SessionError, SessionNotFoundError, SessionStatus
from reviewplan.utils.atomic import read_json, write_json

logger = logging.getLogger(__name__)

META_FILE = "meta.json"
LATEST = "latest"


class SessionStore:
    """Sessions for one project, one directory per session."""

    def __init__(self, project_path: str, state_dir: str | Path | None = None) -> None:
        self.project_path = project_path
        self.state_dir = Path(state_dir) if state_dir else default_state_dir(project_path)
        self.sessions_dir = self.state_dir / "sessions"
        self.sessions_dir.mkdir(parents=True, exist_ok=True)
        self._write_project_meta()

    def _write_project_meta(self) -> None:
        meta_path = self.state_dir / "project.json"
        if meta_path.exists():
            return
        write_json(meta_path, {"path": self.project_path, "name": Path(self.project_path).name})

    def _session_dir(self, session_id: int) -> Path:
        return self.sessions_dir / str(session_id)

    # ── Writes ────────────────────────────────────────────────────────────────

    def create(self, session: Session) -> Session:
        """Assign the next id and creation time, then persist.

        The next id is one past the highest id on disk, so deleting the
        newest session frees its id for reuse.
        """
        session.id = max((s.id for s in self.list()), default=0) + 1
        session.created_at = datetime.now(timezone.utc)
        if session.status is None:
            session.status = SessionStatus.PENDING
        self.save(session)
        logger.info("Created session %d (%d files)", session.id, session.files_reviewed)
        return session

    def save(self, session: Session) -> None:
        """Persist the session's current state and point ``latest`` at it."""
        if session.id < 1:
            raise SessionError("cannot save a session without an id; use create()")
        session_dir = self._session_dir(session.id)
        try:
            session_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SessionError(f"session {session.id}: create session dir: {e}") from e

        try:
            data = session.to_dict()
        except (TypeError, ValueError) as e:
            raise SessionError(f"session {session.id}: serialize: {e}") from e

        try:
            write_json(session_dir / META_FILE, data)
        except OSError as e:
            raise SessionError(f"session {session.id}: write {META_FILE}: {e}") from e

        self._update_latest(session.id)

    def _update_latest(self, session_id: int) -> None:
        latest = self.sessions_dir / LATEST
        try:
            if latest.is_symlink() or latest.exists():
                latest.unlink()
            os.symlink(str(session_id), latest)
        except OSError as e:
            logger.warning("Failed to update latest session pointer: %s", e)

    def delete(self, session_id: int) -> None:
        """Remove a session; deleting a missing session is a no-op."""
        session_dir = self._session_dir(session_id)
        if session_dir.is_dir():
            shutil.rmtree(session_dir)
        logger.info("Deleted session %d", session_id)

    # ── Reads ─────────────────────────────────────────────────────────────────

    def load(self, session_id: int) -> Session:
        meta_path = self._session_dir(session_id) / META_FILE
        if not meta_path.is_file():
            raise SessionNotFoundError(session_id)
        try:
            return Session.from_dict(read_json(meta_path))
        except (OSError, json.JSONDecodeError, KeyError, ValueError) as e:
            raise SessionError(f"session {session_id}: read {META_FILE}: {e}") from e

    def load_latest(self) -> Session:
        """The most recently created session (highest id)."""
        sessions = self.list()
        if not sessions:
            raise SessionError("no sessions found")
        return sessions[-1]

    def list(self) -> list[Session]:
        """All readable sessions, ascending by id."""
        sessions: list[Session] = []
        for entry in self.sessions_dir.iterdir():
            if entry.name == LATEST or not entry.is_dir() or not entry.name.isdigit():
                continue
            try:
                sessions.append(self.load(int(entry.name)))
            except SessionError as e:
                logger.debug("Skipping unreadable session %s: %s", entry.name, e)
        sessions.sort(key=lambda s: s.id)
        return sessions

    def collect_reviewed_files(self, session_id: int) -> tuple[list[str], Session]:
        """Files reviewed across a continuation chain, plus the chain's root.

        Follows ``continued_from`` links back from ``session_id`` until a
        session with ``continued_from == 0``. Any missing link aborts the
        whole walk.

        Raises:
            SessionNotFoundError: a session in the chain does not exist.
            SessionError: the chain loops back on itself.
        """
        seen: dict[str, None] = {}
        visited: set[int] = set()
        current = session_id

        while True:
            if current in visited:
                raise SessionError(f"session {session_id}: continuation chain loops at {current}")
            visited.add(current)

            session = self.load(current)
            for path in session.files:
                seen.setdefault(path, None)

            if session.is_root:
                return list(seen), session
            current = session.continued_from
