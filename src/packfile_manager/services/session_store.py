"""In-process registry of open PackFiles, one manager per session id."""

from __future__ import annotations

import threading
import uuid

from packfile_manager.services.entry_manager import PackFileManager


class SessionStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, PackFileManager] = {}

    def add(self, manager: PackFileManager) -> str:
        session_id = uuid.uuid4().hex
        with self._lock:
            self._sessions[session_id] = manager
        return session_id

    def get(self, session_id: str) -> PackFileManager | None:
        return self._sessions.get(session_id)

    def close(self, session_id: str) -> PackFileManager | None:
        with self._lock:
            return self._sessions.pop(session_id, None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


sessions = SessionStore()
