"""Shared FastAPI dependencies used across routers."""

from fastapi import HTTPException

from packfile_manager.services.entry_manager import PackFileManager
from packfile_manager.services.session_store import sessions


def get_manager_or_404(pack_id: str) -> PackFileManager:
    """Look up an open PackFile by session id, raising 404 if it is not open."""
    manager = sessions.get(pack_id)
    if manager is None:
        raise HTTPException(404, f"PackFile session '{pack_id}' not found")
    return manager
