"""Endpoints for opening, creating, saving and closing PackFiles."""

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException

from packfile_manager.archive.formats import PFHFileType
from packfile_manager.archive.tree import TreeNode
from packfile_manager.routers.deps import get_manager_or_404
from packfile_manager.schemas.pack import (
    NewPackRequest,
    OpenPackRequest,
    PackSummary,
    SavePackRequest,
    SavePackResult,
    SiegeAIPatchResult,
    TreeNodeOut,
)
from packfile_manager.services.entry_manager import PackFileManager
from packfile_manager.services.session_store import sessions
from packfile_manager.services.siege_ai import patch_siege_ai
from packfile_manager.utils.paths import join_entry_path

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/packs", tags=["packs"])


def _summary(pack_id: str, manager: PackFileManager) -> PackSummary:
    archive = manager.archive
    return PackSummary(
        id=pack_id,
        version=archive.version,
        file_type=archive.file_type.name,
        flags=int(archive.flags),
        timestamp=archive.timestamp,
        dependencies=list(archive.dependencies),
        entry_count=len(archive.entries),
        is_dirty=manager.is_dirty,
        is_editable=manager.is_editable,
        source_path=str(manager.source_path) if manager.source_path else None,
    )


def _tree_out(node: TreeNode) -> TreeNodeOut:
    return TreeNodeOut(
        name=node.name,
        path=join_entry_path(node.path),
        is_folder=node.is_folder,
        file_count=node.count_files(),
        children=[_tree_out(child) for child in node.sorted_children()],
    )


@router.post("", response_model=PackSummary, status_code=201)
def new_pack(data: NewPackRequest) -> PackSummary:
    manager = PackFileManager.new(data.version, PFHFileType[data.file_type], game=data.game)
    pack_id = sessions.add(manager)
    return _summary(pack_id, manager)


@router.post("/open", response_model=PackSummary)
def open_pack(data: OpenPackRequest) -> PackSummary:
    path = Path(data.path)
    if not path.is_file():
        raise HTTPException(404, f"File '{data.path}' not found")
    manager = PackFileManager.open_file(path)
    pack_id = sessions.add(manager)
    return _summary(pack_id, manager)


@router.get("/{pack_id}", response_model=PackSummary)
def get_pack(pack_id: str, manager: PackFileManager = Depends(get_manager_or_404)) -> PackSummary:
    return _summary(pack_id, manager)


@router.post("/{pack_id}/save", response_model=SavePackResult)
def save_pack(
    pack_id: str,
    data: SavePackRequest,
    manager: PackFileManager = Depends(get_manager_or_404),
) -> SavePackResult:
    target = Path(data.path) if data.path else manager.source_path
    if target is None:
        raise HTTPException(400, "This PackFile has never been saved, a path is required")
    size = manager.save_to(target, sort_entries=data.sort_entries)
    return SavePackResult(path=str(target), size=size)


@router.delete("/{pack_id}")
def close_pack(pack_id: str) -> dict[str, str]:
    manager = sessions.close(pack_id)
    if manager is None:
        raise HTTPException(404, f"PackFile session '{pack_id}' not found")
    if manager.is_dirty:
        logger.info("Closed PackFile session %s with unsaved changes", pack_id)
    return {"status": "closed"}


@router.get("/{pack_id}/tree", response_model=TreeNodeOut)
def pack_tree(manager: PackFileManager = Depends(get_manager_or_404)) -> TreeNodeOut:
    return _tree_out(manager.tree())


@router.post("/{pack_id}/patch-siege-ai", response_model=SiegeAIPatchResult)
def patch_pack_siege_ai(
    manager: PackFileManager = Depends(get_manager_or_404),
) -> SiegeAIPatchResult:
    return patch_siege_ai(manager)
