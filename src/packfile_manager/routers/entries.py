"""Endpoints for listing, reading, writing and moving PackFile entries."""

from fastapi import APIRouter, Body, Depends
from fastapi.responses import Response

from packfile_manager.routers.deps import get_manager_or_404
from packfile_manager.schemas.pack import EntryInfo, RemoveFolderResult, RenameEntryRequest
from packfile_manager.services.entry_manager import PackFileManager

router = APIRouter(prefix="/packs/{pack_id}", tags=["entries"])


def _info(manager: PackFileManager, path: str) -> EntryInfo:
    entry = manager.get_entry(path)
    return EntryInfo(
        path=entry.display_path,
        size=entry.size,
        is_compressed=entry.is_compressed,
        timestamp=entry.timestamp,
        kind=entry.kind,
    )


@router.get("/entries", response_model=list[EntryInfo])
def list_entries(manager: PackFileManager = Depends(get_manager_or_404)) -> list[EntryInfo]:
    return manager.list_entries()


@router.get("/entries/{path:path}")
def read_entry(path: str, manager: PackFileManager = Depends(get_manager_or_404)) -> Response:
    return Response(content=manager.extract(path), media_type="application/octet-stream")


@router.put("/entries/{path:path}", response_model=EntryInfo)
def write_entry(
    path: str,
    data: bytes = Body(b"", media_type="application/octet-stream"),
    compress: bool | None = None,
    manager: PackFileManager = Depends(get_manager_or_404),
) -> EntryInfo:
    """Create the entry, or replace its payload when it already exists."""
    if path in manager:
        manager.replace(path, data, compress=compress)
    else:
        manager.add(path, data, compress=bool(compress))
    return _info(manager, path)


@router.delete("/entries/{path:path}", response_model=EntryInfo)
def delete_entry(path: str, manager: PackFileManager = Depends(get_manager_or_404)) -> EntryInfo:
    info = _info(manager, path)
    manager.remove(path)
    return info


@router.delete("/folders/{path:path}", response_model=RemoveFolderResult)
def delete_folder(
    path: str,
    manager: PackFileManager = Depends(get_manager_or_404),
) -> RemoveFolderResult:
    return RemoveFolderResult(removed=manager.remove_folder(path))


@router.post("/rename", response_model=EntryInfo)
def rename_entry(
    data: RenameEntryRequest,
    manager: PackFileManager = Depends(get_manager_or_404),
) -> EntryInfo:
    entry = manager.rename(data.old_path, data.new_path)
    return _info(manager, entry.display_path)
