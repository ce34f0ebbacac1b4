"""Schemas for open PackFiles, their entries and archive-level actions."""

from typing import Literal

from pydantic import BaseModel, Field

from packfile_manager.archive.formats import PFHVersion
from packfile_manager.archive.models import EntryKind

FileTypeName = Literal["BOOT", "RELEASE", "PATCH", "MOD", "MOVIE"]


class EntryInfo(BaseModel):
    path: str
    size: int
    is_compressed: bool
    timestamp: int
    kind: EntryKind


class PackSummary(BaseModel):
    id: str
    version: PFHVersion
    file_type: FileTypeName
    flags: int
    timestamp: int
    dependencies: list[str]
    entry_count: int
    is_dirty: bool
    is_editable: bool
    source_path: str | None = None


class NewPackRequest(BaseModel):
    version: PFHVersion | None = None
    file_type: FileTypeName = "MOD"
    game: str | None = Field(default=None, description="Key of a known game, picks its version")


class OpenPackRequest(BaseModel):
    path: str


class SavePackRequest(BaseModel):
    path: str | None = None
    sort_entries: bool | None = None


class SavePackResult(BaseModel):
    path: str
    size: int


class RenameEntryRequest(BaseModel):
    old_path: str
    new_path: str


class RemoveFolderResult(BaseModel):
    removed: list[str]


class TreeNodeOut(BaseModel):
    name: str
    path: str
    is_folder: bool
    file_count: int
    children: list["TreeNodeOut"] = []


class SiegeAIPatchResult(BaseModel):
    patched: list[str]
    deleted: list[str]
    message: str
