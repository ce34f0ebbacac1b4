"""SiegeAI patch for maps made with the Assembly Kit.

Exported battle maps ship with pathfinding helpers that break the siege AI.
The patch removes the ``catchment_*.bin`` caches, which the game rebuilds,
and retags fort perimeter hints as defensive hills in every map that has
siege area nodes.  It only uses the public operations of
:class:`~packfile_manager.services.entry_manager.PackFileManager`.
"""

from __future__ import annotations

import fnmatch
import logging

from packfile_manager.errors import SiegeAIPatchError
from packfile_manager.schemas.pack import SiegeAIPatchResult
from packfile_manager.services.entry_manager import PackFileManager

logger = logging.getLogger(__name__)

MAP_FOLDER = ("terrain", "tiles", "battle", "_assembly_kit")
MAP_DATA_FILE = "bmd_data.bin"
USELESS_FILE_PATTERN = "catchment_*.bin"

SIEGE_AREA_NODE = b"AIH_SIEGE_AREA_NODE"
FORT_PERIMETER = b"AIH_FORT_PERIMETER"
DEFENSIVE_HILL = b"AIH_DEFENSIVE_HILL"


def _in_map_folder(path: tuple[str, ...]) -> bool:
    if len(path) <= len(MAP_FOLDER):
        return False
    return all(a.lower() == b for a, b in zip(path, MAP_FOLDER))


def patch_siege_ai(manager: PackFileManager) -> SiegeAIPatchResult:
    """Apply the SiegeAI patch to every map in *manager*'s archive.

    Raises:
        SiegeAIPatchError: the archive is empty, or holds nothing to patch.
    """
    if not len(manager):
        raise SiegeAIPatchError("the PackFile is empty")

    patched: list[str] = []
    deleted: list[str] = []
    for info in manager.list_entries():
        entry = manager.get_entry(info.path)
        if not _in_map_folder(entry.path):
            continue
        name = entry.path[-1].lower()
        if fnmatch.fnmatchcase(name, USELESS_FILE_PATTERN):
            manager.remove(info.path)
            deleted.append(info.path)
        elif name == MAP_DATA_FILE:
            data = entry.data
            if SIEGE_AREA_NODE in data and FORT_PERIMETER in data:
                manager.replace(info.path, data.replace(FORT_PERIMETER, DEFENSIVE_HILL))
                patched.append(info.path)

    if not patched and not deleted:
        raise SiegeAIPatchError(
            "there are no files in this PackFile that could be patched or deleted"
        )

    logger.info("SiegeAI patch: %d maps patched, %d files deleted", len(patched), len(deleted))
    return SiegeAIPatchResult(
        patched=patched,
        deleted=deleted,
        message=f"{len(patched)} maps patched, {len(deleted)} useless files deleted",
    )
