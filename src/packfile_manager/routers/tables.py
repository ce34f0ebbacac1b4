"""Endpoints for viewing and editing DB and Loc tables inside a PackFile."""

import logging

from fastapi import APIRouter, Depends

from packfile_manager.routers.deps import get_manager_or_404
from packfile_manager.schemas.table import CellEdit, FieldOut, TableOut
from packfile_manager.services.entry_manager import PackFileManager
from packfile_manager.tables.cells import format_cell
from packfile_manager.tables.table import Table

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/packs/{pack_id}/tables", tags=["tables"])


def _table_out(path: str, table: Table) -> TableOut:
    fields = table.definition.fields
    return TableOut(
        path=path,
        kind=table.kind,
        table_name=table.table_name,
        version=table.version,
        fields=[
            FieldOut(
                name=f.name,
                kind=f.kind,
                is_key=f.is_key,
                max_length=f.max_length,
                description=f.description,
                enum_values=list(f.enum_values),
                reference=f.reference,
            )
            for f in fields
        ],
        rows=table.rows,
        display_rows=[[format_cell(f, v) for f, v in zip(fields, row)] for row in table.rows],
        row_count=table.row_count,
    )


@router.get("/{path:path}", response_model=TableOut)
def get_table(
    path: str,
    with_tooltip: bool = True,
    manager: PackFileManager = Depends(get_manager_or_404),
) -> TableOut:
    table = manager.decode_table(path, with_tooltip=with_tooltip)
    return _table_out(manager.get_entry(path).display_path, table)


@router.patch("/{path:path}", response_model=TableOut)
def edit_table(
    path: str,
    edits: list[CellEdit],
    with_tooltip: bool = True,
    manager: PackFileManager = Depends(get_manager_or_404),
) -> TableOut:
    """Apply cell edits all or nothing, then commit the table to its entry."""
    table = manager.decode_table(path, with_tooltip=with_tooltip)
    table.apply_edits([(e.row, e.field, e.value) for e in edits])
    manager.commit_table(path, table)
    logger.info("Committed %d cell edits to %s", len(edits), path)
    return _table_out(manager.get_entry(path).display_path, table)
