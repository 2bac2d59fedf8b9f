from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple


@dataclass(frozen=True)
class ColumnDef:
    name: str
    data_type: str
    primary_key: bool = False
    auto_increment: bool = False
    not_null: bool = False
    unique: bool = False
    references: Optional[Tuple[str, str]] = None


@dataclass(frozen=True)
class Condition:
    # Single "<column> <op> <value>" comparison; no AND/OR.
    column: str
    op: str
    value: Any


@dataclass(frozen=True)
class SelectStmt:
    table_name: str
    columns: Sequence[str]
    where: Optional[Condition] = None
    order_by: Optional[Tuple[str, str]] = None


@dataclass(frozen=True)
class InsertStmt:
    table_name: str
    columns: Optional[Sequence[str]]
    values: Sequence[Sequence[Any]]


@dataclass(frozen=True)
class UpdateStmt:
    table_name: str
    assignments: Sequence[Tuple[str, Any]]
    where: Optional[Condition] = None


@dataclass(frozen=True)
class DeleteStmt:
    table_name: str
    where: Optional[Condition] = None


@dataclass(frozen=True)
class CreateTableStmt:
    table_name: str
    columns: Sequence[ColumnDef]


@dataclass(frozen=True)
class DropTableStmt:
    table_name: str


@dataclass(frozen=True)
class AlterTableAddColumnStmt:
    table_name: str
    column: ColumnDef


@dataclass(frozen=True)
class AlterTableRenameColumnStmt:
    table_name: str
    old_column_name: str
    new_column_name: str


Statement = (
    SelectStmt
    | InsertStmt
    | UpdateStmt
    | DeleteStmt
    | CreateTableStmt
    | DropTableStmt
    | AlterTableAddColumnStmt
    | AlterTableRenameColumnStmt
)
