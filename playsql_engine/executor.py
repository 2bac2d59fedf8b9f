from __future__ import annotations

import logging
import math
import operator
import time
from dataclasses import replace
from functools import cmp_to_key
from typing import Any, Dict, List, Sequence, Tuple

from playsql_engine.ast_nodes import (
    AlterTableAddColumnStmt,
    AlterTableRenameColumnStmt,
    ColumnDef,
    Condition,
    CreateTableStmt,
    DeleteStmt,
    DropTableStmt,
    InsertStmt,
    SelectStmt,
    Statement,
    UpdateStmt,
)
from playsql_engine.config import EngineSettings
from playsql_engine.errors import SchemaError, ShapeError
from playsql_engine.parser import parse_number
from playsql_engine.results import StatementResult
from playsql_engine.schema import Column, Row, Table, find_table_index

logger = logging.getLogger("playsql_engine.executor")

# Stands in for a key that a row does not carry at all.
MISSING = object()

_RELATIONAL = {
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
}

Outcome = Tuple[StatementResult, List[Table]]


class Executor:
    """Runs parsed statements against a table list.

    Handlers never mutate the tables they are given. Each returns its result
    together with a new table list, so a statement that raises leaves the
    caller's list exactly as it was.
    """

    def __init__(self, settings: EngineSettings | None = None):
        self.settings = settings or EngineSettings()

    def execute(self, statement: Statement, tables: Sequence[Table]) -> Outcome:
        if isinstance(statement, SelectStmt):
            return self._select(statement, tables)
        if isinstance(statement, InsertStmt):
            return self._insert(statement, tables)
        if isinstance(statement, UpdateStmt):
            return self._update(statement, tables)
        if isinstance(statement, DeleteStmt):
            return self._delete(statement, tables)
        if isinstance(statement, AlterTableAddColumnStmt):
            return self._alter_table_add_column(statement, tables)
        if isinstance(statement, AlterTableRenameColumnStmt):
            return self._alter_table_rename_column(statement, tables)
        if isinstance(statement, DropTableStmt):
            return self._drop_table(statement, tables)
        if isinstance(statement, CreateTableStmt):
            return self._create_table(statement, tables)
        raise ValueError("Unsupported statement")

    def _select(self, stmt: SelectStmt, tables: Sequence[Table]) -> Outcome:
        table = tables[find_table_index(tables, stmt.table_name)]
        rows = list(table.rows)

        if stmt.where:
            rows = [row for row in rows if matches_condition(row, stmt.where)]

        if stmt.order_by:
            col, direction = stmt.order_by
            sign = -1 if direction.upper() == "DESC" else 1
            rows.sort(
                key=cmp_to_key(lambda a, b: sign * compare_values(a.get(col, MISSING), b.get(col, MISSING)))
            )

        if list(stmt.columns) == ["*"]:
            data = [dict(row) for row in rows]
        else:
            data = [{col: row.get(col) for col in stmt.columns} for row in rows]

        result = StatementResult(success=True, message=f"{len(data)} rows found", data=data)
        return result, list(tables)

    def _insert(self, stmt: InsertStmt, tables: Sequence[Table]) -> Outcome:
        idx = find_table_index(tables, stmt.table_name)
        table = tables[idx]
        columns = list(stmt.columns) if stmt.columns is not None else [col.name for col in table.columns]

        rows = list(table.rows)
        for raw_values in stmt.values:
            if len(raw_values) != len(columns):
                raise ShapeError(
                    f"Column count ({len(columns)}) does not match value count ({len(raw_values)}) in a tuple"
                )

            row: Row = {}
            for column in table.columns:
                row[column.name] = next_auto_value(rows, column.name) if column.is_auto_key else None

            for name, value in zip(columns, raw_values):
                table.column_index(name)
                row[name] = value
            rows.append(row)

        inserted = len(stmt.values)
        result = StatementResult(success=True, message=f"{inserted} rows inserted", affected_rows=inserted)
        return result, _replace_table(tables, idx, replace(table, rows=rows))

    def _update(self, stmt: UpdateStmt, tables: Sequence[Table]) -> Outcome:
        idx = find_table_index(tables, stmt.table_name)
        table = tables[idx]
        for name, _value in stmt.assignments:
            table.column_index(name)

        affected = 0
        rows: List[Row] = []
        for row in table.rows:
            if stmt.where is None or matches_condition(row, stmt.where):
                new_row = dict(row)
                for name, value in stmt.assignments:
                    new_row[name] = value
                rows.append(new_row)
                affected += 1
            else:
                rows.append(row)

        result = StatementResult(success=True, message=f"{affected} rows updated", affected_rows=affected)
        return result, _replace_table(tables, idx, replace(table, rows=rows))

    def _delete(self, stmt: DeleteStmt, tables: Sequence[Table]) -> Outcome:
        idx = find_table_index(tables, stmt.table_name)
        table = tables[idx]

        if stmt.where is None:
            kept: List[Row] = []
        else:
            kept = [row for row in table.rows if not matches_condition(row, stmt.where)]
        affected = len(table.rows) - len(kept)

        result = StatementResult(success=True, message=f"{affected} rows deleted", affected_rows=affected)
        return result, _replace_table(tables, idx, replace(table, rows=kept))

    def _alter_table_add_column(self, stmt: AlterTableAddColumnStmt, tables: Sequence[Table]) -> Outcome:
        idx = find_table_index(tables, stmt.table_name)
        table = tables[idx]
        if table.has_column(stmt.column.name):
            raise SchemaError(f"Column '{stmt.column.name}' already exists in table '{table.name}'")

        column = column_from_def(stmt.column)
        rows = [{**row, column.name: None} for row in table.rows]
        updated = replace(table, columns=[*table.columns, column], rows=rows)

        result = StatementResult(success=True, message=f"Column '{column.name}' added")
        return result, _replace_table(tables, idx, updated)

    def _alter_table_rename_column(self, stmt: AlterTableRenameColumnStmt, tables: Sequence[Table]) -> Outcome:
        idx = find_table_index(tables, stmt.table_name)
        table = tables[idx]
        old_name = stmt.old_column_name
        new_name = stmt.new_column_name

        col_idx = table.column_index(old_name)
        if new_name != old_name and table.has_column(new_name):
            raise SchemaError(f"Column '{new_name}' already exists in table '{table.name}'")

        columns = list(table.columns)
        columns[col_idx] = replace(columns[col_idx], name=new_name)

        rows: List[Row] = []
        for row in table.rows:
            renamed = {(new_name if key == old_name else key): value for key, value in row.items()}
            if old_name not in row:
                renamed[new_name] = None
            rows.append(renamed)

        result = StatementResult(success=True, message=f"Column '{old_name}' renamed to '{new_name}'")
        return result, _replace_table(tables, idx, replace(table, columns=columns, rows=rows))

    def _drop_table(self, stmt: DropTableStmt, tables: Sequence[Table]) -> Outcome:
        idx = find_table_index(tables, stmt.table_name)
        dropped = tables[idx]
        logger.info("Dropping table %s (%d rows)", dropped.name, len(dropped.rows))

        remaining = [table for i, table in enumerate(tables) if i != idx]
        result = StatementResult(success=True, message=f"Table '{dropped.name}' dropped")
        return result, remaining

    def _create_table(self, stmt: CreateTableStmt, tables: Sequence[Table]) -> Outcome:
        key = stmt.table_name.lower()
        if any(table.name.lower() == key for table in tables):
            raise SchemaError(f"Table '{stmt.table_name}' already exists")

        seen: set[str] = set()
        for col in stmt.columns:
            if col.name in seen:
                raise SchemaError(f"Duplicate column '{col.name}' in table '{key}'")
            seen.add(col.name)

        table = Table(
            id=self._new_table_id(tables),
            name=key,
            columns=[column_from_def(col) for col in stmt.columns],
            rows=[],
            position=dict(self.settings.default_position),
        )
        logger.info("Created table %s with %d columns", key, len(table.columns))

        result = StatementResult(success=True, message=f"Table '{key}' created")
        return result, [*tables, table]

    def _new_table_id(self, tables: Sequence[Table]) -> str:
        base = f"{self.settings.table_id_prefix}{int(time.time() * 1000)}"
        taken = {table.id for table in tables}
        candidate = base
        suffix = 1
        while candidate in taken:
            suffix += 1
            candidate = f"{base}-{suffix}"
        return candidate


def column_from_def(col: ColumnDef) -> Column:
    references: Dict[str, str] | None = None
    if col.references is not None:
        references = {"table": col.references[0], "column": col.references[1]}
    return Column(
        name=col.name,
        data_type=col.data_type,
        is_primary=col.primary_key,
        auto_increment=col.auto_increment,
        not_null=col.not_null,
        unique=col.unique,
        is_foreign_key=references is not None,
        references=references,
    )


def next_auto_value(rows: Sequence[Row], column_name: str) -> int | float:
    top: int | float = 0
    for row in rows:
        number = to_number(row.get(column_name, MISSING))
        if not math.isnan(number) and number > top:
            top = number
    next_value = top + 1
    if isinstance(next_value, float) and next_value.is_integer():
        return int(next_value)
    return next_value


def to_number(value: Any) -> int | float:
    """Numeric view of a stored value: None is 0, missing or unparsable is NaN."""
    if value is MISSING:
        return math.nan
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        number = parse_number(text)
        return math.nan if number is None else number
    return math.nan


def loose_equals(left: Any, right: Any) -> bool:
    left_null = left is None or left is MISSING
    right_null = right is None or right is MISSING
    if left_null or right_null:
        return left_null and right_null
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    return to_number(left) == to_number(right)


def compare_relational(left: Any, right: Any, op: str) -> bool:
    fn = _RELATIONAL[op]
    if isinstance(left, str) and isinstance(right, str):
        return fn(left, right)
    # NaN on either side makes every ordering false.
    return fn(to_number(left), to_number(right))


def compare_values(left: Any, right: Any) -> int:
    if compare_relational(left, right, "<"):
        return -1
    if compare_relational(left, right, ">"):
        return 1
    return 0


def matches_condition(row: Row, condition: Condition) -> bool:
    row_value = row.get(condition.column, MISSING)
    if condition.op == "=":
        return loose_equals(row_value, condition.value)
    if condition.op == "<>":
        return not loose_equals(row_value, condition.value)
    return compare_relational(row_value, condition.value, condition.op)


def _replace_table(tables: Sequence[Table], idx: int, table: Table) -> List[Table]:
    updated = list(tables)
    updated[idx] = table
    return updated
