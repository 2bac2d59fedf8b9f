"""DBML-style text view of the table schema.

``generate_dbml`` renders the column definitions of a table list and
``parse_dbml`` reads them back. Parsing keeps the id, rows and position of
any table whose name already exists, so editing the schema text never drops
data that is still described by it.
"""

from __future__ import annotations

import re
import secrets
import time
from typing import List, Optional, Sequence

from playsql_engine.schema import Column, Table

_TABLE_RE = re.compile(r"^Table\s+(\w+)\s*\{", re.IGNORECASE)
_COLUMN_RE = re.compile(r"^(\w+)\s+([\w(),]+)(?:\s+\[(.*)\])?")
_REF_RE = re.compile(r"ref:\s*>\s*(\w+)\.(\w+)")


def generate_dbml(tables: Sequence[Table]) -> str:
    blocks: List[str] = []
    for table in tables:
        lines = [f"Table {table.name} {{"]
        for col in table.columns:
            props: List[str] = []
            if col.is_primary:
                props.append("pk")
            if col.auto_increment:
                props.append("increment")
            if col.not_null:
                props.append("not null")
            if col.unique:
                props.append("unique")
            if col.is_foreign_key and col.references:
                props.append(f"ref: > {col.references['table']}.{col.references['column']}")

            props_str = f" [{', '.join(props)}]" if props else ""
            lines.append(f"  {col.name} {col.data_type}{props_str}")
        lines.append("}")
        blocks.append("\n".join(lines) + "\n")
    return "\n".join(blocks)


def parse_dbml(dbml: str, existing_tables: Sequence[Table] = ()) -> List[Table]:
    existing = {table.name: table for table in existing_tables}
    tables: List[Table] = []
    current: Optional[Table] = None

    for line in dbml.split("\n"):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("//"):
            continue

        table_match = _TABLE_RE.match(trimmed)
        if table_match:
            name = table_match.group(1).lower()
            previous = existing.get(name)
            current = Table(
                id=previous.id if previous else _new_table_id(),
                name=name,
                columns=[],
                rows=[dict(row) for row in previous.rows] if previous else [],
                position=dict(previous.position) if previous and previous.position else None,
            )
            continue

        if trimmed == "}" and current is not None:
            tables.append(current)
            current = None
            continue

        if current is None:
            continue

        col_match = _COLUMN_RE.match(trimmed)
        if col_match is None:
            continue
        col_name, col_type, props = col_match.groups()
        column = Column(name=col_name.lower(), data_type=col_type.upper())
        if props:
            items = {item.strip().lower() for item in props.split(",")}
            column.is_primary = "pk" in items or "primary key" in items
            column.auto_increment = "increment" in items
            column.not_null = "not null" in items
            column.unique = "unique" in items
            ref_match = _REF_RE.search(props)
            if ref_match:
                column.is_foreign_key = True
                column.references = {
                    "table": ref_match.group(1).lower(),
                    "column": ref_match.group(2).lower(),
                }
        current.columns.append(column)

    return tables


def _new_table_id() -> str:
    return f"t-{int(time.time() * 1000)}-{secrets.token_hex(3)[:5]}"
