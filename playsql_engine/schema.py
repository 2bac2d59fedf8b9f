from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from playsql_engine.errors import SchemaError


Row = Dict[str, Any]


@dataclass
class Column:
    name: str
    data_type: str
    is_primary: bool = False
    auto_increment: bool = False
    not_null: bool = False
    unique: bool = False
    is_foreign_key: bool = False
    references: Optional[Dict[str, str]] = None

    @property
    def is_auto_key(self) -> bool:
        return self.is_primary and self.auto_increment

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "type": self.data_type,
            "isPrimary": self.is_primary,
            "autoIncrement": self.auto_increment,
            "notNull": self.not_null,
            "unique": self.unique,
            "isForeignKey": self.is_foreign_key,
        }
        if self.references is not None:
            payload["references"] = dict(self.references)
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Column":
        references = payload.get("references")
        return cls(
            name=str(payload["name"]).lower(),
            data_type=str(payload.get("type", "")),
            is_primary=bool(payload.get("isPrimary", False)),
            auto_increment=bool(payload.get("autoIncrement", False)),
            not_null=bool(payload.get("notNull", False)),
            unique=bool(payload.get("unique", False)),
            is_foreign_key=bool(payload.get("isForeignKey", False)),
            references=dict(references) if references else None,
        )


@dataclass
class Table:
    id: str
    name: str
    columns: List[Column]
    rows: List[Row] = field(default_factory=list)
    position: Optional[Dict[str, float]] = None

    def column(self, name: str) -> Optional[Column]:
        for column in self.columns:
            if column.name == name.lower():
                return column
        return None

    def has_column(self, name: str) -> bool:
        return self.column(name) is not None

    def column_index(self, name: str) -> int:
        for idx, column in enumerate(self.columns):
            if column.name == name.lower():
                return idx
        raise SchemaError(f"Column '{name}' does not exist in table '{self.name}'")

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "columns": [column.to_dict() for column in self.columns],
            "rows": [dict(row) for row in self.rows],
        }
        if self.position is not None:
            payload["position"] = dict(self.position)
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Table":
        position = payload.get("position")
        return cls(
            id=str(payload["id"]),
            name=str(payload["name"]).lower(),
            columns=[Column.from_dict(col) for col in payload.get("columns", [])],
            rows=[dict(row) for row in payload.get("rows", [])],
            position=dict(position) if position else None,
        )


def find_table_index(tables: Sequence[Table], name: str) -> int:
    key = name.lower()
    for idx, table in enumerate(tables):
        if table.name.lower() == key:
            return idx
    raise SchemaError(f"Table '{name}' not found")


def serialize_tables(tables: Sequence[Table]) -> List[Dict[str, Any]]:
    return [table.to_dict() for table in tables]


def deserialize_tables(payload: Sequence[Dict[str, Any]]) -> List[Table]:
    return [Table.from_dict(item) for item in payload]
