from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from playsql_engine.schema import Row, Table, serialize_tables


@dataclass
class StatementResult:
    """Outcome of one statement; ``error`` is set only on failure."""
    success: bool
    message: str
    statement: Optional[str] = None
    data: Optional[List[Row]] = None
    error: Optional[str] = None
    affected_rows: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.data is not None:
            payload["data"] = [dict(row) for row in self.data]
        if self.error is not None:
            payload["error"] = self.error
        if self.affected_rows is not None:
            payload["affectedRows"] = self.affected_rows
        if self.statement is not None:
            payload["statement"] = self.statement
        return payload


@dataclass
class ExecutionResult:
    results: List[StatementResult] = field(default_factory=list)
    updated_tables: List[Table] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(result.success for result in self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [result.to_dict() for result in self.results],
            "updatedTables": serialize_tables(self.updated_tables),
        }
