from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Sequence

from playsql_engine.config import EngineSettings
from playsql_engine.errors import EmptyInputError
from playsql_engine.executor import Executor
from playsql_engine.parser import parse, split_statements
from playsql_engine.results import ExecutionResult, StatementResult
from playsql_engine.schema import Table, deserialize_tables

logger = logging.getLogger("playsql_engine.api")


class SQLEngine:
    """Runs one SQL script against a private snapshot of the caller's tables.

    The tables are deep-copied on construction. ``execute`` threads the working
    table list from statement to statement and hands the final list back in
    ``ExecutionResult.updated_tables``; committing it is up to the caller.
    """

    def __init__(self, tables: Sequence[Table] | None = None, settings: EngineSettings | None = None):
        self.settings = settings or EngineSettings()
        self.tables: List[Table] = copy.deepcopy(list(tables or []))
        self.executor = Executor(self.settings)

    @classmethod
    def from_payload(
        cls, payload: Sequence[Dict[str, Any]], settings: EngineSettings | None = None
    ) -> "SQLEngine":
        return cls(deserialize_tables(payload), settings=settings)

    def execute(self, sql: str) -> ExecutionResult:
        try:
            statements = self._split(sql)
        except EmptyInputError as exc:
            logger.info("Rejected script: %s", exc)
            result = StatementResult(success=False, message="empty query", error=str(exc))
            return ExecutionResult(results=[result], updated_tables=list(self.tables))

        results: List[StatementResult] = []
        for statement in statements:
            logger.debug("Executing statement: %s", statement)
            try:
                result, tables = self.executor.execute(parse(statement), self.tables)
            except ValueError as exc:
                logger.warning("Statement failed: %s | %s", exc, statement)
                results.append(
                    StatementResult(
                        success=False,
                        message="Execution error",
                        error=str(exc),
                        statement=statement,
                    )
                )
                continue

            result.statement = statement
            results.append(result)
            self.tables = tables

        return ExecutionResult(results=results, updated_tables=list(self.tables))

    def _split(self, sql: str) -> List[str]:
        statements = split_statements(sql)
        if not statements:
            raise EmptyInputError("No valid SQL statements")
        return statements
