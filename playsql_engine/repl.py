from __future__ import annotations

import argparse
import json
import os
from typing import Any, List, Sequence

from playsql_engine.api import SQLEngine
from playsql_engine.config import EngineSettings, build_logger, load_settings
from playsql_engine.dbml import generate_dbml
from playsql_engine.parser import split_statements
from playsql_engine.results import ExecutionResult, StatementResult
from playsql_engine.schema import Table, deserialize_tables, serialize_tables

HELP_TEXT = "Commands: .tables, .schema, .dbml, .help, .exit"


def _format_scalar(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


def _format_rows_table(rows: list[dict[str, Any]]) -> str:
    if not rows:
        return "(0 rows)"

    # Rows may carry different keys; show the union in first-seen order.
    columns = list(dict.fromkeys(key for row in rows for key in row))
    grid = [columns] + [[_format_scalar(row.get(col)) for col in columns] for row in rows]
    widths = [max(len(cells[i]) for cells in grid) for i in range(len(columns))]

    def render(cells: List[str]) -> str:
        return "| " + " | ".join(cell.ljust(width) for cell, width in zip(cells, widths)) + " |"

    rule = "+" + "+".join("-" * (width + 2) for width in widths) + "+"
    lines = [rule, render(grid[0]), rule]
    lines.extend(render(cells) for cells in grid[1:])
    lines.extend([rule, f"({len(rows)} row(s))"])
    return "\n".join(lines)


def _format_result(result: StatementResult) -> str:
    if not result.success:
        return f"error: {result.error}"
    if result.data is not None:
        return _format_rows_table(result.data)
    return result.message


def _format_schema(tables: Sequence[Table]) -> List[str]:
    lines = []
    for table in tables:
        cols = ", ".join(
            f"{c.name} {c.data_type}{' PRIMARY KEY' if c.is_primary else ''}{' AUTOINCREMENT' if c.auto_increment else ''}"
            for c in table.columns
        )
        lines.append(f"{table.name}: {cols}")
    return lines


def load_tables(path: str) -> List[Table]:
    if not os.path.exists(path):
        return []
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, list):
        raise ValueError(f"Expected a JSON list of tables in {path}")
    return deserialize_tables(payload)


def save_tables(path: str, tables: Sequence[Table]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(serialize_tables(tables), f, indent=2)


def needs_confirmation(script: str) -> bool:
    for statement in split_statements(script):
        words = statement.upper().split(None, 2)
        if words[:2] == ["DROP", "TABLE"]:
            return True
    return False


def run_script(tables: Sequence[Table], script: str, settings: EngineSettings) -> ExecutionResult:
    return SQLEngine(tables, settings=settings).execute(script)


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="playsql_engine REPL")
    parser.add_argument("tables_path", help="JSON file holding the table list")
    parser.add_argument("--config", default=None, help="Settings JSON file")
    parser.add_argument("--no-save", action="store_true", help="Do not write changes back to tables_path")
    args = parser.parse_args(argv)

    settings = load_settings(args.config)
    logger = build_logger(settings)
    tables = load_tables(args.tables_path)
    logger.info("REPL started with %d tables from %s", len(tables), args.tables_path)

    print(f"playsql_engine REPL. {HELP_TEXT}")
    while True:
        try:
            line = input("playsql> ").strip()
        except EOFError:
            break
        if not line:
            continue
        if line in {".exit", ".quit"}:
            break
        if line == ".tables":
            names = sorted(table.name for table in tables)
            print("\n".join(names) if names else "(no tables)")
            continue
        if line == ".schema":
            print("\n".join(_format_schema(tables)) if tables else "(no schema)")
            continue
        if line == ".dbml":
            print(generate_dbml(tables) if tables else "(no schema)")
            continue
        if line == ".help":
            print(HELP_TEXT)
            print("Tip: separate statements with ';' to run a script in one go.")
            continue

        if needs_confirmation(line):
            answer = input("This script drops a table. Continue? [y/N] ").strip().lower()
            if answer not in {"y", "yes"}:
                print("cancelled")
                continue

        outcome = run_script(tables, line, settings)
        for result in outcome.results:
            print(_format_result(result))
        tables = outcome.updated_tables
        if not args.no_save:
            save_tables(args.tables_path, tables)

    logger.info("REPL closed")


if __name__ == "__main__":
    main()
