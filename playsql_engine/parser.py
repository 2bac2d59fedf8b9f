from __future__ import annotations

import math
import re
from typing import Any, List, Sequence, Tuple

from .ast_nodes import (
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

_TOKEN_RE = re.compile(
    r"\s*('(?:''|[^'])*'|<>|<=|>=|[(),=*<>]|[^\s(),;'=*<>]+)"
)
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INTEGER_RE = re.compile(r"[+-]?\d+")

COMPARISON_OPERATORS = {"=", ">", "<", ">=", "<=", "<>"}
_PUNCTUATION = {"(", ")", ",", "=", "*", "<", ">", "<>", "<=", ">="}


class ParseError(ValueError):
    pass


class TokenStream:
    def __init__(self, tokens: Sequence[str]):
        self.tokens = list(tokens)
        self.pos = 0

    def peek(self) -> str | None:
        if self.pos >= len(self.tokens):
            return None
        return self.tokens[self.pos]

    def pop(self) -> str:
        token = self.peek()
        if token is None:
            raise ParseError("Unexpected end of statement")
        self.pos += 1
        return token

    def expect(self, expected: str) -> str:
        token = self.pop()
        if token.upper() != expected.upper():
            raise ParseError(f"Expected '{expected}', got '{token}'")
        return token

    def consume(self, expected: str) -> bool:
        token = self.peek()
        if token is not None and token.upper() == expected.upper():
            self.pos += 1
            return True
        return False


def split_statements(sql: str) -> List[str]:
    """Strip comments and split a script into trimmed, non-empty statements.

    Single-quoted literals are copied through untouched, so ``;``, ``--`` and
    ``/*`` inside a string never split a statement or start a comment.
    """
    pieces: List[str] = []
    current: List[str] = []
    in_string = False
    i = 0
    while i < len(sql):
        ch = sql[i]
        if in_string:
            current.append(ch)
            if ch == "'":
                in_string = False
            i += 1
            continue
        if ch == "'":
            in_string = True
            current.append(ch)
            i += 1
            continue
        if sql.startswith("--", i):
            end = sql.find("\n", i)
            i = len(sql) if end == -1 else end
            continue
        if sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            i = len(sql) if end == -1 else end + 2
            current.append(" ")
            continue
        if ch == ";":
            pieces.append("".join(current))
            current = []
            i += 1
            continue
        current.append(ch)
        i += 1
    pieces.append("".join(current))

    return [piece.strip() for piece in pieces if piece.strip()]


def tokenize(sql: str) -> List[str]:
    cleaned = sql.strip()
    if not cleaned:
        raise ParseError("Empty SQL statement")

    tokens: List[str] = []
    pos = 0
    while pos < len(cleaned):
        if cleaned[pos].isspace():
            pos += 1
            continue
        match = _TOKEN_RE.match(cleaned, pos)
        if match is None:
            line = cleaned.count("\n", 0, pos) + 1
            col = pos - (cleaned.rfind("\n", 0, pos) + 1) + 1
            snippet = cleaned[pos : pos + 24]
            if cleaned[pos] == "'":
                raise ParseError(f"Unterminated string literal at line {line}, col {col}")
            raise ParseError(f"Unsupported SQL syntax at line {line}, col {col} near: {snippet!r}")
        tokens.append(match.group(1))
        pos = match.end()

    return tokens


def cast_value(token: str) -> Any:
    """Interpret a literal token the same way for WHERE, INSERT and SET."""
    if len(token) >= 2 and token.startswith("'") and token.endswith("'"):
        return token[1:-1]
    lowered = token.lower()
    if lowered == "null":
        return None
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    number = parse_number(token)
    if number is not None:
        return number
    return token


def parse_number(text: str) -> int | float | None:
    if not _NUMBER_RE.fullmatch(text):
        return None
    if _INTEGER_RE.fullmatch(text):
        return int(text)
    number = float(text)
    return number if math.isfinite(number) else None


def parse(sql: str) -> Statement:
    words = sql.split(None, 1)
    if not words:
        raise ParseError("Empty SQL statement")

    keyword = words[0].upper()
    if keyword == "SELECT":
        return _parse_select(TokenStream(tokenize(sql)))
    if keyword == "INSERT":
        return _parse_insert(TokenStream(tokenize(sql)))
    if keyword == "UPDATE":
        return _parse_update(TokenStream(tokenize(sql)))
    if keyword == "DELETE":
        return _parse_delete(TokenStream(tokenize(sql)))
    if keyword == "ALTER":
        return _parse_alter(TokenStream(tokenize(sql)))
    if keyword == "DROP":
        return _parse_drop(TokenStream(tokenize(sql)))
    if keyword == "CREATE":
        return _parse_create(TokenStream(tokenize(sql)))
    raise ParseError(f"Command '{keyword}' not supported")


def _parse_identifier(stream: TokenStream) -> str:
    token = stream.pop()
    if not _IDENT_RE.fullmatch(token):
        raise ParseError(f"Expected a name, got '{token}'")
    return token


def _parse_column_name(stream: TokenStream) -> str:
    return _parse_identifier(stream).lower()


def _parse_value(stream: TokenStream) -> Any:
    token = stream.pop()
    if token in _PUNCTUATION:
        raise ParseError(f"Expected a value, got '{token}'")
    return cast_value(token)


def _parse_select(stream: TokenStream) -> SelectStmt:
    stream.expect("SELECT")
    columns: List[str] = []
    if stream.consume("*"):
        columns = ["*"]
    else:
        while True:
            columns.append(_parse_column_name(stream))
            if stream.consume(","):
                continue
            break

    stream.expect("FROM")
    table_name = _parse_identifier(stream)
    where = _parse_where(stream)

    order_by = None
    if stream.consume("ORDER"):
        stream.expect("BY")
        col = _parse_column_name(stream)
        direction = "ASC"
        next_tok = stream.peek()
        if next_tok and next_tok.upper() in {"ASC", "DESC"}:
            direction = stream.pop().upper()
        order_by = (col, direction)

    _assert_consumed(stream)
    return SelectStmt(table_name=table_name, columns=columns, where=where, order_by=order_by)


def _parse_insert(stream: TokenStream) -> InsertStmt:
    stream.expect("INSERT")
    stream.expect("INTO")
    table_name = _parse_identifier(stream)

    columns = None
    if stream.consume("("):
        names: List[str] = []
        while True:
            names.append(_parse_column_name(stream))
            if stream.consume(","):
                continue
            stream.expect(")")
            break
        columns = names

    stream.expect("VALUES")
    values: List[List[Any]] = []
    while True:
        stream.expect("(")
        row_values: List[Any] = []
        while True:
            row_values.append(_parse_value(stream))
            if stream.consume(","):
                continue
            stream.expect(")")
            break
        values.append(row_values)
        if stream.consume(","):
            continue
        break

    _assert_consumed(stream)
    return InsertStmt(table_name=table_name, columns=columns, values=values)


def _parse_update(stream: TokenStream) -> UpdateStmt:
    stream.expect("UPDATE")
    table_name = _parse_identifier(stream)
    stream.expect("SET")

    assignments: List[Tuple[str, Any]] = []
    while True:
        name = _parse_column_name(stream)
        stream.expect("=")
        assignments.append((name, _parse_value(stream)))
        if stream.consume(","):
            continue
        break

    where = _parse_where(stream)
    _assert_consumed(stream)
    return UpdateStmt(table_name=table_name, assignments=assignments, where=where)


def _parse_delete(stream: TokenStream) -> DeleteStmt:
    stream.expect("DELETE")
    stream.expect("FROM")
    table_name = _parse_identifier(stream)
    where = _parse_where(stream)
    _assert_consumed(stream)
    return DeleteStmt(table_name=table_name, where=where)


def _parse_alter(stream: TokenStream) -> AlterTableAddColumnStmt | AlterTableRenameColumnStmt:
    stream.expect("ALTER")
    stream.expect("TABLE")
    table_name = _parse_identifier(stream)

    if stream.consume("ADD") and stream.consume("COLUMN"):
        column = _column_def(_collect_definition(stream))
        _assert_consumed(stream)
        return AlterTableAddColumnStmt(table_name=table_name, column=column)

    if stream.consume("RENAME") and stream.consume("COLUMN"):
        old_col = _parse_column_name(stream)
        stream.expect("TO")
        new_col = _parse_column_name(stream)
        _assert_consumed(stream)
        return AlterTableRenameColumnStmt(
            table_name=table_name,
            old_column_name=old_col,
            new_column_name=new_col,
        )

    raise ParseError("ALTER TABLE syntax not supported")


def _parse_drop(stream: TokenStream) -> DropTableStmt:
    stream.expect("DROP")
    stream.expect("TABLE")
    table_name = _parse_identifier(stream)
    _assert_consumed(stream)
    return DropTableStmt(table_name=table_name)


def _parse_create(stream: TokenStream) -> CreateTableStmt:
    stream.expect("CREATE")
    stream.expect("TABLE")
    table_name = _parse_identifier(stream)
    stream.expect("(")

    columns: List[ColumnDef] = []
    while True:
        columns.append(_column_def(_collect_definition(stream)))
        if stream.consume(","):
            continue
        stream.expect(")")
        break

    _assert_consumed(stream)
    return CreateTableStmt(table_name=table_name, columns=columns)


def _collect_definition(stream: TokenStream) -> List[str]:
    # Tokens up to the next top-level "," or ")"; nested parens stay inside.
    tokens: List[str] = []
    depth = 0
    while True:
        token = stream.peek()
        if token is None:
            return tokens
        if depth == 0 and token in {",", ")"}:
            return tokens
        if token == "(":
            depth += 1
        elif token == ")":
            depth -= 1
        tokens.append(stream.pop())


def _column_def(tokens: Sequence[str]) -> ColumnDef:
    if len(tokens) < 2:
        raise ParseError("Column definition requires a name and a type")

    stream = TokenStream(tokens)
    name = _parse_column_name(stream)
    type_parts = [_parse_identifier(stream)]
    if stream.consume("("):
        type_parts.append("(")
        while True:
            type_parts.append(stream.pop())
            if stream.consume(","):
                type_parts.append(",")
                continue
            stream.expect(")")
            type_parts.append(")")
            break
    data_type = "".join(type_parts).upper()

    # Flags are matched loosely against the whole definition text.
    text = " ".join(tokens).upper()
    references = None
    while stream.peek() is not None:
        if stream.pop().upper() == "REFERENCES":
            references = _reference_target(stream)

    return ColumnDef(
        name=name,
        data_type=data_type,
        primary_key="PRIMARY KEY" in text,
        auto_increment="AUTOINCREMENT" in text or "SERIAL" in text,
        not_null="NOT NULL" in text,
        unique="UNIQUE" in text,
        references=references,
    )


def _reference_target(stream: TokenStream) -> Tuple[str, str] | None:
    # Only the full "table(column)" form declares a foreign key.
    window = stream.tokens[stream.pos : stream.pos + 4]
    if len(window) < 4:
        return None
    table, open_paren, column, close_paren = window
    if open_paren != "(" or close_paren != ")":
        return None
    if not (_IDENT_RE.fullmatch(table) and _IDENT_RE.fullmatch(column)):
        return None
    stream.pos += 4
    return table.lower(), column.lower()


def _parse_where(stream: TokenStream) -> Condition | None:
    if not stream.consume("WHERE"):
        return None

    col = _parse_column_name(stream)
    op = stream.pop()
    if op not in COMPARISON_OPERATORS:
        raise ParseError(f"Unsupported operator: {op}")
    value = _parse_value(stream)

    next_tok = stream.peek()
    if next_tok is not None and next_tok.upper() in {"AND", "OR"}:
        raise ParseError("Compound WHERE conditions are not supported")
    return Condition(column=col, op=op, value=value)


def _assert_consumed(stream: TokenStream) -> None:
    if stream.peek() is not None:
        raise ParseError(f"Unexpected token: {stream.peek()}")
