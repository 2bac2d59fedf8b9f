from .api import SQLEngine
from .config import EngineSettings, load_settings
from .dbml import generate_dbml, parse_dbml
from .errors import EmptyInputError, SchemaError, ShapeError
from .parser import ParseError, cast_value
from .results import ExecutionResult, StatementResult
from .schema import Column, Table

__all__ = [
    "SQLEngine",
    "EngineSettings",
    "load_settings",
    "generate_dbml",
    "parse_dbml",
    "EmptyInputError",
    "SchemaError",
    "ShapeError",
    "ParseError",
    "cast_value",
    "ExecutionResult",
    "StatementResult",
    "Column",
    "Table",
]
