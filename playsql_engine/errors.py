from __future__ import annotations


class SchemaError(ValueError):
    """Unknown table or column, or a duplicate table/column name."""


class ShapeError(ValueError):
    """INSERT tuple whose value count does not match its column count."""


class EmptyInputError(ValueError):
    """A script that holds no statements once comments are stripped."""
