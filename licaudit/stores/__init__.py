"""Shared state stores used during an audit run."""

from .result_table import ClassificationTable, TableFrozenError

__all__ = ["ClassificationTable", "TableFrozenError"]
