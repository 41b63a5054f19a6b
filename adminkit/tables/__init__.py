"""表格构建."""

from .definitions import ColumnDeclaration, PaginationState, RowAction, SortState
from .table_builder import COLUMN_DEFAULTS, DEFAULT_TABLE_CONFIG, TableBuilder

__all__ = [
    "COLUMN_DEFAULTS",
    "DEFAULT_TABLE_CONFIG",
    "ColumnDeclaration",
    "PaginationState",
    "RowAction",
    "SortState",
    "TableBuilder",
]
