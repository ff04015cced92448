"""
Column list differ.

Compares the previously declared column list with the newly declared one
and yields the column additions needed. The comparison is positional and
append-only: only columns at indices past the end of the old list are
reported. Removed, reordered, renamed or retyped columns produce no
operation.
"""

import logging
from dataclasses import dataclass
from typing import List

from ..models import ColumnDescriptor


logger = logging.getLogger(__name__)


@dataclass
class AddColumn:
    """Append ``column`` to the table."""

    column: ColumnDescriptor
    position: int


def diff_columns(
    old_columns: List[ColumnDescriptor],
    new_columns: List[ColumnDescriptor],
) -> List[AddColumn]:
    """
    Compute the column additions between two declared column lists.

    Args:
        old_columns: Previously declared columns, in order
        new_columns: Newly declared columns, in order

    Returns:
        One AddColumn per index of new_columns at or beyond len(old_columns)
    """
    operations = [
        AddColumn(column=column, position=i)
        for i, column in enumerate(new_columns)
        if i >= len(old_columns)
    ]

    if len(new_columns) < len(old_columns):
        logger.debug(
            f"{len(old_columns) - len(new_columns)} declared column(s) removed; "
            "removals are not applied"
        )

    return operations
