"""
Typed table and column descriptors for pgtable.

The resource framework hands columns over as attribute maps
(``name``, ``type``, ``max_length``, ``default``, ``is_null``); these
dataclasses are the typed form used everywhere inside pgtable.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


TABLE_NAME_ATTR = "name"
COLUMN_ATTR = "column"

COLUMN_NAME_ATTR = "name"
COLUMN_TYPE_ATTR = "type"
COLUMN_MAX_LENGTH_ATTR = "max_length"
COLUMN_DEFAULT_ATTR = "default"
COLUMN_IS_NULL_ATTR = "is_null"


@dataclass
class ColumnDescriptor:
    """A single column, declared or observed."""

    name: str
    type: str
    max_length: Optional[int] = None
    default: Optional[str] = None
    nullable: bool = False

    @classmethod
    def from_attributes(cls, attrs: Dict[str, Any]) -> "ColumnDescriptor":
        """Build a descriptor from a framework attribute map."""
        max_length = attrs.get(COLUMN_MAX_LENGTH_ATTR)
        is_null = attrs.get(COLUMN_IS_NULL_ATTR)

        return cls(
            name=attrs[COLUMN_NAME_ATTR],
            type=attrs[COLUMN_TYPE_ATTR],
            max_length=int(max_length) if max_length is not None else None,
            default=attrs.get(COLUMN_DEFAULT_ATTR),
            nullable=bool(is_null) if is_null is not None else False,
        )

    def to_attributes(self) -> Dict[str, Any]:
        """Render as a framework attribute map, omitting absent optionals."""
        attrs: Dict[str, Any] = {
            COLUMN_NAME_ATTR: self.name,
            COLUMN_TYPE_ATTR: self.type,
            COLUMN_IS_NULL_ATTR: self.nullable,
        }
        if self.max_length is not None:
            attrs[COLUMN_MAX_LENGTH_ATTR] = self.max_length
        if self.default is not None:
            attrs[COLUMN_DEFAULT_ATTR] = self.default
        return attrs


@dataclass
class TableDescriptor:
    """A table as seen in the catalog; its identity is its name."""

    name: str
    columns: List[ColumnDescriptor] = field(default_factory=list)


def columns_from_attributes(raw_columns: Optional[List[Dict[str, Any]]]) -> List[ColumnDescriptor]:
    """Convert a framework column list (possibly None) into descriptors."""
    return [ColumnDescriptor.from_attributes(c) for c in raw_columns or []]


def columns_to_attributes(columns: List[ColumnDescriptor]) -> List[Dict[str, Any]]:
    """Convert descriptors back into a framework column list."""
    return [c.to_attributes() for c in columns]
