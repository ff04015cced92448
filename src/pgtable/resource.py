"""
Declared-state container for the table resource.

The resource lifecycle framework keeps two views of every attribute: the
value recorded after the last successful operation (old) and the value
currently declared (new). The reconciler reads changes through this
container and writes the observed catalog state back into it.
"""

import copy
from typing import Any, Dict, Optional, Tuple

from .models import COLUMN_ATTR, TABLE_NAME_ATTR


class ResourceData:
    """Old/new attribute maps plus the resource identifier."""

    def __init__(
        self,
        id: str = "",
        old: Optional[Dict[str, Any]] = None,
        new: Optional[Dict[str, Any]] = None,
        is_new: bool = False,
    ):
        self._id = id
        self._old: Dict[str, Any] = copy.deepcopy(old) if old else {}
        self._new: Dict[str, Any] = copy.deepcopy(new) if new is not None else copy.deepcopy(self._old)
        self._is_new = is_new

    @classmethod
    def for_create(cls, attrs: Dict[str, Any]) -> "ResourceData":
        """A resource that does not exist yet; every attribute is a change."""
        return cls(id="", old={}, new=attrs, is_new=True)

    @classmethod
    def for_update(
        cls, table_id: str, old: Dict[str, Any], new: Dict[str, Any]
    ) -> "ResourceData":
        return cls(id=table_id, old=old, new=new)

    @classmethod
    def for_import(cls, table_id: str) -> "ResourceData":
        """Only the identifier is known; Read fills in the rest."""
        return cls(id=table_id)

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, value: str) -> None:
        self._id = value

    @property
    def exists(self) -> bool:
        """An empty identifier means the resource does not exist."""
        return self._id != ""

    def is_new_resource(self) -> bool:
        return self._is_new

    def get(self, attr: str) -> Any:
        """Current (declared or observed) value of an attribute."""
        return self._new.get(attr, self._default(attr))

    def set(self, attr: str, value: Any) -> None:
        self._new[attr] = copy.deepcopy(value)

    def get_change(self, attr: str) -> Tuple[Any, Any]:
        """Return (old, new) for an attribute."""
        return self._old.get(attr, self._default(attr)), self.get(attr)

    def has_change(self, attr: str) -> bool:
        old, new = self.get_change(attr)
        return old != new

    def state(self) -> Dict[str, Any]:
        """Snapshot of the current attribute values."""
        return {
            TABLE_NAME_ATTR: self.get(TABLE_NAME_ATTR),
            COLUMN_ATTR: copy.deepcopy(self.get(COLUMN_ATTR)),
        }

    @staticmethod
    def _default(attr: str) -> Any:
        if attr == COLUMN_ATTR:
            return []
        if attr == TABLE_NAME_ATTR:
            return ""
        return None

    def __repr__(self) -> str:
        return f"ResourceData(id={self._id!r}, state={self.state()!r})"
