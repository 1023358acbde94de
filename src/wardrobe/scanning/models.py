"""Category and item reference types derived from the filesystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Tuple


class CategoryState(str, Enum):
    """Usability of a category directory."""

    HAS_OUTFITS = "hasOutfits"
    EMPTY = "empty"
    NO_QUALIFYING_FILES = "noQualifyingFiles"
    USER_EXCLUDED = "userExcluded"


@dataclass(frozen=True, slots=True)
class CategoryRef:
    """A category directory.

    Attributes:
        name: Last path component of the directory.
        path: Full path of the directory.
    """

    name: str
    path: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True, eq=False)
class ItemRef:
    """A selectable item file inside a category.

    Two references are equal when they name the same file in the same
    category, regardless of how the category path was spelled.
    """

    file_name: str
    category: CategoryRef

    @property
    def file_path(self) -> str:
        """Return the normalized path of the item file."""
        return str(Path(self.category.path) / self.file_name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ItemRef):
            return NotImplemented
        return (self.file_name, self.category.name) == (other.file_name, other.category.name)

    def __hash__(self) -> int:
        return hash((self.file_name, self.category.name))

    def __str__(self) -> str:
        return f"{self.file_name} in {self.category.name}"


@dataclass(frozen=True, slots=True)
class CategoryInfo:
    """A scanned category with its classification and qualifying items."""

    category: CategoryRef
    state: CategoryState
    items: Tuple[str, ...] = field(default=())

    @property
    def item_count(self) -> int:
        """Return the number of qualifying items."""
        return len(self.items)


__all__ = ["CategoryState", "CategoryRef", "ItemRef", "CategoryInfo"]
