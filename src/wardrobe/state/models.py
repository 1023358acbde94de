"""Rotation store data models.

Both models are frozen: every helper that "changes" a record or a store
returns a new instance and leaves the receiver untouched, so a store loaded by
one operation can never be mutated behind the back of another.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

SCHEMA_VERSION = 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RotationBaseModel(BaseModel):
    """Shared configuration for rotation store models."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class RotationRecord(RotationBaseModel):
    """Worn-tracking for a single category.

    Attributes:
        worn_items: Bare filenames worn during the current rotation.
        total_items: Cached item count; may be stale until the next refresh.
        last_updated: Timestamp of the last modification.
    """

    worn_items: FrozenSet[str] = Field(default_factory=frozenset, alias="wornOutfits")
    total_items: int = Field(alias="totalOutfits")
    last_updated: datetime = Field(default_factory=_utcnow, alias="lastUpdated")

    @classmethod
    def fresh(cls, total_items: int) -> "RotationRecord":
        """Return a record with nothing worn and the given total.

        Args:
            total_items: Number of items currently in the category.

        Returns:
            RotationRecord: Empty record stamped with the current time.
        """
        return cls(worn_items=frozenset(), total_items=total_items)

    @property
    def is_rotation_complete(self) -> bool:
        """Return True when every item has been worn or the category is empty."""
        return len(self.worn_items) >= self.total_items or self.total_items == 0

    @property
    def remaining(self) -> int:
        """Return the number of items not yet worn, never below zero."""
        return max(0, self.total_items - len(self.worn_items))

    @property
    def progress(self) -> float:
        """Return the worn fraction of the rotation.

        A non-positive total reports 1.0. Otherwise the raw ratio is returned,
        which exceeds 1.0 when the cached total is smaller than the worn set.
        """
        if self.total_items <= 0:
            return 1.0
        return len(self.worn_items) / self.total_items

    @property
    def available(self) -> int:
        """Return the pool size for the next selection.

        A complete rotation is about to start over, so every item counts.
        """
        if self.is_rotation_complete:
            return self.total_items
        return self.remaining

    def with_total(self, total_items: int) -> "RotationRecord":
        """Return a copy whose cached total is ``total_items``."""
        if total_items == self.total_items:
            return self
        return self.model_copy(update={"total_items": total_items})

    def adding(self, file_name: str) -> "RotationRecord":
        """Return a copy with ``file_name`` marked as worn."""
        return RotationRecord(
            worn_items=self.worn_items | {file_name},
            total_items=self.total_items,
        )

    def reset(self) -> "RotationRecord":
        """Return a copy with an empty worn set and the same total."""
        return RotationRecord.fresh(self.total_items)

    @field_serializer("worn_items")
    def _serialize_worn_items(self, value: FrozenSet[str]) -> List[str]:
        return sorted(value)


class RotationStore(RotationBaseModel):
    """All category records plus the document header.

    Attributes:
        categories: Mapping of category name to its rotation record.
        version: Schema version of the persisted document.
        created_at: Timestamp of store creation.
    """

    categories: Dict[str, RotationRecord] = Field(default_factory=dict)
    version: int = SCHEMA_VERSION
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")

    def record_for(self, name: str, default_total: int) -> RotationRecord:
        """Return the stored record for ``name`` or a fresh one sized ``default_total``."""
        record = self.categories.get(name)
        if record is None:
            return RotationRecord.fresh(default_total)
        return record

    def updating(self, name: str, record: RotationRecord) -> "RotationStore":
        """Return a store with ``record`` inserted or replaced under ``name``."""
        categories = dict(self.categories)
        categories[name] = record
        return self._with_categories(categories)

    def removing(self, name: str) -> "RotationStore":
        """Return a store without the record for ``name``."""
        categories = dict(self.categories)
        categories.pop(name, None)
        return self._with_categories(categories)

    def resetting(self, name: str) -> Optional["RotationStore"]:
        """Return a store with ``name`` reset, or None if it has no record."""
        record = self.categories.get(name)
        if record is None:
            return None
        return self.updating(name, record.reset())

    def reset_all(self) -> "RotationStore":
        """Return a store where every record is emptied but keeps its total."""
        return self._with_categories(
            {name: record.reset() for name, record in self.categories.items()}
        )

    def _with_categories(self, categories: Dict[str, RotationRecord]) -> "RotationStore":
        return RotationStore(categories=categories, version=self.version, created_at=self.created_at)


__all__ = ["SCHEMA_VERSION", "RotationBaseModel", "RotationRecord", "RotationStore"]
