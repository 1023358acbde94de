"""Change detection between the live category tree and a recorded snapshot."""

from __future__ import annotations

from typing import Dict, Mapping, Set

from pydantic import BaseModel, Field


class ChangeSet(BaseModel):
    """Difference between the current filesystem layout and a snapshot.

    Attributes:
        new_categories: Categories present now but not in the snapshot.
        deleted_categories: Categories in the snapshot that no longer exist.
        changed_categories: Categories present in both whose files differ.
        added_files: New filenames per changed category.
        deleted_files: Removed filenames per changed category.
    """

    new_categories: Set[str] = Field(default_factory=set)
    deleted_categories: Set[str] = Field(default_factory=set)
    changed_categories: Set[str] = Field(default_factory=set)
    added_files: Dict[str, Set[str]] = Field(default_factory=dict)
    deleted_files: Dict[str, Set[str]] = Field(default_factory=dict)

    @property
    def has_changes(self) -> bool:
        """Return True when any collection is non-empty."""
        return bool(
            self.new_categories
            or self.deleted_categories
            or self.changed_categories
            or self.added_files
            or self.deleted_files
        )

    @property
    def is_empty(self) -> bool:
        """Return True when nothing changed."""
        return not self.has_changes

    def to_payload(self) -> dict[str, object]:
        """Return a JSON-ready mapping with sorted members."""
        return {
            "new_categories": sorted(self.new_categories),
            "deleted_categories": sorted(self.deleted_categories),
            "changed_categories": sorted(self.changed_categories),
            "added_files": {name: sorted(files) for name, files in sorted(self.added_files.items())},
            "deleted_files": {
                name: sorted(files) for name, files in sorted(self.deleted_files.items())
            },
        }


def detect_changes(
    current: Mapping[str, Set[str]],
    known_files: Mapping[str, Set[str]],
    known_categories: Set[str],
) -> ChangeSet:
    """Diff the current layout against a recorded snapshot.

    The detailed ``known_files`` snapshot is preferred; ``known_categories``
    is only consulted when the detailed snapshot is empty, in which case no
    file-level comparison is possible and shared categories are diffed
    against an empty file set.

    Args:
        current: Current ``{category: filenames}`` map from the scanner.
        known_files: Previously recorded ``{category: filenames}`` map.
        known_categories: Previously recorded category names.

    Returns:
        ChangeSet: Categories and files added, removed, or changed.
    """
    previous_names = set(known_files) if known_files else set(known_categories)
    current_names = set(current)

    changes = ChangeSet(
        new_categories=current_names - previous_names,
        deleted_categories=previous_names - current_names,
    )
    for name in current_names & previous_names:
        previous_files = set(known_files.get(name, ()))
        current_files = set(current[name])
        added = current_files - previous_files
        deleted = previous_files - current_files
        if not added and not deleted:
            continue
        changes.changed_categories.add(name)
        if added:
            changes.added_files[name] = added
        if deleted:
            changes.deleted_files[name] = deleted
    return changes


__all__ = ["ChangeSet", "detect_changes"]
