"""Category discovery over a collection root."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AbstractSet, Iterable

from wardrobe.errors import FilesystemError

from .models import CategoryInfo, CategoryRef, CategoryState

LOGGER = logging.getLogger(__name__)


class CategoryScanner:
    """Classify the immediate subdirectories of a root and list their items."""

    def __init__(self, *, extension: str = "avatar") -> None:
        self.suffix = "." + extension.lstrip(".").lower()

    def scan(self, root: Path, exclusions: AbstractSet[str] = frozenset()) -> list[CategoryInfo]:
        """Return every category under ``root`` sorted by name.

        Args:
            root: Collection root directory.
            exclusions: Category names to report as excluded without reading.

        Returns:
            list[CategoryInfo]: One entry per subdirectory.

        Raises:
            FilesystemError: If any directory listing fails.
        """
        infos: list[CategoryInfo] = []
        for child in self._iter_entries(root):
            if not child.is_dir():
                continue
            category = CategoryRef(name=child.name, path=str(child))
            if child.name in exclusions:
                infos.append(CategoryInfo(category=category, state=CategoryState.USER_EXCLUDED))
                continue

            files = [entry for entry in self._iter_entries(child) if not entry.is_dir()]
            items = tuple(sorted(entry.name for entry in files if self.qualifies(entry)))
            if items:
                state = CategoryState.HAS_OUTFITS
            elif files:
                state = CategoryState.NO_QUALIFYING_FILES
            else:
                state = CategoryState.EMPTY
            infos.append(CategoryInfo(category=category, state=state, items=items))

        infos.sort(key=lambda info: info.category.name)
        LOGGER.debug("Scanned %d categories under %s.", len(infos), root)
        return infos

    def list_items(self, directory: Path) -> list[str]:
        """Return sorted qualifying filenames in ``directory``.

        A directory that does not exist has no items.
        """
        if not directory.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self._iter_entries(directory)
            if not entry.is_dir() and self.qualifies(entry)
        )

    def snapshot(
        self, root: Path, exclusions: AbstractSet[str] = frozenset()
    ) -> dict[str, set[str]]:
        """Return ``{category name: item filenames}`` for every category."""
        return {info.category.name: set(info.items) for info in self.scan(root, exclusions)}

    def qualifies(self, path: Path) -> bool:
        """Return True when ``path`` carries the item extension."""
        return path.suffix.lower() == self.suffix

    def _iter_entries(self, directory: Path) -> Iterable[Path]:
        try:
            return sorted(directory.iterdir())
        except OSError as exc:
            raise FilesystemError(f"Unable to list {directory}: {exc}") from exc
