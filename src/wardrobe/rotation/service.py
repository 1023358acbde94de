"""Rotation engine: selection, worn-tracking, resets, and reconciliation.

Every public operation follows the same cycle: load the configuration, load
the rotation store, compute against a fresh scan of the category tree, and
save the store only when it changed. A service instance serializes these
cycles behind a re-entrant lock, which makes it the single in-process writer
for the store document. Separate processes sharing the same document are not
coordinated and remain last-writer-wins.
"""

from __future__ import annotations

import itertools
import logging
import random
import threading
from pathlib import Path
from typing import Iterable, Optional

from wardrobe.config import ConfigManager, WardrobeConfig, require_root
from wardrobe.errors import InvalidInputError, ItemNotFoundError
from wardrobe.scanning import CategoryInfo, CategoryRef, CategoryScanner, CategoryState, ItemRef
from wardrobe.state import RotationRecord, RotationRepository, RotationStore

from .changes import ChangeSet, detect_changes

LOGGER = logging.getLogger(__name__)


def _require_text(value: str, label: str) -> str:
    if not value or not value.strip():
        raise InvalidInputError(f"{label} cannot be empty")
    return value


def _category_dir(root: Path, name: str) -> Optional[Path]:
    """Return ``root / name``, or None unless that is a direct child of ``root``."""
    candidate = root / name
    if name in {".", ".."} or candidate.parent != root:
        return None
    return candidate


class RotationService:
    """Pick items so none repeats until its whole category has been worn."""

    def __init__(
        self,
        config_manager: ConfigManager | None = None,
        repository: RotationRepository | None = None,
        *,
        scanner: CategoryScanner | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            config_manager: Source of the collection root, exclusions, and
                the recorded category snapshot.
            repository: Persistence for the rotation store.
            scanner: Scanner override; by default one is built from the
                configured item extension on every call.
            rng: Random source used for every selection.
        """
        self._config_manager = config_manager or ConfigManager()
        self._repository = repository or RotationRepository()
        self._scanner = scanner
        self._rng = rng or random.Random()
        self._lock = threading.RLock()

    # Selection --------------------------------------------------------

    def select_one(self, category: str) -> Optional[ItemRef]:
        """Return a random unworn item from ``category``.

        Completion is judged against the live item count, not the cached
        total. When the rotation is complete, a fresh record is saved first
        and the choice is made from every item. A name that is not a direct
        child of the root has no items.

        Args:
            category: Category name.

        Returns:
            Optional[ItemRef]: Selected item, or None if the category has no items.

        Raises:
            InvalidInputError: If ``category`` is blank.
        """
        name = _require_text(category, "Category name")
        with self._lock:
            _, root, scanner = self._context()
            directory = _category_dir(root, name)
            files = scanner.list_items(directory) if directory is not None else []
            if directory is None or not files:
                return None

            store = self._repository.load()
            record = store.record_for(name, len(files)).with_total(len(files))
            pool = [file_name for file_name in files if file_name not in record.worn_items]
            if record.is_rotation_complete or not pool:
                LOGGER.info("Rotation complete for '%s'; starting a fresh rotation.", name)
                self._repository.save(store.updating(name, RotationRecord.fresh(len(files))))
                pool = files

            choice = self._rng.choice(pool)
            return ItemRef(file_name=choice, category=CategoryRef(name=name, path=str(directory)))

    def select_across_categories(self) -> Optional[ItemRef]:
        """Return a random unworn item from any category that still has one.

        The choice is two-stage: a contributing category is picked uniformly,
        then an unworn item within it. Items in small categories are therefore
        more likely to be drawn than items in large ones. No category is reset
        by this call.

        Returns:
            Optional[ItemRef]: Selected item, or None if every category is
            exhausted or empty.
        """
        with self._lock:
            config, root, scanner = self._context()
            store = self._repository.load()
            candidates: list[tuple[CategoryRef, list[str]]] = []
            for info in scanner.scan(root, config.excluded_set()):
                if info.state is not CategoryState.HAS_OUTFITS:
                    continue
                record = store.categories.get(info.category.name)
                worn = record.worn_items if record is not None else frozenset()
                unworn = [file_name for file_name in info.items if file_name not in worn]
                if unworn:
                    candidates.append((info.category, unworn))

            if not candidates:
                return None
            category, pool = self._rng.choice(candidates)
            return ItemRef(file_name=self._rng.choice(pool), category=category)

    # Worn tracking ----------------------------------------------------

    def mark_worn(self, item: ItemRef) -> None:
        """Record ``item`` as worn.

        Nothing is written when the item is already worn. When this wear
        completes the rotation, the saved record is a fresh one so the whole
        category becomes available again.

        Args:
            item: Item to mark.

        Raises:
            InvalidInputError: If the filename or category name is blank.
            ItemNotFoundError: If the file is no longer in its category.
        """
        self.mark_many_worn([item])

    def mark_many_worn(self, items: Iterable[ItemRef]) -> None:
        """Record several items as worn with at most one store save.

        Every item is validated before anything is applied, so a bad entry
        leaves the store untouched.

        Args:
            items: Items to mark.

        Raises:
            InvalidInputError: If any filename or category name is blank.
            ItemNotFoundError: If any file is no longer in its category.
        """
        pending = list(items)
        for item in pending:
            _require_text(item.file_name, "Filename")
            _require_text(item.category.name, "Category name")
        if not pending:
            return

        with self._lock:
            _, root, scanner = self._context()
            listings: dict[str, list[str]] = {}
            for item in pending:
                name = item.category.name
                if name not in listings:
                    listings[name] = self._files(scanner, root, name)
                if item.file_name not in listings[name]:
                    raise ItemNotFoundError(
                        f"'{item.file_name}' is not available in category '{name}'"
                    )

            original = self._repository.load()
            store = original
            for item in pending:
                store = self._wear(store, item, listings[item.category.name])
            if store is not original:
                self._repository.save(store)

    def _wear(self, store: RotationStore, item: ItemRef, files: list[str]) -> RotationStore:
        name = item.category.name
        record = store.record_for(name, len(files)).with_total(len(files))
        if item.file_name in record.worn_items:
            LOGGER.debug("'%s' already worn in '%s'; nothing to record.", item.file_name, name)
            return store

        record = record.adding(item.file_name)
        if set(files) <= record.worn_items:
            LOGGER.info("Rotation complete for '%s' after wearing '%s'.", name, item.file_name)
            record = RotationRecord.fresh(len(files))
        return store.updating(name, record)

    def is_worn(self, file_name: str, category: str) -> bool:
        """Return True when ``file_name`` is in the current worn set of ``category``."""
        if not file_name.strip() or not category.strip():
            return False
        with self._lock:
            self._config_manager.load()
            record = self._repository.load().categories.get(category)
            return record is not None and file_name in record.worn_items

    # Counts -----------------------------------------------------------

    def available_count(self, category: str) -> int:
        """Return how many items the next selection can draw from.

        Once a rotation is complete this is the full pool size, since the
        next selection starts a fresh rotation; otherwise it is the number of
        unworn items. The cached total is refreshed from the live item count
        in memory only.
        """
        return self._current_record(category).available

    def rotation_progress(self, category: str) -> tuple[int, int]:
        """Return ``(worn, total)`` for ``category``.

        ``worn`` is derived from :meth:`available_count`, so a just-completed
        rotation reports ``(0, total)``.
        """
        record = self._current_record(category)
        return record.total_items - record.available, record.total_items

    def _current_record(self, category: str) -> RotationRecord:
        name = _require_text(category, "Category name")
        with self._lock:
            _, root, scanner = self._context()
            files = self._files(scanner, root, name)
            record = self._repository.load().record_for(name, len(files))
            return record.with_total(len(files))

    # Resets -----------------------------------------------------------

    def reset_category(self, category: str) -> None:
        """Clear the worn set of ``category``; always writes.

        The stored total becomes zero and is corrected by the next selection
        or count.
        """
        self.reset_categories([category])

    def reset_categories(self, categories: Iterable[str]) -> None:
        """Clear several categories with one store save."""
        names = [_require_text(name, "Category name") for name in categories]
        if not names:
            return
        with self._lock:
            self._config_manager.load()
            store = self._repository.load()
            for name in names:
                store = store.updating(name, RotationRecord.fresh(0))
            self._repository.save(store)
        LOGGER.info("Reset rotation for %s.", ", ".join(names))

    def reset_all(self) -> None:
        """Discard every category record by saving an empty store."""
        with self._lock:
            self._config_manager.load()
            self._repository.save(RotationStore())
        LOGGER.info("Reset rotation for all categories.")

    def partial_reset(self, category: str, keep_worn_count: int) -> None:
        """Shrink the worn set of ``category`` to ``keep_worn_count`` entries.

        Nothing is written when ``keep_worn_count`` is at least the current
        item count. Which worn entries survive is unspecified.

        Raises:
            InvalidInputError: If ``category`` is blank or the count is negative.
        """
        name = _require_text(category, "Category name")
        if keep_worn_count < 0:
            raise InvalidInputError("Worn count cannot be negative")
        with self._lock:
            _, root, scanner = self._context()
            files = self._files(scanner, root, name)
            if keep_worn_count >= len(files):
                LOGGER.debug("Partial reset of '%s' keeps everything; skipping.", name)
                return

            store = self._repository.load()
            record = store.record_for(name, len(files))
            kept = frozenset(itertools.islice(record.worn_items, keep_worn_count))
            updated = RotationRecord(worn_items=kept, total_items=len(files))
            self._repository.save(store.updating(name, updated))

    # Queries ----------------------------------------------------------

    def category_info(self) -> list[CategoryInfo]:
        """Return every category with its state, including excluded ones."""
        with self._lock:
            config, root, scanner = self._context()
            return scanner.scan(root, config.excluded_set())

    def categories(self) -> list[CategoryRef]:
        """Return every category that is not excluded by the user."""
        return [
            info.category
            for info in self.category_info()
            if info.state is not CategoryState.USER_EXCLUDED
        ]

    def list_items(self, category: str) -> list[ItemRef]:
        """Return every item in ``category`` sorted by filename."""
        name = _require_text(category, "Category name")
        with self._lock:
            _, root, scanner = self._context()
            directory = _category_dir(root, name)
            if directory is None:
                return []
            ref = CategoryRef(name=name, path=str(directory))
            return [
                ItemRef(file_name=file_name, category=ref)
                for file_name in scanner.list_items(directory)
            ]

    def get_item(self, file_name: str, category: str) -> ItemRef:
        """Return the reference for a specific item.

        Raises:
            InvalidInputError: If either name is blank.
            ItemNotFoundError: If the item does not exist.
        """
        _require_text(file_name, "Filename")
        for item in self.list_items(category):
            if item.file_name == file_name:
                return item
        raise ItemNotFoundError(f"'{file_name}' not found in category '{category}'")

    def item_exists(self, file_name: str, category: str) -> bool:
        """Return True when the item exists; blank names never exist."""
        if not file_name.strip() or not category.strip():
            return False
        return any(item.file_name == file_name for item in self.list_items(category))

    def search_items(self, pattern: str) -> list[ItemRef]:
        """Return items whose filename contains ``pattern``, case-insensitively.

        Excluded categories are skipped. Results are sorted by filename.
        """
        needle = _require_text(pattern, "Search pattern").strip().lower()
        matches = [
            ItemRef(file_name=file_name, category=info.category)
            for info in self.category_info()
            if info.state is CategoryState.HAS_OUTFITS
            for file_name in info.items
            if needle in file_name.lower()
        ]
        return sorted(matches, key=lambda item: (item.file_name, item.category.name))

    def filter_categories(self, pattern: str) -> list[CategoryRef]:
        """Return categories with items whose name contains ``pattern``."""
        needle = _require_text(pattern, "Filter pattern").strip().lower()
        return [
            info.category
            for info in self.category_info()
            if info.state is CategoryState.HAS_OUTFITS and needle in info.category.name.lower()
        ]

    # Change detection -------------------------------------------------

    def detect_changes(self) -> ChangeSet:
        """Diff the live category tree against the recorded snapshot."""
        with self._lock:
            config, root, scanner = self._context()
            current = scanner.snapshot(root, config.excluded_set())
            return detect_changes(current, config.known_file_map(), config.known_category_set())

    def apply_changes(self, changes: ChangeSet) -> None:
        """Record the live layout as the new snapshot.

        The snapshot is replaced in full from a fresh scan. When ``changes``
        reports deleted categories, every category's worn set is cleared.

        Args:
            changes: Change set previously returned by :meth:`detect_changes`.
        """
        with self._lock:
            config, root, scanner = self._context()
            current = scanner.snapshot(root, config.excluded_set())

            file_data = self._config_manager.load_file_overrides()
            file_data["known_categories"] = sorted(current)
            file_data["known_category_files"] = {
                name: sorted(files) for name, files in sorted(current.items())
            }
            self._config_manager.save(file_data)

            if changes.deleted_categories:
                LOGGER.info(
                    "Categories removed (%s); resetting rotation for every category.",
                    ", ".join(sorted(changes.deleted_categories)),
                )
                store = self._repository.load()
                self._repository.save(store.reset_all())

    # Internal helpers -------------------------------------------------

    def _context(self) -> tuple[WardrobeConfig, Path, CategoryScanner]:
        config = self._config_manager.load()
        root = require_root(config)
        scanner = self._scanner or CategoryScanner(extension=config.scanning.item_extension)
        return config, root, scanner

    @staticmethod
    def _files(scanner: CategoryScanner, root: Path, name: str) -> list[str]:
        directory = _category_dir(root, name)
        if directory is None:
            return []
        return scanner.list_items(directory)


__all__ = ["RotationService"]
