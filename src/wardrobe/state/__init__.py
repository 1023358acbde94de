"""Rotation store persistence helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from .errors import CorruptStateError, StateError
from .models import SCHEMA_VERSION, RotationRecord, RotationStore

LOGGER = logging.getLogger(__name__)

DEFAULT_STATE_PATH = Path("~/.wardrobe/rotation.json")


class RotationRepository:
    """Load and persist the rotation store as a single JSON document."""

    def __init__(self, path: Path | None = None) -> None:
        """Initialize the repository.

        Args:
            path: Location of the rotation store document. Defaults to
                ``~/.wardrobe/rotation.json``.
        """
        self._path = (path or DEFAULT_STATE_PATH).expanduser()

    @property
    def path(self) -> Path:
        """Return the resolved rotation store path."""
        return self._path

    def load(self) -> RotationStore:
        """Load the rotation store from disk.

        Returns:
            RotationStore: Stored document, or an empty store if no file exists.

        Raises:
            CorruptStateError: If the file exists but cannot be parsed.
            StateError: If the file cannot be read.
        """
        if not self._path.exists():
            LOGGER.debug("No rotation store at %s; starting empty.", self._path)
            return RotationStore()

        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StateError(f"Unable to read rotation store {self._path}: {exc}") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptStateError(f"Invalid rotation store data: {exc}") from exc

        try:
            return RotationStore.model_validate(data)
        except ValidationError as exc:
            raise CorruptStateError(f"Rotation store does not match schema: {exc}") from exc

    def save(self, store: RotationStore) -> None:
        """Overwrite the rotation store document.

        Args:
            store: Store to serialize.

        Raises:
            StateError: If the document cannot be written.
        """
        payload = store.model_dump(mode="json", by_alias=True)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StateError(f"Unable to write rotation store {self._path}: {exc}") from exc
        LOGGER.debug("Saved rotation store with %d categories.", len(store.categories))

    def delete(self) -> None:
        """Remove the rotation store document if present."""
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            raise StateError(f"Unable to delete rotation store {self._path}: {exc}") from exc


__all__ = [
    "RotationRepository",
    "DEFAULT_STATE_PATH",
    "SCHEMA_VERSION",
    "RotationRecord",
    "RotationStore",
    "StateError",
    "CorruptStateError",
]
