"""Shared fixtures for the Wardrobe test suite."""

from __future__ import annotations

import random
from pathlib import Path
from typing import Callable, Mapping, Sequence

import pytest

from wardrobe.config import ConfigManager
from wardrobe.rotation import RotationService
from wardrobe.state import RotationRepository, RotationStore


class CountingRepository(RotationRepository):
    """Repository that records every saved store."""

    def __init__(self, path: Path) -> None:
        super().__init__(path)
        self.saved: list[RotationStore] = []

    def save(self, store: RotationStore) -> None:
        self.saved.append(store)
        super().save(store)


def _build_tree(root: Path, layout: Mapping[str, Sequence[str]]) -> Path:
    """Create one directory per category holding the named files.

    Args:
        root: Collection root to populate.
        layout: Mapping of category name to filenames.

    Returns:
        Path: The populated root.
    """
    root.mkdir(parents=True, exist_ok=True)
    for category, files in layout.items():
        directory = root / category
        directory.mkdir(exist_ok=True)
        for name in files:
            (directory / name).write_text(name, encoding="utf-8")
    return root


@pytest.fixture()
def build_tree() -> Callable[[Path, Mapping[str, Sequence[str]]], Path]:
    return _build_tree


@pytest.fixture()
def collection_root(tmp_path: Path) -> Path:
    return tmp_path / "outfits"


@pytest.fixture()
def config_manager(tmp_path: Path, collection_root: Path) -> ConfigManager:
    manager = ConfigManager(tmp_path / "home" / "config.yaml", env={})
    manager.save({"root": str(collection_root)})
    return manager


@pytest.fixture()
def repository(tmp_path: Path) -> CountingRepository:
    return CountingRepository(tmp_path / "home" / "rotation.json")


@pytest.fixture()
def make_service(
    config_manager: ConfigManager, repository: CountingRepository, collection_root: Path
) -> Callable[..., RotationService]:
    """Return a factory building a service over a freshly populated tree."""

    def _factory(layout: Mapping[str, Sequence[str]], *, seed: int = 7) -> RotationService:
        _build_tree(collection_root, layout)
        return RotationService(config_manager, repository, rng=random.Random(seed))

    return _factory
