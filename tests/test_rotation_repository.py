"""Rotation store repository tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from wardrobe.state import CorruptStateError, RotationRecord, RotationRepository, RotationStore


def test_missing_file_loads_empty_store(tmp_path: Path) -> None:
    repo = RotationRepository(tmp_path / "rotation.json")

    store = repo.load()

    assert store.categories == {}
    assert not repo.path.exists()


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    repo = RotationRepository(tmp_path / "nested" / "rotation.json")
    record = RotationRecord(worn_items=frozenset({"a.avatar"}), total_items=3)

    repo.save(RotationStore().updating("casual", record))
    loaded = repo.load()

    assert loaded.categories["casual"].worn_items == frozenset({"a.avatar"})
    assert loaded.categories["casual"].total_items == 3
    document = json.loads(repo.path.read_text(encoding="utf-8"))
    assert document["categories"]["casual"]["wornOutfits"] == ["a.avatar"]


def test_save_overwrites_whole_document(tmp_path: Path) -> None:
    repo = RotationRepository(tmp_path / "rotation.json")
    repo.save(RotationStore().updating("casual", RotationRecord.fresh(2)))

    repo.save(RotationStore().updating("formal", RotationRecord.fresh(1)))

    assert set(repo.load().categories) == {"formal"}


@pytest.mark.parametrize("content", ["{not json", '{"categories": {"x": {"wornOutfits": 3}}}'])
def test_corrupt_document_raises(tmp_path: Path, content: str) -> None:
    path = tmp_path / "rotation.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(CorruptStateError):
        RotationRepository(path).load()


def test_delete_removes_document(tmp_path: Path) -> None:
    repo = RotationRepository(tmp_path / "rotation.json")
    repo.save(RotationStore())

    repo.delete()
    repo.delete()

    assert not repo.path.exists()
