"""Category discovery tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from wardrobe.errors import FilesystemError
from wardrobe.scanning import CategoryRef, CategoryScanner, CategoryState, ItemRef


def test_scan_classifies_every_category(tmp_path: Path, build_tree) -> None:
    root = build_tree(
        tmp_path,
        {
            "casual": ["b.avatar", "a.AVATAR", "notes.txt"],
            "empty": [],
            "docs": ["readme.md"],
            "hidden": ["x.avatar"],
        },
    )
    (root / "loose.avatar").write_text("", encoding="utf-8")

    infos = CategoryScanner().scan(root, {"hidden"})

    assert [info.category.name for info in infos] == ["casual", "docs", "empty", "hidden"]
    states = {info.category.name: info.state for info in infos}
    assert states == {
        "casual": CategoryState.HAS_OUTFITS,
        "docs": CategoryState.NO_QUALIFYING_FILES,
        "empty": CategoryState.EMPTY,
        "hidden": CategoryState.USER_EXCLUDED,
    }
    casual = infos[0]
    assert casual.items == ("a.AVATAR", "b.avatar")
    assert casual.item_count == 2
    assert infos[3].items == ()


def test_nested_directories_do_not_count_as_items(tmp_path: Path, build_tree) -> None:
    root = build_tree(tmp_path, {"casual": []})
    (root / "casual" / "nested.avatar").mkdir()

    info = CategoryScanner().scan(root)[0]

    assert info.state is CategoryState.EMPTY
    assert CategoryScanner().list_items(root / "casual") == []


def test_excluded_category_contents_are_not_read(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, build_tree
) -> None:
    root = build_tree(tmp_path, {"hidden": ["x.avatar"], "casual": ["a.avatar"]})
    scanner = CategoryScanner()
    original = scanner._iter_entries
    visited: list[Path] = []

    def _tracking(directory: Path):
        visited.append(directory)
        return original(directory)

    monkeypatch.setattr(scanner, "_iter_entries", _tracking)

    scanner.scan(root, {"hidden"})

    assert root / "hidden" not in visited


def test_list_items_for_missing_directory_is_empty(tmp_path: Path) -> None:
    assert CategoryScanner().list_items(tmp_path / "absent") == []


def test_custom_extension(tmp_path: Path, build_tree) -> None:
    root = build_tree(tmp_path, {"casual": ["a.look", "b.avatar"]})

    snapshot = CategoryScanner(extension=".look").snapshot(root)

    assert snapshot == {"casual": {"a.look"}}


def test_missing_root_raises_filesystem_error(tmp_path: Path) -> None:
    with pytest.raises(FilesystemError):
        CategoryScanner().scan(tmp_path / "absent")


def test_item_identity_ignores_category_path() -> None:
    first = ItemRef(file_name="a.avatar", category=CategoryRef(name="casual", path="/x/casual"))
    second = ItemRef(file_name="a.avatar", category=CategoryRef(name="casual", path="casual"))

    assert first == second
    assert len({first, second}) == 1
    assert first.file_path == str(Path("/x/casual") / "a.avatar")
    assert str(first) == "a.avatar in casual"
