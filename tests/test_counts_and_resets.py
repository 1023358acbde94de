"""Availability counts and reset operations."""

from __future__ import annotations

import pytest

from wardrobe.errors import InvalidInputError
from wardrobe.state import RotationRecord

FILES = ["a.avatar", "b.avatar", "c.avatar", "d.avatar"]


def _seed(repository, name: str, worn: set[str], total: int) -> None:
    repository.save(
        repository.load().updating(
            name, RotationRecord(worn_items=frozenset(worn), total_items=total)
        )
    )
    repository.saved.clear()


def test_unknown_category_reports_empty_progress(make_service) -> None:
    service = make_service({"casual": FILES})

    assert service.rotation_progress("absent") == (0, 0)
    assert service.available_count("absent") == 0


def test_counts_without_record_cover_every_item(make_service, repository) -> None:
    service = make_service({"casual": FILES})

    assert service.rotation_progress("casual") == (0, 4)
    assert service.available_count("casual") == 4
    assert repository.saved == []


def test_counts_follow_worn_set(make_service, repository) -> None:
    service = make_service({"casual": FILES})
    _seed(repository, "casual", {"a.avatar", "b.avatar"}, 4)

    assert service.rotation_progress("casual") == (2, 4)
    assert service.available_count("casual") == 2


def test_counts_refresh_stale_total_without_writing(make_service, repository) -> None:
    service = make_service({"casual": FILES})
    _seed(repository, "casual", {"a.avatar"}, 2)

    assert service.rotation_progress("casual") == (1, 4)
    assert repository.saved == []
    assert repository.load().categories["casual"].total_items == 2


def test_reset_category_always_writes(make_service, repository) -> None:
    service = make_service({"casual": FILES})

    service.reset_category("casual")

    assert len(repository.saved) == 1
    record = repository.saved[0].categories["casual"]
    assert record.worn_items == frozenset()
    assert record.total_items == 0
    assert service.rotation_progress("casual") == (0, 4)


def test_reset_category_leaves_others(make_service, repository) -> None:
    service = make_service({"casual": FILES, "formal": ["suit.avatar", "tie.avatar"]})
    _seed(repository, "casual", {"a.avatar"}, 4)
    _seed(repository, "formal", {"suit.avatar"}, 2)

    service.reset_categories(["casual"])

    assert service.rotation_progress("casual") == (0, 4)
    assert service.rotation_progress("formal") == (1, 2)


def test_reset_categories_saves_once(make_service, repository) -> None:
    service = make_service({"casual": FILES, "formal": ["suit.avatar"]})

    service.reset_categories(["casual", "formal"])

    assert len(repository.saved) == 1
    assert set(repository.saved[0].categories) == {"casual", "formal"}


def test_reset_all_discards_every_record(make_service, repository) -> None:
    service = make_service({"casual": FILES})
    _seed(repository, "casual", {"a.avatar"}, 4)

    service.reset_all()

    assert repository.load().categories == {}


def test_partial_reset_keeps_requested_number_of_entries(make_service, repository) -> None:
    service = make_service({"casual": FILES})
    _seed(repository, "casual", {"c.avatar", "a.avatar", "b.avatar"}, 3)

    service.partial_reset("casual", 1)

    record = repository.load().categories["casual"]
    assert len(record.worn_items) == 1
    assert record.worn_items <= {"a.avatar", "b.avatar", "c.avatar"}
    assert record.total_items == 4


def test_partial_reset_with_large_count_is_noop(make_service, repository) -> None:
    service = make_service({"casual": FILES})
    _seed(repository, "casual", {"a.avatar"}, 4)

    service.partial_reset("casual", 4)
    service.partial_reset("casual", 10)

    assert repository.saved == []


def test_partial_reset_rejects_negative_count(make_service) -> None:
    service = make_service({"casual": FILES})

    with pytest.raises(InvalidInputError):
        service.partial_reset("casual", -1)
