"""Coroutine front-end for :class:`RotationService`.

Each call runs the synchronous operation in a worker thread so an event loop
is never blocked on directory listings or store writes. Cancelling the await
does not roll back an operation that already started.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional

from wardrobe.scanning import CategoryInfo, CategoryRef, ItemRef

from .changes import ChangeSet
from .service import RotationService


class AsyncRotationService:
    """Awaitable wrapper exposing the rotation operations."""

    def __init__(self, service: RotationService | None = None) -> None:
        self._service = service or RotationService()

    @property
    def service(self) -> RotationService:
        """Return the wrapped synchronous service."""
        return self._service

    async def select_one(self, category: str) -> Optional[ItemRef]:
        return await asyncio.to_thread(self._service.select_one, category)

    async def select_across_categories(self) -> Optional[ItemRef]:
        return await asyncio.to_thread(self._service.select_across_categories)

    async def mark_worn(self, item: ItemRef) -> None:
        await asyncio.to_thread(self._service.mark_worn, item)

    async def mark_many_worn(self, items: Iterable[ItemRef]) -> None:
        await asyncio.to_thread(self._service.mark_many_worn, list(items))

    async def available_count(self, category: str) -> int:
        return await asyncio.to_thread(self._service.available_count, category)

    async def rotation_progress(self, category: str) -> tuple[int, int]:
        return await asyncio.to_thread(self._service.rotation_progress, category)

    async def reset_category(self, category: str) -> None:
        await asyncio.to_thread(self._service.reset_category, category)

    async def reset_all(self) -> None:
        await asyncio.to_thread(self._service.reset_all)

    async def partial_reset(self, category: str, keep_worn_count: int) -> None:
        await asyncio.to_thread(self._service.partial_reset, category, keep_worn_count)

    async def category_info(self) -> list[CategoryInfo]:
        return await asyncio.to_thread(self._service.category_info)

    async def categories(self) -> list[CategoryRef]:
        return await asyncio.to_thread(self._service.categories)

    async def list_items(self, category: str) -> list[ItemRef]:
        return await asyncio.to_thread(self._service.list_items, category)

    async def detect_changes(self) -> ChangeSet:
        return await asyncio.to_thread(self._service.detect_changes)

    async def apply_changes(self, changes: ChangeSet) -> None:
        await asyncio.to_thread(self._service.apply_changes, changes)


__all__ = ["AsyncRotationService"]
