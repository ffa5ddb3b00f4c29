from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from authoring.schemas import Category

if TYPE_CHECKING:
    from authoring.api import MarketplaceClient


class CategoryDirectory:
    """
    Session-wide cache of the category tree (with attribute schemas).
    Filled once on first need and never invalidated; after that it is read-only,
    so several authoring sessions can share one instance.
    """

    def __init__(self, categories: list[Category] | None = None):
        self._categories: list[Category] | None = list(categories) if categories is not None else None
        self._lock = asyncio.Lock()
        self.log = logging.getLogger(self.__class__.__name__)

    @property
    def loaded(self) -> bool:
        return self._categories is not None

    @property
    def categories(self) -> list[Category]:
        return list(self._categories or [])

    async def load(self, client: MarketplaceClient) -> list[Category]:
        if self._categories is not None:
            return self.categories
        async with self._lock:
            if self._categories is None:
                categories = await client.get_categories()
                self._categories = categories
                self.log.info("✅ Category directory loaded: %s categories", len(categories))
        return self.categories

    def get(self, category_id: int) -> Category | None:
        for category in self._categories or []:
            if category.id == category_id: return category
        return None
