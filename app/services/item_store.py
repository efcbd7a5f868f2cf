"""Thread-safe in-memory item collection.

New ids are ``len(items) + 1``. After a deletion this can hand out an id that
is still in use, e.g. deleting item 1 from [1, 2] and creating a new item
yields a second item with id 2. Lookups by id act on the first match.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from app.core.errors import NotFoundAppError, ValidationAppError
from app.schemas.items import Item

logger = logging.getLogger(__name__)

DEFAULT_ITEMS: tuple[Item, ...] = (
    Item(id=1, name="Item 1", description="Description of item 1"),
    Item(id=2, name="Item 2", description="Description of item 2"),
)


def _not_found(item_id: int) -> NotFoundAppError:
    return NotFoundAppError(
        code="item_not_found",
        message="Item not found.",
        details={"item_id": item_id},
    )


class ItemStore:
    def __init__(self, items: Iterable[Item] = ()) -> None:
        self._lock = threading.Lock()
        self._items: list[Item] = [item.model_copy() for item in items]

    def _index_locked(self, item_id: int) -> int:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        raise _not_found(item_id)

    def list_items(self) -> list[Item]:
        with self._lock:
            return list(self._items)

    def create_item(self, name: str, description: str = "") -> Item:
        with self._lock:
            item = Item(id=len(self._items) + 1, name=name, description=description)
            self._items.append(item)
        logger.info("items.created", extra={"item_id": item.id})
        return item

    def update_item(
        self,
        item_id: int,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> Item:
        """Apply the non-empty fields to the item.

        Raises:
            NotFoundAppError: No item has this id.
            ValidationAppError: Neither field carries a value.
        """
        with self._lock:
            index = self._index_locked(item_id)
            if not name and not description:
                raise ValidationAppError(
                    code="missing_fields",
                    message="A name or a description is required to update an item.",
                )
            changes = {}
            if name:
                changes["name"] = name
            if description:
                changes["description"] = description
            item = self._items[index].model_copy(update=changes)
            self._items[index] = item
        logger.info(
            "items.updated",
            extra={"item_id": item_id, "fields": sorted(changes)},
        )
        return item

    def delete_item(self, item_id: int) -> Item:
        with self._lock:
            item = self._items.pop(self._index_locked(item_id))
        logger.info("items.deleted", extra={"item_id": item_id})
        return item

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
