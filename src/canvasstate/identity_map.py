"""
IdentityMap: transient rendering-layer ids -> persisted layout item ids.

The drag layer assigns its own ids to items as they enter the visual layer.
Drag completion events carry those transient ids; this map routes the new
geometry back to the persisted item. Correlation is best effort: an event
whose id cannot be correlated is dropped (no error, no retry, latest wins).
"""
import logging
from typing import Dict, Optional

from canvasstate.binding_store import BindingCollection
from canvasstate.errors import NotFoundError
from canvasstate.rect import Rect

logger = logging.getLogger(__name__)


class IdentityMap:

    def __init__(self, collection: BindingCollection):
        self.collection = collection
        self._persisted_ids: Dict[str, str] = {}

    def bind(self, transient_id: str, persisted_id: str) -> None:
        """Record that transient_id renders persisted_id (replaces any previous mapping)."""
        self._persisted_ids[transient_id] = persisted_id

    def release(self, transient_id: str) -> None:
        self._persisted_ids.pop(transient_id, None)

    def get(self, transient_id: str) -> Optional[str]:
        return self._persisted_ids.get(transient_id)

    def clear(self) -> None:
        self._persisted_ids.clear()

    def __contains__(self, transient_id: object) -> bool:
        return transient_id in self._persisted_ids

    def __len__(self) -> int:
        return len(self._persisted_ids)

    def handle_drag(self, transient_id: str, rect: Rect) -> bool:
        """Apply a drag-completion rect to the correlated item.

        Returns:
            True if an item was updated, False if the event was dropped.
        """
        persisted_id = self._persisted_ids.get(transient_id)
        if persisted_id is None:
            logger.debug(f"Drag for uncorrelated transient id {transient_id!r} dropped")
            return False
        try:
            self.collection.update(persisted_id, lambda item: item.with_rect(rect))
        except NotFoundError:
            # Mapping outlived the item (removal in flight)
            logger.debug(f"Drag for {transient_id!r} -> {persisted_id!r} dropped: item is gone")
            return False
        return True
