"""
LayoutManager: item lifecycle operations and layout.json export/import.

All mutations go through the BindingCollection so bindings observe them.
Widget modules are loaded through the ComponentCache, keeping the
load-once-per-name guarantee shared with the resolver.
"""
import asyncio
import copy
import logging
import math
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, List, Optional, Set, Union

from canvasstate.binding_store import BindingCollection
from canvasstate.component_resolver import ComponentCache
from canvasstate.config import get_canvas_config
from canvasstate.layout_model import LayoutItem, dump_layout, load_layout
from canvasstate.rect import Rect
from canvasstate.widget_registry import WidgetDescriptor, WidgetRegistry, module_default_props

logger = logging.getLogger(__name__)


class LayoutExporter(ABC):
    """I/O collaborator that delivers an exported layout to the user."""

    @abstractmethod
    def deliver(self, filename: str, payload: str) -> Any:
        """Hand payload to the user under filename; return a handle or None."""


class FileExporter(LayoutExporter):
    """Writes the layout into a directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def deliver(self, filename: str, payload: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / filename
        path.write_text(payload, encoding="utf-8")
        logger.info(f"Layout written to {path}")
        return path


class LayoutManager:

    def __init__(
        self,
        collection: BindingCollection,
        cache: ComponentCache,
        registry: WidgetRegistry,
        exporter: Optional[LayoutExporter] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.collection = collection
        self.cache = cache
        self.registry = registry
        self.exporter = exporter
        self._clock = clock
        # Strong references to scheduled add_module tasks
        self._pending: Set['asyncio.Task[str]'] = set()

    def has_item(self, item_id: str) -> bool:
        return item_id in self.collection

    def unique_id(self, base: str) -> str:
        """base if free, else base-2, base-3, ..."""
        if base not in self.collection:
            return base
        n = 2
        while f"{base}-{n}" in self.collection:
            n += 1
        return f"{base}-{n}"

    def duplicate_item(self, item_id: str, rect_transform: Callable[[Rect], Rect]) -> str:
        """Clone an item under a new id with a transformed rect.

        The new id is derived deterministically from the source id
        (``<id>-copy``, ``<id>-copy-2``, ...). props are deep-copied.

        Raises:
            NotFoundError: item_id is not registered
        """
        item: LayoutItem = self.collection.require(item_id)
        new_id = self.unique_id(f"{item_id}-copy")
        clone = item.copy_as(new_id, rect_transform(item.rect))
        self.collection.register_raw(new_id, clone, overwrite=False)
        logger.debug(f"Duplicated {item_id!r} as {new_id!r}")
        return new_id

    async def add_module(self, name: str, descriptor: Optional[WidgetDescriptor] = None) -> str:
        """Load a widget module and place a new item for it.

        The id is ``<name>-<epochSeconds>``; props start from the module's
        default_props (else the descriptor's, else empty), deep-copied so
        items never share nested values. Epoch seconds round half up.
        """
        if descriptor is None:
            descriptor = self.registry.get(name)
        module = await self.cache.load_module(descriptor)

        if getattr(module, 'default_props', None) is not None:
            props = module_default_props(module)
        else:
            props = copy.deepcopy(descriptor.default_props)

        new_id = self.unique_id(f"{name}-{math.floor(self._clock() + 0.5)}")
        item = LayoutItem(id=new_id, name=name, rect=get_canvas_config().new_item_rect, props=props)
        self.collection.register_raw(new_id, item, overwrite=False)
        logger.debug(f"Added module {name!r} as {new_id!r}")
        return new_id

    def schedule_add_module(self, name: str) -> 'asyncio.Task[str]':
        """Fire-and-forget add_module on the running loop."""
        task = asyncio.get_running_loop().create_task(self.add_module(name))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def delete_item(self, item_id: str) -> None:
        self.collection.unregister_raw(item_id)

    def export_layout(self) -> str:
        """Serialize all items in enumeration order."""
        return dump_layout(self.collection.items(), indent=get_canvas_config().json_indent)

    def download(self) -> Any:
        """Export the layout and hand it to the exporter collaborator."""
        if self.exporter is None:
            raise RuntimeError("No layout exporter attached")
        payload = self.export_layout()
        filename = get_canvas_config().layout_filename
        logger.info(f"Exporting {len(self.collection)} item(s) to {filename}")
        return self.exporter.deliver(filename, payload)

    def import_layout(self, text: str, replace: bool = True) -> List[str]:
        """Register the items of a layout.json document.

        The document is fully decoded before the store is touched. With
        replace=True existing items are removed first; otherwise imported items
        overwrite items with the same id.
        """
        items = load_layout(text)
        if replace:
            for item_id in self.collection.names():
                self.collection.unregister_raw(item_id)
        for item in items:
            self.collection.register_raw(item.id, item)
        logger.info(f"Imported {len(items)} item(s)")
        return [item.id for item in items]
