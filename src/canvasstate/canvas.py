"""
Canvas: the editable dashboard surface wiring store, resolver, manager and
identity map together.

Rendering is per item and each item renders inside its own ErrorBoundary, so
an unknown widget or a failed module load replaces only that item with an
ErrorAlert. The boundary input is the LayoutItem itself: any update to the item
produces a new object, which resets the boundary and retries the render.
"""
import logging
import time
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Tuple

from canvasstate.binding_store import BindingStore
from canvasstate.commands import Command, canvas_commands, item_commands
from canvasstate.component_resolver import ComponentCache, ComponentResolver, Navigator
from canvasstate.config import get_canvas_config
from canvasstate.error_boundary import ErrorBoundary
from canvasstate.identity_map import IdentityMap
from canvasstate.layout_manager import LayoutExporter, LayoutManager
from canvasstate.layout_model import LayoutItem
from canvasstate.rect import Rect
from canvasstate.widget_registry import InternalComponents, WidgetRegistry

logger = logging.getLogger(__name__)


class Canvas:

    def __init__(
        self,
        registry: WidgetRegistry,
        internal_components: Optional[InternalComponents] = None,
        store: Optional[BindingStore] = None,
        navigator: Optional[Navigator] = None,
        exporter: Optional[LayoutExporter] = None,
        cache: Optional[ComponentCache] = None,
        edit_mode: bool = False,
        clock: Callable[[], float] = time.time,
    ):
        self.registry = registry
        self.store = store if store is not None else BindingStore()
        self.collection = self.store.collection(get_canvas_config().collection)
        self.resolver = ComponentResolver(
            registry,
            internal_components or InternalComponents(),
            self.collection,
            navigator=navigator,
            cache=cache,
            editing_layout=edit_mode,
        )
        self.manager = LayoutManager(self.collection, self.resolver.cache, registry, exporter, clock)
        self.identity_map = IdentityMap(self.collection)
        self._boundaries: Dict[str, ErrorBoundary] = {}
        self.item_ids = self.collection.use_binding_names(self._on_items_changed)

    @property
    def edit_mode(self) -> bool:
        return self.resolver.editing_layout

    @edit_mode.setter
    def edit_mode(self, value: bool) -> None:
        self.resolver.editing_layout = bool(value)

    def close(self) -> None:
        self.item_ids.close()

    # ========== RENDER ==========

    def render_item(self, item_id: str, ref: Any = None) -> Any:
        """Render one item inside its own error boundary.

        Raises:
            NotFoundError: item_id is not registered
        """
        item: LayoutItem = self.collection.require(item_id)
        boundary = self._boundaries.get(item_id)
        if boundary is None:
            boundary = self._boundaries[item_id] = ErrorBoundary(scope=item_id)
        return boundary.render(item, partial(self._render_widget, item, ref))

    def render(self) -> List[Tuple[str, Any]]:
        """Render every item in enumeration order."""
        return [(item_id, self.render_item(item_id)) for item_id in self.item_ids.value]

    def _render_widget(self, item: LayoutItem, ref: Any) -> Any:
        component = self.resolver.resolve(item)
        return component.render(item.id, dict(item.props), ref)

    def _on_items_changed(self, names: Tuple[str, ...]) -> None:
        live = set(names)
        for item_id in [i for i in self._boundaries if i not in live]:
            del self._boundaries[item_id]

    # ========== DRAG LAYER ==========

    def item_entered(self, transient_id: str, item_id: str) -> None:
        self.identity_map.bind(transient_id, item_id)

    def item_left(self, transient_id: str) -> None:
        self.identity_map.release(transient_id)

    def handle_drag(self, transient_id: str, rect: Rect) -> bool:
        return self.identity_map.handle_drag(transient_id, rect)

    # ========== MENUS / IO ==========

    def item_menu(self, item_id: str) -> List[Command]:
        return item_commands(self.manager, item_id)

    def background_menu(self) -> List[Command]:
        return canvas_commands(self.manager, self.registry)

    def download(self) -> Any:
        return self.manager.download()
