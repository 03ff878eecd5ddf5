"""
ComponentResolver: widget reference -> renderable, edit-aware component.

Resolution:
- InternalRef(tag): looked up in InternalComponents, wrapped, not cached.
- RegisteredRef(name): one LazyWidgetComponent per name, held by the
  ComponentCache and shared by every item of that widget type. The module
  load is started on first render and runs at most once per name; until it
  settles, render() returns a Fallback placeholder.
- Anything else: UnknownWidgetError.

Per-instance state (item id, props, callbacks) is bound at render time, never
at load time, because the loaded component is shared.

Known limitation: the cache has no invalidation. Re-registering or hot-reloading
a widget type mid-session is unsupported.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, Optional, Union
from urllib.parse import quote

from canvasstate.binding_store import BindingCollection
from canvasstate.config import get_canvas_config
from canvasstate.errors import UnknownWidgetError
from canvasstate.layout_model import InternalRef, LayoutItem, RegisteredRef, WidgetRef, parse_widget_ref
from canvasstate.single_flight import LoadState, SingleFlight
from canvasstate.widget_registry import (
    InternalComponents, Renderable, WidgetDescriptor, WidgetRegistry,
)

logger = logging.getLogger(__name__)

# encodeURIComponent leaves these unescaped as well
_URL_SAFE = "!~*'()"


@dataclass(frozen=True)
class Fallback:
    """Placeholder rendered while a widget module is loading."""
    text: str


@dataclass
class WidgetContext:
    """Editing affordances handed to a rendered widget."""
    item_id: str
    editing_layout: bool
    configurable: bool
    props: Dict[str, Any]
    configure: Callable[[], None]
    on_prop_change: Callable[[str, Any], None]
    enabled: bool = True
    ref: Any = None


class ComponentCache:
    """Process-lifetime cache of resolved widget components.

    Owns the single-flight map of module loads, which is the only place widget
    loaders are invoked. Components hold the resolver that created them, so a
    cache belongs to exactly one resolver.
    """

    def __init__(self):
        self._components: Dict[str, 'LazyWidgetComponent'] = {}
        self.loads: SingleFlight[str, Any] = SingleFlight()

    def get(self, name: str) -> Optional['LazyWidgetComponent']:
        return self._components.get(name)

    def put(self, name: str, component: 'LazyWidgetComponent') -> None:
        self._components[name] = component

    def __contains__(self, name: object) -> bool:
        return name in self._components

    def __len__(self) -> int:
        return len(self._components)

    def start_load(self, descriptor: WidgetDescriptor):
        return self.loads.start(descriptor.name, descriptor.loader)

    async def load_module(self, descriptor: WidgetDescriptor) -> Any:
        return await self.loads.load(descriptor.name, descriptor.loader)


class InternalComponent:
    """Built-in component; renders directly with a forwarded ref."""

    def __init__(self, tag: str, renderable: Renderable, resolver: 'ComponentResolver'):
        self.tag = tag
        self._renderable = renderable
        self._resolver = resolver

    def render(self, item_id: str, props: Dict[str, Any], ref: Any = None) -> Any:
        context = self._resolver.make_context(item_id, props, configurable=False, ref=ref)
        context.enabled = False
        return self._renderable(props, context)

    def __repr__(self) -> str:
        return f"InternalComponent({self.tag!r})"


class LazyWidgetComponent:
    """Shared wrapper for one registered widget type."""

    def __init__(self, descriptor: WidgetDescriptor, cache: ComponentCache, resolver: 'ComponentResolver'):
        self.descriptor = descriptor
        self._cache = cache
        self._resolver = resolver

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def state(self) -> Optional[LoadState]:
        return self._cache.loads.state(self.name)

    async def load(self) -> Any:
        """Wait for the widget module (starting the load if needed)."""
        return await self._cache.load_module(self.descriptor)

    def render(self, item_id: str, props: Dict[str, Any], ref: Any = None) -> Any:
        """Render for one item.

        Returns a Fallback while the module is loading. A failed load is
        re-raised so the enclosing ErrorBoundary can catch it.
        """
        state = self.state
        if state is LoadState.READY:
            return self._render_loaded(self._cache.loads.result(self.name), item_id, props, ref)
        if state is LoadState.FAILED:
            raise self._cache.loads.error(self.name)
        if state is None:
            self._cache.start_load(self.descriptor)
        return Fallback(get_canvas_config().loading_text)

    def _render_loaded(self, module: Any, item_id: str, props: Dict[str, Any], ref: Any) -> Any:
        renderable = getattr(module, 'default', None)
        if renderable is None:
            raise TypeError(f"Widget module for {self.name!r} has no 'default' renderable")
        configurable = bool(getattr(module, 'configurable', self.descriptor.configurable))
        context = self._resolver.make_context(item_id, props, configurable=configurable, ref=ref)
        return renderable(props, context)

    def __repr__(self) -> str:
        return f"LazyWidgetComponent({self.name!r}, state={self.state})"


ResolvedComponent = Union[InternalComponent, LazyWidgetComponent]


class Navigator(ABC):
    """Routing collaborator interface."""

    @abstractmethod
    def navigate(self, path: str) -> None:
        """Route to path."""


class ComponentResolver:
    """Turns widget references into renderable components.

    Args:
        registry: Registered widget types
        internal_components: Built-in components for ``internal:<tag>`` names
        collection: Store collection holding the LayoutItems (for prop changes)
        navigator: Router used by configure(); optional
        cache: Component cache; a private one is created if omitted
        editing_layout: Initial edit-mode flag
    """

    def __init__(
        self,
        registry: WidgetRegistry,
        internal_components: InternalComponents,
        collection: BindingCollection,
        navigator: Optional[Navigator] = None,
        cache: Optional[ComponentCache] = None,
        editing_layout: bool = False,
    ):
        self.registry = registry
        self.internal_components = internal_components
        self.collection = collection
        self.navigator = navigator
        self.cache = cache if cache is not None else ComponentCache()
        # Read at render time so every widget sees the current mode
        self.editing_layout = editing_layout

    def resolve(self, target: Union[WidgetRef, LayoutItem, str]) -> ResolvedComponent:
        ref = self._to_ref(target)

        if isinstance(ref, InternalRef):
            return InternalComponent(ref.tag, self.internal_components.get(ref.tag), self)

        component = self.cache.get(ref.widget_name)
        if component is not None:
            return component

        if ref.widget_name not in self.registry:
            raise UnknownWidgetError(ref.widget_name)
        component = LazyWidgetComponent(self.registry.get(ref.widget_name), self.cache, self)
        self.cache.put(ref.widget_name, component)
        logger.debug(f"Cached component for widget: {ref.widget_name}")
        return component

    async def preload(self, name: str) -> Any:
        """Load a registered widget's module ahead of first render."""
        component = self.resolve(RegisteredRef(name))
        return await component.load()

    def make_context(
        self,
        item_id: str,
        props: Dict[str, Any],
        configurable: bool,
        ref: Any = None,
    ) -> WidgetContext:
        return WidgetContext(
            item_id=item_id,
            editing_layout=self.editing_layout,
            configurable=configurable,
            props=props,
            configure=partial(self.configure, item_id),
            on_prop_change=partial(self.change_prop, item_id),
            ref=ref,
        )

    def configure(self, item_id: str) -> None:
        """Request navigation to the item's edit view."""
        path = get_canvas_config().edit_route.format(id=quote(item_id, safe=_URL_SAFE))
        if self.navigator is None:
            logger.warning(f"configure({item_id!r}): no navigator attached, dropping {path}")
            return
        self.navigator.navigate(path)

    def change_prop(self, item_id: str, key: str, value: Any) -> None:
        """Set one props key on an item."""
        self.collection.update(item_id, lambda item: item.with_prop(key, value))

    @staticmethod
    def _to_ref(target: Union[WidgetRef, LayoutItem, str]) -> WidgetRef:
        if isinstance(target, (InternalRef, RegisteredRef)):
            return target
        if isinstance(target, LayoutItem):
            return target.ref
        return parse_widget_ref(target)
