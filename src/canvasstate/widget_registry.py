"""
Widget registry: widget type names -> asynchronous module loaders.

A widget module is any object (usually a Python module) exposing:
- default: the renderable, called as default(props, context)
- default_props: optional dict of initial props (default: {})
- configurable: optional bool (default: False)
"""
import copy
import importlib
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional

from canvasstate.errors import DuplicateIdError, UnknownWidgetError

logger = logging.getLogger(__name__)

Renderable = Callable[..., Any]
ModuleLoader = Callable[[], Awaitable[Any]]


def module_default_props(module: Any) -> Dict[str, Any]:
    """Deep copy of a widget module's default_props, {} when absent."""
    props = getattr(module, 'default_props', None)
    return copy.deepcopy(dict(props)) if props is not None else {}


def module_configurable(module: Any) -> bool:
    """configurable flag of a widget module, False when absent."""
    return bool(getattr(module, 'configurable', False))


def import_loader(dotted_path: str) -> ModuleLoader:
    """Loader that imports a widget module by dotted path.

    Example:
        registry.register("clock", import_loader("mywidgets.clock"))
    """
    async def load() -> Any:
        logger.debug(f"Importing widget module: {dotted_path}")
        return importlib.import_module(dotted_path)
    load.__qualname__ = f"import_loader({dotted_path!r})"
    return load


@dataclass(frozen=True)
class WidgetDescriptor:
    """Registry entry. Immutable once registered."""
    name: str
    loader: ModuleLoader
    default_props: Dict[str, Any] = field(default_factory=dict)
    configurable: bool = False


class WidgetRegistry:
    """Ordered mapping of widget names to descriptors."""

    def __init__(self):
        self._widgets: Dict[str, WidgetDescriptor] = {}

    def register(
        self,
        name: str,
        loader: ModuleLoader,
        default_props: Optional[Dict[str, Any]] = None,
        configurable: bool = False,
    ) -> WidgetDescriptor:
        """Register a widget type. Names cannot be re-registered."""
        if name in self._widgets:
            raise DuplicateIdError(f"Widget {name!r} is already registered")
        descriptor = WidgetDescriptor(
            name=name,
            loader=loader,
            default_props=dict(default_props or {}),
            configurable=configurable,
        )
        self._widgets[name] = descriptor
        logger.debug(f"Registered widget: {name}")
        return descriptor

    def get(self, name: str) -> WidgetDescriptor:
        try:
            return self._widgets[name]
        except KeyError:
            raise UnknownWidgetError(name) from None

    def names(self) -> List[str]:
        return list(self._widgets)

    def __contains__(self, name: object) -> bool:
        return name in self._widgets

    def __iter__(self) -> Iterator[WidgetDescriptor]:
        return iter(list(self._widgets.values()))

    def __len__(self) -> int:
        return len(self._widgets)


class InternalComponents:
    """Static map of built-in components addressed as ``internal:<tag>``."""

    def __init__(self, components: Optional[Dict[str, Renderable]] = None):
        self._components: Dict[str, Renderable] = dict(components or {})

    def register(self, tag: str, renderable: Renderable) -> None:
        if tag in self._components:
            raise DuplicateIdError(f"Internal component {tag!r} is already registered")
        self._components[tag] = renderable

    def get(self, tag: str) -> Renderable:
        try:
            return self._components[tag]
        except KeyError:
            raise UnknownWidgetError(f"internal:{tag}") from None

    def __contains__(self, tag: object) -> bool:
        return tag in self._components

    def tags(self) -> List[str]:
        return list(self._components)
