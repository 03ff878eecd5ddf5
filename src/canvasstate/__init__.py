"""
State and dispatch runtime for an editable dashboard canvas.

Users place widgets on a grid, drag/resize, duplicate or delete them, and
export the arrangement as layout.json. This package holds the non-visual core.

Key Features:
- Keyed entity store with attribute-path bindings (update() notifies only the
  bindings whose addressed value changed)
- Widget registry with asynchronous module loaders
- Component resolution with a load-once-per-name cache
- Transient drag id -> persisted item id correlation
- Duplicate/add/delete operations and layout.json export/import

Quick Start:
    >>> import asyncio
    >>> from canvasstate import Canvas, WidgetRegistry, import_loader
    >>>
    >>> registry = WidgetRegistry()
    >>> registry.register("clock", import_loader("mywidgets.clock"))
    >>> canvas = Canvas(registry, edit_mode=True)
    >>>
    >>> async def main():
    ...     item_id = await canvas.manager.add_module("clock")
    ...     canvas.render_item(item_id)

Modules:
    - rect: grid rectangle transforms
    - layout_model: LayoutItem, widget references, layout.json codec
    - binding_store: BindingStore / BindingCollection and bindings
    - widget_registry: WidgetRegistry, InternalComponents
    - single_flight: keyed load-once primitive
    - component_resolver: ComponentResolver, ComponentCache
    - identity_map: drag id correlation
    - layout_manager: LayoutManager, exporters
    - commands: declarative menu commands
    - error_boundary: per-widget render fault isolation
    - canvas: wiring of the above
    - config: CanvasConfig and scoped overrides
"""

# Errors
from canvasstate.errors import (
    CanvasStateError,
    NotFoundError,
    UnknownWidgetError,
    DuplicateIdError,
    InvalidRectError,
    LayoutFormatError,
    CommandDisabledError,
    LoadCancelledError,
)

# Configuration
from canvasstate.config import (
    CanvasConfig,
    set_canvas_config,
    get_canvas_config,
    reset_canvas_config,
    canvas_config_context,
)

# Geometry
from canvasstate.rect import Rect, validate_rect, move, resize, offset_by

# Data model
from canvasstate.layout_model import (
    LayoutItem,
    InternalRef,
    RegisteredRef,
    WidgetRef,
    parse_widget_ref,
    dump_layout,
    load_layout,
)

# Store
from canvasstate.binding_store import (
    BindingStore,
    BindingCollection,
    NamesBinding,
    ValuePathBinding,
    resolve_path,
)

# Widgets
from canvasstate.widget_registry import (
    WidgetRegistry,
    WidgetDescriptor,
    InternalComponents,
    import_loader,
)
from canvasstate.single_flight import SingleFlight, LoadState
from canvasstate.component_resolver import (
    ComponentResolver,
    ComponentCache,
    LazyWidgetComponent,
    InternalComponent,
    WidgetContext,
    Fallback,
    Navigator,
)

# Layout operations
from canvasstate.identity_map import IdentityMap
from canvasstate.layout_manager import LayoutManager, LayoutExporter, FileExporter
from canvasstate.commands import Command, item_commands, canvas_commands
from canvasstate.error_boundary import ErrorBoundary, ErrorAlert, ErrorInfo, get_error_info
from canvasstate.canvas import Canvas

__all__ = [
    # Errors
    'CanvasStateError',
    'NotFoundError',
    'UnknownWidgetError',
    'DuplicateIdError',
    'InvalidRectError',
    'LayoutFormatError',
    'CommandDisabledError',
    'LoadCancelledError',
    # Configuration
    'CanvasConfig',
    'set_canvas_config',
    'get_canvas_config',
    'reset_canvas_config',
    'canvas_config_context',
    # Geometry
    'Rect',
    'validate_rect',
    'move',
    'resize',
    'offset_by',
    # Data model
    'LayoutItem',
    'InternalRef',
    'RegisteredRef',
    'WidgetRef',
    'parse_widget_ref',
    'dump_layout',
    'load_layout',
    # Store
    'BindingStore',
    'BindingCollection',
    'NamesBinding',
    'ValuePathBinding',
    'resolve_path',
    # Widgets
    'WidgetRegistry',
    'WidgetDescriptor',
    'InternalComponents',
    'import_loader',
    'SingleFlight',
    'LoadState',
    'ComponentResolver',
    'ComponentCache',
    'LazyWidgetComponent',
    'InternalComponent',
    'WidgetContext',
    'Fallback',
    'Navigator',
    # Layout operations
    'IdentityMap',
    'LayoutManager',
    'LayoutExporter',
    'FileExporter',
    'Command',
    'item_commands',
    'canvas_commands',
    'ErrorBoundary',
    'ErrorAlert',
    'ErrorInfo',
    'get_error_info',
    'Canvas',
]

__version__ = '1.0.0'
__description__ = 'State and dispatch runtime for an editable dashboard canvas'
