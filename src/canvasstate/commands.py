"""
Menu commands as declarative values.

Each command names its effect and enabled predicate explicitly (functools.partial
over the manager and item id) instead of closing over UI state.
"""
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, List, Optional, Tuple

from canvasstate.config import get_canvas_config
from canvasstate.errors import CommandDisabledError
from canvasstate.rect import offset_by
from canvasstate.widget_registry import WidgetRegistry


def _always() -> bool:
    return True


@dataclass(frozen=True)
class Command:
    id: str
    label: str
    effect: Optional[Callable[[], Any]] = None
    enabled: Callable[[], bool] = _always
    group: int = 0
    order: int = 0
    destructive: bool = False
    children: Tuple['Command', ...] = ()

    def is_enabled(self) -> bool:
        return bool(self.enabled())

    def run(self) -> Any:
        if not self.is_enabled():
            raise CommandDisabledError(f"Command {self.id!r} is disabled")
        if self.effect is None:
            raise TypeError(f"Command {self.id!r} is a submenu and has no effect")
        return self.effect()


def item_commands(manager, item_id: str) -> List[Command]:
    """Context menu of one layout item: Duplicate, Delete."""
    exists = partial(manager.has_item, item_id)
    return [
        Command(
            id="duplicate",
            label="Duplicate",
            effect=partial(manager.duplicate_item, item_id, offset_by(get_canvas_config().duplicate_offset)),
            enabled=exists,
            group=0,
        ),
        Command(
            id="delete",
            label="Delete",
            effect=partial(manager.delete_item, item_id),
            enabled=exists,
            group=1,
            destructive=True,
        ),
    ]


def canvas_commands(manager, registry: WidgetRegistry) -> List[Command]:
    """Background menu: New > one entry per registered widget."""
    new_items = tuple(
        Command(id=descriptor.name, label=descriptor.name,
                effect=partial(manager.schedule_add_module, descriptor.name))
        for descriptor in registry
    )
    return [Command(id="new", label="New", children=new_items)]
