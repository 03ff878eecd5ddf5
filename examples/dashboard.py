"""
Example dashboard wiring.

Registers two widget types, places them, simulates a drag and a duplicate, and
writes layout.json into the current directory.
"""

import asyncio
import logging
from types import SimpleNamespace

from canvasstate import (
    Canvas,
    FileExporter,
    InternalComponents,
    LayoutItem,
    Navigator,
    WidgetRegistry,
)


def render_clock(props, context):
    suffix = " [edit]" if context.editing_layout else ""
    return f"clock({props.get('tz', 'UTC')}){suffix}"


def render_title(props, context):
    return f"# {props.get('text', '')}"


async def load_clock():
    # Stand-in for a slow import
    await asyncio.sleep(0.01)
    return SimpleNamespace(default=render_clock, default_props={"tz": "UTC"}, configurable=True)


class PrintNavigator(Navigator):
    def navigate(self, path):
        print(f"navigate -> {path}")


async def main():
    logging.basicConfig(level=logging.DEBUG)

    registry = WidgetRegistry()
    registry.register("clock", load_clock)

    canvas = Canvas(
        registry,
        InternalComponents({"Title": render_title}),
        navigator=PrintNavigator(),
        exporter=FileExporter("."),
        edit_mode=True,
    )

    clock_id = await canvas.manager.add_module("clock")
    canvas.collection.register_raw(
        "title", LayoutItem(id="title", name="internal:Title", rect=(0, 3, 8, 1), props={"text": "Ops"})
    )

    print(canvas.render())

    canvas.item_entered("drag-0", clock_id)
    canvas.handle_drag("drag-0", (2, 1, 8, 3))

    duplicate = next(c for c in canvas.item_menu(clock_id) if c.id == "duplicate")
    duplicate.run()

    for item_id, output in canvas.render():
        print(f"{item_id}: {output}")

    path = canvas.download()
    print(f"wrote {path}")


if __name__ == "__main__":
    asyncio.run(main())
