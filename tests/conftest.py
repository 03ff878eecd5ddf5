"""Pytest configuration and shared fixtures."""
import asyncio
from types import SimpleNamespace

import pytest

from canvasstate import (
    BindingStore,
    LayoutExporter,
    LayoutItem,
    Navigator,
    WidgetRegistry,
    reset_canvas_config,
)


def render_widget(props, context):
    """Test renderable: echoes what it was given."""
    return {"props": props, "context": context}


class CountingLoader:
    """Async loader that counts calls and can be held pending via a gate."""

    def __init__(self, module=None, error=None, gated=False):
        self.module = module if module is not None else SimpleNamespace(default=render_widget)
        self.error = error
        self.calls = 0
        self.gate = asyncio.Event() if gated else None

    async def __call__(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.module


class RecordingNavigator(Navigator):
    def __init__(self):
        self.paths = []

    def navigate(self, path):
        self.paths.append(path)


class RecordingExporter(LayoutExporter):
    def __init__(self):
        self.deliveries = []

    def deliver(self, filename, payload):
        self.deliveries.append((filename, payload))
        return filename


@pytest.fixture(autouse=True)
def reset_config():
    """Restore default canvas config around each test."""
    reset_canvas_config()
    yield
    reset_canvas_config()


@pytest.fixture
def store():
    return BindingStore()


@pytest.fixture
def items(store):
    """The layout-items collection, pre-populated with two items."""
    collection = store.collection("layout-items")
    collection.register_raw("a", LayoutItem(id="a", name="clock", rect=(0, 0, 4, 2), props={"tz": "UTC"}))
    collection.register_raw("b", LayoutItem(id="b", name="internal:Title", rect=(4, 0, 2, 1), props={"text": "Hi"}))
    return collection


@pytest.fixture
def clock_module():
    return SimpleNamespace(default=render_widget, default_props={"tz": "UTC"}, configurable=True)


@pytest.fixture
def registry(clock_module):
    registry = WidgetRegistry()
    registry.register("clock", CountingLoader(clock_module))
    registry.register("notes", CountingLoader(SimpleNamespace(default=render_widget)))
    return registry


@pytest.fixture
def navigator():
    return RecordingNavigator()


@pytest.fixture
def exporter():
    return RecordingExporter()
